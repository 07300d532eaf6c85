"""IdentityNow admin-entitlement connector.

To use the HTTP command endpoint:
    from idn_connector.flask_app import create_app

To drive the connector directly:
    from idn_connector.core.connector import IDNConnector
    from idn_connector.core.idn import IDNGateway
"""
# flask_app is not imported here so the core stays usable without Flask.

__version__ = "0.1.0"
