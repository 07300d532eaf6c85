"""Error handlers for the application."""
from flask import jsonify
from werkzeug.exceptions import HTTPException

from idn_connector.core.errors import ConnectorError
from idn_connector.core.idn.exceptions import IDNAPIError, IDNError


def register_error_handlers(app):
    """Register JSON error handlers with the Flask app."""

    @app.errorhandler(ConnectorError)
    def connector_error(error: ConnectorError):
        """Connector-level fatal errors (bad input, unsupported op, failed connection test)."""
        app.logger.warning(f"Connector error: {error}")
        return jsonify(error.to_dict()), 400

    @app.errorhandler(IDNAPIError)
    def upstream_error(error: IDNAPIError):
        """IdentityNow answered with an error status."""
        app.logger.error(f"IdentityNow API error: {error}")
        return jsonify({
            "error": "IDNAPIError",
            "message": error.message,
            "status": error.status_code,
            "endpoint": error.endpoint,
        }), 502

    @app.errorhandler(IDNError)
    def idn_error(error: IDNError):
        """Lookup failures raised by the gateway (account/role/workgroup not found)."""
        app.logger.warning(f"IdentityNow error: {error}")
        return jsonify({"error": type(error).__name__, "message": str(error)}), 404

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"error": "Not Found", "message": "Resource not found"}), 404

    @app.errorhandler(Exception)
    def handle_exception(error):
        """Handle uncaught exceptions."""
        if isinstance(error, HTTPException):
            return jsonify({"error": error.name, "message": error.description}), error.code

        app.logger.error(f"Unhandled exception: {error}", exc_info=True)
        return jsonify({"error": "Internal Server Error", "message": "An unexpected error occurred"}), 500
