"""Core Business Logic Module

This module provides the connector logic, independent of HTTP frameworks.

Module Structure:
    - idn/            : Low-level IdentityNow API client and services
    - models.py       : Account, Role, Workgroup, EntitlementChange value objects
    - classifier.py   : Role vs. workgroup routing by identifier shape
    - aggregation.py  : Workgroup index, account reconciliation and assembly
    - provisioning.py : Ordered add/remove with post-role settling delay
    - connector.py    : Lifecycle command handlers and dispatch
    - audit.py        : Signed JSONL audit trail of provisioning events
    - errors.py       : ConnectorError / UnsupportedOperationError

Usage Pattern:
    Import explicitly when needed:
        from idn_connector.core.connector import IDNConnector, CollectingResponse
        from idn_connector.core.idn import IDNGateway
"""
