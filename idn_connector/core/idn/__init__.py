"""IdentityNow API client library.

This package provides a modular, testable interface to the IdentityNow
endpoints the connector needs.

Architecture:
- client.py: HTTP client with OAuth2 client credentials and auto-refresh
- accounts.py: Account listing, detail, enable/disable
- roles.py: Role listing and assignment (updatePermissions)
- workgroups.py: Workgroup listing, membership roster, membership changes
- exceptions.py: Typed exceptions for error handling

Usage:
    from idn_connector.core.idn import IDNClient, IDNGateway

    client = IDNClient("https://acme.api.identitynow.com", "client-id", "secret")
    gateway = IDNGateway(client)
    workgroups = gateway.workgroups.list_workgroups()
"""
from __future__ import annotations

from .client import IDNClient, REQUEST_TIMEOUT
from .exceptions import (
    IDNError,
    IDNAPIError,
    AccountNotFoundError,
    RoleNotFoundError,
    WorkgroupNotFoundError,
)
from .accounts import AccountService
from .roles import RoleService
from .workgroups import WorkgroupService


class IDNGateway:
    """Bundle of the IdentityNow services sharing one authenticated client."""

    def __init__(self, client: IDNClient):
        self.client = client
        self.accounts = AccountService(client)
        self.roles = RoleService(client)
        self.workgroups = WorkgroupService(client)

    @classmethod
    def from_config(cls, cfg) -> "IDNGateway":
        """Build a gateway from an ``AppConfig``."""
        client = IDNClient(
            cfg.idn_base_url,
            cfg.idn_client_id,
            cfg.idn_client_secret,
            timeout=cfg.request_timeout,
        )
        return cls(client)

    def test_connection(self):
        return self.client.test_connection()


__all__ = [
    # Client
    "IDNClient",
    "IDNGateway",
    "REQUEST_TIMEOUT",

    # Exceptions
    "IDNError",
    "IDNAPIError",
    "AccountNotFoundError",
    "RoleNotFoundError",
    "WorkgroupNotFoundError",

    # Services
    "AccountService",
    "RoleService",
    "WorkgroupService",
]
