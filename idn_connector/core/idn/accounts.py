"""IdentityNow account operations."""
from __future__ import annotations
import logging
from typing import List

from .client import IDNClient
from .exceptions import AccountNotFoundError

logger = logging.getLogger(__name__)


class AccountService:
    """Service for listing, reading and toggling IdentityNow accounts."""

    def __init__(self, client: IDNClient):
        """Initialize account service.

        Args:
            client: Authenticated IdentityNow client
        """
        self.client = client

    def list_accounts(self) -> List[dict]:
        """Return the primary account listing (each entry carries a ``name``)."""
        resp = self.client.get("/cc/api/user/list")
        return resp.json() or []

    def get_account(self, identity: str) -> dict:
        """Return the account-detail payload for an account name/alias.

        Args:
            identity: Account name as used by the listing and workgroup rosters

        Returns:
            Raw account detail

        Raises:
            AccountNotFoundError: If the tenant returned an empty body
        """
        resp = self.client.get("/cc/api/identity/get", params={"uid": identity})
        detail = resp.json()
        if not detail:
            raise AccountNotFoundError(f"Account '{identity}' not found")
        return detail

    def enable_account(self, account_id: str) -> None:
        """Enable the account with the given primary key."""
        self.client.post("/cc/api/user/enable", data={"ids": account_id})
        logger.info("Account %s enabled", account_id)

    def disable_account(self, account_id: str) -> None:
        """Disable the account with the given primary key."""
        self.client.post("/cc/api/user/disable", data={"ids": account_id})
        logger.info("Account %s disabled", account_id)
