"""IdentityNow role (admin permission) operations."""
from __future__ import annotations
import logging
from typing import List

from .client import IDNClient
from .exceptions import RoleNotFoundError

logger = logging.getLogger(__name__)

UPDATE_PERMISSIONS_PATH = "/cc/api/user/updatePermissions"


class RoleService:
    """Service for listing and assigning IdentityNow roles."""

    def __init__(self, client: IDNClient):
        """Initialize role service.

        Args:
            client: Authenticated IdentityNow client
        """
        self.client = client

    def list_roles(self) -> List[dict]:
        """Return every assignable role."""
        resp = self.client.get("/cc/api/role/list")
        return resp.json() or []

    def get_role(self, identity: str) -> dict:
        """Return a single role.

        The role endpoint answers with a filtered list; the last entry is the role.

        Raises:
            RoleNotFoundError: If the filtered list is empty
        """
        resp = self.client.get("/cc/api/role/list", params={"name": identity})
        roles = resp.json() or []
        if not roles:
            raise RoleNotFoundError(f"Role '{identity}' not found")
        return roles[-1]

    def add_role(self, account_id: str, role: str) -> None:
        """Grant a role to the account with the given primary key."""
        self._update_permissions(account_id, role, grant=True)
        logger.info("Granted role '%s' to account %s", role, account_id)

    def remove_role(self, account_id: str, role: str) -> None:
        """Revoke a role from the account with the given primary key."""
        self._update_permissions(account_id, role, grant=False)
        logger.info("Revoked role '%s' from account %s", role, account_id)

    def _update_permissions(self, account_id: str, role: str, *, grant: bool) -> None:
        payload = {
            "ids": account_id,
            "isAdmin": "1" if grant else "0",
            "adminType": role,
        }
        self.client.post(UPDATE_PERMISSIONS_PATH, data=payload)
