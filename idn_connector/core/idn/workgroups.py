"""IdentityNow workgroup management operations."""
from __future__ import annotations
import logging
from typing import List

from .client import IDNClient
from .exceptions import IDNAPIError, WorkgroupNotFoundError

logger = logging.getLogger(__name__)


class WorkgroupService:
    """Service for managing IdentityNow workgroups and their membership."""

    def __init__(self, client: IDNClient):
        """Initialize workgroup service.

        Args:
            client: Authenticated IdentityNow client
        """
        self.client = client

    def list_workgroups(self) -> List[dict]:
        """Return every workgroup (without members)."""
        resp = self.client.get("/v2/workgroups")
        return resp.json() or []

    def get_workgroup(self, workgroup_id: str) -> dict:
        """Retrieve a workgroup by ID.

        Raises:
            WorkgroupNotFoundError: If the workgroup does not exist
        """
        try:
            resp = self.client.get(f"/v2/workgroups/{workgroup_id}")
        except IDNAPIError as e:
            if e.status_code == 404:
                raise WorkgroupNotFoundError(f"Workgroup '{workgroup_id}' not found") from e
            raise
        return resp.json()

    def get_workgroup_members(self, workgroup_id: str) -> List[dict]:
        """Retrieve all members of a workgroup.

        Returns:
            List of member descriptors (``externalId``, ``alias``, ``name``)
        """
        resp = self.client.get(f"/v2/workgroups/{workgroup_id}/members")
        return resp.json() or []

    def add_member(self, external_id: str, workgroup_id: str) -> None:
        """Add the account with the given external ID to a workgroup."""
        self.client.post(f"/v2/workgroups/{workgroup_id}/members", json={"add": [external_id]})
        logger.info("Added %s to workgroup %s", external_id, workgroup_id)

    def remove_member(self, external_id: str, workgroup_id: str) -> None:
        """Remove the account with the given external ID from a workgroup."""
        self.client.post(f"/v2/workgroups/{workgroup_id}/members", json={"remove": [external_id]})
        logger.info("Removed %s from workgroup %s", external_id, workgroup_id)
