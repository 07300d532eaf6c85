"""Value objects exchanged between the IdentityNow gateway and the host.

Accounts, roles and workgroups are built fresh from raw API payloads on every
invocation and rendered back to host records with ``to_output()``.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


class AttributeChangeOp(str, Enum):
    """Operation carried by an account-update change."""
    ADD = "Add"
    REMOVE = "Remove"
    SET = "Set"


@dataclass
class Account:
    """One IdentityNow identity, as assembled for the host."""
    id: str
    external_id: str
    name: str
    display_name: str = ""
    email: str = ""
    enabled: bool = True
    groups: list[str] = field(default_factory=list)

    @property
    def uuid(self) -> str:
        return self.name

    @classmethod
    def from_detail(cls, raw: dict[str, Any]) -> "Account":
        """Build an account from the account-detail payload.

        ``groups`` starts out as the native role identifiers; workgroups are
        appended by the assembler.
        """
        roles = raw.get("roles") or []
        if isinstance(roles, str):
            roles = [roles]
        name = raw.get("alias") or raw.get("name") or raw.get("uid") or ""
        return cls(
            id=str(raw.get("id", "")),
            external_id=str(raw.get("externalId", "")),
            name=name,
            display_name=raw.get("displayName") or name,
            email=raw.get("email") or "",
            enabled=bool(raw.get("enabled", True)),
            groups=list(roles),
        )

    def to_output(self) -> dict[str, Any]:
        return {
            "identity": self.name,
            "uuid": self.uuid,
            "attributes": {
                "id": self.id,
                "externalId": self.external_id,
                "name": self.name,
                "displayName": self.display_name,
                "email": self.email,
                "enabled": self.enabled,
                "groups": list(self.groups),
            },
        }


@dataclass(frozen=True)
class Role:
    """Directly assignable entitlement."""
    id: str
    name: str
    description: str = ""

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> "Role":
        identifier = raw.get("value") or raw.get("id") or raw.get("name") or ""
        return cls(
            id=str(identifier),
            name=raw.get("name") or raw.get("displayName") or str(identifier),
            description=raw.get("description") or "",
        )

    def to_output(self) -> dict[str, Any]:
        return {
            "identity": self.id,
            "uuid": self.name,
            "type": "role",
            "attributes": {
                "id": self.id,
                "name": self.name,
                "description": self.description,
            },
        }


@dataclass(frozen=True)
class WorkgroupMember:
    external_id: str
    alias: str
    name: str = ""

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> "WorkgroupMember":
        return cls(
            external_id=str(raw.get("externalId", "")),
            alias=raw.get("alias") or "",
            name=raw.get("name") or raw.get("alias") or "",
        )


@dataclass
class Workgroup:
    """Group-style entitlement.

    ``members`` is only filled by the workgroup aggregator; the raw detail
    endpoint does not return it.
    """
    id: str
    name: str
    description: str = ""
    owner: Optional[str] = None
    members: list[WorkgroupMember] = field(default_factory=list)

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> "Workgroup":
        owner = raw.get("owner")
        if isinstance(owner, dict):
            owner = owner.get("name") or owner.get("displayName") or owner.get("id")
        return cls(
            id=str(raw.get("id", "")),
            name=raw.get("name") or "",
            description=raw.get("description") or "",
            owner=owner,
        )

    def has_member(self, external_id: str) -> bool:
        return any(member.external_id == external_id for member in self.members)

    def to_output(self) -> dict[str, Any]:
        return {
            "identity": self.id,
            "uuid": self.name,
            "type": "workgroup",
            "attributes": {
                "id": self.id,
                "name": self.name,
                "description": self.description,
                "owner": self.owner,
            },
        }


@dataclass(frozen=True)
class EntitlementChange:
    """One entry of an account-update request."""
    op: AttributeChangeOp
    value: Union[str, list[str], None]
    attribute: str = "groups"

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "EntitlementChange":
        """Parse a host change entry.

        Raises:
            ValueError: If ``op`` is not one of Add/Remove/Set
        """
        return cls(
            op=AttributeChangeOp(raw.get("op")),
            value=raw.get("value"),
            attribute=raw.get("attribute") or "groups",
        )

    def values(self) -> list[str]:
        if self.value is None:
            return []
        if isinstance(self.value, (list, tuple)):
            return [str(v) for v in self.value]
        return [str(self.value)]
