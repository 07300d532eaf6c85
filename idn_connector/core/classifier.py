"""Shape-based routing of entitlement identifiers.

Workgroup identifiers are UUID-like (five delimited segments); role
identifiers are short names such as ``ADMIN`` or ``HELPDESK``. The test is a
heuristic over the identifier alone: it never consults the live role or
workgroup sets, so an identifier that merely looks like a UUID is routed to
the workgroup endpoints and fails there.
"""
from __future__ import annotations
import re
from enum import Enum

# Unanchored: six or more segments also match.
WORKGROUP_ID_PATTERN = re.compile(r".+[-.].+[-.].+[-.].+[-.].+")


class EntitlementKind(str, Enum):
    ROLE = "role"
    WORKGROUP = "workgroup"


def is_workgroup_id(identifier: str) -> bool:
    return bool(identifier) and WORKGROUP_ID_PATTERN.search(identifier) is not None


def classify(identifier: str) -> EntitlementKind:
    """Return the provisioning path for an entitlement identifier."""
    if is_workgroup_id(identifier):
        return EntitlementKind.WORKGROUP
    return EntitlementKind.ROLE
