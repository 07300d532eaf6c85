"""Entitlement provisioning against IdentityNow.

Each change is committed remotely on its own; there is no transaction or
rollback. A batch that fails halfway leaves the account partially updated,
so callers re-read the account instead of trusting local state.

Role changes go through ``updatePermissions``, which drops or reorders
requests issued back to back for the same account. Every role change is
therefore followed by a fixed settling delay. Workgroup membership changes
are not delayed.
"""
from __future__ import annotations
import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable, List

from . import audit
from .classifier import EntitlementKind, classify
from .errors import UnsupportedOperationError
from .models import Account, AttributeChangeOp, EntitlementChange

logger = logging.getLogger(__name__)

DEFAULT_SETTLING_DELAY_MS = 2000

# Legacy entitlement values still sent by older host configurations.
LEGACY_ALIASES = {"ORG_ADMIN": "ADMIN"}

_AUDIT_EVENTS = {
    (EntitlementKind.ROLE, AttributeChangeOp.ADD): "role_grant",
    (EntitlementKind.ROLE, AttributeChangeOp.REMOVE): "role_revoke",
    (EntitlementKind.WORKGROUP, AttributeChangeOp.ADD): "workgroup_add",
    (EntitlementKind.WORKGROUP, AttributeChangeOp.REMOVE): "workgroup_remove",
}


@dataclass(frozen=True)
class AppliedChange:
    op: AttributeChangeOp
    entitlement: str
    kind: EntitlementKind

    def to_dict(self) -> dict:
        return {"op": self.op.value, "entitlement": self.entitlement, "kind": self.kind.value}


def normalize_entitlement(value: str) -> str:
    return LEGACY_ALIASES.get(value, value)


class ProvisioningSequencer:
    """Apply add/remove entitlement changes to one account, in order."""

    def __init__(
        self,
        gateway,
        settling_delay_ms: int = DEFAULT_SETTLING_DELAY_MS,
        sleep: Callable[[float], None] = time.sleep,
        operator: str = "connector",
    ):
        self.gateway = gateway
        self.settling_delay_ms = settling_delay_ms
        self._sleep = sleep
        self.operator = operator

    def apply(self, op: AttributeChangeOp, account: Account, entitlement_id: str) -> AppliedChange:
        """Route one change to the workgroup or role endpoints.

        Workgroup membership is keyed by the account's external ID, role
        assignment by its primary ID. Returns only after the settling delay
        when a role was changed.

        Raises:
            UnsupportedOperationError: For any op other than Add/Remove
        """
        if op not in (AttributeChangeOp.ADD, AttributeChangeOp.REMOVE):
            raise UnsupportedOperationError(getattr(op, "value", str(op)))

        kind = classify(entitlement_id)
        logger.info("Executing %s operation for %s/%s (%s)", op.value, account.uuid, entitlement_id, kind.value)
        details = {"entitlement": entitlement_id, "account_id": account.id, "external_id": account.external_id}

        try:
            if kind is EntitlementKind.WORKGROUP:
                if op is AttributeChangeOp.ADD:
                    self.gateway.workgroups.add_member(account.external_id, entitlement_id)
                else:
                    self.gateway.workgroups.remove_member(account.external_id, entitlement_id)
            else:
                if op is AttributeChangeOp.ADD:
                    self.gateway.roles.add_role(account.id, entitlement_id)
                else:
                    self.gateway.roles.remove_role(account.id, entitlement_id)
        except Exception:
            audit.safe_log_event(
                _AUDIT_EVENTS[(kind, op)], account.uuid, operator=self.operator, details=details, success=False
            )
            raise

        audit.safe_log_event(_AUDIT_EVENTS[(kind, op)], account.uuid, operator=self.operator, details=details)

        if kind is EntitlementKind.ROLE:
            self._settle()
        return AppliedChange(op, entitlement_id, kind)

    def apply_changes(self, account: Account, changes: Iterable[EntitlementChange]) -> List[AppliedChange]:
        """Apply a batch of changes in order.

        A ``Set`` change fails the batch before it is processed; changes before
        it stay applied and are reported on the raised error.

        Returns:
            Every change applied, in order
        """
        applied: List[AppliedChange] = []
        for change in changes:
            if change.op is AttributeChangeOp.SET:
                logger.error(
                    "Rejecting %s operation for %s after %d applied change(s)",
                    change.op.value, account.uuid, len(applied),
                )
                raise UnsupportedOperationError(change.op.value, applied)
            for value in change.values():
                applied.append(self.apply(change.op, account, normalize_entitlement(value)))
        return applied

    def _settle(self) -> None:
        if self.settling_delay_ms <= 0:
            return
        logger.debug("Waiting %d ms for role change to settle", self.settling_delay_ms)
        self._sleep(self.settling_delay_ms / 1000)
