"""Lifecycle command handlers.

Each handler receives the command input and an output sink exposing
``send(record)``; results are streamed through the sink rather than returned.
Handlers rebuild everything they need from IdentityNow on every call.
"""
from __future__ import annotations
import logging
import time
from typing import Any, Callable, Dict, List, Optional

import requests

from . import audit
from .aggregation import AccountAssembler, AccountEnumerationReconciler, WorkgroupAggregator
from .classifier import EntitlementKind, classify
from .errors import ConnectorError
from .idn.exceptions import IDNError
from .models import Account, EntitlementChange, Role, Workgroup
from .provisioning import DEFAULT_SETTLING_DELAY_MS, ProvisioningSequencer

logger = logging.getLogger(__name__)

COMMANDS: Dict[str, str] = {
    "std:test-connection": "test_connection",
    "std:account:list": "account_list",
    "std:account:read": "account_read",
    "std:entitlement:list": "entitlement_list",
    "std:entitlement:read": "entitlement_read",
    "std:account:disable": "account_disable",
    "std:account:enable": "account_enable",
    "std:account:update": "account_update",
}


class CollectingResponse:
    """Output sink that keeps every record in memory."""

    def __init__(self):
        self.records: List[dict] = []

    def send(self, record: dict) -> None:
        self.records.append(record)


def _identity(input: Optional[dict]) -> str:
    if input is not None and not isinstance(input, dict):
        raise ConnectorError("Command input must be a JSON object")
    identity = (input or {}).get("identity")
    if not identity:
        raise ConnectorError("Missing required input: identity")
    return identity


class IDNConnector:
    """IdentityNow admin-entitlement connector."""

    def __init__(
        self,
        gateway,
        settling_delay_ms: int = DEFAULT_SETTLING_DELAY_MS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.gateway = gateway
        self.aggregator = WorkgroupAggregator(gateway)
        self.assembler = AccountAssembler(gateway)
        self.reconciler = AccountEnumerationReconciler(gateway)
        self.sequencer = ProvisioningSequencer(gateway, settling_delay_ms=settling_delay_ms, sleep=sleep)

    # ─────────────────────────────────────────────────────────────────────────
    # Dispatch
    # ─────────────────────────────────────────────────────────────────────────

    def dispatch(self, command_type: str, input: Optional[dict], res) -> None:
        """Route a host command to its handler.

        Raises:
            ConnectorError: If the command type is unknown
        """
        handler_name = COMMANDS.get(command_type)
        if not handler_name:
            raise ConnectorError(f"Unsupported command: {command_type}")
        logger.info("Dispatching %s", command_type)
        getattr(self, handler_name)(input, res)

    def _send(self, res, record: dict) -> None:
        logger.info("%s", record)
        res.send(record)

    # ─────────────────────────────────────────────────────────────────────────
    # Handlers
    # ─────────────────────────────────────────────────────────────────────────

    def test_connection(self, input: Any, res) -> None:
        try:
            response = self.gateway.test_connection()
        except (IDNError, requests.RequestException) as e:
            logger.error("Connection test failed: %s", e)
            raise ConnectorError("Unable to connect to IdentityNow") from e
        if response.status_code != 200:
            raise ConnectorError("Unable to connect to IdentityNow")
        logger.info("Test successful!")
        self._send(res, {})

    def account_list(self, input: Any, res) -> None:
        workgroups = self.aggregator.list_workgroups_with_members()
        for account_id in self.reconciler.enumerate_account_ids(workgroups):
            account = self.assembler.assemble(account_id, workgroups)
            self._send(res, account.to_output())

    def account_read(self, input: dict, res) -> None:
        identity = _identity(input)
        workgroups = self.aggregator.list_workgroups_with_members()
        account = self.assembler.assemble(identity, workgroups)
        self._send(res, account.to_output())

    def entitlement_list(self, input: Any, res) -> None:
        roles = self.gateway.roles.list_roles()
        workgroups = self.gateway.workgroups.list_workgroups()
        for raw in roles:
            self._send(res, Role.from_raw(raw).to_output())
        for raw in workgroups:
            self._send(res, Workgroup.from_raw(raw).to_output())

    def entitlement_read(self, input: dict, res) -> None:
        identity = _identity(input)
        if classify(identity) is EntitlementKind.WORKGROUP:
            record = Workgroup.from_raw(self.gateway.workgroups.get_workgroup(identity)).to_output()
        else:
            record = Role.from_raw(self.gateway.roles.get_role(identity)).to_output()
        self._send(res, record)

    def account_disable(self, input: dict, res) -> None:
        account = self._toggle(_identity(input), enabled=False)
        self._send(res, account.to_output())

    def account_enable(self, input: dict, res) -> None:
        account = self._toggle(_identity(input), enabled=True)
        self._send(res, account.to_output())

    def account_update(self, input: dict, res) -> None:
        identity = _identity(input)
        try:
            changes = [EntitlementChange.from_dict(c) for c in (input.get("changes") or [])]
        except ValueError as e:
            raise ConnectorError(f"Invalid change operation: {e}") from e

        account = Account.from_detail(self.gateway.accounts.get_account(identity))
        self.sequencer.apply_changes(account, changes)

        workgroups = self.aggregator.list_workgroups_with_members()
        account = self.assembler.assemble(identity, workgroups)
        self._send(res, account.to_output())

    def _toggle(self, identity: str, *, enabled: bool) -> Account:
        """Enable or disable an account and reflect the request locally.

        The returned ``enabled`` flag mirrors the requested state; it is not
        re-read from IdentityNow.
        """
        workgroups = self.aggregator.list_workgroups_with_members()
        account = self.assembler.assemble(identity, workgroups)
        event = "account_enable" if enabled else "account_disable"
        details = {"account_id": account.id}
        try:
            if enabled:
                self.gateway.accounts.enable_account(account.id)
            else:
                self.gateway.accounts.disable_account(account.id)
        except Exception:
            audit.safe_log_event(event, account.uuid, details=details, success=False)
            raise
        audit.safe_log_event(event, account.uuid, details=details)
        account.enabled = enabled
        return account
