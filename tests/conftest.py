"""Pytest shared fixtures: an in-memory IdentityNow tenant."""
import pathlib
import sys
from types import SimpleNamespace

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from idn_connector.config import AppConfig
from idn_connector.core import audit
from idn_connector.core.connector import IDNConnector
from idn_connector.core.idn.exceptions import (
    AccountNotFoundError,
    IDNAPIError,
    RoleNotFoundError,
    WorkgroupNotFoundError,
)

WG_HELPDESK = "11111111-2222-3333-4444-555555555555"
WG_AUDITORS = "aaaaaaaa-bbbb-cccc-dddd-eeeeeeeeeeee"


# ─────────────────────────────────────────────────────────────────────────────
# Fake gateway
# ─────────────────────────────────────────────────────────────────────────────
class _FakeAccounts:
    def __init__(self, tenant):
        self.tenant = tenant

    def list_accounts(self):
        self.tenant.calls.append(("list_accounts",))
        return [{"name": name} for name in self.tenant.listing]

    def get_account(self, identity):
        self.tenant.calls.append(("get_account", identity))
        if identity not in self.tenant.details:
            raise AccountNotFoundError(f"Account '{identity}' not found")
        detail = dict(self.tenant.details[identity])
        detail["roles"] = list(detail.get("roles", []))
        return detail

    def enable_account(self, account_id):
        self.tenant.calls.append(("enable_account", account_id))
        self.tenant.by_id(account_id)["enabled"] = True

    def disable_account(self, account_id):
        self.tenant.calls.append(("disable_account", account_id))
        self.tenant.by_id(account_id)["enabled"] = False


class _FakeRoles:
    def __init__(self, tenant):
        self.tenant = tenant

    def list_roles(self):
        self.tenant.calls.append(("list_roles",))
        return list(self.tenant.role_data)

    def get_role(self, identity):
        self.tenant.calls.append(("get_role", identity))
        matches = [r for r in self.tenant.role_data if r["value"] == identity]
        if not matches:
            raise RoleNotFoundError(f"Role '{identity}' not found")
        return matches[-1]

    def add_role(self, account_id, role):
        self.tenant.calls.append(("add_role", account_id, role))
        if role in self.tenant.rejected_roles:
            raise IDNAPIError(400, f"Unknown adminType {role}", "/cc/api/user/updatePermissions")
        self.tenant.by_id(account_id).setdefault("roles", []).append(role)

    def remove_role(self, account_id, role):
        self.tenant.calls.append(("remove_role", account_id, role))
        roles = self.tenant.by_id(account_id).setdefault("roles", [])
        if role in roles:
            roles.remove(role)


class _FakeWorkgroups:
    def __init__(self, tenant):
        self.tenant = tenant

    def list_workgroups(self):
        self.tenant.calls.append(("list_workgroups",))
        return [{k: v for k, v in wg.items() if k != "members"} for wg in self.tenant.workgroup_data]

    def get_workgroup(self, workgroup_id):
        self.tenant.calls.append(("get_workgroup", workgroup_id))
        wg = self.tenant.workgroup(workgroup_id)
        return {k: v for k, v in wg.items() if k != "members"}

    def get_workgroup_members(self, workgroup_id):
        self.tenant.calls.append(("get_workgroup_members", workgroup_id))
        if workgroup_id in self.tenant.failing_rosters:
            raise IDNAPIError(500, "roster unavailable", f"/v2/workgroups/{workgroup_id}/members")
        return [dict(m) for m in self.tenant.workgroup(workgroup_id)["members"]]

    def add_member(self, external_id, workgroup_id):
        self.tenant.calls.append(("add_member", external_id, workgroup_id))
        alias = next(
            (d["alias"] for d in self.tenant.details.values() if d["externalId"] == external_id),
            external_id,
        )
        self.tenant.workgroup(workgroup_id)["members"].append({"externalId": external_id, "alias": alias})

    def remove_member(self, external_id, workgroup_id):
        self.tenant.calls.append(("remove_member", external_id, workgroup_id))
        wg = self.tenant.workgroup(workgroup_id)
        wg["members"] = [m for m in wg["members"] if m["externalId"] != external_id]


class FakeTenant:
    """In-memory stand-in for IDNGateway, recording every call in order."""

    def __init__(self):
        self.calls = []
        self.connection_status = 200
        self.connection_error = None
        self.failing_rosters = set()
        self.rejected_roles = set()
        self.listing = ["alice"]
        self.details = {
            "alice": {
                "id": "1001", "externalId": "E1", "alias": "alice",
                "displayName": "Alice Adams", "email": "alice@example.com",
                "enabled": True, "roles": ["R1"],
            },
            "bob": {
                "id": "1002", "externalId": "E2", "alias": "bob",
                "displayName": "Bob Brown", "email": "bob@example.com",
                "enabled": True, "roles": [],
            },
        }
        self.role_data = [
            {"value": "ADMIN", "name": "Admin", "description": "Tenant administrator"},
            {"value": "HELPDESK", "name": "Helpdesk"},
        ]
        self.workgroup_data = [
            {
                "id": WG_HELPDESK, "name": "Helpdesk Team", "description": "First line",
                "owner": {"name": "alice"},
                "members": [
                    {"externalId": "E1", "alias": "alice"},
                    {"externalId": "E2", "alias": "bob"},
                ],
            },
            {"id": WG_AUDITORS, "name": "Auditors", "members": []},
        ]
        self.accounts = _FakeAccounts(self)
        self.roles = _FakeRoles(self)
        self.workgroups = _FakeWorkgroups(self)

    def test_connection(self):
        self.calls.append(("test_connection",))
        if self.connection_error is not None:
            raise self.connection_error
        return SimpleNamespace(status_code=self.connection_status)

    def by_id(self, account_id):
        return next(d for d in self.details.values() if d["id"] == account_id)

    def workgroup(self, workgroup_id):
        for wg in self.workgroup_data:
            if wg["id"] == workgroup_id:
                return wg
        raise WorkgroupNotFoundError(f"Workgroup '{workgroup_id}' not found")

    def call_names(self):
        return [c[0] for c in self.calls]


class Recorder:
    """Output sink collecting records sent by a handler."""

    def __init__(self):
        self.records = []

    def send(self, record):
        self.records.append(record)


# ─────────────────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _isolated_audit_log(tmp_path, monkeypatch):
    """Keep audit events out of the working tree."""
    audit_dir = tmp_path / "audit"
    monkeypatch.setattr(audit, "AUDIT_LOG_DIR", audit_dir)
    monkeypatch.setattr(audit, "AUDIT_LOG_FILE", audit_dir / "provisioning-events.jsonl")
    monkeypatch.setattr(audit, "_configured_key", "")
    monkeypatch.delenv("AUDIT_LOG_SIGNING_KEY", raising=False)
    return audit_dir


@pytest.fixture
def tenant():
    return FakeTenant()


@pytest.fixture
def gateway(tenant):
    return tenant


@pytest.fixture
def sleeps(tenant):
    """Fake sleep recording each pause in the tenant's call log."""
    recorded = []

    def _sleep(seconds):
        recorded.append(seconds)
        tenant.calls.append(("sleep", seconds))

    _sleep.recorded = recorded
    return _sleep


@pytest.fixture
def connector(gateway, sleeps):
    return IDNConnector(gateway, settling_delay_ms=2000, sleep=sleeps)


@pytest.fixture
def res():
    return Recorder()


@pytest.fixture
def app_config(tmp_path):
    return AppConfig(
        demo_mode=True,
        idn_base_url="https://tenant.example.com",
        idn_client_id="client",
        idn_client_secret="secret",
        settling_delay_ms=0,
        audit_log_dir=str(tmp_path / "audit"),
    )
