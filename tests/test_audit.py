"""Unit tests for provisioning audit logging."""

import json

import pytest

from idn_connector.core import audit


@pytest.fixture
def signed(monkeypatch):
    """Set a signing key through the environment."""
    monkeypatch.setenv("AUDIT_LOG_SIGNING_KEY", "test-signing-key-for-audit-trail")


def _events():
    with audit.AUDIT_LOG_FILE.open("r") as f:
        return [json.loads(line) for line in f if line.strip()]


def test_log_event_creates_file_with_restricted_permissions(signed):
    assert not audit.AUDIT_LOG_FILE.exists()

    audit.log_event("role_grant", "alice", details={"entitlement": "ADMIN"})

    assert audit.AUDIT_LOG_FILE.exists()
    assert audit.AUDIT_LOG_FILE.stat().st_mode & 0o777 == 0o600
    assert audit.AUDIT_LOG_DIR.stat().st_mode & 0o777 == 0o700


def test_log_event_writes_valid_json(signed):
    audit.log_event(
        "workgroup_remove",
        "bob",
        operator="host",
        details={"entitlement": "11111111-2222-3333-4444-555555555555", "external_id": "E2"},
        success=False,
    )

    event = _events()[0]
    assert event["event_type"] == "workgroup_remove"
    assert event["account"] == "bob"
    assert event["operator"] == "host"
    assert event["success"] is False
    assert event["details"]["external_id"] == "E2"
    assert "timestamp" in event
    assert "signature" in event


def test_events_are_appended_in_order(signed):
    for event_type, account in [("role_grant", "alice"), ("account_disable", "bob"), ("role_revoke", "alice")]:
        audit.log_event(event_type, account)

    assert [(e["event_type"], e["account"]) for e in _events()] == [
        ("role_grant", "alice"),
        ("account_disable", "bob"),
        ("role_revoke", "alice"),
    ]


def test_unsigned_when_no_key(monkeypatch, tmp_path):
    monkeypatch.setattr(audit, "_SIGNING_KEY_FILE", tmp_path / "missing")
    audit.log_event("account_enable", "alice")
    assert "signature" not in _events()[0]
    assert audit.verify_audit_log() == (1, 0)


def test_verify_audit_log_detects_tampering(signed):
    audit.log_event("role_grant", "alice", details={"entitlement": "ADMIN"})
    audit.log_event("role_grant", "bob", details={"entitlement": "HELPDESK"})
    assert audit.verify_audit_log() == (3, 2)

    lines = audit.AUDIT_LOG_FILE.read_text().splitlines()
    tampered = json.loads(lines[1])
    tampered["details"]["entitlement"] = "ADMIN"
    lines[1] = json.dumps(tampered)
    audit.AUDIT_LOG_FILE.write_text("\n".join(lines) + "\n")

    assert audit.verify_audit_log() == (2, 1)


def test_verify_missing_log():
    assert audit.verify_audit_log() == (0, 0)


def test_configured_key_takes_precedence(monkeypatch, tmp_path):
    monkeypatch.setenv("AUDIT_LOG_SIGNING_KEY", "env-key")
    audit.configure(tmp_path / "configured", "configured-key")
    assert audit.AUDIT_LOG_FILE == tmp_path / "configured" / "provisioning-events.jsonl"
    assert audit._get_signing_key() == b"configured-key"

    audit.log_event("role_grant", "alice")
    monkeypatch.setattr(audit, "_configured_key", "")
    # Signed with the configured key, so the env key no longer validates it.
    assert audit.verify_audit_log() == (1, 0)


def test_safe_log_event_swallows_write_errors(monkeypatch):
    def fail(*args, **kwargs):
        raise PermissionError("read-only filesystem")

    monkeypatch.setattr(audit, "log_event", fail)
    assert audit.safe_log_event("role_grant", "alice") is False


def test_safe_log_event_reports_success(signed):
    assert audit.safe_log_event("workgroup_add", "alice") is True
    assert len(_events()) == 1


def test_read_events_skips_malformed_lines(signed):
    audit.log_event("role_grant", "alice")
    with audit.AUDIT_LOG_FILE.open("a") as f:
        f.write("{not json\n\n")
    audit.log_event("role_revoke", "alice")

    assert [e["event_type"] for e in audit.read_events()] == ["role_grant", "role_revoke"]
    assert audit.verify_audit_log() == (2, 2)


def test_verify_counts_truncated_line_as_invalid(signed):
    audit.log_event("role_grant", "alice", details={"entitlement": "ADMIN"})
    audit.log_event("role_revoke", "alice", details={"entitlement": "ADMIN"})

    lines = audit.AUDIT_LOG_FILE.read_text().splitlines()
    lines[1] = lines[1][:-5]
    audit.AUDIT_LOG_FILE.write_text("\n".join(lines) + "\n")

    total, valid = audit.verify_audit_log()
    assert (total, valid) == (2, 1)
