"""Signed audit trail of entitlement and account-state changes.

Each event is one JSON line in ``provisioning-events.jsonl``. When a signing
key is available, the line carries an HMAC-SHA256 ``signature`` computed over
the canonical JSON of every other field.
"""

from __future__ import annotations
import datetime
import hashlib
import hmac
import json
import logging
import os
from pathlib import Path
from typing import Any, Iterator, Literal

logger = logging.getLogger(__name__)

AUDIT_LOG_DIR = Path(os.environ.get("AUDIT_LOG_DIR", ".runtime/audit"))
AUDIT_LOG_FILE = AUDIT_LOG_DIR / "provisioning-events.jsonl"
_SIGNING_KEY_FILE = Path("/run/secrets/audit_log_signing_key")

EventType = Literal[
    "role_grant", "role_revoke",
    "workgroup_add", "workgroup_remove",
    "account_enable", "account_disable",
]

_configured_key: str = ""


def configure(log_dir: str | Path, signing_key: str = "") -> None:
    """Redirect the trail to ``log_dir`` and pin the signing key for this process."""
    global AUDIT_LOG_DIR, AUDIT_LOG_FILE, _configured_key
    AUDIT_LOG_DIR = Path(log_dir)
    AUDIT_LOG_FILE = AUDIT_LOG_DIR / "provisioning-events.jsonl"
    _configured_key = signing_key.strip()


def _get_signing_key() -> bytes:
    """Resolve the key: configured value, AUDIT_LOG_SIGNING_KEY, then the secrets mount."""
    for candidate in (_configured_key, os.environ.get("AUDIT_LOG_SIGNING_KEY", "")):
        if candidate.strip():
            return candidate.strip().encode("utf-8")
    if not _SIGNING_KEY_FILE.exists():
        return b""
    try:
        return _SIGNING_KEY_FILE.read_text(encoding="utf-8").strip().encode("utf-8")
    except OSError as e:
        logger.warning("Unreadable audit signing key %s: %s", _SIGNING_KEY_FILE, e)
        return b""


def _sign_event(event: dict[str, Any]) -> str:
    key = _get_signing_key()
    if not key:
        return ""
    canonical = json.dumps(event, sort_keys=True, separators=(",", ":"))
    return hmac.new(key, canonical.encode("utf-8"), hashlib.sha256).hexdigest()


def _build_event(
    event_type: EventType,
    account: str,
    operator: str,
    details: dict[str, Any] | None,
    success: bool,
) -> dict[str, Any]:
    event = {
        "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "event_type": event_type,
        "account": account,
        "operator": operator,
        "success": success,
        "details": details or {},
    }
    signature = _sign_event(event)
    if signature:
        event["signature"] = signature
    return event


def log_event(
    event_type: EventType,
    account: str,
    *,
    operator: str = "connector",
    details: dict[str, Any] | None = None,
    success: bool = True,
) -> None:
    """Append one provisioning event to the trail.

    Args:
        event_type: role_grant, workgroup_add, account_disable, ...
        account: Account name (alias) the change was made for
        operator: Caller that issued the change
        details: Entitlement id, account id, external id
        success: False when the remote call raised

    Raises:
        OSError: If the trail cannot be written
    """
    event = _build_event(event_type, account, operator, details, success)

    AUDIT_LOG_DIR.mkdir(parents=True, exist_ok=True)
    AUDIT_LOG_DIR.chmod(0o700)
    with AUDIT_LOG_FILE.open("a", encoding="utf-8") as f:
        f.write(json.dumps(event, ensure_ascii=False) + "\n")
    AUDIT_LOG_FILE.chmod(0o600)


def safe_log_event(
    event_type: EventType,
    account: str,
    *,
    operator: str = "connector",
    details: dict[str, Any] | None = None,
    success: bool = True,
) -> bool:
    """Same as log_event, but a failed write is logged instead of raised."""
    try:
        log_event(event_type, account, operator=operator, details=details, success=success)
    except OSError as e:
        logger.warning("Audit write failed (%s for %s): %s", event_type, account, e)
        return False
    return True


def read_events() -> Iterator[dict[str, Any]]:
    """Yield every parseable event in file order; malformed lines are skipped."""
    if not AUDIT_LOG_FILE.exists():
        return
    with AUDIT_LOG_FILE.open("r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError:
                logger.warning("Skipping malformed audit line %d", lineno)


def verify_audit_log() -> tuple[int, int]:
    """Check each event's signature against the current key.

    Every non-blank line counts toward the total, so a truncated or
    unparseable line shows up as an invalid event.

    Returns:
        (non-blank lines, events whose signature matches)
    """
    if not AUDIT_LOG_FILE.exists():
        return 0, 0

    total = valid = 0
    with AUDIT_LOG_FILE.open("r", encoding="utf-8") as f:
        for line in f:
            if not line.strip():
                continue
            total += 1
            try:
                event = json.loads(line)
            except json.JSONDecodeError:
                continue
            if not isinstance(event, dict):
                continue
            stored = event.pop("signature", "")
            if stored and hmac.compare_digest(stored, _sign_event(event)):
                valid += 1
    return total, valid
