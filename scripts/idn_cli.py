"""Run connector commands against an IdentityNow tenant from the shell.

This module serves as a CLI wrapper around idn_connector.core.connector.
Records are printed to stdout as NDJSON.
"""
from __future__ import annotations
import argparse
import json
import logging
import os
import sys
from pathlib import Path

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from idn_connector.config import load_settings
from idn_connector.core import audit
from idn_connector.core.connector import IDNConnector
from idn_connector.core.errors import ConnectorError
from idn_connector.core.idn import IDNGateway
from idn_connector.core.idn.exceptions import IDNError


class PrintingResponse:
    """Output sink writing one JSON record per line."""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdout

    def send(self, record: dict) -> None:
        self.stream.write(json.dumps(record) + "\n")
        self.stream.flush()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="IdentityNow connector helper")
    parser.add_argument("--log-level", default=os.environ.get("LOG_LEVEL", "WARNING"))

    sub = parser.add_subparsers(dest="cmd")

    sub.add_parser("test-connection")
    sub.add_parser("list-accounts")
    sub.add_parser("list-entitlements")

    for name in ("read-account", "read-entitlement", "enable", "disable"):
        sp = sub.add_parser(name)
        sp.add_argument("--identity", required=True)

    su = sub.add_parser("update")
    su.add_argument("--identity", required=True)
    su.add_argument("--add", action="append", default=[], metavar="ENTITLEMENT")
    su.add_argument("--remove", action="append", default=[], metavar="ENTITLEMENT")

    return parser


COMMAND_TYPES = {
    "test-connection": "std:test-connection",
    "list-accounts": "std:account:list",
    "list-entitlements": "std:entitlement:list",
    "read-account": "std:account:read",
    "read-entitlement": "std:entitlement:read",
    "enable": "std:account:enable",
    "disable": "std:account:disable",
    "update": "std:account:update",
}


def command_input(args: argparse.Namespace) -> dict:
    """Translate parsed arguments into the command input payload."""
    payload: dict = {}
    identity = getattr(args, "identity", None)
    if identity:
        payload["identity"] = identity
    if args.cmd == "update":
        changes = []
        if args.add:
            changes.append({"op": "Add", "attribute": "groups", "value": args.add})
        if args.remove:
            changes.append({"op": "Remove", "attribute": "groups", "value": args.remove})
        payload["changes"] = changes
    return payload


def main(argv: list[str] | None = None, connector: IDNConnector | None = None) -> int:
    """Command-line entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.cmd:
        parser.print_help()
        return 0

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING), stream=sys.stderr)

    if connector is None:
        cfg = load_settings()
        audit.configure(cfg.audit_log_dir, cfg.audit_log_signing_key)
        connector = IDNConnector(IDNGateway.from_config(cfg), settling_delay_ms=cfg.settling_delay_ms)

    try:
        connector.dispatch(COMMAND_TYPES[args.cmd], command_input(args), PrintingResponse())
    except (ConnectorError, IDNError) as e:
        print(f"[{args.cmd}] Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
