"""Connector-level errors surfaced to the host framework."""
from __future__ import annotations
from typing import Optional


class ConnectorError(Exception):
    """Fatal error for the current command (bad configuration, bad input)."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error": type(self).__name__, "message": self.message}


class UnsupportedOperationError(ConnectorError):
    """An account-update change used an operation the connector cannot apply.

    Changes processed before the rejected one are already committed remotely;
    they are listed in ``applied`` since nothing is rolled back.
    """

    def __init__(self, op: str, applied: Optional[list] = None):
        self.op = op
        self.applied = list(applied or [])
        super().__init__(f"Operation not supported: {op}")

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["applied"] = [change.to_dict() for change in self.applied]
        return payload
