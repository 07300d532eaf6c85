"""Command endpoint: the host posts one lifecycle command per request.

Request body:
    {"type": "std:account:read", "input": {"identity": "alice"}}

Response: ``application/x-ndjson``, one output record per line, in the order
the handler sent them.

Security:
    - Optional static bearer token (CONNECTOR_COMMAND_TOKEN), compared with
      hmac.compare_digest and never logged
"""
from __future__ import annotations
import hashlib
import hmac
import json
import logging

from flask import Blueprint, Response, current_app, g, request

from idn_connector.core.connector import CollectingResponse
from idn_connector.core.errors import ConnectorError

bp = Blueprint("commands", __name__)

JSON_MAX_SIZE_BYTES = 65536  # 64 KB

logger = logging.getLogger(__name__)


def _unauthorized(message: str) -> Response:
    body = json.dumps({"error": "Unauthorized", "message": message})
    return Response(body, status=401, mimetype="application/json", headers={"WWW-Authenticate": "Bearer"})


@bp.before_request
def authenticate():
    """Require the configured bearer token when one is set."""
    cfg = current_app.config["APP_CONFIG"]
    if not cfg.command_token:
        return None

    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return _unauthorized("Authorization header must use Bearer token scheme.")

    token = auth_header[7:].strip()
    if not token or not hmac.compare_digest(token, cfg.command_token):
        token_hash = hashlib.sha256(token.encode()).hexdigest()[:12]
        logger.warning(f"Rejected command token | token_hash={token_hash} | client_ip={request.remote_addr}")
        return _unauthorized("Invalid bearer token.")
    return None


@bp.route("/commands", methods=["POST"])
def run_command():
    """Dispatch one command to the connector and return its records as NDJSON."""
    if request.content_length and request.content_length > JSON_MAX_SIZE_BYTES:
        raise ConnectorError("Request payload too large")

    body = request.get_json(silent=True)
    if not isinstance(body, dict) or not body.get("type"):
        raise ConnectorError("Request body must be a JSON object with a 'type' field")

    command_input = body.get("input") or {}
    if not isinstance(command_input, dict):
        raise ConnectorError("Request 'input' must be a JSON object")

    g.command_type = body["type"]
    connector = current_app.config["CONNECTOR"]
    res = CollectingResponse()
    connector.dispatch(body["type"], command_input, res)

    lines = "".join(json.dumps(record) + "\n" for record in res.records)
    return Response(lines, status=200, mimetype="application/x-ndjson")


@bp.after_request
def add_correlation_id(response):
    """Echo the caller's correlation ID for tracing."""
    correlation_id = request.headers.get("X-Correlation-Id")
    if correlation_id:
        response.headers["X-Correlation-Id"] = correlation_id
    command_type = getattr(g, "command_type", None)
    if command_type:
        response.headers["X-Command-Type"] = command_type
    return response
