"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

SECRETS_DIR = Path("/run/secrets")


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """Return a secret from the secrets mount, else from ``env_var``.

    A blank file falls through to the environment.
    """
    path = SECRETS_DIR / secret_name
    if path.is_file():
        try:
            content = path.read_text().strip()
        except OSError as e:
            logger.warning("Failed to read %s: %s", path, e)
        else:
            if content:
                logger.info("Loaded %s from %s", secret_name, SECRETS_DIR)
                return content

    return (os.getenv(env_var) or None) if env_var else None


@dataclass
class AppConfig:
    """Application configuration container."""
    demo_mode: bool

    # IdentityNow tenant
    idn_base_url: str
    idn_client_id: str
    idn_client_secret: str
    request_timeout: float = 10.0

    # Provisioning
    settling_delay_ms: int = 2000

    # Inbound command endpoint (empty = no bearer token required)
    command_token: str = ""

    # Audit
    audit_log_dir: str = ".runtime/audit"
    audit_log_signing_key: str = ""

    log_level: str = "INFO"


def _get_or_default(var_name: str, demo_default: Optional[str] = None, demo_mode: bool = False) -> str:
    """Get a required environment variable, falling back to the demo default in demo mode."""
    value = os.environ.get(var_name)
    if value:
        return value

    if demo_mode and demo_default is not None:
        logger.info("[demo-mode] Using default for %s", var_name)
        return demo_default

    raise RuntimeError(f"Environment variable {var_name} is required in production mode.")


def _int_env(var_name: str, default: int) -> int:
    raw = os.environ.get(var_name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise RuntimeError(f"Environment variable {var_name} must be an integer, got {raw!r}") from e


def _float_env(var_name: str, default: float) -> float:
    raw = os.environ.get(var_name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise RuntimeError(f"Environment variable {var_name} must be a number, got {raw!r}") from e


def load_settings() -> AppConfig:
    """Load connector settings from environment and /run/secrets."""
    demo_mode = os.environ.get("DEMO_MODE", "false").lower() == "true"

    idn_base_url = _get_or_default("IDN_BASE_URL", demo_default="http://localhost:8080", demo_mode=demo_mode)
    idn_client_id = _get_or_default("IDN_CLIENT_ID", demo_default="demo-client", demo_mode=demo_mode)

    idn_client_secret = _load_secret_from_file("idn_client_secret", "IDN_CLIENT_SECRET")
    if not idn_client_secret:
        if not demo_mode:
            raise RuntimeError("IDN_CLIENT_SECRET not found in /run/secrets or environment")
        idn_client_secret = "demo-client-secret"
        logger.info("[demo-mode] Using default for IDN_CLIENT_SECRET")

    request_timeout = _float_env("IDN_REQUEST_TIMEOUT", 10.0)
    settling_delay_ms = _int_env("IDN_SETTLING_DELAY_MS", 2000)
    if settling_delay_ms < 0:
        raise RuntimeError("IDN_SETTLING_DELAY_MS must not be negative")

    command_token = _load_secret_from_file("connector_command_token", "CONNECTOR_COMMAND_TOKEN") or ""
    audit_log_signing_key = _load_secret_from_file("audit_log_signing_key", "AUDIT_LOG_SIGNING_KEY") or ""

    cfg = AppConfig(
        demo_mode=demo_mode,
        idn_base_url=idn_base_url,
        idn_client_id=idn_client_id,
        idn_client_secret=idn_client_secret,
        request_timeout=request_timeout,
        settling_delay_ms=settling_delay_ms,
        command_token=command_token,
        audit_log_dir=os.environ.get("AUDIT_LOG_DIR", ".runtime/audit"),
        audit_log_signing_key=audit_log_signing_key,
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    )

    mode_label = "DEMO" if demo_mode else "PRODUCTION"
    logger.info("Mode=%s; tenant=%s; client_id=%s", mode_label, cfg.idn_base_url, cfg.idn_client_id)
    if demo_mode:
        logger.warning("Demo credentials in use. Do not deploy with these defaults.")

    return cfg
