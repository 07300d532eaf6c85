"""Flask application factory and bootstrap.

This module provides the create_app() factory function for exposing the
connector's command endpoint over HTTP.
"""
from __future__ import annotations
import logging
from typing import Optional

from flask import Flask

from idn_connector.config import AppConfig, load_settings
from idn_connector.core import audit
from idn_connector.core.connector import IDNConnector
from idn_connector.core.idn import IDNGateway


# ─────────────────────────────────────────────────────────────────────────────
# Application Factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(cfg: Optional[AppConfig] = None, gateway=None) -> Flask:
    """Create and configure Flask application.

    Args:
        cfg: Settings; loaded from the environment when omitted
        gateway: IdentityNow gateway; built from ``cfg`` when omitted
    """
    cfg = cfg or load_settings()
    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = Flask(__name__)
    app.config["APP_CONFIG"] = cfg
    app.config["DEMO_MODE"] = cfg.demo_mode
    app.config["MAX_CONTENT_LENGTH"] = 1024 * 1024

    audit.configure(cfg.audit_log_dir, cfg.audit_log_signing_key)

    gateway = gateway or IDNGateway.from_config(cfg)
    app.config["CONNECTOR"] = IDNConnector(gateway, settling_delay_ms=cfg.settling_delay_ms)

    # Register blueprints
    from idn_connector.api import commands, errors, health

    app.register_blueprint(health.bp)
    app.register_blueprint(commands.bp)

    errors.register_error_handlers(app)

    mode_label = "DEMO" if cfg.demo_mode else "PRODUCTION"
    app.logger.info(f"Mode={mode_label}; command endpoint registered at /commands")
    if not cfg.command_token:
        app.logger.warning("CONNECTOR_COMMAND_TOKEN not set - /commands accepts unauthenticated requests")

    return app
