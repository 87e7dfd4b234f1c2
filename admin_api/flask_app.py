"""Flask application factory and bootstrap.

This module provides the create_app() factory function for initializing
the Flask application with all blueprints, middleware, and configuration.
"""
from __future__ import annotations
import logging
from typing import Optional

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from admin_api.config import AppConfig, load_settings
from admin_api.core.authentication import CredentialGate
from admin_api.core.clerk import ClerkClient, UserService
from admin_api.core.directory_scanner import DirectoryScanner
from admin_api.core.user_admin import UserAdminService


# ─────────────────────────────────────────────────────────────────────────────
# Application Factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(cfg: Optional[AppConfig] = None) -> Flask:
    """Create and configure Flask application."""
    # Load configuration
    cfg = cfg or load_settings()
    _configure_logging(cfg.log_level)

    # Create Flask app
    app = Flask(__name__)

    # Store config for easy access in routes
    app.config["APP_CONFIG"] = cfg
    app.config["MAX_CONTENT_LENGTH"] = 64 * 1024

    # Trust X-Forwarded-* headers from proxy
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)  # type: ignore

    # One shared provider client; it carries no request-scoped state
    _init_services(app, cfg)

    # Register blueprints
    from admin_api.api import auth, errors, health, request_logging, users

    request_logging.register_request_logging(app, log_bodies=cfg.log_request_bodies)

    app.register_blueprint(health.bp)
    app.register_blueprint(users.bp)
    app.register_blueprint(auth.bp)

    # Register error handlers
    errors.register_error_handlers(app)

    # Log startup info
    mode_label = "DEMO" if cfg.demo_mode else "PRODUCTION"
    print(f"[flask_app] Mode={mode_label}")
    print("[flask_app] Admin API registered at /user and /auth")
    if not cfg.admin_api_token:
        print("[flask_app] WARNING: ADMIN_API_TOKEN not set - admin routes are unauthenticated")

    return app


def _init_services(app: Flask, cfg: AppConfig) -> None:
    """Build the Clerk client and the services the blueprints use."""
    client = ClerkClient(cfg.clerk_api_url, cfg.clerk_secret_key, timeout=cfg.request_timeout)
    user_service = UserService(client)
    scanner = DirectoryScanner(
        user_service.get_user_list,
        page_size=cfg.scan_page_size,
        max_offset=cfg.max_scan_offset,
    )

    app.extensions["user_admin"] = UserAdminService(
        user_service,
        scanner,
        list_default_limit=cfg.list_default_limit,
        max_page_size=cfg.max_page_size,
    )
    app.extensions["credential_gate"] = CredentialGate(
        user_service,
        scanner,
        verify_timeout=cfg.login_verify_timeout,
        max_workers=cfg.login_verify_workers,
        search_budget=cfg.login_search_budget,
        distinguish_search_timeout=cfg.distinguish_search_timeout,
    )


def _configure_logging(level: str) -> None:
    """Configure root logging once (Gunicorn may have configured it already)."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )
    else:
        root.setLevel(level)


# ─────────────────────────────────────────────────────────────────────────────
# Application Instance (for Gunicorn)
# ─────────────────────────────────────────────────────────────────────────────
app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=True)
