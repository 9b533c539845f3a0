# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import click
from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from authgate.infrastructure.audit import AuditAction
from authgate.infrastructure.container import Container
from authgate.infrastructure.db import init_db
from authgate.shared.logging import logger, setup_logging
from authgate.shared.middleware.csrf import configure_csrf
from authgate.shared.middleware.error_handler import configure_error_handling
from authgate.shared.middleware.request_logger import configure_request_logging


def _register_commands(app: Flask, container: Container) -> None:
    @app.cli.command("init-db")
    def init_db_command() -> None:
        """Create database tables."""
        init_db()
        click.echo("Database schema ensured")

    @app.cli.command("purge-sessions")
    def purge_sessions_command() -> None:
        """Delete expired and logged-out sessions."""
        removed = container.session_guard.purge_expired()
        container.audit_logger.log(AuditAction.SESSIONS_PURGED, details={"removed": removed})
        click.echo(f"Removed {removed} session(s)")


def create_app(container: Container | None = None) -> Flask:
    container = container or Container()
    config = container.config

    setup_logging(config.logging, debug_mode=config.debug_logging)
    init_db()

    app = Flask(__name__)
    app.config.update(SECRET_KEY=config.secret_key)
    if config.security.proxy_fix_hops:
        hops = config.security.proxy_fix_hops
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops)  # type: ignore[method-assign]
    app.extensions["authgate.container"] = container

    configure_error_handling(app)
    configure_csrf(app)
    configure_request_logging(app)

    app.register_blueprint(container.pages_controller.as_blueprint())
    app.register_blueprint(container.auth_controller.as_blueprint())
    _register_commands(app, container)

    # Unknown-email logins must not pay for building the throwaway hash.
    container.authenticator.warm_up()

    @app.after_request
    def _add_security_headers(resp):
        resp.headers.setdefault("X-Frame-Options", "DENY")
        resp.headers.setdefault("Referrer-Policy", "no-referrer")
        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("Cross-Origin-Opener-Policy", "same-origin")
        resp.headers.setdefault("Cache-Control", "no-store")

        if config.security.enable_hsts:
            resp.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains",
            )

        return resp

    logger.info("Flask app initialized")
    return app


if __name__ == "__main__":
    create_app().run(host="127.0.0.1", port=5000, debug=False)
