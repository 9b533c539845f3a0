# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, g, jsonify

from authgate.application.services.session_guard import SessionGuard
from authgate.infrastructure.audit import AuditLogger
from authgate.infrastructure.health import check_database
from authgate.interfaces.http.dto.auth import UserDTO
from authgate.interfaces.http.guard import extract_token, login_required
from authgate.shared.logging import logger


class PagesController:
    def __init__(self, *, sessions: SessionGuard, audit: AuditLogger) -> None:
        self._sessions = sessions
        self._audit = audit

    def index(self):
        user = self._sessions.validate(extract_token())
        return jsonify({"ok": True, "authenticated": user is not None})

    def secret(self):
        user = g.current_user
        return jsonify(
            {
                "user": UserDTO(id=user.id, name=user.name, email=user.email).model_dump(),
                "message": f"Welcome back, {user.name}. This page is for signed-in users only.",
            }
        )

    def health(self):
        status: dict[str, object] = {"ok": True}
        try:
            check_database()
            status["database"] = "ok"
        except Exception as exc:
            logger.error(f"health: database check failed: {type(exc).__name__}")
            status["ok"] = False
            status["database"] = "error"
        return jsonify(status), 200 if status["ok"] else 503

    def as_blueprint(self) -> Blueprint:
        protect = login_required(self._sessions, audit=self._audit)
        bp = Blueprint("pages", __name__)
        bp.add_url_rule("/", view_func=self.index, methods=["GET"])
        bp.add_url_rule("/secret", view_func=protect(self.secret), methods=["GET"])
        bp.add_url_rule("/health", view_func=self.health, methods=["GET"])
        return bp
