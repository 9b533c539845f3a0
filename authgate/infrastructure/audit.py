# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from authgate.infrastructure.db.models import AuditLog
from authgate.infrastructure.db.session import session_scope
from authgate.shared.logging import logger

SENSITIVE_KEYS = frozenset({"password", "token", "secret", "key", "hash", "cookie"})


class AuditAction(str, Enum):
    REGISTER = "register"
    REGISTER_FAILED = "register_failed"
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    LOGIN_LOCKED = "login_locked"
    LOGOUT = "logout"
    ACCESS_DENIED = "access_denied"
    SESSIONS_PURGED = "sessions_purged"


def _sanitize_details(details: dict[str, Any]) -> dict[str, Any]:
    sanitized = {}
    for key, value in details.items():
        key_lower = key.lower()

        if any(sensitive in key_lower for sensitive in SENSITIVE_KEYS):
            sanitized[key] = "***REDACTED***"
        else:
            sanitized[key] = value

    return sanitized


class AuditLogger:
    """Writes audit events to the log and the ``audit_logs`` table.

    A storage failure never interrupts the request that produced the event;
    it is logged and dropped.
    """

    def __init__(self, session_factory: Callable[[], Session] | None = None) -> None:
        self._session_factory = session_factory

    def log(
        self,
        action: AuditAction,
        user_id: int | None = None,
        ip_address: str | None = None,
        details: dict[str, Any] | None = None,
        success: bool = True,
    ) -> None:
        safe_details = _sanitize_details(details) if details else {}

        log_message = (
            f"AUDIT: {action.value} | "
            f"user_id={user_id} | "
            f"ip={ip_address} | "
            f"success={success}"
        )
        if safe_details:
            log_message += f" | details={safe_details}"

        if success:
            logger.info(log_message)
        else:
            logger.warning(log_message)

        self._store(
            AuditLog(
                timestamp=datetime.now(UTC),
                action=action.value,
                user_id=user_id,
                ip_address=ip_address,
                success=success,
                details_json=json.dumps(safe_details, default=str) if safe_details else None,
            )
        )

    def _store(self, entry: AuditLog) -> None:
        try:
            with session_scope(self._session_factory) as session:
                session.add(entry)
        except SQLAlchemyError as exc:
            logger.warning(f"audit: failed to store entry {entry.action}: {type(exc).__name__}")


__all__ = ["AuditAction", "AuditLogger"]
