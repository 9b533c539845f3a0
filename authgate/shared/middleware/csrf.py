# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import hmac
import secrets
from collections.abc import Callable
from functools import wraps

from flask import Flask, jsonify, request

from authgate.shared.config import load_config
from authgate.shared.logging import logger

SAFE_METHODS: tuple[str, ...] = ("GET", "HEAD", "OPTIONS")
CSRF_COOKIE = "csrf_token"


def _is_enabled() -> bool:
    return load_config().security.enable_csrf


def configure_csrf(app: Flask) -> None:
    @app.after_request
    def _ensure_csrf_cookie(resp):
        if not _is_enabled() or request.method not in SAFE_METHODS:
            return resp
        if request.cookies.get(CSRF_COOKIE):
            return resp
        config = load_config()
        resp.set_cookie(
            CSRF_COOKIE,
            secrets.token_urlsafe(32),
            httponly=False,
            samesite=config.security.cookie_samesite,
            secure=config.security.cookie_secure,
            max_age=config.security.session_lifetime or None,
        )
        return resp


def _submitted_token() -> str:
    header = request.headers.get("X-CSRF-Token")
    if header:
        return header.strip()
    return (request.form.get(CSRF_COOKIE) or "").strip()


def csrf_protect(f: Callable):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if not _is_enabled() or request.method in SAFE_METHODS:
            return f(*args, **kwargs)
        submitted = _submitted_token()
        cookie = (request.cookies.get(CSRF_COOKIE) or "").strip()
        if not submitted or not cookie or not hmac.compare_digest(submitted, cookie):
            logger.warning(f"csrf: rejected {request.method} {request.path}")
            return jsonify({"error": "csrf"}), 403
        return f(*args, **kwargs)

    return wrapper


__all__ = ["CSRF_COOKIE", "configure_csrf", "csrf_protect"]
