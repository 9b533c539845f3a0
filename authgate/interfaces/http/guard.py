# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Login gate applied by the routing layer in front of protected views."""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from urllib.parse import urlencode

from flask import g, redirect, request

from authgate.application.services.session_guard import SessionGuard
from authgate.domain.users.exceptions import AuthorizationError
from authgate.infrastructure.audit import AuditAction, AuditLogger
from authgate.shared.config import load_config
from authgate.shared.logging import logger, set_user_id

LOGIN_PATH = "/login"


def client_ip() -> str | None:
    # ProxyFix rewrites remote_addr when PROXY_FIX_HOPS is set
    return request.remote_addr


def extract_token() -> str:
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        token = auth[7:].strip()
        if token:
            return token
    return request.cookies.get(load_config().security.session_cookie_name, "")


def login_redirect():
    target = LOGIN_PATH
    if request.method == "GET":
        target = f"{LOGIN_PATH}?{urlencode({'next': request.full_path.rstrip('?')})}"
    return redirect(target, code=303)


def login_required(guard: SessionGuard, *, audit: AuditLogger | None = None):
    def decorator(view: Callable):
        @wraps(view)
        def inner(*args, **kwargs):
            token = extract_token()
            try:
                user = guard.require_authenticated(token)
            except AuthorizationError:
                logger.info(f"guard: denied {request.method} {request.path}")
                if audit is not None:
                    audit.log(
                        AuditAction.ACCESS_DENIED,
                        ip_address=client_ip(),
                        details={"path": request.path, "had_token": bool(token)},
                        success=False,
                    )
                response = login_redirect()
                if token:
                    response.delete_cookie(load_config().security.session_cookie_name)
                return response

            g.user_id = user.id
            set_user_id(user.id)
            g.current_user = user
            return view(*args, **kwargs)

        return inner

    return decorator


__all__ = ["LOGIN_PATH", "client_ip", "extract_token", "login_redirect", "login_required"]
