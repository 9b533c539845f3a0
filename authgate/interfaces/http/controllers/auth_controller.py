# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Any

from flask import Blueprint, Response, redirect, request
from pydantic import ValidationError

from authgate.application.use_cases.users.login_user import LoginUserUseCase
from authgate.application.use_cases.users.logout_user import LogoutUserUseCase
from authgate.application.use_cases.users.register_user import RegisterUserUseCase
from authgate.domain.users.exceptions import (
    AccountLockedError,
    InvalidCredentialsError,
    RegistrationError,
)
from authgate.infrastructure.audit import AuditAction, AuditLogger
from authgate.interfaces.http.dto.auth import LoginRequestDTO, RegisterRequestDTO
from authgate.interfaces.http.guard import LOGIN_PATH, client_ip, extract_token
from authgate.shared.config import load_config
from authgate.shared.errors.validation import raise_validation_error
from authgate.shared.logging import logger, set_user_id
from authgate.shared.middleware.csrf import csrf_protect
from authgate.shared.middleware.rate_limit import rate_limit

DEFAULT_LANDING = "/secret"
LOGOUT_LANDING = "/"


def _request_payload() -> dict[str, Any]:
    if request.is_json:
        payload = request.get_json(silent=True)
        return payload if isinstance(payload, dict) else {}
    return request.form.to_dict()


class AuthController:
    def __init__(
        self,
        *,
        register_use_case: RegisterUserUseCase,
        login_use_case: LoginUserUseCase,
        logout_use_case: LogoutUserUseCase,
        audit: AuditLogger,
    ) -> None:
        self._register_use_case = register_use_case
        self._login_use_case = login_use_case
        self._logout_use_case = logout_use_case
        self._audit = audit

    @rate_limit()
    @csrf_protect
    def register(self) -> Response:
        try:
            dto = RegisterRequestDTO.model_validate(_request_payload())
        except ValidationError as exc:
            raise_validation_error(exc)

        try:
            user = self._register_use_case.execute(dto.name, dto.email, dto.password)
        except RegistrationError as exc:
            self._audit.log(
                AuditAction.REGISTER_FAILED,
                ip_address=client_ip(),
                details={"fields": exc.fields},
                success=False,
            )
            raise

        self._audit.log(AuditAction.REGISTER, user_id=user.id, ip_address=client_ip())
        logger.info(f"auth.register: ok user_id={user.id}")
        return redirect(LOGIN_PATH, code=303)

    @rate_limit()
    @csrf_protect
    def login(self) -> Response:
        try:
            dto = LoginRequestDTO.model_validate(_request_payload())
        except ValidationError as exc:
            raise_validation_error(exc)

        ip_address = client_ip()
        try:
            user, token = self._login_use_case.execute(
                dto.email, dto.password, ip_address, previous_token=extract_token() or None
            )
        except AccountLockedError:
            self._audit.log(
                AuditAction.LOGIN_LOCKED,
                ip_address=ip_address,
                details={"email": dto.email},
                success=False,
            )
            raise
        except InvalidCredentialsError:
            self._audit.log(
                AuditAction.LOGIN_FAILED,
                ip_address=ip_address,
                details={"email": dto.email},
                success=False,
            )
            raise

        set_user_id(user.id)
        self._audit.log(AuditAction.LOGIN_SUCCESS, user_id=user.id, ip_address=ip_address)

        security = load_config().security
        response = redirect(dto.next or DEFAULT_LANDING, code=303)
        response.set_cookie(
            security.session_cookie_name,
            token,
            httponly=True,
            samesite=security.cookie_samesite,
            secure=security.cookie_secure,
            max_age=security.session_lifetime or None,
            path="/",
        )
        logger.info(f"auth.login: ok user_id={user.id}")
        return response

    @csrf_protect
    def logout(self) -> Response:
        token = extract_token()
        self._logout_use_case.execute(token)

        self._audit.log(
            AuditAction.LOGOUT,
            ip_address=client_ip(),
            details={"had_token": bool(token)},
        )

        response = redirect(LOGOUT_LANDING, code=303)
        response.delete_cookie(load_config().security.session_cookie_name, path="/")
        logger.info("auth.logout: ok")
        return response

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("auth", __name__)
        bp.add_url_rule("/register", view_func=self.register, methods=["POST"])
        bp.add_url_rule("/login", view_func=self.login, methods=["POST"])
        bp.add_url_rule("/logout", view_func=self.logout, methods=["GET", "POST"])
        return bp
