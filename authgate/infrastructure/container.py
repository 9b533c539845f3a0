# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from datetime import timedelta
from functools import cached_property

from sqlalchemy.orm import Session

from authgate.application.services.authenticator import Authenticator
from authgate.application.services.credential_store import CredentialStore
from authgate.application.services.password_hashing import WerkzeugPasswordHasher
from authgate.application.services.session_guard import SessionGuard
from authgate.application.use_cases.users.login_user import LoginUserUseCase
from authgate.application.use_cases.users.logout_user import LogoutUserUseCase
from authgate.application.use_cases.users.register_user import RegisterUserUseCase
from authgate.infrastructure.audit import AuditLogger
from authgate.infrastructure.auth.login_attempts import LoginAttemptsTracker
from authgate.infrastructure.repositories.users.sqlalchemy_user_repository import (
    SqlAlchemySessionRepository,
    SqlAlchemyUserRepository,
)
from authgate.interfaces.http.controllers.auth_controller import AuthController
from authgate.interfaces.http.controllers.pages_controller import PagesController
from authgate.shared.config import AppConfig, load_config


class Container:
    def __init__(
        self,
        config: AppConfig | None = None,
        session_factory: Callable[[], Session] | None = None,
    ) -> None:
        self.config = config or load_config()
        self._session_factory = session_factory

    @cached_property
    def password_hasher(self) -> WerkzeugPasswordHasher:
        return WerkzeugPasswordHasher(method=self.config.security.password_hash_method)

    @cached_property
    def user_repository(self) -> SqlAlchemyUserRepository:
        return SqlAlchemyUserRepository(self._session_factory)

    @cached_property
    def session_repository(self) -> SqlAlchemySessionRepository:
        return SqlAlchemySessionRepository(self._session_factory)

    @cached_property
    def audit_logger(self) -> AuditLogger:
        return AuditLogger(self._session_factory)

    @cached_property
    def login_attempts(self) -> LoginAttemptsTracker:
        security = self.config.security
        return LoginAttemptsTracker(
            max_attempts=security.login_max_attempts,
            lockout_duration=security.login_lockout_seconds,
            attempt_window=security.login_attempt_window,
        )

    # Core services

    @cached_property
    def credential_store(self) -> CredentialStore:
        return CredentialStore(users=self.user_repository, password_hasher=self.password_hasher)

    @cached_property
    def authenticator(self) -> Authenticator:
        return Authenticator(users=self.user_repository, password_hasher=self.password_hasher)

    @cached_property
    def session_guard(self) -> SessionGuard:
        lifetime = self.config.security.session_lifetime
        return SessionGuard(
            sessions=self.session_repository,
            users=self.user_repository,
            lifetime=timedelta(seconds=lifetime) if lifetime else None,
        )

    # Use cases

    @cached_property
    def register_user_use_case(self) -> RegisterUserUseCase:
        return RegisterUserUseCase(credentials=self.credential_store)

    @cached_property
    def login_user_use_case(self) -> LoginUserUseCase:
        return LoginUserUseCase(
            authenticator=self.authenticator,
            sessions=self.session_guard,
            attempts=self.login_attempts,
        )

    @cached_property
    def logout_user_use_case(self) -> LogoutUserUseCase:
        return LogoutUserUseCase(sessions=self.session_guard)

    # Controllers

    @cached_property
    def auth_controller(self) -> AuthController:
        return AuthController(
            register_use_case=self.register_user_use_case,
            login_use_case=self.login_user_use_case,
            logout_use_case=self.logout_user_use_case,
            audit=self.audit_logger,
        )

    @cached_property
    def pages_controller(self) -> PagesController:
        return PagesController(sessions=self.session_guard, audit=self.audit_logger)
