# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from authgate.application.services.authenticator import Authenticator
from authgate.application.services.session_guard import SessionGuard
from authgate.domain.users.entities import User
from authgate.domain.users.exceptions import AccountLockedError, InvalidCredentialsError
from authgate.infrastructure.auth.login_attempts import LoginAttemptsTracker


class LoginUserUseCase:
    def __init__(
        self,
        *,
        authenticator: Authenticator,
        sessions: SessionGuard,
        attempts: LoginAttemptsTracker,
    ) -> None:
        self._authenticator = authenticator
        self._sessions = sessions
        self._attempts = attempts

    def execute(
        self,
        email: str,
        password: str,
        ip_address: str | None = None,
        previous_token: str | None = None,
    ) -> tuple[User, str]:
        remaining = self._attempts.get_lockout_remaining(email)
        if remaining > 0:
            raise AccountLockedError(lockout_remaining=remaining)

        user = self._authenticator.authenticate(email, password)
        if user is None:
            self._attempts.record_attempt(email, success=False, ip_address=ip_address)
            raise InvalidCredentialsError()

        self._attempts.record_attempt(email, success=True, ip_address=ip_address)
        # A token carried over from before login is never promoted.
        token = self._sessions.rotate(previous_token, user)
        return user, token
