# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from authgate.shared.errors.base import DomainError, ValidationError
from authgate.shared.errors.validation import format_field_errors


class RegistrationError(ValidationError):
    """Registration rejected for missing or conflicting fields."""

    def __init__(self, errors: list[tuple[str, str]]) -> None:
        super().__init__(context=format_field_errors(errors))


class UserAlreadyExistsError(RegistrationError):
    def __init__(self) -> None:
        super().__init__([("email", "duplicate")])


class InvalidCredentialsError(DomainError):
    code = "invalid_credentials"
    status = HTTPStatus.UNAUTHORIZED


class AuthorizationError(DomainError):
    code = "unauthorized"
    status = HTTPStatus.UNAUTHORIZED


class AccountLockedError(DomainError):
    code = "account_locked"
    status = HTTPStatus.TOO_MANY_REQUESTS

    def __init__(self, lockout_remaining: float = 0) -> None:
        super().__init__(context={"lockout_remaining_seconds": round(lockout_remaining, 1)})
