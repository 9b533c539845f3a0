# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .entities import Session, SessionState, User, UserCredentials, normalize_email
from .exceptions import (
    AccountLockedError,
    AuthorizationError,
    InvalidCredentialsError,
    RegistrationError,
    UserAlreadyExistsError,
)
from .repositories import PasswordHasher, SessionRepository, UserRepository

__all__ = [
    "AccountLockedError",
    "AuthorizationError",
    "InvalidCredentialsError",
    "PasswordHasher",
    "RegistrationError",
    "Session",
    "SessionRepository",
    "SessionState",
    "User",
    "UserAlreadyExistsError",
    "UserCredentials",
    "UserRepository",
    "normalize_email",
]
