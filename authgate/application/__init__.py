# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .services import Authenticator, CredentialStore, SessionGuard, WerkzeugPasswordHasher
from .use_cases.users.login_user import LoginUserUseCase
from .use_cases.users.logout_user import LogoutUserUseCase
from .use_cases.users.register_user import RegisterUserUseCase

__all__ = [
    "Authenticator",
    "CredentialStore",
    "SessionGuard",
    "WerkzeugPasswordHasher",
    "LoginUserUseCase",
    "LogoutUserUseCase",
    "RegisterUserUseCase",
]
