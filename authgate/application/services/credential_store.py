# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from authgate.domain.users.entities import User
from authgate.domain.users.exceptions import RegistrationError, UserAlreadyExistsError
from authgate.domain.users.repositories import PasswordHasher, UserRepository
from authgate.shared.logging import logger


class CredentialStore:
    """Owns user identity records.

    Plaintext passwords are hashed before any storage call and are never
    logged. The unique index on the normalized email is the final arbiter
    for concurrent registrations of the same address.
    """

    def __init__(
        self,
        *,
        users: UserRepository,
        password_hasher: PasswordHasher,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._users = users
        self._password_hasher = password_hasher
        self._clock = clock

    def register(self, name: str, email: str, password: str) -> User:
        name = (name or "").strip()
        email = (email or "").strip()

        errors: list[tuple[str, str]] = []
        if not name:
            errors.append(("name", "missing"))
        if not email:
            errors.append(("email", "missing"))
        if not password:
            errors.append(("password", "missing"))
        if errors:
            raise RegistrationError(errors)

        if self._users.find_by_email(email) is not None:
            raise UserAlreadyExistsError()

        hashed = self._password_hasher.hash(password)
        user = self._users.add(
            name=name, email=email, password_hash=hashed, created_at=self._clock()
        )
        logger.info(f"credentials.register: created user_id={user.id}")
        return user

    def find_by_email(self, email: str) -> User | None:
        if not email or not email.strip():
            return None
        return self._users.find_by_email(email)
