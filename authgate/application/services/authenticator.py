# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import secrets
from threading import Lock

from authgate.domain.users.entities import User
from authgate.domain.users.repositories import PasswordHasher, UserRepository
from authgate.shared.logging import logger


class Authenticator:
    """Checks an email/password pair against the stored hash.

    Unknown emails are verified against a throwaway hash so both failure
    paths cost one slow hash verification and return the same ``None``.
    """

    def __init__(self, *, users: UserRepository, password_hasher: PasswordHasher) -> None:
        self._users = users
        self._password_hasher = password_hasher
        self._dummy_hash: str | None = None
        self._dummy_lock = Lock()

    def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            with self._dummy_lock:
                if self._dummy_hash is None:
                    self._dummy_hash = self._password_hasher.hash(secrets.token_urlsafe(16))
        return self._dummy_hash

    def authenticate(self, email: str, password: str) -> User | None:
        """Return the user on a match, else None.

        Blank input and malformed stored hashes are no match. A ``StorageError``
        from the repository propagates so an outage never reads as a wrong
        password.
        """
        if not email or not email.strip() or not password:
            self._password_hasher.verify(password or "", self._get_dummy_hash())
            return None

        credentials = self._users.find_credentials_by_email(email)
        if credentials is None:
            self._password_hasher.verify(password, self._get_dummy_hash())
            logger.debug("authenticator: no match")
            return None

        if not self._password_hasher.verify(password, credentials.password_hash):
            logger.debug("authenticator: no match")
            return None

        return credentials.user

    def warm_up(self) -> None:
        self._get_dummy_hash()
