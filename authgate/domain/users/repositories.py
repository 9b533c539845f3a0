# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from .entities import Session, User, UserCredentials


class UserRepository(Protocol):
    def find_by_email(self, email: str) -> User | None: ...
    def find_credentials_by_email(self, email: str) -> UserCredentials | None: ...
    def find_by_id(self, user_id: int) -> User | None: ...
    def add(self, name: str, email: str, password_hash: str, created_at: datetime) -> User: ...


class SessionRepository(Protocol):
    def add(self, session: Session) -> Session: ...
    def get(self, token: str) -> Session | None: ...
    def revoke(self, token: str, revoked_at: datetime) -> None: ...
    def purge(self, now: datetime) -> int: ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...
    def verify(self, password: str, hashed: str) -> bool: ...
