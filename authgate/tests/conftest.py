from __future__ import annotations

import os
import tempfile
from dataclasses import replace
from datetime import UTC, datetime, timedelta

_TMP_DIR = tempfile.mkdtemp(prefix="authgate-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'authgate.db')}"
os.environ["LOG_FILE"] = os.path.join(_TMP_DIR, "app.log")
os.environ["ENABLE_RATE_LIMIT"] = "false"
os.environ["ENABLE_CSRF"] = "false"
os.environ["APP_ENV"] = "test"
# Cheap iterations keep the suite fast; the scrypt default is covered separately.
os.environ["PASSWORD_HASH_METHOD"] = "pbkdf2:sha256:1000"

import pytest  # noqa: E402

from authgate.domain.users.entities import (  # noqa: E402
    Session,
    User,
    UserCredentials,
    normalize_email,
)
from authgate.domain.users.exceptions import UserAlreadyExistsError  # noqa: E402


class FakeClock:
    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class InMemoryUserRepository:
    def __init__(self) -> None:
        self._rows: dict[str, UserCredentials] = {}
        self._seq = 1

    def find_by_email(self, email: str) -> User | None:
        credentials = self.find_credentials_by_email(email)
        return credentials.user if credentials else None

    def find_credentials_by_email(self, email: str) -> UserCredentials | None:
        return self._rows.get(normalize_email(email))

    def find_by_id(self, user_id: int) -> User | None:
        for credentials in self._rows.values():
            if credentials.user.id == user_id:
                return credentials.user
        return None

    def add(self, name: str, email: str, password_hash: str, created_at: datetime) -> User:
        key = normalize_email(email)
        if key in self._rows:
            raise UserAlreadyExistsError()
        user = User(id=self._seq, name=name, email=email, created_at=created_at)
        self._seq += 1
        self._rows[key] = UserCredentials(user=user, password_hash=password_hash)
        return user

    def delete(self, user_id: int) -> None:
        for key, credentials in list(self._rows.items()):
            if credentials.user.id == user_id:
                del self._rows[key]

    def stored_hash(self, email: str) -> str:
        return self._rows[normalize_email(email)].password_hash


class InMemorySessionRepository:
    def __init__(self) -> None:
        self.rows: dict[str, Session] = {}

    def add(self, session: Session) -> Session:
        self.rows[session.token] = session
        return session

    def get(self, token: str) -> Session | None:
        return self.rows.get(token)

    def revoke(self, token: str, revoked_at: datetime) -> None:
        session = self.rows.get(token)
        if session is not None and session.revoked_at is None:
            self.rows[token] = replace(session, revoked_at=revoked_at)

    def purge(self, now: datetime) -> int:
        dead = [token for token, session in self.rows.items() if not session.is_active(now)]
        for token in dead:
            del self.rows[token]
        return len(dead)


class DeterministicHasher:
    def __init__(self) -> None:
        self._salt = 0
        self.verify_calls = 0

    def hash(self, password: str) -> str:
        self._salt += 1
        return f"hashed:{self._salt}:{password}"

    def verify(self, password: str, hashed: str) -> bool:
        self.verify_calls += 1
        prefix, _, rest = hashed.partition(":")
        if prefix != "hashed":
            return False
        _, _, stored = rest.partition(":")
        return stored == password


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def users() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture()
def sessions() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@pytest.fixture()
def hasher() -> DeterministicHasher:
    return DeterministicHasher()


@pytest.fixture()
def database():
    from authgate.infrastructure.db import ENGINE, Base, init_db

    Base.metadata.drop_all(bind=ENGINE)
    init_db()
    yield ENGINE
    Base.metadata.drop_all(bind=ENGINE)
