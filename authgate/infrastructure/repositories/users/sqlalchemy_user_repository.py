# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from authgate.domain.users.entities import Session as DomainSession
from authgate.domain.users.entities import User as DomainUser
from authgate.domain.users.entities import UserCredentials, normalize_email
from authgate.domain.users.exceptions import UserAlreadyExistsError
from authgate.domain.users.repositories import SessionRepository, UserRepository
from authgate.infrastructure.db.models import SessionToken, User
from authgate.infrastructure.db.session import session_scope
from authgate.shared.errors import StorageError
from authgate.shared.logging import logger


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands timestamps back without tzinfo
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def _user_to_domain(row: User) -> DomainUser:
    return DomainUser(
        id=row.id,
        name=row.name,
        email=row.email,
        created_at=_as_utc(row.created_at) or datetime.now(UTC),
    )


def _session_to_domain(row: SessionToken) -> DomainSession:
    return DomainSession(
        token=row.token,
        user_id=row.user_id,
        created_at=_as_utc(row.created_at) or datetime.now(UTC),
        expires_at=_as_utc(row.expires_at),
        revoked_at=_as_utc(row.revoked_at),
    )


class _Repository:
    def __init__(self, session_factory: Callable[[], Session] | None = None) -> None:
        self._session_factory = session_factory

    @contextmanager
    def _scope(self, operation: str) -> Iterator[Session]:
        try:
            with session_scope(self._session_factory) as session:
                yield session
        except IntegrityError:
            raise
        except SQLAlchemyError as exc:
            logger.error(f"{operation}: {type(exc).__name__}")
            raise StorageError(operation) from exc


class SqlAlchemyUserRepository(_Repository, UserRepository):
    def find_by_email(self, email: str) -> DomainUser | None:
        credentials = self.find_credentials_by_email(email)
        return credentials.user if credentials else None

    def find_credentials_by_email(self, email: str) -> UserCredentials | None:
        with self._scope("users.find_by_email") as session:
            row = session.scalars(
                select(User).where(User.email_normalized == normalize_email(email))
            ).first()
            if not row:
                return None
            return UserCredentials(user=_user_to_domain(row), password_hash=row.password_hash)

    def find_by_id(self, user_id: int) -> DomainUser | None:
        with self._scope("users.find_by_id") as session:
            row = session.get(User, user_id)
            return _user_to_domain(row) if row else None

    def add(
        self, name: str, email: str, password_hash: str, created_at: datetime
    ) -> DomainUser:
        try:
            with self._scope("users.add") as session:
                row = User(
                    name=name,
                    email=email,
                    email_normalized=normalize_email(email),
                    password_hash=password_hash,
                    created_at=created_at,
                )
                session.add(row)
                session.flush()
                return _user_to_domain(row)
        except IntegrityError as exc:
            logger.info("users.add: unique email constraint rejected insert")
            raise UserAlreadyExistsError() from exc


class SqlAlchemySessionRepository(_Repository, SessionRepository):
    def add(self, session: DomainSession) -> DomainSession:
        with self._scope("sessions.add") as db:
            db.add(
                SessionToken(
                    user_id=session.user_id,
                    token=session.token,
                    created_at=session.created_at,
                    expires_at=session.expires_at,
                )
            )
        return session

    def get(self, token: str) -> DomainSession | None:
        with self._scope("sessions.get") as db:
            row = db.scalars(select(SessionToken).where(SessionToken.token == token)).first()
            return _session_to_domain(row) if row else None

    def revoke(self, token: str, revoked_at: datetime) -> None:
        with self._scope("sessions.revoke") as db:
            db.execute(
                update(SessionToken)
                .where(SessionToken.token == token, SessionToken.revoked_at.is_(None))
                .values(revoked_at=revoked_at)
            )

    def purge(self, now: datetime) -> int:
        with self._scope("sessions.purge") as db:
            result = db.execute(
                delete(SessionToken).where(
                    or_(
                        SessionToken.revoked_at.is_not(None),
                        SessionToken.expires_at <= now,
                    )
                )
            )
            return int(result.rowcount or 0)
