# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import secrets
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from authgate.domain.users.entities import Session, User
from authgate.domain.users.exceptions import AuthorizationError
from authgate.domain.users.repositories import SessionRepository, UserRepository
from authgate.shared.logging import logger

TOKEN_BYTES = 32


class SessionGuard:
    """Issues, validates and revokes opaque session tokens.

    A session is ``Authenticated`` until it is revoked (``LoggedOut``) or
    reaches ``expires_at`` (``Expired``); both end states gate exactly like an
    anonymous request.
    """

    def __init__(
        self,
        *,
        sessions: SessionRepository,
        users: UserRepository,
        lifetime: timedelta | None = timedelta(days=7),
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._sessions = sessions
        self._users = users
        self._lifetime = lifetime if lifetime else None
        self._clock = clock

    def create_session(self, user: User) -> str:
        now = self._clock()
        expires_at = now + self._lifetime if self._lifetime else None
        token = secrets.token_urlsafe(TOKEN_BYTES)
        self._sessions.add(
            Session(token=token, user_id=user.id, created_at=now, expires_at=expires_at)
        )
        logger.info(f"session.create: user_id={user.id} expires_at={expires_at}")
        return token

    def validate(self, token: str | None) -> User | None:
        if not token:
            return None
        session = self._sessions.get(token)
        if session is None or not session.is_active(self._clock()):
            return None
        # The bound user may have been deleted since the session was issued.
        return self._users.find_by_id(session.user_id)

    def destroy_session(self, token: str | None) -> None:
        if not token:
            return
        self._sessions.revoke(token, self._clock())
        logger.info("session.destroy: ok")

    def require_authenticated(self, token: str | None) -> User:
        user = self.validate(token)
        if user is None:
            raise AuthorizationError()
        return user

    def rotate(self, previous_token: str | None, user: User) -> str:
        self.destroy_session(previous_token)
        return self.create_session(user)

    def purge_expired(self, now: datetime | None = None) -> int:
        removed = self._sessions.purge(now or self._clock())
        logger.info(f"session.purge: removed={removed}")
        return removed
