# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


def normalize_email(email: str) -> str:
    return email.strip().lower()


@dataclass(slots=True, frozen=True)
class User:

    id: int
    name: str
    email: str
    created_at: datetime


@dataclass(slots=True, frozen=True)
class UserCredentials:
    """Stored hash for a user; never leaves the authentication path."""

    user: User
    password_hash: str

    def __repr__(self) -> str:
        return f"UserCredentials(user={self.user!r}, password_hash=<redacted>)"


class SessionState(str, Enum):
    AUTHENTICATED = "authenticated"
    LOGGED_OUT = "logged_out"
    EXPIRED = "expired"


@dataclass(slots=True, frozen=True)
class Session:

    token: str
    user_id: int
    created_at: datetime
    expires_at: datetime | None = None
    revoked_at: datetime | None = None

    def state(self, now: datetime) -> SessionState:
        if self.revoked_at is not None:
            return SessionState.LOGGED_OUT
        if self.expires_at is not None and now >= self.expires_at:
            return SessionState.EXPIRED
        return SessionState.AUTHENTICATED

    def is_active(self, now: datetime) -> bool:
        return self.state(now) is SessionState.AUTHENTICATED

    def __repr__(self) -> str:
        return (
            f"Session(token={self.token[:6]}..., user_id={self.user_id}, "
            f"expires_at={self.expires_at}, revoked_at={self.revoked_at})"
        )
