"""Use-case for ending a session."""

from __future__ import annotations

from authgate.application.services.session_guard import SessionGuard


class LogoutUserUseCase:
    def __init__(self, *, sessions: SessionGuard) -> None:
        self._sessions = sessions

    def execute(self, token: str | None) -> None:
        if token:
            self._sessions.destroy_session(token)
