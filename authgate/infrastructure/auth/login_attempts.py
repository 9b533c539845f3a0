# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import time
from collections import OrderedDict, deque
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock

from authgate.domain.users.entities import normalize_email
from authgate.shared.logging import logger


@dataclass
class LoginAttempt:
    timestamp: float
    success: bool
    ip_address: str | None = None


class LoginAttemptsTracker:
    """Sliding-window failure counter keyed by normalized email.

    Unknown emails are tracked the same way as registered ones so a lockout
    says nothing about whether an account exists. Keys are kept in order of
    their latest failure; keys whose failures have all left the window are
    dropped from the old end on every write, and at most ``max_tracked_keys``
    are held at once.
    """

    def __init__(
        self,
        *,
        max_attempts: int = 5,
        lockout_duration: float = 15 * 60,
        attempt_window: float = 60 * 60,
        max_tracked_keys: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_attempts = max_attempts
        self.lockout_duration = lockout_duration
        self.attempt_window = attempt_window
        self.max_tracked_keys = max(1, max_tracked_keys)
        self._clock = clock
        self._attempts: OrderedDict[str, deque[LoginAttempt]] = OrderedDict()
        self._lock = Lock()
        # key -> unlock_time; insertion order is unlock order
        self._lockouts: OrderedDict[str, float] = OrderedDict()

    def record_attempt(self, email: str, success: bool, ip_address: str | None = None) -> None:
        key = normalize_email(email)
        with self._lock:
            if success:
                self._attempts.pop(key, None)
                self._lockouts.pop(key, None)
                return

            now = self._clock()
            attempts = self._attempts.pop(key, None)
            if attempts is None:
                attempts = deque(maxlen=self.max_attempts * 2)
            attempts.append(LoginAttempt(timestamp=now, success=False, ip_address=ip_address))
            self._attempts[key] = attempts
            self._check_and_lock(key, now)
            self._evict(now)

    def is_locked(self, email: str) -> bool:
        return self.get_lockout_remaining(email) > 0

    def get_lockout_remaining(self, email: str) -> float:
        key = normalize_email(email)
        with self._lock:
            unlock_time = self._lockouts.get(key)
            if unlock_time is None:
                return 0.0

            remaining = unlock_time - self._clock()
            if remaining <= 0:
                del self._lockouts[key]
                self._attempts.pop(key, None)
                logger.info("login_attempts: lockout expired")
                return 0.0
            return remaining

    def get_failed_attempts_count(self, email: str) -> int:
        key = normalize_email(email)
        with self._lock:
            return len(self._recent_failures(key, self._clock()))

    def clear_attempts(self, email: str) -> None:
        key = normalize_email(email)
        with self._lock:
            self._attempts.pop(key, None)
            self._lockouts.pop(key, None)

    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._attempts) + len(
                [key for key in self._lockouts if key not in self._attempts]
            )

    def _recent_failures(self, key: str, now: float) -> list[LoginAttempt]:
        attempts = self._attempts.get(key)
        if not attempts:
            return []
        cutoff = now - self.attempt_window
        return [attempt for attempt in attempts if not attempt.success and attempt.timestamp > cutoff]

    def _check_and_lock(self, key: str, now: float) -> None:
        failed_attempts = self._recent_failures(key, now)
        if len(failed_attempts) < self.max_attempts or self.lockout_duration <= 0:
            return

        self._lockouts.pop(key, None)
        self._lockouts[key] = now + self.lockout_duration
        # The lockout carries the state from here on
        self._attempts.pop(key, None)
        ips = {attempt.ip_address for attempt in failed_attempts if attempt.ip_address}
        logger.warning(
            f"login_attempts: LOCKED failed_attempts={len(failed_attempts)} "
            f"lockout_duration={self.lockout_duration}s "
            f"ip_addresses={sorted(ips) if ips else 'unknown'}"
        )

    def _evict(self, now: float) -> None:
        cutoff = now - self.attempt_window
        while self._attempts:
            oldest_key, attempts = next(iter(self._attempts.items()))
            if attempts and attempts[-1].timestamp > cutoff:
                break
            del self._attempts[oldest_key]

        while self._lockouts:
            oldest_key, unlock_time = next(iter(self._lockouts.items()))
            if unlock_time > now:
                break
            del self._lockouts[oldest_key]

        overflow = len(self._attempts) - self.max_tracked_keys
        if overflow > 0:
            for _ in range(overflow):
                self._attempts.popitem(last=False)
            logger.warning(f"login_attempts: evicted {overflow} key(s) over capacity")


__all__ = ["LoginAttempt", "LoginAttemptsTracker"]
