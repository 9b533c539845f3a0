# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import time
from collections import OrderedDict, deque
from collections.abc import Callable
from dataclasses import dataclass
from functools import wraps
from threading import Lock

from flask import Request, jsonify, request

from authgate.shared.config import load_config
from authgate.shared.logging import logger


@dataclass
class Bucket:
    timestamps: deque[float]


class InMemoryRateLimiter:
    def __init__(
        self,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._limit = max(1, int(limit))
        self._window = max(0.1, float(window_seconds))
        self._clock = clock
        self._lock = Lock()
        # Ordered by latest hit, so idle buckets sit at the front
        self._buckets: OrderedDict[str, Bucket] = OrderedDict()

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window(self) -> float:
        return self._window

    def allow(self, key: str) -> bool:
        now = self._clock()
        with self._lock:
            self._drop_idle(now)
            bucket = self._buckets.pop(key, None) or Bucket(deque(maxlen=self._limit))
            self._buckets[key] = bucket
            # Drop old
            while bucket.timestamps and (now - bucket.timestamps[0]) > self._window:
                bucket.timestamps.popleft()
            if len(bucket.timestamps) >= self._limit:
                return False
            bucket.timestamps.append(now)
            return True

    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._buckets)

    def _drop_idle(self, now: float) -> None:
        while self._buckets:
            bucket = next(iter(self._buckets.values()))
            if bucket.timestamps and (now - bucket.timestamps[-1]) <= self._window:
                break
            self._buckets.popitem(last=False)

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()


def _client_key(req: Request) -> str:
    # remote_addr only; proxy headers are trusted through ProxyFix in create_app
    return req.remote_addr or "unknown"


def rate_limit(limit: int | None = None, window_seconds: float | None = None):
    config = load_config()
    limiter = InMemoryRateLimiter(
        limit or config.security.rate_limit_requests,
        window_seconds or config.security.rate_limit_window,
    )

    def decorator(f: Callable):
        @wraps(f)
        def wrapper(*args, **kwargs):
            if not load_config().security.enable_rate_limit:
                return f(*args, **kwargs)
            key = f"{request.path}:{_client_key(request)}"
            if not limiter.allow(key):
                logger.warning(f"rate_limit: rejected {request.method} {request.path}")
                return jsonify({"error": "rate_limited"}), 429
            return f(*args, **kwargs)

        wrapper.limiter = limiter  # type: ignore[attr-defined]
        return wrapper

    return decorator


__all__ = ["InMemoryRateLimiter", "rate_limit"]
