# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import re
from functools import lru_cache
from typing import Any

from authgate.shared.config import load_config

SENSITIVE_PATTERNS = [
    # Secrets
    (r"(secret[_-]?key\s*[:=]\s*['\"]?)([a-zA-Z0-9_\-]{8,})(['\"]?)", r"\1***REDACTED***\3"),

    # Tokens
    (r"(bearer\s+)([a-zA-Z0-9_\-\.]{16,})", r"\1***REDACTED***", re.IGNORECASE),
    (r"((?:session[_-]?)?token\s*[:=]\s*['\"]?)([a-zA-Z0-9_\-\.]{16,})(['\"]?)", r"\1***REDACTED***\3", re.IGNORECASE),
    (r"(csrf[_-]?token\s*[:=]\s*['\"]?)([a-zA-Z0-9_\-\.]{16,})(['\"]?)", r"\1***REDACTED***\3", re.IGNORECASE),

    # Passwords and their hashes
    (r"(password(?:_hash)?\s*[:=]\s*['\"]?)([^'\"\s,}]+)(['\"]?)", r"\1***REDACTED***\3", re.IGNORECASE),
    (r"(pwd\s*[:=]\s*['\"]?)([^'\"\s,}]+)(['\"]?)", r"\1***REDACTED***\3", re.IGNORECASE),
    (r"\b(scrypt|pbkdf2):[^\s$]*\$[^\s$]+\$[0-9a-f]+", r"\1:***REDACTED***"),

    # Database URLs with credentials
    (r"(postgres(?:ql)?(?:\+\w+)?|mysql(?:\+\w+)?)://([^:/]+):([^@]+)@", r"\1://\2:***REDACTED***@"),

    # Email addresses (partial masking)
    (r"([a-zA-Z0-9._%+-]+)@([a-zA-Z0-9.-]+\.[a-zA-Z]{2,})", r"***@\2"),

    # Authorization headers
    (r"(authorization\s*:\s*['\"]?)([^'\"]{10,})(['\"]?)", r"\1***REDACTED***\3", re.IGNORECASE),
]


@lru_cache(maxsize=8)
def _cookie_pattern(cookie_name: str) -> re.Pattern[str]:
    return re.compile(rf"({re.escape(cookie_name)}=)([^;\s]+)")


def sanitize_message(message: str, cookie_name: str | None = None) -> str:
    sanitized = message

    for pattern_tuple in SENSITIVE_PATTERNS:
        if len(pattern_tuple) == 2:
            pattern, replacement = pattern_tuple
            flags = 0
        else:
            pattern, replacement, flags = pattern_tuple

        sanitized = re.sub(pattern, replacement, sanitized, flags=flags)

    # Session cookie header values, under whatever name the cookie is configured with
    name = cookie_name or load_config().security.session_cookie_name
    sanitized = _cookie_pattern(name).sub(r"\1***REDACTED***", sanitized)

    return sanitized


def sanitize_record(record: dict[str, Any]) -> bool:
    if "message" in record:
        record["message"] = sanitize_message(record["message"])
    return True
