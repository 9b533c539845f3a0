# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from enum import Enum


class ValidationErrorType(str, Enum):
    MISSING = "missing"
    DUPLICATE = "duplicate"
    EMAIL_INVALID = "email_invalid"
    NEXT_INVALID = "next_invalid"
