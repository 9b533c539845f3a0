# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .authenticator import Authenticator
from .credential_store import CredentialStore
from .password_hashing import WerkzeugPasswordHasher
from .session_guard import SessionGuard

__all__ = ["Authenticator", "CredentialStore", "SessionGuard", "WerkzeugPasswordHasher"]
