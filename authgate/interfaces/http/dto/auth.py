from __future__ import annotations

import re
from urllib.parse import urlsplit

from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError

from authgate.shared.errors.validation_types import ValidationErrorType

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_UNSAFE_CHAR_RE = re.compile(r"[\s\x00-\x1f\x7f]")


def _require_text(value: str, label: str) -> str:
    if not value:
        raise PydanticCustomError(
            ValidationErrorType.MISSING.value,
            f"{label} cannot be empty",
            {},
        )
    return value


def is_safe_redirect(target: str | None) -> bool:
    """Accept only same-origin absolute paths such as ``/secret?tab=1``."""
    if not target or not target.startswith("/") or target.startswith("//"):
        return False
    # Browsers drop tabs and newlines, so "/\t/host" would become "//host"
    if "\\" in target or _UNSAFE_CHAR_RE.search(target):
        return False
    parts = urlsplit(target)
    return not parts.scheme and not parts.netloc


class RegisterRequestDTO(BaseModel):
    name: str = Field(max_length=128)
    email: str = Field(max_length=320)
    password: str = Field(max_length=128)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _require_text(value.strip(), "Name")

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        value = _require_text(value.strip(), "Email")
        if not _EMAIL_RE.match(value):
            raise PydanticCustomError(
                ValidationErrorType.EMAIL_INVALID.value,
                "Email address is not valid",
                {},
            )
        return value

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        return _require_text(value, "Password")


class LoginRequestDTO(BaseModel):
    email: str = Field(min_length=1, max_length=320)
    password: str = Field(min_length=1, max_length=128)
    next: str | None = None

    @field_validator("next")
    @classmethod
    def validate_next(cls, value: str | None) -> str | None:
        if value is None or value == "":
            return None
        if not is_safe_redirect(value):
            raise PydanticCustomError(
                ValidationErrorType.NEXT_INVALID.value,
                "Redirect target must be a relative path",
                {},
            )
        return value


class UserDTO(BaseModel):
    id: int
    name: str
    email: str
