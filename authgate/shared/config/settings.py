# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import sys
from functools import lru_cache
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_SECTION_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
    validate_by_name=True,
)


def _parse_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


class DatabaseConfig(BaseSettings):
    url: str = Field("sqlite:///authgate.db", alias="DATABASE_URL")
    pool_size: int = Field(10, ge=1, alias="DATABASE_POOL_SIZE")
    max_overflow: int = Field(5, ge=0, alias="DATABASE_MAX_OVERFLOW")
    pool_timeout: float = Field(30.0, ge=0.1, alias="DATABASE_POOL_TIMEOUT")

    model_config = _SECTION_CONFIG


class SecurityConfig(BaseSettings):
    # Sessions; a lifetime of 0 disables expiry
    session_lifetime: int = Field(7 * 24 * 60 * 60, ge=0, alias="SESSION_LIFETIME")
    session_cookie_name: str = Field("session_token", min_length=1, alias="SESSION_COOKIE_NAME")

    # Cookie security
    cookie_secure: bool = Field(False, alias="COOKIE_SECURE")
    cookie_samesite: str = Field("Lax", alias="COOKIE_SAMESITE")

    # Passwords
    password_hash_method: str = Field("scrypt", alias="PASSWORD_HASH_METHOD")

    # Login lockout
    login_max_attempts: int = Field(5, ge=1, alias="LOGIN_MAX_ATTEMPTS")
    login_lockout_seconds: float = Field(15 * 60, ge=0, alias="LOGIN_LOCKOUT_SECONDS")
    login_attempt_window: float = Field(60 * 60, ge=1, alias="LOGIN_ATTEMPT_WINDOW")

    # CSRF protection
    enable_csrf: bool = Field(False, alias="ENABLE_CSRF")

    # Rate limiting
    enable_rate_limit: bool = Field(True, alias="ENABLE_RATE_LIMIT")
    rate_limit_requests: int = Field(10, ge=1, alias="RL_LIMIT")
    rate_limit_window: float = Field(60.0, ge=0.1, alias="RL_WINDOW")

    # HSTS
    enable_hsts: bool = Field(False, alias="ENABLE_HSTS")

    # Reverse proxies in front of the app; 0 ignores X-Forwarded-* headers
    proxy_fix_hops: int = Field(0, ge=0, alias="PROXY_FIX_HOPS")

    model_config = _SECTION_CONFIG

    @field_validator("cookie_samesite")
    @classmethod
    def _check_samesite(cls, value: str) -> str:
        normalized = value.strip().capitalize()
        if normalized not in ("Strict", "Lax", "None"):
            raise ValueError("cookie_samesite must be Strict, Lax or None")
        return normalized

    @field_validator(
        "cookie_secure", "enable_csrf", "enable_rate_limit", "enable_hsts", mode="before"
    )
    @classmethod
    def _parse_bool(cls, value: str | bool) -> bool:
        return _parse_flag(value)


class LoggingConfig(BaseSettings):
    level: str | None = Field(None, alias="LOG_LEVEL")
    file: str | None = Field(None, alias="LOG_FILE")
    rotation: str = Field("10 MB", alias="LOG_ROTATION")
    retention: str = Field("14 days", alias="LOG_RETENTION")
    serialize: bool = Field(False, alias="LOG_JSON")

    model_config = _SECTION_CONFIG

    @field_validator("serialize", mode="before")
    @classmethod
    def _parse_serialize(cls, value: str | bool) -> bool:
        return _parse_flag(value)


def _logging_config_factory() -> LoggingConfig:
    return LoggingConfig()  # type: ignore[call-arg]


def _database_config_factory() -> DatabaseConfig:
    return DatabaseConfig()  # type: ignore[call-arg]


def _security_config_factory() -> SecurityConfig:
    return SecurityConfig()  # type: ignore[call-arg]


class AppConfig(BaseSettings):
    app_env: str = Field("development", alias="APP_ENV")
    secret_key: str = Field("dev", alias="SECRET_KEY")
    debug_logging: bool = Field(False, alias="DEBUG_LOGGING")

    database: DatabaseConfig = Field(default_factory=_database_config_factory)
    security: SecurityConfig = Field(default_factory=_security_config_factory)
    logging: LoggingConfig = Field(default_factory=_logging_config_factory)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
    )

    @field_validator("debug_logging", mode="before")
    @classmethod
    def _parse_debug_logging(cls, value: str | bool) -> bool:
        return _parse_flag(value)

    @model_validator(mode="after")
    def _validate_production_settings(self) -> "AppConfig":
        if not self.is_production():
            return self

        if self.secret_key in ("dev", "development", "test", ""):
            print(
                "\nCRITICAL SECURITY ERROR: Insecure SECRET_KEY detected in production!\n"
                "   SECRET_KEY must be a strong random value in production.\n"
                "   Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(32))\"\n",
                file=sys.stderr,
            )
            sys.exit(1)

        warnings = []
        if not self.security.enable_csrf:
            warnings.append("CSRF protection is DISABLED")
        if not self.security.cookie_secure:
            warnings.append("Cookie Secure flag is DISABLED (use HTTPS!)")
        if not self.security.enable_hsts:
            warnings.append("HSTS is DISABLED (recommended for HTTPS)")

        if warnings:
            print("\nPRODUCTION SECURITY WARNINGS:", file=sys.stderr)
            for warning in warnings:
                print(f"   {warning}", file=sys.stderr)
            print(
                "   Consider enabling these security features in production.\n",
                file=sys.stderr,
            )

        return self

    def is_production(self) -> bool:
        return self.app_env.lower() in ("production", "prod")


@lru_cache(maxsize=1)
def load_config() -> AppConfig:
    return AppConfig()  # type: ignore[call-arg]


__all__ = ["AppConfig", "DatabaseConfig", "LoggingConfig", "SecurityConfig", "load_config"]
