"""loguru setup for authgate.

Every record carries the request correlation id and, once the login gate has
resolved a session, the user id. Records pass through the sanitizing filter
before reaching any sink, so passwords, hashes and session tokens never hit
stderr or the log file.
"""

from __future__ import annotations

import logging
import os
import sys
from contextvars import ContextVar

from loguru import logger as _logger

from authgate.shared.config import LoggingConfig

from .sensitive_filter import sanitize_record

_FMT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<lvl>{level:<8}</lvl> | "
    "<magenta>{extra[correlation_id]}</magenta> | "
    "<yellow>user={extra[user_id]}</yellow> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<lvl>{message}</lvl>"
)

_CORRELATION_ID: ContextVar[str] = ContextVar("correlation_id", default="-")
_USER_ID: ContextVar[str] = ContextVar("user_id", default="-")

_logger.configure(extra={"correlation_id": "-", "user_id": "-"})

_QUIET_LOGGERS = {"werkzeug": logging.INFO, "sqlalchemy.pool": logging.WARNING}


def _context() -> dict[str, str]:
    return {"correlation_id": _CORRELATION_ID.get(), "user_id": _USER_ID.get()}


def _default_log_file() -> str:
    root = os.path.abspath(os.path.join(os.path.dirname(__file__), "../../instance"))
    return os.path.join(root, "app.log")


class _InterceptHandler(logging.Handler):
    """Routes stdlib logging (werkzeug, sqlalchemy) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = _logger.level(record.levelname).name
        except ValueError:
            level = str(record.levelno)
        _logger.opt(depth=6, exception=record.exc_info).bind(**_context()).log(
            level, record.getMessage()
        )


class ContextualLogger:
    """Proxy for loguru that binds the current request context on each call."""

    def __getattr__(self, name):  # pragma: no cover
        return getattr(_logger.bind(**_context()), name)


def set_correlation_id(value: str | None) -> None:
    _CORRELATION_ID.set(value or "-")


def get_correlation_id() -> str:
    return _CORRELATION_ID.get()


def set_user_id(user_id: int | None) -> None:
    _USER_ID.set("-" if user_id is None else str(user_id))


def clear_correlation_id() -> None:
    _CORRELATION_ID.set("-")
    _USER_ID.set("-")


def setup_logging(config: LoggingConfig | None = None, *, debug_mode: bool = False) -> None:
    config = config or LoggingConfig()  # type: ignore[call-arg]
    level = (config.level or ("DEBUG" if debug_mode else "INFO")).upper()
    log_file = config.file or _default_log_file()
    os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)

    _logger.remove()
    _logger.add(
        sys.stderr,
        level=level,
        format=_FMT,
        filter=sanitize_record,
        colorize=not config.serialize,
        serialize=config.serialize,
        backtrace=False,
        diagnose=False,
    )
    _logger.add(
        log_file,
        level=level,
        format=_FMT,
        filter=sanitize_record,
        colorize=False,
        serialize=config.serialize,
        rotation=config.rotation,
        retention=config.retention,
        backtrace=False,
        diagnose=False,
        enqueue=True,
        encoding="utf-8",
    )

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    for name, quiet_level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if debug_mode else logging.WARNING
    )


logger = ContextualLogger()

__all__ = [
    "logger",
    "setup_logging",
    "set_correlation_id",
    "set_user_id",
    "clear_correlation_id",
    "get_correlation_id",
]
