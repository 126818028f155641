"""Structured logging utilities."""

from __future__ import annotations

import logging
import os
import sys
from contextvars import ContextVar
from typing import Any

from loguru import logger as _logger

from .sensitive_filter import sanitize_message, sanitize_record

_FMT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<lvl>{level:<8}</lvl> | "
    "<magenta>{extra[correlation_id]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<lvl>{message}</lvl>"
)

_LEVELS = {"local": "DEBUG", "prod": "INFO"}

_CORRELATION_ID: ContextVar[str] = ContextVar("correlation_id", default="-")


def _format(record: dict[str, Any]) -> str:
    extra = record["extra"]
    extra.setdefault("correlation_id", "-")
    fields = " ".join(
        f"{key}={value}"
        for key, value in extra.items()
        if key not in ("correlation_id", "fields")
    )
    extra["fields"] = f" | {sanitize_message(fields)}" if fields else ""
    return _FMT + "{extra[fields]}\n{exception}"


class _InterceptHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = _logger.level(record.levelname).name
        except ValueError:
            level = str(record.levelno)
        _logger.opt(depth=6, exception=record.exc_info).log(
            level,
            record.getMessage(),
            correlation_id=_CORRELATION_ID.get(),
        )


class ContextualLogger:
    """Proxy for loguru that injects correlation ids via ContextVar."""

    def __getattr__(self, name):  # pragma: no cover
        bound = _logger.bind(correlation_id=_CORRELATION_ID.get())
        return getattr(bound, name)


def set_correlation_id(value: str | None) -> None:
    _CORRELATION_ID.set(value or "-")


def clear_correlation_id() -> None:
    _CORRELATION_ID.set("-")


def setup_logging(env: str = "local") -> None:
    level = os.getenv("LOG_LEVEL") or _LEVELS.get(env, "INFO")
    level = level.upper()

    _logger.remove()
    _logger.add(
        sys.stdout,
        level=level,
        format=_format,
        filter=sanitize_record,
        colorize=env == "local",
        backtrace=False,
        diagnose=False,
    )
    log_file = os.getenv("LOG_FILE")
    if log_file:
        _logger.add(
            log_file,
            level=level,
            format=_format,
            filter=sanitize_record,
            colorize=False,
            backtrace=False,
            diagnose=False,
            enqueue=True,
            encoding="utf-8",
        )

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    logging.getLogger("werkzeug").setLevel(logging.WARNING)


logger = ContextualLogger()

__all__ = [
    "logger",
    "setup_logging",
    "set_correlation_id",
    "clear_correlation_id",
]
