# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import hashlib
import secrets
import time

from flask import Flask, Response, g, request

from sso.shared.logging import clear_correlation_id, logger, set_correlation_id

_SENSITIVE_HEADERS = {"authorization", "cookie", "x-api-key", "x-auth-token"}


def _sanitize_headers(headers: dict[str, str]) -> dict[str, str]:
    sanitized = {}
    for key, value in headers.items():
        if key.lower() in _SENSITIVE_HEADERS:
            sanitized[key] = f"<hashed:{hashlib.sha256(value.encode()).hexdigest()[:8]}>"
        else:
            sanitized[key] = value
    return sanitized


def _caller() -> str | None:
    admission = getattr(g, "admission", None)
    return admission.telegram_login if admission is not None else None


def configure_request_logging(app: Flask, *, debug_mode: bool = False) -> None:
    """Log the start and end of every RPC under a fresh correlation id."""

    @app.before_request
    def _before_request() -> None:
        set_correlation_id(secrets.token_urlsafe(8))
        g.request_start_time = time.monotonic()

        if debug_mode:
            logger.bind(method=request.path).debug(
                f"rpc started: headers={_sanitize_headers(dict(request.headers))} "
                f"body_size={request.content_length or 0}"
            )
        else:
            logger.bind(method=request.path).info("rpc started")

    @app.after_request
    def _after_request(response: Response) -> Response:
        duration = time.monotonic() - getattr(g, "request_start_time", time.monotonic())
        logger.bind(method=request.path, telegram_login=_caller()).info(
            f"rpc finished: status={response.status_code} duration={duration:.3f}s"
        )
        return response

    @app.teardown_request
    def _teardown_request(exc: BaseException | None) -> None:
        if exc is not None:
            logger.bind(method=request.path).error(
                f"rpc error: {type(exc).__name__}"
            )
        clear_correlation_id()


__all__ = ["configure_request_logging"]
