# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from flask import Flask, Response, jsonify, request
from werkzeug.exceptions import HTTPException

from sso.shared.logging import logger

from .base import AppError, InternalError

# Routing failures mean the RPC method does not exist.
_HTTP_STATUS_CODES = {
    HTTPStatus.NOT_FOUND: "unimplemented",
    HTTPStatus.METHOD_NOT_ALLOWED: "unimplemented",
}


def handle_app_error(error: AppError) -> tuple[Response, HTTPStatus]:
    response = jsonify(error.to_dict())
    return response, error.status


def register_error_handler(app: Flask) -> None:
    @app.errorhandler(AppError)
    def _handle_app_error(exc: AppError):
        if exc.status >= HTTPStatus.INTERNAL_SERVER_ERROR:
            # Storage detail stays in the log, the caller gets the generic status.
            logger.bind(method=request.path, error=str(exc)).error("rpc failed")
            return handle_app_error(InternalError())
        return handle_app_error(exc)

    @app.errorhandler(HTTPException)
    def _handle_http(exc: HTTPException):
        status = exc.code or HTTPStatus.INTERNAL_SERVER_ERROR
        code = _HTTP_STATUS_CODES.get(status)
        if code is None:
            code = "internal" if status >= HTTPStatus.INTERNAL_SERVER_ERROR else "invalid_argument"
        if code == "unimplemented":
            message = f"unknown method {request.path}"
        else:
            message = code.replace("_", " ")
        return jsonify({"code": code, "message": message}), status

    @app.errorhandler(Exception)
    def _handle_unexpected(exc: Exception):
        logger.bind(method=request.path).exception(
            f"Unhandled exception: {type(exc).__name__} on {request.method} {request.path}"
        )
        return handle_app_error(InternalError())
