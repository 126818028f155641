# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, cast


@dataclass(slots=True)
class AppError(Exception):
    code: str
    status: HTTPStatus
    message: str | None = None
    context: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message or self.code)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "code": self.code,
            "message": self.message or self.code.replace("_", " "),
        }
        if self.context:
            payload["context"] = dict(self.context)
        return payload


class DomainError(AppError):
    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        status: HTTPStatus | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        resolved_code = code or cast(str, getattr(self, "code", "domain_error"))
        resolved_status = status or cast(
            HTTPStatus, getattr(self, "status", HTTPStatus.BAD_REQUEST)
        )
        resolved_message = message or cast(str | None, getattr(self, "message", None))
        super().__init__(
            code=resolved_code,
            status=resolved_status,
            message=resolved_message,
            context=context,
        )


class InfrastructureError(AppError):
    def __init__(
        self,
        code: str = "infrastructure_error",
        *,
        message: str | None = None,
        status: HTTPStatus | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        resolved_status = status or HTTPStatus.INTERNAL_SERVER_ERROR
        super().__init__(code=code, status=resolved_status, message=message, context=context)


# RPC status errors. Codes follow the gRPC status names, HTTP statuses the
# mapping used by gRPC HTTP gateways.


class InvalidArgumentError(AppError):
    def __init__(self, message: str, *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(
            code="invalid_argument",
            status=HTTPStatus.BAD_REQUEST,
            message=message,
            context=context,
        )


class UnauthenticatedError(AppError):
    def __init__(self, message: str = "unauthenticated") -> None:
        super().__init__(code="unauthenticated", status=HTTPStatus.UNAUTHORIZED, message=message)


class PermissionDeniedError(AppError):
    def __init__(self, message: str = "access denied") -> None:
        super().__init__(code="permission_denied", status=HTTPStatus.FORBIDDEN, message=message)


class NotFoundError(AppError):
    def __init__(self, message: str = "not found") -> None:
        super().__init__(code="not_found", status=HTTPStatus.NOT_FOUND, message=message)


class AlreadyExistsError(AppError):
    def __init__(self, message: str = "already exists") -> None:
        super().__init__(code="already_exists", status=HTTPStatus.CONFLICT, message=message)


class InternalError(AppError):
    def __init__(self, message: str = "internal error") -> None:
        super().__init__(
            code="internal",
            status=HTTPStatus.INTERNAL_SERVER_ERROR,
            message=message,
        )
