# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Any, TypeVar

from flask import Blueprint, Response, g, jsonify, request
from pydantic import BaseModel, ValidationError

from sso.application.services.auth import AuthService
from sso.domain.users.exceptions import (
    InvalidCredentialsError,
    TokenNotFoundError,
    UserExistsError,
    UserNotFoundError,
)
from sso.interfaces.rpc.admission import Admission, AdmissionMiddleware
from sso.interfaces.rpc.dto.auth import (
    FIELD_MESSAGES,
    AuthorizeRequestDTO,
    ChangePasswordRequestDTO,
    EmptyRequestDTO,
    GetUserByTelegramRequestDTO,
    IsAdminResponseDTO,
    RegisterRequestDTO,
    TokenResponseDTO,
    UserIdRequestDTO,
)
from sso.interfaces.rpc.metadata import request_metadata
from sso.interfaces.rpc.methods import SERVICE
from sso.shared.errors.base import (
    AlreadyExistsError,
    AppError,
    InternalError,
    NotFoundError,
    PermissionDeniedError,
    UnauthenticatedError,
)
from sso.shared.errors.validation import raise_validation_error
from sso.shared.logging import logger

DTO = TypeVar("DTO", bound=BaseModel)


def _parse(dto_type: type[DTO]) -> DTO:
    try:
        return dto_type.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        raise_validation_error(exc, FIELD_MESSAGES)


def _ok(payload: dict[str, Any] | None = None) -> tuple[Response, int]:
    return jsonify(payload or {}), 200


class AuthController:
    """The ``Auth`` RPC service: one ``POST /Auth/<Method>`` route per method.

    Every call passes admission before its body is validated. Service
    failures are translated into RPC statuses by :meth:`_translate`.
    """

    def __init__(
        self,
        *,
        auth_service: AuthService,
        admission: AdmissionMiddleware,
        expose_domain_errors: bool = True,
    ) -> None:
        self._auth_service = auth_service
        self._admission = admission
        self._expose_domain_errors = expose_domain_errors

    def register_new_user(self) -> tuple[Response, int]:
        dto = _parse(RegisterRequestDTO)
        try:
            self._auth_service.register_user(dto.login, dto.password, dto.telegram_login)
        except Exception as exc:
            raise self._translate(exc, "failed to register user") from exc
        return _ok()

    def authorize_user(self) -> tuple[Response, int]:
        dto = _parse(AuthorizeRequestDTO)
        try:
            token = self._auth_service.authorize_user(dto.login, dto.password)
        except Exception as exc:
            raise self._translate(exc, "failed to authorize user") from exc
        return _ok(TokenResponseDTO(token=token).model_dump())

    def is_admin(self) -> tuple[Response, int]:
        dto = _parse(UserIdRequestDTO)
        try:
            is_admin = self._auth_service.is_admin(dto.user_id)
        except Exception as exc:
            raise InternalError("failed to check admin status") from exc
        return _ok(IsAdminResponseDTO(is_admin=is_admin).model_dump())

    def change_password(self) -> tuple[Response, int]:
        dto = _parse(ChangePasswordRequestDTO)
        admission = self._current_admission()
        if (
            admission is not None
            and not admission.is_admin
            and admission.session_user_id != dto.user_id
        ):
            logger.bind(
                op="rpc.change_password",
                user_id=dto.user_id,
                telegram_login=admission.telegram_login,
            ).info("rejected: password change for another user")
            raise PermissionDeniedError("access denied")
        try:
            self._auth_service.change_password(dto.user_id, dto.new_password)
        except Exception as exc:
            raise self._translate(exc, "failed to change password") from exc
        return _ok()

    def get_all_users(self) -> tuple[Response, int]:
        _parse(EmptyRequestDTO)
        try:
            users = self._auth_service.get_all_users()
        except Exception as exc:
            raise self._translate(exc, "failed to get all users") from exc
        return _ok({"users": [user.to_dict() for user in users]})

    def get_user_by_telegram(self) -> tuple[Response, int]:
        dto = _parse(GetUserByTelegramRequestDTO)
        try:
            users = self._auth_service.get_users_by_telegram(dto.telegram_login)
        except Exception as exc:
            raise self._translate(exc, "failed to get users") from exc
        return _ok({"users": [user.to_dict() for user in users]})

    def make_admin(self) -> tuple[Response, int]:
        dto = _parse(UserIdRequestDTO)
        try:
            self._auth_service.make_admin(dto.user_id)
        except Exception as exc:
            raise self._translate(exc, "failed to make user an admin") from exc
        return _ok()

    def get_jwt(self) -> tuple[Response, int]:
        dto = _parse(UserIdRequestDTO)
        try:
            token = self._auth_service.get_token(dto.user_id)
        except Exception as exc:
            raise self._translate(exc, "failed to get token") from exc
        return _ok(TokenResponseDTO(token=token).model_dump())

    def delete_jwt(self) -> tuple[Response, int]:
        dto = _parse(UserIdRequestDTO)
        try:
            self._auth_service.delete_token(dto.user_id)
        except Exception as exc:
            raise self._translate(exc, "failed to delete token") from exc
        return _ok()

    def _admit(self) -> None:
        g.admission = self._admission.admit(request.path, request_metadata())

    @staticmethod
    def _current_admission() -> Admission | None:
        return getattr(g, "admission", None)

    def _translate(self, exc: Exception, internal_message: str) -> AppError:
        if self._expose_domain_errors:
            if isinstance(exc, InvalidCredentialsError):
                return UnauthenticatedError("invalid credentials")
            if isinstance(exc, UserExistsError):
                return AlreadyExistsError("user already exists")
            if isinstance(exc, UserNotFoundError):
                return NotFoundError("user not found")
            if isinstance(exc, TokenNotFoundError):
                return NotFoundError("token not found")
        # TokenExistsError lands here too: a second live token is never handed out.
        return InternalError(internal_message)

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("auth", __name__, url_prefix=f"/{SERVICE}")
        bp.before_request(self._admit)
        bp.add_url_rule("/RegisterNewUser", view_func=self.register_new_user, methods=["POST"])
        bp.add_url_rule("/AuthorizeUser", view_func=self.authorize_user, methods=["POST"])
        bp.add_url_rule("/IsAdmin", view_func=self.is_admin, methods=["POST"])
        bp.add_url_rule("/ChangePassword", view_func=self.change_password, methods=["POST"])
        bp.add_url_rule("/GetAllUsers", view_func=self.get_all_users, methods=["POST"])
        bp.add_url_rule(
            "/GetUserByTelegram", view_func=self.get_user_by_telegram, methods=["POST"]
        )
        bp.add_url_rule("/MakeAdmin", view_func=self.make_admin, methods=["POST"])
        bp.add_url_rule("/GetJWT", view_func=self.get_jwt, methods=["POST"])
        bp.add_url_rule("/DeleteJWT", view_func=self.delete_jwt, methods=["POST"])
        return bp


__all__ = ["AuthController"]
