# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from sso.shared.errors.base import DomainError


class InvalidCredentialsError(DomainError):
    code = "invalid_credentials"
    status = HTTPStatus.UNAUTHORIZED
    message = "invalid credentials"


class UserExistsError(DomainError):
    code = "user_exists"
    status = HTTPStatus.CONFLICT
    message = "user already exists"


class UserNotFoundError(DomainError):
    code = "user_not_found"
    status = HTTPStatus.NOT_FOUND
    message = "user not found"


class TokenExistsError(DomainError):
    code = "token_exists"
    status = HTTPStatus.CONFLICT
    message = "token for that user already exists"


class TokenNotFoundError(DomainError):
    code = "token_not_found"
    status = HTTPStatus.NOT_FOUND
    message = "token for that user not found"
