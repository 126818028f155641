# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .exceptions import DomainError
from .users import (
    InvalidCredentialsError,
    TokenExistsError,
    TokenNotFoundError,
    User,
    UserExistsError,
    UserNotFoundError,
    UserView,
)

__all__ = [
    "DomainError",
    "InvalidCredentialsError",
    "TokenExistsError",
    "TokenNotFoundError",
    "User",
    "UserExistsError",
    "UserNotFoundError",
    "UserView",
]
