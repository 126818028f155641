# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .entities import User, UserView
from .exceptions import (
    InvalidCredentialsError,
    TokenExistsError,
    TokenNotFoundError,
    UserExistsError,
    UserNotFoundError,
)

__all__ = [
    "InvalidCredentialsError",
    "TokenExistsError",
    "TokenNotFoundError",
    "User",
    "UserExistsError",
    "UserNotFoundError",
    "UserView",
]
