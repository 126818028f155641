# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(slots=True, frozen=True)
class User:
    """A record of the user directory.

    ``id`` is assigned by the directory on save; callers pass ``0`` for a
    user that has not been persisted yet.
    """

    id: int
    login: str
    password_hash: str
    telegram_login: str
    is_admin: bool = False


@dataclass(slots=True, frozen=True)
class UserView:
    """Outbound rendering of a :class:`User`; the password is already hashed."""

    user_id: int
    login: str
    password: str
    is_admin: bool
    telegram_login: str

    @classmethod
    def from_user(cls, user: User) -> UserView:
        return cls(
            user_id=user.id,
            login=user.login,
            password=user.password_hash,
            is_admin=user.is_admin,
            telegram_login=user.telegram_login,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "login": self.login,
            "password": self.password,
            "is_admin": self.is_admin,
            "telegram_login": self.telegram_login,
        }
