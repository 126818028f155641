# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Sequence
from datetime import timedelta
from typing import Protocol

from .entities import User


class UserChanger(Protocol):
    def save(self, user: User) -> User: ...
    def change_password(self, user_id: int, new_password_hash: str) -> None: ...
    def make_admin(self, user_id: int) -> None: ...


class UserProvider(Protocol):
    def user_by_login(self, login: str) -> User: ...
    def is_admin(self, user_id: int) -> bool: ...
    def users_by_telegram(self, telegram_login: str) -> Sequence[User]: ...
    def all_users(self) -> Sequence[User]: ...


class TokenStore(Protocol):
    def get(self, user_id: int) -> str: ...
    def put(self, user_id: int, token: str, ttl: timedelta) -> None: ...
    def delete(self, user_id: int) -> None: ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...
    def verify(self, password: str, hashed: str) -> bool: ...


class TokenIssuer(Protocol):
    def new_token(self, user: User, ttl: timedelta) -> str: ...
