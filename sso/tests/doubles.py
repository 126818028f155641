from __future__ import annotations

from dataclasses import replace
from datetime import timedelta

from sso.domain.users.entities import User
from sso.domain.users.exceptions import (
    TokenExistsError,
    TokenNotFoundError,
    UserExistsError,
    UserNotFoundError,
)
from sso.domain.users.repositories import PasswordHasher, TokenStore, UserChanger, UserProvider


class InMemoryUserDirectory(UserChanger, UserProvider):
    def __init__(self) -> None:
        self._users: dict[int, User] = {}
        self._seq = 1

    def save(self, user: User) -> User:
        for existing in self._users.values():
            if existing.login == user.login or existing.telegram_login == user.telegram_login:
                raise UserExistsError()
        saved = replace(user, id=self._seq)
        self._seq += 1
        self._users[saved.id] = saved
        return saved

    def change_password(self, user_id: int, new_password_hash: str) -> None:
        user = self._get(user_id)
        self._users[user_id] = User(
            id=user.id,
            login=user.login,
            password_hash=new_password_hash,
            telegram_login=user.telegram_login,
            is_admin=user.is_admin,
        )

    def make_admin(self, user_id: int) -> None:
        user = self._get(user_id)
        self._users[user_id] = User(
            id=user.id,
            login=user.login,
            password_hash=user.password_hash,
            telegram_login=user.telegram_login,
            is_admin=True,
        )

    def user_by_login(self, login: str) -> User:
        for user in self._users.values():
            if user.login == login:
                return user
        raise UserNotFoundError()

    def is_admin(self, user_id: int) -> bool:
        return self._get(user_id).is_admin

    def users_by_telegram(self, telegram_login: str) -> list[User]:
        return [u for u in self._users.values() if u.telegram_login == telegram_login]

    def all_users(self) -> list[User]:
        return list(self._users.values())

    def _get(self, user_id: int) -> User:
        try:
            return self._users[user_id]
        except KeyError:
            raise UserNotFoundError() from None


class InMemoryTokenStore(TokenStore):
    def __init__(self) -> None:
        self.tokens: dict[int, str] = {}
        self.ttls: dict[int, timedelta] = {}

    def get(self, user_id: int) -> str:
        try:
            return self.tokens[user_id]
        except KeyError:
            raise TokenNotFoundError() from None

    def put(self, user_id: int, token: str, ttl: timedelta) -> None:
        if user_id in self.tokens:
            raise TokenExistsError()
        self.tokens[user_id] = token
        self.ttls[user_id] = ttl

    def delete(self, user_id: int) -> None:
        self.tokens.pop(user_id, None)
        self.ttls.pop(user_id, None)

    def expire(self, user_id: int) -> None:
        self.delete(user_id)


class DeterministicHasher(PasswordHasher):
    def __init__(self) -> None:
        self.verify_calls: list[tuple[str, str]] = []

    def hash(self, password: str) -> str:
        return f"hashed:{password}"

    def verify(self, password: str, hashed: str) -> bool:
        self.verify_calls.append((password, hashed))
        return hashed == f"hashed:{password}"


class CountingTokenIssuer:
    def __init__(self) -> None:
        self._seq = 0

    def new_token(self, user: User, ttl: timedelta) -> str:
        self._seq += 1
        return f"token-{user.id}-{self._seq}"
