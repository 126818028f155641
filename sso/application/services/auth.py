# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import timedelta

from sso.domain.users.entities import User, UserView
from sso.domain.users.exceptions import (
    InvalidCredentialsError,
    TokenExistsError,
    TokenNotFoundError,
    UserExistsError,
    UserNotFoundError,
)
from sso.domain.users.repositories import (
    PasswordHasher,
    TokenIssuer,
    TokenStore,
    UserChanger,
    UserProvider,
)
from sso.shared.logging import logger


class AuthService:
    """Registration, authorization and token lifecycle over the user directory.

    The service keeps no state of its own: users live in the directory,
    sessions in the token store, and every call goes straight to them.
    """

    def __init__(
        self,
        *,
        user_changer: UserChanger,
        user_provider: UserProvider,
        tokens: TokenStore,
        token_issuer: TokenIssuer,
        password_hasher: PasswordHasher,
        token_ttl: timedelta,
    ) -> None:
        self._user_changer = user_changer
        self._user_provider = user_provider
        self._tokens = tokens
        self._token_issuer = token_issuer
        self._password_hasher = password_hasher
        self._token_ttl = token_ttl
        self._dummy_hash: str | None = None

    def register_user(self, login: str, password: str, telegram_login: str) -> User:
        log = logger.bind(op="auth.register_user", login=login)
        log.info("registering user")

        user = User(
            id=0,
            login=login,
            password_hash=self._password_hasher.hash(password),
            telegram_login=telegram_login,
            is_admin=False,
        )
        try:
            saved = self._user_changer.save(user)
        except UserExistsError as exc:
            log.bind(error=str(exc)).warning("user already exists")
            raise
        except Exception as exc:
            log.bind(error=str(exc)).error("failed to save user")
            raise

        log.bind(user_id=saved.id).info("user registered")
        return saved

    def authorize_user(self, login: str, password: str) -> str:
        log = logger.bind(op="auth.authorize_user", login=login)
        log.info("attempting to authorize user")

        try:
            user = self._user_provider.user_by_login(login)
        except UserNotFoundError as exc:
            log.bind(error=str(exc)).warning("user not found")
            # Spend the same hashing work as a real mismatch.
            self._password_hasher.verify(password, self._placeholder_hash())
            raise InvalidCredentialsError() from None
        except Exception as exc:
            log.bind(error=str(exc)).error("failed to get user")
            raise

        if not self._password_hasher.verify(password, user.password_hash):
            log.warning("invalid credentials")
            raise InvalidCredentialsError()

        token = self._token_issuer.new_token(user, self._token_ttl)
        try:
            self._tokens.put(user.id, token, self._token_ttl)
        except TokenExistsError as exc:
            log.bind(user_id=user.id, error=str(exc)).warning(
                "token for that user already exists"
            )
            raise
        except Exception as exc:
            log.bind(user_id=user.id, error=str(exc)).error("failed to save token")
            raise

        log.bind(user_id=user.id).info("user authorized successfully")
        return token

    def is_admin(self, user_id: int) -> bool:
        log = logger.bind(op="auth.is_admin", user_id=user_id)
        log.info("checking if user is admin")

        try:
            is_admin = self._user_provider.is_admin(user_id)
        except Exception as exc:
            log.bind(error=str(exc)).error("failed to check admin status")
            raise

        log.bind(is_admin=is_admin).info("checked if user is admin")
        return is_admin

    def change_password(self, user_id: int, new_password: str) -> None:
        log = logger.bind(op="auth.change_password", user_id=user_id)
        log.info("changing user's password")

        new_hash = self._password_hasher.hash(new_password)
        try:
            self._user_changer.change_password(user_id, new_hash)
        except UserNotFoundError as exc:
            log.bind(error=str(exc)).warning("user not found")
            raise
        except Exception as exc:
            log.bind(error=str(exc)).error("failed to change user's password")
            raise

        log.info("user's password changed")

    def get_users_by_telegram(self, telegram_login: str) -> list[UserView]:
        log = logger.bind(op="auth.get_users_by_telegram", telegram_login=telegram_login)
        log.info("getting users by telegram login")

        try:
            users = self._user_provider.users_by_telegram(telegram_login)
        except UserNotFoundError as exc:
            log.bind(error=str(exc)).warning("user not found")
            return []
        except Exception as exc:
            log.bind(error=str(exc)).error("failed to get users")
            raise

        log.bind(count=len(users)).info("got user accounts by telegram login")
        return [UserView.from_user(user) for user in users]

    def get_all_users(self) -> list[UserView]:
        log = logger.bind(op="auth.get_all_users")
        log.info("getting all users")

        try:
            users = self._user_provider.all_users()
        except Exception as exc:
            log.bind(error=str(exc)).error("failed to get all users")
            raise

        log.bind(count=len(users)).info("successfully got all users")
        return [UserView.from_user(user) for user in users]

    def make_admin(self, user_id: int) -> None:
        log = logger.bind(op="auth.make_admin", user_id=user_id)
        log.info("making user an admin")

        try:
            self._user_changer.make_admin(user_id)
        except UserNotFoundError as exc:
            log.bind(error=str(exc)).warning("user not found")
            raise
        except Exception as exc:
            log.bind(error=str(exc)).error("failed to make user an admin")
            raise

        log.info("successfully made user an admin")

    def get_token(self, user_id: int) -> str:
        log = logger.bind(op="auth.get_token", user_id=user_id)
        log.info("getting user's token")

        try:
            token = self._tokens.get(user_id)
        except TokenNotFoundError as exc:
            log.bind(error=str(exc)).warning("token not found")
            raise
        except Exception as exc:
            log.bind(error=str(exc)).error("failed to get token")
            raise

        log.info("token got successfully")
        return token

    def delete_token(self, user_id: int) -> None:
        log = logger.bind(op="auth.delete_token", user_id=user_id)
        log.info("deleting token")

        try:
            self._tokens.delete(user_id)
        except Exception as exc:
            log.bind(error=str(exc)).error("failed to delete token")
            raise

        log.info("successfully deleted token")

    def _placeholder_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = self._password_hasher.hash("placeholder")
        return self._dummy_hash


__all__ = ["AuthService"]
