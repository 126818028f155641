# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import timedelta

import redis

from sso.domain.users.exceptions import TokenExistsError, TokenNotFoundError
from sso.domain.users.repositories import TokenStore
from sso.shared.errors.base import InfrastructureError
from sso.shared.logging import logger


class TokenStorageError(InfrastructureError):
    def __init__(self, op: str, cause: Exception) -> None:
        super().__init__(
            code="token_storage_error",
            message=f"{op}: {type(cause).__name__}: {cause}",
        )


def token_key(user_id: int) -> str:
    return f"user:{user_id}"


class RedisTokenCache(TokenStore):
    """
    Live bearer tokens keyed by ``user:<id>``, one per user.

    The redis client is thread safe and checks connections out of its pool
    per command, so a single instance serves every request handler.
    Entries expire on their own; ``put`` refuses to overwrite a live entry.
    """

    def __init__(self, client: redis.Redis) -> None:
        self._r = client

    @classmethod
    def connect(
        cls,
        host: str,
        port: int,
        *,
        password: str = "",
        db: int = 0,
        timeout: float | None = None,
    ) -> RedisTokenCache:
        logger.debug(f"New Redis connection at {host}, port {port}, db {db}")
        client = redis.Redis(
            host=host,
            port=port,
            db=db,
            password=password or None,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
            decode_responses=True,
        )
        return cls(client)

    def get(self, user_id: int) -> str:
        op = "storage.redis.get"
        try:
            token = self._r.get(token_key(user_id))
        except redis.exceptions.RedisError as exc:
            raise TokenStorageError(op, exc) from exc
        if token is None:
            raise TokenNotFoundError(f"{op}: token for that user not found")
        if isinstance(token, bytes):
            token = token.decode("utf-8")
        return token

    def put(self, user_id: int, token: str, ttl: timedelta) -> None:
        op = "storage.redis.put"
        try:
            was_set = self._r.set(token_key(user_id), token, px=ttl, nx=True)
        except redis.exceptions.RedisError as exc:
            raise TokenStorageError(op, exc) from exc
        if not was_set:
            raise TokenExistsError(f"{op}: token for that user already exists")

    def delete(self, user_id: int) -> None:
        op = "storage.redis.delete"
        try:
            self._r.delete(token_key(user_id))
        except redis.exceptions.RedisError as exc:
            raise TokenStorageError(op, exc) from exc

    def close(self) -> None:
        self._r.close()


__all__ = ["RedisTokenCache", "TokenStorageError", "token_key"]
