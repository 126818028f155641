# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Signed bearer tokens for authenticated users."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from sso.domain.users.entities import User
from sso.domain.users.repositories import TokenIssuer

ALGORITHM = "HS256"


class InvalidTokenError(ValueError):
    pass


class JwtTokenSigner(TokenIssuer):
    """HS256 tokens carrying ``uid``, ``login`` and ``exp`` claims.

    ``exp`` is written as integer Unix seconds so that any standard JWT
    verifier sharing the secret accepts it.
    """

    def __init__(
        self, secret: str, *, clock: Callable[[], datetime] | None = None
    ) -> None:
        if not secret:
            raise ValueError("signing secret must not be empty")
        self._secret = secret
        self._clock = clock or (lambda: datetime.now(UTC))

    def new_token(self, user: User, ttl: timedelta) -> str:
        expires_at = self._clock() + ttl
        claims = {
            "uid": user.id,
            "login": user.login,
            "exp": int(expires_at.timestamp()),
        }
        return jwt.encode(claims, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> dict[str, Any]:
        """Decode ``token`` and check its signature and expiry."""
        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp", "uid", "login"]},
            )
        except jwt.exceptions.PyJWTError as exc:
            raise InvalidTokenError(str(exc)) from exc


__all__ = ["ALGORITHM", "InvalidTokenError", "JwtTokenSigner"]
