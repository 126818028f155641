# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from sso.domain.users.entities import User
from sso.domain.users.exceptions import TokenNotFoundError, UserNotFoundError
from sso.domain.users.repositories import TokenStore, UserProvider
from sso.interfaces.rpc.methods import CHANGE_PASSWORD, REGISTER_NEW_USER, is_public
from sso.shared.errors.base import InternalError, PermissionDeniedError, UnauthenticatedError
from sso.shared.logging import logger


@dataclass(slots=True, frozen=True)
class Admission:
    """Outcome of an admitted call.

    ``session_user_id`` is ``None`` when none of the caller's users holds a
    live token; ``is_admin`` is only resolved for callers with a session.
    """

    method: str
    telegram_login: str
    session_user_id: int | None = None
    is_admin: bool = False


class AdmissionMiddleware:
    """Per-call gate keyed on the caller identifier in the metadata.

    A caller is logged in when one of its users has a token in the token
    store; the store is the session of record, so tokens are never
    verified cryptographically here.
    """

    def __init__(
        self,
        *,
        users: UserProvider,
        tokens: TokenStore,
        caller_header: str = "telegramLogin",
    ) -> None:
        self._users = users
        self._tokens = tokens
        self._caller_header = caller_header.lower()

    def admit(self, method: str, metadata: Mapping[str, str] | None) -> Admission:
        if metadata is None:
            raise UnauthenticatedError("missing metadata")

        telegram_login = metadata.get(self._caller_header)
        if not telegram_login:
            raise UnauthenticatedError("missing login in header")

        log = logger.bind(op="admission", method=method, telegram_login=telegram_login)

        try:
            users = self._users.users_by_telegram(telegram_login)
        except UserNotFoundError as exc:
            if method == REGISTER_NEW_USER:
                return Admission(method=method, telegram_login=telegram_login)
            log.bind(error=str(exc)).warning("caller not found")
            raise UnauthenticatedError("caller not found") from exc
        except Exception as exc:
            log.bind(error=str(exc)).error("failed to look up caller")
            raise UnauthenticatedError("caller not found") from exc

        session_user_id = self._find_session(users)
        if session_user_id is None:
            if is_public(method):
                return Admission(method=method, telegram_login=telegram_login)
            log.info("rejected: no session")
            raise UnauthenticatedError("no session")

        if is_public(method):
            log.bind(user_id=session_user_id).info("rejected: caller already has a session")
            raise PermissionDeniedError("access denied for authenticated users")

        try:
            is_admin = self._users.is_admin(session_user_id)
        except Exception as exc:
            log.bind(user_id=session_user_id, error=str(exc)).error(
                "failed to check admin status"
            )
            raise InternalError("error checking admin status") from exc

        admission = Admission(
            method=method,
            telegram_login=telegram_login,
            session_user_id=session_user_id,
            is_admin=is_admin,
        )
        if is_admin or method == CHANGE_PASSWORD:
            return admission

        log.bind(user_id=session_user_id).info("rejected: admin required")
        raise PermissionDeniedError("access denied")

    def _find_session(self, users: Sequence[User]) -> int | None:
        for user in users:
            try:
                self._tokens.get(user.id)
            except TokenNotFoundError:
                continue
            except Exception as exc:
                logger.bind(op="admission", user_id=user.id, error=str(exc)).warning(
                    "token lookup failed, treating as no session"
                )
                continue
            return user.id
        return None


__all__ = ["Admission", "AdmissionMiddleware"]
