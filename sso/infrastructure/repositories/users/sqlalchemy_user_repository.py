# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from sso.domain.users.entities import User
from sso.domain.users.exceptions import UserExistsError, UserNotFoundError
from sso.domain.users.repositories import UserChanger, UserProvider
from sso.infrastructure.db.models import UserRecord
from sso.infrastructure.db.session import create_session_factory, init_db, session_scope
from sso.shared.errors.base import InfrastructureError


class UserStorageError(InfrastructureError):
    def __init__(self, op: str, cause: Exception) -> None:
        super().__init__(
            code="user_storage_error",
            message=f"{op}: {type(cause).__name__}: {cause}",
        )


def _to_domain(row: UserRecord) -> User:
    return User(
        id=row.id,
        login=row.login,
        password_hash=row.password_hash,
        telegram_login=row.telegram_login,
        is_admin=row.is_admin,
    )


@contextmanager
def _storage_errors(op: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        raise UserStorageError(op, exc) from exc


class SqlAlchemyUserDirectory(UserChanger, UserProvider):
    """User directory backed by the ``users`` table.

    Ids come from the table's autoincrement sequence; ``login`` and
    ``telegramLogin`` carry unique indexes, so a duplicate on either one
    surfaces as :class:`UserExistsError`.
    """

    def __init__(
        self, engine: Engine, session_factory: sessionmaker[Session] | None = None
    ) -> None:
        self._engine = engine
        self._session_factory = session_factory or create_session_factory(engine)

    def ensure_indexes(self) -> None:
        with _storage_errors("storage.sql.ensure_indexes"):
            init_db(self._engine)

    def save(self, user: User) -> User:
        op = "storage.sql.save"
        try:
            with session_scope(self._session_factory) as session:
                row = UserRecord(
                    login=user.login,
                    password_hash=user.password_hash,
                    telegram_login=user.telegram_login,
                    is_admin=user.is_admin,
                )
                session.add(row)
                session.flush()
                saved = _to_domain(row)
        except IntegrityError as exc:
            raise UserExistsError(f"{op}: user already exists") from exc
        except SQLAlchemyError as exc:
            raise UserStorageError(op, exc) from exc
        return saved

    def change_password(self, user_id: int, new_password_hash: str) -> None:
        with _storage_errors("storage.sql.change_password"):
            with session_scope(self._session_factory) as session:
                row = self._find_by_id(session, user_id)
                row.password_hash = new_password_hash

    def make_admin(self, user_id: int) -> None:
        with _storage_errors("storage.sql.make_admin"):
            with session_scope(self._session_factory) as session:
                row = self._find_by_id(session, user_id)
                row.is_admin = True

    def user_by_login(self, login: str) -> User:
        with _storage_errors("storage.sql.user_by_login"):
            with session_scope(self._session_factory) as session:
                row = session.scalars(
                    select(UserRecord).where(UserRecord.login == login)
                ).first()
                if row is None:
                    raise UserNotFoundError()
                return _to_domain(row)

    def is_admin(self, user_id: int) -> bool:
        with _storage_errors("storage.sql.is_admin"):
            with session_scope(self._session_factory) as session:
                return self._find_by_id(session, user_id).is_admin

    def users_by_telegram(self, telegram_login: str) -> list[User]:
        with _storage_errors("storage.sql.users_by_telegram"):
            with session_scope(self._session_factory) as session:
                rows = session.scalars(
                    select(UserRecord)
                    .where(UserRecord.telegram_login == telegram_login)
                    .order_by(UserRecord.id)
                ).all()
                return [_to_domain(row) for row in rows]

    def all_users(self) -> list[User]:
        with _storage_errors("storage.sql.all_users"):
            with session_scope(self._session_factory) as session:
                rows = session.scalars(select(UserRecord).order_by(UserRecord.id)).all()
                return [_to_domain(row) for row in rows]

    def close(self) -> None:
        self._engine.dispose()

    @staticmethod
    def _find_by_id(session: Session, user_id: int) -> UserRecord:
        row = session.get(UserRecord, user_id)
        if row is None:
            raise UserNotFoundError()
        return row


__all__ = ["SqlAlchemyUserDirectory", "UserStorageError"]
