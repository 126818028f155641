from __future__ import annotations

from collections.abc import Iterator

import pytest
from sqlalchemy import inspect

from sso.domain.users.entities import User
from sso.domain.users.exceptions import UserExistsError, UserNotFoundError
from sso.infrastructure.db.session import create_engine_from_url
from sso.infrastructure.repositories.users.sqlalchemy_user_repository import (
    SqlAlchemyUserDirectory,
)


@pytest.fixture()
def directory() -> Iterator[SqlAlchemyUserDirectory]:
    directory = SqlAlchemyUserDirectory(create_engine_from_url("sqlite://"))
    directory.ensure_indexes()
    yield directory
    directory.close()


def _new_user(login: str, telegram_login: str) -> User:
    return User(id=0, login=login, password_hash=f"hash-{login}", telegram_login=telegram_login)


def test_schema_uses_stored_field_names(directory: SqlAlchemyUserDirectory) -> None:
    inspector = inspect(directory._engine)

    columns = {column["name"] for column in inspector.get_columns("users")}

    assert columns == {"_id", "login", "passHash", "isAdmin", "telegramLogin"}


def test_save_assigns_sequential_ids(directory: SqlAlchemyUserDirectory) -> None:
    alice = directory.save(_new_user("alice", "tg-alice"))
    bob = directory.save(_new_user("bob", "tg-bob"))

    assert alice.id == 1
    assert bob.id == 2
    assert alice.is_admin is False


def test_save_rejects_duplicate_login_and_telegram_login(
    directory: SqlAlchemyUserDirectory,
) -> None:
    directory.save(_new_user("alice", "tg-alice"))

    with pytest.raises(UserExistsError):
        directory.save(_new_user("alice", "tg-other"))
    with pytest.raises(UserExistsError):
        directory.save(_new_user("bob", "tg-alice"))

    assert [user.login for user in directory.all_users()] == ["alice"]


def test_user_by_login(directory: SqlAlchemyUserDirectory) -> None:
    saved = directory.save(_new_user("alice", "tg-alice"))

    assert directory.user_by_login("alice") == saved
    with pytest.raises(UserNotFoundError):
        directory.user_by_login("nobody")


def test_change_password(directory: SqlAlchemyUserDirectory) -> None:
    saved = directory.save(_new_user("alice", "tg-alice"))

    directory.change_password(saved.id, "new-hash")

    assert directory.user_by_login("alice").password_hash == "new-hash"
    with pytest.raises(UserNotFoundError):
        directory.change_password(99, "new-hash")


def test_make_admin_is_idempotent(directory: SqlAlchemyUserDirectory) -> None:
    saved = directory.save(_new_user("alice", "tg-alice"))

    directory.make_admin(saved.id)
    directory.make_admin(saved.id)

    assert directory.is_admin(saved.id) is True
    with pytest.raises(UserNotFoundError):
        directory.make_admin(99)
    with pytest.raises(UserNotFoundError):
        directory.is_admin(99)


def test_users_by_telegram(directory: SqlAlchemyUserDirectory) -> None:
    saved = directory.save(_new_user("alice", "tg-alice"))
    directory.save(_new_user("bob", "tg-bob"))

    assert directory.users_by_telegram("tg-alice") == [saved]
    assert directory.users_by_telegram("tg-nobody") == []


def test_admin_flag_survives_reopen(tmp_path) -> None:
    url = f"sqlite:///{tmp_path / 'users.db'}"
    first = SqlAlchemyUserDirectory(create_engine_from_url(url))
    first.ensure_indexes()
    user_id = first.save(_new_user("alice", "tg-alice")).id
    first.make_admin(user_id)
    first.close()

    second = SqlAlchemyUserDirectory(create_engine_from_url(url))
    second.ensure_indexes()
    try:
        assert second.is_admin(user_id) is True
    finally:
        second.close()
