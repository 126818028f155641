from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import pytest
from flask import Flask
from flask.testing import FlaskClient

from sso.app import create_app
from sso.container import Container
from sso.shared.config import AppConfig
from sso.tests.doubles import InMemoryTokenStore

SECRET = "test-signing-secret-0123456789abcdef"


def _config(expose_domain_errors: bool) -> AppConfig:
    return AppConfig(
        env="local",
        usersstorage="sqlite://",
        tokensstorage={"addr": "localhost:6379"},
        tokenttl="1h",
        grpc={"timeout": "5s", "exposedomainerrors": expose_domain_errors},
        SECRET=SECRET,
        passwordhash="pbkdf2:sha256:1000",
    )


class Harness:
    def __init__(self, container: Container, app: Flask) -> None:
        self.container = container
        self.client: FlaskClient = app.test_client()

    def call(
        self, method: str, body: dict[str, Any] | None = None, caller: str | None = None
    ) -> tuple[int, dict[str, Any]]:
        headers = {"telegramLogin": caller} if caller is not None else {}
        response = self.client.post(f"/Auth/{method}", json=body or {}, headers=headers)
        return response.status_code, response.get_json()

    def user_id(self, login: str) -> int:
        return self.container.user_directory.user_by_login(login).id

    def login(self, login: str, password: str, caller: str) -> str:
        status, payload = self.call(
            "AuthorizeUser", {"login": login, "password": password}, caller
        )
        assert status == 200, payload
        return payload["token"]

    def register(self, login: str, password: str, caller: str) -> None:
        status, payload = self.call(
            "RegisterNewUser",
            {"login": login, "password": password, "telegram_login": caller},
            caller,
        )
        assert (status, payload) == (200, {})


def _harness(expose_domain_errors: bool) -> Iterator[Harness]:
    container = Container(_config(expose_domain_errors))
    container.__dict__["token_cache"] = InMemoryTokenStore()
    container.user_directory.ensure_indexes()
    app = create_app(container)
    app.config.update(TESTING=True)
    yield Harness(container, app)
    container.user_directory.close()


@pytest.fixture()
def rpc() -> Iterator[Harness]:
    yield from _harness(expose_domain_errors=False)


@pytest.fixture()
def rpc_exposed() -> Iterator[Harness]:
    yield from _harness(expose_domain_errors=True)


def _with_admin(rpc: Harness) -> str:
    rpc.register("root", "toor", "tg=root")
    assert rpc.container.admin_setup.setup_admin_user("root") is True
    return rpc.login("root", "toor", "tg=root")


def test_register_authorize_and_non_admin_is_denied(rpc: Harness) -> None:
    rpc.register("a", "x", "tg=alice")

    status, payload = rpc.call(
        "RegisterNewUser", {"login": "a", "password": "x", "telegram_login": "tg=alice"}, "tg=alice"
    )
    assert status == 500
    assert payload["code"] == "internal"

    token = rpc.login("a", "x", "tg=alice")
    claims = rpc.container.token_signer.verify(token)
    assert claims["uid"] == rpc.user_id("a")
    assert claims["login"] == "a"

    status, payload = rpc.call("GetAllUsers", {}, "tg=alice")
    assert status == 403
    assert payload["code"] == "permission_denied"


def test_authorize_with_live_session_is_denied(rpc: Harness) -> None:
    rpc.register("a", "x", "tg=alice")
    rpc.login("a", "x", "tg=alice")

    status, payload = rpc.call("AuthorizeUser", {"login": "a", "password": "x"}, "tg=alice")

    assert status == 403
    assert payload["code"] == "permission_denied"


def test_admin_makes_admin(rpc: Harness) -> None:
    _with_admin(rpc)
    rpc.register("a", "x", "tg=alice")
    alice_id = rpc.user_id("a")

    assert rpc.call("IsAdmin", {"user_id": alice_id}, "tg=root") == (200, {"is_admin": False})
    assert rpc.call("MakeAdmin", {"user_id": alice_id}, "tg=root") == (200, {})
    assert rpc.call("IsAdmin", {"user_id": alice_id}, "tg=root") == (200, {"is_admin": True})


def test_change_password_by_owner(rpc: Harness) -> None:
    _with_admin(rpc)
    rpc.register("a", "x", "tg=alice")
    rpc.login("a", "x", "tg=alice")
    alice_id = rpc.user_id("a")

    status, payload = rpc.call(
        "ChangePassword", {"user_id": alice_id, "new_password": "y"}, "tg=alice"
    )
    assert (status, payload) == (200, {})

    assert rpc.call("DeleteJWT", {"user_id": alice_id}, "tg=root") == (200, {})

    status, payload = rpc.call("AuthorizeUser", {"login": "a", "password": "x"}, "tg=alice")
    assert status == 500
    assert payload["code"] == "internal"

    token = rpc.login("a", "y", "tg=alice")
    assert rpc.container.token_signer.verify(token)["uid"] == alice_id


def test_change_password_of_another_user_is_denied(rpc: Harness) -> None:
    _with_admin(rpc)
    rpc.register("a", "x", "tg=alice")
    rpc.login("a", "x", "tg=alice")

    status, payload = rpc.call(
        "ChangePassword", {"user_id": rpc.user_id("root"), "new_password": "y"}, "tg=alice"
    )

    assert status == 403
    assert payload["code"] == "permission_denied"


def test_delete_jwt_ends_session(rpc: Harness) -> None:
    _with_admin(rpc)
    rpc.register("a", "x", "tg=alice")
    token = rpc.login("a", "x", "tg=alice")
    alice_id = rpc.user_id("a")

    assert rpc.call("GetJWT", {"user_id": alice_id}, "tg=root") == (200, {"token": token})
    assert rpc.call("DeleteJWT", {"user_id": alice_id}, "tg=root") == (200, {})

    status, payload = rpc.call("GetJWT", {"user_id": alice_id}, "tg=root")
    assert status == 500
    assert payload["code"] == "internal"

    status, payload = rpc.call("GetAllUsers", {}, "tg=alice")
    assert status == 401
    assert payload["message"] == "no session"


def test_missing_metadata_and_missing_caller(rpc: Harness) -> None:
    status, payload = rpc.call("GetAllUsers", {})
    assert status == 401
    assert payload == {"code": "unauthenticated", "message": "missing metadata"}

    response = rpc.client.post("/Auth/GetAllUsers", json={}, headers={"X-Trace": "1"})
    assert response.status_code == 401
    assert response.get_json()["message"] == "missing login in header"


def test_empty_fields_are_invalid_arguments(rpc: Harness) -> None:
    status, payload = rpc.call(
        "RegisterNewUser", {"login": "", "password": "x", "telegram_login": "tg=new"}, "tg=new"
    )
    assert status == 400
    assert payload["code"] == "invalid_argument"
    assert payload["message"] == "login is required"

    status, payload = rpc.call("AuthorizeUser", {"login": "a"}, "tg=new")
    assert status == 400
    assert payload["message"] == "password is required"


def test_admin_lists_users(rpc: Harness) -> None:
    _with_admin(rpc)
    rpc.register("a", "x", "tg=alice")

    status, payload = rpc.call("GetAllUsers", {}, "tg=root")
    assert status == 200
    assert [user["login"] for user in payload["users"]] == ["root", "a"]
    assert payload["users"][1]["password"].startswith("pbkdf2:sha256:1000$")

    status, payload = rpc.call("GetUserByTelegram", {"telegram_login": "tg=alice"}, "tg=root")
    assert status == 200
    assert payload["users"] == [
        {
            "user_id": rpc.user_id("a"),
            "login": "a",
            "password": payload["users"][0]["password"],
            "is_admin": False,
            "telegram_login": "tg=alice",
        }
    ]

    status, payload = rpc.call("GetUserByTelegram", {"telegram_login": "tg=ghost"}, "tg=root")
    assert (status, payload) == (200, {"users": []})


def test_is_admin_failure_is_always_internal(rpc_exposed: Harness) -> None:
    _with_admin(rpc_exposed)

    status, payload = rpc_exposed.call("IsAdmin", {"user_id": 999}, "tg=root")

    assert status == 500
    assert payload["code"] == "internal"


def test_domain_errors_are_exposed(rpc_exposed: Harness) -> None:
    _with_admin(rpc_exposed)
    rpc_exposed.register("a", "x", "tg=alice")

    status, payload = rpc_exposed.call(
        "RegisterNewUser", {"login": "a", "password": "x", "telegram_login": "tg=bob"}, "tg=bob"
    )
    assert (status, payload["code"]) == (409, "already_exists")

    status, payload = rpc_exposed.call(
        "AuthorizeUser", {"login": "a", "password": "wrong"}, "tg=alice"
    )
    assert (status, payload["code"]) == (401, "unauthenticated")

    status, payload = rpc_exposed.call(
        "AuthorizeUser", {"login": "nobody", "password": "wrong"}, "tg=alice"
    )
    assert (status, payload["code"]) == (401, "unauthenticated")

    status, payload = rpc_exposed.call("MakeAdmin", {"user_id": 999}, "tg=root")
    assert (status, payload["code"]) == (404, "not_found")

    status, payload = rpc_exposed.call(
        "GetJWT", {"user_id": rpc_exposed.user_id("a")}, "tg=root"
    )
    assert (status, payload) == (404, {"code": "not_found", "message": "token not found"})


def test_second_live_token_is_internal(rpc_exposed: Harness) -> None:
    rpc_exposed.register("a", "x", "tg=alice")
    rpc_exposed.login("a", "x", "tg=alice")

    # A caller without a session may still try to log in as alice.
    status, payload = rpc_exposed.call("AuthorizeUser", {"login": "a", "password": "x"}, "tg=eve")

    assert status == 500
    assert payload["code"] == "internal"


@pytest.mark.parametrize("user_id", [2**64, 2**63, -1, True, "1", 1.5])
def test_out_of_range_or_non_integer_user_id_is_invalid(
    rpc_exposed: Harness, user_id: object
) -> None:
    _with_admin(rpc_exposed)

    for method in ("IsAdmin", "MakeAdmin", "GetJWT"):
        status, payload = rpc_exposed.call(method, {"user_id": user_id}, "tg=root")
        assert status == 400
        assert payload["code"] == "invalid_argument"
        assert payload["message"] == "user_id must be an integer between 0 and 2^63-1"

    status, payload = rpc_exposed.call(
        "ChangePassword", {"user_id": user_id, "new_password": "y"}, "tg=root"
    )
    assert (status, payload["code"]) == (400, "invalid_argument")


def test_largest_user_id_reaches_storage(rpc_exposed: Harness) -> None:
    _with_admin(rpc_exposed)

    status, payload = rpc_exposed.call("MakeAdmin", {"user_id": 2**63 - 1}, "tg=root")

    assert (status, payload["code"]) == (404, "not_found")


def test_unknown_method_is_json_unimplemented(rpc: Harness) -> None:
    status, payload = rpc.call("Nope", {}, "tg=root")

    assert status == 404
    assert payload == {"code": "unimplemented", "message": "unknown method /Auth/Nope"}

    response = rpc.client.get("/Auth/GetAllUsers")
    assert response.status_code == 405
    assert response.get_json()["code"] == "unimplemented"
