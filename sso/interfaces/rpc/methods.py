# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

SERVICE = "Auth"

REGISTER_NEW_USER = f"/{SERVICE}/RegisterNewUser"
AUTHORIZE_USER = f"/{SERVICE}/AuthorizeUser"
IS_ADMIN = f"/{SERVICE}/IsAdmin"
CHANGE_PASSWORD = f"/{SERVICE}/ChangePassword"
GET_ALL_USERS = f"/{SERVICE}/GetAllUsers"
GET_USER_BY_TELEGRAM = f"/{SERVICE}/GetUserByTelegram"
MAKE_ADMIN = f"/{SERVICE}/MakeAdmin"
GET_JWT = f"/{SERVICE}/GetJWT"
DELETE_JWT = f"/{SERVICE}/DeleteJWT"

PUBLIC_METHODS = frozenset({REGISTER_NEW_USER, AUTHORIZE_USER})


def is_public(method: str) -> bool:
    return method in PUBLIC_METHODS
