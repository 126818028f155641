# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from sso.domain.users.exceptions import UserNotFoundError
from sso.domain.users.repositories import UserChanger, UserProvider
from sso.shared.logging import logger


class AdminSetupError(Exception):
    pass


class AdminSetup:
    """Promote the configured login to admin at startup.

    Without this nobody could call ``MakeAdmin``: it is admin-gated itself.
    """

    def __init__(self, *, users: UserProvider, changer: UserChanger) -> None:
        self._users = users
        self._changer = changer

    def setup_admin_user(self, admin_login: str | None) -> bool:
        if not admin_login:
            logger.info("admin_setup: no adminlogin configured, skipping admin setup")
            return False

        log = logger.bind(op="admin_setup", login=admin_login)
        try:
            user = self._users.user_by_login(admin_login)
        except UserNotFoundError:
            log.warning(
                "admin_setup: configured admin login is not registered yet; "
                "register it and restart to grant admin privileges"
            )
            return False
        except Exception as e:
            log.bind(error=str(e)).error("admin_setup: failed to look up admin user")
            raise AdminSetupError(f"Failed to setup admin user: {e}") from e

        if user.is_admin:
            log.bind(user_id=user.id).info("admin_setup: user already has admin privileges")
            return True

        try:
            self._changer.make_admin(user.id)
        except Exception as e:
            log.bind(error=str(e)).error("admin_setup: failed to grant admin privileges")
            raise AdminSetupError(f"Failed to setup admin user: {e}") from e

        log.bind(user_id=user.id).info("admin_setup: granted admin privileges")
        return True


__all__ = [
    "AdminSetup",
    "AdminSetupError",
]
