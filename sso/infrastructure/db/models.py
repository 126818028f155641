# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from sqlalchemy import BigInteger, Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from sso.infrastructure.db.session import Base

# SQLite only autoincrements INTEGER PRIMARY KEY columns.
_UserId = BigInteger().with_variant(Integer(), "sqlite")


class UserRecord(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column("_id", _UserId, primary_key=True, autoincrement=True)
    login: Mapped[str] = mapped_column("login", String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column("passHash", String(255), nullable=False)
    is_admin: Mapped[bool] = mapped_column(
        "isAdmin", Boolean, nullable=False, default=False, server_default="0"
    )
    telegram_login: Mapped[str] = mapped_column(
        "telegramLogin", String(255), unique=True, nullable=False
    )
