# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import argparse
import os
import re
from collections.abc import Sequence
from datetime import timedelta
from pathlib import Path
from typing import Any

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

ENV_LOCAL = "local"
ENV_PROD = "prod"

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_DURATION_UNITS = {
    "h": timedelta(hours=1),
    "m": timedelta(minutes=1),
    "s": timedelta(seconds=1),
    "ms": timedelta(milliseconds=1),
}


class ConfigError(RuntimeError):
    pass


def parse_duration(value: Any) -> Any:
    """Accept Go-style duration strings (``1h30m``, ``90s``) or plain seconds."""
    if isinstance(value, timedelta):
        return value
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)
    if not isinstance(value, str):
        return value
    text = value.strip()
    if text.isdigit():
        return timedelta(seconds=int(text))
    total = timedelta()
    pos = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        amount, unit = match.groups()
        total += _DURATION_UNITS[unit] * float(amount)
        pos = match.end()
    if pos != len(text) or not text:
        raise ValueError(f"invalid duration {value!r}")
    return total


class TokensStorageConfig(BaseModel):
    addr: str
    password: str = ""
    db: int = Field(0, ge=0)

    model_config = ConfigDict(validate_by_name=True)

    @field_validator("addr")
    @classmethod
    def _check_addr(cls, value: str) -> str:
        host, sep, port = value.rpartition(":")
        if not sep or not host or not port.isdigit():
            raise ValueError("addr must look like host:port")
        return value

    @property
    def host(self) -> str:
        return self.addr.rpartition(":")[0]

    @property
    def port(self) -> int:
        return int(self.addr.rpartition(":")[2])


class RpcServerConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = Field(44044, ge=1, le=65535)
    timeout: timedelta = timedelta(seconds=5)
    caller_header: str = Field("telegramLogin", alias="callerheader")
    expose_domain_errors: bool = Field(True, alias="exposedomainerrors")

    model_config = ConfigDict(validate_by_name=True)

    @field_validator("timeout", mode="before")
    @classmethod
    def _parse_timeout(cls, value: Any) -> Any:
        return parse_duration(value)


class _EnvironmentSource(PydanticBaseSettingsSource):
    """Environment values for every key except ``env``.

    Shells export ``ENV`` for their own use, so the deployment environment
    is only taken from the config file.
    """

    def __init__(
        self, settings_cls: type[BaseSettings], source: PydanticBaseSettingsSource
    ) -> None:
        super().__init__(settings_cls)
        self._source = source

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        return self._source.get_field_value(field, field_name)

    def __call__(self) -> dict[str, Any]:
        return {
            key: value for key, value in self._source().items() if key.lower() != "env"
        }


def _rpc_config_factory() -> RpcServerConfig:
    return RpcServerConfig()  # type: ignore[call-arg]


class AppConfig(BaseSettings):
    env: str = Field(ENV_LOCAL, alias="env")
    users_storage: str = Field(alias="usersstorage")
    tokens_storage: TokensStorageConfig = Field(alias="tokensstorage")
    token_ttl: timedelta = Field(alias="tokenttl")
    rpc: RpcServerConfig = Field(
        default_factory=_rpc_config_factory,
        validation_alias=AliasChoices("grpc", "rpc"),
    )
    secret: str = Field(alias="SECRET", repr=False)
    admin_login: str | None = Field(None, alias="adminlogin")
    password_hash_method: str = Field("scrypt", alias="passwordhash")

    model_config = SettingsConfigDict(
        extra="ignore",
        validate_by_name=True,
        env_nested_delimiter="__",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # File values arrive as init kwargs, the environment overrides them.
        return _EnvironmentSource(settings_cls, env_settings), init_settings

    @field_validator("token_ttl", mode="before")
    @classmethod
    def _parse_ttl(cls, value: Any) -> Any:
        return parse_duration(value)

    @field_validator("env")
    @classmethod
    def _check_env(cls, value: str) -> str:
        value = value.lower()
        if value not in (ENV_LOCAL, ENV_PROD):
            raise ValueError(f"env must be one of {ENV_LOCAL!r}, {ENV_PROD!r}")
        return value

    @field_validator("token_ttl")
    @classmethod
    def _check_ttl(cls, value: timedelta) -> timedelta:
        if value <= timedelta(0):
            raise ValueError("tokenttl must be positive")
        return value

    @field_validator("secret")
    @classmethod
    def _check_secret(cls, value: str) -> str:
        if not value:
            raise ValueError("SECRET must not be empty")
        return value

    def is_production(self) -> bool:
        return self.env == ENV_PROD


def fetch_config_path(argv: Sequence[str] | None = None) -> str:
    parser = argparse.ArgumentParser(prog="sso", description="Single sign-on RPC service")
    parser.add_argument("--config", default="", help="path to config")
    args, _ = parser.parse_known_args(argv)
    return args.config or os.getenv("CONFIG_PATH", "")


def load_config(path: str | Path) -> AppConfig:
    if not path:
        raise ConfigError("config path is empty")
    config_path = Path(path)
    if not config_path.is_file():
        raise ConfigError(f"config file does not exist: {config_path}")

    with config_path.open(encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"config file must contain a mapping: {config_path}")

    try:
        return AppConfig(**data)
    except ValueError as exc:
        raise ConfigError(f"failed to read config: {exc}") from exc


__all__ = [
    "AppConfig",
    "ConfigError",
    "ENV_LOCAL",
    "ENV_PROD",
    "RpcServerConfig",
    "TokensStorageConfig",
    "fetch_config_path",
    "load_config",
    "parse_duration",
]
