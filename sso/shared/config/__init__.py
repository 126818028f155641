# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .settings import (
    ENV_LOCAL,
    ENV_PROD,
    AppConfig,
    ConfigError,
    RpcServerConfig,
    TokensStorageConfig,
    fetch_config_path,
    load_config,
    parse_duration,
)

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
