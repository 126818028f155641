# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .jwt_signer import InvalidTokenError, JwtTokenSigner
from .redis_token_cache import RedisTokenCache, TokenStorageError

__all__ = ["InvalidTokenError", "JwtTokenSigner", "RedisTokenCache", "TokenStorageError"]
