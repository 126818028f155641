# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from sso.shared.errors.base import DomainError

__all__ = ["DomainError"]
