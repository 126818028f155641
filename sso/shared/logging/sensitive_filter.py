# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import re
from typing import Any

SENSITIVE_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    # Signed tokens (header.payload.signature)
    (re.compile(r"\beyJ[\w-]+\.[\w-]+\.[\w-]+"), "***JWT***"),
    (re.compile(r"(bearer\s+)([\w.-]{20,})", re.IGNORECASE), r"\1***REDACTED***"),
    (re.compile(r"(token\s*[:=]\s*['\"]?)([\w.-]{20,})"), r"\1***REDACTED***"),
    # Credentials
    (re.compile(r"(password\s*[:=]\s*['\"]?)([^'\"\s,}]+)", re.IGNORECASE), r"\1***REDACTED***"),
    (re.compile(r"(secret\s*[:=]\s*['\"]?)([^'\"\s,}]+)", re.IGNORECASE), r"\1***REDACTED***"),
    # Stored password hashes, method$salt$digest
    (re.compile(r"\b((?:scrypt|pbkdf2)[^$\s]*\$)[^$\s]+\$[0-9a-f]+"), r"\1***REDACTED***"),
    # Storage URLs with a password
    (re.compile(r"([a-z][a-z0-9+]*://[^:/@\s]*:)[^@\s]+@"), r"\1***REDACTED***@"),
]


def sanitize_message(message: str) -> str:
    for pattern, replacement in SENSITIVE_PATTERNS:
        message = pattern.sub(replacement, message)
    return message


def sanitize_record(record: dict[str, Any]) -> bool:
    """Loguru filter: redact the message in place and always let it through."""
    record["message"] = sanitize_message(record["message"])
    return True
