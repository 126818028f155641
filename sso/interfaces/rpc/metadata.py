# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""RPC metadata carried in HTTP headers.

Every header that is not part of the HTTP transport itself is metadata.
Keys are lower-cased, the way gRPC normalises metadata keys.
"""

from __future__ import annotations

from collections.abc import Iterable

from flask import request

TRANSPORT_HEADERS = frozenset(
    {
        "accept",
        "accept-encoding",
        "accept-language",
        "connection",
        "content-length",
        "content-type",
        "cookie",
        "expect",
        "host",
        "keep-alive",
        "origin",
        "referer",
        "te",
        "transfer-encoding",
        "upgrade",
        "user-agent",
        "x-forwarded-for",
        "x-forwarded-proto",
        "x-real-ip",
        "x-request-id",
    }
)


def metadata_from_headers(headers: Iterable[tuple[str, str]]) -> dict[str, str] | None:
    metadata = {
        key.lower(): value
        for key, value in headers
        if key.lower() not in TRANSPORT_HEADERS
    }
    return metadata or None


def request_metadata() -> dict[str, str] | None:
    return metadata_from_headers(request.headers.items())


__all__ = ["TRANSPORT_HEADERS", "metadata_from_headers", "request_metadata"]
