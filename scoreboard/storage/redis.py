"""Redis connection helpers for the score store."""

from __future__ import annotations

import os
from urllib.parse import urlsplit, urlunsplit

from redis.asyncio import Redis

DEFAULT_REDIS_URL = "redis://localhost:6379/0"


def get_redis_url() -> str:
    return os.getenv("REDIS_URL", DEFAULT_REDIS_URL)


def redact_redis_url(redis_url: str) -> str:
    """Return the URL with any password removed, for log output."""
    parts = urlsplit(redis_url)
    if parts.password is None:
        return redis_url
    netloc = parts.hostname or ""
    if parts.username:
        netloc = f"{parts.username}@{netloc}"
    if parts.port is not None:
        netloc = f"{netloc}:{parts.port}"
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


def create_redis_client(redis_url: str | None = None) -> Redis:
    # decode_responses keeps hash fields and sorted set members as str.
    return Redis.from_url(redis_url or get_redis_url(), decode_responses=True)
