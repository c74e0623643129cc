"""Environment-driven settings for the scoreboard server."""

from __future__ import annotations

import os

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000
DEFAULT_KEY_PREFIX = "scores"
DEFAULT_LOG_LEVEL = "INFO"


def get_host() -> str:
    return os.getenv("HOST", DEFAULT_HOST)


def get_port() -> int:
    return int(os.getenv("PORT", DEFAULT_PORT))


def get_key_prefix() -> str:
    return os.getenv("SCORES_KEY_PREFIX", DEFAULT_KEY_PREFIX)


def get_static_dir() -> str | None:
    # Unset or empty disables static serving.
    return os.getenv("STATIC_DIR") or None


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
