"""Sanitize, normalize and persist submitted runs."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Any

from scoreboard.models.schemas import ScoreSubmission
from scoreboard.storage.scores import NewScore, ScoreStore

logger = logging.getLogger(__name__)

MAX_USERNAME_LENGTH = 20
MIN_LEVEL = 1
MAX_LEVEL = 2
_DISALLOWED_USERNAME_CHARS = re.compile(r"[^a-zA-Z0-9\s]")


class InvalidUsernameError(Exception):
    """Raised when nothing usable is left of a username after sanitizing."""


@dataclass(slots=True)
class SubmissionResult:
    id: int
    rank: int


def sanitize_username(username: str) -> str:
    trimmed = username.strip()[:MAX_USERNAME_LENGTH]
    # Stripping again keeps the result stable when sanitized twice.
    return _DISALLOWED_USERNAME_CHARS.sub("", trimmed).strip()


def clamp_count(value: float) -> int:
    return max(0, math.floor(value))


def clamp_level(level: float | None) -> int:
    return int(max(MIN_LEVEL, min(MAX_LEVEL, level or MIN_LEVEL)))


def is_truthy(value: Any) -> bool:
    # Empty JSON arrays and objects are still truthy for game clients.
    if isinstance(value, (list, dict)):
        return True
    return bool(value)


def normalize_submission(payload: ScoreSubmission) -> NewScore:
    username = sanitize_username(payload.username)
    if not username:
        raise InvalidUsernameError(payload.username)
    return NewScore(
        username=username,
        score=clamp_count(payload.score),
        coins=clamp_count(payload.coins),
        level=clamp_level(payload.level),
        completed=1 if is_truthy(payload.completed) else 0,
    )


class SubmissionService:
    def __init__(self, store: ScoreStore):
        self.store = store

    async def submit(self, payload: ScoreSubmission) -> SubmissionResult:
        record = normalize_submission(payload)
        record_id = await self.store.insert(record)
        # Rank compares against the raw submitted score, not the clamped one.
        higher = await self.store.count_scores_greater_than(payload.score)
        logger.info("Saved run %s for %r (score=%s)", record_id, record.username, record.score)
        return SubmissionResult(id=record_id, rank=higher + 1)
