"""Read-only leaderboard views over the score store."""

from __future__ import annotations

import re

from scoreboard.storage.scores import GlobalAggregate, ScoreStore, StoredScore, UserAggregate

DEFAULT_LIMIT = 10
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_limit(raw: str | None) -> int:
    """Read ``limit`` the lenient way: leading digits win, junk or 0 means 10.

    There is no upper bound and a negative value means "everything".
    """
    if raw is None:
        return DEFAULT_LIMIT
    match = _LEADING_INT.match(raw)
    if match is None:
        return DEFAULT_LIMIT
    return int(match.group(1)) or DEFAULT_LIMIT


class LeaderboardService:
    def __init__(self, store: ScoreStore):
        self.store = store

    async def get_top(self, limit: int = DEFAULT_LIMIT) -> list[StoredScore]:
        return await self.store.query_top(limit)

    async def get_user_summary(self, username: str) -> UserAggregate | None:
        return await self.store.query_user_aggregate(username)

    async def get_stats(self) -> GlobalAggregate:
        return await self.store.query_global_aggregate()
