"""Score records persisted in Redis hashes and sorted sets.

Every submitted run gets an id from a counter and a hash holding its fields.
Orderings and aggregates are kept next to the records and written in the
same WATCH/MULTI/EXEC transaction as the record itself:

- ``by_score``: sorted set of zero-padded ids scored by the run's score.
  Ids grow with insertion time, so equal scores come back most recent first
  from ``ZREVRANGE``.
- ``user_best`` / ``user_level``: per-username maxima maintained with
  ``ZADD GT``.
- ``user:{username}`` and ``totals``: counters for sums and counts, stored as
  exact decimal integers.
"""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass
from datetime import datetime

from redis.asyncio import Redis
from redis.asyncio.client import Pipeline

ID_WIDTH = 20
LOCAL_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(slots=True)
class NewScore:
    username: str
    score: int
    coins: int
    level: int
    completed: int


@dataclass(slots=True)
class StoredScore:
    username: str
    score: int
    coins: int
    level: int
    completed: int
    created_at: str


@dataclass(slots=True)
class UserAggregate:
    username: str
    best_score: int
    total_coins: int
    games_played: int
    highest_level: int
    games_completed: int


@dataclass(slots=True)
class GlobalAggregate:
    total_games: int
    total_players: int
    highest_score: int | None
    avg_score: float | None
    games_completed: int


def score_member(record_id: int) -> str:
    return str(record_id).zfill(ID_WIDTH)


def format_local_time(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp).strftime(LOCAL_TIME_FORMAT)


def exclusive_bound(value: float) -> str:
    # "(" makes ZCOUNT bounds strict. Redis scores are doubles.
    if abs(value) > sys.float_info.max:
        return "(+inf" if value > 0 else "(-inf"
    return f"({value}"


class ScoreStore:
    def __init__(self, redis_client: Redis, prefix: str = "scores"):
        self.redis = redis_client
        self.prefix = prefix

    def key(self, *parts: str) -> str:
        return ":".join((self.prefix, *parts))

    async def ensure_schema(self) -> None:
        """Initialize the id counter unless it already exists."""
        await self.redis.set(self.key("next_id"), 0, nx=True)

    async def insert(self, record: NewScore) -> int:
        """Write one run and its aggregates atomically, returning its id.

        Counters are read under WATCH and written back as absolute values, so
        EXEC holds nothing that can fail on its arguments and either applies
        every command or none. Sums are kept as decimal strings and never
        overflow.
        """
        record_id = await self.redis.incr(self.key("next_id"))
        user_key = self.key("user", record.username)
        totals_key = self.key("totals")

        async def write(pipe: Pipeline) -> None:
            user = await pipe.hgetall(user_key)
            totals = await pipe.hgetall(totals_key)

            pipe.multi()
            pipe.hset(
                self.key("record", str(record_id)),
                mapping={
                    "username": record.username,
                    "score": record.score,
                    "coins": record.coins,
                    "level": record.level,
                    "completed": record.completed,
                    "created_at": repr(time.time()),
                },
            )
            pipe.zadd(self.key("by_score"), {score_member(record_id): record.score})
            pipe.zadd(self.key("user_best"), {record.username: record.score}, gt=True)
            pipe.zadd(self.key("user_level"), {record.username: record.level}, gt=True)
            pipe.hset(
                user_key,
                mapping={
                    "coins": int(user.get("coins", 0)) + record.coins,
                    "games_played": int(user.get("games_played", 0)) + 1,
                    "games_completed": int(user.get("games_completed", 0)) + record.completed,
                },
            )
            pipe.hset(
                totals_key,
                mapping={
                    "score_sum": int(totals.get("score_sum", 0)) + record.score,
                    "games_completed": int(totals.get("games_completed", 0)) + record.completed,
                },
            )

        # Retries only when a concurrent insert touched the same counters.
        await self.redis.transaction(write, user_key, totals_key)
        return record_id

    async def query_top(self, limit: int) -> list[StoredScore]:
        """Return up to ``limit`` records, best first. Negative means all."""
        if limit == 0:
            return []
        end = -1 if limit < 0 else limit - 1
        members = await self.redis.zrevrange(self.key("by_score"), 0, end)
        if not members:
            return []

        # Records are immutable, so a plain pipeline is enough here.
        async with self.redis.pipeline(transaction=False) as pipe:
            for member in members:
                pipe.hgetall(self.key("record", str(int(member))))
            rows = await pipe.execute()

        return [
            StoredScore(
                username=row["username"],
                score=int(row["score"]),
                coins=int(row["coins"]),
                level=int(row["level"]),
                completed=int(row["completed"]),
                created_at=format_local_time(float(row["created_at"])),
            )
            for row in rows
            if row
        ]

    async def query_user_aggregate(self, username: str) -> UserAggregate | None:
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.zscore(self.key("user_best"), username)
            pipe.zscore(self.key("user_level"), username)
            pipe.hgetall(self.key("user", username))
            best_score, highest_level, counters = await pipe.execute()

        if best_score is None:
            return None
        return UserAggregate(
            username=username,
            best_score=int(best_score),
            total_coins=int(counters.get("coins", 0)),
            games_played=int(counters.get("games_played", 0)),
            highest_level=int(highest_level or 1),
            games_completed=int(counters.get("games_completed", 0)),
        )

    async def query_global_aggregate(self) -> GlobalAggregate:
        by_score = self.key("by_score")
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.zcard(by_score)
            pipe.zcard(self.key("user_best"))
            pipe.zrevrange(by_score, 0, 0, withscores=True)
            pipe.hgetall(self.key("totals"))
            total_games, total_players, top, totals = await pipe.execute()

        if not total_games:
            return GlobalAggregate(
                total_games=0,
                total_players=0,
                highest_score=None,
                avg_score=None,
                games_completed=0,
            )
        return GlobalAggregate(
            total_games=total_games,
            total_players=total_players,
            highest_score=int(top[0][1]),
            avg_score=int(totals.get("score_sum", 0)) / total_games,
            games_completed=int(totals.get("games_completed", 0)),
        )

    async def count_scores_greater_than(self, score: float) -> int:
        return await self.redis.zcount(self.key("by_score"), exclusive_bound(score), "+inf")

    async def ping(self) -> bool:
        response = await self.redis.ping()
        return bool(response)
