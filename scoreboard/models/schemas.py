"""Pydantic request/response schemas for the public scoreboard API.

Request models parse the submitted run; anything that does not fit them is
rejected before it reaches the services. Response models mirror the JSON
envelope every endpoint returns: ``success`` plus the payload or ``error``.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import AfterValidator, AllowInfNan, BaseModel, Field, Strict, StrictInt, StrictStr


def within_float_range(value: int | float) -> int | float:
    # Stored scores are Redis doubles; larger JSON integers cannot be ranked.
    try:
        float(value)
    except OverflowError:
        raise ValueError("number out of range") from None
    return value


# JSON numbers only: no booleans, no numeric strings, no NaN or Infinity.
Number = Annotated[
    Union[StrictInt, Annotated[float, Strict(), AllowInfNan(False)]],
    AfterValidator(within_float_range),
]


class ErrorResponse(BaseModel):
    success: Literal[False] = False
    error: str


class ScoreSubmission(BaseModel):
    username: Annotated[StrictStr, Field(min_length=1)]
    score: Number
    coins: Number
    level: Optional[Number] = None
    completed: Any = None


class ScoreRow(BaseModel):
    username: str
    score: int
    coins: int
    level: int
    completed: int
    created_at: str


class LeaderboardResponse(BaseModel):
    success: Literal[True] = True
    scores: list[ScoreRow]


class UserScore(BaseModel):
    username: str
    best_score: int
    total_coins: int
    games_played: int
    highest_level: int
    games_completed: int


class UserScoreResponse(BaseModel):
    success: Literal[True] = True
    userScore: UserScore | None


class SubmitResponse(BaseModel):
    success: Literal[True] = True
    id: int
    rank: int
    message: str


class Stats(BaseModel):
    total_games: int
    total_players: int
    highest_score: int | None
    avg_score: float | None
    games_completed: int


class StatsResponse(BaseModel):
    success: Literal[True] = True
    stats: Stats


class HealthResponse(BaseModel):
    status: Literal["ok"]


class ReadyResponse(BaseModel):
    status: Literal["ok"]
