"""HTTP route handlers for score submission, leaderboard views and health checks."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, Request

from scoreboard.api.errors import APIError
from scoreboard.models.schemas import (
    HealthResponse,
    LeaderboardResponse,
    ReadyResponse,
    ScoreRow,
    ScoreSubmission,
    Stats,
    StatsResponse,
    SubmitResponse,
    UserScore,
    UserScoreResponse,
)
from scoreboard.services.leaderboard import LeaderboardService, parse_limit
from scoreboard.services.submission import InvalidUsernameError, SubmissionService
from scoreboard.storage.scores import ScoreStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")
probes = APIRouter()


def get_leaderboard_service(request: Request) -> LeaderboardService:
    return request.app.state.leaderboard_service


def get_submission_service(request: Request) -> SubmissionService:
    return request.app.state.submission_service


def get_store(request: Request) -> ScoreStore:
    return request.app.state.store


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard(
    limit: str | None = Query(default=None),
    service: LeaderboardService = Depends(get_leaderboard_service),
) -> LeaderboardResponse:
    try:
        rows = await service.get_top(parse_limit(limit))
    except Exception as exc:
        logger.exception("Error fetching leaderboard")
        raise APIError("Failed to fetch leaderboard", status_code=500) from exc

    return LeaderboardResponse(
        scores=[
            ScoreRow(
                username=r.username,
                score=r.score,
                coins=r.coins,
                level=r.level,
                completed=r.completed,
                created_at=r.created_at,
            )
            for r in rows
        ],
    )


@router.get("/user/{username}", response_model=UserScoreResponse)
async def get_user_score(
    username: str,
    service: LeaderboardService = Depends(get_leaderboard_service),
) -> UserScoreResponse:
    try:
        summary = await service.get_user_summary(username)
    except Exception as exc:
        logger.exception("Error fetching user score for %r", username)
        raise APIError("Failed to fetch user score", status_code=500) from exc

    if summary is None:
        return UserScoreResponse(userScore=None)
    return UserScoreResponse(
        userScore=UserScore(
            username=summary.username,
            best_score=summary.best_score,
            total_coins=summary.total_coins,
            games_played=summary.games_played,
            highest_level=summary.highest_level,
            games_completed=summary.games_completed,
        ),
    )


@router.post("/scores", response_model=SubmitResponse)
async def submit_score(
    payload: ScoreSubmission,
    service: SubmissionService = Depends(get_submission_service),
) -> SubmitResponse:
    try:
        result = await service.submit(payload)
    except InvalidUsernameError as exc:
        raise APIError("Invalid username", status_code=400) from exc
    except Exception as exc:
        logger.exception("Error saving score")
        raise APIError("Failed to save score", status_code=500) from exc

    return SubmitResponse(id=result.id, rank=result.rank, message="Score saved successfully")


@router.get("/stats", response_model=StatsResponse)
async def get_stats(
    service: LeaderboardService = Depends(get_leaderboard_service),
) -> StatsResponse:
    try:
        stats = await service.get_stats()
    except Exception as exc:
        logger.exception("Error fetching stats")
        raise APIError("Failed to fetch stats", status_code=500) from exc

    return StatsResponse(
        stats=Stats(
            total_games=stats.total_games,
            total_players=stats.total_players,
            highest_score=stats.highest_score,
            avg_score=stats.avg_score,
            games_completed=stats.games_completed,
        ),
    )


# These probes are intended for infrastructure and do not need to appear in API docs.
@probes.get("/healthz", response_model=HealthResponse, include_in_schema=False)
async def healthz() -> HealthResponse:
    return HealthResponse(status="ok")


@probes.get("/readyz", response_model=ReadyResponse, include_in_schema=False)
async def readyz(store: ScoreStore = Depends(get_store)) -> ReadyResponse:
    try:
        # Readiness verifies backing Redis connectivity, not just process liveness.
        is_ready = await store.ping()
    except Exception as exc:
        raise APIError("Redis readiness check failed", status_code=503) from exc

    if not is_ready:
        raise APIError("Redis readiness check failed", status_code=503)
    return ReadyResponse(status="ok")
