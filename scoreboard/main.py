"""FastAPI application wiring for routes, error handlers, and lifespan."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from redis.asyncio import Redis
from redis.exceptions import RedisError

from scoreboard import config
from scoreboard.api.errors import MISSING_FIELDS_MESSAGE, APIError
from scoreboard.api.routes import probes, router
from scoreboard.models.schemas import ErrorResponse
from scoreboard.services.leaderboard import LeaderboardService
from scoreboard.services.submission import SubmissionService
from scoreboard.storage.redis import create_redis_client, get_redis_url, redact_redis_url
from scoreboard.storage.scores import ScoreStore

logger = logging.getLogger(__name__)


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=level or config.get_log_level(),
        format="%(asctime)s │ %(levelname)-7s │ %(name)s │ %(message)s",
    )


def create_app(
    redis_client: Redis | None = None,
    key_prefix: str | None = None,
    static_dir: str | None = None,
) -> FastAPI:
    configure_logging()

    @asynccontextmanager
    async def app_lifespan(app: FastAPI):
        client = redis_client
        if client is None:
            client = create_redis_client()
            logger.info("Using score store at %s", redact_redis_url(get_redis_url()))

        store = ScoreStore(client, prefix=key_prefix or config.get_key_prefix())
        try:
            await store.ensure_schema()
        except RedisError:
            # Requests still get served and report storage failures individually.
            logger.exception("Could not initialize score store")

        app.state.redis = client
        app.state.store = store
        app.state.leaderboard_service = LeaderboardService(store)
        app.state.submission_service = SubmissionService(store)
        try:
            yield
        finally:
            await client.aclose()

    app = FastAPI(title="Scoreboard API", version="1.0.0", lifespan=app_lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(APIError)
    async def api_error_handler(_: Request, exc: APIError) -> JSONResponse:
        payload = ErrorResponse(error=exc.message)
        return JSONResponse(status_code=exc.status_code, content=payload.model_dump())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
        logger.debug("Rejected submission: %s", exc.errors())
        payload = ErrorResponse(error=MISSING_FIELDS_MESSAGE)
        return JSONResponse(status_code=400, content=payload.model_dump())

    app.include_router(router)
    app.include_router(probes)

    # Mounted last so the game client never shadows the API.
    static_dir = static_dir or config.get_static_dir()
    if static_dir:
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
    return app


app = create_app()


def run() -> None:
    uvicorn.run(app, host=config.get_host(), port=config.get_port())


if __name__ == "__main__":
    run()
