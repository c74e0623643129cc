from __future__ import annotations

import uuid

import fakeredis
import pytest
from fastapi.testclient import TestClient

from scoreboard.main import create_app


@pytest.fixture()
def key_prefix() -> str:
    return f"testscores_{uuid.uuid4().hex}"


@pytest.fixture()
def client(key_prefix: str):
    redis_client = fakeredis.FakeAsyncRedis(decode_responses=True)
    app = create_app(redis_client=redis_client, key_prefix=key_prefix)

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def broken_client(key_prefix: str):
    server = fakeredis.FakeServer()
    server.connected = False
    redis_client = fakeredis.FakeAsyncRedis(server=server, decode_responses=True)
    app = create_app(redis_client=redis_client, key_prefix=key_prefix)

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def post_score():
    def post(client, username: str, score, coins=0, **extra):
        return client.post(
            "/api/scores",
            json={"username": username, "score": score, "coins": coins, **extra},
        )

    return post
