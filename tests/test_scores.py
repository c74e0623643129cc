from __future__ import annotations

import pytest


def only_row(client):
    rows = client.get("/api/leaderboard").json()["scores"]
    assert len(rows) == 1
    return rows[0]


def test_submission_is_clamped_before_storing(client, post_score):
    response = post_score(client, "abc", 150.7, coins=-5, level=3, completed=True)
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Score saved successfully"

    row = only_row(client)
    assert row["username"] == "abc"
    assert row["score"] == 150
    assert row["coins"] == 0
    assert row["level"] == 2
    assert row["completed"] == 1


@pytest.mark.parametrize(
    ("extra", "level", "completed"),
    [
        ({}, 1, 0),
        ({"level": 0}, 1, 0),
        ({"level": -4}, 1, 0),
        ({"level": 1.9}, 1, 0),
        ({"level": 2, "completed": "yes"}, 2, 1),
        ({"completed": 0}, 1, 0),
        ({"completed": ""}, 1, 0),
        ({"completed": None}, 1, 0),
        ({"completed": []}, 1, 1),
    ],
)
def test_optional_fields_default_and_clamp(client, post_score, extra, level, completed):
    assert post_score(client, "player", 10, coins=2, **extra).status_code == 200

    row = only_row(client)
    assert row["level"] == level
    assert row["completed"] == completed


def test_ids_increase_with_each_submission(client, post_score):
    ids = [post_score(client, "p", score).json()["id"] for score in (10, 5, 20)]
    assert ids == sorted(ids)
    assert len(set(ids)) == 3


def test_rank_counts_strictly_higher_scores(client, post_score):
    for score in (300, 200, 100):
        post_score(client, "seed", score)

    assert post_score(client, "new", 250).json()["rank"] == 2
    assert post_score(client, "tie", 200).json()["rank"] == 3
    assert post_score(client, "top", 999).json()["rank"] == 1


def test_rank_uses_raw_submitted_score(client, post_score):
    assert post_score(client, "first", 50).json()["rank"] == 1
    # Stored as 0, but ranked against -5: both 50 and its own 0 are higher.
    assert post_score(client, "negative", -5).json()["rank"] == 3

    post_score(client, "exact", 150)
    # Stored as 150, ranked as 150.7: nothing is strictly higher.
    assert post_score(client, "fraction", 150.7).json()["rank"] == 1


def test_username_is_trimmed_truncated_and_stripped(client, post_score):
    response = post_score(client, "  Al!ce Smith_123456789XYZ ", 10)
    assert response.status_code == 200
    assert only_row(client)["username"] == "Alce Smith12345678"


def test_username_without_allowed_characters_is_rejected(client, post_score):
    response = post_score(client, "!!!", 100)
    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Invalid username"}

    stats = client.get("/api/stats").json()["stats"]
    assert stats["total_games"] == 0


def test_whitespace_username_is_rejected_as_invalid(client, post_score):
    response = post_score(client, "   ", 100)
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid username"


@pytest.mark.parametrize(
    "payload",
    [
        {"score": 10, "coins": 1},
        {"username": "", "score": 10, "coins": 1},
        {"username": "bob", "coins": 1},
        {"username": "bob", "score": 10},
        {"username": "bob", "score": "10", "coins": 1},
        {"username": "bob", "score": True, "coins": 1},
        {"username": "bob", "score": 10, "coins": None},
        {"username": 42, "score": 10, "coins": 1},
        {"username": "bob", "score": 10, "coins": 1, "level": "2"},
    ],
)
def test_missing_or_invalid_fields_are_rejected(client, payload):
    response = client.post("/api/scores", json=payload)
    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "error": "Missing required fields: username, score, coins",
    }
    assert client.get("/api/stats").json()["stats"]["total_games"] == 0


def test_malformed_json_is_rejected(client):
    response = client.post(
        "/api/scores",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_scores_beyond_64_bits_are_stored_whole(client, post_score):
    response = post_score(client, "bob", 10**19, coins=10**19)
    assert response.status_code == 200
    assert response.json()["rank"] == 1

    row = only_row(client)
    assert row["score"] == 10**19
    assert row["coins"] == 10**19


@pytest.mark.parametrize("score", [10**400, -(10**400)])
def test_numbers_outside_double_range_are_rejected(client, post_score, score):
    response = post_score(client, "bob", score)
    assert response.status_code == 400
    assert response.json()["error"] == "Missing required fields: username, score, coins"

    assert client.get("/api/leaderboard").json()["scores"] == []
    assert client.get("/api/stats").json()["stats"]["total_games"] == 0
