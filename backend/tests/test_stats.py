"""Tests for collection statistics."""

from __future__ import annotations

from typing import Any

from fastapi.testclient import TestClient

from backend.tests.utils import sign_up_and_sign_in
from retrovault.services.stats import summarize_games


def _add(client: TestClient, **fields: Any) -> None:
    response = client.post("/api/games", json=fields)
    assert response.status_code == 201, response.text


def test_stats_scenario(api_client: TestClient) -> None:
    sign_up_and_sign_in(api_client, email="stats@example.com")
    _add(api_client, title="Contra", platform="NES", status="owned")
    _add(api_client, title="Metroid", platform="NES", status="owned")
    _add(api_client, title="F-Zero", platform="SNES", status="wishlist")

    response = api_client.get("/api/stats")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    stats = body["stats"]
    assert stats["totalGames"] == 3
    assert stats["ownedCount"] == 2
    assert stats["wishlistCount"] == 1
    assert stats["platformBreakdown"] == [{"name": "NES", "count": 2}, {"name": "SNES", "count": 1}]
    assert stats["statusBreakdown"] == [{"name": "Owned", "count": 2}, {"name": "Wishlist", "count": 1}]
    assert stats["genreBreakdown"] == []
    assert stats["conditionBreakdown"] == []
    assert stats["totalValue"] == 0
    assert stats["averageYear"] is None


def test_stats_empty_collection(api_client: TestClient) -> None:
    sign_up_and_sign_in(api_client, email="empty@example.com")

    stats = api_client.get("/api/stats").json()["stats"]

    assert stats["totalGames"] == 0
    assert stats["platformBreakdown"] == []
    assert stats["averageYear"] is None


def test_stats_only_count_own_records(api_client: TestClient) -> None:
    sign_up_and_sign_in(api_client, email="first@example.com")
    _add(api_client, title="Contra", platform="NES")

    other = TestClient(api_client.app)
    sign_up_and_sign_in(other, email="second@example.com")

    assert other.get("/api/stats").json()["stats"]["totalGames"] == 0
    assert api_client.get("/api/stats").json()["stats"]["totalGames"] == 1


def test_stats_are_deterministic_with_ties(api_client: TestClient) -> None:
    sign_up_and_sign_in(api_client, email="ties@example.com")
    for title, platform, genre in [
        ("Sonic", "Genesis", "Platformer"),
        ("Contra", "NES", "Shooter"),
        ("Streets of Rage", "Genesis", "Brawler"),
        ("Metroid", "NES", "Platformer"),
        ("Mega Man", "NES", None),
    ]:
        fields: dict[str, Any] = {"title": title, "platform": platform}
        if genre:
            fields["genre"] = genre
        _add(api_client, **fields)

    first = api_client.get("/api/stats").json()["stats"]
    second = api_client.get("/api/stats").json()["stats"]

    assert first == second
    assert first["platformBreakdown"] == [{"name": "NES", "count": 3}, {"name": "Genesis", "count": 2}]
    assert first["genreBreakdown"] == [
        {"name": "Platformer", "count": 2},
        {"name": "Shooter", "count": 1},
        {"name": "Brawler", "count": 1},
    ]


def test_summarize_games_values_and_conditions() -> None:
    documents = [
        {"status": "owned", "platform": "NES", "year": 1986, "condition": "good", "purchase_info": {"price": 10.105}},
        {"status": "owned", "platform": "NES", "year": 1987, "condition": "mint", "purchase_info": {"price": 20}},
        {"status": "owned", "platform": "SNES", "condition": "good"},
        {"status": "wishlist", "platform": "SNES", "condition": "poor", "purchase_info": {"price": 5.5}},
    ]

    stats = summarize_games(documents)

    assert stats.total_value == 35.61
    # 1986.5 rounds half-up.
    assert stats.average_year == 1987
    assert [(entry.name, entry.count) for entry in stats.condition_breakdown] == [("good", 2), ("mint", 1)]


def test_summarize_games_average_year_rounds_down_below_half() -> None:
    documents = [
        {"status": "owned", "platform": "NES", "year": 1985},
        {"status": "owned", "platform": "NES", "year": 1985},
        {"status": "owned", "platform": "NES", "year": 1986},
    ]

    assert summarize_games(documents).average_year == 1985
