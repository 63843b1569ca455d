"""
Route tests: health, live scores and odds analysis endpoints.
"""
from unittest.mock import MagicMock

import pytest
import requests
from fastapi.testclient import TestClient

from app.live_match import LiveMatchAggregator
from app.main import aggregator_dependency, app
from config.settings import Settings

client = TestClient(app)


def ok_response(items):
    response = MagicMock()
    response.raise_for_status.return_value = None
    response.json.return_value = {"errors": [], "response": items}
    return response


def fixture(fixture_id, home, away):
    return {
        "fixture": {"id": fixture_id, "date": "2026-10-16T19:00:00+00:00",
                    "venue": {"name": "Stadium"}, "status": {"short": "1H", "long": "First Half", "elapsed": 30}},
        "league": {"id": 39, "name": "Premier League", "logo": ""},
        "teams": {"home": {"id": 1, "name": home, "logo": ""}, "away": {"id": 2, "name": away, "logo": ""}},
        "goals": {"home": 0, "away": 0},
        "events": [],
    }


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def live_app(session):
    aggregator = LiveMatchAggregator(
        settings=Settings(api_football_key="test-key", _env_file=None),
        session=session,
    )
    app.dependency_overrides[aggregator_dependency] = lambda: aggregator
    yield session
    app.dependency_overrides.clear()


def test_health_endpoint_returns_200():
    """Test that /health returns HTTP 200"""
    response = client.get("/health")
    assert response.status_code == 200


def test_health_endpoint_returns_ok_status():
    """Test that /health returns status: ok"""
    response = client.get("/health")
    data = response.json()
    assert data["status"] == "ok"


def test_version_endpoint():
    data = client.get("/version").json()
    assert data["name"] == "Live Scores"


def test_live_scores_returns_matches(live_app):
    live_app.get.return_value = ok_response([
        fixture(1, "Liverpool", "Chelsea"),
        fixture(2, "Arsenal", "Everton"),
    ])

    response = client.get("/api/live-scores")

    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 2
    assert data["sport"] == "soccer"
    assert data["partial"] is False
    assert data["matches"][0]["fixtureId"] == 1
    assert data["cache"]["cacheSource"] == "upstream"


def test_live_scores_team_filter_reuses_cached_feed(live_app):
    live_app.get.return_value = ok_response([
        fixture(1, "Liverpool", "Chelsea"),
        fixture(2, "Arsenal", "Everton"),
    ])

    first = client.get("/api/live-scores?teams=arsenal,Spurs").json()
    second = client.get("/api/live-scores?teams=Chelsea").json()

    assert [m["fixtureId"] for m in first["matches"]] == [2]
    assert [m["fixtureId"] for m in second["matches"]] == [1]
    assert second["cache"]["cacheSource"] == "fresh"
    assert live_app.get.call_count == 1


def test_live_scores_match_status_lookup(live_app):
    live_app.get.return_value = ok_response([fixture(1, "Liverpool", "Chelsea")])

    data = client.get("/api/live-scores?home=Liverpool&away=Chelsea").json()

    assert data["status"] == "live"
    assert data["match"]["homeTeam"] == "Liverpool"


def test_live_scores_unknown_sport_is_400(live_app):
    response = client.get("/api/live-scores?sport=cricket")
    assert response.status_code == 400


def test_live_scores_upstream_failure_is_502(live_app):
    live_app.get.side_effect = requests.ConnectionError("down")

    response = client.get("/api/live-scores?sport=soccer")

    assert response.status_code == 502
    assert response.json()["detail"] == "Failed to fetch live scores"


def test_live_scores_nba_partial_is_200(live_app):
    def route(url, **kwargs):
        if kwargs["params"]["league"] == 12:
            return ok_response([{
                "id": 77, "date": "2026-10-16T23:30:00+00:00", "venue": "Crypto.com Arena",
                "status": {"short": "Q2", "long": "Quarter 2", "timer": "5"},
                "league": {"id": 12, "name": "NBA", "logo": ""},
                "teams": {"home": {"id": 1, "name": "Lakers"}, "away": {"id": 2, "name": "Warriors"}},
                "scores": {"home": {"total": 40, "quarter_1": 28, "quarter_2": 12},
                           "away": {"total": 38, "quarter_1": 25, "quarter_2": 13}},
            }])
        raise requests.Timeout("slow league")

    live_app.get.side_effect = route

    response = client.get("/api/live-scores?sport=nba")

    assert response.status_code == 200
    data = response.json()
    assert data["partial"] is True
    assert data["count"] == 1
    assert data["matches"][0]["quarter"] == 2
    assert data["matches"][0]["quarterScores"]["away"] == [25, 13, 0, 0]


def test_live_scores_missing_api_key_is_500(monkeypatch):
    from app.live_match import provider

    monkeypatch.setattr(provider, "default_settings", Settings(api_football_key=None, _env_file=None))
    provider.reset_live_aggregator()
    try:
        response = client.get("/api/live-scores")
    finally:
        provider.reset_live_aggregator()

    assert response.status_code == 500
    assert response.json()["detail"] == "API key not configured"


def test_odds_analysis_sorts_and_enriches():
    events = [
        {"home_team": "A", "away_team": "B", "commence_time": "2026-10-19T18:00:00Z",
         "bookmakers": [{"key": "x", "title": "X", "markets": [{"key": "h2h", "outcomes": [
             {"name": "A", "price": 2.0}, {"name": "B", "price": 2.0}]}]}]},
        {"home_team": "C", "away_team": "D", "commence_time": "2026-10-18T18:00:00Z", "bookmakers": []},
    ]

    response = client.post("/api/odds/analysis", json=events)

    assert response.status_code == 200
    data = response.json()
    assert [e["home_team"] for e in data["events"]] == ["C", "A"]
    assert data["events"][1]["analysis"]["impliedProbability"]["home"] == 50.0
    assert data["events"][0]["analysis"]["averageOdds"]["home"] is None


def test_odds_analysis_invalid_price_is_422():
    events = [{"home_team": "A", "away_team": "B", "bookmakers": [{"key": "x", "markets": [
        {"key": "h2h", "outcomes": [{"name": "A", "price": 0.5}, {"name": "B", "price": 3.0}]}]}]}]

    response = client.post("/api/odds/analysis", json=events)

    assert response.status_code == 422
