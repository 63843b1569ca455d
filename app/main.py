"""
Live Scores - FastAPI Application
Live match data from API-Sports (football + basketball) behind a short-TTL cache
"""
import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query

from app.exceptions import ConfigurationError, UpstreamFetchError
from app.live_match import (
    LiveMatchAggregator,
    Sport,
    get_live_aggregator,
)
from app.odds import analyse_event
from app.schemas import OddsEvent

logger = logging.getLogger("main")

# Version tracking
APP_VERSION = "v0.3.0"
APP_NAME = "Live Scores"
APP_STAGE = "Beta"

app = FastAPI(
    title=f"{APP_NAME} ({APP_STAGE})",
    description="Live soccer and basketball scores from API-Sports",
    version=APP_VERSION
)


def aggregator_dependency() -> LiveMatchAggregator:
    """Resolve the process-wide aggregator; a missing API key is a server error."""
    try:
        return get_live_aggregator()
    except ConfigurationError as e:
        logger.error(f"Live scores unavailable: {e}")
        raise HTTPException(status_code=500, detail="API key not configured")


def parse_sport(value: Optional[str]) -> Sport:
    try:
        return Sport.parse(value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def parse_teams(teams: Optional[str]) -> Optional[List[str]]:
    """Split 'Knicks,Spurs' into a team filter."""
    if not teams:
        return None
    terms = [t.strip() for t in teams.split(",") if t.strip()]
    return terms or None


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok", "source": "api-sports", "mode": "live"}


@app.get("/version")
def version_info():
    """Version information endpoint."""
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "stage": APP_STAGE,
        "full": f"{APP_NAME} {APP_VERSION} ({APP_STAGE})"
    }


@app.get("/cache/stats")
def cache_stats(aggregator: LiveMatchAggregator = Depends(aggregator_dependency)):
    """Get cache statistics."""
    return aggregator.get_cache_stats()


# ===== LIVE SCORES =====

@app.get("/api/live-scores")
def live_scores(
    sport: Optional[str] = Query(None, description="soccer (default), basketball or nba"),
    teams: Optional[str] = Query(None, description="Comma-separated team name filter"),
    home: Optional[str] = Query(None, description="Home team, for a single match status lookup"),
    away: Optional[str] = Query(None, description="Away team, for a single match status lookup"),
    aggregator: LiveMatchAggregator = Depends(aggregator_dependency),
):
    """
    Live matches for a sport, or the status of one match.

    - ?sport=nba                      all live NBA games
    - ?sport=nba&teams=Knicks,Spurs   live NBA games involving either team
    - ?home=Liverpool&away=Chelsea    live / upcoming / finished / not_found
    """
    sport_type = parse_sport(sport)

    try:
        if home and away:
            return aggregator.get_match_status(home, away, sport_type).to_dict()

        result = aggregator.get_live_batch(sport_type, parse_teams(teams))
    except UpstreamFetchError as e:
        logger.error(f"[Live-Scores] {sport_type.value}: {e}")
        raise HTTPException(status_code=502, detail="Failed to fetch live scores")
    except TimeoutError as e:
        logger.error(f"[Live-Scores] {sport_type.value}: {e}")
        raise HTTPException(status_code=504, detail="Timed out waiting for live scores")

    return {
        "count": len(result.matches),
        "matches": [m.to_dict() for m in result.matches],
        "sport": result.sport.value,
        "partial": result.partial,
        "lastUpdated": result.cache_meta.last_updated,
        "cache": result.cache_meta.to_dict(),
    }


# ===== ODDS =====

@app.post("/api/odds/analysis")
def odds_analysis(events: List[OddsEvent]):
    """
    Enrich bookmaker odds events with average odds, implied probability
    and best price per outcome. Events are returned by kick-off time.
    """
    try:
        enriched = [
            {**event.model_dump(), "analysis": analyse_event(event)}
            for event in events
        ]
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    enriched.sort(key=lambda e: e.get("commence_time") or "")
    return {"count": len(enriched), "events": enriched}
