"""
Live Match module: aggregated live scores for soccer and basketball.

Fetches API-Football / API-Basketball feeds, normalizes both into
NormalizedMatch and serves them through a short-TTL cache.
"""
from .models import (
    NormalizedMatch,
    MatchBatch,
    MatchEvent,
    MatchStatus,
    MatchStatusResult,
    LiveMatchResult,
    TeamInfo,
    LeagueInfo,
    BasketballDetails,
    QuarterScores,
    EventType,
    Sport,
    SportFamily,
)
from .normalizers import normalize_soccer_fixture, normalize_basketball_game
from .provider import (
    LiveMatchAggregator,
    filter_by_teams,
    get_live_aggregator,
    reset_live_aggregator,
)

__all__ = [
    # Models
    "NormalizedMatch",
    "MatchBatch",
    "MatchEvent",
    "MatchStatus",
    "MatchStatusResult",
    "LiveMatchResult",
    "TeamInfo",
    "LeagueInfo",
    "BasketballDetails",
    "QuarterScores",
    "EventType",
    "Sport",
    "SportFamily",
    # Normalizers
    "normalize_soccer_fixture",
    "normalize_basketball_game",
    # Provider
    "LiveMatchAggregator",
    "filter_by_teams",
    "get_live_aggregator",
    "reset_live_aggregator",
]
