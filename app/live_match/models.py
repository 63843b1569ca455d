"""
Data models for live match aggregation.

These dataclasses represent the canonical shape of match data,
independent of which API-Sports provider it came from.
"""
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any
from enum import Enum

from app.cache.core import CacheMeta
from app.utils.helpers import safe_lower


class SportFamily(Enum):
    """Upstream provider family."""
    SOCCER = "soccer"
    BASKETBALL = "basketball"


class Sport(Enum):
    """Sport selector accepted by the aggregator."""
    SOCCER = "soccer"
    BASKETBALL = "basketball"
    NBA = "nba"

    @property
    def family(self) -> SportFamily:
        if self is Sport.SOCCER:
            return SportFamily.SOCCER
        return SportFamily.BASKETBALL

    @classmethod
    def parse(cls, value: Optional[str]) -> "Sport":
        """
        Parse a sport selector from a query string.

        Empty defaults to soccer. Accepts "football", "basketball_nba" and
        "basketball_*" aliases (The Odds API sport keys).

        Raises:
            ValueError: For anything else
        """
        s = safe_lower(value).strip()
        if not s:
            return cls.SOCCER
        if s in ("soccer", "football"):
            return cls.SOCCER
        if s in ("nba", "basketball_nba"):
            return cls.NBA
        if s == "basketball" or s.startswith("basketball_"):
            return cls.BASKETBALL
        raise ValueError(f"Unknown sport: {value}")


class EventType(Enum):
    """Event type vocabulary (API-Football naming)."""
    GOAL = "Goal"
    CARD = "Card"
    SUBSTITUTION = "Subst"
    VAR = "Var"
    SCORE = "Score"


SOCCER_LIVE_STATUSES = ("1H", "2H", "HT", "ET", "BT", "P", "LIVE")
SOCCER_FINISHED_STATUSES = ("FT", "AET", "PEN", "SUSP", "INT", "PST", "CANC", "ABD", "AWD", "WO")
BASKETBALL_LIVE_STATUSES = ("Q1", "Q2", "Q3", "Q4", "OT", "BT", "HT")
BASKETBALL_FINISHED_STATUSES = ("FT", "AOT", "POST")

QUARTER_BY_STATUS = {"Q1": 1, "Q2": 2, "Q3": 3, "Q4": 4, "OT": 5}


@dataclass
class MatchEvent:
    """A single match event (goal, card, substitution, etc.)."""
    time: Optional[int]
    event_type: str
    team: str  # "home" or "away"
    player: str
    detail: str
    extra_time: Optional[int] = None

    @property
    def time_display(self) -> str:
        """Format time as '45+2' or '67'."""
        if self.time is None:
            return ""
        if self.extra_time:
            return f"{self.time}+{self.extra_time}"
        return str(self.time)

    @property
    def is_goal(self) -> bool:
        return safe_lower(self.event_type) == "goal"

    @property
    def is_card(self) -> bool:
        return safe_lower(self.event_type) == "card"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "time": self.time,
            "type": self.event_type,
            "team": self.team,
            "player": self.player,
            "detail": self.detail,
        }


@dataclass
class TeamInfo:
    """Basic team information."""
    name: str
    logo: str = ""


@dataclass
class LeagueInfo:
    """League the match belongs to."""
    id: Optional[int]
    name: str
    logo: str = ""


@dataclass
class MatchStatus:
    """Provider status code, label and elapsed minute/timer."""
    short: str  # "1H", "HT", "FT", "Q3", etc.
    long: str   # "First Half", "Quarter 3", etc.
    elapsed: Optional[int] = None  # None before kickoff or after the final whistle


@dataclass
class QuarterScores:
    """Per-quarter points, always four entries per side."""
    home: List[int]
    away: List[int]


@dataclass
class BasketballDetails:
    """Basketball-only part of a match."""
    quarter: Optional[int]  # 1-4, 5 for overtime, None otherwise
    quarter_scores: QuarterScores


@dataclass
class NormalizedMatch:
    """
    Snapshot of one live (or scheduled) match, from either provider.

    `basketball` is set for basketball and NBA games and None for soccer.
    """
    fixture_id: int
    sport: Sport
    home_team: TeamInfo
    away_team: TeamInfo
    home_score: int
    away_score: int
    status: MatchStatus
    league: LeagueInfo
    venue: str
    start_time: str  # ISO datetime string
    events: List[MatchEvent] = field(default_factory=list)
    basketball: Optional[BasketballDetails] = None

    @property
    def is_live(self) -> bool:
        if self.sport.family is SportFamily.SOCCER:
            return self.status.short in SOCCER_LIVE_STATUSES
        return self.status.short in BASKETBALL_LIVE_STATUSES

    @property
    def is_finished(self) -> bool:
        if self.sport.family is SportFamily.SOCCER:
            return self.status.short in SOCCER_FINISHED_STATUSES
        return self.status.short in BASKETBALL_FINISHED_STATUSES

    @property
    def score_display(self) -> str:
        """Format score as 'X - Y'."""
        return f"{self.home_score} - {self.away_score}"

    def involves(self, term: str) -> bool:
        """Case-insensitive substring match against either team name."""
        needle = safe_lower(term)
        return (
            needle in safe_lower(self.home_team.name)
            or needle in safe_lower(self.away_team.name)
        )

    def to_dict(self) -> Dict[str, Any]:
        """Wire shape returned by /api/live-scores."""
        result = {
            "fixtureId": self.fixture_id,
            "homeTeam": self.home_team.name,
            "awayTeam": self.away_team.name,
            "homeScore": self.home_score,
            "awayScore": self.away_score,
            "status": {
                "short": self.status.short,
                "long": self.status.long,
                "elapsed": self.status.elapsed,
            },
            "league": self.league.name,
            "leagueLogo": self.league.logo,
            "homeTeamLogo": self.home_team.logo,
            "awayTeamLogo": self.away_team.logo,
            "sport": self.sport.value,
            "events": [e.to_dict() for e in self.events],
            "venue": self.venue,
            "startTime": self.start_time,
        }
        if self.basketball is not None:
            result["quarter"] = self.basketball.quarter
            result["quarterScores"] = {
                "home": list(self.basketball.quarter_scores.home),
                "away": list(self.basketball.quarter_scores.away),
            }
        return result


@dataclass
class MatchBatch:
    """
    Normalized matches from one upstream round, plus which sources failed.

    Only the NBA fan-out has more than one source; a batch with some failed
    sources is a partial success, not an error.
    """
    matches: List[NormalizedMatch]
    sources: List[str] = field(default_factory=list)
    failed_sources: List[str] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        return bool(self.failed_sources)

    @property
    def all_failed(self) -> bool:
        return bool(self.sources) and len(self.failed_sources) == len(self.sources)


@dataclass
class LiveMatchResult:
    """What the route gets back: filtered matches plus cache/partial info."""
    sport: Sport
    matches: List[NormalizedMatch]
    partial: bool
    cache_meta: CacheMeta


@dataclass
class MatchStatusResult:
    """Outcome of a by-teams lookup: live, upcoming, finished or not_found."""
    status: str
    match: Optional[NormalizedMatch] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"status": self.status}
        if self.match is not None:
            result["match"] = self.match.to_dict()
        return result
