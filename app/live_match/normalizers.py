"""
Map raw API-Football / API-Basketball items onto NormalizedMatch.
"""
import logging
import re
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from app.exceptions import UpstreamFetchError
from app.schemas import (
    BasketballGame,
    BasketballResponse,
    BasketballTeamScore,
    SoccerFixture,
    SoccerResponse,
)
from app.utils.helpers import safe_int, safe_str
from .models import (
    QUARTER_BY_STATUS,
    BasketballDetails,
    LeagueInfo,
    MatchEvent,
    MatchStatus,
    NormalizedMatch,
    QuarterScores,
    Sport,
    TeamInfo,
)

logger = logging.getLogger("live_match.normalizers")

_LEADING_INT = re.compile(r"^\s*(\d+)")


def parse_soccer_response(body: Dict[str, Any], source: str = "soccer") -> List[SoccerFixture]:
    """Validate an API-Football envelope; a body that doesn't fit is an upstream failure."""
    try:
        return SoccerResponse.model_validate(body).response
    except ValidationError as e:
        logger.error(f"Malformed soccer response from {source}: {e.error_count()} errors")
        raise UpstreamFetchError(source, "malformed response body") from e


def parse_basketball_response(body: Dict[str, Any], source: str = "basketball") -> List[BasketballGame]:
    """Validate an API-Basketball envelope; a body that doesn't fit is an upstream failure."""
    try:
        return BasketballResponse.model_validate(body).response
    except ValidationError as e:
        logger.error(f"Malformed basketball response from {source}: {e.error_count()} errors")
        raise UpstreamFetchError(source, "malformed response body") from e


def normalize_soccer_fixture(raw: Union[SoccerFixture, Dict[str, Any]]) -> NormalizedMatch:
    """
    Convert one API-Football fixture into a NormalizedMatch.

    Events keep provider order. An event belongs to the home side when its
    team id equals the home team id; everything else is away.
    """
    fixture = raw if isinstance(raw, SoccerFixture) else SoccerFixture.model_validate(raw)
    info = fixture.fixture
    home = fixture.teams.home
    away = fixture.teams.away

    events = []
    for e in fixture.events or []:
        events.append(MatchEvent(
            time=e.time.elapsed,
            extra_time=e.time.extra,
            event_type=safe_str(e.type),
            team="home" if e.team.id is not None and e.team.id == home.id else "away",
            player=safe_str(e.player.name),
            detail=safe_str(e.detail),
        ))

    return NormalizedMatch(
        fixture_id=info.id,
        sport=Sport.SOCCER,
        home_team=TeamInfo(name=safe_str(home.name), logo=safe_str(home.logo)),
        away_team=TeamInfo(name=safe_str(away.name), logo=safe_str(away.logo)),
        home_score=safe_int(fixture.goals.home),
        away_score=safe_int(fixture.goals.away),
        status=MatchStatus(
            short=safe_str(info.status.short),
            long=safe_str(info.status.long),
            elapsed=info.status.elapsed,
        ),
        league=LeagueInfo(
            id=fixture.league.id,
            name=safe_str(fixture.league.name),
            logo=safe_str(fixture.league.logo),
        ),
        venue=safe_str(info.venue.name if info.venue else None),
        start_time=safe_str(info.date),
        events=events,
    )


def _parse_timer(timer: Any) -> Optional[int]:
    """API-Basketball sends the game clock as a string ("7", "11:42"); keep the minutes."""
    if timer is None:
        return None
    if isinstance(timer, int):
        return timer
    match = _LEADING_INT.match(str(timer))
    return int(match.group(1)) if match else None


def _quarters(score: BasketballTeamScore) -> List[int]:
    return [
        safe_int(score.quarter_1),
        safe_int(score.quarter_2),
        safe_int(score.quarter_3),
        safe_int(score.quarter_4),
    ]


def normalize_basketball_game(
    raw: Union[BasketballGame, Dict[str, Any]],
    sport: Sport = Sport.BASKETBALL,
) -> NormalizedMatch:
    """
    Convert one API-Basketball game into a NormalizedMatch.

    Basketball has no event feed: events stay empty and the
    quarter / per-quarter scores are filled instead.
    """
    game = raw if isinstance(raw, BasketballGame) else BasketballGame.model_validate(raw)
    home = game.teams.home
    away = game.teams.away
    short = safe_str(game.status.short)

    return NormalizedMatch(
        fixture_id=game.id,
        sport=sport,
        home_team=TeamInfo(name=safe_str(home.name), logo=safe_str(home.logo)),
        away_team=TeamInfo(name=safe_str(away.name), logo=safe_str(away.logo)),
        home_score=safe_int(game.scores.home.total),
        away_score=safe_int(game.scores.away.total),
        status=MatchStatus(
            short=short,
            long=safe_str(game.status.long),
            elapsed=_parse_timer(game.status.timer),
        ),
        league=LeagueInfo(
            id=game.league.id,
            name=safe_str(game.league.name),
            logo=safe_str(game.league.logo),
        ),
        venue=safe_str(game.venue),
        start_time=safe_str(game.date),
        events=[],
        basketball=BasketballDetails(
            quarter=QUARTER_BY_STATUS.get(short),
            quarter_scores=QuarterScores(
                home=_quarters(game.scores.home),
                away=_quarters(game.scores.away),
            ),
        ),
    )
