"""
Pydantic schemas for upstream provider payloads and odds request bodies.

Provider schemas only declare the fields we read; everything else the
API-Sports responses carry is ignored.
"""
from pydantic import BaseModel
from typing import Any, List, Optional, Union


# ===== SHARED =====

class ProviderTeam(BaseModel):
    """Team block shared by API-Football and API-Basketball"""
    id: Optional[int] = None
    name: Optional[str] = None
    logo: Optional[str] = None


class ProviderLeague(BaseModel):
    """League block shared by API-Football and API-Basketball"""
    id: Optional[int] = None
    name: Optional[str] = None
    logo: Optional[str] = None


class ProviderTeams(BaseModel):
    home: ProviderTeam
    away: ProviderTeam


class ProviderStatus(BaseModel):
    """Fixture/game status. Soccer sends elapsed, basketball sends timer."""
    short: Optional[str] = None
    long: Optional[str] = None
    elapsed: Optional[int] = None
    extra: Optional[int] = None
    timer: Optional[Union[str, int]] = None


# ===== API-FOOTBALL (SOCCER) =====

class SoccerVenue(BaseModel):
    name: Optional[str] = None
    city: Optional[str] = None


class SoccerFixtureInfo(BaseModel):
    id: int
    date: Optional[str] = None
    referee: Optional[str] = None
    venue: Optional[SoccerVenue] = None
    status: ProviderStatus = ProviderStatus()


class SoccerGoals(BaseModel):
    home: Optional[int] = None
    away: Optional[int] = None


class SoccerEventTime(BaseModel):
    elapsed: Optional[int] = None
    extra: Optional[int] = None


class SoccerEventPlayer(BaseModel):
    id: Optional[int] = None
    name: Optional[str] = None


class SoccerEvent(BaseModel):
    """A single in-match event as API-Football reports it"""
    time: SoccerEventTime = SoccerEventTime()
    team: ProviderTeam = ProviderTeam()
    player: SoccerEventPlayer = SoccerEventPlayer()
    type: Optional[str] = None  # Goal, Card, subst, Var
    detail: Optional[str] = None


class SoccerFixture(BaseModel):
    """One item of the API-Football `fixtures` response"""
    fixture: SoccerFixtureInfo
    league: ProviderLeague = ProviderLeague()
    teams: ProviderTeams
    goals: SoccerGoals = SoccerGoals()
    events: Optional[List[SoccerEvent]] = None


class SoccerResponse(BaseModel):
    """API-Football response envelope"""
    response: List[SoccerFixture] = []
    errors: Any = None


# ===== API-BASKETBALL =====

class BasketballTeamScore(BaseModel):
    total: Optional[int] = None
    quarter_1: Optional[int] = None
    quarter_2: Optional[int] = None
    quarter_3: Optional[int] = None
    quarter_4: Optional[int] = None
    over_time: Optional[int] = None


class BasketballScores(BaseModel):
    home: BasketballTeamScore = BasketballTeamScore()
    away: BasketballTeamScore = BasketballTeamScore()


class BasketballGame(BaseModel):
    """One item of the API-Basketball `games` response"""
    id: int
    date: Optional[str] = None
    venue: Optional[str] = None
    status: ProviderStatus = ProviderStatus()
    league: ProviderLeague = ProviderLeague()
    teams: ProviderTeams
    scores: BasketballScores = BasketballScores()


class BasketballResponse(BaseModel):
    """API-Basketball response envelope"""
    response: List[BasketballGame] = []
    errors: Any = None


# ===== ODDS =====

class OddsOutcome(BaseModel):
    name: str
    price: float


class OddsMarket(BaseModel):
    key: str
    outcomes: List[OddsOutcome] = []


class Bookmaker(BaseModel):
    key: str
    title: str = ""
    markets: List[OddsMarket] = []


class OddsEvent(BaseModel):
    """A bookmaker odds event in The Odds API shape"""
    id: str = ""
    sport_key: str = ""
    commence_time: str = ""
    home_team: str
    away_team: str
    bookmakers: List[Bookmaker] = []
