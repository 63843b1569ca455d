"""
Live match aggregation over API-Football and API-Basketball.

One LiveMatchAggregator is built per process and shared by the route
handlers. Upstream feeds are cached per sport for a short TTL and team
filters are applied on every read, so different team queries for the same
sport share one upstream call.
"""
from typing import Callable, List, Optional, Sequence, Tuple
from datetime import datetime, timezone
from concurrent.futures import ThreadPoolExecutor
import logging

import requests

from app.api_client import ApiSportsClient
from app.cache import LiveCache, utc_now
from app.exceptions import UpstreamFetchError
from app.utils.helpers import team_names_match
from config.settings import Settings, settings as default_settings
from .models import (
    BASKETBALL_FINISHED_STATUSES,
    BASKETBALL_LIVE_STATUSES,
    SOCCER_FINISHED_STATUSES,
    SOCCER_LIVE_STATUSES,
    LiveMatchResult,
    MatchBatch,
    MatchStatusResult,
    NormalizedMatch,
    Sport,
    SportFamily,
)
from .normalizers import (
    normalize_basketball_game,
    normalize_soccer_fixture,
    parse_basketball_response,
    parse_soccer_response,
)

logger = logging.getLogger("live_match.provider")

TeamFilter = Optional[Sequence[str]]


def filter_by_teams(matches: List[NormalizedMatch], team_filter: TeamFilter) -> List[NormalizedMatch]:
    """
    Keep matches whose home or away name contains any filter term (case-insensitive).

    Blank terms are ignored; no usable terms means no filtering.
    """
    terms = [t.strip() for t in (team_filter or []) if t and t.strip()]
    if not terms:
        return list(matches)
    return [m for m in matches if any(m.involves(t) for t in terms)]


class LiveMatchAggregator:
    """
    Fetches, normalizes and caches live match lists per sport.

    - soccer: one API-Football call, failure propagates
    - basketball: one API-Basketball call without league restriction, failure propagates
    - nba: one API-Basketball call per NBA league id in parallel; failed
      leagues contribute nothing and the rest is returned
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[ApiSportsClient] = None,
        cache: Optional[LiveCache] = None,
        session: Optional[requests.Session] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._settings = settings or default_settings
        # Raises ConfigurationError when the API key is missing
        self._client = client or ApiSportsClient(self._settings, session=session)
        self._cache = cache or LiveCache(
            ttl_seconds=self._settings.live_cache_ttl_seconds,
            coalesce_timeout=self._settings.coalesce_timeout_seconds,
            clock=clock,
        )
        self._clock = clock
        self._nba_league_ids = list(self._settings.nba_league_ids)

    # ===== PUBLIC API =====

    def get_live_matches(self, sport: Sport, team_filter: TeamFilter = None) -> List[NormalizedMatch]:
        """
        Current live matches for a sport, optionally filtered by team names.

        Raises:
            UpstreamFetchError: The single required upstream failed (soccer, basketball)
        """
        return self.get_live_batch(sport, team_filter).matches

    def get_live_batch(self, sport: Sport, team_filter: TeamFilter = None) -> LiveMatchResult:
        """Like get_live_matches, plus cache metadata and the partial flag."""
        batch, meta = self._cache.get(
            f"live:{sport.value}",
            lambda: self._fetch_live(sport),
            cache_if=lambda b: not b.all_failed,
        )
        return LiveMatchResult(
            sport=sport,
            matches=filter_by_teams(batch.matches, team_filter),
            partial=batch.partial,
            cache_meta=meta,
        )

    def get_todays_matches(self, sport: Sport) -> List[NormalizedMatch]:
        """All of today's fixtures/games for a sport, whatever their status."""
        batch, _ = self._cache.get(
            f"today:{sport.value}",
            lambda: self._fetch_today(sport),
            cache_if=lambda b: not b.all_failed,
        )
        return batch.matches

    def get_match_status(self, home_team: str, away_team: str, sport: Sport) -> MatchStatusResult:
        """
        Find today's match between two teams and bucket its status.

        Checks the live feed first, then today's schedule.
        Returns status "live", "upcoming", "finished" or "not_found".
        """
        live_match = self._find_match(self.get_live_matches(sport), home_team, away_team)
        if live_match is not None:
            return MatchStatusResult(status="live", match=live_match)

        today_match = self._find_match(self.get_todays_matches(sport), home_team, away_team)
        if today_match is None:
            return MatchStatusResult(status="not_found")

        if sport.family is SportFamily.SOCCER:
            finished, live = SOCCER_FINISHED_STATUSES, SOCCER_LIVE_STATUSES
        else:
            finished, live = BASKETBALL_FINISHED_STATUSES, BASKETBALL_LIVE_STATUSES

        short = today_match.status.short
        if short in finished:
            return MatchStatusResult(status="finished", match=today_match)
        if short in live:
            return MatchStatusResult(status="live", match=today_match)
        return MatchStatusResult(status="upcoming", match=today_match)

    def clear_cache(self) -> int:
        """Drop all cached feeds. Returns number of entries cleared."""
        return self._cache.clear()

    def get_cache_stats(self) -> dict:
        return self._cache.get_stats()

    # ===== FETCHING =====

    def _today(self) -> str:
        return self._clock().astimezone(timezone.utc).strftime("%Y-%m-%d")

    def _fetch_live(self, sport: Sport) -> MatchBatch:
        if sport is Sport.SOCCER:
            return self._fetch_soccer({"live": "all"})
        if sport is Sport.BASKETBALL:
            return self._live_only(self._fetch_basketball({"date": self._today()}))
        return self._live_only(self._fetch_nba_leagues())

    def _fetch_today(self, sport: Sport) -> MatchBatch:
        if sport is Sport.SOCCER:
            return self._fetch_soccer({"date": self._today()})
        if sport is Sport.BASKETBALL:
            return self._fetch_basketball({"date": self._today()})
        return self._fetch_nba_leagues()

    def _fetch_soccer(self, params: dict) -> MatchBatch:
        base_url = self._settings.api_football_base_url
        body = self._client.get(base_url, "fixtures", params)
        fixtures = parse_soccer_response(body, source="fixtures")
        matches = [normalize_soccer_fixture(f) for f in fixtures]
        logger.info(f"Fetched {len(matches)} soccer fixtures {params}")
        return MatchBatch(matches=matches, sources=["fixtures"])

    def _fetch_basketball(self, params: dict, source: str = "games") -> MatchBatch:
        base_url = self._settings.api_basketball_base_url
        body = self._client.get(base_url, "games", params)
        games = parse_basketball_response(body, source=source)
        matches = [
            normalize_basketball_game(g, self._basketball_sport(g.league.id))
            for g in games
        ]
        logger.info(f"Fetched {len(matches)} basketball games {params}")
        return MatchBatch(matches=matches, sources=[source])

    def _fetch_nba_leagues(self) -> MatchBatch:
        """
        Query every NBA league id in parallel and union the results.

        Each league's failure is caught on its own future so one failing
        league cannot cancel or fail the others. Results are concatenated in
        league-id order and de-duplicated by fixture id (first one wins).
        """
        today = self._today()
        season = self._settings.current_basketball_season

        def fetch_league(league_id: int) -> MatchBatch:
            params = {"date": today, "league": league_id, "season": season}
            return self._fetch_basketball(params, source=f"league:{league_id}")

        results: List[Tuple[int, Optional[MatchBatch]]] = []
        with ThreadPoolExecutor(max_workers=max(len(self._nba_league_ids), 1)) as executor:
            futures = [
                (league_id, executor.submit(fetch_league, league_id))
                for league_id in self._nba_league_ids
            ]
            for league_id, future in futures:
                try:
                    results.append((league_id, future.result()))
                except UpstreamFetchError as e:
                    logger.warning(f"NBA league {league_id} fetch failed: {e}")
                    results.append((league_id, None))
                except Exception as e:
                    logger.error(f"NBA league {league_id} fetch crashed: {e}")
                    results.append((league_id, None))

        seen = set()
        matches: List[NormalizedMatch] = []
        failed: List[str] = []
        for league_id, batch in results:
            if batch is None:
                failed.append(f"league:{league_id}")
                continue
            for match in batch.matches:
                if match.fixture_id in seen:
                    continue
                seen.add(match.fixture_id)
                matches.append(match)

        if failed:
            logger.warning(
                f"NBA fan-out partial: {len(failed)}/{len(results)} leagues failed, "
                f"returning {len(matches)} games"
            )

        return MatchBatch(
            matches=matches,
            sources=[f"league:{lid}" for lid, _ in results],
            failed_sources=failed,
        )

    # ===== HELPERS =====

    def _basketball_sport(self, league_id: Optional[int]) -> Sport:
        return Sport.NBA if league_id in self._nba_league_ids else Sport.BASKETBALL

    @staticmethod
    def _live_only(batch: MatchBatch) -> MatchBatch:
        """Keep only games in a live status (Q1-Q4, OT, BT, HT)."""
        batch.matches = [m for m in batch.matches if m.status.short in BASKETBALL_LIVE_STATUSES]
        return batch

    @staticmethod
    def _find_match(
        matches: List[NormalizedMatch], home_team: str, away_team: str
    ) -> Optional[NormalizedMatch]:
        for match in matches:
            if team_names_match(match.home_team.name, home_team) and team_names_match(
                match.away_team.name, away_team
            ):
                return match
        return None


# Process-wide instance
_aggregator: Optional[LiveMatchAggregator] = None


def get_live_aggregator() -> LiveMatchAggregator:
    """
    Get or create the process-wide aggregator.

    Raises:
        ConfigurationError: API_FOOTBALL_KEY is not configured
    """
    global _aggregator
    if _aggregator is None:
        _aggregator = LiveMatchAggregator()
    return _aggregator


def reset_live_aggregator() -> None:
    """Forget the process-wide aggregator (tests, settings reload)."""
    global _aggregator
    _aggregator = None
