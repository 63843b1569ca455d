"""Configuration management using pydantic-settings."""
from datetime import datetime
from typing import List, Optional

from pydantic_settings import BaseSettings


def _compute_current_basketball_season() -> str:
    """
    Compute the current basketball season code.

    API-Basketball uses "YYYY-YYYY" for NBA seasons (2025-2026).
    NBA seasons run Oct-Jun, so Jan-Sep uses the season that started last year.
    """
    now = datetime.now()
    if now.month >= 10:
        return f"{now.year}-{now.year + 1}"
    return f"{now.year - 1}-{now.year}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API-Sports configuration (same key works for football and basketball)
    api_football_key: Optional[str] = None
    api_football_base_url: str = "https://v3.football.api-sports.io"
    api_basketball_base_url: str = "https://v1.basketball.api-sports.io"

    # Live cache settings
    live_cache_ttl_seconds: int = 30
    coalesce_timeout_seconds: float = 15.0

    # Upstream requests
    upstream_timeout_seconds: float = 8.0
    max_concurrent_requests: int = 10

    # NBA league IDs in API-Basketball: 12=NBA, 404=In-Season Tournament, 422=NBA Cup
    nba_league_ids: List[int] = [12, 404, 422]

    # Computed dynamically: Oct-Dec = current year start, Jan-Sep = previous year start
    current_basketball_season: str = _compute_current_basketball_season()

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
