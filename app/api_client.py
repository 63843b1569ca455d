"""
HTTP client for the API-Sports family (API-Football, API-Basketball).

Every call carries a bounded timeout; any failure surfaces as
UpstreamFetchError so callers can decide between hard-fail and degrade.
"""
import logging
import threading
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import requests
from dotenv import load_dotenv

from app.exceptions import ConfigurationError, UpstreamFetchError
from config.settings import Settings, settings as default_settings

load_dotenv()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("api_client")


class ApiSportsClient:
    """
    Thin GET wrapper with API-Sports auth headers.

    Usage:
        client = ApiSportsClient()
        body = client.get(settings.api_football_base_url, "fixtures", {"live": "all"})
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
    ):
        self._settings = settings or default_settings
        if not self._settings.api_football_key:
            logger.error("API_FOOTBALL_KEY not configured")
            raise ConfigurationError("API_FOOTBALL_KEY is not configured")

        self._api_key = self._settings.api_football_key
        self._timeout = self._settings.upstream_timeout_seconds
        self._session = session or requests.Session()
        # Limits concurrent upstream requests across all fan-outs
        self._semaphore = threading.Semaphore(self._settings.max_concurrent_requests)

    def _get_headers(self, base_url: str) -> Dict[str, str]:
        """Get API authentication headers for one provider host."""
        return {
            "x-rapidapi-key": self._api_key,
            "x-rapidapi-host": urlparse(base_url).netloc,
        }

    def get(self, base_url: str, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        GET `{base_url}/{endpoint}` and return the decoded JSON body.

        Raises:
            UpstreamFetchError: network error, timeout, non-2xx status,
                non-JSON body, or provider-reported errors
        """
        url = f"{base_url.rstrip('/')}/{endpoint}"
        source = f"{urlparse(base_url).netloc}/{endpoint}"
        logger.debug(f"GET {url} params={params}")

        try:
            with self._semaphore:
                response = self._session.get(
                    url,
                    headers=self._get_headers(base_url),
                    params=params,
                    timeout=self._timeout,
                )
            response.raise_for_status()
        except requests.Timeout as e:
            raise UpstreamFetchError(source, f"timed out after {self._timeout}s") from e
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise UpstreamFetchError(source, f"HTTP {status}", status_code=status) from e
        except requests.RequestException as e:
            raise UpstreamFetchError(source, f"request failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamFetchError(source, "response body is not JSON") from e

        if not isinstance(data, dict):
            raise UpstreamFetchError(source, "unexpected response body")

        # API-Sports reports auth/quota problems with HTTP 200 and an errors object
        errors = data.get("errors")
        if errors:
            raise UpstreamFetchError(source, f"provider errors: {errors}")

        return data
