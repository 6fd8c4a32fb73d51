"""OpenWeatherMap current-weather API client."""

import logging
import os

import httpx

from weatherwatch.config.schema import OPENWEATHER_BASE_URL

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "weatherwatch/0.1.0"


class WeatherSourceError(Exception):
    """Base class for upstream weather source failures."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class SourceUnavailable(WeatherSourceError):
    """Network error, timeout, or upstream refusing to answer. Transient."""


class LocationNotFound(WeatherSourceError):
    """Upstream reports that the location does not exist."""


class OpenWeatherClient:
    """One read-only request per location. Retry policy belongs to the caller."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = OPENWEATHER_BASE_URL,
        units: str = "metric",
        timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self.api_key = api_key or os.environ.get("OPENWEATHER_API_KEY", "")
        if not self.api_key:
            raise WeatherSourceError("OPENWEATHER_API_KEY not set")
        self.base_url = base_url.rstrip("/")
        self.units = units
        self.timeout = timeout
        self.user_agent = user_agent

    def get_current(self, location: str) -> dict:
        """Fetch current weather for a location by name."""
        url = f"{self.base_url}/weather"
        params = {"q": location, "units": self.units, "appid": self.api_key}
        headers = {"User-Agent": self.user_agent, "Accept": "application/json"}

        try:
            resp = httpx.get(url, params=params, headers=headers, timeout=self.timeout)
        except httpx.RequestError as e:
            logger.warning("OpenWeatherMap request for %s failed: %s", location, e)
            raise SourceUnavailable(f"Request failed: {e}") from e

        # 400 is what the API answers for queries it cannot geocode
        if resp.status_code in (400, 404):
            raise LocationNotFound(
                f"Location not found: {location}", resp.status_code
            )
        if resp.status_code >= 400:
            logger.warning(
                "OpenWeatherMap returned %d for %s", resp.status_code, location
            )
            raise SourceUnavailable(
                f"HTTP {resp.status_code} for {location}", resp.status_code
            )

        try:
            return resp.json()
        except ValueError as e:
            raise SourceUnavailable(f"Invalid JSON for {location}: {e}") from e
