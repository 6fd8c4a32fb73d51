"""Reading fetcher: turns upstream payloads into Reading records."""

import logging
from typing import Protocol

from weatherwatch.ingest.weather_client import OpenWeatherClient, SourceUnavailable
from weatherwatch.models.common import utc_now_iso
from weatherwatch.models.reading import Reading

logger = logging.getLogger(__name__)


class MalformedReading(SourceUnavailable):
    """Upstream payload is missing a required field."""


class ReadingSource(Protocol):
    """Capability: retrieve one reading for a location."""

    def fetch(self, location: str) -> Reading: ...


class WeatherFetcher:
    def __init__(self, client: OpenWeatherClient):
        self.client = client

    def fetch(self, location: str) -> Reading:
        """Fetch one reading. Raises SourceUnavailable or LocationNotFound."""
        raw = self.client.get_current(location)
        return parse_reading(raw, location)


def parse_reading(raw: dict, location: str) -> Reading:
    """Build a Reading from a current-weather payload.

    Only structural presence is checked; values are taken as reported.
    """
    try:
        main = raw["main"]
        return Reading(
            location=location,
            name=raw["name"],
            location_id=int(raw["id"]),
            temperature_c=float(main["temp"]),
            feels_like_c=float(main["feels_like"]),
            humidity_pct=float(main["humidity"]),
            pressure_hpa=float(main["pressure"]),
            wind_speed_ms=float(raw["wind"]["speed"]),
            condition=str(raw["weather"][0]["description"]),
            fetched_at=utc_now_iso(),
        )
    except (KeyError, IndexError, TypeError, ValueError) as e:
        logger.warning("Malformed payload for %s: %r", location, e)
        raise MalformedReading(f"Malformed payload for {location}: {e!r}") from e
