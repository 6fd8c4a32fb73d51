"""Tests for the reading fetcher with a mocked client."""

from unittest.mock import MagicMock

import pytest

from weatherwatch.ingest.fetcher import MalformedReading, WeatherFetcher, parse_reading
from weatherwatch.ingest.weather_client import (
    LocationNotFound,
    OpenWeatherClient,
    SourceUnavailable,
)

PAYLOAD = {
    "id": 1275339,
    "name": "Mumbai",
    "weather": [{"main": "Rain", "description": "light rain"}],
    "main": {"temp": 28.4, "feels_like": 33.1, "humidity": 84, "pressure": 1006},
    "wind": {"speed": 5.14},
}


class TestWeatherFetcher:
    def test_fetch_success(self):
        client = MagicMock(spec=OpenWeatherClient)
        client.get_current.return_value = PAYLOAD

        reading = WeatherFetcher(client).fetch("Mumbai")

        client.get_current.assert_called_once_with("Mumbai")
        assert reading.location == "Mumbai"
        assert reading.name == "Mumbai"
        assert reading.location_id == 1275339
        assert reading.temperature_c == 28.4
        assert reading.feels_like_c == 33.1
        assert reading.humidity_pct == 84
        assert reading.pressure_hpa == 1006
        assert reading.wind_speed_ms == 5.14
        assert reading.condition == "light rain"
        assert reading.fetched_at

    def test_location_kept_as_requested(self):
        client = MagicMock(spec=OpenWeatherClient)
        client.get_current.return_value = dict(PAYLOAD, name="Bombay")
        reading = WeatherFetcher(client).fetch("Mumbai")
        assert reading.location == "Mumbai"
        assert reading.name == "Bombay"

    def test_not_found_propagates(self):
        client = MagicMock(spec=OpenWeatherClient)
        client.get_current.side_effect = LocationNotFound("nope", 404)
        with pytest.raises(LocationNotFound):
            WeatherFetcher(client).fetch("Atlantis")

    def test_unavailable_propagates(self):
        client = MagicMock(spec=OpenWeatherClient)
        client.get_current.side_effect = SourceUnavailable("down")
        with pytest.raises(SourceUnavailable):
            WeatherFetcher(client).fetch("Mumbai")


class TestParseReading:
    @pytest.mark.parametrize("missing", ["main", "wind", "weather", "name", "id"])
    def test_missing_section(self, missing: str):
        raw = {k: v for k, v in PAYLOAD.items() if k != missing}
        with pytest.raises(MalformedReading):
            parse_reading(raw, "Mumbai")

    def test_missing_temperature(self):
        raw = dict(PAYLOAD, main={"feels_like": 1, "humidity": 1, "pressure": 1})
        with pytest.raises(MalformedReading):
            parse_reading(raw, "Mumbai")

    def test_empty_weather_list(self):
        with pytest.raises(MalformedReading):
            parse_reading(dict(PAYLOAD, weather=[]), "Mumbai")

    def test_malformed_is_transient(self):
        assert issubclass(MalformedReading, SourceUnavailable)
