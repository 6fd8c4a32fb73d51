"""Shared test fixtures."""

from pathlib import Path

import pytest
import yaml

from weatherwatch.config.defaults import DEFAULT_LOCATIONS
from weatherwatch.config.schema import MonitorConfig, PollConfig
from weatherwatch.context import MonitorContext
from weatherwatch.ingest.weather_client import LocationNotFound
from weatherwatch.models.reading import Reading
from weatherwatch.storage.store import StateStore


def make_reading(
    location: str = "Delhi",
    temperature_c: float = 30.0,
    condition: str = "clear sky",
    **overrides,
) -> Reading:
    fields = {
        "location": location,
        "name": location,
        "location_id": sum(map(ord, location)),
        "temperature_c": temperature_c,
        "feels_like_c": temperature_c + 1.0,
        "humidity_pct": 40.0,
        "pressure_hpa": 1008.0,
        "wind_speed_ms": 3.1,
        "condition": condition,
        "fetched_at": "2026-10-19T06:00:00+00:00",
    }
    fields.update(overrides)
    return Reading(**fields)


class StubSource:
    """Deterministic stand-in for the weather source.

    `temps` maps location -> temperature (or a list of temperatures served in
    order); `errors` maps location -> exception raised on every call.
    """

    def __init__(self, temps=None, conditions=None, errors=None):
        self.temps = dict(temps or {})
        self.conditions = dict(conditions or {})
        self.errors = dict(errors or {})
        self.calls: list[str] = []

    def fetch(self, location: str) -> Reading:
        self.calls.append(location)
        if location in self.errors:
            raise self.errors[location]
        if location not in self.temps:
            raise LocationNotFound(f"Location not found: {location}", 404)
        temp = self.temps[location]
        if isinstance(temp, list):
            temp = temp.pop(0) if len(temp) > 1 else temp[0]
        return make_reading(
            location, temp, self.conditions.get(location, "clear sky")
        )


@pytest.fixture
def reading_factory():
    return make_reading


@pytest.fixture
def stub_source_cls():
    return StubSource


@pytest.fixture
def default_config() -> MonitorConfig:
    """Return default MonitorConfig with default locations."""
    return MonitorConfig(
        locations=list(DEFAULT_LOCATIONS),
        poll=PollConfig(retry_base_delay_seconds=0.0, cycle_timeout_seconds=5.0),
    )


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "test.db"


@pytest.fixture
def store(db_path: Path):
    s = StateStore.open(db_path)
    yield s
    s.close()


@pytest.fixture
def context(store: StateStore, default_config: MonitorConfig) -> MonitorContext:
    return MonitorContext.load(store, default_config)


@pytest.fixture
def config_yaml_path(tmp_path: Path) -> Path:
    """Write a minimal valid config YAML and return its path."""
    data = {
        "source": {"api_key": "test-key", "timeout_seconds": 5},
        "alerts": {"high_temp_ceiling_c": 40},
        "poll": {"interval_seconds": 120},
    }
    path = tmp_path / "test_config.yaml"
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path
