"""Tests for config schema validation."""

import pytest
from pydantic import ValidationError

from weatherwatch.config.schema import (
    LOW_TEMP_FLOOR_C,
    MonitorConfig,
    PollConfig,
    SourceConfig,
    ThresholdConfig,
)


class TestMonitorConfig:
    def test_defaults(self):
        config = MonitorConfig()
        assert config.alerts.high_temp_ceiling_c == 35.0
        assert config.poll.interval_seconds == 300
        assert config.source.units == "metric"
        assert config.locations == []

    def test_extra_fields_rejected(self):
        with pytest.raises(ValidationError, match="Extra inputs are not permitted"):
            MonitorConfig(unknown_field="bad")

    def test_nested_extra_fields_rejected(self):
        with pytest.raises(ValidationError, match="Extra inputs are not permitted"):
            PollConfig(interval_seconds=60, bogus=True)


class TestThresholdConfig:
    def test_low_floor_is_fixed(self):
        config = ThresholdConfig(high_temp_ceiling_c=40)
        assert config.low_temp_floor_c == LOW_TEMP_FLOOR_C == 0.0

    def test_low_floor_not_settable(self):
        with pytest.raises(ValidationError):
            ThresholdConfig(low_temp_floor_c=-5)


class TestPollConfig:
    def test_interval_bounds(self):
        with pytest.raises(ValidationError):
            PollConfig(interval_seconds=0)

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            PollConfig(cycle_timeout_seconds=0)
        with pytest.raises(ValidationError):
            SourceConfig(timeout_seconds=0)

    def test_negative_retries_rejected(self):
        with pytest.raises(ValidationError):
            PollConfig(fetch_retries=-1)
