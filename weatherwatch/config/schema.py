"""Pydantic v2 configuration schema with strict validation."""

from pydantic import BaseModel, Field

OPENWEATHER_BASE_URL = "https://api.openweathermap.org/data/2.5"

# The sub-zero floor is not configurable.
LOW_TEMP_FLOOR_C = 0.0


class SourceConfig(BaseModel):
    model_config = {"extra": "forbid"}

    base_url: str = OPENWEATHER_BASE_URL
    api_key: str = ""  # empty: read OPENWEATHER_API_KEY
    units: str = "metric"
    timeout_seconds: float = Field(default=10.0, gt=0.0)


class ThresholdConfig(BaseModel):
    model_config = {"extra": "forbid"}

    high_temp_ceiling_c: float = 35.0

    @property
    def low_temp_floor_c(self) -> float:
        return LOW_TEMP_FLOOR_C


class PollConfig(BaseModel):
    model_config = {"extra": "forbid"}

    interval_seconds: int = Field(default=300, ge=1)
    cycle_timeout_seconds: float = Field(default=60.0, gt=0.0)
    max_workers: int = Field(default=8, ge=1)
    fetch_retries: int = Field(default=0, ge=0)
    retry_base_delay_seconds: float = Field(default=1.0, ge=0.0)
    stale_after_minutes: int = Field(default=15, ge=1)


class MonitorConfig(BaseModel):
    model_config = {"extra": "forbid"}

    source: SourceConfig = SourceConfig()
    alerts: ThresholdConfig = ThresholdConfig()
    poll: PollConfig = PollConfig()
    locations: list[str] = []
