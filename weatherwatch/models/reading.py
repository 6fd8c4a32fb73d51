"""Current-weather reading model."""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class Reading:
    location: str  # tracked name as requested
    name: str  # display name reported upstream
    location_id: int
    temperature_c: float
    feels_like_c: float
    humidity_pct: float
    pressure_hpa: float
    wind_speed_ms: float
    condition: str
    fetched_at: str  # ISO-8601 UTC

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Reading":
        return cls(**data)
