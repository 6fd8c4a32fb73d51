"""Daily aggregate summary model."""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class DailySummary:
    date: str  # YYYY-MM-DD, process-local clock
    average_temp_c: float
    max_temp_c: float
    min_temp_c: float
    dominant_condition: str
    reading_count: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DailySummary":
        return cls(**data)
