"""Cycle reporting models."""

from dataclasses import dataclass, field
from enum import StrEnum

from weatherwatch.models.alert import AlertEvent
from weatherwatch.models.summary import DailySummary


class CycleTrigger(StrEnum):
    STARTUP = "startup"
    TIMER = "timer"
    MANUAL = "manual"


@dataclass
class CycleSummary:
    cycle_id: str
    trigger: str
    locations_polled: int = 0
    readings_fetched: int = 0
    failures: dict[str, str] = field(default_factory=dict)
    stale_locations: list[str] = field(default_factory=list)
    batch_size: int = 0
    summary: DailySummary | None = None
    alerts: list[AlertEvent] = field(default_factory=list)
    duration_seconds: float = 0.0
    errors: list[str] = field(default_factory=list)
