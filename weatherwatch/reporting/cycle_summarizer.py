"""Cycle summarizer: aggregates poll cycle outcomes into a CycleSummary."""

from weatherwatch.models.alert import AlertEvent
from weatherwatch.models.reporting import CycleSummary
from weatherwatch.models.summary import DailySummary


class CycleSummarizer:
    def __init__(self, cycle_id: str, trigger: str):
        self.summary = CycleSummary(cycle_id=cycle_id, trigger=trigger)

    def record_poll(self, locations_polled: int, readings_fetched: int) -> None:
        self.summary.locations_polled = locations_polled
        self.summary.readings_fetched = readings_fetched

    def record_failure(self, location: str, error: str) -> None:
        self.summary.failures[location] = error

    def record_stale(self, locations: list[str]) -> None:
        self.summary.stale_locations = list(locations)

    def record_batch(self, batch_size: int) -> None:
        self.summary.batch_size = batch_size

    def record_daily_summary(self, daily: DailySummary) -> None:
        self.summary.summary = daily

    def record_alerts(self, alerts: list[AlertEvent]) -> None:
        self.summary.alerts.extend(alerts)

    def record_duration(self, seconds: float) -> None:
        self.summary.duration_seconds = seconds

    def record_error(self, error: str) -> None:
        self.summary.errors.append(error)

    def finalize(self) -> CycleSummary:
        return self.summary
