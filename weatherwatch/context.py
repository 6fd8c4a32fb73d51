"""Process-wide monitor state: registry, reading set, logs, and their store.

Every mutation writes through to the store before it is considered durable.
A failed write keeps the in-memory value, remembers it as pending, and
re-raises PersistenceWriteFailure; `flush()` retries pending writes.
"""

import logging
import threading
from pathlib import Path
from typing import Any

from weatherwatch.config.defaults import DEFAULT_LOCATIONS
from weatherwatch.config.schema import MonitorConfig, ThresholdConfig
from weatherwatch.models.alert import AlertEvent
from weatherwatch.models.reading import Reading
from weatherwatch.models.summary import DailySummary
from weatherwatch.registry import LocationRegistry
from weatherwatch.storage.store import (
    ALERTS_KEY,
    LAST_CYCLE_KEY,
    LOCATIONS_KEY,
    READINGS_KEY,
    SUMMARIES_KEY,
    PersistenceWriteFailure,
    StateStore,
)

logger = logging.getLogger(__name__)


class MonitorContext:
    def __init__(
        self,
        store: StateStore,
        locations: list[str],
        readings: list[Reading],
        summaries: list[DailySummary],
        alerts: list[AlertEvent],
        thresholds: ThresholdConfig,
        last_cycle_completed_at: str | None = None,
    ):
        self.store = store
        self.lock = threading.RLock()
        self.registry = LocationRegistry(locations, self._persist_locations)
        self._readings: dict[str, Reading] = {r.location: r for r in readings}
        self._summaries = list(summaries)
        self._alerts = list(alerts)
        self.thresholds = thresholds
        self.last_cycle_completed_at = last_cycle_completed_at
        self._pending: dict[str, Any] = {}

    @classmethod
    def open(cls, config: MonitorConfig, db_path: str | Path) -> "MonitorContext":
        """Open the store at `db_path` and load state from it."""
        return cls.load(StateStore.open(db_path), config)

    @classmethod
    def load(cls, store: StateStore, config: MonitorConfig) -> "MonitorContext":
        """Load persisted state; absent keys give the seed or empty values."""
        seed = config.locations or DEFAULT_LOCATIONS
        locations = store.read(LOCATIONS_KEY, default=None)
        if locations is None:
            logger.info("No tracked locations stored, seeding %d defaults", len(seed))
            locations = list(seed)

        ctx = cls(
            store=store,
            locations=locations,
            readings=[Reading.from_dict(d) for d in store.read(READINGS_KEY, [])],
            summaries=[DailySummary.from_dict(d) for d in store.read(SUMMARIES_KEY, [])],
            alerts=[AlertEvent.from_dict(d) for d in store.read(ALERTS_KEY, [])],
            thresholds=config.alerts,
            last_cycle_completed_at=store.read(LAST_CYCLE_KEY),
        )
        logger.info(
            "Loaded state: %d locations, %d readings, %d summaries, %d alerts",
            len(ctx.registry), len(ctx._readings), len(ctx._summaries), len(ctx._alerts),
        )
        return ctx

    # --- Views ---

    @property
    def readings(self) -> dict[str, Reading]:
        with self.lock:
            return dict(self._readings)

    @property
    def summaries(self) -> list[DailySummary]:
        with self.lock:
            return list(self._summaries)

    @property
    def alerts(self) -> list[AlertEvent]:
        with self.lock:
            return list(self._alerts)

    @property
    def pending_keys(self) -> list[str]:
        return sorted(self._pending)

    def current_batch(self) -> list[Reading]:
        """Latest reading of each tracked location, in registry order."""
        with self.lock:
            return [self._readings[n] for n in self.registry if n in self._readings]

    def prior_messages(self) -> set[str]:
        with self.lock:
            return {a.message for a in self._alerts}

    def snapshot(self) -> dict[str, Any]:
        """Current readings, summaries, and alerts as plain data."""
        with self.lock:
            return {
                "locations": self.registry.names,
                "readings": [r.to_dict() for r in self.current_batch()],
                "daily_summaries": [s.to_dict() for s in self._summaries],
                "alerts": [a.to_dict() for a in self._alerts],
                "last_updated": self.last_cycle_completed_at,
            }

    # --- Mutations ---

    def merge_readings(self, readings: list[Reading]) -> None:
        """Replace each location's reading with a newer one and persist the snapshot."""
        with self.lock:
            for reading in readings:
                self._readings[reading.location] = reading
            self._write(READINGS_KEY, [r.to_dict() for r in self.current_batch()])

    def append_summary(self, summary: DailySummary) -> None:
        with self.lock:
            self._summaries.append(summary)
            self._write(SUMMARIES_KEY, [s.to_dict() for s in self._summaries])

    def append_alerts(self, events: list[AlertEvent]) -> None:
        if not events:
            return
        with self.lock:
            self._alerts.extend(events)
            self._write(ALERTS_KEY, [a.to_dict() for a in self._alerts])

    def mark_cycle_completed(self, completed_at: str) -> None:
        with self.lock:
            self.last_cycle_completed_at = completed_at
            self._write(LAST_CYCLE_KEY, completed_at)

    def sync_locations(self) -> list[str]:
        """Adopt locations another process added to the store. Returns tracked names."""
        with self.lock:
            stored = self.store.read(LOCATIONS_KEY, default=[])
            added = self.registry.merge(stored)
            if added:
                logger.info("Picked up stored locations: %s", ", ".join(added))
            return self.registry.names

    def reconfigure_thresholds(self, thresholds: ThresholdConfig) -> None:
        with self.lock:
            if thresholds != self.thresholds:
                logger.info(
                    "High-temperature ceiling %s -> %s",
                    self.thresholds.high_temp_ceiling_c,
                    thresholds.high_temp_ceiling_c,
                )
            self.thresholds = thresholds

    # --- Durability ---

    def flush(self) -> bool:
        """Retry pending writes. Returns True when nothing is left pending."""
        with self.lock:
            for key, value in list(self._pending.items()):
                try:
                    self.store.write(key, value)
                except PersistenceWriteFailure:
                    logger.exception("Flush of %s failed, still pending", key)
                    continue
                del self._pending[key]
                logger.info("Flushed pending write for %s", key)
            return not self._pending

    def close(self) -> None:
        if not self.flush():
            logger.error("Closing with unpersisted state: %s", ", ".join(self.pending_keys))
        self.store.close()

    def _persist_locations(self, names: list[str]) -> None:
        with self.lock:
            self._write(LOCATIONS_KEY, names)

    def _write(self, key: str, value: Any) -> None:
        try:
            self.store.write(key, value)
        except PersistenceWriteFailure:
            self._pending[key] = value
            logger.exception("Persisting %s failed; continuing from memory", key)
            raise
        self._pending.pop(key, None)
