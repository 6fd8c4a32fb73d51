"""Durable key/value state for the monitor, backed by SQLite."""

import json
import logging
import sqlite3
import threading
from pathlib import Path
from typing import Any

from weatherwatch.storage import state_repo
from weatherwatch.storage.database import connect, run_migrations

logger = logging.getLogger(__name__)

LOCATIONS_KEY = "tracked_locations"
READINGS_KEY = "weather_snapshot"
SUMMARIES_KEY = "daily_summaries"
ALERTS_KEY = "alert_log"
LAST_CYCLE_KEY = "last_cycle_completed_at"


class PersistenceWriteFailure(Exception):
    """Raised when a durable write fails; memory and store have diverged."""

    def __init__(self, key: str, cause: Exception):
        super().__init__(f"Failed to persist {key!r}: {cause}")
        self.key = key


class StateStore:
    """Whole-value JSON state per logical key. No business logic."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self._lock = threading.Lock()

    @classmethod
    def open(cls, db_path: str | Path) -> "StateStore":
        conn = connect(db_path)
        run_migrations(conn)
        return cls(conn)

    def read(self, key: str, default: Any = None) -> Any:
        """Read a key; an absent key gives `default`."""
        with self._lock:
            raw = state_repo.get_value(self.conn, key)
        if raw is None:
            return default
        return json.loads(raw)

    def write(self, key: str, value: Any) -> None:
        """Atomically replace the value of a key."""
        encoded = json.dumps(value, ensure_ascii=False)
        with self._lock:
            try:
                state_repo.set_value(self.conn, key, encoded)
            except sqlite3.Error as e:
                raise PersistenceWriteFailure(key, e) from e

    # --- Cycle history ---

    def record_cycle_start(self, cycle_id: str, trigger: str) -> None:
        with self._lock:
            try:
                state_repo.create_cycle(self.conn, cycle_id, trigger)
            except sqlite3.Error as e:
                raise PersistenceWriteFailure("cycles", e) from e

    def record_cycle_end(
        self,
        cycle_id: str,
        status: str,
        error_message: str | None = None,
        **metrics: int | None,
    ) -> None:
        with self._lock:
            try:
                state_repo.complete_cycle(
                    self.conn, cycle_id, status, error_message, **metrics
                )
            except sqlite3.Error as e:
                raise PersistenceWriteFailure("cycles", e) from e

    def latest_cycle(self) -> dict | None:
        with self._lock:
            return state_repo.get_latest_cycle(self.conn)

    def close(self) -> None:
        with self._lock:
            self.conn.close()
