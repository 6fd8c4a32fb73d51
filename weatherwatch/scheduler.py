"""Scheduler: a startup cycle, then one cycle every fixed interval."""

import logging
import threading
import time
from collections.abc import Callable

from weatherwatch.config.schema import PollConfig
from weatherwatch.models.reporting import CycleSummary, CycleTrigger
from weatherwatch.pipeline.poll_cycle import PollCycle

logger = logging.getLogger(__name__)


class Scheduler:
    """Drives PollCycle from a single background timer thread.

    A cycle that raises is logged and the timer keeps running. `stop()` lets
    an in-flight cycle finish and starts no new one.
    """

    def __init__(
        self,
        cycle: PollCycle,
        interval: float | None = None,
        on_cycle: Callable[[CycleSummary | None], None] | None = None,
    ):
        self.cycle = cycle
        self.interval = interval if interval is not None else PollConfig().interval_seconds
        self.on_cycle = on_cycle
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            raise RuntimeError("Scheduler already running")
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._loop, name="poll-scheduler", daemon=True
        )
        self._thread.start()
        logger.info("Scheduler started, interval=%ss", self.interval)

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("Scheduler thread still finishing a cycle")
            else:
                self._thread = None
        logger.info("Scheduler stopped")

    def wait(self, timeout: float | None = None) -> bool:
        """Block until stop() is called. Returns True if stopped."""
        return self._stop.wait(timeout)

    def run_cycle_now(self) -> CycleSummary:
        """Run a full cycle on the caller's thread, serialized with the timer."""
        return self.cycle.run(CycleTrigger.MANUAL)

    def add_location(self, name: str) -> bool:
        return self.cycle.add_location(name)

    def _loop(self) -> None:
        trigger = CycleTrigger.STARTUP
        while not self._stop.is_set():
            started = time.monotonic()
            summary = self._run_guarded(trigger)
            if self.on_cycle is not None:
                try:
                    self.on_cycle(summary)
                except Exception:
                    logger.exception("on_cycle callback failed")
            trigger = CycleTrigger.TIMER
            remaining = max(0.0, self.interval - (time.monotonic() - started))
            self._stop.wait(remaining)

    def _run_guarded(self, trigger: str) -> CycleSummary | None:
        try:
            return self.cycle.run(trigger)
        except Exception:
            logger.exception("Poll cycle (%s) crashed", trigger)
            return None
