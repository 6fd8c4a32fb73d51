"""Poll cycle: fetch every tracked location, aggregate, alert, persist."""

import logging
import sqlite3
import threading
import time
import uuid
from concurrent.futures import Future, ThreadPoolExecutor, wait

from weatherwatch.aggregate.aggregator import summarize
from weatherwatch.alerts.evaluator import evaluate
from weatherwatch.config.schema import MonitorConfig, PollConfig
from weatherwatch.context import MonitorContext
from weatherwatch.ingest.fetcher import ReadingSource, WeatherFetcher
from weatherwatch.ingest.weather_client import (
    LocationNotFound,
    OpenWeatherClient,
    SourceUnavailable,
    WeatherSourceError,
)
from weatherwatch.models.common import local_today, utc_now_iso
from weatherwatch.models.reading import Reading
from weatherwatch.models.reporting import CycleSummary, CycleTrigger
from weatherwatch.registry import LocationRegistry
from weatherwatch.reporting.cycle_summarizer import CycleSummarizer
from weatherwatch.reporting.formatters import format_cycle_text
from weatherwatch.storage.store import PersistenceWriteFailure

logger = logging.getLogger(__name__)


class PollCycle:
    def __init__(
        self,
        context: MonitorContext,
        source: ReadingSource,
        poll: PollConfig | None = None,
    ):
        self.context = context
        self.source = source
        self.poll = poll or PollConfig()
        self._cycle_lock = threading.Lock()

    def run(self, trigger: str = CycleTrigger.MANUAL) -> CycleSummary:
        """Execute one full cycle. Only one cycle runs at a time."""
        with self._cycle_lock:
            return self._run(trigger)

    def _run(self, trigger: str) -> CycleSummary:
        start_time = time.monotonic()
        cycle_id = str(uuid.uuid4())
        summarizer = CycleSummarizer(cycle_id, str(trigger))
        store = self.context.store

        self._persist(summarizer, store.record_cycle_start, cycle_id, str(trigger))
        try:
            names = self._tracked_locations()
            logger.info(
                "Cycle %s (%s): polling %d locations", cycle_id[:8], trigger, len(names)
            )

            # 1. FETCH (no lock held while waiting on the network)
            fresh, failures = self.fetch_all(names)
            for location, error in failures.items():
                summarizer.record_failure(location, str(error))
            summarizer.record_poll(len(names), len(fresh))

            with self.context.lock:
                # 2. MERGE: failed locations keep their previous reading
                known = self.context.readings
                summarizer.record_stale([loc for loc in failures if loc in known])
                self._persist(summarizer, self.context.merge_readings, fresh)
                batch = self.context.current_batch()
                summarizer.record_batch(len(batch))

                if batch:
                    # 3. AGGREGATE
                    daily = summarize(batch, local_today())
                    summarizer.record_daily_summary(daily)
                    self._persist(summarizer, self.context.append_summary, daily)

                    # 4. ALERT
                    alerts = evaluate(
                        batch, self.context.thresholds, self.context.prior_messages()
                    )
                    summarizer.record_alerts(alerts)
                    self._persist(summarizer, self.context.append_alerts, alerts)
                else:
                    logger.warning(
                        "Cycle %s has no readings, skipping summary and alerts",
                        cycle_id[:8],
                    )

                self._persist(
                    summarizer, self.context.mark_cycle_completed, utc_now_iso()
                )

            summarizer.record_duration(time.monotonic() - start_time)
            summary = summarizer.finalize()
            status = "completed_with_errors" if summary.errors else "completed"
            error_message = "; ".join(summary.errors) or None

        except Exception as e:
            logger.exception("Poll cycle %s failed", cycle_id[:8])
            summarizer.record_error(str(e))
            summarizer.record_duration(time.monotonic() - start_time)
            summary = summarizer.finalize()
            status = "failed"
            error_message = str(e)

        self._persist(
            summarizer,
            store.record_cycle_end,
            cycle_id,
            status,
            error_message,
            locations_polled=summary.locations_polled,
            readings_fetched=summary.readings_fetched,
            alerts_raised=len(summary.alerts),
        )
        logger.info(format_cycle_text(summary))
        return summary

    def fetch_all(
        self, names: list[str]
    ) -> tuple[list[Reading], dict[str, Exception]]:
        """Fetch all locations concurrently and wait for every one to settle.

        Fetches still running after cycle_timeout_seconds count as failures.
        Results keep the order of `names`.
        """
        if not names:
            return [], {}

        pool = ThreadPoolExecutor(
            max_workers=min(self.poll.max_workers, len(names)),
            thread_name_prefix="fetch",
        )
        futures: dict[Future, str] = {
            pool.submit(self._fetch_with_retry, name): name for name in names
        }
        try:
            _, not_done = wait(futures, timeout=self.poll.cycle_timeout_seconds)
        finally:
            pool.shutdown(wait=False, cancel_futures=True)

        readings: list[Reading] = []
        failures: dict[str, Exception] = {}
        for future, name in futures.items():
            if future in not_done:
                failures[name] = SourceUnavailable(
                    f"timed out after {self.poll.cycle_timeout_seconds}s"
                )
                logger.warning("Fetch for %s did not finish in time", name)
                continue
            try:
                readings.append(future.result())
            except WeatherSourceError as e:
                failures[name] = e
                logger.warning("Fetch failed for %s: %s", name, e)
            except Exception as e:
                failures[name] = e
                logger.exception("Fetch crashed for %s", name)
        return readings, failures

    def add_location(self, name: str) -> bool:
        """Track a new location: fetch it once and merge its reading.

        Returns False for blank or already tracked names. Fetch errors
        (LocationNotFound, SourceUnavailable) propagate and leave the
        registry unchanged. Aggregation and alerting do not run.
        """
        name = LocationRegistry.normalize(name)
        with self.context.lock:
            if not name or name in self.context.registry:
                logger.info("Not adding %r: blank or already tracked", name)
                return False

        try:
            reading = self.source.fetch(name)
        except WeatherSourceError as e:
            logger.warning("Could not add %s: %s", name, e)
            raise

        with self.context.lock:
            try:
                added = self.context.registry.add(name)
            except PersistenceWriteFailure:
                # Still tracked in memory
                self.context.merge_readings([reading])
                raise
            if added:
                self.context.merge_readings([reading])
            return added

    def _fetch_with_retry(self, name: str) -> Reading:
        retries = self.poll.fetch_retries
        for attempt in range(retries + 1):
            try:
                return self.source.fetch(name)
            except LocationNotFound:
                raise
            except SourceUnavailable as e:
                if attempt >= retries:
                    raise
                delay = self.poll.retry_base_delay_seconds * (2**attempt)
                logger.warning(
                    "Fetch for %s unavailable, retrying in %.1fs (attempt %d/%d): %s",
                    name, delay, attempt + 1, retries, e,
                )
                time.sleep(delay)
        raise AssertionError("unreachable")

    def _tracked_locations(self) -> list[str]:
        try:
            return self.context.sync_locations()
        except (sqlite3.Error, ValueError):
            logger.exception("Could not read stored locations, using in-memory list")
            return self.context.registry.names

    def _persist(self, summarizer: CycleSummarizer, write, *args, **kwargs) -> None:
        try:
            write(*args, **kwargs)
        except PersistenceWriteFailure as e:
            logger.error("Cycle %s: %s", summarizer.summary.cycle_id[:8], e)
            summarizer.record_error(str(e))


def build_poll_cycle(config: MonitorConfig, context: MonitorContext) -> PollCycle:
    """Wire a PollCycle to the OpenWeatherMap source described by `config`."""
    client = OpenWeatherClient(
        api_key=config.source.api_key or None,
        base_url=config.source.base_url,
        units=config.source.units,
        timeout=config.source.timeout_seconds,
    )
    return PollCycle(context, WeatherFetcher(client), config.poll)
