"""Daily aggregation over one cycle's batch of readings."""

from collections.abc import Iterable, Sequence
from datetime import date

from weatherwatch.models.reading import Reading
from weatherwatch.models.summary import DailySummary


class EmptyBatch(ValueError):
    """Raised when asked to summarize zero readings. A caller bug."""


def summarize(readings: Sequence[Reading], day: date) -> DailySummary:
    """Compute the daily summary for a non-empty batch.

    The result is a new record; appending it to the log is the caller's job.
    Two cycles on the same day produce two summaries.
    """
    if not readings:
        raise EmptyBatch("Cannot summarize an empty batch of readings")

    temps = [r.temperature_c for r in readings]
    average = sum(temps) / len(temps)
    # Float rounding in the mean must not break min <= avg <= max
    low, high = min(temps), max(temps)
    average = min(max(average, low), high)

    return DailySummary(
        date=day.isoformat(),
        average_temp_c=average,
        max_temp_c=high,
        min_temp_c=low,
        dominant_condition=dominant_condition(r.condition for r in readings),
        reading_count=len(temps),
    )


def dominant_condition(conditions: Iterable[str]) -> str:
    """Most frequent label; ties go to the label that reached the top count first."""
    counts: dict[str, int] = {}
    best = ""
    best_count = 0
    for condition in conditions:
        counts[condition] = counts.get(condition, 0) + 1
        if counts[condition] > best_count:
            best = condition
            best_count = counts[condition]
    if best_count == 0:
        raise EmptyBatch("No conditions to tally")
    return best
