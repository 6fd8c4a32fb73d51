"""Threshold alert evaluation, deduplicated by exact message text."""

import logging
from collections.abc import Iterable, Set

from weatherwatch.config.schema import ThresholdConfig
from weatherwatch.models.alert import AlertEvent, ThresholdKind
from weatherwatch.models.common import format_number, utc_now_iso
from weatherwatch.models.reading import Reading

logger = logging.getLogger(__name__)


def high_temperature_message(name: str, ceiling: float, temperature: float) -> str:
    return (
        f"Alert: {name} temperature exceeded {format_number(ceiling)}°C. "
        f"Current: {format_number(temperature)}°C"
    )


def sub_zero_message(name: str, temperature: float) -> str:
    return (
        f"Alert: {name} temperature is below 0°C. "
        f"Current: {format_number(temperature)}°C"
    )


def evaluate(
    readings: Iterable[Reading],
    config: ThresholdConfig,
    prior_messages: Set[str],
) -> list[AlertEvent]:
    """Return new alert events for a batch.

    A reading fires at most one alert: the sub-zero check only runs when the
    high-temperature check does not. Messages already in `prior_messages`,
    or already emitted for this batch, are skipped.
    """
    seen = set(prior_messages)
    events: list[AlertEvent] = []
    raised_at = utc_now_iso()

    for reading in readings:
        temp = reading.temperature_c
        if temp > config.high_temp_ceiling_c:
            kind = ThresholdKind.HIGH_TEMPERATURE
            message = high_temperature_message(
                reading.name, config.high_temp_ceiling_c, temp
            )
        elif temp < config.low_temp_floor_c:
            kind = ThresholdKind.SUB_ZERO
            message = sub_zero_message(reading.name, temp)
        else:
            continue

        if message in seen:
            continue
        seen.add(message)
        logger.warning(message)
        events.append(
            AlertEvent(
                location=reading.name,
                kind=kind,
                temperature_c=temp,
                message=message,
                raised_at=raised_at,
            )
        )

    return events
