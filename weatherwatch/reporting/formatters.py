"""Output formatters for cycle summaries and the weather report."""

import json
from typing import Any

from weatherwatch.models.reporting import CycleSummary


def format_cycle_text(s: CycleSummary) -> str:
    """Plain text summary for logging."""
    lines = [
        f"=== Cycle Complete ({s.trigger}) | {s.cycle_id[:8]} ===",
        f"Polled: {s.locations_polled} locations, "
        f"{s.readings_fetched} fresh readings, batch of {s.batch_size}",
    ]
    if s.failures:
        failed = ", ".join(f"{loc} ({err})" for loc, err in s.failures.items())
        lines.append(f"Failed: {failed}")
    if s.stale_locations:
        lines.append(f"Stale: {', '.join(s.stale_locations)}")
    if s.summary is not None:
        d = s.summary
        lines.append(
            f"Summary {d.date}: avg {d.average_temp_c:.1f}°C, "
            f"max {d.max_temp_c:.1f}°C, min {d.min_temp_c:.1f}°C, "
            f"mostly {d.dominant_condition}"
        )
    else:
        lines.append("Summary: none (no readings)")
    lines.append(f"Alerts: {len(s.alerts)} new")
    for alert in s.alerts:
        lines.append(f"  {alert.message}")
    if s.errors:
        lines.append(f"Errors: {len(s.errors)}")
    lines.append(f"Duration: {s.duration_seconds:.1f}s")
    return "\n".join(lines)


def format_report_json(snapshot: dict[str, Any]) -> str:
    """Full weather report: readings, daily summaries, and alerts."""
    data = {
        "readings": snapshot.get("readings", []),
        "daily_summaries": snapshot.get("daily_summaries", []),
        "alerts": [a["message"] for a in snapshot.get("alerts", [])],
        "last_updated": snapshot.get("last_updated"),
    }
    return json.dumps(data, indent=2, ensure_ascii=False)
