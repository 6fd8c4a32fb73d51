"""CLI entry point for the weather monitor."""

import argparse
import logging
from pathlib import Path

from weatherwatch.config.loader import (
    get_config_value,
    load_config,
    save_config,
    set_config_value,
)
from weatherwatch.context import MonitorContext
from weatherwatch.daemon import PollDaemon, daemon_status, stop_daemon
from weatherwatch.ingest.staleness import is_reading_stale
from weatherwatch.ingest.weather_client import LocationNotFound, WeatherSourceError
from weatherwatch.pipeline.poll_cycle import build_poll_cycle
from weatherwatch.reporting.formatters import format_cycle_text, format_report_json
from weatherwatch.storage.store import PersistenceWriteFailure

DEFAULT_DB = "data/weatherwatch.db"
DEFAULT_REPORT = "weather_report.json"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="weatherwatch",
        description="Polls tracked locations, summarizes daily temperatures, raises alerts",
    )
    parser.add_argument("--config", default=None, help="Config YAML path")
    parser.add_argument("--db", default=DEFAULT_DB, help="SQLite DB path")

    sub = parser.add_subparsers(dest="command")

    # run / stop / daemon-status
    run_p = sub.add_parser("run", help="Run the poll daemon in the foreground")
    run_p.add_argument("--interval", type=int, default=None, help="Seconds between cycles")
    sub.add_parser("stop", help="Stop a running daemon")
    sub.add_parser("daemon-status", help="Show daemon status")

    # cycle
    sub.add_parser("cycle", help="Run one poll cycle now")

    # add
    add_p = sub.add_parser("add", help="Track a new location")
    add_p.add_argument("name", help="Location name, e.g. 'Pune'")

    # status
    sub.add_parser("status", help="Show tracked locations, readings, summaries, alerts")

    # report
    report_p = sub.add_parser("report", help="Export the full weather report as JSON")
    report_p.add_argument("--output", default=DEFAULT_REPORT, help="Output file ('-' for stdout)")

    # config show / config set
    config_p = sub.add_parser("config", help="Config operations")
    config_sub = config_p.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Display current config")
    set_p = config_sub.add_parser("set", help="Set a config value")
    set_p.add_argument("keyvalue", help="key=value to set")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "stop":
        return stop_daemon()
    elif args.command == "daemon-status":
        return daemon_status()

    config = load_config(args.config)

    if args.command == "run":
        return _cmd_run(config, args)
    elif args.command == "cycle":
        return _cmd_cycle(config, args)
    elif args.command == "add":
        return _cmd_add(config, args)
    elif args.command == "status":
        return _cmd_status(config, args)
    elif args.command == "report":
        return _cmd_report(config, args)
    elif args.command == "config":
        return _cmd_config(config, args)
    else:
        parser.print_help()
        return 1


def _cmd_run(config, args) -> int:
    daemon = PollDaemon(
        config, args.db, interval=args.interval, config_path=args.config
    )
    daemon.start()
    return 0


def _cmd_cycle(config, args) -> int:
    context = MonitorContext.open(config, args.db)
    try:
        cycle = build_poll_cycle(config, context)
        summary = cycle.run()
    finally:
        context.close()
    print(format_cycle_text(summary))
    return 0 if not summary.errors else 1


def _cmd_add(config, args) -> int:
    context = MonitorContext.open(config, args.db)
    try:
        cycle = build_poll_cycle(config, context)
        added = cycle.add_location(args.name)
    except LocationNotFound:
        print(f"Location not found: {args.name}")
        return 1
    except WeatherSourceError as e:
        print(f"Weather source error, {args.name} not added: {e}")
        return 1
    except PersistenceWriteFailure as e:
        print(f"Added {args.name} but could not save it: {e}")
        return 1
    finally:
        context.close()

    if not added:
        print("Location already tracked or empty name")
        return 1
    print(f"Now tracking {args.name.strip()}")
    return 0


def _cmd_status(config, args) -> int:
    context = MonitorContext.open(config, args.db)
    try:
        readings = context.readings
        summaries = context.summaries
        alerts = context.alerts
        print(f"Tracked locations: {len(context.registry)}")
        for name in context.registry:
            reading = readings.get(name)
            if reading is None:
                print(f"  {name}: no reading yet")
                continue
            stale = is_reading_stale(reading.fetched_at, config.poll.stale_after_minutes)
            print(
                f"  {reading.name}: {reading.temperature_c}°C, {reading.condition}, "
                f"feels like {reading.feels_like_c}°C, humidity {reading.humidity_pct}%, "
                f"pressure {reading.pressure_hpa} hPa, wind {reading.wind_speed_ms} m/s"
                + (" [stale]" if stale else "")
            )
        print(f"Last updated: {context.last_cycle_completed_at or 'never'}")
        print(f"Daily summaries: {len(summaries)}")
        if summaries:
            last = summaries[-1]
            print(
                f"  Latest {last.date}: avg {last.average_temp_c:.1f}°C, "
                f"max {last.max_temp_c}°C, min {last.min_temp_c}°C, "
                f"mostly {last.dominant_condition}"
            )
        print(f"Alerts: {len(alerts)}")
        for alert in alerts:
            print(f"  {alert.message}")
    finally:
        context.close()
    return 0


def _cmd_report(config, args) -> int:
    context = MonitorContext.open(config, args.db)
    try:
        report = format_report_json(context.snapshot())
    finally:
        context.close()
    if args.output == "-":
        print(report)
    else:
        Path(args.output).write_text(report, encoding="utf-8")
        print(f"Report written to {args.output}")
    return 0


def _cmd_config(config, args) -> int:
    if args.config_command == "show":
        print(config.model_dump_json(indent=2))
        return 0
    elif args.config_command == "set":
        if args.config is None:
            print("Error: config set needs --config PATH to write to")
            return 1
        kv = args.keyvalue
        if "=" not in kv:
            print("Error: use key=value format")
            return 1
        key, value = kv.split("=", 1)
        try:
            new_config = set_config_value(config, key.strip(), value.strip())
        except Exception as e:
            print(f"Error: {e}")
            return 1
        save_config(new_config, args.config)
        print(f"Set {key} = {get_config_value(new_config, key.strip())}")
        return 0
    else:
        print("Use: config show | config set key=value")
        return 1
