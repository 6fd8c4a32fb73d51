"""Poll daemon: keeps the scheduler running as a background process.

Usage:
    python -m weatherwatch run --config config.yaml
    python -m weatherwatch run --interval 120   # every 2 minutes
    python -m weatherwatch stop                 # stop running daemon
    kill -HUP <pid>                             # reload alert thresholds
"""

import json
import logging
import os
import signal
import sys
import time
from datetime import UTC, datetime
from pathlib import Path

from weatherwatch.config.loader import load_config
from weatherwatch.config.schema import MonitorConfig
from weatherwatch.context import MonitorContext
from weatherwatch.models.reporting import CycleSummary
from weatherwatch.pipeline.poll_cycle import build_poll_cycle
from weatherwatch.scheduler import Scheduler

logger = logging.getLogger(__name__)

PID_DIR = Path("data")
PID_FILE = PID_DIR / "daemon.pid"
STATE_FILE = PID_DIR / "daemon_state.json"


class PollDaemon:
    """Runs the poll scheduler with PID guard, signal handling, and state file."""

    def __init__(
        self,
        config: MonitorConfig,
        db_path: str = "data/weatherwatch.db",
        interval: int | None = None,
        config_path: str | None = None,
    ):
        self.config = config
        self.db_path = db_path
        self.interval = interval or config.poll.interval_seconds
        self.config_path = config_path
        self.context: MonitorContext | None = None
        self.scheduler: Scheduler | None = None
        self._total_cycles = 0
        self._total_successes = 0
        self._total_failures = 0
        self._last_cycle_at: str | None = None
        self._started_at: str | None = None

    def start(self) -> None:
        """Start the scheduler and block until a stop signal."""
        self._check_not_already_running()
        self._write_pid()
        self._started_at = datetime.now(UTC).isoformat()

        self.context = MonitorContext.open(self.config, self.db_path)
        cycle = build_poll_cycle(self.config, self.context)
        self.scheduler = Scheduler(cycle, self.interval, on_cycle=self._record_cycle)
        self._setup_signals()

        logger.info(
            "Daemon started: interval=%ds locations=%d pid=%d",
            self.interval, len(self.context.registry), os.getpid(),
        )
        print(f"🔄 Poll daemon started (pid {os.getpid()}, every {self.interval}s)")
        print("   Stop: python -m weatherwatch stop")

        try:
            self.scheduler.start()
            while not self.scheduler.wait(1.0):
                pass
        except KeyboardInterrupt:
            logger.info("Daemon interrupted by keyboard")
        finally:
            self._cleanup()

    def reload(self) -> None:
        """Re-read the config file and apply new alert thresholds."""
        if self.config_path is None or self.context is None:
            logger.info("No config file to reload")
            return
        try:
            config = load_config(self.config_path)
        except Exception:
            logger.exception("Config reload failed, keeping current thresholds")
            return
        self.config = config
        self.context.reconfigure_thresholds(config.alerts)

    def _record_cycle(self, summary: CycleSummary | None) -> None:
        self._total_cycles += 1
        self._last_cycle_at = datetime.now(UTC).isoformat()
        if summary is None or summary.errors:
            self._total_failures += 1
        else:
            self._total_successes += 1
        self._save_state()

    def _setup_signals(self) -> None:
        """SIGTERM/SIGINT stop gracefully; SIGHUP reloads thresholds."""
        def _stop(signum: int, frame: object) -> None:
            sig_name = signal.Signals(signum).name
            logger.info("Received %s, shutting down gracefully...", sig_name)
            print(f"\n⏹️  Received {sig_name}, finishing current cycle...")
            if self.scheduler is not None:
                self.scheduler.stop(timeout=0)

        def _reload(signum: int, frame: object) -> None:
            logger.info("Received SIGHUP, reloading config")
            self.reload()

        signal.signal(signal.SIGTERM, _stop)
        signal.signal(signal.SIGINT, _stop)
        if hasattr(signal, "SIGHUP"):
            signal.signal(signal.SIGHUP, _reload)

    def _check_not_already_running(self) -> None:
        """Prevent duplicate daemons."""
        if PID_FILE.exists():
            try:
                pid = int(PID_FILE.read_text().strip())
                os.kill(pid, 0)
                print(f"❌ Daemon already running (pid {pid}). Stop it first:")
                print("   python -m weatherwatch stop")
                sys.exit(1)
            except (ProcessLookupError, ValueError):
                # Stale PID file
                PID_FILE.unlink(missing_ok=True)
            except PermissionError:
                print(f"❌ Daemon may be running (pid {pid}), can't verify.")
                sys.exit(1)

    def _write_pid(self) -> None:
        PID_DIR.mkdir(parents=True, exist_ok=True)
        PID_FILE.write_text(str(os.getpid()))

    def _save_state(self) -> None:
        """Persist daemon stats for status reporting."""
        state = {
            "pid": os.getpid(),
            "started_at": self._started_at,
            "interval": self.interval,
            "total_cycles": self._total_cycles,
            "total_successes": self._total_successes,
            "total_failures": self._total_failures,
            "last_cycle_at": self._last_cycle_at,
            "last_update": datetime.now(UTC).isoformat(),
        }
        PID_DIR.mkdir(parents=True, exist_ok=True)
        STATE_FILE.write_text(json.dumps(state, indent=2))

    def _cleanup(self) -> None:
        """Stop the timer, flush pending writes, remove PID file."""
        if self.scheduler is not None:
            self.scheduler.stop()
        if self.context is not None:
            self.context.close()
        PID_FILE.unlink(missing_ok=True)
        self._save_state()
        logger.info(
            "Daemon stopped, %d cycles (%d ok, %d failed)",
            self._total_cycles, self._total_successes, self._total_failures,
        )
        print(
            f"⏹️  Daemon stopped, {self._total_cycles} cycles "
            f"({self._total_successes} ok, {self._total_failures} failed)"
        )


def stop_daemon() -> int:
    """Stop a running daemon by sending SIGTERM."""
    if not PID_FILE.exists():
        print("No daemon running (no PID file found)")
        return 1

    try:
        pid = int(PID_FILE.read_text().strip())
    except ValueError:
        print("Corrupt PID file, removing")
        PID_FILE.unlink(missing_ok=True)
        return 1

    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        print(f"Daemon not running (stale pid {pid}), cleaning up")
        PID_FILE.unlink(missing_ok=True)
        STATE_FILE.unlink(missing_ok=True)
        return 0

    print(f"Stopping daemon (pid {pid})...")
    os.kill(pid, signal.SIGTERM)

    # Wait up to 60s for the in-flight cycle to finish
    for _ in range(60):
        time.sleep(1)
        try:
            os.kill(pid, 0)
        except ProcessLookupError:
            print("✅ Daemon stopped")
            PID_FILE.unlink(missing_ok=True)
            return 0

    print("⚠️  Daemon didn't stop in 60s, sending SIGKILL")
    os.kill(pid, signal.SIGKILL)
    PID_FILE.unlink(missing_ok=True)
    return 0


def daemon_status() -> int:
    """Print daemon status from state file."""
    if not STATE_FILE.exists():
        print("No daemon state found")
        if PID_FILE.exists():
            try:
                pid = int(PID_FILE.read_text().strip())
                os.kill(pid, 0)
                print(f"  (but PID file exists: {pid}, process running)")
            except (ProcessLookupError, ValueError):
                print("  (stale PID file found)")
        return 1

    state = json.loads(STATE_FILE.read_text())
    pid = state.get("pid", "?")

    running = False
    try:
        os.kill(int(pid), 0)
        running = True
    except (ProcessLookupError, ValueError, TypeError):
        pass

    status_icon = "🟢" if running else "🔴"
    print(f"{status_icon} Daemon {'running' if running else 'stopped'}")
    print(f"  PID: {pid}")
    print(f"  Interval: {state.get('interval', '?')}s")
    print(f"  Started: {state.get('started_at', '?')}")
    print(f"  Total cycles: {state.get('total_cycles', 0)}")
    print(f"  Successes: {state.get('total_successes', 0)}")
    print(f"  Failures: {state.get('total_failures', 0)}")
    print(f"  Last cycle: {state.get('last_cycle_at', '?')}")
    return 0
