"""Tests for the poll daemon."""

import json
import os
from unittest.mock import patch

import pytest

from weatherwatch.config.schema import MonitorConfig
from weatherwatch.daemon import PollDaemon, daemon_status, stop_daemon
from weatherwatch.models.reporting import CycleSummary


@pytest.fixture
def tmp_data(tmp_path, monkeypatch):
    """Redirect PID/state files to temp directory."""
    pid_file = tmp_path / "daemon.pid"
    state_file = tmp_path / "daemon_state.json"
    monkeypatch.setattr("weatherwatch.daemon.PID_FILE", pid_file)
    monkeypatch.setattr("weatherwatch.daemon.PID_DIR", tmp_path)
    monkeypatch.setattr("weatherwatch.daemon.STATE_FILE", state_file)
    return {"pid": pid_file, "state": state_file, "dir": tmp_path}


@pytest.fixture
def config():
    return MonitorConfig(locations=["Delhi"])


class TestPollDaemon:
    """Tests for PollDaemon lifecycle."""

    def test_start_and_cleanup(self, tmp_data, config, db_path):
        """Daemon writes state, closes the context, and removes its PID file."""
        daemon = PollDaemon(config, str(db_path), interval=1)

        with patch("weatherwatch.daemon.Scheduler") as MockScheduler, \
                patch("weatherwatch.daemon.build_poll_cycle"), \
                patch.object(daemon, "_setup_signals"):
            MockScheduler.return_value.wait.return_value = True
            daemon.start()
            MockScheduler.return_value.start.assert_called_once()
            MockScheduler.return_value.stop.assert_called()

        assert tmp_data["state"].exists()
        assert not tmp_data["pid"].exists()

    def test_interval_defaults_to_config(self, config):
        assert PollDaemon(config).interval == config.poll.interval_seconds
        assert PollDaemon(config, interval=60).interval == 60

    def test_prevents_duplicate_start(self, tmp_data, config):
        """Cannot start daemon if one is already running."""
        tmp_data["pid"].write_text(str(os.getpid()))

        daemon = PollDaemon(config)
        with pytest.raises(SystemExit):
            daemon._check_not_already_running()

    def test_cleans_stale_pid(self, tmp_data, config):
        """Stale PID file from dead process is cleaned up."""
        tmp_data["pid"].write_text("999999999")

        daemon = PollDaemon(config)
        daemon._check_not_already_running()
        assert not tmp_data["pid"].exists()

    def test_saves_state(self, tmp_data, config):
        daemon = PollDaemon(config, interval=60)
        daemon._started_at = "2026-10-19T00:00:00+00:00"
        daemon._total_cycles = 5
        daemon._total_successes = 4
        daemon._total_failures = 1

        daemon._write_pid()
        daemon._save_state()

        state = json.loads(tmp_data["state"].read_text())
        assert state["total_cycles"] == 5
        assert state["total_successes"] == 4
        assert state["total_failures"] == 1
        assert state["interval"] == 60

    def test_record_cycle_counts(self, tmp_data, config):
        daemon = PollDaemon(config)
        daemon._record_cycle(CycleSummary(cycle_id="a", trigger="startup"))
        daemon._record_cycle(
            CycleSummary(cycle_id="b", trigger="timer", errors=["disk full"])
        )
        daemon._record_cycle(None)

        assert daemon._total_cycles == 3
        assert daemon._total_successes == 1
        assert daemon._total_failures == 2
        assert daemon._last_cycle_at is not None
        assert json.loads(tmp_data["state"].read_text())["total_cycles"] == 3

    def test_reload_applies_thresholds(self, tmp_data, config_yaml_path, context):
        daemon = PollDaemon(MonitorConfig(), config_path=str(config_yaml_path))
        daemon.context = context
        daemon.reload()
        assert context.thresholds.high_temp_ceiling_c == 40
        assert daemon.config.poll.interval_seconds == 120

    def test_reload_keeps_thresholds_on_bad_config(self, tmp_path, context):
        bad = tmp_path / "bad.yaml"
        bad.write_text("alerts:\n  bogus: 1\n")
        daemon = PollDaemon(MonitorConfig(), config_path=str(bad))
        daemon.context = context
        daemon.reload()
        assert context.thresholds.high_temp_ceiling_c == 35.0

    def test_cleanup_removes_pid(self, tmp_data, config):
        daemon = PollDaemon(config)
        daemon._write_pid()
        assert tmp_data["pid"].exists()

        daemon._cleanup()
        assert not tmp_data["pid"].exists()


class TestDaemonControl:
    """Tests for stop/status commands."""

    def test_stop_no_daemon(self, tmp_data):
        assert stop_daemon() == 1

    def test_stop_stale_pid(self, tmp_data):
        tmp_data["pid"].write_text("999999999")
        assert stop_daemon() == 0
        assert not tmp_data["pid"].exists()

    def test_status_no_state(self, tmp_data):
        assert daemon_status() == 1

    def test_status_with_state(self, tmp_data, capsys):
        state = {
            "pid": 99999,
            "started_at": "2026-10-19T00:00:00+00:00",
            "interval": 120,
            "total_cycles": 10,
            "total_successes": 9,
            "total_failures": 1,
            "last_cycle_at": "2026-10-19T00:20:00+00:00",
            "last_update": "2026-10-19T00:20:00+00:00",
        }
        tmp_data["state"].write_text(json.dumps(state))

        daemon_status()
        out = capsys.readouterr().out

        assert "120s" in out
        assert "Total cycles: 10" in out
