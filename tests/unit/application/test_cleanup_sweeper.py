"""
Unit tests for CleanupSweeper.
"""

import threading
import time
from unittest.mock import Mock

import pytest

from fileregistry.application.cleanup_sweeper import CleanupSweeper


def _wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


class TestCleanupSweeper:
    def test_runs_immediately_on_start(self):
        sweep = Mock(return_value={"expired_found": 0})
        sweeper = CleanupSweeper(sweep, interval=3600)

        sweeper.start()
        try:
            assert _wait_for(lambda: sweep.call_count == 1)
        finally:
            sweeper.stop(timeout=2)

        assert sweep.call_count == 1

    def test_runs_on_interval(self):
        sweep = Mock(return_value=None)
        sweeper = CleanupSweeper(sweep, interval=0.02)

        sweeper.start()
        try:
            assert _wait_for(lambda: sweep.call_count >= 3)
        finally:
            sweeper.stop(timeout=2)

    def test_failure_is_logged_and_loop_continues(self, caplog):
        sweep = Mock(side_effect=[RuntimeError("store unreachable"), {"ok": True}, {"ok": True}])
        sweeper = CleanupSweeper(sweep, interval=0.02)

        sweeper.start()
        try:
            assert _wait_for(lambda: sweep.call_count >= 2)
        finally:
            sweeper.stop(timeout=2)

        assert "Cleanup sweep failed" in caplog.text
        assert not sweeper.is_running

    def test_start_is_idempotent(self):
        started = threading.Event()
        release = threading.Event()

        def sweep():
            started.set()
            release.wait(2)

        sweeper = CleanupSweeper(sweep, interval=3600)
        sweeper.start()
        assert started.wait(2)
        first_thread = sweeper._thread

        sweeper.start()
        assert sweeper._thread is first_thread

        release.set()
        sweeper.stop(timeout=2)

    def test_stop_lets_in_flight_sweep_finish(self):
        started = threading.Event()
        finished = threading.Event()

        def sweep():
            started.set()
            time.sleep(0.1)
            finished.set()

        sweeper = CleanupSweeper(sweep, interval=3600)
        sweeper.start()
        assert started.wait(2)

        sweeper.stop(timeout=2)

        assert finished.is_set()
        assert not sweeper.is_running

    def test_shared_shutdown_event_stops_sweeper(self):
        shutdown = threading.Event()
        sweeper = CleanupSweeper(Mock(), interval=3600, shutdown_event=shutdown)
        sweeper.start()

        shutdown.set()

        assert _wait_for(lambda: not sweeper.is_running)

    def test_preset_shutdown_skips_run(self):
        shutdown = threading.Event()
        shutdown.set()
        sweep = Mock()
        sweeper = CleanupSweeper(sweep, interval=3600, shutdown_event=shutdown)

        sweeper.start()
        sweeper.stop(timeout=2)

        sweep.assert_not_called()

    def test_run_once_returns_result(self):
        sweeper = CleanupSweeper(Mock(return_value={"records_removed": 2}), interval=10)
        assert sweeper.run_once() == {"records_removed": 2}
        assert sweeper.runs == 1

    def test_run_once_swallows_errors(self):
        sweeper = CleanupSweeper(Mock(side_effect=OSError("boom")), interval=10)
        assert sweeper.run_once() is None
        assert sweeper.runs == 1

    @pytest.mark.parametrize("interval", [0, -1])
    def test_rejects_non_positive_interval(self, interval):
        with pytest.raises(ValueError):
            CleanupSweeper(Mock(), interval=interval)
