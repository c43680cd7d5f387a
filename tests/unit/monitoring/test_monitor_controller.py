"""Unit tests for the monitor controller."""

import asyncio
import threading
from unittest.mock import Mock, patch

import pytest
from folder_sentry.config import SentryConfig
from folder_sentry.core import IAcknowledgmentPresenter
from folder_sentry.models import (
    ChangeEvent,
    ChangeKind,
    ConfigurationError,
    Decision,
    InvalidPathError,
    WatchResourceError,
)
from folder_sentry.monitoring import AcknowledgmentController, MonitorController, PathWatcherSet


def make_event(name: str, root: str) -> ChangeEvent:
    return ChangeEvent(kind=ChangeKind.CREATED, name=name, path=f"{root}/{name}", watched_root=root)


class TestMonitorController:
    """Test cases for MonitorController."""

    @pytest.fixture
    def config(self):
        return SentryConfig(tick_interval_seconds=0.05)

    @pytest.fixture
    def mock_presenter(self):
        return Mock(spec=IAcknowledgmentPresenter)

    @pytest.fixture
    def started(self):
        return threading.Event()

    @pytest.fixture
    def mock_watcher_set(self, started):
        """Create a mock watcher set."""
        watcher_set = Mock(spec=PathWatcherSet)
        watcher_set.register_all.return_value = ["/a", "/b"]
        watcher_set.start.side_effect = started.set
        watcher_set.watched_paths = ["/a", "/b"]
        watcher_set.is_watching = True
        return watcher_set

    @pytest.fixture
    def monitor(self, config, mock_presenter, mock_watcher_set):
        """Create a MonitorController with a mock watcher set."""
        return MonitorController(config=config, presenter=mock_presenter, watcher_set=mock_watcher_set)

    @pytest.fixture
    def run_in_background(self, monitor, started):
        """Run the monitor on a worker thread and wait until it watches."""
        outcome = {}

        def start(paths):
            def target():
                try:
                    outcome["state"] = monitor.run(paths)
                except Exception as e:
                    outcome["error"] = e

            thread = threading.Thread(target=target, daemon=True)
            thread.start()
            assert started.wait(timeout=2.0)
            return thread, outcome

        yield start
        monitor.shutdown("test teardown")

    def test_initialization_wires_components(self, monitor, mock_watcher_set):
        """Test that watcher events feed the acknowledgment controller."""
        assert mock_watcher_set.on_change == monitor.controller.submit
        assert mock_watcher_set.on_watch_error == monitor._handle_watch_error
        assert monitor.controller.on_halt == monitor._release_watchers
        assert not monitor.is_monitoring

    def test_initialization_with_existing_controller(self, config, mock_watcher_set):
        """Test initialization with an injected acknowledgment controller."""
        controller = AcknowledgmentController(config=config)

        monitor = MonitorController(config=config, watcher_set=mock_watcher_set, controller=controller)

        assert monitor.controller is controller
        assert mock_watcher_set.on_change == controller.submit

    def test_continue_scenario(self, monitor, mock_watcher_set, mock_presenter, run_in_background):
        """Test a change acknowledged with Continue keeps monitoring."""
        thread, _ = run_in_background(["/a", "/b"])
        mock_watcher_set.register_all.assert_called_once_with(["/a", "/b"])
        assert monitor.is_monitoring

        monitor.controller.submit(make_event("x", "/a"))

        session = monitor.controller.current_session
        assert session.event.kind == ChangeKind.CREATED
        assert session.event.name == "x"
        assert session.event.path == "/a/x"
        mock_presenter.present.assert_called_once()

        monitor.controller.decide(Decision.CONTINUE)

        assert monitor.controller.continue_flag is True
        assert monitor.controller.is_idle
        assert thread.is_alive()
        mock_watcher_set.stop.assert_not_called()

    def test_stop_scenario(self, monitor, mock_watcher_set, mock_presenter, run_in_background):
        """Test that Stop ends the run and the queued change is never opened."""
        thread, outcome = run_in_background(["/a", "/b"])

        monitor.controller.submit(make_event("x", "/a"))
        monitor.controller.submit(make_event("y", "/b"))
        assert monitor.controller.pending_count == 1
        assert [c.args[0].name for c in mock_presenter.present.call_args_list] == ["x"]

        monitor.controller.decide(Decision.STOP)
        thread.join(timeout=5.0)

        assert not thread.is_alive()
        assert outcome["state"].continue_flag is False
        assert outcome["state"].registered_paths == {"/a", "/b"}
        assert [c.args[0].name for c in mock_presenter.present.call_args_list] == ["x"]
        mock_watcher_set.stop.assert_called_once()
        assert not monitor.is_monitoring

    def test_shutdown_ends_run(self, monitor, mock_watcher_set, run_in_background):
        """Test aborting a run from another thread."""
        thread, outcome = run_in_background(["/a"])

        monitor.shutdown("operator left")
        thread.join(timeout=5.0)

        assert not thread.is_alive()
        assert outcome["state"].continue_flag is False
        mock_watcher_set.stop.assert_called_once()

    def test_run_invalid_path(self, monitor, mock_watcher_set):
        """Test that registration errors abort startup."""
        mock_watcher_set.register_all.side_effect = InvalidPathError(
            "Directory does not exist: /does/not/exist", path="/does/not/exist", reason="missing"
        )

        with pytest.raises(InvalidPathError):
            monitor.run(["/a", "/does/not/exist"])

        mock_watcher_set.start.assert_not_called()
        mock_watcher_set.stop.assert_called_once()

    def test_run_invalid_path_starts_no_watcher(self, config, tmp_path):
        """Test that no observer is created for a batch with a missing path."""
        valid = tmp_path / "a"
        valid.mkdir()

        with patch('folder_sentry.monitoring.path_watcher.Observer') as mock_observer_class:
            monitor = MonitorController(config=config, presenter=Mock(spec=IAcknowledgmentPresenter))

            with pytest.raises(InvalidPathError):
                monitor.run([valid, "/does/not/exist"])

        mock_observer_class.assert_not_called()
        assert monitor.watcher_set.watched_paths == []

    def test_run_watch_failure_at_start(self, monitor, mock_watcher_set):
        """Test that an OS watch failure when starting aborts the run as a WatchResourceError."""
        mock_watcher_set.start.side_effect = WatchResourceError(
            "Failed to start monitoring: [Errno 28] No space left on device", operation="start"
        )

        with pytest.raises(WatchResourceError):
            monitor.run(["/a", "/b"])

        mock_watcher_set.stop.assert_called_once()
        assert not monitor.is_monitoring

    def test_run_without_paths(self, mock_presenter, mock_watcher_set):
        """Test that a run needs at least one directory."""
        monitor = MonitorController(config=SentryConfig(), presenter=mock_presenter, watcher_set=mock_watcher_set)

        with pytest.raises(ConfigurationError):
            monitor.run([])

        mock_watcher_set.register_all.assert_not_called()

    def test_run_uses_configured_paths(self, mock_presenter, mock_watcher_set, started, tmp_path):
        """Test falling back to the configured directories."""
        config = SentryConfig(watched_paths=[tmp_path])
        monitor = MonitorController(config=config, presenter=mock_presenter, watcher_set=mock_watcher_set)

        thread = threading.Thread(target=monitor.run, daemon=True)
        thread.start()
        assert started.wait(timeout=2.0)
        monitor.shutdown()
        thread.join(timeout=5.0)

        mock_watcher_set.register_all.assert_called_once_with([tmp_path])

    def test_watch_error_is_isolated(self, monitor, mock_watcher_set, run_in_background):
        """Test that losing one directory keeps the run going."""
        thread, _ = run_in_background(["/a", "/b"])
        mock_watcher_set.watched_paths = ["/b"]

        monitor._handle_watch_error(WatchResourceError("Watched directory /a was deleted", path="/a"))

        assert monitor.failed_paths == {"/a": "Watched directory /a was deleted"}
        assert monitor.controller.continue_flag is True
        assert thread.is_alive()

    def test_losing_every_watch_ends_run(self, monitor, mock_watcher_set, run_in_background):
        """Test that a run with nothing left to watch shuts down."""
        thread, outcome = run_in_background(["/a"])
        mock_watcher_set.watched_paths = []

        monitor._handle_watch_error(WatchResourceError("Watched directory /a was deleted", path="/a"))
        thread.join(timeout=5.0)

        assert not thread.is_alive()
        assert outcome["state"].continue_flag is False
        mock_watcher_set.stop.assert_called_once()

    def test_monitoring_stats(self, monitor, run_in_background):
        """Test statistics reporting."""
        run_in_background(["/a", "/b"])
        monitor.controller.submit(make_event("x", "/a"))

        stats = monitor.get_monitoring_stats()

        assert stats["monitoring_active"] is True
        assert stats["continue_flag"] is True
        assert stats["registered_paths"] == ["/a", "/b"]
        assert stats["file_watcher_status"]["watched_paths"] == ["/a", "/b"]
        assert stats["acknowledgment_stats"]["sessions_opened"] == 1
        assert stats["configuration"]["tick_interval_seconds"] == 0.05

    @pytest.mark.asyncio
    async def test_run_async(self, monitor, mock_watcher_set, started):
        """Test awaiting a run from an event loop."""
        task = asyncio.create_task(monitor.run_async(["/a", "/b"]))
        assert await asyncio.to_thread(started.wait, 2.0)

        monitor.controller.submit(make_event("x", "/a"))
        monitor.controller.decide(Decision.STOP)
        state = await asyncio.wait_for(task, timeout=5.0)

        assert state.continue_flag is False
        mock_watcher_set.stop.assert_called_once()
