"""
Monitor controller.

Owns the monitoring lifecycle: registers the directories, wires the watchers
into the acknowledgment controller, blocks until the operator stops the run
and releases the watchers exactly once on the way out.
"""

import asyncio
import logging
import threading
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from folder_sentry.config import SentryConfig, get_config
from folder_sentry.core.interfaces import IAcknowledgmentPresenter
from folder_sentry.models import ConfigurationError, MonitoringRunState, WatchResourceError
from folder_sentry.monitoring.acknowledgment import AcknowledgmentController
from folder_sentry.monitoring.path_watcher import PathWatcherSet
from folder_sentry.presenters.log_presenter import LoggingPresenter

logger = logging.getLogger(__name__)


class MonitorController:
    """
    Coordinates the watcher set and the acknowledgment controller.

    Watch events flow from the watcher set into ``AcknowledgmentController.submit``;
    a Stop decision halts the run and releases the watchers.
    """

    def __init__(
        self,
        config: SentryConfig | None = None,
        presenter: IAcknowledgmentPresenter | None = None,
        watcher_set: PathWatcherSet | None = None,
        controller: AcknowledgmentController | None = None,
    ):
        """
        Initialize the monitor controller.

        Args:
            config: Sentry configuration (global configuration if omitted)
            presenter: Collaborator rendering sessions to the operator
            watcher_set: Optional watcher set (will create if not provided)
            controller: Optional acknowledgment controller (will create if not provided)
        """
        self.config = config or get_config()

        self.controller = controller or AcknowledgmentController(
            config=self.config, presenter=presenter or LoggingPresenter()
        )
        self.controller.on_halt = self._release_watchers

        self.watcher_set = watcher_set or PathWatcherSet(config=self.config)
        self.watcher_set.on_change = self.controller.submit
        self.watcher_set.on_watch_error = self._handle_watch_error

        self._release_lock = threading.Lock()
        self._watchers_released = True
        self._running = False
        self._failed_paths: dict[str, str] = {}

    def run(self, paths: Iterable[str | Path] | None = None) -> MonitoringRunState:
        """
        Monitor directories until the operator decides to stop.

        Args:
            paths: Directories to watch (configured paths if None)

        Returns:
            The final run state

        Raises:
            ConfigurationError: If there is nothing to watch
            InvalidPathError: If any directory cannot be watched
            WatchResourceError: If the OS watch facility fails at startup
        """
        directories = list(paths) if paths is not None else list(self.config.watched_paths)
        if not directories:
            raise ConfigurationError(
                "No directories to monitor",
                config_key="watched_paths",
                expected_type="non-empty list of directories",
            )

        logger.info("Starting monitoring for: %s", ", ".join(str(d) for d in directories))

        with self._release_lock:
            self._watchers_released = False
        self._failed_paths.clear()
        self._running = True

        try:
            roots = self.watcher_set.register_all(directories)
            self.controller.begin(roots)
            self.watcher_set.start()

            # Poll so KeyboardInterrupt still reaches the main thread
            while not self.controller.wait_until_finished(timeout=0.5):
                pass

            logger.info("Monitoring session ended")
            return self.controller.run_state

        finally:
            self._running = False
            self._release_watchers()

    async def run_async(self, paths: Iterable[str | Path] | None = None) -> MonitoringRunState:
        """Run monitoring in the default executor without blocking the event loop."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.run, paths)

    def shutdown(self, reason: str = "shutdown requested") -> None:
        """Abort a running monitoring session."""
        logger.info("Shutting down monitoring: %s", reason)
        self.controller.shutdown(reason)

    @property
    def is_monitoring(self) -> bool:
        """Check if a run is in progress."""
        return self._running

    @property
    def failed_paths(self) -> dict[str, str]:
        """Directories whose watch was lost, with the reason."""
        return dict(self._failed_paths)

    def get_monitoring_stats(self) -> dict[str, Any]:
        """
        Get monitoring statistics.

        Returns:
            Dictionary with monitoring statistics
        """
        run_state = self.controller.run_state
        return {
            "monitoring_active": self._running,
            "continue_flag": run_state.continue_flag,
            "registered_paths": sorted(run_state.registered_paths),
            "file_watcher_status": {
                "is_watching": self.watcher_set.is_watching,
                "watched_paths": self.watcher_set.watched_paths,
                "failed_paths": self.failed_paths,
            },
            "acknowledgment_stats": self.controller.get_stats(),
            "configuration": {
                "tick_interval_seconds": self.config.tick_interval_seconds,
                "overdue_threshold_seconds": self.config.overdue_threshold_seconds,
                "use_polling": self.config.use_polling,
            },
        }

    def _release_watchers(self) -> None:
        with self._release_lock:
            if self._watchers_released:
                return
            self._watchers_released = True

        self.watcher_set.stop()

    def _handle_watch_error(self, error: WatchResourceError) -> None:
        path = error.path or "unknown"
        self._failed_paths[path] = error.message
        logger.error("Lost watch for %s, other directories keep running: %s", path, error.message)

        if self._running and not self.watcher_set.watched_paths:
            logger.error("No watched directories remain")
            self.controller.shutdown("all watches lost")
