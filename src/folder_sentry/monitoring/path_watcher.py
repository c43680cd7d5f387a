"""
File system watchers for the registered directories.

Each registered directory gets its own non-recursive watch and handler on a
shared watchdog observer. Handlers translate created, deleted and moved
notifications into ChangeEvents and hand them to a single ingestion callback.
"""

import logging
import os
import threading
from collections.abc import Callable, Iterable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver, ObservedWatch
from watchdog.observers.polling import PollingObserver

from folder_sentry.config import SentryConfig, get_config
from folder_sentry.models import ChangeEvent, ChangeKind, InvalidPathError, WatchResourceError

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[ChangeEvent], object]
WatchErrorCallback = Callable[[WatchResourceError], object]


class DirectoryWatcher(FileSystemEventHandler):
    """
    Watchdog handler for one registered directory.

    Only direct children of the directory are reported; modification, open and
    close notifications are ignored.
    """

    def __init__(
        self,
        root: str,
        on_change: ChangeCallback,
        on_lost: Callable[["DirectoryWatcher", str], None],
    ):
        super().__init__()
        self.root = root
        self.watch: ObservedWatch | None = None
        self.active = True
        self._on_change = on_change
        self._on_lost = on_lost

    def on_created(self, event: FileSystemEvent) -> None:
        """Handle file/directory creation events."""
        self._handle_change(ChangeKind.CREATED, os.fsdecode(event.src_path), event.is_directory)

    def on_deleted(self, event: FileSystemEvent) -> None:
        """Handle file/directory deletion events."""
        src_path = os.fsdecode(event.src_path)
        if self._is_root(src_path):
            self._on_lost(self, "deleted")
            return
        self._handle_change(ChangeKind.DELETED, src_path, event.is_directory)

    def on_moved(self, event: FileSystemEvent) -> None:
        """Handle file/directory rename and move events."""
        src_path = os.fsdecode(event.src_path)
        dest_path = os.fsdecode(getattr(event, 'dest_path', '') or '')

        if self._is_root(src_path):
            self._on_lost(self, "moved")
            return

        src_inside = self._is_child(src_path)
        dest_inside = bool(dest_path) and self._is_child(dest_path)

        if src_inside and dest_inside:
            self._handle_change(ChangeKind.RENAMED, dest_path, event.is_directory)
        elif dest_inside:
            # Moved in from outside the watched directory
            self._handle_change(ChangeKind.CREATED, dest_path, event.is_directory)
        elif src_inside:
            # Moved out of the watched directory
            self._handle_change(ChangeKind.DELETED, src_path, event.is_directory)

    def _handle_change(self, kind: ChangeKind, path: str, is_directory: bool) -> None:
        if not self.active:
            return

        if not self._is_child(path):
            logger.debug("Ignoring nested entry %s under %s", path, self.root)
            return

        change = ChangeEvent(
            kind=kind,
            name=os.path.basename(os.path.normpath(path)),
            path=path,
            is_directory=is_directory,
            watched_root=self.root,
        )
        logger.debug("File event: %s %s", kind.value, path)

        try:
            self._on_change(change)
        except Exception as e:
            logger.error("Error dispatching %s event for %s: %s", kind.value, path, e)

    def _is_root(self, path: str) -> bool:
        return os.path.normpath(path) == self.root

    def _is_child(self, path: str) -> bool:
        return os.path.dirname(os.path.normpath(path)) == self.root


class PathWatcherSet:
    """
    Owns one watcher per registered directory.

    Watches are scheduled on a single observer whose dispatcher thread delivers
    every event in arrival order to ``on_change``. ``stop()`` releases all
    watch handles and is safe to call any number of times.
    """

    def __init__(
        self,
        config: SentryConfig | None = None,
        on_change: ChangeCallback | None = None,
        on_watch_error: WatchErrorCallback | None = None,
        observer_factory: Callable[[], BaseObserver] | None = None,
    ):
        """
        Initialize the watcher set.

        Args:
            config: Sentry configuration (global configuration if omitted)
            on_change: Ingestion point receiving every ChangeEvent
            on_watch_error: Callback for watches lost at runtime
            observer_factory: Optional observer constructor, mainly for tests
        """
        self.config = config or get_config()
        self.on_change = on_change
        self.on_watch_error = on_watch_error
        self._observer_factory = observer_factory

        self._observer: BaseObserver | None = None
        self._watchers: dict[str, DirectoryWatcher] = {}
        self._lock = threading.RLock()

    @staticmethod
    def validate_path(path: str | Path) -> str:
        """
        Check that a path can be watched and return its normalized form.

        Raises:
            InvalidPathError: If the path is missing, not a directory or not accessible
        """
        directory = Path(path).expanduser()

        if not directory.exists():
            raise InvalidPathError(f"Directory does not exist: {directory}", path=str(directory), reason="missing")

        if not directory.is_dir():
            raise InvalidPathError(
                f"Path is not a directory: {directory}", path=str(directory), reason="not_a_directory"
            )

        if not os.access(directory, os.R_OK | os.X_OK):
            raise InvalidPathError(
                f"Directory is not accessible: {directory}", path=str(directory), reason="permission_denied"
            )

        return os.path.normpath(str(directory.resolve()))

    def register(self, path: str | Path) -> str:
        """
        Begin non-recursive watching of a directory.

        Existing contents are not scanned; only future changes are reported.

        Args:
            path: Directory to watch

        Returns:
            The normalized directory path

        Raises:
            InvalidPathError: If the path cannot be watched
            WatchResourceError: If the OS watch facility fails
        """
        root = self.validate_path(path)

        with self._lock:
            if root in self._watchers:
                logger.debug("Already monitoring %s", root)
                return root
            self._schedule(root)

        return root

    def register_all(self, paths: Iterable[str | Path]) -> list[str]:
        """
        Register a batch of directories, all or nothing.

        Every path is validated before any watch is scheduled, so an invalid
        path leaves no watcher behind for any path of the batch.

        Raises:
            InvalidPathError: If any path cannot be watched
            WatchResourceError: If the OS watch facility fails for any path
        """
        roots = list(dict.fromkeys(self.validate_path(path) for path in paths))

        scheduled: list[str] = []
        with self._lock:
            try:
                for root in roots:
                    if root not in self._watchers:
                        self._schedule(root)
                        scheduled.append(root)
            except WatchResourceError:
                for root in scheduled:
                    self._unschedule(root)
                raise

        return roots

    def start(self) -> None:
        """
        Start delivering events for the registered directories.

        Native backends create their OS watches here rather than at registration.

        Raises:
            WatchResourceError: If the OS watch facility fails; all watches are released
        """
        with self._lock:
            if self._observer is None:
                self._observer = self._create_observer()

            if self._observer.is_alive():
                return

            try:
                self._observer.start()
            except OSError as e:
                logger.error("Failed to start file monitoring: %s", e)
                self.stop()
                path = os.fsdecode(e.filename) if e.filename else None
                raise WatchResourceError(
                    f"Failed to start monitoring: {e}", path=path, operation="start", underlying_error=e
                ) from e

            logger.info("File monitoring observer started for %d directories", len(self._watchers))

    def stop(self) -> bool:
        """
        Stop all file monitoring and release every watch handle.

        Returns:
            True if resources were released, False if nothing was held

        Raises:
            WatchResourceError: If the observer fails to shut down
        """
        with self._lock:
            observer, self._observer = self._observer, None
            watchers = list(self._watchers.values())
            self._watchers.clear()

        for watcher in watchers:
            watcher.active = False

        if observer is None:
            logger.debug("File monitoring not active, nothing to stop")
            return False

        try:
            if observer.is_alive():
                observer.stop()
                if threading.current_thread() is not observer:
                    observer.join(timeout=self.config.observer_join_timeout)
            else:
                observer.unschedule_all()
            logger.info("File monitoring stopped (%d watches released)", len(watchers))

        except Exception as e:
            logger.error("Error stopping file monitoring: %s", e)
            raise WatchResourceError("Failed to stop monitoring", operation="stop", underlying_error=e) from e

        return True

    def __enter__(self) -> "PathWatcherSet":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    @property
    def is_watching(self) -> bool:
        """Check if currently watching for file changes."""
        observer = self._observer
        return observer is not None and observer.is_alive()

    @property
    def watched_paths(self) -> list[str]:
        """Currently watched directories."""
        with self._lock:
            return sorted(self._watchers)

    def _create_observer(self) -> BaseObserver:
        if self._observer_factory is not None:
            return self._observer_factory()
        if self.config.use_polling:
            return PollingObserver(timeout=self.config.polling_interval_seconds)
        return Observer()

    def _schedule(self, root: str) -> None:
        if self._observer is None:
            self._observer = self._create_observer()

        watcher = DirectoryWatcher(root, self._deliver, self._handle_lost_watch)
        try:
            watcher.watch = self._observer.schedule(watcher, root, recursive=False)
        except OSError as e:
            logger.error("Failed to start monitoring %s: %s", root, e)
            raise WatchResourceError(
                f"Failed to start monitoring: {e}", path=root, operation="schedule", underlying_error=e
            ) from e

        self._watchers[root] = watcher
        logger.info("Started monitoring %s (recursive: False)", root)

    def _unschedule(self, root: str) -> None:
        watcher = self._watchers.pop(root, None)
        if watcher is None:
            return

        watcher.active = False
        if self._observer is not None and watcher.watch is not None:
            try:
                self._observer.unschedule(watcher.watch)
            except (KeyError, OSError) as e:
                logger.debug("Watch for %s was already gone: %s", root, e)
        logger.info("Stopped monitoring %s", root)

    def _deliver(self, event: ChangeEvent) -> None:
        if self.on_change is None:
            logger.warning("No change handler registered, dropping %s", event)
            return
        self.on_change(event)

    def _handle_lost_watch(self, watcher: DirectoryWatcher, how: str) -> None:
        with self._lock:
            if self._watchers.get(watcher.root) is not watcher:
                return
            self._unschedule(watcher.root)

        error = WatchResourceError(
            f"Watched directory {watcher.root} was {how}", path=watcher.root, operation="watch"
        )
        logger.error("%s", error)

        if self.on_watch_error is not None:
            try:
                self.on_watch_error(error)
            except Exception as e:
                logger.error("Error reporting lost watch for %s: %s", watcher.root, e)
