"""
Monitoring package for structural change detection and acknowledgment.

This package provides the directory watchers, the acknowledgment state
machine with its escalation timer, and the controller that ties a
monitoring run together.
"""

from .acknowledgment import AcknowledgmentController
from .escalation import EscalationTimer
from .monitor_controller import MonitorController
from .path_watcher import DirectoryWatcher, PathWatcherSet

__all__ = [
    "AcknowledgmentController",
    "DirectoryWatcher",
    "EscalationTimer",
    "MonitorController",
    "PathWatcherSet",
]
