"""
Folder sentry: watch directories for structural changes and require an
operator acknowledgment for every one of them.
"""

from folder_sentry.models import ChangeEvent, ChangeKind, Decision
from folder_sentry.monitoring import AcknowledgmentController, MonitorController, PathWatcherSet

__all__ = [
    "AcknowledgmentController",
    "ChangeEvent",
    "ChangeKind",
    "Decision",
    "MonitorController",
    "PathWatcherSet",
]

__version__ = "0.1.0"
