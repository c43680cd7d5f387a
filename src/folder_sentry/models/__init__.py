"""Data models and exceptions for the folder sentry."""

from folder_sentry.models.change_event import ChangeEvent, ChangeKind
from folder_sentry.models.exceptions import (
    BaseError,
    ConfigurationError,
    InvalidPathError,
    NoActiveSessionError,
    SessionStateError,
    WatchResourceError,
)
from folder_sentry.models.notifications import (
    ChangeNotification,
    ElapsedUpdate,
    EscalationReason,
    EscalationRequest,
    format_elapsed,
)
from folder_sentry.models.session import AcknowledgmentSession, Decision, MonitoringRunState, SessionState

__all__ = [
    "ChangeEvent",
    "ChangeKind",
    "AcknowledgmentSession",
    "Decision",
    "MonitoringRunState",
    "SessionState",
    "ChangeNotification",
    "ElapsedUpdate",
    "EscalationReason",
    "EscalationRequest",
    "format_elapsed",
    "BaseError",
    "ConfigurationError",
    "InvalidPathError",
    "NoActiveSessionError",
    "SessionStateError",
    "WatchResourceError",
]
