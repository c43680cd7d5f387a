"""
Custom exception classes for the folder sentry.

Provides specific exception types for registration, watching and
acknowledgment failures so callers can react to each one precisely.
"""

from typing import Any


class BaseError(Exception):
    """
    Base exception class for all folder sentry errors.

    All custom exceptions in the system inherit from this base class
    to enable consistent error handling and logging.
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        """
        Initialize the error.

        Args:
            message: Human-readable error description
            error_code: Optional error code for programmatic handling
            context: Optional dictionary with error context information
            cause: Optional underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.cause = cause

    def __str__(self) -> str:
        """String representation including error code if present."""
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message

    def __repr__(self) -> str:
        """Detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message='{self.message}', "
            f"error_code='{self.error_code}', "
            f"context={self.context})"
        )


class ConfigurationError(BaseError):
    """Raised when there are configuration or settings issues."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        expected_type: str | None = None,
        actual_value: Any | None = None,
    ):
        context = {}
        if config_key:
            context["config_key"] = config_key
        if expected_type:
            context["expected_type"] = expected_type
        if actual_value is not None:
            context["actual_value"] = str(actual_value)

        super().__init__(message, error_code="CONFIG_ERROR", context=context)


class InvalidPathError(BaseError):
    """Raised when a registration path does not exist, is not a directory or is inaccessible."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        reason: str | None = None,
    ):
        context = {}
        if path:
            context["path"] = path
        if reason:
            context["reason"] = reason

        super().__init__(message, error_code="INVALID_PATH", context=context)
        self.path = path


class WatchResourceError(BaseError):
    """Raised when the OS watch facility fails to initialize or a watch is lost mid-run."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        operation: str | None = None,
        underlying_error: Exception | None = None,
    ):
        context = {}
        if path:
            context["path"] = path
        if operation:
            context["operation"] = operation

        super().__init__(
            message,
            error_code="WATCH_RESOURCE_ERROR",
            context=context,
            cause=underlying_error,
        )
        self.path = path


class NoActiveSessionError(BaseError):
    """Raised when a decision is submitted while no acknowledgment session is open."""

    def __init__(self, message: str, decision: str | None = None):
        context = {}
        if decision:
            context["decision"] = decision

        super().__init__(message, error_code="NO_ACTIVE_SESSION", context=context)


class SessionStateError(BaseError):
    """Raised when an acknowledgment session is asked to make an invalid transition."""

    def __init__(
        self,
        message: str,
        session_id: str | None = None,
        state: str | None = None,
    ):
        context = {}
        if session_id:
            context["session_id"] = session_id
        if state:
            context["state"] = state

        super().__init__(message, error_code="SESSION_STATE_ERROR", context=context)
