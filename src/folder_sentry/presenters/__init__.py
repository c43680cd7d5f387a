"""Presenters rendering acknowledgment sessions to an operator."""

from folder_sentry.presenters.console import ConsolePresenter
from folder_sentry.presenters.log_presenter import LoggingPresenter

__all__ = ["ConsolePresenter", "LoggingPresenter"]
