"""Core contracts shared between the monitoring engine and its collaborators."""

from folder_sentry.core.interfaces import IAcknowledgmentPresenter

__all__ = ["IAcknowledgmentPresenter"]
