"""Small helpers shared by the command line."""

from folder_sentry.utils.dates import days_between

__all__ = ["days_between"]
