"""Calendar helpers."""

from datetime import date, datetime


def days_between(start: date | datetime, end: date | datetime | None = None) -> int:
    """
    Whole days elapsed from ``start`` to ``end`` (today if omitted).

    Datetimes are truncated to their calendar date first. The result is
    negative when ``start`` lies after ``end``.
    """
    if isinstance(start, datetime):
        start = start.date()
    if end is None:
        end = date.today()
    elif isinstance(end, datetime):
        end = end.date()
    return (end - start).days
