"""Fixed weekly installment schedule arithmetic."""

from datetime import datetime, timedelta

PERIOD = timedelta(days=7)


def advance(due_date: datetime, periods: int = 1) -> datetime:
    """Move a due date forward by whole installment periods.

    The result stays aligned to the original schedule: it is computed from
    ``due_date``, never from the current time.
    """
    return due_date + PERIOD * periods


def whole_periods_between(start: datetime, end: datetime) -> int:
    """Number of complete periods from ``start`` to ``end`` (floored)."""
    return (end - start) // PERIOD
