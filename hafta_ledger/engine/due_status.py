"""Due-status classification for badges and reminder wording."""

from datetime import datetime, timedelta

from hafta_ledger.models import DueStatus, Loan

UPCOMING_WINDOW = timedelta(days=3)


def classify(now: datetime, next_due_date: datetime) -> DueStatus:
    """Classify a due date relative to ``now``.

    Parameters
    ----------
    now : datetime
        Instant of the decision.
    next_due_date : datetime
        The loan's scheduled due date.

    Returns
    -------
    DueStatus
        ``OVERDUE`` once the due date has passed, ``UPCOMING`` when it is at
        most three days away (inclusive), ``NORMAL`` otherwise.
    """
    if now > next_due_date:
        return DueStatus.OVERDUE
    if next_due_date - now <= UPCOMING_WINDOW:
        return DueStatus.UPCOMING
    return DueStatus.NORMAL


def loan_due_status(loan: Loan, now: datetime) -> DueStatus:
    """Classify a loan's next due date relative to ``now``.

    Parameters
    ----------
    loan : Loan
        Snapshot whose ``next_due_date`` is checked.
    now : datetime
        Instant of the decision.

    Returns
    -------
    DueStatus
        Same as :func:`classify` on the loan's due date.
    """
    return classify(now, loan.next_due_date)
