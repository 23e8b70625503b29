"""Penalty accrual for overdue weekly installment loans.

A loan that stays unpaid past its due date is charged once per whole missed
period. Each period's penalty is the penalty rate applied to the balance at
that point, rounded to a whole currency unit, so penalties compound across
consecutive missed periods.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from hafta_ledger.engine.schedule import advance, whole_periods_between
from hafta_ledger.models import Loan, LoanStatus

DEFAULT_PENALTY_RATE = Decimal("0.02")
CURRENCY_UNIT = Decimal("1")


@dataclass(frozen=True)
class AccrualResult:
    """Outcome of a penalty check against one loan snapshot."""

    should_apply: bool
    new_due_amount: Decimal
    penalty_amount: Decimal
    missed_periods: int
    new_missed_count: int
    new_next_due_date: datetime

    def apply_to(self, loan: Loan) -> Loan:
        """Return the loan snapshot that results from this accrual."""
        if not self.should_apply:
            return loan
        return replace(
            loan,
            current_due_amount=self.new_due_amount,
            missed_installments_count=self.new_missed_count,
            next_due_date=self.new_next_due_date,
        )


def penalty_rate_for(loan: Loan) -> Decimal:
    """Per-period penalty rate as a fraction (2 percent -> 0.02).

    An unset or non-positive rate falls back to :data:`DEFAULT_PENALTY_RATE`.
    """
    if loan.interest_rate is not None and loan.interest_rate > 0:
        return Decimal(loan.interest_rate) / 100
    return DEFAULT_PENALTY_RATE


def round_currency(amount: Decimal) -> Decimal:
    """Round to the nearest whole currency unit, halves rounding up."""
    return amount.quantize(CURRENCY_UNIT, rounding=ROUND_HALF_UP)


def _no_op(loan: Loan) -> AccrualResult:
    return AccrualResult(
        should_apply=False,
        new_due_amount=loan.current_due_amount,
        penalty_amount=Decimal("0"),
        missed_periods=0,
        new_missed_count=loan.missed_installments_count,
        new_next_due_date=loan.next_due_date,
    )


def accrue(loan: Loan, now: datetime) -> AccrualResult:
    """Compute the penalty owed by ``loan`` as of ``now``.

    Parameters
    ----------
    loan : Loan
        Snapshot read immediately before the call.
    now : datetime
        Instant of the decision.

    Returns
    -------
    AccrualResult
        ``should_apply`` is False for non-active loans, loans not yet past
        due, and loans less than one full period past due. Feeding the
        result back in with the same ``now`` is always a no-op.
    """
    if loan.status != LoanStatus.ACTIVE or now <= loan.next_due_date:
        return _no_op(loan)

    missed_periods = whole_periods_between(loan.next_due_date, now)
    if missed_periods <= 0:
        return _no_op(loan)

    rate = penalty_rate_for(loan)
    current_due = loan.current_due_amount
    total_penalty = Decimal("0")

    # Rounded every period, not once at the end
    for _ in range(missed_periods):
        period_penalty = round_currency(current_due * rate)
        current_due += period_penalty
        total_penalty += period_penalty

    return AccrualResult(
        should_apply=True,
        new_due_amount=current_due,
        penalty_amount=total_penalty,
        missed_periods=missed_periods,
        new_missed_count=loan.missed_installments_count + missed_periods,
        new_next_due_date=advance(loan.next_due_date, missed_periods),
    )
