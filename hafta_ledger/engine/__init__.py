"""Pure loan accrual, payment and due-status logic."""

from hafta_ledger.engine.due_status import UPCOMING_WINDOW, classify, loan_due_status
from hafta_ledger.engine.payment import PaymentResult, apply_payment
from hafta_ledger.engine.penalty import (
    DEFAULT_PENALTY_RATE,
    AccrualResult,
    accrue,
    penalty_rate_for,
    round_currency,
)
from hafta_ledger.engine.schedule import PERIOD, advance, whole_periods_between

__all__ = [
    "DEFAULT_PENALTY_RATE",
    "PERIOD",
    "UPCOMING_WINDOW",
    "AccrualResult",
    "PaymentResult",
    "accrue",
    "advance",
    "apply_payment",
    "classify",
    "loan_due_status",
    "penalty_rate_for",
    "round_currency",
    "whole_periods_between",
]
