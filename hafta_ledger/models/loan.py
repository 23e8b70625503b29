"""Loan and transaction models."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from hafta_ledger.models.enums import LoanStatus


@dataclass
class Loan:
    """Weekly installment loan snapshot."""

    loan_id: str
    user_id: str
    total_principal: Decimal  # Amount lent, fixed for the life of the loan
    current_due_amount: Decimal  # Outstanding balance including penalties
    installment_amount: Decimal  # Hafta
    interest_rate: Decimal | None  # Percent, also the per-period penalty rate
    next_due_date: datetime
    paid_installments_count: int = 0
    missed_installments_count: int = 0
    status: LoanStatus = LoanStatus.ACTIVE
    created_at: datetime | None = None
    updated_at: datetime | None = None
    version: int = 0  # Bumped by the store on every write

    @property
    def is_active(self) -> bool:
        return self.status == LoanStatus.ACTIVE

    def repayment_progress(self) -> Decimal:
        """Percent of the principal repaid so far.

        Penalties can push the due amount above the principal, in which
        case the result is negative.
        """
        if self.total_principal <= 0:
            return Decimal("0")
        repaid = self.total_principal - self.current_due_amount
        return repaid / self.total_principal * Decimal("100")


@dataclass(frozen=True)
class Transaction:
    """Recorded payment against a loan."""

    transaction_id: str
    loan_id: str
    amount_paid: Decimal
    date: datetime
