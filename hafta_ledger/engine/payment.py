"""Payment application against a loan snapshot."""

import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from hafta_ledger.engine.schedule import advance
from hafta_ledger.exceptions import InvalidAmountError
from hafta_ledger.models import Loan, LoanStatus, Transaction


@dataclass(frozen=True)
class PaymentResult:
    """New loan fields plus the transaction to persist with them."""

    new_due_amount: Decimal
    new_paid_count: int
    new_next_due_date: datetime
    new_status: LoanStatus
    transaction: Transaction

    def apply_to(self, loan: Loan) -> Loan:
        """Return the loan snapshot that results from this payment."""
        return replace(
            loan,
            current_due_amount=self.new_due_amount,
            paid_installments_count=self.new_paid_count,
            next_due_date=self.new_next_due_date,
            status=self.new_status,
        )


def _as_money(amount: Decimal | int | str) -> Decimal:
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except InvalidOperation as e:
        raise InvalidAmountError(f"Invalid payment amount: {amount!r}") from e
    if not value.is_finite():
        raise InvalidAmountError(f"Invalid payment amount: {amount!r}")
    return value


def apply_payment(
    loan: Loan,
    amount: Decimal | int | str,
    now: datetime | None = None,
    transaction_id: str | None = None,
) -> PaymentResult:
    """Apply a payment to ``loan``.

    The due date always moves forward by exactly one period, however many
    installments the amount covers.

    Parameters
    ----------
    loan : Loan
        Snapshot read immediately before the call.
    amount : Decimal | int | str
        Amount paid. Must be positive and no greater than the current due.
    now : datetime | None
        Transaction timestamp (defaults to the current UTC time).
    transaction_id : str | None
        Identifier for the emitted transaction (defaults to a new UUID).

    Returns
    -------
    PaymentResult
        New loan fields and the transaction record.

    Raises
    ------
    InvalidAmountError
        If ``amount`` is not positive or exceeds ``loan.current_due_amount``.
    """
    value = _as_money(amount)
    if value <= 0:
        raise InvalidAmountError(f"Payment amount must be positive, got {value}")
    if value > loan.current_due_amount:
        raise InvalidAmountError(
            f"Payment {value} exceeds current due {loan.current_due_amount} for loan {loan.loan_id}"
        )

    new_due_amount = max(Decimal("0"), loan.current_due_amount - value)
    new_status = LoanStatus.COMPLETED if new_due_amount == 0 else loan.status

    transaction = Transaction(
        transaction_id=transaction_id or str(uuid.uuid4()),
        loan_id=loan.loan_id,
        amount_paid=value,
        date=now or datetime.now(timezone.utc),
    )

    return PaymentResult(
        new_due_amount=new_due_amount,
        new_paid_count=loan.paid_installments_count + 1,
        new_next_due_date=advance(loan.next_due_date),
        new_status=new_status,
        transaction=transaction,
    )
