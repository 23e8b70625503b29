"""Tests for payment application."""

from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from hafta_ledger.engine import PERIOD, apply_payment
from hafta_ledger.exceptions import InvalidAmountError, LedgerError
from hafta_ledger.models import LoanStatus


class TestApplyPayment:
    """Tests for valid payments."""

    def test_partial_payment(self, make_loan, due_date: datetime, now: datetime) -> None:
        loan = make_loan(current_due_amount=Decimal("32000"))
        result = apply_payment(loan, Decimal("2000"), now=now)

        assert result.new_due_amount == Decimal("30000")
        assert result.new_paid_count == 10
        assert result.new_next_due_date == due_date + timedelta(days=7)
        assert result.new_status == LoanStatus.ACTIVE

    def test_full_payment_completes_loan(self, make_loan, now: datetime) -> None:
        loan = make_loan(current_due_amount=Decimal("1000"))
        result = apply_payment(loan, Decimal("1000"), now=now)

        assert result.new_due_amount == 0
        assert result.new_status == LoanStatus.COMPLETED

    def test_large_payment_advances_one_period_only(self, make_loan, due_date: datetime) -> None:
        """Paying five haftas at once still moves the schedule by one week."""
        loan = make_loan(current_due_amount=Decimal("32000"), installment_amount=Decimal("2000"))
        result = apply_payment(loan, Decimal("10000"))

        assert result.new_next_due_date == due_date + PERIOD
        assert result.new_paid_count == loan.paid_installments_count + 1

    def test_payment_below_installment_accepted(self, make_loan) -> None:
        """The hafta amount is only a default, not an enforced amount."""
        result = apply_payment(make_loan(), Decimal("1"))
        assert result.new_due_amount == Decimal("999")

    def test_defaulted_loan_keeps_status_on_partial_payment(self, make_loan) -> None:
        loan = make_loan(status=LoanStatus.DEFAULTED)
        result = apply_payment(loan, Decimal("100"))
        assert result.new_status == LoanStatus.DEFAULTED

    def test_defaulted_loan_paid_off_completes(self, make_loan) -> None:
        loan = make_loan(status=LoanStatus.DEFAULTED)
        result = apply_payment(loan, Decimal("1000"))
        assert result.new_status == LoanStatus.COMPLETED

    def test_accepts_int_and_string(self, make_loan) -> None:
        assert apply_payment(make_loan(), 250).new_due_amount == Decimal("750")
        assert apply_payment(make_loan(), "250.50").new_due_amount == Decimal("749.50")


class TestTransactionRecord:
    """Tests for the emitted transaction."""

    def test_transaction_fields(self, make_loan, now: datetime) -> None:
        loan = make_loan()
        result = apply_payment(loan, Decimal("500"), now=now, transaction_id="tx-001")
        tx = result.transaction

        assert tx.transaction_id == "tx-001"
        assert tx.loan_id == loan.loan_id
        assert tx.amount_paid == Decimal("500")
        assert tx.date == now

    def test_default_transaction_id_is_unique(self, make_loan) -> None:
        loan = make_loan()
        first = apply_payment(loan, Decimal("1")).transaction
        second = apply_payment(loan, Decimal("1")).transaction
        assert first.transaction_id != second.transaction_id

    def test_default_date_is_timezone_aware(self, make_loan) -> None:
        tx = apply_payment(make_loan(), Decimal("1")).transaction
        assert tx.date.tzinfo is not None

    def test_transaction_is_immutable(self, make_loan) -> None:
        tx = apply_payment(make_loan(), Decimal("1")).transaction
        with pytest.raises(FrozenInstanceError):
            tx.amount_paid = Decimal("2")  # type: ignore[misc]


class TestInvalidAmount:
    """Tests for rejected payments."""

    def test_exceeds_current_due(self, make_loan) -> None:
        loan = make_loan()
        with pytest.raises(InvalidAmountError, match="exceeds current due"):
            apply_payment(loan, Decimal("1000.01"))

        assert loan.current_due_amount == Decimal("1000")
        assert loan.paid_installments_count == 9

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-50"), 0, -1])
    def test_non_positive(self, make_loan, amount) -> None:
        with pytest.raises(InvalidAmountError, match="must be positive"):
            apply_payment(make_loan(), amount)

    @pytest.mark.parametrize("amount", ["abc", "NaN", "Infinity", float("nan")])
    def test_not_a_number(self, make_loan, amount) -> None:
        with pytest.raises(InvalidAmountError):
            apply_payment(make_loan(), amount)

    def test_completed_loan_rejects_payment(self, make_loan) -> None:
        loan = make_loan(current_due_amount=Decimal("0"), status=LoanStatus.COMPLETED)
        with pytest.raises(InvalidAmountError):
            apply_payment(loan, Decimal("1"))

    def test_is_ledger_error(self, make_loan) -> None:
        with pytest.raises(LedgerError):
            apply_payment(make_loan(), Decimal("0"))


class TestPaymentApplyTo:
    """Tests for PaymentResult.apply_to."""

    def test_apply_to(self, make_loan, due_date: datetime) -> None:
        loan = make_loan()
        updated = apply_payment(loan, Decimal("1000")).apply_to(loan)

        assert updated.current_due_amount == 0
        assert updated.paid_installments_count == 10
        assert updated.next_due_date == due_date + PERIOD
        assert updated.status == LoanStatus.COMPLETED
        assert updated.missed_installments_count == loan.missed_installments_count
        assert updated.total_principal == loan.total_principal

    def test_original_untouched(self, make_loan) -> None:
        loan = make_loan()
        apply_payment(loan, Decimal("400")).apply_to(loan)
        assert loan.current_due_amount == Decimal("1000")
        assert loan.status == LoanStatus.ACTIVE
