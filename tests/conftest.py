"""Pytest configuration and fixtures."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable

import pytest

from hafta_ledger.models import Loan, LoanStatus
from hafta_ledger.store import LedgerStore


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def now() -> datetime:
    """Reference instant used as "now"."""
    return datetime(2026, 2, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def due_date() -> datetime:
    """Scheduled due date of the sample loan."""
    return datetime(2026, 2, 1, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_loan(due_date: datetime) -> Callable[..., Loan]:
    """Factory for loan snapshots with sensible defaults."""

    def _make(**overrides: Any) -> Loan:
        fields: dict[str, Any] = {
            "loan_id": "loan-test-001",
            "user_id": "user-test-001",
            "total_principal": Decimal("50000"),
            "current_due_amount": Decimal("1000"),
            "installment_amount": Decimal("2000"),
            "interest_rate": Decimal("2"),
            "next_due_date": due_date,
            "paid_installments_count": 9,
            "missed_installments_count": 0,
            "status": LoanStatus.ACTIVE,
        }
        fields.update(overrides)
        return Loan(**fields)

    return _make


@pytest.fixture
def store() -> LedgerStore:
    """Create a fresh store for each test."""
    return LedgerStore()


@pytest.fixture
def borrower_id(store: LedgerStore) -> str:
    """A borrower registered in ``store``."""
    return store.create_user("Rahul Sharma", "9876543211", user_id="user-test-001")
