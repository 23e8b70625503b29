"""Loan and payment history generator."""

from __future__ import annotations

import random
from datetime import datetime, timedelta
from decimal import Decimal

from hafta_ledger.engine import PERIOD, advance, round_currency
from hafta_ledger.generators.base import BaseGenerator
from hafta_ledger.models import Loan, LoanStatus, Transaction


class LoanGenerator(BaseGenerator):
    """Generate weekly installment loans with a consistent payment history."""

    # Loan length in weeks
    TERMS = [20, 25, 30, 40, 50]
    INTEREST_RATES = [Decimal("2"), Decimal("2"), Decimal("2"), Decimal("3"), Decimal("0")]

    def generate_with_history(
        self,
        user_id: str,
        now: datetime,
        overdue: bool = False,
    ) -> tuple[Loan, list[Transaction]]:
        """Generate an active loan and the payments already made on it.

        Parameters
        ----------
        user_id : str
            Borrower id.
        now : datetime
            Reference time; the due date is placed relative to it.
        overdue : bool
            Place the next due date up to three weeks in the past.

        Returns
        -------
        tuple[Loan, list[Transaction]]
            Generated loan and its transactions, oldest first.
        """
        principal = Decimal(random.randint(5, 40) * 5000)
        weeks = random.choice(self.TERMS)
        installment = round_currency(principal / weeks / 100) * 100
        paid_count = random.randint(0, weeks // 2)
        missed_count = random.choices([0, 1, 2], weights=[0.7, 0.2, 0.1], k=1)[0]

        if overdue:
            offset = -timedelta(days=random.randint(1, 21), hours=random.randint(0, 23))
        else:
            offset = timedelta(days=random.randint(0, 6), hours=random.randint(0, 23))
        next_due_date = (now + offset).replace(minute=0, second=0, microsecond=0)
        created_at = next_due_date - PERIOD * (paid_count + missed_count + 1)

        loan = Loan(
            loan_id=self.fake.uuid4(),
            user_id=user_id,
            total_principal=principal,
            current_due_amount=max(installment, principal - installment * paid_count),
            installment_amount=installment,
            interest_rate=random.choice(self.INTEREST_RATES),
            next_due_date=next_due_date,
            paid_installments_count=paid_count,
            missed_installments_count=missed_count,
            status=LoanStatus.ACTIVE,
            created_at=created_at,
        )

        transactions = [
            Transaction(
                transaction_id=self.fake.uuid4(),
                loan_id=loan.loan_id,
                amount_paid=installment,
                date=advance(created_at, i + 1) - timedelta(hours=random.randint(1, 48)),
            )
            for i in range(paid_count)
        ]
        return loan, transactions
