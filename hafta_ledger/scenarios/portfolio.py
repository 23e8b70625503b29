"""Loan portfolio scenario: an admin, borrowers, loans and payment history."""

from __future__ import annotations

import logging
import random
from datetime import datetime, timezone

from hafta_ledger.generators import BorrowerGenerator, LoanGenerator
from hafta_ledger.models import UserRole
from hafta_ledger.store import LedgerStore

logger = logging.getLogger(__name__)


class LoanPortfolioScenario:
    """Generate a small lending book.

    Every borrower gets one active loan. A share of the loans is placed past
    due so that a penalty refresh has something to do.
    """

    def __init__(
        self,
        num_borrowers: int = 10,
        overdue_rate: float = 0.25,
        seed: int | None = None,
        now: datetime | None = None,
        locale: str = "en_IN",
    ) -> None:
        """Initialize loan portfolio scenario.

        Parameters
        ----------
        num_borrowers : int
            Number of borrowers to generate.
        overdue_rate : float
            Share of loans whose next due date is already past (0.0 to 1.0).
        seed : int | None
            Random seed for reproducibility.
        now : datetime | None
            Reference time (defaults to the current UTC time).
        locale : str
            Faker locale for names.
        """
        self.num_borrowers = num_borrowers
        self.overdue_rate = overdue_rate
        self.seed = seed
        self.now = now or datetime.now(timezone.utc)

        if seed is not None:
            random.seed(seed)

        self.store = LedgerStore()
        self._borrower_gen = BorrowerGenerator(seed=seed, locale=locale)
        self._loan_gen = LoanGenerator(seed=seed, locale=locale)

    def generate(self) -> LedgerStore:
        """Generate all data for the scenario.

        Returns
        -------
        LedgerStore
            Store containing the generated data.
        """
        logger.info(
            "Starting loan portfolio scenario: %d borrowers, %.0f%% overdue",
            self.num_borrowers,
            self.overdue_rate * 100,
        )

        self.store.add_user(self._borrower_gen.generate(role=UserRole.ADMIN))

        for borrower in self._borrower_gen.generate_batch(self.num_borrowers):
            self.store.add_user(borrower)
            loan, transactions = self._loan_gen.generate_with_history(
                borrower.user_id,
                now=self.now,
                overdue=random.random() < self.overdue_rate,
            )
            self.store.add_loan(loan)
            for transaction in transactions:
                self.store.add_transaction(transaction)

        logger.info("Generated %s", self.store.summary())
        return self.store
