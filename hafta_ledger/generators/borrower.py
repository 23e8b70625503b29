"""Borrower generator."""

from __future__ import annotations

import random
from typing import Iterator

from hafta_ledger.generators.base import BaseGenerator
from hafta_ledger.models import AppUser, UserRole


class BorrowerGenerator(BaseGenerator):
    """Generate synthetic borrowers with Indian mobile numbers."""

    def generate(self, role: UserRole = UserRole.USER) -> AppUser:
        """Generate a single user.

        Parameters
        ----------
        role : UserRole
            Role of the generated user.

        Returns
        -------
        AppUser
            Generated user.
        """
        return AppUser(
            user_id=self.fake.uuid4(),
            name=self.fake.name(),
            mobile_number=self._mobile_number(),
            role=role,
        )

    def generate_batch(self, count: int) -> Iterator[AppUser]:
        """Generate multiple borrowers.

        Yields
        ------
        AppUser
            Generated borrowers.
        """
        for _ in range(count):
            yield self.generate()

    def _mobile_number(self) -> str:
        """10-digit mobile number starting with 6-9."""
        return f"{random.choice('6789')}{random.randint(0, 999_999_999):09d}"
