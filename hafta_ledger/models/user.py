"""Borrower and admin user models."""

from dataclasses import dataclass

from hafta_ledger.models.enums import UserRole
from hafta_ledger.models.loan import Loan


@dataclass
class AppUser:
    """Application user: an admin or a borrower."""

    user_id: str
    name: str
    mobile_number: str
    photo_url: str = ""
    role: UserRole = UserRole.USER

    @classmethod
    def unknown(cls, user_id: str) -> "AppUser":
        """Placeholder for a loan whose borrower record is missing."""
        return cls(user_id=user_id, name="Unknown User", mobile_number="")


@dataclass
class LoanWithUser:
    """Loan paired with its borrower, as listed on the admin dashboard."""

    loan: Loan
    user: AppUser
