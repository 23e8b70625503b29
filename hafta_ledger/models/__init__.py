"""Domain models for the lending ledger."""

from hafta_ledger.models.enums import DueStatus, LoanStatus, Platform, UserRole
from hafta_ledger.models.loan import Loan, Transaction
from hafta_ledger.models.user import AppUser, LoanWithUser

__all__ = [
    "AppUser",
    "DueStatus",
    "Loan",
    "LoanStatus",
    "LoanWithUser",
    "Platform",
    "Transaction",
    "UserRole",
]
