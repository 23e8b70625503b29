"""Synthetic ledger data generators."""

from hafta_ledger.generators.base import BaseGenerator
from hafta_ledger.generators.borrower import BorrowerGenerator
from hafta_ledger.generators.loan import LoanGenerator

__all__ = ["BaseGenerator", "BorrowerGenerator", "LoanGenerator"]
