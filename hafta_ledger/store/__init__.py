"""In-memory ledger store."""

from hafta_ledger.store.ledger import LedgerStore, PortfolioSummary, validate_loan_terms

__all__ = ["LedgerStore", "PortfolioSummary", "validate_loan_terms"]
