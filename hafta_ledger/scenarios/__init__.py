"""Pre-built data generation scenarios."""

from hafta_ledger.scenarios.portfolio import LoanPortfolioScenario

__all__ = ["LoanPortfolioScenario"]
