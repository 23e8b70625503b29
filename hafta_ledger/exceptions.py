"""Custom exception hierarchy for hafta-ledger."""


class LedgerError(Exception):
    """Base exception for all hafta-ledger errors."""


class InvalidAmountError(LedgerError):
    """Raised when a payment amount is non-positive or exceeds the current due."""


class EntityNotFoundError(LedgerError):
    """Raised when a referenced entity does not exist."""


class ReferentialIntegrityError(EntityNotFoundError):
    """Raised when a foreign key reference is violated."""


class InvalidEntityStateError(LedgerError):
    """Raised when an entity is in an invalid state for the operation."""


class StaleSnapshotError(LedgerError):
    """Raised when a conditional write finds the loan changed since it was read."""


class ValidationError(LedgerError):
    """Raised when a stored record cannot be parsed into a typed model."""


class ConfigurationError(LedgerError):
    """Raised when configuration is invalid or missing."""


class SinkError(LedgerError):
    """Raised when an export or import operation fails."""
