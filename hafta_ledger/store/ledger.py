"""In-memory ledger store with referential integrity and conditional writes."""

import logging
import threading
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

from hafta_ledger.engine import accrue, advance, apply_payment, classify
from hafta_ledger.exceptions import (
    EntityNotFoundError,
    InvalidEntityStateError,
    ReferentialIntegrityError,
    StaleSnapshotError,
)
from hafta_ledger.models import (
    AppUser,
    DueStatus,
    Loan,
    LoanStatus,
    LoanWithUser,
    Transaction,
    UserRole,
)
from hafta_ledger.logging import loan_context

logger = logging.getLogger(__name__)

DEFAULT_INTEREST_RATE = Decimal("2")

# Fields an admin may edit directly; counters move only through the engine
EDITABLE_LOAN_FIELDS = frozenset(
    {
        "total_principal",
        "current_due_amount",
        "installment_amount",
        "interest_rate",
        "next_due_date",
        "status",
    }
)
EDITABLE_USER_FIELDS = frozenset({"name", "mobile_number", "photo_url", "role"})

# Money fields: (label used in error messages, zero allowed)
_MONEY_TERMS = {
    "total_principal": ("principal amount", False),
    "installment_amount": ("installment amount", False),
    "interest_rate": ("interest rate", True),
    "current_due_amount": ("due amount", True),
}

_MISSING = object()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # Naive datetimes are taken as UTC, as in stored records
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _resolve_now(now: datetime | None) -> datetime:
    return _utcnow() if now is None else _as_utc(now)


def _new_id() -> str:
    return str(uuid.uuid4())


def _money_term(key: str, value: Any) -> Decimal:
    label, zero_allowed = _MONEY_TERMS[key]
    if value is None or isinstance(value, bool):
        raise InvalidEntityStateError(f"Enter a valid {label}.")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise InvalidEntityStateError(f"Enter a valid {label}.") from None
    if not amount.is_finite() or amount < 0 or (amount == 0 and not zero_allowed):
        raise InvalidEntityStateError(f"Enter a valid {label}.")
    return amount


def validate_loan_terms(**terms: Any) -> dict[str, Any]:
    """Check and normalize loan fields entered by an admin.

    Money fields become ``Decimal`` (principal and installment must be
    positive, rate and due non-negative). ``next_due_date`` must be a
    datetime; naive values are taken as UTC. Other keys pass through.

    Returns
    -------
    dict
        The same keys with normalized values.

    Raises
    ------
    InvalidEntityStateError
        If a supplied value is missing, not a number or out of range.
    """
    normalized = dict(terms)
    for key, value in terms.items():
        if key in _MONEY_TERMS:
            normalized[key] = _money_term(key, value)
        elif key == "next_due_date":
            if not isinstance(value, datetime):
                raise InvalidEntityStateError("Enter a valid due date.")
            normalized[key] = _as_utc(value)
    return normalized


@dataclass
class PortfolioSummary:
    """Admin dashboard totals over active loans."""

    borrowers: int
    total_outstanding: Decimal
    overdue_count: int


@dataclass
class LedgerStore:
    """In-memory store for users, loans and payment transactions.

    Reads return copies, so callers always work on snapshots. Every loan write
    goes through :meth:`save_loan`, which refuses to overwrite a loan that has
    changed since the snapshot was read.
    """

    users: dict[str, AppUser] = field(default_factory=dict)
    loans: dict[str, Loan] = field(default_factory=dict)
    transactions: dict[str, Transaction] = field(default_factory=dict)

    # Relationship indexes
    _user_loans: dict[str, list[str]] = field(default_factory=dict)
    _loan_transactions: dict[str, list[str]] = field(default_factory=dict)

    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)
    # Prior values of entries written inside the current unit of work
    _journal: list[tuple[str, str, Any]] | None = field(default=None, repr=False, compare=False)

    @contextmanager
    def _unit_of_work(self) -> Iterator[None]:
        """Apply all writes in the block, or none of them.

        Only entries touched inside the block are saved. A nested block joins
        the outer one.
        """
        with self._lock:
            if self._journal is not None:
                yield
                return

            self._journal = []
            try:
                yield
            except BaseException:
                for name, key, value in reversed(self._journal):
                    mapping = getattr(self, name)
                    if value is _MISSING:
                        mapping.pop(key, None)
                    else:
                        mapping[key] = value
                raise
            finally:
                self._journal = None

    def _remember(self, name: str, key: str) -> None:
        """Save an entry's current value for the enclosing unit of work."""
        if self._journal is None:
            return
        value = getattr(self, name).get(key, _MISSING)
        if isinstance(value, list):
            value = list(value)
        self._journal.append((name, key, value))

    # Users
    def add_user(self, user: AppUser) -> None:
        """Add a user to the store."""
        with self._lock:
            self._remember("users", user.user_id)
            self._remember("_user_loans", user.user_id)
            self.users[user.user_id] = user
            self._user_loans.setdefault(user.user_id, [])

    def create_user(
        self,
        name: str,
        mobile_number: str,
        photo_url: str = "",
        role: UserRole = UserRole.USER,
        user_id: str | None = None,
    ) -> str:
        """Create a user and return its id."""
        name = name.strip()
        mobile_number = mobile_number.strip()
        if not name or not mobile_number:
            raise InvalidEntityStateError("Name and mobile number are required.")

        user = AppUser(
            user_id=user_id or _new_id(),
            name=name,
            mobile_number=mobile_number,
            photo_url=photo_url,
            role=UserRole(role),
        )
        self.add_user(user)
        logger.info("Created %s %s", user.role.value, user.user_id)
        return user.user_id

    def get_user(self, user_id: str) -> AppUser:
        """Get a copy of a user.

        Raises
        ------
        EntityNotFoundError
            If no user has this id.
        """
        with self._lock:
            user = self.users.get(user_id)
            if user is None:
                raise EntityNotFoundError(f"User {user_id} not found")
            return replace(user)

    def update_user(self, user_id: str, **changes: Any) -> AppUser:
        """Partially update a user."""
        unknown = set(changes) - EDITABLE_USER_FIELDS
        if unknown:
            raise InvalidEntityStateError(f"Cannot update user fields: {sorted(unknown)}")
        if "role" in changes:
            changes["role"] = UserRole(changes["role"])

        with self._lock:
            user = self.get_user(user_id)
            updated = replace(user, **changes)
            self._remember("users", user_id)
            self.users[user_id] = updated
            return replace(updated)

    def delete_borrower(self, user_id: str) -> None:
        """Delete a user together with all their loans and transactions."""
        with self._unit_of_work():
            self.get_user(user_id)
            for loan_id in list(self._user_loans.get(user_id, [])):
                self.delete_loan(loan_id)
            self._remember("users", user_id)
            self._remember("_user_loans", user_id)
            del self.users[user_id]
            self._user_loans.pop(user_id, None)
        logger.info("Deleted borrower %s", user_id)

    # Loans
    def add_loan(self, loan: Loan) -> None:
        """Add a loan to the store."""
        with self._lock:
            if loan.user_id not in self.users:
                raise ReferentialIntegrityError(f"User {loan.user_id} not found")

            self._remember("loans", loan.loan_id)
            self._remember("_user_loans", loan.user_id)
            self._remember("_loan_transactions", loan.loan_id)
            self.loans[loan.loan_id] = loan
            if loan.loan_id not in self._user_loans[loan.user_id]:
                self._user_loans[loan.user_id].append(loan.loan_id)
            self._loan_transactions.setdefault(loan.loan_id, [])

    def create_loan(
        self,
        user_id: str,
        total_principal: Decimal,
        installment_amount: Decimal,
        interest_rate: Decimal = DEFAULT_INTEREST_RATE,
        next_due_date: datetime | None = None,
        current_due_amount: Decimal | None = None,
        now: datetime | None = None,
        loan_id: str | None = None,
    ) -> str:
        """Create an active loan and return its id.

        The outstanding amount starts at the principal and the first hafta
        falls due one period after creation unless given explicitly.

        Raises
        ------
        InvalidEntityStateError
            If an amount or the due date is invalid.
        ReferentialIntegrityError
            If the user does not exist.
        """
        terms: dict[str, Any] = {
            "total_principal": total_principal,
            "installment_amount": installment_amount,
            "interest_rate": interest_rate,
        }
        if current_due_amount is not None:
            terms["current_due_amount"] = current_due_amount
        if next_due_date is not None:
            terms["next_due_date"] = next_due_date
        terms = validate_loan_terms(**terms)
        created_at = _resolve_now(now)

        loan = Loan(
            loan_id=loan_id or _new_id(),
            user_id=user_id,
            total_principal=terms["total_principal"],
            current_due_amount=terms.get("current_due_amount", terms["total_principal"]),
            installment_amount=terms["installment_amount"],
            interest_rate=terms["interest_rate"],
            next_due_date=terms.get("next_due_date") or advance(created_at),
            created_at=created_at,
        )
        self.add_loan(loan)
        logger.info("Created loan %s for user %s (principal %s)", loan.loan_id, user_id, loan.total_principal)
        return loan.loan_id

    def create_borrower_with_loan(
        self,
        name: str,
        mobile_number: str,
        total_principal: Decimal,
        installment_amount: Decimal,
        interest_rate: Decimal = DEFAULT_INTEREST_RATE,
        now: datetime | None = None,
    ) -> tuple[str, str]:
        """Register a new borrower and their first loan.

        Returns
        -------
        tuple[str, str]
            The new user id and loan id.
        """
        validate_loan_terms(
            total_principal=total_principal,
            installment_amount=installment_amount,
            interest_rate=interest_rate,
        )
        with self._unit_of_work():
            user_id = self.create_user(name, mobile_number)
            loan_id = self.create_loan(
                user_id,
                total_principal=total_principal,
                installment_amount=installment_amount,
                interest_rate=interest_rate,
                now=now,
            )
        return user_id, loan_id

    def get_loan(self, loan_id: str) -> Loan:
        """Get a snapshot of a loan.

        Raises
        ------
        EntityNotFoundError
            If no loan has this id.
        """
        with self._lock:
            loan = self.loans.get(loan_id)
            if loan is None:
                raise EntityNotFoundError(f"Loan {loan_id} not found")
            return replace(loan)

    def save_loan(self, loan: Loan, expected_version: int, now: datetime | None = None) -> Loan:
        """Write a loan snapshot if the stored loan is still at ``expected_version``.

        Raises
        ------
        EntityNotFoundError
            If the loan no longer exists.
        StaleSnapshotError
            If the loan was written since the snapshot was read.
        """
        with self._lock:
            current = self.loans.get(loan.loan_id)
            if current is None:
                raise EntityNotFoundError(f"Loan {loan.loan_id} not found")
            if current.version != expected_version:
                raise StaleSnapshotError(
                    f"Loan {loan.loan_id} is at version {current.version}, expected {expected_version}"
                )

            stored = replace(loan, version=expected_version + 1, updated_at=_resolve_now(now))
            self._remember("loans", loan.loan_id)
            self.loans[loan.loan_id] = stored
            return replace(stored)

    def update_loan(self, loan_id: str, **changes: Any) -> Loan:
        """Partially update a loan's editable fields.

        Amounts and the due date are normalized as in :func:`validate_loan_terms`;
        ``None`` is not accepted for any of them.
        """
        unknown = set(changes) - EDITABLE_LOAN_FIELDS
        if unknown:
            raise InvalidEntityStateError(f"Cannot update loan fields: {sorted(unknown)}")
        if "status" in changes:
            changes["status"] = LoanStatus(changes["status"])
        changes = validate_loan_terms(**changes)

        with self._lock:
            loan = self.get_loan(loan_id)
            return self.save_loan(replace(loan, **changes), loan.version)

    def toggle_loan_status(self, loan_id: str) -> LoanStatus:
        """Flip a loan between active and completed.

        Any non-active loan, defaulted included, becomes active.
        """
        with self._lock:
            loan = self.get_loan(loan_id)
            new_status = LoanStatus.COMPLETED if loan.is_active else LoanStatus.ACTIVE
            self.save_loan(replace(loan, status=new_status), loan.version)
        logger.info("Loan %s status -> %s", loan_id, new_status.value)
        return new_status

    def delete_loan(self, loan_id: str) -> None:
        """Delete a loan and all its transactions."""
        with self._unit_of_work():
            loan = self.get_loan(loan_id)
            self._remember("_loan_transactions", loan_id)
            for transaction_id in self._loan_transactions.pop(loan_id, []):
                self._remember("transactions", transaction_id)
                del self.transactions[transaction_id]
            self._remember("loans", loan_id)
            self._remember("_user_loans", loan.user_id)
            del self.loans[loan_id]
            self._user_loans[loan.user_id].remove(loan_id)
        logger.info("Deleted loan %s", loan_id)

    # Transactions
    def add_transaction(self, transaction: Transaction) -> None:
        """Add a transaction to the store."""
        with self._lock:
            if transaction.loan_id not in self.loans:
                raise ReferentialIntegrityError(f"Loan {transaction.loan_id} not found")

            self._remember("transactions", transaction.transaction_id)
            self._remember("_loan_transactions", transaction.loan_id)
            self.transactions[transaction.transaction_id] = transaction
            self._loan_transactions[transaction.loan_id].append(transaction.transaction_id)

    def record_payment(
        self,
        loan_id: str,
        amount: Decimal | int | str,
        now: datetime | None = None,
    ) -> Transaction:
        """Record a payment: add the transaction and update the loan together.

        Raises
        ------
        EntityNotFoundError
            If the loan does not exist.
        InvalidAmountError
            If the amount is not positive or exceeds the current due.
        """
        now = _resolve_now(now)
        with self._unit_of_work():
            loan = self.get_loan(loan_id)
            result = apply_payment(loan, amount, now=now)
            self.add_transaction(result.transaction)
            self.save_loan(result.apply_to(loan), loan.version, now=now)

        logger.info(
            "Recorded payment of %s on loan %s (due %s -> %s, status %s)",
            result.transaction.amount_paid,
            loan_id,
            loan.current_due_amount,
            result.new_due_amount,
            result.new_status.value,
            extra=loan_context(
                loan_id,
                amount_paid=result.transaction.amount_paid,
                transaction_id=result.transaction.transaction_id,
            ),
        )
        return result.transaction

    def apply_penalty(self, loan_id: str, now: datetime | None = None) -> bool:
        """Apply any penalty owed by a loan. Returns True if the loan changed."""
        now = _resolve_now(now)
        with self._lock:
            loan = self.get_loan(loan_id)
            result = accrue(loan, now)
            if not result.should_apply:
                logger.debug("No penalty due on loan %s", loan_id, extra=loan_context(loan_id))
                return False
            self.save_loan(result.apply_to(loan), loan.version, now=now)

        logger.info(
            "Applied penalty of %s to loan %s for %d missed period(s), due now %s",
            result.penalty_amount,
            loan_id,
            result.missed_periods,
            result.new_due_amount,
            extra=loan_context(
                loan_id,
                penalty_amount=result.penalty_amount,
                missed_periods=result.missed_periods,
            ),
        )
        return True

    def refresh_penalties(self, now: datetime | None = None) -> int:
        """Apply penalties across every active loan. Returns how many changed."""
        now = _resolve_now(now)
        with self._lock:
            loan_ids = [loan.loan_id for loan in self.loans.values() if loan.is_active]
        applied = sum(1 for loan_id in loan_ids if self.apply_penalty(loan_id, now))
        logger.info("Penalty refresh: %d of %d active loans penalised", applied, len(loan_ids))
        return applied

    # Query methods
    def get_user_loans(self, user_id: str) -> list[Loan]:
        """Get all loans for a user."""
        with self._lock:
            return [replace(self.loans[lid]) for lid in self._user_loans.get(user_id, [])]

    def get_active_loans_with_users(self) -> list[LoanWithUser]:
        """Get active loans paired with their borrowers."""
        with self._lock:
            result = []
            for loan in self.loans.values():
                if not loan.is_active:
                    continue
                user = self.users.get(loan.user_id)
                result.append(
                    LoanWithUser(
                        loan=replace(loan),
                        user=replace(user) if user else AppUser.unknown(loan.user_id),
                    )
                )
            return result

    def search_loans(self, query: str) -> list[LoanWithUser]:
        """Filter active loans by borrower name (case-insensitive) or mobile number."""
        needle = query.strip().lower()
        return [
            item
            for item in self.get_active_loans_with_users()
            if needle in item.user.name.lower() or needle in item.user.mobile_number
        ]

    def get_loan_transactions(self, loan_id: str) -> list[Transaction]:
        """Get all transactions for a loan, newest first."""
        with self._lock:
            ids = self._loan_transactions.get(loan_id, [])
            return sorted((self.transactions[tid] for tid in ids), key=lambda t: t.date, reverse=True)

    def portfolio_summary(self, now: datetime | None = None) -> PortfolioSummary:
        """Totals shown on the admin dashboard."""
        now = _resolve_now(now)
        active = [item.loan for item in self.get_active_loans_with_users()]
        return PortfolioSummary(
            borrowers=len(active),
            total_outstanding=sum((loan.current_due_amount for loan in active), Decimal("0")),
            overdue_count=sum(
                1 for loan in active if classify(now, loan.next_due_date) == DueStatus.OVERDUE
            ),
        )

    def summary(self) -> dict[str, int]:
        """Return summary counts of all entities."""
        return {
            "users": len(self.users),
            "loans": len(self.loans),
            "transactions": len(self.transactions),
        }
