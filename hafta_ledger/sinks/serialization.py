"""Serialization of ledger records to JSON-safe dicts and back."""

from dataclasses import asdict, is_dataclass
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from hafta_ledger.exceptions import ValidationError
from hafta_ledger.models import AppUser, Loan, LoanStatus, Transaction, UserRole


def to_dict(obj: Any) -> dict:
    """Convert object to dictionary."""
    if is_dataclass(obj):
        return dataclass_to_dict(obj)
    elif isinstance(obj, dict):
        return obj
    else:
        return {"value": str(obj)}


def dataclass_to_dict(obj: Any) -> dict:
    """Convert dataclass to dict with proper serialization."""
    result = {}
    for key, value in asdict(obj).items():
        result[key] = serialize_value(value)
    return result


def serialize_value(value: Any) -> Any:
    """Serialize a value for JSON output."""
    if isinstance(value, Decimal):
        return str(value)
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, date):
        return value.isoformat()
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [serialize_value(v) for v in value]
    return value


# Parsing stored records back into typed models


def _require(data: dict, key: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise ValidationError(f"Missing field {key!r}") from None


def _money(data: dict, key: str, allow_negative: bool = False) -> Decimal:
    raw = _require(data, key)
    if isinstance(raw, bool):
        raise ValidationError(f"Field {key!r} must be a number, got {raw!r}")
    try:
        value = Decimal(str(raw))
    except InvalidOperation:
        raise ValidationError(f"Field {key!r} must be a number, got {raw!r}") from None
    if not value.is_finite() or (value < 0 and not allow_negative):
        raise ValidationError(f"Field {key!r} out of range: {raw!r}")
    return value


def _count(data: dict, key: str) -> int:
    raw = data.get(key, 0)
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
        raise ValidationError(f"Field {key!r} must be a non-negative integer, got {raw!r}")
    return raw


def _timestamp(data: dict, key: str, required: bool = True) -> datetime | None:
    raw = _require(data, key) if required else data.get(key)
    if raw is None and not required:
        return None
    if isinstance(raw, datetime):
        parsed = raw
    else:
        try:
            parsed = datetime.fromisoformat(raw)
        except (TypeError, ValueError):
            raise ValidationError(f"Field {key!r} must be an ISO timestamp, got {raw!r}") from None
    # Naive timestamps are stored UTC
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _rate(data: dict) -> Decimal:
    # Unset rate reads as zero, which accrues at the default penalty rate
    if data.get("interest_rate") is None:
        return Decimal("0")
    return _money(data, "interest_rate", allow_negative=True)


def _enum(enum_type: type[Enum], data: dict, key: str, default: Enum) -> Any:
    raw = data.get(key, default.value)
    try:
        return enum_type(raw)
    except ValueError:
        raise ValidationError(f"Field {key!r} has unknown value {raw!r}") from None


def parse_user(data: dict) -> AppUser:
    """Build an :class:`AppUser` from a stored record."""
    return AppUser(
        user_id=str(_require(data, "user_id")),
        name=str(_require(data, "name")),
        mobile_number=str(data.get("mobile_number", "")),
        photo_url=str(data.get("photo_url", "")),
        role=_enum(UserRole, data, "role", UserRole.USER),
    )


def parse_loan(data: dict) -> Loan:
    """Build a :class:`Loan` from a stored record.

    Raises
    ------
    ValidationError
        If a field is missing, mistyped or out of range.
    """
    return Loan(
        loan_id=str(_require(data, "loan_id")),
        user_id=str(_require(data, "user_id")),
        total_principal=_money(data, "total_principal"),
        current_due_amount=_money(data, "current_due_amount"),
        installment_amount=_money(data, "installment_amount"),
        interest_rate=_rate(data),
        next_due_date=_timestamp(data, "next_due_date"),
        paid_installments_count=_count(data, "paid_installments_count"),
        missed_installments_count=_count(data, "missed_installments_count"),
        status=_enum(LoanStatus, data, "status", LoanStatus.ACTIVE),
        created_at=_timestamp(data, "created_at", required=False),
        updated_at=_timestamp(data, "updated_at", required=False),
        version=_count(data, "version"),
    )


def parse_transaction(data: dict) -> Transaction:
    """Build a :class:`Transaction` from a stored record."""
    return Transaction(
        transaction_id=str(_require(data, "transaction_id")),
        loan_id=str(_require(data, "loan_id")),
        amount_paid=_money(data, "amount_paid"),
        date=_timestamp(data, "date"),
    )
