"""Display formatting for amounts and dates (Indian conventions)."""

from datetime import date, datetime, tzinfo
from decimal import ROUND_HALF_UP, Decimal

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def group_indian(digits: str) -> str:
    """Insert separators the Indian way: 1234567 -> 12,34,567."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups) + "," + tail


def format_currency(amount: Decimal | int | float, symbol: str = "₹") -> str:
    """Format an amount like ``₹1,00,000`` or ``₹1,234.5``.

    Up to three fraction digits are kept, trailing zeros dropped.
    """
    value = Decimal(str(amount)).quantize(Decimal("0.001"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    whole, _, fraction = f"{abs(value):f}".partition(".")
    fraction = fraction.rstrip("0")
    text = group_indian(whole) + (f".{fraction}" if fraction else "")
    return f"{symbol}{sign}{text}"


def format_date(value: date | datetime, tz: tzinfo | None = None) -> str:
    """Format a date like ``12 Feb 2026``, optionally converting to ``tz`` first."""
    if isinstance(value, datetime) and tz is not None:
        value = value.astimezone(tz)
    return f"{value.day:02d} {_MONTHS[value.month - 1]} {value.year}"
