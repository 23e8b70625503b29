"""Reminder messages and SMS/WhatsApp link construction."""

import re
from datetime import datetime, tzinfo
from urllib.parse import quote

from hafta_ledger.config import MessagingConfig
from hafta_ledger.engine import classify
from hafta_ledger.formatting import format_currency, format_date
from hafta_ledger.models import AppUser, DueStatus, Loan, Platform


def encode_component(text: str) -> str:
    """Percent-encode a URL component, leaving ``-_.!~*'()`` alone."""
    return quote(text, safe="-_.!~*'()")


def build_reminder_message(
    user: AppUser,
    loan: Loan,
    now: datetime,
    config: MessagingConfig | None = None,
    tz: tzinfo | None = None,
) -> str:
    """Build the reminder text for a borrower based on the loan's due status."""
    config = config or MessagingConfig()
    status = classify(now, loan.next_due_date)
    amount = format_currency(loan.installment_amount, symbol=config.currency_symbol)
    due = format_date(loan.next_due_date, tz=tz)

    if status == DueStatus.OVERDUE:
        return (
            f"Hello {user.name}, your hafta of {amount} was due on {due}. "
            f"Please pay immediately to avoid penalty. - {config.sender_name}"
        )
    if status == DueStatus.UPCOMING:
        return (
            f"Hello {user.name}, friendly reminder that your hafta of {amount} "
            f"is due on {due}. - {config.sender_name}"
        )
    return (
        f"Hello {user.name}, your next hafta of {amount} is scheduled for {due}. "
        f"- {config.sender_name}"
    )


def sms_url(phone_number: str, message: str, platform: Platform = Platform.ANDROID) -> str:
    """``sms:`` link with a pre-filled body. iOS expects ``&`` before the body."""
    separator = "&" if platform == Platform.IOS else "?"
    return f"sms:{phone_number}{separator}body={encode_component(message)}"


def normalize_whatsapp_number(phone_number: str, country_code: str = "91") -> str:
    """Strip non-digits and prefix the country code onto bare 10-digit numbers."""
    digits = re.sub(r"[^0-9]", "", phone_number)
    if len(digits) == 10:
        digits = f"{country_code}{digits}"
    return digits


def whatsapp_url(phone_number: str, message: str, country_code: str = "91") -> str:
    """``wa.me`` link, which opens WhatsApp Web or the app."""
    phone = normalize_whatsapp_number(phone_number, country_code)
    return f"https://wa.me/{phone}?text={encode_component(message)}"


def whatsapp_app_url(phone_number: str, message: str, country_code: str = "91") -> str:
    """``whatsapp://`` fallback for devices that cannot open ``wa.me`` links."""
    phone = normalize_whatsapp_number(phone_number, country_code)
    return f"whatsapp://send?phone={phone}&text={encode_component(message)}"
