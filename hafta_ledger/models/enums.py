"""Enumeration types for ledger entities."""

from enum import Enum


class LoanStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    DEFAULTED = "defaulted"


class DueStatus(str, Enum):
    """Badge/reminder classification of a loan's next due date."""

    OVERDUE = "overdue"
    UPCOMING = "upcoming"
    NORMAL = "normal"


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


class Platform(str, Enum):
    IOS = "ios"
    ANDROID = "android"
    WEB = "web"
