"""
Enumerations shared by the booking domain, models and schemas.
Values are stored verbatim in the database.
"""

from enum import Enum


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    DECLINED = "declined"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class BookingKind(str, Enum):
    SINGLE = "single"
    MULTI_NIGHT = "multi_night"


class PriceUnit(str, Enum):
    HOUR = "hour"
    DAY = "day"
    EVENT = "event"


class UserRole(str, Enum):
    CLIENT = "client"
    OWNER = "owner"
    ADMIN = "admin"


def sql_values(enum_cls) -> str:
    """Render enum values for a CHECK ... IN (...) constraint."""
    return ", ".join(f"'{member.value}'" for member in enum_cls)
