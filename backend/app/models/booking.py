"""
Booking model: a client's reservation request against a space.

Key design decisions:
- Kind-specific columns (single: event_date/start_time/end_time,
  multi-night: check_in_date/check_out_date); a CHECK constraint keeps
  exactly one group populated, matching booking_kind.
- slot_start/slot_end hold the derived half-open [start, end) window for
  every kind, so overlap, date filters and sorting use one pair of columns.
- total_price is computed server-side once at creation and never rewritten.
- `version` is the optimistic-locking counter for status/payment updates.
- Bookings are never deleted; cancelled/completed end the lifecycle.
"""

from sqlalchemy import (
    CheckConstraint, Column, Date, DateTime, ForeignKey, Index, Integer, Numeric, String,
)

from app.db.base import Base, TimestampMixin
from app.domain.enums import BookingStatus, PaymentStatus, sql_values


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    space_id = Column(Integer, ForeignKey("spaces.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Client contact snapshot at booking time
    client_name = Column(String(255), nullable=False)
    client_email = Column(String(255), nullable=False)
    client_phone = Column(String(32), nullable=False)

    booking_kind = Column(String(20), nullable=False)
    event_date = Column(Date, nullable=True)
    start_time = Column(DateTime(timezone=True), nullable=True)
    end_time = Column(DateTime(timezone=True), nullable=True)
    check_in_date = Column(DateTime(timezone=True), nullable=True)
    check_out_date = Column(DateTime(timezone=True), nullable=True)
    slot_start = Column(DateTime(timezone=True), nullable=False)
    slot_end = Column(DateTime(timezone=True), nullable=False)

    attendee_count = Column(Integer, nullable=False, default=1)
    event_type = Column(String(100), nullable=True)
    special_requests = Column(String(1000), nullable=True)
    total_price = Column(Numeric(14, 2), nullable=False)

    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value)
    cancellation_reason = Column(String(500), nullable=True)

    payment_status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)
    payment_reference = Column(String(100), nullable=True)
    payment_transaction_id = Column(String(100), nullable=True)
    payment_provider = Column(String(20), nullable=True)

    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        CheckConstraint("slot_start < slot_end", name="check_booking_slot_order"),
        CheckConstraint("total_price >= 0", name="check_booking_price_non_negative"),
        CheckConstraint("attendee_count >= 1", name="check_booking_attendees_positive"),
        CheckConstraint(f"status IN ({sql_values(BookingStatus)})", name="check_booking_status"),
        CheckConstraint(
            f"payment_status IN ({sql_values(PaymentStatus)})", name="check_booking_payment_status"
        ),
        CheckConstraint(
            "(booking_kind = 'single' AND event_date IS NOT NULL"
            " AND check_in_date IS NULL AND check_out_date IS NULL)"
            " OR (booking_kind = 'multi_night' AND event_date IS NULL"
            " AND start_time IS NULL AND end_time IS NULL"
            " AND check_in_date IS NOT NULL AND check_out_date IS NOT NULL)",
            name="check_booking_kind_fields",
        ),
        # Conflict detection: same space, overlapping window
        Index("ix_bookings_space_slot", "space_id", "slot_start", "slot_end"),
        Index("ix_bookings_user_slot", "user_id", "slot_start"),
    )

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, space={self.space_id}, status={self.status}, kind={self.booking_kind})>"
