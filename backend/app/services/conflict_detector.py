"""
Conflict detector: does a candidate interval overlap an active booking?

Two windows [s1, e1) and [s2, e2) on the same space conflict iff
s1 < e2 and s2 < e1, and the existing booking's status is not excluded
(cancelled and declined bookings never block). Every booking kind is
compared through its derived slot_start/slot_end, so single-day and
multi-night bookings are checked against each other.

This is a point-in-time read. The booking service pairs it with the
per-space calendar claim to make check-then-insert safe.
"""

from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.enums import BookingStatus
from app.models.booking import Booking

NON_BLOCKING_STATUSES = frozenset({BookingStatus.CANCELLED, BookingStatus.DECLINED})


async def find_conflicting_booking(
    db: AsyncSession,
    space_id: int,
    start: datetime,
    end: datetime,
    exclude_statuses: Iterable[BookingStatus] = NON_BLOCKING_STATUSES,
) -> Optional[Booking]:
    """Return the earliest overlapping active booking, if any."""
    excluded = [BookingStatus(s).value for s in exclude_statuses]
    query = (
        select(Booking)
        .where(
            Booking.space_id == space_id,
            Booking.slot_start < end,
            Booking.slot_end > start,
        )
        .order_by(Booking.slot_start.asc(), Booking.id.asc())
        .limit(1)
    )
    if excluded:
        query = query.where(Booking.status.not_in(excluded))

    result = await db.execute(query)
    return result.scalar_one_or_none()
