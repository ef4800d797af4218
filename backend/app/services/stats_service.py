"""
Owner booking statistics.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.domain.enums import BookingStatus
from app.models.booking import Booking
from app.models.space import Space

logger = get_logger(__name__)

REVENUE_STATUSES = (BookingStatus.CONFIRMED.value, BookingStatus.COMPLETED.value)


@dataclass
class OwnerStats:
    total: int = 0
    pending: int = 0
    confirmed: int = 0
    declined: int = 0
    cancelled: int = 0
    completed: int = 0
    upcoming: int = 0
    revenue: Decimal = Decimal("0")


async def get_owner_stats(db: AsyncSession, owner_id: int) -> OwnerStats:
    """
    Counts per status, upcoming confirmed bookings and revenue
    (sum of total_price over confirmed + completed) across the owner's spaces.
    An owner with no spaces gets all-zero stats.
    """
    space_ids = select(Space.id).where(Space.owner_id == owner_id).scalar_subquery()
    owned = await db.scalar(select(func.count(Space.id)).where(Space.owner_id == owner_id))
    if not owned:
        return OwnerStats()

    stats = OwnerStats()
    rows = await db.execute(
        select(Booking.status, func.count(Booking.id))
        .where(Booking.space_id.in_(space_ids))
        .group_by(Booking.status)
    )
    for status, count in rows.all():
        setattr(stats, BookingStatus(status).value, count)
        stats.total += count

    stats.upcoming = await db.scalar(
        select(func.count(Booking.id)).where(
            Booking.space_id.in_(space_ids),
            Booking.status == BookingStatus.CONFIRMED.value,
            Booking.slot_start >= datetime.now(timezone.utc),
        )
    ) or 0

    revenue = await db.scalar(
        select(func.coalesce(func.sum(Booking.total_price), 0)).where(
            Booking.space_id.in_(space_ids),
            Booking.status.in_(REVENUE_STATUSES),
        )
    )
    stats.revenue = Decimal(str(revenue or 0))

    logger.info("owner_stats_computed", owner_id=owner_id, total=stats.total, revenue=str(stats.revenue))
    return stats
