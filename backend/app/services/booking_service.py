"""
Booking service: create, list, fetch and move bookings through their lifecycle.

CONCURRENCY STRATEGY
====================

Creation (double-booking):
  Conflict detection followed by insertion is check-then-act. Two requests
  for overlapping slots on the same space could both pass the check and
  both insert. We close the gap with a per-space calendar row used as an
  optimistic lock:

  1. Read space_calendars.version for the space (absent row = no version yet)
  2. Run the conflict check and compute the price
  3. UPDATE space_calendars SET version = version + 1
     WHERE space_id = :space_id AND version = :read_version
     (or INSERT the row when it did not exist; the primary key rejects a
     concurrent first insert)
  4. If no row was claimed, another booking for this space committed in
     between: roll back and retry from step 1, where the conflict check
     now sees the winner's booking
  5. Insert the booking and commit, releasing the calendar row

  Under PostgreSQL the losing UPDATE blocks on the winner's row lock and
  re-evaluates its WHERE clause after the winner commits, so it matches
  zero rows. Retries are bounded by BOOKING_MAX_CREATE_ATTEMPTS.

Status changes (lost updates):
  Booking.version is SQLAlchemy's version_id_col. Every UPDATE carries
  "AND version = :read_version"; a concurrent writer makes it match zero
  rows, SQLAlchemy raises StaleDataError and the caller gets StaleStateError
  instead of silently overwriting the other change.

Notifications are sent after commit and are best-effort: failures are
logged and dropped, never surfaced to the caller.
"""

from dataclasses import dataclass, field
from datetime import date
from math import ceil
from typing import List, Optional, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from app.core.config import get_settings
from app.core.exceptions import (
    BookingError, ConflictError, NotFoundError, StaleStateError, UnauthorizedError,
)
from app.core.logging import get_logger
from app.core.metrics import (
    booking_claim_retries, booking_latency, notification_failures,
    record_booking_attempt, record_transition,
)
from app.domain.enums import BookingKind, BookingStatus, PaymentStatus, PriceUnit
from app.domain.intervals import (
    ONE_DAY, BookingInterval, SingleDayInterval, multi_night_interval,
    single_day_interval, start_of_day,
)
from app.domain.pricing import compute_total_price, quantize_price
from app.domain.state_machine import transition
from app.models.booking import Booking
from app.models.space import Space
from app.models.space_calendar import SpaceCalendar
from app.services.conflict_detector import find_conflicting_booking
from app.services.interfaces.notifier import BookingNotifier, BookingSummary
from app.services.space_service import find_bookable_space

logger = get_logger(__name__)

SORT_LATEST = "latest"
SORT_OLDEST = "oldest"


@dataclass
class BookingFilters:
    status: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    sort: Optional[str] = None
    page: int = 1
    limit: int = 10

    @property
    def status_filter(self) -> Optional[BookingStatus]:
        """Recognised status or None; unknown values are ignored, not errors."""
        if not self.status:
            return None
        try:
            return BookingStatus(self.status)
        except ValueError:
            return None


@dataclass
class BookingPage:
    items: List[Booking] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 10

    @property
    def num_pages(self) -> int:
        return ceil(self.total / self.limit) if self.limit else 0


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


def build_interval(booking_data, price_unit: PriceUnit) -> BookingInterval:
    if booking_data.booking_kind == BookingKind.SINGLE.value:
        return single_day_interval(
            booking_data.event_date,
            booking_data.start_time,
            booking_data.end_time,
            price_unit=price_unit,
        )
    return multi_night_interval(booking_data.check_in_date, booking_data.check_out_date)


def _interval_columns(interval: BookingInterval) -> dict:
    if isinstance(interval, SingleDayInterval):
        return {
            "event_date": interval.event_date,
            "start_time": interval.start_time,
            "end_time": interval.end_time,
        }
    return {"check_in_date": interval.check_in, "check_out_date": interval.check_out}


async def _read_calendar_version(db: AsyncSession, space_id: int) -> Optional[int]:
    result = await db.execute(
        select(SpaceCalendar.version).where(SpaceCalendar.space_id == space_id)
    )
    return result.scalar_one_or_none()


async def _claim_calendar(db: AsyncSession, space_id: int, read_version: Optional[int]) -> bool:
    """Compare-and-swap the space's calendar version. False means we lost the race."""
    if read_version is None:
        db.add(SpaceCalendar(space_id=space_id, version=1))
        try:
            await db.flush()
        except IntegrityError:
            return False
        return True

    result = await db.execute(
        update(SpaceCalendar)
        .where(SpaceCalendar.space_id == space_id, SpaceCalendar.version == read_version)
        .values(version=SpaceCalendar.version + 1)
    )
    return result.rowcount == 1


async def _insert_with_calendar_claim(
    db: AsyncSession,
    booking_data,
    client_id: int,
) -> Tuple[Booking, Space]:
    max_attempts = max(get_settings().BOOKING_MAX_CREATE_ATTEMPTS, 1)

    for attempt in range(1, max_attempts + 1):
        space = await find_bookable_space(db, booking_data.space_id)
        interval = build_interval(booking_data, PriceUnit(space.price_unit))
        calendar_version = await _read_calendar_version(db, space.id)

        if interval.kind == BookingKind.SINGLE:
            existing = await find_conflicting_booking(db, space.id, interval.start, interval.end)
            if existing is not None:
                logger.warning(
                    "booking_conflict",
                    space_id=space.id,
                    conflicting_booking_id=existing.id,
                    start=interval.start.isoformat(),
                    end=interval.end.isoformat(),
                )
                raise ConflictError(
                    f"The space is already booked for this time (booking {existing.id})",
                    details={"space_id": space.id, "conflicting_booking_id": existing.id},
                )

        total_price = quantize_price(compute_total_price(space.price, interval))

        space_id = space.id
        if not await _claim_calendar(db, space_id, calendar_version):
            # A failed flush leaves the session needing rollback; ORM state is unusable until then
            await db.rollback()
            booking_claim_retries.inc()
            logger.info(
                "booking_retry",
                space_id=space_id,
                attempt=attempt,
                reason="calendar_claimed",
            )
            continue

        booking = Booking(
            space_id=space.id,
            user_id=client_id,
            client_name=booking_data.client_name.strip(),
            client_email=str(booking_data.client_email).lower(),
            client_phone=booking_data.client_phone.strip(),
            booking_kind=interval.kind.value,
            slot_start=interval.start,
            slot_end=interval.end,
            attendee_count=booking_data.guests or 1,
            event_type=booking_data.event_type,
            special_requests=booking_data.special_requests,
            total_price=total_price,
            status=BookingStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
            **_interval_columns(interval),
        )
        db.add(booking)
        await db.flush()
        # Release the calendar claim before any outbound call
        await db.commit()

        logger.info(
            "booking_created",
            booking_id=booking.id,
            space_id=space.id,
            client_id=client_id,
            kind=booking.booking_kind,
            total_price=str(total_price),
            attempt=attempt,
        )
        return booking, space

    logger.warning("booking_claim_exhausted", space_id=booking_data.space_id, attempts=max_attempts)
    raise StaleStateError(
        "Booking failed due to concurrent requests for this space. Please try again.",
        details={"space_id": booking_data.space_id},
    )


async def _notify_created(notifier: Optional[BookingNotifier], booking: Booking, space: Space) -> None:
    if notifier is None:
        return

    summary = BookingSummary(
        booking_id=booking.id,
        space_id=space.id,
        space_name=space.name,
        client_name=booking.client_name,
        client_email=booking.client_email,
        booking_kind=booking.booking_kind,
        starts_at=booking.slot_start,
        ends_at=booking.slot_end,
        total_price=booking.total_price,
    )
    try:
        await notifier.send_booking_confirmation(summary)
    except Exception as e:
        notification_failures.inc()
        logger.warning(
            "booking_notification_failed",
            booking_id=booking.id,
            error=str(e),
            error_type=type(e).__name__,
        )


async def create_booking(
    db: AsyncSession,
    booking_data,
    client_id: int,
    notifier: Optional[BookingNotifier] = None,
) -> Booking:
    """
    Validate, conflict-check, price and persist a new pending booking.

    Raises ValidationError, NotFoundError (missing or inactive space),
    ConflictError (overlap with an active single-day slot) or
    StaleStateError (calendar claim lost on every attempt).
    """
    with booking_latency.time():
        try:
            booking, space = await _insert_with_calendar_claim(db, booking_data, client_id)
        except BookingError as e:
            record_booking_attempt(e.code)
            raise
        record_booking_attempt("success")

    await _notify_created(notifier, booking, space)
    return booking


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def _apply_filters(query, filters: BookingFilters):
    status = filters.status_filter
    if status is not None:
        query = query.where(Booking.status == status.value)
    if filters.start_date:
        query = query.where(Booking.slot_start >= start_of_day(filters.start_date))
    if filters.end_date:
        query = query.where(Booking.slot_start < start_of_day(filters.end_date) + ONE_DAY)
    return query


def _sort_order(sort: Optional[str]):
    if sort == SORT_LATEST:
        return (Booking.created_at.desc(), Booking.id.desc())
    if sort == SORT_OLDEST:
        return (Booking.created_at.asc(), Booking.id.asc())
    return (Booking.slot_start.asc(), Booking.id.asc())


async def _paginate(db: AsyncSession, query, filters: BookingFilters) -> BookingPage:
    query = _apply_filters(query, filters)

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar() or 0

    page_query = (
        query
        .order_by(*_sort_order(filters.sort))
        .offset((filters.page - 1) * filters.limit)
        .limit(filters.limit)
    )
    result = await db.execute(page_query)
    return BookingPage(
        items=list(result.scalars().all()),
        total=total,
        page=filters.page,
        limit=filters.limit,
    )


async def list_bookings_for_owner(db: AsyncSession, owner_id: int, filters: BookingFilters) -> BookingPage:
    """Bookings on every space the owner lists. An owner without spaces gets an empty page."""
    query = (
        select(Booking)
        .join(Space, Booking.space_id == Space.id)
        .where(Space.owner_id == owner_id)
    )
    return await _paginate(db, query, filters)


async def list_bookings_for_client(db: AsyncSession, client_id: int, filters: BookingFilters) -> BookingPage:
    query = select(Booking).where(Booking.user_id == client_id)
    return await _paginate(db, query, filters)


async def load_booking(db: AsyncSession, booking_id: int) -> Booking:
    result = await db.execute(select(Booking).where(Booking.id == booking_id))
    booking = result.scalar_one_or_none()

    if not booking:
        raise NotFoundError(f"No booking found with id {booking_id}", details={"booking_id": booking_id})
    return booking


async def space_owner_id(db: AsyncSession, booking: Booking) -> int:
    return await db.scalar(select(Space.owner_id).where(Space.id == booking.space_id))


async def get_booking(db: AsyncSession, booking_id: int, actor_id: int) -> Booking:
    """Fetch a booking for the owner of its space."""
    booking = await load_booking(db, booking_id)
    if await space_owner_id(db, booking) != actor_id:
        raise UnauthorizedError("Not authorized to view this booking", details={"booking_id": booking_id})
    return booking


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


async def commit_booking(db: AsyncSession, booking: Booking) -> Booking:
    """Commit pending changes to a booking, mapping lost races to StaleStateError."""
    booking_id = booking.id
    try:
        await db.commit()
    except StaleDataError:
        await db.rollback()
        logger.warning("booking_stale_write", booking_id=booking_id)
        raise StaleStateError(
            f"Booking {booking_id} was modified by another request. Reload and try again.",
            details={"booking_id": booking_id},
        )
    return booking


async def update_status(
    db: AsyncSession,
    booking_id: int,
    requested_status: str,
    actor_id: int,
    reason: Optional[str] = None,
) -> Booking:
    """Owner-driven transition (see app.domain.state_machine)."""
    booking = await load_booking(db, booking_id)
    previous = booking.status

    owner_id = await space_owner_id(db, booking)
    transition(booking, requested_status, actor_id, owner_id, reason)
    await commit_booking(db, booking)

    record_transition("owner", booking.status)
    logger.info(
        "booking_status_updated",
        booking_id=booking_id,
        actor_id=actor_id,
        from_status=previous,
        to_status=booking.status,
        payment_status=booking.payment_status,
    )
    return booking
