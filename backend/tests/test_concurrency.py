"""
Concurrency tests: double-booking races and stale status updates.

Every competitor gets its own session (and connection) on the shared
SQLite file, the way concurrent requests would against PostgreSQL.
"""

import asyncio
from datetime import date, datetime, timezone

import pytest
from sqlalchemy import func, select

from app.core.exceptions import ConflictError, StaleStateError
from app.models.booking import Booking
from app.schemas.booking import SingleBookingCreate
from app.services import booking_service
from app.services.booking_service import create_booking, load_booking, update_status


def _request(space_id: int, start_hour: int, end_hour: int) -> SingleBookingCreate:
    return SingleBookingCreate(
        booking_kind="single",
        space_id=space_id,
        event_date=date(2030, 6, 10),
        start_time=datetime(2030, 6, 10, start_hour, tzinfo=timezone.utc),
        end_time=datetime(2030, 6, 10, end_hour, tzinfo=timezone.utc),
        client_name="Racer",
        client_email="racer@example.com",
        client_phone="0772000000",
    )


async def _count_bookings(session_factory, space_id: int) -> int:
    async with session_factory() as session:
        return await session.scalar(
            select(func.count(Booking.id)).where(Booking.space_id == space_id)
        )


async def _create_in_own_session(session_factory, request, client_id):
    async with session_factory() as session:
        return await create_booking(session, request, client_id)


@pytest.mark.asyncio
async def test_concurrent_overlapping_creates_book_once(session_factory, hourly_space, test_user):
    """Five simultaneous requests for overlapping slots: exactly one wins."""
    space_id, client_id = hourly_space.id, test_user.id
    requests = [_request(space_id, 14, 16), _request(space_id, 15, 17)] * 2 + [_request(space_id, 13, 15)]

    results = await asyncio.gather(
        *(_create_in_own_session(session_factory, r, client_id) for r in requests),
        return_exceptions=True,
    )

    created = [r for r in results if isinstance(r, Booking)]
    rejected = [r for r in results if isinstance(r, ConflictError)]
    assert len(created) == 1
    assert len(rejected) == len(requests) - 1
    assert await _count_bookings(session_factory, space_id) == 1


@pytest.mark.asyncio
async def test_concurrent_disjoint_creates_all_succeed(session_factory, hourly_space, test_user):
    """Serialization per space must not reject non-overlapping requests."""
    space_id, client_id = hourly_space.id, test_user.id
    requests = [_request(space_id, h, h + 1) for h in (8, 9, 10)]

    results = await asyncio.gather(
        *(_create_in_own_session(session_factory, r, client_id) for r in requests),
        return_exceptions=True,
    )

    assert all(isinstance(r, Booking) for r in results), results
    assert await _count_bookings(session_factory, space_id) == 3


@pytest.mark.asyncio
async def test_lost_calendar_claim_rechecks_conflicts(session_factory, hourly_space, test_user):
    """
    A creator reads the calendar version, a competitor commits an
    overlapping booking, and the stale claim is refused. The retry then
    sees the competitor's booking and reports a conflict.
    """
    space_id, client_id = hourly_space.id, test_user.id
    async with session_factory() as seed:
        await create_booking(seed, _request(space_id, 8, 9), client_id)

    async with session_factory() as slow:
        stale_version = await booking_service._read_calendar_version(slow, space_id)

        async with session_factory() as fast:
            winner = await create_booking(fast, _request(space_id, 14, 16), client_id)

        assert await booking_service._claim_calendar(slow, space_id, stale_version) is False
        await slow.rollback()

        with pytest.raises(ConflictError) as exc_info:
            await create_booking(slow, _request(space_id, 15, 17), client_id)
        assert exc_info.value.details["conflicting_booking_id"] == winner.id

    assert await _count_bookings(session_factory, space_id) == 2


@pytest.mark.asyncio
async def test_lost_claim_retries_and_succeeds(session_factory, hourly_space, test_user, monkeypatch):
    """A competitor booking a different slot only costs one retry."""
    space_id, client_id = hourly_space.id, test_user.id
    real_read = booking_service._read_calendar_version
    calls = []

    async def read_then_lose_race(db, sid):
        version = await real_read(db, sid)
        calls.append(version)
        if len(calls) == 1:
            async with session_factory() as competitor:
                await create_booking(competitor, _request(space_id, 8, 9), client_id)
        return version

    monkeypatch.setattr(booking_service, "_read_calendar_version", read_then_lose_race)

    async with session_factory() as session:
        booking = await create_booking(session, _request(space_id, 14, 16), client_id)

    assert booking.id is not None
    assert len(calls) == 3  # first attempt, competitor's own read, retry
    assert await _count_bookings(session_factory, space_id) == 2


@pytest.mark.asyncio
async def test_exhausted_claim_retries_raise_stale_state(session_factory, hourly_space, test_user, monkeypatch):
    async def never_claim(db, space_id, read_version):
        return False

    monkeypatch.setattr(booking_service, "_claim_calendar", never_claim)

    async with session_factory() as session:
        with pytest.raises(StaleStateError):
            await create_booking(session, _request(hourly_space.id, 14, 16), test_user.id)

    assert await _count_bookings(session_factory, hourly_space.id) == 0


@pytest.mark.asyncio
async def test_concurrent_status_change_loses_with_stale_state(session_factory, hourly_space, owner, test_user):
    """Confirm and cancel read the same version; the second write is refused."""
    space_id, owner_id, client_id = hourly_space.id, owner.id, test_user.id
    async with session_factory() as seed:
        booking_id = (await create_booking(seed, _request(space_id, 14, 16), client_id)).id

    async with session_factory() as canceller, session_factory() as confirmer:
        # Hold the loaded row so the canceller writes against version 1
        stale = await load_booking(canceller, booking_id)
        assert stale.version == 1

        confirmed = await update_status(confirmer, booking_id, "confirmed", owner_id)
        assert confirmed.status == "confirmed"

        with pytest.raises(StaleStateError):
            await update_status(canceller, booking_id, "cancelled", owner_id)

    async with session_factory() as check:
        final = await load_booking(check, booking_id)
        assert final.status == "confirmed"
        assert final.version == 2
