"""
Booking endpoints: create, list (owner and client views), stats,
single fetch and owner-driven status changes.

Route order matters: /owner and /stats are declared before /{booking_id}.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.security import Actor, get_current_actor, require_owner
from app.db.session import get_db
from app.schemas.booking import (
    BookingCreate, BookingListResponse, BookingResponse, BookingStatsResponse, BookingStatusUpdate,
)
from app.services.booking_service import (
    BookingFilters, BookingPage, create_booking, get_booking,
    list_bookings_for_client, list_bookings_for_owner, update_status,
)
from app.services.interfaces.notifier import BookingNotifier
from app.services.stats_service import get_owner_stats
from app.services.strategy_factory import get_notifier

settings = get_settings()
router = APIRouter(prefix="/bookings", tags=["Bookings"])


def booking_filters(
    status_: Optional[str] = Query(None, alias="status"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    sort: Optional[str] = Query(None, description="latest | oldest; default is event date ascending"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
) -> BookingFilters:
    return BookingFilters(
        status=status_,
        start_date=start_date,
        end_date=end_date,
        sort=sort,
        page=page,
        limit=limit,
    )


def _page_response(page: BookingPage) -> BookingListResponse:
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in page.items],
        total=page.total,
        page=page.page,
        limit=page.limit,
        num_pages=page.num_pages,
    )


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking_endpoint(
    booking_data: BookingCreate,
    actor: Actor = Depends(get_current_actor),
    notifier: BookingNotifier = Depends(get_notifier),
    db: AsyncSession = Depends(get_db),
):
    """
    Request a booking. The price is computed server-side from the space's
    price policy; overlapping single-day requests are rejected with a
    Conflict, and concurrent creates on the same space are serialized.
    """
    return await create_booking(db, booking_data, actor.id, notifier)


@router.get("/", response_model=BookingListResponse)
async def list_my_bookings(
    filters: BookingFilters = Depends(booking_filters),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    """Bookings created by the authenticated client."""
    return _page_response(await list_bookings_for_client(db, actor.id, filters))


@router.get("/owner", response_model=BookingListResponse)
async def list_owner_bookings(
    filters: BookingFilters = Depends(booking_filters),
    actor: Actor = Depends(require_owner),
    db: AsyncSession = Depends(get_db),
):
    """Bookings across every space the authenticated owner lists."""
    return _page_response(await list_bookings_for_owner(db, actor.id, filters))


@router.get("/stats", response_model=BookingStatsResponse)
async def owner_stats(
    actor: Actor = Depends(require_owner),
    db: AsyncSession = Depends(get_db),
):
    return await get_owner_stats(db, actor.id)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking_endpoint(
    booking_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    return await get_booking(db, booking_id, actor.id)


@router.patch("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: int,
    update: BookingStatusUpdate,
    actor: Actor = Depends(require_owner),
    db: AsyncSession = Depends(get_db),
):
    """Owner-driven status change: confirm, decline, cancel or complete."""
    return await update_status(db, booking_id, update.status, actor.id, update.reason)
