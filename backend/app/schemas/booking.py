"""
Pydantic schemas for booking-related request/response validation.

BookingCreate is a tagged union on `booking_kind`: a single-day request
carries event_date (+ optional start/end times), a multi-night request
carries check-in/check-out. Price is never accepted from the client.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, EmailStr, Field


class BookingBase(BaseModel):
    space_id: int
    client_name: str = Field(..., min_length=1, max_length=255)
    client_email: EmailStr
    client_phone: str = Field(..., min_length=5, max_length=32)
    guests: Optional[int] = Field(None, ge=1, le=100000)
    event_type: Optional[str] = Field(None, max_length=100)
    special_requests: Optional[str] = Field(None, max_length=1000)


class SingleBookingCreate(BookingBase):
    booking_kind: Literal["single"]
    event_date: date
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None


class MultiNightBookingCreate(BookingBase):
    booking_kind: Literal["multi_night"]
    check_in_date: datetime
    check_out_date: datetime


BookingCreate = Annotated[
    Union[SingleBookingCreate, MultiNightBookingCreate],
    Field(discriminator="booking_kind"),
]


class BookingStatusUpdate(BaseModel):
    status: str
    reason: Optional[str] = Field(None, max_length=500)


class BookingResponse(BaseModel):
    id: int
    space_id: int
    user_id: int
    client_name: str
    client_email: str
    client_phone: str
    booking_kind: str
    event_date: Optional[date]
    start_time: Optional[datetime]
    end_time: Optional[datetime]
    check_in_date: Optional[datetime]
    check_out_date: Optional[datetime]
    attendee_count: int
    event_type: Optional[str]
    special_requests: Optional[str]
    total_price: Decimal
    status: str
    cancellation_reason: Optional[str]
    payment_status: str
    payment_reference: Optional[str]
    payment_transaction_id: Optional[str]
    payment_provider: Optional[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class BookingListResponse(BaseModel):
    bookings: list[BookingResponse]
    total: int
    page: int
    limit: int
    num_pages: int


class BookingStatsResponse(BaseModel):
    total: int
    pending: int
    confirmed: int
    declined: int
    cancelled: int
    completed: int
    upcoming: int
    revenue: Decimal

    model_config = {"from_attributes": True}
