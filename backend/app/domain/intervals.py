"""
Booking interval shapes and the half-open overlap predicate.

A booking occupies exactly one of two shapes:

- SingleDayInterval: an event date plus a start/end instant on that date.
- MultiNightInterval: a check-in and check-out instant.

Both reduce to a comparable `[start, end)` window in UTC, which is what
conflict detection, listing filters and statistics operate on. All
instants are normalised to UTC; naive datetimes are taken to be UTC.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import ClassVar, Optional, Union

from app.core.exceptions import ValidationError
from app.domain.enums import BookingKind, PriceUnit

ONE_DAY = timedelta(days=1)


def to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def overlaps(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """Half-open overlap: [a) and [b) share at least one instant."""
    return start_a < end_b and start_b < end_a


@dataclass(frozen=True)
class SingleDayInterval:
    event_date: date
    start_time: datetime
    end_time: datetime

    kind: ClassVar[BookingKind] = BookingKind.SINGLE

    @property
    def start(self) -> datetime:
        return self.start_time

    @property
    def end(self) -> datetime:
        return self.end_time

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time


@dataclass(frozen=True)
class MultiNightInterval:
    check_in: datetime
    check_out: datetime

    kind: ClassVar[BookingKind] = BookingKind.MULTI_NIGHT

    @property
    def start(self) -> datetime:
        return self.check_in

    @property
    def end(self) -> datetime:
        return self.check_out

    @property
    def nights(self) -> int:
        """Whole days between check-in and check-out, partial days rounded up."""
        whole, rest = divmod(self.check_out - self.check_in, ONE_DAY)
        return whole + (1 if rest else 0)


BookingInterval = Union[SingleDayInterval, MultiNightInterval]


def single_day_interval(
    event_date: date,
    start_time: Optional[datetime] = None,
    end_time: Optional[datetime] = None,
    price_unit: PriceUnit = PriceUnit.DAY,
) -> SingleDayInterval:
    """
    Build and validate a single-day interval.

    Hourly-priced spaces require explicit start and end times. For day and
    event pricing the times are optional and default to the whole day
    `[event_date 00:00, event_date + 1 00:00)`.
    """
    if (start_time is None) != (end_time is None):
        raise ValidationError("Provide both start time and end time, or neither")

    if start_time is None:
        if price_unit == PriceUnit.HOUR:
            raise ValidationError("Start time and end time are required for hourly priced spaces")
        day_start = start_of_day(event_date)
        return SingleDayInterval(event_date=event_date, start_time=day_start, end_time=day_start + ONE_DAY)

    start = to_utc(start_time)
    end = to_utc(end_time)
    if start >= end:
        raise ValidationError("End time must be after start time")

    # The event date is the caller's calendar day, so compare in the offset they sent
    local_start = start_time if start_time.tzinfo else start
    local_end = end_time if end_time.tzinfo else end
    ends_at_midnight = local_end.date() == event_date + ONE_DAY and local_end.time() == time.min
    if local_start.date() != event_date or (local_end.date() != event_date and not ends_at_midnight):
        raise ValidationError(
            "Start time and end time must fall on the event date",
            details={"event_date": event_date.isoformat()},
        )
    return SingleDayInterval(event_date=event_date, start_time=start, end_time=end)


def multi_night_interval(check_in: datetime, check_out: datetime) -> MultiNightInterval:
    start = to_utc(check_in)
    end = to_utc(check_out)
    if start >= end:
        raise ValidationError("Check-out date must be after check-in date")
    return MultiNightInterval(check_in=start, check_out=end)
