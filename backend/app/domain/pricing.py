"""
Pricing engine: total price from a space's price policy and a booking interval.

| unit  | single-day                 | multi-night              |
|-------|----------------------------|--------------------------|
| hour  | amount * hours (fractional)| amount * 24 * nights     |
| day   | amount                     | amount * nights          |
| event | amount                     | amount                   |

Nights round partial days up. compute_total_price applies no rounding;
quantize_price rounds the result half-up to currency minor units (2 places)
and is applied once, when the booking total is fixed at creation.
Intervals reaching this module are already validated (start < end).
"""

from dataclasses import dataclass
from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal

from app.domain.enums import PriceUnit
from app.domain.intervals import BookingInterval, MultiNightInterval

SECONDS_PER_HOUR = Decimal(3600)
HOURS_PER_NIGHT = 24
MINOR_UNIT = Decimal("0.01")


@dataclass(frozen=True)
class PricePolicy:
    amount: Decimal
    unit: PriceUnit


def _hours(duration: timedelta) -> Decimal:
    seconds = Decimal(duration.days * 86400 + duration.seconds)
    seconds += Decimal(duration.microseconds) / Decimal(1_000_000)
    return seconds / SECONDS_PER_HOUR


def compute_total_price(policy: PricePolicy, interval: BookingInterval) -> Decimal:
    amount = Decimal(policy.amount)
    unit = PriceUnit(policy.unit)

    if isinstance(interval, MultiNightInterval):
        if unit == PriceUnit.HOUR:
            return amount * HOURS_PER_NIGHT * interval.nights
        if unit == PriceUnit.DAY:
            return amount * interval.nights
        return amount

    if unit == PriceUnit.HOUR:
        return amount * _hours(interval.end - interval.start)
    return amount


def quantize_price(value: Decimal) -> Decimal:
    return Decimal(value).quantize(MINOR_UNIT, rounding=ROUND_HALF_UP)
