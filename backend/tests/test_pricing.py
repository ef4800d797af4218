"""
Unit tests for the pricing engine. No database involved.
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from app.domain.enums import PriceUnit
from app.domain.intervals import multi_night_interval, single_day_interval
from app.domain.pricing import PricePolicy, compute_total_price, quantize_price


def _at(day: int, hour: int, minute: int = 0) -> datetime:
    return datetime(2030, 6, day, hour, minute, tzinfo=timezone.utc)


def _single(start_hour, start_minute, end_hour, end_minute, unit=PriceUnit.HOUR):
    return single_day_interval(
        date(2030, 6, 10), _at(10, start_hour, start_minute), _at(10, end_hour, end_minute), price_unit=unit
    )


def test_hourly_fractional_hours():
    policy = PricePolicy(Decimal("10000"), PriceUnit.HOUR)
    assert compute_total_price(policy, _single(14, 0, 16, 30)) == Decimal("25000")


def test_hourly_quarter_hour():
    policy = PricePolicy(Decimal("8000"), PriceUnit.HOUR)
    assert compute_total_price(policy, _single(9, 0, 9, 15)) == Decimal("2000")


@pytest.mark.parametrize("end_hour", [11, 15, 23])
def test_daily_single_day_is_flat(end_hour):
    policy = PricePolicy(Decimal("50000"), PriceUnit.DAY)
    assert compute_total_price(policy, _single(10, 0, end_hour, 0, PriceUnit.DAY)) == Decimal("50000")


def test_daily_whole_day_default():
    policy = PricePolicy(Decimal("50000"), PriceUnit.DAY)
    interval = single_day_interval(date(2030, 6, 10), price_unit=PriceUnit.DAY)
    assert compute_total_price(policy, interval) == Decimal("50000")


def test_daily_multi_night():
    """Monday to Wednesday is two nights."""
    policy = PricePolicy(Decimal("50000"), PriceUnit.DAY)
    interval = multi_night_interval(_at(10, 0), _at(12, 0))
    assert compute_total_price(policy, interval) == Decimal("100000")


def test_multi_night_partial_day_rounds_up():
    policy = PricePolicy(Decimal("50000"), PriceUnit.DAY)
    interval = multi_night_interval(_at(10, 10), _at(11, 2))
    assert interval.nights == 1
    assert compute_total_price(policy, interval) == Decimal("50000")


def test_multi_night_just_over_two_days_is_three_nights():
    policy = PricePolicy(Decimal("50000"), PriceUnit.DAY)
    interval = multi_night_interval(_at(10, 12), _at(12, 12, 1))
    assert compute_total_price(policy, interval) == Decimal("150000")


def test_hourly_multi_night_charges_full_days():
    policy = PricePolicy(Decimal("1000"), PriceUnit.HOUR)
    interval = multi_night_interval(_at(10, 12), _at(13, 12))
    assert compute_total_price(policy, interval) == Decimal("72000")


@pytest.mark.parametrize(
    "interval",
    [
        single_day_interval(date(2030, 6, 10), _at(10, 18), _at(10, 23), price_unit=PriceUnit.EVENT),
        multi_night_interval(_at(10, 12), _at(15, 12)),
    ],
)
def test_event_price_is_flat(interval):
    policy = PricePolicy(Decimal("200000"), PriceUnit.EVENT)
    assert compute_total_price(policy, interval) == Decimal("200000")


def test_free_space_costs_nothing():
    policy = PricePolicy(Decimal("0"), PriceUnit.HOUR)
    assert compute_total_price(policy, _single(8, 0, 18, 0)) == Decimal("0")


def test_twenty_minutes_is_unrounded_until_quantized():
    policy = PricePolicy(Decimal("10000"), PriceUnit.HOUR)
    total = compute_total_price(policy, _single(14, 0, 14, 20))
    assert total > Decimal("3333.33")
    assert quantize_price(total) == Decimal("3333.33")


@pytest.mark.parametrize(
    "raw, expected",
    [("1666.665", "1666.67"), ("1666.664", "1666.66"), ("5000", "5000.00")],
)
def test_quantize_price_rounds_half_up_to_minor_units(raw, expected):
    assert quantize_price(Decimal(raw)) == Decimal(expected)
