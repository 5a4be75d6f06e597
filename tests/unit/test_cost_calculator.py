# tests/unit/test_cost_calculator.py

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from venue_booking.application.cost_calculator import CostCalculator
from venue_booking.domain.exceptions import InvalidRequestError
from venue_booking.domain.pricing import MealType, PricingUnit, ServingStyle, VenueType
from venue_booking.infrastructure.db.models import Meal, Venue

START = datetime(2030, 6, 1, 10, 0, tzinfo=timezone.utc)


def _venue(**overrides) -> Venue:
    fields = {
        "id": "venue-1",
        "name": "Grand Ballroom",
        "address": "123 Main Street",
        "city": "Dhaka",
        "state": "Dhaka Division",
        "capacity": 500,
        "venue_type": VenueType.INDOOR,
        "pricing_unit": PricingUnit.HOUR,
        "price_per_hour": Decimal("250.00"),
        "minimum_hours": 4,
        "minimum_days": 1,
        "is_active": True,
    }
    fields.update(overrides)
    return Venue(**fields)


def _meal(**overrides) -> Meal:
    fields = {
        "id": "meal-1",
        "name": "Vegetarian Deluxe",
        "type": MealType.VEG,
        "serving_style": ServingStyle.PLATED,
        "price_per_person": Decimal("325.00"),
        "minimum_guests": 50,
        "is_active": True,
    }
    fields.update(overrides)
    return Meal(**fields)


@pytest.fixture
def calculator():
    return CostCalculator()


def test_short_booking_is_billed_at_minimum_hours(calculator):
    breakdown = calculator.calculate(_venue(), None, 100, START, START + timedelta(hours=2))

    assert breakdown.venue.requested_units == 2
    assert breakdown.venue.billed_units == 4
    assert breakdown.venue_cost == Decimal("1000.00")
    assert breakdown.meal_cost == Decimal("0.00")
    assert breakdown.subtotal == Decimal("1000.00")
    assert breakdown.tax == Decimal("80.00")
    assert breakdown.service_fee == Decimal("50.00")
    assert breakdown.total == Decimal("1130.00")


def test_one_hour_against_four_hour_minimum(calculator):
    breakdown = calculator.calculate(_venue(), None, 60, START, START + timedelta(hours=1))

    assert breakdown.venue.billed_units == 4


def test_partial_hours_round_up(calculator):
    breakdown = calculator.calculate(_venue(), None, 100, START, START + timedelta(hours=5, minutes=10))

    assert breakdown.venue.requested_units == 6
    assert breakdown.venue_cost == Decimal("1500.00")


def test_meal_cost_is_per_person(calculator):
    breakdown = calculator.calculate(_venue(), _meal(), 100, START, START + timedelta(hours=4))

    assert breakdown.meal.cost == Decimal("32500.00")
    assert breakdown.subtotal == breakdown.venue_cost + breakdown.meal_cost
    assert breakdown.total == breakdown.subtotal + breakdown.tax + breakdown.service_fee
    assert breakdown.tax == (breakdown.subtotal * Decimal("0.08")).quantize(Decimal("0.01"))


def test_daily_venue_bills_whole_days(calculator):
    venue = _venue(
        pricing_unit=PricingUnit.DAY,
        price_per_hour=None,
        price_per_day=Decimal("2400.00"),
        minimum_days=1,
    )

    breakdown = calculator.calculate(venue, None, 100, START, START + timedelta(hours=30))

    assert breakdown.venue.pricing_unit == PricingUnit.DAY
    assert breakdown.venue.billed_units == 2
    assert breakdown.venue_cost == Decimal("4800.00")


def test_end_before_start_is_rejected(calculator):
    with pytest.raises(InvalidRequestError) as exc_info:
        calculator.calculate(_venue(), None, 100, START, START)

    assert exc_info.value.field == "endTime"


def test_people_over_capacity_is_rejected(calculator):
    with pytest.raises(InvalidRequestError) as exc_info:
        calculator.calculate(_venue(capacity=80), None, 100, START, START + timedelta(hours=4))

    assert exc_info.value.field == "peopleCount"


def test_meal_minimum_guests(calculator):
    with pytest.raises(InvalidRequestError) as exc_info:
        calculator.calculate(_venue(), _meal(minimum_guests=150), 100, START, START + timedelta(hours=4))

    assert exc_info.value.field == "peopleCount"


def test_inactive_meal_is_rejected(calculator):
    with pytest.raises(InvalidRequestError) as exc_info:
        calculator.calculate(_venue(), _meal(is_active=False), 100, START, START + timedelta(hours=4))

    assert exc_info.value.field == "mealId"


def test_venue_without_rate_for_its_unit(calculator):
    venue = _venue(pricing_unit=PricingUnit.DAY, price_per_day=None)

    with pytest.raises(InvalidRequestError):
        calculator.calculate(venue, None, 100, START, START + timedelta(hours=4))
