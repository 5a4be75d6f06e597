# venue_booking/application/cost_calculator.py

from datetime import datetime
import math

from venue_booking.domain.exceptions import InvalidRequestError
from venue_booking.domain.pricing import (
    CostBreakdown,
    MealLine,
    PricingUnit,
    VenueLine,
    to_money,
)
from venue_booking.infrastructure.db.models import Meal, Venue

SECONDS_PER_UNIT = {
    PricingUnit.HOUR: 3600,
    PricingUnit.DAY: 86400,
}


class CostCalculator:
    """Prices a venue (and optional meal) for a time range and head count."""

    def calculate(
        self,
        venue: Venue,
        meal: Meal | None,
        people_count: int,
        start_time: datetime,
        end_time: datetime,
    ) -> CostBreakdown:
        if end_time <= start_time:
            raise InvalidRequestError("End time must be after start time", field="endTime")

        if people_count > venue.capacity:
            raise InvalidRequestError(
                f"Venue capacity is {venue.capacity}, requested {people_count} people",
                field="peopleCount",
            )

        venue_line = self._venue_line(venue, start_time, end_time)
        meal_line = self._meal_line(meal, people_count) if meal else None
        return CostBreakdown.build(venue_line, meal_line)

    def _venue_line(self, venue: Venue, start_time: datetime, end_time: datetime) -> VenueLine:
        unit = PricingUnit(venue.pricing_unit)
        rate = venue.rate
        if rate is None:
            raise InvalidRequestError(f"Venue has no price per {unit.value} configured")

        seconds = (end_time - start_time).total_seconds()
        requested = math.ceil(seconds / SECONDS_PER_UNIT[unit])
        minimum = venue.minimum_days if unit == PricingUnit.DAY else venue.minimum_hours
        billed = max(requested, minimum)

        return VenueLine(
            venue_id=venue.id,
            name=venue.name,
            pricing_unit=unit,
            rate=to_money(rate),
            requested_units=requested,
            minimum_units=minimum,
            billed_units=billed,
            cost=to_money(to_money(rate) * billed),
        )

    def _meal_line(self, meal: Meal, people_count: int) -> MealLine:
        if not meal.is_active:
            raise InvalidRequestError("Selected meal is not available", field="mealId")
        if people_count < meal.minimum_guests:
            raise InvalidRequestError(
                f"Meal requires at least {meal.minimum_guests} guests",
                field="peopleCount",
            )

        price = to_money(meal.price_per_person)
        return MealLine(
            meal_id=meal.id,
            name=meal.name,
            price_per_person=price,
            people=people_count,
            cost=to_money(price * people_count),
        )
