# venue_booking/api/routes/params.py

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Literal

from fastapi import Query
from pydantic.alias_generators import to_snake

from venue_booking.api.schemas.common import ensure_utc
from venue_booking.domain.pricing import MealType, ServingStyle, VenueType
from venue_booking.infrastructure.repositories.meal_repository import MealFilters
from venue_booking.infrastructure.repositories.venue_repository import VenueFilters


@dataclass(frozen=True)
class Paging:
    page: int
    limit: int
    sort_by: str
    sort_order: str


def get_paging(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: str = Query("createdAt", alias="sortBy", max_length=50),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
) -> Paging:
    return Paging(page=page, limit=limit, sort_by=to_snake(sort_by), sort_order=sort_order)


def venue_filters(
    search: str | None = Query(None, max_length=100),
    venue_type: VenueType | None = Query(None, alias="venueType"),
    city: str | None = Query(None, max_length=100),
    min_capacity: int | None = Query(None, alias="minCapacity", ge=1),
    max_capacity: int | None = Query(None, alias="maxCapacity", ge=1),
    min_price: Decimal | None = Query(None, alias="minPrice", ge=0),
    max_price: Decimal | None = Query(None, alias="maxPrice", ge=0),
) -> VenueFilters:
    return VenueFilters(
        search=search or None,
        venue_type=venue_type,
        city=city or None,
        min_capacity=min_capacity,
        max_capacity=max_capacity,
        min_price=min_price,
        max_price=max_price,
    )


def meal_filters(
    search: str | None = Query(None, max_length=100),
    type: MealType | None = Query(None),
    serving_style: ServingStyle | None = Query(None, alias="servingStyle"),
    cuisine: str | None = Query(None, max_length=50),
    min_price: Decimal | None = Query(None, alias="minPrice", ge=0),
    max_price: Decimal | None = Query(None, alias="maxPrice", ge=0),
) -> MealFilters:
    return MealFilters(
        search=search or None,
        type=type,
        serving_style=serving_style,
        cuisine=cuisine or None,
        min_price=min_price,
        max_price=max_price,
    )


@dataclass(frozen=True)
class DateWindow:
    start_date: datetime | None
    end_date: datetime | None


def date_window(
    start_date: datetime | None = Query(None, alias="startDate"),
    end_date: datetime | None = Query(None, alias="endDate"),
) -> DateWindow:
    return DateWindow(
        start_date=ensure_utc(start_date) if start_date else None,
        end_date=ensure_utc(end_date) if end_date else None,
    )
