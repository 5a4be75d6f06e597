# venue_booking/api/schemas/catalog.py

from decimal import Decimal
import re

from pydantic import EmailStr, Field, field_validator, model_validator

from venue_booking.api.schemas.common import CamelModel, Money, OrmModel, UtcDatetime
from venue_booking.domain.pricing import MealType, PricingUnit, ServingStyle, VenueType

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
CLOCK_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
MAX_IMAGES = 10


class OpeningHours(CamelModel):
    open: str
    close: str

    @field_validator("open", "close")
    @classmethod
    def clock_time(cls, value: str) -> str:
        if not CLOCK_PATTERN.match(value):
            raise ValueError("Time must be in HH:MM format")
        return value


def _check_operating_hours(value: dict[str, OpeningHours] | None) -> dict[str, OpeningHours] | None:
    if value is None:
        return value
    unknown = [day for day in value if day not in WEEKDAYS]
    if unknown:
        raise ValueError(f"Unknown weekday(s): {', '.join(sorted(unknown))}")
    return value


# -----------------------------
# Venues
# -----------------------------
class VenueBase(CamelModel):
    description: str | None = Field(default=None, max_length=2000)
    address: str = Field(min_length=5, max_length=500)
    city: str = Field(min_length=2, max_length=100)
    state: str = Field(min_length=2, max_length=100)
    country: str = Field(default="Bangladesh", max_length=100)
    zip_code: str | None = Field(default=None, max_length=20)
    capacity: int = Field(ge=1, le=100000)
    venue_type: VenueType
    pricing_unit: PricingUnit = PricingUnit.HOUR
    price_per_hour: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    price_per_day: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    minimum_hours: int = Field(default=4, ge=1, le=24)
    minimum_days: int = Field(default=1, ge=1, le=365)
    security_deposit: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    facilities: list[str] = Field(default_factory=list)
    amenities: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list, max_length=MAX_IMAGES)
    catering_allowed: bool = True
    decoration_allowed: bool = True
    alcohol_allowed: bool = False
    operating_hours: dict[str, OpeningHours] | None = None
    contact_person: str | None = Field(default=None, max_length=100)
    contact_phone: str | None = Field(default=None, max_length=20)
    contact_email: EmailStr | None = None
    is_active: bool = True

    @field_validator("operating_hours")
    @classmethod
    def known_weekdays(cls, value):
        return _check_operating_hours(value)


class VenueCreate(VenueBase):
    name: str = Field(min_length=2, max_length=150)

    @model_validator(mode="after")
    def rate_for_unit(self) -> "VenueCreate":
        if self.pricing_unit == PricingUnit.HOUR and self.price_per_hour is None:
            raise ValueError("pricePerHour is required when pricingUnit is hour")
        if self.pricing_unit == PricingUnit.DAY and self.price_per_day is None:
            raise ValueError("pricePerDay is required when pricingUnit is day")
        return self


class VenueUpdate(CamelModel):
    """Every field optional; only the fields sent are changed."""

    name: str | None = Field(default=None, min_length=2, max_length=150)
    description: str | None = Field(default=None, max_length=2000)
    address: str | None = Field(default=None, min_length=5, max_length=500)
    city: str | None = Field(default=None, min_length=2, max_length=100)
    state: str | None = Field(default=None, min_length=2, max_length=100)
    country: str | None = Field(default=None, max_length=100)
    zip_code: str | None = Field(default=None, max_length=20)
    capacity: int | None = Field(default=None, ge=1, le=100000)
    venue_type: VenueType | None = None
    pricing_unit: PricingUnit | None = None
    price_per_hour: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    price_per_day: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    minimum_hours: int | None = Field(default=None, ge=1, le=24)
    minimum_days: int | None = Field(default=None, ge=1, le=365)
    security_deposit: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    facilities: list[str] | None = None
    amenities: list[str] | None = None
    images: list[str] | None = Field(default=None, max_length=MAX_IMAGES)
    catering_allowed: bool | None = None
    decoration_allowed: bool | None = None
    alcohol_allowed: bool | None = None
    operating_hours: dict[str, OpeningHours] | None = None
    contact_person: str | None = Field(default=None, max_length=100)
    contact_phone: str | None = Field(default=None, max_length=20)
    contact_email: EmailStr | None = None
    is_active: bool | None = None

    @field_validator("operating_hours")
    @classmethod
    def known_weekdays(cls, value):
        return _check_operating_hours(value)


class VenueResponse(OrmModel):
    id: str
    name: str
    description: str | None
    address: str
    city: str
    state: str
    country: str
    zip_code: str | None
    capacity: int
    venue_type: VenueType
    pricing_unit: PricingUnit
    price_per_hour: Money | None
    price_per_day: Money | None
    minimum_hours: int
    minimum_days: int
    security_deposit: Money | None
    facilities: list[str]
    amenities: list[str]
    images: list[str]
    catering_allowed: bool
    decoration_allowed: bool
    alcohol_allowed: bool
    operating_hours: dict | None
    contact_person: str | None
    contact_phone: str | None
    contact_email: str | None
    is_active: bool
    created_at: UtcDatetime
    updated_at: UtcDatetime


class VenueSummary(OrmModel):
    id: str
    name: str
    city: str
    capacity: int
    pricing_unit: PricingUnit


# -----------------------------
# Meals
# -----------------------------
class MealCreate(CamelModel):
    name: str = Field(min_length=2, max_length=100)
    description: str | None = Field(default=None, max_length=2000)
    type: MealType
    cuisine: str | None = Field(default=None, max_length=50)
    serving_style: ServingStyle
    price_per_person: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    minimum_guests: int = Field(default=50, ge=1, le=10000)
    special_dietary: list[str] = Field(default_factory=list)
    menu_items: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list, max_length=MAX_IMAGES)
    is_active: bool = True
    is_popular: bool = False


class MealUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=2, max_length=100)
    description: str | None = Field(default=None, max_length=2000)
    type: MealType | None = None
    cuisine: str | None = Field(default=None, max_length=50)
    serving_style: ServingStyle | None = None
    price_per_person: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    minimum_guests: int | None = Field(default=None, ge=1, le=10000)
    special_dietary: list[str] | None = None
    menu_items: list[str] | None = None
    images: list[str] | None = Field(default=None, max_length=MAX_IMAGES)
    is_active: bool | None = None
    is_popular: bool | None = None


class MealResponse(OrmModel):
    id: str
    name: str
    description: str | None
    type: MealType
    cuisine: str | None
    serving_style: ServingStyle
    price_per_person: Money
    minimum_guests: int
    special_dietary: list[str]
    menu_items: list[str]
    images: list[str]
    is_active: bool
    is_popular: bool
    created_at: UtcDatetime
    updated_at: UtcDatetime


class MealSummary(OrmModel):
    id: str
    name: str
    type: MealType
    price_per_person: Money
