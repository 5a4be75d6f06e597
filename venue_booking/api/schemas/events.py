# venue_booking/api/schemas/events.py

from datetime import datetime, timezone
import os

from pydantic import Field, ValidationInfo, field_validator

from venue_booking.api.schemas.catalog import MealSummary, VenueSummary
from venue_booking.api.schemas.common import CamelModel, Money, OrmModel, UtcDatetime
from venue_booking.domain.state_machine import EventStatus

MIN_PEOPLE_COUNT = int(os.getenv("MIN_PEOPLE_COUNT", "50"))
MAX_PEOPLE_COUNT = 10000


class TimeRange(CamelModel):
    start_time: UtcDatetime
    end_time: UtcDatetime

    @field_validator("end_time")
    @classmethod
    def end_after_start(cls, value: datetime, info: ValidationInfo) -> datetime:
        start = info.data.get("start_time")
        if start is not None and value <= start:
            raise ValueError("End time must be after start time")
        return value


class FutureTimeRange(TimeRange):
    @field_validator("start_time")
    @classmethod
    def start_in_future(cls, value: datetime) -> datetime:
        if value <= datetime.now(timezone.utc):
            raise ValueError("Start time must be in the future")
        return value


class AvailabilityRequest(FutureTimeRange):
    venue_id: str = Field(min_length=1)


class BookingDetails(FutureTimeRange):
    venue_id: str = Field(min_length=1)
    meal_id: str | None = None
    people_count: int = Field(ge=MIN_PEOPLE_COUNT, le=MAX_PEOPLE_COUNT)
    event_type: str = Field(default="Event", min_length=1, max_length=100)


class EventUpdateRequest(CamelModel):
    people_count: int | None = Field(default=None, ge=MIN_PEOPLE_COUNT, le=MAX_PEOPLE_COUNT)
    meal_id: str | None = None


class EventStatusUpdate(CamelModel):
    status: EventStatus


class EventResponse(OrmModel):
    id: str
    user_id: str
    venue_id: str
    meal_id: str | None
    event_type: str
    people_count: int
    start_time: UtcDatetime
    end_time: UtcDatetime
    total_cost: Money | None
    status: EventStatus
    venue: VenueSummary | None = None
    meal: MealSummary | None = None
    created_at: UtcDatetime
    updated_at: UtcDatetime


class ConflictingEvent(OrmModel):
    id: str
    start_time: UtcDatetime
    end_time: UtcDatetime
    status: EventStatus


class AvailabilityResponse(CamelModel):
    venue_id: str
    available: bool
    message: str
    conflicting_events: list[ConflictingEvent]
