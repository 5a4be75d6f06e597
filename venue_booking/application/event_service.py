# venue_booking/application/event_service.py

from dataclasses import dataclass, field
from datetime import datetime
import logging

from sqlalchemy.orm import Session

from venue_booking.application.cost_calculator import CostCalculator
from venue_booking.domain.exceptions import (
    InvalidRequestError,
    NotFoundError,
    PermissionDeniedError,
    VenueUnavailableError,
)
from venue_booking.domain.state_machine import EventStateMachine, EventStatus
from venue_booking.infrastructure.db.models import Event, Meal, Venue
from venue_booking.infrastructure.repositories.base import Page
from venue_booking.infrastructure.repositories.event_repository import EventFilters, EventRepository
from venue_booking.infrastructure.repositories.meal_repository import MealRepository
from venue_booking.infrastructure.repositories.venue_repository import VenueRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Availability:
    venue: Venue
    available: bool
    message: str
    conflicts: list[Event] = field(default_factory=list)


class EventService:
    """Availability checks and event lifecycle."""

    def __init__(
        self,
        db: Session,
        event_repository: EventRepository | None = None,
        calculator: CostCalculator | None = None,
    ):
        self.db = db
        self.event_repository = event_repository or EventRepository(db)
        self.venue_repository = VenueRepository(db)
        self.meal_repository = MealRepository(db)
        self.calculator = calculator or CostCalculator()

    def check_availability(
        self,
        venue_id: str,
        start_time: datetime,
        end_time: datetime,
    ) -> Availability:
        if end_time <= start_time:
            raise InvalidRequestError("End time must be after start time", field="endTime")

        venue = self.venue_repository.get_by_id(venue_id)
        if not venue:
            raise NotFoundError("Venue not found")
        if not venue.is_active:
            return Availability(venue, False, "Venue is not currently accepting bookings")

        conflicts = self.event_repository.find_conflicts(venue.id, start_time, end_time)
        if conflicts:
            return Availability(
                venue,
                False,
                "Venue is already booked for the selected time",
                conflicts,
            )
        return Availability(venue, True, "Venue is available for the selected time")

    # -----------------------------
    # Reservations
    # -----------------------------
    def create_event(
        self,
        user_id: str,
        venue_id: str,
        meal_id: str | None,
        event_type: str,
        people_count: int,
        start_time: datetime,
        end_time: datetime,
    ) -> Event:
        """Holds the slot as a pending event until it is paid for."""
        venue = self.venue_repository.lock(venue_id)
        if not venue:
            raise NotFoundError("Venue not found")
        if not venue.is_active:
            raise VenueUnavailableError("Venue is not currently accepting bookings")

        meal = self._load_meal(meal_id)
        breakdown = self.calculator.calculate(venue, meal, people_count, start_time, end_time)

        if self.event_repository.find_conflicts(venue.id, start_time, end_time):
            logger.warning("Reservation rejected, venue %s is taken for %s - %s", venue.id, start_time, end_time)
            raise VenueUnavailableError("Venue is already booked for the selected time")

        event = self.event_repository.create(
            user_id=user_id,
            venue_id=venue.id,
            meal_id=meal_id,
            event_type=event_type,
            people_count=people_count,
            start_time=start_time,
            end_time=end_time,
            total_cost=breakdown.total,
            status=EventStatus.PENDING,
        )
        logger.info("Reserved event %s at venue %s for user %s", event.id, venue.id, user_id)
        return event

    def update_event(self, event_id: str, user_id: str, changes: dict) -> Event:
        """
        Changes the head count and/or meal of a pending event and
        re-prices it. `changes` holds only the fields the caller sent;
        an explicit `meal_id=None` drops the meal.
        """
        if not changes:
            raise InvalidRequestError("Provide peopleCount or mealId to update")

        event = self.get_event(event_id)
        if event.user_id != user_id:
            raise PermissionDeniedError("You can only update your own events")
        if event.status != EventStatus.PENDING:
            raise InvalidRequestError(
                f"Only pending events can be changed (current status: {event.status.value})"
            )

        people_count = changes.get("people_count") or event.people_count
        meal_id = changes["meal_id"] if "meal_id" in changes else event.meal_id
        meal = self._load_meal(meal_id)

        venue = self.venue_repository.get_by_id(event.venue_id)
        breakdown = self.calculator.calculate(venue, meal, people_count, event.start_time, event.end_time)

        self.event_repository.update(
            event,
            people_count=people_count,
            meal_id=meal_id,
            meal=meal,
            total_cost=breakdown.total,
        )
        logger.info("Event %s updated: people=%s meal=%s total=%s", event.id, people_count, meal_id, breakdown.total)
        return event

    def _load_meal(self, meal_id: str | None) -> Meal | None:
        if not meal_id:
            return None
        meal = self.meal_repository.get_by_id(meal_id)
        if not meal:
            raise NotFoundError("Meal not found")
        return meal

    def list_user_events(
        self,
        user_id: str,
        page: int,
        limit: int,
        status: EventStatus | None = None,
        event_type: str | None = None,
        sort_by: str = "start_time",
        sort_order: str = "desc",
    ) -> Page[Event]:
        filters = EventFilters(user_id=user_id, status=status, event_type=event_type)
        return self.event_repository.find_many(filters, page, limit, sort_by, sort_order)

    def get_user_event(self, event_id: str, user_id: str) -> Event:
        event = self.get_event(event_id)
        if event.user_id != user_id:
            raise PermissionDeniedError("You can only view your own events")
        return event

    def list_all_events(
        self,
        filters: EventFilters,
        page: int,
        limit: int,
        sort_by: str = "start_time",
        sort_order: str = "desc",
    ) -> Page[Event]:
        return self.event_repository.find_many(filters, page, limit, sort_by, sort_order)

    def get_event(self, event_id: str) -> Event:
        event = self.event_repository.get_by_id(event_id)
        if not event:
            raise NotFoundError("Event not found")
        return event

    def update_event_status(self, event_id: str, new_status: EventStatus) -> Event:
        event = self.get_event(event_id)
        EventStateMachine.validate_transition(EventStatus(event.status), new_status)

        previous = event.status
        self.event_repository.update_status(event, new_status)
        logger.info("Event %s moved %s -> %s", event.id, previous.value, new_status.value)
        return event
