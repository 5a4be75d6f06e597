# venue_booking/infrastructure/repositories/event_repository.py

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session
from sqlalchemy import func, select

from venue_booking.domain.state_machine import EventStatus
from venue_booking.infrastructure.db.models import Event
from venue_booking.infrastructure.repositories.base import Page, order_clauses, paginate


@dataclass(frozen=True)
class EventFilters:
    user_id: str | None = None
    venue_id: str | None = None
    status: EventStatus | None = None
    event_type: str | None = None


SORTABLE_COLUMNS = {
    "created_at": Event.created_at,
    "start_time": Event.start_time,
    "people_count": Event.people_count,
    "total_cost": Event.total_cost,
}


class EventRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, event_id: str) -> Event | None:
        stmt = select(Event).where(Event.id == event_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def find_conflicts(
        self,
        venue_id: str,
        start_time: datetime,
        end_time: datetime,
        exclude_event_id: str | None = None,
    ) -> list[Event]:
        """
        Live (non-cancelled) events whose range overlaps [start_time, end_time).
        Back-to-back bookings do not conflict.
        """
        stmt = (
            select(Event)
            .where(Event.venue_id == venue_id)
            .where(Event.status != EventStatus.CANCELLED)
            .where(Event.start_time < end_time)
            .where(Event.end_time > start_time)
            .order_by(Event.start_time)
        )
        if exclude_event_id:
            stmt = stmt.where(Event.id != exclude_event_id)
        return list(self.db.execute(stmt).scalars().all())

    def create(
        self,
        user_id: str,
        venue_id: str,
        meal_id: str | None,
        event_type: str,
        people_count: int,
        start_time: datetime,
        end_time: datetime,
        total_cost,
        status: EventStatus = EventStatus.PENDING,
    ) -> Event:
        event = Event(
            user_id=user_id,
            venue_id=venue_id,
            meal_id=meal_id,
            event_type=event_type,
            people_count=people_count,
            start_time=start_time,
            end_time=end_time,
            total_cost=total_cost,
            status=status,
        )
        self.db.add(event)
        self.db.flush()
        return event

    def update_status(self, event: Event, new_status: EventStatus) -> None:
        event.status = new_status
        self.db.flush()

    def update(self, event: Event, **fields) -> Event:
        for field, value in fields.items():
            setattr(event, field, value)
        self.db.flush()
        return event

    def count_by_status(self) -> dict[EventStatus, int]:
        stmt = select(Event.status, func.count(Event.id)).group_by(Event.status)
        counts = {status: 0 for status in EventStatus}
        for status, count in self.db.execute(stmt).all():
            counts[EventStatus(status)] = count
        return counts

    def find_many(
        self,
        filters: EventFilters,
        page: int,
        limit: int,
        sort_by: str = "start_time",
        sort_order: str = "desc",
    ) -> Page[Event]:
        stmt = select(Event)

        if filters.user_id:
            stmt = stmt.where(Event.user_id == filters.user_id)
        if filters.venue_id:
            stmt = stmt.where(Event.venue_id == filters.venue_id)
        if filters.status:
            stmt = stmt.where(Event.status == filters.status)
        if filters.event_type:
            pattern = f"%{filters.event_type.lower()}%"
            stmt = stmt.where(func.lower(Event.event_type).like(pattern))

        sort_column = SORTABLE_COLUMNS.get(sort_by, Event.start_time)
        return paginate(
            self.db,
            stmt,
            page,
            limit,
            order_clauses(sort_column, sort_order, Event),
        )
