# venue_booking/infrastructure/repositories/analytics_repository.py

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import Session
from sqlalchemy import Select, func, select

from venue_booking.domain.state_machine import EventStatus, PaymentStatus
from venue_booking.infrastructure.db.models import Event, Meal, Payment, User, Venue


@dataclass(frozen=True)
class DateRange:
    start: datetime | None = None
    end: datetime | None = None

    def apply(self, stmt: Select, column) -> Select:
        if self.start is not None:
            stmt = stmt.where(column >= self.start)
        if self.end is not None:
            stmt = stmt.where(column <= self.end)
        return stmt


def _money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(Decimal("0.01"))


class AnalyticsRepository:
    """Read-only aggregate queries for the admin dashboards."""

    def __init__(self, db: Session):
        self.db = db

    def event_rows(self, window: DateRange) -> list[tuple]:
        """(created_at, total_cost, status, event_type) for every event in range."""
        stmt = select(Event.created_at, Event.total_cost, Event.status, Event.event_type)
        stmt = window.apply(stmt, Event.created_at)
        return [tuple(row) for row in self.db.execute(stmt).all()]

    def successful_revenue(self, window: DateRange) -> Decimal:
        stmt = select(func.coalesce(func.sum(Payment.amount), 0)).where(
            Payment.status == PaymentStatus.SUCCESS
        )
        stmt = window.apply(stmt, Payment.created_at)
        return _money(self.db.execute(stmt).scalar_one())

    def count_events(self, window: DateRange, created_since: datetime | None = None) -> int:
        stmt = window.apply(select(func.count(Event.id)), Event.created_at)
        if created_since is not None:
            stmt = stmt.where(Event.created_at >= created_since)
        return self.db.execute(stmt).scalar_one()

    def event_status_counts(self, window: DateRange) -> dict[EventStatus, int]:
        stmt = select(Event.status, func.count(Event.id)).group_by(Event.status)
        stmt = window.apply(stmt, Event.created_at)
        counts = {status: 0 for status in EventStatus}
        for status, count in self.db.execute(stmt).all():
            counts[EventStatus(status)] = count
        return counts

    def top_venues(self, window: DateRange, limit: int) -> list[dict]:
        revenue = func.coalesce(func.sum(Event.total_cost), 0)
        stmt = (
            select(Venue.id, Venue.name, func.count(Event.id), revenue)
            .join(Event, Event.venue_id == Venue.id)
            .where(Event.status != EventStatus.CANCELLED)
            .group_by(Venue.id, Venue.name)
            .order_by(revenue.desc(), Venue.name.asc())
            .limit(limit)
        )
        stmt = window.apply(stmt, Event.created_at)
        results = []
        for venue_id, name, event_count, total in self.db.execute(stmt).all():
            total = _money(total)
            results.append(
                {
                    "id": venue_id,
                    "name": name,
                    "event_count": event_count,
                    "total_revenue": total,
                    "average_event_value": _money(total / event_count) if event_count else _money(0),
                }
            )
        return results

    def top_meals(self, window: DateRange, limit: int) -> list[dict]:
        # Meal revenue is the catering share only: price_per_person x guests.
        revenue = func.coalesce(func.sum(Meal.price_per_person * Event.people_count), 0)
        stmt = (
            select(Meal.id, Meal.name, func.count(Event.id), revenue)
            .join(Event, Event.meal_id == Meal.id)
            .where(Event.status != EventStatus.CANCELLED)
            .group_by(Meal.id, Meal.name)
            .order_by(revenue.desc(), Meal.name.asc())
            .limit(limit)
        )
        stmt = window.apply(stmt, Event.created_at)
        results = []
        for meal_id, name, order_count, total in self.db.execute(stmt).all():
            total = _money(total)
            results.append(
                {
                    "id": meal_id,
                    "name": name,
                    "order_count": order_count,
                    "total_revenue": total,
                    "average_order_value": _money(total / order_count) if order_count else _money(0),
                }
            )
        return results

    def payment_rows(self, window: DateRange) -> list[tuple]:
        """(method, status, amount) for every payment in range."""
        stmt = select(Payment.method, Payment.status, Payment.amount)
        stmt = window.apply(stmt, Payment.created_at)
        return [tuple(row) for row in self.db.execute(stmt).all()]

    def reconciliation_count(self) -> int:
        stmt = select(func.count(Payment.id)).where(Payment.requires_reconciliation.is_(True))
        return self.db.execute(stmt).scalar_one()

    def count_users(self) -> int:
        return self.db.execute(select(func.count(User.id))).scalar_one()

    def count_venues(self) -> int:
        return self.db.execute(select(func.count(Venue.id))).scalar_one()

    def count_meals(self) -> int:
        return self.db.execute(select(func.count(Meal.id))).scalar_one()
