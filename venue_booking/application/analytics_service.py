# venue_booking/application/analytics_service.py

from collections import defaultdict
from datetime import datetime, timedelta, timezone
from decimal import Decimal
import logging

from sqlalchemy.orm import Session

from venue_booking.domain.exceptions import InvalidRequestError
from venue_booking.domain.pricing import to_money
from venue_booking.domain.state_machine import EventStatus, PaymentStatus
from venue_booking.infrastructure.repositories.analytics_repository import (
    AnalyticsRepository,
    DateRange,
)

logger = logging.getLogger(__name__)

RECENT_WINDOW = timedelta(days=30)
GROUPINGS = ("day", "week", "month", "year")


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def period_key(moment: datetime, group_by: str) -> str:
    moment = _as_utc(moment)
    if group_by == "day":
        return moment.date().isoformat()
    if group_by == "week":
        # Weeks start on Sunday.
        start = moment.date() - timedelta(days=(moment.weekday() + 1) % 7)
        return start.isoformat()
    if group_by == "month":
        return f"{moment.year:04d}-{moment.month:02d}"
    return f"{moment.year:04d}"


def _average(total: Decimal, count: int) -> Decimal:
    return to_money(total / count) if count else Decimal("0.00")


def _percentage(part, whole) -> float:
    return round(float(part) / float(whole) * 100, 2) if whole else 0.0


class AnalyticsService:
    """Admin reporting over events and payments."""

    def __init__(self, db: Session):
        self.db = db
        self.analytics_repository = AnalyticsRepository(db)

    @staticmethod
    def date_range(start_date: datetime | None, end_date: datetime | None) -> DateRange:
        if start_date and end_date and start_date >= end_date:
            raise InvalidRequestError("Start date must be before end date", field="startDate")
        return DateRange(start=start_date, end=end_date)

    def dashboard(self, window: DateRange) -> dict:
        status_counts = self.analytics_repository.event_status_counts(window)
        revenue = self.analytics_repository.successful_revenue(window)

        total_events = sum(status_counts.values())
        recent_events = self.analytics_repository.count_events(
            window,
            created_since=datetime.now(timezone.utc) - RECENT_WINDOW,
        )

        return {
            "total_events": total_events,
            "total_revenue": revenue,
            "average_event_value": _average(revenue, total_events),
            "total_users": self.analytics_repository.count_users(),
            "total_venues": self.analytics_repository.count_venues(),
            "total_meals": self.analytics_repository.count_meals(),
            "recent_events": recent_events,
            "pending_events": status_counts[EventStatus.PENDING],
            "confirmed_events": status_counts[EventStatus.CONFIRMED],
            "cancelled_events": status_counts[EventStatus.CANCELLED],
            "payments_requiring_reconciliation": self.analytics_repository.reconciliation_count(),
        }

    def revenue(self, window: DateRange, group_by: str = "month") -> list[dict]:
        if group_by not in GROUPINGS:
            raise InvalidRequestError(f"groupBy must be one of {', '.join(GROUPINGS)}", field="groupBy")

        grouped: dict[str, list] = defaultdict(lambda: [Decimal("0.00"), 0])
        for created_at, total_cost, status, _ in self.analytics_repository.event_rows(window):
            if EventStatus(status) == EventStatus.CANCELLED:
                continue
            bucket = grouped[period_key(created_at, group_by)]
            bucket[0] += to_money(total_cost or 0)
            bucket[1] += 1

        return [
            {
                "period": period,
                "total_revenue": total,
                "event_count": count,
                "average_event_value": _average(total, count),
            }
            for period, (total, count) in sorted(grouped.items())
        ]

    def top_venues(self, window: DateRange, limit: int = 10) -> list[dict]:
        return self.analytics_repository.top_venues(window, limit)

    def top_meals(self, window: DateRange, limit: int = 10) -> list[dict]:
        return self.analytics_repository.top_meals(window, limit)

    def event_types(self, window: DateRange) -> list[dict]:
        grouped: dict[str, list] = defaultdict(lambda: [0, Decimal("0.00")])
        total_events = 0
        for _, total_cost, _, event_type in self.analytics_repository.event_rows(window):
            bucket = grouped[event_type]
            bucket[0] += 1
            bucket[1] += to_money(total_cost or 0)
            total_events += 1

        results = [
            {
                "event_type": event_type,
                "count": count,
                "total_revenue": total,
                "average_value": _average(total, count),
                "percentage": _percentage(count, total_events),
            }
            for event_type, (count, total) in grouped.items()
        ]
        results.sort(key=lambda item: (-item["total_revenue"], item["event_type"]))
        return results

    def payments(self, window: DateRange) -> dict:
        rows = self.analytics_repository.payment_rows(window)

        by_method: dict[str, list] = defaultdict(lambda: [0, Decimal("0.00")])
        successful = refunded = 0
        revenue = Decimal("0.00")
        for method, status, amount in rows:
            status = PaymentStatus(status)
            amount = to_money(amount)
            if status == PaymentStatus.SUCCESS:
                successful += 1
                revenue += amount
                by_method[method][0] += 1
                by_method[method][1] += amount
            elif status == PaymentStatus.REFUNDED:
                refunded += 1

        # Refunded payments did succeed before they were reversed.
        settled = successful + refunded
        total = len(rows)

        breakdown = [
            {
                "method": method,
                "count": count,
                "revenue": amount,
                "percentage": _percentage(amount, revenue),
            }
            for method, (count, amount) in sorted(by_method.items())
        ]

        return {
            "total_revenue": revenue,
            "total_transactions": total,
            "successful_transactions": successful,
            "refunded_transactions": refunded,
            "success_rate": _percentage(settled, total),
            "refund_rate": _percentage(refunded, settled),
            "average_transaction_value": _average(revenue, successful),
            "payment_method_breakdown": breakdown,
        }
