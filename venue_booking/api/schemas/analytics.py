# venue_booking/api/schemas/analytics.py

from venue_booking.api.schemas.common import CamelModel, Money


class DashboardStats(CamelModel):
    total_events: int
    total_revenue: Money
    average_event_value: Money
    total_users: int
    total_venues: int
    total_meals: int
    recent_events: int
    pending_events: int
    confirmed_events: int
    cancelled_events: int
    payments_requiring_reconciliation: int


class RevenuePoint(CamelModel):
    period: str
    total_revenue: Money
    event_count: int
    average_event_value: Money


class TopVenue(CamelModel):
    id: str
    name: str
    event_count: int
    total_revenue: Money
    average_event_value: Money


class TopMeal(CamelModel):
    id: str
    name: str
    order_count: int
    total_revenue: Money
    average_order_value: Money


class EventTypeStat(CamelModel):
    event_type: str
    count: int
    total_revenue: Money
    average_value: Money
    percentage: float


class MethodBreakdown(CamelModel):
    method: str
    count: int
    revenue: Money
    percentage: float


class PaymentAnalytics(CamelModel):
    total_revenue: Money
    total_transactions: int
    successful_transactions: int
    refunded_transactions: int
    success_rate: float
    refund_rate: float
    average_transaction_value: Money
    payment_method_breakdown: list[MethodBreakdown]
