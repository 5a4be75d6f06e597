# venue_booking/api/routes/admin.py

from dataclasses import replace
from typing import Literal

from fastapi import APIRouter, Depends, Query

from venue_booking.api.dependencies import (
    get_analytics_service,
    get_event_service,
    get_meal_service,
    get_venue_service,
)
from venue_booking.api.responses import ok
from venue_booking.api.routes.params import (
    DateWindow,
    Paging,
    date_window,
    get_paging,
    meal_filters,
    venue_filters,
)
from venue_booking.api.schemas.analytics import (
    DashboardStats,
    EventTypeStat,
    PaymentAnalytics,
    RevenuePoint,
    TopMeal,
    TopVenue,
)
from venue_booking.api.schemas.catalog import MealResponse, VenueResponse
from venue_booking.api.schemas.common import dump, page_response
from venue_booking.api.schemas.events import EventResponse, EventStatusUpdate
from venue_booking.api.security import enforce_policy
from venue_booking.application.analytics_service import AnalyticsService
from venue_booking.application.event_service import EventService
from venue_booking.application.meal_service import MealService
from venue_booking.application.venue_service import VenueService
from venue_booking.domain.state_machine import EventStatus
from venue_booking.infrastructure.repositories.event_repository import EventFilters
from venue_booking.infrastructure.repositories.meal_repository import MealFilters
from venue_booking.infrastructure.repositories.venue_repository import VenueFilters

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(enforce_policy)])


# -----------------------------
# Catalog and events
# -----------------------------
@router.get("/venues")
def list_all_venues(
    filters: VenueFilters = Depends(venue_filters),
    paging: Paging = Depends(get_paging),
    venue_service: VenueService = Depends(get_venue_service),
):
    page = venue_service.list_venues(
        replace(filters, include_inactive=True),
        paging.page,
        paging.limit,
        paging.sort_by,
        paging.sort_order,
    )
    return ok(page_response(page, VenueResponse), "Venues retrieved successfully")


@router.get("/meals")
def list_all_meals(
    filters: MealFilters = Depends(meal_filters),
    paging: Paging = Depends(get_paging),
    meal_service: MealService = Depends(get_meal_service),
):
    page = meal_service.list_meals(
        replace(filters, include_inactive=True),
        paging.page,
        paging.limit,
        paging.sort_by,
        paging.sort_order,
    )
    return ok(page_response(page, MealResponse), "Meals retrieved successfully")


@router.get("/events")
def list_all_events(
    status: EventStatus | None = Query(None),
    event_type: str | None = Query(None, alias="eventType", max_length=100),
    venue_id: str | None = Query(None, alias="venueId"),
    user_id: str | None = Query(None, alias="userId"),
    paging: Paging = Depends(get_paging),
    event_service: EventService = Depends(get_event_service),
):
    filters = EventFilters(
        user_id=user_id,
        venue_id=venue_id,
        status=status,
        event_type=event_type,
    )
    page = event_service.list_all_events(
        filters,
        paging.page,
        paging.limit,
        sort_by=paging.sort_by,
        sort_order=paging.sort_order,
    )
    return ok(page_response(page, EventResponse), "Events retrieved successfully")


@router.get("/events/{event_id}")
def get_event(
    event_id: str,
    event_service: EventService = Depends(get_event_service),
):
    event = event_service.get_event(event_id)
    return ok({"event": dump(EventResponse.model_validate(event))})


@router.patch("/events/{event_id}/status")
def update_event_status(
    event_id: str,
    request: EventStatusUpdate,
    event_service: EventService = Depends(get_event_service),
):
    event = event_service.update_event_status(event_id, request.status)
    return ok({"event": dump(EventResponse.model_validate(event))}, "Event status updated successfully")


# -----------------------------
# Analytics
# -----------------------------
@router.get("/analytics/dashboard")
def get_dashboard(
    window: DateWindow = Depends(date_window),
    analytics_service: AnalyticsService = Depends(get_analytics_service),
):
    stats = analytics_service.dashboard(analytics_service.date_range(window.start_date, window.end_date))
    return ok({"stats": dump(DashboardStats(**stats))}, "Dashboard statistics retrieved successfully")


@router.get("/analytics/revenue")
def get_revenue(
    group_by: Literal["day", "week", "month", "year"] = Query("month", alias="groupBy"),
    window: DateWindow = Depends(date_window),
    analytics_service: AnalyticsService = Depends(get_analytics_service),
):
    points = analytics_service.revenue(
        analytics_service.date_range(window.start_date, window.end_date),
        group_by,
    )
    return ok(
        {"groupBy": group_by, "revenue": [dump(RevenuePoint(**point)) for point in points]},
        "Revenue analytics retrieved successfully",
    )


@router.get("/analytics/venues/top")
def get_top_venues(
    limit: int = Query(10, ge=1, le=50),
    window: DateWindow = Depends(date_window),
    analytics_service: AnalyticsService = Depends(get_analytics_service),
):
    venues = analytics_service.top_venues(
        analytics_service.date_range(window.start_date, window.end_date),
        limit,
    )
    return ok({"venues": [dump(TopVenue(**venue)) for venue in venues]}, "Top venues retrieved successfully")


@router.get("/analytics/meals/top")
def get_top_meals(
    limit: int = Query(10, ge=1, le=50),
    window: DateWindow = Depends(date_window),
    analytics_service: AnalyticsService = Depends(get_analytics_service),
):
    meals = analytics_service.top_meals(
        analytics_service.date_range(window.start_date, window.end_date),
        limit,
    )
    return ok({"meals": [dump(TopMeal(**meal)) for meal in meals]}, "Top meals retrieved successfully")


@router.get("/analytics/event-types")
def get_event_types(
    window: DateWindow = Depends(date_window),
    analytics_service: AnalyticsService = Depends(get_analytics_service),
):
    stats = analytics_service.event_types(analytics_service.date_range(window.start_date, window.end_date))
    return ok(
        {"eventTypes": [dump(EventTypeStat(**item)) for item in stats]},
        "Event type analytics retrieved successfully",
    )


@router.get("/analytics/payments")
def get_payment_analytics(
    window: DateWindow = Depends(date_window),
    analytics_service: AnalyticsService = Depends(get_analytics_service),
):
    stats = analytics_service.payments(analytics_service.date_range(window.start_date, window.end_date))
    return ok({"stats": dump(PaymentAnalytics(**stats))}, "Payment analytics retrieved successfully")
