# venue_booking/api/routes/events.py

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from venue_booking.api.dependencies import get_event_service
from venue_booking.api.responses import ok
from venue_booking.api.routes.params import Paging, get_paging
from venue_booking.api.schemas.common import dump, page_response
from venue_booking.api.schemas.events import (
    AvailabilityRequest,
    AvailabilityResponse,
    BookingDetails,
    ConflictingEvent,
    EventResponse,
    EventUpdateRequest,
)
from venue_booking.api.security import Principal, enforce_policy, get_principal
from venue_booking.application.event_service import EventService
from venue_booking.domain.state_machine import EventStatus

router = APIRouter(prefix="/events", tags=["events"], dependencies=[Depends(enforce_policy)])


@router.post("/check-availability")
def check_availability(
    request: AvailabilityRequest,
    event_service: EventService = Depends(get_event_service),
):
    availability = event_service.check_availability(
        request.venue_id,
        request.start_time,
        request.end_time,
    )
    payload = AvailabilityResponse(
        venue_id=availability.venue.id,
        available=availability.available,
        message=availability.message,
        conflicting_events=[ConflictingEvent.model_validate(event) for event in availability.conflicts],
    )
    body = ok(dump(payload), availability.message)
    if not availability.available:
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=body)
    return body


@router.post("", status_code=status.HTTP_201_CREATED)
def create_event(
    request: BookingDetails,
    principal: Principal = Depends(get_principal),
    event_service: EventService = Depends(get_event_service),
):
    event = event_service.create_event(
        principal.subject,
        request.venue_id,
        request.meal_id,
        request.event_type,
        request.people_count,
        request.start_time,
        request.end_time,
    )
    return ok({"event": dump(EventResponse.model_validate(event))}, "Event reserved, awaiting payment")


@router.get("")
def list_my_events(
    event_status: EventStatus | None = Query(None, alias="status"),
    event_type: str | None = Query(None, alias="eventType", max_length=100),
    paging: Paging = Depends(get_paging),
    principal: Principal = Depends(get_principal),
    event_service: EventService = Depends(get_event_service),
):
    page = event_service.list_user_events(
        principal.subject,
        paging.page,
        paging.limit,
        status=event_status,
        event_type=event_type,
        sort_by=paging.sort_by,
        sort_order=paging.sort_order,
    )
    return ok(page_response(page, EventResponse), "Events retrieved successfully")


@router.get("/{event_id}")
def get_my_event(
    event_id: str,
    principal: Principal = Depends(get_principal),
    event_service: EventService = Depends(get_event_service),
):
    event = event_service.get_user_event(event_id, principal.subject)
    return ok({"event": dump(EventResponse.model_validate(event))})


@router.put("/{event_id}")
def update_my_event(
    event_id: str,
    request: EventUpdateRequest,
    principal: Principal = Depends(get_principal),
    event_service: EventService = Depends(get_event_service),
):
    event = event_service.update_event(
        event_id,
        principal.subject,
        request.model_dump(exclude_unset=True),
    )
    return ok({"event": dump(EventResponse.model_validate(event))}, "Event updated successfully")
