# venue_booking/api/routes/venues.py

from fastapi import APIRouter, Depends, status

from venue_booking.api.dependencies import get_venue_service
from venue_booking.api.responses import ok
from venue_booking.api.routes.params import Paging, get_paging, venue_filters
from venue_booking.api.schemas.catalog import VenueCreate, VenueResponse, VenueUpdate
from venue_booking.api.schemas.common import dump, page_response
from venue_booking.api.security import enforce_policy
from venue_booking.application.venue_service import VenueService
from venue_booking.infrastructure.repositories.venue_repository import VenueFilters

router = APIRouter(prefix="/venues", tags=["venues"], dependencies=[Depends(enforce_policy)])


@router.get("")
def list_venues(
    filters: VenueFilters = Depends(venue_filters),
    paging: Paging = Depends(get_paging),
    venue_service: VenueService = Depends(get_venue_service),
):
    page = venue_service.list_venues(
        filters,
        paging.page,
        paging.limit,
        paging.sort_by,
        paging.sort_order,
    )
    return ok(page_response(page, VenueResponse), "Venues retrieved successfully")


@router.get("/{venue_id}")
def get_venue(
    venue_id: str,
    venue_service: VenueService = Depends(get_venue_service),
):
    venue = venue_service.get_venue(venue_id)
    return ok({"venue": dump(VenueResponse.model_validate(venue))})


@router.post("", status_code=status.HTTP_201_CREATED)
def create_venue(
    request: VenueCreate,
    venue_service: VenueService = Depends(get_venue_service),
):
    venue = venue_service.create_venue(request.model_dump())
    return ok({"venue": dump(VenueResponse.model_validate(venue))}, "Venue created successfully")


@router.put("/{venue_id}")
def update_venue(
    venue_id: str,
    request: VenueUpdate,
    venue_service: VenueService = Depends(get_venue_service),
):
    venue = venue_service.update_venue(venue_id, request.model_dump(exclude_unset=True, exclude_none=True))
    return ok({"venue": dump(VenueResponse.model_validate(venue))}, "Venue updated successfully")


@router.delete("/{venue_id}")
def delete_venue(
    venue_id: str,
    venue_service: VenueService = Depends(get_venue_service),
):
    venue_service.delete_venue(venue_id)
    return ok(message="Venue deleted successfully")
