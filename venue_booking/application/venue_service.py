# venue_booking/application/venue_service.py

import logging

from sqlalchemy.orm import Session

from venue_booking.domain.exceptions import ConflictError, InvalidRequestError, NotFoundError
from venue_booking.domain.pricing import PricingUnit
from venue_booking.infrastructure.db.models import Venue
from venue_booking.infrastructure.repositories.base import Page
from venue_booking.infrastructure.repositories.venue_repository import VenueFilters, VenueRepository

logger = logging.getLogger(__name__)


class VenueService:

    def __init__(self, db: Session):
        self.db = db
        self.venue_repository = VenueRepository(db)

    def list_venues(
        self,
        filters: VenueFilters,
        page: int,
        limit: int,
        sort_by: str,
        sort_order: str,
    ) -> Page[Venue]:
        return self.venue_repository.find_many(filters, page, limit, sort_by, sort_order)

    def get_venue(self, venue_id: str, include_inactive: bool = False) -> Venue:
        venue = self.venue_repository.get_by_id(venue_id)
        if not venue or (not venue.is_active and not include_inactive):
            raise NotFoundError("Venue not found")
        return venue

    def create_venue(self, fields: dict) -> Venue:
        if self.venue_repository.name_exists(fields["name"]):
            raise ConflictError("Venue with this name already exists")

        self._check_rate(fields)
        venue = self.venue_repository.create(**fields)
        logger.info("Venue created: %s (%s)", venue.id, venue.name)
        return venue

    def update_venue(self, venue_id: str, changes: dict) -> Venue:
        venue = self.get_venue(venue_id, include_inactive=True)

        name = changes.get("name")
        if name and self.venue_repository.name_exists(name, exclude_id=venue.id):
            raise ConflictError("Venue with this name already exists")

        merged = {
            "pricing_unit": venue.pricing_unit,
            "price_per_hour": venue.price_per_hour,
            "price_per_day": venue.price_per_day,
        }
        merged.update(changes)
        self._check_rate(merged)

        venue = self.venue_repository.update(venue, **changes)
        logger.info("Venue updated: %s", venue.id)
        return venue

    def delete_venue(self, venue_id: str) -> None:
        venue = self.get_venue(venue_id, include_inactive=True)
        if self.venue_repository.has_events(venue.id):
            logger.warning("Refusing to delete venue %s with bookings", venue.id)
            raise ConflictError("Cannot delete venue with existing events")

        self.venue_repository.delete(venue)
        logger.info("Venue deleted: %s", venue_id)

    @staticmethod
    def _check_rate(fields: dict) -> None:
        unit = PricingUnit(fields.get("pricing_unit") or PricingUnit.HOUR)
        if unit == PricingUnit.DAY and fields.get("price_per_day") is None:
            raise InvalidRequestError("pricePerDay is required for daily pricing", field="pricePerDay")
        if unit == PricingUnit.HOUR and fields.get("price_per_hour") is None:
            raise InvalidRequestError("pricePerHour is required for hourly pricing", field="pricePerHour")
