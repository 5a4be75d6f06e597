# venue_booking/infrastructure/repositories/venue_repository.py

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.orm import Session
from sqlalchemy import case, exists, func, or_, select

from venue_booking.domain.pricing import PricingUnit
from venue_booking.infrastructure.db.models import Event, Venue
from venue_booking.infrastructure.repositories.base import Page, order_clauses, paginate


@dataclass(frozen=True)
class VenueFilters:
    search: str | None = None
    venue_type: str | None = None
    city: str | None = None
    min_capacity: int | None = None
    max_capacity: int | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    include_inactive: bool = False


# The price a venue is listed at, in its own pricing unit.
ACTIVE_RATE = case(
    (Venue.pricing_unit == PricingUnit.DAY, Venue.price_per_day),
    else_=Venue.price_per_hour,
)

SORTABLE_COLUMNS = {
    "created_at": Venue.created_at,
    "name": Venue.name,
    "capacity": Venue.capacity,
    "price": ACTIVE_RATE,
    "city": Venue.city,
}


class VenueRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, venue_id: str) -> Venue | None:
        stmt = select(Venue).where(Venue.id == venue_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def lock(self, venue_id: str) -> Venue | None:
        """
        SELECT ... FOR UPDATE
        Serializes bookings of the same venue until commit.
        """
        stmt = select(Venue).where(Venue.id == venue_id).with_for_update()
        return self.db.execute(stmt).scalar_one_or_none()

    def name_exists(self, name: str, exclude_id: str | None = None) -> bool:
        stmt = select(Venue.id).where(func.lower(Venue.name) == name.lower())
        if exclude_id:
            stmt = stmt.where(Venue.id != exclude_id)
        return self.db.execute(stmt).first() is not None

    def has_events(self, venue_id: str) -> bool:
        stmt = select(exists().where(Event.venue_id == venue_id))
        return self.db.execute(stmt).scalar_one()

    def create(self, **fields) -> Venue:
        venue = Venue(**fields)
        self.db.add(venue)
        self.db.flush()
        return venue

    def update(self, venue: Venue, **fields) -> Venue:
        for field, value in fields.items():
            setattr(venue, field, value)
        self.db.flush()
        return venue

    def delete(self, venue: Venue) -> None:
        self.db.delete(venue)
        self.db.flush()

    def count(self) -> int:
        return self.db.execute(select(func.count(Venue.id))).scalar_one()

    def find_many(
        self,
        filters: VenueFilters,
        page: int,
        limit: int,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> Page[Venue]:
        stmt = select(Venue)

        if not filters.include_inactive:
            stmt = stmt.where(Venue.is_active.is_(True))

        if filters.search:
            pattern = f"%{filters.search.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(Venue.name).like(pattern),
                    func.lower(Venue.description).like(pattern),
                    func.lower(Venue.address).like(pattern),
                )
            )

        if filters.venue_type:
            stmt = stmt.where(Venue.venue_type == filters.venue_type)

        if filters.city:
            stmt = stmt.where(func.lower(Venue.city) == filters.city.lower())

        if filters.min_capacity is not None:
            stmt = stmt.where(Venue.capacity >= filters.min_capacity)
        if filters.max_capacity is not None:
            stmt = stmt.where(Venue.capacity <= filters.max_capacity)

        if filters.min_price is not None:
            stmt = stmt.where(ACTIVE_RATE >= filters.min_price)
        if filters.max_price is not None:
            stmt = stmt.where(ACTIVE_RATE <= filters.max_price)

        sort_column = SORTABLE_COLUMNS.get(sort_by, Venue.created_at)
        return paginate(
            self.db,
            stmt,
            page,
            limit,
            order_clauses(sort_column, sort_order, Venue),
        )
