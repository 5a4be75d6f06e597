# venue_booking/infrastructure/repositories/meal_repository.py

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.orm import Session
from sqlalchemy import func, or_, select

from venue_booking.infrastructure.db.models import Meal
from venue_booking.infrastructure.repositories.base import Page, order_clauses, paginate


@dataclass(frozen=True)
class MealFilters:
    search: str | None = None
    type: str | None = None
    serving_style: str | None = None
    cuisine: str | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    include_inactive: bool = False


SORTABLE_COLUMNS = {
    "created_at": Meal.created_at,
    "name": Meal.name,
    "price": Meal.price_per_person,
    "minimum_guests": Meal.minimum_guests,
}


class MealRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, meal_id: str) -> Meal | None:
        stmt = select(Meal).where(Meal.id == meal_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def name_exists(self, name: str, exclude_id: str | None = None) -> bool:
        stmt = select(Meal.id).where(func.lower(Meal.name) == name.lower())
        if exclude_id:
            stmt = stmt.where(Meal.id != exclude_id)
        return self.db.execute(stmt).first() is not None

    def create(self, **fields) -> Meal:
        meal = Meal(**fields)
        self.db.add(meal)
        self.db.flush()
        return meal

    def update(self, meal: Meal, **fields) -> Meal:
        for field, value in fields.items():
            setattr(meal, field, value)
        self.db.flush()
        return meal

    def delete(self, meal: Meal) -> None:
        self.db.delete(meal)
        self.db.flush()

    def count(self) -> int:
        return self.db.execute(select(func.count(Meal.id))).scalar_one()

    def find_many(
        self,
        filters: MealFilters,
        page: int,
        limit: int,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> Page[Meal]:
        stmt = select(Meal)

        if not filters.include_inactive:
            stmt = stmt.where(Meal.is_active.is_(True))

        if filters.search:
            pattern = f"%{filters.search.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(Meal.name).like(pattern),
                    func.lower(Meal.description).like(pattern),
                )
            )

        if filters.type:
            stmt = stmt.where(Meal.type == filters.type)
        if filters.serving_style:
            stmt = stmt.where(Meal.serving_style == filters.serving_style)
        if filters.cuisine:
            stmt = stmt.where(func.lower(Meal.cuisine) == filters.cuisine.lower())

        if filters.min_price is not None:
            stmt = stmt.where(Meal.price_per_person >= filters.min_price)
        if filters.max_price is not None:
            stmt = stmt.where(Meal.price_per_person <= filters.max_price)

        sort_column = SORTABLE_COLUMNS.get(sort_by, Meal.created_at)
        return paginate(
            self.db,
            stmt,
            page,
            limit,
            order_clauses(sort_column, sort_order, Meal),
        )
