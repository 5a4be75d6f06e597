# venue_booking/application/meal_service.py

import logging

from sqlalchemy.orm import Session

from venue_booking.domain.exceptions import ConflictError, NotFoundError
from venue_booking.infrastructure.db.models import Meal
from venue_booking.infrastructure.repositories.base import Page
from venue_booking.infrastructure.repositories.meal_repository import MealFilters, MealRepository

logger = logging.getLogger(__name__)


class MealService:

    def __init__(self, db: Session):
        self.db = db
        self.meal_repository = MealRepository(db)

    def list_meals(
        self,
        filters: MealFilters,
        page: int,
        limit: int,
        sort_by: str,
        sort_order: str,
    ) -> Page[Meal]:
        return self.meal_repository.find_many(filters, page, limit, sort_by, sort_order)

    def get_meal(self, meal_id: str, include_inactive: bool = False) -> Meal:
        meal = self.meal_repository.get_by_id(meal_id)
        if not meal or (not meal.is_active and not include_inactive):
            raise NotFoundError("Meal not found")
        return meal

    def create_meal(self, fields: dict) -> Meal:
        if self.meal_repository.name_exists(fields["name"]):
            raise ConflictError("Meal with this name already exists")

        meal = self.meal_repository.create(**fields)
        logger.info("Meal created: %s (%s)", meal.id, meal.name)
        return meal

    def update_meal(self, meal_id: str, changes: dict) -> Meal:
        meal = self.get_meal(meal_id, include_inactive=True)

        name = changes.get("name")
        if name and self.meal_repository.name_exists(name, exclude_id=meal.id):
            raise ConflictError("Meal with this name already exists")

        meal = self.meal_repository.update(meal, **changes)
        logger.info("Meal updated: %s", meal.id)
        return meal

    def delete_meal(self, meal_id: str) -> None:
        meal = self.get_meal(meal_id, include_inactive=True)
        self.meal_repository.delete(meal)
        logger.info("Meal deleted: %s", meal_id)
