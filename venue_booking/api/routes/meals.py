# venue_booking/api/routes/meals.py

from fastapi import APIRouter, Depends, status

from venue_booking.api.dependencies import get_meal_service
from venue_booking.api.responses import ok
from venue_booking.api.routes.params import Paging, get_paging, meal_filters
from venue_booking.api.schemas.catalog import MealCreate, MealResponse, MealUpdate
from venue_booking.api.schemas.common import dump, page_response
from venue_booking.api.security import enforce_policy
from venue_booking.application.meal_service import MealService
from venue_booking.infrastructure.repositories.meal_repository import MealFilters

router = APIRouter(prefix="/meals", tags=["meals"], dependencies=[Depends(enforce_policy)])


@router.get("")
def list_meals(
    filters: MealFilters = Depends(meal_filters),
    paging: Paging = Depends(get_paging),
    meal_service: MealService = Depends(get_meal_service),
):
    page = meal_service.list_meals(
        filters,
        paging.page,
        paging.limit,
        paging.sort_by,
        paging.sort_order,
    )
    return ok(page_response(page, MealResponse), "Meals retrieved successfully")


@router.get("/{meal_id}")
def get_meal(
    meal_id: str,
    meal_service: MealService = Depends(get_meal_service),
):
    meal = meal_service.get_meal(meal_id)
    return ok({"meal": dump(MealResponse.model_validate(meal))})


@router.post("", status_code=status.HTTP_201_CREATED)
def create_meal(
    request: MealCreate,
    meal_service: MealService = Depends(get_meal_service),
):
    meal = meal_service.create_meal(request.model_dump())
    return ok({"meal": dump(MealResponse.model_validate(meal))}, "Meal created successfully")


@router.put("/{meal_id}")
def update_meal(
    meal_id: str,
    request: MealUpdate,
    meal_service: MealService = Depends(get_meal_service),
):
    meal = meal_service.update_meal(meal_id, request.model_dump(exclude_unset=True, exclude_none=True))
    return ok({"meal": dump(MealResponse.model_validate(meal))}, "Meal updated successfully")


@router.delete("/{meal_id}")
def delete_meal(
    meal_id: str,
    meal_service: MealService = Depends(get_meal_service),
):
    meal_service.delete_meal(meal_id)
    return ok(message="Meal deleted successfully")
