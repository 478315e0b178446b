from typing import List

from fastapi import APIRouter, Query, Response

from ordertracker.apps.api.dependencies import ServicesDep
from ordertracker.apps.api.errors import bad_request, unwrap_or_raise
from ordertracker.apps.api.schemas import MealIn, MealOut
from ordertracker.services import MealData

router = APIRouter(prefix="/api/meals", tags=["meals"])


def _meal_data(payload: MealIn) -> MealData:
    return MealData(name=payload.name, price=payload.price, cooking_time=payload.cooking_time)


@router.get("", response_model=List[MealOut])
async def list_meals(services: ServicesDep):
    return unwrap_or_raise(await services.meals.get_all())


@router.get("/name", response_model=MealOut)
async def get_meal_by_name(services: ServicesDep, name: str = Query(..., min_length=1)):
    return unwrap_or_raise(await services.meals.get_by_name(name))


@router.get("/{meal_id}", response_model=MealOut)
async def get_meal(meal_id: int, services: ServicesDep):
    return unwrap_or_raise(await services.meals.get_by_id(meal_id))


@router.post("", response_model=MealOut, status_code=201)
async def create_meal(payload: MealIn, services: ServicesDep):
    if payload.id is not None:
        raise bad_request("New meal must not have an id")
    return unwrap_or_raise(await services.meals.add(_meal_data(payload)))


@router.post("/bulk", response_model=List[MealOut], status_code=201)
async def create_meals(payload: List[MealIn], services: ServicesDep):
    if not payload:
        raise bad_request("Meal list must not be empty")
    if any(item.id is not None for item in payload):
        raise bad_request("New meals must not have ids")
    return unwrap_or_raise(await services.meals.add_bulk([_meal_data(item) for item in payload]))


@router.put("/{meal_id}", response_model=MealOut)
async def update_meal(meal_id: int, payload: MealIn, services: ServicesDep):
    if payload.id is not None and payload.id != meal_id:
        raise bad_request("Meal id in body does not match the path")
    return unwrap_or_raise(await services.meals.update(meal_id, _meal_data(payload)))


@router.delete("/{meal_id}", status_code=204)
async def delete_meal(meal_id: int, services: ServicesDep) -> Response:
    unwrap_or_raise(await services.meals.delete(meal_id))
    return Response(status_code=204)
