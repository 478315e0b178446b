from typing import List

from fastapi import APIRouter, Query, Response

from ordertracker.apps.api.dependencies import ServicesDep
from ordertracker.apps.api.errors import unwrap_or_raise
from ordertracker.apps.api.schemas import OrderOut
from ordertracker.domain.models import OrderStatus

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.get("", response_model=List[OrderOut])
async def list_orders(services: ServicesDep):
    return unwrap_or_raise(await services.orders.get_all())


@router.get("/{order_id}", response_model=OrderOut)
async def get_order(order_id: int, services: ServicesDep):
    return unwrap_or_raise(await services.orders.get_by_id(order_id))


@router.post("", response_model=OrderOut, status_code=201)
async def create_order(services: ServicesDep, customer_id: int = Query(...)):
    return unwrap_or_raise(await services.orders.add_order(customer_id))


@router.put("/{order_id}/status", response_model=OrderOut)
async def update_order_status(
    order_id: int, services: ServicesDep, status: OrderStatus = Query(...)
):
    return unwrap_or_raise(await services.orders.update_status(order_id, status))


@router.put("/{order_id}/meals", response_model=OrderOut)
async def add_meal_to_order(order_id: int, services: ServicesDep, meal_id: int = Query(...)):
    return unwrap_or_raise(await services.orders.add_meal(order_id, meal_id))


@router.delete("/{order_id}/meals", response_model=OrderOut)
async def remove_meal_from_order(
    order_id: int, services: ServicesDep, meal_id: int = Query(...)
):
    return unwrap_or_raise(await services.orders.remove_meal(order_id, meal_id))


@router.delete("/{order_id}", status_code=204)
async def delete_order(order_id: int, services: ServicesDep) -> Response:
    unwrap_or_raise(await services.orders.delete(order_id))
    return Response(status_code=204)
