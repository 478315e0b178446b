from typing import List

from fastapi import APIRouter, Query, Response

from ordertracker.apps.api.dependencies import ServicesDep
from ordertracker.apps.api.errors import bad_request, unwrap_or_raise
from ordertracker.apps.api.schemas import CustomerIn, CustomerOut, OrderOut
from ordertracker.domain.models import OrderStatus

router = APIRouter(prefix="/api/customers", tags=["customers"])


@router.get("", response_model=List[CustomerOut])
async def list_customers(services: ServicesDep):
    return unwrap_or_raise(await services.customers.get_all())


@router.get("/name/{name}", response_model=CustomerOut)
async def get_customer_by_name(name: str, services: ServicesDep):
    return unwrap_or_raise(await services.customers.get_by_name(name))


@router.get("/phone/{phone_number}", response_model=CustomerOut)
async def get_customer_by_phone_number(phone_number: str, services: ServicesDep):
    return unwrap_or_raise(await services.customers.get_by_phone_number(phone_number))


@router.get("/filter/meal", response_model=List[CustomerOut])
async def filter_customers_by_order(
    services: ServicesDep,
    status: OrderStatus = Query(...),
    meal_name: str = Query(..., min_length=1),
):
    """Customers with an order in ``status`` that contains ``meal_name``."""
    return unwrap_or_raise(
        await services.customers.get_by_order_status_and_meal_name(status, meal_name)
    )


@router.get("/{customer_id}", response_model=CustomerOut)
async def get_customer(customer_id: int, services: ServicesDep):
    return unwrap_or_raise(await services.customers.get_by_id(customer_id))


@router.post("", response_model=CustomerOut, status_code=201)
async def create_customer(payload: CustomerIn, services: ServicesDep):
    if payload.id is not None:
        raise bad_request("New customer must not have an id")
    return unwrap_or_raise(await services.customers.add(payload.name, payload.phone_number))


@router.put("/{customer_id}", response_model=CustomerOut)
async def update_customer(customer_id: int, payload: CustomerIn, services: ServicesDep):
    if payload.id is not None and payload.id != customer_id:
        raise bad_request("Customer id in body does not match the path")
    return unwrap_or_raise(
        await services.customers.update(customer_id, payload.name, payload.phone_number)
    )


@router.delete("/{customer_id}", status_code=204)
async def delete_customer(customer_id: int, services: ServicesDep) -> Response:
    unwrap_or_raise(await services.customers.delete(customer_id))
    return Response(status_code=204)


@router.get("/{customer_id}/orders", response_model=List[OrderOut])
async def list_customer_orders(customer_id: int, services: ServicesDep):
    return unwrap_or_raise(await services.customers.get_orders(customer_id))


@router.post("/{customer_id}/orders", response_model=OrderOut, status_code=201)
async def create_customer_order(customer_id: int, services: ServicesDep):
    return unwrap_or_raise(await services.orders.add_order(customer_id))
