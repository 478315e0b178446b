from decimal import Decimal

from ordertracker.domain.models import Customer, Meal, Order, OrderStatus
from ordertracker.domain.sizing import customer_size, meal_size, order_size


def test_customer_size_counts_name_and_phone():
    customer = Customer(id=1, name="Anna", phone_number="+375291234567")
    assert customer_size(customer) == 100 + 2 * 4 + 2 * 13


def test_customer_size_with_missing_fields():
    assert customer_size(Customer(id=1)) == 100


def test_meal_size_counts_name_only():
    meal = Meal(id=1, name="Borscht", price=Decimal("7.50"), cooking_time=40)
    assert meal_size(meal) == 100 + 2 * 7


def test_order_size_grows_with_meals():
    meals = [
        Meal(id=n, name=f"Meal {n}", price=Decimal("1.00"), cooking_time=5) for n in range(3)
    ]
    empty = Order(id=1, customer_id=1, status=OrderStatus.ACCEPTED, meals=[])
    full = Order(id=1, customer_id=1, status=OrderStatus.ACCEPTED, meals=meals)

    assert order_size(empty) == 100 + 50 + 50
    assert order_size(full) == 100 + 50 + 50 + 3 * 30


def test_order_without_customer_skips_customer_cost():
    assert order_size(Order(id=1, meals=[])) == 100 + 50


def test_order_status_is_normalized():
    assert Order(status="cooking").status == "COOKING"
    assert Order(status=OrderStatus.READY).status == "READY"
