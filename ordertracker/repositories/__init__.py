from ordertracker.repositories.base import SqlAlchemyStore
from ordertracker.repositories.customer import CustomerRepository
from ordertracker.repositories.meal import MealRepository
from ordertracker.repositories.order import OrderRepository

__all__ = ["CustomerRepository", "MealRepository", "OrderRepository", "SqlAlchemyStore"]
