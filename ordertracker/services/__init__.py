from ordertracker.services.container import Services, build_services
from ordertracker.services.customers import CustomerService
from ordertracker.services.logs import LogService, LogTask, LogTaskStatus
from ordertracker.services.meals import MealData, MealService
from ordertracker.services.orders import OrderService
from ordertracker.services.visits import VisitCounter

__all__ = [
    "CustomerService",
    "LogService",
    "LogTask",
    "LogTaskStatus",
    "MealData",
    "MealService",
    "OrderService",
    "Services",
    "VisitCounter",
    "build_services",
]
