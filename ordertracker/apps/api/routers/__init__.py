from ordertracker.apps.api.routers import customers, logs, meals, orders, statistics, system

__all__ = ["customers", "logs", "meals", "orders", "statistics", "system"]
