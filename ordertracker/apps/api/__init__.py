from ordertracker.apps.api.app import create_app

__all__ = ["create_app"]
