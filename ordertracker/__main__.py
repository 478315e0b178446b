"""Run the API with uvicorn: ``python -m ordertracker``."""

import os

import uvicorn

from ordertracker.apps.api import create_app


def main() -> None:
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    uvicorn.run(create_app(), host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()
