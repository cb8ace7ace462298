"""
Upkeep — Recurring maintenance scheduling API

FastAPI application providing REST endpoints for assets, maintenance
schedules, completions, and the projected occurrence views.
"""

import logging

from core.config import settings
from core.app import create_app

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.host, port=settings.port, reload=settings.debug)
