"""Application factory and top-level wiring.

``create_app`` assembles configuration, logging, the schema check, the
inventory caches, the API routers and error handling. ``app`` is the instance
uvicorn serves; tests build their own with an in-memory database.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .core.config import AppSettings, get_settings
from .core.errors import (
    StokosorError,
    http_exception_handler,
    inventory_error_handler,
    validation_exception_handler,
)
from .core.logging import setup_logging
from .db.migrate import ensure_schema
from .db.session import get_engine, get_session_factory
from .middlewares import RequestIdMiddleware
from .routers import api_backup, api_containers, api_items, api_places, api_stats, api_zones
from .services.inventory import Inventory

logger = logging.getLogger(__name__)


def create_app(settings: Optional[AppSettings] = None, inventory: Optional[Inventory] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.LOG_LEVEL, service=settings.APP_NAME)
        if getattr(app.state, "inventory", None) is None:
            version = ensure_schema(get_engine())
            logger.info("Database ready", extra={"extra_data": {"schema_version": version}})
            app.state.inventory = Inventory(get_session_factory(), settings)
        app.state.inventory.refresh()
        yield

    app = FastAPI(title=settings.APP_NAME, version=__version__, lifespan=lifespan)
    app.state.inventory = inventory

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StokosorError, inventory_error_handler)
    app.add_middleware(RequestIdMiddleware)

    for module in (api_places, api_zones, api_containers, api_items, api_backup, api_stats):
        app.include_router(module.router)

    @app.get("/health")
    async def health() -> dict[str, bool]:
        return {"ok": True}

    Instrumentator().instrument(app).expose(app, include_in_schema=False)
    return app


app = create_app()


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "stokosor.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
