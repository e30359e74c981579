from anyio import to_thread
from fastapi import FastAPI
from tripline.api import health, timeline, trips
from tripline.core.db import create_schema
from tripline.core.logging import get_logger, setup_logging
from tripline.core.settings import settings


def create_app() -> FastAPI:
    """Application factory registering routers and config."""

    setup_logging()
    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
    )

    application.include_router(health.router)
    application.include_router(timeline.router)
    application.include_router(trips.router)

    @application.on_event("startup")
    async def _create_schema() -> None:
        await to_thread.run_sync(create_schema)
        get_logger("db").info("db.schema.ready")

    return application
