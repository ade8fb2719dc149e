"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from seasonpass.api.events import router as events_router
from seasonpass.api.intercept import router as intercept_router
from seasonpass.api.storage import router as storage_router
from seasonpass.config import Settings
from seasonpass.core.background import Background
from seasonpass.core.event_bus import EventBus
from seasonpass.core.store import OverrideStore
from seasonpass.db.engine import create_engine, create_tables

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: create engine and tables, then sync whatever the store holds."""
    settings: Settings = app.state.settings
    engine = create_engine(settings.database_url)
    await create_tables(engine)

    event_bus = EventBus()
    background = Background(
        OverrideStore(engine, event_bus),
        event_bus,
        origin=settings.seasonpass_platform_origin,
    )
    state = await background.start()
    app.state.background = background
    logger.info(
        "background_started override=%s has_api_key=%s",
        state.season_override,
        state.api_key is not None,
    )

    yield

    await engine.dispose()
    logger.info("background_stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the seasonpass FastAPI application."""
    settings = settings or Settings()

    logging.basicConfig(
        level=getattr(logging, settings.seasonpass_log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="seasonpass",
        version="0.1.0",
        description="Season override decisions for intercepted platform requests",
        docs_url="/docs" if settings.seasonpass_env != "production" else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.include_router(intercept_router)
    app.include_router(storage_router)
    app.include_router(events_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "env": settings.seasonpass_env}

    return app


app = create_app()
