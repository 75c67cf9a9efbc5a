"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cloner.config import get_settings
from cloner.infrastructure.database import Base, destination_engines, engine
from cloner.infrastructure.events.in_memory_event_bus import InMemoryEventBus
from cloner.infrastructure.logging.log_config import setup_logging
from cloner.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — create tables in every store, prepare file storage."""
    settings = get_settings()
    setup_logging()

    # 1. Create tables in the default store and in every destination store
    for name, bind in [("default", engine), *destination_engines.items()]:
        async with bind.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database ready: %s", name)

    # 2. Ensure upload directory exists
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)

    yield

    # Shutdown
    for bind in [engine, *destination_engines.values()]:
        await bind.dispose()


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.event_bus = InMemoryEventBus()

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount API routes
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "cloner.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
