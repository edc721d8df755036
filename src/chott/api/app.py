"""
FastAPI application factory for the Chott world API.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI

from chott import __version__
from chott.api.routers import actors, locations, world
from chott.api.world import WorldRuntime
from chott.core.config import WorldConfig
from chott.logging_setup import configure_logging

# Load .env — project root first, then CWD
_project_root = Path(__file__).resolve().parents[3]  # src/chott/api/app.py → project root
load_dotenv(_project_root / ".env")
load_dotenv(Path.cwd() / ".env")

logger = logging.getLogger(__name__)


def create_app(
    config: WorldConfig | None = None,
    start_scheduler: bool = True,
) -> FastAPI:
    """Create the application and the world it serves.

    The background tick loop is started on application startup and stopped
    on shutdown unless ``start_scheduler`` is False.
    """
    config = config or WorldConfig.from_env()
    configure_logging(config.log_level)
    runtime = WorldRuntime.build(config)

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        if start_scheduler:
            runtime.scheduler.start()
        try:
            yield
        finally:
            runtime.scheduler.stop()

    application = FastAPI(
        title="Chott World API",
        description="Read-only view of a tick-driven NPC world",
        version=__version__,
        lifespan=lifespan,
    )
    application.state.world = runtime

    application.include_router(locations.router, prefix="/api/locations", tags=["locations"])
    application.include_router(actors.router, prefix="/api/actors", tags=["actors"])
    application.include_router(world.router, prefix="/api/world", tags=["world"])

    @application.get("/api/health")
    def health_check():
        return {"status": "ok"}

    logger.info(
        "World '%s' ready: %d locations, %d actors",
        config.world_name, len(runtime.graph), runtime.manager.population_size,
    )
    return application
