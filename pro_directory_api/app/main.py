"""
Main entrypoint for the Pro Directory API.

``create_app`` configures logging, mounts the versioned routers and
registers a lifespan hook that prepares storage: database migrations
and the packaged service taxonomy.  The app is instantiated at import
time so it can be served directly::

    uvicorn pro_directory_api.app.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from .api.v1.router import router as v1_router
from .core.config import settings
from .core.db import get_database_path, init_db
from .core.logging_config import setup_logging
from .services.taxonomy_service import get_taxonomy_service

logger = logging.getLogger(__name__)


def prepare_storage() -> None:
    """Apply pending migrations and load the taxonomy before serving."""
    init_db()
    taxonomy = get_taxonomy_service()
    logger.info(
        "%s %s ready: database %s, %d taxonomy sections",
        settings.project_name,
        settings.api_version,
        get_database_path(),
        len(taxonomy.sections()),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    prepare_storage()
    yield


def create_app() -> FastAPI:
    """Build the application served by ``run.py``."""
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(
        title=settings.project_name,
        version=settings.api_version,
        debug=settings.debug,
        description="Service categories and monthly subscription fees of professional listings.",
        lifespan=lifespan,
    )
    app.include_router(v1_router, prefix="/api/v1")
    return app


app = create_app()
