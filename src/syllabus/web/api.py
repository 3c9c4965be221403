"""FastAPI application factory.

Main entry point for the syllabus ingestion Web API.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from syllabus import __version__
from syllabus.config.app_config import load_app_config
from syllabus.db.database import init_db
from syllabus.web.routes import health_router, ingest_router

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    config = load_app_config()
    init_db(config.db_path)
    logger.info("api_startup", db_path=str(config.db_path))
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Syllabus Ingestion API",
        description="Extract grading weights, assignments and schedules from course documents",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(ingest_router)

    return app


# Default app instance for uvicorn
app = create_app()
