"""Route handlers for the Web API."""

from syllabus.web.routes.health import router as health_router
from syllabus.web.routes.ingest import router as ingest_router

__all__ = [
    "health_router",
    "ingest_router",
]
