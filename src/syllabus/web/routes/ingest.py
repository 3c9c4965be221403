"""Syllabus ingestion endpoints.

POST runs the whole pipeline for a course; GET returns what the catalog
holds. Handlers are plain functions so FastAPI runs the blocking LLM
calls in its threadpool.
"""

import structlog
from fastapi import APIRouter, HTTPException, status

from syllabus.core.extractor import SyllabusExtractor
from syllabus.core.pipeline import build_extractor, ingest_documents
from syllabus.db.catalog_repository import CatalogError, get_course, get_course_syllabus
from syllabus.web.schemas import (
    CourseSyllabusResponse,
    IngestRequest,
    IngestResponse,
    IngestStatsResponse,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/ingest/syllabus", tags=["ingest"])


def _get_extractor() -> SyllabusExtractor:
    """Extractor wired to the configured LLM provider."""
    return build_extractor()


@router.post("", response_model=IngestResponse)
def ingest_syllabus(request: IngestRequest) -> IngestResponse:
    """Extract, merge, validate and store a syllabus and optional schedule."""
    course = get_course(request.course_id)
    if course is None or course.user_id != request.user_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Course '{request.course_id}' not found",
        )

    result = ingest_documents(
        course_id=request.course_id,
        user_id=request.user_id,
        syllabus_text=request.syllabus_text,
        schedule_text=request.schedule_text or None,
        extractor=_get_extractor(),
    )

    if not result.success:
        logger.warning("ingest_failed", course_id=request.course_id, message=result.message)
        # Upstream generation problems are a bad gateway; empty input is the client's
        code = (
            status.HTTP_502_BAD_GATEWAY
            if result.error_code is not None
            else status.HTTP_400_BAD_REQUEST
        )
        raise HTTPException(status_code=code, detail=result.message)

    logger.info(
        "ingest_completed",
        course_id=request.course_id,
        warnings=len(result.warnings),
    )

    return IngestResponse(
        success=True,
        data=result.record.to_dict(),
        validation_warnings=result.warnings,
        stats=IngestStatsResponse(**result.stats.to_dict()) if result.stats else None,
    )


@router.get("/{course_id}", response_model=CourseSyllabusResponse)
async def get_syllabus(course_id: str) -> CourseSyllabusResponse:
    """Get stored grading weights, assignments and ingestion records."""
    try:
        data = get_course_syllabus(course_id)
    except CatalogError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        ) from e

    return CourseSyllabusResponse(**data)
