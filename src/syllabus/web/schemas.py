"""Pydantic schemas for the Web API.

Request/response models for syllabus ingestion and health checks.
Records themselves are serialized with ExtractedRecord.to_dict().
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from syllabus import __version__


# =============================================================================
# INGESTION SCHEMAS
# =============================================================================


class IngestRequest(BaseModel):
    """Request body for ingesting course documents."""

    course_id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    syllabus_text: str = Field(..., min_length=1)
    schedule_text: str | None = None


class IngestStatsResponse(BaseModel):
    """What the catalog store changed."""

    grade_weights_stored: int
    assignments_inserted: int
    assignments_skipped: int
    course_fields_updated: int


class IngestResponse(BaseModel):
    """Response for a successful ingestion."""

    success: bool = True
    data: dict[str, Any]
    validation_warnings: list[str] = Field(default_factory=list)
    stats: IngestStatsResponse | None = None


class GradeWeightRow(BaseModel):
    """Stored grading weight."""

    name: str
    weight_fraction: float


class AssignmentRow(BaseModel):
    """Stored assignment."""

    title: str
    assignment_type: str
    due_date: str | None = None
    week_number: int | None = None
    points: float | None = None
    weight_category: str | None = None
    source: str
    status: str


class SyllabusRecordRow(BaseModel):
    """Stored ingestion record."""

    id: str
    document_type: str
    parsed_data: dict[str, Any]
    parsing_status: str
    created_at: str


class CourseSyllabusResponse(BaseModel):
    """Stored syllabus data for a course."""

    grade_weights: list[GradeWeightRow]
    assignments: list[AssignmentRow]
    syllabus_records: list[SyllabusRecordRow]


# =============================================================================
# HEALTH SCHEMAS
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = __version__
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
