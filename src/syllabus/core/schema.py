"""Extracted syllabus record schema.

Typed shape of one extraction run (course info, grading weights,
assignments, weekly schedule) and the boundary parser that turns
untyped generation-service output into a record.

Wire format (JSON, snake_case):
- course_info: {name, code, instructor, semester, credits}
- grading_weights: [{name, weight_fraction}]
- assignments: [{title, type, due_date, week_number, points, weight_category}]
- schedule: [{week_number, date, topic, assignment_titles}]

Legacy keys (weight_pct, dueDate, week_no, assignments inside schedule
entries) are accepted as aliases.
"""

from __future__ import annotations

import datetime as dt
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Union

import structlog
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

logger = structlog.get_logger(__name__)

# =============================================================================
# TYPES
# =============================================================================

AssignmentType = Literal["homework", "quiz", "exam", "project", "participation", "other"]

ASSIGNMENT_TYPES: tuple[str, ...] = (
    "homework",
    "quiz",
    "exam",
    "project",
    "participation",
    "other",
)

DEFAULT_ASSIGNMENT_TYPE: AssignmentType = "homework"

# Max validation errors quoted in a ParseErr reason
MAX_REPORTED_ERRORS = 5


def _parse_iso_date(value: Any) -> Any:
    """Accept ISO date strings; leave anything else to strict validation."""
    if isinstance(value, str):
        return dt.date.fromisoformat(value.strip())
    return value


# =============================================================================
# MODELS
# =============================================================================


class _RecordModel(BaseModel):
    """Base for record parts: immutable, strict, unknown keys ignored."""

    model_config = ConfigDict(
        frozen=True,
        strict=True,
        populate_by_name=True,
        extra="ignore",
    )


class CourseInfo(_RecordModel):
    """Partial course metadata found in a syllabus."""

    name: str | None = None
    code: str | None = None
    instructor: str | None = None
    semester: str | None = None
    credits: float | None = Field(default=None, ge=0)


class GradingWeight(_RecordModel):
    """A grading category and its share of the final grade (0-1)."""

    name: str
    weight_fraction: float = Field(
        ge=0.0,
        le=1.0,
        validation_alias=AliasChoices("weight_fraction", "weight_pct"),
    )


class Assignment(_RecordModel):
    """A gradable item. The title is the natural key (case-insensitive)."""

    title: str
    type: AssignmentType = DEFAULT_ASSIGNMENT_TYPE
    due_date: dt.date | None = Field(
        default=None,
        validation_alias=AliasChoices("due_date", "dueDate"),
    )
    week_number: int | None = Field(
        default=None,
        ge=1,
        validation_alias=AliasChoices("week_number", "week_no"),
    )
    points: float | None = Field(default=None, ge=0)
    weight_category: str | None = Field(
        default=None,
        validation_alias=AliasChoices("weight_category", "weightCategory"),
    )

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("assignment title must not be empty")
        return value

    @field_validator("type", mode="before")
    @classmethod
    def _default_type(cls, value: Any) -> Any:
        # Absent and null both mean "not stated"
        return DEFAULT_ASSIGNMENT_TYPE if value is None else value

    @field_validator("due_date", mode="before")
    @classmethod
    def _due_date_iso(cls, value: Any) -> Any:
        return _parse_iso_date(value)

    @property
    def key(self) -> str:
        """Case-insensitive identity used for merge and dedup."""
        return self.title.lower()


class ScheduleEntry(_RecordModel):
    """One week of the course calendar."""

    week_number: int = Field(
        ge=1,
        validation_alias=AliasChoices("week_number", "week_no"),
    )
    date: dt.date | None = None
    topic: str | None = None
    # Titles are free text and may not match any Assignment
    assignment_titles: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("assignment_titles", "assignments"),
    )

    @field_validator("date", mode="before")
    @classmethod
    def _date_iso(cls, value: Any) -> Any:
        return _parse_iso_date(value)

    @field_validator("assignment_titles", mode="before")
    @classmethod
    def _titles_default(cls, value: Any) -> Any:
        return [] if value is None else value


class ExtractedRecord(_RecordModel):
    """Normalized output of one extraction, merge or validation step."""

    course_info: CourseInfo | None = None
    grading_weights: list[GradingWeight]
    assignments: list[Assignment]
    schedule: list[ScheduleEntry] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dictionary (ISO dates, snake_case keys)."""
        return self.model_dump(mode="json")


# =============================================================================
# PARSING
# =============================================================================


@dataclass(frozen=True)
class ParseOk:
    """Generation output conformed to the record shape."""

    record: ExtractedRecord


@dataclass(frozen=True)
class ParseErr:
    """Generation output did not conform; no record is produced."""

    reason: str


ParseResult = Union[ParseOk, ParseErr]


def _summarize_validation_error(error: ValidationError) -> str:
    """Render the first few pydantic errors as 'loc: msg' pairs."""
    parts = []
    for err in error.errors()[:MAX_REPORTED_ERRORS]:
        loc = ".".join(str(p) for p in err["loc"]) or "<root>"
        parts.append(f"{loc}: {err['msg']}")

    remaining = error.error_count() - MAX_REPORTED_ERRORS
    if remaining > 0:
        parts.append(f"... and {remaining} more")
    return "; ".join(parts)


def parse_record(raw: Any) -> ParseResult:
    """Check untyped data against the record shape.

    Never raises for bad data and never returns a partially filled record.

    Args:
        raw: Decoded JSON from the generation service

    Returns:
        ParseOk with the record, or ParseErr with a readable reason
    """
    if not isinstance(raw, dict):
        return ParseErr(f"expected a JSON object, got {type(raw).__name__}")

    try:
        record = ExtractedRecord.model_validate(raw)
    except ValidationError as e:
        return ParseErr(_summarize_validation_error(e))

    return ParseOk(record)


def load_record(path: Path) -> ExtractedRecord:
    """Load a previously saved record from a JSON file.

    Raises:
        ValueError: If the file is not valid JSON or does not match the schema
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"{path} is not valid JSON: {e}") from e

    result = parse_record(raw)
    if isinstance(result, ParseErr):
        raise ValueError(f"{path} does not match the record schema: {result.reason}")

    logger.debug("record_loaded", path=str(path), assignments=len(result.record.assignments))
    return result.record
