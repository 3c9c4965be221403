"""Repository functions for the course catalog.

Persists a merged ExtractedRecord for a course:
- grade weights are replaced
- assignments are inserted unless a stored one has the same title
  (case-insensitive, scoped to the course)
- course metadata is updated only for fields the record provides
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from typing import Any

import structlog

from syllabus.core.schema import ExtractedRecord
from syllabus.db.database import get_db

logger = structlog.get_logger(__name__)


class CatalogError(Exception):
    """Raised when a catalog operation refers to an unknown course."""

    pass


@dataclass
class CourseRecord:
    """Course row from database."""

    course_id: str
    user_id: str
    name: str | None
    code: str | None
    instructor: str | None
    credits: float | None
    created_at: str
    updated_at: str


@dataclass
class StoreStats:
    """What store_record changed."""

    grade_weights_stored: int = 0
    assignments_inserted: int = 0
    assignments_skipped: int = 0
    course_fields_updated: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "grade_weights_stored": self.grade_weights_stored,
            "assignments_inserted": self.assignments_inserted,
            "assignments_skipped": self.assignments_skipped,
            "course_fields_updated": self.course_fields_updated,
        }


def upsert_course(course_id: str, user_id: str, name: str | None = None) -> None:
    """Create a course row if it doesn't exist yet."""
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO courses (course_id, user_id, name)
            VALUES (?, ?, ?)
            ON CONFLICT(course_id) DO NOTHING
            """,
            (course_id, user_id, name),
        )

    logger.debug("catalog.course_upserted", course_id=course_id)


def get_course(course_id: str) -> CourseRecord | None:
    """Get course by ID, or None if not found."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM courses WHERE course_id = ?", (course_id,)
        ).fetchone()

    if row is None:
        return None

    return CourseRecord(
        course_id=row["course_id"],
        user_id=row["user_id"],
        name=row["name"],
        code=row["code"],
        instructor=row["instructor"],
        credits=row["credits"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def store_record(course_id: str, user_id: str, record: ExtractedRecord) -> StoreStats:
    """Persist a merged record into the catalog.

    All changes happen in one transaction.

    Raises:
        CatalogError: If the course doesn't exist
    """
    stats = StoreStats()

    with get_db() as conn:
        exists = conn.execute(
            "SELECT 1 FROM courses WHERE course_id = ?", (course_id,)
        ).fetchone()
        if exists is None:
            raise CatalogError(f"Course not found: {course_id}")

        conn.execute("DELETE FROM grade_weights WHERE course_id = ?", (course_id,))
        for weight in record.grading_weights:
            conn.execute(
                """
                INSERT INTO grade_weights (id, course_id, user_id, name, weight_fraction)
                VALUES (?, ?, ?, ?, ?)
                """,
                (str(uuid.uuid4()), course_id, user_id, weight.name, weight.weight_fraction),
            )
            stats.grade_weights_stored += 1

        for assignment in record.assignments:
            existing = conn.execute(
                """
                SELECT id FROM assignments
                WHERE course_id = ? AND LOWER(title) = LOWER(?)
                """,
                (course_id, assignment.title),
            ).fetchone()
            if existing is not None:
                stats.assignments_skipped += 1
                continue

            conn.execute(
                """
                INSERT INTO assignments (
                    id, course_id, user_id, title, assignment_type,
                    due_date, week_number, points, weight_category, source, status
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, 'syllabus', 'pending')
                """,
                (
                    str(uuid.uuid4()),
                    course_id,
                    user_id,
                    assignment.title,
                    assignment.type,
                    assignment.due_date.isoformat() if assignment.due_date else None,
                    assignment.week_number,
                    assignment.points,
                    assignment.weight_category,
                ),
            )
            stats.assignments_inserted += 1

        info = record.course_info
        if info is not None:
            updates: list[str] = []
            values: list[Any] = []
            if info.instructor:
                updates.append("instructor = ?")
                values.append(info.instructor)
            if info.credits:
                updates.append("credits = ?")
                values.append(info.credits)
            if info.code:
                updates.append("code = ?")
                values.append(info.code)

            if updates:
                values.append(course_id)
                conn.execute(
                    f"""
                    UPDATE courses
                    SET {', '.join(updates)}, updated_at = datetime('now')
                    WHERE course_id = ?
                    """,
                    values,
                )
                stats.course_fields_updated = len(updates)

    logger.info("catalog.record_stored", course_id=course_id, **stats.to_dict())
    return stats


def save_ingestion(
    course_id: str,
    user_id: str,
    document_type: str,
    record: ExtractedRecord,
) -> str:
    """Keep the parsed record of one ingested document.

    Returns:
        ID of the new syllabus_documents row
    """
    record_id = str(uuid.uuid4())
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO syllabus_documents (
                id, course_id, user_id, document_type, parsed_data, parsing_status
            ) VALUES (?, ?, ?, ?, ?, 'completed')
            """,
            (record_id, course_id, user_id, document_type, json.dumps(record.to_dict())),
        )

    logger.debug("catalog.ingestion_saved", course_id=course_id, document_type=document_type)
    return record_id


def get_course_syllabus(course_id: str) -> dict[str, Any]:
    """Get stored grade weights, syllabus assignments and ingestion records.

    Raises:
        CatalogError: If the course doesn't exist
    """
    with get_db() as conn:
        course = conn.execute(
            "SELECT 1 FROM courses WHERE course_id = ?", (course_id,)
        ).fetchone()
        if course is None:
            raise CatalogError(f"Course not found: {course_id}")

        weights = conn.execute(
            """
            SELECT name, weight_fraction FROM grade_weights
            WHERE course_id = ? ORDER BY weight_fraction DESC
            """,
            (course_id,),
        ).fetchall()

        # NULL due dates sort last
        assignments = conn.execute(
            """
            SELECT title, assignment_type, due_date, week_number, points,
                   weight_category, source, status
            FROM assignments
            WHERE course_id = ? AND source IN ('syllabus', 'schedule')
            ORDER BY due_date IS NULL, due_date ASC
            """,
            (course_id,),
        ).fetchall()

        documents = conn.execute(
            """
            SELECT id, document_type, parsed_data, parsing_status, created_at
            FROM syllabus_documents
            WHERE course_id = ? AND parsing_status = 'completed'
            ORDER BY created_at DESC, rowid DESC
            """,
            (course_id,),
        ).fetchall()

    return {
        "grade_weights": [dict(row) for row in weights],
        "assignments": [dict(row) for row in assignments],
        "syllabus_records": [
            {**dict(row), "parsed_data": json.loads(row["parsed_data"])}
            for row in documents
        ],
    }
