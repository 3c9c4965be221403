"""Merge a syllabus record with an optional schedule record.

Precedence:
- course_info and grading_weights: syllabus only
- assignments: matched by case-insensitive title; a schedule entry with a
  due date overwrites the fields it states, never weight_category;
  unmatched schedule entries are appended
- schedule: a non-empty schedule from the schedule document wins
"""

from __future__ import annotations

import structlog

from syllabus.core.schema import Assignment, ExtractedRecord

logger = structlog.get_logger(__name__)


def _merge_assignments(
    primary: list[Assignment],
    secondary: list[Assignment],
) -> tuple[list[Assignment], int, int]:
    """Reconcile assignment lists.

    Returns:
        (merged list, number appended, number updated)
    """
    merged = list(primary)
    # First occurrence wins when the primary list repeats a title
    index_by_key: dict[str, int] = {}
    for i, assignment in enumerate(merged):
        index_by_key.setdefault(assignment.key, i)

    appended = 0
    updated = 0

    for incoming in secondary:
        index = index_by_key.get(incoming.key)

        if index is None:
            index_by_key[incoming.key] = len(merged)
            merged.append(incoming)
            appended += 1
        elif incoming.due_date is not None:
            # Only fields the secondary document stated; category stays
            stated = incoming.model_fields_set - {"weight_category"}
            merged[index] = merged[index].model_copy(
                update={name: getattr(incoming, name) for name in stated}
            )
            updated += 1

    return merged, appended, updated


def merge_records(
    primary: ExtractedRecord,
    secondary: ExtractedRecord | None = None,
) -> ExtractedRecord:
    """Combine a syllabus-origin record with a schedule-origin record.

    Pure function: neither input is modified.

    Args:
        primary: Record extracted from the syllabus
        secondary: Record extracted from the schedule document, if any

    Returns:
        primary itself when secondary is None, otherwise a new record
    """
    if secondary is None:
        return primary

    assignments, appended, updated = _merge_assignments(
        primary.assignments, secondary.assignments
    )

    schedule = secondary.schedule if secondary.schedule else primary.schedule

    logger.debug(
        "records_merged",
        assignments=len(assignments),
        appended=appended,
        updated=updated,
        schedule_source="secondary" if secondary.schedule else "primary",
    )

    return primary.model_copy(
        update={
            "assignments": assignments,
            "schedule": schedule,
        }
    )
