"""Consistency checks for a merged record.

Findings are advisory: they are returned as readable strings and never
stop the pipeline.
"""

from __future__ import annotations

from syllabus.core.schema import ExtractedRecord

# Allowed absolute deviation of the weight sum from 1.0
WEIGHT_SUM_TOLERANCE = 0.01


def _check_weight_sum(record: ExtractedRecord) -> str | None:
    total = sum(w.weight_fraction for w in record.grading_weights)
    if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
        return f"Grading weights sum to {total * 100:.1f}%, not 100%"
    return None


def _check_category_coverage(record: ExtractedRecord) -> str | None:
    categories = {w.name.lower() for w in record.grading_weights}
    uncategorized = [
        a
        for a in record.assignments
        if not a.weight_category or a.weight_category.lower() not in categories
    ]
    if uncategorized:
        return f"{len(uncategorized)} assignments lack valid grading categories"
    return None


def validate_record(record: ExtractedRecord) -> list[str]:
    """Return warnings for a record; an empty list means no concerns.

    Only two checks run, and only when the record has grading weights:
    the weights sum to 100% (within tolerance) and every assignment
    names a known grading category.
    """
    if not record.grading_weights:
        return []

    warnings = []
    for check in (_check_weight_sum, _check_category_coverage):
        warning = check(record)
        if warning is not None:
            warnings.append(warning)
    return warnings
