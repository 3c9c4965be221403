"""Fixtures for F2 tests - Merge and Validation."""

import pytest

from syllabus.core.schema import ExtractedRecord


@pytest.fixture
def syllabus_record() -> ExtractedRecord:
    """Record as extracted from a syllabus: weights, two assignments, one week."""
    return ExtractedRecord.model_validate(
        {
            "course_info": {"name": "Introduction to Psychology", "code": "PSY 101"},
            "grading_weights": [
                {"name": "Homework", "weight_fraction": 0.2},
                {"name": "Midterm", "weight_fraction": 0.3},
                {"name": "Final", "weight_fraction": 0.5},
            ],
            "assignments": [
                {"title": "Essay 1", "type": "homework", "weight_category": "Homework"},
                {
                    "title": "Midterm Exam",
                    "type": "exam",
                    "due_date": "2025-03-05",
                    "weight_category": "Midterm",
                },
            ],
            "schedule": [{"week_number": 1, "topic": "Intro"}],
        }
    )


@pytest.fixture
def schedule_record() -> ExtractedRecord:
    """Record as extracted from a schedule handout."""
    return ExtractedRecord.model_validate(
        {
            "grading_weights": [],
            "assignments": [
                {"title": "ESSAY 1", "type": "homework", "due_date": "2025-02-10"},
                {"title": "Quiz 1", "type": "quiz", "due_date": "2025-01-24"},
            ],
            "schedule": [
                {"week_number": 1, "topic": "Syllabus overview"},
                {"week_number": 2, "topic": "Chapter 1", "assignment_titles": ["Quiz 1"]},
            ],
        }
    )


@pytest.fixture
def make_record():
    """Factory for records built from plain dicts."""

    def _make(**fields) -> ExtractedRecord:
        fields.setdefault("grading_weights", [])
        fields.setdefault("assignments", [])
        return ExtractedRecord.model_validate(fields)

    return _make
