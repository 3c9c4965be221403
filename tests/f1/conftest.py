"""Fixtures for F1 tests - Schema and Extraction."""

from typing import Any
from unittest.mock import MagicMock

import pytest


@pytest.fixture
def syllabus_response() -> dict[str, Any]:
    """Generation output for a typical syllabus."""
    return {
        "course_info": {
            "name": "Introduction to Psychology",
            "code": "PSY 101",
            "instructor": "Dr. Jane Alvarez",
            "semester": "Spring 2025",
            "credits": 3,
        },
        "grading_weights": [
            {"name": "Homework", "weight_fraction": 0.2},
            {"name": "Midterm", "weight_fraction": 0.3},
            {"name": "Final", "weight_fraction": 0.5},
        ],
        "assignments": [
            {
                "title": "Essay 1",
                "type": "homework",
                "due_date": None,
                "week_number": 3,
                "points": 50,
                "weight_category": "Homework",
            },
            {
                "title": "Midterm Exam",
                "type": "exam",
                "due_date": "2025-03-05",
                "week_number": 8,
                "points": 100,
                "weight_category": "Midterm",
            },
        ],
        "schedule": [
            {
                "week_number": 1,
                "date": "2025-01-13",
                "topic": "Intro",
                "assignment_titles": [],
            },
        ],
    }


@pytest.fixture
def schedule_response() -> dict[str, Any]:
    """Generation output for a schedule handout (no grading weights)."""
    return {
        "grading_weights": [],
        "schedule": [
            {"week_number": 1, "date": "2025-01-13", "topic": "Syllabus overview"},
            {
                "week_number": 2,
                "date": "2025-01-20",
                "topic": "Chapter 1",
                "assignment_titles": ["Quiz 1"],
            },
        ],
        "assignments": [
            {"title": "Quiz 1", "type": "quiz", "due_date": "2025-01-24", "week_number": 2},
        ],
    }


@pytest.fixture
def mock_service(syllabus_response):
    """Generation service that returns the syllabus response."""
    service = MagicMock()
    service.generate.return_value = syllabus_response
    return service
