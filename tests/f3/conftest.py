"""Fixtures for F3 tests - Pipeline, Catalog Store, CLI and Web API."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from syllabus.core.extractor import DocumentType, SyllabusExtractor
from syllabus.core.schema import ExtractedRecord
from syllabus.db import database


@pytest.fixture
def db_path(tmp_path, monkeypatch) -> Path:
    """Fresh catalog database; the module-level path is restored afterwards."""
    monkeypatch.setattr(database, "_db_path", None)
    path = tmp_path / "test.db"
    database.init_db(path)
    return path


@pytest.fixture
def syllabus_record() -> ExtractedRecord:
    return ExtractedRecord.model_validate(
        {
            "course_info": {
                "name": "Introduction to Psychology",
                "code": "PSY 101",
                "instructor": "Dr. Jane Alvarez",
                "credits": 3,
            },
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
                    "week_number": 8,
                    "points": 100,
                    "weight_category": "Midterm",
                },
            ],
            "schedule": [{"week_number": 1, "topic": "Intro"}],
        }
    )


@pytest.fixture
def schedule_record() -> ExtractedRecord:
    return ExtractedRecord.model_validate(
        {
            "grading_weights": [],
            "assignments": [
                {"title": "essay 1", "type": "homework", "due_date": "2025-02-10"},
                {"title": "Quiz 1", "type": "quiz", "due_date": "2025-01-24"},
            ],
            "schedule": [
                {"week_number": 1, "topic": "Syllabus overview"},
                {"week_number": 2, "topic": "Chapter 1", "assignment_titles": ["Quiz 1"]},
            ],
        }
    )


@pytest.fixture
def make_extractor():
    """Build a mock extractor answering per document type.

    Each outcome is a record, an exception instance (raised), or a
    callable taking the text and returning a record.
    """

    def _make(syllabus, schedule=None) -> MagicMock:
        outcomes = {DocumentType.SYLLABUS: syllabus, DocumentType.SCHEDULE: schedule}

        def _extract(text, document_type=DocumentType.SYLLABUS):
            outcome = outcomes[DocumentType(document_type)]
            if isinstance(outcome, Exception):
                raise outcome
            if callable(outcome):
                return outcome(text)
            return outcome

        extractor = MagicMock(spec=SyllabusExtractor)
        extractor.extract.side_effect = _extract
        return extractor

    return _make
