"""Syllabus ingestion: extract, merge and validate course documents."""

__version__ = "0.1.0"
