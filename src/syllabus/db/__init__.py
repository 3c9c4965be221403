"""Database module for SQLite persistence.

Provides:
- Database connection management
- Schema initialization
- Catalog repository (courses, grade weights, assignments, ingestion records)
"""

from syllabus.db.database import get_db, init_db

__all__ = ["get_db", "init_db"]
