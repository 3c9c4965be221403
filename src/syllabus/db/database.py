"""SQLite database connection and schema management.

Provides connection management and schema initialization for the
course catalog (courses, grade weights, assignments, ingestion records).
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import structlog

logger = structlog.get_logger(__name__)

# Default database location
DEFAULT_DB_PATH = Path("db/syllabus.db")

# Current database (module-level for simplicity in CLI context)
_db_path: Path | None = None


def init_db(db_path: Path | None = None) -> None:
    """Initialize database with schema.

    Creates the database file and all required tables if they don't exist.

    Args:
        db_path: Path to database file. Defaults to db/syllabus.db
    """
    global _db_path
    _db_path = db_path or DEFAULT_DB_PATH

    _db_path.parent.mkdir(parents=True, exist_ok=True)

    with get_db() as conn:
        _create_schema(conn)

    logger.info("database.initialized", path=str(_db_path))


@contextmanager
def get_db() -> Generator[sqlite3.Connection, None, None]:
    """Get database connection as context manager.

    Commits on success and rolls back if the block raises.

    Yields:
        SQLite connection with row factory set to sqlite3.Row
    """
    db_path = _db_path or DEFAULT_DB_PATH

    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")

    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _create_schema(conn: sqlite3.Connection) -> None:
    """Create database schema.

    Uses IF NOT EXISTS for idempotency.
    """
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS courses (
            course_id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            name TEXT,
            code TEXT,
            instructor TEXT,
            credits REAL,
            created_at TEXT NOT NULL DEFAULT (datetime('now')),
            updated_at TEXT NOT NULL DEFAULT (datetime('now'))
        );

        -- Replaced as a whole on every ingestion
        CREATE TABLE IF NOT EXISTS grade_weights (
            id TEXT PRIMARY KEY,
            course_id TEXT NOT NULL REFERENCES courses(course_id) ON DELETE CASCADE,
            user_id TEXT NOT NULL,
            name TEXT NOT NULL,
            weight_fraction REAL NOT NULL CHECK(weight_fraction >= 0 AND weight_fraction <= 1)
        );

        CREATE TABLE IF NOT EXISTS assignments (
            id TEXT PRIMARY KEY,
            course_id TEXT NOT NULL REFERENCES courses(course_id) ON DELETE CASCADE,
            user_id TEXT NOT NULL,
            title TEXT NOT NULL,
            assignment_type TEXT NOT NULL DEFAULT 'homework'
                CHECK(assignment_type IN ('homework', 'quiz', 'exam', 'project', 'participation', 'other')),
            due_date TEXT,
            week_number INTEGER,
            points REAL,
            weight_category TEXT,
            source TEXT NOT NULL DEFAULT 'syllabus',
            status TEXT NOT NULL DEFAULT 'pending',
            created_at TEXT NOT NULL DEFAULT (datetime('now'))
        );

        CREATE TABLE IF NOT EXISTS syllabus_documents (
            id TEXT PRIMARY KEY,
            course_id TEXT NOT NULL REFERENCES courses(course_id) ON DELETE CASCADE,
            user_id TEXT NOT NULL,
            document_type TEXT NOT NULL CHECK(document_type IN ('syllabus', 'schedule')),
            parsed_data TEXT NOT NULL,
            parsing_status TEXT NOT NULL DEFAULT 'completed',
            created_at TEXT NOT NULL DEFAULT (datetime('now'))
        );

        CREATE INDEX IF NOT EXISTS idx_grade_weights_course ON grade_weights(course_id);
        CREATE INDEX IF NOT EXISTS idx_assignments_course ON assignments(course_id);
        CREATE INDEX IF NOT EXISTS idx_syllabus_documents_course ON syllabus_documents(course_id);
        """
    )
