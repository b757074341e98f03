"""Database initialization and connection management."""
import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from dsa_tutor.errors import ConflictError

DEFAULT_DB_PATH = os.environ.get(
    "DSA_TUTOR_DB", str(Path.home() / ".dsa_tutor" / "tutor.db")
)

SCHEMA = """
CREATE TABLE IF NOT EXISTS problems (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    difficulty TEXT NOT NULL CHECK (difficulty IN ('Easy', 'Medium', 'Hard')),
    topics TEXT NOT NULL,           -- JSON list
    companies TEXT NOT NULL DEFAULT '[]',
    pattern_tags TEXT NOT NULL DEFAULT '[]',
    leetcode_id INTEGER,
    solution TEXT,
    hints TEXT NOT NULL DEFAULT '[]',
    time_complexity TEXT,
    space_complexity TEXT,
    import_order INTEGER NOT NULL UNIQUE,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS user_progress (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    problem_id INTEGER NOT NULL REFERENCES problems(id) ON DELETE CASCADE,
    status TEXT NOT NULL DEFAULT 'not_started',
    attempts INTEGER NOT NULL DEFAULT 0,
    successful_attempts INTEGER NOT NULL DEFAULT 0,
    last_attempt_at TEXT,
    completed_at TEXT,
    time_spent INTEGER NOT NULL DEFAULT 0,
    notes TEXT,
    pattern_notes TEXT,
    user_solution TEXT,
    revision_count INTEGER NOT NULL DEFAULT 0,
    next_revision_date TEXT,
    last_recall_difficulty TEXT,
    revision_interval INTEGER NOT NULL DEFAULT 1,
    UNIQUE(user_id, problem_id),
    CHECK (successful_attempts <= attempts)
);

CREATE TABLE IF NOT EXISTS schedules (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    day INTEGER NOT NULL CHECK (day BETWEEN 1 AND 60),
    date TEXT NOT NULL,
    problem_ids TEXT NOT NULL,
    revision_problem_ids TEXT NOT NULL,
    flashcard_topics TEXT NOT NULL,
    is_completed INTEGER NOT NULL DEFAULT 0,
    completed_at TEXT,
    UNIQUE(user_id, day)
);

CREATE TABLE IF NOT EXISTS mistakes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    problem_id INTEGER NOT NULL REFERENCES problems(id) ON DELETE CASCADE,
    mistake_type TEXT NOT NULL,
    description TEXT NOT NULL,
    solution TEXT,
    pattern_name TEXT,
    occurred_at TEXT,
    is_resolved INTEGER NOT NULL DEFAULT 0,
    resolved_at TEXT
);

CREATE TABLE IF NOT EXISTS activity_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    problem_id INTEGER NOT NULL REFERENCES problems(id) ON DELETE CASCADE,
    kind TEXT NOT NULL CHECK (kind IN ('attempt', 'complete', 'revision')),
    occurred_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS user_settings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    key TEXT NOT NULL UNIQUE,
    value TEXT
);

CREATE INDEX IF NOT EXISTS idx_progress_due ON user_progress (user_id, status, next_revision_date);
CREATE INDEX IF NOT EXISTS idx_schedules_date ON schedules (user_id, date);
CREATE INDEX IF NOT EXISTS idx_activity_user ON activity_log (user_id, occurred_at);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory and foreign keys enabled."""
    conn = sqlite3.connect(db_path, timeout=5.0)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()


@contextmanager
def transaction(db_path: str):
    """Yield a connection holding the write lock; commit on success, roll back on error.

    A database locked by another writer is reported as ConflictError so the
    caller can retry the whole operation.
    """
    conn = get_connection(db_path)
    try:
        conn.execute("BEGIN IMMEDIATE")
    except sqlite3.OperationalError as e:
        conn.close()
        if "locked" in str(e) or "busy" in str(e):
            raise ConflictError(f"Database is busy: {e}") from e
        raise
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def stamp(moment: datetime | None = None) -> str:
    """ISO timestamp (second precision) used for every stored time."""
    return (moment or datetime.now()).isoformat(timespec="seconds")


def log_activity(conn: sqlite3.Connection, user_id: str, problem_id: int, kind: str, when: str) -> None:
    conn.execute(
        "INSERT INTO activity_log (user_id, problem_id, kind, occurred_at) VALUES (?, ?, ?, ?)",
        (user_id, problem_id, kind, when),
    )
