"""Per-(user, problem) progress: attempts, completion and notes."""
import logging
from datetime import datetime, timedelta

from dsa_tutor.db import get_connection, log_activity, stamp, transaction
from dsa_tutor.errors import NotFoundError, ValidationError
from dsa_tutor.models import ProgressRecord
from dsa_tutor.scheduler import next_interval

logger = logging.getLogger(__name__)


def _ensure_problem(conn, problem_id: int) -> None:
    if conn.execute("SELECT 1 FROM problems WHERE id = ?", (problem_id,)).fetchone() is None:
        raise NotFoundError(f"Problem {problem_id} not found")


def _get_or_create(conn, user_id: str, problem_id: int):
    conn.execute(
        "INSERT OR IGNORE INTO user_progress (user_id, problem_id) VALUES (?, ?)",
        (user_id, problem_id),
    )
    return conn.execute(
        "SELECT * FROM user_progress WHERE user_id = ? AND problem_id = ?",
        (user_id, problem_id),
    ).fetchone()


def get_progress(db_path: str, user_id: str, problem_id: int) -> ProgressRecord | None:
    conn = get_connection(db_path)
    row = conn.execute(
        "SELECT * FROM user_progress WHERE user_id = ? AND problem_id = ?",
        (user_id, problem_id),
    ).fetchone()
    conn.close()
    return ProgressRecord.from_row(row) if row else None


def list_progress(db_path: str, user_id: str) -> list[ProgressRecord]:
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT * FROM user_progress WHERE user_id = ?
        ORDER BY last_attempt_at DESC NULLS LAST, id ASC""",
        (user_id,),
    ).fetchall()
    conn.close()
    return [ProgressRecord.from_row(r) for r in rows]


def record_attempt(
    db_path: str,
    user_id: str,
    problem_id: int,
    succeeded: bool,
    time_spent_minutes: int = 0,
    now: datetime | None = None,
) -> ProgressRecord:
    if time_spent_minutes < 0:
        raise ValidationError("time spent cannot be negative")
    when = stamp(now)
    with transaction(db_path) as conn:
        _ensure_problem(conn, problem_id)
        row = _get_or_create(conn, user_id, problem_id)
        status = "in_progress" if row["status"] == "not_started" else row["status"]
        conn.execute(
            """UPDATE user_progress
            SET attempts = attempts + 1, successful_attempts = successful_attempts + ?,
                last_attempt_at = ?, status = ?, time_spent = time_spent + ?
            WHERE id = ?""",
            (1 if succeeded else 0, when, status, time_spent_minutes, row["id"]),
        )
        log_activity(conn, user_id, problem_id, "attempt", when)
        updated = conn.execute("SELECT * FROM user_progress WHERE id = ?", (row["id"],)).fetchone()
    logger.info("Attempt on problem %s by %s (succeeded=%s)", problem_id, user_id, succeeded)
    return ProgressRecord.from_row(updated)


def complete_problem(
    db_path: str,
    user_id: str,
    problem_id: int,
    summary: str,
    code: str = "",
    notes: str = "",
    time_spent_seconds: int = 0,
    now: datetime | None = None,
) -> ProgressRecord:
    """Mark a problem solved and schedule its first revision.

    The one-line pattern summary is required; it is what the learner sees
    again during the pattern_notes step of a revision.
    """
    if not summary or not summary.strip():
        raise ValidationError("A one-line pattern summary is required to complete a problem")
    if time_spent_seconds < 0:
        raise ValidationError("time spent cannot be negative")
    now = now or datetime.now()
    # First revision assumes a medium recall.
    interval = next_interval(0, "medium")
    with transaction(db_path) as conn:
        _ensure_problem(conn, problem_id)
        row = _get_or_create(conn, user_id, problem_id)
        merged_notes = row["notes"] or ""
        if notes and notes.strip():
            merged_notes = f"{merged_notes}\n\n{notes.strip()}" if merged_notes else notes.strip()
        conn.execute(
            """UPDATE user_progress
            SET status = 'completed', completed_at = ?, pattern_notes = ?, user_solution = ?,
                notes = ?, time_spent = time_spent + ?, next_revision_date = ?,
                revision_interval = ?
            WHERE id = ?""",
            (
                stamp(now), summary.strip(), code, merged_notes or None,
                round(time_spent_seconds / 60), stamp(now + timedelta(days=interval)),
                interval, row["id"],
            ),
        )
        log_activity(conn, user_id, problem_id, "complete", stamp(now))
        updated = conn.execute("SELECT * FROM user_progress WHERE id = ?", (row["id"],)).fetchone()
    logger.info("Problem %s completed by %s; first revision in %d day(s)", problem_id, user_id, interval)
    return ProgressRecord.from_row(updated)


def reset_user(db_path: str, user_id: str) -> None:
    """Delete everything stored for a user."""
    with transaction(db_path) as conn:
        for table in ("user_progress", "schedules", "mistakes", "activity_log"):
            conn.execute(f"DELETE FROM {table} WHERE user_id = ?", (user_id,))
    logger.info("Reset all data for %s", user_id)
