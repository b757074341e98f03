"""Mistake log. Logging a mistake on a solved problem makes it due for revision."""
import logging
from datetime import datetime

from dsa_tutor.db import get_connection, stamp, transaction
from dsa_tutor.errors import NotFoundError, ValidationError
from dsa_tutor.models import Mistake

logger = logging.getLogger(__name__)


def record_mistake(
    db_path: str,
    user_id: str,
    problem_id: int,
    mistake_type: str,
    description: str,
    solution: str | None = None,
    pattern_name: str | None = None,
    now: datetime | None = None,
) -> Mistake:
    if not mistake_type or not mistake_type.strip():
        raise ValidationError("mistake type is required")
    if not description or not description.strip():
        raise ValidationError("mistake description is required")
    when = stamp(now)
    with transaction(db_path) as conn:
        if conn.execute("SELECT 1 FROM problems WHERE id = ?", (problem_id,)).fetchone() is None:
            raise NotFoundError(f"Problem {problem_id} not found")
        cursor = conn.execute(
            """INSERT INTO mistakes
            (user_id, problem_id, mistake_type, description, solution, pattern_name, occurred_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (user_id, problem_id, mistake_type.strip(), description.strip(), solution, pattern_name, when),
        )
        pulled = conn.execute(
            """UPDATE user_progress SET next_revision_date = ?
            WHERE user_id = ? AND problem_id = ? AND status = 'completed'
              AND next_revision_date > ?""",
            (when, user_id, problem_id, when),
        ).rowcount
        row = conn.execute("SELECT * FROM mistakes WHERE id = ?", (cursor.lastrowid,)).fetchone()
    if pulled:
        logger.info("Mistake on problem %s pulled its revision forward for %s", problem_id, user_id)
    return Mistake.from_row(row)


def list_mistakes(
    db_path: str, user_id: str, problem_id: int | None = None, unresolved_only: bool = False,
) -> list[Mistake]:
    sql = "SELECT * FROM mistakes WHERE user_id = ?"
    params: list = [user_id]
    if problem_id is not None:
        sql += " AND problem_id = ?"
        params.append(problem_id)
    if unresolved_only:
        sql += " AND is_resolved = 0"
    sql += " ORDER BY occurred_at DESC, id DESC"
    conn = get_connection(db_path)
    rows = conn.execute(sql, params).fetchall()
    conn.close()
    return [Mistake.from_row(r) for r in rows]


def resolve_mistake(db_path: str, user_id: str, mistake_id: int, now: datetime | None = None) -> Mistake:
    with transaction(db_path) as conn:
        updated = conn.execute(
            "UPDATE mistakes SET is_resolved = 1, resolved_at = ? WHERE id = ? AND user_id = ?",
            (stamp(now), mistake_id, user_id),
        ).rowcount
        if not updated:
            raise NotFoundError(f"Mistake {mistake_id} not found for user {user_id!r}")
        row = conn.execute("SELECT * FROM mistakes WHERE id = ?", (mistake_id,)).fetchone()
    return Mistake.from_row(row)
