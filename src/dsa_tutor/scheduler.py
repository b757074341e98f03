"""Revision scheduling on a fixed interval ladder, adjusted by recall difficulty."""
import logging
from datetime import datetime, timedelta

from dsa_tutor.db import get_connection, log_activity, stamp, transaction
from dsa_tutor.errors import NotFoundError, ValidationError
from dsa_tutor.models import RECALL_DIFFICULTIES, DueRevision, Problem, ProgressRecord

logger = logging.getLogger(__name__)

# Review intervals in days, indexed by revision count; the last step repeats.
INTERVAL_LADDER = [1, 3, 5, 7, 14, 30]


def ladder_step(revision_count: int) -> int:
    return INTERVAL_LADDER[min(max(revision_count, 0), len(INTERVAL_LADDER) - 1)]


def next_interval(revision_count: int, recall_difficulty: str) -> int:
    """Days until the next revision.

    medium keeps the ladder step, hard halves it (never below one day) and
    easy jumps to the following ladder step.

    Args:
        revision_count: Revisions completed so far, including the one just finished.
        recall_difficulty: 'easy', 'medium' or 'hard'.
    """
    if recall_difficulty not in RECALL_DIFFICULTIES:
        raise ValidationError(
            f"recall difficulty must be one of {', '.join(RECALL_DIFFICULTIES)}, got {recall_difficulty!r}"
        )
    base = ladder_step(revision_count)
    if recall_difficulty == "hard":
        return max(1, base // 2)
    if recall_difficulty == "easy":
        return ladder_step(revision_count + 1)
    return base


def complete_revision(
    db_path: str,
    user_id: str,
    problem_id: int,
    recall_difficulty: str,
    time_spent_seconds: int = 0,
    now: datetime | None = None,
) -> ProgressRecord:
    """Record a finished revision and push the next one out along the ladder."""
    if recall_difficulty not in RECALL_DIFFICULTIES:
        raise ValidationError(
            f"recall difficulty must be one of {', '.join(RECALL_DIFFICULTIES)}, got {recall_difficulty!r}"
        )
    if time_spent_seconds < 0:
        raise ValidationError("time spent cannot be negative")
    now = now or datetime.now()
    with transaction(db_path) as conn:
        row = conn.execute(
            "SELECT * FROM user_progress WHERE user_id = ? AND problem_id = ?",
            (user_id, problem_id),
        ).fetchone()
        if row is None:
            raise NotFoundError(f"No progress for user {user_id!r} on problem {problem_id}")
        revision_count = row["revision_count"] + 1
        interval = next_interval(revision_count, recall_difficulty)
        next_date = stamp(now + timedelta(days=interval))
        conn.execute(
            """UPDATE user_progress
            SET revision_count = ?, revision_interval = ?, next_revision_date = ?,
                last_recall_difficulty = ?, time_spent = time_spent + ?
            WHERE id = ?""",
            (revision_count, interval, next_date, recall_difficulty,
             round(time_spent_seconds / 60), row["id"]),
        )
        log_activity(conn, user_id, problem_id, "revision", stamp(now))
        updated = conn.execute("SELECT * FROM user_progress WHERE id = ?", (row["id"],)).fetchone()
    logger.info(
        "Revision %d of problem %s for %s rated %s; next in %d days",
        revision_count, problem_id, user_id, recall_difficulty, interval,
    )
    return ProgressRecord.from_row(updated)


def get_due(db_path: str, user_id: str, now: datetime | None = None) -> list[DueRevision]:
    """Completed problems whose next revision has arrived, oldest due first."""
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT * FROM user_progress
        WHERE user_id = ? AND status = 'completed'
          AND next_revision_date IS NOT NULL AND next_revision_date <= ?
        ORDER BY next_revision_date ASC, id ASC""",
        (user_id, stamp(now)),
    ).fetchall()
    due = []
    for row in rows:
        problem = conn.execute("SELECT * FROM problems WHERE id = ?", (row["problem_id"],)).fetchone()
        due.append(DueRevision(problem=Problem.from_row(problem), progress=ProgressRecord.from_row(row)))
    conn.close()
    logger.debug("%d revisions due for %s", len(due), user_id)
    return due


def revision_forecast(
    db_path: str, user_id: str, days: int = 7, now: datetime | None = None,
) -> list[dict]:
    """Number of revisions falling due on each of the next ``days`` calendar days.

    Anything already overdue is counted on the first day.
    """
    if days < 1:
        raise ValidationError("forecast needs at least one day")
    start = (now or datetime.now()).date()
    end = start + timedelta(days=days)
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT next_revision_date FROM user_progress
        WHERE user_id = ? AND status = 'completed' AND next_revision_date IS NOT NULL
          AND next_revision_date < ?""",
        (user_id, end.isoformat()),
    ).fetchall()
    conn.close()
    counts = {start + timedelta(days=i): 0 for i in range(days)}
    for r in rows:
        due_on = max(datetime.fromisoformat(r["next_revision_date"]).date(), start)
        counts[due_on] += 1
    return [{"date": d.isoformat(), "count": c} for d, c in counts.items()]
