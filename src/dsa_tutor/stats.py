"""Progress statistics and today's schedule lookup."""
import json
from datetime import date, datetime, time, timedelta

from dsa_tutor.db import get_connection
from dsa_tutor.models import ScheduleDay

WEAK_TOPIC_THRESHOLD = 0.70
MAX_WEAK_TOPICS = 5


def _accuracy(rows) -> int:
    attempts = sum(r["attempts"] for r in rows)
    successes = sum(r["successful_attempts"] for r in rows)
    if attempts == 0:
        return 0
    return round(successes / attempts * 100)


def get_weak_topics(db_path: str, user_id: str, threshold: float = WEAK_TOPIC_THRESHOLD) -> list[dict]:
    """Topics whose rolled-up success ratio is below threshold, worst first."""
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT p.topics, up.attempts, up.successful_attempts
        FROM user_progress up JOIN problems p ON up.problem_id = p.id
        WHERE up.user_id = ?
        ORDER BY p.import_order""",
        (user_id,),
    ).fetchall()
    conn.close()
    totals: dict[str, list[int]] = {}
    for r in rows:
        for topic in json.loads(r["topics"]):
            entry = totals.setdefault(topic, [0, 0])
            entry[0] += r["attempts"]
            entry[1] += r["successful_attempts"]
    weak = [
        {"topic": topic, "attempts": attempts, "successes": successes,
         "ratio": round(successes / attempts, 3)}
        for topic, (attempts, successes) in totals.items()
        if attempts > 0 and successes / attempts < threshold
    ]
    # Stable sort keeps first-seen order between equal ratios.
    weak.sort(key=lambda w: w["successes"] / w["attempts"])
    return weak


def get_streak(db_path: str, user_id: str, today: date | None = None) -> int:
    """Consecutive days, ending today or yesterday, with a completion or revision.

    Revisions count as well as first completions, so a day spent only on
    revisions keeps the streak alive.
    """
    today = today or date.today()
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT DISTINCT substr(occurred_at, 1, 10) AS day FROM activity_log
        WHERE user_id = ? AND kind IN ('complete', 'revision')""",
        (user_id,),
    ).fetchall()
    conn.close()
    active = {date.fromisoformat(r["day"]) for r in rows}
    cursor = today if today in active else today - timedelta(days=1)
    streak = 0
    while cursor in active:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def get_stats(db_path: str, user_id: str, today: date | None = None) -> dict:
    conn = get_connection(db_path)
    total = conn.execute("SELECT COUNT(*) FROM problems").fetchone()[0]
    rows = conn.execute(
        "SELECT status, attempts, successful_attempts FROM user_progress WHERE user_id = ?",
        (user_id,),
    ).fetchall()
    conn.close()
    weak = get_weak_topics(db_path, user_id)[:MAX_WEAK_TOPICS]
    return {
        "total_problems": total,
        "completed_problems": sum(1 for r in rows if r["status"] == "completed"),
        "accuracy": _accuracy(rows),
        "weak_topics": [w["topic"] for w in weak],
        "streak": get_streak(db_path, user_id, today),
    }


def today_schedule(db_path: str, user_id: str, today: date | None = None) -> ScheduleDay | None:
    start = datetime.combine(today or date.today(), time.min)
    end = start + timedelta(days=1)
    conn = get_connection(db_path)
    row = conn.execute(
        "SELECT * FROM schedules WHERE user_id = ? AND date >= ? AND date < ? ORDER BY day LIMIT 1",
        (user_id, start.isoformat(), end.isoformat()),
    ).fetchone()
    conn.close()
    return ScheduleDay.from_row(row) if row else None
