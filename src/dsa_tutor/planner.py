"""Generate the 60-day, three-phase study plan."""
import json
import logging
import math
from datetime import date, datetime, time, timedelta

from dsa_tutor.catalog import get_all_problems
from dsa_tutor.db import get_connection, stamp, transaction
from dsa_tutor.errors import EmptyCatalogError, NotFoundError
from dsa_tutor.models import Problem, ScheduleDay

logger = logging.getLogger(__name__)

PLAN_DAYS = 60
PHASE_LENGTH = 20
FLASHCARD_TOPICS_PER_DAY = 3
REINFORCEMENT_SIZE = 8
REINFORCEMENT_TAGS = ("DP", "Graph", "Tree", "Backtracking")
REINFORCEMENT_LAG = 14
REINFORCEMENT_REVISIONS = 3
MASTERY_MIX = (("Easy", 2), ("Medium", 4), ("Hard", 2))
MASTERY_LAG = 20
MASTERY_REVISIONS = 2


def _flashcard_topics(problems: list[Problem]) -> list[str]:
    topics = []
    for p in problems:
        for t in p.topics:
            if t not in topics:
                topics.append(t)
                if len(topics) == FLASHCARD_TOPICS_PER_DAY:
                    return topics
    return topics


def _is_reinforcement(problem: Problem) -> bool:
    if problem.difficulty == "Hard":
        return True
    labels = problem.topics + problem.pattern_tags
    return any(tag in label for label in labels for tag in REINFORCEMENT_TAGS)


def foundation_chunk(problems: list[Problem], day: int) -> list[Problem]:
    """Slice of the catalog assigned to Foundation day ``day`` (1-20)."""
    size = math.ceil(len(problems) / PHASE_LENGTH)
    return problems[(day - 1) * size: day * size]


def build_plan(problems: list[Problem], user_id: str, start: date) -> list[ScheduleDay]:
    """Compute all 60 days from an import-ordered catalog without touching storage."""
    reinforcement = [p for p in problems if _is_reinforcement(p)][:REINFORCEMENT_SIZE]
    mastery = []
    for difficulty, count in MASTERY_MIX:
        mastery += [p for p in problems if p.difficulty == difficulty][:count]

    days: dict[int, ScheduleDay] = {}
    for day in range(1, PLAN_DAYS + 1):
        if day <= PHASE_LENGTH:
            new = foundation_chunk(problems, day)
            revisions = []
        elif day <= 2 * PHASE_LENGTH:
            new = reinforcement
            source = day - REINFORCEMENT_LAG
            revisions = []
            if 1 <= source <= PHASE_LENGTH:
                revisions = [p.id for p in foundation_chunk(problems, source)[:REINFORCEMENT_REVISIONS]]
        else:
            new = mastery
            revisions = []
            source = day - MASTERY_LAG
            if 1 <= source <= PHASE_LENGTH:
                revisions = [p.id for p in foundation_chunk(problems, source)[:MASTERY_REVISIONS]]
            for pid in days[day - REINFORCEMENT_LAG].revision_problem_ids:
                if pid not in revisions:
                    revisions.append(pid)
        days[day] = ScheduleDay(
            user_id=user_id,
            day=day,
            date=datetime.combine(start + timedelta(days=day - 1), time.min).isoformat(),
            problem_ids=[p.id for p in new],
            revision_problem_ids=list(revisions),
            flashcard_topics=_flashcard_topics(new),
        )
    return [days[d] for d in sorted(days)]


def generate_plan(db_path: str, user_id: str, start_date: date | None = None) -> list[ScheduleDay]:
    """Replace the user's plan with a freshly generated 60-day plan."""
    problems = get_all_problems(db_path)
    if not problems:
        raise EmptyCatalogError("No problems in the catalog; import problems before generating a plan")
    plan = build_plan(problems, user_id, start_date or date.today())
    with transaction(db_path) as conn:
        conn.execute("DELETE FROM schedules WHERE user_id = ?", (user_id,))
        for entry in plan:
            cursor = conn.execute(
                """INSERT INTO schedules
                (user_id, day, date, problem_ids, revision_problem_ids, flashcard_topics)
                VALUES (?, ?, ?, ?, ?, ?)""",
                (
                    user_id, entry.day, entry.date, json.dumps(entry.problem_ids),
                    json.dumps(entry.revision_problem_ids), json.dumps(entry.flashcard_topics),
                ),
            )
            entry.id = cursor.lastrowid
    logger.info("Generated %d-day plan for %s from %d problems", len(plan), user_id, len(problems))
    return plan


def get_schedule(db_path: str, user_id: str) -> list[ScheduleDay]:
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT * FROM schedules WHERE user_id = ? ORDER BY day", (user_id,)
    ).fetchall()
    conn.close()
    return [ScheduleDay.from_row(r) for r in rows]


def get_schedule_day(db_path: str, user_id: str, day: int) -> ScheduleDay:
    conn = get_connection(db_path)
    row = conn.execute(
        "SELECT * FROM schedules WHERE user_id = ? AND day = ?", (user_id, day)
    ).fetchone()
    conn.close()
    if row is None:
        raise NotFoundError(f"No schedule for day {day} for user {user_id!r}")
    return ScheduleDay.from_row(row)


def complete_schedule_day(
    db_path: str, user_id: str, day: int, now: datetime | None = None,
) -> ScheduleDay:
    with transaction(db_path) as conn:
        updated = conn.execute(
            "UPDATE schedules SET is_completed = 1, completed_at = ? WHERE user_id = ? AND day = ?",
            (stamp(now), user_id, day),
        ).rowcount
        if not updated:
            raise NotFoundError(f"No schedule for day {day} for user {user_id!r}")
    logger.info("Day %d marked complete for %s", day, user_id)
    return get_schedule_day(db_path, user_id, day)


def get_day_progress(db_path: str, user_id: str, day: int) -> dict:
    """How much of a day's new work is solved and how many of its revisions are done.

    A revision counts as done once the problem has been revised on or after
    the schedule date.
    """
    entry = get_schedule_day(db_path, user_id, day)
    conn = get_connection(db_path)
    solved = 0
    for pid in entry.problem_ids:
        row = conn.execute(
            "SELECT status FROM user_progress WHERE user_id = ? AND problem_id = ?",
            (user_id, pid),
        ).fetchone()
        if row and row["status"] == "completed":
            solved += 1
    revised = 0
    for pid in entry.revision_problem_ids:
        row = conn.execute(
            """SELECT 1 FROM activity_log
            WHERE user_id = ? AND problem_id = ? AND kind = 'revision' AND occurred_at >= ?""",
            (user_id, pid, entry.date),
        ).fetchone()
        if row:
            revised += 1
    conn.close()
    return {
        "day": day,
        "solved": solved,
        "new_total": len(entry.problem_ids),
        "revised": revised,
        "revision_total": len(entry.revision_problem_ids),
    }
