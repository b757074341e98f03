# tests/test_integration.py
"""End-to-end test of the core workflow."""
from datetime import date, datetime, timedelta

from dsa_tutor.catalog import search_problems
from dsa_tutor.db import init_db
from dsa_tutor.mistakes import record_mistake
from dsa_tutor.planner import generate_plan, get_day_progress
from dsa_tutor.progress import complete_problem, record_attempt
from dsa_tutor.revision import start_session
from dsa_tutor.scheduler import get_due
from dsa_tutor.seed import seed_catalog
from dsa_tutor.stats import get_stats, today_schedule


def test_full_study_workflow(tmp_db):
    """Seed, plan, solve, revise and check stats over a few simulated days."""
    # Setup
    init_db(tmp_db)
    seed_catalog(tmp_db)
    start = datetime(2026, 3, 1, 8, 0)

    generate_plan(tmp_db, "u1", start_date=start.date())
    entry = today_schedule(tmp_db, "u1", today=start.date())
    assert entry.day == 1
    assert entry.phase == "Foundation"

    # Day 1: solve every new problem
    for pid in entry.problem_ids:
        record_attempt(tmp_db, "u1", pid, succeeded=True, time_spent_minutes=15, now=start)
        complete_problem(tmp_db, "u1", pid, "pattern summary", code="pass", now=start)
    progress = get_day_progress(tmp_db, "u1", 1)
    assert progress["solved"] == progress["new_total"] == len(entry.problem_ids)

    # Nothing due the same day; everything due the next
    assert get_due(tmp_db, "u1", now=start + timedelta(hours=3)) == []
    day2 = start + timedelta(days=1)
    due = get_due(tmp_db, "u1", now=day2)
    assert [d.problem.id for d in due] == entry.problem_ids

    # Revise the first one through a session
    session = start_session(tmp_db, "u1", due[0].problem.id, now=day2)
    session.advance()
    session.advance()
    session.rate_recall("hard")
    record = session.finish(tmp_db, now=day2 + timedelta(minutes=5))
    assert record.revision_interval == 1
    remaining = get_due(tmp_db, "u1", now=day2 + timedelta(minutes=10))
    assert due[0].problem.id not in [d.problem.id for d in remaining]

    # A mistake brings a solved problem straight back
    record_mistake(tmp_db, "u1", due[0].problem.id, "approach", "forgot the sort", now=day2 + timedelta(hours=1))
    again = get_due(tmp_db, "u1", now=day2 + timedelta(hours=2))
    assert due[0].problem.id in [d.problem.id for d in again]

    stats = get_stats(tmp_db, "u1", today=date(2026, 3, 2))
    assert stats["completed_problems"] == len(entry.problem_ids)
    assert stats["accuracy"] == 100
    assert stats["streak"] == 2
    assert search_problems(tmp_db, "", "Arrays", "Easy")
