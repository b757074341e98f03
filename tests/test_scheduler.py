from datetime import datetime, timedelta

import pytest

from dsa_tutor.errors import NotFoundError, ValidationError
from dsa_tutor.progress import complete_problem, record_attempt
from dsa_tutor.scheduler import (
    INTERVAL_LADDER, complete_revision, get_due, ladder_step, next_interval, revision_forecast,
)

NOW = datetime(2026, 3, 1, 9, 0, 0)


def test_ladder_step_clamps():
    assert ladder_step(0) == 1
    assert ladder_step(5) == 30
    assert ladder_step(50) == 30


def test_next_interval_by_difficulty():
    assert next_interval(1, "medium") == 3
    assert next_interval(3, "hard") == 3
    assert next_interval(1, "easy") == 5
    assert next_interval(0, "hard") == 1


def test_next_interval_hard_never_below_one_day():
    for count in range(len(INTERVAL_LADDER) + 2):
        assert next_interval(count, "hard") >= 1


def test_next_interval_rejects_unknown_difficulty():
    with pytest.raises(ValidationError):
        next_interval(1, "trivial")


def test_medium_revisions_walk_the_ladder(catalog_100):
    db, problems = catalog_100
    pid = problems["p1"].id
    record = complete_problem(db, "u1", pid, "summary", now=NOW)
    intervals = [record.revision_interval]
    clock = NOW
    for _ in range(6):
        clock = datetime.fromisoformat(record.next_revision_date)
        record = complete_revision(db, "u1", pid, "medium", now=clock)
        intervals.append(record.revision_interval)
    assert intervals == [1, 3, 5, 7, 14, 30, 30]
    assert record.revision_count == 6


def test_hard_recall_after_two_revisions(catalog_100):
    db, problems = catalog_100
    pid = problems["p1"].id
    complete_problem(db, "u1", pid, "summary", now=NOW)
    complete_revision(db, "u1", pid, "medium", now=NOW)
    complete_revision(db, "u1", pid, "medium", now=NOW)
    record = complete_revision(db, "u1", pid, "hard", time_spent_seconds=150, now=NOW)
    assert record.revision_count == 3
    assert record.revision_interval == 3
    assert record.next_revision_date == (NOW + timedelta(days=3)).isoformat()
    assert record.last_recall_difficulty == "hard"


def test_complete_revision_adds_rounded_minutes(catalog_100):
    db, problems = catalog_100
    pid = problems["p1"].id
    complete_problem(db, "u1", pid, "summary", now=NOW)
    record = complete_revision(db, "u1", pid, "easy", time_spent_seconds=240, now=NOW)
    assert record.time_spent == 4


def test_complete_revision_without_progress(catalog_100):
    db, problems = catalog_100
    with pytest.raises(NotFoundError):
        complete_revision(db, "u1", problems["p1"].id, "medium")


def test_complete_revision_validates_input(catalog_100):
    db, problems = catalog_100
    pid = problems["p1"].id
    complete_problem(db, "u1", pid, "summary", now=NOW)
    with pytest.raises(ValidationError):
        complete_revision(db, "u1", pid, "impossible")
    with pytest.raises(ValidationError):
        complete_revision(db, "u1", pid, "easy", time_spent_seconds=-5)


def test_completed_problem_becomes_due_after_interval(catalog_100):
    db, problems = catalog_100
    pid = problems["p1"].id
    complete_problem(db, "u1", pid, "summary", now=NOW)
    assert get_due(db, "u1", now=NOW) == []
    assert get_due(db, "u1", now=NOW + timedelta(hours=23)) == []
    due = get_due(db, "u1", now=NOW + timedelta(days=1))
    assert [d.problem.id for d in due] == [pid]
    assert due[0].progress.status == "completed"


def test_get_due_ignores_unfinished_and_future(catalog_100):
    db, problems = catalog_100
    record_attempt(db, "u1", problems["p1"].id, succeeded=True, now=NOW)
    complete_problem(db, "u1", problems["p2"].id, "summary", now=NOW)
    complete_problem(db, "u1", problems["p3"].id, "summary", now=NOW - timedelta(days=3))
    later = NOW + timedelta(hours=1)
    due = get_due(db, "u1", now=later)
    assert [d.problem.id for d in due] == [problems["p3"].id]
    for d in due:
        assert d.progress.next_revision_date is not None
        assert d.progress.next_revision_date <= later.isoformat()


def test_get_due_orders_oldest_first(catalog_100):
    db, problems = catalog_100
    complete_problem(db, "u1", problems["p1"].id, "s", now=NOW - timedelta(days=2))
    complete_problem(db, "u1", problems["p2"].id, "s", now=NOW - timedelta(days=5))
    due = get_due(db, "u1", now=NOW)
    assert [d.problem.title for d in due] == ["p2", "p1"]


def test_revision_forecast(catalog_100):
    db, problems = catalog_100
    complete_problem(db, "u1", problems["p1"].id, "s", now=NOW - timedelta(days=4))
    complete_problem(db, "u1", problems["p2"].id, "s", now=NOW)
    complete_problem(db, "u1", problems["p3"].id, "s", now=NOW + timedelta(days=10))
    forecast = revision_forecast(db, "u1", days=3, now=NOW)
    assert forecast == [
        {"date": "2026-03-01", "count": 1},
        {"date": "2026-03-02", "count": 1},
        {"date": "2026-03-03", "count": 0},
    ]


def test_revision_forecast_needs_a_day(db):
    with pytest.raises(ValidationError):
        revision_forecast(db, "u1", days=0)
