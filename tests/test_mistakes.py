from datetime import datetime, timedelta

import pytest

from dsa_tutor.errors import NotFoundError, ValidationError
from dsa_tutor.mistakes import list_mistakes, record_mistake, resolve_mistake
from dsa_tutor.progress import complete_problem, get_progress
from dsa_tutor.scheduler import get_due

NOW = datetime(2026, 3, 1, 9, 0, 0)


def test_record_and_list_mistakes(catalog_100):
    db, problems = catalog_100
    pid = problems["p1"].id
    record_mistake(db, "u1", pid, "off-by-one", "loop ran one too far", now=NOW)
    record_mistake(db, "u1", pid, "edge case", "empty input", solution="guard len == 0",
                   now=NOW + timedelta(minutes=1))
    mistakes = list_mistakes(db, "u1")
    assert [m.mistake_type for m in mistakes] == ["edge case", "off-by-one"]
    assert mistakes[0].solution == "guard len == 0"
    assert list_mistakes(db, "u2") == []


def test_record_mistake_validation(catalog_100):
    db, problems = catalog_100
    with pytest.raises(ValidationError):
        record_mistake(db, "u1", problems["p1"].id, "", "desc")
    with pytest.raises(ValidationError):
        record_mistake(db, "u1", problems["p1"].id, "type", "  ")
    with pytest.raises(NotFoundError):
        record_mistake(db, "u1", 9999, "type", "desc")


def test_mistake_pulls_revision_forward(catalog_100):
    db, problems = catalog_100
    pid = problems["p1"].id
    complete_problem(db, "u1", pid, "summary", now=NOW)
    assert get_due(db, "u1", now=NOW + timedelta(hours=2)) == []
    record_mistake(db, "u1", pid, "logic", "forgot visited set", now=NOW + timedelta(hours=1))
    assert get_progress(db, "u1", pid).next_revision_date == "2026-03-01T10:00:00"
    assert [d.problem.id for d in get_due(db, "u1", now=NOW + timedelta(hours=2))] == [pid]


def test_mistake_on_unsolved_problem_leaves_schedule_alone(catalog_100):
    db, problems = catalog_100
    pid = problems["p1"].id
    record_mistake(db, "u1", pid, "logic", "wrong recurrence", now=NOW)
    assert get_progress(db, "u1", pid) is None


def test_resolve_mistake(catalog_100):
    db, problems = catalog_100
    pid = problems["p1"].id
    m = record_mistake(db, "u1", pid, "logic", "desc", now=NOW)
    resolved = resolve_mistake(db, "u1", m.id, now=NOW)
    assert resolved.is_resolved
    assert resolved.resolved_at == "2026-03-01T09:00:00"
    assert list_mistakes(db, "u1", unresolved_only=True) == []
    assert len(list_mistakes(db, "u1", problem_id=pid)) == 1


def test_resolve_mistake_belongs_to_user(catalog_100):
    db, problems = catalog_100
    m = record_mistake(db, "u1", problems["p1"].id, "logic", "desc")
    with pytest.raises(NotFoundError):
        resolve_mistake(db, "u2", m.id)
