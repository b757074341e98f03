from dsa_tutor.catalog import count_problems, get_all_problems, search_problems
from dsa_tutor.seed import (
    build_rows, difficulty_for, is_seeded, parse_problem_title, seed_catalog, topics_for_pattern,
)


def test_parse_problem_title():
    assert parse_problem_title("1. Two Sum") == (1, "Two Sum")
    assert parse_problem_title("Custom Problem") == (None, "Custom Problem")


def test_topics_for_pattern():
    assert topics_for_pattern("Two Pointers - Fast & Slow") == ["Arrays", "Two Pointers"]
    assert topics_for_pattern("Something Unknown") == ["Algorithms"]


def test_difficulty_for():
    assert difficulty_for(1) == "Easy"
    assert difficulty_for(42) == "Hard"
    assert difficulty_for(15) == "Medium"
    assert difficulty_for(None) == "Medium"


def test_build_rows_tags_pattern():
    rows = build_rows()
    assert rows[0]["title"] == "Two Sum"
    assert rows[0]["pattern_tags"][0] == "Pattern 1"
    assert all(r["topics"] for r in rows)


def test_seed_catalog(db):
    assert not is_seeded(db)
    created = seed_catalog(db)
    assert created == len(build_rows())
    assert is_seeded(db)
    first = get_all_problems(db)[0]
    assert first.title == "Two Sum"
    assert first.import_order == 1
    assert search_problems(db, "two sum", "Arrays", "Easy")


def test_seed_catalog_is_idempotent(db):
    seed_catalog(db)
    count = count_problems(db)
    assert seed_catalog(db) == 0
    assert count_problems(db) == count
