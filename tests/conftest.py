import pytest

from dsa_tutor.catalog import bulk_import, get_all_problems
from dsa_tutor.db import init_db


def _make_rows(count, difficulty="Easy", topics=("Arrays",), start=1):
    return [
        {"title": f"p{i}", "description": f"Problem {i}", "difficulty": difficulty, "topics": list(topics)}
        for i in range(start, start + count)
    ]


@pytest.fixture
def make_rows():
    """Build plain import rows titled p<start>..p<start+count-1>."""
    return _make_rows


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_tutor.db")
    return db_path


@pytest.fixture
def db(tmp_db):
    """An initialized, empty database."""
    init_db(tmp_db)
    return tmp_db


@pytest.fixture
def catalog_100(db):
    """100 Easy 'Arrays' problems p1..p100; returns (db_path, {title: problem})."""
    bulk_import(db, _make_rows(100))
    return db, {p.title: p for p in get_all_problems(db)}
