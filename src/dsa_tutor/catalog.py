"""Problem catalog: search, lookup and bulk import."""
import json
import logging

from dsa_tutor.db import get_connection, stamp, transaction
from dsa_tutor.errors import NotFoundError, ValidationError
from dsa_tutor.models import DIFFICULTIES, Problem

logger = logging.getLogger(__name__)


def search_problems(
    db_path: str, query: str = "", topic: str | None = None, difficulty: str | None = None,
) -> list[Problem]:
    """Filter the catalog by title substring, topic and difficulty, in import order."""
    conditions = []
    params = []
    if topic:
        conditions.append("EXISTS (SELECT 1 FROM json_each(problems.topics) WHERE value = ?)")
        params.append(topic)
    if difficulty:
        conditions.append("difficulty = ?")
        params.append(difficulty)
    sql = "SELECT * FROM problems"
    if conditions:
        sql += " WHERE " + " AND ".join(conditions)
    sql += " ORDER BY import_order ASC"
    conn = get_connection(db_path)
    rows = conn.execute(sql, params).fetchall()
    conn.close()
    problems = [Problem.from_row(r) for r in rows]
    if query:
        # SQLite's lower() only folds ASCII.
        needle = query.casefold()
        problems = [p for p in problems if needle in p.title.casefold()]
    logger.debug("search %r topic=%r difficulty=%r -> %d", query, topic, difficulty, len(problems))
    return problems


def get_all_problems(db_path: str) -> list[Problem]:
    return search_problems(db_path)


def get_problem(db_path: str, problem_id: int) -> Problem:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM problems WHERE id = ?", (problem_id,)).fetchone()
    conn.close()
    if row is None:
        raise NotFoundError(f"Problem {problem_id} not found")
    return Problem.from_row(row)


def count_problems(db_path: str) -> int:
    conn = get_connection(db_path)
    count = conn.execute("SELECT COUNT(*) FROM problems").fetchone()[0]
    conn.close()
    return count


def _as_list(value, name: str) -> list[str]:
    """Accept a list or a ';'-separated string and return a clean list."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(";")
    if not isinstance(value, (list, tuple)):
        raise ValidationError(f"{name} must be a list or a ';'-separated string")
    items = []
    for v in value:
        if not isinstance(v, (str, int, float)) or isinstance(v, bool):
            raise ValidationError(f"{name} entries must be text")
        if str(v).strip():
            items.append(str(v).strip())
    return items


def _as_text(row: dict, *keys: str) -> str | None:
    """First present value among ``keys``; must be text or empty."""
    value = None
    for key in keys:
        if row.get(key) is not None:
            value = row[key]
            break
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    if not isinstance(value, str):
        raise ValidationError(f"{keys[0]} must be text")
    return value


def normalize_row(row: dict) -> dict:
    """Validate one raw import row and return the column values to insert."""
    if not isinstance(row, dict):
        raise ValidationError("row is not a mapping")
    title = (_as_text(row, "title") or "").strip()
    if not title:
        raise ValidationError("title is required")
    difficulty = (_as_text(row, "difficulty") or "").strip().capitalize()
    if difficulty not in DIFFICULTIES:
        raise ValidationError(f"difficulty must be one of {', '.join(DIFFICULTIES)}")
    topics = _as_list(row.get("topics"), "topics")
    if not topics:
        raise ValidationError("at least one topic is required")

    leetcode_id = row.get("leetcode_id", row.get("leetcodeId"))
    if leetcode_id in ("", None):
        leetcode_id = None
    elif isinstance(leetcode_id, bool):
        raise ValidationError(f"leetcode_id {leetcode_id!r} is not an integer")
    else:
        try:
            leetcode_id = int(leetcode_id)
        except (TypeError, ValueError, OverflowError):
            raise ValidationError(f"leetcode_id {leetcode_id!r} is not an integer")
        if not 0 < leetcode_id < 2 ** 63:
            raise ValidationError(f"leetcode_id {leetcode_id} is out of range")

    return {
        "title": title,
        "description": _as_text(row, "description") or "",
        "difficulty": difficulty,
        "topics": topics,
        "companies": _as_list(row.get("companies"), "companies"),
        "pattern_tags": _as_list(row.get("pattern_tags", row.get("patterns")), "pattern_tags"),
        "leetcode_id": leetcode_id,
        "solution": _as_text(row, "solution"),
        "hints": _as_list(row.get("hints"), "hints"),
        "time_complexity": _as_text(row, "time_complexity", "timeComplexity"),
        "space_complexity": _as_text(row, "space_complexity", "spaceComplexity"),
    }


def bulk_import(db_path: str, rows: list[dict]) -> dict:
    """Insert problem rows, continuing import_order from the current maximum.

    Malformed rows are skipped; each one is reported in ``errors`` with its
    zero-based index in ``rows``.
    """
    created = 0
    errors = []
    now = stamp()
    with transaction(db_path) as conn:
        next_order = conn.execute(
            "SELECT COALESCE(MAX(import_order), 0) FROM problems"
        ).fetchone()[0] + 1
        for index, raw in enumerate(rows):
            try:
                p = normalize_row(raw)
            except ValidationError as e:
                logger.warning("Skipping import row %d: %s", index, e)
                errors.append({"row": index, "error": str(e)})
                continue
            conn.execute(
                """INSERT INTO problems
                (title, description, difficulty, topics, companies, pattern_tags, leetcode_id,
                 solution, hints, time_complexity, space_complexity, import_order, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    p["title"], p["description"], p["difficulty"], json.dumps(p["topics"]),
                    json.dumps(p["companies"]), json.dumps(p["pattern_tags"]), p["leetcode_id"],
                    p["solution"], json.dumps(p["hints"]), p["time_complexity"],
                    p["space_complexity"], next_order, now,
                ),
            )
            next_order += 1
            created += 1
    logger.info("Imported %d problems (%d rows skipped)", created, len(errors))
    return {"created": created, "errors": errors}


def list_patterns(db_path: str) -> list[dict]:
    """Distinct pattern tags with the number of problems carrying each."""
    counts: dict[str, int] = {}
    for problem in get_all_problems(db_path):
        for tag in problem.pattern_tags:
            counts[tag] = counts.get(tag, 0) + 1
    return [{"name": name, "count": count} for name, count in counts.items()]
