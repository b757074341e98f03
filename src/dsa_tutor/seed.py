"""Seed the catalog with the built-in coding-pattern problem sheet."""
import json
import re
from pathlib import Path

from dsa_tutor.catalog import bulk_import, count_problems

CONTENT_DIR = Path(__file__).parent / "content"

# Pattern keyword -> catalog topics. First match wins, so longer keys go first.
TOPIC_MAPPING = [
    ("Two Pointers", ["Arrays", "Two Pointers"]),
    ("Sliding Window", ["Arrays", "Sliding Window"]),
    ("Binary Search", ["Binary Search"]),
    ("Linked List", ["Linked List"]),
    ("Backtracking", ["Backtracking", "Recursion"]),
    ("Tree", ["Trees", "Binary Tree"]),
    ("Graph", ["Graphs", "Graph Theory"]),
    ("DP", ["Dynamic Programming"]),
    ("Heap", ["Heap", "Priority Queue"]),
    ("Greedy", ["Greedy"]),
    ("Stack", ["Stack"]),
    ("Bitwise", ["Bit Manipulation"]),
    ("Array", ["Arrays"]),
    ("String", ["Strings"]),
    ("Design", ["Design", "Data Structure"]),
]

EASY_IDS = {
    1, 20, 21, 26, 27, 35, 53, 69, 70, 94, 100, 101, 104, 110, 121, 122, 136, 141, 155, 167,
    202, 206, 219, 226, 234, 242, 257, 268, 278, 283, 346, 349, 389, 392, 496, 509, 543, 572,
    643, 703, 704, 733, 746, 905, 977, 1046,
}
HARD_IDS = {
    4, 23, 25, 32, 37, 42, 51, 72, 76, 84, 124, 224, 239, 269, 295, 297, 354, 410, 460, 632,
    778, 862,
}

TITLE_RE = re.compile(r"^(\d+)\.\s*(.+)$")


def parse_problem_title(text: str) -> tuple[int | None, str]:
    """Split "<leetcode id>. <title>" into its parts."""
    match = TITLE_RE.match(text.strip())
    if match:
        return int(match.group(1)), match.group(2).strip()
    return None, text.strip()


def topics_for_pattern(pattern: str) -> list[str]:
    for key, topics in TOPIC_MAPPING:
        if key in pattern:
            return list(topics)
    return ["Algorithms"]


def difficulty_for(leetcode_id: int | None) -> str:
    if leetcode_id in EASY_IDS:
        return "Easy"
    if leetcode_id in HARD_IDS:
        return "Hard"
    return "Medium"


def build_rows() -> list[dict]:
    """Expand content/patterns.json into catalog import rows."""
    data = json.loads((CONTENT_DIR / "patterns.json").read_text())
    rows = []
    for number, pattern in enumerate(data["patterns"], 1):
        name = pattern["name"]
        topics = topics_for_pattern(name)
        for entry in pattern["problems"]:
            leetcode_id, title = parse_problem_title(entry)
            rows.append({
                "title": title,
                "description": f"Solve {title} using the {name} pattern.",
                "difficulty": difficulty_for(leetcode_id),
                "topics": topics,
                "pattern_tags": [f"Pattern {number}", name],
                "leetcode_id": leetcode_id,
                "solution": f"Approach: apply the {name.lower()} technique.",
                "hints": [f"Consider the {name.lower()} approach", "Think about the time and space complexity"],
            })
    return rows


def is_seeded(db_path: str) -> bool:
    """Check whether the catalog already holds problems."""
    return count_problems(db_path) > 0


def seed_catalog(db_path: str) -> int:
    """Load the built-in sheet into an empty catalog. Returns the number created."""
    if is_seeded(db_path):
        return 0
    return bulk_import(db_path, build_rows())["created"]
