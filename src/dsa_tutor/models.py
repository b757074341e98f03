"""Data classes for the tutor domain model."""
import json
from dataclasses import dataclass, field
from typing import Optional

DIFFICULTIES = ("Easy", "Medium", "Hard")
STATUSES = ("not_started", "in_progress", "completed", "revision_needed")
RECALL_DIFFICULTIES = ("easy", "medium", "hard")


@dataclass
class Problem:
    id: int
    title: str
    difficulty: str
    topics: list[str]
    import_order: int
    description: str = ""
    companies: list[str] = field(default_factory=list)
    pattern_tags: list[str] = field(default_factory=list)
    leetcode_id: Optional[int] = None
    solution: Optional[str] = None
    hints: list[str] = field(default_factory=list)
    time_complexity: Optional[str] = None
    space_complexity: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "Problem":
        return cls(
            id=row["id"],
            title=row["title"],
            difficulty=row["difficulty"],
            topics=json.loads(row["topics"]),
            import_order=row["import_order"],
            description=row["description"] or "",
            companies=json.loads(row["companies"]),
            pattern_tags=json.loads(row["pattern_tags"]),
            leetcode_id=row["leetcode_id"],
            solution=row["solution"],
            hints=json.loads(row["hints"]),
            time_complexity=row["time_complexity"],
            space_complexity=row["space_complexity"],
        )


@dataclass
class ProgressRecord:
    id: int
    user_id: str
    problem_id: int
    status: str = "not_started"
    attempts: int = 0
    successful_attempts: int = 0
    last_attempt_at: Optional[str] = None
    completed_at: Optional[str] = None
    time_spent: int = 0  # minutes
    notes: Optional[str] = None
    pattern_notes: Optional[str] = None
    user_solution: Optional[str] = None
    revision_count: int = 0
    next_revision_date: Optional[str] = None
    last_recall_difficulty: Optional[str] = None
    revision_interval: int = 1

    @classmethod
    def from_row(cls, row) -> "ProgressRecord":
        return cls(**{name: row[name] for name in cls.__dataclass_fields__})


@dataclass
class ScheduleDay:
    user_id: str
    day: int
    date: str
    problem_ids: list[int] = field(default_factory=list)
    revision_problem_ids: list[int] = field(default_factory=list)
    flashcard_topics: list[str] = field(default_factory=list)
    is_completed: bool = False
    completed_at: Optional[str] = None
    id: Optional[int] = None

    @property
    def phase(self) -> str:
        if self.day <= 20:
            return "Foundation"
        elif self.day <= 40:
            return "Reinforcement"
        return "Mastery"

    @classmethod
    def from_row(cls, row) -> "ScheduleDay":
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            day=row["day"],
            date=row["date"],
            problem_ids=json.loads(row["problem_ids"]),
            revision_problem_ids=json.loads(row["revision_problem_ids"]),
            flashcard_topics=json.loads(row["flashcard_topics"]),
            is_completed=bool(row["is_completed"]),
            completed_at=row["completed_at"],
        )


@dataclass
class Mistake:
    id: int
    user_id: str
    problem_id: int
    mistake_type: str
    description: str
    solution: Optional[str] = None
    pattern_name: Optional[str] = None
    occurred_at: Optional[str] = None
    is_resolved: bool = False
    resolved_at: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "Mistake":
        data = {name: row[name] for name in cls.__dataclass_fields__}
        data["is_resolved"] = bool(data["is_resolved"])
        return cls(**data)


@dataclass
class DueRevision:
    problem: Problem
    progress: ProgressRecord
