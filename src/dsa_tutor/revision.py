"""Three-step revision session: recall the problem, review pattern notes, review code."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from dsa_tutor.errors import NotFoundError, ValidationError
from dsa_tutor.models import RECALL_DIFFICULTIES, ProgressRecord
from dsa_tutor.progress import get_progress
from dsa_tutor.scheduler import complete_revision

REVISION_STEPS = ("problem_recall", "pattern_notes", "code_review")


@dataclass
class RevisionSession:
    """Caller-owned state for one revision. Only ``finish`` touches storage."""
    user_id: str
    problem_id: int
    started_at: datetime
    step: str = "problem_recall"
    recall_difficulty: Optional[str] = None
    finished: bool = False

    @property
    def step_number(self) -> int:
        return REVISION_STEPS.index(self.step) + 1

    @property
    def is_last_step(self) -> bool:
        return self.step == REVISION_STEPS[-1]

    def advance(self) -> str:
        if self.finished:
            raise ValidationError("Revision session already finished")
        if self.is_last_step:
            raise ValidationError("Already at the final revision step")
        self.step = REVISION_STEPS[self.step_number]
        return self.step

    def rate_recall(self, difficulty: str) -> None:
        if difficulty not in RECALL_DIFFICULTIES:
            raise ValidationError(
                f"recall difficulty must be one of {', '.join(RECALL_DIFFICULTIES)}, got {difficulty!r}"
            )
        self.recall_difficulty = difficulty

    def elapsed_seconds(self, now: datetime | None = None) -> int:
        return max(0, int(((now or datetime.now()) - self.started_at).total_seconds()))

    def finish(self, db_path: str, now: datetime | None = None) -> ProgressRecord:
        if self.finished:
            raise ValidationError("Revision session already finished")
        if not self.is_last_step:
            raise ValidationError(f"Cannot finish a revision at step {self.step!r}")
        if self.recall_difficulty is None:
            raise ValidationError("Rate how hard the recall was before finishing")
        now = now or datetime.now()
        record = complete_revision(
            db_path, self.user_id, self.problem_id, self.recall_difficulty,
            time_spent_seconds=self.elapsed_seconds(now), now=now,
        )
        self.finished = True
        return record


def start_session(
    db_path: str, user_id: str, problem_id: int, now: datetime | None = None,
) -> RevisionSession:
    if get_progress(db_path, user_id, problem_id) is None:
        raise NotFoundError(f"No progress for user {user_id!r} on problem {problem_id}")
    return RevisionSession(user_id=user_id, problem_id=problem_id, started_at=now or datetime.now())
