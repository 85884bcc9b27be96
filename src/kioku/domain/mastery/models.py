"""
Domain models for spaced-repetition scheduling.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, replace
from enum import Enum

from kioku.domain.constants import DEFAULT_EASE_FACTOR

ItemId = int | str


def parse_item_id(raw: str) -> ItemId:
    """
    Turn a textual id (CLI argument, URL segment, JSON key) into an ItemId.

    Only canonical decimals become ints, so "42" -> 42 but "007" and "٧" stay
    strings and keep addressing the record they were stored under.
    """
    if raw.isdecimal() and str(int(raw)) == raw:
        return int(raw)
    return raw



class DifficultyRating(str, Enum):
    """Learner's self-assessment of how hard an item was to recall."""

    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"


@dataclass(frozen=True)
class SRSResult:
    """
    Output of one scheduling step.

    Attributes:
        new_knowledge_level: Knowledge level after the answer (0-10).
        new_ease_factor: Ease factor after the answer (1.3-4.0).
        next_interval_seconds: Delay until the item is due again.
        new_consecutive_correct: Streak of non-hard answers.
        new_total_reviews: Review count including this answer.
        new_correct_reviews: Correct review count including this answer.
    """

    new_knowledge_level: int
    new_ease_factor: float
    next_interval_seconds: float
    new_consecutive_correct: int
    new_total_reviews: int
    new_correct_reviews: int


@dataclass(frozen=True)
class MasteryRecord:
    """
    A learner's mastery state for one vocabulary item.

    Records are values: scheduling produces a new record via `with_result`.
    """

    item_id: ItemId
    knowledge_level: int = 0
    ease_factor: float = DEFAULT_EASE_FACTOR
    consecutive_correct: int = 0
    total_reviews: int = 0
    correct_reviews: int = 0

    # Epoch seconds, None until the first review
    last_reviewed_at: int | None = None
    next_review_at: int | None = None

    def with_result(self, result: SRSResult, reviewed_at: int) -> "MasteryRecord":
        """Return the record updated with a scheduling result reviewed at `reviewed_at`."""
        return replace(
            self,
            knowledge_level=result.new_knowledge_level,
            ease_factor=result.new_ease_factor,
            consecutive_correct=result.new_consecutive_correct,
            total_reviews=result.new_total_reviews,
            correct_reviews=result.new_correct_reviews,
            last_reviewed_at=reviewed_at,
            next_review_at=reviewed_at + int(result.next_interval_seconds),
        )


@dataclass(frozen=True)
class WordStatistics:
    """Read-only reporting view of a MasteryRecord."""

    knowledge_level: int
    total_reviews: int
    correct_reviews: int
    consecutive_correct: int
    last_reviewed_at: int | None
    accuracy: float  # Percentage, 0-100
    mastery_level: str
