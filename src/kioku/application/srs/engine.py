"""
Spaced-repetition scheduling engine.

This is a pure computation module with no I/O and no clock: identical inputs
always produce identical results, so it is safe to call from any thread.
"""

from dataclasses import replace

from kioku.domain.constants import (
    BASE_INTERVALS,
    DEFAULT_EASE_FACTOR,
    EASE_SCALING_LEVEL,
    EASY_EASE_BONUS,
    HARD_EASE_PENALTY,
    MASTERY_BANDS,
    MAX_EASE_FACTOR,
    MAX_KNOWLEDGE_LEVEL,
    MIN_EASE_FACTOR,
    MIN_KNOWLEDGE_LEVEL,
    SECONDS_PER_DAY,
    SECONDS_PER_HOUR,
    SECONDS_PER_MINUTE,
)
from kioku.domain.mastery.models import (
    DifficultyRating,
    MasteryRecord,
    SRSResult,
    WordStatistics,
)


def _clamp(value, low, high):
    return max(low, min(value, high))


class SRSEngine:
    """
    Computes the next mastery state and review delay for one vocabulary item.

    Stateless and side-effect free. Both public operations are total: a
    malformed record is clamped into range on entry instead of rejected.
    """

    def schedule_review(self, record: MasteryRecord, difficulty: DifficultyRating) -> SRSResult:
        """
        Apply one answer to a record.

        Args:
            record: Current mastery state (a default record for unseen items).
            difficulty: The learner's rating for this review.

        Returns:
            SRSResult with the new level, ease, streak, counters and the
            delay in seconds until the next review.
        """
        current = self.normalize(record)
        difficulty = DifficultyRating(difficulty)

        level = current.knowledge_level
        ease = current.ease_factor
        streak = current.consecutive_correct
        correct = current.correct_reviews

        if difficulty is DifficultyRating.EASY:
            level = min(level + 2, MAX_KNOWLEDGE_LEVEL)
            ease = min(ease + EASY_EASE_BONUS, MAX_EASE_FACTOR)
            streak += 1
            correct += 1
        elif difficulty is DifficultyRating.NORMAL:
            level = min(level + 1, MAX_KNOWLEDGE_LEVEL)
            streak += 1
            correct += 1
        else:
            # Hard counts as an attempt but not as a correct review
            level = max(level - 1, MIN_KNOWLEDGE_LEVEL)
            ease = max(ease - HARD_EASE_PENALTY, MIN_EASE_FACTOR)
            streak = 0

        return SRSResult(
            new_knowledge_level=level,
            new_ease_factor=ease,
            next_interval_seconds=self.interval_for(level, ease),
            new_consecutive_correct=streak,
            new_total_reviews=current.total_reviews + 1,
            new_correct_reviews=correct,
        )

    def compute_statistics(self, record: MasteryRecord) -> WordStatistics:
        """
        Derive reporting figures from a record.

        Accuracy is correct / total * 100, or 0 for a record with no reviews.
        """
        current = self.normalize(record)
        accuracy = 0.0
        if current.total_reviews > 0:
            accuracy = current.correct_reviews / current.total_reviews * 100

        return WordStatistics(
            knowledge_level=current.knowledge_level,
            total_reviews=current.total_reviews,
            correct_reviews=current.correct_reviews,
            consecutive_correct=current.consecutive_correct,
            last_reviewed_at=current.last_reviewed_at,
            accuracy=accuracy,
            mastery_level=self.mastery_label(current.knowledge_level),
        )

    def interval_for(self, knowledge_level: int, ease_factor: float) -> float:
        """
        Look up the base interval for a level and apply ease scaling.

        Levels below EASE_SCALING_LEVEL keep the fixed table cadence.
        """
        index = max(knowledge_level, 0)
        base = BASE_INTERVALS[index] if index < len(BASE_INTERVALS) else BASE_INTERVALS[-1]

        if knowledge_level >= EASE_SCALING_LEVEL:
            return base * ease_factor
        return float(base)

    def mastery_label(self, knowledge_level: int) -> str:
        level = _clamp(knowledge_level, MIN_KNOWLEDGE_LEVEL, MAX_KNOWLEDGE_LEVEL)
        for upper, label in MASTERY_BANDS:
            if level <= upper:
                return label
        return MASTERY_BANDS[-1][1]

    def normalize(self, record: MasteryRecord) -> MasteryRecord:
        """
        Clamp a possibly stale or hand-edited record back into its invariants.

        An ease factor of 0 or less means "never set" and becomes the default.
        """
        ease = record.ease_factor if record.ease_factor > 0 else DEFAULT_EASE_FACTOR
        total = max(record.total_reviews, 0)

        return replace(
            record,
            knowledge_level=_clamp(
                int(record.knowledge_level), MIN_KNOWLEDGE_LEVEL, MAX_KNOWLEDGE_LEVEL
            ),
            ease_factor=_clamp(float(ease), MIN_EASE_FACTOR, MAX_EASE_FACTOR),
            consecutive_correct=max(record.consecutive_correct, 0),
            total_reviews=total,
            correct_reviews=_clamp(record.correct_reviews, 0, total),
        )


def format_interval(seconds: float) -> str:
    """
    Render a review delay using its largest whole unit.

    >>> format_interval(259200)
    '3 days'
    """
    for unit, size in (
        ("day", SECONDS_PER_DAY),
        ("hour", SECONDS_PER_HOUR),
        ("minute", SECONDS_PER_MINUTE),
    ):
        count = int(seconds // size)
        if count > 0:
            return f"{count} {unit}" if count == 1 else f"{count} {unit}s"
    return "immediately"
