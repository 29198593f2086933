"""
Core Mastery Module.

Per-question attempt history and the mastery classification derived from it.

Design:
- MasteryLevel: weak / review / mastered, plus ``unseen`` for questions
  that have never been attempted
- QuestionStat: attempt counters and the signed outcome streak
- classify_mastery: the single formula mapping a stat to a level
- MasteryStore: the only writer of QuestionStat records
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from loguru import logger

if TYPE_CHECKING:
    from netquiz.core.models import Question, StudyState
    from netquiz.delivery.state_store import UserStateStore

MASTERED_STREAK = 3


class MasteryLevel(str, Enum):
    """Mastery classification of a single question."""

    UNSEEN = "unseen"
    WEAK = "weak"
    REVIEW = "review"
    MASTERED = "mastered"

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return self.value.title()

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            MasteryLevel.UNSEEN: "dim",
            MasteryLevel.WEAK: "red",
            MasteryLevel.REVIEW: "yellow",
            MasteryLevel.MASTERED: "green",
        }[self]


@dataclass
class QuestionStat:
    """
    Attempt history for one question.

    ``streak`` is a signed run length: positive for consecutive correct
    answers, negative for consecutive misses. ``mastery`` is derived from
    the counters on every read and is never stored independently.
    """

    attempts: int = 0
    correct: int = 0
    incorrect: int = 0
    streak: int = 0
    last_attempted_at: datetime | None = None

    @property
    def mastery(self) -> MasteryLevel:
        return classify_mastery(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "attempts": self.attempts,
            "correct": self.correct,
            "incorrect": self.incorrect,
            "streak": self.streak,
            "mastery": self.mastery.value,
            "last_attempted_at": (
                self.last_attempted_at.isoformat() if self.last_attempted_at else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> QuestionStat:
        """Build from a stored record. A stored ``mastery`` value is ignored."""
        correct = int(data.get("correct", 0))
        incorrect = int(data.get("incorrect", 0))
        last = data.get("last_attempted_at")
        return cls(
            attempts=correct + incorrect,
            correct=correct,
            incorrect=incorrect,
            streak=int(data.get("streak", 0)),
            last_attempted_at=datetime.fromisoformat(last) if last else None,
        )


def classify_mastery(stat: QuestionStat) -> MasteryLevel:
    """
    Classify an attempted question.

    - mastered: three or more correct answers in a row
    - review: currently on a correct run, or more right than wrong over
      at least two attempts
    - weak: everything else

    A single correct answer is ``review``, not ``mastered``.
    """
    if stat.streak >= MASTERED_STREAK:
        return MasteryLevel.MASTERED
    if stat.streak >= 1 or (stat.correct > stat.incorrect and stat.attempts >= 2):
        return MasteryLevel.REVIEW
    return MasteryLevel.WEAK


def apply_result(stat: QuestionStat, is_correct: bool, at: datetime) -> QuestionStat:
    """Return a new stat with one more attempt folded in."""
    if is_correct:
        return replace(
            stat,
            attempts=stat.attempts + 1,
            correct=stat.correct + 1,
            streak=max(0, stat.streak) + 1,
            last_attempted_at=at,
        )
    return replace(
        stat,
        attempts=stat.attempts + 1,
        incorrect=stat.incorrect + 1,
        streak=min(0, stat.streak) - 1,
        last_attempted_at=at,
    )


@dataclass
class MasteryCounts:
    """Question counts per mastery level."""

    mastered: int = 0
    review: int = 0
    weak: int = 0
    unseen: int = 0

    @property
    def total(self) -> int:
        return self.mastered + self.review + self.weak + self.unseen

    def to_dict(self) -> dict[str, int]:
        return {
            "mastered": self.mastered,
            "review": self.review,
            "weak": self.weak,
            "unseen": self.unseen,
        }


@dataclass
class MasteryStore:
    """
    Reads and writes per-question stats on a user's study state.

    Args:
        state: The user's study state aggregate
        store: Optional persistence; stats are saved after every write
        clock: Source of attempt timestamps
    """

    state: StudyState
    store: UserStateStore | None = None
    clock: Callable[[], datetime] = field(default=datetime.now)

    @property
    def stats(self) -> dict[str, QuestionStat]:
        return self.state.question_stats

    def get_stat(self, question_id: str) -> QuestionStat | None:
        return self.stats.get(question_id)

    def mastery_of(self, question_id: str) -> MasteryLevel:
        stat = self.stats.get(question_id)
        if stat is None:
            return MasteryLevel.UNSEEN
        return stat.mastery

    def record_result(self, question_id: str, is_correct: bool) -> QuestionStat:
        """
        Fold one answer into the question's stats.

        Args:
            question_id: The answered question
            is_correct: Whether the answer was correct

        Returns:
            The updated QuestionStat
        """
        previous = self.stats.get(question_id) or QuestionStat()
        updated = apply_result(previous, is_correct, self.clock())
        self.stats[question_id] = updated

        logger.debug(
            f"Question {question_id}: {updated.mastery.value} "
            f"after {updated.attempts} attempt(s), streak {updated.streak}"
        )

        if self.store is not None:
            self.store.save(self.state, "question_stats")
        return updated

    def get_counts(self, questions: Iterable[Question]) -> MasteryCounts:
        counts = MasteryCounts()
        for question in questions:
            level = self.mastery_of(question.id)
            setattr(counts, level.value, getattr(counts, level.value) + 1)
        return counts

    def get_by_mastery(
        self, questions: Iterable[Question], level: MasteryLevel | str
    ) -> list[Question]:
        """
        Filter questions by their exact classification.

        ``unseen`` matches only questions without a stat; ``weak`` matches
        only attempted questions. Use ``get_weak_or_unseen`` for the pooled
        variant.
        """
        level = MasteryLevel(level)
        return [q for q in questions if self.mastery_of(q.id) == level]

    def get_weak_or_unseen(self, questions: Iterable[Question]) -> list[Question]:
        """Questions that are weak or were never attempted."""
        return [
            q
            for q in questions
            if self.mastery_of(q.id) in (MasteryLevel.WEAK, MasteryLevel.UNSEEN)
        ]
