"""
Mode Selector for practice sessions.

Turns a practice mode into a concrete, ordered list of questions:
- weak / review / mastered: filter by mastery, shuffle, truncate
- mixed: 50% weak-or-unseen, 30% review, 20% mastered
- reinforcement: weighted sampling without replacement, biased toward
  frequently missed questions
- exam: contiguous block from the sequential cursor
- normal: None, the caller walks the bank with ``sequential_block``

Invalid modes and empty pools yield an empty list; the caller decides how
to report "not enough questions".
"""

from __future__ import annotations

import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from loguru import logger

from netquiz.core.mastery import MasteryLevel, MasteryStore, QuestionStat
from netquiz.core.models import Question
from netquiz.core.modes import PracticeMode
from netquiz.core.topics import topic_of
from netquiz.study.sampling import WeightedItem, shuffled, weighted_sample

# Mixed-mode shares in tenths: weak-or-unseen, review (mastered gets the rest)
MIXED_WEAK_TENTHS = 5
MIXED_REVIEW_TENTHS = 3

UNSEEN_WEIGHT = 2


def mixed_allocation(count: int) -> tuple[int, int, int]:
    """
    Split ``count`` into (weak, review, mastered) sub-counts.

    The first two are ceiling-rounded with integer arithmetic (so 10 gives
    5/3/2, not the 5/4/1 that float rounding of 10 * 0.3 would give) and the
    three always add up to ``count``.
    """
    if count <= 0:
        return 0, 0, 0
    weak = -(-count * MIXED_WEAK_TENTHS // 10)
    review = min(-(-count * MIXED_REVIEW_TENTHS // 10), count - weak)
    return weak, review, count - weak - review


def reinforcement_weight(stat: QuestionStat | None) -> int:
    """
    Sampling weight for reinforcement mode.

    Unseen questions weigh 2. Attempted ones weigh ``incorrect * 3 - correct``
    (at least 1), doubled while the question is weak.
    """
    if stat is None:
        return UNSEEN_WEIGHT
    weight = max(1, stat.incorrect * 3 - stat.correct)
    if stat.mastery == MasteryLevel.WEAK:
        weight *= 2
    return weight


@dataclass
class ModeSelector:
    """
    Selects session questions from a user's mastery state.

    Args:
        mastery: Mastery store over the user's study state
        rng: Random source for shuffling and sampling
    """

    mastery: MasteryStore
    rng: random.Random = field(default_factory=random.Random)

    def select_questions(
        self,
        mode: PracticeMode | str,
        all_questions: Sequence[Question],
        count: int,
    ) -> list[Question] | None:
        """
        Build the question list for a session.

        Args:
            mode: Practice mode (enum or its string value)
            all_questions: The full question bank, in bank order
            count: Session size (ignored by exam mode)

        Returns:
            Ordered questions, None for normal mode, [] for unknown modes
            or when nothing matches
        """
        parsed = PracticeMode.parse(mode)
        if parsed is None:
            logger.warning(f"Unknown practice mode: {mode!r}")
            return []
        if parsed == PracticeMode.NORMAL:
            return None
        if count <= 0 and parsed != PracticeMode.EXAM:
            return []

        strategy = self._strategies()[parsed]
        selected = strategy(all_questions, count)
        if not selected:
            logger.warning(f"No questions available for {parsed.value} mode")
        else:
            logger.debug(f"Selected {len(selected)} questions for {parsed.value} mode")
        return selected

    def _strategies(
        self,
    ) -> dict[PracticeMode, Callable[[Sequence[Question], int], list[Question]]]:
        return {
            PracticeMode.WEAK: self._select_weak,
            PracticeMode.REVIEW: self._select_review,
            PracticeMode.MASTERED: self._select_mastered,
            PracticeMode.MIXED: self._select_mixed,
            PracticeMode.REINFORCEMENT: self._select_reinforcement,
            PracticeMode.EXAM: self._select_exam,
        }

    # =========================================================================
    # Strategies
    # =========================================================================

    def _select_weak(self, questions: Sequence[Question], count: int) -> list[Question]:
        pool = self.mastery.get_weak_or_unseen(questions)
        return shuffled(pool, self.rng)[:count]

    def _select_review(self, questions: Sequence[Question], count: int) -> list[Question]:
        review = self.mastery.get_by_mastery(questions, MasteryLevel.REVIEW)
        if len(review) < count:
            # Top up with questions that still need work, unseen included
            review = review + self.mastery.get_weak_or_unseen(questions)
        return shuffled(review, self.rng)[:count]

    def _select_mastered(self, questions: Sequence[Question], count: int) -> list[Question]:
        pool = self.mastery.get_by_mastery(questions, MasteryLevel.MASTERED)
        return shuffled(pool, self.rng)[:count]

    def _select_mixed(self, questions: Sequence[Question], count: int) -> list[Question]:
        weak_count, review_count, mastered_count = mixed_allocation(count)

        weak = self.mastery.get_weak_or_unseen(questions)
        review = self.mastery.get_by_mastery(questions, MasteryLevel.REVIEW)
        mastered = self.mastery.get_by_mastery(questions, MasteryLevel.MASTERED)

        blend = (
            shuffled(weak, self.rng)[:weak_count]
            + shuffled(review, self.rng)[:review_count]
            + shuffled(mastered, self.rng)[:mastered_count]
        )
        return shuffled(blend, self.rng)[:count]

    def _select_reinforcement(
        self, questions: Sequence[Question], count: int
    ) -> list[Question]:
        weighted = [
            WeightedItem(q, reinforcement_weight(self.mastery.get_stat(q.id)))
            for q in questions
        ]
        return weighted_sample(weighted, count, self.rng)

    def _select_exam(self, questions: Sequence[Question], count: int) -> list[Question]:
        exam_count = self.mastery.state.config.exam_question_count
        start = self.mastery.state.progress.next_start_index
        if start + exam_count > len(questions):
            start = 0
        return list(questions[start : start + exam_count])

    # =========================================================================
    # Other session sources
    # =========================================================================

    def sequential_block(
        self,
        all_questions: Sequence[Question],
        count: int,
        start: int | None = None,
    ) -> tuple[int, list[Question]]:
        """
        Next block for normal mode.

        Starts at the stored cursor (or ``start`` for a redo) and wraps to the
        beginning once the cursor has run past the end of the bank.

        Returns:
            Tuple of (start index, questions)
        """
        if start is None:
            start = self.mastery.state.progress.next_start_index
        if start < 0 or start >= len(all_questions):
            start = 0
        return start, list(all_questions[start : start + count])

    def select_topic(
        self,
        topic: str,
        all_questions: Sequence[Question],
        count: int,
        weak_only: bool = False,
    ) -> list[Question]:
        """Questions of one topic in bank order, optionally only weak or unseen ones."""
        pool = [q for q in all_questions if topic_of(q) == topic]
        if weak_only:
            pool = self.mastery.get_weak_or_unseen(pool)
        return pool[:count]
