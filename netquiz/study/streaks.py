"""
Daily study streak tracking.

A session passes when it scores at least the pass threshold. Consecutive
calendar days with a passing session extend the streak; a failed session
breaks it unless the day was already earned by an earlier pass.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING

from loguru import logger

from netquiz.core.models import StreakState

if TYPE_CHECKING:
    from netquiz.core.models import StudyState
    from netquiz.delivery.state_store import UserStateStore

PASS_THRESHOLD = 0.70


def is_passing(score: int, total: int, threshold: float = PASS_THRESHOLD) -> bool:
    if total <= 0:
        return False
    return score / total >= threshold


def advance_streak(
    streaks: StreakState, passed: bool, today: date
) -> StreakState:
    """Return the streak state after one session on ``today``."""
    if passed:
        current = streaks.current
        if streaks.last_pass_date != today:
            yesterday = today - timedelta(days=1)
            if streaks.last_pass_date is None or streaks.last_pass_date == yesterday:
                current += 1
            else:
                current = 1
        return replace(
            streaks,
            current=current,
            best=max(streaks.best, current),
            last_pass_date=today,
            last_activity_date=today,
        )

    current = streaks.current if streaks.last_pass_date == today else 0
    return replace(streaks, current=current, last_activity_date=today)


@dataclass
class StreakTracker:
    """
    Applies session scores to a user's streak.

    Args:
        state: The user's study state aggregate
        store: Optional persistence for the ``streaks`` record
        pass_threshold: Minimum score ratio for a passing session
        clock: Source of the current date
    """

    state: StudyState
    store: UserStateStore | None = None
    pass_threshold: float = PASS_THRESHOLD
    clock: Callable[[], datetime] = field(default=datetime.now)

    @property
    def streaks(self) -> StreakState:
        return self.state.streaks

    def update_streak(self, score: int, total: int) -> StreakState:
        """
        Record one completed session.

        Args:
            score: Correct answers in the session
            total: Questions in the session

        Returns:
            The updated StreakState
        """
        passed = is_passing(score, total, self.pass_threshold)
        before = self.state.streaks
        after = advance_streak(before, passed, self.clock().date())
        self.state.streaks = after

        if after.current != before.current:
            logger.info(
                f"User {self.state.user_id} streak {before.current} -> {after.current}"
                f" ({'pass' if passed else 'fail'} {score}/{total})"
            )

        if self.store is not None:
            self.store.save(self.state, "streaks")
        return after
