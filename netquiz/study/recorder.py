"""
Session Recorder.

Folds a completed session back into the user's state:
1. per-question mastery stats
2. the daily streak
3. the monthly usage ledger
4. the session history and the incorrect-answers log

All four are applied to a draft copy of the state and swapped in together,
so a failure part-way leaves the caller's state untouched.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from loguru import logger

from netquiz.config import Settings, get_settings
from netquiz.core.mastery import MasteryStore
from netquiz.core.models import (
    IncorrectEntry,
    ProgressLog,
    SessionEntry,
    SessionResult,
    StudyState,
)
from netquiz.core.modes import PracticeMode
from netquiz.core.subscription import SubscriptionGate
from netquiz.study.streaks import StreakTracker

if TYPE_CHECKING:
    from netquiz.delivery.state_store import UserStateStore

COMMITTED_SECTIONS = ("question_stats", "streaks", "usage", "progress")


def append_session(
    progress: ProgressLog,
    result: SessionResult,
    recorded_at: datetime,
    incorrect_log_limit: int = 100,
    session_history_limit: int = 500,
) -> SessionEntry:
    """
    Archive a session and log its wrong answers.

    Normal, non-redo sessions also move the sequential cursor to the end of
    the block they covered. Each question keeps only its latest wrong answer
    in the incorrect log, ordered by when it was last missed; the least
    recently missed entries are dropped past the limit.
    """
    progress.total_quizzes += 1
    if result.mode == PracticeMode.NORMAL.value and not result.is_redo:
        progress.next_start_index = result.end_index

    entry = SessionEntry(id=progress.total_quizzes, recorded_at=recorded_at, result=result)
    progress.sessions.append(entry)
    if len(progress.sessions) > session_history_limit:
        del progress.sessions[: len(progress.sessions) - session_history_limit]

    for wrong in result.incorrect:
        logged = IncorrectEntry(
            question_id=wrong.question_id,
            question_text=wrong.question_text,
            selected_letters=wrong.selected_letters,
            correct_letters=wrong.correct_letters,
            recorded_at=recorded_at,
        )
        # A repeat miss moves the question to the newest end
        progress.incorrect_log[:] = [
            e for e in progress.incorrect_log if e.question_id != wrong.question_id
        ]
        progress.incorrect_log.append(logged)
    if len(progress.incorrect_log) > incorrect_log_limit:
        del progress.incorrect_log[: len(progress.incorrect_log) - incorrect_log_limit]

    return entry


@dataclass
class SessionRecorder:
    """
    Commits completed sessions for one user.

    Args:
        state: The user's study state aggregate
        store: Optional persistence; all touched records are saved after commit
        settings: Thresholds and limits (defaults to the global settings)
        clock: Source of timestamps for stats, streak day and usage month
    """

    state: StudyState
    store: UserStateStore | None = None
    settings: Settings = field(default_factory=get_settings)
    clock: Callable[[], datetime] = field(default=datetime.now)

    def commit(self, result: SessionResult) -> ProgressLog:
        """
        Apply a completed session.

        Args:
            result: The finished session

        Returns:
            The user's updated ProgressLog
        """
        now = self.clock()
        draft = self.state.clone()

        mastery = MasteryStore(draft, clock=lambda: now)
        for outcome in result.results:
            mastery.record_result(outcome.question_id, outcome.is_correct)

        StreakTracker(
            draft, pass_threshold=self.settings.pass_threshold, clock=lambda: now
        ).update_streak(result.score, result.total)

        SubscriptionGate(
            draft,
            monthly_limit=self.settings.free_monthly_limit,
            pro_key_hash=self.settings.pro_key_hash,
            clock=lambda: now,
        ).record_usage(result.total)

        append_session(
            draft.progress,
            result,
            now,
            incorrect_log_limit=self.settings.incorrect_log_limit,
            session_history_limit=self.settings.session_history_limit,
        )

        self.state.adopt(draft)
        logger.info(
            f"Committed {result.mode} session for user {self.state.user_id}: "
            f"{result.score}/{result.total}"
        )

        if self.store is not None:
            self.store.save(self.state, *COMMITTED_SECTIONS)
        return self.state.progress


# =============================================================================
# History analytics
# =============================================================================


def _ratio(entry: SessionEntry) -> float:
    return entry.result.score / entry.result.total if entry.result.total else 0.0


def average_score(progress: ProgressLog) -> int:
    """Mean session score in whole percent."""
    scored = [s for s in progress.sessions if s.result.total > 0]
    if not scored:
        return 0
    return round(sum(_ratio(s) * 100 for s in scored) / len(scored))


def best_session(progress: ProgressLog) -> SessionEntry | None:
    """Highest-scoring session; the earliest wins ties."""
    best = None
    for entry in progress.sessions:
        if best is None or _ratio(entry) > _ratio(best):
            best = entry
    return best


def worst_session(progress: ProgressLog) -> SessionEntry | None:
    """Lowest-scoring session; the earliest wins ties."""
    worst = None
    for entry in progress.sessions:
        if worst is None or _ratio(entry) < _ratio(worst):
            worst = entry
    return worst
