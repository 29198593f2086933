"""
Practice Engine - one user's adaptive practice session API.

Binds a user's StudyState to the mastery store, mode selector, streak
tracker, subscription gate and session recorder, and persists every
mutation through a UserStateStore.

Typical flow:
    engine = PracticeEngine.open(repository, "alice")
    decision = engine.authorize_session(mode, count)
    questions = engine.select_questions(mode, bank, count)
    ... run the session ...
    engine.commit(SessionResult.build(results, mode=mode))
"""

from __future__ import annotations

import random
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime

from loguru import logger

from netquiz.config import Settings, get_settings
from netquiz.core.mastery import MasteryCounts, MasteryLevel, MasteryStore, QuestionStat
from netquiz.core.models import (
    ProgressLog,
    Question,
    SessionResult,
    StreakState,
    StudyState,
)
from netquiz.core.modes import PracticeMode
from netquiz.core.subscription import (
    ActivationResult,
    Feature,
    GateDecision,
    SubscriptionGate,
    UsageSnapshot,
)
from netquiz.core.topics import TopicStats, get_topic_stats
from netquiz.delivery.state_store import StateRepository, UserStateStore
from netquiz.study.recorder import SessionRecorder
from netquiz.study.selector import ModeSelector
from netquiz.study.streaks import StreakTracker


class PracticeEngine:
    """
    Facade over the practice components for a single user.

    Args:
        state: The user's study state aggregate
        store: Persistence for the state (None keeps everything in memory)
        settings: Thresholds, limits and the activation hash
        rng: Random source for question selection
        clock: Source of the current time
    """

    def __init__(
        self,
        state: StudyState,
        store: UserStateStore | None = None,
        settings: Settings | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.state = state
        self.store = store
        self.settings = settings or get_settings()
        self.clock = clock

        self.mastery = MasteryStore(state, store=store, clock=clock)
        self.selector = ModeSelector(self.mastery, rng=rng or random.Random())
        self.streaks = StreakTracker(
            state, store=store, pass_threshold=self.settings.pass_threshold, clock=clock
        )
        self.gate = SubscriptionGate(
            state,
            store=store,
            monthly_limit=self.settings.free_monthly_limit,
            pro_key_hash=self.settings.pro_key_hash,
            clock=clock,
        )
        self.recorder = SessionRecorder(state, store=store, settings=self.settings, clock=clock)

    @classmethod
    def open(
        cls,
        repository: StateRepository,
        user_id: str,
        settings: Settings | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> PracticeEngine:
        """Load a user's state from a repository and bind an engine to it."""
        settings = settings or get_settings()
        store = UserStateStore(repository, user_id, settings=settings)
        return cls(store.load(), store=store, settings=settings, rng=rng, clock=clock)

    @property
    def user_id(self) -> str:
        return self.state.user_id

    # ─── Mastery ───

    def record_result(self, question_id: str, is_correct: bool) -> QuestionStat:
        return self.mastery.record_result(question_id, is_correct)

    def get_counts(self, questions: Iterable[Question]) -> MasteryCounts:
        return self.mastery.get_counts(questions)

    def get_by_mastery(
        self, questions: Iterable[Question], level: MasteryLevel | str
    ) -> list[Question]:
        return self.mastery.get_by_mastery(questions, level)

    def get_weak_or_unseen(self, questions: Iterable[Question]) -> list[Question]:
        return self.mastery.get_weak_or_unseen(questions)

    def get_topic_stats(self, questions: Iterable[Question]) -> dict[str, TopicStats]:
        return get_topic_stats(questions, self.state.question_stats)

    # ─── Selection ───

    def select_questions(
        self,
        mode: PracticeMode | str,
        all_questions: Sequence[Question],
        count: int | None = None,
    ) -> list[Question] | None:
        if count is None:
            count = self.session_size(mode)
        return self.selector.select_questions(mode, all_questions, count)

    def session_size(self, mode: PracticeMode | str) -> int:
        """Default question count for a session in ``mode``."""
        if PracticeMode.parse(mode) == PracticeMode.EXAM:
            return self.state.config.exam_question_count
        return self.settings.questions_per_session

    def next_sequential_block(
        self, all_questions: Sequence[Question], count: int | None = None
    ) -> tuple[int, list[Question]]:
        return self.selector.sequential_block(
            all_questions, self.settings.questions_per_session if count is None else count
        )

    # ─── Streak ───

    def update_streak(self, score: int, total: int) -> StreakState:
        return self.streaks.update_streak(score, total)

    # ─── Subscription ───

    def get_usage(self) -> UsageSnapshot:
        return self.gate.get_usage()

    def can_start_session(self, question_count: int) -> GateDecision:
        return self.gate.can_start_session(question_count)

    def record_usage(self, question_count: int) -> None:
        self.gate.record_usage(question_count)

    def is_mode_allowed(self, mode: PracticeMode | str) -> bool:
        return self.gate.is_mode_allowed(mode)

    def is_feature_allowed(self, feature: Feature | str) -> bool:
        return self.gate.is_feature_allowed(feature)

    def authorize_session(self, mode: PracticeMode | str, question_count: int) -> GateDecision:
        return self.gate.authorize_session(mode, question_count)

    def activate(self, key: str) -> ActivationResult:
        return self.gate.activate(key)

    def upgrade_now(self) -> ActivationResult:
        return self.gate.upgrade_now()

    # ─── Sessions ───

    def commit(self, result: SessionResult) -> ProgressLog:
        return self.recorder.commit(result)

    def reset_progress(self) -> None:
        """Forget mastery, streaks and history. Tier and usage are kept."""
        self.state.question_stats = {}
        self.state.streaks = StreakState()
        self.state.progress = ProgressLog()
        logger.info(f"Reset progress for user {self.user_id}")
        if self.store is not None:
            self.store.save(self.state, "question_stats", "streaks", "progress")
