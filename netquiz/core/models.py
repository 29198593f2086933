"""
Data classes for the practice engine domain model.

Questions arrive read-only from the parser. Everything else here is
per-user state owned by one signed-in user's namespace and serialized to
plain dicts for the storage collaborator.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any

from netquiz.config import QuizConfig
from netquiz.core.mastery import QuestionStat

# =============================================================================
# Questions
# =============================================================================


@dataclass(frozen=True)
class QuestionOption:
    letter: str
    text: str


@dataclass(frozen=True)
class Question:
    """A multiple-choice question as produced by the parser."""

    id: str
    text: str
    options: tuple[QuestionOption, ...] = ()
    correct_answers: frozenset[str] = frozenset()
    is_multi_select: bool = False
    topic: str | None = None
    explanation: str = ""


def grade_answer(question: Question, selected: Iterable[str]) -> bool:
    """An answer is correct only if the selected letters equal the correct set."""
    chosen = {letter.strip().upper() for letter in selected if letter.strip()}
    return chosen == {letter.upper() for letter in question.correct_answers}


# =============================================================================
# Streaks, usage, tier
# =============================================================================


@dataclass
class StreakState:
    """Consecutive-day count of passing sessions."""

    current: int = 0
    best: int = 0
    last_pass_date: date | None = None
    last_activity_date: date | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "current": self.current,
            "best": self.best,
            "last_pass_date": self.last_pass_date.isoformat() if self.last_pass_date else None,
            "last_activity_date": (
                self.last_activity_date.isoformat() if self.last_activity_date else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StreakState:
        last_pass = data.get("last_pass_date")
        last_activity = data.get("last_activity_date")
        return cls(
            current=max(0, int(data.get("current", 0))),
            best=max(0, int(data.get("best", 0))),
            last_pass_date=date.fromisoformat(last_pass) if last_pass else None,
            last_activity_date=date.fromisoformat(last_activity) if last_activity else None,
        )


@dataclass
class UsageLedger:
    """Questions consumed in one calendar month (``YYYY-MM``)."""

    month: str | None = None
    questions_this_month: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"month": self.month, "questions_this_month": self.questions_this_month}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UsageLedger:
        return cls(
            month=data.get("month"),
            questions_this_month=max(0, int(data.get("questions_this_month", 0))),
        )


class Tier(str, Enum):
    """Subscription level."""

    FREE = "free"
    PRO = "pro"


@dataclass
class SubscriptionState:
    tier: Tier = Tier.FREE

    def to_dict(self) -> dict[str, Any]:
        return {"tier": self.tier.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SubscriptionState:
        # Anything other than an explicit "pro" is the free tier
        return cls(tier=Tier.PRO if data.get("tier") == Tier.PRO.value else Tier.FREE)


# =============================================================================
# Session results
# =============================================================================


@dataclass(frozen=True)
class QuestionResult:
    """Outcome of one question within a session."""

    question_id: str
    is_correct: bool
    selected_letters: tuple[str, ...] = ()
    correct_letters: tuple[str, ...] = ()
    time_taken_seconds: float = 0.0
    question_text: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "question_id": self.question_id,
            "is_correct": self.is_correct,
            "selected_letters": list(self.selected_letters),
            "correct_letters": list(self.correct_letters),
            "time_taken_seconds": self.time_taken_seconds,
            "question_text": self.question_text,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> QuestionResult:
        return cls(
            question_id=str(data["question_id"]),
            is_correct=bool(data["is_correct"]),
            selected_letters=tuple(data.get("selected_letters", ())),
            correct_letters=tuple(data.get("correct_letters", ())),
            time_taken_seconds=float(data.get("time_taken_seconds", 0.0)),
            question_text=data.get("question_text", ""),
        )


@dataclass(frozen=True)
class SessionResult:
    """
    A completed session. Created once and never mutated.

    ``start_index``/``end_index`` locate the block within the full question
    list for sequential sessions; custom modes use ``0..total``.
    """

    results: tuple[QuestionResult, ...]
    score: int
    total: int
    mode: str = "normal"
    start_index: int = 0
    end_index: int = 0
    is_redo: bool = False

    @classmethod
    def build(
        cls,
        results: Sequence[QuestionResult],
        mode: str = "normal",
        start_index: int = 0,
        is_redo: bool = False,
    ) -> SessionResult:
        """Assemble a result, deriving the aggregate from the per-question outcomes."""
        results = tuple(results)
        return cls(
            results=results,
            score=sum(1 for r in results if r.is_correct),
            total=len(results),
            mode=str(getattr(mode, "value", mode)),
            start_index=start_index,
            end_index=start_index + len(results),
            is_redo=is_redo,
        )

    @property
    def incorrect(self) -> tuple[QuestionResult, ...]:
        return tuple(r for r in self.results if not r.is_correct)

    @property
    def percentage(self) -> float:
        if self.total <= 0:
            return 0.0
        return self.score / self.total * 100

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "score": self.score,
            "total": self.total,
            "mode": self.mode,
            "start_index": self.start_index,
            "end_index": self.end_index,
            "is_redo": self.is_redo,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SessionResult:
        results = tuple(QuestionResult.from_dict(r) for r in data.get("results", ()))
        return cls(
            results=results,
            score=int(data.get("score", sum(1 for r in results if r.is_correct))),
            total=int(data.get("total", len(results))),
            mode=data.get("mode", "normal"),
            start_index=int(data.get("start_index", 0)),
            end_index=int(data.get("end_index", len(results))),
            is_redo=bool(data.get("is_redo", False)),
        )


# =============================================================================
# Session history
# =============================================================================


@dataclass(frozen=True)
class SessionEntry:
    """One archived session in the history log."""

    id: int
    recorded_at: datetime
    result: SessionResult

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "recorded_at": self.recorded_at.isoformat(),
            "result": self.result.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SessionEntry:
        return cls(
            id=int(data["id"]),
            recorded_at=datetime.fromisoformat(data["recorded_at"]),
            result=SessionResult.from_dict(data["result"]),
        )


@dataclass(frozen=True)
class IncorrectEntry:
    """Latest wrong answer for a question."""

    question_id: str
    question_text: str
    selected_letters: tuple[str, ...]
    correct_letters: tuple[str, ...]
    recorded_at: datetime

    @property
    def user_answer(self) -> str:
        return ", ".join(self.selected_letters) or "No answer"

    def to_dict(self) -> dict[str, Any]:
        return {
            "question_id": self.question_id,
            "question_text": self.question_text,
            "selected_letters": list(self.selected_letters),
            "correct_letters": list(self.correct_letters),
            "recorded_at": self.recorded_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IncorrectEntry:
        return cls(
            question_id=str(data["question_id"]),
            question_text=data.get("question_text", ""),
            selected_letters=tuple(data.get("selected_letters", ())),
            correct_letters=tuple(data.get("correct_letters", ())),
            recorded_at=datetime.fromisoformat(data["recorded_at"]),
        )


@dataclass
class ProgressLog:
    """Session history plus the sequential cursor."""

    total_quizzes: int = 0
    next_start_index: int = 0
    sessions: list[SessionEntry] = field(default_factory=list)
    incorrect_log: list[IncorrectEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_quizzes": self.total_quizzes,
            "next_start_index": self.next_start_index,
            "sessions": [s.to_dict() for s in self.sessions],
            "incorrect_log": [e.to_dict() for e in self.incorrect_log],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProgressLog:
        return cls(
            total_quizzes=int(data.get("total_quizzes", 0)),
            next_start_index=max(0, int(data.get("next_start_index", 0))),
            sessions=[SessionEntry.from_dict(s) for s in data.get("sessions", ())],
            incorrect_log=[IncorrectEntry.from_dict(e) for e in data.get("incorrect_log", ())],
        )


# =============================================================================
# Aggregate
# =============================================================================


@dataclass
class StudyState:
    """Everything the engine knows about one user."""

    user_id: str
    question_stats: dict[str, QuestionStat] = field(default_factory=dict)
    streaks: StreakState = field(default_factory=StreakState)
    usage: UsageLedger = field(default_factory=UsageLedger)
    subscription: SubscriptionState = field(default_factory=SubscriptionState)
    progress: ProgressLog = field(default_factory=ProgressLog)
    config: QuizConfig = field(default_factory=QuizConfig)

    def clone(self) -> StudyState:
        """Deep copy used as a draft for all-or-nothing updates."""
        return copy.deepcopy(self)

    def adopt(self, draft: StudyState) -> None:
        """Replace this state's records with those of a committed draft."""
        self.question_stats = draft.question_stats
        self.streaks = draft.streaks
        self.usage = draft.usage
        self.subscription = draft.subscription
        self.progress = draft.progress
        self.config = draft.config
