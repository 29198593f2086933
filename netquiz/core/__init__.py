"""
Core Module - Shared domain models and policies.

Components:
- models: Questions, per-user records and the StudyState aggregate
- mastery: Mastery classification and the MasteryStore
- modes: Practice mode catalog
- subscription: Tier gating and the monthly usage ledger
- topics: Keyword topic classification and per-topic stats
"""

from netquiz.core.mastery import (
    MasteryCounts,
    MasteryLevel,
    MasteryStore,
    QuestionStat,
    classify_mastery,
)
from netquiz.core.models import (
    Question,
    QuestionOption,
    QuestionResult,
    SessionResult,
    StudyState,
    Tier,
    grade_answer,
)
from netquiz.core.modes import MODE_CATALOG, PracticeMode
from netquiz.core.subscription import (
    DenialReason,
    Feature,
    GateDecision,
    SubscriptionGate,
)

__all__ = [
    # Mastery
    "MasteryCounts",
    "MasteryLevel",
    "MasteryStore",
    "QuestionStat",
    "classify_mastery",
    # Models
    "Question",
    "QuestionOption",
    "QuestionResult",
    "SessionResult",
    "StudyState",
    "Tier",
    "grade_answer",
    # Modes
    "MODE_CATALOG",
    "PracticeMode",
    # Subscription
    "DenialReason",
    "Feature",
    "GateDecision",
    "SubscriptionGate",
]
