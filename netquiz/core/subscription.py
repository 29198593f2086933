"""
Subscription Gate - free/pro tiers with monthly usage metering.

Free tier: a fixed number of questions per calendar month, the normal and
weak modes only, cached explanations only.
Pro tier: unlimited questions, every mode, every feature.

Capability checks (modes, features) are independent of the usage quota and
are always evaluated first. Policy denials are returned as GateDecision
values, never raised.
"""

from __future__ import annotations

import hashlib
import hmac
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from loguru import logger

from netquiz.config import DEFAULT_PRO_KEY_HASH
from netquiz.core.models import Tier, UsageLedger
from netquiz.core.modes import PracticeMode

if TYPE_CHECKING:
    from netquiz.core.models import StudyState
    from netquiz.delivery.state_store import UserStateStore

FREE_MONTHLY_LIMIT = 20
FREE_MODES: frozenset[PracticeMode] = frozenset({PracticeMode.NORMAL, PracticeMode.WEAK})


class Feature(str, Enum):
    """Gated features outside of practice modes."""

    CACHED_EXPLANATIONS = "cached_explanations"
    LIVE_AI_EXPLANATIONS = "live_ai_explanations"
    AI_ROADMAP = "ai_roadmap"
    AI_WEAKNESS_ANALYSIS = "ai_weakness_analysis"


FREE_FEATURES: frozenset[Feature] = frozenset({Feature.CACHED_EXPLANATIONS})


class DenialReason(str, Enum):
    QUOTA_EXHAUSTED = "quota_exhausted"
    QUOTA_INSUFFICIENT = "quota_insufficient"
    MODE_LOCKED = "mode_locked"
    FEATURE_LOCKED = "feature_locked"


@dataclass(frozen=True)
class GateDecision:
    """
    Result of an admission check.

    ``remaining`` is None for unlimited (pro) users. For allowed free
    sessions it is the quota left after the session; for denied ones it is
    the quota left now.
    """

    allowed: bool
    remaining: int | None = None
    reason: DenialReason | None = None


@dataclass(frozen=True)
class UsageSnapshot:
    questions_this_month: int
    limit: int
    month: str


@dataclass(frozen=True)
class ActivationResult:
    success: bool
    error: str | None = None


def current_month(now: datetime) -> str:
    return f"{now.year}-{now.month:02d}"


def hash_key(key: str) -> str:
    """Hex SHA-256 of a trimmed activation key."""
    return hashlib.sha256(key.strip().encode("utf-8")).hexdigest()


@dataclass
class SubscriptionGate:
    """
    Tier state, usage ledger and admission control for one user.

    Args:
        state: The user's study state aggregate
        store: Optional persistence for the ``tier`` and ``usage`` records
        monthly_limit: Free-tier questions per calendar month
        pro_key_hash: Hex SHA-256 of the accepted activation key
        clock: Source of the current month
    """

    state: StudyState
    store: UserStateStore | None = None
    monthly_limit: int = FREE_MONTHLY_LIMIT
    pro_key_hash: str = DEFAULT_PRO_KEY_HASH
    clock: Callable[[], datetime] = field(default=datetime.now)

    # ─── Tier ───

    @property
    def tier(self) -> Tier:
        return self.state.subscription.tier

    @property
    def is_pro(self) -> bool:
        return self.tier == Tier.PRO

    def activate(self, key: str) -> ActivationResult:
        """Upgrade to pro if the key hashes to the configured activation hash."""
        if not hmac.compare_digest(hash_key(key), self.pro_key_hash.lower()):
            logger.info(f"Rejected Pro activation for user {self.state.user_id}")
            return ActivationResult(success=False, error="Invalid Pro Key")
        self._set_tier(Tier.PRO)
        return ActivationResult(success=True)

    def upgrade_now(self) -> ActivationResult:
        """Unconditional upgrade after a completed payment."""
        self._set_tier(Tier.PRO)
        return ActivationResult(success=True)

    def deactivate(self) -> None:
        """Administrative downgrade. Nothing in the engine calls this on its own."""
        self._set_tier(Tier.FREE)

    def _set_tier(self, tier: Tier) -> None:
        if self.state.subscription.tier != tier:
            logger.info(f"User {self.state.user_id} tier {self.tier.value} -> {tier.value}")
        self.state.subscription.tier = tier
        if self.store is not None:
            self.store.save(self.state, "tier")

    # ─── Usage ───

    def get_usage(self) -> UsageSnapshot:
        """
        Current month's usage.

        A ledger from an earlier month reads as zero, but the stored ledger
        is left as is until the next ``record_usage``.
        """
        month = current_month(self.clock())
        ledger = self.state.usage
        used = ledger.questions_this_month if ledger.month == month else 0
        return UsageSnapshot(questions_this_month=used, limit=self.monthly_limit, month=month)

    def remaining_questions(self) -> int | None:
        """Questions left this month; None means unlimited."""
        if self.is_pro:
            return None
        usage = self.get_usage()
        return max(0, usage.limit - usage.questions_this_month)

    def can_start_session(self, question_count: int) -> GateDecision:
        """All-or-nothing quota check for a session of ``question_count`` questions."""
        if self.is_pro:
            return GateDecision(allowed=True)

        remaining = self.remaining_questions()
        if remaining <= 0:
            return GateDecision(allowed=False, remaining=0, reason=DenialReason.QUOTA_EXHAUSTED)
        if question_count > remaining:
            return GateDecision(
                allowed=False, remaining=remaining, reason=DenialReason.QUOTA_INSUFFICIENT
            )
        return GateDecision(allowed=True, remaining=remaining - question_count)

    def record_usage(self, question_count: int) -> None:
        if question_count < 0:
            raise ValueError(f"question_count must be >= 0, got {question_count}")
        if self.is_pro:
            return

        usage = self.get_usage()
        self.state.usage = UsageLedger(
            month=usage.month,
            questions_this_month=usage.questions_this_month + question_count,
        )
        logger.debug(
            f"User {self.state.user_id} used {self.state.usage.questions_this_month}"
            f"/{self.monthly_limit} questions in {usage.month}"
        )
        if self.store is not None:
            self.store.save(self.state, "usage")

    # ─── Capabilities ───

    def is_mode_allowed(self, mode: PracticeMode | str) -> bool:
        if self.is_pro:
            return True
        return PracticeMode.parse(mode) in FREE_MODES

    def allowed_modes(self) -> list[PracticeMode] | None:
        """Modes open to this user; None means all of them."""
        if self.is_pro:
            return None
        return [mode for mode in PracticeMode if mode in FREE_MODES]

    def is_feature_allowed(self, feature: Feature | str) -> bool:
        if self.is_pro:
            return True
        try:
            return Feature(feature) in FREE_FEATURES
        except ValueError:
            return False

    def authorize_session(self, mode: PracticeMode | str, question_count: int) -> GateDecision:
        """Mode capability first, then quota."""
        if not self.is_mode_allowed(mode):
            return GateDecision(
                allowed=False,
                remaining=self.remaining_questions(),
                reason=DenialReason.MODE_LOCKED,
            )
        return self.can_start_session(question_count)

    def authorize_feature(self, feature: Feature | str) -> GateDecision:
        if not self.is_feature_allowed(feature):
            return GateDecision(allowed=False, reason=DenialReason.FEATURE_LOCKED)
        return GateDecision(allowed=True, remaining=self.remaining_questions())
