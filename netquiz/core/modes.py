"""
Practice Modes

Defines the seven practice modes a session can be started in:
1. normal - sequential blocks through the question bank
2. weak - questions answered wrongly or never tried
3. review - questions answered right only some of the time
4. mastered - confidence check on strong questions
5. mixed - 50/30/20 blend of weak, review and mastered
6. reinforcement - weighted toward frequently missed questions
7. exam - timed block in bank order
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PracticeMode(str, Enum):
    """Practice mode identifier."""

    NORMAL = "normal"
    WEAK = "weak"
    REVIEW = "review"
    MASTERED = "mastered"
    MIXED = "mixed"
    REINFORCEMENT = "reinforcement"
    EXAM = "exam"

    @classmethod
    def parse(cls, value: str | PracticeMode) -> PracticeMode | None:
        """Return the mode for a string, or None if it is not a known mode."""
        try:
            return cls(str(getattr(value, "value", value)).strip().lower())
        except ValueError:
            return None

    @property
    def info(self) -> ModeInfo:
        return MODE_CATALOG[self]


@dataclass(frozen=True)
class ModeInfo:
    """Display metadata for a mode."""

    label: str
    icon: str
    description: str


MODE_CATALOG: dict[PracticeMode, ModeInfo] = {
    PracticeMode.NORMAL: ModeInfo(
        "Normal (Sequential)", "▶", "Questions in order, 10 per session"
    ),
    PracticeMode.WEAK: ModeInfo("Weak Areas", "🔴", "Focus on questions you get wrong"),
    PracticeMode.REVIEW: ModeInfo("Review", "🟡", "Questions you sometimes get right"),
    PracticeMode.MASTERED: ModeInfo("Mastered", "🟢", "Confidence check on strong areas"),
    PracticeMode.MIXED: ModeInfo("Mixed Practice", "🔀", "Blend of all mastery levels"),
    PracticeMode.REINFORCEMENT: ModeInfo(
        "Reinforcement", "🔁", "Weighted toward frequently wrong questions"
    ),
    PracticeMode.EXAM: ModeInfo("Exam Simulation", "🎯", "Timed, 60 questions, no peeking"),
}
