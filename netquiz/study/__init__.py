"""
Study Module - question selection, streaks and session recording.

Components:
- sampling: Fisher-Yates shuffle and weighted sampling without replacement
- selector: ModeSelector for the seven practice modes
- streaks: Daily pass streak tracking
- recorder: SessionRecorder and history analytics
- engine: PracticeEngine facade for one user
"""

from netquiz.study.engine import PracticeEngine
from netquiz.study.recorder import SessionRecorder
from netquiz.study.selector import ModeSelector, mixed_allocation, reinforcement_weight
from netquiz.study.streaks import StreakTracker

__all__ = [
    "ModeSelector",
    "PracticeEngine",
    "SessionRecorder",
    "StreakTracker",
    "mixed_allocation",
    "reinforcement_weight",
]
