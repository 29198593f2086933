"""
Unit tests for session result records and the StudyState aggregate.
"""

from netquiz.core.models import QuestionResult, SessionResult, StudyState, Tier
from netquiz.core.modes import MODE_CATALOG, PracticeMode


class TestSessionResult:
    def test_build_derives_aggregate(self):
        results = [QuestionResult("q1", True), QuestionResult("q2", False), QuestionResult("q3", True)]
        result = SessionResult.build(results, mode=PracticeMode.WEAK, start_index=4)

        assert (result.score, result.total) == (2, 3)
        assert result.mode == "weak"
        assert (result.start_index, result.end_index) == (4, 7)
        assert [r.question_id for r in result.incorrect] == ["q2"]
        assert round(result.percentage) == 67

    def test_empty_session(self):
        result = SessionResult.build([])
        assert result.total == 0
        assert result.percentage == 0.0

    def test_from_dict_fills_aggregate(self):
        result = SessionResult.from_dict(
            {"results": [{"question_id": "q1", "is_correct": True}], "mode": "exam"}
        )
        assert (result.score, result.total, result.end_index) == (1, 1, 1)


class TestStudyState:
    def test_clone_is_independent(self):
        state = StudyState(user_id="alice")
        draft = state.clone()
        draft.subscription.tier = Tier.PRO
        draft.progress.total_quizzes = 3

        assert state.subscription.tier == Tier.FREE
        assert state.progress.total_quizzes == 0

        state.adopt(draft)
        assert state.subscription.tier == Tier.PRO
        assert state.user_id == "alice"


class TestModes:
    def test_every_mode_has_catalog_entry(self):
        assert set(MODE_CATALOG) == set(PracticeMode)
        assert PracticeMode.EXAM.info.label == "Exam Simulation"

    def test_parse(self):
        assert PracticeMode.parse("Mixed") == PracticeMode.MIXED
        assert PracticeMode.parse(PracticeMode.REVIEW) == PracticeMode.REVIEW
        assert PracticeMode.parse("sprint") is None
