"""
Integration tests for the practice engine over a SQLite state database.

Each test opens engines the way the CLI does: load the user's records,
run a session, commit, and read the records back through a fresh engine.
"""

import hashlib
import random

import pytest

from netquiz.config import Settings
from netquiz.core.mastery import MasteryLevel
from netquiz.core.models import QuestionResult, SessionResult, Tier, grade_answer
from netquiz.core.subscription import DenialReason
from netquiz.delivery.state_store import SqlStateRepository
from netquiz.study.engine import PracticeEngine

pytestmark = pytest.mark.integration


@pytest.fixture
def repository(tmp_path):
    repo = SqlStateRepository(f"sqlite:///{tmp_path / 'state.db'}")
    yield repo
    repo.close()


@pytest.fixture
def settings():
    return Settings(_env_file=None, database_url="sqlite:///:memory:")


def open_engine(repository, settings, clock, user="alice", seed=0) -> PracticeEngine:
    return PracticeEngine.open(
        repository, user, settings=settings, rng=random.Random(seed), clock=clock
    )


def run_session(engine, questions, answers, mode="normal", start=0) -> SessionResult:
    results = []
    for question, letters in zip(questions, answers):
        results.append(
            QuestionResult(
                question_id=question.id,
                is_correct=grade_answer(question, letters),
                selected_letters=tuple(letters),
                correct_letters=tuple(sorted(question.correct_answers)),
                question_text=question.text,
            )
        )
    result = SessionResult.build(results, mode=mode, start_index=start)
    engine.commit(result)
    return result


class TestNormalFlow:
    def test_commit_survives_reopen(self, repository, settings, clock, bank):
        engine = open_engine(repository, settings, clock)
        assert engine.select_questions("normal", bank) is None

        start, block = engine.next_sequential_block(bank)
        answers = [["B"]] * 8 + [["A"], ["C", "D"]]
        result = run_session(engine, block, answers, start=start)

        reopened = open_engine(repository, settings, clock)
        entry = reopened.state.progress.sessions[-1]

        assert entry.result == result
        assert (entry.result.score, entry.result.total) == (8, 10)
        assert reopened.state.progress.next_start_index == 10
        assert reopened.state.streaks.current == 1
        assert reopened.get_usage().questions_this_month == 10
        assert {q.id for q in block} == set(reopened.state.question_stats)
        assert [e.question_id for e in reopened.state.progress.incorrect_log] == ["q9", "q10"]

    def test_sequential_blocks_walk_the_bank(self, repository, settings, clock, bank):
        engine = open_engine(repository, settings, clock)
        engine.upgrade_now()

        starts = []
        for _ in range(3):
            start, block = engine.next_sequential_block(bank)
            starts.append(start)
            run_session(engine, block, [["B"]] * len(block), start=start)

        assert starts == [0, 10, 0]

    def test_explicit_zero_block_is_empty(self, repository, settings, clock, bank):
        engine = open_engine(repository, settings, clock)
        engine.state.progress.next_start_index = 10

        assert engine.next_sequential_block(bank, 0) == (10, [])
        start, block = engine.next_sequential_block(bank)
        assert (start, len(block)) == (10, 10)


class TestFreeTierFlow:
    def test_monthly_quota_blocks_third_session(self, repository, settings, clock, bank):
        engine = open_engine(repository, settings, clock)
        for _ in range(2):
            assert engine.authorize_session("weak", 10).allowed
            picked = engine.select_questions("weak", bank, 10)
            run_session(engine, picked, [["A"]] * 10, mode="weak")

        decision = open_engine(repository, settings, clock).authorize_session("weak", 10)

        assert not decision.allowed
        assert decision.reason == DenialReason.QUOTA_EXHAUSTED

    def test_quota_resets_next_month(self, repository, settings, clock, bank):
        engine = open_engine(repository, settings, clock)
        run_session(engine, bank[:10], [["B"]] * 10)
        run_session(engine, bank[10:], [["B"]] * 10)
        assert not engine.can_start_session(1).allowed

        clock.advance(days=20)
        engine = open_engine(repository, settings, clock)

        assert engine.can_start_session(10).allowed
        assert engine.state.usage.month == "2024-03"

    def test_locked_mode_until_activation(self, repository, clock, bank):
        settings = Settings(
            _env_file=None,
            database_url="sqlite:///:memory:",
            pro_key_hash=hashlib.sha256(b"LET-ME-IN").hexdigest(),
        )
        engine = open_engine(repository, settings, clock)
        assert engine.authorize_session("mixed", 10).reason == DenialReason.MODE_LOCKED

        assert not engine.activate("wrong").success
        assert engine.activate("LET-ME-IN").success

        reopened = open_engine(repository, settings, clock)
        assert reopened.state.subscription.tier == Tier.PRO
        assert reopened.authorize_session("mixed", 10).allowed


class TestAdaptiveModes:
    def test_weak_questions_resurface_then_master(self, repository, settings, clock, bank):
        engine = open_engine(repository, settings, clock)
        engine.upgrade_now()
        run_session(engine, bank[:10], [["A"]] * 5 + [["B"]] * 5)

        weak = engine.get_by_mastery(bank, MasteryLevel.WEAK)
        assert [q.id for q in weak] == ["q1", "q2", "q3", "q4", "q5"]

        for _ in range(3):
            clock.advance(days=1)
            run_session(engine, weak, [["B"]] * 5, mode="review")

        counts = open_engine(repository, settings, clock).get_counts(bank)
        assert counts.to_dict() == {"mastered": 5, "review": 5, "weak": 0, "unseen": 10}
        assert engine.state.streaks.current == 3

    def test_exam_uses_per_user_block_size(self, repository, settings, clock, bank):
        engine = open_engine(repository, settings, clock)
        engine.upgrade_now()
        engine.state.config.exam_question_count = 8
        engine.store.save(engine.state, "config")

        reopened = open_engine(repository, settings, clock)
        picked = reopened.select_questions("exam", bank)

        assert reopened.session_size("exam") == 8
        assert [q.id for q in picked] == [f"q{n}" for n in range(1, 9)]

    def test_topic_stats_follow_commits(self, repository, settings, clock, bank):
        engine = open_engine(repository, settings, clock)
        run_session(engine, bank[:4], [["B"]] * 4)

        stats = engine.get_topic_stats(bank)["Network Security"]
        assert (stats.total, stats.attempted, stats.review) == (20, 4, 4)


class TestReset:
    def test_reset_keeps_tier_and_usage(self, repository, settings, clock, bank):
        engine = open_engine(repository, settings, clock)
        run_session(engine, bank[:5], [["B"]] * 5)
        engine.upgrade_now()

        engine.reset_progress()
        reopened = open_engine(repository, settings, clock)

        assert reopened.state.question_stats == {}
        assert reopened.state.progress.total_quizzes == 0
        assert reopened.state.streaks.current == 0
        assert reopened.state.subscription.tier == Tier.PRO
        assert reopened.state.usage.questions_this_month == 5
