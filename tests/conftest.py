"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from netquiz.config import Settings  # noqa: E402
from netquiz.core.models import Question, QuestionOption, StudyState  # noqa: E402
from netquiz.delivery.state_store import MemoryStateRepository  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (SQLite on disk)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        path = str(item.fspath)
        if "unit" in path:
            item.add_marker(pytest.mark.unit)
        elif "integration" in path:
            item.add_marker(pytest.mark.integration)
        elif "smoke" in path:
            item.add_marker(pytest.mark.smoke)


class FakeClock:
    """Settable stand-in for datetime.now."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def make_question(n: int, topic: str | None = "Network Security") -> Question:
    return Question(
        id=f"q{n}",
        text=f"Question {n}: which protocol secures the management plane?",
        options=(
            QuestionOption("A", "Telnet"),
            QuestionOption("B", "SSH"),
            QuestionOption("C", "TFTP"),
            QuestionOption("D", "HTTP"),
        ),
        correct_answers=frozenset({"B"}),
        topic=topic,
        explanation="SSH encrypts the session.",
    )


@pytest.fixture
def question_factory():
    return make_question


@pytest.fixture
def clock():
    """Clock fixed at 2024-03-15 09:00, advanced explicitly by tests."""
    return FakeClock(datetime(2024, 3, 15, 9, 0))


@pytest.fixture
def bank():
    """Twenty questions in bank order q1..q20."""
    return [make_question(n) for n in range(1, 21)]


@pytest.fixture
def state():
    return StudyState(user_id="alice")


@pytest.fixture
def repository():
    return MemoryStateRepository()


@pytest.fixture
def settings():
    return Settings(database_url="sqlite:///:memory:")
