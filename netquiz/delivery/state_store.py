"""
State Store for netquiz.

Per-user persistence of the practice engine's records:
- question_stats: mastery counters per question
- streaks: daily pass streak
- usage: monthly usage ledger
- tier: subscription tier
- progress: session history, incorrect log, sequential cursor
- config: per-user quiz options

Each record is an independent JSON document keyed by (user_id, key).
Storage failures never propagate out of UserStateStore: reads fall back to
defaults and writes are dropped, both with a logged warning.

Database location: ~/.netquiz/state.db (SQLite) unless NETQUIZ_DATABASE_URL is set.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

from loguru import logger
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError

from netquiz.config import QuizConfig, Settings, get_settings
from netquiz.core.mastery import QuestionStat
from netquiz.core.models import (
    ProgressLog,
    StreakState,
    StudyState,
    SubscriptionState,
    UsageLedger,
)

# =============================================================================
# Repositories
# =============================================================================


class StateRepository(Protocol):
    """Key-value storage of JSON records namespaced by user."""

    def get(self, user_id: str, key: str) -> dict[str, Any] | None:
        ...

    def put(self, user_id: str, key: str, value: dict[str, Any]) -> None:
        ...

    def delete(self, user_id: str, key: str) -> None:
        ...


class SqlStateRepository:
    """
    SQLAlchemy-backed repository.

    Args:
        database_url: SQLAlchemy URL (defaults to the configured state database)
    """

    def __init__(self, database_url: str | None = None, echo: bool = False):
        self.database_url = database_url or get_settings().database_url
        _ensure_sqlite_dir(self.database_url)

        self.engine: Engine = create_engine(self.database_url, echo=echo)
        self._init_schema()

        logger.debug(f"State repository initialized at {self.database_url}")

    def _init_schema(self) -> None:
        with self.engine.begin() as conn:
            conn.execute(
                text(
                    """
                    CREATE TABLE IF NOT EXISTS user_state (
                        user_id TEXT NOT NULL,
                        key TEXT NOT NULL,
                        value TEXT NOT NULL,
                        updated_at TIMESTAMP NOT NULL,
                        PRIMARY KEY (user_id, key)
                    )
                    """
                )
            )

    def get(self, user_id: str, key: str) -> dict[str, Any] | None:
        with self.engine.connect() as conn:
            row = conn.execute(
                text("SELECT value FROM user_state WHERE user_id = :user_id AND key = :key"),
                {"user_id": user_id, "key": key},
            ).first()
        if row is None:
            return None
        return json.loads(row[0])

    def put(self, user_id: str, key: str, value: dict[str, Any]) -> None:
        with self.engine.begin() as conn:
            conn.execute(
                text(
                    """
                    INSERT INTO user_state (user_id, key, value, updated_at)
                    VALUES (:user_id, :key, :value, :updated_at)
                    ON CONFLICT (user_id, key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """
                ),
                {
                    "user_id": user_id,
                    "key": key,
                    "value": json.dumps(value),
                    "updated_at": datetime.now().isoformat(),
                },
            )

    def delete(self, user_id: str, key: str) -> None:
        with self.engine.begin() as conn:
            conn.execute(
                text("DELETE FROM user_state WHERE user_id = :user_id AND key = :key"),
                {"user_id": user_id, "key": key},
            )

    def list_users(self) -> list[str]:
        with self.engine.connect() as conn:
            rows = conn.execute(text("SELECT DISTINCT user_id FROM user_state ORDER BY user_id"))
            return [row[0] for row in rows]

    def close(self) -> None:
        self.engine.dispose()


class MemoryStateRepository:
    """In-process repository; values are stored serialized so reads never alias writes."""

    def __init__(self):
        self._data: dict[tuple[str, str], str] = {}

    def get(self, user_id: str, key: str) -> dict[str, Any] | None:
        raw = self._data.get((user_id, key))
        return None if raw is None else json.loads(raw)

    def put(self, user_id: str, key: str, value: dict[str, Any]) -> None:
        self._data[(user_id, key)] = json.dumps(value)

    def delete(self, user_id: str, key: str) -> None:
        self._data.pop((user_id, key), None)


def _ensure_sqlite_dir(database_url: str) -> None:
    url = make_url(database_url)
    if url.drivername.startswith("sqlite") and url.database not in (None, "", ":memory:"):
        Path(url.database).expanduser().parent.mkdir(parents=True, exist_ok=True)


# =============================================================================
# Record codecs
# =============================================================================


def _encode_stats(state: StudyState) -> dict[str, Any]:
    return {qid: stat.to_dict() for qid, stat in state.question_stats.items()}


def _decode_stats(data: dict[str, Any]) -> dict[str, QuestionStat]:
    return {str(qid): QuestionStat.from_dict(raw) for qid, raw in data.items()}


SECTIONS: tuple[str, ...] = ("question_stats", "streaks", "usage", "tier", "progress", "config")

_ENCODERS: dict[str, Callable[[StudyState], dict[str, Any]]] = {
    "question_stats": _encode_stats,
    "streaks": lambda s: s.streaks.to_dict(),
    "usage": lambda s: s.usage.to_dict(),
    "tier": lambda s: s.subscription.to_dict(),
    "progress": lambda s: s.progress.to_dict(),
    "config": lambda s: s.config.model_dump(),
}


# =============================================================================
# User State Store
# =============================================================================


class UserStateStore:
    """
    Loads and saves one user's StudyState through a repository.

    Args:
        repository: Storage backend
        user_id: Signed-in user whose namespace is read and written
        settings: Source of per-user config defaults
    """

    def __init__(
        self,
        repository: StateRepository,
        user_id: str,
        settings: Settings | None = None,
    ):
        self.repository = repository
        self.user_id = user_id
        self.settings = settings or get_settings()

    def load(self) -> StudyState:
        """Read every record; missing or unreadable records come back as defaults."""
        state = StudyState(user_id=self.user_id, config=self.settings.quiz_defaults())

        stats = self._read("question_stats", _decode_stats)
        if stats is not None:
            state.question_stats = stats
        streaks = self._read("streaks", StreakState.from_dict)
        if streaks is not None:
            state.streaks = streaks
        usage = self._read("usage", UsageLedger.from_dict)
        if usage is not None:
            state.usage = usage
        subscription = self._read("tier", SubscriptionState.from_dict)
        if subscription is not None:
            state.subscription = subscription
        progress = self._read("progress", ProgressLog.from_dict)
        if progress is not None:
            state.progress = progress
        config = self._read(
            "config", lambda data: QuizConfig.merged(self.settings.quiz_defaults(), data)
        )
        if config is not None:
            state.config = config

        return state

    def _read(self, key: str, decode: Callable[[dict[str, Any]], Any]) -> Any:
        try:
            data = self.repository.get(self.user_id, key)
            if data is None:
                return None
            if not isinstance(data, dict):
                raise TypeError(f"expected an object, got {type(data).__name__}")
            return decode(data)
        except (SQLAlchemyError, OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Could not read {key} for user {self.user_id}, using defaults: {e}")
            return None

    def save(self, state: StudyState, *sections: str) -> bool:
        """
        Write the given records (all of them if none are named).

        Returns:
            True if every write succeeded
        """
        ok = True
        for key in sections or SECTIONS:
            try:
                self.repository.put(self.user_id, key, _ENCODERS[key](state))
            except (SQLAlchemyError, OSError, ValueError, TypeError) as e:
                logger.warning(f"Could not save {key} for user {self.user_id}: {e}")
                ok = False
        return ok

    def clear(self, *sections: str) -> None:
        for key in sections or SECTIONS:
            try:
                self.repository.delete(self.user_id, key)
            except (SQLAlchemyError, OSError) as e:
                logger.warning(f"Could not clear {key} for user {self.user_id}: {e}")
