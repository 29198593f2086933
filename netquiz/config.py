"""
Configuration settings for the netquiz practice engine.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATA_DIR = Path.home() / ".netquiz"

# SHA-256 of the Pro activation key
DEFAULT_PRO_KEY_HASH = "2a5abf58caebb752ee2d12eaef3e7256a1dbc3cf59e3a7c0c3e8e3cc2f9a8c4b"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="NETQUIZ_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Storage
    # ========================================
    database_url: str = Field(
        default=f"sqlite:///{DEFAULT_DATA_DIR / 'state.db'}",
        description="SQLAlchemy URL of the per-user state store",
    )
    log_level: str = Field(default="WARNING", description="Loguru level for the CLI sink")

    # ========================================
    # Sessions
    # ========================================
    questions_per_session: int = Field(
        default=10,
        ge=1,
        description="Questions served per non-exam session",
    )
    exam_question_count: int = Field(
        default=60,
        ge=1,
        description="Questions in an exam simulation block",
    )
    exam_duration: int = Field(
        default=90,
        ge=1,
        description="Exam simulation length in minutes",
    )
    pass_threshold: float = Field(
        default=0.70,
        gt=0.0,
        le=1.0,
        description="Minimum score ratio for a session to count toward the daily streak",
    )

    # ========================================
    # Subscription
    # ========================================
    free_monthly_limit: int = Field(
        default=20,
        ge=0,
        description="Questions per calendar month on the free tier",
    )
    pro_key_hash: str = Field(
        default=DEFAULT_PRO_KEY_HASH,
        description="Hex SHA-256 digest of the Pro activation key",
    )

    # ========================================
    # History
    # ========================================
    incorrect_log_limit: int = Field(
        default=100,
        ge=1,
        description="Distinct questions kept in the incorrect-answers log",
    )
    session_history_limit: int = Field(
        default=500,
        ge=1,
        description="Sessions kept in the history log",
    )

    def quiz_defaults(self) -> QuizConfig:
        """Per-user quiz options seeded from the global settings."""
        return QuizConfig(
            exam_question_count=self.exam_question_count,
            exam_duration=self.exam_duration,
        )


class QuizConfig(BaseModel):
    """Per-user quiz options (stored under the user's ``config`` record)."""

    exam_question_count: int = Field(default=60, ge=1)
    exam_duration: int = Field(default=90, ge=1)  # minutes

    @classmethod
    def merged(cls, defaults: QuizConfig, stored: dict | None) -> QuizConfig:
        """Overlay a stored record on top of the defaults, ignoring unknown keys."""
        data = defaults.model_dump()
        if stored:
            data.update({k: v for k, v in stored.items() if k in cls.model_fields})
        return cls.model_validate(data)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
