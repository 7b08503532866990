"""Application settings using Pydantic."""

import os
from functools import lru_cache
from typing import Annotated, Any, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        protected_namespaces=(),
    )

    # Environment
    environment: str = Field(
        default=os.getenv("ENVIRONMENT", "development"),
        description="Deployment environment (development|production)",
    )

    # API Configuration
    api_host: str = "127.0.0.1"
    api_port: int = 8787
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["*"],
        description="CORS allowlist. The browser extension calls from a chrome-extension:// origin.",
    )
    analyze_rate_limit: str = Field(
        default="60/minute",
        description="Edge rate limit for /analyze (SlowAPI syntax).",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_cors_origins(cls, v: Any) -> list[str]:
        if v is None or v == "":
            return []
        if isinstance(v, str):
            return [p.strip() for p in v.split(",") if p.strip()]
        return list(v)

    # Reply model provider
    reply_backend: Literal["gemini", "llama_stack"] = Field(
        default="gemini",
        description="Which upstream produces draft replies.",
    )
    reply_provider: Literal["real", "fake", "off"] = Field(
        default="real",
        description="Reply provider mode: real=call the model, fake=deterministic mock, off=disable.",
    )
    use_fake_providers: bool = Field(
        default=False,
        description="Convenience switch: treat the reply provider as fake (off still disables).",
    )

    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    gemini_api_url: str = "https://generativelanguage.googleapis.com/v1beta"

    llama_stack_url: str = "http://localhost:5001"
    llama_stack_model: str = "openai/gpt-5-nano"

    # Conversation throttle
    throttle_cooldown_seconds: float = Field(
        default=3.0,
        description="Minimum spacing between attempts for one conversation.",
    )
    throttle_extend_on_reject: bool = Field(
        default=True,
        description="Refresh the throttle timestamp on throttled events too (sliding window).",
    )

    # Draft cache
    draft_cache_ttl_seconds: float = Field(
        default=60.0,
        description="Age after which a cached draft is treated as absent.",
    )
    draft_cache_max_size: int = Field(default=1024, description="Maximum cached drafts.")
    max_transcript_lines: int = Field(
        default=80,
        description="Transcript tail (lines) used for fingerprinting and prompting.",
    )

    # Model invoker
    model_timeout_seconds: float = Field(default=5.0, description="Per-attempt hard timeout.")
    model_retry_attempts: int = Field(default=3, description="Total attempts per invocation.")
    model_backoff_base_seconds: float = Field(
        default=1.0,
        description="Backoff before attempt n+1 is base * n seconds.",
    )

    # Repetition guard
    duplicate_question_threshold: float = Field(
        default=0.7,
        description="Similarity above which a new draft counts as an already-asked question.",
    )
    stuck_answer_threshold: float = Field(
        default=0.7,
        description="Similarity above which the user's last two answers count as a loop.",
    )
    asked_questions_limit: int = Field(default=10, description="Ring buffer bound for drafts.")
    recent_answers_limit: int = Field(default=5, description="Ring buffer bound for user lines.")
    conversation_store_max_size: int = Field(
        default=10_000,
        description="Conversations kept in memory before least-recently-used eviction.",
    )

    # Observability / Alerting
    sentry_dsn: str = Field(
        default="",
        description="Sentry DSN for error monitoring. Leave empty to disable.",
    )
    log_level: str = "INFO"

    @field_validator(
        "throttle_cooldown_seconds",
        "draft_cache_ttl_seconds",
        "model_timeout_seconds",
    )
    @classmethod
    def _positive_seconds(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @field_validator("model_backoff_base_seconds")
    @classmethod
    def _non_negative_backoff(cls, v: float) -> float:
        if v < 0:
            raise ValueError("must not be negative")
        return v

    @field_validator(
        "draft_cache_max_size",
        "max_transcript_lines",
        "model_retry_attempts",
        "asked_questions_limit",
        "recent_answers_limit",
        "conversation_store_max_size",
    )
    @classmethod
    def _positive_bound(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @field_validator("duplicate_question_threshold", "stuck_answer_threshold")
    @classmethod
    def _unit_interval(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError("thresholds must be within [0, 1]")
        return v

    @model_validator(mode="after")
    def validate_model(self) -> "Settings":
        """Ensure a model is configured for the selected backend."""
        if self.reply_backend == "gemini" and not self.gemini_model:
            raise ValueError("GEMINI_MODEL must be configured")
        if self.reply_backend == "llama_stack" and not self.llama_stack_model:
            raise ValueError("LLAMA_STACK_MODEL must be configured")
        return self


# Global settings instance
@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Lazily construct Settings so tests and CLIs can set env vars before first access.
    return Settings()


def reset_settings_cache() -> None:
    get_settings.cache_clear()


class _SettingsProxy:
    """Lazy proxy for Settings.

    This avoids eager settings instantiation at import time, which can make tests
    order-dependent when env vars are changed during `pytest_configure()`.
    """

    def __getattr__(self, name: str) -> Any:
        return getattr(get_settings(), name)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<SettingsProxy {get_settings()!r}>"


settings = _SettingsProxy()
