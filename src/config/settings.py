"""Environment configuration and validation.

This module defines strongly-typed application settings loaded from environment variables
(optionally via a local `.env` file).

Settings are resolved once at process startup and passed by reference into the intent parser,
the agent and the bridge client. Nothing mutates them at runtime.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class RecipientCheck(StrEnum):
    """How strictly the agent validates `create_rule` recipients."""

    strict = "strict"
    lenient = "lenient"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    llm_api_key: str = Field(validation_alias=AliasChoices("LLM_API_KEY", "OPENAI_API_KEY"))
    llm_model: str = Field(default="gpt-4o-mini", alias="LLM_MODEL")
    llm_api_base: str = Field(default="https://api.openai.com/v1", alias="LLM_API_BASE")
    llm_timeout_s: float = Field(default=30.0, gt=0, alias="LLM_TIMEOUT_S")

    prompt_version: str = Field(default="v1", alias="PROMPT_VERSION")
    agent_recipient_check: RecipientCheck = Field(
        default=RecipientCheck.strict, alias="AGENT_RECIPIENT_CHECK"
    )

    lifi_api_base: str = Field(default="https://li.quest/v1", alias="LIFI_API_BASE")
    lifi_integrator: str = Field(default="paypilot", alias="LIFI_INTEGRATOR")
    lifi_api_key: str | None = Field(default=None, alias="LIFI_API_KEY")
    lifi_timeout_s: float = Field(default=30.0, gt=0, alias="LIFI_TIMEOUT_S")

    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3001, ge=1, le=65535, alias="PORT")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"], alias="CORS_ORIGINS")

    telegram_bot_token: str | None = Field(default=None, alias="TELEGRAM_BOT_TOKEN")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    # Third-party loggers capped at WARNING (per-update and per-request access lines).
    log_quiet_loggers: list[str] = Field(
        default_factory=lambda: ["aiogram.event", "uvicorn.access"], alias="LOG_QUIET_LOGGERS"
    )

    @field_validator("llm_api_key")
    @classmethod
    def validate_api_key_not_blank(cls, value: str) -> str:
        """Reject an empty API key at startup instead of on the first completion call."""

        value = value.strip()
        if not value:
            raise ValueError("LLM_API_KEY must not be empty")
        return value

    @field_validator("prompt_version")
    @classmethod
    def validate_prompt_version(cls, value: str) -> str:
        """Prompt versions are file-name fragments (`v1`, `v2`, ...)."""

        value = value.strip().lower()
        if not value.startswith("v") or not value[1:].isdigit():
            raise ValueError("PROMPT_VERSION must look like 'v1'")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        value = value.strip().upper()
        if value not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}")
        return value


def load_settings() -> Settings:
    """Load and validate settings from environment variables.

    Raises:
        RuntimeError: If the environment configuration is missing or invalid.
    """

    try:
        return Settings()
    except ValidationError as exc:
        # Raising here is fine: caller can decide how to handle startup errors.
        raise RuntimeError(f"Invalid environment configuration: {exc}") from exc
