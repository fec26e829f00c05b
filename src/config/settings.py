"""Environment configuration and validation.

This module defines strongly-typed application settings loaded from environment variables
(optionally via a local `.env` file).

Remote inference is enabled purely by the presence of an API key; without one the deterministic
rules extractor is used.
"""

from __future__ import annotations

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: str = Field(alias="DATABASE_URL")
    telegram_bot_token: str | None = Field(default=None, alias="TELEGRAM_BOT_TOKEN")
    db_statement_timeout_ms: int = Field(default=5000, alias="DB_STATEMENT_TIMEOUT_MS")

    llm_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("LLM_API_KEY", "GROQ_API_KEY"),
    )
    llm_model: str = Field(
        default="llama-3.1-70b-versatile",
        validation_alias=AliasChoices("LLM_MODEL", "GROQ_MODEL"),
    )
    llm_api_base: str = Field(default="https://api.groq.com/openai/v1", alias="LLM_API_BASE")
    llm_timeout_s: float = Field(default=30.0, alias="LLM_TIMEOUT_S")

    sheets_json_url: str | None = Field(default=None, alias="SHEETS_PUBLIC_JSON_URL")
    ui_cache_ttl_s: float = Field(default=600.0, alias="UI_CACHE_TTL_S")

    http_host: str = Field(default="0.0.0.0", alias="HTTP_HOST")
    http_port: int = Field(default=8000, alias="HTTP_PORT")
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"], alias="CORS_ALLOW_ORIGINS")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("llm_api_key", "sheets_json_url")
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        """Treat empty variables (`LLM_API_KEY=`) as unset."""

        if value is not None and not value.strip():
            return None
        return value

    @field_validator("ui_cache_ttl_s", "llm_timeout_s", "db_statement_timeout_ms")
    @classmethod
    def validate_positive(cls, value: float) -> float:
        """Timeouts and cache TTLs must be positive."""

        if value <= 0:
            raise ValueError("must be positive")
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
