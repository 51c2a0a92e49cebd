"""Pydantic-backed configuration for Django settings."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent.parent
DEFAULT_ENV_FILE = BASE_DIR / ".env"

AIProviderName = Literal["lovable", "openai", "openrouter", "local"]


class AppSettings(BaseSettings):
    """Environment-driven configuration for the Django project.

    Only the fields declared here are recognised; unknown environment keys are
    ignored rather than carried around as loose attributes.
    """

    debug: bool = False
    secret_key: str = "development-secret-key"
    # Comma-separated in the environment, so skip the JSON decoding of complex types.
    allowed_hosts: Annotated[list[str], NoDecode] = Field(default_factory=list)
    cors_allowed_origins: Annotated[list[str], NoDecode] = Field(default_factory=list)
    database_url: str | None = None
    db_conn_max_age: int = 60

    supabase_url: str = Field(
        default="http://localhost:54321",
        validation_alias=AliasChoices("SUPABASE_URL", "DJANGO_SUPABASE_URL"),
    )
    supabase_anon_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SUPABASE_ANON_KEY", "DJANGO_SUPABASE_ANON_KEY"),
    )

    lovable_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("LOVABLE_API_KEY", "DJANGO_LOVABLE_API_KEY"),
    )
    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_API_KEY", "DJANGO_OPENAI_API_KEY"),
    )
    openrouter_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("OPENROUTER_API_KEY", "DJANGO_OPENROUTER_API_KEY"),
    )
    ai_request_timeout_seconds: float = Field(
        default=60.0,
        validation_alias=AliasChoices(
            "AI_REQUEST_TIMEOUT_SECONDS",
            "DJANGO_AI_REQUEST_TIMEOUT_SECONDS",
        ),
    )

    assistant_ai_provider: AIProviderName = Field(
        default="lovable",
        validation_alias=AliasChoices("ASSISTANT_AI_PROVIDER", "DJANGO_ASSISTANT_AI_PROVIDER"),
    )
    assistant_ai_model: str | None = Field(
        default="google/gemini-3-flash-preview",
        validation_alias=AliasChoices("ASSISTANT_AI_MODEL", "DJANGO_ASSISTANT_AI_MODEL"),
    )
    assistant_max_out_of_context: int = Field(
        default=3,
        ge=1,
        validation_alias=AliasChoices(
            "ASSISTANT_MAX_OUT_OF_CONTEXT",
            "DJANGO_ASSISTANT_MAX_OUT_OF_CONTEXT",
        ),
    )
    assistant_window_hours: int = Field(
        default=24,
        ge=1,
        validation_alias=AliasChoices("ASSISTANT_WINDOW_HOURS", "DJANGO_ASSISTANT_WINDOW_HOURS"),
    )
    assistant_block_hours: int = Field(
        default=24,
        ge=1,
        validation_alias=AliasChoices("ASSISTANT_BLOCK_HOURS", "DJANGO_ASSISTANT_BLOCK_HOURS"),
    )
    assistant_limit_fail_open: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "ASSISTANT_LIMIT_FAIL_OPEN",
            "DJANGO_ASSISTANT_LIMIT_FAIL_OPEN",
        ),
    )

    session_check_interval_seconds: float = Field(
        default=30.0,
        validation_alias=AliasChoices(
            "SESSION_CHECK_INTERVAL_SECONDS",
            "DJANGO_SESSION_CHECK_INTERVAL_SECONDS",
        ),
    )
    session_refresh_threshold_seconds: float = Field(
        default=300.0,
        validation_alias=AliasChoices(
            "SESSION_REFRESH_THRESHOLD_SECONDS",
            "DJANGO_SESSION_REFRESH_THRESHOLD_SECONDS",
        ),
    )

    posthog_project_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("POSTHOG_PROJECT_API_KEY", "DJANGO_POSTHOG_PROJECT_API_KEY"),
    )
    posthog_host: str | None = Field(
        default="https://us.i.posthog.com",
        validation_alias=AliasChoices("POSTHOG_HOST", "DJANGO_POSTHOG_HOST"),
    )
    posthog_debug: bool = Field(
        default=False,
        validation_alias=AliasChoices("POSTHOG_DEBUG", "DJANGO_POSTHOG_DEBUG"),
    )
    posthog_disabled: bool = Field(
        default=False,
        validation_alias=AliasChoices("POSTHOG_DISABLED", "DJANGO_POSTHOG_DISABLED"),
    )

    model_config = SettingsConfigDict(
        env_prefix="DJANGO_",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("allowed_hosts", "cors_allowed_origins", mode="before")
    @classmethod
    def _split_csv(cls, value: Any) -> list[str]:
        if value is None or value == "":
            return []
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        if isinstance(value, list):
            return value
        return [str(value).strip()] if str(value).strip() else []

    @field_validator("supabase_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


@lru_cache()
def get_settings(env_file: str | os.PathLike[str] | None = None) -> AppSettings:
    """Load settings from environment and optional .env file with caching."""

    kwargs: dict[str, Any] = {}
    env_file_path: Path | None = None

    if env_file:
        env_file_path = Path(env_file)
    elif os.getenv("DJANGO_ENV_FILE"):
        env_file_path = Path(os.environ["DJANGO_ENV_FILE"])
    elif DEFAULT_ENV_FILE.exists():
        env_file_path = DEFAULT_ENV_FILE

    if env_file_path is not None:
        kwargs["_env_file"] = env_file_path
        kwargs["_env_file_encoding"] = "utf-8"

    return AppSettings(**kwargs)


__all__ = [
    "AIProviderName",
    "AppSettings",
    "BASE_DIR",
    "DEFAULT_ENV_FILE",
    "get_settings",
]
