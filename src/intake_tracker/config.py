"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    api_secret: str
    admin_token: str
    store_backend: str = "memory"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    supabase_kv_table: str = "kv_store"
    inference_provider: str = "openai"
    openai_api_key: str | None = None
    openai_base_url: str | None = None
    openai_model: str = "gpt-4o-mini"
    inference_stream: bool = False
    workers_ai_account_id: str | None = None
    workers_ai_api_token: str | None = None
    workers_ai_model: str = "@cf/meta/llama-3.1-8b-instruct"
    inference_timeout_seconds: float = 60.0
    meal_timezone_offset_hours: int = 8
    serialize_user_writes: bool = False
    system_prompt_guidelines: str | None = None
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_month(raw: str | None) -> tuple[int, int] | None:
    """Parse a YYYY-MM month string into a (year, month) pair."""
    if raw is None:
        return None
    cleaned = raw.strip()
    if not cleaned:
        return None
    year_part, sep, month_part = cleaned.partition("-")
    if not sep or not (year_part.isdigit() and month_part.isdigit()):
        raise ValueError(f"Invalid month: {raw!r}")
    year, month = int(year_part), int(month_part)
    if not 1 <= month <= 12:  # noqa: PLR2004
        raise ValueError(f"Invalid month: {raw!r}")
    return year, month
