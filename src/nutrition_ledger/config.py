"""Application configuration."""

import os
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    ledger_backend: Literal["supabase", "sheets"] = "supabase"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    supabase_table_prefix: str = ""
    sheets_spreadsheet_id: str | None = None
    sheets_access_token: str | None = None
    sheets_base_url: str = "https://sheets.googleapis.com/v4"
    openai_api_key: str
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str | None = None
    openai_store: bool = False
    openfoodfacts_base_url: str = "https://world.openfoodfacts.org/api/v0"
    reference_timezone: str = "Europe/Berlin"
    history_window_days: int = 30
    weight_window_days: int = 30
    balance_window_days: int = 365
    debug: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
