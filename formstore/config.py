"""
Configuration and settings for the submission store.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def clean_endpoint(value: Optional[str]) -> str:
    return (value or "").strip()


def clean_key(value: Optional[str]) -> str:
    # Keys pasted from dashboards often arrive quoted.
    return (value or "").strip().replace('"', "").replace("'", "")


class Settings(BaseSettings):
    """Environment-backed settings for the submission store."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_prefix: str = Field(
        default="/api", validation_alias="FORMSTORE_API_PREFIX"
    )

    # Supabase project (the frontend build exposes these with a VITE_ prefix)
    supabase_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("SUPABASE_URL", "VITE_SUPABASE_URL"),
    )
    supabase_anon_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(
            "SUPABASE_ANON_KEY", "VITE_SUPABASE_ANON_KEY"
        ),
    )
    supabase_schema: str = Field(
        default="public", validation_alias="SUPABASE_SCHEMA"
    )

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, validation_alias="FORMSTORE_USE_IN_MEMORY_BACKENDS"
    )

    # Where export_all drops its file when no destination is given
    export_dir: str = Field(default=".", validation_alias="FORMSTORE_EXPORT_DIR")

    @field_validator("supabase_url")
    @classmethod
    def trim_url(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return clean_endpoint(value)

    @field_validator("supabase_anon_key")
    @classmethod
    def trim_key(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return clean_key(value)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
