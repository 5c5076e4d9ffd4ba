"""Application configuration."""

import os
from dataclasses import dataclass

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str | None = "low"
    openai_store: bool = False
    openai_timeout_seconds: float = 30.0
    supabase_url: str
    supabase_service_key: str
    storage_namespace: str = "calorie_ledger"
    timezone: str = "UTC"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


@dataclass(frozen=True)
class StorageKeys:
    """Key names used for the persisted profile and history blobs."""

    profile: str
    history: str


def storage_keys(namespace: str) -> StorageKeys:
    """Derive persistence keys for a storage namespace."""
    cleaned = namespace.strip() or "calorie_ledger"
    return StorageKeys(profile=f"{cleaned}:profile", history=f"{cleaned}:history")
