"""Application configuration."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    auth_provider: Literal["mock", "firebase"] = "firebase"
    firebase_project_id: str | None = None
    firebase_audience: str | None = None
    site_id: str = Field(min_length=1)
    tenant_root: str = "tanam"
    document_store: Literal["memory", "firestore"] = "firestore"
    transaction_max_attempts: int = Field(default=5, ge=1)

    model_config = SettingsConfigDict(env_prefix="TANAM_", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
