"""Client settings powered by ``pydantic-settings``."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Runtime configuration for the task tracker client."""

    model_config = SettingsConfigDict(
        env_prefix="TASKTRACKER_CLIENT_",
        env_file=Path.cwd() / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_base_url: str = Field(default="http://localhost:8000/api")
    request_timeout_seconds: float = Field(default=10.0)
    token_path: Path | None = Field(default=None)

    @field_validator("api_base_url", mode="before")
    @classmethod
    def _strip_trailing_slash(cls, value: object) -> str:
        return str(value or "").strip().rstrip("/")

    @field_validator("request_timeout_seconds", mode="before")
    @classmethod
    def _ensure_positive_timeout(cls, value: object) -> float:
        try:
            seconds = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 10.0
        return seconds if seconds > 0 else 10.0


@lru_cache()
def get_client_settings() -> ClientSettings:
    """Return a cached ``ClientSettings`` instance."""

    return ClientSettings()


__all__ = ["ClientSettings", "get_client_settings"]
