"""Server settings powered by ``pydantic-settings``."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal, NamedTuple

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from ... import __version__ as package_version

EnvironmentName = Literal["development", "test", "ci"]

DEFAULT_TOKEN_LIFETIME_MINUTES = 60 * 24 * 30


class EnvironmentProfile(NamedTuple):
    log_level: str
    reload: bool


PROFILES: dict[EnvironmentName, EnvironmentProfile] = {
    "development": EnvironmentProfile(log_level="DEBUG", reload=True),
    "test": EnvironmentProfile(log_level="WARNING", reload=False),
    "ci": EnvironmentProfile(log_level="INFO", reload=False),
}

_ENVIRONMENT_ALIASES: dict[str, EnvironmentName] = {
    "dev": "development",
    "development": "development",
    "local": "development",
    "test": "test",
    "testing": "test",
    "ci": "ci",
}

CommaSeparated = Annotated[list[str], NoDecode]


class Settings(BaseSettings):
    """Runtime configuration for the task tracker API.

    Values come from ``TASKTRACKER_*`` environment variables or a ``.env``
    file. ``log_level`` and ``reload`` default from the environment profile
    unless set explicitly.
    """

    model_config = SettingsConfigDict(
        env_prefix="TASKTRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    project_name: str = "Task Tracker"
    environment: EnvironmentName = "development"
    version: str = package_version
    api_prefix: str = "/api"

    mongo_url: str = "mongodb://localhost:27017"
    mongo_database: str = "tasktracker"
    mongo_connect_timeout_ms: int = 5000

    jwt_secret_key: str = "change-me"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = DEFAULT_TOKEN_LIFETIME_MINUTES

    cors_allow_origins: CommaSeparated = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"],
    )
    cors_allow_credentials: bool = True
    cors_allow_methods: CommaSeparated = Field(default_factory=lambda: ["*"])
    cors_allow_headers: CommaSeparated = Field(default_factory=lambda: ["*"])

    app_host: str = "0.0.0.0"
    app_port: int = 8000
    log_level: str = "INFO"
    reload: bool = True

    @field_validator("environment", mode="before")
    @classmethod
    def _resolve_alias(cls, value: object) -> EnvironmentName:
        key = value.strip().lower() if isinstance(value, str) else ""
        return _ENVIRONMENT_ALIASES.get(key, "development")

    @field_validator("cors_allow_origins", "cors_allow_methods", "cors_allow_headers", mode="before")
    @classmethod
    def _split_list(cls, value: object) -> list[str]:
        if isinstance(value, str):
            items = value.split(",")
        elif isinstance(value, (list, tuple, set)):
            items = [str(item) for item in value]
        else:
            return []
        return [item.strip() for item in items if item.strip()]

    @field_validator("access_token_expire_minutes", mode="before")
    @classmethod
    def _clamp_token_lifetime(cls, value: object) -> int:
        try:
            return max(int(value), 1)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return DEFAULT_TOKEN_LIFETIME_MINUTES

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> str:
        return value.upper() if isinstance(value, str) else "INFO"

    @model_validator(mode="after")
    def _apply_profile(self) -> "Settings":
        profile = PROFILES[self.environment]
        for name, value in profile._asdict().items():
            if name not in self.model_fields_set:
                setattr(self, name, value)
        return self


@lru_cache()
def get_settings() -> Settings:
    """Return a cached ``Settings`` instance."""

    return Settings()


__all__ = ["EnvironmentName", "PROFILES", "Settings", "get_settings"]
