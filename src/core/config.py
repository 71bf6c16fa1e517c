"""Configuration models and YAML loader for the vacancy poller."""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator


class SearchProfile(BaseModel):
    """A keyword query sent to the similar-vacancies search."""

    keyword: str

    @field_validator("keyword")
    @classmethod
    def keyword_not_empty(cls, v: str) -> str:
        if not v.strip():
            msg = "keyword must not be empty"
            raise ValueError(msg)
        return v.strip()


class ProviderConfig(BaseModel):
    """Job-board endpoints and request settings."""

    api_base_url: str = "https://api.hh.ru"
    oauth_base_url: str = "https://hh.ru"
    user_agent: str = "HHelper/1.0 (jourloy@yandex.ru)"
    per_page: int = Field(default=100, ge=1, le=100)
    timeout_seconds: float = Field(default=30.0, gt=0)

    @field_validator("api_base_url", "oauth_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class SchedulerConfig(BaseModel):
    """Tick intervals for the two periodic jobs."""

    refresh_interval_seconds: float = Field(default=60.0, gt=0)
    fetch_interval_seconds: float = Field(default=600.0, gt=0)


class DatabaseConfig(BaseModel):
    """Database configuration."""

    path: str = "data/vacancies.db"


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    searches: list[SearchProfile] = Field(default_factory=list)

    @field_validator("searches")
    @classmethod
    def at_least_one_search(cls, v: list[SearchProfile]) -> list[SearchProfile]:
        if not v:
            msg = "at least one search must be configured"
            raise ValueError(msg)
        return v

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)


class OAuthClientConfig(BaseModel):
    """OAuth application credentials, read once from the environment.

    Frozen so the same instance can be handed to every collaborator
    that talks to the token endpoint.
    """

    model_config = ConfigDict(frozen=True)

    client_id: str
    client_secret: str
    redirect_uri: str

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "OAuthClientConfig":
        """Build from ``HH_CLIENT_ID``, ``HH_CLIENT_SECRET`` and ``HH_REDIRECT_URI``.

        Raises:
            ValueError: If any of the variables is missing or empty.
        """
        env = os.environ if environ is None else environ
        values: dict[str, str] = {}
        for field, var in _OAUTH_ENV_VARS.items():
            value = env.get(var, "").strip()
            if not value:
                msg = f"{var} environment variable is required"
                raise ValueError(msg)
            values[field] = value
        return cls(**values)


_OAUTH_ENV_VARS: dict[str, str] = {
    "client_id": "HH_CLIENT_ID",
    "client_secret": "HH_CLIENT_SECRET",
    "redirect_uri": "HH_REDIRECT_URI",
}
