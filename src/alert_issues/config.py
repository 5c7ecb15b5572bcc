from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    github_owner: str = Field(alias="GITHUB_OWNER")
    github_repo: str = Field(alias="GITHUB_REPO")
    github_token: str | None = Field(default=None, alias="GITHUB_TOKEN")
    github_api_url: str = Field(default="https://api.github.com", alias="GITHUB_API_URL")
    issue_labels_raw: str = Field(default="", alias="ISSUE_LABELS")

    # Accepted for compatibility with existing deployments; open issues are always listed in full.
    recent_issue_lookback_days: int = Field(default=7, alias="RECENT_ISSUE_LOOKBACK_DAYS")

    request_timeout_seconds: float = Field(default=10.0, alias="REQUEST_TIMEOUT_SECONDS")
    max_pages: int = Field(default=50, alias="GITHUB_MAX_PAGES")
    serialize_by_identity: bool = Field(default=False, alias="SERIALIZE_BY_IDENTITY")

    listen_host: str = Field(default="0.0.0.0", alias="LISTEN_HOST")
    listen_port: int = Field(default=5100, alias="LISTEN_PORT")
    log_level: str = Field(default="info", alias="LOG_LEVEL")

    @model_validator(mode="after")
    def validate_tracker(self) -> Settings:
        if not self.github_owner.strip():
            raise ValueError("GITHUB_OWNER must not be empty")
        if not self.github_repo.strip():
            raise ValueError("GITHUB_REPO must not be empty")
        if self.request_timeout_seconds <= 0:
            raise ValueError("REQUEST_TIMEOUT_SECONDS must be positive")
        if self.max_pages < 1:
            raise ValueError("GITHUB_MAX_PAGES must be at least 1")
        if self.recent_issue_lookback_days < 0:
            raise ValueError("RECENT_ISSUE_LOOKBACK_DAYS must not be negative")
        return self

    @property
    def issue_labels(self) -> list[str]:
        return [item.strip() for item in self.issue_labels_raw.split(",") if item.strip()]

    @property
    def repository(self) -> str:
        return f"{self.github_owner}/{self.github_repo}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
