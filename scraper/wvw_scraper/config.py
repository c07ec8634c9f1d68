"""
Typed settings for the WvW snapshot worker.

Uses Pydantic Settings to load configuration from environment variables
with validation and type safety. Settings are loaded from the root .env
file for local development; in Docker the variables are passed directly.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .utils.intervals import IntervalKeyer
from .validate_env import validate_env
from .windows import DEFAULT_SCHEDULE, CoverageWindow, WindowSchedule


class GW2ApiConfig(BaseModel):
    base_url: str = Field(default="https://api.guildwars2.com")
    matches_path: str = Field(default="/v2/wvw/matches")
    worlds_path: str = Field(default="/v2/worlds")
    request_timeout_seconds: int = 15
    # Transport errors are retried; HTTP error statuses are not
    max_attempts: int = 3
    retry_wait_seconds: float = 2.0


class SnapshotConfig(BaseModel):
    # Width of one history interval; also the unit of a window "data point"
    interval_minutes: int = 15
    history_ttl_days: int = 7
    # Stats outlive the 7-day match so the last week stays readable
    stats_ttl_days: int = 8
    page_size: int = 100
    compress_history: bool = True
    key_prefix: str = "wvw"


class CoverageWindowConfig(BaseModel):
    id: str
    name: str
    ranges: list[tuple[int, int]]


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    COVERAGE_WINDOWS may carry a JSON list of
    ``{"id": ..., "name": ..., "ranges": [[start, end], ...]}`` objects to
    replace the default regional prime-time schedule.
    """
    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[2] / ".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="allow",
    )

    redis_url: str = Field("redis://localhost:6379/3", alias="REDIS_URL")
    redis_host: str = Field("localhost", alias="REDIS_HOST")
    redis_password: str | None = Field(None, alias="REDIS_PASSWORD")
    redis_db: int = Field(3, alias="REDIS_DB")

    @model_validator(mode="after")
    def _build_redis_url(self) -> Settings:
        """
        Build Redis URL from components if REDIS_HOST is set to a non-localhost value.
        This handles Docker environments where REDIS_HOST=redis and REDIS_PASSWORD
        are passed separately.
        """
        if self.redis_host != "localhost":
            if self.redis_password:
                self.redis_url = f"redis://:{self.redis_password}@{self.redis_host}:6379/{self.redis_db}"
            else:
                self.redis_url = f"redis://{self.redis_host}:6379/{self.redis_db}"
        return self

    environment: str = Field("development", alias="ENVIRONMENT")
    log_level: str | None = Field(None, alias="LOG_LEVEL")
    gw2_config: GW2ApiConfig = Field(default_factory=GW2ApiConfig)
    snapshot_config: SnapshotConfig = Field(default_factory=SnapshotConfig)
    coverage_windows: list[CoverageWindowConfig] | None = Field(None, alias="COVERAGE_WINDOWS")
    gw2_api_base_url_override: str | None = Field(None, alias="GW2_API_BASE_URL")
    snapshot_interval_minutes_override: int | None = Field(None, alias="SNAPSHOT_INTERVAL_MINUTES")

    @model_validator(mode="after")
    def _apply_overrides(self) -> Settings:
        """
        Allow flat env vars (GW2_API_BASE_URL / SNAPSHOT_INTERVAL_MINUTES) to
        override the nested configs without double-underscore syntax.
        """
        if self.gw2_api_base_url_override:
            self.gw2_config.base_url = self.gw2_api_base_url_override
        if self.snapshot_interval_minutes_override is not None:
            self.snapshot_config.interval_minutes = self.snapshot_interval_minutes_override
        return self

    def window_schedule(self) -> WindowSchedule:
        """Return the configured coverage schedule, or the default one."""
        if not self.coverage_windows:
            return DEFAULT_SCHEDULE
        schedule = WindowSchedule(
            windows=tuple(
                CoverageWindow(id=w.id, name=w.name, utc_hour_ranges=tuple(w.ranges))
                for w in self.coverage_windows
            )
        )
        schedule.validate()
        return schedule

    def interval_keyer(self) -> IntervalKeyer:
        return IntervalKeyer(width_minutes=self.snapshot_config.interval_minutes)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return cached settings instance.

    Settings are cached to avoid re-parsing environment variables
    on every access.
    """
    validate_env()
    return Settings()


# Global settings instance - import this in other modules
settings = get_settings()
