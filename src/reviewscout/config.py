"""Application configuration using pydantic-settings pattern."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "ReviewScout"
    app_version: str = "0.1.0"
    app_env: str = Field(default="development")
    log_level: str = Field(default="INFO")

    # Database (libSQL / local SQLite file)
    database_url: str | None = Field(default=None)
    database_auth_token: str | None = Field(default=None)

    # Recommendation windows
    lookback_days: int = Field(
        default=365,
        gt=0,
        description="Trailing window for contribution share and consistency",
    )
    workload_window_days: int = Field(
        default=90,
        gt=0,
        description="Trailing window for review workload statistics",
    )
    top_n: int = Field(default=5, gt=0, description="Default recommendation cutoff")

    # Turnover/retention weights
    turnover_c1: float = Field(default=1.0, ge=0.0)
    turnover_c2: float = Field(default=1.0, ge=0.0)
    retention_c1: float = Field(default=1.0, ge=0.0)
    retention_c2: float = Field(default=1.0, ge=0.0)

    # WhoDo weights and load penalty
    whodo_c1: float = Field(default=1.0, ge=0.0, description="File commit weight")
    whodo_c2: float = Field(default=1.0, ge=0.0, description="Directory commit weight")
    whodo_c3: float = Field(default=1.0, ge=0.0, description="File review weight")
    whodo_c4: float = Field(default=1.0, ge=0.0, description="Directory review weight")
    whodo_theta: float = Field(default=0.5, ge=0.0)
    whodo_load_window_days: int = Field(
        default=30,
        gt=0,
        description="Trailing window of review comments counted as open reviews",
    )

    exclude_unknown_file_candidates: bool = Field(
        default=False,
        description="Drop turnover candidates who know none of the changed files",
    )
    include_author: bool = Field(
        default=False,
        description="Keep the change author among scored candidates",
    )

    # Identity resolution
    auto_medium_threshold: float = Field(default=0.80, ge=0.0, le=1.0)
    auto_high_threshold: float = Field(default=0.90, ge=0.0, le=1.0)
    merge_rules_path: str | None = Field(
        default=None,
        description="JSON file with manual merge rules",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
