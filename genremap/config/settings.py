"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ────────────────────────────────────────────────
#
# This class uses pydantic-settings to read configuration from TWO
# sources (in priority order):
#
#   1. **Environment variables**: e.g., GENREMAP_BATCH_SIZE=500
#      (highest priority: always wins)
#   2. **.env file**: key=value lines in the project root .env file
#
# Field names map to env vars with the ``GENREMAP_`` prefix:
# ``output_path`` is read from ``GENREMAP_OUTPUT_PATH``.  The two logging
# fields are the exception and also accept the un-prefixed ``APP_ENV`` and
# ``LOG_LEVEL`` that the logging module reads.
#
# YAML values (config/config.yaml) are layered underneath by
# ``genremap.config.loader.load_settings``.
# ──────────────────────────────────────────────────────────────────────
"""

import os

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """genremap scraper settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="GENREMAP_",
        extra="ignore",
    )

    # === Remote site ===
    base_url: str = "https://everynoise.com"
    listing_path: str = "/engenremap.html"
    # ``{genre}`` is replaced by the URL-encoded genre name (spaces removed).
    detail_path_template: str = "/engenremap-{genre}.html"

    # === Output ===
    output_path: str = "genres.csv"
    batch_size: int = 250

    # === Throttling / concurrency ===
    rate_interval_seconds: float = 0.05  # one request per 50 ms
    rate_burst: int = 1
    # 0 = one unit per available CPU (os.cpu_count()).
    max_concurrency: int = 0

    # === HTTP client ===
    http_timeout_seconds: float = 10.0
    http_max_connections: int = 100
    http_keepalive_expiry_seconds: float = 90.0
    user_agent: str = (
        "Mozilla/5.0 (compatible; genremap/0.1; "
        "+https://github.com/genremap/genremap)"
    )

    # === Observability ===
    progress_log_every: int = 100
    app_env: str = Field(
        default="development",
        validation_alias=AliasChoices("app_env", "GENREMAP_APP_ENV", "APP_ENV"),
    )
    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("log_level", "GENREMAP_LOG_LEVEL", "LOG_LEVEL"),
    )

    @field_validator("batch_size", "rate_burst", "progress_log_every")
    @classmethod
    def _must_be_positive_int(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be >= 1")
        return value

    @field_validator("rate_interval_seconds", "http_timeout_seconds")
    @classmethod
    def _must_be_positive_float(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be > 0")
        return value

    @field_validator("max_concurrency")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("must be >= 0 (0 = number of CPUs)")
        return value

    @field_validator("detail_path_template")
    @classmethod
    def _has_genre_placeholder(cls, value: str) -> str:
        if "{genre}" not in value:
            raise ValueError("must contain a '{genre}' placeholder")
        return value

    def resolved_concurrency(self) -> int:
        """Return the admission-gate size, resolving ``0`` to the CPU count."""
        if self.max_concurrency:
            return self.max_concurrency
        return os.cpu_count() or 1
