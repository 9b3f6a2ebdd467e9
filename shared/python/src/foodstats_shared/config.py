"""
config.py — pydantic-settings Settings class.

All environment variables for the foodstats project are declared here.
Both the pipeline and the CLI import `settings` from this module.

Usage:
    from foodstats_shared.config import settings
    print(settings.duckdb_path)
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal, get_args

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["json", "console"]

LOG_LEVELS: tuple[str, ...] = get_args(LogLevel)
LOG_FORMATS: tuple[str, ...] = get_args(LogFormat)


def _find_dotenv() -> Path | None:
    """Walk up from CWD to find the nearest .env file."""
    current = Path.cwd()
    for parent in [current, *current.parents]:
        candidate = parent / ".env"
        if candidate.is_file():
            return candidate
    return None


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=_find_dotenv() or ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # DuckDB
    # -------------------------------------------------------------------------
    duckdb_path: str = Field(default="./data/family_food.duckdb")

    # -------------------------------------------------------------------------
    # Source extracts
    # -------------------------------------------------------------------------
    quantity_path: str = Field(default="./data/raw/quantity.csv")
    expenditure_path: str = Field(default="./data/raw/expenditure.csv")
    excel_sheet: str | None = Field(default=None)

    # -------------------------------------------------------------------------
    # Year dimension coverage
    # -------------------------------------------------------------------------
    first_year: int = Field(default=1974)
    last_year: int = Field(default=2023)

    # -------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------
    report_dir: str = Field(default="./data/reports")

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    log_level: LogLevel = Field(default="INFO")
    log_format: LogFormat = Field(default="console")

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v

    @model_validator(mode="after")
    def check_year_range(self) -> "Settings":
        if self.first_year > self.last_year:
            raise ValueError(
                f"first_year ({self.first_year}) is after last_year ({self.last_year})"
            )
        return self


# ---------------------------------------------------------------------------
# Module-level singleton: import this everywhere
# ---------------------------------------------------------------------------
settings = Settings()
