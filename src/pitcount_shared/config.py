"""
config.py — pydantic-settings Settings class.

All environment variables for the pitcount report are declared here.
The pipeline, report and CLI import `settings` from this module.

Usage:
    from pitcount_shared.config import settings
    print(settings.pit_workbook_url)
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


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
    # Data sources
    # -------------------------------------------------------------------------
    pit_workbook_url: str = Field(
        default=(
            "https://www.huduser.gov/portal/sites/default/files/xls/"
            "2007-2019-Point-in-Time-Estimates-by-CoC.xlsx"
        )
    )
    covid_states_url: str = Field(
        default="https://raw.githubusercontent.com/nytimes/covid-19-data/master/us-states.csv"
    )
    population_url: str = Field(
        default=(
            "https://www2.census.gov/programs-surveys/popest/datasets/"
            "2010-2019/national/totals/nst-est2019-alldata.csv"
        )
    )
    population_column: str = Field(default="POPESTIMATE2019")
    http_timeout: float = Field(default=120.0)

    # -------------------------------------------------------------------------
    # Analysis parameters
    # -------------------------------------------------------------------------
    # None → latest year present in the workbook
    target_year: int | None = Field(default=None)
    covid_snapshot_date: date = Field(default=date(2020, 6, 1))
    year_suffix_pattern: str = Field(default=r",\s*\d{4}$")

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------
    output_dir: str = Field(default="./output")

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )
    log_format: Literal["json", "console"] = Field(default="console")

    @field_validator("pit_workbook_url", "covid_states_url", "population_url", mode="before")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        return v.strip() if isinstance(v, str) else v


# ---------------------------------------------------------------------------
# Module-level singleton — import this everywhere
# ---------------------------------------------------------------------------
settings = Settings()
