"""
sources/covid.py — COVID-19 cumulative counts by state.

Reads the New York Times `us-states.csv` time series and keeps one
snapshot date, yielding one (region_name, case_count, death_count) row
per state.

CSV format notes:
  - Columns: date, state, fips, cases, deaths
  - date is ISO "YYYY-MM-DD"; counts are cumulative
  - States and territories appear under their full names

Usage:
    source = CovidSource(snapshot_date=date(2020, 6, 1))
    df = source.run(location=settings.covid_states_url)
    # columns: region_name, case_count, death_count
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any

import polars as pl

from pitcount_shared.config import settings
from pitcount_shared.constants import CASE_COUNT, DEATH_COUNT, REGION_NAME
from pitcount_shared.geo import canonical_region_name
from pitcount_pipeline.sources.base import BaseSource
from pitcount_pipeline.transforms.normalize import clean_string_columns, require_columns


class CovidSource(BaseSource):
    """Downloads the NYT state-level COVID series and keeps one snapshot date."""

    name = "NYT COVID"

    def __init__(self, snapshot_date: date | None = None, *, timeout: float | None = None) -> None:
        super().__init__(timeout=timeout)
        self._snapshot_date = snapshot_date or settings.covid_snapshot_date
        self._location: str | None = None

    def extract(self, *, location: str | Path | None = None, **kwargs: Any) -> pl.DataFrame:
        """Fetch the raw CSV (all columns as String)."""
        location = str(location or settings.covid_states_url)
        self._location = location
        return self.fetch_csv(location)

    def transform(self, raw: pl.DataFrame) -> pl.DataFrame:
        """
        Keep rows of the snapshot date and rename to the health-record schema.

        Raises:
            SchemaMismatchError: the CSV lacks date/state/cases/deaths.
        """
        require_columns(raw, ["date", "state", "cases", "deaths"], context="COVID CSV")
        df = clean_string_columns(raw)

        snapshot = self._snapshot_date.isoformat()
        df = df.filter(pl.col("date") == snapshot)
        if df.is_empty():
            available = raw["date"].drop_nulls()
            self._log.warning(
                "snapshot_date_missing",
                snapshot_date=snapshot,
                latest_available=available.max() if len(available) else None,
            )

        return df.select(
            pl.col("state").map_elements(canonical_region_name, return_dtype=pl.String).alias(REGION_NAME),
            pl.col("cases").cast(pl.Int64, strict=False).alias(CASE_COUNT),
            pl.col("deaths").cast(pl.Int64, strict=False).alias(DEATH_COUNT),
        )

    def get_metadata(self) -> dict[str, Any]:
        return {
            "source_name": self.name,
            "location": self._location,
            "snapshot_date": self._snapshot_date.isoformat(),
            "description": "Cumulative COVID-19 cases and deaths by state (NYT)",
        }
