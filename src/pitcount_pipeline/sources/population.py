"""
sources/population.py — Census Bureau state population estimates.

Reads `nst-est2019-alldata.csv` (Vintage 2019 national/state totals) and
yields one (region_name, population) row per state.

CSV format notes:
  - SUMLEV "010" is the nation, "020" census regions, "040" states
  - NAME holds the area name; POPESTIMATE<year> holds the July 1 estimate

Usage:
    source = PopulationSource(estimate_column="POPESTIMATE2019")
    df = source.run(location=settings.population_url)
    # columns: region_name, population
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import polars as pl

from pitcount_shared.config import settings
from pitcount_shared.constants import POPULATION, REGION_NAME
from pitcount_shared.geo import canonical_region_name
from pitcount_pipeline.sources.base import BaseSource
from pitcount_pipeline.transforms.normalize import clean_string_columns, require_columns

# Summary level of state rows
_STATE_SUMLEV: frozenset[str] = frozenset({"040", "40"})


class PopulationSource(BaseSource):
    """Downloads Census population estimates and keeps state-level rows."""

    name = "Census population"

    def __init__(self, estimate_column: str | None = None, *, timeout: float | None = None) -> None:
        super().__init__(timeout=timeout)
        self._estimate_column = estimate_column or settings.population_column
        self._location: str | None = None

    def extract(self, *, location: str | Path | None = None, **kwargs: Any) -> pl.DataFrame:
        """Fetch the raw CSV (all columns as String)."""
        location = str(location or settings.population_url)
        self._location = location
        return self.fetch_csv(location)

    def transform(self, raw: pl.DataFrame) -> pl.DataFrame:
        """
        Keep state rows and rename to the population-record schema.

        Files without a SUMLEV column are taken to be state-level already.

        Raises:
            SchemaMismatchError: the CSV lacks NAME or the estimate column.
        """
        require_columns(raw, ["NAME", self._estimate_column], context="population CSV")
        df = clean_string_columns(raw)

        if "SUMLEV" in df.columns:
            df = df.filter(pl.col("SUMLEV").is_in(list(_STATE_SUMLEV)))

        return df.select(
            pl.col("NAME").map_elements(canonical_region_name, return_dtype=pl.String).alias(REGION_NAME),
            pl.col(self._estimate_column)
            .str.replace_all(",", "")
            .cast(pl.Int64, strict=False)
            .alias(POPULATION),
        )

    def get_metadata(self) -> dict[str, Any]:
        return {
            "source_name": self.name,
            "location": self._location,
            "estimate_column": self._estimate_column,
            "description": "Census Bureau annual state population estimates",
        }
