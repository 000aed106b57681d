"""
sources/pit.py — HUD Point-in-Time estimates workbook adapter.

Reads the "PIT Estimates by CoC" workbook published by HUD: one sheet per
year (2007–2019), one row per Continuum of Care, count columns labelled
with the year they belong to.

Workbook format notes:
  - Sheet names are the four-digit year ("2019", "2018", ...)
  - Columns: "CoC Number", "CoC Name", "CoC Category" (latest year only),
    then counts such as "Overall Homeless, 2019",
    "Sheltered Total Homeless, 2019", "Unsheltered Homeless, 2019"
  - The last row of each sheet is a pre-aggregated "Total" row
  - Some sheets carry trailing blank rows

Usage:
    source = PITWorkbookSource()
    sheets = source.run(location="2007-2019-PIT-Estimates-by-CoC.xlsx")
    # {2019: DataFrame[CoC_Number, CoC_Name, CoC_Category, Overall_Homeless, ...], ...}
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import polars as pl

from pitcount_shared.config import settings
from pitcount_shared.constants import COUNT_COLUMNS, REQUIRED_PIT_COLUMNS
from pitcount_pipeline.errors import RetrievalError
from pitcount_pipeline.sources.base import BaseSource, is_remote
from pitcount_pipeline.transforms.normalize import (
    build_column_rules,
    cast_numeric_cols,
    clean_string_columns,
    drop_all_null_rows,
    normalize_columns,
    require_columns,
)
from pitcount_pipeline.transforms.union import year_label

_YEAR_SHEET = re.compile(r"^\s*\d{4}\s*$")


class PITWorkbookSource(BaseSource):
    """Loads and normalizes the yearly sheets of the HUD PIT workbook."""

    name = "HUD PIT"

    def __init__(
        self,
        *,
        year_suffix_pattern: str | None = None,
        required_columns: Sequence[str] = REQUIRED_PIT_COLUMNS,
        timeout: float | None = None,
    ) -> None:
        super().__init__(timeout=timeout)
        self._rules = build_column_rules(year_suffix_pattern)
        self._required = tuple(required_columns)
        self._location: str | None = None

    # ------------------------------------------------------------------
    # Workbook reading
    # ------------------------------------------------------------------

    @staticmethod
    def _read_workbook(path: Path, sheets: Sequence[str] | None) -> dict[str, pl.DataFrame]:
        if sheets:
            frames = pl.read_excel(path, sheet_name=list(sheets))
        else:
            frames = pl.read_excel(path, sheet_id=0)
        return dict(frames)

    # ------------------------------------------------------------------
    # BaseSource interface
    # ------------------------------------------------------------------

    def extract(
        self,
        *,
        location: str | Path | None = None,
        sheets: Sequence[str] | None = None,
        **kwargs: Any,
    ) -> dict[str, pl.DataFrame]:
        """
        Read the requested sheets of a local or remote workbook.

        Args:
            location: Path or http(s) URL. Defaults to settings.pit_workbook_url.
            sheets:   Sheet names to read. Defaults to every four-digit-year sheet.

        Returns:
            Sheet name → raw DataFrame with authored column names and order.

        Raises:
            RetrievalError: unreachable resource, unreadable workbook,
                missing sheet or a requested sheet not named by a year.
        """
        location = str(location or settings.pit_workbook_url)
        self._location = location

        not_years = [name for name in sheets or () if not _YEAR_SHEET.match(name)]
        if not_years:
            raise RetrievalError(location, f"sheet(s) not named by a year: {', '.join(not_years)}")

        path = self.download_to_tempfile(location, suffix=".xlsx") if is_remote(location) else Path(location)
        try:
            frames = self._read_workbook(path, sheets)
        except Exception as exc:
            raise RetrievalError(location, f"unreadable workbook: {exc}") from exc
        finally:
            if is_remote(location):
                path.unlink(missing_ok=True)

        if not sheets:
            skipped = [name for name in frames if not _YEAR_SHEET.match(name)]
            if skipped:
                self._log.info("non_year_sheets_skipped", sheets=skipped)
            frames = {name: df for name, df in frames.items() if _YEAR_SHEET.match(name)}

        if not frames:
            raise RetrievalError(location, "no year sheets found")

        self._log.info("sheets_read", sheets=list(frames))
        return frames

    def transform(self, raw: dict[str, pl.DataFrame]) -> dict[int, pl.DataFrame]:
        """
        Normalize the column names of every sheet and check required columns.

        - Strip the year suffix and collapse whitespace in column names
        - Strip whitespace from string cells, drop blank rows
        - Cast known count columns to Int64 (bad cells → null)

        Raises:
            SchemaMismatchError: a sheet lacks a required column.
        """
        result: dict[int, pl.DataFrame] = {}
        for sheet, df in raw.items():
            df = normalize_columns(df, self._rules)
            require_columns(df, self._required, context=f"sheet {sheet}")
            df = clean_string_columns(df)
            df = drop_all_null_rows(df)
            df = cast_numeric_cols(df, COUNT_COLUMNS, pl.Int64)
            result[year_label(sheet)] = df
        return result

    def get_metadata(self) -> dict[str, Any]:
        return {
            "source_name": self.name,
            "location": self._location,
            "description": "HUD Point-in-Time estimates by Continuum of Care",
        }
