"""
transforms/backfill.py — Propagate the latest year's CoC category to every year.

HUD only started publishing CoC_Category in the most recent sheet. The
category of each CoC in that year is carried back onto all of its earlier
rows by joining a latest-year projection against the full table on the
composite (CoC_Name, CoC_Number) key. Name and number together: names
repeat across states and numbers are occasionally reassigned.

Usage:
    from pitcount_pipeline.transforms.backfill import backfill_category, latest_year

    latest = latest_year(longitudinal)                 # 2019
    backfilled = backfill_category(longitudinal, latest)
"""

from __future__ import annotations

from collections.abc import Sequence

import polars as pl
import structlog

from pitcount_shared.constants import COC_CATEGORY, COC_NAME, COC_NUMBER, YEAR

log = structlog.get_logger(__name__)


def latest_year(df: pl.DataFrame, year_col: str = YEAR) -> int:
    """Return the most recent year present in df."""
    if df.is_empty():
        raise ValueError("Cannot determine the latest year of an empty table")
    return int(df[year_col].max())  # type: ignore[arg-type]


def latest_category_extract(
    df: pl.DataFrame,
    latest: int,
    *,
    key: Sequence[str] = (COC_NAME, COC_NUMBER),
    column: str = COC_CATEGORY,
    year_col: str = YEAR,
) -> pl.DataFrame:
    """Unique (key..., column) rows of the latest year."""
    if column not in df.columns:
        df = df.with_columns(pl.lit(None, dtype=pl.String).alias(column))
    extract = df.filter(pl.col(year_col) == latest).select([*key, column])
    return extract.unique(subset=list(key), keep="first", maintain_order=True)


def backfill_category(
    df: pl.DataFrame,
    latest: int,
    *,
    key: Sequence[str] = (COC_NAME, COC_NUMBER),
    column: str = COC_CATEGORY,
    year_col: str = YEAR,
) -> pl.DataFrame:
    """
    Replace `column` on every row with the latest year's value for its key.

    Rows whose key does not occur in the latest year get a null category,
    whatever they carried before.

    Args:
        df:       Longitudinal table (output of union_years).
        latest:   The year whose values are authoritative.
        key:      Composite join key.
        column:   Attribute to backfill.
        year_col: Year column name.

    Returns:
        New DataFrame with the same rows and columns as df.
    """
    if column not in df.columns:
        log.warning("backfill_column_absent", column=column)
        df = df.with_columns(pl.lit(None, dtype=pl.String).alias(column))

    extract = latest_category_extract(df, latest, key=key, column=column, year_col=year_col)
    original_order = df.columns

    result = extract.join(
        df.drop(column),
        on=list(key),
        how="right",
    ).select(original_order)

    unfilled = result[column].null_count()
    log.info(
        "backfill_complete",
        latest_year=latest,
        latest_keys=len(extract),
        rows=len(result),
        rows_without_category=unfilled,
    )
    if len(extract) and unfilled == len(result):
        log.warning("join_no_matches", stage="backfill", rows=len(result))

    return result
