"""
transforms/union.py — Stack per-year PIT sheets into one longitudinal table.

Usage:
    from pitcount_pipeline.transforms.union import union_years

    longitudinal = union_years({2018: sheet_2018, 2019: sheet_2019})
    # columns: year, CoC_Number, CoC_Name, ..., one row per CoC per year
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import polars as pl
import structlog

from pitcount_shared.constants import COC_NAME, COC_NUMBER, TOTAL_SENTINEL, YEAR

log = structlog.get_logger(__name__)


def year_label(label: int | str) -> int:
    """Parse a sheet label ("2019", " 2019 ", 2019) into an int year."""
    try:
        return int(str(label).strip())
    except ValueError as exc:
        raise ValueError(f"Sheet label {label!r} is not a year") from exc


def drop_sentinel_rows(
    df: pl.DataFrame,
    *,
    sentinel: str = TOTAL_SENTINEL,
    columns: Sequence[str] = (COC_NAME, COC_NUMBER),
) -> pl.DataFrame:
    """Drop pre-aggregated rows whose name or number equals the sentinel."""
    present = [c for c in columns if c in df.columns and df[c].dtype == pl.String]
    if not present:
        return df
    is_sentinel = pl.any_horizontal(
        [pl.col(c).str.strip_chars().eq(sentinel).fill_null(False) for c in present]
    )
    return df.filter(~is_sentinel)


def union_years(
    tables: Mapping[int | str, pl.DataFrame],
    *,
    sentinel: str = TOTAL_SENTINEL,
    sentinel_columns: Sequence[str] = (COC_NAME, COC_NUMBER),
) -> pl.DataFrame:
    """
    Concatenate normalized yearly tables into one table with a `year` column.

    Column sets may differ between years; columns missing from a year are
    null in that year's rows. Rows whose name/number equals `sentinel` are
    excluded.

    Args:
        tables:           Year label → normalized DataFrame. Order is kept.
        sentinel:         Marker of pre-aggregated total rows.
        sentinel_columns: Columns checked for the sentinel.

    Returns:
        Longitudinal DataFrame with `year` (Int64) as its first column.
    """
    if not tables:
        return pl.DataFrame(schema={YEAR: pl.Int64})

    frames: list[pl.DataFrame] = []
    input_rows = 0
    dropped = 0
    for label, df in tables.items():
        year = year_label(label)
        kept = drop_sentinel_rows(df, sentinel=sentinel, columns=sentinel_columns)
        input_rows += len(df)
        dropped += len(df) - len(kept)
        frames.append(
            kept.with_columns(pl.lit(year, dtype=pl.Int64).alias(YEAR)).select(
                YEAR, pl.exclude(YEAR)
            )
        )

    result = pl.concat(frames, how="diagonal_relaxed")

    log.info(
        "union_complete",
        years=[year_label(k) for k in tables],
        input_rows=input_rows,
        sentinel_rows=dropped,
        output_rows=len(result),
        columns=result.width,
    )

    dupes = duplicate_keys(result, [YEAR, COC_NUMBER])
    if not dupes.is_empty():
        log.warning("duplicate_provider_keys", count=len(dupes), sample=dupes.head(5).rows())

    return result


def duplicate_keys(df: pl.DataFrame, keys: Sequence[str]) -> pl.DataFrame:
    """Return the key combinations occurring more than once (with their count)."""
    if any(k not in df.columns for k in keys):
        return pl.DataFrame()
    return (
        df.group_by(list(keys))
        .len()
        .filter(pl.col("len") > 1)
        .sort(list(keys))
    )
