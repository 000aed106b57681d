"""
transforms/normalize.py — Column-name normalization and cleanup for PIT sheets.

Each yearly sheet of the PIT workbook labels its columns with the year
("Overall Homeless, 2019"). A declarative list of ColumnRule objects turns
those labels into year-free identifiers ("Overall_Homeless") so the sheets
can be unioned.

Usage:
    from pitcount_pipeline.transforms.normalize import (
        DEFAULT_COLUMN_RULES,
        normalize_columns,
        require_columns,
    )

    df = normalize_columns(raw_sheet)                 # default rules
    df = normalize_columns(raw_sheet, build_column_rules(r"\\s*\\(\\d{4}\\)$"))
    require_columns(df, ["CoC_Number", "CoC_Name"], context="sheet 2019")
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

import polars as pl
import structlog

from pitcount_shared.config import settings
from pitcount_pipeline.errors import SchemaMismatchError

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ColumnRule:
    """A single regex substitution applied to a column name."""

    pattern: str
    replacement: str = ""
    _compiled: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_compiled", re.compile(self.pattern))

    def apply(self, name: str) -> str:
        return self._compiled.sub(self.replacement, name)


def year_suffix_rule(pattern: str | None = None) -> ColumnRule:
    """Rule stripping a trailing year label such as ", 2019"."""
    return ColumnRule(pattern or settings.year_suffix_pattern, "")


def build_column_rules(year_suffix_pattern: str | None = None) -> tuple[ColumnRule, ...]:
    """
    Return the ordered rule set for a given year-suffix pattern.

    Order matters: the suffix is stripped before whitespace is collapsed so
    that a pattern written against the authored label (", 2019") still matches.
    """
    return (
        ColumnRule(r"^\s+|\s+$", ""),
        year_suffix_rule(year_suffix_pattern),
        ColumnRule(r"^\s+|\s+$", ""),
        ColumnRule(r"\s+", "_"),
    )


DEFAULT_COLUMN_RULES: tuple[ColumnRule, ...] = build_column_rules()


def normalize_column_name(
    name: str,
    rules: Sequence[ColumnRule] = DEFAULT_COLUMN_RULES,
) -> str:
    """Apply every rule in order. Rules that don't match leave the name as-is."""
    for rule in rules:
        name = rule.apply(name)
    return name


def normalize_columns(
    df: pl.DataFrame,
    rules: Sequence[ColumnRule] = DEFAULT_COLUMN_RULES,
) -> pl.DataFrame:
    """
    Rename every column of df through normalize_column_name().

    If two authored columns collapse onto the same name, the first keeps it
    and later ones are dropped with a warning; polars would refuse the
    duplicate rename otherwise.
    """
    mapping: dict[str, str] = {}
    seen: set[str] = set()
    dropped: list[str] = []
    for col in df.columns:
        new = normalize_column_name(col, rules)
        if new in seen:
            dropped.append(col)
            continue
        seen.add(new)
        mapping[col] = new

    if dropped:
        log.warning("duplicate_normalized_columns", dropped=dropped)
        df = df.drop(dropped)

    return df.rename({k: v for k, v in mapping.items() if k != v})


def require_columns(
    df: pl.DataFrame,
    columns: Iterable[str],
    *,
    context: str = "",
) -> None:
    """Raise SchemaMismatchError if any of columns is absent from df."""
    missing = [c for c in columns if c not in df.columns]
    if missing:
        log.error("required_columns_missing", missing=missing, context=context)
        raise SchemaMismatchError(missing, context)


# ---------------------------------------------------------------------------
# Stateless helper functions
# ---------------------------------------------------------------------------


def clean_string_columns(df: pl.DataFrame) -> pl.DataFrame:
    """Strip whitespace from all String columns."""
    return df.with_columns(
        [
            pl.col(c).str.strip_chars()
            for c in df.columns
            if df[c].dtype == pl.String
        ]
    )


def drop_all_null_rows(df: pl.DataFrame) -> pl.DataFrame:
    """Drop rows where every column is null."""
    if df.width == 0:
        return df
    return df.filter(
        pl.any_horizontal([pl.col(c).is_not_null() for c in df.columns])
    )


def cast_numeric_cols(
    df: pl.DataFrame,
    columns: Iterable[str],
    dtype: type[pl.DataType] = pl.Float64,
) -> pl.DataFrame:
    """Cast specified columns to a numeric dtype, coercing errors to null."""
    return df.with_columns(
        [pl.col(c).cast(dtype, strict=False) for c in columns if c in df.columns]
    )
