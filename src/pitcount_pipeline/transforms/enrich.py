"""
transforms/enrich.py — Join the target PIT year with population and COVID data.

The CoC number's two-letter prefix is the USPS code of its state; that code
is mapped to a state name, which is the join key into both external tables.
Per-10,000 rates are computed for the homeless count, cases and deaths.

Usage:
    from pitcount_pipeline.transforms.enrich import enrich_target_year

    enriched = enrich_target_year(
        backfilled, population_df, health_df, target_year=2019,
    )
    # adds: region_code, region_name, population, case_count, death_count,
    #       homeless_per_10k, cases_per_10k, deaths_per_10k
"""

from __future__ import annotations

import warnings
from collections.abc import Mapping

import polars as pl
import structlog

from pitcount_shared.constants import (
    CASE_COUNT,
    COC_NUMBER,
    DEATH_COUNT,
    PER_CAPITA_BASE,
    POPULATION,
    RATE_COLUMNS,
    REGION_CODE,
    REGION_NAME,
    YEAR,
)
from pitcount_shared.geo import coc_region_code, region_name_for_code
from pitcount_pipeline.errors import JoinKeyUnresolvedWarning
from pitcount_pipeline.transforms.normalize import require_columns

log = structlog.get_logger(__name__)


def add_region(
    df: pl.DataFrame,
    coc_col: str = COC_NUMBER,
    *,
    code_col: str = REGION_CODE,
    name_col: str = REGION_NAME,
) -> pl.DataFrame:
    """
    Add region_code and region_name columns derived from the CoC number.

    Unknown prefixes give a null region_name; region_code is kept so the
    unresolved value can be reported.
    """
    return df.with_columns(
        pl.col(coc_col).map_elements(coc_region_code, return_dtype=pl.String).alias(code_col),
    ).with_columns(
        pl.col(code_col).map_elements(region_name_for_code, return_dtype=pl.String).alias(name_col),
    )


def add_per_capita_rates(
    df: pl.DataFrame,
    rate_columns: Mapping[str, str] = RATE_COLUMNS,
    *,
    population_col: str = POPULATION,
    base: int = PER_CAPITA_BASE,
) -> pl.DataFrame:
    """
    Add `rate = count / (population / base)` for each count → rate pair.

    A null or non-positive population yields a null rate; so does a null
    count. Count columns absent from df are skipped.
    """
    has_population = pl.col(population_col).is_not_null() & (pl.col(population_col) > 0)
    return df.with_columns(
        [
            pl.when(has_population)
            .then(
                pl.col(count_col).cast(pl.Float64)
                / (pl.col(population_col).cast(pl.Float64) / base)
            )
            .otherwise(None)
            .alias(rate_col)
            for count_col, rate_col in rate_columns.items()
            if count_col in df.columns
        ]
    )


def _dedupe_on(df: pl.DataFrame, key: str, label: str) -> pl.DataFrame:
    deduped = df.unique(subset=[key], keep="first", maintain_order=True)
    if len(deduped) != len(df):
        log.warning("duplicate_join_keys", table=label, dropped=len(df) - len(deduped))
    return deduped


def _warn_unresolved(df: pl.DataFrame, name_col: str, population_col: str) -> None:
    no_region = df.filter(pl.col(name_col).is_null())
    no_population = df.filter(pl.col(name_col).is_not_null() & pl.col(population_col).is_null())

    if not no_region.is_empty():
        codes = sorted({c for c in no_region[REGION_CODE].to_list() if c is not None})
        log.warning("unresolved_region", rows=len(no_region), region_codes=codes)
        warnings.warn(
            JoinKeyUnresolvedWarning(
                f"{len(no_region)} row(s) with unmapped region code(s): {codes}"
            ),
            stacklevel=3,
        )

    if not no_population.is_empty():
        names = sorted(set(no_population[name_col].to_list()))
        log.warning("unresolved_population", rows=len(no_population), regions=names)
        warnings.warn(
            JoinKeyUnresolvedWarning(
                f"{len(no_population)} row(s) without population for: {names}"
            ),
            stacklevel=3,
        )


def enrich_target_year(
    df: pl.DataFrame,
    population: pl.DataFrame,
    health: pl.DataFrame,
    *,
    target_year: int,
    year_col: str = YEAR,
) -> pl.DataFrame:
    """
    Filter to target_year, derive the region, left-join population then health.

    Rows whose region or population does not resolve are kept with null
    enrichment fields and null rates, and a JoinKeyUnresolvedWarning is
    emitted. A join that matches nothing on non-empty input is logged as a
    data-quality warning but does not stop the run.

    Args:
        df:          Backfilled longitudinal table.
        population:  ExternalPopulationRecord table (region_name, population).
        health:      ExternalHealthRecord table (region_name, case_count, death_count).
        target_year: PIT year to enrich.

    Returns:
        EnrichedRecord table, one row per CoC of target_year.
    """
    require_columns(population, [REGION_NAME, POPULATION], context="population table")
    require_columns(health, [REGION_NAME, CASE_COUNT, DEATH_COUNT], context="health table")

    target = df.filter(pl.col(year_col) == target_year)
    if target.is_empty():
        log.warning("target_year_empty", target_year=target_year)

    target = add_region(target)

    population = _dedupe_on(population.select(REGION_NAME, POPULATION), REGION_NAME, "population")
    health = _dedupe_on(
        health.select(REGION_NAME, CASE_COUNT, DEATH_COUNT), REGION_NAME, "health"
    )

    joined = target.join(population, on=REGION_NAME, how="left")
    joined = joined.join(health, on=REGION_NAME, how="left")
    enriched = add_per_capita_rates(joined)

    if len(enriched):
        if enriched[POPULATION].null_count() == len(enriched):
            log.warning("join_no_matches", stage="population", rows=len(enriched))
        if enriched[CASE_COUNT].null_count() == len(enriched):
            log.warning("join_no_matches", stage="health", rows=len(enriched))
        _warn_unresolved(enriched, REGION_NAME, POPULATION)

    log.info(
        "enrich_complete",
        target_year=target_year,
        rows=len(enriched),
        rows_with_rates=enriched.filter(pl.col(POPULATION) > 0).height,
    )
    return enriched
