"""
report.py — Aggregations, rankings and rendering for the PIT report.

Consumes the stage tables produced by the pipeline and never mutates them:

  national_trend()       — per-year totals across all CoCs
  category_summary()     — target-year totals per CoC category
  summarize_by_region()  — target-year totals per state with per-10k rates
  top_by_rate()          — top-N states by a rate column (null rates excluded)

build_report() bundles them into a PitReport; render_markdown() and
write_report() turn a PitReport into a Markdown document plus CSV tables.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

import polars as pl
import structlog

from pitcount_shared.constants import (
    CASE_COUNT,
    COC_CATEGORY,
    COC_NUMBER,
    DEATH_COUNT,
    POPULATION,
    RATE_COLUMNS,
    REGION_NAME,
    YEAR,
)
from pitcount_shared.models import EnrichedRecord, RegionRate
from pitcount_pipeline.transforms.enrich import add_per_capita_rates

log = structlog.get_logger(__name__)

TREND_COLUMNS: tuple[str, ...] = (
    "Overall_Homeless",
    "Sheltered_Total_Homeless",
    "Unsheltered_Homeless",
)

UNCATEGORIZED = "Uncategorized"


@dataclass
class PitReport:
    target_year: int
    snapshot_date: date
    trend: pl.DataFrame
    categories: pl.DataFrame
    regions: pl.DataFrame
    rankings: dict[str, list[RegionRate]] = field(default_factory=dict)
    unresolved: list[EnrichedRecord] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Aggregations
# ---------------------------------------------------------------------------


def national_trend(longitudinal: pl.DataFrame) -> pl.DataFrame:
    """Sum the headline counts per year, oldest first."""
    present = [c for c in TREND_COLUMNS if c in longitudinal.columns]
    return (
        longitudinal.group_by(YEAR)
        .agg(
            pl.col(COC_NUMBER).n_unique().alias("coc_count"),
            *[pl.col(c).sum() for c in present],
        )
        .sort(YEAR)
    )


def category_summary(backfilled: pl.DataFrame, year: int) -> pl.DataFrame:
    """Totals and share of the overall count per CoC category for one year."""
    df = backfilled.filter(pl.col(YEAR) == year)
    if COC_CATEGORY not in df.columns:
        df = df.with_columns(pl.lit(None, dtype=pl.String).alias(COC_CATEGORY))

    summary = (
        df.with_columns(pl.col(COC_CATEGORY).fill_null(UNCATEGORIZED))
        .group_by(COC_CATEGORY)
        .agg(
            pl.len().alias("coc_count"),
            pl.col("Overall_Homeless").sum(),
        )
    )
    total = summary["Overall_Homeless"].sum()
    return summary.with_columns(
        (pl.col("Overall_Homeless") / total * 100).round(1).alias("share_pct")
        if total
        else pl.lit(None, dtype=pl.Float64).alias("share_pct")
    ).sort("Overall_Homeless", descending=True)


def summarize_by_region(enriched: pl.DataFrame) -> pl.DataFrame:
    """
    Aggregate CoC rows to one row per state and recompute per-10k rates.

    Population, cases and deaths are state-level values repeated on every
    CoC row of a state, so they are taken once rather than summed. Rows with
    no resolved region are left out.
    """
    present = [c for c in TREND_COLUMNS if c in enriched.columns]
    summary = (
        enriched.filter(pl.col(REGION_NAME).is_not_null())
        .group_by(REGION_NAME)
        .agg(
            pl.len().alias("coc_count"),
            *[pl.col(c).sum() for c in present],
            pl.col(POPULATION).first(),
            pl.col(CASE_COUNT).first(),
            pl.col(DEATH_COUNT).first(),
        )
    )
    summary = add_per_capita_rates(summary)
    if "Unsheltered_Homeless" in summary.columns:
        summary = summary.with_columns(
            pl.when(pl.col("Overall_Homeless") > 0)
            .then(pl.col("Unsheltered_Homeless") / pl.col("Overall_Homeless") * 100)
            .otherwise(None)
            .round(1)
            .alias("unsheltered_pct")
        )
    return summary.sort(REGION_NAME)


def top_by_rate(summary: pl.DataFrame, rate_column: str, n: int = 10) -> list[RegionRate]:
    """Top-n regions by rate_column; regions with a null rate are excluded."""
    ranked = (
        summary.filter(pl.col(rate_column).is_not_null())
        .sort(rate_column, descending=True)
        .head(n)
    )
    return [
        RegionRate.from_row(i, rate_column, row)
        for i, row in enumerate(ranked.iter_rows(named=True), start=1)
    ]


def unresolved_rows(enriched: pl.DataFrame) -> list[EnrichedRecord]:
    """CoC rows that carry counts but no rate (unmapped region or no population)."""
    rate_col = RATE_COLUMNS["Overall_Homeless"]
    if rate_col not in enriched.columns:
        return []
    missing = enriched.filter(pl.col(rate_col).is_null())
    return [EnrichedRecord.model_validate(row) for row in missing.iter_rows(named=True)]


def build_report(
    longitudinal: pl.DataFrame,
    backfilled: pl.DataFrame,
    enriched: pl.DataFrame,
    *,
    target_year: int,
    snapshot_date: date,
    top_n: int = 10,
) -> PitReport:
    regions = summarize_by_region(enriched)
    rankings = {
        rate_col: top_by_rate(regions, rate_col, top_n)
        for rate_col in RATE_COLUMNS.values()
        if rate_col in regions.columns
    }
    report = PitReport(
        target_year=target_year,
        snapshot_date=snapshot_date,
        trend=national_trend(longitudinal),
        categories=category_summary(backfilled, target_year),
        regions=regions,
        rankings=rankings,
        unresolved=unresolved_rows(enriched),
    )
    log.info(
        "report_built",
        target_year=target_year,
        regions=len(regions),
        unresolved_rows=len(report.unresolved),
    )
    return report


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

_RANKING_TITLES: dict[str, str] = {
    "homeless_per_10k": "People experiencing homelessness per 10,000 residents",
    "cases_per_10k": "COVID-19 cases per 10,000 residents",
    "deaths_per_10k": "COVID-19 deaths per 10,000 residents",
}


def _markdown_table(df: pl.DataFrame) -> str:
    with pl.Config(
        tbl_formatting="ASCII_MARKDOWN",
        tbl_hide_column_data_types=True,
        tbl_hide_dataframe_shape=True,
        tbl_rows=-1,
        tbl_cols=-1,
        fmt_str_lengths=200,
    ):
        return str(df)


def render_markdown(report: PitReport) -> str:
    """Render a PitReport as a Markdown document."""
    parts: list[str] = [
        f"# Homelessness Point-in-Time estimates, {report.target_year}",
        "",
        f"COVID-19 counts as of {report.snapshot_date.isoformat()}.",
        "",
        "## National trend",
        "",
        _markdown_table(report.trend),
        "",
        f"## CoC categories, {report.target_year}",
        "",
        _markdown_table(report.categories),
        "",
    ]

    for rate_col, rows in report.rankings.items():
        parts += [f"## Top {len(rows)}: {_RANKING_TITLES.get(rate_col, rate_col)}", ""]
        if rows:
            parts.append(_markdown_table(pl.from_dicts([r.to_dict() for r in rows])))
        else:
            parts.append("_No region has a computable rate._")
        parts.append("")

    if report.unresolved:
        parts += [
            "## CoCs excluded from rate rankings",
            "",
            *[
                f"- {r.coc_number or '(no CoC number)'} {r.coc_name or ''} "
                f"(region: {r.region_name or r.region_code or 'unknown'})"
                for r in report.unresolved
            ],
            "",
        ]

    return "\n".join(parts)


def write_report(report: PitReport, output_dir: str | Path) -> dict[str, Path]:
    """
    Write report.md plus one CSV per table to output_dir.

    Returns:
        Dict of {artifact name -> path written}.
    """
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    written: dict[str, Path] = {}

    md_path = out / "report.md"
    md_path.write_text(render_markdown(report), encoding="utf-8")
    written["report"] = md_path

    for name, df in (
        ("trend", report.trend),
        ("categories", report.categories),
        ("regions", report.regions),
    ):
        path = out / f"{name}.csv"
        df.write_csv(path)
        written[name] = path

    for rate_col, rows in report.rankings.items():
        if not rows:
            continue
        path = out / f"top_{rate_col}.csv"
        pl.from_dicts([r.to_dict() for r in rows]).write_csv(path)
        written[f"top_{rate_col}"] = path

    log.info("report_written", output_dir=str(out), files=len(written))
    return written
