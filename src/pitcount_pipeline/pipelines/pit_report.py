"""
pipelines/pit_report.py — HUD PIT homelessness report pipeline.

Ingests:
  - HUD PIT estimates by CoC, one sheet per year   -> longitudinal table
  - NYT COVID-19 counts by state at a snapshot date -> health table
  - Census state population estimates               -> population table

Stages run strictly in order, once:
  load → normalize → union → backfill CoC_Category → enrich target year → report

Usage:
    from pitcount_pipeline.pipelines.pit_report import run
    result = run()                                         # settings defaults
    result = run(workbook="pit.xlsx", target_year=2019)    # local workbook
    result = run(dry_run=True)                             # no files written
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

import polars as pl

from pitcount_shared.config import settings
from pitcount_shared.constants import YEAR
from pitcount_pipeline.report import PitReport, build_report, write_report
from pitcount_pipeline.sources import CovidSource, PITWorkbookSource, PopulationSource
from pitcount_pipeline.transforms.backfill import backfill_category, latest_year
from pitcount_pipeline.transforms.enrich import enrich_target_year
from pitcount_pipeline.transforms.union import union_years
from pitcount_pipeline.utils.logging import configure_logging, get_logger

log = get_logger(__name__, pipeline="pit_report")


@dataclass
class ReportResult:
    """Every stage table of one run plus the rendered report."""

    target_year: int
    longitudinal: pl.DataFrame
    backfilled: pl.DataFrame
    enriched: pl.DataFrame
    report: PitReport
    outputs: dict[str, Path] = field(default_factory=dict)
    duration_ms: int = 0


def run(
    *,
    workbook: str | Path | None = None,
    covid_url: str | None = None,
    population_url: str | None = None,
    sheets: list[str] | None = None,
    target_year: int | None = None,
    snapshot_date: date | None = None,
    year_suffix_pattern: str | None = None,
    population_column: str | None = None,
    output_dir: str | Path | None = None,
    top_n: int = 10,
    dry_run: bool = False,
) -> ReportResult:
    """
    Run the PIT report end to end.

    Args:
        workbook:            PIT workbook path or URL (default: settings.pit_workbook_url).
        covid_url:           NYT us-states CSV path or URL.
        population_url:      Census population CSV path or URL.
        sheets:              Sheet names to load (default: every year sheet).
        target_year:         Year to enrich and rank (default: latest in workbook).
        snapshot_date:       COVID snapshot date (default: settings.covid_snapshot_date).
        year_suffix_pattern: Regex of the year label to strip from column names.
        population_column:   Estimate column of the population CSV.
        output_dir:          Where report.md and CSVs go (default: settings.output_dir).
        top_n:               Length of each ranking.
        dry_run:             Build everything but write no files.

    Returns:
        ReportResult.

    Raises:
        RetrievalError, SchemaMismatchError: fatal; nothing is written.
    """
    configure_logging()
    snapshot_date = snapshot_date or settings.covid_snapshot_date
    output_dir = output_dir or settings.output_dir
    target_year = target_year if target_year is not None else settings.target_year

    log.info(
        "pit_report_start",
        workbook=str(workbook or settings.pit_workbook_url),
        target_year=target_year,
        snapshot_date=snapshot_date.isoformat(),
        dry_run=dry_run,
    )
    t0 = time.monotonic()

    # Load
    yearly = PITWorkbookSource(year_suffix_pattern=year_suffix_pattern).run(
        location=workbook, sheets=sheets
    )
    population = PopulationSource(population_column).run(location=population_url)
    health = CovidSource(snapshot_date).run(location=covid_url)

    # Union + backfill
    longitudinal = union_years(yearly)
    latest = latest_year(longitudinal)
    backfilled = backfill_category(longitudinal, latest)

    if target_year is None:
        target_year = latest
    elif target_year not in set(longitudinal[YEAR].unique().to_list()):
        log.warning("target_year_not_in_workbook", target_year=target_year, latest=latest)

    # Enrich + report
    enriched = enrich_target_year(backfilled, population, health, target_year=target_year)
    report = build_report(
        longitudinal,
        backfilled,
        enriched,
        target_year=target_year,
        snapshot_date=snapshot_date,
        top_n=top_n,
    )

    outputs: dict[str, Path] = {}
    if dry_run:
        log.info("dry_run_skip_write", output_dir=str(output_dir))
    else:
        outputs = write_report(report, output_dir)
        enriched_path = Path(output_dir) / f"enriched_{target_year}.csv"
        enriched.write_csv(enriched_path)
        outputs["enriched"] = enriched_path

    duration_ms = int((time.monotonic() - t0) * 1000)
    log.info(
        "pit_report_complete",
        target_year=target_year,
        longitudinal_rows=len(longitudinal),
        enriched_rows=len(enriched),
        files_written=len(outputs),
        duration_ms=duration_ms,
    )

    return ReportResult(
        target_year=target_year,
        longitudinal=longitudinal,
        backfilled=backfilled,
        enriched=enriched,
        report=report,
        outputs=outputs,
        duration_ms=duration_ms,
    )
