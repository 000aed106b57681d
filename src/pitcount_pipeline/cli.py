"""
cli.py — Click CLI entrypoint for the PIT report.

Usage:
    pitcount run
    pitcount run --workbook pit.xlsx --target-year 2019 --snapshot-date 2020-06-01
    pitcount run --dry-run
    pitcount sheets pit.xlsx
"""

from __future__ import annotations

import sys
from datetime import datetime

import click
import structlog

from pitcount_shared.config import settings
from pitcount_pipeline.errors import PitCountError

log = structlog.get_logger(__name__)


@click.group()
@click.option(
    "--log-level",
    default=settings.log_level,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Log level",
)
@click.option(
    "--log-format",
    default=settings.log_format,
    type=click.Choice(["console", "json"]),
    help="Log renderer",
)
def main(log_level: str, log_format: str) -> None:
    """HUD homelessness Point-in-Time report."""
    settings.log_level = log_level  # type: ignore[assignment]
    settings.log_format = log_format  # type: ignore[assignment]


@main.command()
@click.option("--workbook", default=None, help="PIT workbook path or URL")
@click.option("--covid-url", default=None, help="NYT us-states CSV path or URL")
@click.option("--population-url", default=None, help="Census population CSV path or URL")
@click.option("--sheet", "sheets", multiple=True, help="Sheet to load (repeatable; default: all years)")
@click.option("--target-year", type=int, default=None, help="Year to rank (default: latest)")
@click.option(
    "--snapshot-date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="COVID snapshot date, YYYY-MM-DD",
)
@click.option("--year-suffix-pattern", default=None, help="Regex of the year label in column names")
@click.option("--population-column", default=None, help="Estimate column of the population CSV")
@click.option("--output-dir", default=None, type=click.Path(file_okay=False), help="Output directory")
@click.option("--top", "top_n", default=10, show_default=True, help="Ranking length")
@click.option("--dry-run", is_flag=True, help="Build the report but write no files")
def run(
    workbook: str | None,
    covid_url: str | None,
    population_url: str | None,
    sheets: tuple[str, ...],
    target_year: int | None,
    snapshot_date: datetime | None,
    year_suffix_pattern: str | None,
    population_column: str | None,
    output_dir: str | None,
    top_n: int,
    dry_run: bool,
) -> None:
    """Load, join and rank the PIT estimates; write report.md and CSVs."""
    from pitcount_pipeline.pipelines.pit_report import run as run_report

    try:
        result = run_report(
            workbook=workbook,
            covid_url=covid_url,
            population_url=population_url,
            sheets=list(sheets) or None,
            target_year=target_year,
            snapshot_date=snapshot_date.date() if snapshot_date else None,
            year_suffix_pattern=year_suffix_pattern,
            population_column=population_column,
            output_dir=output_dir,
            top_n=top_n,
            dry_run=dry_run,
        )
    except PitCountError as exc:
        log.error("pit_report_failed", error=str(exc))
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    click.echo(
        f"PIT {result.target_year}: {len(result.enriched)} CoCs, "
        f"{len(result.report.regions)} regions, "
        f"{len(result.report.unresolved)} without rates."
    )
    for name, path in result.outputs.items():
        click.echo(f"  {name:24s} {path}")


@main.command()
@click.argument("workbook")
@click.option("--year-suffix-pattern", default=None, help="Regex of the year label in column names")
def sheets(workbook: str, year_suffix_pattern: str | None) -> None:
    """List the normalized columns of every year sheet of a workbook."""
    from pitcount_pipeline.sources.pit import PITWorkbookSource
    from pitcount_pipeline.utils.logging import configure_logging

    configure_logging()
    source = PITWorkbookSource(year_suffix_pattern=year_suffix_pattern)
    try:
        frames = source.run(location=workbook)
    except PitCountError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    for year, df in frames.items():
        click.echo(f"{year}  ({len(df)} rows)")
        for col in df.columns:
            click.echo(f"    {col}")


if __name__ == "__main__":
    main()
