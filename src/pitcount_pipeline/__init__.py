"""
pitcount_pipeline — ETL and report for HUD homelessness Point-in-Time estimates.

Architecture:
  sources/     — one module per external dataset (HUD PIT workbook, NYT COVID, Census)
  transforms/  — column normalization, year union, category backfill, enrichment
  pipelines/   — orchestrators that wire sources -> transforms -> report
  report.py    — aggregations, rankings, Markdown/CSV rendering
  utils/       — structlog configuration

Quick start:
    from pitcount_pipeline.pipelines.pit_report import run
    result = run(dry_run=True)

CLI:
    pitcount run --target-year 2019 --snapshot-date 2020-06-01
    pitcount sheets path/to/2007-2019-PIT-Estimates-by-CoC.xlsx

Shared code from pitcount_shared:
    from pitcount_shared.config import settings
    from pitcount_shared.constants import STATES, COUNT_COLUMNS
    from pitcount_shared.geo import coc_region_code
    from pitcount_shared.models import EnrichedRecord, RegionRate
"""

__version__ = "0.1.0"
