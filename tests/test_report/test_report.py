"""
tests/test_report/test_report.py — Tests for aggregations, rankings and rendering.
"""

from __future__ import annotations

import warnings
from datetime import date
from pathlib import Path

import polars as pl
import pytest

from pitcount_pipeline.errors import JoinKeyUnresolvedWarning
from pitcount_pipeline.report import (
    build_report,
    category_summary,
    national_trend,
    render_markdown,
    summarize_by_region,
    top_by_rate,
    unresolved_rows,
    write_report,
)
from pitcount_pipeline.transforms.backfill import backfill_category
from pitcount_pipeline.transforms.enrich import enrich_target_year
from pitcount_pipeline.transforms.normalize import normalize_columns
from pitcount_pipeline.transforms.union import union_years
from pitcount_shared.models import EnrichedRecord, RegionRate


@pytest.fixture
def stages(raw_sheets, population_df, health_df) -> dict[str, pl.DataFrame]:
    longitudinal = union_years({k: normalize_columns(v) for k, v in raw_sheets.items()})
    backfilled = backfill_category(longitudinal, 2019)
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", JoinKeyUnresolvedWarning)
        enriched = enrich_target_year(backfilled, population_df, health_df, target_year=2019)
    return {"longitudinal": longitudinal, "backfilled": backfilled, "enriched": enriched}


class TestNationalTrend:
    def test_sums_per_year(self, stages):
        trend = national_trend(stages["longitudinal"])
        assert trend["year"].to_list() == [2015, 2018, 2019]
        row_2019 = trend.filter(pl.col("year") == 2019).row(0, named=True)
        assert row_2019["Overall_Homeless"] == 6000 + 56000 + 78000 + 2000 + 1000 + 300
        assert row_2019["coc_count"] == 6

    def test_sheltered_plus_unsheltered_equals_overall(self, stages):
        trend = national_trend(stages["longitudinal"])
        for row in trend.iter_rows(named=True):
            assert row["Sheltered_Total_Homeless"] + row["Unsheltered_Homeless"] == row["Overall_Homeless"]


class TestCategorySummary:
    def test_totals_per_category(self, stages):
        summary = category_summary(stages["backfilled"], 2019)
        major = summary.filter(pl.col("CoC_Category") == "Major City CoC").row(0, named=True)
        assert major["coc_count"] == 3
        assert major["Overall_Homeless"] == 6000 + 56000 + 78000
        assert summary["share_pct"].sum() == pytest.approx(100.0, abs=0.2)

    def test_backfilled_categories_for_earlier_year(self, stages):
        summary = category_summary(stages["backfilled"], 2018)
        cats = summary["CoC_Category"].to_list()
        assert "Major City CoC" in cats
        # MA-999 has no 2019 row
        assert "Uncategorized" in cats


class TestSummarizeByRegion:
    def test_one_row_per_region(self, stages):
        summary = summarize_by_region(stages["enriched"])
        assert summary["region_name"].to_list() == sorted(
            ["California", "Massachusetts", "New York", "Ohio", "Puerto Rico", "West Virginia"]
        )

    def test_state_values_not_summed(self):
        enriched = pl.DataFrame({
            "region_name": ["Ohio", "Ohio"],
            "Overall_Homeless": [100, 50],
            "population": [1_000_000, 1_000_000],
            "case_count": [500, 500],
            "death_count": [10, 10],
        })
        summary = summarize_by_region(enriched)
        row = summary.row(0, named=True)
        assert row["coc_count"] == 2
        assert row["Overall_Homeless"] == 150
        assert row["population"] == 1_000_000
        assert row["case_count"] == 500
        assert row["homeless_per_10k"] == pytest.approx(150 * 10000 / 1_000_000)
        assert row["cases_per_10k"] == pytest.approx(5.0)

    def test_region_without_population_has_null_rates(self, stages):
        summary = summarize_by_region(stages["enriched"])
        pr = summary.filter(pl.col("region_name") == "Puerto Rico").row(0, named=True)
        assert pr["Overall_Homeless"] == 2000
        assert pr["homeless_per_10k"] is None


class TestTopByRate:
    def test_excludes_null_rates(self, stages):
        summary = summarize_by_region(stages["enriched"])
        top = top_by_rate(summary, "homeless_per_10k", n=10)
        assert all(isinstance(r, RegionRate) for r in top)
        assert "Puerto Rico" not in [r.region_name for r in top]
        assert len(top) == 5

    def test_sorted_descending_with_ranks(self, stages):
        summary = summarize_by_region(stages["enriched"])
        top = top_by_rate(summary, "homeless_per_10k", n=3)
        assert [r.rank for r in top] == [1, 2, 3]
        values = [r.value for r in top]
        assert values == sorted(values, reverse=True)
        # NYC: 78000 / 1945.3561
        assert top[0].region_name == "New York"

    def test_all_null_gives_empty(self):
        summary = pl.DataFrame(
            {"region_name": ["Puerto Rico"], "homeless_per_10k": [None]},
            schema={"region_name": pl.String, "homeless_per_10k": pl.Float64},
        )
        assert top_by_rate(summary, "homeless_per_10k") == []


class TestUnresolvedRows:
    def test_lists_rows_without_rates(self, stages):
        rows = unresolved_rows(stages["enriched"])
        assert [r.coc_number for r in rows] == ["PR-502"]
        assert isinstance(rows[0], EnrichedRecord)
        assert rows[0].region_name == "Puerto Rico"
        assert not rows[0].has_rates

    def test_row_without_coc_number(self, population_df, health_df):
        df = pl.DataFrame({
            "year": [2019, 2019],
            "CoC_Number": ["MA-500", None],
            "CoC_Name": ["Boston CoC", "Footnote or unnumbered CoC"],
            "Overall_Homeless": [6000, 40],
        })
        with pytest.warns(JoinKeyUnresolvedWarning):
            enriched = enrich_target_year(df, population_df, health_df, target_year=2019)
        rows = unresolved_rows(enriched)
        assert len(rows) == 1
        assert rows[0].coc_number is None
        assert rows[0].coc_name == "Footnote or unnumbered CoC"
        assert not rows[0].has_rates


class TestRendering:
    def test_build_and_render(self, stages):
        report = build_report(
            stages["longitudinal"],
            stages["backfilled"],
            stages["enriched"],
            target_year=2019,
            snapshot_date=date(2020, 6, 1),
        )
        assert set(report.rankings) == {"homeless_per_10k", "cases_per_10k", "deaths_per_10k"}
        md = render_markdown(report)
        assert md.startswith("# Homelessness Point-in-Time estimates, 2019")
        assert "2020-06-01" in md
        assert "New York" in md
        assert "PR-502" in md  # listed under exclusions

    def test_write_report(self, stages, tmp_path: Path):
        report = build_report(
            stages["longitudinal"],
            stages["backfilled"],
            stages["enriched"],
            target_year=2019,
            snapshot_date=date(2020, 6, 1),
            top_n=2,
        )
        written = write_report(report, tmp_path / "out")
        assert written["report"].read_text(encoding="utf-8").startswith("# Homelessness")
        top = pl.read_csv(written["top_homeless_per_10k"])
        assert len(top) == 2
        assert top["rank"].to_list() == [1, 2]
        regions = pl.read_csv(written["regions"])
        assert "Puerto Rico" in regions["region_name"].to_list()
