"""
tests/test_transforms/test_union.py — Tests for stacking yearly PIT sheets.
"""

from __future__ import annotations

import polars as pl
import pytest

from pitcount_pipeline.transforms.normalize import normalize_columns
from pitcount_pipeline.transforms.union import (
    drop_sentinel_rows,
    duplicate_keys,
    union_years,
    year_label,
)


@pytest.fixture
def normalized(raw_sheets: dict[str, pl.DataFrame]) -> dict[str, pl.DataFrame]:
    return {name: normalize_columns(df) for name, df in raw_sheets.items()}


class TestYearLabel:
    @pytest.mark.parametrize("label, expected", [("2019", 2019), (" 2007 ", 2007), (2015, 2015)])
    def test_parses(self, label, expected):
        assert year_label(label) == expected

    def test_rejects_non_year(self):
        with pytest.raises(ValueError, match="not a year"):
            year_label("Notes")


class TestDropSentinelRows:
    def test_drops_total_in_number_column(self):
        df = pl.DataFrame({"CoC_Number": ["MA-500", "Total"], "CoC_Name": ["Boston CoC", None]})
        assert drop_sentinel_rows(df)["CoC_Number"].to_list() == ["MA-500"]

    def test_drops_total_in_name_column(self):
        df = pl.DataFrame({"CoC_Number": ["MA-500", None], "CoC_Name": ["Boston CoC", " Total "]})
        assert len(drop_sentinel_rows(df)) == 1

    def test_keeps_names_containing_total(self):
        df = pl.DataFrame({"CoC_Number": ["XX-1"], "CoC_Name": ["Total Care CoC"]})
        assert len(drop_sentinel_rows(df)) == 1


class TestUnionYears:
    def test_row_count_is_inputs_minus_sentinels(self, normalized):
        result = union_years(normalized)
        total_in = sum(len(df) for df in normalized.values())
        sentinels = sum(
            df.filter(pl.col("CoC_Number") == "Total").height for df in normalized.values()
        )
        assert sentinels == 3
        assert len(result) == total_in - sentinels

    def test_year_column_first_and_tagged(self, normalized):
        result = union_years(normalized)
        assert result.columns[0] == "year"
        assert result["year"].dtype == pl.Int64
        assert sorted(result["year"].unique().to_list()) == [2015, 2018, 2019]
        assert result.filter(pl.col("year") == 2015).height == 2

    def test_no_total_rows_remain(self, normalized):
        result = union_years(normalized)
        assert "Total" not in result["CoC_Number"].to_list()

    def test_outer_union_fills_missing_columns_with_null(self, normalized):
        result = union_years(normalized)
        assert "CoC_Category" in result.columns
        older = result.filter(pl.col("year") < 2019)
        assert older["CoC_Category"].null_count() == len(older)
        latest = result.filter(pl.col("year") == 2019)
        assert latest["CoC_Category"].null_count() == 0

    def test_counts_line_up_across_years(self, normalized):
        result = union_years(normalized)
        boston = result.filter(pl.col("CoC_Number") == "MA-500").sort("year")
        assert boston["Overall_Homeless"].to_list() == [7000, 6200, 6000]

    def test_relaxes_mismatched_dtypes(self):
        tables = {
            2018: pl.DataFrame({"CoC_Number": ["MA-500"], "Overall_Homeless": [10]}),
            2019: pl.DataFrame({"CoC_Number": ["MA-500"], "Overall_Homeless": [10.5]}),
        }
        result = union_years(tables)
        assert result["Overall_Homeless"].dtype == pl.Float64

    def test_empty_input(self):
        result = union_years({})
        assert result.is_empty()
        assert result.columns == ["year"]

    def test_unique_year_and_number(self, normalized):
        result = union_years(normalized)
        assert duplicate_keys(result, ["year", "CoC_Number"]).is_empty()


class TestDuplicateKeys:
    def test_reports_repeated_keys(self):
        df = pl.DataFrame({"year": [2019, 2019, 2019], "CoC_Number": ["A", "A", "B"]})
        dupes = duplicate_keys(df, ["year", "CoC_Number"])
        assert dupes.rows() == [(2019, "A", 2)]

    def test_missing_key_column(self):
        df = pl.DataFrame({"year": [2019]})
        assert duplicate_keys(df, ["year", "CoC_Number"]).is_empty()
