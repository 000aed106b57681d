"""
tests/conftest.py — Shared pytest fixtures for the pitcount test suite.

Provides:
  fixture_path()      — resolves paths to tests/fixtures/
  raw_sheets          — authored-style PIT sheets (year-suffixed column names)
  write_workbook()    — writes a dict of sheets to an .xlsx in tmp_path
  pit_workbook        — path to a workbook built from raw_sheets
  population_df       — normalized population table
  health_df           — normalized health table
  mock_http           — configured respx router for faking HTTP responses
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import polars as pl
import pytest
import respx
import xlsxwriter

FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

@pytest.fixture
def fixture_path() -> Path:
    return FIXTURES_DIR


# ---------------------------------------------------------------------------
# PIT sheets
# ---------------------------------------------------------------------------

def make_sheet(year: int, rows: list[tuple], *, with_category: bool = False) -> pl.DataFrame:
    """
    Build a sheet with HUD's authored column labels.

    rows: (number, name, [category,] overall, sheltered, unsheltered)
    """
    columns = ["CoC Number", "CoC Name"]
    if with_category:
        columns.append("CoC Category")
    columns += [
        f"Overall Homeless, {year}",
        f"Sheltered Total Homeless, {year}",
        f"Unsheltered Homeless, {year}",
    ]
    return pl.DataFrame(rows, schema=columns, orient="row")


def sheet_2019() -> pl.DataFrame:
    return make_sheet(
        2019,
        [
            ("MA-500", "Boston CoC", "Major City CoC", 6000, 5900, 100),
            ("CA-600", "Los Angeles City & County CoC", "Major City CoC", 56000, 14000, 42000),
            ("NY-600", "New York City CoC", "Major City CoC", 78000, 74000, 4000),
            ("PR-502", "Puerto Rico Balance of Commonwealth CoC", "Rural CoC", 2000, 500, 1500),
            ("OH-500", "Example CoC", "Suburban CoC", 1000, 800, 200),
            ("WV-500", "Example CoC", "Rural CoC", 300, 250, 50),
            ("Total", None, None, 143300, 95450, 47850),
        ],
        with_category=True,
    )


def sheet_2018() -> pl.DataFrame:
    return make_sheet(
        2018,
        [
            ("MA-500", "Boston CoC", 6200, 6050, 150),
            ("CA-600", "Los Angeles City & County CoC", 49000, 12000, 37000),
            ("NY-600", "New York City CoC", 78600, 74500, 4100),
            ("PR-502", "Puerto Rico Balance of Commonwealth CoC", 2100, 520, 1580),
            ("OH-500", "Example CoC", 1100, 850, 250),
            ("WV-500", "Example CoC", 320, 260, 60),
            ("MA-999", "Retired CoC", 40, 40, 0),
            ("Total", None, 137360, 94260, 43140),
        ],
    )


def sheet_2015() -> pl.DataFrame:
    return make_sheet(
        2015,
        [
            ("MA-500", "Boston CoC", 7000, 6900, 100),
            ("CA-600", "Los Angeles City & County CoC", 41000, 9900, 31100),
            ("Total", None, 48000, 16800, 31200),
        ],
    )


@pytest.fixture
def raw_sheets() -> dict[str, pl.DataFrame]:
    """Sheet name → authored DataFrame, latest year first as HUD orders them."""
    return {"2019": sheet_2019(), "2018": sheet_2018(), "2015": sheet_2015()}


@pytest.fixture
def write_workbook(tmp_path: Path) -> Callable[..., Path]:
    """Factory: write_workbook({"2019": df, ...}, name="pit.xlsx") -> Path."""

    def _write(sheets: dict[str, pl.DataFrame], name: str = "pit.xlsx") -> Path:
        path = tmp_path / name
        with xlsxwriter.Workbook(path) as wb:
            for sheet_name, df in sheets.items():
                df.write_excel(workbook=wb, worksheet=sheet_name)
        return path

    return _write


@pytest.fixture
def pit_workbook(write_workbook, raw_sheets) -> Path:
    return write_workbook(raw_sheets)


# ---------------------------------------------------------------------------
# External tables (already in record schema)
# ---------------------------------------------------------------------------

@pytest.fixture
def population_df() -> pl.DataFrame:
    """State populations; Puerto Rico deliberately absent."""
    return pl.DataFrame({
        "region_name": ["Massachusetts", "California", "New York", "Ohio", "West Virginia"],
        "population": [6892503, 39512223, 19453561, 11689100, 1792147],
    })


@pytest.fixture
def health_df() -> pl.DataFrame:
    return pl.DataFrame({
        "region_name": [
            "Massachusetts", "California", "New York", "Ohio", "West Virginia", "Puerto Rico",
        ],
        "case_count": [96965, 115310, 373040, 35513, 2051, 3486],
        "death_count": [6846, 4286, 29918, 2155, 76, 140],
    })


# ---------------------------------------------------------------------------
# respx HTTP mock router
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_http():
    """
    Activate the respx mock router for all httpx requests.

    Usage in tests:
        def test_something(mock_http):
            mock_http.get("https://...").mock(return_value=httpx.Response(200, content=b"..."))
    """
    with respx.mock(assert_all_called=False) as router:
        yield router
