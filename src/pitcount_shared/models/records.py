"""
models/records.py — Pydantic models for the PIT report row shapes.

The pipeline works on polars DataFrames; these models describe one row of
each stage's output and are used where rows leave the DataFrame world
(rankings and the excluded-rows list of the report).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class LongitudinalRecord(BaseModel):
    """One CoC in one PIT year, after union and backfill."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    year: int
    coc_number: str | None = Field(default=None, alias="CoC_Number")
    coc_name: str | None = Field(default=None, alias="CoC_Name")
    coc_category: str | None = Field(default=None, alias="CoC_Category")
    overall_homeless: float | None = Field(default=None, alias="Overall_Homeless")


class EnrichedRecord(LongitudinalRecord):
    """A target-year LongitudinalRecord joined to population and health data."""

    region_code: str | None = None
    region_name: str | None = None
    population: int | None = None
    case_count: int | None = None
    death_count: int | None = None
    homeless_per_10k: float | None = None
    cases_per_10k: float | None = None
    deaths_per_10k: float | None = None

    @property
    def has_rates(self) -> bool:
        return self.homeless_per_10k is not None


class RegionRate(BaseModel):
    """One row of a per-state ranking."""

    rank: int
    region_name: str
    value: float
    rate_column: str
    population: int | None = None

    @classmethod
    def from_row(cls, rank: int, rate_column: str, row: dict[str, Any]) -> "RegionRate":
        return cls(
            rank=rank,
            region_name=row["region_name"],
            value=float(row[rate_column]),
            rate_column=rate_column,
            population=row.get("population"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "rank": self.rank,
            "region_name": self.region_name,
            self.rate_column: round(self.value, 2),
            "population": self.population,
        }
