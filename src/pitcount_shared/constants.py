"""
constants.py — shared constants used across the pipeline and report.

State codes, PIT column names and the count columns the report aggregates
are defined here so the transforms and the report agree on them.
"""

from __future__ import annotations

from typing import Final

# ---------------------------------------------------------------------------
# States and territories: USPS code -> name
#
# CoC numbers start with the USPS code of the state they sit in ("MA-500").
# ---------------------------------------------------------------------------
STATES: Final[dict[str, str]] = {
    "AL": "Alabama",
    "AK": "Alaska",
    "AZ": "Arizona",
    "AR": "Arkansas",
    "CA": "California",
    "CO": "Colorado",
    "CT": "Connecticut",
    "DE": "Delaware",
    "DC": "District of Columbia",
    "FL": "Florida",
    "GA": "Georgia",
    "HI": "Hawaii",
    "ID": "Idaho",
    "IL": "Illinois",
    "IN": "Indiana",
    "IA": "Iowa",
    "KS": "Kansas",
    "KY": "Kentucky",
    "LA": "Louisiana",
    "ME": "Maine",
    "MD": "Maryland",
    "MA": "Massachusetts",
    "MI": "Michigan",
    "MN": "Minnesota",
    "MS": "Mississippi",
    "MO": "Missouri",
    "MT": "Montana",
    "NE": "Nebraska",
    "NV": "Nevada",
    "NH": "New Hampshire",
    "NJ": "New Jersey",
    "NM": "New Mexico",
    "NY": "New York",
    "NC": "North Carolina",
    "ND": "North Dakota",
    "OH": "Ohio",
    "OK": "Oklahoma",
    "OR": "Oregon",
    "PA": "Pennsylvania",
    "RI": "Rhode Island",
    "SC": "South Carolina",
    "SD": "South Dakota",
    "TN": "Tennessee",
    "TX": "Texas",
    "UT": "Utah",
    "VT": "Vermont",
    "VA": "Virginia",
    "WA": "Washington",
    "WV": "West Virginia",
    "WI": "Wisconsin",
    "WY": "Wyoming",
    # Territories with CoCs
    "PR": "Puerto Rico",
    "GU": "Guam",
    "VI": "Virgin Islands",
    "AS": "American Samoa",
    "MP": "Northern Mariana Islands",
}

STATE_NAME_TO_CODE: Final[dict[str, str]] = {v: k for k, v in STATES.items()}

# ---------------------------------------------------------------------------
# PIT workbook
# ---------------------------------------------------------------------------
# Column names after normalization
COC_NUMBER: Final = "CoC_Number"
COC_NAME: Final = "CoC_Name"
COC_CATEGORY: Final = "CoC_Category"
YEAR: Final = "year"

# Pre-aggregated rows carry this marker in the name or number column
TOTAL_SENTINEL: Final = "Total"

REQUIRED_PIT_COLUMNS: Final[tuple[str, ...]] = (COC_NUMBER, COC_NAME, "Overall_Homeless")

# Counts the report aggregates; other count columns pass through untouched
COUNT_COLUMNS: Final[tuple[str, ...]] = (
    "Overall_Homeless",
    "Sheltered_Total_Homeless",
    "Unsheltered_Homeless",
    "Sheltered_ES_Homeless",
    "Sheltered_TH_Homeless",
    "Sheltered_SH_Homeless",
    "Overall_Homeless_Individuals",
    "Overall_Homeless_People_in_Families",
    "Overall_Chronically_Homeless_Individuals",
    "Overall_Homeless_Veterans",
)

# ---------------------------------------------------------------------------
# Enrichment
# ---------------------------------------------------------------------------
REGION_CODE: Final = "region_code"
REGION_NAME: Final = "region_name"
POPULATION: Final = "population"
CASE_COUNT: Final = "case_count"
DEATH_COUNT: Final = "death_count"

PER_CAPITA_BASE: Final[int] = 10_000

# raw count column -> per-10k rate column
RATE_COLUMNS: Final[dict[str, str]] = {
    "Overall_Homeless": "homeless_per_10k",
    CASE_COUNT: "cases_per_10k",
    DEATH_COUNT: "deaths_per_10k",
}
