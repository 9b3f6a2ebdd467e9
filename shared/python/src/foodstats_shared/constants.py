"""
constants.py — shared constants used across the pipeline and CLI.

Table names, fact column layouts, the UK recession calendar, and
source null markers are defined here so they stay in sync between
the shared models and the pipeline package.
"""

from __future__ import annotations

from typing import Final, Literal

# ---------------------------------------------------------------------------
# Coverage of the household food extracts
# ---------------------------------------------------------------------------
FIRST_YEAR: Final[int] = 1974
LAST_YEAR: Final[int] = 2023

# ---------------------------------------------------------------------------
# UK recession calendar (years containing at least two quarters of contraction)
# ---------------------------------------------------------------------------
RECESSION_YEARS: Final[frozenset[int]] = frozenset(
    {1974, 1975, 1980, 1981, 1990, 1991, 2008, 2009, 2020}
)

YEAR_NOTES: Final[dict[int, str]] = {
    1974: "Oil crisis recession",
    1975: "Oil crisis recession",
    1980: "Early 1980s recession",
    1981: "Early 1980s recession",
    1990: "Early 1990s recession",
    1991: "Early 1990s recession",
    2008: "Global financial crisis",
    2009: "Global financial crisis",
    2020: "COVID-19 pandemic",
    2022: "Cost of living crisis",
}

# ---------------------------------------------------------------------------
# Table names
# ---------------------------------------------------------------------------
DIM_YEAR: Final[str] = "dim_year"
DIM_FOOD: Final[str] = "dim_food"
FACT_QUANTITY: Final[str] = "fact_quantity"
FACT_EXPENDITURE: Final[str] = "fact_expenditure"
JOINED_VIEW: Final[str] = "joined_facts"

Measure = Literal["quantity", "expenditure"]

MEASURE_TABLES: Final[dict[str, str]] = {
    "quantity": FACT_QUANTITY,
    "expenditure": FACT_EXPENDITURE,
}

# ---------------------------------------------------------------------------
# Column layouts
# ---------------------------------------------------------------------------
HIERARCHY_COLUMNS: Final[tuple[str, ...]] = (
    "code",
    "code_level",
    "food_category",
    "food_group",
    "major_food_code",
    "minor_food_code",
    "units",
)

FACT_METADATA_COLUMNS: Final[tuple[str, ...]] = (
    "accuracy",
    "pct_change_yoy",
    "pct_change_vs_base",
    "significance",
    "trend",
    "rse",
)

NUMERIC_METADATA_COLUMNS: Final[tuple[str, ...]] = (
    "pct_change_yoy",
    "pct_change_vs_base",
    "rse",
)


def fact_columns(measure: Measure) -> list[str]:
    """Ordered column list of the fact table for measure."""
    return [*HIERARCHY_COLUMNS, "year", measure, *FACT_METADATA_COLUMNS]


# ---------------------------------------------------------------------------
# Source null markers (government statistics suppression conventions)
# ---------------------------------------------------------------------------
NULL_MARKERS: Final[frozenset[str]] = frozenset(
    {"", "[x]", "[c]", "[z]", "[u]", "..", "...", "-", "n/a", "N/A", "na", "NA"}
)
