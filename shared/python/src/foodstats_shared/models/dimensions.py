"""
models/dimensions.py — Pydantic models for the dim_year and dim_food tables.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from foodstats_shared.constants import RECESSION_YEARS, YEAR_NOTES


class YearRecord(BaseModel):
    """Matches the dim_year table row. Primary key is year."""

    year: int = Field(ge=1900, le=2100)
    decade: int                      # e.g. 1990 for 1990-1999
    is_recession: bool = False
    notes: str | None = None

    @classmethod
    def for_year(cls, year: int) -> "YearRecord":
        """Build the reference row for year from the recession calendar."""
        return cls(
            year=year,
            decade=year // 10 * 10,
            is_recession=year in RECESSION_YEARS,
            notes=YEAR_NOTES.get(year),
        )

    @classmethod
    def from_db_row(cls, row: dict[str, Any]) -> "YearRecord":
        return cls(**row)

    def to_insert_dict(self) -> dict[str, Any]:
        return self.model_dump()


class FoodRecord(BaseModel):
    """
    Matches the dim_food table row. Primary key is code.

    Hierarchy runs food_category → food_group → major_food_code → minor_food_code;
    code_level is the depth of this code within it.
    """

    code: str = Field(min_length=1)
    code_level: int | None = None
    food_category: str | None = None
    food_group: str | None = None
    major_food_code: str | None = None
    minor_food_code: str | None = None
    units: str | None = None        # "g", "ml", "pence", ...

    @classmethod
    def from_db_row(cls, row: dict[str, Any]) -> "FoodRecord":
        return cls(**row)

    def to_insert_dict(self) -> dict[str, Any]:
        return self.model_dump()
