"""
models/facts.py — Pydantic models for the fact tables and the joined_facts view.

QuantityRecord and ExpenditureRecord each repeat the full food hierarchy.
The duplication mirrors the source extracts so that fact-only queries never
need a dim_food join.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class QuantityRecord(BaseModel):
    """
    Matches the fact_quantity table row.

    Primary key is (code, year).
    """

    code: str = Field(min_length=1)
    code_level: int | None = None
    food_category: str | None = None
    food_group: str | None = None
    major_food_code: str | None = None
    minor_food_code: str | None = None
    units: str | None = None
    year: int
    quantity: float | None = None
    accuracy: str | None = None
    pct_change_yoy: float | None = None       # passed through, never recomputed
    pct_change_vs_base: float | None = None   # passed through, never recomputed
    significance: str | None = None
    trend: str | None = None
    rse: float | None = None                  # relative standard error, percent

    @classmethod
    def from_db_row(cls, row: dict[str, Any]) -> "QuantityRecord":
        return cls(**row)

    def to_insert_dict(self) -> dict[str, Any]:
        return self.model_dump()


class ExpenditureRecord(BaseModel):
    """
    Matches the fact_expenditure table row.

    Primary key is (code, year).
    """

    code: str = Field(min_length=1)
    code_level: int | None = None
    food_category: str | None = None
    food_group: str | None = None
    major_food_code: str | None = None
    minor_food_code: str | None = None
    units: str | None = None
    year: int
    expenditure: float | None = None
    accuracy: str | None = None
    pct_change_yoy: float | None = None
    pct_change_vs_base: float | None = None
    significance: str | None = None
    trend: str | None = None
    rse: float | None = None

    @classmethod
    def from_db_row(cls, row: dict[str, Any]) -> "ExpenditureRecord":
        return cls(**row)

    def to_insert_dict(self) -> dict[str, Any]:
        return self.model_dump()


class JoinedFact(BaseModel):
    """One row of the joined_facts view: a (code, year) present in both fact tables."""

    code: str
    food_category: str | None = None
    food_group: str | None = None
    major_food_code: str | None = None
    minor_food_code: str | None = None
    units: str | None = None
    year: int
    quantity: float | None = None
    expenditure: float | None = None
    decade: int
    is_recession: bool

    @property
    def cost_per_unit(self) -> float | None:
        """Per-row expenditure / quantity; None when quantity is zero or null."""
        if not self.quantity or self.expenditure is None:
            return None
        return self.expenditure / self.quantity

    @classmethod
    def from_db_row(cls, row: dict[str, Any]) -> "JoinedFact":
        return cls(**row)
