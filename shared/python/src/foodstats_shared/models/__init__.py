"""
foodstats_shared.models — Pydantic models matching each database table.

These models are used by:
- packages/pipeline sources: validate extract rows before loading into DuckDB
- packages/pipeline analytics: typed access to joined_facts rows

All table models provide:
  .from_db_row(row: dict) -> Model
  .to_insert_dict() -> dict
"""

from foodstats_shared.models.dimensions import FoodRecord, YearRecord
from foodstats_shared.models.facts import ExpenditureRecord, JoinedFact, QuantityRecord

__all__ = [
    "YearRecord",
    "FoodRecord",
    "QuantityRecord",
    "ExpenditureRecord",
    "JoinedFact",
]
