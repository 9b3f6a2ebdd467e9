"""
foodstats_pipeline.sources — data source adapters.

  FamilyFoodSource — UK household food survey quantity / expenditure extracts
"""

from foodstats_pipeline.sources.family_food import FamilyFoodSource

__all__ = [
    "FamilyFoodSource",
]
