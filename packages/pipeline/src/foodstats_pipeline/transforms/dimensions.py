"""
transforms/dimensions.py — Build the dim_year and dim_food lookup tables.

    from foodstats_pipeline.transforms.dimensions import (
        build_food_dimension,
        build_year_dimension,
    )

    years = build_year_dimension(1974, 2023)
    foods = build_food_dimension(quantity_df, expenditure_df)
"""

from __future__ import annotations

import polars as pl
import structlog

from foodstats_shared.constants import FIRST_YEAR, HIERARCHY_COLUMNS, LAST_YEAR
from foodstats_shared.models import YearRecord

log = structlog.get_logger(__name__)

YEAR_SCHEMA: dict[str, type[pl.DataType]] = {
    "year": pl.Int64,
    "decade": pl.Int64,
    "is_recession": pl.Boolean,
    "notes": pl.String,
}


def build_year_dimension(
    first_year: int = FIRST_YEAR,
    last_year: int = LAST_YEAR,
) -> pl.DataFrame:
    """
    One row per year in [first_year, last_year] from the recession calendar.

    Raises:
        ValueError: first_year is after last_year.
    """
    if first_year > last_year:
        raise ValueError(f"first_year ({first_year}) is after last_year ({last_year})")

    rows = [
        YearRecord.for_year(year).to_insert_dict()
        for year in range(first_year, last_year + 1)
    ]
    return pl.DataFrame(rows, schema=YEAR_SCHEMA)


def build_food_dimension(*facts: pl.DataFrame) -> pl.DataFrame:
    """
    Distinct food hierarchy rows across the given fact frames.

    The first occurrence of each code wins. Codes whose hierarchy attributes
    differ between rows are logged, not rejected.
    """
    hierarchy = list(HIERARCHY_COLUMNS)
    frames = [df.select(hierarchy) for df in facts if not df.is_empty()]
    if not frames:
        return pl.DataFrame(
            schema={
                col: (pl.Int64 if col == "code_level" else pl.String)
                for col in hierarchy
            }
        )

    combined = pl.concat(frames, how="vertical_relaxed").filter(
        pl.col("code").is_not_null()
    )

    variants = combined.unique(maintain_order=True)
    conflicting = variants.group_by("code").len().filter(pl.col("len") > 1)
    if not conflicting.is_empty():
        log.warning(
            "conflicting_food_hierarchy",
            count=len(conflicting),
            codes=sorted(conflicting["code"].to_list())[:10],
        )

    foods = variants.unique(subset=["code"], keep="first", maintain_order=True)
    log.debug("food_dimension_built", codes=len(foods))
    return foods
