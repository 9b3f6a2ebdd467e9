"""
sources/family_food.py — UK household food survey extracts (quantity / expenditure).

Each extract is one spreadsheet (CSV or XLSX) with one row per food code per
year. The quantity and expenditure extracts share the same layout apart
from the measure column, so one source class serves both:

    source = FamilyFoodSource("quantity")
    df = source.run(path="data/raw/quantity.csv")

transform() returns exactly the fact table column layout
(constants.fact_columns(measure)) with loader-ready dtypes, and validates
every row against the matching pydantic record model.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import polars as pl

from foodstats_shared.constants import (
    MEASURE_TABLES,
    NUMERIC_METADATA_COLUMNS,
    Measure,
    fact_columns,
)
from foodstats_shared.models import ExpenditureRecord, QuantityRecord
from foodstats_pipeline.sources.base import BaseSource
from foodstats_pipeline.transforms.normalize import (
    apply_aliases,
    cast_numeric_cols,
    clean_string_columns,
    drop_all_null_rows,
    null_markers_to_null,
    require_columns,
    validate_records,
)

# Snake-cased source headers → schema column names
HEADER_ALIASES: dict[str, str] = {
    "food_code": "code",
    "level": "code_level",
    "code_lvl": "code_level",
    "category": "food_category",
    "group": "food_group",
    "major_code": "major_food_code",
    "minor_code": "minor_food_code",
    "unit": "units",
    "accuracy_indicator": "accuracy",
    "change_since_2021_22": "pct_change_yoy",
    "percent_change_since_2021_22": "pct_change_yoy",
    "change_since_2019_20": "pct_change_vs_base",
    "percent_change_since_2019_20": "pct_change_vs_base",
    "significance_flag": "significance",
    "statistically_significant": "significance",
    "trend_label": "trend",
    "relative_standard_error": "rse",
}

SUPPORTED_SUFFIXES: frozenset[str] = frozenset({".csv", ".xlsx", ".xls"})

_MODELS: dict[str, type[QuantityRecord] | type[ExpenditureRecord]] = {
    "quantity": QuantityRecord,
    "expenditure": ExpenditureRecord,
}


def fact_schema(measure: Measure) -> dict[str, type[pl.DataType]]:
    """Polars dtype of every fact table column, in table order."""
    schema: dict[str, type[pl.DataType]] = {}
    for col in fact_columns(measure):
        if col in ("code_level", "year"):
            schema[col] = pl.Int64
        elif col == measure or col in NUMERIC_METADATA_COLUMNS:
            schema[col] = pl.Float64
        else:
            schema[col] = pl.String
    return schema


class FamilyFoodSource(BaseSource):
    """Reads one household food survey extract (quantity or expenditure)."""

    name = "FamilyFood"

    def __init__(self, measure: Measure, *, sheet: str | None = None) -> None:
        if measure not in MEASURE_TABLES:
            raise ValueError(f"Unknown measure {measure!r}; expected one of {list(MEASURE_TABLES)}")
        self.measure: Measure = measure
        self.sheet = sheet
        self._path: Path | None = None
        super().__init__()
        self._log = self._log.bind(measure=measure)

    # ------------------------------------------------------------------
    # Extract
    # ------------------------------------------------------------------

    def extract(self, *, path: str | Path, **kwargs: Any) -> pl.DataFrame:
        """
        Read the raw extract at path.

        CSV files are read with every column as String so that null markers
        survive until transform(). XLSX files keep the types the workbook
        declares; transform() recasts them.

        Raises:
            FileNotFoundError: path does not exist.
            ValueError:        the file suffix is not CSV or XLSX.
        """
        file_path = Path(path)
        if not file_path.is_file():
            raise FileNotFoundError(f"{self.measure} extract not found: {file_path}")

        suffix = file_path.suffix.lower()
        if suffix not in SUPPORTED_SUFFIXES:
            raise ValueError(
                f"Unsupported extract format {suffix!r}; expected one of {sorted(SUPPORTED_SUFFIXES)}"
            )

        self._path = file_path
        if suffix == ".csv":
            return pl.read_csv(file_path, infer_schema_length=0)
        if self.sheet:
            return pl.read_excel(file_path, sheet_name=self.sheet)
        return pl.read_excel(file_path)

    # ------------------------------------------------------------------
    # Transform
    # ------------------------------------------------------------------

    def transform(self, raw: pl.DataFrame) -> pl.DataFrame:
        """
        Normalize a raw extract into the fact table layout.

        Raises:
            ValueError: a required column is missing or a row fails validation.
        """
        measure = self.measure
        df = self._normalize_columns(raw)
        df = apply_aliases(df, {**HEADER_ALIASES, "value": measure})
        require_columns(df, ["code", "year", measure], context=f"{measure} extract")

        df = df.with_columns(pl.all().cast(pl.String))
        df = clean_string_columns(df)
        df = null_markers_to_null(df)
        df = drop_all_null_rows(df)

        # Spreadsheet integers often arrive as "2020.0"; go through Float64
        df = cast_numeric_cols(df, ["year", "code_level", measure, *NUMERIC_METADATA_COLUMNS])
        df = df.with_columns(
            [pl.col(c).cast(pl.Int64, strict=False) for c in ("year", "code_level") if c in df.columns]
        )

        schema = fact_schema(measure)
        absent = [c for c in schema if c not in df.columns]
        if absent:
            self._log.debug("optional_columns_defaulted", columns=absent)

        df = df.select(
            [
                pl.col(col).cast(dtype) if col in df.columns else pl.lit(None, dtype=dtype).alias(col)
                for col, dtype in schema.items()
            ]
        )
        return validate_records(df, _MODELS[measure])

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def get_metadata(self) -> dict[str, Any]:
        return {
            "source_name": self.name,
            "measure": self.measure,
            "table": MEASURE_TABLES[self.measure],
            "path": str(self._path) if self._path else None,
            "description": f"UK household food survey {self.measure} extract",
        }
