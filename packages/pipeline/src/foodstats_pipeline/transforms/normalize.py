"""
transforms/normalize.py — Column and value normalization for extract DataFrames.

Stateless helpers applied by sources between extract() and loading:

    from foodstats_pipeline.transforms.normalize import (
        apply_aliases,
        cast_numeric_cols,
        clean_string_columns,
        drop_all_null_rows,
        null_markers_to_null,
        require_columns,
        validate_records,
    )

    df = apply_aliases(df, HEADER_ALIASES)
    df = clean_string_columns(df)
    df = null_markers_to_null(df)
    df = cast_numeric_cols(df, ["year", "quantity"])
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

import polars as pl
import structlog
from pydantic import BaseModel, ValidationError

from foodstats_shared.constants import NULL_MARKERS

log = structlog.get_logger(__name__)


def clean_string_columns(df: pl.DataFrame) -> pl.DataFrame:
    """Strip whitespace from all String columns."""
    return df.with_columns(
        [
            pl.col(c).str.strip_chars()
            for c in df.columns
            if df[c].dtype == pl.String
        ]
    )


def null_markers_to_null(
    df: pl.DataFrame,
    markers: Iterable[str] = NULL_MARKERS,
) -> pl.DataFrame:
    """Replace suppression/placeholder markers in String columns with null."""
    marker_list = list(markers)
    return df.with_columns(
        [
            pl.when(pl.col(c).is_in(marker_list))
            .then(pl.lit(None, dtype=pl.String))
            .otherwise(pl.col(c))
            .alias(c)
            for c in df.columns
            if df[c].dtype == pl.String
        ]
    )


def drop_all_null_rows(df: pl.DataFrame) -> pl.DataFrame:
    """Drop rows where every column is null."""
    if not df.columns:
        return df
    return df.filter(
        pl.any_horizontal([pl.col(c).is_not_null() for c in df.columns])
    )


def cast_numeric_cols(
    df: pl.DataFrame,
    columns: Iterable[str],
    dtype: type[pl.DataType] = pl.Float64,
) -> pl.DataFrame:
    """Cast specified columns to a numeric dtype, coercing errors to null."""
    return df.with_columns(
        [pl.col(c).cast(dtype, strict=False) for c in columns if c in df.columns]
    )


def apply_aliases(df: pl.DataFrame, aliases: Mapping[str, str]) -> pl.DataFrame:
    """
    Rename alias columns to their canonical names.

    An alias is skipped when its canonical column is already present, so a
    sheet that carries both spellings keeps the canonical one. When several
    aliases of one canonical name are present, the first in aliases wins and
    the rest keep their own names.
    """
    renames: dict[str, str] = {}
    claimed = set(df.columns)
    for alias, canonical in aliases.items():
        if alias in df.columns and canonical not in claimed:
            renames[alias] = canonical
            claimed.add(canonical)
    if renames:
        log.debug("columns_aliased", renames=renames)
    return df.rename(renames)


def require_columns(df: pl.DataFrame, columns: Iterable[str], *, context: str) -> None:
    """Raise ValueError naming every required column missing from df."""
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(f"{context}: missing required columns {missing}")


def validate_records(df: pl.DataFrame, model: type[BaseModel]) -> pl.DataFrame:
    """
    Validate every row against a pydantic model.

    Raises ValueError for the first invalid row, reported with its 1-based
    position in the frame. Returns df unchanged when all rows pass.
    """
    for idx, row in enumerate(df.iter_rows(named=True), start=1):
        try:
            model.model_validate(row)
        except ValidationError as exc:
            raise ValueError(
                f"{model.__name__} row {idx} is invalid: {exc.errors()[0]['msg']} "
                f"(field {exc.errors()[0]['loc']})"
            ) from exc
    return df
