"""
tests/conftest.py — Shared pytest fixtures for the pipeline test suite.

Provides:
  fixture_path()     — resolves paths to tests/fixtures/
  duck()             — in-memory DuckDB connection with the star schema created
  make_fact()        — builds a fact-table-shaped polars DataFrame from dicts
  seed()             — loads dims + quantity/expenditure rows into duck
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import duckdb
import polars as pl
import pytest

from foodstats_pipeline.loaders.duckdb_loader import DuckDBLoader
from foodstats_pipeline.sources.family_food import fact_schema
from foodstats_pipeline.transforms.dimensions import (
    build_food_dimension,
    build_year_dimension,
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

@pytest.fixture
def fixture_path() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def quantity_csv() -> Path:
    return FIXTURES_DIR / "quantity_sample.csv"


@pytest.fixture
def expenditure_csv() -> Path:
    return FIXTURES_DIR / "expenditure_sample.csv"


# ---------------------------------------------------------------------------
# DuckDB
# ---------------------------------------------------------------------------

@pytest.fixture
def duck() -> Iterator[duckdb.DuckDBPyConnection]:
    """Private in-memory database with empty star-schema tables and the view."""
    conn = duckdb.connect(":memory:")
    DuckDBLoader(conn).create_schema()
    yield conn
    conn.close()


# ---------------------------------------------------------------------------
# Fact frames
# ---------------------------------------------------------------------------

def _fact_frame(measure: str, rows: list[dict[str, Any]]) -> pl.DataFrame:
    schema = fact_schema(measure)  # type: ignore[arg-type]
    defaults = {
        "food_category": "Dairy",
        "food_group": "Milk and cream",
        "units": "ml",
        "code_level": 4,
    }
    records = [
        {col: row.get(col, defaults.get(col)) for col in schema}
        for row in rows
    ]
    return pl.DataFrame(records, schema=schema)


@pytest.fixture
def make_fact() -> Callable[[str, list[dict[str, Any]]], pl.DataFrame]:
    """
    Factory: make_fact("quantity", [{"code": "C1", "year": 2020, "quantity": 8.0}]).

    Unspecified hierarchy columns default to a single Dairy / Milk and cream group.
    """
    return _fact_frame


@pytest.fixture
def seed(duck: duckdb.DuckDBPyConnection) -> Callable[..., duckdb.DuckDBPyConnection]:
    """
    Factory loading rows into duck and returning the connection.

    seed(rows) treats each row as present in both fact tables; each row dict
    carries both quantity and expenditure. Pass quantity_rows /
    expenditure_rows instead to load the two tables independently.
    """

    def _seed(
        rows: list[dict[str, Any]] | None = None,
        *,
        quantity_rows: list[dict[str, Any]] | None = None,
        expenditure_rows: list[dict[str, Any]] | None = None,
    ) -> duckdb.DuckDBPyConnection:
        q_rows = quantity_rows if quantity_rows is not None else list(rows or [])
        e_rows = expenditure_rows if expenditure_rows is not None else list(rows or [])

        quantity = _fact_frame("quantity", q_rows)
        expenditure = _fact_frame("expenditure", e_rows)
        DuckDBLoader(duck).load_all(
            years=build_year_dimension(1974, 2023),
            foods=build_food_dimension(quantity, expenditure),
            quantity=quantity,
            expenditure=expenditure,
        )
        return duck

    return _seed
