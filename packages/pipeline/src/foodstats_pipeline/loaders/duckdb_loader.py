"""
loaders/duckdb_loader.py — Star-schema DDL and bulk loader for DuckDB.

All pipelines funnel their normalized DataFrames through this module. The
loader:
  - Creates dim_year, dim_food, fact_quantity, fact_expenditure and the
    joined_facts view
  - Inserts each table inside its own transaction; a constraint violation
    (duplicate (code, year), year missing from dim_year) rolls the table
    back and raises LoadError, so nothing is partially applied
  - Returns a LoadResult per table with row counts and timing

Usage:
    from foodstats_pipeline.loaders.duckdb_loader import DuckDBLoader, LoadError

    loader = DuckDBLoader(conn)
    loader.reset_schema()
    results = loader.load_all(years=years, foods=foods,
                              quantity=quantity_df, expenditure=expenditure_df)
    print(results["fact_quantity"].records_loaded)
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field

import duckdb
import polars as pl
import structlog

from foodstats_shared.constants import (
    DIM_FOOD,
    DIM_YEAR,
    FACT_EXPENDITURE,
    FACT_QUANTITY,
    JOINED_VIEW,
)
from foodstats_pipeline.analytics.joiner import create_joined_view

log = structlog.get_logger(__name__)

_STAGING = "_foodstats_staging"

# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------

DIM_YEAR_DDL = f"""
CREATE TABLE IF NOT EXISTS {DIM_YEAR} (
    year INTEGER PRIMARY KEY,
    decade INTEGER NOT NULL,
    is_recession BOOLEAN NOT NULL DEFAULT FALSE,
    notes VARCHAR
)
"""

DIM_FOOD_DDL = f"""
CREATE TABLE IF NOT EXISTS {DIM_FOOD} (
    code VARCHAR PRIMARY KEY,
    code_level INTEGER,
    food_category VARCHAR,
    food_group VARCHAR,
    major_food_code VARCHAR,
    minor_food_code VARCHAR,
    units VARCHAR
)
"""


def _fact_ddl(table: str, measure: str) -> str:
    # (code, year) is unique per table; quantity ↔ expenditure has no constraint
    return f"""
CREATE TABLE IF NOT EXISTS {table} (
    code VARCHAR NOT NULL,
    code_level INTEGER,
    food_category VARCHAR,
    food_group VARCHAR,
    major_food_code VARCHAR,
    minor_food_code VARCHAR,
    units VARCHAR,
    year INTEGER NOT NULL,
    {measure} DOUBLE,
    accuracy VARCHAR,
    pct_change_yoy DOUBLE,
    pct_change_vs_base DOUBLE,
    significance VARCHAR,
    trend VARCHAR,
    rse DOUBLE,
    PRIMARY KEY (code, year),
    FOREIGN KEY (year) REFERENCES {DIM_YEAR} (year)
)
"""


SCHEMA_DDL: tuple[str, ...] = (
    DIM_YEAR_DDL,
    DIM_FOOD_DDL,
    _fact_ddl(FACT_QUANTITY, "quantity"),
    _fact_ddl(FACT_EXPENDITURE, "expenditure"),
)

# Drop order respects the year foreign keys
DROP_ORDER: tuple[str, ...] = (FACT_QUANTITY, FACT_EXPENDITURE, DIM_FOOD, DIM_YEAR)


class LoadError(Exception):
    """A table load was rejected by a schema constraint and rolled back."""

    def __init__(self, table: str, message: str) -> None:
        super().__init__(f"{table}: {message}")
        self.table = table
        self.message = message


@dataclass
class LoadResult:
    """Summary of one table load."""

    table: str
    records_loaded: int = 0
    duration_ms: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def status(self) -> str:
        return "success" if self.success else "failure"


class DuckDBLoader:
    """Handles all writes to the DuckDB analysis database."""

    def __init__(self, conn: duckdb.DuckDBPyConnection) -> None:
        self._conn = conn

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    def create_schema(self) -> None:
        """Create the star-schema tables and the joined_facts view if absent."""
        for ddl in SCHEMA_DDL:
            self._conn.execute(ddl)
        create_joined_view(self._conn)
        log.debug("schema_created")

    def reset_schema(self) -> None:
        """Drop the view and every table, then recreate them empty."""
        self._conn.execute(f"DROP VIEW IF EXISTS {JOINED_VIEW}")
        for table in DROP_ORDER:
            self._conn.execute(f"DROP TABLE IF EXISTS {table}")
        log.info("schema_reset", tables=list(DROP_ORDER))
        self.create_schema()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_table(self, table: str, df: pl.DataFrame) -> LoadResult:
        """
        Insert every row of df into table in a single transaction.

        Columns are matched by name, so df must carry exactly the table's
        columns (any order).

        Raises:
            LoadError: a primary key or foreign key constraint rejected the
                       batch. The transaction is rolled back first.
        """
        result = LoadResult(table=table)
        t0 = time.monotonic()

        if df.is_empty():
            log.warning("load_empty_dataframe", table=table)
            return result

        loader_log = log.bind(table=table, total_rows=len(df))
        loader_log.info("load_start")

        columns = ", ".join(df.columns)
        self._conn.register(_STAGING, df)
        try:
            self._conn.execute("BEGIN TRANSACTION")
            try:
                self._conn.execute(
                    f"INSERT INTO {table} ({columns}) SELECT {columns} FROM {_STAGING}"
                )
                self._conn.execute("COMMIT")
            except duckdb.ConstraintException as exc:
                self._conn.execute("ROLLBACK")
                result.errors.append(str(exc))
                loader_log.error("load_rejected", error=str(exc))
                raise LoadError(table, str(exc)) from exc
            except Exception:
                self._conn.execute("ROLLBACK")
                raise
        finally:
            self._conn.unregister(_STAGING)

        result.records_loaded = len(df)
        result.duration_ms = int((time.monotonic() - t0) * 1000)
        loader_log.info(
            "load_complete",
            records_loaded=result.records_loaded,
            duration_ms=result.duration_ms,
        )
        return result

    def load_all(
        self,
        *,
        years: pl.DataFrame,
        foods: pl.DataFrame,
        quantity: pl.DataFrame,
        expenditure: pl.DataFrame,
    ) -> dict[str, LoadResult]:
        """
        Load dimensions first, then facts, so the year foreign keys resolve.

        Stops at the first LoadError; tables loaded before it stay loaded.
        """
        results: dict[str, LoadResult] = {}
        for table, df in (
            (DIM_YEAR, years),
            (DIM_FOOD, foods),
            (FACT_QUANTITY, quantity),
            (FACT_EXPENDITURE, expenditure),
        ):
            results[table] = self.load_table(table, df)
        return results

    def row_counts(self) -> dict[str, int]:
        """Current row count of every table and the joined view."""
        counts: dict[str, int] = {}
        for table in (DIM_YEAR, DIM_FOOD, FACT_QUANTITY, FACT_EXPENDITURE, JOINED_VIEW):
            row = self._conn.execute(f"SELECT count(*) FROM {table}").fetchone()
            counts[table] = int(row[0]) if row else 0
        return counts
