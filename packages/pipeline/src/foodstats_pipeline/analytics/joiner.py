"""
analytics/joiner.py — The joined_facts view: one row per (code, year) in both fact tables.

fact_quantity and fact_expenditure share the logical key (code, year), but
no database constraint links them. The key is declared here as JOIN_KEYS and
the SQL predicate is built from it, so the matching rule lives in one place.

Every join is INNER: a (code, year) present in only one fact table, or a year
absent from dim_year, is excluded from the view and from every query that
reads it. Such gaps are not reported.

Usage:
    from foodstats_pipeline.analytics.joiner import create_joined_view, joined_facts

    create_joined_view(conn)
    df = joined_facts(conn)
"""

from __future__ import annotations

import duckdb
import polars as pl
import structlog

from foodstats_shared.constants import DIM_YEAR, FACT_EXPENDITURE, FACT_QUANTITY, JOINED_VIEW
from foodstats_shared.models import JoinedFact

log = structlog.get_logger(__name__)

JOIN_KEYS: tuple[str, ...] = ("code", "year")

JOIN_PREDICATE = " AND ".join(f"q.{key} = e.{key}" for key in JOIN_KEYS)

JOINED_COLUMNS: tuple[str, ...] = (
    "code",
    "food_category",
    "food_group",
    "major_food_code",
    "minor_food_code",
    "units",
    "year",
    "quantity",
    "expenditure",
    "decade",
    "is_recession",
)

JOINED_VIEW_SQL = f"""
CREATE OR REPLACE VIEW {JOINED_VIEW} AS
SELECT
    q.code,
    q.food_category,
    q.food_group,
    q.major_food_code,
    q.minor_food_code,
    q.units,
    q.year,
    q.quantity,
    e.expenditure,
    y.decade,
    y.is_recession
FROM {FACT_QUANTITY} AS q
INNER JOIN {FACT_EXPENDITURE} AS e
    ON {JOIN_PREDICATE}
INNER JOIN {DIM_YEAR} AS y
    ON q.year = y.year
"""


def create_joined_view(conn: duckdb.DuckDBPyConnection) -> None:
    """Create (or replace) the joined_facts view."""
    conn.execute(JOINED_VIEW_SQL)
    log.debug("joined_view_created", view=JOINED_VIEW, join_keys=list(JOIN_KEYS))


def joined_facts(conn: duckdb.DuckDBPyConnection) -> pl.DataFrame:
    """Materialize the joined_facts view, ordered by (code, year)."""
    columns = ", ".join(JOINED_COLUMNS)
    return conn.execute(
        f"SELECT {columns} FROM {JOINED_VIEW} ORDER BY code, year"
    ).pl()


def joined_records(conn: duckdb.DuckDBPyConnection) -> list[JoinedFact]:
    """The joined_facts view as validated JoinedFact models."""
    return [JoinedFact.from_db_row(row) for row in joined_facts(conn).iter_rows(named=True)]
