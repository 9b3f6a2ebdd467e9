"""
analytics/queries.py — Read-only aggregate queries over the joined_facts view.

Each query is one SQL statement returning a polars DataFrame. Ratios divide
by NULLIF(divisor, 0), so a zero or null quantity yields NULL for that row or
group and never an error. SQL aggregates skip NULLs.

Two cost-per-unit statistics exist and are kept apart:
  cost_per_unit / cost_per_unit_trend   sum(expenditure) / sum(quantity)
  avg_cost_per_unit_by_decade et al.    avg(expenditure / quantity) per row

Usage:
    from foodstats_pipeline.analytics.queries import QUERIES, run_all, run_query

    df = run_query("volatility_ranking", conn)
    results = run_all(conn)          # {"cost_per_unit": DataFrame, ...}
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

import duckdb
import polars as pl
import structlog

from foodstats_shared.constants import JOINED_VIEW
from foodstats_shared.db import get_duckdb_connection

log = structlog.get_logger(__name__)

# Per-row ratio with the zero/null divisor guard
ROW_RATIO = "expenditure / NULLIF(quantity, 0)"

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

COST_PER_UNIT_SQL = f"""
SELECT
    food_group,
    food_category,
    year,
    ROUND(SUM(expenditure) / NULLIF(SUM(quantity), 0), 2) AS cost_per_unit
FROM {JOINED_VIEW}
GROUP BY food_group, food_category, year
ORDER BY food_group, food_category, year
"""

COST_PER_UNIT_TREND_SQL = f"""
SELECT
    food_category,
    year,
    ROUND(SUM(expenditure) / NULLIF(SUM(quantity), 0), 2) AS cost_per_unit
FROM {JOINED_VIEW}
GROUP BY food_category, year
ORDER BY year, food_category
"""

AVG_COST_PER_UNIT_BY_DECADE_SQL = f"""
SELECT
    decade,
    food_group,
    ROUND(AVG({ROW_RATIO}), 2) AS avg_cost_per_unit
FROM {JOINED_VIEW}
GROUP BY decade, food_group
ORDER BY decade, food_group
"""

# Look-back is exactly one year; a missing prior year means no comparison
INFLATION_FLAGS_SQL = f"""
WITH lagged AS (
    SELECT
        code,
        food_category,
        food_group,
        year,
        quantity,
        expenditure,
        LAG(year) OVER w AS prev_year,
        LAG(quantity) OVER w AS prev_quantity,
        LAG(expenditure) OVER w AS prev_expenditure
    FROM {JOINED_VIEW}
    WINDOW w AS (PARTITION BY code ORDER BY year)
)
SELECT
    code,
    food_category,
    food_group,
    year,
    prev_quantity,
    quantity,
    prev_expenditure,
    expenditure
FROM lagged
WHERE prev_year = year - 1
  AND expenditure > prev_expenditure
  AND quantity < prev_quantity
ORDER BY code, year
"""

VOLATILITY_RANKING_SQL = f"""
SELECT
    food_group,
    ROUND(STDDEV_POP({ROW_RATIO}), 2) AS volatility
FROM {JOINED_VIEW}
GROUP BY food_group
ORDER BY volatility DESC NULLS LAST, food_group
"""

EXECUTIVE_SUMMARY_SQL = f"""
SELECT
    food_group,
    COUNT(DISTINCT code) AS food_codes,
    ROUND(AVG(quantity), 2) AS avg_quantity,
    ROUND(AVG(expenditure), 2) AS avg_expenditure,
    ROUND(AVG({ROW_RATIO}), 2) AS avg_cost_per_unit
FROM {JOINED_VIEW}
GROUP BY food_group
ORDER BY avg_cost_per_unit DESC NULLS LAST, food_group
"""

RECESSION_IMPACT_SQL = f"""
SELECT
    year,
    is_recession,
    AVG(quantity) AS avg_quantity
FROM {JOINED_VIEW}
GROUP BY year, is_recession
ORDER BY year
"""

RECESSION_COMPARISON_SQL = f"""
SELECT
    is_recession,
    COUNT(DISTINCT year) AS years,
    AVG(quantity) AS avg_quantity
FROM {JOINED_VIEW}
GROUP BY is_recession
ORDER BY is_recession
"""

# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


def _execute(
    name: str,
    sql: str,
    conn: duckdb.DuckDBPyConnection | None,
) -> pl.DataFrame:
    duck = conn if conn is not None else get_duckdb_connection()
    t0 = time.monotonic()
    df = duck.execute(sql).pl()
    log.debug(
        "query_complete",
        query=name,
        rows=len(df),
        duration_ms=int((time.monotonic() - t0) * 1000),
    )
    return df


def cost_per_unit(conn: duckdb.DuckDBPyConnection | None = None) -> pl.DataFrame:
    """sum(expenditure) / sum(quantity) per (food_group, food_category, year)."""
    return _execute("cost_per_unit", COST_PER_UNIT_SQL, conn)


def cost_per_unit_trend(conn: duckdb.DuckDBPyConnection | None = None) -> pl.DataFrame:
    """Aggregate cost-per-unit per (food_category, year), in year order."""
    return _execute("cost_per_unit_trend", COST_PER_UNIT_TREND_SQL, conn)


def avg_cost_per_unit_by_decade(
    conn: duckdb.DuckDBPyConnection | None = None,
) -> pl.DataFrame:
    """
    Mean of the per-row expenditure / quantity ratio per (decade, food_group).

    Not interchangeable with cost_per_unit: a mean of ratios and a ratio of
    sums differ whenever per-row ratios differ.
    """
    return _execute("avg_cost_per_unit_by_decade", AVG_COST_PER_UNIT_BY_DECADE_SQL, conn)


def inflation_flags(conn: duckdb.DuckDBPyConnection | None = None) -> pl.DataFrame:
    """
    Rows where expenditure rose while quantity fell versus the prior year of the same code.

    Only year - 1 counts as the prior year: the first year of each code, and
    any year whose predecessor is missing from joined_facts, is never flagged.
    """
    return _execute("inflation_flags", INFLATION_FLAGS_SQL, conn)


def volatility_ranking(conn: duckdb.DuckDBPyConnection | None = None) -> pl.DataFrame:
    """Population standard deviation of the per-row ratio per food_group, most volatile first."""
    return _execute("volatility_ranking", VOLATILITY_RANKING_SQL, conn)


def executive_summary(conn: duckdb.DuckDBPyConnection | None = None) -> pl.DataFrame:
    """One row per food_group: distinct codes, mean quantity, mean expenditure, mean ratio."""
    return _execute("executive_summary", EXECUTIVE_SUMMARY_SQL, conn)


def recession_impact(conn: duckdb.DuckDBPyConnection | None = None) -> pl.DataFrame:
    """Mean quantity per (year, is_recession)."""
    return _execute("recession_impact", RECESSION_IMPACT_SQL, conn)


def recession_comparison(conn: duckdb.DuckDBPyConnection | None = None) -> pl.DataFrame:
    """Mean quantity across all recession years versus all other years."""
    return _execute("recession_comparison", RECESSION_COMPARISON_SQL, conn)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Query:
    """A named aggregate query exposed to the CLI and report export."""

    name: str
    description: str
    sql: str
    func: Callable[[duckdb.DuckDBPyConnection | None], pl.DataFrame]


QUERIES: dict[str, Query] = {
    q.name: q
    for q in (
        Query(
            "cost_per_unit",
            "Aggregate cost per unit by food group, category and year",
            COST_PER_UNIT_SQL,
            cost_per_unit,
        ),
        Query(
            "cost_per_unit_trend",
            "Aggregate cost per unit by category over time",
            COST_PER_UNIT_TREND_SQL,
            cost_per_unit_trend,
        ),
        Query(
            "avg_cost_per_unit_by_decade",
            "Average per-row cost per unit by decade and food group",
            AVG_COST_PER_UNIT_BY_DECADE_SQL,
            avg_cost_per_unit_by_decade,
        ),
        Query(
            "inflation_flags",
            "Codes spending more for less versus the previous year",
            INFLATION_FLAGS_SQL,
            inflation_flags,
        ),
        Query(
            "volatility_ranking",
            "Food groups ranked by population stddev of cost per unit",
            VOLATILITY_RANKING_SQL,
            volatility_ranking,
        ),
        Query(
            "executive_summary",
            "Per food group rollup of codes, quantity, spend and cost per unit",
            EXECUTIVE_SUMMARY_SQL,
            executive_summary,
        ),
        Query(
            "recession_impact",
            "Average quantity per year with its recession flag",
            RECESSION_IMPACT_SQL,
            recession_impact,
        ),
        Query(
            "recession_comparison",
            "Average quantity in recession years versus other years",
            RECESSION_COMPARISON_SQL,
            recession_comparison,
        ),
    )
}


def run_query(name: str, conn: duckdb.DuckDBPyConnection | None = None) -> pl.DataFrame:
    """
    Run a registered query by name.

    Raises:
        KeyError: name is not in QUERIES.
    """
    try:
        query = QUERIES[name]
    except KeyError:
        raise KeyError(f"Unknown query {name!r}; available: {sorted(QUERIES)}") from None
    return query.func(conn)


def run_all(conn: duckdb.DuckDBPyConnection | None = None) -> dict[str, pl.DataFrame]:
    """Run every registered query, keyed by name in registry order."""
    return {name: query.func(conn) for name, query in QUERIES.items()}
