"""
pipelines/family_food.py — Quantity + expenditure extracts → DuckDB star schema → reports.

Orchestrates:
  1. FamilyFoodSource → quantity and expenditure extracts (CSV / XLSX)
  2. Dimensions → dim_year from the recession calendar, dim_food from the
     distinct hierarchy in both extracts
  3. DuckDBLoader → reset schema, load dims then facts, create joined_facts
  4. Optional → write every aggregate query result to <output_dir>/<name>.csv

Usage:
    from foodstats_pipeline.pipelines.family_food import run
    results = run(quantity_path="data/raw/quantity.csv",
                  expenditure_path="data/raw/expenditure.csv",
                  output_dir="data/reports")
    print(results["fact_quantity"].records_loaded)
"""

from __future__ import annotations

from pathlib import Path

import duckdb
import polars as pl

from foodstats_shared.config import settings
from foodstats_shared.constants import FACT_EXPENDITURE, FACT_QUANTITY
from foodstats_shared.db import get_duckdb_connection
from foodstats_pipeline.analytics.queries import run_all
from foodstats_pipeline.loaders.duckdb_loader import DuckDBLoader, LoadResult
from foodstats_pipeline.sources.family_food import FamilyFoodSource
from foodstats_pipeline.transforms.dimensions import (
    build_food_dimension,
    build_year_dimension,
)
from foodstats_pipeline.utils.logging import get_logger

log = get_logger(__name__, pipeline="family_food")


def read_extracts(
    quantity_path: str | Path,
    expenditure_path: str | Path,
    *,
    sheet: str | None = None,
) -> tuple[pl.DataFrame, pl.DataFrame]:
    """Extract + transform both fact extracts."""
    quantity = FamilyFoodSource("quantity", sheet=sheet).run(path=quantity_path)
    expenditure = FamilyFoodSource("expenditure", sheet=sheet).run(path=expenditure_path)
    return quantity, expenditure


def export_reports(
    output_dir: str | Path,
    conn: duckdb.DuckDBPyConnection | None = None,
) -> dict[str, Path]:
    """
    Run every aggregate query and write each result to <output_dir>/<name>.csv.

    Returns:
        {query_name: written file path}
    """
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    written: dict[str, Path] = {}
    for name, df in run_all(conn).items():
        path = out / f"{name}.csv"
        df.write_csv(path)
        written[name] = path
        log.info("report_written", query=name, rows=len(df), path=str(path))
    return written


def run(
    *,
    quantity_path: str | Path | None = None,
    expenditure_path: str | Path | None = None,
    output_dir: str | Path | None = None,
    conn: duckdb.DuckDBPyConnection | None = None,
    dry_run: bool = False,
) -> dict[str, LoadResult]:
    """
    Run the household food pipeline end-to-end.

    Args:
        quantity_path:    Quantity extract (default: settings.quantity_path).
        expenditure_path: Expenditure extract (default: settings.expenditure_path).
        output_dir:       If set, write every query result as CSV here.
        conn:             DuckDB connection (default: the process singleton).
        dry_run:          If True, read and transform but do not touch DuckDB.

    Returns:
        {table_name: LoadResult}

    Raises:
        LoadError:         a constraint rejected a table; earlier tables stay loaded.
        FileNotFoundError: an extract is missing.
        ValueError:        an extract breaks the input contract.
    """
    q_path = quantity_path or settings.quantity_path
    e_path = expenditure_path or settings.expenditure_path
    log.info("family_food_start", quantity_path=str(q_path), expenditure_path=str(e_path), dry_run=dry_run)

    quantity, expenditure = read_extracts(q_path, e_path, sheet=settings.excel_sheet)
    years = build_year_dimension(settings.first_year, settings.last_year)
    foods = build_food_dimension(quantity, expenditure)

    if dry_run:
        log.info(
            "dry_run_complete",
            years=len(years),
            foods=len(foods),
            quantity_rows=len(quantity),
            expenditure_rows=len(expenditure),
        )
        return {
            FACT_QUANTITY: LoadResult(table=FACT_QUANTITY, records_loaded=len(quantity)),
            FACT_EXPENDITURE: LoadResult(table=FACT_EXPENDITURE, records_loaded=len(expenditure)),
        }

    duck = conn if conn is not None else get_duckdb_connection()
    loader = DuckDBLoader(duck)
    loader.reset_schema()
    results = loader.load_all(
        years=years,
        foods=foods,
        quantity=quantity,
        expenditure=expenditure,
    )

    log.info("family_food_loaded", **loader.row_counts())

    if output_dir is not None:
        export_reports(output_dir, duck)

    return results
