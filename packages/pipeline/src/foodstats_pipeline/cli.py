"""
cli.py — Click CLI entrypoint for the household food pipeline.

Usage:
    foodstats load --quantity data/raw/quantity.csv --expenditure data/raw/expenditure.csv
    foodstats run --output-dir data/reports
    foodstats query cost_per_unit_trend
    foodstats query executive_summary --output summary.csv
    foodstats report --output-dir data/reports
    foodstats queries
"""

from __future__ import annotations

from pathlib import Path

import click
import polars as pl
import structlog

from foodstats_shared.config import LOG_FORMATS, LOG_LEVELS, settings
from foodstats_pipeline.loaders.duckdb_loader import LoadError

log = structlog.get_logger(__name__)

# Errors that end a load with exit code 1 instead of a traceback
LOAD_ERRORS = (LoadError, FileNotFoundError, ValueError)


@click.group()
@click.option(
    "--log-level",
    default=lambda: settings.log_level,
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Log level",
)
@click.option(
    "--log-format",
    default=lambda: settings.log_format,
    type=click.Choice(LOG_FORMATS),
    help="Log renderer",
)
def main(log_level: str, log_format: str) -> None:
    """UK household food statistics: load extracts and run trend queries."""
    from foodstats_pipeline.utils.logging import configure_logging
    configure_logging(log_level=log_level, log_format=log_format)


def _pipeline_options(func):
    func = click.option(
        "--expenditure",
        "expenditure_path",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help="Expenditure extract (default: EXPENDITURE_PATH)",
    )(func)
    func = click.option(
        "--quantity",
        "quantity_path",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help="Quantity extract (default: QUANTITY_PATH)",
    )(func)
    return func


@main.command()
@_pipeline_options
@click.option("--dry-run", is_flag=True, help="Read and transform but do not write to DuckDB")
def load(quantity_path: Path | None, expenditure_path: Path | None, dry_run: bool) -> None:
    """Read both extracts and load the star schema."""
    from foodstats_pipeline.pipelines.family_food import run

    try:
        results = run(
            quantity_path=quantity_path,
            expenditure_path=expenditure_path,
            dry_run=dry_run,
        )
    except LOAD_ERRORS as exc:
        log.error("load_failed", error=str(exc))
        raise SystemExit(1) from exc

    for table, result in results.items():
        click.echo(f"  {table:20s} {result.records_loaded:>8d} rows  {result.status}")


@main.command(name="run")
@_pipeline_options
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Report directory (default: REPORT_DIR)",
)
def run_command(
    quantity_path: Path | None,
    expenditure_path: Path | None,
    output_dir: Path | None,
) -> None:
    """Load the star schema, then write every query result as CSV."""
    from foodstats_pipeline.pipelines.family_food import run

    target = output_dir or Path(settings.report_dir)
    try:
        results = run(
            quantity_path=quantity_path,
            expenditure_path=expenditure_path,
            output_dir=target,
        )
    except LOAD_ERRORS as exc:
        log.error("run_failed", error=str(exc))
        raise SystemExit(1) from exc

    total = sum(r.records_loaded for r in results.values())
    click.echo(f"Loaded {total} rows; reports written to {target}")


@main.command()
@click.argument("name")
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the result as CSV instead of printing it",
)
def query(name: str, output: Path | None) -> None:
    """Run one aggregate query by NAME (see `foodstats queries`)."""
    from foodstats_pipeline.analytics.queries import QUERIES, run_query

    if name not in QUERIES:
        raise click.BadParameter(
            f"unknown query {name!r}; choose from {', '.join(QUERIES)}",
            param_hint="NAME",
        )

    df = run_query(name)
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        df.write_csv(output)
        click.echo(f"{name}: {len(df)} rows written to {output}")
        return

    with pl.Config(tbl_rows=-1, tbl_cols=-1):
        click.echo(df)


@main.command()
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Report directory (default: REPORT_DIR)",
)
def report(output_dir: Path | None) -> None:
    """Write every query result to OUTPUT_DIR/<name>.csv."""
    from foodstats_pipeline.pipelines.family_food import export_reports

    written = export_reports(output_dir or Path(settings.report_dir))
    for name, path in written.items():
        click.echo(f"  {name:30s} {path}")


@main.command()
def queries() -> None:
    """List the available aggregate queries."""
    from foodstats_pipeline.analytics.queries import QUERIES

    for name, q in QUERIES.items():
        click.echo(f"  {name:30s} {q.description}")


if __name__ == "__main__":
    main()
