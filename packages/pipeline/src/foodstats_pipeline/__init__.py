"""
foodstats_pipeline — load and analyse UK household food statistics (1974–2023).

Architecture:
  sources/     — spreadsheet extract readers (quantity, expenditure)
  transforms/  — column/value normalization, dim_year and dim_food builders
  loaders/     — DuckDB star-schema DDL and transactional bulk loads
  analytics/   — joined_facts view and the aggregate query set
  pipelines/   — orchestrators that wire sources -> transforms -> loaders -> reports
  utils/       — structlog configuration

Quick start:
    from foodstats_pipeline.pipelines.family_food import run
    results = run(output_dir="data/reports")

CLI:
    foodstats load --quantity data/raw/quantity.csv --expenditure data/raw/expenditure.csv
    foodstats query volatility_ranking
    foodstats report --output-dir data/reports
"""

__version__ = "0.1.0"
