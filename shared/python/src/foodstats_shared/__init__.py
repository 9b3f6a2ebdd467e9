"""
foodstats_shared — shared configuration, DuckDB access, constants and models
for the UK household food statistics project.

Usage:
    from foodstats_shared.config import settings
    from foodstats_shared.db import get_duckdb_connection
    from foodstats_shared.models import QuantityRecord, ExpenditureRecord, YearRecord
    from foodstats_shared.constants import RECESSION_YEARS, fact_columns
"""

__version__ = "0.1.0"
