"""
db.py — DuckDB connection singleton.

Usage:
    from foodstats_shared.db import get_duckdb_connection

    duck = get_duckdb_connection()
    duck.execute("SELECT count(*) FROM joined_facts").fetchone()
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Optional

import duckdb
import structlog

from foodstats_shared.config import settings

logger = structlog.get_logger(__name__)

IN_MEMORY = ":memory:"

# ---------------------------------------------------------------------------
# DuckDB: single connection per process
# ---------------------------------------------------------------------------
_duckdb_lock = threading.Lock()
_duckdb_conn: Optional[duckdb.DuckDBPyConnection] = None


def connect(path: str | Path) -> duckdb.DuckDBPyConnection:
    """
    Open a new DuckDB connection at path.

    Creates parent directories for file-backed databases. ``":memory:"``
    opens a private in-memory database.
    """
    db_path = str(path)
    if db_path != IN_MEMORY:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = duckdb.connect(db_path)
    logger.info("duckdb_connected", path=db_path)
    return conn


def get_duckdb_connection() -> duckdb.DuckDBPyConnection:
    """
    Return a singleton DuckDB connection to the analysis database.

    The file path is read from settings.duckdb_path.

    Returns:
        duckdb.DuckDBPyConnection
    """
    global _duckdb_conn

    with _duckdb_lock:
        if _duckdb_conn is None:
            _duckdb_conn = connect(settings.duckdb_path)
        return _duckdb_conn


def reset_duckdb_connection() -> None:
    """Reset the DuckDB singleton (useful in tests)."""
    global _duckdb_conn
    with _duckdb_lock:
        if _duckdb_conn is not None:
            _duckdb_conn.close()
            _duckdb_conn = None
