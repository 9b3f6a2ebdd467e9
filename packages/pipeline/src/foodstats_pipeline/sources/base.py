"""
sources/base.py — Abstract base class for all data source adapters.

Each concrete source must implement:
  extract()      — read raw data, return polars DataFrame
  transform()    — clean/normalize raw DataFrame into the fact table schema
  get_metadata() — return dict with source info for logging

The run() method orchestrates extract → transform → return and handles
timing/logging automatically. Pipelines call run() rather than the
individual methods.
"""

from __future__ import annotations

import re
import time
from abc import ABC, abstractmethod
from typing import Any

import polars as pl
import structlog

log = structlog.get_logger(__name__)


class BaseSource(ABC):
    """Abstract base for all foodstats data source adapters."""

    # Override in subclass; used for logging
    name: str = "unknown"

    def __init__(self) -> None:
        self._log = log.bind(source_name=self.name)

    # ------------------------------------------------------------------
    # Abstract interface
    # ------------------------------------------------------------------

    @abstractmethod
    def extract(self, **kwargs: Any) -> pl.DataFrame:
        """
        Read raw data from the source.

        Implementations should return a raw polars DataFrame with all
        original columns preserved.
        """
        ...

    @abstractmethod
    def transform(self, raw: pl.DataFrame) -> pl.DataFrame:
        """
        Clean and normalize a raw DataFrame into the standard domain schema.

        Implementations should:
        - Rename columns to snake_case
        - Map source header aliases onto schema column names
        - Handle suppressed values ('[x]', '..', '') → None
        - Return only columns needed by the loader
        """
        ...

    @abstractmethod
    def get_metadata(self) -> dict[str, Any]:
        """Return source-level metadata for logging."""
        ...

    # ------------------------------------------------------------------
    # Orchestration: pipelines call this
    # ------------------------------------------------------------------

    def run(self, **kwargs: Any) -> pl.DataFrame:
        """
        Extract + transform in sequence with timing and structured logging.

        Args:
            **kwargs: Forwarded to extract().

        Returns:
            Transformed polars DataFrame.

        Raises:
            Any exception from extract() or transform() after logging it.
        """
        run_log = self._log.bind(**{k: str(v) for k, v in kwargs.items()})
        run_log.info("source_run_start")

        t0 = time.monotonic()
        try:
            raw = self.extract(**kwargs)
            extract_ms = int((time.monotonic() - t0) * 1000)
            run_log.info(
                "extract_complete",
                raw_rows=len(raw),
                raw_cols=raw.width,
                duration_ms=extract_ms,
            )

            t1 = time.monotonic()
            result = self.transform(raw)
            transform_ms = int((time.monotonic() - t1) * 1000)
            run_log.info(
                "transform_complete",
                result_rows=len(result),
                result_cols=result.width,
                duration_ms=transform_ms,
            )

            run_log.info(
                "source_run_complete",
                total_duration_ms=int((time.monotonic() - t0) * 1000),
                output_rows=len(result),
            )
            return result

        except Exception as exc:
            run_log.error(
                "source_run_failed",
                error=str(exc),
                duration_ms=int((time.monotonic() - t0) * 1000),
                exc_info=True,
            )
            raise

    # ------------------------------------------------------------------
    # Shared helpers available to all subclasses
    # ------------------------------------------------------------------

    @staticmethod
    def _to_snake_case(name: str) -> str:
        """Convert 'Food Category' or 'MajorFoodCode' to 'food_category' / 'major_food_code'."""
        s = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name.strip())
        s = re.sub(r"([a-z\d])([A-Z])", r"\1_\2", s)
        s = re.sub(r"[^0-9a-zA-Z]+", "_", s)
        return s.strip("_").lower()

    @classmethod
    def _normalize_columns(cls, df: pl.DataFrame) -> pl.DataFrame:
        """Rename all columns to snake_case."""
        return df.rename({col: cls._to_snake_case(col) for col in df.columns})
