"""
tests/test_transforms/test_normalize.py — Tests for extract normalization helpers.
"""

from __future__ import annotations

import polars as pl
import pytest

from foodstats_shared.models import QuantityRecord
from foodstats_pipeline.transforms.normalize import (
    apply_aliases,
    cast_numeric_cols,
    clean_string_columns,
    drop_all_null_rows,
    null_markers_to_null,
    require_columns,
    validate_records,
)


class TestCleanStringColumns:
    def test_strips_whitespace(self):
        df = pl.DataFrame({"code": ["  11101 ", "13801\t"], "value": [1.0, 2.0]})
        result = clean_string_columns(df)
        assert result["code"].to_list() == ["11101", "13801"]

    def test_numeric_columns_untouched(self):
        df = pl.DataFrame({"value": [1.5, 2.5]})
        result = clean_string_columns(df)
        assert result["value"].to_list() == [1.5, 2.5]


class TestNullMarkersToNull:
    def test_suppression_markers_become_null(self):
        df = pl.DataFrame({"value": ["12.5", "[x]", "..", "", "[c]", "n/a"]})
        result = null_markers_to_null(df)
        assert result["value"].to_list() == ["12.5", None, None, None, None, None]

    def test_real_values_kept(self):
        df = pl.DataFrame({"significance": ["*", "Increasing"]})
        result = null_markers_to_null(df)
        assert result["significance"].to_list() == ["*", "Increasing"]

    def test_custom_markers(self):
        df = pl.DataFrame({"value": ["?", "1"]})
        result = null_markers_to_null(df, markers={"?"})
        assert result["value"].to_list() == [None, "1"]


class TestDropAllNullRows:
    def test_drops_blank_rows_only(self):
        df = pl.DataFrame({"a": ["x", None, None], "b": [1, None, 3]})
        result = drop_all_null_rows(df)
        assert len(result) == 2

    def test_no_nulls_returns_unchanged(self):
        df = pl.DataFrame({"a": ["x", "y"]})
        assert len(drop_all_null_rows(df)) == 2


class TestCastNumericCols:
    def test_unparseable_values_coerce_to_null(self):
        df = pl.DataFrame({"value": ["1.5", "abc", None]})
        result = cast_numeric_cols(df, ["value"])
        assert result["value"].dtype == pl.Float64
        assert result["value"].to_list() == [1.5, None, None]

    def test_missing_columns_ignored(self):
        df = pl.DataFrame({"value": ["1"]})
        result = cast_numeric_cols(df, ["value", "not_there"])
        assert result.columns == ["value"]


class TestApplyAliases:
    def test_renames_alias(self):
        df = pl.DataFrame({"food_code": ["A"], "unit": ["g"]})
        result = apply_aliases(df, {"food_code": "code", "unit": "units"})
        assert result.columns == ["code", "units"]

    def test_canonical_column_wins(self):
        df = pl.DataFrame({"code": ["A"], "food_code": ["B"]})
        result = apply_aliases(df, {"food_code": "code"})
        assert result.columns == ["code", "food_code"]
        assert result["code"][0] == "A"

    def test_two_aliases_of_one_column_first_wins(self):
        df = pl.DataFrame({"change_since_2021_22": ["1.0"], "percent_change_since_2021_22": ["2.0"]})
        result = apply_aliases(
            df,
            {
                "change_since_2021_22": "pct_change_yoy",
                "percent_change_since_2021_22": "pct_change_yoy",
            },
        )
        assert result.columns == ["pct_change_yoy", "percent_change_since_2021_22"]
        assert result["pct_change_yoy"][0] == "1.0"


class TestRequireColumns:
    def test_passes_when_present(self):
        require_columns(pl.DataFrame({"code": [], "year": []}), ["code", "year"], context="t")

    def test_lists_every_missing_column(self):
        with pytest.raises(ValueError, match=r"quantity extract: missing required columns \['year', 'quantity'\]"):
            require_columns(
                pl.DataFrame({"code": ["A"]}),
                ["code", "year", "quantity"],
                context="quantity extract",
            )


class TestValidateRecords:
    def test_valid_rows_pass_through(self):
        df = pl.DataFrame({"code": ["11101"], "year": [2020], "quantity": [12.0]})
        assert validate_records(df, QuantityRecord).equals(df)

    def test_invalid_row_reports_position(self):
        df = pl.DataFrame(
            {"code": ["11101", "11102"], "year": [2020, None], "quantity": [1.0, 2.0]}
        )
        with pytest.raises(ValueError, match="QuantityRecord row 2"):
            validate_records(df, QuantityRecord)
