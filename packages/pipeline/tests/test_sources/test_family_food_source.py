"""
tests/test_sources/test_family_food_source.py — Tests for FamilyFoodSource.

No network or database access required; CSV fixtures live in tests/fixtures/.
"""

from __future__ import annotations

from pathlib import Path

import polars as pl
import pytest

from foodstats_shared.constants import fact_columns
from foodstats_pipeline.sources.family_food import FamilyFoodSource, fact_schema


def _raw_quantity(**overrides: list) -> pl.DataFrame:
    data: dict[str, list] = {
        "Code": ["11101", "11101"],
        "Code level": ["4", "4"],
        "Food category": ["Dairy", "Dairy"],
        "Food group": ["Milk and cream", "Milk and cream"],
        "Major food code": ["111", "111"],
        "Minor food code": ["11101", "11101"],
        "Units": ["ml", "ml"],
        "Year": ["2019", "2020"],
        "Value": ["1500", "1450"],
    }
    data.update(overrides)
    return pl.DataFrame(data)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestConstruction:
    def test_unknown_measure_raises(self):
        with pytest.raises(ValueError, match="Unknown measure"):
            FamilyFoodSource("calories")  # type: ignore[arg-type]

    def test_metadata_names_table(self):
        meta = FamilyFoodSource("expenditure").get_metadata()
        assert meta["table"] == "fact_expenditure"
        assert meta["measure"] == "expenditure"
        assert meta["path"] is None


# ---------------------------------------------------------------------------
# extract()
# ---------------------------------------------------------------------------

class TestExtract:
    def test_reads_csv_as_strings(self, quantity_csv: Path):
        raw = FamilyFoodSource("quantity").extract(path=quantity_csv)
        assert len(raw) == 6
        assert all(dtype == pl.String for dtype in raw.dtypes)

    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError, match="quantity extract not found"):
            FamilyFoodSource("quantity").extract(path=tmp_path / "nope.csv")

    def test_unsupported_suffix_raises(self, tmp_path: Path):
        path = tmp_path / "quantity.json"
        path.write_text("{}")
        with pytest.raises(ValueError, match="Unsupported extract format"):
            FamilyFoodSource("quantity").extract(path=path)


# ---------------------------------------------------------------------------
# transform()
# ---------------------------------------------------------------------------

class TestTransform:
    def test_output_matches_fact_layout(self):
        df = FamilyFoodSource("quantity").transform(_raw_quantity())
        assert df.columns == fact_columns("quantity")
        assert dict(df.schema) == fact_schema("quantity")

    def test_value_column_becomes_measure(self):
        df = FamilyFoodSource("expenditure").transform(_raw_quantity())
        assert "expenditure" in df.columns
        assert df["expenditure"].to_list() == [1500.0, 1450.0]

    def test_float_years_from_spreadsheets(self):
        df = FamilyFoodSource("quantity").transform(_raw_quantity(Year=["2019.0", "2020.0"]))
        assert df["year"].to_list() == [2019, 2020]
        assert df["year"].dtype == pl.Int64

    def test_null_markers_in_measure_become_null(self):
        df = FamilyFoodSource("quantity").transform(_raw_quantity(Value=["[x]", "1450"]))
        assert df["quantity"].to_list() == [None, 1450.0]

    def test_missing_optional_columns_default_to_null(self):
        df = FamilyFoodSource("quantity").transform(_raw_quantity())
        assert df["rse"].null_count() == 2
        assert df["trend"].null_count() == 2

    def test_both_spellings_of_a_change_column(self):
        raw = _raw_quantity(
            **{
                "% change since 2021-22": ["-1.2", "-3.3"],
                "Percent change since 2021-22": ["9.9", "9.9"],
            }
        )
        df = FamilyFoodSource("quantity").transform(raw)
        assert df.columns == list(fact_columns("quantity"))
        assert df["pct_change_yoy"].to_list() == [-1.2, -3.3]

    def test_missing_required_column_raises(self):
        raw = _raw_quantity().drop("Year")
        with pytest.raises(ValueError, match=r"missing required columns \['year'\]"):
            FamilyFoodSource("quantity").transform(raw)

    def test_blank_rows_dropped(self):
        raw = pl.concat([
            _raw_quantity(),
            pl.DataFrame({col: [""] for col in _raw_quantity().columns}),
        ])
        df = FamilyFoodSource("quantity").transform(raw)
        assert len(df) == 2

    def test_row_without_year_fails_validation(self):
        raw = _raw_quantity(Year=["2019", "n/a"])
        with pytest.raises(ValueError, match="QuantityRecord row 2"):
            FamilyFoodSource("quantity").transform(raw)

    def test_duplicates_are_kept_for_the_loader_to_reject(self):
        raw = _raw_quantity(Year=["2020", "2020"])
        df = FamilyFoodSource("quantity").transform(raw)
        assert len(df) == 2


# ---------------------------------------------------------------------------
# run()
# ---------------------------------------------------------------------------

class TestRun:
    def test_run_csv_fixture(self, expenditure_csv: Path):
        source = FamilyFoodSource("expenditure")
        df = source.run(path=expenditure_csv)

        assert len(df) == 5
        assert df["pct_change_yoy"].dtype == pl.Float64
        # "..", "[x]" and blanks are null markers
        assert df.filter(pl.col("year") == 2021)["accuracy"].to_list() == [None]
        assert source.get_metadata()["path"] == str(expenditure_csv)

    def test_run_reraises_extract_errors(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            FamilyFoodSource("quantity").run(path=tmp_path / "missing.csv")
