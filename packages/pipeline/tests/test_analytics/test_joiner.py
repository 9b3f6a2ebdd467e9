"""
tests/test_analytics/test_joiner.py — Tests for the joined_facts view.
"""

from __future__ import annotations

from foodstats_shared.models import JoinedFact
from foodstats_pipeline.analytics.joiner import (
    JOIN_KEYS,
    JOIN_PREDICATE,
    JOINED_COLUMNS,
    joined_facts,
    joined_records,
)


def test_join_predicate_is_equality_on_code_and_year():
    assert JOIN_KEYS == ("code", "year")
    assert JOIN_PREDICATE == "q.code = e.code AND q.year = e.year"


class TestJoinedFacts:
    def test_columns(self, seed):
        conn = seed([{"code": "A", "year": 2020, "quantity": 1.0, "expenditure": 2.0}])
        assert joined_facts(conn).columns == list(JOINED_COLUMNS)

    def test_carries_year_dimension_attributes(self, seed):
        conn = seed([{"code": "A", "year": 2009, "quantity": 1.0, "expenditure": 2.0}])
        row = joined_facts(conn).row(0, named=True)
        assert row["decade"] == 2000
        assert row["is_recession"] is True

    def test_join_gap_rows_excluded(self, seed):
        conn = seed(
            quantity_rows=[
                {"code": "A", "year": 2019, "quantity": 1.0},
                {"code": "A", "year": 2020, "quantity": 1.0},
                {"code": "B", "year": 2020, "quantity": 1.0},
            ],
            expenditure_rows=[
                {"code": "A", "year": 2020, "expenditure": 1.0},
                {"code": "B", "year": 2020, "expenditure": 1.0},
                {"code": "B", "year": 2021, "expenditure": 1.0},
            ],
        )
        df = joined_facts(conn)
        assert list(zip(df["code"].to_list(), df["year"].to_list())) == [("A", 2020), ("B", 2020)]

    def test_every_row_exists_in_both_fact_tables(self, seed):
        conn = seed(
            quantity_rows=[{"code": c, "year": y, "quantity": 1.0} for c in "AB" for y in (2019, 2020)],
            expenditure_rows=[{"code": "A", "year": y, "expenditure": 1.0} for y in (2019, 2020)],
        )
        quantity_keys = set(conn.execute("SELECT code, year FROM fact_quantity").fetchall())
        expenditure_keys = set(conn.execute("SELECT code, year FROM fact_expenditure").fetchall())
        year_keys = {r[0] for r in conn.execute("SELECT year FROM dim_year").fetchall()}

        df = joined_facts(conn)
        assert len(df) == 2
        for code, year in zip(df["code"].to_list(), df["year"].to_list()):
            assert (code, year) in quantity_keys
            assert (code, year) in expenditure_keys
            assert year in year_keys

    def test_zero_and_null_quantity_rows_kept(self, seed):
        conn = seed([
            {"code": "A", "year": 2020, "quantity": 0.0, "expenditure": 5.0},
            {"code": "B", "year": 2020, "quantity": None, "expenditure": 5.0},
        ])
        assert len(joined_facts(conn)) == 2

    def test_joined_records_are_models(self, seed):
        conn = seed([
            {"code": "A", "year": 2020, "quantity": 4.0, "expenditure": 10.0},
            {"code": "B", "year": 2020, "quantity": 0.0, "expenditure": 10.0},
        ])
        records = joined_records(conn)
        assert all(isinstance(r, JoinedFact) for r in records)
        assert records[0].cost_per_unit == 2.5
        assert records[1].cost_per_unit is None
