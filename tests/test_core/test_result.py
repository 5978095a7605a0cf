"""
Tests for ResultTable rendering
"""

import json
from datetime import date

import pytest

from tabquery.core.result import ResultTable
from tabquery.core.types import Column, DataType


@pytest.fixture
def result():
    return ResultTable(
        columns=(
            Column("name", DataType.STRING),
            Column("score", DataType.FLOAT),
            Column("active", DataType.BOOLEAN),
            Column("joined", DataType.DATE),
        ),
        rows=(
            ("Alice", 9.5, True, date(2024, 1, 15)),
            ("Smith, J", None, False, None),
        ),
    )


class TestResultTable:
    """Test ResultTable"""

    def test_iteration_repeatable(self, result):
        assert list(result) == list(result)
        assert len(result) == 2

    def test_to_dicts(self, result):
        assert result.to_dicts()[1] == {"name": "Smith, J", "score": None, "active": False, "joined": None}

    def test_to_csv(self, result):
        assert result.to_csv() == (
            "name,score,active,joined\n"
            "Alice,9.5,true,2024-01-15\n"
            '"Smith, J",,false,\n'
        )

    def test_to_json(self, result):
        records = json.loads(result.to_json())

        assert records[0] == {"name": "Alice", "score": 9.5, "active": True, "joined": "2024-01-15"}
        assert records[1]["score"] is None

    def test_to_dataframe(self, result):
        pytest.importorskip("pandas")

        df = result.to_dataframe()

        assert list(df.columns) == ["name", "score", "active", "joined"]
        assert len(df) == 2

    def test_repr(self, result):
        assert repr(result) == "ResultTable(name: STRING, score: FLOAT, active: BOOLEAN, joined: DATE; 2 rows)"
