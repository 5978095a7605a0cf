"""
Tests for aggregate functions
"""

import pytest

from tabquery.core.errors import ExecError
from tabquery.core.types import DataType
from tabquery.utils.aggregates import (
    AvgAggregator,
    CountAggregator,
    MaxAggregator,
    MinAggregator,
    SumAggregator,
    aggregate_result_type,
    create_aggregator,
)


def feed(aggregator, values):
    for value in values:
        aggregator.update(value)
    return aggregator.result()


class TestAggregators:
    """Test each aggregator"""

    def test_count_star_counts_nulls(self):
        assert feed(CountAggregator(count_star=True), [1, None, 3]) == 3

    def test_count_column_skips_nulls(self):
        assert feed(CountAggregator(), [1, None, 3]) == 2

    def test_sum(self):
        assert feed(SumAggregator(), [1, 2, None, 4]) == 7

    def test_sum_keeps_integer_type(self):
        assert isinstance(feed(SumAggregator(), [1, 2]), int)

    def test_sum_empty_is_null(self):
        assert feed(SumAggregator(), [None]) is None

    def test_avg(self):
        assert feed(AvgAggregator(), [1, 2, None]) == 1.5

    def test_avg_empty_is_null(self):
        assert feed(AvgAggregator(), []) is None

    def test_min_max(self):
        assert feed(MinAggregator(), [3, None, 1, 2]) == 1
        assert feed(MaxAggregator(), [3, None, 1, 2]) == 3

    def test_min_max_empty(self):
        assert feed(MinAggregator(), [None]) is None
        assert feed(MaxAggregator(), []) is None


class TestFactory:
    """Test create_aggregator() and aggregate_result_type()"""

    def test_create(self):
        assert isinstance(create_aggregator("count", None), CountAggregator)
        assert create_aggregator("COUNT", None).count_star is True
        assert create_aggregator("COUNT", "x").count_star is False
        assert isinstance(create_aggregator("avg", "x"), AvgAggregator)

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown aggregate function"):
            create_aggregator("MEDIAN", "x")

    def test_result_types(self):
        assert aggregate_result_type("COUNT", DataType.STRING) == DataType.INTEGER
        assert aggregate_result_type("COUNT", None) == DataType.INTEGER
        assert aggregate_result_type("AVG", DataType.INTEGER) == DataType.FLOAT
        assert aggregate_result_type("SUM", DataType.INTEGER) == DataType.INTEGER
        assert aggregate_result_type("MAX", DataType.FLOAT) == DataType.FLOAT

    def test_non_numeric(self):
        with pytest.raises(ExecError, match="MIN needs a numeric column, got DATE"):
            aggregate_result_type("MIN", DataType.DATE)
