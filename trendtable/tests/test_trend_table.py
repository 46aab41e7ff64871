# SPDX-License-Identifier: Apache-2.0
import pytest

from trendtable.period_utility import InvalidPeriodUnitError
from trendtable.tests.conftest import make_shape_data
from trendtable.trend_table import TrendTable, get_metric_key, get_period_unit


class TestShapeDataAccessors:
    def test_metric_key(self):
        assert get_metric_key(make_shape_data({}, metric_key="metric_average")) == "metric_average"

    def test_metric_key_ignores_line_marker(self):
        assert get_metric_key({"metrics": {"metric_topBox": {}, "__line__": 3}}) == "metric_topBox"

    @pytest.mark.parametrize("metrics", [None, {}, {"metric_topBox": {}, "metric_count": {}}])
    def test_exactly_one_metric(self, metrics):
        with pytest.raises(KeyError):
            get_metric_key({"metrics": metrics})

    def test_period_unit(self):
        assert get_period_unit(make_shape_data({}, unit="year")) == "year"

    def test_missing_period_unit(self):
        with pytest.raises(KeyError):
            get_period_unit({"axes": [{"id": "rows"}]})

    def test_invalid_period_unit(self):
        with pytest.raises(InvalidPeriodUnitError):
            get_period_unit(make_shape_data({}, unit="week"))


class TestTrendTable:
    def test_defaults(self, monthly_dataset):
        shape_data = make_shape_data({})
        shape_data["data"] = monthly_dataset
        trend_table = TrendTable({}, shape_data)
        assert trend_table.title == ""
        assert trend_table.mode == "full_range"
        assert trend_table.year_digits == 4
        assert trend_table.show_delta_annotations is False
        assert trend_table.metric_kind == "percentage"
        assert trend_table.columns == ["Jan - 2024", "Feb - 2024"]
        assert trend_table.summary.biggest_improvement.row_header == "A"

    def test_setup_is_applied(self):
        shape_data = make_shape_data({
            "A": [("2023-05-01", "3"), ("2024-02-01", "4")],
            "B": [("2023-05-01", "5"), ("2024-02-01", "4"), ("2024-08-01", "2")],
        }, unit="quarter", metric_key="metric_average")
        cfg = {"setup": {"mode": "current_year_with_prior_average", "year_digits": 2, "reference_year": 2024,
                         "canonical_group": "B", "show_delta_annotations": True}}
        trend_table = TrendTable(cfg, shape_data)
        assert trend_table.columns == ["23 Avg", "Q1 - 24", "Q3 - 24"]
        assert trend_table.rows["23 Avg"].tolist() == [3.0, 5.0]
        assert trend_table.summary.highest_scoring.row_header == "A"
        assert trend_table.summary.biggest_decrease.row_header == "B"
        assert trend_table.show_delta_annotations is True
