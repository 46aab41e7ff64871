# SPDX-License-Identifier: Apache-2.0
"""
Shared fixtures for the trend table test suite.

Provides scenario loading utilities that build TrendTable objects and heatmap
table outputs from the golden-output cases in trendtable/tests/scenarios/*.
"""
import json
import os
from functools import lru_cache
from pathlib import Path

import pytest
import yaml

from trendtable import validator
from trendtable.table_builder import SafeLineLoader, get_trend_table
from trendtable.trend_table import TrendTable

SCENARIO_DIR = Path(os.path.dirname(__file__)) / "scenarios"


@lru_cache(maxsize=None)
def _load_scenario(scenario_name):
    """Load a scenario's TrendTable object and heatmap table, cached per scenario name.

    Multiple test cases within the same scenario share one TrendTable + table instance,
    so we cache to avoid redundant computation.
    """
    scenario_path = SCENARIO_DIR / scenario_name
    with open(scenario_path / "config.yaml") as config_file:
        config = yaml.load(config_file, SafeLineLoader)
    with open(scenario_path / "data.json") as data_file:
        shape_data = json.load(data_file)

    validator.TrendTableValidator(cfg=config, shape_data=shape_data).validate()
    trend_table = TrendTable(config, shape_data)
    table = get_trend_table(trend_table)
    return trend_table, table


def load_scenario(scenario_name):
    """Public API: returns (trend_table, table) for a given scenario directory name."""
    return _load_scenario(scenario_name)


def load_expected(scenario_name):
    with open(SCENARIO_DIR / scenario_name / "expected.yaml") as expected_file:
        return yaml.safe_load(expected_file)


def collect_all_scenarios():
    """Return the names of every scenario directory, in sorted order."""
    return [entry.name for entry in sorted(SCENARIO_DIR.iterdir())
            if entry.is_dir() and "scenario" in entry.name]


def make_shape_data(groups, unit="month", metric_key="metric_top2Box"):
    """Helper: build shape data from {entity: [(timestamp, value), ...]}."""
    return {
        "metrics": {metric_key: {}},
        "axes": [
            {"id": "rows", "dimensions": [{"fieldId": "entity"}]},
            {"id": "columns", "dimensions": [{"fieldId": "recordedDate", "unit": unit}]},
        ],
        "data": [
            {"id": entity, "children": [{"id": timestamp, "value": value} for timestamp, value in children]}
            for entity, children in groups.items()
        ],
    }


@pytest.fixture
def monthly_dataset():
    return make_shape_data({
        "A": [("2024-01-15", "0.10"), ("2024-02-15", "0.12")],
        "B": [("2024-01-20", "0.10"), ("2024-02-20", "0.08")],
    })["data"]
