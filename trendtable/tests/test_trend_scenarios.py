# SPDX-License-Identifier: Apache-2.0
"""
Golden-output tests for trend table scenarios.

These tests validate that the pivot, the trend analysis and the table builder
produce exactly the headers, cell displays, colors and headlines recorded in
each scenario's expected.yaml.
"""
import pytest

from trendtable.tests.conftest import collect_all_scenarios, load_expected, load_scenario

SCENARIOS = collect_all_scenarios()


@pytest.mark.parametrize("scenario_name", SCENARIOS)
def test_headers(scenario_name):
    _, table = load_scenario(scenario_name)
    assert table.headers == load_expected(scenario_name)["headers"]


@pytest.mark.parametrize("scenario_name", SCENARIOS)
def test_rows(scenario_name):
    _, table = load_scenario(scenario_name)
    expected_rows = load_expected(scenario_name)["rows"]

    assert len(table.rows) == len(expected_rows)
    for actual, expected in zip(table.rows, expected_rows):
        label = f"{scenario_name}/{expected['rowHeader']}"
        assert actual.rowHeader == expected["rowHeader"], label
        assert actual.rowStyle == expected["rowStyle"], label
        assert [cell.display for cell in actual.cells] == expected["display"], label
        assert [cell.background for cell in actual.cells] == expected["background"], label
        assert [cell.foreground for cell in actual.cells] == expected["foreground"], label
        if "annotation" in expected:
            assert [cell.annotation for cell in actual.cells] == expected["annotation"], label


@pytest.mark.parametrize("scenario_name", SCENARIOS)
def test_headlines(scenario_name):
    _, table = load_scenario(scenario_name)
    expected_headlines = load_expected(scenario_name)["headlines"]

    assert len(table.headlines) == 4
    for actual, expected in zip(table.headlines, expected_headlines):
        assert actual.title == expected["title"]
        assert actual.field == expected["field"], expected["title"]
        assert actual.color == expected["color"], expected["title"]
        assert actual.text == expected["text"], expected["title"]


@pytest.mark.parametrize("scenario_name", SCENARIOS)
def test_every_row_has_one_cell_per_column(scenario_name):
    trend_table, table = load_scenario(scenario_name)
    for row in table.rows:
        assert len(row.cells) == len(trend_table.columns) == len(table.headers) - 1
