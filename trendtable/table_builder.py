import json
import logging
import traceback
from json import JSONEncoder

import numpy as np
import yaml
from yaml import SafeLoader
from yaml.scanner import ScannerError

from trendtable.color_scale import cell_background, foreground_for, is_absent
from trendtable.constants import (
    EMPTY_DISPLAY,
    EVEN_ROW_STYLE,
    FIELD_COLUMN,
    HEADLINE_BIGGEST_DECREASE,
    HEADLINE_BIGGEST_IMPROVEMENT,
    HEADLINE_HIGHEST_SCORING,
    HEADLINE_LOWEST_SCORING,
    NEGATIVE_HINT,
    ODD_ROW_STYLE,
    PLOT_STYLE,
    POSITIVE_HINT,
)
from trendtable.trend_analyzer import get_last_two_populated
from trendtable.trend_table import TrendTable
from trendtable.value_formatter import (
    format_percentage_change,
    format_score,
    format_signed_delta,
    format_value,
)


class HeatmapTable:
    def __init__(self):
        self.plotStyle = PLOT_STYLE
        self.title = ""
        self.metricKind = ""
        self.periodUnit = ""
        self.headers = []
        self.rows = []
        self.headlines = []


class HeatmapRow:
    def __init__(self):
        self.rowHeader = ""
        self.rowStyle = ""
        self.cells = []


class Cell:
    def __init__(self):
        self.value = None
        self.display = EMPTY_DISPLAY
        self.background = ""
        self.foreground = ""
        self.annotation = EMPTY_DISPLAY


class Headline:
    def __init__(self):
        self.title = ""
        self.field = ""
        self.color = ""
        self.text = EMPTY_DISPLAY
        self.value = None


class Encoder(JSONEncoder):
    def default(self, o):
        if isinstance(o, np.integer):
            return int(o)
        if isinstance(o, np.floating):
            return None if np.isnan(o) else float(o)
        return o.__dict__


class SafeLineLoader(SafeLoader):
    def construct_mapping(self, node, deep=False):
        mapping = super(SafeLineLoader, self).construct_mapping(node, deep=deep)
        # Add 1 so line numbering starts at 1
        mapping['__line__'] = node.start_mark.line + 1
        return mapping


def _as_optional_float(value):
    return None if is_absent(value) else float(value)


def style_cell(value, previous_value, metric_kind, show_annotation=False):
    """
    Compute everything the rendering surface needs for one cell.

    The cell is a pure function of its value, the value of the column to its
    left and the metric kind, so it can be computed in batch or cached.

    Args:
        value (float): The cell value, NaN or None when absent.
        previous_value (float): The value of the previous column, None for the first column.
        metric_kind (str): 'percentage' or 'plain'.
        show_annotation (bool): Whether to include the signed change as an annotation.

    Returns:
        Cell: Display string, background and foreground colors and the optional annotation.
    """
    cell = Cell()
    cell.value = _as_optional_float(value)
    cell.display = format_value(value, metric_kind)
    cell.background = cell_background(value, previous_value)
    cell.foreground = foreground_for(cell.background)

    if show_annotation and not is_absent(value) and not is_absent(previous_value):
        cell.annotation = format_signed_delta(value - previous_value, metric_kind)

    return cell


def build_row(trend_table: TrendTable, row_number: int) -> HeatmapRow:
    """
    Build the styled row at the given position of the pivoted frame.

    Rows alternate between the even and odd row styles. The first value column
    has no column to compare against and keeps the neutral background.
    """
    heatmap_row = HeatmapRow()
    heatmap_row.rowHeader = trend_table.rows[FIELD_COLUMN].iloc[row_number]
    heatmap_row.rowStyle = EVEN_ROW_STYLE if row_number % 2 == 0 else ODD_ROW_STYLE

    previous_value = None
    for column in trend_table.columns:
        value = trend_table.rows[column].iloc[row_number]
        heatmap_row.cells.append(
            style_cell(value, previous_value, trend_table.metric_kind, trend_table.show_delta_annotations)
        )
        previous_value = value

    return heatmap_row


def get_current_and_previous_values(trend_table: TrendTable, row_number):
    """
    Return the values of the last two populated cells of a row.

    Args:
        trend_table (TrendTable): The computed table.
        row_number (int): Position of the row in the pivoted frame.

    Returns:
        tuple: (current, previous), both NaN when the row has fewer than two populated cells.
    """
    values = trend_table.rows[list(trend_table.columns)].iloc[row_number].to_numpy(dtype=float)
    previous, current = get_last_two_populated(values)
    return current, previous


def build_headline(trend_table: TrendTable, title, record, color, is_change):
    headline = Headline()
    headline.title = title
    headline.color = color
    if record.is_absent:
        return headline

    current, previous = get_current_and_previous_values(trend_table, record.row)
    headline.field = record.row_header
    headline.value = record.metric_value
    headline.text = format_percentage_change(current, previous) if is_change \
        else format_score(current, trend_table.metric_kind)
    return headline


def build_headlines(trend_table: TrendTable) -> list:
    """
    Build the four headline lines shown under the table.

    Improvement and decrease headlines carry the relative change between the
    last two populated periods, highest and lowest scoring headlines carry the current
    score. Headlines without a qualifying row keep a blank field and text.

    Args:
        trend_table (TrendTable): The computed table.

    Returns:
        list: Four Headline objects in display order.
    """
    summary = trend_table.summary
    return [
        build_headline(trend_table, HEADLINE_BIGGEST_IMPROVEMENT, summary.biggest_improvement, POSITIVE_HINT, True),
        build_headline(trend_table, HEADLINE_BIGGEST_DECREASE, summary.biggest_decrease, NEGATIVE_HINT, True),
        build_headline(trend_table, HEADLINE_HIGHEST_SCORING, summary.highest_scoring, POSITIVE_HINT, False),
        build_headline(trend_table, HEADLINE_LOWEST_SCORING, summary.lowest_scoring, NEGATIVE_HINT, False),
    ]


def get_trend_table(trend_table: TrendTable) -> HeatmapTable:
    """
    Constructs the HeatmapTable handed to the rendering surface.

    Args:
        trend_table (TrendTable): An instance of the TrendTable class holding the pivoted rows and summary.

    Returns:
        HeatmapTable: Headers, styled rows and headlines.
    """
    table = HeatmapTable()
    table.title = trend_table.title
    table.metricKind = trend_table.metric_kind
    table.periodUnit = trend_table.period_unit
    table.headers = [FIELD_COLUMN] + list(trend_table.columns)

    for row_number in range(len(trend_table.rows)):
        table.rows.append(build_row(trend_table, row_number))

    table.headlines = build_headlines(trend_table)
    return table


def build_trend_table(cfg, shape_data) -> HeatmapTable:
    """Build the heatmap table straight from a configuration and shape data."""
    return get_trend_table(TrendTable(cfg, shape_data))


def _read_stream(stream):
    content = stream.read()
    return content.decode("utf-8") if isinstance(content, bytes) else content


def load_yaml_from_stream(config_file):
    try:
        return yaml.load(_read_stream(config_file), SafeLineLoader)
    except (ScannerError, yaml.YAMLError) as e:
        logging.error(e, exc_info=True)
        error_message = traceback.format_exc().splitlines()[-1]
        raise ValueError(f"Could not create the trend table due to incorrect yaml, caused due to error in "
                         f"{error_message}")


def load_shape_data_from_stream(data_file):
    try:
        return json.loads(_read_stream(data_file))
    except json.JSONDecodeError as e:
        logging.error(e, exc_info=True)
        raise ValueError(f"Could not read the shape data, invalid JSON at line {e.lineno} column {e.colno}")
