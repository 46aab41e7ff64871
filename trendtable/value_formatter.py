import math

import numpy as np

from trendtable.color_scale import is_absent
from trendtable.constants import (
    EMPTY_DISPLAY,
    METRIC_KEY_PREFIX,
    METRIC_KIND_PERCENTAGE,
    METRIC_KIND_PLAIN,
    PCT_MULTIPLIER,
    PERCENTAGE_METRIC_FIELD_IDS,
)


def get_metric_field_id(metric_key):
    """
    Extract the field id from a metric key such as 'metric_top2Box'.

    Raises:
        KeyError: If the key does not follow the 'metric_<fieldId>' format.
    """
    if not isinstance(metric_key, str) or not metric_key.startswith(METRIC_KEY_PREFIX) \
            or not metric_key[len(METRIC_KEY_PREFIX):]:
        raise KeyError(f"Metric key '{metric_key}' is not in the format {METRIC_KEY_PREFIX}<fieldId>")
    return metric_key.split('_')[1]


def get_metric_kind(metric_key):
    """
    Decide whether a metric is displayed as a percentage or as a plain number.

    Box metrics (top2Box, topBox) are proportions and are shown as percentages,
    every other metric (average, count, ...) is shown as is.

    Args:
        metric_key (str): The metric key, 'metric_<fieldId>'.

    Returns:
        str: 'percentage' or 'plain'.
    """
    if get_metric_field_id(metric_key) in PERCENTAGE_METRIC_FIELD_IDS:
        return METRIC_KIND_PERCENTAGE
    return METRIC_KIND_PLAIN


def _check_metric_kind(metric_kind):
    if metric_kind not in (METRIC_KIND_PERCENTAGE, METRIC_KIND_PLAIN):
        raise ValueError(f"Unsupported metric kind: {metric_kind}")


def round_half_up(value):
    return int(math.floor(value + 0.5))


def format_number(value):
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return str(value)


def format_value(value, metric_kind):
    """
    Render a cell value for display.

    Args:
        value (float): The raw cell value, NaN or None when absent.
        metric_kind (str): 'percentage' to show value * 100 rounded with a '%' suffix,
                           'plain' to show the number unchanged.

    Returns:
        str: The display string, empty for absent values.
    """
    _check_metric_kind(metric_kind)
    if is_absent(value):
        return EMPTY_DISPLAY
    if metric_kind == METRIC_KIND_PERCENTAGE:
        return f"{round_half_up(value * PCT_MULTIPLIER)}%"
    return format_number(value)


def format_percentage_change(current, previous):
    """
    Render the relative change between two periods as '(12.34%)'.

    A change that is zero, NaN or infinite (for example when the previous value
    is zero) renders as an empty string. This also hides a genuine 0% change.

    Args:
        current (float): Value of the current period.
        previous (float): Value of the previous period.

    Returns:
        str: The formatted change or an empty string.
    """
    if is_absent(current) or is_absent(previous):
        return EMPTY_DISPLAY

    with np.errstate(divide='ignore', invalid='ignore'):
        change = (np.float64(current) - np.float64(previous)) / np.float64(previous) * PCT_MULTIPLIER

    if change == 0 or not np.isfinite(change):
        return EMPTY_DISPLAY
    return f"({change:.2f}%)"


def format_signed_delta(delta, metric_kind):
    """
    Render a period-to-period difference for an inline annotation, e.g. '+3%' or '-0.25'.

    Percentage metrics are expressed in percentage points. Absent and zero
    differences render as an empty string.
    """
    _check_metric_kind(metric_kind)
    if is_absent(delta):
        return EMPTY_DISPLAY

    if metric_kind == METRIC_KIND_PERCENTAGE:
        points = round_half_up(delta * PCT_MULTIPLIER)
        return f"{points:+d}%" if points != 0 else EMPTY_DISPLAY

    delta = round(float(delta), 2)
    return f"{delta:+.2f}" if delta != 0 else EMPTY_DISPLAY


def format_score(value, metric_kind):
    # Headline score: '(86%)' for proportions, '(4.20)' otherwise. Zero is hidden like a missing value.
    _check_metric_kind(metric_kind)
    if is_absent(value) or value == 0:
        return EMPTY_DISPLAY
    if metric_kind == METRIC_KIND_PERCENTAGE:
        return f"({format_number(round(round(float(value), 2) * PCT_MULTIPLIER, 2))}%)"
    return f"({float(value):.2f})"
