import logging

import trendtable.trend_utility as trend_util
from trendtable.constants import DEFAULT_YEAR_DIGITS, MODE_FULL_RANGE
from trendtable.period_utility import validate_period_unit
from trendtable.trend_analyzer import summarize
from trendtable.value_formatter import get_metric_kind

logger = logging.getLogger(__name__)


def get_metric_key(shape_data):
    """
    Return the key of the single metric in the shape data, e.g. 'metric_top2Box'.

    Raises:
        KeyError: If the shape data does not hold exactly one metric.
    """
    metrics = shape_data.get('metrics')
    if not isinstance(metrics, dict):
        raise KeyError("Shape data must contain a 'metrics' mapping")

    metric_keys = [key for key in metrics.keys() if key != '__line__']
    if len(metric_keys) != 1:
        raise KeyError(f"Shape data must contain exactly one metric but got {len(metric_keys)}: {metric_keys}")
    return metric_keys[0]


def get_period_unit(shape_data):
    """
    Read the period unit of the column axis, axes[1].dimensions[0].unit.

    Raises:
        KeyError: If the axes do not describe a column dimension with a unit.
        InvalidPeriodUnitError: If the unit is not month, quarter or year.
    """
    try:
        unit = shape_data['axes'][1]['dimensions'][0]['unit']
    except (KeyError, IndexError, TypeError):
        raise KeyError("Shape data must describe the period unit at axes[1].dimensions[0].unit")
    return validate_period_unit(unit)


class TrendTable:
    """
        Represents the pivoted period-over-period table for one metric.

        Attributes:
            cfg (dict): The configuration dictionary.
            shape_data (dict): The dataset as delivered by the host: metrics, axes and data.
            title (str): The table title.
            mode (str): 'full_range' or 'current_year_with_prior_average'.
            year_digits (int): 4 or 2, how years are printed in period labels.
            reference_year (int): The current year for the prior-average mode, None for the clock year.
            canonical_group (str): Id of the group whose periods define the columns, None for the first.
            show_delta_annotations (bool): Whether cells carry an inline change annotation.
            metric_key (str): The metric key, 'metric_<fieldId>'.
            metric_kind (str): 'percentage' or 'plain'.
            period_unit (str): 'month', 'quarter' or 'year'.
            rows (pandas.DataFrame): The pivoted rows, 'Field' followed by the value columns.
            columns (list): The value column labels in display order.
            summary (TrendSummary): The four headline records.
        """
    def __init__(self, cfg, shape_data):
        self.cfg = cfg or {}
        self.shape_data = shape_data
        setup = self.cfg.get('setup') or {}

        self.title = setup.get('title') or ""
        self.mode = setup.get('mode', MODE_FULL_RANGE)
        self.year_digits = setup.get('year_digits', DEFAULT_YEAR_DIGITS)
        self.reference_year = setup.get('reference_year')
        self.canonical_group = setup.get('canonical_group')
        self.show_delta_annotations = bool(setup.get('show_delta_annotations', False))

        self.metric_key = get_metric_key(shape_data)
        self.metric_kind = get_metric_kind(self.metric_key)
        self.period_unit = get_period_unit(shape_data)

        self.rows = trend_util.pivot(
            shape_data.get('data') or [],
            self.period_unit,
            mode=self.mode,
            year_digits=self.year_digits,
            reference_year=self.reference_year,
            canonical_group=self.canonical_group
        )
        self.columns = trend_util.get_value_columns(self.rows)
        self.summary = summarize(self.rows)

        logger.info(f"Pivoted {len(self.rows)} rows over {len(self.columns)} columns for {self.metric_key} "
                    f"by {self.period_unit}")
