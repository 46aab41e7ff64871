"""
Headline statistics for a pivoted trend table.

Each row is compared on its last two populated value cells: the earlier one
is treated as the previous period and the later one as the current period.
Rows with fewer than two populated cells score a -inf/+inf sentinel so they
can never win, and the first row reaching an extremum keeps it.
"""
from dataclasses import dataclass, field, asdict
from typing import Optional

import numpy as np

from trendtable.constants import FIELD_COLUMN
from trendtable.trend_utility import get_value_columns


@dataclass
class ExtremumRecord:
    row: Optional[int] = None
    row_header: Optional[str] = None
    metric_value: Optional[float] = None

    @property
    def is_absent(self):
        return self.row is None


@dataclass
class TrendSummary:
    biggest_improvement: ExtremumRecord = field(default_factory=ExtremumRecord)
    biggest_decrease: ExtremumRecord = field(default_factory=ExtremumRecord)
    highest_scoring: ExtremumRecord = field(default_factory=ExtremumRecord)
    lowest_scoring: ExtremumRecord = field(default_factory=ExtremumRecord)

    def as_dict(self):
        return asdict(self)


def find_extremum(scores, maximize=True):
    """
    Scan scores in row order and return the first row holding the extremum.

    Comparisons are strict, so a later row equal to the best so far never
    replaces it, and sentinel scores (-inf when maximizing, +inf when
    minimizing) never win.

    Args:
        scores (Iterable[float]): One score per row.
        maximize (bool): Look for the largest score when True, the smallest otherwise.

    Returns:
        tuple: (row index, score), or (None, None) if no row qualifies.
    """
    best_row = None
    best_score = -np.inf if maximize else np.inf

    for row, score in enumerate(scores):
        if (score > best_score) if maximize else (score < best_score):
            best_row = row
            best_score = score

    if best_row is None:
        return None, None
    return best_row, float(best_score)


def _to_record(pivoted, row, score):
    if row is None:
        return ExtremumRecord()
    return ExtremumRecord(row=row, row_header=pivoted[FIELD_COLUMN].iloc[row], metric_value=score)


def get_last_two_populated(values):
    """
    Return the last two populated values of a row as (previous, current).

    Args:
        values (Iterable[float]): The row's value cells in column order, NaN when absent.

    Returns:
        tuple: (previous, current), both NaN when the row has fewer than two populated cells.
    """
    populated = [value for value in values if not np.isnan(value)]
    if len(populated) < 2:
        return np.nan, np.nan
    return populated[-2], populated[-1]


def summarize(pivoted):
    """
    Find the rows behind the four headlines of a trend table.

    Args:
        pivoted (pd.DataFrame): Rows produced by the pivot, a 'Field' column followed by value columns.

    Returns:
        TrendSummary: biggest_improvement (max current - previous), biggest_decrease
        (max previous - current), highest_scoring (max current) and lowest_scoring
        (min current), where previous and current are each row's last two populated
        cells. Each record is empty when no row qualifies.
    """
    value_columns = get_value_columns(pivoted)
    if pivoted.empty or not value_columns:
        return TrendSummary()

    pairs = [get_last_two_populated(row) for row in pivoted[value_columns].to_numpy(dtype=float)]
    previous = np.array([pair[0] for pair in pairs], dtype=float)
    current = np.array([pair[1] for pair in pairs], dtype=float)

    comparable = ~(np.isnan(current) | np.isnan(previous))

    improvement = np.where(comparable, current - previous, -np.inf)
    decrease = np.where(comparable, previous - current, -np.inf)
    highest = np.where(comparable, current, -np.inf)
    lowest = np.where(comparable, current, np.inf)

    return TrendSummary(
        biggest_improvement=_to_record(pivoted, *find_extremum(improvement, maximize=True)),
        biggest_decrease=_to_record(pivoted, *find_extremum(decrease, maximize=True)),
        highest_scoring=_to_record(pivoted, *find_extremum(highest, maximize=True)),
        lowest_scoring=_to_record(pivoted, *find_extremum(lowest, maximize=False)),
    )
