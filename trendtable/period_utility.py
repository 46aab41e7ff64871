import datetime
import logging
from functools import lru_cache

import numpy as np
import pandas as pd
from dateutil import parser as date_parser

from trendtable.constants import (
    DEFAULT_YEAR_DIGITS,
    INVALID_PERIOD_LABEL,
    MONTH_ABBREVIATIONS,
    PERIOD_MONTH,
    PERIOD_QUARTER,
    PERIOD_UNITS,
    PERIOD_YEAR,
    YEAR_DIGIT_OPTIONS,
)

logger = logging.getLogger(__name__)


class InvalidPeriodUnitError(ValueError):
    """Raised when a period unit other than month, quarter or year is requested."""

    def __init__(self, unit):
        self.unit = unit
        super().__init__(f"Invalid period unit '{unit}', expected one of {list(PERIOD_UNITS)}")


def validate_period_unit(unit):
    if unit not in PERIOD_UNITS:
        raise InvalidPeriodUnitError(unit)
    return unit


def validate_year_digits(year_digits):
    if isinstance(year_digits, bool) or year_digits not in YEAR_DIGIT_OPTIONS:
        raise ValueError(f"year_digits must be one of {list(YEAR_DIGIT_OPTIONS)} but got {year_digits}")
    return year_digits


def get_quarter(month):
    """
    Return the quarter label for a 1-based month number.

    Args:
        month (int): Month of the year, 1 (January) to 12 (December).

    Returns:
        str: One of 'Q1', 'Q2', 'Q3', 'Q4'.
    """
    if month <= 3:
        return 'Q1'
    elif month <= 6:
        return 'Q2'
    elif month <= 9:
        return 'Q3'
    else:
        return 'Q4'


def format_year(year, year_digits=DEFAULT_YEAR_DIGITS):
    """
    Render a year with either all four digits or only the last two.

    Args:
        year (int): Calendar year.
        year_digits (int): 4 for '2024', 2 for '24'.

    Returns:
        str: The formatted year.

    Raises:
        ValueError: If year_digits is neither 2 nor 4.
    """
    validate_year_digits(year_digits)
    if year_digits == 2:
        return f"{year % 100:02d}"
    return str(year)


@lru_cache(maxsize=4096)
def format_period_label(timestamp, unit, year_digits=DEFAULT_YEAR_DIGITS):
    """
    Map a timestamp to the display label of the period it falls in.

    Labels look like 'Jan - 2024' for months, 'Q1 - 2024' for quarters and
    '2024' for years. The function is pure, so results are cached.

    Args:
        timestamp (datetime.date | datetime.datetime | pd.Timestamp): The point in time to bucket.
        unit (str): One of 'month', 'quarter' or 'year'.
        year_digits (int): 4 to show the full year, 2 to show its last two digits.

    Returns:
        str: The period label.

    Raises:
        InvalidPeriodUnitError: If the unit is not a known period unit.
        ValueError: If year_digits is not supported.
    """
    year = format_year(timestamp.year, year_digits)

    if unit == PERIOD_YEAR:
        return year
    elif unit == PERIOD_MONTH:
        return f"{MONTH_ABBREVIATIONS[timestamp.month - 1]} - {year}"
    elif unit == PERIOD_QUARTER:
        return f"{get_quarter(timestamp.month)} - {year}"
    else:
        raise InvalidPeriodUnitError(unit)


def format_period_label_or_sentinel(timestamp, unit, year_digits=DEFAULT_YEAR_DIGITS):
    # For callers that display a placeholder instead of failing on a misconfigured unit.
    try:
        return format_period_label(timestamp, unit, year_digits)
    except InvalidPeriodUnitError:
        logger.warning(f"Could not format period for unit '{unit}', using '{INVALID_PERIOD_LABEL}'")
        return INVALID_PERIOD_LABEL


def parse_timestamp(raw):
    """
    Parse an observation timestamp into a naive UTC pandas Timestamp.

    Strings are parsed with dateutil, numbers are treated as epoch milliseconds
    (the host widget serialises dates that way) and date objects are taken as is.
    Timezone-aware values are converted to UTC before the timezone is dropped.

    Args:
        raw: The raw timestamp from the dataset.

    Returns:
        pd.Timestamp | None: The parsed timestamp, or None when it cannot be parsed.
    """
    if raw is None or isinstance(raw, bool):
        return None

    try:
        if isinstance(raw, (int, float, np.integer, np.floating)):
            if not np.isfinite(raw):
                return None
            timestamp = pd.Timestamp(raw, unit='ms')
        elif isinstance(raw, str):
            timestamp = pd.Timestamp(date_parser.parse(raw))
        elif isinstance(raw, (datetime.date, pd.Timestamp, np.datetime64)):
            timestamp = pd.Timestamp(raw)
        else:
            return None
    except (ValueError, OverflowError, TypeError):
        return None

    if pd.isna(timestamp):
        return None
    if timestamp.tzinfo is not None:
        timestamp = timestamp.tz_convert('UTC').tz_localize(None)
    return timestamp
