import datetime
import logging

import numpy as np
import pandas as pd

from trendtable.constants import (
    DEFAULT_YEAR_DIGITS,
    FIELD_COLUMN,
    MODE_CURRENT_YEAR_WITH_PRIOR_AVERAGE,
    MODE_FULL_RANGE,
    PIVOT_MODES,
    PRIOR_YEAR_AVERAGE_DECIMALS,
    PRIOR_YEAR_AVERAGE_SUFFIX,
)
from trendtable.period_utility import (
    format_period_label,
    format_year,
    parse_timestamp,
    validate_period_unit,
    validate_year_digits,
)

logger = logging.getLogger(__name__)

OBSERVATION_COLUMNS = ['group', FIELD_COLUMN, 'position', 'timestamp', 'label', 'value']


def parse_observation_value(raw):
    """
    Parse a raw observation value into a float.

    Anything that does not parse to a finite number (None, booleans, blank or
    non-numeric strings, NaN, infinity) is treated as absent and returned as NaN.
    It is never replaced by zero.

    Args:
        raw: The raw value from the dataset, usually a string.

    Returns:
        float: The parsed value or NaN.
    """
    if raw is None or isinstance(raw, bool) or not pd.api.types.is_scalar(raw):
        return np.nan
    if isinstance(raw, str) and not raw.strip():
        return np.nan

    try:
        value = pd.to_numeric(raw, errors='coerce')
    except (TypeError, ValueError):
        return np.nan
    if pd.isna(value) or not np.isfinite(value):
        return np.nan
    return float(value)


def create_observation_frame(dataset, unit, year_digits=DEFAULT_YEAR_DIGITS):
    """
    Flatten the hierarchical dataset into one row per observation.

    Args:
        dataset (list): Entity groups, each a dict with an 'id' and a list of 'children'
                        where every child has an 'id' (timestamp) and a 'value'.
        unit (str): The period unit used to compute each observation's label.
        year_digits (int): Year rendering used in the labels.

    Returns:
        pd.DataFrame: Columns group, Field, position, timestamp, label and value, in
        dataset order. Unparsable timestamps have NaT and no label, unparsable values are NaN.
    """
    records = []
    for group_index, group in enumerate(dataset):
        for position, child in enumerate(group.get('children') or []):
            timestamp = parse_timestamp(child.get('id'))
            records.append({
                'group': group_index,
                FIELD_COLUMN: group.get('id'),
                'position': position,
                'timestamp': timestamp,
                'label': format_period_label(timestamp, unit, year_digits) if timestamp is not None else None,
                'value': parse_observation_value(child.get('value'))
            })

    observations = pd.DataFrame(records, columns=OBSERVATION_COLUMNS)
    observations['timestamp'] = pd.to_datetime(observations['timestamp'])
    observations['value'] = observations['value'].astype(float)
    return observations


def create_period_axis(children, unit, year_digits=DEFAULT_YEAR_DIGITS):
    """
    Build the ordered period labels from the canonical group's children.

    Children whose timestamp cannot be parsed are skipped. Labels are
    deduplicated keeping the order in which they are first seen.

    Args:
        children (list): The canonical group's observations.
        unit (str): The period unit.
        year_digits (int): Year rendering used in the labels.

    Returns:
        list: Unique period labels in first-seen order.
    """
    labels = []
    for child in children:
        timestamp = parse_timestamp(child.get('id'))
        if timestamp is not None:
            labels.append(format_period_label(timestamp, unit, year_digits))

    return list(dict.fromkeys(labels))


def select_canonical_group(dataset, canonical_group=None):
    """
    Find the position of the group whose children define the period axis.

    Args:
        dataset (list): Entity groups.
        canonical_group (str, optional): Id of the canonical group. Defaults to the first group.

    Returns:
        int | None: Index of the canonical group, or None for an empty dataset.

    Raises:
        KeyError: If canonical_group is given but no group has that id.
    """
    if not dataset:
        return None
    if canonical_group is None:
        return 0

    for index, group in enumerate(dataset):
        if group.get('id') == canonical_group:
            return index

    raise KeyError(f"Canonical group '{canonical_group}' not found in the dataset")


def create_empty_pivot(dataset):
    return pd.DataFrame({FIELD_COLUMN: pd.Series([group.get('id') for group in dataset], dtype=object)})


def _unstack_values(matched, number_of_groups, columns):
    # One float column per axis label, one row per group, NaN where nothing matched.
    if matched.empty:
        values = pd.DataFrame(index=range(number_of_groups), columns=columns)
    else:
        values = matched.set_index(['group', 'label'])['value'].unstack('label')
    values = values.reindex(index=range(number_of_groups), columns=columns).astype(float)
    values.columns.name = None
    return values.reset_index(drop=True)


def pivot_full_range(dataset, unit, year_digits=DEFAULT_YEAR_DIGITS, canonical_group=None):
    """
    Pivot every period of the canonical group into columns.

    For each group and each axis label the first child whose formatted
    timestamp equals the label supplies the cell. When that child's value does
    not parse the cell is absent, later children with the same label are not
    consulted.

    Args:
        dataset (list): Entity groups.
        unit (str): The period unit.
        year_digits (int): Year rendering used in the labels.
        canonical_group (str, optional): Id of the group defining the axis.

    Returns:
        pd.DataFrame: A 'Field' column followed by one float column per period label.
    """
    canonical_index = select_canonical_group(dataset, canonical_group)
    if canonical_index is None:
        return create_empty_pivot(dataset)

    axis = create_period_axis(dataset[canonical_index].get('children') or [], unit, year_digits)
    observations = create_observation_frame(dataset, unit, year_digits)

    # First child per (group, label) wins
    matched = (
        observations
        .dropna(subset=['label'])
        .drop_duplicates(subset=['group', 'label'], keep='first')
    )
    matched = matched[matched['label'].isin(axis)]

    values = _unstack_values(matched, len(dataset), axis)
    return pd.concat([create_empty_pivot(dataset), values], axis=1)


def create_prior_year_average_label(reference_year, year_digits=DEFAULT_YEAR_DIGITS):
    return f"{format_year(reference_year - 1, year_digits)} {PRIOR_YEAR_AVERAGE_SUFFIX}"


def calculate_prior_year_average(observations, number_of_groups, prior_year):
    """
    Average every parsable value of each group that falls in the prior year.

    Args:
        observations (pd.DataFrame): Frame produced by create_observation_frame.
        number_of_groups (int): Number of groups in the dataset.
        prior_year (int): The calendar year to average.

    Returns:
        pd.Series: One mean per group rounded to two decimals, NaN for groups with no
        parsable prior-year value.
    """
    prior_year_values = observations[
        (observations['timestamp'].dt.year == prior_year) & observations['value'].notna()
    ]
    averages = prior_year_values.groupby('group')['value'].mean().round(PRIOR_YEAR_AVERAGE_DECIMALS)
    return averages.reindex(range(number_of_groups)).astype(float).reset_index(drop=True)


def pivot_current_year_with_prior_average(dataset, unit, reference_year, year_digits=DEFAULT_YEAR_DIGITS,
                                          canonical_group=None):
    """
    Pivot the periods of the reference year, preceded by the prior year's average.

    The canonical group's children that fall in reference_year define the
    period columns. The leading column holds each group's mean over its own
    prior-year values. Current-year cells are matched on the exact timestamp
    of the canonical child that defined the column.

    Args:
        dataset (list): Entity groups.
        unit (str): The period unit.
        reference_year (int): The year treated as current.
        year_digits (int): Year rendering used in the labels.
        canonical_group (str, optional): Id of the group defining the axis.

    Returns:
        pd.DataFrame: 'Field', the prior-year average column, then one float column per
        current-year period label.
    """
    canonical_index = select_canonical_group(dataset, canonical_group)
    if canonical_index is None:
        return create_empty_pivot(dataset)

    observations = create_observation_frame(dataset, unit, year_digits)

    canonical_observations = observations[
        (observations['group'] == canonical_index) & observations['timestamp'].notna()
    ]
    current_year_anchors = (
        canonical_observations[canonical_observations['timestamp'].dt.year == reference_year]
        .drop_duplicates(subset=['label'], keep='first')[['label', 'timestamp']]
    )
    axis = current_year_anchors['label'].tolist()

    # First child per (group, timestamp) wins, then each anchor timestamp picks its column
    matched = (
        observations
        .dropna(subset=['timestamp'])
        .drop_duplicates(subset=['group', 'timestamp'], keep='first')
        .drop(columns=['label'])
        .merge(current_year_anchors, on='timestamp', how='inner')
    )

    prior_year_label = create_prior_year_average_label(reference_year, year_digits)
    prior_year_average = calculate_prior_year_average(observations, len(dataset), reference_year - 1)

    pivoted = create_empty_pivot(dataset)
    pivoted[prior_year_label] = prior_year_average
    return pd.concat([pivoted, _unstack_values(matched, len(dataset), axis)], axis=1)


def pivot(dataset, unit, mode=MODE_FULL_RANGE, year_digits=DEFAULT_YEAR_DIGITS, reference_year=None,
          canonical_group=None):
    """
    Reshape the hierarchical dataset into one row per entity group.

    Args:
        dataset (list): Entity groups.
        unit (str): 'month', 'quarter' or 'year'.
        mode (str): 'full_range' or 'current_year_with_prior_average'.
        year_digits (int): 4 or 2.
        reference_year (int, optional): Current year for the prior-average mode. Defaults to
                                        the system clock's year.
        canonical_group (str, optional): Id of the group defining the period axis. Defaults to
                                         the first group.

    Returns:
        pd.DataFrame: The pivoted rows.

    Raises:
        InvalidPeriodUnitError: If the unit is unknown.
        ValueError: If the mode or year_digits is invalid.
        KeyError: If canonical_group does not exist.
    """
    validate_period_unit(unit)
    validate_year_digits(year_digits)

    if mode == MODE_FULL_RANGE:
        return pivot_full_range(dataset, unit, year_digits, canonical_group)
    elif mode == MODE_CURRENT_YEAR_WITH_PRIOR_AVERAGE:
        if reference_year is None:
            reference_year = datetime.date.today().year
            logger.debug(f"No reference year provided, using the current year {reference_year}")
        return pivot_current_year_with_prior_average(dataset, unit, reference_year, year_digits, canonical_group)
    else:
        raise ValueError(f"Expected one of {list(PIVOT_MODES)} for mode but got {mode}")


def get_value_columns(pivoted):
    return [column for column in pivoted.columns if column != FIELD_COLUMN]
