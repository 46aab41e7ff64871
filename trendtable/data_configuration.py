"""
Data configuration descriptors exchanged with the host reporting client.

The host fetches aggregated survey data for the table from a descriptor that
names one metric, a row dimension (the entities) and a column dimension (the
recorded date grouped by month, quarter or year). These helpers build that
descriptor and read the selections back out of it.
"""
import copy
import logging

from trendtable.constants import METRIC_KEY_PREFIX, PERIOD_MONTH, PERIOD_QUARTER, PERIOD_YEAR
from trendtable.period_utility import validate_period_unit

logger = logging.getLogger(__name__)

DATA_COMPONENT = 'fieldsets-aggregate'
DATE_FIELD_ID = 'recordedDate'
DEFAULT_ROW_DIMENSION = {'id': 'row_dimension_id', 'label': 'Rows', 'fieldId': None}

GROUP_BY_OPTIONS = [
    {'name': 'Month', 'fieldId': PERIOD_MONTH},
    {'name': 'Quarter', 'fieldId': PERIOD_QUARTER},
    {'name': 'Year', 'fieldId': PERIOD_YEAR},
]

METRIC_OPTIONS = [
    {'name': 'Top 2 Box', 'fieldId': 'top2Box', 'function': 'topBottomBox', 'boxRange': [1, 2]},
    {'name': 'Top Box', 'fieldId': 'topBox', 'function': 'topBottomBox', 'boxRange': [1, 1]},
    {'name': 'Average', 'fieldId': 'average', 'function': 'avg'},
    {'name': 'Count', 'fieldId': 'count', 'function': 'count'},
]


def get_metric_option(field_id):
    """
    Look up a metric option by field id.

    Raises:
        KeyError: If the field id is not one of the supported metrics.
    """
    option = next((option for option in METRIC_OPTIONS if option['fieldId'] == field_id), None)
    if option is None:
        raise KeyError(f"Unsupported metric '{field_id}', expected one of "
                       f"{[option['fieldId'] for option in METRIC_OPTIONS]}")
    return option


def build_metric(metric_option):
    metric = {
        'id': METRIC_KEY_PREFIX + metric_option['fieldId'],
        'label': metric_option['name'],
        'function': metric_option['function'],
    }
    if 'boxRange' in metric_option:
        metric['boxRange'] = list(metric_option['boxRange'])
    return metric


def build_data_configuration(metric_field_id, dimension=None, group_by=PERIOD_MONTH, fieldset_id=None):
    """
    Build the aggregate data configuration the host uses to fetch the table's data.

    Args:
        metric_field_id (str): One of the METRIC_OPTIONS field ids, e.g. 'top2Box'.
        dimension (dict, optional): The row dimension with at least 'fieldId' and optionally 'name'.
        group_by (str): Period unit the recorded date is grouped by.
        fieldset_id (str, optional): The data source's fieldset id.

    Returns:
        dict: The data configuration descriptor. 'isComplete' is True only when a
        row dimension has been chosen.

    Raises:
        KeyError: If the metric is not supported.
        InvalidPeriodUnitError: If group_by is not a period unit.
    """
    metric_option = get_metric_option(metric_field_id)
    validate_period_unit(group_by)

    row_dimension = copy.deepcopy(DEFAULT_ROW_DIMENSION)
    if dimension:
        row_dimension['label'] = dimension.get('name', dimension.get('label', row_dimension['label']))
        row_dimension['fieldId'] = dimension.get('fieldId')

    configuration = {
        'component': DATA_COMPONENT,
        'metrics': [build_metric(metric_option)],
        'axes': [
            {
                'id': 'rows',
                'label': 'Rows',
                'dimensions': [
                    {
                        'id': row_dimension['id'],
                        'breakoutByValue': False,
                        'label': row_dimension['label'],
                        'fieldId': row_dimension['fieldId'],
                        'order': {'key': 'label', 'direction': 'asc'}
                    }
                ]
            },
            {
                'id': 'columns',
                'label': 'Columns',
                'dimensions': [
                    {
                        'id': 'column_dimension_id',
                        'fieldId': DATE_FIELD_ID,
                        'groupBy': [group_by],
                        'order': {'key': 'id', 'direction': 'asc'}
                    }
                ]
            }
        ],
        'combineGroupedLeafMembers': True,
        'comparisons': [],
        'dateFormat': 'detailed',
        'calculations': [],
        'includeRecordCount': True,
        'timezone': 'GMT',
        'localizeDataLabels': True,
        'defaultLanguageKeys': True
    }
    if fieldset_id is not None:
        configuration['fieldsetId'] = fieldset_id

    configuration['isComplete'] = row_dimension['fieldId'] is not None
    logger.info(f"Built data configuration for metric {metric_field_id} grouped by {group_by}")
    return configuration


def extract_configuration(configuration):
    """
    Read the selected metric, row dimension and period grouping out of a data configuration.

    Missing or unrecognised parts come back as None, an empty configuration
    yields (None, None, None).

    Args:
        configuration (dict): A data configuration, usually one built by build_data_configuration.

    Returns:
        tuple: (metric option dict, row dimension dict, group by unit).
    """
    metric = None
    dimension = None
    group_by = None

    if not configuration:
        return metric, dimension, group_by

    metrics = configuration.get('metrics')
    if metrics:
        metric_id = metrics[0].get('id', '')
        field_id = metric_id.split('_')[1] if '_' in metric_id else None
        metric = next((option for option in METRIC_OPTIONS if option['fieldId'] == field_id), None)

    axes = configuration.get('axes')
    if axes:
        row_dimensions = axes[0].get('dimensions') or []
        dimension = row_dimensions[0] if row_dimensions else None
        if len(axes) > 1:
            column_dimensions = axes[1].get('dimensions') or []
            group_bys = column_dimensions[0].get('groupBy') if column_dimensions else None
            group_by = group_bys[0] if group_bys else None

    return metric, dimension, group_by
