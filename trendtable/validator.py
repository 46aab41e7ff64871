import logging

from trendtable.constants import PIVOT_MODES
from trendtable.period_utility import validate_year_digits
from trendtable.trend_table import get_metric_key, get_period_unit
from trendtable.value_formatter import get_metric_field_id

logger = logging.getLogger(__name__)


class TrendTableValidator:
    def __init__(self, cfg: dict, shape_data: dict):
        """
        Initializes the TrendTableValidator that validates the yaml config and the shape data

        Args:
            cfg (dict): The trend table YAML configuration.
            shape_data (dict): The dataset delivered by the host: metrics, axes and data.
        """
        self.cfg = cfg or {}
        self.shape_data = shape_data

    def validate(self):
        self.validate_setup()
        self.validate_shape_data()

    def _setup_line(self):
        setup = self.cfg.get('setup') or {}
        return setup.get('__line__', 'unknown')

    def validate_setup(self):
        """
        Checks the setup section of the configuration.

        Raises:
            ValueError: If the configuration is not a mapping, or a setup value is invalid.
        """
        if not isinstance(self.cfg, dict):
            raise ValueError("The configuration must be a mapping")

        setup = self.cfg.get('setup') or {}
        if not isinstance(setup, dict):
            raise ValueError("The SETUP section of the configuration must be a mapping")

        if 'mode' in setup and setup['mode'] not in PIVOT_MODES:
            raise ValueError(f"Invalid value provided for mode {setup['mode']}, expected one of {list(PIVOT_MODES)} "
                             f"at line: {self._setup_line()}")

        if 'year_digits' in setup:
            try:
                validate_year_digits(setup['year_digits'])
            except ValueError as e:
                raise ValueError(f"{e} at line: {self._setup_line()}")

        reference_year = setup.get('reference_year')
        if reference_year is not None and (isinstance(reference_year, bool) or not isinstance(reference_year, int)):
            raise ValueError(f"reference_year must be a year such as 2024 but got {reference_year} "
                             f"at line: {self._setup_line()}")

        if 'show_delta_annotations' in setup and not isinstance(setup['show_delta_annotations'], bool):
            raise ValueError(f"show_delta_annotations must be true or false at line: {self._setup_line()}")

    def validate_shape_data(self):
        """
        Checks the metrics, axes and data of the shape data.

        Raises:
            ValueError: If the shape data or its data list is malformed.
            KeyError: If the metric, the period unit or the canonical group cannot be resolved.
            InvalidPeriodUnitError: If the period unit is not month, quarter or year.
        """
        if not isinstance(self.shape_data, dict):
            raise ValueError("Shape data must be a JSON object with metrics, axes and data")

        get_metric_field_id(get_metric_key(self.shape_data))
        get_period_unit(self.shape_data)

        data = self.shape_data.get('data', [])
        if not isinstance(data, list):
            raise ValueError("Shape data 'data' must be a list of entity groups")

        for index, group in enumerate(data):
            if not isinstance(group, dict) or 'id' not in group:
                raise ValueError(f"Entity group {index + 1} must be an object with an 'id'")
            children = group.get('children') or []
            if not isinstance(children, list) or not all(isinstance(child, dict) for child in children):
                raise ValueError(f"Entity group '{group['id']}' must have a list of 'children' objects")

        canonical_group = (self.cfg.get('setup') or {}).get('canonical_group')
        if canonical_group is not None and canonical_group not in [group['id'] for group in data]:
            raise KeyError(f"canonical_group '{canonical_group}' not found in the data at line: "
                           f"{self._setup_line()}")

        logger.info(f"Validated shape data with {len(data)} entity groups")
