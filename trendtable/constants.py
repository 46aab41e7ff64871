# SPDX-License-Identifier: Apache-2.0
"""
Named constants for the trend table engine.

These constants replace magic strings and numbers used when pivoting survey
results into a period-over-period heatmap table and when styling its cells.
"""

# ---------------------------------------------------------------------------
# Period units
# ---------------------------------------------------------------------------
PERIOD_MONTH = 'month'
PERIOD_QUARTER = 'quarter'
PERIOD_YEAR = 'year'
PERIOD_UNITS = (PERIOD_MONTH, PERIOD_QUARTER, PERIOD_YEAR)

INVALID_PERIOD_LABEL = 'Invalid format'
MONTH_ABBREVIATIONS = ('Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec')
YEAR_DIGIT_OPTIONS = (2, 4)
DEFAULT_YEAR_DIGITS = 4

# ---------------------------------------------------------------------------
# Pivot modes
#
#   full_range                        every period of the canonical group
#   current_year_with_prior_average   current-year periods, preceded by the
#                                     mean of the prior year
# ---------------------------------------------------------------------------
MODE_FULL_RANGE = 'full_range'
MODE_CURRENT_YEAR_WITH_PRIOR_AVERAGE = 'current_year_with_prior_average'
PIVOT_MODES = (MODE_FULL_RANGE, MODE_CURRENT_YEAR_WITH_PRIOR_AVERAGE)

FIELD_COLUMN = 'Field'
PRIOR_YEAR_AVERAGE_SUFFIX = 'Avg'
PRIOR_YEAR_AVERAGE_DECIMALS = 2

# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------
METRIC_KEY_PREFIX = 'metric_'
METRIC_KIND_PERCENTAGE = 'percentage'
METRIC_KIND_PLAIN = 'plain'
PERCENTAGE_METRIC_FIELD_IDS = ('top2Box', 'topBox')

PCT_MULTIPLIER = 100  # proportions are displayed and colored as percentages

# ---------------------------------------------------------------------------
# Colors
#
# Diverging palette from strong decrease to strong improvement. The scale's
# domain is [-1, 1] and is applied to (current - previous) * 100, so a change
# of one percentage point already saturates.
# ---------------------------------------------------------------------------
DIVERGING_PALETTE = ('#CC0000', '#FF8585', '#BFBFBF', '#C2EBC2', '#66CC66')
COLOR_DOMAIN = (-1, 1)
BACKGROUND_COLOR = '#ffffff'
DARK_TEXT_COLOR = '#000000'
LIGHT_TEXT_COLOR = '#ffffff'
CONTRAST_LUMINANCE_THRESHOLD = 0.179

POSITIVE_HINT = 'green'
NEGATIVE_HINT = 'red'

# ---------------------------------------------------------------------------
# Table presentation
# ---------------------------------------------------------------------------
PLOT_STYLE = 'heatmap_table'
EVEN_ROW_STYLE = 'even-row'
ODD_ROW_STYLE = 'odd-row'
EMPTY_DISPLAY = ''

HEADLINE_BIGGEST_IMPROVEMENT = 'Biggest Improvement'
HEADLINE_BIGGEST_DECREASE = 'Biggest Decrease'
HEADLINE_HIGHEST_SCORING = 'Highest Scoring'
HEADLINE_LOWEST_SCORING = 'Lowest Scoring'
