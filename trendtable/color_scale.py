import numpy as np
import pandas as pd
from matplotlib.colors import to_hex, to_rgb

from trendtable.constants import (
    BACKGROUND_COLOR,
    COLOR_DOMAIN,
    CONTRAST_LUMINANCE_THRESHOLD,
    DARK_TEXT_COLOR,
    DIVERGING_PALETTE,
    LIGHT_TEXT_COLOR,
    PCT_MULTIPLIER,
)


class DivergingColorScale:
    """
    Linear color scale over evenly spaced color stops.

    The stops are spread evenly across the domain and each RGB channel is
    interpolated linearly between neighbouring stops. Inputs outside the domain
    saturate to the end colors.

    Attributes:
        colors (np.ndarray): The stop colors as RGB triples in [0, 1].
        domain (tuple): The (low, high) input range.
        stops (np.ndarray): Input positions of the stop colors.
    """

    def __init__(self, colors=DIVERGING_PALETTE, domain=COLOR_DOMAIN):
        if len(colors) < 2:
            raise ValueError(f"A color scale needs at least two colors but got {len(colors)}")
        if domain[0] >= domain[1]:
            raise ValueError(f"Invalid color scale domain {domain}, the lower bound must be below the upper bound")

        self.colors = np.array([to_rgb(color) for color in colors])
        self.domain = (float(domain[0]), float(domain[1]))
        self.stops = np.linspace(self.domain[0], self.domain[1], len(colors))

    def __call__(self, x):
        x = float(np.clip(x, self.domain[0], self.domain[1]))
        rgb = [np.interp(x, self.stops, self.colors[:, channel]) for channel in range(3)]
        return to_hex(rgb)


DEFAULT_COLOR_SCALE = DivergingColorScale()


def is_absent(value):
    return value is None or pd.isna(value)


def color_for(delta, scale=None):
    """
    Map a period-to-period change to a diverging color.

    The change is expected as a proportion (current - previous) and is scaled
    by 100 before being looked up on the [-1, 1] domain.

    Args:
        delta (float): Current cell value minus previous cell value.
        scale (DivergingColorScale, optional): Scale to use, defaults to the red-grey-green palette.

    Returns:
        str | None: Hex color, or None when the change is absent.
    """
    if is_absent(delta):
        return None
    scale = scale or DEFAULT_COLOR_SCALE
    return scale(delta * PCT_MULTIPLIER)


def cell_background(value, previous_value, scale=None):
    # No previous column or missing data on either side keeps the neutral background.
    if is_absent(value) or is_absent(previous_value):
        return BACKGROUND_COLOR
    return color_for(value - previous_value, scale)


def relative_luminance(color):
    """
    Compute the WCAG relative luminance of a color.

    Args:
        color (str): Any color matplotlib understands, usually a hex string.

    Returns:
        float: Luminance between 0 (black) and 1 (white).
    """
    channels = np.array(to_rgb(color))
    linear = np.where(channels <= 0.03928, channels / 12.92, ((channels + 0.055) / 1.055) ** 2.4)
    return float(np.dot([0.2126, 0.7152, 0.0722], linear))


def foreground_for(background):
    if relative_luminance(background) > CONTRAST_LUMINANCE_THRESHOLD:
        return DARK_TEXT_COLOR
    return LIGHT_TEXT_COLOR
