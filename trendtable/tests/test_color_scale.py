# SPDX-License-Identifier: Apache-2.0
"""
Behavioral tests for the diverging cell colors in color_scale.py.
"""
import numpy as np
import pytest

from trendtable.color_scale import (
    DivergingColorScale,
    cell_background,
    color_for,
    foreground_for,
    relative_luminance,
)


# ---------------------------------------------------------------------------
# DivergingColorScale
# ---------------------------------------------------------------------------

class TestDivergingColorScale:
    def test_stops_are_evenly_spaced(self):
        scale = DivergingColorScale()
        assert scale.stops.tolist() == [-1.0, -0.5, 0.0, 0.5, 1.0]

    @pytest.mark.parametrize("x, expected", [
        (-1, "#cc0000"), (-0.5, "#ff8585"), (0, "#bfbfbf"), (0.5, "#c2ebc2"), (1, "#66cc66"),
    ])
    def test_stop_colors(self, x, expected):
        assert DivergingColorScale()(x) == expected

    def test_interpolates_between_stops(self):
        scale = DivergingColorScale(colors=("#000000", "#ffffff"), domain=(0, 1))
        assert scale(0.5) == "#808080"

    def test_saturates_outside_domain(self):
        scale = DivergingColorScale()
        assert scale(-250) == "#cc0000"
        assert scale(42) == "#66cc66"

    def test_rejects_single_color(self):
        with pytest.raises(ValueError):
            DivergingColorScale(colors=("#000000",))

    def test_rejects_inverted_domain(self):
        with pytest.raises(ValueError):
            DivergingColorScale(domain=(1, -1))


# ---------------------------------------------------------------------------
# color_for / cell_background
# ---------------------------------------------------------------------------

class TestColorFor:
    def test_no_change_is_neutral(self):
        assert color_for(0) == "#bfbfbf"

    def test_one_point_saturates(self):
        assert color_for(0.01) == "#66cc66"
        assert color_for(-0.01) == "#cc0000"

    def test_large_changes_clamp(self):
        assert color_for(1) == "#66cc66"
        assert color_for(-1) == "#cc0000"

    def test_half_point(self):
        assert color_for(0.005) == "#c2ebc2"
        assert color_for(-0.005) == "#ff8585"

    @pytest.mark.parametrize("delta", [None, np.nan, float("nan")])
    def test_absent_change_has_no_color(self, delta):
        assert color_for(delta) is None


class TestCellBackground:
    def test_colored_by_change(self):
        assert cell_background(0.12, 0.10) == "#66cc66"

    def test_first_column_is_white(self):
        assert cell_background(0.12, None) == "#ffffff"

    def test_missing_value_is_white(self):
        assert cell_background(np.nan, 0.10) == "#ffffff"
        assert cell_background(0.10, np.nan) == "#ffffff"

    def test_custom_scale(self):
        scale = DivergingColorScale(colors=("#000000", "#ffffff"), domain=(-1, 1))
        assert cell_background(0.5, 0.1, scale) == "#ffffff"


# ---------------------------------------------------------------------------
# Foreground contrast
# ---------------------------------------------------------------------------

class TestForeground:
    def test_luminance_bounds(self):
        assert relative_luminance("#000000") == 0
        assert relative_luminance("#ffffff") == pytest.approx(1)

    @pytest.mark.parametrize("background, expected", [
        ("#ffffff", "#000000"),
        ("#bfbfbf", "#000000"),
        ("#66cc66", "#000000"),
        ("#cc0000", "#ffffff"),
        ("#000000", "#ffffff"),
    ])
    def test_readable_text_color(self, background, expected):
        assert foreground_for(background) == expected
