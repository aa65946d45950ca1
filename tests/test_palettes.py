"""Unit tests for the palette strategies.

The repeating and scaling cases use three key colors at different
positions and check that lookups land on (or clamp to) them.
"""
import math
import pickle
from types import SimpleNamespace

import numpy as np
import pytest

from fractal_animator.core.interpolation import CUBIC, LINEAR
from fractal_animator.rendering.coloring import Color, KeyColor
from fractal_animator.rendering.palettes import (
    ExponentialPalette,
    HistogramPalette,
    LogarithmicPalette,
    PaletteKind,
    PaletteSpec,
    RepeatingPalette,
    ScalingPalette,
    create_palette,
    to_position,
)


GRAY_KEYS = [KeyColor(0.0, Color.BLACK), KeyColor(100.0, Color.WHITE)]


def fake_representation(values):
    return SimpleNamespace(iterations=np.asarray(values, dtype=np.float64))


# ===========================================================================
# Shared behaviour
# ===========================================================================


def test_empty_key_colors_raise():
    for kind in PaletteKind:
        with pytest.raises(ValueError, match="at least one key color"):
            create_palette(kind, [])


def test_to_position_saturates():
    """Positions truncate toward zero and saturate at the ends."""
    assert to_position(12.9) == 12
    assert to_position(-3.5) == 0
    assert to_position(math.nan) == 0
    assert to_position(math.inf) > 10 ** 15


def test_duplicate_key_positions_keep_last():
    palette = RepeatingPalette([
        KeyColor(0.0, Color.RED),
        KeyColor(0.0, Color.BLUE),
        KeyColor(10.0, Color.GREEN),
    ])
    assert palette.get_color(0.0) == Color.BLUE
    assert len(palette.timeline) == 2


# ===========================================================================
# Repeating
# ===========================================================================


class TestRepeating:
    """Tests for the looping palette."""

    def test_wraparound(self):
        palette = RepeatingPalette([
            KeyColor(0.0, Color.RED),
            KeyColor(20.0, Color.BLUE),
            KeyColor(10.0, Color.GREEN),
        ], CUBIC)

        assert palette.get_color(-0.02) == Color.RED
        assert palette.get_color(5.0).b == 0.0
        assert palette.get_color(10.0) == Color.GREEN
        assert palette.get_color(20.01) == Color.RED
        assert palette.get_color(20.0) == Color.BLUE

    def test_below_first_key_clamps(self):
        palette = RepeatingPalette([
            KeyColor(5.0, Color.RED),
            KeyColor(20.0, Color.BLUE),
            KeyColor(10.0, Color.GREEN),
        ], CUBIC)

        assert palette.get_color(3.0) == Color.RED

    def test_set_max_and_prepare_are_ignored(self):
        palette = RepeatingPalette(GRAY_KEYS)
        before = palette.get_color(37.0)
        palette.set_max(5.0)
        palette.prepare(fake_representation([1.0, 2.0]))
        assert palette.get_color(37.0) == before


# ===========================================================================
# Scaling
# ===========================================================================


class TestScaling:
    """Tests for the palette stretched over the iteration cap."""

    def test_calibration(self):
        palette = ScalingPalette([
            KeyColor(0.0, Color.RED),
            KeyColor(50.0, Color.GREEN),
            KeyColor(100.0, Color.BLUE),
        ], LINEAR)

        palette.set_max(200.0)
        assert palette.get_color(100.0) == Color.GREEN
        assert palette.get_color(150.0).r == 0.0
        assert palette.get_color(250.0) == Color.BLUE
        assert palette.get_color(-100.0) == Color.RED

        palette.set_max(300.0)
        assert palette.get_color(150.0) == Color.GREEN
        assert palette.get_color(175.0).r == 0.0
        assert palette.get_color(350.0) == Color.BLUE
        assert palette.get_color(-15.0) == Color.RED

    def test_below_first_key_clamps(self):
        palette = ScalingPalette([
            KeyColor(20.0, Color.RED),
            KeyColor(50.0, Color.GREEN),
            KeyColor(100.0, Color.BLUE),
        ], LINEAR)
        palette.set_max(200.0)

        assert palette.get_color(10.0) == Color.RED
        assert palette.get_color(40.0) == Color.RED
        assert palette.get_color(40.1).r < 1.0

    def test_non_positive_max_raises(self):
        with pytest.raises(ValueError):
            ScalingPalette(GRAY_KEYS).set_max(0.0)


# ===========================================================================
# Logarithmic and exponential
# ===========================================================================


class TestLogarithmic:
    """Tests for log-spaced bands."""

    def test_band_boundaries(self):
        """Whole powers of the base wrap back to the first color."""
        palette = LogarithmicPalette(GRAY_KEYS, LINEAR, base=2.0)
        assert palette.get_color(0.0) == Color.BLACK
        assert palette.get_color(100.0) == Color.BLACK
        assert palette.get_color(300.0) == Color.BLACK

    def test_inside_band(self):
        palette = LogarithmicPalette(GRAY_KEYS, LINEAR, base=2.0)
        expected = math.log2(1.5)
        assert palette.get_color(50.0).r == pytest.approx(expected, abs=1e-3)

    def test_out_of_domain_maps_to_first_color(self):
        palette = LogarithmicPalette(GRAY_KEYS, LINEAR, base=2.0)
        assert palette.get_color(-500.0) == Color.BLACK

    def test_single_key_color(self):
        palette = LogarithmicPalette([KeyColor(0.0, Color.RED)])
        assert palette.get_color(42.0) == Color.RED

    def test_invalid_base_raises(self):
        with pytest.raises(ValueError):
            LogarithmicPalette(GRAY_KEYS, base=1.0)
        with pytest.raises(ValueError):
            LogarithmicPalette(GRAY_KEYS, base=-2.0)


class TestExponential:
    """Tests for the power warp."""

    def test_warp(self):
        palette = ExponentialPalette(GRAY_KEYS, LINEAR, exponent=1.0)
        palette.set_max(100.0)

        assert palette.get_color(0.0) == Color.BLACK
        # (0.01 * 10000) ** 1.5 = 1000 of 10000
        assert palette.get_color(1.0).r == pytest.approx(0.1, abs=1e-3)

    def test_negative_index_maps_to_first_color(self):
        palette = ExponentialPalette(GRAY_KEYS, LINEAR, exponent=1.0)
        palette.set_max(100.0)
        assert palette.get_color(-5.0) == Color.BLACK

    def test_lookup_before_set_max_raises(self):
        with pytest.raises(RuntimeError):
            ExponentialPalette(GRAY_KEYS).get_color(1.0)


# ===========================================================================
# Histogram
# ===========================================================================


class TestHistogram:
    """Tests for the histogram-equalized palette."""

    def prepared(self, values, max_value=4.0):
        palette = HistogramPalette(GRAY_KEYS, LINEAR)
        palette.set_max(max_value)
        palette.prepare(fake_representation(values))
        return palette

    def test_tables(self):
        """Deltas sum to the total and cumulative counts never decrease."""
        palette = self.prepared([0.0, 1.0, 1.0, 2.0, 3.5, 4.0, -1.0])

        assert palette.total == 6
        assert palette.delta.tolist() == [2, 2, 1, 1]
        assert palette.cumulative.tolist() == [0, 2, 4, 5]
        assert int(palette.delta.sum()) == palette.total
        assert np.all(np.diff(palette.cumulative) >= 0)

    def test_lookup(self):
        palette = self.prepared([0.0, 1.0, 1.0, 2.0, 3.5, 4.0, -1.0])

        assert palette.get_color(0.0) == Color.BLACK
        assert palette.get_color(1.5) == Color(0.5, 0.5, 0.5)
        assert palette.get_color(2.0).r == pytest.approx(4.0 / 6.0, abs=1e-3)

    def test_lookup_past_the_table_clamps(self):
        palette = self.prepared([0.0, 1.0, 1.0, 2.0, 3.5])
        # Bucket 3 starts after 4 of 5 samples
        assert palette.get_color(10.0).r == pytest.approx(0.8, abs=1e-3)

    def test_prepare_rebuilds_tables(self):
        palette = self.prepared([0.0, 1.0, 2.0])
        palette.prepare(fake_representation([3.0, 3.0]))
        assert palette.total == 2
        assert palette.delta.tolist() == [0, 0, 0, 2]

    def test_lookup_before_prepare_raises(self):
        palette = HistogramPalette(GRAY_KEYS)
        palette.set_max(4.0)
        with pytest.raises(RuntimeError):
            palette.get_color(1.0)

    def test_prepare_before_set_max_raises(self):
        palette = HistogramPalette(GRAY_KEYS)
        with pytest.raises(RuntimeError):
            palette.prepare(fake_representation([1.0]))

    def test_empty_histogram_raises(self):
        palette = self.prepared([4.0, 9.0])
        with pytest.raises(RuntimeError):
            palette.get_color(1.0)


# ===========================================================================
# Factory and PaletteSpec
# ===========================================================================


def test_create_palette_by_name():
    assert isinstance(create_palette("repeating", GRAY_KEYS), RepeatingPalette)
    assert isinstance(create_palette(PaletteKind.HISTOGRAM, GRAY_KEYS), HistogramPalette)

    palette = create_palette("logarithmic", GRAY_KEYS, base=10.0)
    assert palette.base == 10.0
    palette = create_palette("exponential", GRAY_KEYS, exponent=2.5)
    assert palette.exponent == 2.5


def test_create_palette_unknown_kind():
    with pytest.raises(ValueError, match="Available"):
        create_palette("spiral", GRAY_KEYS)


def test_spec_builds_fresh_palettes():
    """Each build returns an independent palette instance."""
    spec = PaletteSpec(PaletteKind.HISTOGRAM, tuple(GRAY_KEYS), CUBIC)
    first = spec.build()
    second = spec.build()

    assert first is not second
    assert first.timeline is not second.timeline
    assert first.interpolation == CUBIC


def test_spec_survives_pickling():
    """Specs cross process boundaries."""
    spec = PaletteSpec(PaletteKind.LOGARITHMIC, tuple(GRAY_KEYS), LINEAR, base=3.0)
    restored = pickle.loads(pickle.dumps(spec))
    assert restored == spec
    assert restored.build().get_color(50.0) == spec.build().get_color(50.0)
