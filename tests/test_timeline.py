"""Unit tests for keyframe timelines.

Covers boundary clamping, per-segment interpolation, the memo cache
surviving appends, and the builder/copy helpers.
"""
import pytest

from fractal_animator.core.interpolation import CUBIC, LINEAR, NEAREST
from fractal_animator.core.timeline import Timeline


# ===========================================================================
# Lookup
# ===========================================================================


class TestLookup:
    """Tests for Timeline.get."""

    def test_single_keyframe_returns_its_value_everywhere(self):
        """With one keyframe min == max and every query returns its value."""
        timeline = Timeline(10, 0)
        for position in (0, 5, 10, 30):
            assert timeline.get(position) == 0
        assert timeline.min_position == timeline.max_position == 10

    def test_linear_segment(self):
        """A linear segment interpolates between its keyframes."""
        timeline = Timeline(10, 0)
        timeline.insert(LINEAR, 10, 100)

        assert timeline.get(0) == 0
        assert timeline.get(5) == 0
        assert timeline.get(10) == 0
        assert timeline.get(15) == 50
        assert timeline.get(20) == 100
        assert timeline.get(30) == 100

    def test_append_keeps_cache_valid(self):
        """Values cached before an append stay correct afterwards."""
        timeline = Timeline(10, 0)
        timeline.insert(LINEAR, 10, 100)
        assert timeline.get(15) == 50
        assert 15 in timeline.cached_positions()

        timeline.insert(CUBIC, 20, 50)

        assert timeline.get(0) == 0
        assert timeline.get(10) == 0
        assert timeline.get(15) == 50
        assert timeline.get(20) == 100
        assert timeline.get(23) == 97
        assert timeline.get(30) == 75
        assert timeline.get(40) == 50
        assert 15 in timeline.cached_positions()

    def test_each_segment_uses_its_own_mode(self):
        """Segments keep the interpolation they were inserted with."""
        timeline = Timeline(0, 0.0)
        timeline.insert(NEAREST, 10, 10.0)
        timeline.insert(LINEAR, 10, 20.0)

        assert timeline.get(4) == 0.0
        assert timeline.get(6) == 10.0
        assert timeline.get(15) == pytest.approx(15.0)

    def test_complex_values(self):
        """Timelines of complex values interpolate component-wise."""
        timeline = Timeline(0, 0j)
        timeline.insert(LINEAR, 4, 4 + 8j)
        assert timeline.get(1) == pytest.approx(1 + 2j)


# ===========================================================================
# Structure
# ===========================================================================


def test_bounds_grow_with_inserts():
    """The minimum stays fixed while the maximum moves with each insert."""
    timeline = Timeline(10, 0)
    assert (timeline.min_position, timeline.max_position) == (10, 10)
    timeline.insert(LINEAR, 10, 100)
    assert (timeline.min_position, timeline.max_position) == (10, 20)
    timeline.insert(CUBIC, 20, 50)
    assert (timeline.min_position, timeline.max_position) == (10, 40)
    assert len(timeline) == 3
    assert list(timeline.keyframes()) == [(10, 0), (20, 100), (40, 50)]


def test_first_and_last():
    """first and last expose the boundary values."""
    timeline = Timeline.from_keyframes(0, 1.0, [(LINEAR, 5, 2.0), (LINEAR, 5, 3.0)])
    assert timeline.first == 1.0
    assert timeline.last == 3.0
    assert timeline.max_position == 10


def test_invalid_lengths_raise():
    """Non-positive segment lengths and negative positions raise ValueError."""
    timeline = Timeline(0, 0.0)
    with pytest.raises(ValueError):
        timeline.insert(LINEAR, 0, 1.0)
    with pytest.raises(ValueError):
        timeline.insert(LINEAR, -3, 1.0)
    with pytest.raises(ValueError):
        Timeline(-1, 0.0)


def test_copy_has_independent_cache():
    """A copy shares keyframes but starts with an empty cache."""
    timeline = Timeline(0, 0.0)
    timeline.insert(LINEAR, 10, 10.0)
    timeline.get(3)

    clone = timeline.copy()
    assert clone.cached_positions() == []
    assert clone.get(3) == pytest.approx(3.0)

    clone.insert(LINEAR, 10, 0.0)
    assert timeline.max_position == 10
    assert clone.max_position == 20
