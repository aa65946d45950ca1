"""
Color palettes mapping iteration values to colors.

Every palette is backed by a :class:`~fractal_animator.core.timeline.Timeline`
of colors built from a list of key colors. Key color positions live on a
0-100 scale and are stored in the timeline multiplied by
:data:`PRECISION_FACTOR`.

Five strategies are available:

- repeating: the palette loops over the iteration range
- scaling: the palette is stretched over the iteration cap
- logarithmic: log-spaced bands
- exponential: a power warp of the normalized iteration value
- histogram: equalizes colors over the distribution of the whole frame
"""

import math
import sys
import numpy as np
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging

from ..core.interpolation import Interpolation, LINEAR
from ..core.timeline import Timeline
from .coloring import Color, KeyColor

logger = logging.getLogger(__name__)

PRECISION_FACTOR = 100.0


def to_position(value: float) -> int:
    """
    Convert a float to a timeline position.

    Truncates toward zero; negative and NaN values become 0 and infinity
    becomes the largest position.
    """
    if math.isnan(value) or value <= 0:
        return 0
    if math.isinf(value):
        return sys.maxsize
    return int(value)


def _fmod(x: float, y: float) -> float:
    if math.isinf(x) or y == 0:
        return math.nan
    return math.fmod(x, y)


def _log(x: float, base: float) -> float:
    if math.isnan(x) or x < 0:
        return math.nan
    if x == 0:
        return -math.inf
    return math.log(x) / math.log(base)


def _pow(x: float, y: float) -> float:
    if math.isnan(x) or math.isnan(y):
        return math.nan
    if x < 0 and not float(y).is_integer():
        return math.nan
    try:
        return math.pow(x, y)
    except OverflowError:
        return math.inf
    except ZeroDivisionError:
        return math.inf


def timeline_from_key_colors(key_colors: Sequence[KeyColor],
                             interpolation: Interpolation = LINEAR) -> Timeline[Color]:
    """
    Build a color timeline from key colors.

    Key colors are sorted by position. When several key colors land on the
    same timeline position the last one wins.

    Args:
        key_colors: At least one key color
        interpolation: Interpolation used between neighbouring key colors

    Returns:
        Timeline of colors
    """
    if not key_colors:
        raise ValueError("A palette needs at least one key color")

    keyed = sorted(
        ((to_position(k.position * PRECISION_FACTOR), k.color) for k in key_colors),
        key=lambda item: item[0],
    )
    collapsed: List[Tuple[int, Color]] = []
    for position, color in keyed:
        if collapsed and collapsed[-1][0] == position:
            logger.debug(f"Key colors share position {position}, keeping the last")
            collapsed[-1] = (position, color)
        else:
            collapsed.append((position, color))

    first_position, first_color = collapsed[0]
    timeline = Timeline(first_position, first_color)
    previous = first_position
    for position, color in collapsed[1:]:
        timeline.insert(interpolation, position - previous, color)
        previous = position
    return timeline


class ColorPalette(ABC):
    """Base class for palettes."""

    def __init__(self, key_colors: Sequence[KeyColor], interpolation: Interpolation = LINEAR):
        """
        Initialize palette.

        Args:
            key_colors: Key colors on the 0-100 scale
            interpolation: Interpolation between key colors
        """
        self.key_colors = list(key_colors)
        self.interpolation = interpolation
        self.timeline = timeline_from_key_colors(self.key_colors, interpolation)

    def set_max(self, max_value: float) -> None:
        """Calibrate to the iteration cap. Only scale-dependent palettes use it."""
        pass

    def prepare(self, representation: Any) -> None:
        """Inspect a whole representation before lookups. Only histograms use it."""
        pass

    @abstractmethod
    def get_color(self, index: float) -> Color:
        """
        Get the color for an iteration value.

        Args:
            index: Raw (possibly smoothed) iteration value

        Returns:
            Color from the palette
        """
        pass

    @property
    def max_position(self) -> int:
        return self.timeline.max_position

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(key_colors={len(self.key_colors)}, "
                f"interpolation={self.interpolation})")


class RepeatingPalette(ColorPalette):
    """Loops over the key colors as iterations grow."""

    def get_color(self, index: float) -> Color:
        position = _fmod(index * PRECISION_FACTOR, self.max_position + 1)
        return self.timeline.get(to_position(position))


class ScalingPalette(ColorPalette):
    """Stretches the key colors over ``[0, scale]``."""

    def __init__(self, key_colors: Sequence[KeyColor], interpolation: Interpolation = LINEAR):
        super().__init__(key_colors, interpolation)
        self.scale = 1.0

    def set_max(self, max_value: float) -> None:
        if not max_value > 0:
            raise ValueError("Maximum must be positive")
        self.scale = float(max_value)

    def get_color(self, index: float) -> Color:
        position = index * 100.0 * PRECISION_FACTOR / self.scale
        return self.timeline.get(to_position(position))


class LogarithmicPalette(ColorPalette):
    """Log-spaced bands: ``frac(log_base(index / n + 1)) * n``."""

    def __init__(self, key_colors: Sequence[KeyColor], interpolation: Interpolation = LINEAR,
                 base: float = math.e):
        super().__init__(key_colors, interpolation)
        if not base > 0 or base == 1:
            raise ValueError("Logarithm base must be positive and not 1")
        self.base = float(base)

    def get_color(self, index: float) -> Color:
        n = float(self.max_position)
        if n == 0:
            return self.timeline.first

        factor = _fmod(_log(index * PRECISION_FACTOR / n + 1.0, self.base), 1.0)
        return self.timeline.get(to_position(factor * n))


class ExponentialPalette(ColorPalette):
    """Power warp: ``((index / max) ^ exponent * n) ^ 1.5 mod (n + 1)``."""

    def __init__(self, key_colors: Sequence[KeyColor], interpolation: Interpolation = LINEAR,
                 exponent: float = 1.0):
        super().__init__(key_colors, interpolation)
        self.exponent = float(exponent)
        self.max_iterations: Optional[float] = None

    def set_max(self, max_value: float) -> None:
        if not max_value > 0:
            raise ValueError("Maximum must be positive")
        self.max_iterations = float(max_value)

    def get_color(self, index: float) -> Color:
        if self.max_iterations is None:
            raise RuntimeError("set_max() must be called before get_color()")

        n = float(self.max_position)
        warped = _pow(_pow(index / self.max_iterations, self.exponent) * n, 1.5)
        return self.timeline.get(to_position(_fmod(warped, n + 1.0)))


class HistogramPalette(ColorPalette):
    """
    Histogram-equalized palette.

    :meth:`prepare` counts every raw sample of a representation into
    integer buckets ``[0, max)``. Lookups then map an iteration value to
    the share of samples below it, so colors are spread evenly over the
    pixels of the frame.
    """

    def __init__(self, key_colors: Sequence[KeyColor], interpolation: Interpolation = LINEAR):
        super().__init__(key_colors, interpolation)
        self.max_iterations: Optional[float] = None
        self.total = 0
        self.cumulative: Optional[np.ndarray] = None
        self.delta: Optional[np.ndarray] = None

    def set_max(self, max_value: float) -> None:
        if not max_value > 0:
            raise ValueError("Maximum must be positive")
        self.max_iterations = float(max_value)

    def prepare(self, representation: Any) -> None:
        """
        Build the histogram tables from every sample of ``representation``.

        Negative and NaN samples fall into bucket 0; samples at or above
        the maximum are not counted.
        """
        if self.max_iterations is None:
            raise RuntimeError("set_max() must be called before prepare()")

        bucket_count = to_position(self.max_iterations)
        values = np.asarray(representation.iterations, dtype=np.float64).ravel()
        values = np.where(np.isnan(values) | (values < 0), 0.0, values)
        buckets = values[values < bucket_count].astype(np.int64)

        self.delta = np.bincount(buckets, minlength=bucket_count)[:bucket_count].astype(np.int64)
        totals = np.cumsum(self.delta)
        self.cumulative = np.concatenate(([0], totals[:-1])).astype(np.int64)
        self.total = int(totals[-1]) if bucket_count else 0

        logger.debug(f"Histogram prepared over {values.size} samples, {self.total} counted")

    def get_color(self, index: float) -> Color:
        if self.cumulative is None:
            raise RuntimeError("prepare() must be called before get_color()")
        if self.total == 0:
            raise RuntimeError("Histogram is empty: no samples below the maximum")

        bucket = min(to_position(index), len(self.cumulative) - 1)
        fraction = _fmod(index, 1.0)
        factor = ((self.cumulative[bucket] + fraction * self.delta[bucket])
                  / self.total * PRECISION_FACTOR)
        return self.timeline.get(to_position(factor * 100.0))


class PaletteKind(Enum):
    """Available palette strategies."""
    REPEATING = "repeating"
    SCALING = "scaling"
    LOGARITHMIC = "logarithmic"
    EXPONENTIAL = "exponential"
    HISTOGRAM = "histogram"

    @classmethod
    def from_name(cls, name: str) -> 'PaletteKind':
        try:
            return cls(name.strip().lower())
        except ValueError:
            available = ', '.join(k.value for k in cls)
            raise ValueError(f"Unknown palette '{name}'. Available: {available}") from None


_PALETTES: Dict[PaletteKind, type] = {
    PaletteKind.REPEATING: RepeatingPalette,
    PaletteKind.SCALING: ScalingPalette,
    PaletteKind.LOGARITHMIC: LogarithmicPalette,
    PaletteKind.EXPONENTIAL: ExponentialPalette,
    PaletteKind.HISTOGRAM: HistogramPalette,
}


def create_palette(kind, key_colors: Sequence[KeyColor],
                   interpolation: Interpolation = LINEAR, **params) -> ColorPalette:
    """
    Create a palette of the given kind.

    Args:
        kind: PaletteKind or its name
        key_colors: Key colors on the 0-100 scale
        interpolation: Interpolation between key colors
        **params: ``base`` for logarithmic, ``exponent`` for exponential

    Returns:
        Palette instance
    """
    if not isinstance(kind, PaletteKind):
        kind = PaletteKind.from_name(kind)

    palette_class = _PALETTES[kind]
    if kind is PaletteKind.LOGARITHMIC:
        return palette_class(key_colors, interpolation, base=params.get('base', math.e))
    if kind is PaletteKind.EXPONENTIAL:
        return palette_class(key_colors, interpolation, exponent=params.get('exponent', 1.0))
    return palette_class(key_colors, interpolation)


@dataclass(frozen=True)
class PaletteSpec:
    """
    Picklable recipe for a palette.

    Palettes hold lookup caches and histogram tables, so every render
    process builds its own instance from a PaletteSpec.
    """

    kind: PaletteKind = PaletteKind.SCALING
    key_colors: Tuple[KeyColor, ...] = field(default_factory=tuple)
    interpolation: Interpolation = LINEAR
    base: float = math.e
    exponent: float = 1.0

    def build(self) -> ColorPalette:
        return create_palette(self.kind, self.key_colors, self.interpolation,
                              base=self.base, exponent=self.exponent)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'kind': self.kind.value,
            'key_colors': [[k.position, *k.color.to_tuple()] for k in self.key_colors],
            'interpolation': str(self.interpolation),
            'base': self.base,
            'exponent': self.exponent,
        }
