"""
Colors, key colors and built-in key color presets.

This module provides the clamped RGB :class:`Color` value used throughout
rendering, the :class:`KeyColor` seeds that palettes are built from, and a
set of named presets (including any matplotlib colormap).
"""

import numpy as np
from typing import Dict, Iterable, List, Sequence, Tuple
from dataclasses import dataclass
import logging

import matplotlib

from ..core.interpolation import Interpolatable, Interpolation

logger = logging.getLogger(__name__)


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


@dataclass(frozen=True)
class Color(Interpolatable):
    """RGB color with channels clamped to [0, 1]."""
    r: float = 1.0
    g: float = 1.0
    b: float = 1.0

    def __post_init__(self):
        """Clamp RGB values into range."""
        object.__setattr__(self, 'r', _clamp(self.r))
        object.__setattr__(self, 'g', _clamp(self.g))
        object.__setattr__(self, 'b', _clamp(self.b))

    def to_tuple(self) -> Tuple[float, float, float]:
        """Convert to RGB tuple."""
        return (self.r, self.g, self.b)

    def to_rgb(self) -> Tuple[int, int, int]:
        """Convert to 8-bit RGB tuple."""
        return (int(self.r * 255), int(self.g * 255), int(self.b * 255))

    def to_rgbf32(self) -> np.ndarray:
        """Convert to a float32 RGB triple."""
        return np.array(self.to_tuple(), dtype=np.float32)

    def mix(self, other: 'Color') -> 'Color':
        """Midpoint of two colors."""
        return Color(
            (self.r + other.r) / 2,
            (self.g + other.g) / 2,
            (self.b + other.b) / 2,
        )

    @staticmethod
    def average(colors: Iterable['Color']) -> 'Color':
        """
        Average a collection or stream of colors.

        Args:
            colors: Any iterable of colors, consumed once

        Returns:
            Channel-wise mean color
        """
        count = 0
        r = g = b = 0.0
        for color in colors:
            r += color.r
            g += color.g
            b += color.b
            count += 1

        if count == 0:
            raise ValueError("Cannot average an empty collection of colors")
        return Color(r / count, g / count, b / count)

    def interpolate(self, interpolation: Interpolation, ratio: float, other: 'Color') -> 'Color':
        if not isinstance(other, Color):
            raise TypeError(f"Cannot interpolate Color with {type(other).__name__}")
        return Color(
            interpolation.interpolate_scalar(ratio, self.r, other.r),
            interpolation.interpolate_scalar(ratio, self.g, other.g),
            interpolation.interpolate_scalar(ratio, self.b, other.b),
        )

    @classmethod
    def from_hex(cls, value: str) -> 'Color':
        """Create a color from ``#rrggbb``."""
        text = value.strip().lstrip('#')
        if len(text) != 6:
            raise ValueError(f"Invalid hex color: {value}")
        return cls(*(int(text[i:i + 2], 16) / 255.0 for i in (0, 2, 4)))


Color.BLACK = Color(0.0, 0.0, 0.0)
Color.WHITE = Color(1.0, 1.0, 1.0)
Color.RED = Color(1.0, 0.0, 0.0)
Color.GREEN = Color(0.0, 1.0, 0.0)
Color.BLUE = Color(0.0, 0.0, 1.0)
Color.CYAN = Color(0.0, 1.0, 1.0)
Color.MAGENTA = Color(1.0, 0.0, 1.0)
Color.YELLOW = Color(1.0, 1.0, 0.0)

NAMED_COLORS: Dict[str, Color] = {
    'black': Color.BLACK,
    'white': Color.WHITE,
    'red': Color.RED,
    'green': Color.GREEN,
    'blue': Color.BLUE,
    'cyan': Color.CYAN,
    'magenta': Color.MAGENTA,
    'yellow': Color.YELLOW,
}


def parse_color(value: str) -> Color:
    """Parse a color name, ``#rrggbb`` or ``r,g,b`` with channels in [0, 1]."""
    text = value.strip().lower()
    if text in NAMED_COLORS:
        return NAMED_COLORS[text]
    if text.startswith('#'):
        return Color.from_hex(text)

    parts = text.split(',')
    if len(parts) != 3:
        raise ValueError(f"Invalid color '{value}': use a name, #rrggbb or r,g,b")
    return Color(*(float(p) for p in parts))


@dataclass(frozen=True)
class KeyColor:
    """A color anchored at a position on the 0-100 palette scale."""
    position: float
    color: Color


def evenly_spaced(colors: Sequence[Color], span: float = 100.0) -> List[KeyColor]:
    """
    Spread colors evenly over ``[0, span]``.

    Args:
        colors: Colors in palette order
        span: Position of the last color

    Returns:
        Key colors
    """
    if len(colors) == 1:
        return [KeyColor(0.0, colors[0])]
    step = span / (len(colors) - 1)
    return [KeyColor(i * step, color) for i, color in enumerate(colors)]


def key_colors_from_matplotlib(cmap_name: str, n_samples: int = 32) -> List[KeyColor]:
    """Sample a matplotlib colormap into evenly spaced key colors."""
    if n_samples < 1:
        raise ValueError("n_samples must be >= 1")
    try:
        cmap = matplotlib.colormaps[cmap_name]
    except KeyError:
        raise ValueError(f"Unknown matplotlib colormap '{cmap_name}'") from None

    t_values = np.linspace(0, 1, n_samples)
    colors = [Color(*cmap(t)[:3]) for t in t_values]
    return evenly_spaced(colors)


_PRESETS: Dict[str, List[Color]] = {
    'hot': [
        Color(0, 0, 0),      # Black
        Color(1, 0, 0),      # Red
        Color(1, 1, 0),      # Yellow
        Color(1, 1, 1),      # White
    ],
    'cool': [
        Color(0, 0, 0),      # Black
        Color(0, 0, 1),      # Blue
        Color(0, 1, 1),      # Cyan
        Color(1, 1, 1),      # White
    ],
    'gray': [
        Color(0, 0, 0),
        Color(1, 1, 1),
    ],
    'fire': [
        Color(0, 0, 0),          # Black
        Color(0.5, 0, 0),        # Dark red
        Color(1, 0, 0),          # Red
        Color(1, 0.5, 0),        # Orange
        Color(1, 1, 0),          # Yellow
        Color(1, 1, 1),          # White
    ],
    'ocean': [
        Color(0, 0, 0.2),        # Deep blue
        Color(0, 0, 0.8),        # Blue
        Color(0, 0.5, 1),        # Light blue
        Color(0, 1, 1),          # Cyan
        Color(0.5, 1, 1),        # Light cyan
        Color(1, 1, 1),          # White
    ],
    'rainbow': [
        Color(1, 0, 0),      # Red
        Color(1, 0.5, 0),    # Orange
        Color(1, 1, 0),      # Yellow
        Color(0, 1, 0),      # Green
        Color(0, 1, 1),      # Cyan
        Color(0, 0, 1),      # Blue
        Color(0.5, 0, 1),    # Purple
    ],
}


def list_presets() -> List[str]:
    """Names of the built-in key color presets."""
    return list(_PRESETS.keys())


def get_preset(name: str, n_samples: int = 32) -> List[KeyColor]:
    """
    Get key colors for a named preset.

    Built-in presets are tried first, then matplotlib colormaps.

    Args:
        name: Preset or matplotlib colormap name
        n_samples: Samples taken from a matplotlib colormap

    Returns:
        Key colors spread over the 0-100 palette scale
    """
    if name in _PRESETS:
        return evenly_spaced(_PRESETS[name])
    if name in matplotlib.colormaps:
        logger.debug(f"Using matplotlib colormap {name} as key colors")
        return key_colors_from_matplotlib(name, n_samples)

    available = ', '.join(_PRESETS.keys())
    raise ValueError(f"Unknown color preset '{name}'. Available: {available} "
                     f"or any matplotlib colormap")
