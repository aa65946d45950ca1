"""
Mandelbrot configuration and computed fractal representations.

This module defines the resolved Mandelbrot configuration, the colorizer
hook that decides how raw iteration values are turned into colors, and
the representation object holding every subsample value of a computed
frame until it is colorized.
"""

import math
import numpy as np
from typing import Any, Dict, Iterator, List
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import logging

from .math_functions import (
    ComplexPlane, MandelbrotIterator, compute_pixel_step,
    ESCAPE_RADIUS, SMOOTH_ESCAPE_RADIUS,
)
from .rendering_settings import RenderingSettings, Resolution
from ..rendering.coloring import Color
from ..rendering.palettes import ColorPalette

logger = logging.getLogger(__name__)


class Colorizer(ABC):
    """Turns raw iteration values into colors through a palette."""

    @abstractmethod
    def setup_palette(self, palette: ColorPalette) -> None:
        """Calibrate the palette once before a colorization pass."""
        pass

    def get_color(self, iterations: float, palette: ColorPalette) -> Color:
        return palette.get_color(iterations)


@dataclass
class MandelbrotConfiguration(Colorizer):
    """Fully resolved parameters of one Mandelbrot image."""

    center: complex = complex(-0.5, 0.0)
    zoom_exponent: float = 0.0
    max_iterations: int = 1000
    smoothing: bool = True
    set_color: Color = field(default_factory=lambda: Color.BLACK)

    def __post_init__(self):
        self.center = complex(self.center)

    def validate(self) -> None:
        """Validate configuration values."""
        if isinstance(self.max_iterations, bool) or not isinstance(self.max_iterations, int):
            raise ValueError("max_iterations must be an integer")
        if self.max_iterations <= 0:
            raise ValueError("max_iterations must be positive")
        if not math.isfinite(self.zoom_exponent):
            raise ValueError("zoom_exponent must be finite")
        if not (math.isfinite(self.center.real) and math.isfinite(self.center.imag)):
            raise ValueError("center must be finite")
        if not isinstance(self.set_color, Color):
            raise ValueError("set_color must be a Color")

    @property
    def escape_radius(self) -> float:
        return SMOOTH_ESCAPE_RADIUS if self.smoothing else ESCAPE_RADIUS

    def pixel_step(self, resolution: Resolution) -> float:
        return compute_pixel_step(self.zoom_exponent, resolution.width, resolution.height)

    def setup_palette(self, palette: ColorPalette) -> None:
        palette.set_max(float(self.max_iterations))

    def get_color(self, iterations: float, palette: ColorPalette) -> Color:
        """Points that never escaped get the set color."""
        if iterations == self.max_iterations:
            return self.set_color
        return palette.get_color(iterations)

    def calculate(self, settings: RenderingSettings) -> 'FractalRepresentation':
        """
        Compute iteration values for every subsample of every pixel.

        Args:
            settings: Resolution and supersampling to render with

        Returns:
            FractalRepresentation holding the raw values
        """
        self.validate()
        plane = ComplexPlane(
            self.center,
            self.pixel_step(settings.resolution),
            settings.width,
            settings.height,
        )
        iterator = MandelbrotIterator(self.max_iterations, self.smoothing)

        logger.debug(f"Computing {settings.width}x{settings.height} "
                     f"({settings.sampling.value}) at {self.center}, zoom {self.zoom_exponent}")
        iterations = iterator.iterate(plane.create_sample_array(settings.sampling))
        return FractalRepresentation(self, settings, iterations)

    def to_float_image(self, settings: RenderingSettings, palette: ColorPalette) -> np.ndarray:
        """Compute and colorize into a float32 (H, W, 3) array."""
        return self.calculate(settings).colorize_float(palette)

    def to_image(self, settings: RenderingSettings, palette: ColorPalette) -> np.ndarray:
        """Compute and colorize into a uint8 (H, W, 3) array."""
        return self.calculate(settings).colorize(palette)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            'center': [self.center.real, self.center.imag],
            'zoom_exponent': self.zoom_exponent,
            'max_iterations': self.max_iterations,
            'smoothing': self.smoothing,
            'set_color': list(self.set_color.to_tuple()),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MandelbrotConfiguration':
        """Create configuration from dictionary."""
        data = dict(data)
        if 'center' in data:
            center = data['center']
            if isinstance(center, (list, tuple)):
                center = complex(center[0], center[1])
            data['center'] = complex(center)
        if 'set_color' in data and not isinstance(data['set_color'], Color):
            data['set_color'] = Color(*data['set_color'])
        return cls(**data)


class FractalPoint:
    """Raw iteration values of every subsample of one output pixel."""

    def __init__(self, iterations: List[float]):
        self.iterations = list(iterations)

    def get_color(self, colorizer: Colorizer, palette: ColorPalette) -> Color:
        """Average subsample colors in color space."""
        return Color.average(colorizer.get_color(value, palette) for value in self.iterations)

    def __repr__(self) -> str:
        return f"FractalPoint({self.iterations})"


class FractalRepresentation:
    """
    Computed but not yet colorized fractal.

    Holds a float64 array of shape (height, width, samples) together with
    the configuration and rendering settings that produced it.
    """

    def __init__(self, colorizer: Colorizer, settings: RenderingSettings, iterations: np.ndarray):
        """
        Initialize representation.

        Args:
            colorizer: Configuration used to color the values
            settings: Rendering settings used to compute the values
            iterations: Raw values, shape (height, width, samples)
        """
        expected = (settings.height, settings.width, settings.sampling.sample_count)
        if iterations.shape != expected:
            raise ValueError(f"Iteration array has shape {iterations.shape}, expected {expected}")

        self.colorizer = colorizer
        self.settings = settings
        self.iterations = iterations

    @property
    def configuration(self) -> Colorizer:
        return self.colorizer

    def point(self, x: int, y: int) -> FractalPoint:
        """Subsample values of the pixel at column ``x`` and row ``y``."""
        return FractalPoint(self.iterations[y, x].tolist())

    def iteration_values(self) -> Iterator[float]:
        """Iterate over every raw subsample value."""
        for value in self.iterations.flat:
            yield float(value)

    def _colorize(self, palette: ColorPalette) -> np.ndarray:
        self.colorizer.setup_palette(palette)
        palette.prepare(self)

        # Each distinct value is looked up once
        unique, inverse = np.unique(self.iterations, return_inverse=True)
        table = np.array(
            [self.colorizer.get_color(float(value), palette).to_tuple() for value in unique],
            dtype=np.float64,
        ).reshape(-1, 3)
        colors = table[inverse.reshape(self.iterations.shape)]

        logger.debug(f"Colorized {self.iterations.size} samples from {len(unique)} distinct values")
        return colors.mean(axis=2)

    def colorize_float(self, palette: ColorPalette) -> np.ndarray:
        """
        Colorize into a float32 (H, W, 3) array.

        The palette is calibrated and prepared over this representation
        before the first lookup.
        """
        return self._colorize(palette).astype(np.float32)

    def colorize(self, palette: ColorPalette) -> np.ndarray:
        """Colorize into a uint8 (H, W, 3) array."""
        return (self._colorize(palette) * 255).astype(np.uint8)
