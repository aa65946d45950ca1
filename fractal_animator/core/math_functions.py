"""
Core mathematical functions for escape-time iteration.

This module maps output pixels (and their subsamples) onto the complex
plane and runs the quadratic escape-time iteration ``z <- z^2 + c`` over
whole sample grids with NumPy, producing either raw iteration counts or
continuous (smoothed) dwell values.
"""

import math
import numpy as np
from typing import List, Tuple
import logging

from .rendering_settings import MultiSampling

logger = logging.getLogger(__name__)

SMOOTH_ESCAPE_RADIUS = 8.0
ESCAPE_RADIUS = 2.0


def compute_pixel_step(zoom_exponent: float, width: int, height: int) -> float:
    """
    Distance in the complex plane between two neighbouring pixels.

    The visible span is 2 units vertically for landscape-ish images and
    3 units horizontally otherwise, divided by ``e^zoom_exponent``.

    Args:
        zoom_exponent: Logarithmic zoom level
        width, height: Image resolution in pixels

    Returns:
        Pixel step size
    """
    scale = math.exp(zoom_exponent)
    if width * 1.5 > height:
        return 2.0 / (scale * height)
    return 3.0 / (scale * width)


class ComplexPlane:
    """Maps pixel coordinates of an image onto a region of the complex plane."""

    def __init__(self, center: complex, pixel_step: float, width: int, height: int):
        """
        Initialize plane mapping.

        Args:
            center: Complex coordinate of the image center
            pixel_step: Complex distance between neighbouring pixels
            width, height: Image resolution in pixels
        """
        if width <= 0 or height <= 0:
            raise ValueError("Width and height must be positive")
        if not pixel_step > 0:
            raise ValueError("pixel_step must be positive")

        self.center = complex(center)
        self.pixel_step = pixel_step
        self.width = width
        self.height = height

    def pixel_to_complex(self, px: float, py: float) -> complex:
        """Convert (possibly fractional) pixel coordinates to a complex number."""
        return complex(
            self.pixel_step * (px - self.width / 2.0) + self.center.real,
            self.pixel_step * (self.height / 2.0 - py) + self.center.imag,
        )

    def create_sample_array(self, sampling: MultiSampling = MultiSampling.NONE) -> np.ndarray:
        """
        Create complex coordinates for every subsample of every pixel.

        Args:
            sampling: Supersampling mode

        Returns:
            Complex array of shape (height, width, samples)
        """
        offsets: List[Tuple[float, float]] = sampling.offsets()
        dx = np.array([o[0] for o in offsets], dtype=np.float64)
        dy = np.array([o[1] for o in offsets], dtype=np.float64)

        xs = np.arange(self.width, dtype=np.float64)[np.newaxis, :, np.newaxis] + dx
        ys = np.arange(self.height, dtype=np.float64)[:, np.newaxis, np.newaxis] + dy

        real = self.pixel_step * (xs - self.width / 2.0) + self.center.real
        imag = self.pixel_step * (self.height / 2.0 - ys) + self.center.imag
        real, imag = np.broadcast_arrays(real, imag)
        return real + 1j * imag


class MandelbrotIterator:
    """Escape-time iteration of the quadratic map."""

    def __init__(self, max_iter: int = 1000, smoothing: bool = False):
        """
        Initialize iterator.

        Args:
            max_iter: Maximum number of iterations
            smoothing: Whether to compute continuous dwell values
        """
        if max_iter <= 0:
            raise ValueError("max_iter must be positive")

        self.max_iter = int(max_iter)
        self.smoothing = smoothing
        self.escape_radius = SMOOTH_ESCAPE_RADIUS if smoothing else ESCAPE_RADIUS
        self.escape_radius_sq = self.escape_radius ** 2

    def iterate(self, c: np.ndarray) -> np.ndarray:
        """
        Compute dwell values for an array of points.

        Points reaching the iteration cap record the cap itself, escaped
        points record their step count or, with smoothing, the normalized
        iteration count.

        Args:
            c: Complex parameter array of any shape

        Returns:
            Float64 array of the same shape
        """
        c = np.asarray(c, dtype=np.complex128)
        z = np.zeros_like(c)
        iterations = np.zeros(c.shape, dtype=np.int64)
        active = np.ones(c.shape, dtype=bool)

        for _ in range(self.max_iter):
            active &= (z.real * z.real + z.imag * z.imag) < self.escape_radius_sq
            if not np.any(active):
                break
            z[active] = z[active] * z[active] + c[active]
            iterations[active] += 1

        logger.debug(f"Iterated {c.size} samples, "
                     f"{int(np.count_nonzero(iterations < self.max_iter))} escaped")

        values = iterations.astype(np.float64)
        if self.smoothing:
            escaped = iterations < self.max_iter
            values[escaped] = self.smooth_values(iterations[escaped], np.abs(z[escaped]))

        return values

    def smooth_values(self, iterations: np.ndarray, magnitudes: np.ndarray) -> np.ndarray:
        """Normalized iteration count ``n + 1 - ln(ln(R) * ln|z|) / ln 2``."""
        compensation = np.log(math.log(self.escape_radius) * np.log(magnitudes)) / math.log(2.0)
        return iterations + 1.0 - compensation

    def iterate_point(self, c: complex) -> float:
        """Compute the dwell value of a single point."""
        return float(self.iterate(np.array([c]))[0])
