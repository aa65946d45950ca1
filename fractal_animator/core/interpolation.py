"""
Value interpolation algebra used by timelines and color palettes.

This module defines the interpolation modes (linear, cubic, nearest and
biased easing) and the rules for interpolating every supported value
category: real scalars, integers, booleans, complex numbers, composite
values implementing :class:`Interpolatable` and position-tagged
:class:`Located` values.
"""

import math
import numbers
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any


class InterpolationMode(Enum):
    """Interpolation curve used between two values."""
    LINEAR = "linear"
    CUBIC = "cubic"
    NEAREST = "nearest"
    EASING = "easing"


@dataclass(frozen=True)
class Interpolation:
    """
    An interpolation mode together with its parameters.

    The ``bias`` is only meaningful for :attr:`InterpolationMode.EASING`;
    a bias of 0 makes easing identical to linear interpolation.
    """

    mode: InterpolationMode = InterpolationMode.LINEAR
    bias: float = 0.0

    def ease(self, ratio: float) -> float:
        """Map a linear ratio onto the easing curve."""
        k = math.exp(self.bias) - 1.0
        return (k * ratio + ratio) / (k * ratio + 1.0)

    def interpolate_scalar(self, ratio: float, first: float, second: float) -> float:
        """
        Interpolate between two real numbers.

        Args:
            ratio: Position between ``first`` (0) and ``second`` (1)
            first: Value at ratio 0
            second: Value at ratio 1

        Returns:
            Interpolated value
        """
        if self.mode is InterpolationMode.NEAREST:
            return first if ratio < 0.5 else second
        if self.mode is InterpolationMode.CUBIC:
            difference = first - second
            return (2 * difference * ratio * ratio * ratio
                    - 3 * difference * ratio * ratio
                    + first)
        if self.mode is InterpolationMode.EASING:
            ratio = self.ease(ratio)
        return first + (second - first) * ratio

    def interpolate(self, first: Any, ratio: float, second: Any) -> Any:
        """Interpolate between two values of the same category."""
        return interpolate(self, ratio, first, second)

    def __str__(self) -> str:
        if self.mode is InterpolationMode.EASING:
            return f"easing:{self.bias:g}"
        return self.mode.value

    @classmethod
    def from_name(cls, name: str) -> 'Interpolation':
        """
        Parse an interpolation name.

        Accepted forms are ``linear``, ``cubic``, ``nearest``, ``easing``
        and ``easing:<bias>``.
        """
        text = name.strip().lower()
        mode_name, _, bias_text = text.partition(':')
        try:
            mode = InterpolationMode(mode_name)
        except ValueError:
            available = ', '.join(m.value for m in InterpolationMode)
            raise ValueError(f"Unknown interpolation '{name}'. Available: {available}") from None

        if bias_text and mode is not InterpolationMode.EASING:
            raise ValueError(f"Only easing interpolation takes a bias, got '{name}'")
        bias = float(bias_text) if bias_text else 0.0
        return cls(mode, bias)


LINEAR = Interpolation(InterpolationMode.LINEAR)
CUBIC = Interpolation(InterpolationMode.CUBIC)
NEAREST = Interpolation(InterpolationMode.NEAREST)


def easing(bias: float) -> Interpolation:
    """Create an easing interpolation with the given bias."""
    return Interpolation(InterpolationMode.EASING, float(bias))


class Interpolatable(ABC):
    """Base class for composite values that interpolate themselves."""

    @abstractmethod
    def interpolate(self, interpolation: Interpolation, ratio: float, other: Any) -> Any:
        """
        Interpolate between this value and ``other``.

        Args:
            interpolation: Interpolation to apply
            ratio: Position between ``self`` (0) and ``other`` (1)
            other: Value of the same type

        Returns:
            Interpolated value
        """
        pass


@dataclass(frozen=True)
class Located(Interpolatable):
    """
    A value tagged with its absolute position.

    Interpolating two located values treats the ratio as an absolute
    position and rescales it into the range spanned by both positions.
    """

    value: Any
    position: float

    def local_ratio(self, ratio: float, other: 'Located') -> float:
        """Rescale an absolute position into the range ``[self, other]``."""
        span = other.position - self.position
        if span == 0:
            return 0.5
        return (ratio - self.position) / span

    def interpolate(self, interpolation: Interpolation, ratio: float, other: Any) -> Any:
        if not isinstance(other, Located):
            raise TypeError(f"Cannot interpolate Located with {type(other).__name__}")
        local = self.local_ratio(ratio, other)
        return interpolate(interpolation, local, self.value, other.value)


def interpolate_real(interpolation: Interpolation, ratio: float, first: float, second: float) -> float:
    return float(interpolation.interpolate_scalar(ratio, first, second))


def interpolate_int(interpolation: Interpolation, ratio: float, first: int, second: int) -> int:
    """Interpolate integers, rounding the result to the nearest integer."""
    return int(round(interpolation.interpolate_scalar(ratio, float(first), float(second))))


def interpolate_bool(interpolation: Interpolation, ratio: float, first: bool, second: bool) -> bool:
    """Interpolate flags as 0/1 and threshold the result at one half."""
    return interpolation.interpolate_scalar(ratio, float(first), float(second)) >= 0.5


def interpolate_complex(interpolation: Interpolation, ratio: float,
                        first: complex, second: complex) -> complex:
    """Interpolate the real and imaginary parts independently."""
    first = complex(first)
    second = complex(second)
    return complex(
        interpolation.interpolate_scalar(ratio, first.real, second.real),
        interpolation.interpolate_scalar(ratio, first.imag, second.imag),
    )


def interpolate(interpolation: Interpolation, ratio: float, first: Any, second: Any) -> Any:
    """
    Interpolate between two values of the same category.

    Args:
        interpolation: Interpolation mode to apply
        ratio: Position between ``first`` (0) and ``second`` (1); for
            :class:`Located` values this is an absolute position
        first: First value
        second: Second value

    Returns:
        Interpolated value of the same category as the inputs

    Raises:
        TypeError: If the values cannot be interpolated with each other
    """
    if isinstance(first, Interpolatable):
        return first.interpolate(interpolation, ratio, second)
    if isinstance(first, bool) and isinstance(second, bool):
        return interpolate_bool(interpolation, ratio, first, second)
    if isinstance(first, numbers.Integral) and isinstance(second, numbers.Integral):
        return interpolate_int(interpolation, ratio, int(first), int(second))
    if isinstance(first, numbers.Real) and isinstance(second, numbers.Real):
        return interpolate_real(interpolation, ratio, float(first), float(second))
    if isinstance(first, numbers.Complex) and isinstance(second, numbers.Complex):
        return interpolate_complex(interpolation, ratio, first, second)
    raise TypeError(
        f"Cannot interpolate {type(first).__name__} with {type(second).__name__}"
    )
