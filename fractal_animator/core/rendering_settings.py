"""
Output resolution and supersampling settings.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Tuple


class MultiSampling(Enum):
    """Number of subsamples evaluated per output pixel."""
    NONE = "none"
    X2 = "x2"
    X4 = "x4"

    @property
    def samples_x(self) -> int:
        return 1 if self is MultiSampling.NONE else 2

    @property
    def samples_y(self) -> int:
        return 2 if self is MultiSampling.X4 else 1

    @property
    def sample_count(self) -> int:
        return self.samples_x * self.samples_y

    def offsets(self) -> List[Tuple[float, float]]:
        """
        Subsample offsets in pixel units.

        Subsamples are spread evenly over the pixel; a single sample sits
        on the pixel coordinate itself.
        """
        nx, ny = self.samples_x, self.samples_y
        xs = [(i + 0.5) / nx - 0.5 for i in range(nx)]
        ys = [(j + 0.5) / ny - 0.5 for j in range(ny)]
        return [(dx, dy) for dy in ys for dx in xs]

    @classmethod
    def from_name(cls, name: str) -> 'MultiSampling':
        try:
            return cls(name.strip().lower())
        except ValueError:
            available = ', '.join(m.value for m in cls)
            raise ValueError(f"Unknown sampling '{name}'. Available: {available}") from None


@dataclass(frozen=True)
class Resolution:
    """Output image size in pixels."""
    width: int
    height: int

    def validate(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Width and height must be positive")


@dataclass(frozen=True)
class RenderingSettings:
    """Resolution and supersampling used to compute a fractal."""

    resolution: Resolution = field(default_factory=lambda: Resolution(1920, 1080))
    sampling: MultiSampling = MultiSampling.NONE

    def __post_init__(self):
        self.resolution.validate()

    @property
    def width(self) -> int:
        return self.resolution.width

    @property
    def height(self) -> int:
        return self.resolution.height

    def to_dict(self) -> Dict[str, Any]:
        return {
            'width': self.width,
            'height': self.height,
            'sampling': self.sampling.value,
        }
