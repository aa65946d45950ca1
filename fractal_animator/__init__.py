"""
Mandelbrot rendering and animation library.

This library renders escape-time Mandelbrot images with smoothing and
supersampling, colors them through keyframed palettes and animates every
parameter of the view with keyframe timelines.

Key Features:
- Linear, cubic, nearest and biased easing interpolation
- Append-only keyframe timelines with memoized lookups
- Repeating, scaling, logarithmic, exponential and histogram palettes
- Parallel frame rendering with resumable frame sequences

Example usage:
    >>> from fractal_animator import FractalRenderer, RenderConfig
    >>> renderer = FractalRenderer(RenderConfig(width=640, height=480))
    >>> image = renderer.render()
"""

__version__ = "1.0.0"
__author__ = "Fractal Animator Team"

from fractal_animator.core.interpolation import Interpolation, InterpolationMode
from fractal_animator.core.timeline import Timeline
from fractal_animator.core.rendering_settings import MultiSampling, RenderingSettings, Resolution
from fractal_animator.core.fractal_types import MandelbrotConfiguration, FractalRepresentation
from fractal_animator.rendering.coloring import Color, KeyColor
from fractal_animator.rendering.palettes import PaletteKind, PaletteSpec, create_palette
from fractal_animator.rendering.image_output import ImageExporter
from fractal_animator.tools.animation import AnimationSequencer, MandelbrotAnimation

# Main API classes
from fractal_animator.api import FractalRenderer, RenderConfig

__all__ = [
    "FractalRenderer",
    "RenderConfig",
    "Interpolation",
    "InterpolationMode",
    "Timeline",
    "MultiSampling",
    "RenderingSettings",
    "Resolution",
    "MandelbrotConfiguration",
    "FractalRepresentation",
    "Color",
    "KeyColor",
    "PaletteKind",
    "PaletteSpec",
    "create_palette",
    "ImageExporter",
    "AnimationSequencer",
    "MandelbrotAnimation",
]
