"""
Keyframed Mandelbrot animations.

A :class:`MandelbrotAnimation` holds one timeline per animated
configuration field and resolves a complete
:class:`~fractal_animator.core.fractal_types.MandelbrotConfiguration` for
every frame number. :class:`AnimationSequencer` turns the resolved frames
into rendered pixel grids, sequentially or across worker processes.
"""

from dataclasses import dataclass
from typing import Collection, Iterator, Optional, Tuple
import logging

import numpy as np

from ..core.fractal_types import MandelbrotConfiguration
from ..core.interpolation import Interpolation, LINEAR
from ..core.rendering_settings import RenderingSettings
from ..core.timeline import Timeline
from ..rendering.coloring import Color
from ..rendering.palettes import PaletteSpec
from ..acceleration.multiprocessing import render_frames_parallel, render_frames_sequential

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Frame:
    """A frame number with its resolved configuration."""
    number: int
    configuration: MandelbrotConfiguration


class MandelbrotAnimation:
    """Animation of Mandelbrot parameters over frames ``1..frames``."""

    def __init__(self, frames: int,
                 center: Timeline[complex],
                 zoom_exponent: Timeline[float],
                 max_iterations: Timeline[int],
                 smoothing: Timeline[bool],
                 set_color: Timeline[Color]):
        """
        Initialize animation.

        Args:
            frames: Number of frames
            center: Timeline of the image center
            zoom_exponent: Timeline of the logarithmic zoom
            max_iterations: Timeline of the iteration cap
            smoothing: Timeline of the smoothing flag
            set_color: Timeline of the color of non-escaping points
        """
        if frames < 0:
            raise ValueError("frames must be non-negative")

        self.frames = int(frames)
        self.center = center
        self.zoom_exponent = zoom_exponent
        self.max_iterations = max_iterations
        self.smoothing = smoothing
        self.set_color = set_color

    @classmethod
    def zoom(cls, frames: int,
             start_center: complex, end_center: complex,
             start_zoom: float, end_zoom: float,
             max_iterations: int = 1000,
             smoothing: bool = True,
             set_color: Color = Color.BLACK,
             interpolation: Interpolation = LINEAR) -> 'MandelbrotAnimation':
        """
        Create a zoom from one view to another.

        Center and zoom exponent move from their start values at frame 0
        to their end values at the last frame. Because the zoom is stored
        as an exponent, a linear timeline gives a geometric zoom.
        """
        if frames < 1:
            raise ValueError("A zoom needs at least one frame")

        center = Timeline(0, complex(start_center))
        center.insert(interpolation, frames, complex(end_center))
        zoom_exponent = Timeline(0, float(start_zoom))
        zoom_exponent.insert(interpolation, frames, float(end_zoom))

        return cls(
            frames,
            center,
            zoom_exponent,
            Timeline(0, int(max_iterations)),
            Timeline(0, bool(smoothing)),
            Timeline(0, set_color),
        )

    def get_configuration(self, index: int) -> Optional[MandelbrotConfiguration]:
        """
        Resolve the configuration of a frame.

        Args:
            index: Frame number

        Returns:
            Configuration, or None past the last frame
        """
        if index > self.frames:
            return None

        return MandelbrotConfiguration(
            center=self.center.get(index),
            zoom_exponent=self.zoom_exponent.get(index),
            max_iterations=self.max_iterations.get(index),
            smoothing=self.smoothing.get(index),
            set_color=self.set_color.get(index),
        )

    def frames_iter(self, skip: Collection[int] = ()) -> Iterator[Frame]:
        """
        Iterate frames in order, leaving out frame numbers in ``skip``.

        Args:
            skip: Frame numbers already produced

        Returns:
            Iterator of Frame
        """
        index = 1
        while True:
            configuration = self.get_configuration(index)
            if configuration is None:
                return
            if index not in skip:
                yield Frame(index, configuration)
            index += 1

    def __iter__(self) -> Iterator[Frame]:
        return self.frames_iter()

    def __len__(self) -> int:
        return self.frames


class AnimationSequencer:
    """Renders the frames of an animation lazily and in order."""

    def __init__(self, animation: MandelbrotAnimation, settings: RenderingSettings,
                 palette_spec: PaletteSpec, num_processes: int = 1):
        """
        Initialize sequencer.

        Args:
            animation: Animation to render
            settings: Rendering settings for every frame
            palette_spec: Palette recipe, built once per frame
            num_processes: Worker processes; 1 renders in this process
        """
        self.animation = animation
        self.settings = settings
        self.palette_spec = palette_spec
        self.num_processes = num_processes

    def render(self, skip: Collection[int] = ()) -> Iterator[Tuple[int, np.ndarray]]:
        """
        Render frames.

        Timelines are sampled here; workers only receive resolved
        configurations.

        Args:
            skip: Frame numbers to leave out

        Returns:
            Iterator of ``(frame_number, uint8 pixels)``
        """
        frames = ((frame.number, frame.configuration)
                  for frame in self.animation.frames_iter(skip))

        if self.num_processes > 1:
            results = render_frames_parallel(frames, self.settings, self.palette_spec,
                                             self.num_processes)
        else:
            results = render_frames_sequential(frames, self.settings, self.palette_spec)

        for result in results:
            yield result.frame_number, result.pixels

    def __iter__(self) -> Iterator[Tuple[int, np.ndarray]]:
        return self.render()
