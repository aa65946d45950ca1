"""
Main API classes for fractal rendering.

This module provides the high-level interface, combining the fractal
kernel, palettes, animation driver and image export into easy-to-use
classes.
"""

import math
import numpy as np
from typing import Collection, Iterator, Optional, Tuple, Union
from dataclasses import dataclass
from pathlib import Path
import logging
import time

from .core.fractal_types import MandelbrotConfiguration
from .core.interpolation import Interpolation
from .core.rendering_settings import MultiSampling, RenderingSettings, Resolution
from .rendering.coloring import Color, get_preset
from .rendering.image_output import ImageExporter, RenderMetadata
from .rendering.palettes import PaletteKind, PaletteSpec
from .tools.animation import AnimationSequencer, MandelbrotAnimation

logger = logging.getLogger(__name__)


@dataclass
class RenderConfig:
    """Configuration for fractal rendering."""

    # Image parameters
    width: int = 1920
    height: int = 1080
    sampling: str = 'none'  # 'none', 'x2' or 'x4'

    # Fractal parameters
    center: Tuple[float, float] = (-0.5, 0.0)
    zoom_exponent: float = 0.0
    max_iterations: int = 1000
    smoothing: bool = True
    set_color: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    # Coloring
    palette: str = 'scaling'
    color_preset: str = 'fire'
    interpolation: str = 'linear'
    log_base: float = math.e
    exponent: float = 1.0

    # Performance
    num_processes: int = 1

    # Output
    jpeg_quality: int = 95
    save_metadata: bool = True

    def validate(self):
        """Validate configuration parameters."""
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Width and height must be positive")

        if len(self.center) != 2:
            raise ValueError("center must be (real, imag)")

        if len(self.set_color) != 3:
            raise ValueError("set_color must be (r, g, b)")

        if self.num_processes < 1:
            raise ValueError("num_processes must be >= 1")

        if not 1 <= self.jpeg_quality <= 100:
            raise ValueError("jpeg_quality must be between 1 and 100")

        MultiSampling.from_name(self.sampling)
        PaletteKind.from_name(self.palette)
        Interpolation.from_name(self.interpolation)
        get_preset(self.color_preset)
        self.configuration().validate()
        self.palette_spec().build()

    def rendering_settings(self) -> RenderingSettings:
        return RenderingSettings(
            Resolution(self.width, self.height),
            MultiSampling.from_name(self.sampling),
        )

    def configuration(self) -> MandelbrotConfiguration:
        return MandelbrotConfiguration(
            center=complex(*self.center),
            zoom_exponent=float(self.zoom_exponent),
            max_iterations=self.max_iterations,
            smoothing=self.smoothing,
            set_color=Color(*self.set_color),
        )

    def palette_spec(self) -> PaletteSpec:
        return PaletteSpec(
            kind=PaletteKind.from_name(self.palette),
            key_colors=tuple(get_preset(self.color_preset)),
            interpolation=Interpolation.from_name(self.interpolation),
            base=self.log_base,
            exponent=self.exponent,
        )


class FractalRenderer:
    """Main fractal rendering engine."""

    def __init__(self, config: Optional[RenderConfig] = None):
        """
        Initialize fractal renderer.

        Args:
            config: Rendering configuration (uses defaults if None)
        """
        self.config = config or RenderConfig()
        self.config.validate()

        self.settings = self.config.rendering_settings()
        self.palette_spec = self.config.palette_spec()
        self.image_exporter = ImageExporter()

        logger.info(f"FractalRenderer initialized: {self.config.width}x{self.config.height}, "
                    f"sampling={self.config.sampling}, palette={self.config.palette}")

    def render(self, configuration: Optional[MandelbrotConfiguration] = None) -> np.ndarray:
        """
        Render one image.

        Args:
            configuration: Configuration to render (uses the config's if None)

        Returns:
            RGB image array (height, width, 3), uint8
        """
        configuration = configuration or self.config.configuration()
        start_time = time.time()

        logger.info(f"Starting render at {configuration.center}, zoom {configuration.zoom_exponent}")
        image = configuration.to_image(self.settings, self.palette_spec.build())

        logger.info(f"Render complete: {time.time() - start_time:.2f}s")
        return image

    def render_to_file(self, output_path: Union[str, Path],
                       configuration: Optional[MandelbrotConfiguration] = None) -> Path:
        """
        Render one image and save it.

        Args:
            output_path: Output file path (.png, .tif, .tiff, .jpg, .jpeg)
            configuration: Configuration to render (uses the config's if None)

        Returns:
            Path written
        """
        configuration = configuration or self.config.configuration()
        start_time = time.time()
        image = self.render(configuration)

        metadata = None
        if self.config.save_metadata:
            metadata = self._metadata(configuration, time.time() - start_time)
        return self.image_exporter.save_image(image, output_path, metadata, self.config.jpeg_quality)

    def render_animation(self, animation: MandelbrotAnimation,
                         skip: Collection[int] = ()) -> Iterator[Tuple[int, np.ndarray]]:
        """
        Render the frames of an animation lazily and in order.

        Args:
            animation: Animation to render
            skip: Frame numbers to leave out

        Returns:
            Iterator of ``(frame_number, uint8 pixels)``
        """
        sequencer = AnimationSequencer(animation, self.settings, self.palette_spec,
                                       self.config.num_processes)
        return sequencer.render(skip)

    def save_animation(self, animation: MandelbrotAnimation, output_dir: Union[str, Path],
                       resume: bool = True) -> int:
        """
        Render an animation into numbered frame files.

        Args:
            animation: Animation to render
            output_dir: Directory for the frame files
            resume: Skip frames whose file already exists

        Returns:
            Number of frames written
        """
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        skip = set()
        if resume:
            skip = self.image_exporter.existing_frames(output_dir, animation.frames)
            if skip:
                logger.info(f"Resuming: {len(skip)} of {animation.frames} frames already exist")

        written = 0
        start_time = time.time()
        for frame_number, pixels in self.render_animation(animation, skip):
            metadata = None
            if self.config.save_metadata:
                metadata = self._metadata(animation.get_configuration(frame_number), 0.0,
                                          frame_number)
            self.image_exporter.save_frame(pixels, output_dir, frame_number, metadata)
            written += 1

        logger.info(f"Animation complete: {written} frames in {time.time() - start_time:.2f}s")
        return written

    def _metadata(self, configuration: MandelbrotConfiguration, render_time: float,
                  frame_number: Optional[int] = None) -> RenderMetadata:
        return RenderMetadata(
            center=(configuration.center.real, configuration.center.imag),
            zoom_exponent=configuration.zoom_exponent,
            max_iterations=configuration.max_iterations,
            smoothing=configuration.smoothing,
            resolution=(self.config.width, self.config.height),
            sampling=self.config.sampling,
            palette=self.config.palette,
            render_time_seconds=render_time,
            frame_number=frame_number,
            palette_parameters={
                'preset': self.config.color_preset,
                'interpolation': self.config.interpolation,
                'log_base': self.config.log_base,
                'exponent': self.config.exponent,
            },
        )
