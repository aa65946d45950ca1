"""
Multiprocessing backend for rendering animation frames in parallel.

Frames are independent once their configuration is resolved, so each frame
is rendered in its own worker process. Workers receive the resolved
configuration, the rendering settings and a palette recipe, and build a
fresh palette for every frame.
"""

import numpy as np
from typing import Iterable, Iterator, Optional, Tuple
import multiprocessing as mp
import logging
import time
from collections import deque
from dataclasses import dataclass
from concurrent.futures import ProcessPoolExecutor

from ..core.fractal_types import MandelbrotConfiguration
from ..core.rendering_settings import RenderingSettings
from ..rendering.palettes import PaletteSpec

logger = logging.getLogger(__name__)


@dataclass
class FrameTask:
    """Everything a worker needs to render one frame."""
    frame_number: int
    configuration: MandelbrotConfiguration
    settings: RenderingSettings
    palette_spec: PaletteSpec


@dataclass
class FrameResult:
    """Rendered pixels of a single frame."""
    frame_number: int
    pixels: np.ndarray
    processing_time: float


def render_frame(task: FrameTask) -> FrameResult:
    """
    Render a single frame, possibly in a separate process.

    Args:
        task: Frame to render

    Returns:
        FrameResult with uint8 (H, W, 3) pixels
    """
    start_time = time.time()
    palette = task.palette_spec.build()
    pixels = task.configuration.to_image(task.settings, palette)
    return FrameResult(task.frame_number, pixels, time.time() - start_time)


def render_frames_sequential(frames: Iterable[Tuple[int, MandelbrotConfiguration]],
                             settings: RenderingSettings,
                             palette_spec: PaletteSpec) -> Iterator[FrameResult]:
    """Render frames one after another in the current process."""
    for frame_number, configuration in frames:
        result = render_frame(FrameTask(frame_number, configuration, settings, palette_spec))
        logger.debug(f"Frame {frame_number} rendered in {result.processing_time:.2f}s")
        yield result


def render_frames_parallel(frames: Iterable[Tuple[int, MandelbrotConfiguration]],
                           settings: RenderingSettings,
                           palette_spec: PaletteSpec,
                           num_processes: Optional[int] = None,
                           prefetch: Optional[int] = None) -> Iterator[FrameResult]:
    """
    Render frames in a process pool, yielding results in frame order.

    At most ``prefetch`` frames are in flight at any time, so frames are
    pulled from ``frames`` lazily.

    Args:
        frames: ``(frame_number, configuration)`` pairs in order
        settings: Rendering settings shared by all frames
        palette_spec: Palette recipe, built once per frame in the worker
        num_processes: Worker processes (None for optimal count)
        prefetch: Maximum frames in flight (None for twice the workers)

    Returns:
        Iterator of FrameResult in frame order
    """
    if num_processes is None:
        num_processes = get_optimal_process_count()
    num_processes = max(1, num_processes)
    if prefetch is None:
        prefetch = 2 * num_processes
    prefetch = max(1, prefetch)

    logger.info(f"Rendering frames with {num_processes} processes, {prefetch} in flight")

    frame_iter = iter(frames)
    pending = deque()
    completed = 0
    start_time = time.time()

    with ProcessPoolExecutor(max_workers=num_processes) as executor:
        def submit_next() -> bool:
            for frame_number, configuration in frame_iter:
                task = FrameTask(frame_number, configuration, settings, palette_spec)
                pending.append(executor.submit(render_frame, task))
                return True
            return False

        while len(pending) < prefetch and submit_next():
            pass

        while pending:
            result = pending.popleft().result()
            submit_next()
            completed += 1
            logger.debug(f"Frame {result.frame_number} rendered in {result.processing_time:.2f}s")
            yield result

    total_time = time.time() - start_time
    logger.info(f"Parallel rendering complete: {completed} frames in {total_time:.2f}s")


def get_optimal_process_count() -> int:
    """Get optimal number of processes for frame rendering."""
    # Leave one core for system
    return max(1, mp.cpu_count() - 1)
