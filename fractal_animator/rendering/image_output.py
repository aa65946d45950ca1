"""
Image export for rendered fractals and animation frames.

Rendered pixel grids are written as PNG (metadata in text chunks), TIFF
(metadata in the image description) or JPEG (metadata in a companion
JSON file). Animation frames are written as numbered PNG files.
"""

import numpy as np
from typing import Dict, Any, Optional, Union, Tuple
from pathlib import Path
from dataclasses import dataclass, asdict, field
import json
import logging
from datetime import datetime

from PIL import Image, PngImagePlugin, TiffImagePlugin

from .. import __version__

logger = logging.getLogger(__name__)

METADATA_KEY = "FractalMetadata"
IMAGE_DESCRIPTION_TAG = 270


@dataclass
class RenderMetadata:
    """Metadata for fractal renders."""

    # Fractal parameters
    center: Tuple[float, float]
    zoom_exponent: float
    max_iterations: int
    smoothing: bool

    # Rendering parameters
    resolution: Tuple[int, int]  # width, height
    sampling: str
    palette: str

    render_time_seconds: float = 0.0
    frame_number: Optional[int] = None

    # Generation info
    timestamp: str = ""
    software_version: str = __version__

    palette_parameters: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Set default timestamp if not provided."""
        if not self.timestamp:
            self.timestamp = datetime.now().isoformat()
        self.center = tuple(self.center)
        self.resolution = tuple(self.resolution)

    def to_dict(self) -> Dict[str, Any]:
        """Convert metadata to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RenderMetadata':
        """Create metadata from dictionary."""
        return cls(**data)

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> 'RenderMetadata':
        """Create metadata from JSON string."""
        return cls.from_dict(json.loads(json_str))


class ImageExporter:
    """Image export with metadata support."""

    def __init__(self, frame_prefix: str = "frame", padding: int = 6):
        """
        Initialize image exporter.

        Args:
            frame_prefix: File name prefix of animation frames
            padding: Number of digits for frame numbering
        """
        self.frame_prefix = frame_prefix
        self.padding = padding
        self.supported_formats = {
            '.png': self._save_png,
            '.tiff': self._save_tiff,
            '.tif': self._save_tiff,
            '.jpg': self._save_jpeg,
            '.jpeg': self._save_jpeg,
        }

    def save_image(self, image_array: np.ndarray, filepath: Union[str, Path],
                   metadata: Optional[RenderMetadata] = None,
                   quality: int = 95) -> Path:
        """
        Save RGB image array to file with metadata.

        Args:
            image_array: RGB image array (height, width, 3), uint8 or float 0-1
            filepath: Output file path
            metadata: Render metadata to embed
            quality: JPEG quality (1-100)

        Returns:
            Path written
        """
        filepath = Path(filepath)
        suffix = filepath.suffix.lower()

        if suffix not in self.supported_formats:
            supported = ', '.join(self.supported_formats.keys())
            raise ValueError(f"Unsupported format '{suffix}'. Supported: {supported}")

        image_array = self._prepare_image_array(image_array)
        pil_image = Image.fromarray(image_array)

        filepath.parent.mkdir(parents=True, exist_ok=True)
        self.supported_formats[suffix](pil_image, filepath, metadata, quality)

        logger.info(f"Saved image: {filepath} ({pil_image.size[0]}x{pil_image.size[1]})")
        return filepath

    def _prepare_image_array(self, image_array: np.ndarray) -> np.ndarray:
        """Validate image array and convert it to 8-bit."""
        if image_array.ndim != 3 or image_array.shape[2] != 3:
            raise ValueError(f"Expected RGB image array (H, W, 3), got {image_array.shape}")

        if image_array.dtype != np.uint8:
            if np.issubdtype(image_array.dtype, np.floating):
                image_array = (np.clip(image_array, 0.0, 1.0) * 255).astype(np.uint8)
            else:
                image_array = np.clip(image_array, 0, 255).astype(np.uint8)

        return np.ascontiguousarray(image_array)

    def _save_png(self, pil_image: Image.Image, filepath: Path,
                  metadata: Optional[RenderMetadata], quality: int) -> None:
        pnginfo = PngImagePlugin.PngInfo()

        if metadata:
            pnginfo.add_text("Title", f"Mandelbrot at {metadata.center}")
            pnginfo.add_text("Software", f"fractal-animator v{metadata.software_version}")
            pnginfo.add_text("Creation Time", metadata.timestamp)
            pnginfo.add_text(METADATA_KEY, metadata.to_json())

        pil_image.save(filepath, "PNG", pnginfo=pnginfo)

    def _save_tiff(self, pil_image: Image.Image, filepath: Path,
                   metadata: Optional[RenderMetadata], quality: int) -> None:
        tiffinfo = TiffImagePlugin.ImageFileDirectory_v2()
        if metadata:
            tiffinfo[IMAGE_DESCRIPTION_TAG] = metadata.to_json()

        pil_image.save(filepath, "TIFF", compression='tiff_lzw', tiffinfo=tiffinfo)

    def _save_jpeg(self, pil_image: Image.Image, filepath: Path,
                   metadata: Optional[RenderMetadata], quality: int) -> None:
        # JPEG has no room for the full metadata, write it beside the image
        pil_image.save(filepath, "JPEG", quality=quality, optimize=True)

        if metadata:
            json_path = filepath.with_suffix('.json')
            with open(json_path, 'w') as f:
                f.write(metadata.to_json())
            logger.info(f"Saved metadata: {json_path}")

    def frame_path(self, output_dir: Union[str, Path], frame_number: int) -> Path:
        """Path of a numbered frame, e.g. ``frame_000001.png``."""
        frame_num = str(frame_number).zfill(self.padding)
        return Path(output_dir) / f"{self.frame_prefix}_{frame_num}.png"

    def save_frame(self, image_array: np.ndarray, output_dir: Union[str, Path],
                   frame_number: int, metadata: Optional[RenderMetadata] = None) -> Path:
        """
        Save one animation frame with sequential numbering.

        Args:
            image_array: RGB image array
            output_dir: Output directory
            frame_number: Frame number used in the file name
            metadata: Optional metadata for this frame

        Returns:
            Path written
        """
        return self.save_image(image_array, self.frame_path(output_dir, frame_number), metadata)

    def existing_frames(self, output_dir: Union[str, Path], frames: int) -> set:
        """Frame numbers in ``1..frames`` already present in ``output_dir``."""
        return {n for n in range(1, frames + 1) if self.frame_path(output_dir, n).exists()}

    def extract_metadata_from_image(self, filepath: Union[str, Path]) -> Optional[RenderMetadata]:
        """
        Extract render metadata from a saved image.

        Args:
            filepath: Path to image file

        Returns:
            Extracted metadata or None
        """
        filepath = Path(filepath)

        if filepath.suffix.lower() in ['.jpg', '.jpeg']:
            json_path = filepath.with_suffix('.json')
            if json_path.exists():
                return RenderMetadata.from_json(json_path.read_text())
            return None

        with Image.open(filepath) as img:
            text = getattr(img, 'text', {})
            if METADATA_KEY in text:
                return RenderMetadata.from_json(text[METADATA_KEY])

            tags = getattr(img, 'tag_v2', None)
            if tags is not None and IMAGE_DESCRIPTION_TAG in tags:
                return RenderMetadata.from_json(tags[IMAGE_DESCRIPTION_TAG])

        return None
