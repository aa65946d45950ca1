"""Tests for render configuration loading and the high-level API."""
import json

import numpy as np
import pytest

from fractal_animator.api import FractalRenderer, RenderConfig
from fractal_animator.core.interpolation import CUBIC
from fractal_animator.core.rendering_settings import MultiSampling
from fractal_animator.io.config import config_from_dict, load_config, normalise_config, save_config
from fractal_animator.rendering.palettes import LogarithmicPalette, PaletteKind
from fractal_animator.tools.animation import MandelbrotAnimation


def small_config(**overrides):
    values = dict(width=16, height=12, max_iterations=40)
    values.update(overrides)
    return RenderConfig(**values)


# ===========================================================================
# RenderConfig
# ===========================================================================


class TestRenderConfig:
    """Tests for RenderConfig conversions and validation."""

    def test_conversions(self):
        config = small_config(sampling="x4", center=(0.25, -0.5), set_color=(1.0, 0.0, 0.0),
                              palette="logarithmic", interpolation="cubic", log_base=3.0)

        settings = config.rendering_settings()
        assert (settings.width, settings.height) == (16, 12)
        assert settings.sampling is MultiSampling.X4

        configuration = config.configuration()
        assert configuration.center == 0.25 - 0.5j
        assert configuration.max_iterations == 40

        spec = config.palette_spec()
        assert spec.kind is PaletteKind.LOGARITHMIC
        assert spec.interpolation == CUBIC
        palette = spec.build()
        assert isinstance(palette, LogarithmicPalette)
        assert palette.base == 3.0

    @pytest.mark.parametrize("overrides", [
        dict(width=0),
        dict(max_iterations=0),
        dict(sampling="x3"),
        dict(palette="spiral"),
        dict(color_preset="no-such-preset"),
        dict(interpolation="wobbly"),
        dict(num_processes=0),
        dict(center=(1.0,)),
    ])
    def test_invalid_values_raise(self, overrides):
        with pytest.raises(ValueError):
            small_config(**overrides).validate()


# ===========================================================================
# Config files
# ===========================================================================


def test_normalise_fills_defaults():
    normalised = normalise_config({"width": 32, "center": [0.1, 0.2]})
    assert normalised["width"] == 32
    assert normalised["height"] == RenderConfig().height
    assert normalised["center"] == (0.1, 0.2)


def test_unknown_keys_raise():
    with pytest.raises(ValueError, match="Unknown configuration keys: bounds"):
        normalise_config({"bounds": [0, 1, 0, 1]})


def test_load_config(tmp_path):
    path = tmp_path / "render.json"
    path.write_text(json.dumps({"width": 20, "height": 10, "palette": "histogram"}))

    config = load_config(path)
    assert (config.width, config.height, config.palette) == (20, 10, "histogram")


def test_save_and_load(tmp_path):
    config = config_from_dict({"width": 64, "set_color": [0.0, 0.0, 1.0], "smoothing": False})
    path = save_config(config, tmp_path / "saved.json")
    assert load_config(path) == config


# ===========================================================================
# FractalRenderer
# ===========================================================================


class TestFractalRenderer:
    """Tests for the high-level renderer."""

    def test_render(self):
        image = FractalRenderer(small_config()).render()
        assert image.shape == (12, 16, 3)
        assert image.dtype == np.uint8

    def test_render_to_file(self, tmp_path):
        renderer = FractalRenderer(small_config(palette="histogram"))
        path = renderer.render_to_file(tmp_path / "image.png")

        assert path.exists()
        metadata = renderer.image_exporter.extract_metadata_from_image(path)
        assert metadata.palette == "histogram"
        assert metadata.resolution == (16, 12)

    def test_invalid_config_raises(self):
        with pytest.raises(ValueError):
            FractalRenderer(small_config(height=-1))

    def test_save_animation_resumes(self, tmp_path):
        renderer = FractalRenderer(small_config())
        animation = MandelbrotAnimation.zoom(3, -0.5 + 0j, -0.75 + 0.1j, 0.0, 2.0, max_iterations=40)

        assert renderer.save_animation(animation, tmp_path / "frames") == 3
        assert sorted(p.name for p in (tmp_path / "frames").glob("*.png")) == [
            "frame_000001.png", "frame_000002.png", "frame_000003.png",
        ]

        (tmp_path / "frames" / "frame_000002.png").unlink()
        assert renderer.save_animation(animation, tmp_path / "frames") == 1
        assert renderer.save_animation(animation, tmp_path / "frames", resume=False) == 3

    def test_render_animation_yields_in_order(self):
        renderer = FractalRenderer(small_config())
        animation = MandelbrotAnimation.zoom(3, -0.5 + 0j, -0.75 + 0.1j, 0.0, 2.0)
        assert [n for n, _ in renderer.render_animation(animation, skip={2})] == [1, 3]
