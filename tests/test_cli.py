"""Tests for the command-line interface."""
import json

from click.testing import CliRunner
from PIL import Image

from fractal_animator.cli.main import main


def run(*args):
    return CliRunner().invoke(main, list(args))


def test_render(tmp_path):
    output = tmp_path / "out.png"
    result = run("render", str(output), "-w", "16", "-h", "12", "--max-iter", "30",
                 "--sampling", "x2", "--palette", "repeating", "--preset", "ocean",
                 "--center=-0.75,0.1", "--zoom", "1.0", "--set-color", "white")

    assert result.exit_code == 0, result.output
    with Image.open(output) as img:
        assert img.size == (16, 12)


def test_render_with_config_file(tmp_path):
    config = tmp_path / "render.json"
    config.write_text(json.dumps({"width": 10, "height": 8, "max_iterations": 25,
                                  "palette": "histogram"}))
    output = tmp_path / "out.png"

    result = run("--config", str(config), "render", str(output), "--no-smoothing")

    assert result.exit_code == 0, result.output
    with Image.open(output) as img:
        assert img.size == (10, 8)


def test_render_rejects_bad_center(tmp_path):
    result = run("render", str(tmp_path / "out.png"), "--center", "nonsense")
    assert result.exit_code == 1
    assert "Invalid center" in result.output


def test_animate_and_resume(tmp_path):
    frames_dir = tmp_path / "frames"
    args = ["animate", str(frames_dir), "--frames", "2", "-w", "8", "-h", "6",
            "--max-iter", "20", "--end-zoom", "1.0"]

    result = run(*args)
    assert result.exit_code == 0, result.output
    assert "Wrote 2 frames" in result.output
    assert sorted(p.name for p in frames_dir.iterdir()) == ["frame_000001.png", "frame_000002.png"]

    result = run(*args)
    assert result.exit_code == 0, result.output
    assert "Wrote 0 frames" in result.output

    result = run(*args, "--no-resume")
    assert "Wrote 2 frames" in result.output


def test_palettes():
    result = run("palettes")
    assert result.exit_code == 0
    for name in ("repeating", "scaling", "logarithmic", "exponential", "histogram", "fire"):
        assert name in result.output


def test_version():
    result = run("--version")
    assert result.exit_code == 0
    assert "Fractal Animator v" in result.output
