"""
Command-line interface for fractal rendering.

This module provides the ``fractal-animator`` command with subcommands to
render a single image, render a zoom animation into numbered frames and
list the available palettes.
"""

import click
import sys
from dataclasses import replace
from typing import Any, Dict, Tuple
import logging

from .. import __version__
from ..api import FractalRenderer, RenderConfig
from ..io.config import load_config
from ..rendering.coloring import list_presets, parse_color
from ..rendering.palettes import PaletteKind
from ..tools.animation import MandelbrotAnimation

logger = logging.getLogger(__name__)

PALETTE_NAMES = [kind.value for kind in PaletteKind]


def _parse_pair(text: str, name: str) -> Tuple[float, float]:
    try:
        parts = [float(x.strip()) for x in text.split(',')]
    except ValueError:
        raise ValueError(f"Invalid {name} '{text}'. Use 'real,imag'") from None
    if len(parts) != 2:
        raise ValueError(f"Invalid {name} '{text}'. Use 'real,imag'")
    return parts[0], parts[1]


def _render_options(func):
    """Options shared by the render and animate commands."""
    options = [
        click.option('--width', '-w', type=int, help='Image width'),
        click.option('--height', '-h', type=int, help='Image height'),
        click.option('--sampling', type=click.Choice(['none', 'x2', 'x4']), help='Supersampling mode'),
        click.option('--max-iter', 'max_iterations', type=int, help='Maximum iterations'),
        click.option('--smoothing/--no-smoothing', default=None, help='Continuous dwell values'),
        click.option('--set-color', type=str, help='Color of the set: name, #rrggbb or r,g,b'),
        click.option('--palette', type=click.Choice(PALETTE_NAMES), help='Palette strategy'),
        click.option('--preset', 'color_preset', type=str,
                     help='Key color preset or matplotlib colormap'),
        click.option('--interpolation', type=str, help='linear, cubic, nearest or easing:<bias>'),
        click.option('--log-base', type=float, help='Base of the logarithmic palette'),
        click.option('--exponent', type=float, help='Exponent of the exponential palette'),
        click.option('--processes', 'num_processes', type=int, help='Worker processes'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _build_config(ctx, overrides: Dict[str, Any]) -> RenderConfig:
    """Start from the config file (or defaults) and apply command-line overrides."""
    config_file = ctx.obj.get('config_file')
    config = load_config(config_file) if config_file else RenderConfig()

    overrides = {k: v for k, v in overrides.items() if v is not None}
    if 'set_color' in overrides:
        overrides['set_color'] = parse_color(overrides['set_color']).to_tuple()

    config = replace(config, **overrides)
    config.validate()
    return config


def _fail(ctx, error: Exception) -> None:
    click.echo(f"Error: {error}", err=True)
    if ctx.obj.get('verbose'):
        import traceback
        traceback.print_exc()
    sys.exit(1)


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--config', type=click.Path(exists=True), help='Configuration file path (JSON)')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress most output')
@click.pass_context
def main(ctx, version, config, verbose, quiet):
    """
    Fractal Animator - Mandelbrot images and zoom animations.

    Render escape-time fractals with smoothing, supersampling and five
    palette strategies, or render keyframed zooms as numbered frames.
    """
    if quiet:
        logging.basicConfig(level=logging.ERROR)
    elif verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    else:
        logging.basicConfig(level=logging.INFO,
                            format='%(levelname)s: %(message)s')

    if version:
        click.echo(f"Fractal Animator v{__version__}")
        if ctx.invoked_subcommand is None:
            sys.exit(0)

    ctx.ensure_object(dict)
    ctx.obj['config_file'] = config
    ctx.obj['verbose'] = verbose


@main.command()
@click.argument('output', type=click.Path())
@click.option('--center', type=str, help='Image center "real,imag"')
@click.option('--zoom', 'zoom_exponent', type=float, help='Zoom exponent (natural log scale)')
@_render_options
@click.pass_context
def render(ctx, output, center, **kwargs):
    """
    Render a single Mandelbrot image.

    OUTPUT: Output image file path (.png, .tif, .tiff, .jpg, .jpeg)
    """
    try:
        if center:
            kwargs['center'] = _parse_pair(center, 'center')
        config = _build_config(ctx, kwargs)

        renderer = FractalRenderer(config)
        path = renderer.render_to_file(output)
        click.echo(f"Saved {path}")

    except Exception as e:
        _fail(ctx, e)


@main.command()
@click.argument('output_dir', type=click.Path())
@click.option('--frames', type=int, default=60, help='Number of animation frames')
@click.option('--start-center', type=str, default='-0.5,0', help='Center of the first frame "real,imag"')
@click.option('--end-center', type=str, default='-0.743643887,0.131825904',
              help='Center of the last frame "real,imag"')
@click.option('--start-zoom', type=float, default=0.0, help='Zoom exponent of the first frame')
@click.option('--end-zoom', type=float, default=5.0, help='Zoom exponent of the last frame')
@click.option('--resume/--no-resume', default=True, help='Skip frames that already exist')
@_render_options
@click.pass_context
def animate(ctx, output_dir, frames, start_center, end_center, start_zoom, end_zoom,
            resume, **kwargs):
    """
    Render a zoom animation as numbered PNG frames.

    OUTPUT_DIR: Directory for the frame files
    """
    try:
        config = _build_config(ctx, kwargs)
        configuration = config.configuration()

        animation = MandelbrotAnimation.zoom(
            frames,
            complex(*_parse_pair(start_center, 'start center')),
            complex(*_parse_pair(end_center, 'end center')),
            start_zoom,
            end_zoom,
            max_iterations=configuration.max_iterations,
            smoothing=configuration.smoothing,
            set_color=configuration.set_color,
        )

        renderer = FractalRenderer(config)
        written = renderer.save_animation(animation, output_dir, resume=resume)
        click.echo(f"Wrote {written} frames to {output_dir}")

    except Exception as e:
        _fail(ctx, e)


@main.command()
@click.pass_context
def palettes(ctx):
    """List palette strategies and key color presets."""
    click.echo("Palette strategies:")
    for name in PALETTE_NAMES:
        click.echo(f"  {name}")

    click.echo("Key color presets:")
    for name in list_presets():
        click.echo(f"  {name}")
    click.echo("  (or any matplotlib colormap name)")


if __name__ == '__main__':
    main()
