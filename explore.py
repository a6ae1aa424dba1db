import os
import sys
import time
import warnings
from argparse import ArgumentParser
from dataclasses import dataclass
from pathlib import Path

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

if _suppress_messages:
    warnings.filterwarnings(
        "ignore",
        message=r"Protobuf gencode version .* is exactly one major version older than the runtime version .*",
        category=UserWarning,
        module="google.protobuf",
    )

VERBOSE = _cli_verbose


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


import tensorflow as tf

if _suppress_messages:
    tf.get_logger().setLevel("ERROR")
    for handler in tf.get_logger().handlers:
        handler.setLevel("ERROR")

import PIL.Image
import PIL.ImageDraw
import PIL.ImageFont
from matplotlib import colormaps

from fractals import (
    ColorScheme,
    FractalKind,
    RenderParameters,
    SelectionGesture,
    Viewport,
    parse_hex_color,
    render_frame,
    wheel_zoom,
)


def select_device() -> str:
    """Use the first GPU TensorFlow can see, otherwise the CPU."""

    gpus = tf.config.list_physical_devices('GPU')
    if not gpus:
        log("No GPU found, using CPU")
        return '/CPU:0'
    try:
        for gpu in gpus:
            tf.config.experimental.set_memory_growth(gpu, True)
    except RuntimeError as e:
        log(e)
        return '/CPU:0'
    log("GPU found, using %s" % gpus[0].name)
    return '/GPU:0'


@dataclass(frozen=True)
class NavigationStep:
    """One pointer action replayed on the viewport before rendering."""

    action: str
    values: tuple[float, ...]


_STEP_ARITY = {
    "pan": 2,
    "zoom": 3,
    "wheel": 3,
    "center": 2,
    "select": 4,
    "reset": 0,
}


def parse_step(text: str) -> NavigationStep:
    """Parse ``action[:v1,v2,...]``, e.g. ``zoom:400,300,2`` or ``reset``."""

    action, _, raw_values = text.partition(":")
    action = action.strip().lower()
    if action not in _STEP_ARITY:
        raise ValueError(f"Unknown navigation action '{action}'. Valid choices: {', '.join(sorted(_STEP_ARITY))}.")
    parts = [part for part in raw_values.split(",") if part.strip()]
    if len(parts) != _STEP_ARITY[action]:
        raise ValueError(f"'{action}' expects {_STEP_ARITY[action]} comma-separated values, got {len(parts)}.")
    try:
        values = tuple(float(part) for part in parts)
    except ValueError as exc:
        raise ValueError(f"'{text}' contains a non-numeric value.") from exc
    return NavigationStep(action=action, values=values)


def apply_step(viewport: Viewport, step: NavigationStep) -> Viewport:
    values = step.values
    if step.action == "pan":
        return viewport.pan(*values)
    if step.action == "zoom":
        return viewport.zoom_at_point(*values)
    if step.action == "wheel":
        return wheel_zoom(viewport, *values)
    if step.action == "center":
        return viewport.recenter(*values)
    if step.action == "select":
        start_x, start_y, end_x, end_y = values
        return SelectionGesture(viewport, start_x, start_y).finish(end_x, end_y)
    return viewport.reset()


def build_parser():
    parser = ArgumentParser(description='Render a fractal and export it as an image.')

    parser.add_argument('--kind', type=str, dest='kind', metavar='KIND', default=FractalKind.MANDELBROT.value,
                        help='fractal to render: %s' % ', '.join(kind.value for kind in FractalKind))

    parser.add_argument('--max-iterations', type=int,
                        dest='max_iterations', help='iteration budget per point (depth/10 for sierpinski, thousands of points for fern)',
                        metavar='MAX_ITERATIONS', default=100)

    parser.add_argument('--width', type=int, dest='width', metavar='WIDTH', default=800,
                        help='canvas width in pixels')

    parser.add_argument('--height', type=int, dest='height', metavar='HEIGHT', default=600,
                        help='canvas height in pixels')

    parser.add_argument('--center-x', type=float, dest='center_x', metavar='CENTER_X', default=0.0,
                        help='real coordinate at the centre of the view')

    parser.add_argument('--center-y', type=float, dest='center_y', metavar='CENTER_Y', default=0.0,
                        help='imaginary coordinate at the centre of the view')

    parser.add_argument('--zoom', type=float, dest='zoom', metavar='ZOOM', default=1.0,
                        help='magnification relative to the default framing of the selected kind')

    parser.add_argument('--julia-re', type=float, dest='julia_re', default=-0.7,
                        help='real part of the Julia constant')
    parser.add_argument('--julia-im', type=float, dest='julia_im', default=0.27,
                        help='imaginary part of the Julia constant')

    parser.add_argument('--color-scheme', type=str, dest='color_scheme', default=ColorScheme.RAINBOW.value,
                        help='colouring: %s' % ', '.join(scheme.value for scheme in ColorScheme))
    parser.add_argument('--primary-color', type=str, dest='primary_color', default='#ff0000',
                        help='Hex colour for the lowest iteration counts in the custom scheme.')
    parser.add_argument('--secondary-color', type=str, dest='secondary_color', default='#0000ff',
                        help='Hex colour for the highest iteration counts in the custom scheme.')
    parser.add_argument('--colormap', type=str, dest='colormap', metavar='COLORMAP', default='twilight_shifted',
                        help='matplotlib colormap used by the colormap scheme (e.g. "viridis", "inferno")')
    parser.add_argument('--brightness', type=float, default=2.0, help='Brightness multiplier of the custom scheme.')
    parser.add_argument('--contrast', type=float, default=1.5, help='Contrast factor of the custom scheme.')

    parser.add_argument('--step', dest='steps', action='append', metavar='ACTION[:VALUES]', default=[],
                        help='Navigation applied in order before rendering. May be repeated. '
                             'pan:DX,DY | zoom:PX,PY,FACTOR | wheel:PX,PY,DELTA | center:PX,PY | '
                             'select:X0,Y0,X1,Y1 | reset')

    parser.add_argument('--seed', type=int, default=None, help='Random seed for the fern.')

    parser.add_argument('--output', dest='output', type=str,
                        help='Destination image file. Default: fractal-<kind>-<timestamp>.<format>')
    parser.add_argument('--format', type=str, dest='format', metavar='FORMAT', default='png',
                        help='image format, any extension supported by Pillow. Default: "png".')

    parser.add_argument('--show-coordinates', help='overlay plane bounds and zoom on the image',
                        dest='show_coordinates', action='store_true')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow and hardware diagnostics.')

    return parser


def _pil_format_name(ext: str) -> str:
    upper = ext.upper()
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper


def resolve_output_path(output: str | None, kind: FractalKind, image_format: str, parser: ArgumentParser) -> Path:
    if not output:
        return Path(f"fractal-{kind.value}-{int(time.time() * 1000)}.{image_format}").resolve()
    output_path = Path(output).expanduser()
    if output_path.exists() and output_path.is_dir():
        parser.error("--output must point to a file, not a directory.")
    suffix = output_path.suffix
    if suffix:
        if _pil_format_name(suffix.lstrip(".")) != _pil_format_name(image_format):
            parser.error(f"--output extension {suffix} does not match --format {image_format}.")
    else:
        output_path = output_path.with_suffix(f".{image_format}")
    return output_path.resolve()


def write_single_image(image: PIL.Image.Image, output_path: Path, image_format: str) -> None:
    """Write ``image`` to ``output_path``; formats without alpha get an RGB copy."""

    pil_format = _pil_format_name(image_format)
    if pil_format in {"JPEG", "BMP"} and image.mode != "RGB":
        image = image.convert("RGB")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    image.save(str(output_path), format=pil_format)


_FONT_CANDIDATES = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
    "/usr/share/fonts/truetype/freefont/FreeSans.ttf",
)


def _load_annotation_font(image: PIL.Image.Image) -> PIL.ImageFont.ImageFont:
    target_size = max(12, int(round(max(min(image.size), 1) * 0.028)))
    for path in _FONT_CANDIDATES:
        if Path(path).exists():
            try:
                return PIL.ImageFont.truetype(path, target_size)
            except OSError:
                continue
    return PIL.ImageFont.load_default()


def annotate_with_coordinates(image: PIL.Image.Image, viewport: Viewport) -> PIL.Image.Image:
    """Overlay the visible plane bounds, centre and zoom readout on ``image``."""

    if image.mode != "RGBA":
        image = image.convert("RGBA")

    x_min, x_max, y_min, y_max = viewport.bounds
    text = "\n".join([
        f"X: [{x_min:.6g}, {x_max:.6g}]",
        f"Y: [{y_min:.6g}, {y_max:.6g}]",
        f"Center: ({viewport.center_x:.6g}, {viewport.center_y:.6g})",
        f"Zoom: {viewport.zoom:.6g}x",
    ])

    overlay = PIL.Image.new("RGBA", image.size, (0, 0, 0, 0))
    draw = PIL.ImageDraw.Draw(overlay)
    font = _load_annotation_font(image)
    font_size = getattr(font, "size", 14)
    padding = max(8, int(round(font_size * 0.6)))
    spacing = max(4, int(round(font_size * 0.35)))

    left, top, right, bottom = draw.multiline_textbbox((0, 0), text, font=font, spacing=spacing)
    box = [
        (12, 12),
        (12 + (right - left) + padding * 2, 12 + (bottom - top) + padding * 2),
    ]
    draw.rounded_rectangle(box, radius=max(6, font_size // 2), fill=(10, 12, 24, 180),
                           outline=(255, 255, 255, 45), width=1)
    shadow = (12 + padding + 1 - left, 12 + padding + 1 - top)
    draw.multiline_text(shadow, text, font=font, fill=(0, 0, 0, 170), spacing=spacing)
    draw.multiline_text((shadow[0] - 1, shadow[1] - 1), text, font=font, fill=(240, 244, 255, 255), spacing=spacing)

    origin_x, origin_y = viewport.plane_to_pixel(0.0, 0.0)
    if 0 <= origin_x < image.width and 0 <= origin_y < image.height:
        radius = max(3, int(round(min(image.size) * 0.005)))
        draw.ellipse(
            [(origin_x - radius, origin_y - radius), (origin_x + radius, origin_y + radius)],
            fill=(255, 255, 255, 235),
            outline=(0, 0, 0, 180),
        )

    return PIL.Image.alpha_composite(image, overlay)


def resolve_parameters(opt, parser: ArgumentParser) -> tuple[Viewport, RenderParameters, list[NavigationStep]]:
    try:
        kind = FractalKind.parse(opt.kind)
        scheme = ColorScheme.parse(opt.color_scheme)
    except ValueError as exc:
        parser.error(str(exc))

    if opt.max_iterations < 0:
        parser.error("--max-iterations must be non-negative.")
    if opt.width < 1 or opt.height < 1:
        parser.error("--width and --height must be at least 1.")
    if not opt.zoom > 0:
        parser.error("--zoom must be positive.")
    if scheme is ColorScheme.COLORMAP and opt.colormap not in colormaps:
        parser.error(f"Unknown matplotlib colormap '{opt.colormap}'.")

    try:
        steps = [parse_step(text) for text in opt.steps]
    except ValueError as exc:
        parser.error(str(exc))

    if scheme is ColorScheme.CUSTOM:
        for name in ("primary_color", "secondary_color"):
            value = getattr(opt, name)
            if parse_hex_color(value) is None:
                print(f"Invalid {name} '{value}', falling back to grayscale.")

    viewport = Viewport.for_kind(
        kind,
        opt.width,
        opt.height,
        center_x=opt.center_x,
        center_y=opt.center_y,
        zoom=opt.zoom,
    )
    params = RenderParameters(
        kind=kind,
        max_iterations=opt.max_iterations,
        color_scheme=scheme,
        primary_color=opt.primary_color,
        secondary_color=opt.secondary_color,
        julia_constant=(opt.julia_re, opt.julia_im),
        colormap=opt.colormap,
        brightness=opt.brightness,
        contrast=opt.contrast,
        seed=opt.seed,
    )
    return viewport, params, steps


def run(argv=None):
    """Parse ``argv``, render and export one frame; returns the ``RenderResult``."""

    parser = build_parser()
    opt = parser.parse_args(argv)

    global VERBOSE
    VERBOSE = bool(opt.verbose)

    log("TensorFlow version: %s" % tf.__version__)

    viewport, params, steps = resolve_parameters(opt, parser)
    image_format = (opt.format or "png").lower().lstrip(".") or "png"
    output_path = resolve_output_path(opt.output, params.kind, image_format, parser)

    for step in steps:
        try:
            viewport = apply_step(viewport, step)
        except ValueError as exc:
            parser.error(f"--step {step.action}: {exc}")
        log("after %s: center=(%.6g, %.6g) zoom=%.6g" % (step.action, viewport.center_x, viewport.center_y, viewport.zoom))

    device = select_device()
    started = time.perf_counter()
    result = render_frame(viewport, params, device=device)
    log("rendered %s %dx%d in %.2fs" % (params.kind.value, viewport.pixel_width, viewport.pixel_height,
                                        time.perf_counter() - started))

    image = PIL.Image.fromarray(result.pixels)
    if opt.show_coordinates:
        image = annotate_with_coordinates(image, viewport)

    write_single_image(image, output_path, image_format)
    print(f"{params.kind.value} at zoom {viewport.zoom:.6g}x written to {output_path}")
    return result


def main(argv=None):
    run(argv)


if __name__ == '__main__':
    main()
