"""Render orchestration: fill an RGBA pixel buffer for one set of parameters."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .algorithms import FractalKind
from .colors import DEFAULT_BRIGHTNESS, DEFAULT_CONTRAST, ColorMapper, ColorScheme
from .geometry import UniformSource, fern_mask, sierpinski_depth, sierpinski_mask
from .kernels import escape_iterations
from .viewport import Viewport

OPAQUE = 255


@dataclass(frozen=True)
class RenderParameters:
    """Immutable snapshot of everything a render pass needs besides the viewport."""

    kind: FractalKind = FractalKind.MANDELBROT
    max_iterations: int = 100
    color_scheme: ColorScheme = ColorScheme.RAINBOW
    primary_color: str = "#ff0000"
    secondary_color: str = "#0000ff"
    julia_constant: tuple[float, float] = (-0.7, 0.27)
    colormap: str = "twilight_shifted"
    brightness: float = DEFAULT_BRIGHTNESS
    contrast: float = DEFAULT_CONTRAST
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if int(self.max_iterations) < 0:
            raise ValueError("max_iterations must be non-negative.")
        if not isinstance(self.kind, FractalKind):
            object.__setattr__(self, "kind", FractalKind.parse(self.kind))
        if not isinstance(self.color_scheme, ColorScheme):
            object.__setattr__(self, "color_scheme", ColorScheme.parse(self.color_scheme))

    def color_mapper(self) -> ColorMapper:
        return ColorMapper(
            scheme=self.color_scheme,
            primary=self.primary_color,
            secondary=self.secondary_color,
            colormap=self.colormap,
            brightness=self.brightness,
            contrast=self.contrast,
        )


@dataclass(frozen=True)
class RenderResult:
    """A completed frame.

    ``pixels`` is the row-major ``(height, width, 4)`` ``uint8`` RGBA buffer.
    ``iterations`` holds per-pixel escape counts for escape-time kinds and
    ``painted`` the boolean mask for the geometric ones; the other is ``None``.
    """

    pixels: np.ndarray
    viewport: Viewport
    params: RenderParameters
    iterations: Optional[np.ndarray] = None
    painted: Optional[np.ndarray] = None


def _rgba(rgb: np.ndarray) -> np.ndarray:
    height, width = rgb.shape[:2]
    pixels = np.empty((height, width, 4), dtype=np.uint8)
    pixels[..., :3] = rgb
    pixels[..., 3] = OPAQUE
    return pixels


def _paint(mask: np.ndarray, color: tuple[int, int, int]) -> np.ndarray:
    rgb = np.zeros(mask.shape + (3,), dtype=np.uint8)
    rgb[mask] = color
    return _rgba(rgb)


def render_frame(
    viewport: Viewport,
    params: RenderParameters,
    *,
    device: Optional[str] = None,
    rng: Optional[UniformSource] = None,
) -> RenderResult:
    """Render ``params.kind`` through ``viewport`` into a fresh pixel buffer."""

    mapper = params.color_mapper()
    kind = params.kind
    width, height = viewport.pixel_width, viewport.pixel_height

    if kind.is_escape_time:
        re, im = viewport.plane_grid()
        iterations = escape_iterations(
            kind,
            re,
            im,
            params.max_iterations,
            julia_constant=params.julia_constant,
            device=device,
        )
        pixels = _rgba(mapper.colorize(iterations, params.max_iterations))
        return RenderResult(pixels=pixels, viewport=viewport, params=params, iterations=iterations)

    if kind is FractalKind.SIERPINSKI:
        mask = sierpinski_mask(width, height, sierpinski_depth(params.max_iterations))
    elif kind is FractalKind.FERN:
        source = rng if rng is not None else np.random.default_rng(params.seed)
        mask = fern_mask(width, height, params.max_iterations, source)
    else:
        raise ValueError(f"Unsupported fractal kind: {kind!r}")

    pixels = _paint(mask, mapper.painted_color())
    return RenderResult(pixels=pixels, viewport=viewport, params=params, painted=mask)


def render(viewport: Viewport, params: RenderParameters, **kwargs) -> np.ndarray:
    """Return just the RGBA buffer of :func:`render_frame`."""

    return render_frame(viewport, params, **kwargs).pixels
