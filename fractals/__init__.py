"""Public API for fractal rendering and viewport navigation."""

from .algorithms import Classification, FractalKind, burning_ship, classify, julia, mandelbrot, newton
from .colors import ColorMapper, ColorScheme, parse_hex_color
from .geometry import fern_mask, fern_points, sierpinski_depth, sierpinski_mask
from .kernels import escape_iterations
from .navigation import (
    PanGesture,
    SelectionGesture,
    SelectionRectangle,
    constrain_selection,
    fit_canvas,
    wheel_zoom,
)
from .renderer import RenderParameters, RenderResult, render, render_frame
from .viewport import MAX_ZOOM, MIN_ZOOM, Viewport

__all__ = [
    "Classification",
    "ColorMapper",
    "ColorScheme",
    "FractalKind",
    "MAX_ZOOM",
    "MIN_ZOOM",
    "PanGesture",
    "RenderParameters",
    "RenderResult",
    "SelectionGesture",
    "SelectionRectangle",
    "Viewport",
    "burning_ship",
    "classify",
    "constrain_selection",
    "escape_iterations",
    "fern_mask",
    "fern_points",
    "fit_canvas",
    "julia",
    "mandelbrot",
    "newton",
    "parse_hex_color",
    "render",
    "render_frame",
    "sierpinski_depth",
    "sierpinski_mask",
    "wheel_zoom",
]
