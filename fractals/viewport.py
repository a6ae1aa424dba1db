"""Mapping between canvas pixels and the fractal plane."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

import numpy as np

from .algorithms import FractalKind

if TYPE_CHECKING:
    from .navigation import SelectionRectangle

MIN_ZOOM = 1e-6
MAX_ZOOM = 1e13

DEFAULT_EXTENT = (2.5, 1.5)
BASE_EXTENTS = {
    FractalKind.MANDELBROT: (2.5, 1.5),
    FractalKind.BURNING_SHIP: (2.5, 1.5),
    FractalKind.SIERPINSKI: (2.5, 1.5),
    FractalKind.JULIA: (2.0, 1.5),
    FractalKind.NEWTON: (2.0, 1.5),
    FractalKind.FERN: DEFAULT_EXTENT,
}


def clamp_zoom(zoom: float) -> float:
    """Keep ``zoom`` inside the range where the visible span stays representable."""

    zoom = float(zoom)
    if math.isnan(zoom):
        raise ValueError("zoom must be a number.")
    return min(max(zoom, MIN_ZOOM), MAX_ZOOM)


@dataclass(frozen=True)
class Viewport:
    """An immutable window onto the plane.

    Every navigation method returns a new ``Viewport``; the receiver is never
    modified. The visible half extents are ``base_half_width / zoom`` and
    ``base_half_height / zoom``.
    """

    pixel_width: int
    pixel_height: int
    center_x: float = 0.0
    center_y: float = 0.0
    zoom: float = 1.0
    base_half_width: float = DEFAULT_EXTENT[0]
    base_half_height: float = DEFAULT_EXTENT[1]

    def __post_init__(self) -> None:
        if int(self.pixel_width) < 1 or int(self.pixel_height) < 1:
            raise ValueError("Viewport dimensions must be at least 1x1 pixels.")
        if not math.isfinite(self.zoom) or self.zoom <= 0:
            raise ValueError("zoom must be a positive finite number.")
        if self.base_half_width <= 0 or self.base_half_height <= 0:
            raise ValueError("base extents must be positive.")
        object.__setattr__(self, "pixel_width", int(self.pixel_width))
        object.__setattr__(self, "pixel_height", int(self.pixel_height))
        object.__setattr__(self, "zoom", clamp_zoom(self.zoom))

    @classmethod
    def for_kind(cls, kind: FractalKind, pixel_width: int, pixel_height: int, **kwargs) -> "Viewport":
        base_half_width, base_half_height = BASE_EXTENTS[kind]
        return cls(
            pixel_width=pixel_width,
            pixel_height=pixel_height,
            base_half_width=base_half_width,
            base_half_height=base_half_height,
            **kwargs,
        )

    @property
    def half_width(self) -> float:
        return self.base_half_width / self.zoom

    @property
    def half_height(self) -> float:
        return self.base_half_height / self.zoom

    @property
    def scale_x(self) -> float:
        """Plane units per pixel along x."""
        return 2.0 * self.half_width / self.pixel_width

    @property
    def scale_y(self) -> float:
        return 2.0 * self.half_height / self.pixel_height

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """``(x_min, x_max, y_min, y_max)`` of the visible plane window."""
        hw, hh = self.half_width, self.half_height
        return self.center_x - hw, self.center_x + hw, self.center_y - hh, self.center_y + hh

    def pixel_to_plane(self, px: float, py: float) -> tuple[float, float]:
        hw, hh = self.half_width, self.half_height
        re = self.center_x - hw + (2.0 * hw) * px / self.pixel_width
        im = self.center_y - hh + (2.0 * hh) * py / self.pixel_height
        return re, im

    def plane_to_pixel(self, re: float, im: float) -> tuple[float, float]:
        hw, hh = self.half_width, self.half_height
        px = (re - (self.center_x - hw)) * self.pixel_width / (2.0 * hw)
        py = (im - (self.center_y - hh)) * self.pixel_height / (2.0 * hh)
        return px, py

    def plane_grid(self) -> tuple[np.ndarray, np.ndarray]:
        """Plane coordinates of every pixel as two ``(height, width)`` arrays.

        Uses the same arithmetic as :meth:`pixel_to_plane`, element by element.
        """

        hw = np.float64(self.half_width)
        hh = np.float64(self.half_height)
        px = np.arange(self.pixel_width, dtype=np.float64)
        py = np.arange(self.pixel_height, dtype=np.float64)
        xs = np.float64(self.center_x) - hw + (2.0 * hw) * px / np.float64(self.pixel_width)
        ys = np.float64(self.center_y) - hh + (2.0 * hh) * py / np.float64(self.pixel_height)
        return np.meshgrid(xs, ys)

    def pan(self, dx_pixels: float, dy_pixels: float) -> "Viewport":
        """Shift the view so the content follows a pointer moved by ``(dx, dy)`` pixels.

        Call this on the viewport captured when the drag started, with the total
        pointer displacement, rather than chaining it per move event.
        """

        return replace(
            self,
            center_x=self.center_x - dx_pixels * self.scale_x,
            center_y=self.center_y - dy_pixels * self.scale_y,
        )

    def recenter(self, px: float, py: float) -> "Viewport":
        center_x, center_y = self.pixel_to_plane(px, py)
        return replace(self, center_x=center_x, center_y=center_y)

    def zoom_at_point(self, px: float, py: float, factor: float) -> "Viewport":
        """Multiply the zoom by ``factor`` keeping the plane point under ``(px, py)`` fixed."""

        if not math.isfinite(factor) or factor <= 0:
            raise ValueError("zoom factor must be a positive finite number.")
        anchor_x, anchor_y = self.pixel_to_plane(px, py)
        new_zoom = clamp_zoom(self.zoom * factor)
        ratio = self.zoom / new_zoom
        return replace(
            self,
            zoom=new_zoom,
            center_x=anchor_x - (anchor_x - self.center_x) * ratio,
            center_y=anchor_y - (anchor_y - self.center_y) * ratio,
        )

    def zoom_to_rectangle(self, rect: "SelectionRectangle") -> "Viewport":
        """Fit the view to a selection already constrained to the canvas aspect ratio.

        An empty selection leaves the viewport unchanged.
        """

        if rect.is_empty:
            return self
        x0, y0 = self.pixel_to_plane(rect.x, rect.y)
        x1, y1 = self.pixel_to_plane(rect.x + rect.width, rect.y + rect.height)
        plane_width = abs(x1 - x0)
        if plane_width == 0.0:
            return self
        return replace(
            self,
            zoom=clamp_zoom(2.0 * self.base_half_width / plane_width),
            center_x=(x0 + x1) / 2.0,
            center_y=(y0 + y1) / 2.0,
        )

    def resized(self, pixel_width: int, pixel_height: int) -> "Viewport":
        return replace(self, pixel_width=pixel_width, pixel_height=pixel_height)

    def with_kind(self, kind: FractalKind) -> "Viewport":
        base_half_width, base_half_height = BASE_EXTENTS[kind]
        return replace(self, base_half_width=base_half_width, base_half_height=base_half_height)

    def reset(self) -> "Viewport":
        return replace(self, center_x=0.0, center_y=0.0, zoom=1.0)
