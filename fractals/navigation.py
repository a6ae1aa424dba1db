"""Pointer gestures that produce new viewports."""

from __future__ import annotations

from dataclasses import dataclass

from .viewport import Viewport

WHEEL_ZOOM_IN = 1.1
WHEEL_ZOOM_OUT = 0.9
MAX_CANVAS_WIDTH = 1200
CANVAS_ASPECT = 0.75


@dataclass(frozen=True)
class SelectionRectangle:
    """A rectangle in pixel space, ``(x, y)`` being its top-left corner."""

    x: float
    y: float
    width: float
    height: float

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


def constrain_selection(
    start_x: float,
    start_y: float,
    current_x: float,
    current_y: float,
    canvas_width: int,
    canvas_height: int,
) -> SelectionRectangle:
    """Build the selection for a drag from ``start`` to ``current``.

    The shorter side (relative to the canvas aspect ratio) is grown so the
    rectangle has exactly the canvas aspect ratio. The rectangle stays anchored
    at the start corner and is shrunk, keeping its ratio, until it fits inside
    the canvas.
    """

    ratio = canvas_width / canvas_height
    dx = current_x - start_x
    dy = current_y - start_y
    width = abs(dx)
    height = abs(dy)

    if width < height * ratio:
        width = height * ratio
    else:
        height = width / ratio

    available_width = canvas_width - start_x if dx >= 0 else start_x
    available_height = canvas_height - start_y if dy >= 0 else start_y
    available_width = max(available_width, 0.0)
    available_height = max(available_height, 0.0)
    if width > available_width:
        width = available_width
        height = width / ratio
    if height > available_height:
        height = available_height
        width = height * ratio

    x = start_x if dx >= 0 else start_x - width
    y = start_y if dy >= 0 else start_y - height
    return SelectionRectangle(x=x, y=y, width=width, height=height)


@dataclass(frozen=True)
class PanGesture:
    """A drag in progress; every update pans from the viewport captured at the start."""

    origin: Viewport
    start_x: float
    start_y: float

    def update(self, px: float, py: float) -> Viewport:
        return self.origin.pan(px - self.start_x, py - self.start_y)


@dataclass(frozen=True)
class SelectionGesture:
    """A zoom-to-rectangle ("segmentify") drag in progress."""

    origin: Viewport
    start_x: float
    start_y: float

    def update(self, px: float, py: float) -> SelectionRectangle:
        return constrain_selection(
            self.start_x,
            self.start_y,
            px,
            py,
            self.origin.pixel_width,
            self.origin.pixel_height,
        )

    def finish(self, px: float, py: float) -> Viewport:
        return self.origin.zoom_to_rectangle(self.update(px, py))


def wheel_zoom(viewport: Viewport, px: float, py: float, delta_y: float) -> Viewport:
    """Scrolling down (positive delta) zooms out, anything else zooms in."""

    factor = WHEEL_ZOOM_OUT if delta_y > 0 else WHEEL_ZOOM_IN
    return viewport.zoom_at_point(px, py, factor)


def fit_canvas(container_width: int) -> tuple[int, int]:
    """Canvas size for a container: width capped at 1200 pixels, 4:3 aspect ratio."""

    width = max(1, min(int(container_width), MAX_CANVAS_WIDTH))
    height = max(1, int(width * CANVAS_ASPECT))
    return width, height
