"""Painters for the geometric and stochastic kinds (Sierpinski, Barnsley fern).

Both kinds own a fixed framing on the canvas instead of going through the
viewport transform, and both produce a boolean ``(height, width)`` mask of
painted pixels.
"""

from __future__ import annotations

import math
from typing import Iterator, Protocol

import numpy as np

MAX_SIERPINSKI_DEPTH = 10
TRIANGLE_EPSILON = 0.01
SIERPINSKI_FILL = 0.8

FERN_STEPS_PER_ITERATION = 1000
FERN_Y_SPAN = 11.0
FERN_Y_MARGIN = 0.5

# (upper bound of the probability range, a, b, c, d, e, f) for
# x' = a*x + b*y + e, y' = c*x + d*y + f
FERN_MAPS = (
    (0.01, 0.0, 0.0, 0.0, 0.16, 0.0, 0.0),
    (0.86, 0.85, 0.04, -0.04, 0.85, 0.0, 1.6),
    (0.93, 0.2, -0.26, 0.23, 0.22, 0.0, 1.6),
    (1.0, -0.15, 0.28, 0.26, 0.24, 0.0, 0.44),
)


class UniformSource(Protocol):
    def random(self) -> float:
        ...


def sierpinski_depth(max_iterations: int) -> int:
    return max(0, min(MAX_SIERPINSKI_DEPTH, int(max_iterations) // 10))


def _triangle_area(x1, y1, x2, y2, x3, y3):
    return 0.5 * abs(x1 * (y2 - y3) + x2 * (y3 - y1) + x3 * (y1 - y2))


def point_in_triangle(px, py, x1, y1, x2, y2, x3, y3, epsilon: float = TRIANGLE_EPSILON):
    """Area test: a point is inside when the three sub-triangles add up to the whole.

    Works element-wise on numpy arrays for ``px``/``py``.
    """

    area = _triangle_area(x1, y1, x2, y2, x3, y3)
    a1 = _triangle_area(px, py, x1, y1, x2, y2)
    a2 = _triangle_area(px, py, x2, y2, x3, y3)
    a3 = _triangle_area(px, py, x3, y3, x1, y1)
    return abs(area - (a1 + a2 + a3)) < epsilon


def fill_triangle(mask: np.ndarray, vertices, epsilon: float = TRIANGLE_EPSILON) -> None:
    """Paint every pixel of ``mask`` whose integer coordinate lies in the triangle."""

    height, width = mask.shape
    (x1, y1), (x2, y2), (x3, y3) = vertices
    min_x = max(0, math.floor(min(x1, x2, x3)))
    max_x = min(width - 1, math.ceil(max(x1, x2, x3)))
    min_y = max(0, math.floor(min(y1, y2, y3)))
    max_y = min(height - 1, math.ceil(max(y1, y2, y3)))
    if min_x > max_x or min_y > max_y:
        return

    xs, ys = np.meshgrid(
        np.arange(min_x, max_x + 1, dtype=np.float64),
        np.arange(min_y, max_y + 1, dtype=np.float64),
    )
    inside = point_in_triangle(xs, ys, x1, y1, x2, y2, x3, y3, epsilon)
    mask[min_y:max_y + 1, min_x:max_x + 1] |= inside


def _subdivide(mask: np.ndarray, x: float, y: float, size: float, depth: int, epsilon: float) -> None:
    if depth == 0:
        fill_triangle(mask, ((x, y + size), (x + size / 2, y), (x + size, y + size)), epsilon)
        return

    half = size / 2
    _subdivide(mask, x + half / 2, y, half, depth - 1, epsilon)
    _subdivide(mask, x, y + half, half, depth - 1, epsilon)
    _subdivide(mask, x + half, y + half, half, depth - 1, epsilon)


def sierpinski_mask(width: int, height: int, depth: int, *, epsilon: float = TRIANGLE_EPSILON) -> np.ndarray:
    """Rasterise a Sierpinski triangle of ``depth`` subdivisions, centred on the canvas."""

    if depth < 0:
        raise ValueError("depth must be non-negative.")
    depth = min(depth, MAX_SIERPINSKI_DEPTH)
    mask = np.zeros((height, width), dtype=bool)
    size = min(width, height) * SIERPINSKI_FILL
    offset_x = (width - size) / 2
    offset_y = (height - size) / 2
    _subdivide(mask, offset_x, offset_y, size, depth, epsilon)
    return mask


def fern_step(x: float, y: float, u: float) -> tuple[float, float]:
    """Apply the affine map selected by the uniform sample ``u``."""

    for upper, a, b, c, d, e, f in FERN_MAPS:
        if u < upper:
            break
    return a * x + b * y + e, c * x + d * y + f


def fern_points(steps: int, rng: UniformSource) -> Iterator[tuple[float, float]]:
    """Yield the running point after each of ``steps`` random map applications."""

    x = y = 0.0
    for _ in range(steps):
        x, y = fern_step(x, y, rng.random())
        yield x, y


def fern_pixel(x: float, y: float, width: int, height: int) -> tuple[int, int]:
    """Fixed fern framing: stem at the bottom centre, about ten units tall."""

    scale = height / FERN_Y_SPAN
    px = math.floor(width / 2 + x * scale)
    py = math.floor(height - (y + FERN_Y_MARGIN) * scale)
    return px, py


def fern_mask(width: int, height: int, iterations: int, rng: UniformSource) -> np.ndarray:
    """Paint ``iterations * 1000`` fern points; points off the canvas are dropped."""

    mask = np.zeros((height, width), dtype=bool)
    for x, y in fern_points(max(0, int(iterations)) * FERN_STEPS_PER_ITERATION, rng):
        px, py = fern_pixel(x, y, width, height)
        if 0 <= px < width and 0 <= py < height:
            mask[py, px] = True
    return mask
