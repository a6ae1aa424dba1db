"""Per-point classifiers for the escape-time fractal kinds."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

ESCAPE_RADIUS_SQUARED = 4.0
NEWTON_TOLERANCE = 1e-6


class FractalKind(str, Enum):
    """The closed set of fractal kinds the renderer understands."""

    MANDELBROT = "mandelbrot"
    JULIA = "julia"
    BURNING_SHIP = "burning-ship"
    NEWTON = "newton"
    SIERPINSKI = "sierpinski"
    FERN = "fern"

    @property
    def is_escape_time(self) -> bool:
        return self in ESCAPE_TIME_KINDS

    @classmethod
    def parse(cls, name: str) -> "FractalKind":
        normalized = str(name).strip().lower().replace("_", "-")
        for kind in cls:
            if kind.value == normalized:
                return kind
        raise ValueError(f"Unknown fractal kind '{name}'. Valid choices: {', '.join(k.value for k in cls)}.")


ESCAPE_TIME_KINDS = frozenset(
    {FractalKind.MANDELBROT, FractalKind.JULIA, FractalKind.BURNING_SHIP, FractalKind.NEWTON}
)


@dataclass(frozen=True)
class Classification:
    """Outcome of iterating one plane point.

    ``iterations == max_iterations`` means the point stayed bounded for the
    whole budget and is treated as inside the set.
    """

    iterations: int
    max_iterations: int

    @property
    def bounded(self) -> bool:
        return self.iterations >= self.max_iterations

    @property
    def escaped(self) -> bool:
        return not self.bounded


def _check_budget(max_iterations: int) -> int:
    max_iterations = int(max_iterations)
    if max_iterations < 0:
        raise ValueError("max_iterations must be non-negative.")
    return max_iterations


def mandelbrot(c_re: float, c_im: float, max_iterations: int) -> Classification:
    max_iterations = _check_budget(max_iterations)
    z_re = z_im = 0.0
    n = 0
    while n < max_iterations and z_re * z_re + z_im * z_im < ESCAPE_RADIUS_SQUARED:
        tmp = z_re * z_re - z_im * z_im + c_re
        z_im = 2.0 * z_re * z_im + c_im
        z_re = tmp
        n += 1
    return Classification(n, max_iterations)


def julia(z_re: float, z_im: float, max_iterations: int, constant: tuple[float, float]) -> Classification:
    max_iterations = _check_budget(max_iterations)
    c_re, c_im = float(constant[0]), float(constant[1])
    n = 0
    while n < max_iterations and z_re * z_re + z_im * z_im < ESCAPE_RADIUS_SQUARED:
        tmp = z_re * z_re - z_im * z_im + c_re
        z_im = 2.0 * z_re * z_im + c_im
        z_re = tmp
        n += 1
    return Classification(n, max_iterations)


def burning_ship(c_re: float, c_im: float, max_iterations: int) -> Classification:
    max_iterations = _check_budget(max_iterations)
    z_re = z_im = 0.0
    n = 0
    while n < max_iterations and z_re * z_re + z_im * z_im < ESCAPE_RADIUS_SQUARED:
        tmp = z_re * z_re - z_im * z_im + c_re
        z_im = abs(2.0 * z_re * z_im) + c_im
        z_re = tmp
        n += 1
    return Classification(n, max_iterations)


def newton(z_re: float, z_im: float, max_iterations: int) -> Classification:
    """Newton's method for ``z**3 - 1``.

    A point "escapes" when a step moves it by less than ``NEWTON_TOLERANCE``
    (it has converged to a root). A vanishing derivative ends the iteration
    immediately and classifies the point as bounded.
    """

    max_iterations = _check_budget(max_iterations)
    tolerance_sq = NEWTON_TOLERANCE * NEWTON_TOLERANCE
    n = 0
    while n < max_iterations:
        sq_re = z_re * z_re - z_im * z_im
        sq_im = 2.0 * z_re * z_im
        f_re = sq_re * z_re - sq_im * z_im - 1.0
        f_im = sq_re * z_im + sq_im * z_re
        d_re = 3.0 * sq_re
        d_im = 3.0 * sq_im
        denom = d_re * d_re + d_im * d_im
        if denom == 0.0:
            return Classification(max_iterations, max_iterations)
        q_re = (f_re * d_re + f_im * d_im) / denom
        q_im = (f_im * d_re - f_re * d_im) / denom
        z_re = z_re - q_re
        z_im = z_im - q_im
        n += 1
        if q_re * q_re + q_im * q_im < tolerance_sq:
            break
    return Classification(n, max_iterations)


def classify(
    kind: FractalKind,
    re: float,
    im: float,
    max_iterations: int,
    julia_constant: tuple[float, float] = (-0.7, 0.27),
) -> Classification:
    """Classify a single plane point for an escape-time ``kind``."""

    if kind is FractalKind.MANDELBROT:
        return mandelbrot(re, im, max_iterations)
    if kind is FractalKind.JULIA:
        return julia(re, im, max_iterations, julia_constant)
    if kind is FractalKind.BURNING_SHIP:
        return burning_ship(re, im, max_iterations)
    if kind is FractalKind.NEWTON:
        return newton(re, im, max_iterations)
    raise ValueError(f"{kind.value} is not an escape-time fractal and has no per-point classification.")
