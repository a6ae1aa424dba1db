import math

import numpy as np
import pytest

from fractals import fern_mask, fern_points, sierpinski_depth, sierpinski_mask
from fractals import geometry
from fractals.geometry import fern_pixel, point_in_triangle


class FixedSequence:
    """Uniform source replaying a fixed list of samples."""

    def __init__(self, values):
        self._values = list(values)
        self._index = 0

    def random(self):
        value = self._values[self._index % len(self._values)]
        self._index += 1
        return value


@pytest.mark.parametrize("max_iterations, depth", [(0, 0), (9, 0), (10, 1), (55, 5), (100, 10), (5000, 10)])
def test_depth_from_budget(max_iterations, depth):
    assert sierpinski_depth(max_iterations) == depth


def test_point_in_triangle():
    triangle = (0.0, 10.0, 5.0, 0.0, 10.0, 10.0)
    assert point_in_triangle(5.0, 5.0, *triangle)
    assert point_in_triangle(0.0, 10.0, *triangle)
    assert not point_in_triangle(0.0, 0.0, *triangle)
    assert not point_in_triangle(11.0, 10.0, *triangle)


def test_depth_zero_is_a_filled_triangle():
    mask = sierpinski_mask(100, 100, 0)
    # apex at the top centre, base along the bottom of the 80px frame
    assert mask[10, 50]
    assert mask[89, 11]
    assert mask[89, 89]
    assert not mask[10, 20]
    assert not mask[95, 50]


def test_middle_is_removed_after_one_subdivision():
    full = sierpinski_mask(100, 100, 0)
    once = sierpinski_mask(100, 100, 1)
    # centre of the inverted middle triangle
    assert full[75, 50]
    assert not once[75, 50]


def test_painted_area_shrinks_with_depth():
    counts = [int(sierpinski_mask(200, 200, depth).sum()) for depth in range(4)]
    assert all(a > b for a, b in zip(counts, counts[1:]))


def test_triangle_stays_on_canvas_for_wide_frames():
    mask = sierpinski_mask(300, 60, 3)
    assert mask.shape == (60, 300)
    assert mask.any()
    assert not mask[:, :100].any()


def test_fern_points_are_finite_and_bounded():
    rng = np.random.default_rng(1234)
    for x, y in fern_points(50_000, rng):
        assert math.isfinite(x) and math.isfinite(y)
        assert -2.5 <= x <= 3.0
        assert -0.5 <= y <= 10.5


def test_fern_map_selection_by_range():
    assert next(fern_points(1, FixedSequence([0.005]))) == (0.0, 0.0)
    assert next(fern_points(1, FixedSequence([0.5]))) == (0.0, 1.6)
    assert next(fern_points(1, FixedSequence([0.9]))) == (0.0, 1.6)
    assert next(fern_points(1, FixedSequence([0.95]))) == (0.0, 0.44)


def test_fern_stem_only_paints_one_pixel():
    mask = fern_mask(110, 110, 1, FixedSequence([0.0]))
    assert mask.sum() == 1
    assert mask[105, 55]


def test_fern_pixel_framing():
    assert fern_pixel(0.0, 0.0, 110, 110) == (55, 105)
    px, py = fern_pixel(0.0, 10.0, 110, 110)
    assert py >= 0


def test_fern_off_canvas_points_are_dropped(monkeypatch):
    monkeypatch.setattr(geometry, "fern_pixel", lambda x, y, width, height: (-1, height))
    mask = fern_mask(16, 16, 1, FixedSequence([0.5]))
    assert not mask.any()


def test_fern_is_deterministic_for_a_seed():
    first = fern_mask(64, 64, 2, np.random.default_rng(7))
    second = fern_mask(64, 64, 2, np.random.default_rng(7))
    assert np.array_equal(first, second)
    assert first.sum() > 100
