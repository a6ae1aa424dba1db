import math

import pytest

from fractals import FractalKind, burning_ship, classify, julia, mandelbrot, newton


@pytest.mark.parametrize("max_iterations", [1, 2, 10, 100, 1000])
def test_origin_never_escapes(max_iterations):
    result = mandelbrot(0.0, 0.0, max_iterations)
    assert result.bounded
    assert result.iterations == max_iterations


@pytest.mark.parametrize("max_iterations", [2, 5, 100])
def test_far_point_escapes_after_one_iteration(max_iterations):
    result = mandelbrot(2.0, 2.0, max_iterations)
    assert result.iterations == 1
    assert result.escaped


def test_single_iteration_budget_reads_as_bounded():
    # a count equal to the budget is in-set, even when the last step escaped
    result = mandelbrot(2.0, 2.0, 1)
    assert result.iterations == 1
    assert result.bounded


def test_mandelbrot_known_points():
    assert mandelbrot(-1.0, 0.0, 500).bounded
    assert mandelbrot(0.25, 0.0, 200).bounded
    assert mandelbrot(1.0, 0.0, 100).iterations == 2


def test_julia_starts_from_the_pixel():
    # |z0| >= 2 already: no iteration happens
    assert julia(-2.0, -1.5, 100, (-0.7, 0.27)).iterations == 0
    assert julia(0.0, 0.0, 50, (0.0, 0.0)).bounded


def test_burning_ship_folds_imaginary_part():
    # first step from z = 0 gives z = c for both kinds; they differ afterwards
    c = (-1.8, -0.05)
    assert burning_ship(*c, 1).iterations == mandelbrot(*c, 1).iterations
    assert burning_ship(0.0, 0.0, 30).bounded
    assert burning_ship(2.0, 2.0, 30).iterations == 1


def test_newton_converges_near_roots():
    for angle in (0.0, 2 * math.pi / 3, -2 * math.pi / 3):
        result = newton(math.cos(angle) * 1.1, math.sin(angle) * 1.1, 50)
        assert result.escaped
        assert result.iterations < 10


def test_newton_zero_derivative_is_bounded():
    result = newton(0.0, 0.0, 40)
    assert result.bounded
    assert result.iterations == 40


def test_classify_dispatch():
    assert classify(FractalKind.MANDELBROT, 0.0, 0.0, 20).bounded
    assert classify(FractalKind.JULIA, -2.0, -1.5, 20, (-0.7, 0.27)).iterations == 0
    with pytest.raises(ValueError):
        classify(FractalKind.SIERPINSKI, 0.0, 0.0, 20)


def test_zero_budget_counts_as_bounded():
    assert mandelbrot(5.0, 5.0, 0).bounded


def test_negative_budget_rejected():
    with pytest.raises(ValueError):
        mandelbrot(0.0, 0.0, -1)


def test_kind_parse():
    assert FractalKind.parse("Burning_Ship") is FractalKind.BURNING_SHIP
    assert not FractalKind.FERN.is_escape_time
    with pytest.raises(ValueError):
        FractalKind.parse("koch")
