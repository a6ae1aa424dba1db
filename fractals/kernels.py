"""Vectorised escape-time kernels evaluated over a whole pixel grid."""

from __future__ import annotations

from typing import Callable, Optional

import numpy as np
import tensorflow as tf

from .algorithms import ESCAPE_RADIUS_SQUARED, NEWTON_TOLERANCE, FractalKind

Update = Callable[[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor], tuple[tf.Tensor, tf.Tensor]]


def _quadratic_update(z_re: tf.Tensor, z_im: tf.Tensor, c_re: tf.Tensor, c_im: tf.Tensor) -> tuple[tf.Tensor, tf.Tensor]:
    return z_re * z_re - z_im * z_im + c_re, 2.0 * z_re * z_im + c_im


def _burning_ship_update(z_re: tf.Tensor, z_im: tf.Tensor, c_re: tf.Tensor, c_im: tf.Tensor) -> tuple[tf.Tensor, tf.Tensor]:
    return z_re * z_re - z_im * z_im + c_re, tf.abs(2.0 * z_re * z_im) + c_im


def _make_escape_run(update: Update):
    @tf.function
    def run(z_re: tf.Tensor, z_im: tf.Tensor, c_re: tf.Tensor, c_im: tf.Tensor, max_iterations: tf.Tensor) -> tf.Tensor:
        """Iterate ``update`` until every point escapes or the budget runs out."""

        max_iterations = tf.cast(max_iterations, tf.int32)
        horizon = tf.constant(ESCAPE_RADIUS_SQUARED, dtype=z_re.dtype)
        i = tf.constant(0, dtype=tf.int32)
        ns = tf.zeros_like(z_re, dtype=tf.int32)
        active = z_re * z_re + z_im * z_im < horizon

        def cond(i, z_re, z_im, ns, active):
            return tf.logical_and(tf.less(i, max_iterations), tf.reduce_any(active))

        def body(i, z_re, z_im, ns, active):
            new_re, new_im = update(z_re, z_im, c_re, c_im)
            z_re = tf.where(active, new_re, z_re)
            z_im = tf.where(active, new_im, z_im)
            ns = ns + tf.cast(active, tf.int32)
            active = tf.logical_and(active, z_re * z_re + z_im * z_im < horizon)
            return i + 1, z_re, z_im, ns, active

        _, _, _, ns, _ = tf.while_loop(cond, body, (i, z_re, z_im, ns, active))
        return ns

    return run


_quadratic_run = _make_escape_run(_quadratic_update)
_burning_ship_run = _make_escape_run(_burning_ship_update)


@tf.function
def _newton_run(z_re: tf.Tensor, z_im: tf.Tensor, max_iterations: tf.Tensor) -> tf.Tensor:
    """Newton iteration for ``z**3 - 1`` with per-point convergence masks."""

    max_iterations = tf.cast(max_iterations, tf.int32)
    tolerance_sq = tf.constant(NEWTON_TOLERANCE * NEWTON_TOLERANCE, dtype=z_re.dtype)
    zero = tf.zeros_like(z_re)
    one = tf.ones_like(z_re)
    i = tf.constant(0, dtype=tf.int32)
    ns = tf.zeros_like(z_re, dtype=tf.int32)
    active = tf.ones_like(ns, dtype=tf.bool)

    def cond(i, z_re, z_im, ns, active):
        return tf.logical_and(tf.less(i, max_iterations), tf.reduce_any(active))

    def body(i, z_re, z_im, ns, active):
        sq_re = z_re * z_re - z_im * z_im
        sq_im = 2.0 * z_re * z_im
        f_re = sq_re * z_re - sq_im * z_im - 1.0
        f_im = sq_re * z_im + sq_im * z_re
        d_re = 3.0 * sq_re
        d_im = 3.0 * sq_im
        denom = d_re * d_re + d_im * d_im
        flat = tf.equal(denom, zero)
        safe = tf.where(flat, one, denom)
        q_re = (f_re * d_re + f_im * d_im) / safe
        q_im = (f_im * d_re - f_re * d_im) / safe

        degenerate = tf.logical_and(active, flat)
        stepping = tf.logical_and(active, tf.logical_not(flat))
        z_re = tf.where(stepping, z_re - q_re, z_re)
        z_im = tf.where(stepping, z_im - q_im, z_im)
        ns = ns + tf.cast(stepping, tf.int32)
        ns = tf.where(degenerate, tf.fill(tf.shape(ns), max_iterations), ns)
        converged = q_re * q_re + q_im * q_im < tolerance_sq
        active = tf.logical_and(stepping, tf.logical_not(converged))
        return i + 1, z_re, z_im, ns, active

    _, _, _, ns, _ = tf.while_loop(cond, body, (i, z_re, z_im, ns, active))
    return ns


def escape_iterations(
    kind: FractalKind,
    re: np.ndarray,
    im: np.ndarray,
    max_iterations: int,
    *,
    julia_constant: tuple[float, float] = (-0.7, 0.27),
    device: Optional[str] = None,
) -> np.ndarray:
    """Return the iteration count of every point of the ``re``/``im`` grid.

    ``re`` and ``im`` must share a shape. Points that never escape carry
    ``max_iterations``.
    """

    if max_iterations < 0:
        raise ValueError("max_iterations must be non-negative.")
    re = np.asarray(re, dtype=np.float64)
    im = np.asarray(im, dtype=np.float64)
    if re.shape != im.shape:
        raise ValueError("re and im grids must have the same shape.")

    budget = tf.constant(int(max_iterations), dtype=tf.int32)

    with tf.device(device if device is not None else "/CPU:0"):
        re_tf = tf.convert_to_tensor(re, dtype=tf.float64)
        im_tf = tf.convert_to_tensor(im, dtype=tf.float64)

        if kind is FractalKind.MANDELBROT:
            zeros = tf.zeros_like(re_tf)
            ns = _quadratic_run(zeros, zeros, re_tf, im_tf, budget)
        elif kind is FractalKind.JULIA:
            c_re = tf.fill(tf.shape(re_tf), tf.constant(float(julia_constant[0]), dtype=tf.float64))
            c_im = tf.fill(tf.shape(re_tf), tf.constant(float(julia_constant[1]), dtype=tf.float64))
            ns = _quadratic_run(re_tf, im_tf, c_re, c_im, budget)
        elif kind is FractalKind.BURNING_SHIP:
            zeros = tf.zeros_like(re_tf)
            ns = _burning_ship_run(zeros, zeros, re_tf, im_tf, budget)
        elif kind is FractalKind.NEWTON:
            ns = _newton_run(re_tf, im_tf, budget)
        else:
            raise ValueError(f"{kind.value} is not an escape-time fractal.")

    return ns.numpy()
