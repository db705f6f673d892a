"""TensorFlow band kernel."""

from __future__ import annotations

import numpy as np
import tensorflow as tf

from .escape import ESCAPE_RADIUS_SQUARED
from .geometry import Resolution, Viewport
from .kernels import sample_grid, store_counts

DEVICE = "/CPU:0"


@tf.function
def _escape_step(
    i: tf.Tensor,
    z_re: tf.Tensor,
    z_im: tf.Tensor,
    c_re: tf.Tensor,
    c_im: tf.Tensor,
    counts: tf.Tensor,
    active: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Record points escaping at iteration ``i`` and advance the others."""

    radius = tf.constant(ESCAPE_RADIUS_SQUARED, dtype=z_re.dtype)
    escaped = tf.logical_and(active, z_re * z_re + z_im * z_im > radius)
    counts = tf.where(escaped, i, counts)
    active = tf.logical_and(active, tf.logical_not(escaped))
    next_re = z_re * z_re - z_im * z_im + c_re
    next_im = tf.constant(2.0, dtype=z_im.dtype) * z_re * z_im + c_im
    z_re = tf.where(active, next_re, z_re)
    z_im = tf.where(active, next_im, z_im)
    return z_re, z_im, counts, active


@tf.function
def _escape_run(c_re: tf.Tensor, c_im: tf.Tensor, limit: tf.Tensor) -> tf.Tensor:
    """Iterate until every point escaped or ``limit`` iterations ran."""

    limit = tf.cast(limit, tf.int32)
    i = tf.constant(0, dtype=tf.int32)
    z_re = tf.zeros_like(c_re)
    z_im = tf.zeros_like(c_im)
    counts = tf.fill(tf.shape(c_re), limit)
    active = tf.ones_like(c_re, tf.bool)

    def cond(i, z_re, z_im, counts, active):
        return tf.logical_and(tf.less(i, limit), tf.reduce_any(active))

    def body(i, z_re, z_im, counts, active):
        z_re, z_im, counts, active = _escape_step(i, z_re, z_im, c_re, c_im, counts, active)
        return i + 1, z_re, z_im, counts, active

    _, _, _, counts, _ = tf.while_loop(cond, body, (i, z_re, z_im, counts, active))
    return counts


def tensorflow_kernel(pixels: np.ndarray, resolution: Resolution, viewport: Viewport, limit: int) -> None:
    c_re, c_im = sample_grid(resolution, viewport)
    with tf.device(DEVICE):
        counts = _escape_run(
            tf.convert_to_tensor(c_re, dtype=tf.float64),
            tf.convert_to_tensor(c_im, dtype=tf.float64),
            tf.constant(limit, dtype=tf.int32),
        )
    store_counts(pixels, counts.numpy(), limit)
