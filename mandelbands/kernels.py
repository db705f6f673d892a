"""Band kernels: fill a pixel buffer for one viewport at one resolution.

Every kernel takes ``(pixels, resolution, viewport, limit)`` and overwrites
all ``resolution.pixel_count`` bytes of ``pixels``. ``pixels`` is usually a
view into a larger buffer, so kernels write in place and never rebind it.
"""

from __future__ import annotations

from typing import Callable

import numpy as np

from .escape import ESCAPE_RADIUS_SQUARED, escape_time, intensity
from .geometry import Resolution, Viewport, pixel_to_point

Kernel = Callable[[np.ndarray, Resolution, Viewport, int], None]

KERNEL_NAMES = ("python", "numpy", "tensorflow")
DEFAULT_KERNEL = "numpy"


def python_kernel(pixels: np.ndarray, resolution: Resolution, viewport: Viewport, limit: int) -> None:
    """Reference kernel: map and classify one pixel at a time."""

    width, height = resolution
    for row in range(height):
        for column in range(width):
            point = pixel_to_point(resolution, (column, row), viewport)
            pixels[row * width + column] = intensity(escape_time(point, limit))


def sample_grid(resolution: Resolution, viewport: Viewport) -> tuple[np.ndarray, np.ndarray]:
    """Real and imaginary parts of every pixel, shaped ``(height, width)``.

    Evaluated in the same operation order as :func:`pixel_to_point`.
    """

    width, height = resolution
    columns = np.arange(width, dtype=np.float64)
    rows = np.arange(height, dtype=np.float64)
    real = viewport.top_left.real + columns * viewport.width / width
    imag = viewport.top_left.imag - rows * viewport.height / height
    c_re, c_im = np.meshgrid(real, imag)
    return c_re, c_im


def store_counts(pixels: np.ndarray, counts: np.ndarray, limit: int) -> None:
    """Write escape counts into ``pixels``; ``limit`` marks bounded points."""

    shades = np.where(counts >= limit, 0, 255 - counts)
    pixels[:] = shades.astype(np.uint8).reshape(-1)


def numpy_kernel(pixels: np.ndarray, resolution: Resolution, viewport: Viewport, limit: int) -> None:
    """Vectorised kernel iterating the whole band at once."""

    c_re, c_im = sample_grid(resolution, viewport)
    z_re = np.zeros_like(c_re)
    z_im = np.zeros_like(c_im)
    counts = np.full(c_re.shape, limit, dtype=np.int64)
    active = np.ones(c_re.shape, dtype=bool)

    with np.errstate(over="ignore", invalid="ignore"):
        for i in range(limit):
            escaped = active & (z_re * z_re + z_im * z_im > ESCAPE_RADIUS_SQUARED)
            counts[escaped] = i
            active &= ~escaped
            if not active.any():
                break
            next_re = z_re * z_re - z_im * z_im + c_re
            next_im = 2.0 * z_re * z_im + c_im
            z_re = np.where(active, next_re, z_re)
            z_im = np.where(active, next_im, z_im)

    store_counts(pixels, counts, limit)


def get_kernel(name: str) -> Kernel:
    """Look up a kernel by name."""

    if name == "python":
        return python_kernel
    if name == "numpy":
        return numpy_kernel
    if name == "tensorflow":
        from .tensor import tensorflow_kernel

        return tensorflow_kernel
    raise ValueError(f"Unknown kernel '{name}'. Valid choices: {', '.join(KERNEL_NAMES)}.")
