"""Rendering of pixel buffers, whole or split into horizontal bands."""

from __future__ import annotations

import os
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .escape import ITERATION_LIMIT, check_limit
from .geometry import Resolution, Viewport, pixel_to_point
from .kernels import DEFAULT_KERNEL, get_kernel


@dataclass(frozen=True)
class Band:
    """A run of consecutive pixel rows rendered by one worker."""

    index: int
    start_row: int
    rows: int
    viewport: Viewport

    def resolution(self, width: int) -> Resolution:
        return Resolution(width, self.rows)

    def bounds(self, width: int) -> tuple[int, int]:
        """Start and stop index of the band inside the full buffer."""

        return self.start_row * width, (self.start_row + self.rows) * width


@dataclass(frozen=True)
class RenderResult:
    """A finished buffer and how it was produced."""

    pixels: np.ndarray
    resolution: Resolution
    viewport: Viewport
    bands: tuple[Band, ...]
    workers: int
    kernel: str
    limit: int
    elapsed: float


def new_pixel_buffer(resolution: Resolution) -> np.ndarray:
    return np.zeros(resolution.pixel_count, dtype=np.uint8)


def default_worker_count() -> int:
    return max(os.cpu_count() or 1, 1)


def _check_buffer(pixels: np.ndarray, resolution: Resolution) -> None:
    if len(pixels) != resolution.pixel_count:
        raise ValueError(
            f"pixel buffer holds {len(pixels)} bytes but {resolution.width}x{resolution.height} "
            f"needs {resolution.pixel_count}"
        )


def render(
    pixels: np.ndarray,
    resolution: Resolution,
    viewport: Viewport,
    *,
    limit: int = ITERATION_LIMIT,
    kernel: str = DEFAULT_KERNEL,
) -> None:
    """Render ``viewport`` into ``pixels`` on the calling thread."""

    _check_buffer(pixels, resolution)
    get_kernel(kernel)(pixels, resolution, viewport, check_limit(limit))


def plan_bands(resolution: Resolution, viewport: Viewport, workers: int) -> list[Band]:
    """Split the rows of ``resolution`` into at most ``workers`` bands.

    Every band gets ``ceil(height / workers)`` rows except the last, which
    keeps whatever is left. Band viewports are cut out of the full viewport
    using the full resolution.
    """

    if isinstance(workers, bool) or not isinstance(workers, int) or workers < 1:
        raise ValueError(f"worker count must be a positive integer, got {workers!r}")

    width, height = resolution
    rows_per_band = -(-height // workers)
    bands = []
    for index, start_row in enumerate(range(0, height, rows_per_band)):
        rows = min(rows_per_band, height - start_row)
        top_left = pixel_to_point(resolution, (0, start_row), viewport)
        bottom_right = pixel_to_point(resolution, (width, start_row + rows), viewport)
        bands.append(Band(index, start_row, rows, Viewport(top_left, bottom_right)))
    return bands


def render_parallel(
    pixels: np.ndarray,
    resolution: Resolution,
    viewport: Viewport,
    workers: int,
    *,
    limit: int = ITERATION_LIMIT,
    kernel: str = DEFAULT_KERNEL,
) -> list[Band]:
    """Render ``viewport`` into ``pixels`` with one thread per band.

    Each worker owns a disjoint view of ``pixels``; the views are cut before
    any worker starts and the call returns once every band is done. An
    exception raised by any band is re-raised here.
    """

    _check_buffer(pixels, resolution)
    limit = check_limit(limit)
    band_kernel = get_kernel(kernel)
    width = resolution.width

    bands = plan_bands(resolution, viewport, workers)
    views = []
    for band in bands:
        start, stop = band.bounds(width)
        views.append(pixels[start:stop])

    def render_band(band: Band, view: np.ndarray) -> None:
        band_kernel(view, band.resolution(width), band.viewport, limit)

    with ThreadPoolExecutor(max_workers=len(bands)) as executor:
        list(executor.map(render_band, bands, views))
    return bands


def render_image(
    resolution: Resolution,
    viewport: Viewport,
    *,
    single_threaded: bool = False,
    workers: Optional[int] = None,
    limit: int = ITERATION_LIMIT,
    kernel: str = DEFAULT_KERNEL,
) -> RenderResult:
    """Allocate a buffer and render ``viewport`` into it."""

    pixels = new_pixel_buffer(resolution)
    started = time.perf_counter()
    if single_threaded:
        render(pixels, resolution, viewport, limit=limit, kernel=kernel)
        bands: tuple[Band, ...] = ()
        workers = 1
    else:
        if workers is None:
            workers = default_worker_count()
        bands = tuple(render_parallel(pixels, resolution, viewport, workers, limit=limit, kernel=kernel))
    elapsed = time.perf_counter() - started

    return RenderResult(
        pixels=pixels,
        resolution=resolution,
        viewport=viewport,
        bands=bands,
        workers=workers,
        kernel=kernel,
        limit=limit,
        elapsed=elapsed,
    )
