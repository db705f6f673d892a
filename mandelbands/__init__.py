"""Public API for banded escape-time rendering."""

from .escape import ESCAPE_RADIUS_SQUARED, ITERATION_LIMIT, escape_time, intensity
from .geometry import Resolution, Viewport, pixel_to_point
from .kernels import DEFAULT_KERNEL, KERNEL_NAMES, get_kernel
from .output import write_image
from .parsing import parse_complex, parse_pair, parse_resolution
from .renderer import (
    Band,
    RenderResult,
    default_worker_count,
    new_pixel_buffer,
    plan_bands,
    render,
    render_image,
    render_parallel,
)

__version__ = "0.1.0"

__all__ = [
    "Band",
    "DEFAULT_KERNEL",
    "ESCAPE_RADIUS_SQUARED",
    "ITERATION_LIMIT",
    "KERNEL_NAMES",
    "RenderResult",
    "Resolution",
    "Viewport",
    "default_worker_count",
    "escape_time",
    "get_kernel",
    "intensity",
    "new_pixel_buffer",
    "parse_complex",
    "parse_pair",
    "parse_resolution",
    "pixel_to_point",
    "plan_bands",
    "render",
    "render_image",
    "render_parallel",
    "write_image",
]
