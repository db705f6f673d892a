"""Escape-time classification for the quadratic map ``z -> z**2 + c``."""

from __future__ import annotations

from typing import Optional

ESCAPE_RADIUS_SQUARED = 4.0
ITERATION_LIMIT = 255


def check_limit(limit: int) -> int:
    """Return ``limit`` if every escape count it allows maps to a non-zero byte."""

    if isinstance(limit, bool) or not isinstance(limit, int):
        raise ValueError(f"iteration limit must be an integer, got {limit!r}")
    if not 1 <= limit <= ITERATION_LIMIT:
        raise ValueError(f"iteration limit must lie in [1, {ITERATION_LIMIT}], got {limit}")
    return limit


def escape_time(c: complex, limit: int = ITERATION_LIMIT) -> Optional[int]:
    """Return the iteration at which the orbit of ``c`` escapes, or ``None``.

    The recurrence is spelled out on the real and imaginary parts so the
    vectorised kernels can repeat the exact same float operations.
    """

    c_re = c.real
    c_im = c.imag
    z_re = 0.0
    z_im = 0.0
    for i in range(limit):
        if z_re * z_re + z_im * z_im > ESCAPE_RADIUS_SQUARED:
            return i
        z_re, z_im = z_re * z_re - z_im * z_im + c_re, 2.0 * z_re * z_im + c_im
    return None


def intensity(count: Optional[int]) -> int:
    """Grayscale byte for an escape result: black when bounded."""

    if count is None:
        return 0
    return 255 - count
