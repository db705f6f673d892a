"""Pixel grid and complex-plane geometry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True)
class Resolution:
    """Pixel dimensions of an output buffer."""

    width: int
    height: int

    def __post_init__(self) -> None:
        for name in ("width", "height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")

    def __iter__(self) -> Iterator[int]:
        yield self.width
        yield self.height

    @property
    def pixel_count(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class Viewport:
    """Rectangle of the complex plane spanned by two corners.

    The imaginary axis grows upwards while pixel rows grow downwards, so a
    conventional viewport has ``top_left.imag > bottom_right.imag``.
    """

    top_left: complex
    bottom_right: complex

    @property
    def width(self) -> float:
        return self.bottom_right.real - self.top_left.real

    @property
    def height(self) -> float:
        return self.top_left.imag - self.bottom_right.imag


def pixel_to_point(resolution: Resolution, pixel: tuple[int, int], viewport: Viewport) -> complex:
    """Map ``pixel`` (column, row) to its point in ``viewport``.

    Both coordinates may equal the resolution bound, which yields the right or
    bottom edge of the viewport.
    """

    column, row = pixel
    plane_width = viewport.width
    plane_height = viewport.height
    real = viewport.top_left.real + column * plane_width / resolution.width
    imag = viewport.top_left.imag - row * plane_height / resolution.height
    return complex(real, imag)
