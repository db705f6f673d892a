"""Encoding of rendered buffers into image files."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

import numpy as np
import PIL.Image

from .geometry import Resolution

DEFAULT_FORMAT = "png"


def _pil_format_name(ext: str) -> str:
    upper = ext.upper()
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper


def supported_formats() -> set[str]:
    """Pillow format names that can be written."""

    PIL.Image.init()
    return set(PIL.Image.SAVE)


def resolve_format(path: Path, image_format: Optional[str] = None) -> str:
    """Pillow format for ``path``: explicit, from the suffix, or PNG."""

    ext = (image_format or path.suffix or DEFAULT_FORMAT).lower().lstrip(".") or DEFAULT_FORMAT
    pil_format = _pil_format_name(ext)
    if pil_format not in supported_formats():
        raise ValueError(f"Pillow cannot write '{ext}' images.")
    return pil_format


def to_image(pixels: np.ndarray, resolution: Resolution) -> PIL.Image.Image:
    """Wrap ``pixels`` as a single-channel 8-bit image."""

    if len(pixels) != resolution.pixel_count:
        raise ValueError(
            f"pixel buffer holds {len(pixels)} bytes, expected {resolution.pixel_count}"
        )
    raster = np.asarray(pixels, dtype=np.uint8).reshape(resolution.height, resolution.width)
    return PIL.Image.fromarray(raster)


def write_image(
    path: Union[str, Path],
    pixels: np.ndarray,
    resolution: Resolution,
    image_format: Optional[str] = None,
) -> Path:
    """Write ``pixels`` to ``path`` as a grayscale raster and return the path."""

    output_path = Path(path).expanduser()
    pil_format = resolve_format(output_path, image_format)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    to_image(pixels, resolution).save(str(output_path), format=pil_format)
    return output_path
