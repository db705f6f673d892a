import numpy as np
import pytest

tf = pytest.importorskip("tensorflow")

from mandelbands import Resolution, Viewport, get_kernel, new_pixel_buffer, render, render_parallel  # noqa: E402
from mandelbands.kernels import numpy_kernel  # noqa: E402
from mandelbands.tensor import tensorflow_kernel  # noqa: E402

SQUARE = Viewport(complex(-2.0, 2.0), complex(2.0, -2.0))


def test_registry_loads_tensorflow_kernel():
    assert get_kernel("tensorflow") is tensorflow_kernel


@pytest.mark.parametrize("limit", [1, 20, 255])
def test_tensorflow_kernel_matches_numpy_kernel(limit):
    resolution = Resolution(16, 12)
    viewport = Viewport(complex(-2.25, 1.5), complex(0.75, -1.5))
    expected = new_pixel_buffer(resolution)
    actual = new_pixel_buffer(resolution)

    numpy_kernel(expected, resolution, viewport, limit)
    tensorflow_kernel(actual, resolution, viewport, limit)

    np.testing.assert_array_equal(actual, expected)


def test_tensorflow_bands_match_single_threaded():
    resolution = Resolution(16, 16)
    single = new_pixel_buffer(resolution)
    render(single, resolution, SQUARE, kernel="tensorflow")

    parallel = new_pixel_buffer(resolution)
    render_parallel(parallel, resolution, SQUARE, 3, kernel="tensorflow")

    np.testing.assert_array_equal(parallel, single)
