import numpy as np
import pytest

import mandelbands.renderer as renderer
from mandelbands import (
    Band,
    Resolution,
    Viewport,
    new_pixel_buffer,
    pixel_to_point,
    plan_bands,
    render,
    render_image,
    render_parallel,
)

# Grid steps are exact binary fractions, so band sub-viewports reproduce the
# full-image sample points exactly.
SQUARE = Viewport(complex(-2.0, 2.0), complex(2.0, -2.0))
WIDE = Viewport(complex(-2.0, 1.5), complex(1.0, -1.5))


def test_new_pixel_buffer():
    pixels = new_pixel_buffer(Resolution(5, 3))
    assert pixels.dtype == np.uint8
    assert pixels.shape == (15,)
    assert not pixels.any()


@pytest.mark.parametrize("height, workers", [(h, w) for h in range(1, 41) for w in range(1, 46, 4)])
def test_plan_bands_is_exact_cover(height, workers):
    bands = plan_bands(Resolution(3, height), SQUARE, workers)
    rows_per_band = -(-height // workers)

    assert 1 <= len(bands) <= workers
    covered = []
    for index, band in enumerate(bands):
        assert band.index == index
        covered.extend(range(band.start_row, band.start_row + band.rows))
    assert covered == list(range(height))
    assert all(band.rows == rows_per_band for band in bands[:-1])
    assert 1 <= bands[-1].rows <= rows_per_band


def test_plan_bands_front_loads_rows():
    assert [band.rows for band in plan_bands(Resolution(2, 10), SQUARE, 4)] == [3, 3, 3, 1]
    assert [band.rows for band in plan_bands(Resolution(2, 8), SQUARE, 3)] == [3, 3, 2]
    assert [band.rows for band in plan_bands(Resolution(2, 8), SQUARE, 4)] == [2, 2, 2, 2]
    assert [band.rows for band in plan_bands(Resolution(2, 3), SQUARE, 8)] == [1, 1, 1]


def test_plan_bands_is_deterministic():
    first = plan_bands(Resolution(31, 97), WIDE, 6)
    second = plan_bands(Resolution(31, 97), WIDE, 6)
    assert first == second


def test_band_viewports_come_from_full_space():
    resolution = Resolution(16, 12)
    bands = plan_bands(resolution, WIDE, 5)
    for band in bands:
        assert band.viewport.top_left == pixel_to_point(resolution, (0, band.start_row), WIDE)
        assert band.viewport.bottom_right == pixel_to_point(
            resolution, (16, band.start_row + band.rows), WIDE
        )
    assert bands[0].viewport.top_left == WIDE.top_left
    assert bands[-1].viewport.bottom_right == WIDE.bottom_right


def test_band_bounds_and_resolution():
    band = Band(index=2, start_row=6, rows=3, viewport=SQUARE)
    assert band.bounds(10) == (60, 90)
    assert band.resolution(10) == Resolution(10, 3)


@pytest.mark.parametrize("workers", [0, -1, 2.0, True])
def test_plan_bands_rejects_bad_worker_count(workers):
    with pytest.raises(ValueError):
        plan_bands(Resolution(4, 4), SQUARE, workers)


def test_render_rejects_wrong_buffer_size():
    with pytest.raises(ValueError, match="pixel buffer"):
        render(np.zeros(10, dtype=np.uint8), Resolution(4, 4), SQUARE)
    with pytest.raises(ValueError, match="pixel buffer"):
        render_parallel(np.zeros(17, dtype=np.uint8), Resolution(4, 4), SQUARE, 2)


@pytest.mark.parametrize("workers", range(1, 17))
def test_parallel_matches_single_threaded(workers):
    resolution = Resolution(16, 16)
    single = new_pixel_buffer(resolution)
    render(single, resolution, SQUARE)

    parallel = new_pixel_buffer(resolution)
    render_parallel(parallel, resolution, SQUARE, workers)

    np.testing.assert_array_equal(parallel, single)


@pytest.mark.parametrize("workers", [1, 2, 5, 7, 24])
def test_parallel_matches_single_threaded_uneven_bands(workers):
    resolution = Resolution(32, 24)
    single = new_pixel_buffer(resolution)
    render(single, resolution, WIDE)

    parallel = new_pixel_buffer(resolution)
    render_parallel(parallel, resolution, WIDE, workers)

    np.testing.assert_array_equal(parallel, single)


@pytest.mark.parametrize("workers", [1, 3, 8])
def test_parallel_python_kernel_matches_single_threaded(workers):
    resolution = Resolution(8, 8)
    single = new_pixel_buffer(resolution)
    render(single, resolution, SQUARE, kernel="python")

    parallel = new_pixel_buffer(resolution)
    render_parallel(parallel, resolution, SQUARE, workers, kernel="python")

    np.testing.assert_array_equal(parallel, single)


@pytest.mark.parametrize("workers", [None, 1, 4])
def test_every_pixel_is_written(workers):
    resolution = Resolution(16, 12)
    zeros = new_pixel_buffer(resolution)
    filled = np.full(resolution.pixel_count, 0xAA, dtype=np.uint8)
    if workers is None:
        render(zeros, resolution, WIDE)
        render(filled, resolution, WIDE)
    else:
        render_parallel(zeros, resolution, WIDE, workers)
        render_parallel(filled, resolution, WIDE, workers)
    np.testing.assert_array_equal(filled, zeros)


def test_render_parallel_returns_band_plan():
    resolution = Resolution(4, 7)
    bands = render_parallel(new_pixel_buffer(resolution), resolution, SQUARE, 3)
    assert [band.rows for band in bands] == [3, 3, 1]


def test_band_failure_aborts_render(monkeypatch):
    def failing_kernel(pixels, resolution, viewport, limit):
        if viewport.top_left.imag < 0:
            raise RuntimeError("band exploded")
        pixels[:] = 1

    monkeypatch.setattr(renderer, "get_kernel", lambda name: failing_kernel)
    resolution = Resolution(4, 8)
    with pytest.raises(RuntimeError, match="band exploded"):
        render_parallel(new_pixel_buffer(resolution), resolution, SQUARE, 4)


def test_render_image_single_threaded():
    resolution = Resolution(16, 16)
    result = render_image(resolution, SQUARE, single_threaded=True)
    expected = new_pixel_buffer(resolution)
    render(expected, resolution, SQUARE)

    np.testing.assert_array_equal(result.pixels, expected)
    assert result.bands == ()
    assert result.workers == 1
    assert result.kernel == "numpy"
    assert result.limit == 255
    assert result.elapsed >= 0.0


def test_render_image_parallel():
    resolution = Resolution(16, 9)
    result = render_image(resolution, SQUARE, workers=3)
    assert result.workers == 3
    assert [band.rows for band in result.bands] == [3, 3, 3]
    assert result.pixels.shape == (144,)


def test_render_image_defaults_to_cpu_count(monkeypatch):
    monkeypatch.setattr(renderer.os, "cpu_count", lambda: 2)
    result = render_image(Resolution(8, 8), SQUARE)
    assert result.workers == 2
    assert len(result.bands) == 2


def test_default_worker_count_without_cpu_count(monkeypatch):
    monkeypatch.setattr(renderer.os, "cpu_count", lambda: None)
    assert renderer.default_worker_count() == 1


@pytest.mark.parametrize("single_threaded", [True, False])
def test_single_pixel_with_equal_corners(single_threaded):
    corner = complex(0.3, 0.1)
    result = render_image(Resolution(1, 1), Viewport(corner, corner), single_threaded=single_threaded, workers=4)
    assert result.pixels.shape == (1,)
    assert len(result.bands) == (0 if single_threaded else 1)


def test_render_rejects_bad_limit():
    resolution = Resolution(2, 2)
    with pytest.raises(ValueError):
        render(new_pixel_buffer(resolution), resolution, SQUARE, limit=0)
    with pytest.raises(ValueError):
        render_parallel(new_pixel_buffer(resolution), resolution, SQUARE, 2, limit=300)
