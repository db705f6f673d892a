import os
import sys
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

if _suppress_messages:
    warnings.filterwarnings(
        "ignore",
        message=r"Protobuf gencode version .* is exactly one major version older than the runtime version .*",
        category=UserWarning,
        module="google.protobuf",
    )

VERBOSE = _cli_verbose


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


import re
from argparse import ArgumentParser, ArgumentTypeError

import numpy as np
import PIL

from mandelbands import (
    DEFAULT_KERNEL,
    ITERATION_LIMIT,
    KERNEL_NAMES,
    Resolution,
    Viewport,
    default_worker_count,
    get_kernel,
    parse_complex,
    parse_resolution,
    render_image,
    write_image,
)
from mandelbands.escape import check_limit
from mandelbands.output import resolve_format

WORKERS_ENV = "MANDELBANDS_WORKERS"
USAGE_EXAMPLE = "python mandelbrot.py mandel.png 4000x3000 -1.20,0.35 -1,0.20"


@dataclass(frozen=True)
class RunConfig:
    output_path: Path
    image_format: str
    resolution: Resolution
    viewport: Viewport
    single_threaded: bool
    workers: int
    limit: int
    kernel: str


class _ArgumentParser(ArgumentParser):
    """Parser that reads ``-1.20,0.35`` as a corner, not as an option."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._negative_number_matcher = re.compile(r'^-\.?\d')


def resolution_arg(text: str) -> Resolution:
    resolution = parse_resolution(text)
    if resolution is None:
        raise ArgumentTypeError(f"invalid resolution '{text}', expected <width>x<height> with positive integers")
    return resolution


def point_arg(text: str) -> complex:
    point = parse_complex(text)
    if point is None:
        raise ArgumentTypeError(f"invalid point '{text}', expected <real>,<imag>")
    return point


def build_parser():
    parser = _ArgumentParser(
        prog="mandelbrot.py",
        description="Render the Mandelbrot set over a rectangle of the complex plane as a grayscale image.",
        epilog=f"Example: {USAGE_EXAMPLE}",
    )

    parser.add_argument('output', type=str,
                        help='path of the image file to write', metavar='OUTPUT')

    parser.add_argument('resolution', type=resolution_arg,
                        help='image size in pixels, e.g. 4000x3000', metavar='RESOLUTION')

    parser.add_argument('top_left', type=point_arg,
                        help='upper left corner in the complex plane, e.g. -1.20,0.35', metavar='TOP_LEFT')

    parser.add_argument('bottom_right', type=point_arg,
                        help='lower right corner in the complex plane, e.g. -1,0.20', metavar='BOTTOM_RIGHT')

    parser.add_argument('mode', nargs='?', default=None,
                        help='trailing mode word; anything but -st renders multi-threaded', metavar='MODE')

    parser.add_argument('-st', '--single-threaded', dest='single_threaded', action='store_true',
                        help='render the whole image on the calling thread')

    parser.add_argument('--workers', type=int, dest='workers', metavar='WORKERS', default=None,
                        help=f'number of bands rendered in parallel (default: ${WORKERS_ENV} or the CPU count)')

    parser.add_argument('--iterations', type=int, dest='iterations', metavar='ITERATIONS', default=ITERATION_LIMIT,
                        help=f'maximum number of iterations per point, 1 to {ITERATION_LIMIT}')

    parser.add_argument('--kernel', choices=KERNEL_NAMES, default=DEFAULT_KERNEL,
                        help='band kernel: "python" per pixel, "numpy" vectorised, "tensorflow" graph loop')

    parser.add_argument('--format', type=str, dest='format', metavar='FORMAT', default=None,
                        help='file format written by Pillow. Default: taken from the output suffix, else "png".')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including band layout and timings.')

    return parser


def _resolve_workers(opt, parser: ArgumentParser) -> int:
    if opt.workers is not None:
        workers = opt.workers
        source = "--workers"
    else:
        env_value = os.environ.get(WORKERS_ENV)
        if not env_value:
            return default_worker_count()
        try:
            workers = int(env_value)
        except ValueError:
            parser.error(f"${WORKERS_ENV} must be an integer, got '{env_value}'.")
        source = f"${WORKERS_ENV}"
    if workers < 1:
        parser.error(f"{source} must be at least 1.")
    return workers


def resolve_config(opt, parser: ArgumentParser) -> RunConfig:
    output_path = Path(opt.output).expanduser()
    if str(opt.output).endswith(tuple(filter(None, {os.sep, os.altsep}))):
        parser.error("OUTPUT must be a file path.")

    try:
        image_format = resolve_format(output_path, opt.format)
    except ValueError as exc:
        parser.error(str(exc))

    try:
        limit = check_limit(opt.iterations)
    except ValueError as exc:
        parser.error(str(exc))

    try:
        get_kernel(opt.kernel)
    except ImportError:
        parser.error(f"--kernel {opt.kernel} requires the '{opt.kernel}' extra to be installed.")

    if opt.mode is not None:
        log(f"Ignoring mode '{opt.mode}'; only -st selects single-threaded rendering.")

    single_threaded = bool(opt.single_threaded)
    return RunConfig(
        output_path=output_path,
        image_format=image_format,
        resolution=opt.resolution,
        viewport=Viewport(opt.top_left, opt.bottom_right),
        single_threaded=single_threaded,
        workers=1 if single_threaded else _resolve_workers(opt, parser),
        limit=limit,
        kernel=opt.kernel,
    )


def alert_error(error: Exception) -> None:
    print(f"Error: {error}", file=sys.stderr)
    print("", file=sys.stderr)
    print("Usage: mandelbrot.py <output> <resolution> <top left> <bottom right> [-st]", file=sys.stderr)
    print(f"Example: {USAGE_EXAMPLE}", file=sys.stderr)


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    opt = parser.parse_args(argv)

    global VERBOSE
    VERBOSE = bool(opt.verbose)

    config = resolve_config(opt, parser)

    log("NumPy version: %s" % np.__version__)
    log("Pillow version: %s" % PIL.__version__)

    if config.single_threaded:
        print("Performing single-threaded computations")
    else:
        print("Performing multi-threaded computations across {0} threads".format(config.workers))

    result = render_image(
        config.resolution,
        config.viewport,
        single_threaded=config.single_threaded,
        workers=config.workers,
        limit=config.limit,
        kernel=config.kernel,
    )

    for band in result.bands:
        log("band {0}: rows {1}-{2}, {3} to {4}".format(
            band.index,
            band.start_row,
            band.start_row + band.rows - 1,
            band.viewport.top_left,
            band.viewport.bottom_right,
        ))
    log("Rendered {0}x{1} with the {2} kernel in {3:.3f}s".format(
        result.resolution.width, result.resolution.height, result.kernel, result.elapsed))

    try:
        written = write_image(config.output_path, result.pixels, result.resolution, config.image_format)
    except OSError as exc:
        alert_error(exc)
        return 1

    log("Wrote %s" % written)
    return 0


if __name__ == '__main__':
    sys.exit(main())
