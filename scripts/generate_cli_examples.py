from __future__ import annotations

import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

EXAMPLES_ROOT = Path("examples/cli-options")
SCRIPT = Path(__file__).resolve().parent.parent / "mandelbrot.py"
BASE_VIEW = ["320x240", "-2.25,1.5", "0.75,-1.5"]


@dataclass
class Example:
    name: str
    args: list[str]
    output: Path
    clean: list[Path] | None = None

    def full_args(self) -> list[str]:
        return [sys.executable, str(SCRIPT), *self.args]


def _example(name: str, filename: str, view: list[str], *options: str) -> Example:
    target = EXAMPLES_ROOT / name / filename
    return Example(
        name=name,
        args=[str(target), *view, *options],
        output=target,
        clean=[EXAMPLES_ROOT / name],
    )


EXAMPLES: list[Example] = [
    _example("overview", "overview.png", BASE_VIEW),
    _example("single-threaded", "single.png", BASE_VIEW, "-st"),
    _example("workers", "two-bands.png", BASE_VIEW, "--workers", "2"),
    _example("uneven-bands", "seven-bands.png", BASE_VIEW, "--workers", "7"),
    _example("seahorse-valley", "seahorse.png", ["400x400", "-0.80,0.20", "-0.70,0.10"]),
    _example("book-cover", "cover.png", ["400x300", "-1.20,0.35", "-1,0.20"]),
    _example("iterations", "shallow.png", BASE_VIEW, "--iterations", "32"),
    _example("python-kernel", "reference.png", ["80x60", "-2.25,1.5", "0.75,-1.5"], "--kernel", "python"),
    _example("format", "overview.bmp", BASE_VIEW, "--format", "bmp"),
    _example("verbose", "diagnostic.png", BASE_VIEW, "--verbose"),
]


def _ensure_clean(paths: Iterable[Path]) -> None:
    for path in paths:
        if path.exists():
            if path.is_dir():
                shutil.rmtree(path)
            else:
                path.unlink()


def _prepare(example: Example) -> None:
    _ensure_clean(example.clean or [])
    example.output.parent.mkdir(parents=True, exist_ok=True)


def _verify(example: Example) -> None:
    if not example.output.is_file():
        raise RuntimeError(f"Expected file {example.output} was not created")
    if example.output.stat().st_size == 0:
        raise RuntimeError(f"File {example.output} is empty")


def main() -> None:
    EXAMPLES_ROOT.mkdir(parents=True, exist_ok=True)
    for example in EXAMPLES:
        print(f"\n[cli-example] {example.name}")
        _prepare(example)
        completed = subprocess.run(example.full_args(), check=True)
        if completed.returncode != 0:
            raise RuntimeError(f"Example {example.name} failed with {completed.returncode}")
        _verify(example)
    print("\nAll CLI examples generated successfully.")


if __name__ == "__main__":
    main()
