"""Parsers for the textual forms of resolutions and corner points."""

from __future__ import annotations

from typing import Callable, Optional, TypeVar

from .geometry import Resolution

T = TypeVar("T")


def parse_pair(text: str, separator: str, convert: Callable[[str], T]) -> Optional[tuple[T, T]]:
    """Parse ``"<left><separator><right>"`` with ``convert`` applied to each half.

    Returns ``None`` when the separator is missing or either half does not
    convert, e.g. ``parse_pair("10,20", ",", int) == (10, 20)`` while
    ``",10"`` and ``"10,20xy"`` both give ``None``.
    """

    index = text.find(separator)
    if index < 0:
        return None
    halves = (text[:index], text[index + 1:])
    values = []
    for half in halves:
        if not half or half != half.strip():
            return None
        try:
            values.append(convert(half))
        except ValueError:
            return None
    return values[0], values[1]


def parse_complex(text: str) -> Optional[complex]:
    pair = parse_pair(text, ",", float)
    if pair is None:
        return None
    return complex(pair[0], pair[1])


def parse_resolution(text: str) -> Optional[Resolution]:
    pair = parse_pair(text, "x", int)
    if pair is None or pair[0] <= 0 or pair[1] <= 0:
        return None
    return Resolution(pair[0], pair[1])
