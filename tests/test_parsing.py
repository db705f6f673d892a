import pytest

from mandelbands import Resolution, parse_complex, parse_pair, parse_resolution


@pytest.mark.parametrize(
    "text, separator, convert, expected",
    [
        ("", ",", int, None),
        ("10", ",", int, None),
        (",10", ",", int, None),
        ("10,", ",", int, None),
        ("10,20", ",", int, (10, 20)),
        ("10,20xy", ",", int, None),
        ("0.5x", "x", float, None),
        ("0.5x1.5", "x", float, (0.5, 1.5)),
        ("-3,-4", ",", int, (-3, -4)),
        (" 1,2", ",", int, None),
        ("1,2 ", ",", int, None),
    ],
)
def test_parse_pair(text, separator, convert, expected):
    assert parse_pair(text, separator, convert) == expected


def test_parse_pair_splits_on_first_separator():
    assert parse_pair("1,2,3", ",", int) is None
    assert parse_pair("1,2,3", ",", str) == ("1", "2,3")


def test_parse_complex():
    assert parse_complex("1.25,-0.0625") == complex(1.25, -0.0625)
    assert parse_complex("-1.20,0.35") == complex(-1.2, 0.35)
    assert parse_complex(",-0.0625") is None
    assert parse_complex("1.25") is None


def test_parse_resolution():
    assert parse_resolution("4000x3000") == Resolution(4000, 3000)
    assert parse_resolution("1x1") == Resolution(1, 1)


@pytest.mark.parametrize("text", ["", "4000", "4000x", "x3000", "0x10", "10x0", "-5x5", "4.5x3", "4000,3000"])
def test_parse_resolution_rejects(text):
    assert parse_resolution(text) is None
