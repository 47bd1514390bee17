from __future__ import annotations

import pytest

from svg_path_morph.errors import ParseError
from svg_path_morph.path_parser import PathParser


def test_empty() -> None:
    """Empty path data yields no commands."""
    assert PathParser.parse("") == []
    assert PathParser.parse("  \n ") == []


def test_move_to() -> None:
    """``m`` command parsing and validation."""
    with pytest.raises(ParseError):
        PathParser.parse("m 10")
    assert PathParser.parse("m 10 20") == [["m", "10", "20"]]


def test_exponents() -> None:
    """Exponent notation is supported."""
    assert PathParser.parse("m 1e3 2e-3") == [["m", "1e3", "2e-3"]]


def test_overflowing_number() -> None:
    """Numbers beyond the floating-point range are rejected at their position."""
    with pytest.raises(ParseError, match="position 2: number '1e999' is out of range"):
        PathParser.parse("M 1e999 0")
    with pytest.raises(ParseError, match="out of range"):
        PathParser.parse("M 0 0 L 1 -1e400")


def test_compact_numbers() -> None:
    """Signs and dots separate numbers without whitespace."""
    assert PathParser.parse("M46-86") == [["M", "46", "-86"]]
    assert PathParser.parse("M.5.5") == [["M", ".5", ".5"]]


def test_overloaded_move_to() -> None:
    """Implicit ``l`` following an ``m`` are expanded correctly."""
    assert PathParser.parse("m 12.5,52 39,0 0,-40 -39,0 z") == [
        ["m", "12.5", "52"],
        ["l", "39", "0"],
        ["l", "0", "-40"],
        ["l", "-39", "0"],
        ["z"],
    ]
    assert PathParser.parse("M 1 2 3 4") == [["M", "1", "2"], ["L", "3", "4"]]


def test_initial_move_missing() -> None:
    """Path must start with an ``M``/``m`` command."""
    with pytest.raises(ParseError, match="malformed"):
        PathParser.parse("l 1 1")


def test_invalid_command() -> None:
    """Unknown command letters are rejected with their position."""
    with pytest.raises(ParseError, match="position 6"):
        PathParser.parse("M 0 0 x 1 1")


def test_parse_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        PathParser.parse("M 0 0 L 1")


def test_curve_to() -> None:
    """``c`` command parsing and implicit repetition of command."""
    a = PathParser.parse("m0 0c 50,0 50,100 100,100 50,0 50,-100 100,-100")
    b = PathParser.parse("m0 0c 50,0 50,100 100,100 c 50,0 50,-100 100,-100")
    assert a == [
        ["m", "0", "0"],
        ["c", "50", "0", "50", "100", "100", "100"],
        ["c", "50", "0", "50", "-100", "100", "-100"],
    ]
    assert a == b


def test_line_to() -> None:
    """``l`` command parsing and validation."""
    with pytest.raises(ParseError, match="malformed"):
        PathParser.parse("m0 0l 10 10 0")

    assert PathParser.parse("m0 0l 10,10") == [["m", "0", "0"], ["l", "10", "10"]]
    assert PathParser.parse("m0 0l10 10 10 10") == [
        ["m", "0", "0"],
        ["l", "10", "10"],
        ["l", "10", "10"],
    ]


@pytest.mark.parametrize("cmd", ["h", "v"])
def test_axis_line_to(cmd: str) -> None:
    """``h`` and ``v`` take a single coordinate."""
    assert PathParser.parse(f"m0 0 {cmd} 10.5") == [["m", "0", "0"], [cmd, "10.5"]]


def test_arc_to() -> None:
    """``A`` command parsing, including compact flags."""
    assert PathParser.parse("M0 0A 30 50 0 0 1 162.55 162.45") == [
        ["M", "0", "0"],
        ["A", "30", "50", "0", "0", "1", "162.55", "162.45"],
    ]
    assert PathParser.parse("M0 0A 60 60 0 01100 100") == [
        ["M", "0", "0"],
        ["A", "60", "60", "0", "0", "1", "100", "100"],
    ]


def test_arc_to_invalid_flag() -> None:
    with pytest.raises(ParseError, match="arc flag"):
        PathParser.parse("M0 0A 60 60 0 2 1 100 100")


def test_quadratic_curve_to() -> None:
    """``Q`` command parsing."""
    assert PathParser.parse("M10 80 Q 95 10 180 80") == [
        ["M", "10", "80"],
        ["Q", "95", "10", "180", "80"],
    ]


def test_smooth_curve_to() -> None:
    """``S`` command parsing."""
    assert PathParser.parse("M0 0 S 1 2, 3 4") == [
        ["M", "0", "0"],
        ["S", "1", "2", "3", "4"],
    ]


def test_smooth_quadratic_curve_to() -> None:
    """``T`` command parsing."""
    with pytest.raises(ParseError):
        PathParser.parse("M0 0 t 1 2 3")
    assert PathParser.parse("M0 0 T 1 -200") == [
        ["M", "0", "0"],
        ["T", "1", "-200"],
    ]


def test_close() -> None:
    """``z`` command parsing."""
    assert PathParser.parse("m0 0z") == [["m", "0", "0"], ["z"]]
    assert PathParser.parse("M0 0 L 1 1 Z L 2 2") == [
        ["M", "0", "0"],
        ["L", "1", "1"],
        ["Z"],
        ["L", "2", "2"],
    ]
