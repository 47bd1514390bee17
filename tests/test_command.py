import math
from typing import Final

import pytest

from svg_path_morph.command import Command, CommandType, format_number
from svg_path_morph.errors import StructuralError
from svg_path_morph.geometry import BoundingBox, Point

line: Final = Command.line_to(Point(0, 0), Point(10, 0))
quadratic: Final = Command.quadratic_curve_to(Point(0, 0), Point(5, 10), Point(10, 0))
cubic: Final = Command.cubic_curve_to(
    Point(0, 0), Point(0, 10), Point(10, 10), Point(10, 0)
)
semicircle: Final = Command.arc_to(Point(0, 0), 5, 5, 0, False, True, Point(10, 0))

drawing_commands: Final = [line, quadratic, cubic, semicircle]


def test_format_number() -> None:
    assert format_number(1.0, None) == "1"
    assert format_number(2.50, None) == "2.5"
    assert format_number(1 / 3, 3) == "0.333"
    assert format_number(-0.0001, 2) == "0"
    assert format_number(12.0, 4) == "12"


def test_invalid_commands() -> None:
    """Point counts and arc parameters are validated."""
    with pytest.raises(StructuralError):
        Command(CommandType.LINE_TO, (Point(0, 0),))
    with pytest.raises(StructuralError):
        Command("X", (Point(0, 0),))
    with pytest.raises(StructuralError, match="Arc parameters"):
        Command(CommandType.ARC_TO, (Point(0, 0), Point(1, 1)))
    with pytest.raises(StructuralError, match="Arc parameters"):
        Command(CommandType.LINE_TO, (Point(0, 0), Point(1, 1)), semicircle.arc)


def test_string_type() -> None:
    """Types may be given as command letters."""
    cmd = Command("L", (Point(0, 0), Point(1, 1)))
    assert cmd.type is CommandType.LINE_TO
    assert cmd == Command.line_to(Point(0, 0), Point(1, 1))


def test_equality_ignores_identity() -> None:
    """Structural equality ignores identity tokens and split bookkeeping."""
    a = Command.line_to(Point(0, 0), Point(1, 1))
    b = Command.line_to(Point(0, 0), Point(1, 1))
    assert a.id != b.id
    assert a == b
    assert hash(a) == hash(b)
    assert a != Command.close_path(Point(0, 0), Point(1, 1))


def test_as_string() -> None:
    assert Command.move_to(Point(1, 2)).as_string() == "M 1 2"
    assert line.as_string() == "L 10 0"
    assert quadratic.as_string() == "Q 5 10 10 0"
    assert cubic.as_string() == "C 0 10 10 10 10 0"
    assert semicircle.as_string() == "A 5 5 0 0 1 10 0"
    assert Command.close_path(Point(1, 1), Point(0, 0)).as_string() == "Z"
    assert Command.line_to(Point(0, 0), Point(1 / 3, 2)).as_string(2) == "L 0.33 2"


def test_length() -> None:
    assert Command.move_to(Point(1, 1)).length == 0
    assert line.length == 10
    assert semicircle.length == pytest.approx(5 * math.pi)
    # Straight cubic with unevenly spaced control points
    straight = Command.cubic_curve_to(
        Point(0, 0), Point(1, 0), Point(2, 0), Point(9, 0)
    )
    assert straight.length == pytest.approx(9)
    # Compare against a fine polyline
    samples = [quadratic.point_at(i / 1000) for i in range(1001)]
    approx = sum(a.distance(b) for a, b in zip(samples, samples[1:]))
    assert quadratic.length == pytest.approx(approx, rel=1e-5)


def test_bounding_box() -> None:
    assert line.bounding_box == BoundingBox(0, 0, 10, 0)
    assert quadratic.bounding_box.max_y == pytest.approx(5)
    assert cubic.bounding_box.max_y == pytest.approx(7.5)
    box = semicircle.bounding_box
    assert (box.min_x, box.max_x) == pytest.approx((0, 10))
    # The arc from (0, 0) to (10, 0) with positive sweep bulges to y = -5
    assert (box.min_y, box.max_y) == pytest.approx((-5, 0))


@pytest.mark.parametrize("cmd", drawing_commands)
def test_point_at_ends(cmd: Command) -> None:
    assert cmd.point_at(0).is_close(cmd.start)
    assert cmd.point_at(1).is_close(cmd.end)


@pytest.mark.parametrize("cmd", drawing_commands)
@pytest.mark.parametrize("t", [0.25, 0.5, 0.8])
def test_split_preserves_shape(cmd: Command, t: float) -> None:
    """Fragments meet at the split point and keep the identity token."""
    a, b = cmd.split(t)
    assert a.start == cmd.start and b.end == cmd.end
    assert a.end == b.start
    assert a.end.is_close(cmd.point_at(t))
    assert a.id == b.id == cmd.id
    assert a.is_split_segment and b.is_split_segment
    assert a.point_at(0.5).is_close(cmd.point_at(t / 2), 1e-9)
    assert a.length + b.length == pytest.approx(cmd.length)


def test_split_close_path() -> None:
    """A close command is split into a line and a close command."""
    a, b = Command.close_path(Point(10, 0), Point(0, 0)).split(0.5)
    assert a.type is CommandType.LINE_TO
    assert b.type is CommandType.CLOSE_PATH
    assert a.end == Point(5, 0)


def test_split_invalid() -> None:
    with pytest.raises(StructuralError):
        line.split(0)
    with pytest.raises(StructuralError):
        line.split(1.5)
    with pytest.raises(StructuralError, match="Move"):
        Command.move_to(Point(0, 0)).split(0.5)


@pytest.mark.parametrize("cmd", drawing_commands)
def test_merge_restores_root(cmd: Command) -> None:
    """Merging the fragments of a split restores the original command."""
    a, b = cmd.split(0.3)
    merged = a.merged(b)
    assert merged == cmd
    assert merged.id == cmd.id
    assert not merged.is_split_segment


def test_merge_partial() -> None:
    """Merging two of three fragments yields a fragment covering both."""
    a, rest = cubic.split(0.25)
    b, c = rest.split(0.5)
    ab = a.merged(b)
    assert ab.is_split_segment
    assert ab.start == cubic.start
    assert ab.end.is_close(cubic.point_at(0.625))
    assert ab.merged(c) == cubic


def test_merge_invalid() -> None:
    a, b = line.split(0.5)
    c, d = Command.line_to(Point(0, 0), Point(10, 0)).split(0.5)
    with pytest.raises(StructuralError):
        a.merged(d)
    with pytest.raises(StructuralError, match="adjacent"):
        b.merged(a)
    with pytest.raises(StructuralError):
        line.merged(cubic)


@pytest.mark.parametrize("cmd", drawing_commands)
def test_reversed(cmd: Command) -> None:
    r = cmd.reversed()
    assert r.start == cmd.end and r.end == cmd.start
    assert r.id == cmd.id
    assert r.point_at(0.3).is_close(cmd.point_at(0.7), 1e-9)
    assert r.reversed() == cmd


def test_reversed_arc_flips_sweep() -> None:
    r = semicircle.reversed()
    assert r.arc is not None and semicircle.arc is not None
    assert r.arc.sweep != semicircle.arc.sweep
    assert r.arc.large_arc == semicircle.arc.large_arc


def test_convert_line_preserves_shape() -> None:
    for target in (CommandType.QUADRATIC_CURVE_TO, CommandType.CUBIC_CURVE_TO):
        converted = line.converted(target)
        assert converted.type is target
        assert converted.id == line.id
        assert converted.point_at(0.3).is_close(line.point_at(0.3), 1e-9)


def test_convert_quadratic_to_cubic_is_exact() -> None:
    converted = quadratic.converted("C")
    for t in (0.1, 0.5, 0.9):
        assert converted.point_at(t).is_close(quadratic.point_at(t), 1e-9)
    # Degree reduction of an elevated curve recovers the control point
    assert converted.converted("Q").points[1].is_close(quadratic.points[1], 1e-9)


def test_convert_keeps_end_points() -> None:
    for cmd in drawing_commands:
        for target in ("L", "Q", "C", "A"):
            converted = cmd.converted(target)
            assert converted.start == cmd.start and converted.end == cmd.end


def test_convert_invalid() -> None:
    with pytest.raises(StructuralError):
        Command.move_to(Point(0, 0)).converted("L")
    with pytest.raises(StructuralError):
        line.converted("Z")
    with pytest.raises(StructuralError):
        line.converted("X")


def test_approx_equal() -> None:
    other = Command.line_to(Point(0, 1e-8), Point(10, 0))
    assert line.approx_equal(other)
    assert line != other
    assert not line.approx_equal(other, eps=1e-9)
    assert not line.approx_equal(line.converted("C"))
