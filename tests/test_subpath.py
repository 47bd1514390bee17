import pytest

from svg_path_morph import Path
from svg_path_morph.command import Command, CommandType
from svg_path_morph.errors import PathIndexError, StructuralError
from svg_path_morph.geometry import Point
from svg_path_morph.subpath import SubPath


def sub_path(s: str) -> SubPath:
    (sub,) = Path(s).get_sub_paths()
    return sub


def test_validation() -> None:
    """Structural invariants are checked on construction."""
    m, a, b = Point(0, 0), Point(1, 0), Point(1, 1)

    with pytest.raises(StructuralError):
        SubPath(())
    with pytest.raises(StructuralError, match="start with a move"):
        SubPath((Command.line_to(m, a),))
    with pytest.raises(StructuralError, match="move command"):
        SubPath((Command.move_to(m), Command.move_to(a)))
    with pytest.raises(StructuralError, match="predecessor"):
        SubPath((Command.move_to(m), Command.line_to(a, b)))
    with pytest.raises(StructuralError, match="not last"):
        SubPath(
            (
                Command.move_to(m),
                Command.close_path(m, m),
                Command.line_to(m, a),
            )
        )
    with pytest.raises(StructuralError, match="subpath start"):
        SubPath((Command.move_to(m), Command.line_to(m, a), Command.close_path(a, b)))


def test_continuity_tolerance() -> None:
    """Starts may deviate from the previous end within the tolerance."""
    commands = (
        Command.move_to(Point(0, 0)),
        Command.line_to(Point(0, 1e-7), Point(1, 0)),
    )
    assert len(SubPath(commands).commands) == 2


@pytest.mark.parametrize(
    "s, closed",
    [
        ("M 0 0 L 1 0 L 1 1 Z", True),
        ("M 0 0 L 1 0 L 1 1 L 0 0", True),
        ("M 0 0 L 1 0 L 1 1", False),
        ("M 0 0", False),
        ("M 0 0 Z", True),
    ],
)
def test_is_closed(s: str, closed: bool) -> None:
    assert sub_path(s).is_closed == closed


def test_length_and_bounding_box() -> None:
    sub = sub_path("M 0 0 L 10 0 L 10 10 L 0 10 Z")
    assert sub.length == 40
    box = sub.bounding_box
    assert (box.min_x, box.min_y, box.max_x, box.max_y) == (0, 0, 10, 10)
    assert sub_path("M 3 4").bounding_box.width == 0


def test_polygon() -> None:
    """Lines are kept, curves are sampled."""
    square = sub_path("M 0 0 L 10 0 L 10 10 L 0 10 Z")
    assert square.polygon() == [
        Point(0, 0),
        Point(10, 0),
        Point(10, 10),
        Point(0, 10),
        Point(0, 0),
    ]

    curved = sub_path("M 0 0 Q 5 10 10 0 Z")
    polygon = curved.polygon(segment_length=1)
    assert len(polygon) > 10
    assert polygon[0] == Point(0, 0) and polygon[-1] == Point(0, 0)


def test_command_index() -> None:
    sub = sub_path("M 0 0 L 1 0")
    assert sub.command(1).type is CommandType.LINE_TO
    with pytest.raises(PathIndexError):
        sub.command(2)
    with pytest.raises(PathIndexError):
        sub.command(-1)


def test_collapsing() -> None:
    sub = SubPath.collapsing(Point(3, 4), 3)
    assert sub.is_collapsing
    assert len(sub.commands) == 4
    assert sub.length == 0
    assert sub.as_string() == "M 3 4 L 3 4 L 3 4 L 3 4"
    with pytest.raises(StructuralError):
        SubPath.collapsing(Point(0, 0), 0)


def test_reversed_closed() -> None:
    """An explicitly closed subpath keeps its close command last."""
    sub = sub_path("M 5 5 L 6 4 L 7 4 L 8 5 L 8 6 L 7 7 L 6 7 L 5 6 Z")
    rev = sub.reversed()
    assert rev.as_string() == "M 5 6 L 6 7 L 7 7 L 8 6 L 8 5 L 7 4 L 6 4 L 5 5 Z"
    assert [c.id for c in rev.commands[1:-1]] == [c.id for c in sub.commands[-2:0:-1]]
    assert rev.commands[-1].id == sub.commands[-1].id
    assert rev.reversed() == sub


def test_reversed_open() -> None:
    sub = sub_path("M 2 2 C 3 1 5 1 6 2 C 7 3 7 5 6 6 C 6 7 3 9 2 6")
    rev = sub.reversed()
    assert rev.as_string() == "M 2 6 C 3 9 6 7 6 6 C 7 5 7 3 6 2 C 5 1 3 1 2 2"
    assert rev.reversed() == sub


def test_reversed_trivial() -> None:
    sub = sub_path("M 1 1")
    assert sub.reversed() is sub


def test_shifted() -> None:
    sub = sub_path("M 5 5 L 6 4 L 7 4 L 8 5 L 8 6 L 7 7 L 6 7 L 5 6 Z")
    shifted = sub.shifted(3)
    assert shifted.as_string() == "M 7 4 L 8 5 L 8 6 L 7 7 L 6 7 L 5 6 L 5 5 L 6 4 Z"
    assert shifted.length == pytest.approx(sub.length)
    assert sub.shifted(1) is sub


def test_shifted_implicitly_closed() -> None:
    sub = sub_path("M 2 2 L 6 2 L 2 5 L 2 2 L 5 0 L 5 -1 L 1 -2 L -1 0 L 2 2")
    assert (
        sub.shifted(7).as_string()
        == "M 1 -2 L -1 0 L 2 2 L 6 2 L 2 5 L 2 2 L 5 0 L 5 -1 L 1 -2"
    )


def test_shifted_curve_last() -> None:
    """A curve that ends up last stays a curve."""
    sub = sub_path("M 0 0 Q 10 10 10 0 L 0 0")
    assert sub.shifted(2).as_string() == "M 10 0 L 0 0 Q 10 10 10 0"


def test_shifted_invalid() -> None:
    with pytest.raises(StructuralError, match="closed"):
        sub_path("M 0 0 L 1 0 L 1 1").shifted(1)
    with pytest.raises(PathIndexError):
        sub_path("M 0 0 L 1 0 L 1 1 Z").shifted(4)
    with pytest.raises(PathIndexError):
        sub_path("M 0 0 L 1 0 L 1 1 Z").shifted(0)
