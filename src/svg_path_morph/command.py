# This file is part of https://github.com/KurtBoehm/svg_path_editor.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

from __future__ import annotations

import math
import re
import uuid
from dataclasses import dataclass, field, replace
from enum import StrEnum
from functools import cached_property
from typing import TYPE_CHECKING, Final

from .errors import StructuralError
from .geometry import EPSILON, BoundingBox, Line, ParametricEllipticalArc, Point
from .math import bezier_coefficients, gauss_legendre_integral, polynomial_roots

if TYPE_CHECKING:
    import numpy as np

_number_strip_trailing_zeros: Final = re.compile(r"^(-?[0-9]*\.([0-9]*[1-9])?)0*$")
_number_strip_dot: Final = re.compile(r"\.$")


def format_number(v: float, d: int | None) -> str:
    """Format a float with optional fixed decimals, stripping trailing zeros."""
    s = f"{v:.{d}f}" if d is not None else repr(float(v))
    s = _number_strip_trailing_zeros.sub(r"\1", s)
    s = _number_strip_dot.sub("", s)
    return "0" if s == "-0" else s


class CommandType(StrEnum):
    """Type tag of a :class:`Command`, valued by its SVG command letter."""

    MOVE_TO = "M"
    LINE_TO = "L"
    QUADRATIC_CURVE_TO = "Q"
    CUBIC_CURVE_TO = "C"
    ARC_TO = "A"
    CLOSE_PATH = "Z"


point_counts: Final = {
    CommandType.MOVE_TO: 1,
    CommandType.LINE_TO: 2,
    CommandType.QUADRATIC_CURVE_TO: 3,
    CommandType.CUBIC_CURVE_TO: 4,
    CommandType.ARC_TO: 2,
    CommandType.CLOSE_PATH: 2,
}
"""Number of points stored per command type (including the start point)."""

_convertible: Final = frozenset(
    {
        CommandType.LINE_TO,
        CommandType.QUADRATIC_CURVE_TO,
        CommandType.CUBIC_CURVE_TO,
        CommandType.ARC_TO,
    }
)


def new_id() -> str:
    """Create a fresh identity token."""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class ArcParameters:
    """
    Shape parameters of an SVG elliptical arc command.

    :ivar rx: Radius along the rotated x axis.
    :ivar ry: Radius along the rotated y axis.
    :ivar rotation: Rotation of the ellipse in degrees.
    :ivar large_arc: Large-arc flag.
    :ivar sweep: Sweep flag (positive-angle direction).
    """

    rx: float
    ry: float
    rotation: float
    large_arc: bool
    sweep: bool


@dataclass(frozen=True)
class Lineage:
    """
    Part of a root command that a split fragment covers.

    :ivar root: The command before any split.
    :ivar t0: Start parameter on the root.
    :ivar t1: End parameter on the root.
    """

    root: Command
    t0: float
    t1: float


@dataclass(frozen=True)
class Command:
    """
    A single immutable drawing instruction.

    The points include the start of the command, except for move commands:

    * ``M``: ``(end,)``
    * ``L``, ``Z``, ``A``: ``(start, end)``
    * ``Q``: ``(start, control, end)``
    * ``C``: ``(start, control1, control2, end)``

    Equality compares type, points, and arc parameters; the identity token,
    the split flag, and the lineage are bookkeeping and excluded.

    :ivar type: Type tag.
    :ivar points: Control points as described above.
    :ivar arc: Arc parameters (arc commands only).
    :ivar id: Identity token that survives geometry-preserving edits.
    :ivar is_split_segment: Whether the command is a fragment of a split.
    :ivar lineage: Root command and interval covered by a split fragment.
    """

    type: CommandType
    points: tuple[Point, ...]
    arc: ArcParameters | None = None
    id: str = field(default_factory=new_id, compare=False)
    is_split_segment: bool = field(default=False, compare=False)
    lineage: Lineage | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        try:
            ctype = CommandType(self.type)
        except ValueError as e:
            raise StructuralError(f"Invalid command type: {self.type!r}") from e
        object.__setattr__(self, "type", ctype)
        object.__setattr__(self, "points", tuple(self.points))

        if len(self.points) != point_counts[ctype]:
            raise StructuralError(
                f"{ctype.name} requires {point_counts[ctype]} points, "
                f"got {len(self.points)}"
            )
        if (self.arc is not None) != (ctype is CommandType.ARC_TO):
            raise StructuralError(
                "Arc parameters are required for arcs and only for arcs"
            )

    # ---- construction ------------------------------------------------------------

    @staticmethod
    def move_to(end: Point) -> Command:
        return Command(CommandType.MOVE_TO, (end,))

    @staticmethod
    def line_to(start: Point, end: Point) -> Command:
        return Command(CommandType.LINE_TO, (start, end))

    @staticmethod
    def quadratic_curve_to(start: Point, control: Point, end: Point) -> Command:
        return Command(CommandType.QUADRATIC_CURVE_TO, (start, control, end))

    @staticmethod
    def cubic_curve_to(
        start: Point, control1: Point, control2: Point, end: Point
    ) -> Command:
        return Command(CommandType.CUBIC_CURVE_TO, (start, control1, control2, end))

    @staticmethod
    def arc_to(
        start: Point,
        rx: float,
        ry: float,
        rotation: float,
        large_arc: bool,
        sweep: bool,
        end: Point,
    ) -> Command:
        arc = ArcParameters(rx, ry, rotation, bool(large_arc), bool(sweep))
        return Command(CommandType.ARC_TO, (start, end), arc)

    @staticmethod
    def close_path(start: Point, end: Point) -> Command:
        return Command(CommandType.CLOSE_PATH, (start, end))

    # ---- basic properties --------------------------------------------------------

    @property
    def start(self) -> Point:
        """Start point; for a move this is its target."""
        return self.points[0]

    @property
    def end(self) -> Point:
        """End point."""
        return self.points[-1]

    @property
    def is_drawing(self) -> bool:
        """Whether the command draws something (i.e. it is not a move)."""
        return self.type is not CommandType.MOVE_TO

    @property
    def line(self) -> Line:
        """Chord from start to end."""
        return Line(self.start, self.end)

    @cached_property
    def arc_geometry(self) -> ParametricEllipticalArc | None:
        """
        Center parameterization of an arc command.

        ``None`` for other commands and for arcs that degenerate to their chord.
        """
        if self.arc is None:
            return None
        a = self.arc
        return ParametricEllipticalArc.from_endpoints(
            self.start, self.end, a.rx, a.ry, a.rotation, a.large_arc, a.sweep
        )

    @cached_property
    def is_polynomial(self) -> bool:
        """Whether the geometry is a polynomial curve (line, Bézier, flat arc)."""
        return self.type is not CommandType.ARC_TO or self.arc_geometry is None

    @cached_property
    def coefficients(self) -> tuple[list[float], list[float]]:
        """
        Power-basis coefficients of the x and y coordinates.

        Arcs degenerating to their chord are treated as lines.

        :raises StructuralError: For true elliptical arcs.
        """
        if not self.is_polynomial:
            raise StructuralError("Elliptical arcs have no polynomial form")
        pts = self.points if self.type is not CommandType.ARC_TO else self.line_points
        return (
            bezier_coefficients([p.x for p in pts]),
            bezier_coefficients([p.y for p in pts]),
        )

    @property
    def line_points(self) -> tuple[Point, Point]:
        return (self.start, self.end)

    def point_at(self, t: float) -> Point:
        """Point at parameter ``t ∈ [0, 1]``."""
        match self.type:
            case CommandType.MOVE_TO:
                return self.end
            case CommandType.LINE_TO | CommandType.CLOSE_PATH:
                return self.start.lerp(self.end, t)
            case CommandType.QUADRATIC_CURVE_TO | CommandType.CUBIC_CURVE_TO:
                return _de_casteljau(self.points, t)[0]
            case CommandType.ARC_TO:
                arc = self.arc_geometry
                if arc is None:
                    return self.start.lerp(self.end, t)
                return arc(arc.angle_at(t))

    # ---- derived geometry --------------------------------------------------------

    @cached_property
    def length(self) -> float:
        """Arc length of the drawn curve."""
        import numpy as np
        from numpy.polynomial import polynomial as P

        if not self.is_drawing:
            return 0.0
        if self.type in (CommandType.LINE_TO, CommandType.CLOSE_PATH):
            return self.start.distance(self.end)

        arc = self.arc_geometry
        if self.type is CommandType.ARC_TO and arc is not None:
            rx, ry = arc.r.x, arc.r.y
            a, b = math.radians(arc.theta0), math.radians(arc.theta1)

            def arc_speed(th: np.ndarray) -> np.ndarray:
                return np.hypot(rx * np.sin(th), ry * np.cos(th))

            return abs(gauss_legendre_integral(arc_speed, a, b))
        if self.type is CommandType.ARC_TO:
            return self.start.distance(self.end)

        cx, cy = self.coefficients
        dx, dy = P.polyder(np.asarray(cx)), P.polyder(np.asarray(cy))

        def speed(t: np.ndarray) -> np.ndarray:
            return np.hypot(P.polyval(t, dx), P.polyval(t, dy))

        return gauss_legendre_integral(speed, 0.0, 1.0)

    @cached_property
    def bounding_box(self) -> BoundingBox:
        """Tight axis-aligned bounding box of the drawn curve."""
        pts = [self.start, self.end]
        arc = self.arc_geometry
        if arc is not None:
            phi = math.radians(arc.phi)
            rx, ry = arc.r.x, arc.r.y
            tx = math.degrees(math.atan2(-ry * math.sin(phi), rx * math.cos(phi)))
            ty = math.degrees(math.atan2(ry * math.cos(phi), rx * math.sin(phi)))
            for theta in (tx, tx + 180, ty, ty + 180):
                if arc.angle_condition(theta):
                    pts.append(arc(theta))
        elif self.type in (
            CommandType.QUADRATIC_CURVE_TO,
            CommandType.CUBIC_CURVE_TO,
        ):
            for coeffs in self.coefficients:
                deriv = [k * c for k, c in enumerate(coeffs)][1:]
                for t in polynomial_roots(deriv, lo=0.0, hi=1.0):
                    pts.append(self.point_at(t))
        return BoundingBox.from_points(pts)

    # ---- edits -------------------------------------------------------------------

    @property
    def _interval(self) -> tuple[Command, float, float]:
        if self.lineage is None:
            return self, 0.0, 1.0
        return self.lineage.root, self.lineage.t0, self.lineage.t1

    def split(self, t: float) -> tuple[Command, Command]:
        """
        Split at parameter ``t`` into two fragments with the same drawn shape.

        Both fragments keep this command's identity token. A close command
        becomes a line followed by a close command.

        :raises StructuralError: For moves and for ``t`` outside :math:`(0, 1)`.
        """
        if not self.is_drawing:
            raise StructuralError("Move commands cannot be split")
        if not 0 < t < 1:
            raise StructuralError(f"Split parameter must lie in (0, 1), got {t}")

        first, second = self._split_geometry(t)
        root, t0, t1 = self._interval
        tm = t0 + (t1 - t0) * t
        return (
            replace(
                first,
                id=self.id,
                is_split_segment=True,
                lineage=Lineage(root, t0, tm),
            ),
            replace(
                second,
                id=self.id,
                is_split_segment=True,
                lineage=Lineage(root, tm, t1),
            ),
        )

    def _split_geometry(self, t: float) -> tuple[Command, Command]:
        match self.type:
            case CommandType.LINE_TO | CommandType.CLOSE_PATH:
                mid = self.start.lerp(self.end, t)
                return (
                    Command.line_to(self.start, mid),
                    Command(self.type, (mid, self.end)),
                )
            case CommandType.QUADRATIC_CURVE_TO | CommandType.CUBIC_CURVE_TO:
                _, left, right = _de_casteljau(self.points, t)
                return Command(self.type, left), Command(self.type, right)
            case CommandType.ARC_TO:
                assert self.arc is not None
                arc = self.arc_geometry
                if arc is None:
                    mid = self.start.lerp(self.end, t)
                    return (
                        replace(self, points=(self.start, mid), lineage=None),
                        replace(self, points=(mid, self.end), lineage=None),
                    )
                mid = arc(arc.angle_at(t))
                rx, ry = arc.r.x, arc.r.y
                sweep = self.arc.sweep
                first = Command.arc_to(
                    self.start,
                    rx,
                    ry,
                    self.arc.rotation,
                    abs(arc.dtheta * t) > 180,
                    sweep,
                    mid,
                )
                second = Command.arc_to(
                    mid,
                    rx,
                    ry,
                    self.arc.rotation,
                    abs(arc.dtheta * (1 - t)) > 180,
                    sweep,
                    self.end,
                )
                return first, second
            case _:
                raise StructuralError(f"Cannot split {self.type.name}")

    def merged(self, other: Command, *, eps: float = EPSILON) -> Command:
        """
        Merge this fragment with the fragment that follows it.

        Inverse of :meth:`split`. If the merged command covers its whole root,
        the root geometry is restored exactly and the result is no longer a
        split fragment.

        :raises StructuralError: If the commands are not adjacent fragments of
                                 the same split command.
        """
        if not (self.is_split_segment and other.is_split_segment):
            raise StructuralError("Only split segments can be merged")
        if self.id != other.id or self.lineage is None or other.lineage is None:
            raise StructuralError("Commands do not originate from the same split")
        if self.lineage.root != other.lineage.root:
            raise StructuralError("Commands do not originate from the same split")
        if abs(self.lineage.t1 - other.lineage.t0) > eps:
            raise StructuralError("Split segments are not adjacent")

        root = self.lineage.root
        t0, t1 = self.lineage.t0, other.lineage.t1
        whole = t0 <= eps and t1 >= 1 - eps
        if whole:
            piece = root
        else:
            piece = root
            if t1 < 1 - eps:
                piece = piece._split_geometry(t1)[0]
            if t0 > eps:
                piece = piece._split_geometry(t0 / t1)[1]

        ctype = piece.type
        line_types = (CommandType.LINE_TO, CommandType.CLOSE_PATH)
        if ctype in line_types and other.type in line_types:
            ctype = other.type

        return replace(
            piece,
            type=ctype,
            id=self.id,
            is_split_segment=not whole,
            lineage=None if whole else Lineage(root, t0, t1),
        )

    def reversed(self) -> Command:
        """
        The same drawn shape traversed in the opposite direction.

        Moves are returned unchanged; arcs flip their sweep flag.
        """
        if not self.is_drawing:
            return self
        arc = self.arc
        if arc is not None:
            arc = replace(arc, sweep=not arc.sweep)
        lineage = self.lineage
        if lineage is not None:
            lineage = Lineage(lineage.root.reversed(), 1 - lineage.t1, 1 - lineage.t0)
        return replace(
            self, points=tuple(reversed(self.points)), arc=arc, lineage=lineage
        )

    def converted(self, new_type: CommandType | str) -> Command:
        """
        Convert between line, quadratic, cubic, and arc commands.

        End points are preserved. Converting a line to a curve preserves the
        drawn shape; other conversions approximate it.

        :raises StructuralError: If either type is a move or a close command.
        """
        try:
            new_type = CommandType(new_type)
        except ValueError as e:
            raise StructuralError(f"Invalid command type: {new_type!r}") from e
        if self.type not in _convertible or new_type not in _convertible:
            raise StructuralError(
                f"Cannot convert {self.type.name} to {new_type.name}"
            )
        if new_type is self.type:
            return self

        p0, p1 = self.start, self.end
        match new_type:
            case CommandType.LINE_TO:
                result = Command.line_to(p0, p1)
            case CommandType.QUADRATIC_CURVE_TO:
                result = Command.quadratic_curve_to(p0, self._quadratic_control(), p1)
            case CommandType.CUBIC_CURVE_TO:
                c1, c2 = self._cubic_controls()
                result = Command.cubic_curve_to(p0, c1, c2, p1)
            case CommandType.ARC_TO:
                r = p0.distance(p1) / 2
                result = Command.arc_to(p0, r, r, 0, False, False, p1)
            case _:
                raise StructuralError(f"Cannot convert to {new_type.name}")
        return replace(result, id=self.id, is_split_segment=self.is_split_segment)

    def _quadratic_control(self) -> Point:
        p0, p1 = self.start, self.end
        match self.type:
            case CommandType.CUBIC_CURVE_TO:
                _, c1, c2, _ = self.points
                return ((c1 + c2) * 3 - (p0 + p1)) / 4
            case CommandType.ARC_TO if self.arc_geometry is not None:
                # Quadratic through the arc midpoint
                return self.point_at(0.5) * 2 - (p0 + p1) / 2
            case _:
                return p0.lerp(p1, 0.5)

    def _cubic_controls(self) -> tuple[Point, Point]:
        p0, p1 = self.start, self.end
        match self.type:
            case CommandType.QUADRATIC_CURVE_TO:
                q = self.points[1]
                return p0 + (q - p0) * (2 / 3), p1 + (q - p1) * (2 / 3)
            case CommandType.ARC_TO if (arc := self.arc_geometry) is not None:
                delta = math.radians(arc.dtheta)
                alpha = 4 / 3 * math.tan(delta / 4)
                return (
                    p0 + arc.derivative(arc.theta0) * alpha,
                    p1 - arc.derivative(arc.theta1) * alpha,
                )
            case _:
                return p0.lerp(p1, 1 / 3), p0.lerp(p1, 2 / 3)

    # ---- comparison and serialization --------------------------------------------

    def approx_equal(self, other: Command, *, eps: float = EPSILON) -> bool:
        """Equality of type and arc flags, with coordinates compared up to ``eps``."""
        if self.type is not other.type or len(self.points) != len(other.points):
            return False
        if not all(a.is_close(b, eps) for a, b in zip(self.points, other.points)):
            return False
        if self.arc is None or other.arc is None:
            return self.arc is other.arc
        a, b = self.arc, other.arc
        return (
            abs(a.rx - b.rx) <= eps
            and abs(a.ry - b.ry) <= eps
            and abs(a.rotation - b.rotation) <= eps
            and a.large_arc == b.large_arc
            and a.sweep == b.sweep
        )

    def as_string(self, decimals: int | None = None) -> str:
        """Serialize to an absolute SVG path command."""

        def fmt(*values: float) -> list[str]:
            return [format_number(v, decimals) for v in values]

        match self.type:
            case CommandType.CLOSE_PATH:
                values: list[str] = []
            case CommandType.ARC_TO:
                assert self.arc is not None
                a = self.arc
                values = [
                    *fmt(a.rx, a.ry, a.rotation),
                    str(int(a.large_arc)),
                    str(int(a.sweep)),
                    *fmt(*self.end),
                ]
            case CommandType.MOVE_TO:
                values = fmt(*self.end)
            case _:
                values = [s for p in self.points[1:] for s in fmt(*p)]
        return " ".join([self.type.value, *values])


def _de_casteljau(
    points: tuple[Point, ...], t: float
) -> tuple[Point, tuple[Point, ...], tuple[Point, ...]]:
    """
    Evaluate a Bézier curve by de Casteljau's algorithm.

    :return: The point at ``t`` and the control points of both halves.
    """
    left, right = [points[0]], [points[-1]]
    level = list(points)
    while len(level) > 1:
        level = [a.lerp(b, t) for a, b in zip(level, level[1:])]
        left.append(level[0])
        right.append(level[-1])
    return level[0], tuple(left), tuple(reversed(right))
