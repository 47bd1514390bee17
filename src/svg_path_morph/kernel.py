# This file is part of https://github.com/KurtBoehm/svg_path_editor.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

from __future__ import annotations

import heapq
import itertools
import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final, Literal

from .command import Command, CommandType
from .geometry import (
    EPSILON,
    BoundingBox,
    Line,
    ParametricEllipticalArc,
    Point,
    polygon_centroid,
    polygon_signed_area,
)
from .math import (
    bezier_coefficients,
    polynomial_roots,
    to_rational,
    unit_interval_roots,
)

if TYPE_CHECKING:
    import numpy as np

logger = logging.getLogger(__name__)

type FillRule = Literal["nonzero", "evenodd"]

SEGMENT_LENGTH: Final = 1.0
"""Target length of the chords used to flatten curves (in path units)."""

MIN_SAMPLES: Final = 8
MAX_SAMPLES: Final = 128

_ARC_EPSILON: Final = 1e-9


@dataclass(frozen=True)
class Projection:
    """
    Nearest point on a command to some query point.

    :ivar point: The nearest point on the command.
    :ivar t: Parameter of :attr:`point` on the command, in :math:`[0, 1]`.
    :ivar distance: Distance between the query point and :attr:`point`.
    """

    point: Point
    t: float
    distance: float


# ------------------------------------------------------------------------------
# Projection
# ------------------------------------------------------------------------------


def project_point_onto_command(point: Point, command: Command) -> Projection:
    """
    Project ``point`` onto the curve drawn by ``command``.

    * Lines (and arcs degenerating to lines) use the clamped orthogonal
      projection.
    * Bézier curves minimize the squared distance over :math:`t ∈ [0, 1]`
      by solving for the roots of its derivative.
    * Elliptical arcs project onto the ellipse and clamp to the angular range.
    * Moves project onto their point.

    The result is deterministic; ties are resolved toward the smaller ``t``.
    """
    match command.type:
        case CommandType.MOVE_TO:
            return Projection(command.end, 0.0, point.distance(command.end))
        case CommandType.LINE_TO | CommandType.CLOSE_PATH:
            return _project_onto_line(point, command.start, command.end)
        case CommandType.ARC_TO if (arc := command.arc_geometry) is not None:
            return _project_onto_arc(point, command, arc)
        case CommandType.ARC_TO:
            return _project_onto_line(point, command.start, command.end)
        case _:
            return _project_onto_bezier(point, command)


def _project_onto_line(point: Point, start: Point, end: Point) -> Projection:
    t = min(1.0, max(0.0, Line(start, end).parameter_of(point)))
    nearest = start.lerp(end, t)
    return Projection(nearest, t, point.distance(nearest))


def _nearest(point: Point, candidates: list[tuple[float, Point]]) -> Projection:
    best: Projection | None = None
    for t, p in sorted(candidates, key=lambda c: c[0]):
        d = point.distance(p)
        if best is None or d < best.distance:
            best = Projection(p, t, d)
    assert best is not None
    return best


def _project_onto_bezier(point: Point, command: Command) -> Projection:
    import numpy as np
    from numpy.polynomial import polynomial as P

    cx, cy = (np.asarray(c, dtype=np.float64) for c in command.coefficients)
    ax, ay = cx.copy(), cy.copy()
    ax[0] -= point.x
    ay[0] -= point.y
    # d/dt |B(t) - p|^2 / 2
    deriv = P.polyadd(P.polymul(ax, P.polyder(cx)), P.polymul(ay, P.polyder(cy)))

    ts = [0.0, *polynomial_roots(list(deriv), lo=0.0, hi=1.0), 1.0]
    candidates = [(t, command.point_at(t)) for t in ts]
    candidates[0] = (0.0, command.start)
    candidates[-1] = (1.0, command.end)
    return _nearest(point, candidates)


def _project_onto_arc(
    point: Point, command: Command, arc: ParametricEllipticalArc
) -> Projection:
    r"""
    Project onto an elliptical arc.

    In the frame of the ellipse with radii :math:`a, b` the stationary points
    of the distance to :math:`(p_x, p_y)` satisfy

    .. math::

        (b^2 - a^2) \sin θ \cos θ + a p_x \sin θ - b p_y \cos θ = 0,

    which the substitution :math:`u = \tan(θ/2)` turns into a quartic in
    :math:`u`. The angle :math:`θ = 180°` (:math:`u = ∞`) is checked separately.
    """
    local = arc.to_local(point)
    a, b = arc.r.x, arc.r.y
    px, py = local.x, local.y
    k = 2 * (b * b - a * a)
    quartic = [-b * py, k + 2 * a * px, 0.0, 2 * a * px - k, b * py]

    angles = [math.degrees(2 * math.atan(u)) for u in polynomial_roots(quartic)]
    angles.append(180.0)

    candidates = [(0.0, command.start), (1.0, command.end)]
    for theta in angles:
        if arc.angle_condition(theta):
            candidates.append((arc.parameter_of(theta), arc(theta)))
    return _nearest(point, candidates)


# ------------------------------------------------------------------------------
# Line intersection counting
# ------------------------------------------------------------------------------


def intersect_line_with_command(
    line: Line,
    command: Command,
    *,
    include_start: bool = True,
    include_end: bool = True,
) -> int:
    """
    Count the intersections of the segment ``line`` with ``command``.

    Bézier curves and lines count the distinct real roots of their signed
    distance to the line, isolated exactly over rational coefficients.
    Arcs intersect the line with the unit circle in the frame of the ellipse.

    Collinear overlaps and zero-length operands count as no intersection.

    :param include_start: Whether an intersection at :math:`t = 0` of the
                          command is counted.
    :param include_end: Whether an intersection at :math:`t = 1` of the
                        command is counted.
    """
    if not command.is_drawing or line.length == 0:
        return 0
    box = command.bounding_box
    if box.width == 0 and box.height == 0:
        return 0

    arc = command.arc_geometry
    if arc is None:
        return _intersect_polynomial(line, command, include_start, include_end)
    return _intersect_arc(line, arc, include_start, include_end)


def _intersect_polynomial(
    line: Line, command: Command, include_start: bool, include_end: bool
) -> int:
    pts = command.points
    if command.type is CommandType.ARC_TO:
        pts = command.line_points
    px, py = to_rational(line.p.x), to_rational(line.p.y)
    dx, dy = to_rational(line.q.x) - px, to_rational(line.q.y) - py

    cx = bezier_coefficients([to_rational(p.x) for p in pts])
    cy = bezier_coefficients([to_rational(p.y) for p in pts])
    # cross(q - p, B(t) - p)
    coeffs = [dx * y - dy * x for x, y in zip(cx, cy)]
    coeffs[0] -= dx * py - dy * px

    count = 0
    for root in unit_interval_roots(
        coeffs, include_start=include_start, include_end=include_end
    ):
        u = line.parameter_of(command.point_at(float(root)))
        if -EPSILON <= u <= 1 + EPSILON:
            count += 1
    return count


def _intersect_arc(
    line: Line,
    arc: ParametricEllipticalArc,
    include_start: bool,
    include_end: bool,
) -> int:
    a = arc.transform(line.p, inverse=True)
    b = arc.transform(line.q, inverse=True) - a
    quadratic = [a.dot(a) - 1, 2 * a.dot(b), b.dot(b)]

    count = 0
    for u in polynomial_roots(quadratic, lo=0.0, hi=1.0):
        v = a + b * u
        theta = math.degrees(math.atan2(v.y, v.x))
        if not arc.angle_condition(theta):
            continue
        t = arc.parameter_of(theta)
        if t <= _ARC_EPSILON and not include_start:
            continue
        if t >= 1 - _ARC_EPSILON and not include_end:
            continue
        count += 1
    return count


# ------------------------------------------------------------------------------
# Polygons
# ------------------------------------------------------------------------------


def flatten_command(
    command: Command, *, segment_length: float = SEGMENT_LENGTH
) -> list[Point]:
    """
    Sample the curve drawn by ``command`` as a polyline.

    Lines yield their end points; curves yield between :data:`MIN_SAMPLES` and
    :data:`MAX_SAMPLES` chords of roughly ``segment_length``.
    """
    if not command.is_drawing:
        return [command.end]
    if command.is_polynomial and command.type in (
        CommandType.LINE_TO,
        CommandType.CLOSE_PATH,
        CommandType.ARC_TO,
    ):
        return [command.start, command.end]

    n = math.ceil(command.length / segment_length)
    n = min(MAX_SAMPLES, max(MIN_SAMPLES, n))
    points = [command.point_at(i / n) for i in range(n + 1)]
    points[0], points[-1] = command.start, command.end
    return points


def _edges(polygon: Sequence[Point]) -> tuple[np.ndarray, np.ndarray]:
    import numpy as np

    a = np.asarray([(p.x, p.y) for p in polygon], dtype=np.float64)
    return a, np.roll(a, -1, axis=0)


def _winding(x: float, y: float, a: np.ndarray, b: np.ndarray) -> tuple[int, int]:
    """Winding number and crossing count of a rightward ray from ``(x, y)``."""
    import numpy as np

    x0, y0, x1, y1 = a[:, 0], a[:, 1], b[:, 0], b[:, 1]
    side = (x1 - x0) * (y - y0) - (x - x0) * (y1 - y0)
    up = (y0 <= y) & (y1 > y) & (side > 0)
    down = (y0 > y) & (y1 <= y) & (side < 0)
    n_up, n_down = int(np.count_nonzero(up)), int(np.count_nonzero(down))
    return n_up - n_down, n_up + n_down


def point_in_polygon(
    point: Point, polygon: Sequence[Point], *, fill_rule: FillRule = "nonzero"
) -> bool:
    """
    Test whether ``point`` lies in the region filled by ``polygon``.

    :param fill_rule: ``"nonzero"`` or ``"evenodd"``, as in SVG.
    """
    if len(polygon) < 3:
        return False
    winding, crossings = _winding(point.x, point.y, *_edges(polygon))
    match fill_rule:
        case "nonzero":
            return winding != 0
        case "evenodd":
            return crossings % 2 == 1
        case _:
            raise ValueError(f"Unknown fill rule: {fill_rule!r}")


def _signed_distance(x: float, y: float, a: np.ndarray, b: np.ndarray) -> float:
    """Distance to the polygon boundary, negative outside (even-odd rule)."""
    import numpy as np

    d = b - a
    dd = np.einsum("ij,ij->i", d, d)
    p = np.array([x, y])
    safe = np.where(dd > 0, dd, 1.0)
    t = np.clip(np.einsum("ij,ij->i", p - a, d) / safe, 0.0, 1.0)
    closest = a + d * t[:, None]
    dist = float(np.min(np.hypot(closest[:, 0] - x, closest[:, 1] - y)))
    _, crossings = _winding(x, y, a, b)
    return dist if crossings % 2 == 1 else -dist


@dataclass(frozen=True)
class _Cell:
    x: float
    y: float
    h: float
    d: float

    @property
    def max(self) -> float:
        """Upper bound of the distance achievable within the cell."""
        return self.d + self.h * math.sqrt(2)


def pole_of_inaccessibility(
    polygon: Sequence[Point],
    *,
    precision: float | None = None,
    max_iterations: int = 10000,
) -> Point:
    """
    The point inside ``polygon`` farthest from its boundary.

    Cells covering the bounding box are refined in order of their best
    possible distance until no cell can improve the best known point by more
    than ``precision`` or ``max_iterations`` cells have been refined.

    :param precision: Absolute tolerance, by default a thousandth of the
                      larger side of the bounding box.
    :return: The pole, or the centroid of the vertices if the polygon has
             no area.
    """
    if len(polygon) < 3 or abs(polygon_signed_area(polygon)) < EPSILON * EPSILON:
        logger.debug("Polygon without area, falling back to its centroid")
        return polygon_centroid(polygon)

    a, b = _edges(polygon)
    box = BoundingBox.from_points(polygon)
    if precision is None:
        precision = max(box.width, box.height) * 1e-3

    def make_cell(x: float, y: float, h: float) -> _Cell:
        return _Cell(x, y, h, _signed_distance(x, y, a, b))

    counter = itertools.count()
    heap: list[tuple[float, int, _Cell]] = []

    def push(cell: _Cell) -> None:
        heapq.heappush(heap, (-cell.max, next(counter), cell))

    # Root cell covering the bounding box
    cx, cy = box.min_x + box.width / 2, box.min_y + box.height / 2
    root = make_cell(cx, cy, max(box.width, box.height) / 2)
    push(root)

    centroid = polygon_centroid(polygon)
    best = make_cell(centroid.x, centroid.y, 0)
    if root.d > best.d:
        best = root

    iterations = 0
    while heap and iterations < max_iterations:
        _, _, cell = heapq.heappop(heap)
        iterations += 1
        if cell.d > best.d:
            best = cell
        if cell.max - best.d <= precision:
            break
        h = cell.h / 2
        for dx, dy in ((-h, -h), (h, -h), (-h, h), (h, h)):
            push(make_cell(cell.x + dx, cell.y + dy, h))

    if iterations >= max_iterations:
        logger.debug("Pole search stopped after %d iterations", iterations)
    return Point(best.x, best.y)
