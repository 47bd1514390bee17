# This file is part of https://github.com/KurtBoehm/svg_path_editor.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import Final, override

EPSILON: Final = 1e-6
"""Fixed tolerance (in path units) for structural comparisons of coordinates."""

# ------------------------------------------------------------------------------
# Basic geometric primitives
# ------------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Point:
    """2D point (or vector) with float coordinates."""

    x: float
    y: float

    def __iter__(self) -> Iterator[float]:
        """Iterate as ``(x, y)``."""
        yield self.x
        yield self.y

    @override
    def __str__(self) -> str:
        """Human-readable representation ``(x, y)``."""
        return f"({self.x:g}, {self.y:g})"

    @property
    def length(self) -> float:
        """Euclidean norm :math:`‖v‖_2 = \\sqrt{x^2 + y^2}`."""
        return math.hypot(self.x, self.y)

    @property
    def normalized(self) -> Point:
        """
        Unit vector :math:`v / ‖v‖_2`.

        The zero vector is returned unchanged.
        """
        length = self.length
        if length == 0:
            return Point(0.0, 0.0)
        return self / length

    def distance(self, other: Point) -> float:
        """Euclidean distance :math:`‖v - w‖_2`."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def dot(self, other: Point) -> float:
        """Scalar product :math:`v ⋅ w`."""
        return self.x * other.x + self.y * other.y

    def cross(self, other: Point) -> float:
        """z-component of the cross product :math:`v × w`."""
        return self.x * other.y - self.y * other.x

    def lerp(self, other: Point, t: float) -> Point:
        r"""Linear interpolation :math:`v + (w - v)\,t`."""
        return Point(self.x + (other.x - self.x) * t, self.y + (other.y - self.y) * t)

    def is_close(self, other: Point, eps: float = EPSILON) -> bool:
        """Test whether both coordinates differ by at most ``eps``."""
        return abs(self.x - other.x) <= eps and abs(self.y - other.y) <= eps

    # ---- vector arithmetic -------------------------------------------------------

    def __neg__(self) -> Point:
        """Unary minus :math:`-v`."""
        return Point(-self.x, -self.y)

    def __add__(self, other: Point) -> Point:
        """Vector addition :math:`v + w`."""
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        """Vector subtraction :math:`v - w`."""
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, other: float) -> Point:
        r"""Scalar multiplication :math:`v ⋅ λ`."""
        return Point(self.x * other, self.y * other)

    def __truediv__(self, other: float) -> Point:
        """Scalar division :math:`v / λ`."""
        return Point(self.x / other, self.y / other)


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Axis-aligned bounding box."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @staticmethod
    def from_points(points: Iterable[Point]) -> BoundingBox:
        """
        Smallest box containing all ``points``.

        :raises ValueError: If ``points`` is empty.
        """
        pts = list(points)
        if not pts:
            raise ValueError("Cannot compute the bounding box of no points")
        xs, ys = [p.x for p in pts], [p.y for p in pts]
        return BoundingBox(min(xs), min(ys), max(xs), max(ys))

    def union(self, other: BoundingBox) -> BoundingBox:
        """Smallest box containing both boxes."""
        return BoundingBox(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def contains(self, p: Point, eps: float = 0.0) -> bool:
        """Test whether ``p`` lies inside the box enlarged by ``eps``."""
        return (
            self.min_x - eps <= p.x <= self.max_x + eps
            and self.min_y - eps <= p.y <= self.max_y + eps
        )


# ------------------------------------------------------------------------------
# Polygon utility
# ------------------------------------------------------------------------------


def polygon_signed_area(poly: Sequence[Point]) -> float:
    r"""
    Signed area of a simple polygon.

    Uses the shoelace formula

    .. math::

        A = \frac12 \sum_i (x_i y_{i+1} - x_{i+1} y_i),

    with positive area for counter-clockwise vertex order (y axis up).

    :param poly: Vertex sequence, implicitly closed.
    """
    area = 0.0
    n = len(poly)
    for i in range(n):
        x1, y1 = poly[i]
        x2, y2 = poly[(i + 1) % n]
        area += x1 * y2 - x2 * y1
    return area / 2


def polygon_centroid(poly: Sequence[Point]) -> Point:
    """
    Area centroid of a simple polygon.

    Falls back to the mean of the vertices if the polygon has no area.

    :raises ValueError: If ``poly`` is empty.
    """
    if not poly:
        raise ValueError("Cannot compute the centroid of an empty polygon")
    area = polygon_signed_area(poly)
    if abs(area) < EPSILON * EPSILON:
        n = len(poly)
        return Point(sum(p.x for p in poly) / n, sum(p.y for p in poly) / n)

    cx = cy = 0.0
    n = len(poly)
    for i in range(n):
        x1, y1 = poly[i]
        x2, y2 = poly[(i + 1) % n]
        f = x1 * y2 - x2 * y1
        cx += (x1 + x2) * f
        cy += (y1 + y2) * f
    return Point(cx / (6 * area), cy / (6 * area))


# ------------------------------------------------------------------------------
# Line segment
# ------------------------------------------------------------------------------


class Line:
    r"""
    Line segment from :attr:`p` to :attr:`q`.

    Parametric form

    .. math::

        L(t) = p + (q - p)\,t, \quad t \in \mathbb{R}.
    """

    __slots__ = ("p", "q")

    def __init__(self, p: Point, q: Point) -> None:
        self.p: Point = p
        self.q: Point = q

    @property
    def delta(self) -> Point:
        """Direction vector :math:`q - p` of the segment."""
        return self.q - self.p

    @property
    def length(self) -> float:
        """Euclidean segment length :math:`‖q - p‖_2`."""
        return self.delta.length

    def parameter_of(self, point: Point) -> float:
        """
        Parameter of the orthogonal projection of ``point`` onto the line.

        The result is not clamped to the segment. A degenerate segment yields 0.
        """
        d = self.delta
        dd = d.dot(d)
        if dd == 0:
            return 0.0
        return (point - self.p).dot(d) / dd

    def __call__(self, t: float) -> Point:
        r"""
        Evaluate the parametric line :math:`L(t) = p + (q - p)\,t`.
        """
        return self.p.lerp(self.q, t)

    @override
    def __str__(self) -> str:
        """Human-readable representation ``(p, q)``."""
        return f"({self.p}, {self.q})"

    @override
    def __repr__(self) -> str:
        """Debug representation ``Line(p, q)``."""
        return f"Line({self.p!r}, {self.q!r})"


# ------------------------------------------------------------------------------
# Elliptical arc
# ------------------------------------------------------------------------------


def _rotate(v: Point, degrees: float) -> Point:
    rad = math.radians(degrees)
    c, s = math.cos(rad), math.sin(rad)
    return Point(c * v.x - s * v.y, s * v.x + c * v.y)


@dataclass(frozen=True)
class ParametricEllipticalArc:
    r"""
    Elliptical arc in parametric form.

    The underlying full ellipse is

    .. math::

        E(θ) &= R(φ) ⋅
        \begin{pmatrix}
            r_x \cos θ \\
            r_y \sin θ
        \end{pmatrix}
        +
        \begin{pmatrix}
            c_x \\
            c_y
        \end{pmatrix}

    where :math:`θ` and :math:`φ` are in degrees and :math:`(c_x, c_y)` is the center.

    This arc covers the interval :math:`[θ_0, θ_0 + Δθ]` (mod 360°).

    :ivar c: Center :math:`(c_x, c_y)`.
    :ivar r: Radii :math:`(r_x, r_y)`.
    :ivar theta0: Start angle :math:`θ_0` in degrees.
    :ivar dtheta: Sweep :math:`Δθ` in degrees (signed).
    :ivar phi: Rotation angle :math:`φ` in degrees.
    """

    c: Point
    r: Point
    theta0: float
    dtheta: float
    phi: float

    @staticmethod
    def from_endpoints(
        start: Point,
        end: Point,
        rx: float,
        ry: float,
        phi: float,
        large_arc: bool,
        sweep: bool,
    ) -> ParametricEllipticalArc | None:
        """
        Convert from the SVG endpoint parameterization.

        Follows the SVG implementation notes (F.6.5); radii that are too small
        to span the endpoints are scaled up uniformly (F.6.6).

        :return: ``None`` if the arc degenerates to a straight line (a zero
                 radius) or is omitted altogether (coincident endpoints).
        """
        rx, ry = abs(rx), abs(ry)
        if start == end or rx == 0 or ry == 0:
            return None

        # Step 1: transformed midpoint
        mid = _rotate((start - end) / 2, -phi)
        x1, y1 = mid.x, mid.y

        # Out-of-range radii correction
        lam = (x1 * x1) / (rx * rx) + (y1 * y1) / (ry * ry)
        if lam > 1:
            s = math.sqrt(lam)
            rx, ry = rx * s, ry * s

        # Step 2: transformed center
        num = rx * rx * ry * ry - rx * rx * y1 * y1 - ry * ry * x1 * x1
        den = rx * rx * y1 * y1 + ry * ry * x1 * x1
        coef = math.sqrt(max(0.0, num / den))
        if large_arc == sweep:
            coef = -coef
        cxp, cyp = coef * rx * y1 / ry, -coef * ry * x1 / rx

        # Step 3: center in user space
        c = _rotate(Point(cxp, cyp), phi) + (start + end) / 2

        # Step 4: start angle and sweep
        ux, uy = (x1 - cxp) / rx, (y1 - cyp) / ry
        vx, vy = (-x1 - cxp) / rx, (-y1 - cyp) / ry
        theta0 = math.degrees(math.atan2(uy, ux))
        dtheta = math.degrees(math.atan2(ux * vy - uy * vx, ux * vx + uy * vy))
        if not sweep and dtheta > 0:
            dtheta -= 360
        elif sweep and dtheta < 0:
            dtheta += 360

        return ParametricEllipticalArc(c, Point(rx, ry), theta0, dtheta, phi)

    @property
    def theta1(self) -> float:
        """
        End angle of the arc.

        :return: :math:`θ_1 = θ_0 + Δθ` in degrees.
        """
        return self.theta0 + self.dtheta

    def angle_condition(self, theta: float, *, eps: float = 1e-9) -> bool:
        """
        Test whether ``theta`` (in degrees) lies on this arc, modulo 360°.

        Works for positive and negative :math:`Δθ` and wrap-around intervals.
        """
        if abs(self.dtheta) >= 360 - eps:
            return True
        t0, t1 = self.theta0 % 360, self.theta1 % 360
        theta %= 360
        lo, hi = (t0, t1) if self.dtheta >= 0 else (t1, t0)
        if lo <= hi:
            return lo - eps <= theta <= hi + eps
        return theta >= lo - eps or theta <= hi + eps

    def parameter_of(self, theta: float) -> float:
        """
        Arc parameter :math:`t ∈ [0, 1]` of an angle on the arc.

        Angles slightly before :math:`θ_0` (by rounding) map to 0.
        """
        sweep = abs(self.dtheta)
        if sweep == 0:
            return 0.0
        if self.dtheta >= 0:
            delta = (theta - self.theta0) % 360
        else:
            delta = (self.theta0 - theta) % 360
        if delta > sweep:
            # Outside the swept range: snap to the closer end
            return 0.0 if 360 - delta < delta - sweep else 1.0
        return delta / sweep

    def angle_at(self, t: float) -> float:
        """Angle :math:`θ_0 + Δθ\\,t` in degrees."""
        return self.theta0 + self.dtheta * t

    def __call__(self, theta: float) -> Point:
        """Point on the ellipse at angle ``theta`` (in degrees)."""
        rad = math.radians(theta)
        return self.transform(Point(math.cos(rad), math.sin(rad)))

    def derivative(self, theta: float) -> Point:
        """Derivative :math:`dE/dθ` with :math:`θ` in radians."""
        rad = math.radians(theta)
        return _rotate(
            Point(-self.r.x * math.sin(rad), self.r.y * math.cos(rad)), self.phi
        )

    def transform(self, p: Point, *, inverse: bool = False) -> Point:
        r"""
        Affine map between unit circle and this ellipse.

        * ``inverse=False``: :math:`(u, v) \mapsto (x, y)` on the ellipse.
        * ``inverse=True``: :math:`(x, y) \mapsto (u, v)` on the unit circle.

        The forward mapping is

        .. math::

            (x, y) = c + R(φ)\,\mathrm{diag}(r_x, r_y)\,(u, v).
        """
        if inverse:
            xy = _rotate(p - self.c, -self.phi)
            return Point(xy.x / self.r.x, xy.y / self.r.y)

        xy = Point(p.x * self.r.x, p.y * self.r.y)
        return _rotate(xy, self.phi) + self.c

    def to_local(self, p: Point) -> Point:
        """Translate and rotate ``p`` into the axis-aligned frame of the ellipse."""
        return _rotate(p - self.c, -self.phi)
