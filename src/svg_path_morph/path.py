# This file is part of https://github.com/KurtBoehm/svg_path_editor.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, override

from .command import Command, CommandType
from .errors import PathIndexError, StructuralError
from .geometry import EPSILON, BoundingBox, Line, Point
from .kernel import (
    SEGMENT_LENGTH,
    FillRule,
    Projection,
    intersect_line_with_command,
    point_in_polygon,
    pole_of_inaccessibility,
    project_point_onto_command,
)
from .path_parser import PathParser
from .subpath import SubPath

if TYPE_CHECKING:
    from .path_mutator import PathMutator

logger = logging.getLogger(__name__)

type RangeFn = Callable[[float, Command], bool]


@dataclass(frozen=True)
class Index:
    """Location of a command within one :class:`Path` instance."""

    sub_idx: int
    cmd_idx: int


@dataclass(frozen=True)
class ProjectionOntoPath(Index):
    """A :class:`~svg_path_morph.kernel.Projection` with the command it lies on."""

    projection: Projection


@dataclass(frozen=True)
class HitOptions:
    """
    Options of :meth:`Path.hit_test`.

    :ivar is_point_in_range_fn: Decides whether the distance to a command's
                                end point counts as a hit; no end point hits
                                are reported if unset.
    :ivar is_segment_in_range_fn: Decides whether the distance to a command's
                                  curve counts as a hit; no segment hits are
                                  reported if unset.
    :ivar find_shapes_in_range: Whether to test the interior of closed subpaths.
    :ivar restrict_to_sub_idx: Only test the subpaths with these indices.
    :ivar fill_rule: Rule deciding which points are inside a subpath.
    """

    is_point_in_range_fn: RangeFn | None = None
    is_segment_in_range_fn: RangeFn | None = None
    find_shapes_in_range: bool = False
    restrict_to_sub_idx: Sequence[int] | None = None
    fill_rule: FillRule = "nonzero"


@dataclass(frozen=True)
class HitResult:
    """
    Result of :meth:`Path.hit_test`.

    End point hits carry the end point as projection point and ``t = 1``.
    """

    end_point_hits: tuple[ProjectionOntoPath, ...] = ()
    segment_hits: tuple[ProjectionOntoPath, ...] = ()
    shape_hits: tuple[int, ...] = ()

    @property
    def is_end_point_hit(self) -> bool:
        return bool(self.end_point_hits)

    @property
    def is_segment_hit(self) -> bool:
        return bool(self.segment_hits)

    @property
    def is_shape_hit(self) -> bool:
        return bool(self.shape_hits)

    @property
    def is_hit(self) -> bool:
        return self.is_end_point_hit or self.is_segment_hit or self.is_shape_hit


# ------------------------------------------------------------------------------
# Parsing
# ------------------------------------------------------------------------------


def _reflect(previous: Command | None, kind: CommandType, current: Point) -> Point:
    """First control point of a smooth curve following ``previous``."""
    if previous is None or previous.type is not kind:
        return current
    return previous.end * 2 - previous.points[-2]


def parse_path(path: str) -> list[SubPath]:
    """
    Parse SVG path data into subpaths of absolute commands.

    Horizontal and vertical lines become lines and smooth curves become
    curves with explicit control points. A drawing command following a close
    command starts a new subpath at the start of the closed one.

    :raises ParseError: If the path data is malformed.
    :raises StructuralError: If the commands do not form valid subpaths.
    """
    sub_paths: list[SubPath] = []
    commands: list[Command] = []
    start = current = Point(0, 0)

    def flush() -> None:
        if commands:
            sub_paths.append(SubPath(tuple(commands)))
            commands.clear()

    for item in PathParser.parse(path):
        key, values = item[0], [float(v) for v in item[1:]]
        upper = key.upper()
        o = current if key.islower() else Point(0, 0)

        def pt(i: int) -> Point:
            return Point(o.x + values[i], o.y + values[i + 1])

        if upper != "M" and not commands:
            commands.append(Command.move_to(start))
        previous = commands[-1] if commands else None

        match upper:
            case "M":
                flush()
                start = pt(0)
                cmd = Command.move_to(start)
            case "L":
                cmd = Command.line_to(current, pt(0))
            case "H":
                cmd = Command.line_to(current, Point(o.x + values[0], current.y))
            case "V":
                cmd = Command.line_to(current, Point(current.x, o.y + values[0]))
            case "C":
                cmd = Command.cubic_curve_to(current, pt(0), pt(2), pt(4))
            case "S":
                c1 = _reflect(previous, CommandType.CUBIC_CURVE_TO, current)
                cmd = Command.cubic_curve_to(current, c1, pt(0), pt(2))
            case "Q":
                cmd = Command.quadratic_curve_to(current, pt(0), pt(2))
            case "T":
                ctrl = _reflect(previous, CommandType.QUADRATIC_CURVE_TO, current)
                cmd = Command.quadratic_curve_to(current, ctrl, pt(0))
            case "A":
                rx, ry, rotation, large_arc, sweep = values[:5]
                cmd = Command.arc_to(
                    current, rx, ry, rotation, large_arc != 0, sweep != 0, pt(5)
                )
            case _:
                cmd = Command.close_path(current, start)

        commands.append(cmd)
        current = cmd.end
        if cmd.type is CommandType.CLOSE_PATH:
            flush()

    flush()
    logger.debug("Parsed %d subpaths from %d characters", len(sub_paths), len(path))
    return sub_paths


# ------------------------------------------------------------------------------
# Path
# ------------------------------------------------------------------------------


class Path:
    """
    Immutable compound path: an ordered sequence of :class:`SubPath`.

    Paths share unchanged subpaths and commands with the paths they were
    derived from. Every path remembers its pristine ancestor, i.e. the path
    that was parsed before any edits, which :meth:`revert` returns.

    :param path: SVG path data.
    :raises ParseError: If the path data is malformed.
    """

    def __init__(self, path: str = "") -> None:
        self._sub_paths: tuple[SubPath, ...] = tuple(parse_path(path))
        self._pristine: Path | None = None
        self._strings: dict[int | None, str] = {}

    @staticmethod
    def from_sub_paths(
        sub_paths: Iterable[SubPath], *, pristine: Path | None = None
    ) -> Path:
        """Create a path from existing subpaths."""
        path = object.__new__(Path)
        path._sub_paths = tuple(sub_paths)
        path._pristine = pristine
        path._strings = {}
        return path

    # ---- structural queries ------------------------------------------------------

    def get_path_length(self) -> float:
        return sum(sub.length for sub in self._sub_paths)

    def get_path_string(self, decimals: int | None = None) -> str:
        """
        Serialize to canonical SVG path data.

        All commands are absolute and separated by single spaces.

        :param decimals: Fixed number of decimals (trailing zeros stripped).
        """
        s = self._strings.get(decimals)
        if s is None:
            s = " ".join(sub.as_string(decimals) for sub in self._sub_paths)
            self._strings[decimals] = s
        return s

    def get_sub_paths(self) -> tuple[SubPath, ...]:
        return self._sub_paths

    def get_sub_path(self, sub_idx: int) -> SubPath:
        """
        The subpath at ``sub_idx``.

        :raises PathIndexError: If the index is out of range (negative included).
        """
        if not 0 <= sub_idx < len(self._sub_paths):
            raise PathIndexError(
                f"Subpath index {sub_idx} out of range [0, {len(self._sub_paths)})"
            )
        return self._sub_paths[sub_idx]

    def get_commands(self) -> tuple[Command, ...]:
        """All commands of all subpaths, in order."""
        return tuple(cmd for sub in self._sub_paths for cmd in sub.commands)

    def get_command(self, sub_idx: int, cmd_idx: int) -> Command:
        """
        The command at ``(sub_idx, cmd_idx)``.

        :raises PathIndexError: If either index is out of range.
        """
        return self.get_sub_path(sub_idx).command(cmd_idx)

    def get_bounding_box(self) -> BoundingBox | None:
        """Bounding box of all subpaths, ``None`` for the empty path."""
        if not self._sub_paths:
            return None
        box = self._sub_paths[0].bounding_box
        for sub in self._sub_paths[1:]:
            box = box.union(sub.bounding_box)
        return box

    def approx_equal(self, other: Path, *, eps: float = EPSILON) -> bool:
        """Structural equality with coordinates compared up to ``eps``."""
        return len(self._sub_paths) == len(other._sub_paths) and all(
            a.approx_equal(b, eps=eps)
            for a, b in zip(self._sub_paths, other._sub_paths)
        )

    # ---- geometric queries -------------------------------------------------------

    def project(
        self, point: Point, restrict_to_sub_idx: int | None = None
    ) -> ProjectionOntoPath | None:
        """
        Project ``point`` onto the nearest command.

        Only drawing commands are candidates, unless a subpath consists of its
        move alone. Ties are broken by the lowest ``(sub_idx, cmd_idx)``.

        :return: ``None`` if the path (or the restricted subpath) is empty.
        """
        if restrict_to_sub_idx is None:
            indices: Iterable[int] = range(len(self._sub_paths))
        else:
            self.get_sub_path(restrict_to_sub_idx)
            indices = (restrict_to_sub_idx,)

        best: ProjectionOntoPath | None = None
        for sub_idx in indices:
            commands = self._sub_paths[sub_idx].commands
            candidates = [(j, c) for j, c in enumerate(commands) if c.is_drawing]
            for cmd_idx, cmd in candidates or [(0, commands[0])]:
                projection = project_point_onto_command(point, cmd)
                if best is None or projection.distance < best.projection.distance:
                    best = ProjectionOntoPath(sub_idx, cmd_idx, projection)
        return best

    def hit_test(self, point: Point, options: HitOptions = HitOptions()) -> HitResult:
        """
        Classify ``point`` against this path.

        End point hits, segment hits, and shape hits are determined
        independently; see :class:`HitOptions`.
        """
        if options.restrict_to_sub_idx is None:
            indices: Sequence[int] = range(len(self._sub_paths))
        else:
            indices = sorted(set(options.restrict_to_sub_idx))
            for sub_idx in indices:
                self.get_sub_path(sub_idx)

        end_point_hits: list[ProjectionOntoPath] = []
        segment_hits: list[ProjectionOntoPath] = []
        shape_hits: list[int] = []

        point_fn = options.is_point_in_range_fn
        segment_fn = options.is_segment_in_range_fn
        for sub_idx in indices:
            sub = self._sub_paths[sub_idx]
            for cmd_idx, cmd in enumerate(sub.commands):
                if point_fn is not None:
                    d = point.distance(cmd.end)
                    if point_fn(d, cmd):
                        projection = Projection(cmd.end, 1.0, d)
                        end_point_hits.append(
                            ProjectionOntoPath(sub_idx, cmd_idx, projection)
                        )
                if segment_fn is not None and cmd.is_drawing:
                    projection = project_point_onto_command(point, cmd)
                    if segment_fn(projection.distance, cmd):
                        segment_hits.append(
                            ProjectionOntoPath(sub_idx, cmd_idx, projection)
                        )
            if options.find_shapes_in_range and sub.is_closed:
                if point_in_polygon(
                    point, sub.polygon(), fill_rule=options.fill_rule
                ):
                    shape_hits.append(sub_idx)

        return HitResult(tuple(end_point_hits), tuple(segment_hits), tuple(shape_hits))

    def intersects(self, line: Line) -> int:
        """
        Count the intersections of the segment ``line`` with this path.

        Every command counts intersections at its start but not at its end,
        except the last command of an open subpath, so that intersections at
        shared vertices are counted once.
        """
        count = 0
        for sub in self._sub_paths:
            drawing = [cmd for cmd in sub.commands if cmd.is_drawing]
            for i, cmd in enumerate(drawing):
                last = i == len(drawing) - 1
                count += intersect_line_with_command(
                    line, cmd, include_end=last and not sub.is_closed
                )
        return count

    def get_pole_of_inaccessibility(
        self,
        sub_idx: int,
        *,
        precision: float | None = None,
        max_iterations: int = 10000,
        segment_length: float = SEGMENT_LENGTH,
    ) -> Point:
        """
        The point inside a closed subpath farthest from its boundary.

        :raises StructuralError: If the subpath is not closed.
        """
        sub = self.get_sub_path(sub_idx)
        if not sub.is_closed:
            raise StructuralError(f"Subpath {sub_idx} is not closed")
        return pole_of_inaccessibility(
            sub.polygon(segment_length=segment_length),
            precision=precision,
            max_iterations=max_iterations,
        )

    def is_morphable_with(self, other: Path) -> bool:
        """
        Whether both paths have the same structure.

        This requires the same number of subpaths, the same number of commands
        in corresponding subpaths, and the same types of corresponding commands.
        """
        if len(self._sub_paths) != len(other._sub_paths):
            return False
        for a, b in zip(self._sub_paths, other._sub_paths):
            if len(a.commands) != len(b.commands):
                return False
            if any(c.type is not d.type for c, d in zip(a.commands, b.commands)):
                return False
        return True

    def get_connected_split_segments(
        self, sub_idx: int, cmd_idx: int
    ) -> tuple[Index, ...]:
        """All locations of commands sharing the identity of the given command."""
        token = self.get_command(sub_idx, cmd_idx).id
        return tuple(
            Index(i, j)
            for i, sub in enumerate(self._sub_paths)
            for j, cmd in enumerate(sub.commands)
            if cmd.id == token
        )

    # ---- derived paths -----------------------------------------------------------

    def mutate(self) -> PathMutator:
        """Create a builder for an edited copy of this path."""
        from .path_mutator import PathMutator

        return PathMutator(self)

    def clone(self) -> Path:
        return Path.from_sub_paths(self._sub_paths, pristine=self._pristine)

    def revert(self) -> Path:
        """The pristine ancestor of this path (the path itself if unedited)."""
        return self._pristine if self._pristine is not None else self

    # ---- dunder ------------------------------------------------------------------

    @override
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Path):
            return NotImplemented
        return self._sub_paths == other._sub_paths

    @override
    def __hash__(self) -> int:
        return hash(self._sub_paths)

    @override
    def __str__(self) -> str:
        return self.get_path_string()

    @override
    def __repr__(self) -> str:
        return f"Path({self.get_path_string()!r})"

    @override
    def __format__(self, format_spec: str) -> str:
        """Support ``format(path, ".3")`` for a fixed number of decimals."""
        if not format_spec:
            return self.get_path_string()
        if format_spec.startswith(".") and format_spec[1:].isdigit():
            return self.get_path_string(int(format_spec[1:]))
        raise ValueError(f"Invalid format specifier for Path: {format_spec!r}")
