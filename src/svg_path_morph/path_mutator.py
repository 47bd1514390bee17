# This file is part of https://github.com/KurtBoehm/svg_path_editor.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Self, final

from .command import Command, CommandType
from .errors import PathIndexError, StructuralError, UsageError
from .geometry import Point
from .path import Path
from .subpath import SubPath

logger = logging.getLogger(__name__)

# ------------------------------------------------------------------------------
# Staged operations
# ------------------------------------------------------------------------------


@dataclass(frozen=True)
class Split:
    sub_idx: int
    cmd_idx: int
    ts: tuple[float, ...]


@dataclass(frozen=True)
class Unsplit:
    sub_idx: int
    cmd_idx: int


@dataclass(frozen=True)
class Reverse:
    sub_idx: int


@dataclass(frozen=True)
class ShiftStart:
    sub_idx: int
    cmd_idx: int


@dataclass(frozen=True)
class ShiftBy:
    sub_idx: int
    steps: int


@dataclass(frozen=True)
class Convert:
    sub_idx: int
    cmd_idx: int
    command_type: CommandType | str


@dataclass(frozen=True)
class AddSubPath:
    sub_path: SubPath
    index: int | None


@dataclass(frozen=True)
class AddCollapsingSubPath:
    point: Point
    num_commands: int


@dataclass(frozen=True)
class RemoveSubPath:
    sub_idx: int


@dataclass(frozen=True)
class RemoveCollapsingSubPaths:
    pass


@dataclass(frozen=True)
class MoveSubPath:
    from_idx: int
    to_idx: int


type Operation = (
    Split
    | Unsplit
    | Reverse
    | ShiftStart
    | ShiftBy
    | Convert
    | AddSubPath
    | AddCollapsingSubPath
    | RemoveSubPath
    | RemoveCollapsingSubPaths
    | MoveSubPath
)


def _check_index(idx: int, size: int, what: str) -> None:
    if not 0 <= idx < size:
        raise PathIndexError(f"{what} index {idx} out of range [0, {size})")


# ------------------------------------------------------------------------------
# Mutator
# ------------------------------------------------------------------------------


@final
class PathMutator:
    """
    Single-use builder for an edited copy of a :class:`~svg_path_morph.path.Path`.

    Staging methods return the mutator, so calls can be chained. Indices of a
    staged operation refer to the path as left by the operations staged
    before it. Nothing is applied before :meth:`build`, which applies all
    operations at once and returns a new path; the base path is never changed.

    .. code-block:: python

        path = Path("M 0 0 L 10 0 L 10 10 Z")
        split = path.mutate().split(0, 1, 0.5).reverse(0).build()
    """

    def __init__(self, base: Path) -> None:
        self._base = base
        self._operations: list[Operation] = []
        self._built = False

    def _stage(self, op: Operation) -> Self:
        if self._built:
            raise UsageError("Cannot stage operations on a built PathMutator")
        self._operations.append(op)
        return self

    # ---- commands ----------------------------------------------------------------

    def split(self, sub_idx: int, cmd_idx: int, *ts: float) -> Self:
        """
        Split a command at the parameters ``ts`` (each in :math:`(0, 1)`).

        All fragments keep the identity token of the split command.
        """
        return self._stage(Split(sub_idx, cmd_idx, tuple(ts)))

    def split_in_half(self, sub_idx: int, cmd_idx: int) -> Self:
        return self.split(sub_idx, cmd_idx, 0.5)

    def unsplit(self, sub_idx: int, cmd_idx: int) -> Self:
        """Merge the split fragment at ``cmd_idx`` with the fragment following it."""
        return self._stage(Unsplit(sub_idx, cmd_idx))

    def convert(
        self, sub_idx: int, cmd_idx: int, command_type: CommandType | str
    ) -> Self:
        """Convert a command among line, quadratic, cubic, and arc commands."""
        return self._stage(Convert(sub_idx, cmd_idx, command_type))

    # ---- subpaths ----------------------------------------------------------------

    def reverse(self, sub_idx: int) -> Self:
        return self._stage(Reverse(sub_idx))

    def shift_start(self, sub_idx: int, cmd_idx: int) -> Self:
        """Let a closed subpath start with the command at ``cmd_idx``."""
        return self._stage(ShiftStart(sub_idx, cmd_idx))

    def shift_forward(self, sub_idx: int) -> Self:
        """Let a closed subpath start with its second drawing command."""
        return self._stage(ShiftBy(sub_idx, 1))

    def shift_back(self, sub_idx: int) -> Self:
        """Let a closed subpath start with its last drawing command."""
        return self._stage(ShiftBy(sub_idx, -1))

    def add_sub_path(self, sub_path: SubPath, index: int | None = None) -> Self:
        """Insert ``sub_path`` before ``index`` (append if ``None``)."""
        return self._stage(AddSubPath(sub_path, index))

    def remove_sub_path(self, sub_idx: int) -> Self:
        return self._stage(RemoveSubPath(sub_idx))

    def add_collapsing_sub_path(self, point: Point, num_commands: int) -> Self:
        """Append a subpath of ``num_commands`` zero-length lines at ``point``."""
        return self._stage(AddCollapsingSubPath(point, num_commands))

    def remove_collapsing_sub_paths(self) -> Self:
        return self._stage(RemoveCollapsingSubPaths())

    def move_sub_path(self, from_idx: int, to_idx: int) -> Self:
        """Move the subpath at ``from_idx`` so that it ends up at ``to_idx``."""
        return self._stage(MoveSubPath(from_idx, to_idx))

    # ---- build -------------------------------------------------------------------

    def build(self) -> Path:
        """
        Apply all staged operations and return the resulting path.

        The result shares unchanged subpaths with the base path and has the
        same pristine ancestor.

        :raises StructuralError: If a staged operation is invalid
                                 (including out-of-range indices).
        :raises UsageError: If the mutator has already been built.
        """
        if self._built:
            raise UsageError("PathMutator.build() may only be called once")
        self._built = True

        sub_paths = list(self._base.get_sub_paths())
        for i, op in enumerate(self._operations):
            try:
                _apply(sub_paths, op)
            except (PathIndexError, StructuralError) as e:
                raise StructuralError(f"Operation {i} ({op}): {e}") from e

        logger.debug(
            "Built path with %d subpaths from %d operations",
            len(sub_paths),
            len(self._operations),
        )
        return Path.from_sub_paths(sub_paths, pristine=self._base.revert())


def _apply(sub_paths: list[SubPath], op: Operation) -> None:
    match op:
        case Split(sub_idx, cmd_idx, ts):
            _check_index(sub_idx, len(sub_paths), "Subpath")
            sub = sub_paths[sub_idx]
            cmd = sub.command(cmd_idx)
            sub_paths[sub_idx] = sub.with_commands(
                [
                    *sub.commands[:cmd_idx],
                    *_split_all(cmd, ts),
                    *sub.commands[cmd_idx + 1 :],
                ]
            )
        case Unsplit(sub_idx, cmd_idx):
            _check_index(sub_idx, len(sub_paths), "Subpath")
            sub = sub_paths[sub_idx]
            first = sub.command(cmd_idx)
            if cmd_idx + 1 >= len(sub.commands):
                raise StructuralError(f"Command {cmd_idx} has no successor to merge")
            merged = first.merged(sub.commands[cmd_idx + 1])
            sub_paths[sub_idx] = sub.with_commands(
                [*sub.commands[:cmd_idx], merged, *sub.commands[cmd_idx + 2 :]]
            )
        case Reverse(sub_idx):
            _check_index(sub_idx, len(sub_paths), "Subpath")
            sub_paths[sub_idx] = sub_paths[sub_idx].reversed()
        case ShiftStart(sub_idx, cmd_idx):
            _check_index(sub_idx, len(sub_paths), "Subpath")
            sub_paths[sub_idx] = sub_paths[sub_idx].shifted(cmd_idx)
        case ShiftBy(sub_idx, steps):
            _check_index(sub_idx, len(sub_paths), "Subpath")
            sub = sub_paths[sub_idx]
            n = len(sub.commands) - 1
            if n < 1:
                raise StructuralError(f"Subpath {sub_idx} has no drawing commands")
            sub_paths[sub_idx] = sub.shifted(1 + steps % n)
        case Convert(sub_idx, cmd_idx, command_type):
            _check_index(sub_idx, len(sub_paths), "Subpath")
            sub = sub_paths[sub_idx]
            converted = sub.command(cmd_idx).converted(command_type)
            sub_paths[sub_idx] = sub.with_commands(
                [*sub.commands[:cmd_idx], converted, *sub.commands[cmd_idx + 1 :]]
            )
        case AddSubPath(sub_path, index):
            if index is None:
                sub_paths.append(sub_path)
            else:
                _check_index(index, len(sub_paths) + 1, "Insertion")
                sub_paths.insert(index, sub_path)
        case AddCollapsingSubPath(point, num_commands):
            sub_paths.append(SubPath.collapsing(point, num_commands))
        case RemoveSubPath(sub_idx):
            _check_index(sub_idx, len(sub_paths), "Subpath")
            del sub_paths[sub_idx]
        case RemoveCollapsingSubPaths():
            sub_paths[:] = [sub for sub in sub_paths if not sub.is_collapsing]
        case MoveSubPath(from_idx, to_idx):
            _check_index(from_idx, len(sub_paths), "Subpath")
            _check_index(to_idx, len(sub_paths), "Subpath")
            sub_paths.insert(to_idx, sub_paths.pop(from_idx))


def _split_all(cmd: Command, ts: tuple[float, ...]) -> list[Command]:
    if not ts:
        raise StructuralError("At least one split parameter is required")
    if any(not 0 < t < 1 for t in ts):
        raise StructuralError(f"Split parameters must lie in (0, 1), got {ts}")
    ordered = sorted(ts)
    if any(a == b for a, b in zip(ordered, ordered[1:])):
        raise StructuralError(f"Split parameters must be distinct, got {ts}")

    fragments: list[Command] = []
    rest, done = cmd, 0.0
    for t in ordered:
        first, rest = rest.split((t - done) / (1 - done))
        fragments.append(first)
        done = t
    fragments.append(rest)
    return fragments
