# This file is part of https://github.com/KurtBoehm/svg_path_editor.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from functools import cached_property

from .command import Command, CommandType
from .errors import PathIndexError, StructuralError
from .geometry import EPSILON, BoundingBox, Point
from .kernel import SEGMENT_LENGTH, flatten_command


@dataclass(frozen=True)
class SubPath:
    """
    A continuous run of commands starting with a move.

    Construction validates the structure: the first command is the only move,
    a close command may only come last and must end at the start point, and
    every command starts where its predecessor ends (up to
    :data:`~svg_path_morph.geometry.EPSILON`).

    :ivar commands: The commands, starting with the move.
    :ivar is_collapsing: Whether this subpath was added to collapse into a
                         single point when morphing.
    :raises StructuralError: If the structure is invalid.
    """

    commands: tuple[Command, ...]
    is_collapsing: bool = field(default=False, compare=False)

    def __post_init__(self) -> None:
        cmds = tuple(self.commands)
        object.__setattr__(self, "commands", cmds)

        if not cmds:
            raise StructuralError("A subpath requires at least one command")
        if cmds[0].type is not CommandType.MOVE_TO:
            raise StructuralError("A subpath has to start with a move command")

        previous = cmds[0]
        for i, cmd in enumerate(cmds[1:], start=1):
            if cmd.type is CommandType.MOVE_TO:
                raise StructuralError(f"Unexpected move command at index {i}")
            if cmd.type is CommandType.CLOSE_PATH and i != len(cmds) - 1:
                raise StructuralError(f"Close command at index {i} is not last")
            if not cmd.start.is_close(previous.end):
                raise StructuralError(
                    f"Command {i} starts at {cmd.start}, "
                    f"but its predecessor ends at {previous.end}"
                )
            previous = cmd

        last = cmds[-1]
        if last.type is CommandType.CLOSE_PATH and not last.end.is_close(self.start):
            raise StructuralError("Close command does not end at the subpath start")

    @staticmethod
    def from_commands(
        commands: Iterable[Command], *, is_collapsing: bool = False
    ) -> SubPath:
        return SubPath(tuple(commands), is_collapsing)

    @staticmethod
    def collapsing(point: Point, num_commands: int) -> SubPath:
        """
        A subpath of ``num_commands`` zero-length lines at ``point``.

        :raises StructuralError: If ``num_commands`` is not positive.
        """
        if num_commands < 1:
            raise StructuralError("A collapsing subpath needs at least one command")
        commands = [Command.move_to(point)]
        commands += [Command.line_to(point, point) for _ in range(num_commands)]
        return SubPath(tuple(commands), is_collapsing=True)

    # ---- queries -----------------------------------------------------------------

    @property
    def start(self) -> Point:
        return self.commands[0].end

    @property
    def end(self) -> Point:
        return self.commands[-1].end

    @cached_property
    def is_closed(self) -> bool:
        """
        Whether the subpath is closed.

        This is the case if it ends with a close command, or if it draws
        something and ends where it starts.
        """
        if self.commands[-1].type is CommandType.CLOSE_PATH:
            return True
        return len(self.commands) > 1 and self.end.is_close(self.start)

    @cached_property
    def length(self) -> float:
        return sum(cmd.length for cmd in self.commands)

    @cached_property
    def bounding_box(self) -> BoundingBox:
        box = BoundingBox.from_points([self.start])
        for cmd in self.commands[1:]:
            box = box.union(cmd.bounding_box)
        return box

    def polygon(self, *, segment_length: float = SEGMENT_LENGTH) -> list[Point]:
        """Polygonal approximation, starting at the start point."""
        points = [self.start]
        for cmd in self.commands[1:]:
            points.extend(flatten_command(cmd, segment_length=segment_length)[1:])
        return points

    def command(self, cmd_idx: int) -> Command:
        """
        The command at ``cmd_idx``.

        :raises PathIndexError: If the index is out of range (negative included).
        """
        if not 0 <= cmd_idx < len(self.commands):
            raise PathIndexError(
                f"Command index {cmd_idx} out of range [0, {len(self.commands)})"
            )
        return self.commands[cmd_idx]

    def approx_equal(self, other: SubPath, *, eps: float = EPSILON) -> bool:
        return len(self.commands) == len(other.commands) and all(
            a.approx_equal(b, eps=eps) for a, b in zip(self.commands, other.commands)
        )

    def as_string(self, decimals: int | None = None) -> str:
        return " ".join(cmd.as_string(decimals) for cmd in self.commands)

    # ---- edits -------------------------------------------------------------------

    def with_commands(self, commands: Iterable[Command]) -> SubPath:
        """A subpath with replaced commands, keeping the collapsing flag."""
        return replace(self, commands=tuple(commands))

    def reversed(self) -> SubPath:
        """
        The same drawing traversed in the opposite direction.

        An explicitly closed subpath keeps its close command last, so the
        new start is the point the close command used to start from.
        """
        move, *segments = self.commands
        if not segments:
            return self

        close: Command | None = None
        if segments[-1].type is CommandType.CLOSE_PATH:
            *segments, close = segments
            if not segments:
                return self

        new_start = segments[-1].end
        commands = [replace(move, points=(new_start,))]
        commands += [cmd.reversed() for cmd in reversed(segments)]
        if close is not None:
            commands.append(close.reversed())
        return self.with_commands(commands)

    def shifted(self, cmd_idx: int) -> SubPath:
        """
        Rotate a closed subpath so that it starts with the command at ``cmd_idx``.

        If the subpath ends in a close command, a close command that ends up in
        the middle becomes a line and a line that ends up last becomes a close
        command. Otherwise every command keeps its type.

        :raises StructuralError: If the subpath is not closed.
        :raises PathIndexError: If ``cmd_idx`` does not refer to a drawing command.
        """
        if not self.is_closed:
            raise StructuralError("Only closed subpaths can change their start")
        if not 1 <= cmd_idx < len(self.commands):
            raise PathIndexError(
                f"Command index {cmd_idx} out of range [1, {len(self.commands)})"
            )
        if cmd_idx == 1:
            return self

        move, *segments = self.commands
        rotated = segments[cmd_idx - 1 :] + segments[: cmd_idx - 1]
        if segments[-1].type is CommandType.CLOSE_PATH:
            rotated = [
                replace(cmd, type=CommandType.LINE_TO)
                if cmd.type is CommandType.CLOSE_PATH
                else cmd
                for cmd in rotated
            ]
            if rotated[-1].type is CommandType.LINE_TO:
                rotated[-1] = replace(rotated[-1], type=CommandType.CLOSE_PATH)

        commands = [replace(move, points=(rotated[0].start,)), *rotated]
        return self.with_commands(commands)
