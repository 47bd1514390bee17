# This file is part of https://github.com/KurtBoehm/svg_path_editor.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

from __future__ import annotations

import math
import re
from typing import Final

from .errors import ParseError

_number: Final = re.compile(
    r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
)
_separators: Final = re.compile(r"[\s,]*")
_whitespace: Final = re.compile(r"\s*")

parameter_counts: Final = {
    "M": 2,
    "L": 2,
    "H": 1,
    "V": 1,
    "C": 6,
    "S": 4,
    "Q": 4,
    "T": 2,
    "A": 7,
    "Z": 0,
}
"""Number of parameters of each (upper-case) SVG path command."""

_arc_flag_indices: Final = (3, 4)


class _Scanner:
    """Cursor over a path string."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def error(self, reason: str) -> ParseError:
        return ParseError(f"malformed path at position {self.pos}: {reason}")

    def skip(self, pattern: re.Pattern[str]) -> None:
        m = pattern.match(self.text, self.pos)
        if m:
            self.pos = m.end()

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self) -> str:
        return self.text[self.pos] if not self.at_end else ""

    def starts_number(self) -> bool:
        return _number.match(self.text, self.pos) is not None

    def read_command(self) -> str:
        self.skip(_whitespace)
        c = self.peek()
        if c.upper() not in parameter_counts:
            raise self.error(f"expected a command, found {c!r}")
        self.pos += 1
        return c

    def read_number(self) -> str:
        self.skip(_separators)
        m = _number.match(self.text, self.pos)
        if m is None:
            found = self.peek() or "end of input"
            raise self.error(f"expected a number, found {found!r}")
        if not math.isfinite(float(m.group())):
            raise self.error(f"number {m.group()!r} is out of range")
        self.pos = m.end()
        return m.group()

    def read_flag(self) -> str:
        self.skip(_separators)
        c = self.peek()
        if c not in ("0", "1"):
            raise self.error(f"expected an arc flag, found {c or 'end of input'!r}")
        self.pos += 1
        return c


class PathParser:
    """Tokenizer for SVG path data."""

    @staticmethod
    def parse(path: str) -> list[list[str]]:
        """
        Split SVG path data into commands and their parameter strings.

        Implicitly repeated commands are expanded, so that every returned item
        holds exactly one command letter followed by its parameters; parameters
        following the coordinates of a move command become line commands of the
        same relativity.

        :raises ParseError: If the path data does not follow the SVG grammar
                            (including paths that do not start with a move).
        """
        scanner = _Scanner(path)
        scanner.skip(_separators)
        if scanner.at_end:
            return []
        if scanner.peek() not in ("M", "m"):
            raise scanner.error("a path has to start with a move command")

        result: list[list[str]] = []
        while True:
            scanner.skip(_separators)
            if scanner.at_end:
                break

            cmd = scanner.read_command()
            upper = cmd.upper()
            count = parameter_counts[upper]
            if count == 0:
                result.append([cmd])
                continue

            key = cmd
            while True:
                params = [
                    scanner.read_flag()
                    if upper == "A" and i in _arc_flag_indices
                    else scanner.read_number()
                    for i in range(count)
                ]
                result.append([key, *params])
                if upper == "M":
                    key = "l" if cmd.islower() else "L"
                scanner.skip(_separators)
                if not scanner.starts_number():
                    break

        return result
