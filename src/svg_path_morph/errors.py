# This file is part of https://github.com/KurtBoehm/svg_path_editor.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

from __future__ import annotations


class PathError(Exception):
    """Base class of all errors raised by this package."""


class ParseError(PathError, ValueError):
    """A path string does not follow the SVG path grammar."""


class StructuralError(PathError, ValueError):
    """
    A structural invariant is violated.

    Raised for malformed command sequences, invalid staged edits and queries
    that require a closed subpath.
    """


class PathIndexError(PathError, IndexError):
    """A subpath or command index is out of range."""


class UsageError(PathError, RuntimeError):
    """A single-use object is used after it has been consumed."""
