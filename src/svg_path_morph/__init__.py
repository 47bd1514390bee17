# This file is part of https://github.com/KurtBoehm/svg_path_editor.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

__version__ = "0.1.0"

from .command import ArcParameters as ArcParameters
from .command import Command as Command
from .command import CommandType as CommandType
from .errors import ParseError as ParseError
from .errors import PathError as PathError
from .errors import PathIndexError as PathIndexError
from .errors import StructuralError as StructuralError
from .errors import UsageError as UsageError
from .geometry import BoundingBox as BoundingBox
from .geometry import Line as Line
from .geometry import Point as Point
from .kernel import Projection as Projection
from .path import HitOptions as HitOptions
from .path import HitResult as HitResult
from .path import Index as Index
from .path import Path as Path
from .path import ProjectionOntoPath as ProjectionOntoPath
from .path import parse_path as parse_path
from .path_mutator import PathMutator as PathMutator
from .path_parser import PathParser as PathParser
from .subpath import SubPath as SubPath
