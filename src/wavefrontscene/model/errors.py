"""
Loader Errors
=============
Exception hierarchy raised by the OBJ loading pipeline.

Why is this file needed?
------------------------
1. Fail-fast: every stage raises one of these and the whole load is aborted.
   Nothing is committed to the registry when any of them escapes.
2. Coarse outcome: callers can catch ``InvalidObjFormat`` for "the file itself is
   broken" and ``FetchError`` / ``DecodeError`` for problems with referenced files.
"""
from __future__ import annotations

from typing import Optional


class ObjLoadError(Exception):
    """Base class for every failure of a single OBJ load."""


class InvalidObjFormat(ObjLoadError):
    """The OBJ (or something it references) is structurally invalid."""

    def __init__(self, message: str = "invalid obj format") -> None:
        super().__init__(message)


class ParseError(InvalidObjFormat):
    """Malformed OBJ or MTL text."""

    def __init__(self, message: str, line: Optional[int] = None, source: str = "obj") -> None:
        self.line = line
        self.source = source
        if line is not None:
            message = f"{source} line {line}: {message}"
        super().__init__(message)


class ChunkError(InvalidObjFormat):
    """A flat vertex array cannot be split into fixed-width tuples."""


class UnresolvedReferenceError(InvalidObjFormat):
    """A material library was requested that is not in the resolved index."""

    def __init__(self, reference: str) -> None:
        self.reference = reference
        super().__init__(f"material library '{reference}' was not resolved")


class DuplicateLabelError(InvalidObjFormat):
    """Two assets of one load were staged under the same label."""

    def __init__(self, label: str) -> None:
        self.label = label
        super().__init__(f"label '{label}' is already used by this load")


class FetchError(ObjLoadError):
    """A referenced file could not be read."""

    def __init__(self, path: str, reason: str = "not found") -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"could not read '{path}': {reason}")


class DecodeError(ObjLoadError):
    """An image is corrupt or of an unsupported type."""
