"""
Field paths identifying a location in a validated object.

Paths are immutable and render the way validators report them:
``spec.request``, ``spec.usages[2]``, ``metadata.labels[app]``.
"""

import re
from dataclasses import dataclass
from typing import Tuple, Union

_SEGMENT_PATTERN = re.compile(r"([^.\[\]]+)|\[([^\]]*)\]")


@dataclass(frozen=True)
class PathSegment:
    """One step of a path: a field name, a list index or a map key."""

    name: str = ""
    index: int = -1
    key: str = ""

    def render(self, first: bool) -> str:
        if self.name:
            return self.name if first else f".{self.name}"
        if self.index >= 0:
            return f"[{self.index}]"
        return f"[{self.key}]"


@dataclass(frozen=True)
class FieldPath:
    """
    Immutable field path.

    Example:
        >>> root("spec").child("usages").index(0)
        FieldPath('spec.usages[0]')
    """

    segments: Tuple[PathSegment, ...] = ()

    def child(self, name: str, *more: str) -> "FieldPath":
        """Append one or more field names."""
        segments = self.segments + tuple(PathSegment(name=n) for n in (name,) + more)
        return FieldPath(segments)

    def index(self, position: int) -> "FieldPath":
        """Append a list index."""
        if position < 0:
            raise ValueError(f"Path index must be non-negative, got {position}")
        return FieldPath(self.segments + (PathSegment(index=position),))

    def key(self, map_key: str) -> "FieldPath":
        """Append a map key."""
        return FieldPath(self.segments + (PathSegment(key=map_key),))

    def root(self) -> "FieldPath":
        return FieldPath(self.segments[:1])

    def __str__(self) -> str:
        return "".join(seg.render(i == 0) for i, seg in enumerate(self.segments))

    def __repr__(self) -> str:
        return f"FieldPath({str(self)!r})"

    @classmethod
    def parse(cls, text: str) -> "FieldPath":
        """
        Parse a rendered path back into segments.

        Bracketed segments made only of digits become list indexes, anything
        else becomes a map key. A leading dot is tolerated.
        """
        segments = []
        for match in _SEGMENT_PATTERN.finditer(text.lstrip(".")):
            name, bracket = match.group(1), match.group(2)
            if name is not None:
                segments.append(PathSegment(name=name))
            elif bracket.isdigit():
                segments.append(PathSegment(index=int(bracket)))
            else:
                segments.append(PathSegment(key=bracket))
        return cls(tuple(segments))


def root(name: str, *more: str) -> FieldPath:
    """Start a new path at a top-level field."""
    return FieldPath().child(name, *more)


def as_path_string(path: Union[FieldPath, str, None]) -> str:
    """Normalize a path argument to its rendered form."""
    if path is None:
        return ""
    if isinstance(path, FieldPath):
        return str(path)
    return str(FieldPath.parse(path))
