"""Core symbol data types: kinds, positions, ranges, locations and symbols."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any


class SymbolKind(IntEnum):
    """Symbol kinds, numbered as in the language server protocol."""

    FILE = 1
    MODULE = 2
    NAMESPACE = 3
    PACKAGE = 4
    CLASS = 5
    METHOD = 6
    PROPERTY = 7
    FIELD = 8
    CONSTRUCTOR = 9
    ENUM = 10
    INTERFACE = 11
    FUNCTION = 12
    VARIABLE = 13
    CONSTANT = 14
    STRING = 15
    NUMBER = 16
    BOOLEAN = 17
    ARRAY = 18
    OBJECT = 19
    KEY = 20
    NULL = 21
    ENUM_MEMBER = 22
    STRUCT = 23
    EVENT = 24
    OPERATOR = 25
    TYPE_PARAMETER = 26

    @property
    def label(self) -> str:
        """The stored name of the kind, e.g. ``"Function"`` or ``"EnumMember"``."""
        return "".join(part.capitalize() for part in self.name.split("_"))

    @classmethod
    def from_name(cls, name: str) -> SymbolKind:
        """Map a stored kind name back to a kind; unknown names become VARIABLE."""
        return _STORED_KINDS.get(name, cls.VARIABLE)


_STORED_KINDS = {
    kind.label: kind
    for kind in (
        SymbolKind.FUNCTION,
        SymbolKind.CONSTRUCTOR,
        SymbolKind.MODULE,
        SymbolKind.CLASS,
        SymbolKind.VARIABLE,
        SymbolKind.FIELD,
    )
}


@dataclass(frozen=True, order=True)
class Position:
    """A zero-based line and character offset in a document."""

    line: int
    character: int

    def __post_init__(self) -> None:
        if self.line < 0 or self.character < 0:
            raise ValueError(
                f"position must not be negative: {self.line}:{self.character}"
            )

    def to_dict(self) -> dict[str, int]:
        return {"line": self.line, "character": self.character}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Position:
        return cls(int(data["line"]), int(data["character"]))


@dataclass(frozen=True)
class Range:
    """A span between two positions, end exclusive."""

    start: Position
    end: Position

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"range ends before it starts: {self.start} > {self.end}")

    def contains(self, position: Position) -> bool:
        """Whether the position lies inside the range (start inclusive, end exclusive)."""
        return self.start <= position < self.end

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {"start": self.start.to_dict(), "end": self.end.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Range:
        return cls(Position.from_dict(data["start"]), Position.from_dict(data["end"]))


@dataclass(frozen=True)
class Location:
    """A range inside the document named by a URI."""

    uri: str
    range: Range

    def to_dict(self) -> dict[str, Any]:
        return {"uri": self.uri, "range": self.range.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Location:
        return cls(str(data["uri"]), Range.from_dict(data["range"]))


@dataclass(frozen=True)
class Symbol:
    """A named definition found in a source file."""

    name: str
    kind: SymbolKind
    location: Location
    container_name: str | None = None
    type_signature: str | None = None
    documentation: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "kind": int(self.kind),
            "location": self.location.to_dict(),
            "container_name": self.container_name,
            "type_signature": self.type_signature,
            "documentation": self.documentation,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Symbol:
        return cls(
            name=str(data["name"]),
            kind=SymbolKind(int(data["kind"])),
            location=Location.from_dict(data["location"]),
            container_name=data.get("container_name"),
            type_signature=data.get("type_signature"),
            documentation=data.get("documentation"),
        )