"""In-memory text documents that accept full and incremental edits."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from grenls.symbols import Position, Range

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class StaleVersionError(ValueError):
    """Raised when an edit carries a version older than the document's."""


@dataclass(frozen=True)
class TextChange:
    """One content change: a replacement of ``range``, or of the whole text if no range."""

    text: str
    range: Range | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TextChange:
        raw_range = data.get("range")
        return cls(
            text=str(data["text"]),
            range=Range.from_dict(raw_range) if raw_range is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"text": self.text}
        if self.range is not None:
            data["range"] = self.range.to_dict()
        return data


def _utf16_to_index(line: str, units: int) -> int:
    """Index into ``line`` of the character at ``units`` UTF-16 code units, clamped."""
    consumed = 0
    for index, char in enumerate(line):
        if consumed >= units:
            return index
        consumed += 2 if ord(char) > 0xFFFF else 1
    return len(line)


@dataclass
class Document:
    """A versioned text document identified by its URI.

    Positions in edits follow the language server protocol: zero-based lines
    and characters counted in UTF-16 code units. Positions past the end of a
    line or of the document are clamped to that end.
    """

    uri: str
    text: str
    version: int = 0
    language_id: str = "gren"

    def apply_changes(
        self, changes: Iterable[TextChange], version: int | None = None
    ) -> None:
        """Apply the changes in order and move to ``version`` if given.

        Raises StaleVersionError if ``version`` is older than the current one;
        the text is then left untouched.
        """
        if version is not None and version < self.version:
            raise StaleVersionError(
                f"received older version for document {self.uri}: "
                f"{version} < {self.version}"
            )
        text = self.text
        for change in changes:
            if change.range is None:
                text = change.text
            else:
                start = self._offset_at(text, change.range.start)
                end = self._offset_at(text, change.range.end)
                text = text[:start] + change.text + text[end:]
        self.text = text
        if version is not None:
            self.version = version

    @staticmethod
    def _offset_at(text: str, position: Position) -> int:
        starts = [0]
        ends = []
        for match in _LINE_BREAK.finditer(text):
            ends.append(match.start())
            starts.append(match.end())
        ends.append(len(text))
        if position.line >= len(starts):
            return len(text)
        line_start = starts[position.line]
        line = text[line_start:ends[position.line]]
        return line_start + _utf16_to_index(line, position.character)