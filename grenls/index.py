"""Persistent symbol index backed by SQLite."""

from __future__ import annotations

import sqlite3
import threading
from os import PathLike
from typing import Any

from grenls.symbols import Location, Position, Range, Symbol, SymbolKind

DEFAULT_DB_PATH = "gren-lsp-symbols.db"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS symbols (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    kind TEXT NOT NULL,
    file_uri TEXT NOT NULL,
    start_line INTEGER NOT NULL,
    start_character INTEGER NOT NULL,
    end_line INTEGER NOT NULL,
    end_character INTEGER NOT NULL,
    container_name TEXT,
    type_signature TEXT,
    documentation TEXT
)
"""

_NAME_INDEX = "CREATE INDEX IF NOT EXISTS idx_symbols_name ON symbols(name)"

_COLUMNS = (
    "name, kind, file_uri, start_line, start_character, end_line, end_character, "
    "container_name, type_signature, documentation"
)


def _optional(value: Any) -> str | None:
    """Stored empty strings (or NULLs) stand for absent values."""
    return value if value else None


def _row_to_symbol(row: tuple[Any, ...]) -> Symbol:
    (
        name,
        kind,
        uri,
        start_line,
        start_character,
        end_line,
        end_character,
        container_name,
        type_signature,
        documentation,
    ) = row
    return Symbol(
        name=name,
        kind=SymbolKind.from_name(kind),
        location=Location(
            str(uri),
            Range(
                Position(int(start_line), int(start_character)),
                Position(int(end_line), int(end_character)),
            ),
        ),
        container_name=_optional(container_name),
        type_signature=_optional(type_signature),
        documentation=_optional(documentation),
    )


class SymbolIndex:
    """Stores symbols in a SQLite database and answers name lookups.

    The connection is shared between threads and guarded by a lock.
    """

    def __init__(self, db_path: str | PathLike[str] = DEFAULT_DB_PATH) -> None:
        self._lock = threading.Lock()
        self._connection = sqlite3.connect(str(db_path), check_same_thread=False)
        with self._connection:
            self._connection.execute(_SCHEMA)
            self._connection.execute(_NAME_INDEX)

    def index_symbol(self, symbol: Symbol) -> None:
        """Store one symbol."""
        start = symbol.location.range.start
        end = symbol.location.range.end
        with self._lock, self._connection:
            self._connection.execute(
                f"INSERT OR REPLACE INTO symbols ({_COLUMNS}) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    symbol.name,
                    symbol.kind.label,
                    symbol.location.uri,
                    start.line,
                    start.character,
                    end.line,
                    end.character,
                    symbol.container_name or "",
                    symbol.type_signature or "",
                    symbol.documentation or "",
                ),
            )

    def _query(self, where: str, argument: str) -> list[Symbol]:
        with self._lock:
            rows = self._connection.execute(
                f"SELECT {_COLUMNS} FROM symbols WHERE {where}", (argument,)
            ).fetchall()
        return [_row_to_symbol(row) for row in rows]

    def find_symbol(self, name: str) -> list[Symbol]:
        """Symbols whose name contains ``name`` (SQL LIKE, so ASCII case-insensitive)."""
        return self._query("name LIKE ?", f"%{name}%")

    def find_exact_symbol(self, name: str) -> list[Symbol]:
        """Symbols whose name equals ``name`` exactly."""
        return self._query("name = ?", name)

    def clear_file_symbols(self, file_uri: str) -> None:
        """Remove every symbol stored for the given file URI."""
        with self._lock, self._connection:
            self._connection.execute(
                "DELETE FROM symbols WHERE file_uri = ?", (file_uri,)
            )

    def close(self) -> None:
        """Close the underlying database connection."""
        with self._lock:
            self._connection.close()

    def __enter__(self) -> SymbolIndex:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()