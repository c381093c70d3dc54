"""A workspace of open Gren documents backed by a persistent symbol index."""

from __future__ import annotations

import logging
import sqlite3
from collections import OrderedDict
from collections.abc import Iterable
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import Any
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

from grenls.documents import Document, TextChange
from grenls.extractor import SymbolExtractor
from grenls.index import DEFAULT_DB_PATH, SymbolIndex
from grenls.symbols import Symbol

log = logging.getLogger(__name__)

DEFAULT_CACHE_SIZE = 100

PROJECT_FILES = frozenset({"gren.json", "gren-package.json"})


def uri_to_path(uri: str) -> Path:
    """Convert a ``file:`` URI to a filesystem path; raise ValueError otherwise."""
    parsed = urlparse(uri)
    if parsed.scheme != "file" or parsed.netloc not in ("", "localhost"):
        raise ValueError(f"failed to convert URI to path: {uri}")
    if not parsed.path:
        raise ValueError(f"failed to convert URI to path: {uri}")
    return Path(url2pathname(unquote(parsed.path)))


@dataclass(frozen=True)
class WorkspaceStats:
    """A snapshot of the workspace's document cache."""

    document_count: int
    cache_capacity: int
    root_uri: str | None
    open_documents: list[str] = field(default_factory=list)


def _as_change(change: TextChange | dict[str, Any]) -> TextChange:
    return change if isinstance(change, TextChange) else TextChange.from_dict(change)


class Workspace:
    """Holds open documents in a least-recently-used cache and indexes their symbols.

    Symbols stay in the index when a document is closed or evicted so that
    lookups across files keep working; only ``remove_file`` drops them.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CACHE_SIZE,
        index_path: str | PathLike[str] = DEFAULT_DB_PATH,
    ) -> None:
        self._capacity = max(1, capacity)
        self._documents: OrderedDict[str, Document] = OrderedDict()
        self._root_uri: str | None = None
        self._index = SymbolIndex(index_path)
        self._extractor = SymbolExtractor()

    def close(self) -> None:
        """Close the symbol index."""
        self._index.close()

    def __enter__(self) -> Workspace:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    @property
    def root_uri(self) -> str | None:
        return self._root_uri

    def set_root(self, root_uri: str) -> None:
        """Set the workspace root; raise ValueError if it is not a file URI."""
        log.info("Setting workspace root: %s", root_uri)
        try:
            uri_to_path(root_uri)
        except ValueError:
            message = f"invalid workspace root URI: {root_uri}"
            log.warning(message)
            raise ValueError(message) from None
        self._root_uri = root_uri

    def open_document(self, uri: str, text: str, version: int = 0) -> None:
        """Open a document, index its symbols and evict old documents if needed."""
        log.info("Opening document: %s", uri)
        self._documents[uri] = Document(uri=uri, text=text, version=version)
        self._reindex(uri)
        self._documents.move_to_end(uri)
        self._evict_if_needed()

    def update_document(
        self,
        uri: str,
        version: int,
        changes: Iterable[TextChange | dict[str, Any]],
    ) -> None:
        """Apply edits to an open document and re-index it.

        Edits with an older version than the document's, and edits to
        documents that are not open, are ignored with a warning.
        """
        document = self._documents.get(uri)
        if document is None:
            log.warning("Attempted to update non-existent document: %s", uri)
            return
        if version < document.version:
            log.warning(
                "Received older version for document %s: %d < %d",
                uri,
                version,
                document.version,
            )
            return
        document.apply_changes([_as_change(c) for c in changes], version)
        self._documents.move_to_end(uri)
        log.info("Updated document: %s (version %d)", uri, document.version)
        self._reindex(uri)

    def close_document(self, uri: str) -> None:
        """Drop a document from memory, keeping its symbols indexed."""
        log.info("Closing document: %s", uri)
        self._documents.pop(uri, None)

    def remove_file(self, uri: str) -> None:
        """Forget a file entirely: its document and its indexed symbols."""
        log.info("Removing file completely: %s", uri)
        try:
            self._index.clear_file_symbols(uri)
        except sqlite3.Error as error:
            log.warning("Failed to clear symbols for %s: %s", uri, error)
        self._documents.pop(uri, None)

    def get_document(self, uri: str) -> Document | None:
        """Return an open document and mark it as recently used."""
        document = self._documents.get(uri)
        if document is not None:
            self._documents.move_to_end(uri)
        return document

    def get_document_readonly(self, uri: str) -> Document | None:
        """Return an open document without touching its recency."""
        return self._documents.get(uri)

    def _evict_if_needed(self) -> None:
        while len(self._documents) > self._capacity:
            evicted, _ = self._documents.popitem(last=False)
            log.info("Evicting document from cache: %s", evicted)

    def stats(self) -> WorkspaceStats:
        return WorkspaceStats(
            document_count=len(self._documents),
            cache_capacity=self._capacity,
            root_uri=self._root_uri,
            open_documents=list(self._documents),
        )

    def open_documents(self) -> list[str]:
        """URIs of all open documents, least recently used first."""
        return list(self._documents)

    def is_document_open(self, uri: str) -> bool:
        return uri in self._documents

    def _reindex(self, uri: str) -> None:
        try:
            self._index.clear_file_symbols(uri)
        except sqlite3.Error as error:
            log.warning("Failed to clear symbols for %s: %s", uri, error)
        document = self._documents.get(uri)
        if document is None:
            log.warning("Document not found for symbol extraction: %s", uri)
            return
        symbols = self._extractor.extract_symbols(document.text, uri)
        log.info("Extracted %d symbols from %s", len(symbols), uri)
        for symbol in symbols:
            try:
                self._index.index_symbol(symbol)
            except sqlite3.Error as error:
                log.warning(
                    "Failed to index symbol '%s' from %s: %s", symbol.name, uri, error
                )

    def find_symbols(self, name: str) -> list[Symbol]:
        """Symbols whose name contains ``name``; an empty name matches everything."""
        try:
            return self._index.find_symbol(name)
        except sqlite3.Error as error:
            log.warning("Failed to search symbols for '%s': %s", name, error)
            return []

    def find_exact_symbols(self, name: str) -> list[Symbol]:
        """Symbols whose name is exactly ``name``."""
        try:
            return self._index.find_exact_symbol(name)
        except sqlite3.Error as error:
            log.warning("Failed to search exact symbols for '%s': %s", name, error)
            return []

    def get_file_symbols(self, uri: str) -> list[Symbol]:
        """All indexed symbols defined in the given file."""
        return [s for s in self.find_symbols("") if s.location.uri == uri]

    def reindex_all_symbols(self) -> None:
        """Extract and index symbols again for every open document."""
        log.info("Re-indexing symbols for all open documents")
        for uri in list(self._documents):
            self._reindex(uri)

    def is_project_file(self, uri: str) -> bool:
        """Whether the URI names a Gren project configuration file."""
        try:
            return uri_to_path(uri).name in PROJECT_FILES
        except ValueError:
            return False

    def get_open_document_uris(self) -> list[str]:
        return list(self._documents)