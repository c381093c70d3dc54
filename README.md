# grenls

Building blocks for Gren language tooling. The package pulls symbols out of
Gren source text and keeps them in a searchable SQLite index. It also manages a
set of open documents and keeps their symbols indexed as the documents change.

It has no dependencies outside the standard library.

## Installation

```
pip install .
```

To install the test dependencies and run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `grenls.symbols`: the data types `SymbolKind`, `Position`, `Range`,
  `Location` and `Symbol`.
- `grenls.extractor`: `SymbolExtractor`, plus the helpers
  `clean_documentation_text`, `clean_type_signature` and
  `extract_documentation_comments`.
- `grenls.index`: `SymbolIndex`, the SQLite-backed store.
- `grenls.documents`: `Document`, `TextChange` and `StaleVersionError`.
- `grenls.workspace`: `Workspace` and `WorkspaceStats`.

## Symbols

`SymbolKind` is an `IntEnum` that uses the language server protocol numbering,
for example `FUNCTION = 12` and `CLASS = 5`. Its `label` property gives the
name that is stored in the index, such as `"Function"` or `"EnumMember"`.
`SymbolKind.from_name` turns a stored name back into a kind. It recognises
`Function`, `Constructor`, `Module`, `Class`, `Variable` and `Field`. Any other
name becomes `VARIABLE`.

`Position` holds a zero-based line and character. Negative values raise
`ValueError`. A `Range` must not end before it starts. `Range.contains` treats
the start as inclusive and the end as exclusive. `Position`, `Range`,
`Location` and `Symbol` each have `to_dict` and `from_dict` methods for
round-tripping through plain dictionaries.

## Extracting symbols

```python
from grenls.extractor import SymbolExtractor

source = """module Utils.Math exposing (add)

{-| Add two numbers -}
add : Int -> Int -> Int
add x y = x + y
"""

symbols = SymbolExtractor().extract_symbols(source, "file:///utils.gren")
for symbol in symbols:
    print(symbol.name, symbol.kind.label, symbol.type_signature, symbol.documentation)
```

The extractor reads top-level declarations, which are those that start in
column zero. It returns functions first, then types, then constructors, then
modules:

- **Functions** (`FUNCTION`): any top-level lower-case name whose declaration
  contains `=`. If a `name : ...` annotation exists, its signature becomes the
  `type_signature`, with whitespace collapsed to single spaces.
- **Types** (`CLASS`): `type` and `type alias` declarations. The
  `type_signature` holds the declaration text with the leading `type ` removed.
- **Constructors** (`CONSTRUCTOR`): the variants of a union type. Each has the
  type's name as its `container_name`.
- **Modules** (`MODULE`): each upper-case segment of the dotted name in a
  `module`, `port module` or `effect module` declaration. For example,
  `Utils.Math` yields `Utils` and `Math`.

A documentation comment `{-| ... -}` is attached to a symbol if the comment
ends one to three lines above the line where the symbol starts. Before it is
attached, each line of the comment is trimmed and empty lines are dropped.
`extract_documentation_comments(source)` returns these cleaned comments as a
dictionary keyed by the zero-based line on which each comment ends.

## Indexing

```python
from grenls.index import SymbolIndex

with SymbolIndex(":memory:") as index:
    for symbol in symbols:
        index.index_symbol(symbol)
    index.find_symbol("ad")          # substring match via SQL LIKE
    index.find_exact_symbol("add")   # exact name match
    index.clear_file_symbols("file:///utils.gren")
```

`find_symbol` uses SQL `LIKE`, so matching is case-insensitive for ASCII
letters. An empty name matches every stored symbol.

When `SymbolIndex` is constructed without a path, it opens
`gren-lsp-symbols.db` in the current directory. The connection can be shared
between threads and is guarded by a lock.

## Documents

`Document` holds a URI, its text, a version and a language id.
`Document.apply_changes(changes, version)` applies `TextChange` edits in order:

- A change without a range replaces the whole text.
- A change with a range replaces that span. Range positions count characters
  in UTF-16 code units, and positions past the end of a line or of the text are
  clamped.

If the given version is older than the document's current version,
`apply_changes` raises `StaleVersionError` and leaves the text unchanged.
`TextChange.from_dict` accepts protocol-style dictionaries of the form
`{"text": ..., "range": {...}}`.

## Workspace

`Workspace` keeps open documents in a least-recently-used cache. It re-indexes
a document's symbols whenever the document is opened, updated or reindexed.

```python
from grenls.documents import TextChange
from grenls.workspace import Workspace

with Workspace(capacity=100, index_path=":memory:") as workspace:
    workspace.open_document("file:///Main.gren", "module Main exposing (..)\n", 1)
    workspace.update_document(
        "file:///Main.gren", 2,
        [TextChange(text="module Main exposing (..)\n\ngreet name = name\n")],
    )
    print(workspace.find_symbols("greet"))
    print(workspace.get_file_symbols("file:///Main.gren"))
    print(workspace.stats())
    workspace.close_document("file:///Main.gren")
```

Behaviour to be aware of:

- `index_path` defaults to the same `gren-lsp-symbols.db` file as
  `SymbolIndex`.
- Opening more documents than `capacity` evicts the least recently used ones.
  `get_document` marks a document as recently used;
  `get_document_readonly` does not.
- `update_document` takes either `TextChange` objects or dictionaries. It
  ignores, with a logged warning, any change older than the document's current
  version and any change to a document that is not open.
- Closing or evicting a document keeps its symbols in the index, so other
  files can still find them. `remove_file` drops both the document and its
  symbols.
- `reindex_all_symbols` extracts and indexes symbols again for every open
  document.
- `set_root` accepts only `file:` URIs and raises `ValueError` for anything
  else.
- `is_project_file` reports whether a `file:` URI names `gren.json` or
  `gren-package.json`.

## What it does not do

This is a library, not a language server. It has no command, does not speak
the language server protocol over stdio, and does not run the Gren compiler.
It therefore produces no diagnostics, hover text, completions or
go-to-definition results.

Symbols are found by scanning the token stream of top-level declarations, not
by a full parse. Syntax errors are not reported, and nested (`let`) definitions
are not indexed.