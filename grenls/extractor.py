"""Extraction of symbols and documentation from Gren source text."""

from __future__ import annotations

import logging
import re
from bisect import bisect_right
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from grenls.symbols import Location, Position, Range, Symbol, SymbolKind

log = logging.getLogger(__name__)

_TOKEN_RE = re.compile(
    r'''
    (?P<ws>\s+)
  | (?P<comment>--[^\n]*)
  | (?P<string>"""(?:\\[\s\S]|(?!""")[^\\])*(?:"""|\Z)
              | "(?:\\.|[^"\\\n])*"?
              | '(?:\\.|[^'\\\n])*'?)
  | (?P<upper>[A-Z][A-Za-z0-9_]*)
  | (?P<lower>[a-z][A-Za-z0-9_]*)
  | (?P<number>0[xX][0-9A-Fa-f]+|[0-9]+(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?)
  | (?P<op>[-+/*=.<>:&|^?%!]+)
  | (?P<punct>[()\[\]{},])
  | (?P<other>.)
    ''',
    re.VERBOSE,
)

_KEYWORDS = frozenset(
    {
        "module", "import", "type", "alias", "port", "effect", "infix",
        "if", "then", "else", "when", "is", "let", "in", "case", "of",
        "as", "exposing", "where",
    }
)

_OPENERS = frozenset("([{")
_CLOSERS = frozenset(")]}")


@dataclass(frozen=True)
class _Token:
    kind: str
    text: str
    start: int
    end: int

    def is_op(self, text: str) -> bool:
        return self.kind == "op" and self.text == text


class _Lines:
    """Converts character offsets into zero-based line/column positions."""

    def __init__(self, source: str) -> None:
        self._starts = [0] + [m.end() for m in re.finditer("\n", source)]

    def position(self, offset: int) -> Position:
        line = bisect_right(self._starts, offset) - 1
        return Position(line, offset - self._starts[line])

    def range(self, token: _Token) -> Range:
        return Range(self.position(token.start), self.position(token.end))


def _block_comment_end(source: str, start: int) -> int:
    """Offset just past the (possibly nested) block comment opening at ``start``."""
    depth = 0
    i = start
    while i < len(source):
        if source.startswith("{-", i):
            depth += 1
            i += 2
        elif source.startswith("-}", i):
            depth -= 1
            i += 2
            if depth == 0:
                return i
        else:
            i += 1
    return len(source)


def _tokenize(source: str) -> tuple[list[_Token], list[_Token]]:
    """Split source into code tokens and block comments."""
    code: list[_Token] = []
    comments: list[_Token] = []
    i = 0
    while i < len(source):
        if source.startswith("{-", i):
            end = _block_comment_end(source, i)
            comments.append(_Token("block_comment", source[i:end], i, end))
            i = end
            continue
        match = _TOKEN_RE.match(source, i)
        assert match is not None and match.lastgroup is not None
        kind = match.lastgroup
        if kind not in ("ws", "comment"):
            code.append(_Token(kind, match.group(), match.start(), match.end()))
        i = match.end()
    return code, comments


def clean_documentation_text(doc_text: str) -> str:
    """Trim every line, drop empty ones and join the rest with newlines."""
    lines = (line.strip() for line in doc_text.splitlines())
    return "\n".join(line for line in lines if line).strip()


def clean_type_signature(sig: str) -> str:
    """Collapse all runs of whitespace in a type signature to single spaces."""
    return " ".join(sig.split())


def _documentation_from_comments(
    comments: Sequence[_Token], lines: _Lines
) -> dict[int, str]:
    docs: dict[int, str] = {}
    for comment in comments:
        text = comment.text
        if text.startswith("{-|") and text.endswith("-}"):
            cleaned = clean_documentation_text(text[3:-2])
            end_line = lines.position(comment.end).line
            docs[end_line] = cleaned
            log.debug(
                "Found documentation comment ending at line %d: %s",
                end_line,
                cleaned[:50],
            )
    log.debug("Extracted %d documentation comments", len(docs))
    return docs


def extract_documentation_comments(source: str) -> dict[int, str]:
    """Map the line on which each ``{-| ... -}`` comment ends to its cleaned text."""
    _, comments = _tokenize(source)
    return _documentation_from_comments(comments, _Lines(source))


def _documentation_for(line: int, docs: dict[int, str]) -> str | None:
    """A doc comment ending one to three lines above ``line``, if any."""
    for offset in (1, 2, 3):
        doc = docs.get(max(0, line - offset))
        if doc is not None:
            return doc
    return None


def _declarations(tokens: Sequence[_Token], lines: _Lines) -> Iterator[list[_Token]]:
    """Group tokens into top-level declarations, each starting at column zero."""
    current: list[_Token] | None = None
    for token in tokens:
        if lines.position(token.start).character == 0:
            if current:
                yield current
            current = [token]
        elif current is not None:
            current.append(token)
    if current:
        yield current


def _split_top_level(tokens: Sequence[_Token], separator: str) -> list[list[_Token]]:
    """Split tokens on an operator that is not nested in brackets."""
    parts: list[list[_Token]] = [[]]
    depth = 0
    for token in tokens:
        if token.kind == "punct" and token.text in _OPENERS:
            depth += 1
        elif token.kind == "punct" and token.text in _CLOSERS:
            depth = max(0, depth - 1)
        elif depth == 0 and token.is_op(separator):
            parts.append([])
            continue
        parts[-1].append(token)
    return parts


def _strip_type_prefix(text: str) -> str:
    while text.startswith("type "):
        text = text[len("type "):]
    return text.strip()


class SymbolExtractor:
    """Finds top-level functions, types, constructors and modules in Gren source."""

    def extract_symbols(self, source: str, file_uri: str) -> list[Symbol]:
        """Return the symbols defined in ``source``: functions, types, constructors, modules."""
        lines = _Lines(source)
        code, comments = _tokenize(source)
        docs = _documentation_from_comments(comments, lines)

        function_defs: dict[str, Range] = {}
        annotations: dict[str, str] = {}
        types: list[Symbol] = []
        constructors: list[Symbol] = []
        modules: list[Symbol] = []

        def make(
            name: str,
            kind: SymbolKind,
            where: Range,
            container: str | None = None,
            signature: str | None = None,
        ) -> Symbol:
            return Symbol(
                name=name,
                kind=kind,
                location=Location(file_uri, where),
                container_name=container,
                type_signature=signature,
                documentation=_documentation_for(where.start.line, docs),
            )

        for decl in _declarations(code, lines):
            head = decl[0]
            if head.kind != "lower":
                continue
            if head.text == "module" or (
                head.text in ("port", "effect")
                and len(decl) > 1
                and decl[1].kind == "lower"
                and decl[1].text == "module"
            ):
                start = 1 if head.text == "module" else 2
                for segment in self._module_segments(decl, start):
                    modules.append(make(segment.text, SymbolKind.MODULE, lines.range(segment)))
                    log.debug("Found module '%s'", segment.text)
            elif head.text == "type":
                self._collect_type(decl, source, lines, make, types, constructors)
            elif head.text not in _KEYWORDS:
                if len(decl) > 1 and decl[1].is_op(":"):
                    if len(decl) > 2:
                        annotations[head.text] = clean_type_signature(
                            source[decl[2].start:decl[-1].end]
                        )
                elif any(token.is_op("=") for token in decl[1:]):
                    function_defs[head.text] = lines.range(head)

        functions = [
            make(name, SymbolKind.FUNCTION, where, signature=annotations.get(name))
            for name, where in function_defs.items()
        ]
        log.debug(
            "Extracted %d functions, %d types, %d constructors, %d modules",
            len(functions),
            len(types),
            len(constructors),
            len(modules),
        )
        symbols = functions + types + constructors + modules
        log.debug("Extracted %d symbols from %s", len(symbols), file_uri)
        return symbols

    @staticmethod
    def _module_segments(decl: Sequence[_Token], index: int) -> list[_Token]:
        """The upper-case identifiers of the dotted module name starting at ``index``."""
        if index >= len(decl) or decl[index].kind != "upper":
            return []
        segments = [decl[index]]
        index += 1
        while (
            index + 1 < len(decl)
            and decl[index].is_op(".")
            and decl[index].start == segments[-1].end
            and decl[index + 1].kind == "upper"
            and decl[index + 1].start == decl[index].end
        ):
            segments.append(decl[index + 1])
            index += 2
        return segments

    @staticmethod
    def _collect_type(decl, source, lines, make, types, constructors) -> None:
        is_alias = len(decl) > 1 and decl[1].kind == "lower" and decl[1].text == "alias"
        name_index = 2 if is_alias else 1
        if name_index >= len(decl) or decl[name_index].kind != "upper":
            return
        name_token = decl[name_index]
        definition = _strip_type_prefix(source[decl[0].start:decl[-1].end])
        types.append(
            make(name_token.text, SymbolKind.CLASS, lines.range(name_token), signature=definition)
        )
        if is_alias:
            return
        parts = _split_top_level(decl[name_index + 1:], "=")
        if len(parts) < 2:
            return
        body = [token for part in parts[1:] for token in part]
        for variant in _split_top_level(body, "|"):
            if variant and variant[0].kind == "upper":
                constructors.append(
                    make(
                        variant[0].text,
                        SymbolKind.CONSTRUCTOR,
                        lines.range(variant[0]),
                        container=name_token.text,
                    )
                )
                log.debug("Found constructor '%s' for type '%s'", variant[0].text, name_token.text)