import pytest

from grenls.extractor import (
    SymbolExtractor,
    clean_documentation_text,
    clean_type_signature,
    extract_documentation_comments,
)
from grenls.symbols import Position, Range, SymbolKind

COMPREHENSIVE = '''
module Utils.Math exposing (add, multiply, Point, Shape(..))

{-| A point in 2D space -}
type alias Point = 
    { x : Float
    , y : Float
    }

{-| Different shapes -}
type Shape 
    = Circle Float Point
    | Rectangle Float Float Point
    | Triangle Point Point Point

{-| Add two numbers -}
add : Int -> Int -> Int
add x y = x + y

{-| Multiply two numbers -}
multiply : Float -> Float -> Float  
multiply a b = a * b

{-| Calculate distance -}
distance : Point -> Point -> Float
distance p1 p2 = 
    let
        dx = p1.x - p2.x
        dy = p1.y - p2.y
    in
    sqrt (dx * dx + dy * dy)

{-| No type annotation function -}
simple x = x + 1
'''

BASIC = '''
module Main exposing (..)

type alias User = 
    { name : String
    , age : Int
    }

type Status = Active | Inactive

length : String -> Int
length str = String.length str

main : Program () Model Msg
main = Browser.sandbox { init = init, update = update, view = view }
'''


def _extract(source, uri="file:///test.gren"):
    return SymbolExtractor().extract_symbols(source, uri)


def _of_kind(symbols, kind):
    return [s for s in symbols if s.kind == kind]


def _named(symbols, name):
    return next(s for s in symbols if s.name == name)


def test_symbol_extraction_comprehensive():
    symbols = _extract(COMPREHENSIVE, "file:///utils.gren")
    functions = _of_kind(symbols, SymbolKind.FUNCTION)
    types = _of_kind(symbols, SymbolKind.CLASS)
    constructors = _of_kind(symbols, SymbolKind.CONSTRUCTOR)
    modules = _of_kind(symbols, SymbolKind.MODULE)

    assert len(functions) == 4
    assert _named(functions, "add").type_signature == "Int -> Int -> Int"
    assert _named(functions, "multiply").type_signature == "Float -> Float -> Float"
    assert _named(functions, "distance").type_signature == "Point -> Point -> Float"
    assert _named(functions, "simple").type_signature is None

    assert {t.name for t in types} == {"Point", "Shape"}
    assert {c.name for c in constructors} == {"Circle", "Rectangle", "Triangle"}
    assert any(m.name == "Utils" for m in modules)


def test_symbol_extraction_basic():
    symbols = _extract(BASIC)
    names = [s.name for s in symbols]
    for expected in ("Main", "User", "Status", "Active", "Inactive", "length", "main"):
        assert expected in names
    assert _named(symbols, "length").type_signature == "String -> Int"
    assert _named(symbols, "main").type_signature == "Program () Model Msg"


def test_sum_type_extraction_with_signature():
    source = '''
module TestMsg exposing (Msg)

type Msg = ActiveMotion String | KeyDown Int | MoveDown | MoveLeft
'''
    symbols = _extract(source)
    msg = next(s for s in symbols if s.name == "Msg" and s.kind == SymbolKind.CLASS)
    assert msg.type_signature == "Msg = ActiveMotion String | KeyDown Int | MoveDown | MoveLeft"
    assert not msg.type_signature.startswith("type ")
    assert "ActiveMotion String" in msg.type_signature
    assert "KeyDown Int" in msg.type_signature
    assert "MoveDown" in msg.type_signature


def test_documentation_attached_to_symbols():
    symbols = _extract(COMPREHENSIVE)
    assert _named(symbols, "Point").documentation == "A point in 2D space"
    assert _named(symbols, "Shape").documentation == "Different shapes"
    assert _named(symbols, "add").documentation == "Add two numbers"
    assert _named(symbols, "simple").documentation == "No type annotation function"
    assert _named(symbols, "Utils").documentation is None


def test_constructor_container_and_kind():
    symbols = _extract("type Endianness = LE | BE")
    constructors = _of_kind(symbols, SymbolKind.CONSTRUCTOR)
    assert [c.name for c in constructors] == ["LE", "BE"]
    assert all(c.container_name == "Endianness" for c in constructors)
    assert all(c.type_signature is None for c in constructors)
    assert [t.name for t in _of_kind(symbols, SymbolKind.CLASS)] == ["Endianness"]


def test_type_alias_signature_keeps_layout():
    source = "type alias Config = { size : Int }\n"
    config = _named(_extract(source), "Config")
    assert config.kind == SymbolKind.CLASS
    assert config.type_signature == "alias Config = { size : Int }"


def test_extensible_record_bar_does_not_split_variants():
    source = "type Wrap a = Wrap { a | x : Int } | Empty\n"
    constructors = _of_kind(_extract(source), SymbolKind.CONSTRUCTOR)
    assert [c.name for c in constructors] == ["Wrap", "Empty"]


def test_dotted_module_name_gives_each_segment():
    symbols = _extract("module Utils.Math exposing (..)\n")
    assert [m.name for m in _of_kind(symbols, SymbolKind.MODULE)] == ["Utils", "Math"]


def test_function_name_range_and_uri():
    symbols = _extract("module Main exposing (..)\n\nadd x y = x + y\n", "file:///a.gren")
    add = _named(symbols, "add")
    assert add.location.uri == "file:///a.gren"
    assert add.location.range == Range(Position(2, 0), Position(2, 3))


def test_module_range():
    symbols = _extract("module Bytes exposing (..)\n")
    module = _named(symbols, "Bytes")
    assert module.location.range == Range(Position(0, 7), Position(0, 12))


def test_output_order_is_functions_types_constructors_modules():
    source = "module M exposing (..)\n\ntype T = A\n\nf = 1\n"
    kinds = [s.kind for s in _extract(source)]
    assert kinds == [
        SymbolKind.FUNCTION,
        SymbolKind.CLASS,
        SymbolKind.CONSTRUCTOR,
        SymbolKind.MODULE,
    ]


def test_let_bindings_and_annotations_without_definitions_are_skipped():
    source = "orphan : Int\n\nouter =\n    let\n        inner = 1\n    in\n    inner\n"
    functions = _of_kind(_extract(source), SymbolKind.FUNCTION)
    assert [f.name for f in functions] == ["outer"]


def test_strings_and_comments_hide_declarations():
    source = (
        'greeting = "type Fake = A | B"\n'
        "{- type Hidden = H -}\n"
        "-- type AlsoHidden = X\n"
        'text =\n    """\ntype Inside = Y\n"""\n'
    )
    names = {s.name for s in _extract(source)}
    assert names == {"greeting", "text"}


def test_imports_are_not_symbols():
    source = "module A exposing (..)\n\nimport Maybe exposing (Maybe, hasValue)\n"
    assert [s.name for s in _extract(source)] == ["A"]


def test_doc_too_far_above_is_not_attached():
    source = "{-| Far away -}\n\n\n\nfoo = 1\n"
    assert _named(_extract(source), "foo").documentation is None


def test_extract_documentation_comments_multiline():
    source = (
        "module Maybe exposing (..)\n"
        "\n"
        "{-| Check if a Maybe value contains a value.\n"
        "\n"
        "This function returns True if the Maybe is `Just something`,\n"
        "and False if it's `Nothing`.\n"
        "\n"
        "    hasValue (Just 42) == True\n"
        "-}\n"
        "hasValue : Maybe a -> Bool\n"
    )
    docs = extract_documentation_comments(source)
    assert docs == {
        8: "Check if a Maybe value contains a value.\n"
        "This function returns True if the Maybe is `Just something`,\n"
        "and False if it's `Nothing`.\n"
        "hasValue (Just 42) == True"
    }


def test_extract_documentation_comments_ignores_plain_comments():
    source = "{- plain -}\n{- outer {- inner -} rest -}\n{-| doc {- nested -} end -}\n"
    assert extract_documentation_comments(source) == {2: "doc {- nested -} end"}


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("  a  \n\n  b \n", "a\nb"),
        (" single ", "single"),
        ("\n\n", ""),
    ],
)
def test_clean_documentation_text(raw, expected):
    assert clean_documentation_text(raw) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Int\n    -> Int", "Int -> Int"),
        ("  Float ->   Float  ", "Float -> Float"),
        ("a", "a"),
    ],
)
def test_clean_type_signature(raw, expected):
    assert clean_type_signature(raw) == expected