"""End-to-end tests of the nested() entry point."""

import pytest

from nested import nested
from nested_flatten import NestingTooDeep
from nested_parser import ParseError

FIXTURE = """
#![derive(Debug)]
//! Part of nested struct.
/// nested test struct
pub struct Nested {
    /// mem a
    pub a: i32,
    /// struct mem b/B
    pub struct B{
        /// mem b1
        pub b1: i32,
        ///mem b3
        pub b3: char,
    },

    /// mem c
    pub c: usize,

    /// struct mem d
    pub struct d:
    /// mem struct D
    D {
        /// Nested struct E
        pub struct E {
            /// mem mt
            pub mt: ()
        },
        /// Unit.
        pub struct F
    }
}
"""

EXPECTED = """#[derive(Debug)]
/// Part of nested struct.
/// nested test struct
pub struct Nested {
    /// mem a
    pub a: i32,
    /// struct mem b/B
    pub b: B,
    /// mem c
    pub c: usize,
    /// mem struct D
    pub d: D,
}

#[derive(Debug)]
/// Part of nested struct.
/// struct mem b/B
pub struct B {
    /// mem b1
    pub b1: i32,
    ///mem b3
    pub b3: char,
}

#[derive(Debug)]
/// Part of nested struct.
/// struct mem d
pub struct D {
    /// Nested struct E
    pub e: E,
    /// Unit.
    pub f: F,
}

#[derive(Debug)]
/// Part of nested struct.
/// Nested struct E
pub struct E {
    /// mem mt
    pub mt: (),
}

#[derive(Debug)]
/// Part of nested struct.
/// Unit.
pub struct F;
"""


def test_fixture():
    assert nested(FIXTURE) == EXPECTED


def test_simple_example():
    assert nested("struct P { a: i32, struct Q { b: i32 } }") == (
        "struct P {\n"
        "    a: i32,\n"
        "    q: Q,\n"
        "}\n"
        "\n"
        "struct Q {\n"
        "    b: i32,\n"
        "}\n"
    )


def test_generics_and_where_clause():
    assert nested("struct W<T> where T: Copy { struct U<'a> { x: &'a u8 } }") == (
        "struct W<T> where T: Copy {\n"
        "    u: U::<'a>,\n"
        "}\n"
        "\n"
        "struct U<'a> {\n"
        "    x: &'a u8,\n"
        "}\n"
    )


def test_output_parses_again_without_nesting():
    once = nested(FIXTURE)
    first = once.split("\n\n")[0]
    assert nested(first) == first + "\n"


def test_errors_propagate():
    with pytest.raises(ParseError):
        nested("struct P { struct Q { b: i32 }")
    with pytest.raises(NestingTooDeep):
        nested("struct A { struct B { struct C; } }", max_depth=2)


def test_keyword_field_names_stay_raw():
    assert nested("struct P { struct r#Type { x: u8 }, struct Match; }") == (
        "struct P {\n"
        "    r#type: r#Type,\n"
        "    r#match: Match,\n"
        "}\n"
        "\n"
        "struct r#Type {\n"
        "    x: u8,\n"
        "}\n"
        "\n"
        "struct Match;\n"
    )


def test_unicode_identifiers():
    assert nested("struct Maße { struct ÜberGröße { wert: u8 } }") == (
        "struct Maße {\n"
        "    über_größe: ÜberGröße,\n"
        "}\n"
        "\n"
        "struct ÜberGröße {\n"
        "    wert: u8,\n"
        "}\n"
    )
