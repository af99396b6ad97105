"""Tests for source emission of flattened declarations."""

import pytest

from ast_struct import Attribute, BareName, Declaration, GenericParam, Generics, NestedField, PlainField
from nested_emit import emit_attribute, emit_declaration, emit_declarations


def test_emit_attribute_forms():
    assert emit_attribute(Attribute(path="derive", tokens="derive(Debug)")) == "#[derive(Debug)]"
    assert emit_attribute(Attribute(path="allow", tokens="allow(unused)", inner=True)) == "#![allow(unused)]"
    assert emit_attribute(Attribute(path="doc", tokens='doc = " hi"', doc="/// hi")) == "/// hi"


def test_emit_declaration_with_fields():
    decl = Declaration(
        identity=BareName("Pair"),
        attrs=(Attribute(path="derive", tokens="derive(Debug)"),),
        vis="pub",
        generics=Generics(
            params=(GenericParam(kind="type", name="T", text="T"),),
            where_clause="T: Copy",
        ),
        fields=(
            PlainField(name="a", ty="T", vis="pub", attrs=(Attribute(path="doc", tokens='doc = " a"', doc="/// a"),)),
            PlainField(name="b", ty="T"),
        ),
    )
    assert emit_declaration(decl) == (
        "#[derive(Debug)]\n"
        "pub struct Pair<T> where T: Copy {\n"
        "    /// a\n"
        "    pub a: T,\n"
        "    b: T,\n"
        "}"
    )


def test_emit_unit_and_empty():
    assert emit_declaration(Declaration(identity=BareName("U"), vis="pub")) == "pub struct U;"
    assert emit_declaration(Declaration(identity=BareName("E"), fields=())) == "struct E {}"


def test_emit_rejects_nested_fields():
    inner = Declaration(identity=BareName("Q"))
    decl = Declaration(identity=BareName("P"), fields=(NestedField(inner),))
    with pytest.raises(TypeError):
        emit_declaration(decl)


def test_emit_declarations_keeps_order():
    decls = [
        Declaration(identity=BareName("B")),
        Declaration(identity=BareName("A")),
        Declaration(identity=BareName("B")),
    ]
    assert emit_declarations(decls) == "struct B;\n\nstruct A;\n\nstruct B;\n"
    assert emit_declarations([]) == ""
