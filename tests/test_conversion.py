"""Tests for the JSON conversion of declarations."""

import json

from nested import flatten_text
from nested_conversion import (
    block_to_dict,
    declaration_to_dict,
    declarations_from_json_list,
    declarations_to_json_list,
)
from nested_parser import parse_block

TEXT = """
#![derive(Debug)]
pub struct Outer<'a, T: Clone> where T: Default {
    /// doc
    pub(crate) name: &'a str,
    pub struct inner: #[serde(flatten)] Inner<T> { value: T },
    struct Marker
}
"""


def test_flattened_declarations_survive_json():
    decls = flatten_text(TEXT)
    data = json.loads(json.dumps(declarations_to_json_list(decls)))
    assert declarations_from_json_list(data) == decls


def test_declaration_dict_shape():
    decls = flatten_text(TEXT)
    d = declaration_to_dict(decls[0])
    assert d["__type__"] == "Declaration"
    assert d["identity"] == {"__type__": "BareName", "name": "Outer"}
    assert d["generics"]["where_clause"] == "T: Default"
    assert [f["name"] for f in d["fields"]] == ["name", "inner", "marker"]
    assert declaration_to_dict(decls[-1])["fields"] is None


def test_block_dict_keeps_nesting():
    d = block_to_dict(parse_block(TEXT))
    assert d["__type__"] == "Block"
    assert d["global_attrs"][0]["tokens"] == "derive(Debug)"
    nested = d["root"]["fields"][1]
    assert nested["__type__"] == "NestedField"
    assert nested["decl"]["identity"]["__type__"] == "FieldTyped"
    assert nested["decl"]["identity"]["attrs"][0]["tokens"] == "serde(flatten)"
