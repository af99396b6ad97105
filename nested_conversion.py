# JSON conversion for nested struct AST structures

from __future__ import annotations

from typing import Any, List

from ast_struct import (
    Attribute,
    BareName,
    Block,
    Declaration,
    FieldTyped,
    GenericParam,
    Generics,
    NestedField,
    PlainField,
)


def _attribute_to_dict(a: Attribute) -> dict:
    return {
        "__type__": "Attribute",
        "path": a.path,
        "tokens": a.tokens,
        "inner": a.inner,
        "doc": a.doc,
    }


def _attribute_from_dict(d: dict) -> Attribute:
    return Attribute(
        path=d["path"],
        tokens=d["tokens"],
        inner=d.get("inner", False),
        doc=d.get("doc"),
    )


def _generics_to_dict(g: Generics) -> dict:
    return {
        "__type__": "Generics",
        "params": [
            {"kind": p.kind, "name": p.name, "text": p.text}
            for p in g.params
        ],
        "where_clause": g.where_clause,
    }


def _generics_from_dict(d: dict) -> Generics:
    return Generics(
        params=tuple(
            GenericParam(kind=p["kind"], name=p["name"], text=p["text"])
            for p in d.get("params", [])
        ),
        where_clause=d.get("where_clause"),
    )


def _identity_to_dict(ident: Any) -> dict:
    if isinstance(ident, FieldTyped):
        return {
            "__type__": "FieldTyped",
            "field": ident.field,
            "type_name": ident.type_name,
            "attrs": [_attribute_to_dict(a) for a in ident.attrs],
        }
    return {"__type__": "BareName", "name": ident.name}


def _identity_from_dict(d: dict) -> Any:
    if d.get("__type__") == "FieldTyped":
        return FieldTyped(
            field=d["field"],
            type_name=d["type_name"],
            attrs=tuple(_attribute_from_dict(a) for a in d.get("attrs", [])),
        )
    return BareName(d["name"])


def _field_to_dict(f: Any) -> dict:
    if isinstance(f, NestedField):
        return {"__type__": "NestedField", "decl": declaration_to_dict(f.decl)}
    return {
        "__type__": "PlainField",
        "name": f.name,
        "ty": f.ty,
        "vis": f.vis,
        "attrs": [_attribute_to_dict(a) for a in f.attrs],
    }


def _field_from_dict(d: dict) -> Any:
    if d.get("__type__") == "NestedField":
        return NestedField(declaration_from_dict(d["decl"]))
    return PlainField(
        name=d["name"],
        ty=d["ty"],
        vis=d.get("vis", ""),
        attrs=tuple(_attribute_from_dict(a) for a in d.get("attrs", [])),
    )


def declaration_to_dict(decl: Declaration) -> dict:
    return {
        "__type__": "Declaration",
        "identity": _identity_to_dict(decl.identity),
        "attrs": [_attribute_to_dict(a) for a in decl.attrs],
        "vis": decl.vis,
        "generics": _generics_to_dict(decl.generics),
        # None marks a unit struct, [] an empty braced one
        "fields": None if decl.fields is None else [_field_to_dict(f) for f in decl.fields],
    }


def declaration_from_dict(d: dict) -> Declaration:
    if not isinstance(d, dict):
        raise ValueError("declaration_from_dict expects a dict")

    fields = d.get("fields")
    return Declaration(
        identity=_identity_from_dict(d["identity"]),
        attrs=tuple(_attribute_from_dict(a) for a in d.get("attrs", [])),
        vis=d.get("vis", ""),
        generics=_generics_from_dict(d.get("generics", {})),
        fields=None if fields is None else tuple(_field_from_dict(f) for f in fields),
    )


def block_to_dict(block: Block) -> dict:
    """Parsed, not yet flattened input, for inspecting what the parser saw."""
    return {
        "__type__": "Block",
        "global_attrs": [_attribute_to_dict(a) for a in block.global_attrs],
        "root": declaration_to_dict(block.root),
    }


def declarations_to_json_list(decls: List[Declaration]) -> List[dict]:
    return [declaration_to_dict(d) for d in decls]


def declarations_from_json_list(data: Any) -> List[Declaration]:
    """
    Convert a JSON list (previously produced by declarations_to_json_list)
    back into declarations.
    """
    if not isinstance(data, list):
        raise ValueError("declarations_from_json_list expects a list")
    return [declaration_from_dict(d) for d in data]
