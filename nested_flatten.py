# Flattening of nested struct declarations into top-level declarations

from __future__ import annotations

import logging
from typing import Iterable, List, Tuple

from ast_struct import Attribute, BareName, Block, Declaration, FieldEntry, NestedField, PlainField
from nested_case import to_snake_case

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 64


class NestingTooDeep(Exception):
    def __init__(self, depth: int, limit: int):
        super().__init__(f"Nesting depth {depth} exceeds the limit of {limit}")
        self.depth = depth
        self.limit = limit


def synthesize_field(child: Declaration) -> PlainField:
    """
    Build the field that replaces a nested declaration in its parent.

      pub struct UserProfile<T> { ... }   ->  pub user_profile: UserProfile::<T>
      pub struct d: /// x
      D { ... }                           ->  /// x
                                              pub d: D

    With a bare name only the doc attributes of the declaration are repeated
    on the field. With the `field: Type` form the attributes written after the
    colon go to the field and the declaration keeps its own.
    """
    ident = child.identity
    ty = child.name + child.generics.turbofish()

    if isinstance(ident, BareName):
        return PlainField(
            name=to_snake_case(ident.name),
            ty=ty,
            vis=child.vis,
            attrs=tuple(a for a in child.attrs if a.is_doc),
        )

    return PlainField(
        name=ident.field,
        ty=ty,
        vis=child.vis,
        attrs=ident.attrs,
    )


def flatten(
    root: Declaration,
    global_attrs: Iterable[Attribute] = (),
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> List[Declaration]:
    """
    Split `root` and every declaration nested in its fields into a list of
    top-level declarations.

    A declaration is emitted before the declarations extracted from it; those
    follow in field order, each one fully flattened before the next.
    `global_attrs` are put in front of the attributes of every declaration.
    """
    if max_depth < 1:
        raise ValueError(f"max_depth must be at least 1, got {max_depth}")

    out: List[Declaration] = []
    _flatten_into(root, tuple(global_attrs), 1, max_depth, out)
    logger.debug("Flattened %s into %d declarations", root.name, len(out))
    return out


def flatten_block(block: Block, max_depth: int = DEFAULT_MAX_DEPTH) -> List[Declaration]:
    return flatten(block.root, block.global_attrs, max_depth=max_depth)


def _flatten_into(
    decl: Declaration,
    global_attrs: Tuple[Attribute, ...],
    depth: int,
    max_depth: int,
    out: List[Declaration],
) -> None:
    if depth > max_depth:
        raise NestingTooDeep(depth, max_depth)

    header = dict(
        identity=BareName(decl.name),
        attrs=global_attrs + decl.attrs,
        vis=decl.vis,
        generics=decl.generics,
    )

    if decl.fields is None:
        logger.debug("Emitting unit struct %s (depth %d)", decl.name, depth)
        out.append(Declaration(fields=None, **header))
        return

    entries: List[FieldEntry] = []
    pending: List[Declaration] = []

    for entry in decl.fields:
        if isinstance(entry, NestedField):
            entries.append(synthesize_field(entry.decl))
            pending.append(entry.decl)
        else:
            entries.append(entry)

    logger.debug(
        "Emitting struct %s (depth %d, %d fields, %d nested)",
        decl.name, depth, len(entries), len(pending),
    )
    out.append(Declaration(fields=tuple(entries), **header))

    for child in pending:
        _flatten_into(child, global_attrs, depth + 1, max_depth, out)
