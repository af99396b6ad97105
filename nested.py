"""Flatten a block holding nested struct declarations into top-level structs."""

from typing import List

from ast_struct import Declaration
from nested_emit import emit_declarations
from nested_flatten import DEFAULT_MAX_DEPTH, flatten_block
from nested_parser import parse_block


def flatten_text(text: str, max_depth: int = DEFAULT_MAX_DEPTH) -> List[Declaration]:
    block = parse_block(text, max_depth=max_depth)
    return flatten_block(block, max_depth=max_depth)


def nested(text: str, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """
    Parse `text`, split every nested struct out of its parent and render the
    result as source text.

    Raises ParseError when the input is not a struct declaration and
    NestingTooDeep when it nests deeper than `max_depth`.
    """
    return emit_declarations(flatten_text(text, max_depth=max_depth))
