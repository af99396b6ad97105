# Source emission for flattened struct declarations

from typing import Iterable, List

from ast_struct import Attribute, Declaration, FieldEntry, PlainField

INDENT = "    "


def emit_attribute(attr: Attribute) -> str:
    if attr.doc is not None:
        return attr.doc
    if attr.inner:
        return f"#![{attr.tokens}]"
    return f"#[{attr.tokens}]"


def _with_vis(vis: str, text: str) -> str:
    return f"{vis} {text}" if vis else text


def emit_field(entry: FieldEntry, indent: str = INDENT) -> List[str]:
    if not isinstance(entry, PlainField):
        raise TypeError(
            f"Cannot emit nested declaration {entry.decl.name!r} as a field; flatten it first"
        )
    lines = [indent + emit_attribute(a) for a in entry.attrs]
    lines.append(indent + _with_vis(entry.vis, f"{entry.name}: {entry.ty},"))
    return lines


def emit_declaration(decl: Declaration) -> str:
    """
    Render one declaration:

      #[derive(Debug)]
      pub struct Pair<T> where T: Copy {
          pub a: T,
          pub b: T,
      }
    """
    lines = [emit_attribute(a) for a in decl.attrs]

    header = _with_vis(decl.vis, f"struct {decl.name}{decl.generics.declaration_form()}")
    if decl.generics.where_clause:
        header += f" where {decl.generics.where_clause}"

    if decl.fields is None:
        lines.append(header + ";")
    elif not decl.fields:
        lines.append(header + " {}")
    else:
        lines.append(header + " {")
        for entry in decl.fields:
            lines.extend(emit_field(entry))
        lines.append("}")

    return "\n".join(lines)


def emit_declarations(decls: Iterable[Declaration]) -> str:
    """Declarations in the given order, separated by a blank line."""
    rendered = [emit_declaration(d) for d in decls]
    if not rendered:
        return ""
    return "\n\n".join(rendered) + "\n"
