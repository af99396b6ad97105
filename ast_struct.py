# AST structures for nested struct declarations

from dataclasses import dataclass, field, replace
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class Attribute:
    path: str                  # "derive", "doc", "serde", ...
    tokens: str                # canonical text inside #[...], e.g. "derive(Debug)"
    inner: bool = False        # #![...] / //! style
    doc: Optional[str] = None  # comment text as written for ///, //!, /** */ and /*! */

    @property
    def is_doc(self) -> bool:
        return self.path == "doc"

    def to_outer(self) -> "Attribute":
        """Turn a block-level attribute into one that can sit on a declaration."""
        if not self.inner:
            return self
        doc = self.doc
        if doc is not None:
            doc = ("/**" if doc.startswith("/*") else "///") + doc[3:]
        return replace(self, inner=False, doc=doc)


@dataclass(frozen=True)
class GenericParam:
    kind: str   # "lifetime", "type" or "const"
    name: str   # "'a", "T", "N"
    text: str   # full declaration, e.g. "T: Clone = u8"


@dataclass(frozen=True)
class Generics:
    params: Tuple[GenericParam, ...] = ()
    where_clause: Optional[str] = None  # predicates after `where`, without the keyword

    def declaration_form(self) -> str:
        """
        Parameters as written on the declaration:
          <'a, T: Clone, const N: usize>
        """
        if not self.params:
            return ""
        return "<" + ", ".join(p.text for p in self.params) + ">"

    def turbofish(self) -> str:
        """
        Explicit instantiation used where the type is referenced:
          ::<'a, T, N>
        """
        if not self.params:
            return ""
        return "::<" + ", ".join(p.name for p in self.params) + ">"


@dataclass(frozen=True)
class BareName:
    name: str


@dataclass(frozen=True)
class FieldTyped:
    """
    Identity written as `field: TypeName`, e.g.

      pub struct d:
      /// docs for the field
      D { ... }

    `attrs` are the attributes between the colon and the type name.
    """
    field: str
    type_name: str
    attrs: Tuple[Attribute, ...] = ()


Identity = Union[BareName, FieldTyped]


@dataclass(frozen=True)
class PlainField:
    name: str
    ty: str
    vis: str = ""  # "", "pub", "pub(crate)", ...
    attrs: Tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class NestedField:
    decl: "Declaration"


FieldEntry = Union[PlainField, NestedField]


@dataclass(frozen=True)
class Declaration:
    identity: Identity
    attrs: Tuple[Attribute, ...] = ()
    vis: str = ""
    generics: Generics = field(default_factory=Generics)
    fields: Optional[Tuple[FieldEntry, ...]] = None  # None for a unit struct

    @property
    def name(self) -> str:
        if isinstance(self.identity, FieldTyped):
            return self.identity.type_name
        return self.identity.name

    @property
    def is_unit(self) -> bool:
        return self.fields is None


@dataclass(frozen=True)
class Block:
    root: Declaration
    global_attrs: Tuple[Attribute, ...] = ()
