# Identifier case conversion for synthesized field names

import re
from typing import List

_SEPARATOR_RE = re.compile(r"[_\-\s]+")

# strict and reserved keywords that need the r# prefix to be used as a field name;
# self, Self, super and crate cannot be raw identifiers
_KEYWORDS = frozenset("""
    as async await break const continue dyn else enum extern false fn for gen
    if impl in let loop match mod move mut pub ref return static struct trait
    true try type unsafe use where while
    abstract become box do final macro override priv typeof unsized virtual yield
""".split())


def _is_boundary(prev: str, cur: str, nxt: str) -> bool:
    if prev.isdigit() != cur.isdigit():
        return True
    if prev.islower() and cur.isupper():
        return True
    # last capital of an acronym starts the next word: HTTPServer
    return prev.isupper() and cur.isupper() and nxt.islower()


def split_words(ident: str) -> List[str]:
    """
    Split an identifier on separators, case changes and digit boundaries.

      UserProfile -> ["User", "Profile"]
      HTTPServer  -> ["HTTP", "Server"]
      Vec3D       -> ["Vec", "3", "D"]
      ÜberGröße   -> ["Über", "Größe"]
    """
    if ident.startswith("r#"):
        ident = ident[2:]
    words: List[str] = []
    for chunk in _SEPARATOR_RE.split(ident):
        start = 0
        for k in range(1, len(chunk)):
            nxt = chunk[k + 1] if k + 1 < len(chunk) else ""
            if _is_boundary(chunk[k - 1], chunk[k], nxt):
                words.append(chunk[start:k])
                start = k
        if chunk:
            words.append(chunk[start:])
    return words


def to_snake_case(ident: str) -> str:
    """Field name for a type name; keywords come back as raw identifiers (`Type` -> `r#type`)."""
    words = split_words(ident)
    if not words:
        return ident.lower()
    name = "_".join(w.lower() for w in words)
    if name in _KEYWORDS:
        return "r#" + name
    return name
