# Nested struct parser implementation

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional, Tuple

from ast_struct import (
    Attribute,
    BareName,
    Block,
    Declaration,
    FieldEntry,
    FieldTyped,
    GenericParam,
    Generics,
    Identity,
    NestedField,
    PlainField,
)
from nested_flatten import DEFAULT_MAX_DEPTH, NestingTooDeep

# -----------------------------
# Tokenization

class TokType(Enum):
    IDENT     = auto()
    LIFETIME  = auto()   # 'a
    LITERAL   = auto()   # "str", 'c', 42, r#"raw"#
    PUNCT     = auto()   # = + & * ? . -> => ...
    LBRACE    = auto()   # {
    RBRACE    = auto()   # }
    LBRACK    = auto()   # [
    RBRACK    = auto()   # ]
    LPAREN    = auto()   # (
    RPAREN    = auto()   # )
    LT        = auto()   # <
    GT        = auto()   # >
    COLON     = auto()   # :
    PATHSEP   = auto()   # ::
    COMMA     = auto()   # ,
    SEMI      = auto()   # ;
    POUND     = auto()   # #
    BANG      = auto()   # !
    DOC       = auto()   # /// or /** */
    INNER_DOC = auto()   # //! or /*! */
    EOF       = auto()


@dataclass
class Token:
    type: TokType
    value: str
    line: int
    col: int


class ParseError(SyntaxError):
    """Input does not match the declaration grammar."""

    def __init__(self, message: str, line: int, col: int, expected: Optional[str] = None):
        super().__init__(message)
        self.line = line
        self.col = col
        self.expected = expected
        # read by hosts that render SyntaxError diagnostics
        self.lineno = line
        self.offset = col

    def __str__(self) -> str:
        return f"{self.msg} at line {self.line}, col {self.col}"


_SINGLE_CHAR = {
    "{": TokType.LBRACE,
    "}": TokType.RBRACE,
    "[": TokType.LBRACK,
    "]": TokType.RBRACK,
    "(": TokType.LPAREN,
    ")": TokType.RPAREN,
    "<": TokType.LT,
    ">": TokType.GT,
    ":": TokType.COLON,
    ",": TokType.COMMA,
    ";": TokType.SEMI,
    "#": TokType.POUND,
    "!": TokType.BANG,
}

_MULTI_CHAR = {
    "::": TokType.PATHSEP,
    "->": TokType.PUNCT,
    "=>": TokType.PUNCT,
}

_IDENT_RE = re.compile(r"(?:r#)?[^\W\d]\w*")
_NUMBER_RE = re.compile(r"[0-9][A-Za-z0-9_]*(?:\.[0-9][A-Za-z0-9_]*)?")
_STRING_RE = re.compile(r'b?"(?:[^"\\]|\\.)*"', re.DOTALL)
_RAW_STRING_START_RE = re.compile(r'b?r(#*)"')
_CHAR_RE = re.compile(r"b?'(?:\\(?:u\{[0-9A-Fa-f]{1,6}\}|x[0-9A-Fa-f]{2}|.)|[^'\\\n])'")
_LIFETIME_RE = re.compile(r"'[^\W\d]\w*")


def tokenize(text: str) -> List[Token]:
    """
    Tokenizer for struct declarations.

    Ordinary comments are dropped; doc comments are kept as DOC / INNER_DOC
    tokens holding the full comment text, so the parser can treat them like
    any other attribute:

        /// docs          -> DOC       "/// docs"
        //! crate docs    -> INNER_DOC "//! crate docs"
    """
    tokens: List[Token] = []
    i = 0
    line = 1
    col = 1
    n = len(text)

    def add(tt: TokType, v: str, at_line: int, at_col: int):
        tokens.append(Token(tt, v, at_line, at_col))

    def advance_to(j: int):
        nonlocal i, line, col
        chunk = text[i:j]
        newlines = chunk.count("\n")
        if newlines:
            line += newlines
            col = len(chunk) - chunk.rfind("\n")
        else:
            col += len(chunk)
        i = j

    while i < n:
        ch = text[i]
        start_line, start_col = line, col

        # whitespace
        if ch.isspace():
            advance_to(i + 1)
            continue

        # line comments: ///, //! or plain //
        if text.startswith("//", i):
            j = text.find("\n", i)
            if j == -1:
                j = n
            raw = text[i:j].rstrip("\r")
            if raw.startswith("///") and not raw.startswith("////"):
                add(TokType.DOC, raw, start_line, start_col)
            elif raw.startswith("//!"):
                add(TokType.INNER_DOC, raw, start_line, start_col)
            advance_to(j)
            continue

        # block comments nest: /* a /* b */ c */
        if text.startswith("/*", i):
            depth = 0
            j = i
            while j < n:
                if text.startswith("/*", j):
                    depth += 1
                    j += 2
                elif text.startswith("*/", j):
                    depth -= 1
                    j += 2
                    if depth == 0:
                        break
                else:
                    j += 1
            if depth != 0:
                raise ParseError("Unterminated block comment", start_line, start_col, expected="'*/'")
            raw = text[i:j]
            if raw.startswith("/**") and not raw.startswith("/***") and raw != "/**/":
                add(TokType.DOC, raw, start_line, start_col)
            elif raw.startswith("/*!"):
                add(TokType.INNER_DOC, raw, start_line, start_col)
            advance_to(j)
            continue

        # raw strings: r"..", r#".."#, br".."
        m = _RAW_STRING_START_RE.match(text, i)
        if m:
            closing = '"' + m.group(1)
            j = text.find(closing, m.end())
            if j == -1:
                raise ParseError("Unterminated raw string literal", start_line, start_col, expected=repr(closing))
            j += len(closing)
            add(TokType.LITERAL, text[i:j], start_line, start_col)
            advance_to(j)
            continue

        # strings: "..", b".."
        if ch == '"' or text.startswith('b"', i):
            m = _STRING_RE.match(text, i)
            if not m:
                raise ParseError("Unterminated string literal", start_line, start_col, expected="'\"'")
            add(TokType.LITERAL, m.group(0), start_line, start_col)
            advance_to(m.end())
            continue

        # char literals before lifetimes: 'a' vs 'a
        if ch == "'" or text.startswith("b'", i):
            m = _CHAR_RE.match(text, i)
            if m:
                add(TokType.LITERAL, m.group(0), start_line, start_col)
                advance_to(m.end())
                continue
            m = _LIFETIME_RE.match(text, i)
            if m:
                add(TokType.LIFETIME, m.group(0), start_line, start_col)
                advance_to(m.end())
                continue

        # identifiers, including raw identifiers like r#type
        m = _IDENT_RE.match(text, i)
        if m:
            add(TokType.IDENT, m.group(0), start_line, start_col)
            advance_to(m.end())
            continue

        # numbers
        m = _NUMBER_RE.match(text, i)
        if m:
            add(TokType.LITERAL, m.group(0), start_line, start_col)
            advance_to(m.end())
            continue

        two = text[i:i + 2]
        if two in _MULTI_CHAR:
            add(_MULTI_CHAR[two], two, start_line, start_col)
            advance_to(i + 2)
            continue

        add(_SINGLE_CHAR.get(ch, TokType.PUNCT), ch, start_line, start_col)
        advance_to(i + 1)

    tokens.append(Token(TokType.EOF, "", line, col))
    return tokens


# -----------------------------
# Normalize Tokenization

# punctuation we want to "stick" to the left (no space before)
_STICK_LEFT = {")", "]", ">", ",", ";", ":", "::", "."}

# punctuation we want to "stick" to the right (no space after)
_STICK_RIGHT = {"(", "[", "<", "::", ".", "&", "*", "?", "#", "!"}

# openers that attach to a preceding name: Vec<T>, Fn(i32), vec![..]
_ATTACH_TO_NAME = {"(", "<", "!"}


def compact_token_values(tokens: List[Token]) -> str:
    """
    Join tokens into canonical source text.

    Examples:
      ['Option', '<', '&', "'a", 'str', '>']         -> "Option<&'a str>"
      ['[', 'u8', ';', '4', ']']                      -> '[u8; 4]'
      ['derive', '(', 'Debug', ',', 'Clone', ')']     -> 'derive(Debug, Clone)'
      ['T', ':', 'Fn', '(', ')', '->', 'u8', '+', 'Send'] -> 'T: Fn() -> u8 + Send'
    """
    out_parts: List[str] = []
    prev: Optional[Token] = None

    for t in tokens:
        if prev is not None and _space_between(prev, t):
            out_parts.append(" ")
        out_parts.append(t.value)
        prev = t

    return "".join(out_parts)


def _space_between(prev: Token, cur: Token) -> bool:
    if prev.value in _STICK_RIGHT or cur.value in _STICK_LEFT:
        return False
    if cur.value in _ATTACH_TO_NAME and prev.type == TokType.IDENT:
        return False
    return True


def _quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _doc_attribute(raw: str, inner: bool) -> Attribute:
    """Doc comments behave like #[doc = "..."] attributes."""
    text = raw[3:-2] if raw.startswith("/*") else raw[3:]
    return Attribute(path="doc", tokens=f"doc = {_quote(text)}", inner=inner, doc=raw)


# -----------------------------
# Parser

_VIS_SCOPES = ("crate", "self", "super", "in")

_OPENERS = (TokType.LT, TokType.LPAREN, TokType.LBRACK, TokType.LBRACE)
_CLOSERS = (TokType.GT, TokType.RPAREN, TokType.RBRACK, TokType.RBRACE)


def _track_nesting(stack: List[TokType], tok: Token) -> bool:
    """
    Push/pop `tok` on the bracket stack. '<' and '>' only nest outside
    (), [] and {}, so `[u8; 4 >> 1]` stays one bracket deep.

    Returns False for a closer with nothing open.
    """
    if tok.type in (TokType.LT, TokType.GT) and stack and stack[-1] != TokType.LT:
        return True
    if tok.type in _OPENERS:
        stack.append(tok.type)
    elif tok.type in _CLOSERS:
        if not stack:
            return False
        stack.pop()
    return True


class Parser:
    def __init__(self, tokens: List[Token], max_depth: int = DEFAULT_MAX_DEPTH):
        self.tokens = tokens
        self.pos = 0
        self.max_depth = max_depth

    # basic utilities
    def peek(self, offset: int = 0) -> Token:
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return self.tokens[-1]

    def error(self, expected: str, tok: Optional[Token] = None) -> ParseError:
        tok = tok or self.peek()
        got = "end of input" if tok.type == TokType.EOF else f"{tok.type.name} ({tok.value!r})"
        return ParseError(f"Expected {expected}, got {got}", tok.line, tok.col, expected=expected)

    def eat(self, ttype: TokType, expected: Optional[str] = None) -> Token:
        tok = self.peek()
        if tok.type != ttype:
            raise self.error(expected or ttype.name, tok)
        self.pos += 1
        return tok

    def maybe_eat(self, ttype: TokType) -> Optional[Token]:
        if self.peek().type == ttype:
            return self.eat(ttype)
        return None

    def at_keyword(self, word: str, offset: int = 0) -> bool:
        tok = self.peek(offset)
        return tok.type == TokType.IDENT and tok.value == word

    def eat_keyword(self, word: str) -> Token:
        if not self.at_keyword(word):
            raise self.error(f"'{word}'")
        return self.eat(TokType.IDENT)

    # top-level block
    def parse_block(self) -> Block:
        """
        Parse:

          #![derive(Debug)]
          //! applies to every emitted struct
          pub struct Root { ... }

        Inner attributes at the start become the global attributes, turned
        into their outer form.
        """
        global_attrs = [a.to_outer() for a in self.parse_inner_attributes()]
        root = self.parse_declaration(depth=1)
        if self.peek().type != TokType.EOF:
            raise self.error("end of input")
        return Block(root=root, global_attrs=tuple(global_attrs))

    # attributes
    def parse_inner_attributes(self) -> List[Attribute]:
        attrs: List[Attribute] = []
        while True:
            tok = self.peek()
            if tok.type == TokType.INNER_DOC:
                attrs.append(_doc_attribute(tok.value, inner=True))
                self.pos += 1
            elif tok.type == TokType.POUND and self.peek(1).type == TokType.BANG:
                attrs.append(self._parse_bracket_attribute(inner=True))
            else:
                return attrs

    def parse_outer_attributes(self) -> List[Attribute]:
        attrs: List[Attribute] = []
        while True:
            tok = self.peek()
            if tok.type == TokType.DOC:
                attrs.append(_doc_attribute(tok.value, inner=False))
                self.pos += 1
            elif tok.type == TokType.POUND and self.peek(1).type == TokType.LBRACK:
                attrs.append(self._parse_bracket_attribute(inner=False))
            else:
                return attrs

    def _parse_bracket_attribute(self, inner: bool) -> Attribute:
        self.eat(TokType.POUND)
        if inner:
            self.eat(TokType.BANG, "'!'")
        open_tok = self.eat(TokType.LBRACK, "'['")

        body: List[Token] = []
        depth = 0
        while True:
            tok = self.peek()
            if tok.type == TokType.EOF:
                raise self.error("']' closing attribute", tok)
            if tok.type in (TokType.LBRACK, TokType.LPAREN, TokType.LBRACE):
                depth += 1
            elif tok.type in (TokType.RBRACK, TokType.RPAREN, TokType.RBRACE):
                if depth == 0:
                    self.eat(TokType.RBRACK, "']' closing attribute")
                    break
                depth -= 1
            body.append(tok)
            self.pos += 1

        if not body or body[0].type != TokType.IDENT:
            raise self.error("attribute path", body[0] if body else open_tok)

        # path: ident (:: ident)*
        path = [body[0].value]
        k = 1
        while k + 1 < len(body) and body[k].type == TokType.PATHSEP and body[k + 1].type == TokType.IDENT:
            path.append("::" + body[k + 1].value)
            k += 2

        return Attribute(path="".join(path), tokens=compact_token_values(body), inner=inner)

    # visibility
    def parse_visibility(self) -> str:
        """pub, pub(crate), pub(self), pub(super), pub(in some::path) or nothing."""
        if not self.at_keyword("pub"):
            return ""
        self.pos += 1

        if (
            self.peek().type == TokType.LPAREN
            and self.peek(1).type == TokType.IDENT
            and self.peek(1).value in _VIS_SCOPES
        ):
            self.eat(TokType.LPAREN)
            scope = self._collect_tokens_until((TokType.RPAREN,))
            self.eat(TokType.RPAREN, "')' closing visibility")
            return "pub(" + compact_token_values(scope) + ")"

        return "pub"

    # declarations
    def parse_declaration(self, depth: int) -> Declaration:
        attrs = self.parse_outer_attributes()
        vis = self.parse_visibility()
        return self.parse_declaration_rest(attrs, vis, depth)

    def parse_declaration_rest(self, attrs: List[Attribute], vis: str, depth: int) -> Declaration:
        """Parse from the `struct` keyword on; attributes and visibility are already consumed."""
        if depth > self.max_depth:
            raise NestingTooDeep(depth, self.max_depth)

        self.eat_keyword("struct")
        identity = self.parse_identity()
        params = self.parse_generic_params()
        where_clause = self.parse_where_clause(nested=depth > 1)
        fields = self.parse_fields(depth)

        return Declaration(
            identity=identity,
            attrs=tuple(attrs),
            vis=vis,
            generics=Generics(params=tuple(params), where_clause=where_clause),
            fields=fields,
        )

    def parse_identity(self) -> Identity:
        """
        Either a type name:

          struct B { ... }

        or a field name and a type name, with optional attributes between:

          struct d:
          /// for the field
          D { ... }
        """
        first = self.eat(TokType.IDENT, "struct name")

        if self.peek().type != TokType.COLON:
            return BareName(first.value)

        self.eat(TokType.COLON)
        ty_attrs = self.parse_outer_attributes()
        ty_name = self.eat(TokType.IDENT, "type name")
        return FieldTyped(field=first.value, type_name=ty_name.value, attrs=tuple(ty_attrs))

    # generics
    def parse_generic_params(self) -> List[GenericParam]:
        if not self.maybe_eat(TokType.LT):
            return []

        params: List[GenericParam] = []
        cur: List[Token] = []
        stack: List[TokType] = []

        while True:
            tok = self.peek()
            if tok.type == TokType.EOF:
                raise self.error("'>' closing generic parameters", tok)

            # top-level ',' or '>' ends the current parameter
            if not stack and tok.type in (TokType.COMMA, TokType.GT):
                self.pos += 1
                if cur:
                    params.append(self._generic_param(cur))
                    cur = []
                elif tok.type == TokType.COMMA:
                    raise self.error("generic parameter", tok)
                if tok.type == TokType.GT:
                    return params
                continue

            if not _track_nesting(stack, tok):
                raise self.error("'>' closing generic parameters", tok)

            cur.append(tok)
            self.pos += 1

    def _generic_param(self, tokens: List[Token]) -> GenericParam:
        first = tokens[0]
        if first.type == TokType.LIFETIME:
            kind, name = "lifetime", first.value
        elif first.type == TokType.IDENT and first.value == "const":
            if len(tokens) < 2 or tokens[1].type != TokType.IDENT:
                raise self.error("const parameter name", tokens[1] if len(tokens) > 1 else first)
            kind, name = "const", tokens[1].value
        elif first.type == TokType.IDENT:
            kind, name = "type", first.value
        else:
            raise self.error("generic parameter", first)

        return GenericParam(kind=kind, name=name, text=compact_token_values(tokens))

    def parse_where_clause(self, nested: bool) -> Optional[str]:
        """
        Collect the predicates after `where` up to the body.

        A nested unit struct has no body, so inside a field list a top-level
        ',' only continues the clause when a '{' for this declaration follows.
        """
        if not self.at_keyword("where"):
            return None
        self.pos += 1

        parts: List[Token] = []
        stack: List[TokType] = []

        while True:
            tok = self.peek()
            if tok.type == TokType.EOF:
                break
            if not stack:
                if tok.type in (TokType.LBRACE, TokType.SEMI, TokType.RBRACE):
                    break
                if tok.type == TokType.COMMA and nested and not self._where_continues():
                    break

            _track_nesting(stack, tok)
            parts.append(tok)
            self.pos += 1

        return compact_token_values(parts) or None

    def _where_continues(self) -> bool:
        """Peek past a ',' to see whether the body of the current declaration follows."""
        idx = self.pos + 1
        stack: List[TokType] = []

        while idx < len(self.tokens):
            tok = self.tokens[idx]
            if tok.type == TokType.EOF:
                return False
            if not stack:
                if tok.type == TokType.LBRACE:
                    return True
                if tok.type in (TokType.RBRACE, TokType.SEMI, TokType.POUND, TokType.DOC):
                    return False
                if tok.type == TokType.IDENT and tok.value == "struct":
                    return False

            _track_nesting(stack, tok)
            idx += 1

        return False

    # fields
    def parse_fields(self, depth: int) -> Optional[Tuple[FieldEntry, ...]]:
        """
        `;`, nothing at all (unit struct), or a braced, comma separated list
        with an optional trailing comma.
        """
        if self.maybe_eat(TokType.SEMI):
            return None
        if self.peek().type != TokType.LBRACE:
            return None

        self.eat(TokType.LBRACE)
        entries: List[FieldEntry] = []

        while self.peek().type != TokType.RBRACE:
            entries.append(self.parse_field(depth))
            if not self.maybe_eat(TokType.COMMA):
                break

        self.eat(TokType.RBRACE, "',' or '}'")
        return tuple(entries)

    def parse_field(self, depth: int) -> FieldEntry:
        """
        One entry of a field list:

          /// docs
          pub name: Vec<u8>

        or a nested declaration in place of the field:

          pub struct Name { ... }
        """
        attrs = self.parse_outer_attributes()
        vis = self.parse_visibility()

        if self.at_keyword("struct"):
            return NestedField(self.parse_declaration_rest(attrs, vis, depth + 1))

        name = self.eat(TokType.IDENT, "field name")
        self.eat(TokType.COLON, "':' after field name")

        ty_tokens = self._collect_tokens_until((TokType.COMMA, TokType.RBRACE))
        if not ty_tokens:
            raise self.error("field type")

        return PlainField(
            name=name.value,
            ty=compact_token_values(ty_tokens),
            vis=vis,
            attrs=tuple(attrs),
        )

    def _collect_tokens_until(self, terminators: Tuple[TokType, ...]) -> List[Token]:
        """Collect tokens until reaching one of `terminators` at top-level nesting."""
        parts: List[Token] = []
        stack: List[TokType] = []

        while True:
            tok = self.peek()
            if tok.type == TokType.EOF:
                break
            if tok.type in terminators and not stack:
                break
            if not _track_nesting(stack, tok):
                # unbalanced closer belongs to the caller
                break

            parts.append(tok)
            self.pos += 1

        return parts


# -----------------------------
# Public entry

def parse_block(text: str, max_depth: int = DEFAULT_MAX_DEPTH) -> Block:
    tokens = tokenize(text)
    parser = Parser(tokens, max_depth=max_depth)
    return parser.parse_block()
