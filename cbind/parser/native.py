"""
Native C syntax surface over libclang.

Wraps libclang cursors and types into the shape the translator consumes:

- ``NativeKind``: closed classification of C types
- ``NativeDeclarator``: declarator chain + declaration specifier + position
- ``NativeType``: a type reached through a declarator, with the queries the
  lowering engine needs (element, bounds, result, parameters, members,
  enumerators, tag)
- ``NativeUnit``: the translation unit as an ordered stream of external
  declarations, each either a function definition or a declaration with its
  declarator list
"""

from __future__ import annotations

import codecs
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Iterator, Optional

from clang.cindex import Cursor, CursorKind, StorageClass, TokenKind, Type, TypeKind, conf

from ..ir.c_types import SourceLocation
from .declarator import (
    Declarator,
    DirectCase,
    DirectDeclarator,
    apply_suffix,
)

logger = logging.getLogger("cbind.parser")


class NativeKind(Enum):
    """Closed set of C type kinds the translator understands."""
    VOID = "void"
    CHAR = "char"
    SCHAR = "signed char"
    UCHAR = "unsigned char"
    SHORT = "short"
    USHORT = "unsigned short"
    INT = "int"
    UINT = "unsigned int"
    LONG = "long"
    ULONG = "unsigned long"
    LONGLONG = "long long"
    ULONGLONG = "unsigned long long"
    FLOAT = "float"
    DOUBLE = "double"
    LONGDOUBLE = "long double"
    BOOL = "_Bool"
    FLOAT_COMPLEX = "float _Complex"
    DOUBLE_COMPLEX = "double _Complex"
    LONGDOUBLE_COMPLEX = "long double _Complex"
    ENUM = "enum"
    STRUCT = "struct"
    UNION = "union"
    FUNCTION = "function"
    PTR = "pointer"
    ARRAY = "array"


_SCALAR_KINDS: dict[TypeKind, NativeKind] = {
    TypeKind.VOID: NativeKind.VOID,
    TypeKind.CHAR_S: NativeKind.CHAR,
    TypeKind.CHAR_U: NativeKind.CHAR,
    TypeKind.SCHAR: NativeKind.SCHAR,
    TypeKind.UCHAR: NativeKind.UCHAR,
    TypeKind.SHORT: NativeKind.SHORT,
    TypeKind.USHORT: NativeKind.USHORT,
    TypeKind.INT: NativeKind.INT,
    TypeKind.UINT: NativeKind.UINT,
    TypeKind.LONG: NativeKind.LONG,
    TypeKind.ULONG: NativeKind.ULONG,
    TypeKind.LONGLONG: NativeKind.LONGLONG,
    TypeKind.ULONGLONG: NativeKind.ULONGLONG,
    TypeKind.FLOAT: NativeKind.FLOAT,
    TypeKind.DOUBLE: NativeKind.DOUBLE,
    TypeKind.LONGDOUBLE: NativeKind.LONGDOUBLE,
    TypeKind.BOOL: NativeKind.BOOL,
}

# _Complex T, keyed by T
_COMPLEX_KINDS: dict[TypeKind, NativeKind] = {
    TypeKind.FLOAT: NativeKind.FLOAT_COMPLEX,
    TypeKind.DOUBLE: NativeKind.DOUBLE_COMPLEX,
    TypeKind.LONGDOUBLE: NativeKind.LONGDOUBLE_COMPLEX,
}

ARRAY_TYPE_KINDS = (
    TypeKind.CONSTANTARRAY,
    TypeKind.INCOMPLETEARRAY,
    TypeKind.VARIABLEARRAY,
    TypeKind.DEPENDENTSIZEDARRAY,
)

FUNCTION_TYPE_KINDS = (TypeKind.FUNCTIONPROTO, TypeKind.FUNCTIONNOPROTO)

TAG_CURSOR_KINDS = (CursorKind.STRUCT_DECL, CursorKind.UNION_DECL, CursorKind.ENUM_DECL)

DECLARATOR_CURSOR_KINDS = (
    CursorKind.VAR_DECL,
    CursorKind.FUNCTION_DECL,
    CursorKind.TYPEDEF_DECL,
)


# =============================================================================
# Type Helpers
# =============================================================================


def plain_name(spelling: str) -> str:
    """Drop clang's placeholder spellings for unnamed entities."""
    if "(" in spelling:
        # "struct (unnamed at foo.h:3:9)", "(anonymous union at ...)"
        return ""
    return spelling


def location_of(cursor: Cursor) -> Optional[SourceLocation]:
    """Get source location from cursor."""
    loc = cursor.location
    if loc.file is None:
        return None
    return SourceLocation(
        file=Path(loc.file.name),
        line=loc.line,
        column=loc.column,
    )


def atomic_value_type(typ: Type) -> Type:
    """Type wrapped by _Atomic(...)."""
    # clang.cindex ships no binding for clang_Type_getValueType
    fn = conf.lib.clang_Type_getValueType
    fn.argtypes = [Type]
    fn.restype = Type
    fn.errcheck = Type.from_result
    return fn(typ)


def desugar(typ: Type) -> tuple[Type, Optional[Cursor]]:
    """
    Strip typedef, _Atomic and elaborated sugar from a type.

    Returns the bare type and the innermost typedef declaration crossed on
    the way, if any.
    """
    typedef_cursor = None
    while True:
        if typ.kind == TypeKind.ELABORATED:
            typ = typ.get_named_type()
        elif typ.kind == TypeKind.ATOMIC:
            typ = atomic_value_type(typ)
        elif typ.kind == TypeKind.TYPEDEF:
            typedef_cursor = typ.get_declaration()
            typ = typedef_cursor.underlying_typedef_type
        elif typ.kind == TypeKind.UNEXPOSED:
            canonical = typ.get_canonical()
            if canonical.kind == TypeKind.UNEXPOSED:
                return typ, typedef_cursor
            typ = canonical
        else:
            return typ, typedef_cursor


def base_specifier_type(typ: Type) -> Type:
    """
    Descend through the layers a declarator adds (pointers, arrays,
    function results) to the type spelled by the declaration specifier.
    """
    while True:
        if typ.kind == TypeKind.POINTER:
            typ = typ.get_pointee()
        elif typ.kind in ARRAY_TYPE_KINDS:
            typ = typ.get_array_element_type()
        elif typ.kind in FUNCTION_TYPE_KINDS:
            typ = typ.get_result()
        else:
            return typ


def _typedef_name(base: Type) -> str:
    if base.kind == TypeKind.ELABORATED:
        base = base.get_named_type()
    if base.kind == TypeKind.TYPEDEF:
        return base.get_declaration().spelling
    return ""


def build_declarator(name: str, typ: Type) -> Declarator:
    """
    Rebuild the declarator chain of a declaration from its sugared type.

    Walks from the outermost derivation inward and stops at the specifier's
    type, so typedef'd shapes stay inside the typedef.
    """
    decl = Declarator(0, DirectDeclarator(DirectCase.IDENTIFIER, token=name or None))
    while True:
        if typ.kind == TypeKind.POINTER:
            decl = Declarator(decl.pointers + 1, decl.direct)
            typ = typ.get_pointee()
        elif typ.kind in ARRAY_TYPE_KINDS:
            size = typ.get_array_size()
            suffix = DirectDeclarator(DirectCase.ARRAY, size=size if size >= 0 else None)
            decl = apply_suffix(decl, suffix)
            typ = typ.get_array_element_type()
        elif typ.kind in FUNCTION_TYPE_KINDS:
            decl = apply_suffix(decl, DirectDeclarator(DirectCase.PARAMS))
            typ = typ.get_result()
        else:
            return decl


def _parameter_cursors(cursor: Cursor) -> list[Cursor]:
    if cursor.kind == CursorKind.FUNCTION_DECL:
        return list(cursor.get_arguments())
    return [c for c in cursor.get_children() if c.kind == CursorKind.PARM_DECL]


# =============================================================================
# Declarators and Types
# =============================================================================


@dataclass
class Specifier:
    """Declaration specifier facts shared by every declarator of a declaration."""
    is_typedef: bool = False
    is_static: bool = False
    is_const: bool = False
    typedef_name: str = ""


class NativeDeclarator:
    """
    A declarator bound to its specifier and source position.

    ``type`` is the full declared type seen through this declarator.
    """

    def __init__(
        self,
        declarator: Declarator,
        specifier: Specifier,
        clang_type: Type,
        location: Optional[SourceLocation] = None,
        cursor: Optional[Cursor] = None,
    ):
        self.declarator = declarator
        self.specifier = specifier
        self.location = location
        self.type = NativeType(clang_type, self, (cursor,) if cursor is not None else ())

    @property
    def name(self) -> str:
        return self.declarator.name

    def __repr__(self) -> str:
        return f"NativeDeclarator({str(self.declarator)!r})"

    @classmethod
    def from_cursor(cls, cursor: Cursor) -> "NativeDeclarator":
        """Build the declarator of a declaration, member or parameter cursor."""
        if cursor.kind == CursorKind.TYPEDEF_DECL:
            clang_type = cursor.underlying_typedef_type
        else:
            clang_type = cursor.type

        name = "" if cursor.kind in TAG_CURSOR_KINDS else plain_name(cursor.spelling)
        base = base_specifier_type(clang_type)
        is_static = (
            cursor.kind in (CursorKind.VAR_DECL, CursorKind.FUNCTION_DECL)
            and cursor.storage_class == StorageClass.STATIC
        )
        specifier = Specifier(
            is_typedef=cursor.kind == CursorKind.TYPEDEF_DECL,
            is_static=is_static,
            is_const=base.is_const_qualified(),
            typedef_name=_typedef_name(base),
        )
        return cls(
            build_declarator(name, clang_type),
            specifier,
            clang_type,
            location=location_of(cursor),
            cursor=cursor,
        )

    @classmethod
    def abstract(cls, clang_type: Type) -> "NativeDeclarator":
        """Declarator for a type with no declaration behind it."""
        base = base_specifier_type(clang_type)
        specifier = Specifier(
            is_const=base.is_const_qualified(),
            typedef_name=_typedef_name(base),
        )
        return cls(build_declarator("", clang_type), specifier, clang_type)


@dataclass
class NativeEnumerator:
    """Enumeration constant with the value the parser assigned to it."""
    name: str
    value: Optional[int]
    location: Optional[SourceLocation] = None


class NativeType:
    """
    A C type reached through a declarator.

    Typedef and elaborated sugar is stripped on construction; the typedef
    name the declaration was spelled with stays available through
    ``specifier()``. Types derived by pointer or array stripping keep the
    declarator they were reached through.
    """

    def __init__(self, clang_type: Type, declarator: NativeDeclarator, param_sources: tuple = ()):
        self._declarator = declarator
        self._type, typedef_cursor = desugar(clang_type)
        if typedef_cursor is not None:
            param_sources = param_sources + (typedef_cursor,)
        # declarations whose PARM_DECL children may name this function's parameters
        self._param_sources = param_sources

    def __repr__(self) -> str:
        return f"NativeType({self.spelling!r})"

    @property
    def spelling(self) -> str:
        return self._type.spelling

    def kind(self) -> Optional[NativeKind]:
        """Classify the type, or None if it is outside the closed set."""
        kind = self._type.kind
        if kind == TypeKind.POINTER:
            return NativeKind.PTR
        if kind in ARRAY_TYPE_KINDS:
            return NativeKind.ARRAY
        if kind in FUNCTION_TYPE_KINDS:
            return NativeKind.FUNCTION
        if kind == TypeKind.RECORD:
            if self._type.get_declaration().kind == CursorKind.UNION_DECL:
                return NativeKind.UNION
            return NativeKind.STRUCT
        if kind == TypeKind.ENUM:
            return NativeKind.ENUM
        if kind == TypeKind.COMPLEX:
            return _COMPLEX_KINDS.get(self._type.element_type.kind)
        return _SCALAR_KINDS.get(kind)

    def specifier(self) -> Specifier:
        return self._declarator.specifier

    def declarator(self) -> NativeDeclarator:
        return self._declarator

    # -- pointers and arrays --------------------------------------------------

    def element(self) -> "NativeType":
        """Pointee of a pointer or element of an array."""
        if self._type.kind == TypeKind.POINTER:
            inner = self._type.get_pointee()
        else:
            inner = self._type.get_array_element_type()
        return NativeType(inner, self._declarator, self._param_sources)

    def elements(self) -> int:
        """Array bound, or -1 when it is not a known constant."""
        return self._type.get_array_size()

    # -- functions ------------------------------------------------------------

    def result(self) -> "NativeType":
        return NativeType(self._type.get_result(), self._declarator)

    def is_variadic(self) -> bool:
        return self._type.kind == TypeKind.FUNCTIONPROTO and self._type.is_function_variadic()

    def parameters(self) -> list[NativeDeclarator]:
        """
        Parameter declarators in order.

        Names come from the PARM_DECL cursors of the declaration (or typedef)
        the function type was spelled in; when those don't line up with the
        prototype the parameters are returned unnamed.
        """
        if self._type.kind != TypeKind.FUNCTIONPROTO:
            return []
        arg_types = list(self._type.argument_types())
        for source in self._param_sources:
            cursors = _parameter_cursors(source)
            if len(cursors) == len(arg_types):
                return [NativeDeclarator.from_cursor(c) for c in cursors]
        return [NativeDeclarator.abstract(t) for t in arg_types]

    # -- tags -----------------------------------------------------------------

    def tag(self) -> str:
        """
        Tag of a struct, union or enum.

        Anonymous records take the name of the typedef they were declared
        through, if any.
        """
        name = plain_name(self._type.get_declaration().spelling)
        if name:
            return name
        spec = self.specifier()
        if spec.typedef_name:
            return spec.typedef_name
        if spec.is_typedef:
            return self._declarator.name
        return ""

    def members(self) -> list[NativeDeclarator]:
        """Struct/union fields in declaration order; empty for opaque records."""
        return [NativeDeclarator.from_cursor(c) for c in self._type.get_fields()]

    def enumerators(self) -> list[NativeEnumerator]:
        decl = self._type.get_declaration()
        definition = decl.get_definition() or decl
        return [
            NativeEnumerator(
                name=c.spelling,
                value=c.enum_value,
                location=location_of(c),
            )
            for c in definition.get_children()
            if c.kind == CursorKind.ENUM_CONSTANT_DECL
        ]

    def underlying(self) -> Optional["NativeType"]:
        """Integer type an enumeration is represented with, if known."""
        enum_type = self._type.get_declaration().enum_type
        if enum_type.kind == TypeKind.INVALID:
            return None
        return NativeDeclarator.abstract(enum_type).type


# =============================================================================
# Constant Initializers
# =============================================================================

_INT_SUFFIX = re.compile(r"[uUlL]+$")
_FLOAT_SUFFIX = re.compile(r"[fFlL]$")
_TRANSPARENT_EXPRS = (
    CursorKind.UNEXPOSED_EXPR,
    CursorKind.PAREN_EXPR,
    CursorKind.CSTYLE_CAST_EXPR,
)


def _first_token(cursor: Cursor) -> str:
    token = next(iter(cursor.get_tokens()), None)
    return token.spelling if token is not None else ""


def _unescape(body: str) -> str:
    return codecs.decode(body, "unicode_escape")


def parse_int_literal(text: str) -> Optional[int]:
    text = _INT_SUFFIX.sub("", text)
    try:
        if text.lower().startswith(("0x", "0b")):
            return int(text, 0)
        if len(text) > 1 and text.startswith("0"):
            return int(text, 8)
        return int(text)
    except ValueError:
        return None


def parse_float_literal(text: str) -> Optional[float]:
    text = _FLOAT_SUFFIX.sub("", text)
    try:
        if text.lower().startswith("0x"):
            return float.fromhex(text)
        return float(text)
    except ValueError:
        return None


def parse_char_literal(text: str) -> Optional[int]:
    quote = text.find("'")
    if quote < 0 or not text.endswith("'"):
        return None
    chars = _unescape(text[quote + 1:-1])
    return ord(chars) if len(chars) == 1 else None


def parse_string_literal(pieces: list[str]) -> Optional[str]:
    parts = []
    for piece in pieces:
        quote = piece.find('"')
        if quote < 0 or not piece.endswith('"'):
            return None
        parts.append(_unescape(piece[quote + 1:-1]))
    return "".join(parts)


def _apply_unary(op: str, value: Any) -> Any:
    if op == "-":
        return -value
    if op == "+":
        return value
    if op == "~" and isinstance(value, int):
        return ~value
    if op == "!":
        return int(not value)
    return None


def constant_value(cursor: Cursor, lookup: Optional[Callable[[str], Any]] = None) -> Any:
    """
    Value of a constant initializer expression, or None if it is not one.

    Handles literals, parentheses and casts, unary operators, enumerator
    references, and references to earlier variables through ``lookup``.
    """
    kind = cursor.kind
    if kind in _TRANSPARENT_EXPRS:
        exprs = [c for c in cursor.get_children() if c.kind.is_expression()]
        return constant_value(exprs[-1], lookup) if exprs else None
    if kind == CursorKind.INTEGER_LITERAL:
        return parse_int_literal(_first_token(cursor))
    if kind == CursorKind.FLOATING_LITERAL:
        return parse_float_literal(_first_token(cursor))
    if kind == CursorKind.CHARACTER_LITERAL:
        return parse_char_literal(_first_token(cursor))
    if kind == CursorKind.STRING_LITERAL:
        return parse_string_literal([
            t.spelling for t in cursor.get_tokens() if t.kind == TokenKind.LITERAL
        ])
    if kind == CursorKind.UNARY_OPERATOR:
        operands = [c for c in cursor.get_children() if c.kind.is_expression()]
        if len(operands) != 1:
            return None
        value = constant_value(operands[0], lookup)
        if value is None:
            return None
        return _apply_unary(_first_token(cursor), value)
    if kind == CursorKind.DECL_REF_EXPR:
        ref = cursor.referenced
        if ref is None:
            return None
        if ref.kind == CursorKind.ENUM_CONSTANT_DECL:
            return ref.enum_value
        if lookup is not None:
            return lookup(ref.spelling)
    return None


# =============================================================================
# Translation Unit
# =============================================================================


class ExternalCase(Enum):
    """Top-level production of a translation unit."""
    FUNCTION_DEFINITION = "function_definition"
    DECLARATION = "declaration"


@dataclass
class Initializer:
    """Initializer of a declarator: its source text and expression cursor."""
    expression: str
    cursor: Optional[Cursor] = None

    def value(self, lookup: Optional[Callable[[str], Any]] = None) -> Any:
        if self.cursor is None:
            return None
        return constant_value(self.cursor, lookup)


@dataclass
class InitDeclarator:
    declarator: NativeDeclarator
    initializer: Optional[Initializer] = None


@dataclass
class NativeDeclaration:
    """
    One C declaration: a specifier shared by a list of declarators.

    ``tag`` is the struct/union/enum cursor when the specifier defines or
    declares one.
    """
    init_declarators: list[InitDeclarator] = field(default_factory=list)
    tag: Optional[Cursor] = None

    def declarator(self) -> Optional[NativeDeclarator]:
        """Abstract declarator of a declaration that only declares a tag."""
        if self.tag is None:
            return None
        return NativeDeclarator.from_cursor(self.tag)


@dataclass
class ExternalDeclaration:
    case: ExternalCase
    cursor: Cursor
    declaration: Optional[NativeDeclaration] = None


def _same_specifier(first: Cursor, cursor: Cursor) -> bool:
    # int a, *b; both declarators start at the shared specifier
    return first.extent.start.offset == cursor.extent.start.offset


def _contains(outer: Cursor, inner: Cursor) -> bool:
    return (
        outer.extent.start.offset <= inner.extent.start.offset
        and inner.extent.end.offset <= outer.extent.end.offset
    )


class NativeUnit:
    """A parsed translation unit restricted to its main file."""

    def __init__(self, tu, path: Path, source: bytes):
        self.tu = tu
        self.path = path
        self.source = source

    def _top_level(self) -> Iterator[Cursor]:
        for child in self.tu.cursor.get_children():
            # Only process items from the main file
            if child.location.file is None:
                continue
            if Path(child.location.file.name) != self.path:
                continue
            yield child

    def _initializer(self, cursor: Cursor) -> Optional[Initializer]:
        if cursor.kind != CursorKind.VAR_DECL:
            return None
        # a later declarator's extent starts at the shared specifier
        name_offset = cursor.location.offset
        eq = next(
            (
                t for t in cursor.get_tokens()
                if t.spelling == "=" and t.extent.start.offset > name_offset
            ),
            None,
        )
        if eq is None:
            return None
        start = eq.extent.end.offset
        text = self.source[start:cursor.extent.end.offset].decode("utf-8", errors="replace")
        expr = next(
            (
                c for c in cursor.get_children()
                if c.kind.is_expression() and c.extent.start.offset >= start
            ),
            None,
        )
        return Initializer(expression=text.strip(), cursor=expr)

    def _declaration(self, cursors: list[Cursor], tag: Optional[Cursor]) -> ExternalDeclaration:
        decl = NativeDeclaration(
            init_declarators=[
                InitDeclarator(NativeDeclarator.from_cursor(c), self._initializer(c))
                for c in cursors
            ],
            tag=tag,
        )
        return ExternalDeclaration(ExternalCase.DECLARATION, cursors[0] if cursors else tag, decl)

    def external_declarations(self) -> Iterator[ExternalDeclaration]:
        """
        Yield top-level declarations in source order.

        Declarator cursors that share a specifier are grouped back into one
        declaration. A struct/union/enum cursor lying inside the next
        declaration is that declaration's specifier; otherwise it stands as a
        declaration of its own.
        """
        group: list[Cursor] = []
        group_tag: Optional[Cursor] = None
        pending_tag: Optional[Cursor] = None

        for cursor in self._top_level():
            kind = cursor.kind

            if kind in DECLARATOR_CURSOR_KINDS and group and _same_specifier(group[0], cursor):
                group.append(cursor)
                continue

            if group:
                yield self._declaration(group, group_tag)
                group, group_tag = [], None

            if kind in TAG_CURSOR_KINDS:
                if pending_tag is not None:
                    yield self._declaration([], pending_tag)
                pending_tag = cursor
                continue

            if pending_tag is not None:
                if kind in DECLARATOR_CURSOR_KINDS and _contains(cursor, pending_tag):
                    group_tag = pending_tag
                else:
                    yield self._declaration([], pending_tag)
                pending_tag = None

            if kind == CursorKind.FUNCTION_DECL and cursor.is_definition():
                yield ExternalDeclaration(ExternalCase.FUNCTION_DEFINITION, cursor)
            elif kind in DECLARATOR_CURSOR_KINDS:
                group = [cursor]
            else:
                logger.debug("Ignoring %s at %s", kind, location_of(cursor))

        if group:
            yield self._declaration(group, group_tag)
        if pending_tag is not None:
            yield self._declaration([], pending_tag)
