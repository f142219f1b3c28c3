"""
C type IR data structures.

These dataclasses are the lowered, target-agnostic representation of C
declarations. A renderer consumes them to emit bindings for some target
language; nothing here depends on libclang.

Every type node shares one set of decorations describing *this occurrence*
of the type:

- ``const``: the declaration specifier is const-qualified
- ``pointers``: number of indirection levels
- ``outer_arr``: array bounds met before the pointer levels (``int *p[4]``)
- ``inner_arr``: array bounds met after the pointer levels (``int (*p)[4]``)
- ``typedef``: the typedef name this occurrence was spelled with, if any

An unsized dimension (``int data[]``) is recorded as ``None``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional


@dataclass
class SourceLocation:
    """Source code location for error reporting."""
    file: Path
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


# =============================================================================
# Scalar Kinds
# =============================================================================


class TypeFamily(Enum):
    """Coarse classification of scalar base kinds."""
    VOID = "void"
    CHAR = "char"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    COMPLEX = "complex"


class BaseKind(Enum):
    """Base kind of a scalar type. ``LONG`` is C's ``long long``."""
    VOID = "void"
    CHAR = "char"
    INT = "int"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    BOOL = "_Bool"
    COMPLEX_FLOAT = "complexfloat"
    COMPLEX_DOUBLE = "complexdouble"

    @property
    def family(self) -> TypeFamily:
        return _FAMILIES[self]


_FAMILIES = {
    BaseKind.VOID: TypeFamily.VOID,
    BaseKind.CHAR: TypeFamily.CHAR,
    BaseKind.INT: TypeFamily.INT,
    BaseKind.LONG: TypeFamily.INT,
    BaseKind.FLOAT: TypeFamily.FLOAT,
    BaseKind.DOUBLE: TypeFamily.FLOAT,
    BaseKind.BOOL: TypeFamily.BOOL,
    BaseKind.COMPLEX_FLOAT: TypeFamily.COMPLEX,
    BaseKind.COMPLEX_DOUBLE: TypeFamily.COMPLEX,
}


# =============================================================================
# Constant Resolution Policy
# =============================================================================


class ConstScope(Enum):
    """Construct kinds that carry their own constant-resolution rule."""
    ENUM = "enum"


class ConstRule(Enum):
    """
    How constants of a construct kind are emitted.

    VALUE stores the computed literal. FOREIGN_ALIAS stores a cross-reference
    to the same-named symbol imported from the native library. EXPAND is
    reserved for macro expansion and behaves like FOREIGN_ALIAS for now.
    """
    VALUE = "value"
    FOREIGN_ALIAS = "foreign_alias"
    EXPAND = "expand"


# =============================================================================
# Type IR
# =============================================================================


def _dims(dims: list[Optional[int]]) -> str:
    return "".join(f"[{'' if d is None else d}]" for d in dims)


@dataclass
class CType:
    """Decorations shared by every lowered type."""
    const: bool = False
    pointers: int = 0
    outer_arr: list[Optional[int]] = field(default_factory=list)
    inner_arr: list[Optional[int]] = field(default_factory=list)
    typedef: str = ""

    def set_raw(self, name: str) -> None:
        """Point this occurrence at a typedef name."""
        self.typedef = name

    @property
    def has_unsized_dims(self) -> bool:
        return None in self.outer_arr or None in self.inner_arr

    def _base_str(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        parts = []
        if self.const:
            parts.append("const")
        parts.append(self.typedef or self._base_str())
        result = " ".join(parts)
        stars = "*" * self.pointers
        if self.inner_arr:
            return f"{result} ({stars}{_dims(self.outer_arr)}){_dims(self.inner_arr)}"
        if self.outer_arr:
            return f"{result} {stars}{_dims(self.outer_arr)}"
        return result + stars


@dataclass
class CTypeSpec(CType):
    """
    Scalar type: void, char, the int and float families, _Bool, complex.

    Modifier flags follow the C spelling, so ``unsigned long long`` is
    ``base=LONG, long=True, unsigned=True``.
    """
    base: BaseKind = BaseKind.INT
    signed: bool = False
    unsigned: bool = False
    short: bool = False
    long: bool = False
    complex: bool = False

    def _base_str(self) -> str:
        words = []
        if self.signed:
            words.append("signed")
        if self.unsigned:
            words.append("unsigned")
        if self.short:
            words.append("short")
        if self.base is BaseKind.LONG:
            words.append("long long")
        elif self.base is BaseKind.INT:
            words.append("long" if self.long else "int")
        elif self.base is BaseKind.DOUBLE:
            words.append("long double" if self.long else "double")
        elif self.base is BaseKind.COMPLEX_FLOAT:
            words.append("float _Complex")
        elif self.base is BaseKind.COMPLEX_DOUBLE:
            words.append("long double _Complex" if self.long else "double _Complex")
        else:
            words.append(self.base.value)
        return " ".join(words)


@dataclass
class CStructSpec(CType):
    """Struct or union occurrence with its members in declaration order."""
    tag: str = ""
    is_union: bool = False
    members: list[CDecl] = field(default_factory=list)

    @property
    def keyword(self) -> str:
        return "union" if self.is_union else "struct"

    def _base_str(self) -> str:
        return f"{self.keyword} {self.tag}" if self.tag else self.keyword


@dataclass
class CEnumSpec(CType):
    """Enumeration occurrence with its enumerators in declaration order."""
    tag: str = ""
    members: list[CDecl] = field(default_factory=list)
    underlying: Optional[CTypeSpec] = None

    def _base_str(self) -> str:
        return f"enum {self.tag}" if self.tag else "enum"


@dataclass
class CFunctionSpec(CType):
    """
    Function signature.

    ``raw`` is the identifier of the declarator the function type came from
    and only serves diagnostics. ``returns`` is None for void functions.
    """
    raw: str = ""
    returns: Optional[CType] = None
    params: list[CDecl] = field(default_factory=list)
    variadic: bool = False

    def set_raw(self, name: str) -> None:
        self.raw = name

    @property
    def signature(self) -> str:
        params = [f"{p.spec} {p.name}".rstrip() for p in self.params]
        if self.variadic:
            params.append("...")
        ret = str(self.returns) if self.returns is not None else "void"
        name = self.raw
        if self.pointers:
            name = f"({'*' * self.pointers}{name})"
        return f"{ret} {name}({', '.join(params) or 'void'})"

    def _base_str(self) -> str:
        return self.signature

    def __str__(self) -> str:
        if self.typedef and self.pointers:
            # spelled through a function pointer typedef
            return self.typedef
        return self.signature


# =============================================================================
# Declarations
# =============================================================================


@dataclass(frozen=True)
class CDecl:
    """
    A named entity produced by lowering.

    Top-level functions and variables, struct/union members, function
    parameters and enumerators are all declarations. ``name`` is empty for
    anonymous members, unnamed parameters and tag-only declarations.
    """
    name: str
    spec: Optional[CType] = None
    location: Optional[SourceLocation] = None
    is_typedef: bool = False
    is_static: bool = False
    value: Any = None
    expression: Optional[str] = None

    @property
    def is_function(self) -> bool:
        return isinstance(self.spec, CFunctionSpec) and self.spec.pointers == 0

    def __str__(self) -> str:
        if self.spec is None:
            return self.name
        if isinstance(self.spec, CFunctionSpec) and not (self.spec.typedef and self.spec.pointers):
            # the signature already spells the name
            return str(self.spec)
        return f"{self.spec} {self.name}".rstrip()
