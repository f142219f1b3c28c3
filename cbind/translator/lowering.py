"""
Type lowering engine.

Turns a native C type into one of the four IR variants. Array and pointer
layers are peeled off into the node's decorations first:

    int *p[4]     outer_arr=[4], pointers=1
    int (*p)[4]   pointers=1, inner_arr=[4]

then the remaining base type is dispatched on its kind. Aggregates recurse
back into ``lower`` with increasing depth; records and functions deeper than
``MAX_DEPTH`` come back without members, parameters or result.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from ..errors import UnknownTypeKindError
from ..ir.c_types import ConstRule, ConstScope, CType, CTypeSpec
from ..parser.native import NativeKind, NativeType
from .aggregates import build_enum, build_function, build_struct
from .scalars import SCALAR_TYPES
from .state import TranslatorState

MAX_DEPTH = 3


def typedef_alias(typ: NativeType) -> str:
    """
    Typedef name a type occurrence was spelled with.

    That is the typedef name used by the declaration specifier, or the
    declared identifier when the declaration is itself a typedef.
    """
    spec = typ.specifier()
    if spec.typedef_name:
        return spec.typedef_name
    if spec.is_typedef:
        return typ.declarator().name
    return ""


def _bound(typ: NativeType) -> Optional[int]:
    size = typ.elements()
    return size if size >= 0 else None


class TypeLowerer:
    """
    Lowers native types into the C type IR.

    Enumerators met while lowering are recorded into ``state``; how their
    values are emitted is decided by ``const_rules``.
    """

    max_depth = MAX_DEPTH

    def __init__(
        self,
        state: TranslatorState,
        const_rules: Optional[dict[ConstScope, ConstRule]] = None,
        foreign_prefix: str = "C.",
    ):
        self.state = state
        self.const_rules = dict(const_rules or {})
        self.foreign_prefix = foreign_prefix

    def rule_for(self, scope: ConstScope) -> ConstRule:
        return self.const_rules.get(scope, ConstRule.VALUE)

    def lower(self, typ: NativeType, depth: int = 0, is_return: bool = False) -> CType:
        """
        Lower ``typ`` at recursion ``depth``.

        ``is_return`` marks a function's result type, which never takes a
        typedef alias of its own.
        """
        specifier = typ.specifier()
        alias = "" if is_return else typedef_alias(typ)
        base = CTypeSpec(const=specifier.is_const)

        kind = typ.kind()
        while kind is NativeKind.ARRAY:
            base.outer_arr.append(_bound(typ))
            typ = typ.element()
            kind = typ.kind()
        while kind is NativeKind.PTR:
            base.pointers += 1
            typ = typ.element()
            kind = typ.kind()
        while kind is NativeKind.ARRAY:
            base.inner_arr.append(_bound(typ))
            typ = typ.element()
            kind = typ.kind()

        if kind in SCALAR_TYPES:
            return replace(base, typedef=alias, **SCALAR_TYPES[kind])

        if kind is NativeKind.ENUM:
            spec = build_enum(self, base, typ)
            if not is_return:
                spec.set_raw(alias)
            return spec

        if kind in (NativeKind.STRUCT, NativeKind.UNION):
            spec = build_struct(self, base, typ, depth + 1)
            if not is_return:
                spec.set_raw(alias)
            return spec

        if kind is NativeKind.FUNCTION:
            spec = build_function(self, base, typ, depth + 1)
            if not is_return and not specifier.is_typedef:
                spec.typedef = alias
                if spec.returns is not None and alias:
                    spec.returns.set_raw(alias)
            return spec

        raise UnknownTypeKindError(
            f"Cannot lower type '{typ.spelling}'",
            location=typ.declarator().location,
        )
