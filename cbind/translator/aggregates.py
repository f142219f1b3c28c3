"""
Aggregate spec builders.

Struct/union, enum and function types are lowered here. Each builder takes
the lowerer it was called from and re-enters it for members, enumerator
types, results and parameters, so recursion depth stays bounded by the
lowerer's cutoff.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..errors import MissingEnumValueError
from ..ir.c_types import (
    CDecl,
    CEnumSpec,
    CFunctionSpec,
    ConstRule,
    ConstScope,
    CStructSpec,
    CType,
)
from ..parser.native import NativeKind, NativeType
from .scalars import promote_enum_value

if TYPE_CHECKING:
    from .lowering import TypeLowerer

logger = logging.getLogger("cbind.translator")


def decorations(base: CType, with_const: bool = True) -> dict[str, Any]:
    """Call-site decorations of ``base`` as constructor arguments."""
    result = {
        "pointers": base.pointers,
        "outer_arr": base.outer_arr,
        "inner_arr": base.inner_arr,
    }
    if with_const:
        result["const"] = base.const
    return result


def build_struct(lowerer: "TypeLowerer", base: CType, typ: NativeType, depth: int) -> CStructSpec:
    """
    Lower a struct or union.

    Past the depth cutoff the record is returned by tag only, which is what
    ends self-referential structs.
    """
    spec = CStructSpec(
        tag=typ.tag(),
        is_union=typ.kind() is NativeKind.UNION,
        **decorations(base),
    )
    if depth > lowerer.max_depth:
        logger.debug("Depth cutoff at %s %s", spec.keyword, spec.tag or "<anonymous>")
        return spec

    for member in typ.members():
        spec.members.append(CDecl(
            name=member.name,
            spec=lowerer.lower(member.type, depth + 1),
            location=member.location,
        ))
    return spec


def build_enum(lowerer: "TypeLowerer", base: CType, typ: NativeType) -> CEnumSpec:
    """
    Lower an enumeration and register its enumerators as constants.

    Under ``ConstRule.VALUE`` members carry their value; otherwise they carry
    a reference to the same-named symbol of the native library.
    """
    underlying_type = typ.underlying()
    underlying = lowerer.lower(underlying_type) if underlying_type is not None else None
    spec = CEnumSpec(tag=typ.tag(), underlying=underlying, **decorations(base))

    rule = lowerer.rule_for(ConstScope.ENUM)
    for enumerator in typ.enumerators():
        if enumerator.value is None:
            raise MissingEnumValueError(
                f"Enumerator '{enumerator.name}' has no value",
                location=enumerator.location,
            )

        value, expression = enumerator.value, None
        if rule is not ConstRule.VALUE:
            # EXPAND has no expansion of its own yet
            value, expression = None, f"{lowerer.foreign_prefix}{enumerator.name}"

        spec.members.append(CDecl(
            name=enumerator.name,
            spec=promote_enum_value(enumerator.value, underlying),
            location=enumerator.location,
            value=value,
            expression=expression,
        ))
        lowerer.state.register_constant(enumerator.name, enumerator.value, expression)

    return spec


def build_function(lowerer: "TypeLowerer", base: CType, typ: NativeType, depth: int) -> CFunctionSpec:
    """Lower a function type: result, parameters and variadic flag."""
    # const belongs to the result type, not the function
    spec = CFunctionSpec(raw=typ.declarator().name, **decorations(base, with_const=False))
    if depth > lowerer.max_depth:
        logger.debug("Depth cutoff at function %s", spec.raw or "<abstract>")
        return spec

    result = typ.result()
    if result.kind() is not NativeKind.VOID:
        spec.returns = lowerer.lower(result, depth + 1, is_return=True)

    for param in typ.parameters():
        spec.params.append(CDecl(
            name=param.name,
            spec=lowerer.lower(param.type, depth + 1),
            location=param.location,
        ))
    spec.variadic = typ.is_variadic()
    return spec
