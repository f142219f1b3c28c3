"""
Scalar type table.

Maps native scalar kinds to their ``CTypeSpec`` form, and picks the scalar
type an enumerator's value is emitted with.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Optional

from ..ir.c_types import BaseKind, CTypeSpec
from ..parser.native import NativeKind


# =============================================================================
# Native Scalar Kinds
# =============================================================================

SCALAR_TYPES: dict[NativeKind, dict[str, Any]] = {
    NativeKind.VOID: {"base": BaseKind.VOID},

    # Character types
    NativeKind.CHAR: {"base": BaseKind.CHAR},
    NativeKind.SCHAR: {"base": BaseKind.CHAR, "signed": True},
    NativeKind.UCHAR: {"base": BaseKind.CHAR, "unsigned": True},

    # Integer types
    NativeKind.SHORT: {"base": BaseKind.INT, "short": True},
    NativeKind.USHORT: {"base": BaseKind.INT, "short": True, "unsigned": True},
    NativeKind.INT: {"base": BaseKind.INT},
    NativeKind.UINT: {"base": BaseKind.INT, "unsigned": True},
    NativeKind.LONG: {"base": BaseKind.INT, "long": True},
    NativeKind.ULONG: {"base": BaseKind.INT, "long": True, "unsigned": True},
    NativeKind.LONGLONG: {"base": BaseKind.LONG},
    NativeKind.ULONGLONG: {"base": BaseKind.LONG, "unsigned": True},

    # Floating point
    NativeKind.FLOAT: {"base": BaseKind.FLOAT},
    NativeKind.DOUBLE: {"base": BaseKind.DOUBLE},
    NativeKind.LONGDOUBLE: {"base": BaseKind.DOUBLE, "long": True},

    # Boolean
    NativeKind.BOOL: {"base": BaseKind.BOOL},

    # Complex
    NativeKind.FLOAT_COMPLEX: {"base": BaseKind.COMPLEX_FLOAT, "complex": True},
    NativeKind.DOUBLE_COMPLEX: {"base": BaseKind.COMPLEX_DOUBLE, "complex": True},
    NativeKind.LONGDOUBLE_COMPLEX: {
        "base": BaseKind.COMPLEX_DOUBLE, "complex": True, "long": True,
    },
}


def scalar_spec(kind: NativeKind) -> CTypeSpec:
    """Fresh, undecorated scalar spec for a native kind."""
    return CTypeSpec(**SCALAR_TYPES[kind])


# =============================================================================
# Enumerator Promotion
# =============================================================================

# Narrowest first; each entry is (min, max, kind)
PROMOTION_LADDER = [
    (-(2 ** 31), 2 ** 31 - 1, NativeKind.INT),
    (0, 2 ** 32 - 1, NativeKind.UINT),
    (-(2 ** 63), 2 ** 63 - 1, NativeKind.LONGLONG),
    (0, 2 ** 64 - 1, NativeKind.ULONGLONG),
]


def promote_enum_value(value: Any, fallback: Optional[CTypeSpec] = None) -> CTypeSpec:
    """
    Pick the narrowest scalar type that holds an enumerator value.

    Values that are not integers, or do not fit 64 bits, take the enum's
    underlying representation.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        for low, high, kind in PROMOTION_LADDER:
            if low <= value <= high:
                return scalar_spec(kind)
    if fallback is None:
        return scalar_spec(NativeKind.INT)
    return replace(fallback, typedef="")
