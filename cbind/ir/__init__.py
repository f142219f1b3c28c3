"""C type IR: the lowered, target-agnostic declaration model."""

from .c_types import (
    BaseKind,
    CDecl,
    CEnumSpec,
    CFunctionSpec,
    ConstRule,
    ConstScope,
    CStructSpec,
    CType,
    CTypeSpec,
    SourceLocation,
    TypeFamily,
)

__all__ = [
    "BaseKind",
    "CDecl",
    "CEnumSpec",
    "CFunctionSpec",
    "ConstRule",
    "ConstScope",
    "CStructSpec",
    "CType",
    "CTypeSpec",
    "SourceLocation",
    "TypeFamily",
]
