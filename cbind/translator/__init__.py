"""Lowering of parsed C declarations into the C type IR."""

from .aggregates import build_enum, build_function, build_struct
from .lowering import MAX_DEPTH, TypeLowerer, typedef_alias
from .scalars import SCALAR_TYPES, promote_enum_value, scalar_spec
from .state import TranslatorState
from .walker import Translator

__all__ = [
    "MAX_DEPTH",
    "SCALAR_TYPES",
    "Translator",
    "TranslatorState",
    "TypeLowerer",
    "build_enum",
    "build_function",
    "build_struct",
    "promote_enum_value",
    "scalar_spec",
    "typedef_alias",
]
