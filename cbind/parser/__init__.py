"""C parsing layer: declarator chains and the libclang adapter."""

from .declarator import (
    Declarator,
    DirectCase,
    DirectDeclarator,
    apply_suffix,
    identifier_of,
)
from .native import (
    ExternalCase,
    ExternalDeclaration,
    InitDeclarator,
    Initializer,
    NativeDeclaration,
    NativeDeclarator,
    NativeEnumerator,
    NativeKind,
    NativeType,
    NativeUnit,
    Specifier,
    build_declarator,
    constant_value,
)
from .clang_parser import ClangParser

__all__ = [
    "ClangParser",
    "Declarator",
    "DirectCase",
    "DirectDeclarator",
    "ExternalCase",
    "ExternalDeclaration",
    "InitDeclarator",
    "Initializer",
    "NativeDeclaration",
    "NativeDeclarator",
    "NativeEnumerator",
    "NativeKind",
    "NativeType",
    "NativeUnit",
    "Specifier",
    "apply_suffix",
    "build_declarator",
    "constant_value",
    "identifier_of",
]
