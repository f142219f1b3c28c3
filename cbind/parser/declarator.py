"""
C declarator chains.

A declarator is the part of a declaration that names the entity and shapes
its pointer/array/function structure, independent of the base specifier:

    int (*handlers[4])(int code);
        ^^^^^^^^^^^^^^^^^^^^^^^^ declarator, identifier "handlers"

The grammar is kept as in C: a ``Declarator`` is a pointer prefix over a
``DirectDeclarator``, which is either an identifier, a parenthesized
declarator, or an array/parameter-list suffix applied to another direct
declarator.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class DirectCase(Enum):
    """Production used by a direct declarator."""
    IDENTIFIER = "identifier"
    PAREN = "paren"
    ARRAY = "array"
    PARAMS = "params"


@dataclass
class Declarator:
    """Pointer prefix applied to a direct declarator."""
    pointers: int
    direct: DirectDeclarator

    @property
    def name(self) -> str:
        return identifier_of(self.direct)

    def __str__(self) -> str:
        return "*" * self.pointers + str(self.direct)


@dataclass
class DirectDeclarator:
    """
    One link of a declarator chain.

    IDENTIFIER uses ``token`` (None for abstract declarators), PAREN uses
    ``declarator``, ARRAY and PARAMS use ``operand``. ARRAY keeps its bound
    in ``size``, None when the bound is not a known constant.
    """
    case: DirectCase
    token: Optional[str] = None
    declarator: Optional[Declarator] = None
    operand: Optional[DirectDeclarator] = None
    size: Optional[int] = None

    def __str__(self) -> str:
        if self.case is DirectCase.IDENTIFIER:
            return self.token or ""
        if self.case is DirectCase.PAREN:
            return f"({self.declarator})"
        if self.case is DirectCase.ARRAY:
            return f"{self.operand}[{'' if self.size is None else self.size}]"
        return f"{self.operand}()"


def identifier_of(dd: DirectDeclarator) -> str:
    """
    Return the identifier declared by a direct declarator chain.

    Abstract declarators (unnamed parameters, type names) yield "".
    """
    if dd.case is DirectCase.IDENTIFIER:
        return dd.token or ""
    if dd.case is DirectCase.PAREN:
        # void (*name)(int): the name lives inside the parentheses
        return identifier_of(dd.declarator.direct)
    return identifier_of(dd.operand)


def apply_suffix(decl: Declarator, suffix: DirectDeclarator) -> Declarator:
    """
    Apply an array or parameter-list suffix to a declarator.

    Suffixes bind tighter than pointers, so a declarator that already has a
    pointer prefix is parenthesized first.
    """
    direct = decl.direct
    if decl.pointers:
        direct = DirectDeclarator(DirectCase.PAREN, declarator=decl)
    suffix.operand = direct
    return Declarator(0, suffix)
