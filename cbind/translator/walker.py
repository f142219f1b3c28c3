"""
Declaration walker.

Walks a translation unit's top-level declarations in source order, lowers
each declarator, and sorts the results into the translator state:

- static declarations have internal linkage and are dropped
- typedefs go to the typedef registry
- everything else is public API and goes to ``declares``
"""

from __future__ import annotations

import logging
from typing import Optional

from ..ir.c_types import CDecl, ConstRule, ConstScope
from ..parser.native import ExternalCase, InitDeclarator, NativeDeclaration, NativeUnit
from .lowering import TypeLowerer
from .state import TranslatorState

logger = logging.getLogger("cbind.translator")


class Translator:
    """
    Lowers a translation unit into declarations and constant maps.

    Example:
        >>> unit = ClangParser().parse_source("typedef int handle_t;")
        >>> state = Translator().walk(unit)
        >>> [d.name for d in state.typedefs]
        ['handle_t']
    """

    def __init__(
        self,
        const_rules: Optional[dict[ConstScope, ConstRule]] = None,
        foreign_prefix: str = "C.",
        state: Optional[TranslatorState] = None,
    ):
        self.state = state if state is not None else TranslatorState()
        self.lowerer = TypeLowerer(self.state, const_rules, foreign_prefix)

    @classmethod
    def from_config(cls, config) -> "Translator":
        """Create a translator from a ``TranslatorConfig``."""
        return cls(
            const_rules=config.constants.rules,
            foreign_prefix=config.constants.foreign_prefix,
        )

    def walk(self, unit: NativeUnit) -> TranslatorState:
        for external in unit.external_declarations():
            if external.case is ExternalCase.FUNCTION_DEFINITION:
                logger.debug("Skipping function definition %s", external.cursor.spelling)
                continue

            for decl in self.declarations_of(external.declaration):
                self.state.register_tags_of(decl.spec)
                self._classify(decl)

        return self.state

    def declarations_of(self, declaration: NativeDeclaration) -> list[CDecl]:
        """Lower every declarator of a declaration independently."""
        if not declaration.init_declarators:
            # struct S {...};  enum E {...};
            native = declaration.declarator()
            if native is None:
                return []
            return [CDecl(name="", spec=self.lowerer.lower(native.type), location=native.location)]

        return [self._lower_declarator(init) for init in declaration.init_declarators]

    def _lower_declarator(self, init: InitDeclarator) -> CDecl:
        native = init.declarator
        spec = self.lowerer.lower(native.type)

        value = expression = None
        if init.initializer is not None:
            expression = init.initializer.expression
            value = init.initializer.value(self.state.value_map.get)
            self.state.register_constant(native.name, value, expression)

        return CDecl(
            name=native.name,
            spec=spec,
            location=native.location,
            is_typedef=native.specifier.is_typedef,
            is_static=native.specifier.is_static,
            value=value,
            expression=expression,
        )

    def _classify(self, decl: CDecl) -> None:
        if decl.is_static:
            logger.debug("Dropping static declaration %s", decl.name)
            return

        if decl.is_typedef:
            if not self.state.add_typedef(decl):
                logger.debug("Skipping repeated typedef %s", decl.name)
            return

        self.state.declares.append(decl)
