"""
Translator state.

Everything a translation pass accumulates: the public declaration list, the
typedef registry, the tag registry, and the constant maps enumerators and
initialized declarations are recorded into.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Optional

from ..ir.c_types import CDecl, CEnumSpec, CFunctionSpec, CStructSpec, CType


@dataclass
class TranslatorState:
    """
    Output of a translation pass.

    Attributes:
        declares: Public (non-static, non-typedef) declarations in source order
        typedefs: Typedef declarations in source order
        typedef_names: Names of everything in ``typedefs``
        tags: "struct X" / "union X" / "enum X" to the fullest spec seen
        value_map: Constant name to its resolved value
        expr_map: Constant name to its emitted expression
    """
    declares: list[CDecl] = field(default_factory=list)
    typedefs: list[CDecl] = field(default_factory=list)
    typedef_names: set[str] = field(default_factory=set)
    tags: dict[str, CType] = field(default_factory=dict)
    value_map: dict[str, Any] = field(default_factory=dict)
    expr_map: dict[str, Optional[str]] = field(default_factory=dict)

    def is_typedef(self, name: str) -> bool:
        return name in self.typedef_names

    def add_typedef(self, decl: CDecl) -> bool:
        """Register a typedef; returns False if the name is already known."""
        if decl.name in self.typedef_names:
            return False
        self.typedefs.append(decl)
        self.typedef_names.add(decl.name)
        return True

    def register_constant(self, name: str, value: Any, expression: Optional[str]) -> None:
        self.value_map[name] = value
        self.expr_map[name] = expression

    def register_tags_of(self, spec: Optional[CType]) -> None:
        """Record every tagged struct, union and enum reachable from ``spec``."""
        if spec is None:
            return
        if isinstance(spec, CStructSpec):
            if spec.tag:
                self._register_tag(f"{spec.keyword} {spec.tag}", spec, len(spec.members))
            for member in spec.members:
                self.register_tags_of(member.spec)
        elif isinstance(spec, CEnumSpec):
            if spec.tag:
                self._register_tag(f"enum {spec.tag}", spec, len(spec.members))
        elif isinstance(spec, CFunctionSpec):
            self.register_tags_of(spec.returns)
            for param in spec.params:
                self.register_tags_of(param.spec)

    def _register_tag(self, key: str, spec: CType, size: int) -> None:
        known = self.tags.get(key)
        if known is not None and len(known.members) >= size:
            return
        # store the tag's definition, not this occurrence
        self.tags[key] = replace(
            spec, const=False, pointers=0, outer_arr=[], inner_arr=[], typedef="",
        )
