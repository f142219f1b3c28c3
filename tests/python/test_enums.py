"""
Tests for enum lowering and constant resolution.
"""

import pytest

from conftest import find_decl
from cbind.errors import MissingEnumValueError
from cbind.ir import BaseKind, CEnumSpec, ConstRule, ConstScope, CTypeSpec
from cbind.parser.native import NativeEnumerator, NativeType
from cbind.translator import promote_enum_value


COLOR = "enum Color { RED, GREEN = 5, BLUE };"


def color_spec(state):
    tag_only = [d for d in state.declares if d.name == ""]
    assert len(tag_only) == 1
    return tag_only[0].spec


class TestValueRule:
    """Test enums under the VALUE rule."""

    def test_members(self, translate):
        """Test enumerator values in declaration order."""
        spec = color_spec(translate(COLOR))
        assert isinstance(spec, CEnumSpec)
        assert spec.tag == "Color"
        assert [(m.name, m.value) for m in spec.members] == [
            ("RED", 0), ("GREEN", 5), ("BLUE", 6),
        ]
        assert all(m.expression is None for m in spec.members)

    def test_constant_maps(self, translate):
        """Test that every enumerator is registered."""
        state = translate(COLOR)
        assert state.value_map == {"RED": 0, "GREEN": 5, "BLUE": 6}
        assert state.expr_map == {"RED": None, "GREEN": None, "BLUE": None}

    def test_member_types(self, translate):
        """Test that small values are emitted as int."""
        spec = color_spec(translate(COLOR))
        for member in spec.members:
            assert isinstance(member.spec, CTypeSpec)
            assert member.spec.base is BaseKind.INT
            assert not member.spec.unsigned

    def test_underlying(self, translate):
        """Test that the enum records its representation."""
        spec = color_spec(translate(COLOR))
        assert isinstance(spec.underlying, CTypeSpec)
        assert spec.underlying.base is BaseKind.INT

    def test_member_locations(self, translate):
        """Test enumerator source positions."""
        spec = color_spec(translate("enum Color {\n  RED,\n  GREEN\n};"))
        assert [m.location.line for m in spec.members] == [2, 3]

    def test_use_site(self, translate):
        """Test an enum-typed declaration."""
        state = translate(COLOR + "\nenum Color current;")
        spec = find_decl(state.declares, "current").spec
        assert spec.tag == "Color"
        assert len(spec.members) == 3

    def test_typedef_alias(self, translate):
        """Test that a typedef'd enum takes the alias."""
        state = translate("typedef enum { OFF, ON } switch_t;\nswitch_t power;")
        spec = find_decl(state.declares, "power").spec
        assert spec.typedef == "switch_t"
        assert spec.tag == "switch_t"
        assert state.value_map == {"OFF": 0, "ON": 1}

    def test_anonymous_enum(self, translate):
        """Test an anonymous enum used for constants only."""
        state = translate("enum { LIMIT = 16 };")
        assert state.value_map == {"LIMIT": 16}
        assert color_spec(state).tag == ""

    def test_tag_registered(self, translate):
        """Test that the enum lands in the tag registry."""
        state = translate(COLOR)
        assert "enum Color" in state.tags
        assert len(state.tags["enum Color"].members) == 3


class TestForeignAliasRule:
    """Test enums emitted as references to the native library."""

    @pytest.mark.parametrize("rule", [ConstRule.FOREIGN_ALIAS, ConstRule.EXPAND])
    def test_members(self, translate, rule):
        """Test that members carry the reference instead of the value."""
        state = translate(COLOR, const_rules={ConstScope.ENUM: rule})
        spec = color_spec(state)
        assert [(m.value, m.expression) for m in spec.members] == [
            (None, "C.RED"), (None, "C.GREEN"), (None, "C.BLUE"),
        ]

    def test_constant_maps(self, translate):
        """Test that the value map still holds the numbers."""
        state = translate(COLOR, const_rules={ConstScope.ENUM: ConstRule.FOREIGN_ALIAS})
        assert state.value_map == {"RED": 0, "GREEN": 5, "BLUE": 6}
        assert state.expr_map == {"RED": "C.RED", "GREEN": "C.GREEN", "BLUE": "C.BLUE"}

    def test_prefix(self, translate):
        """Test a custom reference prefix."""
        state = translate(
            COLOR,
            const_rules={ConstScope.ENUM: ConstRule.FOREIGN_ALIAS},
            foreign_prefix="lib.",
        )
        assert state.expr_map["GREEN"] == "lib.GREEN"


class TestPromotion:
    """Test the scalar type picked for enumerator values."""

    def test_wide_enum(self, translate):
        """Test int, unsigned int and long long promotion."""
        source = "enum Wide { W_NEG = -1, W_UINT = 0x80000000, W_LL = 0x100000000 };"
        spec = color_spec(translate(source))
        neg, uint, wide = (m.spec for m in spec.members)
        assert neg.base is BaseKind.INT and not neg.unsigned
        assert uint.base is BaseKind.INT and uint.unsigned
        assert wide.base is BaseKind.LONG and not wide.unsigned

    @pytest.mark.parametrize("value,base,unsigned", [
        (0, BaseKind.INT, False),
        (-(2 ** 31), BaseKind.INT, False),
        (2 ** 31, BaseKind.INT, True),
        (2 ** 32 - 1, BaseKind.INT, True),
        (2 ** 32, BaseKind.LONG, False),
        (-(2 ** 63), BaseKind.LONG, False),
        (2 ** 63, BaseKind.LONG, True),
    ])
    def test_ladder(self, value, base, unsigned):
        """Test each rung of the promotion ladder."""
        spec = promote_enum_value(value)
        assert spec.base is base
        assert spec.unsigned == unsigned

    def test_fallback(self):
        """Test that unrepresentable values take the underlying type."""
        underlying = CTypeSpec(base=BaseKind.CHAR, unsigned=True, typedef="byte")
        spec = promote_enum_value(2 ** 64, underlying)
        assert spec.base is BaseKind.CHAR
        assert spec.unsigned
        assert spec.typedef == ""
        assert spec is not underlying

    def test_non_integer(self):
        """Test a non-integer value without an underlying type."""
        spec = promote_enum_value(1.5)
        assert spec.base is BaseKind.INT


class TestMissingValue:
    """Test enumerators the parser could not evaluate."""

    def test_missing_value_is_fatal(self, translate, monkeypatch):
        """Test that a valueless enumerator aborts the walk."""
        monkeypatch.setattr(
            NativeType,
            "enumerators",
            lambda self: [NativeEnumerator(name="BROKEN", value=None)],
        )
        with pytest.raises(MissingEnumValueError, match="BROKEN"):
            translate("enum Broken { BROKEN };")
