"""
Tests for constant initializer evaluation.
"""

import pytest

from clang.cindex import CursorKind, TokenKind

from cbind.parser.native import (
    constant_value,
    parse_char_literal,
    parse_float_literal,
    parse_int_literal,
    parse_string_literal,
)


class FakeToken:
    def __init__(self, spelling, kind=TokenKind.LITERAL):
        self.spelling = spelling
        self.kind = kind


class FakeCursor:
    """Just enough of a cursor for expression evaluation."""

    def __init__(self, kind, tokens=(), children=(), referenced=None, spelling="", enum_value=None):
        self.kind = kind
        self._tokens = tokens
        self._children = children
        self.referenced = referenced
        self.spelling = spelling
        self.enum_value = enum_value

    def get_tokens(self):
        return iter(self._tokens)

    def get_children(self):
        return iter(self._children)


def literal(kind, text):
    return FakeCursor(kind, tokens=[FakeToken(text)])


def var_ref(name):
    target = FakeCursor(CursorKind.VAR_DECL, spelling=name)
    return FakeCursor(CursorKind.DECL_REF_EXPR, referenced=target, spelling=name)


class TestLiteralParsing:
    """Test literal token parsing."""

    @pytest.mark.parametrize("text,value", [
        ("42", 42),
        ("0", 0),
        ("0x1f", 31),
        ("0X1F", 31),
        ("017", 15),
        ("0b101", 5),
        ("10UL", 10),
        ("7ull", 7),
    ])
    def test_integers(self, text, value):
        """Test integer literal forms."""
        assert parse_int_literal(text) == value

    def test_integer_from_macro_name(self):
        """Test that a non-literal token is not a value."""
        assert parse_int_literal("BUFFER_SIZE") is None

    @pytest.mark.parametrize("text,value", [
        ("1.5", 1.5),
        ("2.0f", 2.0),
        ("1e3", 1000.0),
        ("0x1p4", 16.0),
        ("3.25L", 3.25),
    ])
    def test_floats(self, text, value):
        """Test floating literal forms."""
        assert parse_float_literal(text) == value

    @pytest.mark.parametrize("text,value", [
        ("'a'", 97),
        ("'\\n'", 10),
        ("'\\0'", 0),
        ("L'x'", 120),
    ])
    def test_chars(self, text, value):
        """Test character literal forms."""
        assert parse_char_literal(text) == value

    def test_multichar(self):
        """Test that multi-character constants are not folded."""
        assert parse_char_literal("'ab'") is None

    def test_string_concatenation(self):
        """Test adjacent string literals."""
        assert parse_string_literal(['"foo"', '"bar\\n"']) == "foobar\n"


@pytest.mark.usefixtures("requires_libclang")
class TestConstantValue:
    """Test expression evaluation over cursors."""

    def test_integer(self):
        """Test an integer literal cursor."""
        assert constant_value(literal(CursorKind.INTEGER_LITERAL, "12")) == 12

    def test_implicit_cast(self):
        """Test that wrapper expressions are transparent."""
        inner = literal(CursorKind.INTEGER_LITERAL, "12")
        cursor = FakeCursor(CursorKind.UNEXPOSED_EXPR, children=[inner])
        assert constant_value(cursor) == 12

    def test_unary_minus(self):
        """Test a negated literal."""
        operand = literal(CursorKind.FLOATING_LITERAL, "2.5")
        cursor = FakeCursor(
            CursorKind.UNARY_OPERATOR,
            tokens=[FakeToken("-", TokenKind.PUNCTUATION), FakeToken("2.5")],
            children=[operand],
        )
        assert constant_value(cursor) == -2.5

    def test_complement_of_float(self):
        """Test that ~ only applies to integers."""
        operand = literal(CursorKind.FLOATING_LITERAL, "2.5")
        cursor = FakeCursor(
            CursorKind.UNARY_OPERATOR,
            tokens=[FakeToken("~", TokenKind.PUNCTUATION), FakeToken("2.5")],
            children=[operand],
        )
        assert constant_value(cursor) is None

    def test_enumerator_reference(self):
        """Test a reference to an enumeration constant."""
        target = FakeCursor(CursorKind.ENUM_CONSTANT_DECL, spelling="GREEN", enum_value=5)
        cursor = FakeCursor(CursorKind.DECL_REF_EXPR, referenced=target)
        assert constant_value(cursor) == 5

    def test_variable_reference(self):
        """Test a reference resolved through the value lookup."""
        cursor = FakeCursor(CursorKind.UNEXPOSED_EXPR, children=[var_ref("base")])
        assert constant_value(cursor, {"base": 4}.get) == 4

    def test_variable_reference_without_lookup(self):
        """Test an unresolvable reference."""
        assert constant_value(var_ref("base")) is None
        assert constant_value(var_ref("base"), {}.get) is None

    def test_unsupported_expression(self):
        """Test that other expressions are not constant-foldable."""
        lhs = literal(CursorKind.INTEGER_LITERAL, "1")
        rhs = literal(CursorKind.INTEGER_LITERAL, "2")
        cursor = FakeCursor(CursorKind.BINARY_OPERATOR, children=[lhs, rhs])
        assert constant_value(cursor) is None
