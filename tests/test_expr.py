"""Tests for constant expression rendering."""

import pytest

from headerbind.entity import EntityKind, Node
from headerbind.expr import Expr


def _constant(*tokens: str) -> Node:
    return Node(EntityKind.ENUM_CONSTANT_DECL, tokens[0], tokens=list(tokens))


class TestFromVal:
    def test_signed(self):
        assert str(Expr.from_val(-1)) == "-1"

    def test_unsigned_wraps_negative(self):
        assert str(Expr.from_val(-1, is_signed=False)) == str(2**64 - 1)

    def test_unsigned_positive(self):
        assert str(Expr.from_val(4, is_signed=False)) == "4"


class TestParseEnumConstant:
    def test_without_initializer(self):
        assert Expr.parse_enum_constant(_constant("NSFoo")) is None

    def test_literal(self):
        assert Expr.parse_enum_constant(_constant("NSFoo", "=", "3")) == Expr("3")

    def test_shift(self):
        assert Expr.parse_enum_constant(_constant("NSFoo", "=", "1", "<<", "2")) == Expr("1 << 2")

    def test_stops_at_comma(self):
        assert Expr.parse_enum_constant(_constant("NSFoo", "=", "5", ",")) == Expr("5")

    def test_strips_integer_suffix(self):
        assert Expr.parse_enum_constant(_constant("NSFoo", "=", "1UL", "<<", "63")) == Expr("1 << 63")

    def test_references_other_constant(self):
        tokens = ("NSBoth", "=", "NSRead", "|", "NSWrite")
        assert Expr.parse_enum_constant(_constant(*tokens)) == Expr("NSRead | NSWrite")


class TestParseTokens:
    @pytest.mark.parametrize(
        ("tokens", "expected"),
        [
            (["42"], "42"),
            (["0x1F"], "0x1F"),
            (["-", "1"], "-1"),
            (["~", "0"], "!0"),
            (["(", "1", "<<", "4", ")"], "(1 << 4)"),
            (["1.5f"], "1.5"),
            (["A", "-", "B"], "A - B"),
        ],
    )
    def test_supported(self, tokens, expected):
        assert Expr.parse_tokens(tokens) == Expr(expected)

    @pytest.mark.parametrize(
        "tokens",
        [
            [],
            ["1", "<<"],
            ["(", "1"],
            ["1", ")"],
            ["foo", "(", "1", ")"],
            ["(", "NSUInteger", ")", "1"],
            ["@", "\"string\""],
            ["\"string\""],
        ],
    )
    def test_unsupported(self, tokens):
        assert Expr.parse_tokens(tokens) is None


class TestParseVar:
    def test_uses_initializer_tokens(self):
        initializer = Node(EntityKind.INTEGER_LITERAL, tokens=["10"])
        assert Expr.parse_var(initializer) == Expr("10")

    def test_string_literal_is_unsupported(self):
        initializer = Node(EntityKind.OBJC_STRING_LITERAL, tokens=["@", "\"x\""])
        assert Expr.parse_var(initializer) is None
