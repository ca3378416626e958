"""Constant and initializer expressions.

Expressions are rendered from the header's own tokens when possible, so
that ``NSFoo = 1 << 3`` keeps its shape in the bindings. Only a small,
safe subset of C is accepted; anything else makes the expression
unparseable and callers fall back to the evaluated value (enums) or drop
the declaration (variables).
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from headerbind.entity import Entity

_INTEGER = re.compile(r"^(0[xX][0-9a-fA-F]+|0[bB][01]+|[0-9]+)([uUlL]*)$")
_FLOAT = re.compile(r"^([0-9]+\.[0-9]*(?:[eE][+-]?[0-9]+)?|[0-9]+[eE][+-]?[0-9]+)[fFlL]?$")
_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_BINARY_OPERATORS = frozenset({"<<", ">>", "|", "&", "^", "+", "*", "/", "%"})
_UNARY_OPERATORS = frozenset({"-", "~"})

# Tokens that stop an expression (rest of a declaration)
_TERMINATORS = frozenset({",", ";", "}"})

_U64 = 1 << 64


@dataclass(frozen=True)
class Expr:
    """A rendered constant expression."""

    text: str

    def __str__(self) -> str:
        return self.text

    @classmethod
    def from_val(cls, value: int, is_signed: bool = True) -> Expr:
        """Render an evaluated integer.

        Negative values reported for unsigned types are wrapped into their
        unsigned 64-bit representation.
        """
        if not is_signed and value < 0:
            value += _U64
        return cls(str(value))

    @classmethod
    def parse_enum_constant(cls, entity: Entity) -> Expr | None:
        """Render the literal initializer of an enum constant.

        Returns None when the constant has no ``= ...`` initializer or the
        initializer uses syntax outside the supported subset.
        """
        tokens = entity.get_tokens()
        if "=" not in tokens:
            return None
        return cls.parse_tokens(tokens[tokens.index("=") + 1 :])

    @classmethod
    def parse_var(cls, entity: Entity) -> Expr | None:
        """Render a variable's initializer expression entity."""
        return cls.parse_tokens(entity.get_tokens())

    @classmethod
    def parse_tokens(cls, tokens: Sequence[str]) -> Expr | None:
        parts: list[str] = []
        depth = 0
        expect_operand = True
        # Set right after "(identifier)", which may be a cast
        maybe_cast = False

        for token in tokens:
            if token in _TERMINATORS and depth == 0:
                break
            if maybe_cast and token not in _BINARY_OPERATORS and token != ")":
                return None
            maybe_cast = False
            if token == "(":
                if not expect_operand:
                    # Function call
                    return None
                depth += 1
                parts.append("(")
            elif token == ")":
                if depth == 0 or expect_operand:
                    return None
                depth -= 1
                maybe_cast = len(parts) >= 2 and parts[-2] == "(" and bool(_IDENTIFIER.match(parts[-1]))
                parts.append(")")
            elif expect_operand and token in _UNARY_OPERATORS:
                parts.append("!" if token == "~" else "-")
            elif not expect_operand and (token in _BINARY_OPERATORS or token == "-"):
                parts.append(f" {token} ")
                expect_operand = True
            elif expect_operand and (m := _INTEGER.match(token)):
                parts.append(m.group(1))
                expect_operand = False
            elif expect_operand and _FLOAT.match(token):
                parts.append(token.rstrip("fFlL"))
                expect_operand = False
            elif expect_operand and _IDENTIFIER.match(token):
                parts.append(token)
                expect_operand = False
            else:
                return None

        if depth != 0 or expect_operand or not parts:
            return None
        return cls("".join(parts))
