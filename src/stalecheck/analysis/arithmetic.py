"""Restricted arithmetic grammar for constant folding.

Audited source text is never handed to a general-purpose interpreter.
This module accepts numeric literals, ``+ - * /``, unary sign and
parentheses, and nothing else.

Grammar::

    expr    → term (('+' | '-') term)*
    term    → factor (('*' | '/') factor)*
    factor  → ('+' | '-') factor | NUMBER | '(' expr ')'
    NUMBER  → digit (digit | '_')* ('.' digit (digit | '_')*)?
"""

from __future__ import annotations

import enum
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import cast

from stalecheck.errors import ArithmeticExpressionError, ArithmeticSyntaxError

Number = int | float

_ALLOWED_TEXT = re.compile(r"^[0-9_.+\-*/()\s]+$")
_DECIMAL_LITERAL = re.compile(r"^[0-9][0-9_]*(\.[0-9_]*)?([eE][+-]?[0-9_]+)?$")
_LEADING_DOT_LITERAL = re.compile(r"^\.[0-9][0-9_]*([eE][+-]?[0-9_]+)?$")


def is_arithmetic_text(text: str) -> bool:
    """True if ``text`` only uses the grammar's alphabet."""
    return bool(_ALLOWED_TEXT.match(text))


def normalize(value: Number) -> Number:
    """Collapse integral floats to int so 120000.0 reports as 120000."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def parse_number(text: str) -> Number | None:
    """Parse a JS numeric literal; ``None`` if it is not one."""
    literal = text.strip().replace("_", "")
    if literal.endswith("n"):  # BigInt
        literal = literal[:-1]
    if not literal:
        return None
    try:
        lowered = literal.lower()
        if lowered.startswith(("0x", "0o", "0b")):
            return int(literal, 0)
        if len(literal) > 1 and literal[0] == "0" and literal.isdigit():
            # legacy octal (017) unless it contains 8 or 9
            if any(d in literal for d in "89"):
                return int(literal, 10)
            return int(literal, 8)
        if _DECIMAL_LITERAL.match(literal) or _LEADING_DOT_LITERAL.match(literal):
            if any(c in lowered for c in ".e"):
                return normalize(float(literal))
            return int(literal, 10)
    except ValueError:
        return None
    return None


def _divide(left: Number, right: Number) -> Number:
    if right == 0:
        raise ArithmeticExpressionError("division by zero")
    if isinstance(left, int) and isinstance(right, int) and left % right == 0:
        return left // right
    return left / right


OPERATORS: dict[str, Callable[[Number, Number], Number]] = {
    "+": lambda a, b: a + b,
    "-": lambda a, b: a - b,
    "*": lambda a, b: a * b,
    "/": _divide,
}


def apply_operator(operator: str, left: Number, right: Number) -> Number:
    """Apply one of the grammar's binary operators."""
    func = OPERATORS.get(operator)
    if func is None:
        raise ArithmeticExpressionError(f"unsupported operator {operator!r}")
    return normalize(func(left, right))


# ---------------------------------------------------------------------------
# Tokeniser
# ---------------------------------------------------------------------------


class TokType(enum.Enum):
    NUMBER = "NUMBER"
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    LPAREN = "("
    RPAREN = ")"
    EOF = "EOF"


@dataclass
class Tok:
    type: TokType
    value: Number | str | None
    pos: int


_ONE_CHAR_TOKENS = {
    "+": TokType.PLUS,
    "-": TokType.MINUS,
    "*": TokType.STAR,
    "/": TokType.SLASH,
    "(": TokType.LPAREN,
    ")": TokType.RPAREN,
}


def tokenize(text: str) -> list[Tok]:
    """Split ``text`` into tokens, ending with EOF."""
    tokens: list[Tok] = []
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]
        if ch.isspace():
            i += 1
            continue

        if ch.isdigit() or (ch == "." and i + 1 < n and text[i + 1].isdigit()):
            start = i
            while i < n and (text[i].isdigit() or text[i] in "._"):
                i += 1
            literal = text[start:i]
            value = parse_number(literal)
            if value is None or literal.endswith("_"):
                raise ArithmeticSyntaxError(
                    f"Invalid number: {literal}", text, start
                )
            tokens.append(Tok(TokType.NUMBER, value, start))
            continue

        tok_type = _ONE_CHAR_TOKENS.get(ch)
        if tok_type is not None:
            tokens.append(Tok(tok_type, ch, i))
            i += 1
            continue

        raise ArithmeticSyntaxError(f"Unexpected character: {ch!r}", text, i)

    tokens.append(Tok(TokType.EOF, None, n))
    return tokens


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NumberNode:
    value: Number


@dataclass(frozen=True)
class UnaryNode:
    operator: str
    operand: ExprNode


@dataclass(frozen=True)
class BinaryNode:
    operator: str
    left: ExprNode
    right: ExprNode


ExprNode = NumberNode | UnaryNode | BinaryNode


class _Parser:
    """Recursive descent parser over the token list."""

    def __init__(self, tokens: list[Tok], text: str):
        self._tokens = tokens
        self._text = text
        self._pos = 0

    def _peek(self) -> Tok:
        return self._tokens[self._pos]

    def _advance(self) -> Tok:
        tok = self._tokens[self._pos]
        self._pos += 1
        return tok

    def _at(self, *types: TokType) -> bool:
        return self._peek().type in types

    def parse(self) -> ExprNode:
        node = self._parse_expr()
        if not self._at(TokType.EOF):
            tok = self._peek()
            raise ArithmeticSyntaxError(
                f"Unexpected token: {tok.value!r}", self._text, tok.pos
            )
        return node

    def _parse_expr(self) -> ExprNode:
        node = self._parse_term()
        while self._at(TokType.PLUS, TokType.MINUS):
            op = self._advance().type.value
            node = BinaryNode(op, node, self._parse_term())
        return node

    def _parse_term(self) -> ExprNode:
        node = self._parse_factor()
        while self._at(TokType.STAR, TokType.SLASH):
            op = self._advance().type.value
            node = BinaryNode(op, node, self._parse_factor())
        return node

    def _parse_factor(self) -> ExprNode:
        tok = self._peek()
        if tok.type in (TokType.PLUS, TokType.MINUS):
            self._advance()
            return UnaryNode(tok.type.value, self._parse_factor())
        if tok.type == TokType.NUMBER:
            self._advance()
            return NumberNode(cast(Number, tok.value))
        if tok.type == TokType.LPAREN:
            self._advance()
            node = self._parse_expr()
            if not self._at(TokType.RPAREN):
                raise ArithmeticSyntaxError(
                    "Expected ')'", self._text, self._peek().pos
                )
            self._advance()
            return node
        raise ArithmeticSyntaxError(
            f"Unexpected token: {tok.value!r}", self._text, tok.pos
        )


def parse_arithmetic(text: str) -> ExprNode:
    """Parse ``text`` into an expression tree."""
    return _Parser(tokenize(text), text).parse()


def evaluate_node(node: ExprNode) -> Number:
    if isinstance(node, NumberNode):
        return node.value
    if isinstance(node, UnaryNode):
        value = evaluate_node(node.operand)
        return -value if node.operator == "-" else value
    return apply_operator(
        node.operator, evaluate_node(node.left), evaluate_node(node.right)
    )


def evaluate_arithmetic(text: str) -> Number:
    """Tokenize, parse and evaluate an arithmetic expression.

    Raises :class:`ArithmeticExpressionError` (or its syntax subclass) on
    malformed input or division by zero.
    """
    return normalize(evaluate_node(parse_arithmetic(text)))
