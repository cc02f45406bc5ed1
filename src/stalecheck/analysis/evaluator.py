"""Resolve expression nodes to numbers without running the program.

Resolution rules, tried in order:

a. numeric literal → its value
b. ``+ - * /`` arithmetic (with parentheses and unary sign) → the
   restricted grammar in :mod:`stalecheck.analysis.arithmetic`; operands
   that are not literals are resolved recursively
c. ``STALE_TIMES.key`` / ``STALE_TIMES['key']`` → the constant table
d. identifier → its declarations' initializers, first resolvable wins
e. anything else → unresolved (``None``)

Evaluation is deterministic. The only state it touches is the memo in
the :class:`ResolutionContext`, which never changes a result.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

import tree_sitter

from stalecheck.analysis.arithmetic import (
    OPERATORS,
    Number,
    apply_operator,
    evaluate_arithmetic,
    is_arithmetic_text,
    parse_number,
)
from stalecheck.analysis.parsing import (
    SourceUnit,
    node_text,
    number_key,
    string_literal_value,
    unwrap_expression,
)
from stalecheck.analysis.schemas import ConstantTable
from stalecheck.analysis.symbols import DeclarationKey, DefinitionProvider
from stalecheck.constants import CONSTANT_TABLE_NAME
from stalecheck.errors import ArithmeticExpressionError, ArithmeticSyntaxError

logger = logging.getLogger(__name__)

_ARITHMETIC_NODE_TYPES = frozenset({"binary_expression", "unary_expression"})
_ACCESS_NODE_TYPES = frozenset({"member_expression", "subscript_expression"})
_IDENTIFIER_NODE_TYPES = frozenset({
    "identifier",
    "shorthand_property_identifier",
})


@dataclass
class ResolutionContext:
    """Per-run resolution state threaded through the evaluator.

    ``guard_hits`` counts cycle-guard skips; a value is only memoised
    when no skip happened while computing it, since a skipped candidate
    can make the result depend on the path taken to reach it.
    """

    constant_table: ConstantTable | None
    definitions: DefinitionProvider
    memo: dict[DeclarationKey, Number | None] = field(default_factory=dict)
    guard_hits: int = 0


def evaluate(
    node: tree_sitter.Node | None,
    unit: SourceUnit,
    context: ResolutionContext,
    visited: frozenset[DeclarationKey] = frozenset(),
) -> Number | None:
    """Resolve ``node`` (from ``unit``) to a number, or ``None``."""
    if node is None:
        return None
    node = unwrap_expression(node)
    kind = node.type

    if kind == "number":
        return parse_number(node_text(node))

    if kind in _ARITHMETIC_NODE_TYPES:
        return _fold(
            node,
            lambda operand: evaluate(operand, unit, context, visited),
        )

    if kind in _ACCESS_NODE_TYPES:
        return lookup_constant(node, context.constant_table)

    if kind in _IDENTIFIER_NODE_TYPES:
        return _follow_identifier(node, unit, context, visited)

    return None


def evaluate_literal(node: tree_sitter.Node | None) -> Number | None:
    """Shallow evaluation: numeric literals and literal arithmetic only."""
    if node is None:
        return None
    node = unwrap_expression(node)
    if node.type == "number":
        return parse_number(node_text(node))
    if node.type in _ARITHMETIC_NODE_TYPES:
        return _fold(node, evaluate_literal)
    return None


def lookup_constant(
    node: tree_sitter.Node, table: ConstantTable | None
) -> Number | None:
    """Resolve ``STALE_TIMES.key`` or ``STALE_TIMES['key']``."""
    receiver = node.child_by_field_name("object")
    if receiver is None:
        return None
    if node_text(unwrap_expression(receiver)) != CONSTANT_TABLE_NAME:
        return None

    if node.type == "member_expression":
        prop = node.child_by_field_name("property")
        key = node_text(prop) if prop is not None else None
    else:
        index = node.child_by_field_name("index")
        key = None
        if index is not None:
            index = unwrap_expression(index)
            key = string_literal_value(index)
            if key is None and index.type == "number":
                key = number_key(node_text(index))

    if table is None or key is None:
        return None
    return table.entries.get(key)


def _fold(
    node: tree_sitter.Node,
    resolve_operand: Callable[[tree_sitter.Node], Number | None],
) -> Number | None:
    """Evaluate an arithmetic node.

    Pure-literal text goes through the arithmetic grammar as a whole;
    otherwise each operand is resolved on its own and combined with the
    grammar's operator table.
    """
    text = node_text(node)
    try:
        if is_arithmetic_text(text):
            try:
                return evaluate_arithmetic(text)
            except ArithmeticSyntaxError:
                # e.g. an inline /* */ comment; fold the tree instead
                pass

        if node.type == "unary_expression":
            operator = node.child_by_field_name("operator")
            argument = node.child_by_field_name("argument")
            if operator is None or operator.type not in ("+", "-"):
                return None
            value = resolve_operand(argument) if argument is not None else None
            if value is None:
                return None
            return -value if operator.type == "-" else value

        operator = node.child_by_field_name("operator")
        if operator is None or operator.type not in OPERATORS:
            return None
        left_node = node.child_by_field_name("left")
        right_node = node.child_by_field_name("right")
        if left_node is None or right_node is None:
            return None
        left = resolve_operand(left_node)
        if left is None:
            return None
        right = resolve_operand(right_node)
        if right is None:
            return None
        return apply_operator(operator.type, left, right)
    except ArithmeticExpressionError as e:
        logger.debug("Unresolved arithmetic %r: %s", text, e)
        return None


def _follow_identifier(
    node: tree_sitter.Node,
    unit: SourceUnit,
    context: ResolutionContext,
    visited: frozenset[DeclarationKey],
) -> Number | None:
    """Resolve an identifier through its declarations, cycle-safe."""
    for declaration in context.definitions.definitions_of(unit, node):
        key = declaration.key
        if key in visited:
            context.guard_hits += 1
            continue

        if key in context.memo:
            value = context.memo[key]
        else:
            hits_before = context.guard_hits
            try:
                value = evaluate(
                    declaration.initializer(),
                    declaration.unit,
                    context,
                    visited | {key},
                )
            except RecursionError:
                # chain deeper than the interpreter stack; treated like a
                # guard skip so no partial result is memoised
                context.guard_hits += 1
                continue
            if context.guard_hits == hits_before:
                context.memo[key] = value

        if value is not None:
            return value
    return None
