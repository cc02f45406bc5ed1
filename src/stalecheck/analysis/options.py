"""Locate the ``staleTime`` expression in a call's options argument."""

from __future__ import annotations

import tree_sitter

from stalecheck.analysis.arithmetic import Number
from stalecheck.analysis.evaluator import ResolutionContext, evaluate
from stalecheck.analysis.parsing import (
    SourceUnit,
    named_children,
    node_text,
    unwrap_expression,
)
from stalecheck.analysis.symbols import DeclarationKey, find_property
from stalecheck.constants import STALE_TIME_OPTION


def extract_stale_time(
    node: tree_sitter.Node | None,
    unit: SourceUnit,
    context: ResolutionContext,
    visited: frozenset[DeclarationKey] = frozenset(),
) -> Number | None:
    """Resolve the staleTime carried by an options argument.

    - object literal: evaluate its ``staleTime`` property, if any
    - identifier: repeat on each declaration's initializer
    - anything else: evaluate the node itself
    """
    if node is None:
        return None
    node = unwrap_expression(node)

    if node.type == "object":
        expr = find_stale_time_expression(node)
        return evaluate(expr, unit, context) if expr is not None else None

    if node.type == "identifier":
        for declaration in context.definitions.definitions_of(unit, node):
            if declaration.key in visited:
                continue
            try:
                value = extract_stale_time(
                    declaration.initializer(),
                    declaration.unit,
                    context,
                    visited | {declaration.key},
                )
            except RecursionError:
                continue
            if value is not None:
                return value
        return None

    return evaluate(node, unit, context)


def find_stale_time_expression(
    literal: tree_sitter.Node,
) -> tree_sitter.Node | None:
    """The ``staleTime`` value expression in an object literal.

    ``{ staleTime }`` shorthand returns the shorthand identifier itself,
    which the evaluator resolves like any other identifier.
    """
    found: tree_sitter.Node | None = None
    pair = find_property(literal, STALE_TIME_OPTION)
    for element in named_children(literal):
        if element.type == "shorthand_property_identifier" and (
            node_text(element) == STALE_TIME_OPTION
        ):
            found = element
        elif element == pair:
            found = pair.child_by_field_name("value")
    return found
