"""Locate and shallow-evaluate the project's ``STALE_TIMES`` table."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from stalecheck.analysis.evaluator import evaluate_literal
from stalecheck.analysis.parsing import (
    SourceUnit,
    named_children,
    node_text,
    property_key_name,
    unwrap_expression,
)
from stalecheck.analysis.schemas import ConstantTable
from stalecheck.analysis.symbols import iter_top_level_declarators
from stalecheck.constants import CONSTANT_TABLE_NAME

logger = logging.getLogger(__name__)


def resolve_constant_table(
    units: Iterable[SourceUnit],
    name: str = CONSTANT_TABLE_NAME,
) -> ConstantTable | None:
    """Build the constant table from the first unit that declares one.

    Units are visited in the order given. A declaration only counts when
    at least one of its properties is a numeric literal or literal
    arithmetic; properties referencing other identifiers are dropped.
    """
    for unit in units:
        entries = _entries_in(unit, name)
        if entries:
            logger.info(
                "Resolved %s from %s (%d entries)",
                name,
                unit.rel_path,
                len(entries),
            )
            return ConstantTable(name=name, file=unit.rel_path, entries=entries)

    logger.warning("No %s declaration found; references stay unresolved", name)
    return None


def _entries_in(unit: SourceUnit, name: str) -> dict[str, int | float]:
    entries: dict[str, int | float] = {}
    for declarator in iter_top_level_declarators(unit.root):
        ident = declarator.child_by_field_name("name")
        value = declarator.child_by_field_name("value")
        if ident is None or value is None or node_text(ident) != name:
            continue
        literal = unwrap_expression(value)
        if literal.type != "object":
            continue

        for prop in named_children(literal):
            if prop.type != "pair":
                continue
            key_node = prop.child_by_field_name("key")
            key = property_key_name(key_node) if key_node is not None else None
            if key is None:
                continue
            number = evaluate_literal(prop.child_by_field_name("value"))
            if number is None:
                logger.debug(
                    "%s.%s in %s is not a literal, dropped",
                    name,
                    key,
                    unit.rel_path,
                )
                continue
            entries[key] = number

        if entries:
            return entries
    return entries
