"""Infer which policy entity a call fetches from its key argument.

Rules, first match wins:

1. array literal whose first element is a string naming an entity
2. string literal naming an entity
3. member access or call chain (``queryKeys.tasks.byWorkspace(id)``)
   containing an entity name as a whole identifier word
"""

from __future__ import annotations

import re
from collections.abc import Mapping

import tree_sitter

from stalecheck.analysis.parsing import (
    first_named_child,
    node_text,
    string_literal_value,
    unwrap_expression,
)
from stalecheck.analysis.policy import POLICY

_WORD = re.compile(r"[A-Za-z_$][\w$]*")
_CHAIN_NODE_TYPES = frozenset({"member_expression", "call_expression"})


def classify_entity(
    node: tree_sitter.Node | None,
    policy: Mapping[str, object] = POLICY,
) -> str | None:
    """Return the entity ``node`` refers to, or ``None``."""
    if node is None:
        return None
    node = unwrap_expression(node)

    if node.type == "array":
        first = first_named_child(node)
        if first is None:
            return None
        text = string_literal_value(unwrap_expression(first))
        return text if text in policy else None

    text = string_literal_value(node)
    if text is not None:
        return text if text in policy else None

    if node.type in _CHAIN_NODE_TYPES:
        words = set(_WORD.findall(node_text(node)))
        for entity in policy:
            if entity in words:
                return entity
    return None
