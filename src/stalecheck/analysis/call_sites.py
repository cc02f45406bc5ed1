"""Find calls to the monitored data-fetching wrappers."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

import tree_sitter

from stalecheck.analysis.parsing import (
    SourceUnit,
    line_of,
    named_children,
    node_text,
    unwrap_expression,
)
from stalecheck.constants import MONITORED_WRAPPERS


@dataclass(frozen=True)
class CallSite:
    """One monitored call, with its positional arguments."""

    file: str
    line: int
    callee_name: str
    arguments: tuple[tree_sitter.Node, ...]
    unit: SourceUnit

    @property
    def location(self) -> str:
        return f"{self.file}:{self.line}"

    @property
    def key_argument(self) -> tree_sitter.Node | None:
        return self.arguments[0] if self.arguments else None

    @property
    def options_argument(self) -> tree_sitter.Node | None:
        """``args[2]`` when present, else ``args[1]``.

        Positional only: a fetcher passed second is indistinguishable from
        an options object passed second.
        """
        if len(self.arguments) > 2:
            return self.arguments[2]
        if len(self.arguments) > 1:
            return self.arguments[1]
        return None


def scan_call_sites(
    unit: SourceUnit,
    wrappers: frozenset[str] = MONITORED_WRAPPERS,
) -> list[CallSite]:
    """Monitored calls in ``unit``, depth-first in source order."""
    sites: list[CallSite] = []
    for node in _walk(unit.root):
        if node.type != "call_expression":
            continue
        name = callee_name(node)
        if name is None or name not in wrappers:
            continue
        args_node = node.child_by_field_name("arguments")
        arguments = (
            tuple(named_children(args_node))
            if args_node is not None and args_node.type == "arguments"
            else ()
        )
        sites.append(
            CallSite(
                file=unit.rel_path,
                line=line_of(node),
                callee_name=name,
                arguments=arguments,
                unit=unit,
            )
        )
    return sites


def callee_name(call: tree_sitter.Node) -> str | None:
    """Identifier text, or the accessed member name for ``obj.fn()``."""
    func = call.child_by_field_name("function")
    if func is None:
        return None
    func = unwrap_expression(func)
    if func.type == "identifier":
        return node_text(func)
    if func.type == "member_expression":
        prop = func.child_by_field_name("property")
        return node_text(prop) if prop is not None else None
    return None


def _walk(root: tree_sitter.Node) -> Iterator[tree_sitter.Node]:
    """Pre-order traversal without recursion."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.named_children))
