"""Project symbol table: find the declarations an identifier refers to.

Identifiers are resolved by lexical scope inside their own file first,
then through ES ``import`` bindings into other files of the project
(relative specifiers and tsconfig ``paths``/``baseUrl`` aliases,
following ``export { x }``, ``export { x } from`` and ``export *``).
Anything that leads outside the analysed file set resolves to nothing.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

import tree_sitter

from stalecheck.analysis.parsing import (
    SourceUnit,
    named_children,
    node_text,
    property_key_name,
    string_literal_value,
    unwrap_expression,
)
from stalecheck.config import MODULE_RESOLUTION_EXTENSIONS
from stalecheck.ingestion.schemas import TsConfig
from stalecheck.ingestion.tsconfig import resolve_alias

logger = logging.getLogger(__name__)

DeclarationKey = tuple[str, int, int, str]

_SCOPE_NODE_TYPES = frozenset({
    "program",
    "statement_block",
    "class_body",
    "switch_body",
})
_DECLARATION_LIST_TYPES = frozenset({
    "lexical_declaration",
    "variable_declaration",
})
_JS_EXTENSIONS = frozenset({".js", ".jsx", ".mjs", ".cjs"})


@dataclass(frozen=True)
class Declaration:
    """A declaring node: variable declarator, object property or default export."""

    unit: SourceUnit
    node: tree_sitter.Node

    @property
    def key(self) -> DeclarationKey:
        return (
            self.unit.rel_path,
            self.node.start_byte,
            self.node.end_byte,
            self.node.type,
        )

    def initializer(self) -> tree_sitter.Node | None:
        """The value expression, with casts and parentheses removed."""
        value = self.node.child_by_field_name("value")
        return unwrap_expression(value) if value is not None else None


class DefinitionProvider(Protocol):
    """Anything that can answer "where is this identifier declared?"."""

    def definitions_of(
        self, unit: SourceUnit, node: tree_sitter.Node
    ) -> list[Declaration]: ...


@dataclass(frozen=True)
class _Binding:
    scope_start: int
    scope_end: int
    declaration: Declaration


@dataclass(frozen=True)
class _ImportBinding:
    specifier: str
    imported: str  # "default" for default imports


@dataclass
class _UnitTable:
    bindings: dict[str, list[_Binding]] = field(default_factory=dict)
    imports: dict[str, _ImportBinding] = field(default_factory=dict)
    # exported name → local name
    exports: dict[str, str] = field(default_factory=dict)
    default_export: Declaration | None = None
    # exported name → (specifier, imported name)
    reexports: dict[str, tuple[str, str]] = field(default_factory=dict)
    star_exports: list[str] = field(default_factory=list)


class SymbolIndex:
    """Hand-built symbol table over a fixed set of parsed units.

    Per-file tables are built lazily on first lookup and cached for the
    lifetime of the index.
    """

    def __init__(
        self,
        units: Iterable[SourceUnit],
        tsconfig: TsConfig | None = None,
    ) -> None:
        self._units = list(units)
        self._tsconfig = tsconfig
        self._by_path: dict[Path, SourceUnit] = {
            u.path.resolve(): u for u in self._units
        }
        self._tables: dict[str, _UnitTable] = {}

    def definitions_of(
        self, unit: SourceUnit, node: tree_sitter.Node
    ) -> list[Declaration]:
        """Declarations ``node`` (an identifier) may refer to.

        Innermost enclosing scope first. Returns an empty list when the
        name is unknown or imported from outside the project.
        """
        name = node_text(node)
        table = self._table(unit)

        local = [
            b for b in table.bindings.get(name, [])
            if b.scope_start <= node.start_byte
            and node.end_byte <= b.scope_end
        ]
        if local:
            local.sort(key=lambda b: b.scope_end - b.scope_start)
            return [b.declaration for b in local]

        binding = table.imports.get(name)
        if binding is None:
            return []
        target = self.resolve_module(unit, binding.specifier)
        if target is None:
            logger.debug(
                "Unresolved import %r in %s", binding.specifier, unit.rel_path
            )
            return []
        return self._exported(target, binding.imported, set())

    def resolve_module(
        self, unit: SourceUnit, specifier: str
    ) -> SourceUnit | None:
        """Map an import specifier to a unit of the project, if any."""
        if specifier.startswith("."):
            bases = [unit.path.resolve().parent / specifier]
        elif self._tsconfig is not None:
            bases = resolve_alias(self._tsconfig, specifier)
        else:
            return None

        for base in bases:
            for candidate in _module_candidates(base):
                target = self._by_path.get(candidate.resolve())
                if target is not None:
                    return target
        return None

    # -----------------------------------------------------------------

    def _exported(
        self,
        unit: SourceUnit,
        name: str,
        seen: set[tuple[str, str]],
    ) -> list[Declaration]:
        """Declarations behind an exported name, following re-exports."""
        marker = (unit.rel_path, name)
        if marker in seen:
            return []
        seen.add(marker)
        table = self._table(unit)

        if name == "default" and table.default_export is not None:
            return [table.default_export]

        local_name = table.exports.get(name)
        if local_name is not None:
            top_level = [
                b.declaration for b in table.bindings.get(local_name, [])
                if b.scope_start == unit.root.start_byte
                and b.scope_end == unit.root.end_byte
            ]
            if top_level:
                return top_level
            binding = table.imports.get(local_name)
            if binding is not None:
                target = self.resolve_module(unit, binding.specifier)
                if target is not None:
                    return self._exported(target, binding.imported, seen)
            return []

        reexport = table.reexports.get(name)
        if reexport is not None:
            target = self.resolve_module(unit, reexport[0])
            if target is not None:
                return self._exported(target, reexport[1], seen)
            return []

        for specifier in table.star_exports:
            target = self.resolve_module(unit, specifier)
            if target is None:
                continue
            found = self._exported(target, name, seen)
            if found:
                return found
        return []

    def _table(self, unit: SourceUnit) -> _UnitTable:
        table = self._tables.get(unit.rel_path)
        if table is None:
            table = _build_table(unit)
            self._tables[unit.rel_path] = table
        return table


def iter_top_level_declarators(
    root: tree_sitter.Node,
) -> Iterator[tree_sitter.Node]:
    """Variable declarators directly under the program, exported or not."""
    for child in root.named_children:
        statement = child
        if child.type == "export_statement":
            declaration = child.child_by_field_name("declaration")
            if declaration is None:
                continue
            statement = declaration
        if statement.type in _DECLARATION_LIST_TYPES:
            for declarator in statement.named_children:
                if declarator.type == "variable_declarator":
                    yield declarator


# ---------------------------------------------------------------------------
# Table construction
# ---------------------------------------------------------------------------


def _build_table(unit: SourceUnit) -> _UnitTable:
    table = _UnitTable()
    _collect_bindings(unit, table)
    for statement in unit.root.named_children:
        if statement.type == "import_statement":
            _collect_import(statement, table)
        elif statement.type == "export_statement":
            _collect_export(unit, statement, table)
    return table


def _collect_bindings(unit: SourceUnit, table: _UnitTable) -> None:
    """Record every variable declarator in the file with its scope."""
    stack = [unit.root]
    while stack:
        node = stack.pop()
        if node.type == "variable_declarator":
            _bind_declarator(unit, node, table)
        stack.extend(reversed(node.named_children))


def _bind_declarator(
    unit: SourceUnit, declarator: tree_sitter.Node, table: _UnitTable
) -> None:
    name = declarator.child_by_field_name("name")
    if name is None:
        return
    scope = _enclosing_scope(declarator)

    def bind(bound_name: str, declaration: Declaration) -> None:
        table.bindings.setdefault(bound_name, []).append(
            _Binding(scope.start_byte, scope.end_byte, declaration)
        )

    if name.type == "identifier":
        bind(node_text(name), Declaration(unit, declarator))
        return

    # const { a, b: c } = { a: 1, b: 2 } binds a and c to the matching pairs
    if name.type != "object_pattern":
        return
    value = declarator.child_by_field_name("value")
    if value is None:
        return
    literal = unwrap_expression(value)
    if literal.type != "object":
        return
    for element in named_children(name):
        if element.type == "shorthand_property_identifier_pattern":
            key = bound = node_text(element)
        elif element.type == "pair_pattern":
            key_node = element.child_by_field_name("key")
            target = element.child_by_field_name("value")
            if key_node is None or target is None or target.type != "identifier":
                continue
            key = property_key_name(key_node)
            bound = node_text(target)
        else:
            continue
        pair = find_property(literal, key) if key else None
        if pair is not None:
            bind(bound, Declaration(unit, pair))


def find_property(
    literal: tree_sitter.Node, key: str
) -> tree_sitter.Node | None:
    """The last ``pair`` in an object literal whose key is ``key``."""
    found = None
    for element in named_children(literal):
        if element.type != "pair":
            continue
        key_node = element.child_by_field_name("key")
        if key_node is not None and property_key_name(key_node) == key:
            found = element
    return found


def _enclosing_scope(node: tree_sitter.Node) -> tree_sitter.Node:
    current = node.parent
    while current is not None:
        if current.type in _SCOPE_NODE_TYPES:
            return current
        current = current.parent
    return node


def _collect_import(statement: tree_sitter.Node, table: _UnitTable) -> None:
    source = statement.child_by_field_name("source")
    specifier = string_literal_value(source) if source is not None else None
    if specifier is None:
        return
    for clause in named_children(statement):
        if clause.type != "import_clause":
            continue
        for part in named_children(clause):
            if part.type == "identifier":
                table.imports[node_text(part)] = _ImportBinding(
                    specifier, "default"
                )
            elif part.type == "named_imports":
                for spec in named_children(part):
                    if spec.type != "import_specifier":
                        continue
                    name = spec.child_by_field_name("name")
                    alias = spec.child_by_field_name("alias")
                    if name is None:
                        continue
                    local = node_text(alias if alias is not None else name)
                    table.imports[local] = _ImportBinding(
                        specifier, _export_name(name)
                    )


def _collect_export(
    unit: SourceUnit, statement: tree_sitter.Node, table: _UnitTable
) -> None:
    declaration = statement.child_by_field_name("declaration")
    if declaration is not None:
        if declaration.type in _DECLARATION_LIST_TYPES:
            for declarator in declaration.named_children:
                if declarator.type != "variable_declarator":
                    continue
                name = declarator.child_by_field_name("name")
                if name is not None and name.type == "identifier":
                    table.exports[node_text(name)] = node_text(name)
        return

    if statement.child_by_field_name("value") is not None:
        table.default_export = Declaration(unit, statement)
        return

    source = statement.child_by_field_name("source")
    specifier = string_literal_value(source) if source is not None else None
    clause = next(
        (c for c in named_children(statement) if c.type == "export_clause"),
        None,
    )
    if clause is None:
        is_namespace = any(
            c.type == "namespace_export" for c in named_children(statement)
        )
        if specifier is not None and not is_namespace:
            table.star_exports.append(specifier)
        return

    for spec in named_children(clause):
        if spec.type != "export_specifier":
            continue
        name = spec.child_by_field_name("name")
        alias = spec.child_by_field_name("alias")
        if name is None:
            continue
        exported = _export_name(alias if alias is not None else name)
        if specifier is None:
            table.exports[exported] = _export_name(name)
        else:
            table.reexports[exported] = (specifier, _export_name(name))


def _export_name(node: tree_sitter.Node) -> str:
    """Module export names may be identifiers or string literals."""
    value = string_literal_value(node)
    return value if value is not None else node_text(node)


def _module_candidates(base: Path) -> list[Path]:
    """Files an import specifier may point at, in lookup order."""
    candidates: list[Path] = []
    suffix = base.suffix
    if suffix in MODULE_RESOLUTION_EXTENSIONS:
        candidates.append(base)
        if suffix in _JS_EXTENSIONS:
            # ESM-style "./x.js" imports of TypeScript sources
            stem = base.with_suffix("")
            candidates.extend(
                stem.with_name(stem.name + ext)
                for ext in (".ts", ".tsx", ".mts", ".cts")
            )
    candidates.extend(
        base.with_name(base.name + ext) for ext in MODULE_RESOLUTION_EXTENSIONS
    )
    candidates.extend(
        base / f"index{ext}" for ext in MODULE_RESOLUTION_EXTENSIONS
    )
    return candidates
