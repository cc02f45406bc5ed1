"""Tests for the project symbol index."""

from __future__ import annotations

from pathlib import Path

import tree_sitter

from stalecheck.analysis.parsing import SourceUnit
from stalecheck.analysis.symbols import SymbolIndex, iter_top_level_declarators
from stalecheck.ingestion.schemas import TsConfig
from tests.conftest import parse_units, value_of


def _defs(index: SymbolIndex, unit: SourceUnit, node: tree_sitter.Node) -> list[str]:
    return [
        f"{d.unit.rel_path}:{d.node.type}:{d.node.text.decode()}"
        for d in index.definitions_of(unit, node)
    ]


def _initializers(index: SymbolIndex, unit: SourceUnit, name: str) -> list[str]:
    node = value_of(unit, name)
    out: list[str] = []
    for d in index.definitions_of(unit, node):
        init = d.initializer()
        out.append(init.text.decode() if init is not None else "")
    return out


class TestLocalScope:
    def test_top_level_binding(self) -> None:
        units = parse_units({"src/a.ts": "const y = 1;\nconst x = y;"})
        index = SymbolIndex(units)
        assert _initializers(index, units[0], "x") == ["1"]

    def test_block_binding_not_visible_outside(self) -> None:
        units = parse_units({
            "src/a.ts": "if (ok) {\n  const y = 1;\n}\nconst x = y;",
        })
        index = SymbolIndex(units)
        assert _initializers(index, units[0], "x") == []

    def test_innermost_first(self) -> None:
        units = parse_units({
            "src/a.ts": (
                "const y = 1;\n"
                "function f() {\n  const y = 2;\n  const x = y;\n}\n"
            ),
        })
        index = SymbolIndex(units)
        assert _initializers(index, units[0], "x") == ["2", "1"]

    def test_declaration_key_is_stable(self) -> None:
        units = parse_units({"src/a.ts": "const y = 1;\nconst x = y;"})
        index = SymbolIndex(units)
        node = value_of(units[0], "x")
        first = [d.key for d in index.definitions_of(units[0], node)]
        second = [d.key for d in index.definitions_of(units[0], node)]
        assert first == second
        assert first[0][0] == "src/a.ts"


class TestImports:
    def test_named_import_relative(self) -> None:
        units = parse_units({
            "src/lib/c.ts": "export const T = 10;",
            "src/a.ts": "import { T } from './lib/c';\nconst x = T;",
        })
        index = SymbolIndex(units)
        assert _initializers(index, units[1], "x") == ["10"]

    def test_default_import(self) -> None:
        units = parse_units({
            "src/lib/c.ts": "export default 5 * 1000;",
            "src/a.ts": "import ttl from './lib/c';\nconst x = ttl;",
        })
        index = SymbolIndex(units)
        assert _initializers(index, units[1], "x") == ["5 * 1000"]

    def test_export_clause(self) -> None:
        units = parse_units({
            "src/lib/c.ts": "const inner = 3;\nexport { inner as OUTER };",
            "src/a.ts": "import { OUTER } from './lib/c';\nconst x = OUTER;",
        })
        index = SymbolIndex(units)
        assert _initializers(index, units[1], "x") == ["3"]

    def test_reexport_and_star_export(self) -> None:
        units = parse_units({
            "src/lib/base.ts": "export const A = 1;\nexport const B = 2;",
            "src/lib/index.ts": (
                "export { A } from './base';\nexport * from './base';"
            ),
            "src/a.ts": (
                "import { A, B } from './lib';\nconst x = A;\nconst z = B;"
            ),
        })
        index = SymbolIndex(units)
        assert _initializers(index, units[2], "x") == ["1"]
        assert _initializers(index, units[2], "z") == ["2"]

    def test_js_extension_maps_to_ts_source(self) -> None:
        units = parse_units({
            "src/lib/c.ts": "export const T = 10;",
            "src/a.ts": "import { T } from './lib/c.js';\nconst x = T;",
        })
        index = SymbolIndex(units)
        assert _initializers(index, units[1], "x") == ["10"]

    def test_external_package_unresolved(self) -> None:
        units = parse_units({
            "src/a.ts": "import { T } from 'some-package';\nconst x = T;",
        })
        index = SymbolIndex(units)
        assert _initializers(index, units[0], "x") == []

    def test_tsconfig_alias(self) -> None:
        root = Path("/project")
        units = parse_units({
            "src/lib/c.ts": "export const T = 10;",
            "src/a.ts": "import { T } from '@/lib/c';\nconst x = T;",
        }, root)
        tsconfig = TsConfig(
            config_path=root / "tsconfig.json",
            base_url=root,
            paths={"@/*": ["src/*"]},
        )
        index = SymbolIndex(units, tsconfig)
        assert _initializers(index, units[1], "x") == ["10"]

    def test_alias_without_tsconfig_unresolved(self) -> None:
        units = parse_units({
            "src/lib/c.ts": "export const T = 10;",
            "src/a.ts": "import { T } from '@/lib/c';\nconst x = T;",
        })
        index = SymbolIndex(units)
        assert _initializers(index, units[1], "x") == []

    def test_circular_reexport_terminates(self) -> None:
        units = parse_units({
            "src/a.ts": "export * from './b';",
            "src/b.ts": "export * from './a';",
            "src/c.ts": "import { T } from './a';\nconst x = T;",
        })
        index = SymbolIndex(units)
        assert _initializers(index, units[2], "x") == []


class TestDestructuring:
    def test_shorthand_and_renamed(self) -> None:
        units = parse_units({
            "src/a.ts": (
                "const { a, b: c } = { a: 5, b: 7 };\n"
                "const x = a;\nconst z = c;"
            ),
        })
        index = SymbolIndex(units)
        assert _initializers(index, units[0], "x") == ["5"]
        assert _initializers(index, units[0], "z") == ["7"]

    def test_destructuring_from_non_literal_is_skipped(self) -> None:
        units = parse_units({
            "src/a.ts": "const { a } = load();\nconst x = a;",
        })
        index = SymbolIndex(units)
        assert _initializers(index, units[0], "x") == []


def test_iter_top_level_declarators_includes_exports() -> None:
    units = parse_units({
        "src/a.ts": (
            "const a = 1;\nexport const b = 2;\n"
            "function f() { const c = 3; }\n"
        ),
    })
    names = [
        d.child_by_field_name("name").text.decode()
        for d in iter_top_level_declarators(units[0].root)
    ]
    assert names == ["a", "b"]


def test_definitions_report_declaring_node() -> None:
    units = parse_units({"src/a.ts": "const y = 1;\nconst x = y;"})
    index = SymbolIndex(units)
    assert _defs(index, units[0], value_of(units[0], "x")) == [
        "src/a.ts:variable_declarator:y = 1"
    ]
