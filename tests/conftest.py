"""Shared test helpers: in-memory units and on-disk sample projects."""

from __future__ import annotations

import os

# Keep a developer's shell or .env from changing test settings.
for _key in [k for k in os.environ if k.startswith("STALECHECK_")]:
    del os.environ[_key]

from pathlib import Path

import pytest
import tree_sitter

from stalecheck.analysis.evaluator import ResolutionContext
from stalecheck.analysis.parsing import SourceUnit, parse_source
from stalecheck.analysis.schemas import ConstantTable
from stalecheck.analysis.symbols import SymbolIndex
from stalecheck.ingestion.schemas import TsConfig

FIXTURE_DIR = Path(__file__).resolve().parent / "fixtures" / "sample_app"


def parse_units(
    sources: dict[str, str], root: Path | None = None
) -> list[SourceUnit]:
    """Parse ``{rel_path: source}`` into units, in the given order.

    Paths are rooted at ``root`` (default ``/project``) so relative
    imports resolve between the units without touching the disk.
    """
    base = root or Path("/project")
    units: list[SourceUnit] = []
    for rel_path, source in sources.items():
        unit = parse_source(rel_path, source, path=base / rel_path)
        assert unit is not None, rel_path
        units.append(unit)
    return units


def make_context(
    units: list[SourceUnit],
    constant_table: ConstantTable | None = None,
    tsconfig: TsConfig | None = None,
) -> ResolutionContext:
    return ResolutionContext(
        constant_table=constant_table,
        definitions=SymbolIndex(units, tsconfig),
    )


def find_declarator(unit: SourceUnit, name: str) -> tree_sitter.Node:
    """The first ``variable_declarator`` binding ``name`` in ``unit``."""
    stack = [unit.root]
    while stack:
        node = stack.pop()
        if node.type == "variable_declarator":
            ident = node.child_by_field_name("name")
            if ident is not None and ident.text == name.encode():
                return node
        stack.extend(reversed(node.named_children))
    raise AssertionError(f"no declarator for {name}")


def value_of(unit: SourceUnit, name: str) -> tree_sitter.Node:
    """Initializer node of the declarator binding ``name``."""
    value = find_declarator(unit, name).child_by_field_name("value")
    assert value is not None
    return value


def write_project(root: Path, files: dict[str, str]) -> Path:
    """Create ``files`` under ``root`` and return ``root``."""
    for rel_path, content in files.items():
        target = root / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def sample_app() -> Path:
    return FIXTURE_DIR
