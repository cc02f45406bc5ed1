"""Parse source files into tree-sitter syntax trees.

This is the parse layer the rest of the analysis reads from. Syntax
helpers shared by the scanner, the classifier and the evaluator live here
too, so node-shape knowledge about the JS/TS grammars stays in one place.
"""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from pathlib import Path

import tree_sitter

from stalecheck.analysis.arithmetic import parse_number
from stalecheck.config import EXTENSION_MAP, GRAMMAR_MODULES, Settings
from stalecheck.ingestion.schemas import FileSet

logger = logging.getLogger(__name__)

# Wrappers that do not change an expression's value.
_TRANSPARENT_NODE_TYPES = frozenset({
    "parenthesized_expression",
    "as_expression",
    "satisfies_expression",
    "non_null_expression",
})

_STRING_NODE_TYPES = frozenset({"string", "template_string"})


@dataclass(frozen=True)
class SourceUnit:
    """A parsed file. Read-only once built."""

    path: Path
    rel_path: str
    language: str
    source: bytes
    tree: tree_sitter.Tree

    @property
    def root(self) -> tree_sitter.Node:
        return self.tree.root_node


def parse_source(
    rel_path: str,
    source: str | bytes,
    *,
    language: str | None = None,
    path: Path | None = None,
) -> SourceUnit | None:
    """Parse in-memory source into a :class:`SourceUnit`.

    The language defaults to the one implied by ``rel_path``'s extension.
    Returns ``None`` when no grammar is available for it.
    """
    if language is None:
        language = EXTENSION_MAP.get(Path(rel_path).suffix.lower())
    if language is None:
        return None
    parser = _get_parser(language)
    if parser is None:
        return None

    data = source.encode("utf-8") if isinstance(source, str) else source
    tree = parser.parse(data)
    return SourceUnit(
        path=path if path is not None else Path(rel_path),
        rel_path=rel_path,
        language=language,
        source=data,
        tree=tree,
    )


def load_units(
    file_set: FileSet,
    settings: Settings | None = None,
) -> tuple[list[SourceUnit], int]:
    """Read and parse every file in ``file_set``, in order.

    Returns the parsed units and the number of skipped files. A file that
    cannot be read or parsed is skipped with a warning; it never aborts
    the run.
    """
    cfg = settings or Settings()
    units: list[SourceUnit] = []
    skipped = 0

    for sf in file_set.files:
        try:
            data = sf.path.read_bytes()
            data.decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Skipping unreadable file %s: %s", sf.rel_path, e)
            skipped += 1
            continue

        try:
            unit = parse_source(
                sf.rel_path, data, language=sf.language, path=sf.path
            )
        except Exception:  # noqa: BLE001
            # Parser crash → skip file
            logger.warning("Parse failed for %s", sf.rel_path, exc_info=True)
            skipped += 1
            continue

        if unit is None:
            logger.warning(
                "No grammar for %s (%s), skipping", sf.rel_path, sf.language
            )
            skipped += 1
            continue

        if unit.root.has_error:
            if cfg.skip_files_with_syntax_errors:
                logger.warning("Skipping %s: syntax errors", sf.rel_path)
                skipped += 1
                continue
            logger.debug("Syntax errors in %s, analysing anyway", sf.rel_path)

        units.append(unit)

    return units, skipped


# ---------------------------------------------------------------------------
# Syntax helpers
# ---------------------------------------------------------------------------


def node_text(node: tree_sitter.Node) -> str:
    """Decode a node's source text."""
    return node.text.decode("utf-8", errors="replace") if node.text else ""


def line_of(node: tree_sitter.Node) -> int:
    """1-based start line of a node."""
    return node.start_point[0] + 1


def unwrap_expression(node: tree_sitter.Node) -> tree_sitter.Node:
    """Strip parentheses, ``as``/``satisfies`` casts and ``!`` assertions."""
    while node.type in _TRANSPARENT_NODE_TYPES:
        inner = first_named_child(node)
        if inner is None:
            break
        node = inner
    return node


def first_named_child(node: tree_sitter.Node) -> tree_sitter.Node | None:
    """First named child that is not a comment."""
    for child in node.named_children:
        if child.type != "comment":
            return child
    return None


def named_children(node: tree_sitter.Node) -> list[tree_sitter.Node]:
    """Named children with comments removed."""
    return [c for c in node.named_children if c.type != "comment"]


def string_literal_value(node: tree_sitter.Node) -> str | None:
    """Value of a string literal or substitution-free template string."""
    if node.type not in _STRING_NODE_TYPES:
        return None
    for child in node.named_children:
        if child.type == "template_substitution":
            return None
    return node_text(node)[1:-1]


def property_key_name(key: tree_sitter.Node) -> str | None:
    """Name of a simple object-literal key (identifier, string or number)."""
    if key.type in ("property_identifier", "identifier"):
        return node_text(key)
    if key.type == "number":
        return number_key(node_text(key))
    return string_literal_value(key)


def number_key(text: str) -> str | None:
    """Property name a numeric key stands for: ``0x10`` and ``16`` are ``"16"``."""
    value = parse_number(text)
    return str(value) if value is not None else None


# ---------------------------------------------------------------------------
# Parser cache
# ---------------------------------------------------------------------------

_parser_cache: dict[str, tree_sitter.Parser] = {}


def _get_parser(language: str) -> tree_sitter.Parser | None:
    """Get or create a cached tree-sitter parser."""
    if language in _parser_cache:
        return _parser_cache[language]

    grammar = GRAMMAR_MODULES.get(language)
    if grammar is None:
        return None

    module_name, factory = grammar
    try:
        mod = importlib.import_module(module_name)
        capsule: object = getattr(mod, factory)()
        lang = tree_sitter.Language(capsule)
        parser = tree_sitter.Parser(lang)
        _parser_cache[language] = parser
        return parser
    except (ImportError, AttributeError):
        logger.warning("tree-sitter grammar %s unavailable", module_name)
        return None
