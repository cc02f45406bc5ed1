"""Load the parts of tsconfig.json that affect import resolution.

tsconfig files are JSON5-flavoured (comments, trailing commas), so they
are read with :mod:`json5`. Relative ``extends`` chains are followed;
package-name ``extends`` are ignored.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import json5

from stalecheck.ingestion.schemas import TsConfig

logger = logging.getLogger(__name__)

TSCONFIG_FILENAME = "tsconfig.json"


def find_tsconfig(root: Path) -> Path | None:
    """Return ``<root>/tsconfig.json`` if it exists."""
    candidate = Path(root) / TSCONFIG_FILENAME
    return candidate if candidate.is_file() else None


def load_project_tsconfig(
    root: Path, explicit_path: Path | None = None
) -> TsConfig | None:
    """Load an explicit tsconfig path, or the one at the project root.

    A missing or unreadable config is not fatal: import aliases simply
    stay unresolved.
    """
    if explicit_path is not None:
        path = Path(explicit_path)
        if not path.is_absolute():
            path = Path(root) / path
        if not path.is_file():
            logger.warning("tsconfig not found at %s, ignoring", path)
            return None
    else:
        path = find_tsconfig(root)
        if path is None:
            return None

    try:
        return parse_tsconfig(path)
    except (OSError, ValueError) as e:
        logger.warning("Could not read tsconfig %s: %s", path, e)
        return None


def parse_tsconfig(path: Path) -> TsConfig:
    """Parse a tsconfig file, merging relative ``extends`` parents."""
    options = _load_compiler_options(path.resolve(), seen=set())
    base_url = options.get("baseUrl")
    paths = options.get("paths") or {}
    return TsConfig(
        config_path=path,
        base_url=Path(base_url) if base_url else None,
        paths={
            str(k): [str(t) for t in v]
            for k, v in paths.items()
            if isinstance(v, list)
        },
    )


def _load_compiler_options(
    path: Path, seen: set[Path]
) -> dict[str, Any]:
    """Return compilerOptions with ``baseUrl`` made absolute.

    ``paths`` entries stay relative; :class:`TsConfig` resolves them
    against ``baseUrl`` or, when absent, the declaring config's directory.
    """
    if path in seen:
        raise ValueError(f"circular tsconfig extends at {path}")
    seen.add(path)

    data = loads_jsonc(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain a JSON object")

    merged: dict[str, Any] = {}
    parent = data.get("extends")
    if isinstance(parent, str) and parent.startswith("."):
        parent_path = (path.parent / parent).resolve()
        if parent_path.suffix != ".json":
            parent_path = parent_path.with_name(parent_path.name + ".json")
        if parent_path.is_file():
            merged.update(_load_compiler_options(parent_path, seen))

    own = data.get("compilerOptions") or {}
    if not isinstance(own, dict):
        return merged
    if "baseUrl" in own:
        merged["baseUrl"] = str((path.parent / own["baseUrl"]).resolve())
    if "paths" in own:
        merged["paths"] = own["paths"]
        merged.setdefault("baseUrl", str(path.parent.resolve()))
    return merged


def loads_jsonc(text: str) -> Any:
    """Decode JSON that may contain comments and trailing commas."""
    return json5.loads(text)


def resolve_alias(config: TsConfig, specifier: str) -> list[Path]:
    """Map a non-relative import specifier to candidate base paths.

    Patterns follow TypeScript's single ``*`` wildcard rule; the longest
    matching prefix wins. Falls back to ``baseUrl``-relative lookup.
    """
    base = config.base_url or config.config_path.parent
    best: tuple[int, list[str], str] | None = None
    for pattern, targets in config.paths.items():
        if "*" in pattern:
            prefix, _, suffix = pattern.partition("*")
            if (
                specifier.startswith(prefix)
                and specifier.endswith(suffix)
                and len(specifier) >= len(prefix) + len(suffix)
            ):
                captured = specifier[len(prefix):len(specifier) - len(suffix)]
                if best is None or len(prefix) > best[0]:
                    best = (len(prefix), targets, captured)
        elif pattern == specifier:
            best = (len(pattern) + 1, targets, "")
            break

    candidates: list[Path] = []
    if best is not None:
        _, targets, captured = best
        for target in targets:
            candidates.append(base / target.replace("*", captured))
    if config.base_url is not None:
        candidates.append(config.base_url / specifier)
    return candidates
