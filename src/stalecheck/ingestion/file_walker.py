"""Enumerate candidate source files under a project root."""

from __future__ import annotations

import logging
from pathlib import Path

import pathspec

from stalecheck.config import EXTENSION_MAP, Settings
from stalecheck.errors import ProjectEnumerationError
from stalecheck.ingestion import is_binary
from stalecheck.ingestion.schemas import FileSet, SourceFile

logger = logging.getLogger(__name__)


def enumerate_files(
    root: Path,
    settings: Settings | None = None,
) -> FileSet:
    """Walk the project tree and return the matching :class:`FileSet`.

    * Only files matching ``settings.include_globs`` (gitignore-style
      patterns relative to ``root``) with a known JS/TS extension are kept.
    * Skips hidden directories and directories in ``skip_directories``.
    * Honours ``<root>/.gitignore`` when ``respect_gitignore`` is set.
    * Order is deterministic: directory entries are visited sorted.

    Raises :class:`ProjectEnumerationError` when the root itself cannot
    be listed.
    """
    cfg = settings or Settings()

    root = Path(root)
    if not root.exists():
        raise ProjectEnumerationError(f"{root} does not exist")
    if not root.is_dir():
        raise ProjectEnumerationError(f"{root} is not a directory")
    try:
        next(iter(root.iterdir()), None)
    except OSError as e:
        raise ProjectEnumerationError(
            f"cannot list project root {root}: {e}"
        ) from e

    include_spec = pathspec.GitIgnoreSpec.from_lines(cfg.include_globs)
    ignore_spec = (
        _load_gitignore(root)
        if cfg.respect_gitignore
        else pathspec.GitIgnoreSpec.from_lines([])
    )
    skip_dirs = set(cfg.skip_directories)

    files: list[SourceFile] = []
    for file_path in _walk_files(root, skip_dirs, ignore_spec):
        language = EXTENSION_MAP.get(file_path.suffix.lower())
        if language is None:
            continue
        rel = file_path.relative_to(root).as_posix()
        if not include_spec.match_file(rel):
            continue
        if is_binary(file_path):
            logger.debug("Skipping binary file %s", rel)
            continue
        files.append(
            SourceFile(path=file_path, rel_path=rel, language=language)
        )

    logger.debug("Selected %d candidate files under %s", len(files), root)
    return FileSet(root=root, files=files)


def _walk_files(
    root: Path,
    skip_dirs: set[str],
    ignore_spec: pathspec.PathSpec,
) -> list[Path]:
    """Return all regular files, skipping hidden and excluded directories.

    Symlinks (both directory and file) that resolve outside the project
    root are skipped.
    """
    resolved_root = root.resolve()
    return _walk_files_inner(
        root, root, skip_dirs, ignore_spec, resolved_root
    )


def _walk_files_inner(
    current: Path,
    root: Path,
    skip_dirs: set[str],
    ignore_spec: pathspec.PathSpec,
    resolved_root: Path,
) -> list[Path]:
    """Recursive walk helper with symlink protection."""
    files: list[Path] = []
    try:
        entries = sorted(current.iterdir())
    except OSError:
        logger.warning("Cannot list directory %s, skipping", current)
        return files

    for item in entries:
        if item.is_symlink():
            resolved = item.resolve()
            if not resolved.is_relative_to(resolved_root):
                continue
        rel = item.relative_to(root).as_posix()
        if item.is_dir():
            if item.name.startswith(".") or item.name in skip_dirs:
                continue
            if ignore_spec.match_file(rel + "/"):
                continue
            files.extend(
                _walk_files_inner(
                    item, root, skip_dirs, ignore_spec,
                    resolved_root,
                )
            )
        elif item.is_file():
            if not ignore_spec.match_file(rel):
                files.append(item)
    return files


def _load_gitignore(root: Path) -> pathspec.PathSpec:
    """Load .gitignore patterns using pathspec."""
    gitignore = root / ".gitignore"
    if not gitignore.exists():
        return pathspec.GitIgnoreSpec.from_lines([])
    try:
        with open(gitignore, encoding="utf-8") as f:
            return pathspec.GitIgnoreSpec.from_lines(f)
    except OSError:
        return pathspec.GitIgnoreSpec.from_lines([])
