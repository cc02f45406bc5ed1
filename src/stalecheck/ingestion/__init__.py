"""Source ingestion: enumerate candidate files and load tsconfig."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from stalecheck.constants import BINARY_DETECTION_BUFFER
from stalecheck.ingestion.schemas import FileSet, SourceFile, TsConfig

if TYPE_CHECKING:
    from stalecheck.config import Settings

__all__ = [
    "FileSet",
    "SourceFile",
    "TsConfig",
    "enumerate_files",
    "is_binary",
    "load_tsconfig",
]


def is_binary(path: Path) -> bool:
    """Return True if the file appears to be binary (null byte in first N bytes)."""
    try:
        with open(path, "rb") as f:
            chunk = f.read(BINARY_DETECTION_BUFFER)
        return b"\x00" in chunk
    except OSError:
        return True


def enumerate_files(
    root: Path, settings: Settings | None = None
) -> FileSet:
    """Select candidate source files under ``root``."""
    from stalecheck.ingestion.file_walker import enumerate_files as _impl

    return _impl(root, settings)


def load_tsconfig(
    root: Path, explicit_path: Path | None = None
) -> TsConfig | None:
    """Load the project's tsconfig, if one is configured or present."""
    from stalecheck.ingestion.tsconfig import load_project_tsconfig as _impl

    return _impl(root, explicit_path)
