"""Environment-based configuration and application constants."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode

logger = logging.getLogger(__name__)

# Root-level patterns are written with a leading slash so they only match
# files directly under the project root.
DEFAULT_INCLUDE_GLOBS: list[str] = [
    "src/**/*.ts",
    "src/**/*.tsx",
    "src/**/*.js",
    "src/**/*.jsx",
    "packages/**/*.ts",
    "packages/**/*.tsx",
    "/*.ts",
    "/*.js",
]


class Settings(BaseSettings):
    """Reads from .env file and STALECHECK_* environment variables."""

    # File selection
    include_globs: Annotated[list[str], NoDecode] = list(DEFAULT_INCLUDE_GLOBS)
    skip_directories: Annotated[list[str], NoDecode] = [
        "node_modules",
        ".next",
        ".git",
        ".svn",
        ".hg",
        "dist",
        "build",
        "out",
        "coverage",
        ".turbo",
        ".vercel",
    ]
    respect_gitignore: bool = True

    # Parsing
    tsconfig_path: Path | None = None
    skip_files_with_syntax_errors: bool = False

    # Logging
    log_level: str = "INFO"

    @field_validator("include_globs", "skip_directories", mode="before")
    @classmethod
    def _parse_list(cls, v: Any) -> Any:
        """Accept comma-separated string or JSON array."""
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("include_globs")
    @classmethod
    def _validate_globs(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError(
                "include_globs must contain at least one pattern"
            )
        seen: set[str] = set()
        dupes: list[str] = []
        for pattern in v:
            if pattern in seen:
                dupes.append(pattern)
            seen.add(pattern)
        if dupes:
            logger.warning(
                "Duplicate patterns in STALECHECK_INCLUDE_GLOBS: %s",
                ", ".join(dupes),
            )
        return v

    @field_validator("log_level")
    @classmethod
    def _validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {v}")
        return level

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "STALECHECK_",
        "extra": "ignore",
    }


# File extension → language name mapping
EXTENSION_MAP: dict[str, str] = {
    # JavaScript (the grammar covers JSX)
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
    # TypeScript
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
}

# Language → (grammar module, language factory) for tree-sitter grammars
GRAMMAR_MODULES: dict[str, tuple[str, str]] = {
    "javascript": ("tree_sitter_javascript", "language"),
    "typescript": ("tree_sitter_typescript", "language_typescript"),
    "tsx": ("tree_sitter_typescript", "language_tsx"),
}

# Extensions tried, in order, when resolving an import specifier to a file
MODULE_RESOLUTION_EXTENSIONS: tuple[str, ...] = (
    ".ts",
    ".tsx",
    ".js",
    ".jsx",
    ".mts",
    ".mjs",
    ".cts",
    ".cjs",
)
