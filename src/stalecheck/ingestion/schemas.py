"""Pydantic models for the ingestion data flow."""

from pathlib import Path

from pydantic import BaseModel, Field


class SourceFile(BaseModel):
    """A candidate source file selected for analysis."""

    path: Path
    rel_path: str  # posix, relative to the project root
    language: str


class FileSet(BaseModel):
    """Output of the file walker: candidate files in enumeration order."""

    root: Path
    files: list[SourceFile] = Field(default_factory=lambda: list[SourceFile]())


class TsConfig(BaseModel):
    """The subset of a tsconfig.json used for import resolution."""

    config_path: Path
    base_url: Path | None = None
    paths: dict[str, list[str]] = Field(
        default_factory=lambda: dict[str, list[str]]()
    )
