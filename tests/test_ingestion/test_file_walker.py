"""Tests for candidate file enumeration."""

from __future__ import annotations

from pathlib import Path

import pytest

from stalecheck.config import Settings
from stalecheck.errors import ProjectEnumerationError
from stalecheck.ingestion import enumerate_files, is_binary
from tests.conftest import write_project


def _rel_paths(root: Path, settings: Settings | None = None) -> list[str]:
    return [f.rel_path for f in enumerate_files(root, settings).files]


def test_default_globs(tmp_path: Path) -> None:
    write_project(tmp_path, {
        "src/b.ts": "",
        "src/a/deep.tsx": "",
        "src/c.jsx": "",
        "src/readme.md": "",
        "packages/ui/button.tsx": "",
        "packages/ui/old.js": "",
        "next.config.js": "",
        "vite.config.ts": "",
        "scripts/seed.ts": "",
        "scripts/nested/x.js": "",
    })
    assert _rel_paths(tmp_path) == [
        "next.config.js",
        "packages/ui/button.tsx",
        "src/a/deep.tsx",
        "src/b.ts",
        "src/c.jsx",
        "vite.config.ts",
    ]


def test_languages_follow_extension(tmp_path: Path) -> None:
    write_project(tmp_path, {"src/a.ts": "", "src/b.tsx": "", "src/c.js": ""})
    langs = {f.rel_path: f.language for f in enumerate_files(tmp_path).files}
    assert langs == {
        "src/a.ts": "typescript",
        "src/b.tsx": "tsx",
        "src/c.js": "javascript",
    }


def test_skip_directories(tmp_path: Path) -> None:
    write_project(tmp_path, {
        "src/node_modules/lib/index.ts": "",
        "src/dist/out.js": "",
        "src/.cache/x.ts": "",
        "src/keep.ts": "",
    })
    assert _rel_paths(tmp_path) == ["src/keep.ts"]


def test_gitignore_respected(tmp_path: Path) -> None:
    write_project(tmp_path, {
        ".gitignore": "src/generated/\n*.gen.ts\n",
        "src/generated/api.ts": "",
        "src/types.gen.ts": "",
        "src/keep.ts": "",
    })
    assert _rel_paths(tmp_path) == ["src/keep.ts"]


def test_gitignore_can_be_disabled(tmp_path: Path) -> None:
    write_project(tmp_path, {
        ".gitignore": "src/generated/\n",
        "src/generated/api.ts": "",
    })
    settings = Settings(respect_gitignore=False)
    assert _rel_paths(tmp_path, settings) == ["src/generated/api.ts"]


def test_custom_globs(tmp_path: Path) -> None:
    write_project(tmp_path, {"app/x.ts": "", "src/y.ts": ""})
    settings = Settings(include_globs=["app/**/*.ts"])
    assert _rel_paths(tmp_path, settings) == ["app/x.ts"]


def test_binary_files_skipped(tmp_path: Path) -> None:
    write_project(tmp_path, {"src/ok.ts": "const a = 1;"})
    (tmp_path / "src" / "blob.ts").write_bytes(b"\x00\x01\x02")
    assert _rel_paths(tmp_path) == ["src/ok.ts"]
    assert is_binary(tmp_path / "src" / "blob.ts")


def test_order_is_deterministic(tmp_path: Path) -> None:
    write_project(tmp_path, {f"src/{n}.ts": "" for n in "dcba"})
    assert _rel_paths(tmp_path) == [f"src/{n}.ts" for n in "abcd"]


def test_file_set_root(tmp_path: Path) -> None:
    assert enumerate_files(tmp_path).root == tmp_path


class TestSetupFailures:
    def test_missing_root(self, tmp_path: Path) -> None:
        with pytest.raises(ProjectEnumerationError, match="does not exist"):
            enumerate_files(tmp_path / "missing")

    def test_root_is_a_file(self, tmp_path: Path) -> None:
        target = tmp_path / "file.ts"
        target.write_text("", encoding="utf-8")
        with pytest.raises(ProjectEnumerationError, match="not a directory"):
            enumerate_files(target)
