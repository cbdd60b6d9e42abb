"""Shared test fixtures for lengthlint."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from lengthlint.syntax.parser import clear_cache

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture(autouse=True)
def _clear_lang_cache() -> None:
    """Clear language cache before each test to avoid cross-test pollution."""
    clear_cache()


@pytest.fixture()
def tmp_project(tmp_path: Path) -> Path:
    """Create a small JS/TS project with one finding per source file.

    Layout:
    - src/empty.ts      -> one "Every" diagnostic on line 2
    - src/some.js       -> one "Some" diagnostic on line 1
    - src/clean.tsx     -> no diagnostics
    - node_modules/lib/index.js -> would match, but is excluded by default
    - README.md         -> not a supported extension
    """
    src = tmp_path / "src"
    src.mkdir()
    (src / "empty.ts").write_text(
        "const items: number[] = [];\n"
        "if (items.length === 0 || items.every(Boolean)) {\n"
        "  console.log('all');\n"
        "}\n"
    )
    (src / "some.js").write_text("const ok = list.length > 0 && list.some((x) => x > 1);\n")
    (src / "clean.tsx").write_text(
        "export const View = () => <div>{rows.some(Boolean) && 'has rows'}</div>;\n"
    )
    vendored = tmp_path / "node_modules" / "lib"
    vendored.mkdir(parents=True)
    (vendored / "index.js").write_text("a.length === 0 || a.every(f);\n")
    (tmp_path / "README.md").write_text("# project\n")
    return tmp_path
