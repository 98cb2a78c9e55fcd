"""Shared fixtures for folio tests."""

import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import yaml

WriteDoc = Callable[..., Path]


def front_matter(**fields: Any) -> str:
    """Render fields as a ``---`` delimited YAML header."""
    header = yaml.safe_dump(fields, sort_keys=False, allow_unicode=True) if fields else ""
    return f"---\n{header}---\n"


@pytest.fixture(autouse=True)
def _clean_folio_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep FOLIO_* variables from the developer's shell out of the tests."""
    for key in list(os.environ):
        if key.startswith("FOLIO_"):
            monkeypatch.delenv(key)


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    path = tmp_path / "content"
    path.mkdir()
    return path


@pytest.fixture
def write_doc(content_dir: Path) -> WriteDoc:
    """Write a content unit under ``content_dir`` and return its path."""

    def _write(name: str, body: str = "Body text.\n", **fields: Any) -> Path:
        path = content_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(front_matter(**fields) + "\n" + body, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def tip_sources(write_doc: WriteDoc) -> list[Path]:
    """Two published tips, one draft, written out of order."""
    return [
        write_doc(
            "094.md",
            "*By Jane Doe*\n\nCall-site readability.\n",
            title="Tip of the Week #94: Callsite Readability and bool Parameters",
            layout="tips",
            sidenav="side-nav-tips.html",
            published=True,
            permalink="tips/94",
            type="markdown",
            order="094",
        ),
        write_doc(
            "086.md",
            "by [Bradley White](mailto:bww@example.com)\n\n```c++\nenum class Color { kRed };\n```\n",
            title="Tip of the Week #86: Enumerating with Class",
            layout="tips",
            sidenav="side-nav-tips.html",
            published=True,
            permalink="tips/86",
            type="markdown",
            order="086",
        ),
        write_doc(
            "draft.md",
            "Not ready.\n",
            title="Unfinished",
            published=False,
            permalink="tips/999",
            order="999",
        ),
    ]
