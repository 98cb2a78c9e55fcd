"""Tests for the document loader."""

from pathlib import Path

import pytest

from folio.core.exceptions import MalformedDocumentError
from folio.core.loader import discover_sources, extract_author, load_document, load_documents, parse_document

TIP_86 = """---
title: "Tip of the Week #86: Enumerating with Class"
layout: tips
sidenav: side-nav-tips.html
published: true
permalink: tips/86
type: markdown
order: "086"
reviewers: [abseil-team]
---

Originally posted as TotW #86 on January 5, 2015

*By Bradley White*

An enumeration is a user-defined type.
"""


def test_parse_document_decodes_recognised_fields():
    doc = parse_document(TIP_86, "tips/086.md")

    assert doc.identifier == "tips/86"
    assert doc.title == "Tip of the Week #86: Enumerating with Class"
    assert doc.order == "086"
    assert doc.published is True
    assert doc.source == "tips/086.md"
    assert doc.author == "Bradley White"
    assert doc.body.startswith("Originally posted as TotW #86")


def test_parse_document_passes_opaque_and_unknown_fields_through():
    doc = parse_document(TIP_86, "tips/086.md")

    assert doc.layout == "tips"
    assert doc.sidenav == "side-nav-tips.html"
    assert doc.doc_type == "markdown"
    assert doc.metadata["reviewers"] == ["abseil-team"]


@pytest.mark.parametrize(
    ("text", "reason"),
    [
        ("title: No header\n\nBody\n", "missing front matter delimiter"),
        ("", "missing front matter delimiter"),
        ("---\ntitle: Never closed\n\nBody\n", "not terminated"),
        ("---\ntitle: [unclosed\n---\nBody\n", "invalid YAML"),
        ("---\n- just\n- a list\n---\nBody\n", "not a mapping"),
        ("---\ntitle: T\npublished: maybe\n---\n", "'published' must be a boolean"),
        ("---\ntitle: T\norder: [1, 2]\n---\n", "'order' must be a string or number"),
        ("---\ntitle: T\norder: true\n---\n", "'order' must be a string or number"),
        ("---\ntitle: T\npermalink: 86\n---\n", "'permalink' must be a string"),
        ("---\ntitle: T\npermalink: tips/../86\n---\n", "relative segments"),
        ("---\ntitle: T\npermalink: /\n---\n", "permalink is empty"),
        ("---\ntitle: {a: 1}\n---\n", "'title' must be a scalar"),
    ],
)
def test_parse_document_rejects_malformed_headers(text: str, reason: str):
    with pytest.raises(MalformedDocumentError) as exc_info:
        parse_document(text, "broken.md")

    assert exc_info.value.source == "broken.md"
    assert reason in exc_info.value.reason
    assert str(exc_info.value).startswith("broken.md:")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("true", True), ("false", False), ("'no'", False), ("'Yes'", True), ("off", False)],
)
def test_parse_document_decodes_published_flag(raw: str, expected: bool):
    doc = parse_document(f"---\ntitle: T\npublished: {raw}\n---\n", "flag.md")
    assert doc.published is expected


def test_parse_document_defaults():
    doc = parse_document("---\ntitle: Plain\n---\nBody\n", "notes/plain-note.md")

    assert doc.published is True
    assert doc.order is None
    assert doc.identifier == "notes/plain-note"
    assert doc.author is None
    assert doc.body == "Body\n"


def test_parse_document_accepts_numeric_order_and_title():
    doc = parse_document("---\ntitle: 2024\norder: 12.5\npermalink: /misc/x.html\n---\n", "x.md")

    assert doc.title == "2024"
    assert doc.order == 12.5
    assert doc.identifier == "misc/x"


def test_parse_document_falls_back_to_identifier_for_missing_title(caplog):
    doc = parse_document("---\npermalink: about\n---\nHi\n", "about.md")

    assert doc.title == "about"
    assert "has no title" in caplog.text


def test_parse_document_allows_empty_header_and_bom():
    doc = parse_document("\ufeff---\n---\nBody\n", "empty.md")

    assert doc.metadata == {}
    assert doc.identifier == "empty"


@pytest.mark.parametrize(
    ("metadata", "body", "expected"),
    [
        ({"author": "Titus Winters"}, "*By Someone Else*\n", "Titus Winters"),
        ({}, "Intro line\n\n*By Bradley White*\n", "Bradley White"),
        ({}, "by [Titus Winters](mailto:titus@example.com)\n", "Titus Winters"),
        ({}, "_by Jane Doe_\n", "Jane Doe"),
        ({}, "By default, the compiler picks the overload.\n", None),
        ({}, "No byline here.\n", None),
    ],
)
def test_extract_author(metadata, body, expected):
    assert extract_author(metadata, body) == expected


def test_extract_author_only_scans_the_top_of_the_body():
    body = "\n".join(f"Paragraph {n}" for n in range(12)) + "\n*By Late Author*\n"
    assert extract_author({}, body) is None


def test_load_document_reports_relative_source(content_dir: Path):
    path = content_dir / "tips" / "086.md"
    path.parent.mkdir()
    path.write_text(TIP_86, encoding="utf-8")

    doc = load_document(path, content_dir)

    assert doc.source == "tips/086.md"


def test_load_document_rejects_undecodable_bytes(content_dir: Path):
    path = content_dir / "latin.md"
    path.write_bytes("---\ntitle: Caf\xe9\n---\n".encode("latin-1"))

    with pytest.raises(MalformedDocumentError, match="cannot be decoded as utf-8"):
        load_document(path, content_dir)

    assert load_document(path, content_dir, encoding="latin-1").title == "Café"


def test_discover_sources_sorts_by_relative_path(content_dir: Path):
    for name in ["b.md", "a/z.markdown", "a/y.md", "notes.txt"]:
        path = content_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("---\n---\n", encoding="utf-8")

    found = [p.relative_to(content_dir).as_posix() for p in discover_sources(content_dir)]

    assert found == ["a/y.md", "a/z.markdown", "b.md"]


@pytest.mark.parametrize("workers", [1, 4])
def test_load_documents_keeps_input_order(content_dir: Path, workers: int):
    for n in range(8):
        (content_dir / f"{n:02d}.md").write_text(f"---\ntitle: Doc {n}\n---\n", encoding="utf-8")

    docs = load_documents(content_dir, workers=workers)

    assert [doc.title for doc in docs] == [f"Doc {n}" for n in range(8)]


def test_load_documents_fails_fast_on_malformed_unit(content_dir: Path):
    (content_dir / "good.md").write_text("---\ntitle: Good\n---\n", encoding="utf-8")
    (content_dir / "bad.md").write_text("no header at all\n", encoding="utf-8")

    with pytest.raises(MalformedDocumentError) as exc_info:
        load_documents(content_dir, workers=2)

    assert exc_info.value.source == "bad.md"


def test_load_documents_requires_existing_directory(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_documents(tmp_path / "missing")
