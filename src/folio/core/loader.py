"""Document loader: splits YAML front matter from the Markdown body.

Parsing is pure; only ``load_document``/``load_documents`` touch the
filesystem, and they do nothing but read.
"""

from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from frontmatter.default_handlers import YAMLHandler

from folio.core.exceptions import MalformedDocumentError
from folio.core.types import Document
from folio.core.utils import identifier_from_source, normalize_identifier, strip_markdown_links

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

DEFAULT_PATTERNS: tuple[str, ...] = ("*.md", "*.markdown")

_HANDLER = YAMLHandler()
_DELIMITER_RE = re.compile(r"^-{3,}\s*$")
_BYLINE_RE = re.compile(r"^\s*(?P<em>[*_]+)?\s*by\s+(?P<name>.+?)\s*(?P=em)?\s*$", re.IGNORECASE)
_BYLINE_SCAN_LINES = 10

_TRUE_STRINGS = frozenset({"true", "yes", "on"})
_FALSE_STRINGS = frozenset({"false", "no", "off"})


def _split(text: str, source: str) -> tuple[dict[str, Any], str]:
    lines = text.splitlines()
    if not lines or not _DELIMITER_RE.match(lines[0]):
        raise MalformedDocumentError(source, "missing front matter delimiter '---'")
    if not any(_DELIMITER_RE.match(line) for line in lines[1:]):
        raise MalformedDocumentError(source, "front matter is not terminated with '---'")

    try:
        header, body = _HANDLER.split(text)
        data = _HANDLER.load(header)
    except yaml.YAMLError as exc:
        raise MalformedDocumentError(source, f"invalid YAML front matter: {exc}") from exc
    except ValueError as exc:
        raise MalformedDocumentError(source, str(exc)) from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise MalformedDocumentError(source, f"front matter is a {type(data).__name__}, not a mapping")
    return {str(key): value for key, value in data.items()}, body.lstrip("\r\n")


def _decode_published(value: Any, source: str) -> bool:
    if value is None:
        return True
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise MalformedDocumentError(source, f"'published' must be a boolean, got {value!r}")


def _decode_order(value: Any, source: str) -> str | int | float | None:
    if value is None or (isinstance(value, str | int | float) and not isinstance(value, bool)):
        return value
    raise MalformedDocumentError(source, f"'order' must be a string or number, got {value!r}")


def _decode_identifier(value: Any, source: str) -> str:
    if value is None:
        return identifier_from_source(source)
    if not isinstance(value, str):
        raise MalformedDocumentError(source, f"'permalink' must be a string, got {value!r}")
    try:
        return normalize_identifier(value)
    except ValueError as exc:
        raise MalformedDocumentError(source, str(exc)) from exc


def _decode_title(value: Any, identifier: str, source: str) -> str:
    if value is None:
        logger.warning("%s has no title, using identifier '%s'", source, identifier)
        return identifier
    if isinstance(value, list | dict):
        raise MalformedDocumentError(source, f"'title' must be a scalar, got {value!r}")
    return str(value)


def extract_author(metadata: dict[str, Any], body: str) -> str | None:
    """Return the attribution text for a document.

    An explicit ``author`` field wins. Otherwise the first byline among the
    first few non-blank body lines is used: ``*By Name*`` or
    ``by [Name](mailto:...)``. Markdown links are reduced to their labels.
    """
    author = metadata.get("author")
    if isinstance(author, str) and author.strip():
        return author.strip()

    scanned = 0
    for line in body.splitlines():
        if not line.strip():
            continue
        match = _BYLINE_RE.match(line)
        # Plain prose such as "By default, ..." is not a byline.
        if match and (match.group("em") or "](" in match.group("name")):
            return strip_markdown_links(match.group("name")).strip() or None
        scanned += 1
        if scanned >= _BYLINE_SCAN_LINES:
            break
    return None


def parse_document(text: str, source: str) -> Document:
    """Parse a raw content unit into a Document.

    Args:
        text: Full text of the content unit, header included.
        source: Location reported in errors (usually a relative path).

    Raises:
        MalformedDocumentError: If the header is missing, unterminated,
            not a YAML mapping, or a recognised field cannot be decoded.

    """
    metadata, body = _split(text.removeprefix("\ufeff"), source)

    identifier = _decode_identifier(metadata.get("permalink"), source)
    return Document(
        identifier=identifier,
        title=_decode_title(metadata.get("title"), identifier, source),
        order=_decode_order(metadata.get("order"), source),
        published=_decode_published(metadata.get("published"), source),
        body=body,
        author=extract_author(metadata, body),
        source=source,
        metadata=metadata,
    )


def load_document(path: Path, root: Path | None = None, *, encoding: str = "utf-8") -> Document:
    """Read and parse one content unit.

    Raises:
        MalformedDocumentError: If the file cannot be decoded or parsed.
        OSError: If the file cannot be read.

    """
    source = path.relative_to(root).as_posix() if root is not None else path.as_posix()
    raw = path.read_bytes()
    try:
        text = raw.decode(encoding)
    except UnicodeDecodeError as exc:
        raise MalformedDocumentError(source, f"cannot be decoded as {encoding}: {exc.reason}") from exc
    except LookupError as exc:
        raise MalformedDocumentError(source, f"unknown encoding '{encoding}'") from exc
    return parse_document(text, source)


def discover_sources(content_dir: Path, patterns: Iterable[str] = DEFAULT_PATTERNS) -> list[Path]:
    """Return matching files under ``content_dir`` in input order (sorted relative path)."""
    found: set[Path] = set()
    for pattern in patterns:
        found.update(path for path in content_dir.rglob(pattern) if path.is_file())
    return sorted(found, key=lambda path: path.relative_to(content_dir).as_posix())


def load_documents(
    content_dir: Path,
    *,
    patterns: Iterable[str] = DEFAULT_PATTERNS,
    encoding: str = "utf-8",
    workers: int = 1,
) -> list[Document]:
    """Load every content unit under ``content_dir``.

    Files are parsed in parallel when ``workers > 1``. The result always
    follows input order, and the first malformed document aborts the load.
    """
    if not content_dir.is_dir():
        msg = f"Content directory not found: {content_dir}"
        raise FileNotFoundError(msg)

    paths = discover_sources(content_dir, patterns)
    logger.info("Loading %d documents from %s", len(paths), content_dir)

    def _load(path: Path) -> Document:
        return load_document(path, content_dir, encoding=encoding)

    if workers <= 1 or len(paths) <= 1:
        return [_load(path) for path in paths]

    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(_load, paths))
