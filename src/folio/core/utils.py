"""Small helpers shared by the loader and the publisher."""

import re
from pathlib import PurePosixPath
from unicodedata import normalize

_MD_LINK_RE = re.compile(r"\[([^\]]*)\]\([^)]*\)")


def slugify(text: str, max_len: int = 60) -> str:
    """Convert text to a safe URL-friendly slug.

    Examples:
        >>> slugify("Hello World")
        'hello-world'
        >>> slugify("Café")
        'cafe'

    """
    normalized = normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", normalized.lower()).strip("-")
    slug = re.sub(r"-+", "-", slug)

    if not slug:
        return "untitled"

    if len(slug) > max_len:
        slug = slug[:max_len].rstrip("-")

    return slug


def normalize_identifier(permalink: str) -> str:
    """Turn a permalink into a relative identifier.

    Surrounding slashes and a trailing ``.html`` are dropped:

        >>> normalize_identifier("/tips/86/")
        'tips/86'
        >>> normalize_identifier("tips/94.html")
        'tips/94'

    Raises:
        ValueError: If the result is empty or contains ``.``/``..`` segments.

    """
    identifier = permalink.strip().strip("/")
    identifier = identifier.removesuffix(".html")
    if not identifier:
        msg = "permalink is empty"
        raise ValueError(msg)

    parts = identifier.split("/")
    if any(part in {"", ".", ".."} for part in parts):
        msg = f"permalink '{permalink}' has empty or relative segments"
        raise ValueError(msg)
    return identifier


def identifier_from_source(source: str) -> str:
    """Derive an identifier from a relative source path.

    Each directory segment is kept, so sibling folders cannot collide:

        >>> identifier_from_source("tips/086.md")
        'tips/086'
        >>> identifier_from_source("Guides/Getting Started.markdown")
        'guides/getting-started'

    """
    path = PurePosixPath(source).with_suffix("")
    parts = [part for part in path.parts if part not in {"/", ".", ".."}]
    return "/".join(slugify(part) for part in parts) or "untitled"


def strip_markdown_links(text: str) -> str:
    """Replace ``[label](url)`` with ``label``."""
    return _MD_LINK_RE.sub(r"\1", text)


def relative_root(identifier: str) -> str:
    """Return the prefix that leads from an identifier's page back to the site root.

        >>> relative_root("tips/86")
        '../'
        >>> relative_root("about")
        ''

    """
    depth = len(PurePosixPath(identifier).parts) - 1
    return "../" * depth
