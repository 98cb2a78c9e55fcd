"""Custom Jinja2 filters for page templates."""

from folio.core.utils import relative_root

PAGE_SUFFIX = ".html"


def page_path(identifier: str) -> str:
    """Relative output path of a document page.

        >>> page_path("tips/86")
        'tips/86.html'

    """
    return f"{identifier}{PAGE_SUFFIX}"


def root_prefix(identifier: str) -> str:
    """Prefix leading from a document page back to the site root."""
    return relative_root(identifier)
