"""Core exceptions for folio.

Every error raised by the pipeline is fatal to the run and names the
content unit that caused it.
"""

from collections.abc import Sequence


class FolioError(Exception):
    """Base exception for all folio errors."""


class MalformedDocumentError(FolioError):
    """Raised when a document's front matter cannot be parsed or decoded."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"{source}: malformed document: {reason}")


class DuplicateIdentifierError(FolioError):
    """Raised when two published documents map to the same identifier."""

    def __init__(self, identifier: str, sources: Sequence[str]) -> None:
        self.identifier = identifier
        self.sources = tuple(sources)
        joined = ", ".join(self.sources)
        super().__init__(f"{joined}: duplicate identifier '{identifier}'")


class RenderError(FolioError):
    """Raised when a document body cannot be converted to HTML."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"{source}: render error: {reason}")


class ConfigError(FolioError):
    """Raised when the site configuration file cannot be loaded."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load config at '{path}': {reason}")
