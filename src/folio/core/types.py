"""Core data types for folio."""

from collections.abc import Iterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

OrderValue = str | int | float | None


class Document(BaseModel):
    """A single content unit: decoded front matter plus the raw Markdown body."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    title: str
    order: OrderValue = None
    published: bool = True
    body: str = ""
    author: str | None = None
    source: str
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def layout(self) -> Any:
        return self.metadata.get("layout")

    @property
    def sidenav(self) -> Any:
        return self.metadata.get("sidenav")

    @property
    def doc_type(self) -> Any:
        return self.metadata.get("type")


class Collection(BaseModel):
    """Published documents in policy order, unique by identifier.

    Build instances with ``folio.core.indexer.build_collection``; the
    constructor does not re-check the invariants.
    """

    model_config = ConfigDict(frozen=True)

    documents: tuple[Document, ...] = ()

    def __iter__(self) -> Iterator[Document]:  # type: ignore[override]
        return iter(self.documents)

    def __len__(self) -> int:
        return len(self.documents)

    @property
    def identifiers(self) -> list[str]:
        return [doc.identifier for doc in self.documents]

    def get(self, identifier: str) -> Document | None:
        for doc in self.documents:
            if doc.identifier == identifier:
                return doc
        return None


class PublishReport(BaseModel):
    """Artifacts written by one publishing run."""

    model_config = ConfigDict(frozen=True)

    artifacts: tuple[str, ...] = ()
    index: str = "index.html"

    @property
    def document_count(self) -> int:
        return len(self.artifacts) - 1 if self.index in self.artifacts else len(self.artifacts)
