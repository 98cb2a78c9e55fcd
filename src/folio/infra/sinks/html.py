"""HTML output sink: publishes a Collection as static pages."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from markupsafe import Markup

from folio.core.rendering import MarkdownRenderer
from folio.core.types import Collection, Document, PublishReport
from folio.engine.filters import page_path
from folio.engine.template_loader import TemplateLoader

if TYPE_CHECKING:
    from folio.core.ports import OutputStorage

logger = logging.getLogger(__name__)

INDEX_PATH = "index.html"
DOCUMENT_TEMPLATE = "document.html.jinja2"
INDEX_TEMPLATE = "index.html.jinja2"


class HtmlOutputSink:
    """Publishes a Collection as one HTML page per document plus an index page.

    Every artifact is rendered in memory first. Storage is only touched once
    the whole collection has rendered, so a ``RenderError`` leaves the previous
    output as it was.
    """

    def __init__(
        self,
        storage: OutputStorage,
        *,
        site_title: str = "Articles",
        renderer: MarkdownRenderer | None = None,
        templates: TemplateLoader | None = None,
        workers: int = 1,
    ) -> None:
        self.storage = storage
        self.site_title = site_title
        self.renderer = renderer or MarkdownRenderer()
        self.templates = templates or TemplateLoader()
        self.workers = workers

    def publish(self, collection: Collection) -> PublishReport:
        """Render and write the collection.

        Prior artifacts are cleared before writing so each run replaces the
        previous one wholesale.

        Raises:
            RenderError: If any document body cannot be rendered.

        """
        artifacts = self.render(collection)

        self.storage.clear()
        if self.workers > 1 and len(artifacts) > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                list(executor.map(lambda item: self.storage.write(*item), artifacts.items()))
        else:
            for path, data in artifacts.items():
                self.storage.write(path, data)

        logger.info("Published %d documents and %s", len(collection), INDEX_PATH)
        return PublishReport(artifacts=tuple(artifacts), index=INDEX_PATH)

    def render(self, collection: Collection) -> dict[str, bytes]:
        """Render every artifact of the collection without writing anything."""
        artifacts: dict[str, bytes] = {}
        for doc in collection:
            artifacts[page_path(doc.identifier)] = self._render_document(doc)
        artifacts[INDEX_PATH] = self._render_index(collection)
        return artifacts

    def _render_document(self, doc: Document) -> bytes:
        body = self.renderer.render(doc.body, doc.source)
        page = self.templates.render_template(
            DOCUMENT_TEMPLATE,
            document=doc,
            body=Markup(body),
            site_title=self.site_title,
        )
        return page.encode("utf-8")

    def _render_index(self, collection: Collection) -> bytes:
        page = self.templates.render_template(
            INDEX_TEMPLATE,
            documents=list(collection),
            site_title=self.site_title,
        )
        return page.encode("utf-8")
