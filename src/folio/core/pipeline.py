"""Loader -> Indexer -> Publisher, run once per build."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from folio.core.indexer import build_collection
from folio.core.loader import load_documents
from folio.infra.sinks.html import INDEX_PATH, HtmlOutputSink
from folio.infra.storage import FilesystemStorage

if TYPE_CHECKING:
    from folio.core.config import FolioConfig
    from folio.core.ports import OutputSink, OutputStorage
    from folio.core.types import Collection, PublishReport

logger = logging.getLogger(__name__)

# Identifiers that would overwrite a generated artifact.
RESERVED_IDENTIFIERS = frozenset({INDEX_PATH.removesuffix(".html")})


def collect(config: FolioConfig) -> Collection:
    """Load and index the content directory without publishing anything."""
    documents = load_documents(
        config.paths.abs_content_dir,
        patterns=config.build.patterns,
        encoding=config.build.encoding,
        workers=config.build.workers,
    )
    return build_collection(documents, config.ordering.as_policy(), reserved=RESERVED_IDENTIFIERS)


def build_site(config: FolioConfig, storage: OutputStorage | None = None) -> PublishReport:
    """Run the full pipeline.

    Any ``FolioError`` aborts the run; nothing is written unless loading,
    indexing and rendering all succeed.
    """
    collection = collect(config)
    if storage is None:
        storage = FilesystemStorage(config.paths.abs_output_dir)

    sink: OutputSink = HtmlOutputSink(
        storage, site_title=config.build.site_title, workers=config.build.workers
    )
    report = sink.publish(collection)
    logger.info("Build complete: %d artifacts", len(report.artifacts))
    return report
