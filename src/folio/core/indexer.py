"""Collection indexer: filters, orders and de-duplicates loaded documents."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from folio.core.exceptions import DuplicateIdentifierError
from folio.core.types import Collection, Document

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from folio.core.ordering import OrderingPolicy

logger = logging.getLogger(__name__)


def _check_identifiers(documents: Sequence[Document], reserved: Iterable[str]) -> None:
    reserved_names = set(reserved)
    seen: dict[str, Document] = {}
    for doc in documents:
        if doc.identifier in reserved_names:
            raise DuplicateIdentifierError(doc.identifier, [doc.source, "<reserved>"])
        first = seen.get(doc.identifier)
        if first is not None:
            raise DuplicateIdentifierError(doc.identifier, [first.source, doc.source])
        seen[doc.identifier] = doc


def build_collection(
    documents: Iterable[Document],
    policy: OrderingPolicy,
    *,
    reserved: Iterable[str] = (),
) -> Collection:
    """Build the ordered Collection of published documents.

    Unpublished documents are dropped. The sort is stable, so documents with
    equal keys keep their input order in both directions. Documents without
    an ordering value always come last.

    Raises:
        DuplicateIdentifierError: If two published documents share an
            identifier, or one uses a reserved artifact name.
        MalformedDocumentError: If an ordering value cannot be compared.

    """
    published = [doc for doc in documents if doc.published]
    _check_identifiers(published, reserved)

    ordered: list[Document] = []
    missing: list[Document] = []
    for doc in published:
        (missing if policy.value_for(doc) is None else ordered).append(doc)

    ordered.sort(key=policy.key_for, reverse=policy.descending)
    result = (*ordered, *missing)

    logger.info("Indexed %d published documents (%s, %s)", len(result), policy.field, policy.mode.value)
    return Collection(documents=result)
