"""Ordering policy for collections.

Ordering values in front matter are usually strings (``order: "086"``), so a
plain string comparison would put ``"10"`` before ``"9"``. The ``natural``
mode compares them as follows:

1. Numbers and numeric strings compare by numeric value (``"086" == 86``).
2. Any numeric value sorts before any non-numeric string.
3. Non-numeric strings compare by code point.
4. Documents without a value sort after everything else.

The ``lexical`` mode compares ``str(value)`` and also puts missing values last.
"""

import re
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from folio.core.exceptions import MalformedDocumentError
from folio.core.types import Document

_NUMERIC_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")

# Rank of the first tuple element in a sort key.
_NUMERIC = 0
_TEXT = 1
_MISSING = 2

SortKey = tuple[int, Decimal, str]


class OrderMode(str, Enum):
    NATURAL = "natural"
    LEXICAL = "lexical"


class OrderingPolicy(BaseModel):
    """How the indexer orders published documents."""

    model_config = ConfigDict(frozen=True)

    field: str = "order"
    mode: OrderMode = OrderMode.NATURAL
    descending: bool = False

    def value_for(self, doc: Document) -> Any:
        if self.field == "order":
            return doc.order
        return doc.metadata.get(self.field)

    def key_for(self, doc: Document) -> SortKey:
        try:
            return sort_key(self.value_for(doc), self.mode)
        except TypeError as exc:
            raise MalformedDocumentError(doc.source, str(exc)) from exc


def sort_key(value: Any, mode: OrderMode = OrderMode.NATURAL) -> SortKey:
    """Map an ordering value to a totally ordered tuple.

    Raises:
        TypeError: If the value is not a string, number or ``None``.

    """
    if value is None:
        return (_MISSING, Decimal(0), "")
    if isinstance(value, bool) or not isinstance(value, str | int | float):
        msg = f"ordering value {value!r} is not a string or number"
        raise TypeError(msg)

    if mode is OrderMode.LEXICAL:
        return (_TEXT, Decimal(0), str(value))

    if isinstance(value, int | float):
        if value != value:  # NaN has no place in a total order
            msg = "ordering value NaN is not comparable"
            raise TypeError(msg)
        return (_NUMERIC, Decimal(str(value)), "")

    text = value.strip()
    if _NUMERIC_RE.match(text):
        return (_NUMERIC, Decimal(text), "")
    return (_TEXT, Decimal(0), value)
