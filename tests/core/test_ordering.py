from decimal import Decimal

import pytest
from hypothesis import given, strategies as st

from folio.core.exceptions import MalformedDocumentError
from folio.core.ordering import OrderingPolicy, OrderMode, sort_key
from folio.core.types import Document


def test_numeric_strings_compare_by_value():
    assert sort_key("9") < sort_key("10")
    assert sort_key("086") == sort_key(86) == sort_key("86")
    assert sort_key("1.5") < sort_key(2)


def test_numbers_sort_before_text_and_missing_sorts_last():
    keys = [sort_key(None), sort_key("intro"), sort_key(3), sort_key("appendix")]

    assert sorted(keys) == [sort_key(3), sort_key("appendix"), sort_key("intro"), sort_key(None)]


def test_lexical_mode_compares_strings():
    assert sort_key("10", OrderMode.LEXICAL) < sort_key("9", OrderMode.LEXICAL)
    assert sort_key(None, OrderMode.LEXICAL) > sort_key("zzz", OrderMode.LEXICAL)


@pytest.mark.parametrize("value", [True, [1], {"a": 1}, float("nan")])
def test_sort_key_rejects_incomparable_values(value):
    with pytest.raises(TypeError):
        sort_key(value)


def test_sort_key_numeric_component_is_exact():
    assert sort_key("0.1")[1] == Decimal("0.1")


def test_policy_reads_custom_field_from_metadata():
    doc = Document(identifier="a", title="A", source="a.md", order="5", metadata={"weight": 2})
    policy = OrderingPolicy(field="weight")

    assert policy.value_for(doc) == 2
    assert policy.key_for(doc) == sort_key(2)


def test_policy_reports_incomparable_values_as_malformed():
    doc = Document(identifier="a", title="A", source="a.md", metadata={"weight": [1, 2]})

    with pytest.raises(MalformedDocumentError, match="a.md"):
        OrderingPolicy(field="weight").key_for(doc)


@given(st.lists(st.integers(min_value=0, max_value=10_000), max_size=30), st.integers(min_value=0, max_value=5))
def test_zero_padded_strings_sort_like_integers(values, width):
    padded = [str(value).zfill(width) for value in values]

    assert sorted(padded, key=sort_key) == [str(value).zfill(width) for value in sorted(values)]
