from __future__ import annotations

import asyncio

import pytest

from searchselect.exceptions import UnsupportedOperationError
from searchselect.sources.base import cap_entries, coerce_entries, coerce_labels
from searchselect.sources.query import QuerySource
from searchselect.sources.static import StaticSource
from searchselect.typing.enums import SourceKind
from searchselect.typing.models import OptionEntry


def _source() -> StaticSource:
    return StaticSource({"fr": "France", "de": "Germany", "fi": "Finland", 4: "Four"})


def test_static_source_lists_in_declared_order() -> None:
    source = _source()
    entries = asyncio.run(source.list_options())

    assert source.kind is SourceKind.STATIC
    assert source.supports_listing is True
    assert [entry.key for entry in entries] == ["fr", "de", "fi", "4"]
    assert "4" in source
    assert len(source) == 4


def test_static_search_is_case_insensitive_substring() -> None:
    entries = asyncio.run(_source().search("AN", 10))
    assert [entry.label for entry in entries] == ["France", "Germany", "Finland"]


def test_static_search_respects_limit() -> None:
    entries = asyncio.run(_source().search("an", 2))
    assert [entry.key for entry in entries] == ["fr", "de"]


def test_static_blank_search_returns_everything_capped() -> None:
    entries = asyncio.run(_source().search("  ", 3))
    assert len(entries) == 3


def test_static_label_resolution_omits_unknown_keys() -> None:
    source = _source()

    assert asyncio.run(source.resolve_label("de")) == "Germany"
    assert asyncio.run(source.resolve_label("xx")) is None
    assert asyncio.run(source.resolve_labels(["fi", "xx", "4"])) == {"fi": "Finland", "4": "Four"}


def test_coerce_entries_accepts_supported_shapes() -> None:
    entries = coerce_entries([OptionEntry(key="a", label="A"), (2, "B")])
    assert [(entry.key, entry.label) for entry in entries] == [("a", "A"), ("2", "B")]
    assert coerce_entries(None) == []


def test_coerce_entries_rejects_unknown_items() -> None:
    with pytest.raises(TypeError, match="Unsupported search result item"):
        coerce_entries(["just-a-string"])


def test_coerce_labels_drops_none_labels() -> None:
    assert coerce_labels({1: "One", 2: None}) == {"1": "One"}


def test_cap_entries_without_limit_keeps_everything() -> None:
    entries = [OptionEntry(key=str(index), label=str(index)) for index in range(5)]
    assert len(cap_entries(entries, None, source="test")) == 5


def test_base_listing_is_unsupported_for_query_like_sources() -> None:
    source = QuerySource(lambda query, limit: [], labels_using=lambda keys: {})
    with pytest.raises(UnsupportedOperationError):
        asyncio.run(source.list_options())
