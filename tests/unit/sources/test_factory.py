from __future__ import annotations

import pytest

from searchselect.exceptions import ConfigurationError
from searchselect.sources import QuerySource, RelationSource, StaticSource, build_source
from searchselect.stores import InMemoryStore
from searchselect.typing.models import RelationConfig

RELATION = RelationConfig(name="author", target="users", title_attribute="name")


def _search(query: str, limit: int) -> dict[str, str]:
    return {}


def test_build_static_source() -> None:
    assert isinstance(build_source(options={"a": "A"}), StaticSource)


def test_build_query_source() -> None:
    source = build_source(search_results_using=_search, option_labels_using=lambda keys: {})
    assert isinstance(source, QuerySource)
    assert source.supports_batch_labels is True


def test_build_relation_source() -> None:
    source = build_source(relation=RELATION, store=InMemoryStore())
    assert isinstance(source, RelationSource)
    assert source.relation == RELATION


@pytest.mark.parametrize(
    ("kwargs", "match"),
    [
        ({"options": {"a": "A"}, "search_results_using": _search}, "mutually exclusive"),
        ({"options": {"a": "A"}, "relation": RELATION}, "mutually exclusive"),
        ({}, "is required"),
        ({"options": {"a": "A"}, "option_label_using": lambda key: key}, "only used with"),
        ({"search_results_using": _search}, "requires option_label_using"),
        ({"relation": RELATION}, "data store adapter"),
    ],
)
def test_invalid_combinations_raise(kwargs, match) -> None:
    with pytest.raises(ConfigurationError, match=match):
        build_source(**kwargs)
