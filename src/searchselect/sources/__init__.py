"""Option source variants."""

from searchselect.sources.base import OptionSource
from searchselect.sources.factory import build_source
from searchselect.sources.query import QuerySource
from searchselect.sources.relation import RelationSource
from searchselect.sources.static import StaticSource

__all__ = [
    "OptionSource",
    "QuerySource",
    "RelationSource",
    "StaticSource",
    "build_source",
]
