"""Data store adapters."""

from searchselect.stores.memory import InMemoryStore

__all__ = ["InMemoryStore"]
