"""Transport adapters for remote option endpoints."""

from searchselect.transport.http import HttpOptionsClient

__all__ = ["HttpOptionsClient"]
