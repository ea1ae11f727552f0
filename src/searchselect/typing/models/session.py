"""Search session and data-store query models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from searchselect.typing.enums import SearchStatus


class SearchSession(BaseModel):
    """Current search of a field: query, issued request id and status."""

    model_config = ConfigDict(extra="forbid")

    query: str = ""
    request_id: int | None = None
    status: SearchStatus = SearchStatus.IDLE


class FilterSpec(BaseModel):
    """Query shape handed to a data-store adapter."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    collection: str
    query: str = ""
    columns: tuple[str, ...] = ()
    limit: int | None = Field(default=None, ge=1)
    order_by: str | None = None
    where: dict[str, Any] = Field(default_factory=dict)
