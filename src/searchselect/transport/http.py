"""HTTP adapter exposing a remote JSON endpoint as a query source."""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import ValidationError

from searchselect import logger
from searchselect.exceptions import ConfigurationError, TransportError
from searchselect.settings import Settings, build_httpx_client_kwargs, get_settings
from searchselect.sources.query import QuerySource
from searchselect.typing.models import OptionEntry


class HttpOptionsClient:
    """Client for an endpoint serving `GET /search` and `GET /labels`.

    Both routes answer with a JSON array of `{"key": ..., "label": ...}` objects.
    """

    def __init__(
        self,
        base_url: str | None = None,
        settings: Settings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize client.

        Args:
            base_url (str | None): Endpoint root; defaults to `SEARCH_ENDPOINT_URL`.
            settings (Settings | None): Runtime settings.
            client (httpx.AsyncClient | None): Preconfigured HTTPX client.

        Raises:
            ConfigurationError: If no endpoint URL is available.
        """
        self._settings = settings or get_settings()
        url = base_url or self._settings.search_endpoint_url
        if not url:
            raise ConfigurationError(message="SEARCH_ENDPOINT_URL is required for the HTTP options client")
        self._base_url = url.rstrip("/")
        self._client = client
        self._owns_client = client is None

    def _http_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                **build_httpx_client_kwargs(self._settings),
                limits=httpx.Limits(max_connections=self._settings.max_connections),
            )
        return self._client

    async def _get_json(self, path: str, params: Any) -> Any:
        """Send one GET request and decode its JSON body.

        Args:
            path (str): Route below the base URL.
            params (Any): Query parameters.

        Raises:
            TransportError: If the request fails or the body is not JSON.

        Returns:
            Any: Decoded payload.
        """
        url = f"{self._base_url}{path}"
        try:
            response = await self._http_client().get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                message=f"Options request failed with status {exc.response.status_code}",
            ) from exc
        except httpx.TimeoutException as exc:
            raise TransportError(message="Options request timed out") from exc
        except httpx.HTTPError as exc:
            raise TransportError(message=f"Options request failed: {exc}") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(message="Options endpoint returned invalid JSON") from exc

    async def search(self, query: str, limit: int) -> list[OptionEntry]:
        """Search the remote option set.

        Args:
            query (str): Search text.
            limit (int): Maximum results requested.

        Returns:
            list[OptionEntry]: Entries in endpoint order.
        """
        payload = await self._get_json("/search", {"q": query, "limit": limit})
        return _parse_entries(payload)

    async def option_labels(self, keys: list[str]) -> dict[str, str]:
        """Fetch labels for several keys in one request."""
        if not keys:
            return {}
        payload = await self._get_json("/labels", [("keys", key) for key in keys])
        return {entry.key: entry.label for entry in _parse_entries(payload)}

    async def option_label(self, key: str) -> str | None:
        """Fetch the label of one key."""
        return (await self.option_labels([key])).get(key)

    def as_query_source(self) -> QuerySource:
        """Build a query source backed by this client."""
        return QuerySource(self.search, label_using=self.option_label, labels_using=self.option_labels)

    async def aclose(self) -> None:
        """Close the HTTPX client when this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            logger.debug("Closed options HTTP client", extra={"base_url": self._base_url})
        self._client = None


def _parse_entries(payload: Any) -> list[OptionEntry]:
    """Validate an endpoint payload.

    Args:
        payload (Any): Decoded JSON.

    Raises:
        TransportError: If the payload is not a list of key/label objects.

    Returns:
        list[OptionEntry]: Parsed entries.
    """
    if not isinstance(payload, list):
        raise TransportError(message="Options endpoint must return a JSON array")
    entries: list[OptionEntry] = []
    for item in payload:
        if not isinstance(item, dict) or "key" not in item or "label" not in item:
            raise TransportError(message=f"Malformed option item: {item!r}")
        try:
            entries.append(OptionEntry(key=item["key"], label=str(item["label"])))
        except ValidationError as exc:
            raise TransportError(message=f"Malformed option item: {item!r}") from exc
    return entries
