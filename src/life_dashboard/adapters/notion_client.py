"""Notion REST API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from life_dashboard.domain.errors import UpstreamCallError


class NotionClient(Protocol):
    """Interface for the Notion endpoints the dashboard uses."""

    async def query_data_source(
        self,
        data_source_id: str,
        page_size: int = 100,
        filter_: dict[str, object] | None = None,
    ) -> list[dict[str, object]]:
        """Query a data source and return its result pages."""

    async def create_page(
        self, data_source_id: str, properties: dict[str, object]
    ) -> dict[str, object]:
        """Create a page inside a data source."""

    async def update_page(
        self, page_id: str, properties: dict[str, object]
    ) -> dict[str, object]:
        """Update the properties of an existing page."""


@dataclass
class HttpxNotionClient(NotionClient):
    """HTTPX-backed Notion client."""

    token: str
    base_url: str
    notion_version: str
    http_client: httpx.AsyncClient
    timeout: float = 15

    @classmethod
    def create(
        cls, token: str, base_url: str, notion_version: str
    ) -> "HttpxNotionClient":
        """Create a Notion client with a managed httpx session."""
        return cls(
            token=token,
            base_url=base_url,
            notion_version=notion_version,
            http_client=httpx.AsyncClient(),
        )

    async def query_data_source(
        self,
        data_source_id: str,
        page_size: int = 100,
        filter_: dict[str, object] | None = None,
    ) -> list[dict[str, object]]:
        """Return the first page of results of a data source query."""
        body: dict[str, object] = {"page_size": page_size}
        if filter_ is not None:
            body["filter"] = filter_
        payload = await self._request(
            "POST", f"/data_sources/{data_source_id}/query", body
        )
        results = payload.get("results")
        if not isinstance(results, list):
            raise UpstreamCallError("Notion query returned no results list")
        return [row for row in results if isinstance(row, dict)]

    async def create_page(
        self, data_source_id: str, properties: dict[str, object]
    ) -> dict[str, object]:
        """Create a page under a data source parent."""
        body = {
            "parent": {"type": "data_source_id", "data_source_id": data_source_id},
            "properties": properties,
        }
        return await self._request("POST", "/pages", body)

    async def update_page(
        self, page_id: str, properties: dict[str, object]
    ) -> dict[str, object]:
        """Patch page properties."""
        return await self._request(
            "PATCH", f"/pages/{page_id}", {"properties": properties}
        )

    async def _request(
        self, method: str, path: str, body: dict[str, object]
    ) -> dict[str, object]:
        try:
            response = await self.http_client.request(
                method,
                f"{self.base_url}{path}",
                json=body,
                headers={
                    "Authorization": f"Bearer {self.token}",
                    "Notion-Version": self.notion_version,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise UpstreamCallError(_status_message(exc.response)) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise UpstreamCallError(f"Notion request failed: {exc}") from exc
        if not isinstance(payload, dict):
            raise UpstreamCallError("Notion returned a non-object body")
        return payload

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _status_message(response: httpx.Response) -> str:
    """Prefer Notion's own error message over the bare status line."""
    try:
        message = response.json().get("message")
    except (ValueError, AttributeError):
        message = None
    if isinstance(message, str) and message:
        return message
    return f"Notion request failed with status {response.status_code}"
