"""HTTP client for the dashboard's own JSON API."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from life_dashboard.domain.errors import UpstreamCallError


@dataclass(frozen=True)
class ApiResponse:
    """Status code and decoded JSON object of one API call."""

    status_code: int
    payload: dict[str, object]

    @property
    def ok(self) -> bool:
        return httpx.codes.is_success(self.status_code)


class DashboardApi(Protocol):
    """Interface used by the presentation shell."""

    async def get_json(self, path: str) -> ApiResponse:
        """GET a path and return its status and JSON body."""


@dataclass
class HttpxDashboardApiClient(DashboardApi):
    """HTTPX-backed client for a running dashboard backend."""

    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, base_url: str) -> "HttpxDashboardApiClient":
        """Create a client with a managed httpx session."""
        return cls(base_url=base_url.rstrip("/"), http_client=httpx.AsyncClient())

    async def get_json(self, path: str) -> ApiResponse:
        """Fetch a path without caching; non-2xx bodies are still decoded."""
        try:
            response = await self.http_client.get(
                f"{self.base_url}{path}",
                headers={"Cache-Control": "no-store"},
                timeout=15,
            )
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise UpstreamCallError(f"Request to {path} failed: {exc}") from exc
        if not isinstance(payload, dict):
            raise UpstreamCallError(f"Request to {path} returned a non-object body")
        return ApiResponse(status_code=response.status_code, payload=payload)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
