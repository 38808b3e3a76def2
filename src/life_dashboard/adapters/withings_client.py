"""Withings API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from life_dashboard.domain.errors import UpstreamCallError


class WithingsClient(Protocol):
    """Interface for the Withings OAuth and measure endpoints."""

    async def refresh_access_token(self, refresh_token: str) -> dict[str, object]:
        """Exchange a refresh token and return the token body."""

    async def get_measure_groups(
        self, access_token: str, last_update: int
    ) -> list[dict[str, object]]:
        """Return body measurement groups updated since a unix timestamp."""


@dataclass
class HttpxWithingsClient(WithingsClient):
    """HTTPX-backed Withings client."""

    client_id: str
    client_secret: str
    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(
        cls, client_id: str, client_secret: str, base_url: str
    ) -> "HttpxWithingsClient":
        """Create a Withings client with a managed httpx session."""
        return cls(
            client_id=client_id,
            client_secret=client_secret,
            base_url=base_url,
            http_client=httpx.AsyncClient(),
        )

    async def refresh_access_token(self, refresh_token: str) -> dict[str, object]:
        """Rotate the refresh token through the OAuth2 endpoint."""
        response = await self._send(
            "POST",
            "/v2/oauth2",
            data={
                "action": "requesttoken",
                "grant_type": "refresh_token",
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "refresh_token": refresh_token,
            },
        )
        return _body(response, "Withings token refresh failed")

    async def get_measure_groups(
        self, access_token: str, last_update: int
    ) -> list[dict[str, object]]:
        """Fetch real (category 1) measurement groups."""
        response = await self._send(
            "GET",
            "/measure",
            params={"action": "getmeas", "category": 1, "lastupdate": last_update},
            headers={"Authorization": f"Bearer {access_token}"},
        )
        groups = _body(response, "Withings getmeas failed").get("measuregrps")
        if not isinstance(groups, list):
            return []
        return [group for group in groups if isinstance(group, dict)]

    async def _send(self, method: str, path: str, **kwargs: object) -> object:
        try:
            response = await self.http_client.request(
                method, f"{self.base_url}{path}", timeout=15, **kwargs
            )
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise UpstreamCallError(f"Withings request failed: {exc}") from exc

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _body(payload: object, failure: str) -> dict[str, object]:
    """Unwrap the Withings envelope, which reports errors with a non-zero status."""
    if not isinstance(payload, dict) or payload.get("status") != 0:
        raise UpstreamCallError(f"{failure}: {payload}")
    body = payload.get("body")
    return body if isinstance(body, dict) else {}
