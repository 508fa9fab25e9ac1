"""
Remote Configuration Store Client

Thin async client for the PostgREST API in front of the configuration
store (intent pattern registry, override tables, rule set versions).
All calls raise ``httpx.HTTPError`` on transport or status failures;
callers decide how to degrade.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from asobible.config import settings


class RemoteStoreClient:
    """PostgREST client. One short-lived ``httpx.AsyncClient`` per call."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=f"{self.base_url}/rest/v1",
            headers={
                "apikey": self._api_key,
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
            },
            timeout=self._timeout,
            transport=self._transport,
        )

    async def rpc(self, function: str, params: dict[str, Any]) -> list[dict]:
        """Call a stored function and return its rows."""
        async with self._client() as client:
            response = await client.post(f"/rpc/{function}", json=params)
            response.raise_for_status()
            return _rows(response)

    async def select(self, table: str, filters: dict[str, Optional[str]]) -> list[dict]:
        """Select rows with equality filters. A None value filters on IS NULL."""
        params = {"select": "*"}
        for column, value in filters.items():
            params[column] = "is.null" if value is None else f"eq.{value}"
        async with self._client() as client:
            response = await client.get(f"/{table}", params=params)
            response.raise_for_status()
            return _rows(response)

    async def insert(self, table: str, rows: list[dict]) -> None:
        async with self._client() as client:
            response = await client.post(
                f"/{table}", json=rows, headers={"Prefer": "return=minimal"},
            )
            response.raise_for_status()


def _rows(response: httpx.Response) -> list[dict]:
    payload = response.json()
    if not isinstance(payload, list):
        raise ValueError(f"Expected a list of rows, got {type(payload).__name__}")
    return payload


def default_remote_client() -> Optional[RemoteStoreClient]:
    """Client built from settings, or None when the store is not configured."""
    if not settings.remote_enabled:
        return None
    return RemoteStoreClient(
        settings.SUPABASE_URL,
        settings.SUPABASE_KEY,
        timeout=settings.REMOTE_TIMEOUT_SECONDS,
    )
