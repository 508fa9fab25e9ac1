"""
Intent Pattern Sources

Where effective intent patterns come from. The loader only depends on
the PatternSource interface; the remote registry is one implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from asobible.remote import RemoteStoreClient


class PatternSource(ABC):
    """Abstract source of raw intent pattern rows."""

    @abstractmethod
    async def fetch_patterns(
        self,
        vertical: Optional[str] = None,
        market: Optional[str] = None,
        organization_id: Optional[str] = None,
        app_id: Optional[str] = None,
    ) -> list[dict]:
        """Return raw pattern rows for a scope (may be empty)."""
        ...


class RemotePatternSource(PatternSource):
    """Reads the intent pattern registry through its scoped RPC."""

    RPC_NAME = "get_effective_intent_patterns"

    def __init__(self, client: RemoteStoreClient):
        self.client = client

    async def fetch_patterns(
        self,
        vertical: Optional[str] = None,
        market: Optional[str] = None,
        organization_id: Optional[str] = None,
        app_id: Optional[str] = None,
    ) -> list[dict]:
        return await self.client.rpc(self.RPC_NAME, {
            "p_vertical": vertical,
            "p_market": market,
            "p_organization_id": organization_id,
            "p_app_id": app_id,
        })


class StaticPatternSource(PatternSource):
    """Serves a fixed list of rows. Used for local setups and tests."""

    def __init__(self, rows: list[dict]):
        self.rows = list(rows)

    async def fetch_patterns(self, vertical=None, market=None,
                             organization_id=None, app_id=None) -> list[dict]:
        return list(self.rows)
