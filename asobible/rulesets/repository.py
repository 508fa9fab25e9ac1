"""
Remote Rule Set Repository

Loads per-scope override rows from the configuration store and
normalizes them into RuleSet layers. Every failure degrades to None
(logged); the caller then keeps the code-defined layers only.

Also builds version snapshot rows for the rule set version table.
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import asdict
from typing import Optional

import httpx

from asobible.config import settings
from asobible.logging import scope_context
from asobible.remote import RemoteStoreClient, default_remote_client
from asobible.rulesets.models import MergedRuleSet, RuleSet
from asobible.rulesets.normalizer import (
    OverridesBundle,
    build_rule_set_from_bundle,
    scope_source,
)

logger = logging.getLogger(__name__)

OVERRIDE_TABLES = {
    "token_overrides": "aso_token_relevance_overrides",
    "hook_overrides": "aso_hook_pattern_overrides",
    "stopword_overrides": "aso_stopword_overrides",
    "kpi_overrides": "aso_kpi_weight_overrides",
    "formula_overrides": "aso_formula_overrides",
    "recommendation_overrides": "aso_recommendation_templates",
}

VERSIONS_TABLE = "aso_ruleset_versions"


class RuleSetRepository:
    """Remote override loader for one configuration store."""

    def __init__(self, client: RemoteStoreClient):
        self.client = client

    async def load_overrides(
        self,
        vertical: Optional[str] = None,
        market: Optional[str] = None,
        organization_id: Optional[str] = None,
    ) -> Optional[RuleSet]:
        """Normalized remote layer for a scope, or None if absent/unavailable."""
        scope = scope_source(vertical, market, organization_id)
        filters = {
            "scope": scope,
            "vertical": vertical,
            "market": market,
            "organization_id": organization_id,
            "is_active": "true",
        }

        bundle = OverridesBundle(
            vertical=vertical, market=market, organization_id=organization_id,
        )
        try:
            for attr, table in OVERRIDE_TABLES.items():
                setattr(bundle, attr, await self.client.select(table, filters))
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(
                "Failed to load remote overrides, using code-defined rule sets",
                extra=scope_context(vertical, market, organization_id,
                                    error=str(exc), error_type=type(exc).__name__),
            )
            return None

        if bundle.is_empty():
            return None

        try:
            return build_rule_set_from_bundle(bundle)
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning(
                "Malformed remote overrides, using code-defined rule sets",
                extra=scope_context(vertical, market, organization_id, error=str(exc)),
            )
            return None

    async def record_version(self, snapshot: dict) -> bool:
        """Insert a version snapshot row. Returns False on failure."""
        try:
            await self.client.insert(VERSIONS_TABLE, [snapshot])
        except httpx.HTTPError as exc:
            logger.warning("Failed to record rule set version", extra={"error": str(exc)})
            return False
        return True


def default_repository() -> Optional[RuleSetRepository]:
    if not settings.DB_RULESETS_ENABLED:
        return None
    client = default_remote_client()
    return RuleSetRepository(client) if client is not None else None


# ============================================================
# VERSION SNAPSHOTS
# ============================================================

def _layer_version(layer: Optional[RuleSet]) -> Optional[str]:
    return layer.version if layer is not None else None


def build_version_snapshot(merged: MergedRuleSet, notes: Optional[str] = None) -> dict:
    """Row for the version table: layer versions plus a hashed JSON snapshot."""
    chain = merged.inheritance_chain
    snapshot = {
        "id": merged.id,
        "vertical_id": merged.vertical_id,
        "market_id": merged.market_id,
        "kpi_overrides": merged.kpi_overrides,
        "formula_overrides": merged.formula_overrides,
        "intent_overrides": merged.intent_overrides,
        "hook_overrides": merged.hook_overrides,
        "token_relevance_overrides": merged.token_relevance_overrides,
        "stopword_overrides": merged.stopword_overrides,
        "recommendation_overrides": merged.recommendation_overrides,
        "character_limits": merged.character_limits,
        "leak_warnings": [asdict(w) for w in merged.leak_warnings],
    }
    canonical = json.dumps(snapshot, sort_keys=True, default=str)
    return {
        "scope": scope_source(merged.vertical_id, merged.market_id, merged.organization_id),
        "vertical": merged.vertical_id,
        "market": merged.market_id,
        "organization_id": merged.organization_id,
        "ruleset_version": merged.version,
        "vertical_version": _layer_version(chain.vertical if chain else None),
        "market_version": _layer_version(chain.market if chain else None),
        "client_version": _layer_version(chain.client if chain else None),
        "schema_version": settings.SCHEMA_VERSION,
        "kpi_schema_version": settings.KPI_SCHEMA_VERSION,
        "ruleset_snapshot": snapshot,
        "snapshot_hash": hashlib.sha256(canonical.encode()).hexdigest(),
        "notes": notes,
        "is_active": True,
    }
