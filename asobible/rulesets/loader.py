"""
Active Rule Set Loader

Builds the effective rule set for a piece of app metadata:

  detect vertical + market
    -> base, vertical, market, client layers from the store
       (each followed by its remote override layer when available)
    -> merge
    -> leak detection

Merged rule sets are cached per (vertical, market, organization, app)
before leak detection; warnings are recomputed per request because they
depend on the app's category.
"""

from __future__ import annotations

import copy
import logging
import time
from typing import Optional

from asobible.cache import RuleSetCache
from asobible.config import settings
from asobible.leak_detection import apply_leak_detection
from asobible.logging import scope_context
from asobible.profiles import get_market_by_id, get_vertical_by_id
from asobible.rulesets.merger import merge_rule_sets
from asobible.rulesets.models import MergedRuleSet, RuleSet
from asobible.rulesets.repository import RuleSetRepository, default_repository
from asobible.rulesets.store import (
    load_base_rule_set,
    load_client_rule_set,
    load_market_rule_set,
    load_vertical_rule_set,
)
from asobible.signatures import detect_market, detect_vertical

logger = logging.getLogger(__name__)

# Singleton - shared across the application
rule_set_cache = RuleSetCache(
    ttl_seconds=settings.RULESET_CACHE_TTL_SECONDS,
    max_entries=settings.RULESET_CACHE_MAX_ENTRIES,
)

_repository: Optional[RuleSetRepository] = default_repository()


def set_repository(repository: Optional[RuleSetRepository]) -> None:
    """Replace the remote repository (None disables remote overrides)."""
    global _repository
    _repository = repository


async def _build_layers(
    vertical_id: str,
    market_id: str,
    organization_id: Optional[str],
    app_id: Optional[str],
) -> list[Optional[RuleSet]]:
    vertical = vertical_id if vertical_id != "base" else None
    layers: list[Optional[RuleSet]] = [load_base_rule_set()]

    layers.append(load_vertical_rule_set(vertical))
    if _repository is not None and vertical:
        layers.append(await _repository.load_overrides(vertical=vertical))

    layers.append(load_market_rule_set(market_id))
    if _repository is not None:
        layers.append(await _repository.load_overrides(market=market_id))

    layers.append(load_client_rule_set(app_id))
    if _repository is not None and organization_id:
        layers.append(await _repository.load_overrides(organization_id=organization_id))

    return layers


async def get_rule_set_for_vertical_market(
    vertical_id: str,
    market_id: str,
    metadata: Optional[dict] = None,
    organization_id: Optional[str] = None,
    app_id: Optional[str] = None,
) -> MergedRuleSet:
    """Merged rule set for an explicit vertical/market, with leak warnings."""
    start = time.time()
    cached = await rule_set_cache.get(vertical_id, market_id, organization_id, app_id)

    if cached is None:
        merged = merge_rule_sets(
            *await _build_layers(vertical_id, market_id, organization_id, app_id)
        )
        merged.vertical_id = vertical_id
        merged.market_id = market_id
        vertical = get_vertical_by_id(vertical_id)
        market = get_market_by_id(market_id)
        merged.vertical_name = vertical.label if vertical else None
        merged.market_name = market.label if market else None
        await rule_set_cache.put(vertical_id, market_id, merged, organization_id, app_id)
        cache_state = "miss"
    else:
        merged = cached
        cache_state = "hit"

    # Callers get their own copy; the cached merge is never handed out.
    result = copy.deepcopy(merged)
    result.leak_warnings = []
    apply_leak_detection(result, metadata or {})

    logger.info(
        "Active rule set resolved",
        extra=scope_context(
            vertical_id, market_id, organization_id, app_id,
            cache=cache_state,
            warnings_count=len(result.leak_warnings),
            duration_ms=round((time.time() - start) * 1000, 1),
        ),
    )
    return result


async def get_active_rule_set(
    metadata: dict,
    locale: str = "en-US",
    organization_id: Optional[str] = None,
) -> MergedRuleSet:
    """Detect vertical and market for app metadata and return its rule set."""
    vertical = detect_vertical(metadata)
    market = detect_market(locale)
    return await get_rule_set_for_vertical_market(
        vertical.vertical_id,
        market.market_id,
        metadata=metadata,
        organization_id=organization_id,
        app_id=metadata.get("app_id"),
    )


async def invalidate_cached_rule_set(
    vertical_id: str,
    market_id: str,
    organization_id: Optional[str] = None,
    app_id: Optional[str] = None,
) -> None:
    await rule_set_cache.invalidate(vertical_id, market_id, organization_id, app_id)


async def clear_rule_set_cache() -> None:
    await rule_set_cache.clear()
