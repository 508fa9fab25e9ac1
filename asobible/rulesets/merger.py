"""
Rule Set Merge Engine

Merges a chain of rule set layers, supplied in increasing precedence
(base < vertical < market < client), into one MergedRuleSet.

The merge runs over an explicit schema of override fields rather than
over arbitrary attributes:

  MAP_FIELDS     - recursive key-by-key merge; a later layer's defined
                   key wins, nested dicts merge, anything else (lists
                   included) replaces the accumulated value
  APPEND_FIELDS  - concatenated across layers, no dedup

A field left as None on a layer leaves the accumulated value untouched.
The engine never infers order from ``source``: the caller's order is
the precedence order.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from asobible.patterns.models import HOOK_CATEGORIES
from asobible.rulesets.models import (
    RULESET_SOURCES,
    InheritanceChain,
    MergedRuleSet,
    RuleSet,
)

logger = logging.getLogger(__name__)

MAP_FIELDS = (
    "kpi_overrides",
    "formula_overrides",
    "intent_overrides",
    "hook_overrides",
    "token_relevance_overrides",
    "recommendation_overrides",
    "character_limits",
)

APPEND_FIELDS = ("stopword_overrides",)

FORMULA_MULTIPLIER_BOUNDS = (0.5, 2.0)


def _deep_merge(target: dict[str, Any], source: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict with ``source`` merged over ``target``."""
    result = dict(target)
    for key, value in source.items():
        if value is None:
            continue
        existing = result.get(key)
        if isinstance(value, dict):
            result[key] = _deep_merge(existing if isinstance(existing, dict) else {}, value)
        elif isinstance(value, list):
            result[key] = list(value)
        else:
            result[key] = value
    return result


def merge_rule_sets(*layers: Optional[RuleSet]) -> MergedRuleSet:
    """Merge rule set layers into the effective configuration.

    Args:
        *layers: Rule sets in increasing precedence order. ``None``
                 entries stand for absent layers and are skipped.

    Returns:
        MergedRuleSet carrying the four-slot inheritance chain and a
        merge timestamp. Leak warnings start empty.
    """
    present = [layer for layer in layers if layer is not None]

    maps: dict[str, dict[str, Any]] = {name: {} for name in MAP_FIELDS}
    appended: dict[str, list] = {name: [] for name in APPEND_FIELDS}
    chain = InheritanceChain()

    for layer in present:
        if layer.source in RULESET_SOURCES:
            setattr(chain, layer.source, layer)

        for name in MAP_FIELDS:
            value = getattr(layer, name)
            if value is not None:
                maps[name] = _deep_merge(maps[name], value)

        for name in APPEND_FIELDS:
            value = getattr(layer, name)
            if value is not None:
                appended[name] = appended[name] + list(value)

    vertical_id = _last_defined(present, "vertical_id")
    market_id = _last_defined(present, "market_id")
    organization_id = _last_defined(present, "organization_id")

    merged_id = f"{vertical_id or 'base'}:{market_id or 'global'}"
    if chain.client is not None:
        merged_id = f"{merged_id}:{organization_id or chain.client.id}"

    merged = MergedRuleSet(
        id=merged_id,
        label=" > ".join(layer.label or layer.id for layer in present),
        source=present[-1].source if present else "base",
        version=present[-1].version if present else "1.0.0",
        vertical_id=vertical_id,
        market_id=market_id,
        organization_id=organization_id,
        inheritance_chain=chain,
        merged_at=datetime.now(timezone.utc).isoformat(),
        **maps,
        **appended,
    )
    logger.debug(
        "Merged rule set",
        extra={"vertical": vertical_id, "market": market_id, "source": merged.source},
    )
    return merged


def _last_defined(layers: list[RuleSet], attr: str) -> Optional[str]:
    value = None
    for layer in layers:
        if getattr(layer, attr) is not None:
            value = getattr(layer, attr)
    return value


def validate_merged_rule_set(merged: MergedRuleSet) -> list[str]:
    """Structural checks. Returns human-readable errors; never raises."""
    errors: list[str] = []

    if not merged.id:
        errors.append("Missing rule set id")
    if not merged.merged_at:
        errors.append("Missing mergedAt timestamp")
    if merged.inheritance_chain is None:
        errors.append("Missing inheritance chain")

    for token, relevance in (merged.token_relevance_overrides or {}).items():
        if not isinstance(relevance, int) or not 0 <= relevance <= 3:
            errors.append(f"Token relevance for '{token}' out of range: {relevance}")

    low, high = FORMULA_MULTIPLIER_BOUNDS
    for formula_id, override in (merged.formula_overrides or {}).items():
        multiplier = override.get("multiplier") if isinstance(override, dict) else None
        if multiplier is not None and not low <= multiplier <= high:
            errors.append(
                f"Formula multiplier for '{formula_id}' out of range: {multiplier}"
            )

    for category in (merged.hook_overrides or {}):
        if category not in HOOK_CATEGORIES:
            errors.append(f"Unknown hook category '{category}'")

    return errors


def has_active_overrides(merged: RuleSet) -> bool:
    """True if any override map or list is non-empty."""
    fields = [f for f in MAP_FIELDS if f != "character_limits"] + list(APPEND_FIELDS)
    return any(getattr(merged, name) for name in fields)


def get_merged_rule_set_summary(merged: MergedRuleSet) -> dict:
    """Compact, JSON-friendly description of a merged rule set."""
    stopwords = merged.stopword_overrides or []
    chain = merged.inheritance_chain or InheritanceChain()
    return {
        "id": merged.id,
        "label": merged.label,
        "version": merged.version,
        "vertical_id": merged.vertical_id,
        "market_id": merged.market_id,
        "merged_at": merged.merged_at,
        "inheritance_chain": chain.layer_ids(),
        "override_counts": {
            "kpi": len(merged.kpi_overrides or {}),
            "formula": len(merged.formula_overrides or {}),
            "intent": len(merged.intent_overrides or {}),
            "hook": len(merged.hook_overrides or {}),
            "token_relevance": len(merged.token_relevance_overrides or {}),
            "recommendation": len(merged.recommendation_overrides or {}),
        },
        "stopword_count": len(stopwords),
        "unique_stopword_count": len(set(stopwords)),
        "character_limits": dict(merged.character_limits or {}),
        "has_active_overrides": has_active_overrides(merged),
        "leak_warnings_count": len(merged.leak_warnings),
    }
