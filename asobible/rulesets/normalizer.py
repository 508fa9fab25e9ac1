"""
Rule Set Normalizer

Converts raw override rows from the remote configuration store into a
RuleSet layer using the same override conventions as the code-defined
store. Inactive or malformed rows are skipped, values are clamped into
their legal ranges.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from asobible.patterns.models import HOOK_CATEGORIES
from asobible.rulesets.models import RuleSet

logger = logging.getLogger(__name__)

MULTIPLIER_BOUNDS = (0.5, 2.0)


@dataclass
class OverridesBundle:
    """Raw rows for one scope, one list per override table."""
    token_overrides: list[dict] = field(default_factory=list)
    hook_overrides: list[dict] = field(default_factory=list)
    stopword_overrides: list[dict] = field(default_factory=list)
    kpi_overrides: list[dict] = field(default_factory=list)
    formula_overrides: list[dict] = field(default_factory=list)
    recommendation_overrides: list[dict] = field(default_factory=list)
    vertical: Optional[str] = None
    market: Optional[str] = None
    organization_id: Optional[str] = None

    def is_empty(self) -> bool:
        return not any((
            self.token_overrides, self.hook_overrides, self.stopword_overrides,
            self.kpi_overrides, self.formula_overrides,
            self.recommendation_overrides,
        ))


def clamp_relevance(value: Any) -> int:
    return max(0, min(3, int(float(value))))


def clamp_multiplier(value: Any, low: float = MULTIPLIER_BOUNDS[0],
                     high: float = MULTIPLIER_BOUNDS[1]) -> float:
    return max(low, min(high, float(value)))


def _active(rows: list[dict]) -> list[dict]:
    return [row for row in rows if row.get("is_active", True)]


def scope_source(vertical: Optional[str], market: Optional[str],
                 organization_id: Optional[str]) -> str:
    """Most specific layer a scope belongs to."""
    if organization_id:
        return "client"
    if market:
        return "market"
    if vertical:
        return "vertical"
    return "base"


# ============================================================
# PER-TABLE NORMALIZERS
# ============================================================

def normalize_token_overrides(rows: list[dict]) -> dict[str, int]:
    normalized: dict[str, int] = {}
    for row in _active(rows):
        token = (row.get("token") or "").strip().lower()
        if not token:
            logger.debug("Skipping token override with empty token")
            continue
        normalized[token] = clamp_relevance(row.get("relevance", 0))
    return normalized


def normalize_hook_overrides(rows: list[dict]) -> dict[str, dict]:
    normalized: dict[str, dict] = {}
    for row in _active(rows):
        category = row.get("hook_category") or row.get("category")
        if category not in HOOK_CATEGORIES:
            logger.debug("Skipping hook override with unknown category",
                         extra={"pattern": category})
            continue
        keywords = row.get("keywords") or []
        patterns = list(dict.fromkeys(k.strip().lower() for k in keywords if k and k.strip()))
        weight = row.get("weight_multiplier", row.get("weight", 1.0))
        normalized[category] = {
            "weight": clamp_multiplier(weight if weight is not None else 1.0),
            "patterns": patterns,
        }
    return normalized


def normalize_stopwords(rows: list[dict]) -> list[str]:
    words: list[str] = []
    for row in _active(rows):
        if isinstance(row.get("stopwords"), list):
            words.extend(row["stopwords"])
        elif row.get("word"):
            words.append(row["word"])
    cleaned = (w.strip().lower() for w in words if isinstance(w, str) and w.strip())
    return list(dict.fromkeys(cleaned))


def normalize_kpi_overrides(rows: list[dict]) -> dict[str, dict]:
    normalized: dict[str, dict] = {}
    for row in _active(rows):
        kpi_id = row.get("kpi_id") or row.get("kpi_name")
        if not kpi_id:
            continue
        weight = row.get("weight_multiplier", row.get("weight", 1.0))
        normalized[kpi_id] = {"weight": clamp_multiplier(weight if weight is not None else 1.0)}
    return normalized


def normalize_formula_overrides(rows: list[dict]) -> dict[str, dict]:
    normalized: dict[str, dict] = {}
    for row in _active(rows):
        formula_id = row.get("formula_id") or row.get("component")
        if not formula_id:
            continue
        payload = row.get("override_payload") or row
        multiplier = payload.get("multiplier")
        entry: dict[str, Any] = {
            "multiplier": clamp_multiplier(multiplier) if multiplier is not None else 1.0,
        }
        component_weights = payload.get("component_weights")
        if component_weights:
            entry["component_weights"] = dict(component_weights)
        elif payload.get("component_weight") is not None:
            entry["component_weight"] = float(payload["component_weight"])
        normalized[formula_id] = entry
    return normalized


def normalize_recommendation_overrides(rows: list[dict]) -> dict[str, dict]:
    normalized: dict[str, dict] = {}
    for row in _active(rows):
        rec_id = row.get("recommendation_id") or row.get("recommendation_type")
        message = row.get("message") or row.get("message_template")
        if not rec_id or not message:
            continue
        normalized[rec_id] = {"message": message.strip()}
    return normalized


# ============================================================
# BUNDLE
# ============================================================

def build_rule_set_from_bundle(bundle: OverridesBundle) -> RuleSet:
    """Normalize every table in a bundle into one RuleSet layer.

    Tables with no rows become None so the layer does not shadow
    values inherited from the code-defined layers.
    """
    source = scope_source(bundle.vertical, bundle.market, bundle.organization_id)
    scope_key = bundle.organization_id or bundle.market or bundle.vertical or "base"

    tokens = normalize_token_overrides(bundle.token_overrides)
    hooks = normalize_hook_overrides(bundle.hook_overrides)
    stopwords = normalize_stopwords(bundle.stopword_overrides)
    kpis = normalize_kpi_overrides(bundle.kpi_overrides)
    formulas = normalize_formula_overrides(bundle.formula_overrides)
    recommendations = normalize_recommendation_overrides(bundle.recommendation_overrides)

    return RuleSet(
        id=f"remote:{source}:{scope_key}",
        label=f"Remote {source} overrides ({scope_key})",
        source=source,
        version=_bundle_version(bundle),
        token_relevance_overrides=tokens or None,
        hook_overrides=hooks or None,
        stopword_overrides=stopwords or None,
        kpi_overrides=kpis or None,
        formula_overrides=formulas or None,
        recommendation_overrides=recommendations or None,
        vertical_id=bundle.vertical,
        market_id=bundle.market,
        organization_id=bundle.organization_id,
    )


def _bundle_version(bundle: OverridesBundle) -> str:
    versions = [
        int(row.get("version") or 1)
        for rows in (
            bundle.token_overrides, bundle.hook_overrides,
            bundle.stopword_overrides, bundle.kpi_overrides,
            bundle.formula_overrides, bundle.recommendation_overrides,
        )
        for row in rows
    ]
    return str(max(versions)) if versions else "1"
