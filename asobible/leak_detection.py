"""
Leak Detection

Scans an effective rule set for configuration that belongs to a
different vertical than the app it is applied to. Every check is
read-only and returns LeakWarning objects; nothing here raises or
blocks a merge.

Checks:
  1. Named-vertical leaks: intent-key and token signatures of language
     learning, rewards and finance outside their expected categories,
     plus foreign example phrases in recommendation templates.
  2. Cross-vertical signature overlap: shared token / intent keys with
     another vertical's canonical rule set, against thresholds.
  3. Vertical mismatch: assigned vertical vs category expectations.
  4. KPI anomalies: KPI weights outside the legal multiplier range.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Iterable, Optional

from asobible.config import settings
from asobible.defaults import CATEGORY_EXPECTED_VERTICALS, DEFAULT_EXPECTED_VERTICALS
from asobible.profiles import canonical_category
from asobible.rulesets.models import LEAK_SEVERITIES, LEAK_TYPES, LeakWarning, MergedRuleSet, RuleSet
from asobible.rulesets.normalizer import MULTIPLIER_BOUNDS
from asobible.rulesets.store import vertical_rule_sets

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeakThresholds:
    """Overlap counts that raise a pattern_leak (pending product-owner sign-off)."""
    token_medium: int = 5
    token_high: int = 8
    intent_medium: int = 3
    intent_high: int = 5

    @classmethod
    def from_settings(cls) -> "LeakThresholds":
        return cls(
            token_medium=settings.LEAK_TOKEN_OVERLAP_MEDIUM,
            token_high=settings.LEAK_TOKEN_OVERLAP_HIGH,
            intent_medium=settings.LEAK_INTENT_OVERLAP_MEDIUM,
            intent_high=settings.LEAK_INTENT_OVERLAP_HIGH,
        )


@dataclass(frozen=True)
class NamedVerticalCheck:
    """Signature of one vertical checked by substring rules."""
    vertical_id: str
    label: str
    allowed_categories: tuple[str, ...]
    intent_key_markers: tuple[str, ...]
    tokens: tuple[str, ...] = ()
    recommendation_phrases: tuple[str, ...] = ()


NAMED_VERTICAL_CHECKS: tuple[NamedVerticalCheck, ...] = (
    NamedVerticalCheck(
        vertical_id="language_learning",
        label="Language-learning",
        allowed_categories=("Education",),
        intent_key_markers=("learning",),
        tokens=("learn", "study", "lesson", "course", "fluency"),
        recommendation_phrases=("learn spanish", "language lessons", "fluency"),
    ),
    NamedVerticalCheck(
        vertical_id="rewards",
        label="Rewards",
        allowed_categories=("Entertainment", "Lifestyle"),
        intent_key_markers=("earning", "redemption"),
    ),
    NamedVerticalCheck(
        vertical_id="finance",
        label="Finance",
        allowed_categories=("Finance", "Business"),
        intent_key_markers=("investing", "trading"),
    ),
)

HIGH_RELEVANCE = 3


# ============================================================
# NAMED-VERTICAL CHECKS
# ============================================================

def _template_text(template: Any) -> str:
    if isinstance(template, str):
        return template
    if isinstance(template, dict):
        return str(template.get("message") or template.get("template") or "")
    return ""


def _named_vertical_warnings(rule_set: RuleSet, category: str) -> list[LeakWarning]:
    warnings: list[LeakWarning] = []
    intent_keys = list((rule_set.intent_overrides or {}).keys())
    tokens = rule_set.token_relevance_overrides or {}
    recommendations = rule_set.recommendation_overrides or {}

    for check in NAMED_VERTICAL_CHECKS:
        if category in check.allowed_categories:
            continue

        leaked_keys = [
            key for key in intent_keys
            if any(marker in key.lower() for marker in check.intent_key_markers)
        ]
        if leaked_keys:
            warnings.append(LeakWarning(
                type="pattern_leak",
                severity="medium",
                message=(
                    f"{check.label} intent patterns detected in non-"
                    f"{'/'.join(check.allowed_categories)} app"
                ),
                details={"vertical": check.vertical_id, "category": category,
                         "intent_keys": leaked_keys},
            ))

        leaked_tokens = [
            token for token in check.tokens
            if tokens.get(token) == HIGH_RELEVANCE
        ]
        if leaked_tokens:
            warnings.append(LeakWarning(
                type="pattern_leak",
                severity="low",
                message=(
                    f"{check.label} tokens with high relevance detected in non-"
                    f"{'/'.join(check.allowed_categories)} app"
                ),
                details={"vertical": check.vertical_id, "category": category,
                         "tokens": leaked_tokens},
            ))

        for rec_id, template in recommendations.items():
            text = _template_text(template).lower()
            if any(phrase in text for phrase in check.recommendation_phrases):
                warnings.append(LeakWarning(
                    type="recommendation_leak",
                    severity="high",
                    message=(
                        f"{check.label} recommendation template '{rec_id}' "
                        f"used in {category or 'uncategorized'} app"
                    ),
                    details={"recommendation_id": rec_id, "category": category,
                             "template": _template_text(template)},
                ))

    return warnings


# ============================================================
# CROSS-VERTICAL SIGNATURE OVERLAP
# ============================================================

@lru_cache(maxsize=1)
def vertical_signatures() -> dict[str, tuple[frozenset[str], frozenset[str]]]:
    """Per vertical: (token-override keys, intent-override keys). Built once."""
    return {
        vertical_id: (
            frozenset(rule_set.token_relevance_overrides or {}),
            frozenset(rule_set.intent_overrides or {}),
        )
        for vertical_id, rule_set in vertical_rule_sets().items()
    }


def detect_signature_overlap(
    rule_set: RuleSet, thresholds: Optional[LeakThresholds] = None,
) -> list[LeakWarning]:
    """Compare a rule set's keys against every other vertical's signature."""
    thresholds = thresholds or LeakThresholds.from_settings()
    own_tokens = set(rule_set.token_relevance_overrides or {})
    own_intents = set(rule_set.intent_overrides or {})
    warnings: list[LeakWarning] = []

    for vertical_id, (tokens, intents) in vertical_signatures().items():
        if vertical_id == rule_set.vertical_id:
            continue
        token_overlap = sorted(own_tokens & tokens)
        intent_overlap = sorted(own_intents & intents)

        if (len(token_overlap) >= thresholds.token_high
                or len(intent_overlap) >= thresholds.intent_high):
            severity = "high"
        elif (len(token_overlap) >= thresholds.token_medium
                or len(intent_overlap) >= thresholds.intent_medium):
            severity = "medium"
        else:
            continue

        warnings.append(LeakWarning(
            type="pattern_leak",
            severity=severity,
            message=(
                f"Rule set shares {len(token_overlap)} token and "
                f"{len(intent_overlap)} intent signatures with vertical '{vertical_id}'"
            ),
            details={
                "foreign_vertical": vertical_id,
                "token_overlap": token_overlap,
                "intent_overlap": intent_overlap,
            },
        ))

    return warnings


# ============================================================
# PUBLIC CHECKS
# ============================================================

def detect_vertical_leak(
    merged: RuleSet,
    app_metadata: dict,
    thresholds: Optional[LeakThresholds] = None,
) -> list[LeakWarning]:
    """Named-vertical and signature-overlap leaks for an app's rule set."""
    category = canonical_category(app_metadata.get("category"))
    return _named_vertical_warnings(merged, category) + detect_signature_overlap(
        merged, thresholds,
    )


def detect_vertical_mismatch(merged: RuleSet, category: Optional[str]) -> list[LeakWarning]:
    """Flag a vertical assignment the category does not expect. Base always passes.

    Without a category there is nothing to disagree with.
    """
    canonical = canonical_category(category)
    if not canonical:
        return []
    vertical = merged.vertical_id or "base"
    expected = CATEGORY_EXPECTED_VERTICALS.get(canonical, DEFAULT_EXPECTED_VERTICALS)
    if vertical in expected:
        return []
    return [LeakWarning(
        type="vertical_mismatch",
        severity="medium",
        message=f"Rule set vertical '{vertical}' may not match app category '{canonical}'",
        details={"vertical": vertical, "category": canonical, "expected": list(expected)},
    )]


def detect_kpi_anomalies(merged: RuleSet) -> list[LeakWarning]:
    """KPI weights outside the legal multiplier range."""
    low, high = MULTIPLIER_BOUNDS
    warnings: list[LeakWarning] = []
    for kpi_id, override in (merged.kpi_overrides or {}).items():
        weight = override.get("weight") if isinstance(override, dict) else override
        if isinstance(weight, (int, float)) and not low <= weight <= high:
            warnings.append(LeakWarning(
                type="kpi_anomaly",
                severity="low",
                message=f"KPI weight for '{kpi_id}' outside {low}-{high}: {weight}",
                details={"kpi_id": kpi_id, "weight": weight},
            ))
    return warnings


def apply_leak_detection(
    merged: MergedRuleSet,
    app_metadata: dict,
    thresholds: Optional[LeakThresholds] = None,
) -> MergedRuleSet:
    """Append every leak warning to ``merged.leak_warnings`` and return it."""
    warnings = (
        detect_vertical_leak(merged, app_metadata, thresholds)
        + detect_vertical_mismatch(merged, app_metadata.get("category"))
        + detect_kpi_anomalies(merged)
    )
    merged.leak_warnings.extend(warnings)

    if warnings:
        logger.warning(
            "Leak detection raised warnings",
            extra={"vertical": merged.vertical_id, "market": merged.market_id,
                   "warnings_count": len(warnings)},
        )
    return merged


def get_leak_detection_summary(warnings: Iterable[LeakWarning]) -> dict:
    warnings = list(warnings)
    by_severity = {severity: 0 for severity in LEAK_SEVERITIES}
    by_type = {leak_type: 0 for leak_type in LEAK_TYPES}
    for warning in warnings:
        by_severity[warning.severity] = by_severity.get(warning.severity, 0) + 1
        by_type[warning.type] = by_type.get(warning.type, 0) + 1
    return {
        "total_warnings": len(warnings),
        "by_severity": by_severity,
        "by_type": by_type,
    }
