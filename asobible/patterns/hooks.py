"""
Hook Classification

Assigns marketing copy to one of six psychological hook categories.
Categories are tried in a fixed priority order and the first one with
a matching trigger phrase wins:

  time_to_result > trust_safety > status_authority >
  outcome_benefit > ease_of_use > learning_educational

Trigger phrases come from a valid merged rule set's hook overrides when
one is supplied, otherwise from the generic defaults. Matching is a
case-insensitive substring test.
"""

from __future__ import annotations

from typing import Iterable, Optional

from asobible.defaults import GENERIC_HOOK_PATTERNS, VERTICAL_HOOK_PATTERNS
from asobible.patterns.models import HOOK_CATEGORIES, HOOK_PRIORITY_ORDER
from asobible.rulesets.merger import validate_merged_rule_set
from asobible.rulesets.models import MergedRuleSet
from asobible.scoring import round_half_up


def resolve_hook_patterns(merged: Optional[MergedRuleSet] = None) -> dict[str, list[str]]:
    """Effective trigger phrases per category.

    Categories overridden by a structurally valid merged rule set use
    the override patterns; the rest keep the generic defaults.
    """
    patterns = {category: list(GENERIC_HOOK_PATTERNS[category]) for category in HOOK_CATEGORIES}
    if merged is None or validate_merged_rule_set(merged):
        return patterns

    for category, override in (merged.hook_overrides or {}).items():
        if category not in patterns or not isinstance(override, dict):
            continue
        override_patterns = override.get("patterns")
        if override_patterns:
            patterns[category] = [p.lower() for p in override_patterns]
    return patterns


def _first_match(text: str, patterns: dict[str, list[str]]) -> Optional[str]:
    normalized = text.lower()
    for category in HOOK_PRIORITY_ORDER:
        if any(p.lower() in normalized for p in patterns[category]):
            return category
    return None


def classify_hook(text: str, merged: Optional[MergedRuleSet] = None) -> Optional[str]:
    """Return the highest-priority hook category present in ``text``, or None."""
    return _first_match(text, resolve_hook_patterns(merged))


def classify_hook_distribution(
    texts: Iterable[str], merged: Optional[MergedRuleSet] = None,
) -> dict[str, int]:
    """Count hook categories across texts (all six keys always present)."""
    patterns = resolve_hook_patterns(merged)
    distribution = {category: 0 for category in HOOK_CATEGORIES}
    for text in texts:
        category = _first_match(text, patterns)
        if category is not None:
            distribution[category] += 1
    return distribution


def calculate_hook_diversity_score(distribution: dict[str, int]) -> int:
    """Share of the six categories that appear at least once, 0-100."""
    present = sum(1 for category in HOOK_CATEGORIES if distribution.get(category, 0) > 0)
    return round_half_up(present / len(HOOK_CATEGORIES) * 100)


def get_dominant_hook_category(distribution: dict[str, int]) -> Optional[str]:
    """Most frequent category; ties go to the higher-priority category."""
    top = max(HOOK_PRIORITY_ORDER, key=lambda c: distribution.get(c, 0))
    return top if distribution.get(top, 0) > 0 else None


def get_hook_classification_summary(
    texts: Iterable[str], merged: Optional[MergedRuleSet] = None,
) -> dict:
    texts = list(texts)
    distribution = classify_hook_distribution(texts, merged)
    classified = sum(distribution.values())
    return {
        "distribution": distribution,
        "diversity_score": calculate_hook_diversity_score(distribution),
        "dominant_category": get_dominant_hook_category(distribution),
        "total_texts": len(texts),
        "classified": classified,
        "unclassified": len(texts) - classified,
    }


# ============================================================
# VERTICAL LOOKUPS
# ============================================================

def get_hook_patterns_for_vertical(vertical_id: str) -> Optional[dict[str, list[str]]]:
    return VERTICAL_HOOK_PATTERNS.get(vertical_id)


def match_hook_pattern(
    keyword: str, vertical_id: str, category: Optional[str] = None,
) -> Optional[str]:
    """Category of a vertical whose trigger phrase occurs in ``keyword``.

    With ``category`` given, only that category is tested. Categories
    are otherwise tried in declaration order.
    """
    patterns = get_hook_patterns_for_vertical(vertical_id)
    if patterns is None:
        return None
    normalized = keyword.strip().lower()
    if category is not None:
        if category not in patterns:
            raise ValueError(f"Unknown hook category: {category}")
        return category if any(p.lower() in normalized for p in patterns[category]) else None
    for name, phrases in patterns.items():
        if any(p.lower() in normalized for p in phrases):
            return name
    return None
