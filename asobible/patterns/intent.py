"""
Intent Classification

Pure, synchronous classification of tokens and phrases against an
already-loaded pattern list. Results depend only on the inputs: pattern
evaluation follows load order, and ties go to the earliest pattern (or,
for phrase totals, the earliest intent type).

Scoring: each matching pattern contributes weight * (1 + priority/200).
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from asobible.config import settings
from asobible.patterns.loader import PatternLike, ensure_compiled
from asobible.patterns.models import (
    INTENT_TYPES,
    ComboIntentClassification,
    IntentCoverageMetrics,
    IntentMatch,
    TokenIntentClassification,
    resolve_fallback_mode,
)
from asobible.scoring import round_half_up

MIXED = "mixed"
UNKNOWN = "unknown"

# Informational phrases above this score count as high-value learning.
LEARNING_SCORE_THRESHOLD = 2.0


def classify_token_intent(
    token: str, patterns: Sequence[PatternLike],
) -> TokenIntentClassification:
    """Match a token against every pattern and pick the top-scoring intent."""
    intents = [
        IntentMatch(intent_type=p.intent_type, score=p.score, matched_pattern=p.pattern)
        for p in ensure_compiled(patterns)
        if p.matches(token)
    ]
    # max() keeps the first of equal scores, i.e. pattern load order.
    dominant = max(intents, key=lambda m: m.score).intent_type if intents else None
    return TokenIntentClassification(token=token, intents=intents, dominant_intent=dominant)


def classify_combo_intent(
    combo: str,
    patterns: Sequence[PatternLike],
    majority: Optional[float] = None,
) -> ComboIntentClassification:
    """Classify a phrase by summing pattern scores per intent type.

    One scored type is dominant outright. With several, the top type
    must hold more than ``majority`` of the total (default 50%),
    otherwise the phrase is ``mixed``. No match gives ``unknown``.
    """
    if majority is None:
        majority = settings.DOMINANT_INTENT_MAJORITY

    scores = {intent_type: 0.0 for intent_type in INTENT_TYPES}
    matched: list[str] = []
    for p in ensure_compiled(patterns):
        if p.matches(combo):
            scores[p.intent_type] += p.score
            matched.append(p.pattern)

    scored = [t for t in INTENT_TYPES if scores[t] > 0]
    if not scored:
        dominant = UNKNOWN
    elif len(scored) == 1:
        dominant = scored[0]
    else:
        top = max(scored, key=lambda t: scores[t])
        total = sum(scores.values())
        dominant = top if scores[top] / total > majority else MIXED

    return ComboIntentClassification(
        combo=combo,
        dominant_intent=dominant,
        intent_scores=scores,
        matched_patterns=matched,
    )


def compute_intent_coverage(
    texts: Iterable[str],
    patterns: Sequence[PatternLike],
    fallback_mode: Optional[bool] = None,
) -> IntentCoverageMetrics:
    """Count dominant intents over texts; score = intent types present / 4.

    ``fallback_mode`` is carried over from a PatternSet unless given.
    """
    compiled = ensure_compiled(patterns)
    counts = {intent_type: 0 for intent_type in INTENT_TYPES}
    total = 0
    for text in texts:
        dominant = classify_token_intent(text, compiled).dominant_intent
        if dominant:
            counts[dominant] += 1
            total += 1

    present = sum(1 for count in counts.values() if count > 0)
    dominant_intent = None
    best = 0
    for intent_type, count in counts.items():
        if count > best:
            dominant_intent, best = intent_type, count

    return IntentCoverageMetrics(
        informational_count=counts["informational"],
        commercial_count=counts["commercial"],
        transactional_count=counts["transactional"],
        navigational_count=counts["navigational"],
        total_classified=total,
        coverage_score=round_half_up(present / len(INTENT_TYPES) * 100),
        dominant_intent=dominant_intent,
        fallback_mode=resolve_fallback_mode(patterns, fallback_mode),
    )


# ============================================================
# LEGACY COMBO LABELS / DISCOVERY FOOTPRINT
# ============================================================

def map_search_intent_to_combo_intent(intent_type: Optional[str]) -> str:
    """informational -> learning, commercial/transactional -> outcome,
    navigational -> brand, anything else -> noise."""
    if intent_type == "informational":
        return "learning"
    if intent_type in ("commercial", "transactional"):
        return "outcome"
    if intent_type == "navigational":
        return "brand"
    return "noise"


def map_combo_intent_to_search_intent(combo_intent: str) -> str:
    return {
        "learning": "informational",
        "outcome": "commercial",
        "brand": "navigational",
    }.get(combo_intent, "informational")


def group_by_discovery_footprint(
    classifications: Iterable[ComboIntentClassification],
) -> dict[str, int]:
    """Bucket classified phrases into Discovery Footprint categories."""
    footprint = {"learning": 0, "outcome": 0, "brand": 0, "generic": 0, "noise": 0}
    for c in classifications:
        if c.dominant_intent == "informational":
            if c.intent_scores.get("informational", 0) > LEARNING_SCORE_THRESHOLD:
                footprint["learning"] += 1
            else:
                footprint["generic"] += 1
        elif c.dominant_intent in ("commercial", "transactional"):
            footprint["outcome"] += 1
        elif c.dominant_intent == "navigational":
            footprint["brand"] += 1
        else:
            footprint["noise"] += 1
    return footprint
