"""
Search Intent Coverage

Token-level coverage: what share of a metadata element's tokens carry a
recognizable search intent, and how those intents are distributed.
Title and subtitle combine 60/40 into an overall score.

``fallback_mode`` defaults to the flag carried by a PatternSet, so a
result built from fallback patterns says so without the caller having
to remember.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from asobible.patterns.loader import PatternLike, ensure_compiled
from asobible.patterns.models import INTENT_TYPES, resolve_fallback_mode
from asobible.scoring import round_half_up

TITLE_WEIGHT = 0.6
SUBTITLE_WEIGHT = 0.4

DISTRIBUTION_KEYS = INTENT_TYPES + ("unclassified",)


@dataclass
class TokenIntentResult:
    token: str
    intent_type: Optional[str]
    matched_pattern: Optional[str]
    score: float


@dataclass
class SearchIntentCoverageResult:
    score: int
    total_tokens: int
    classified_tokens: int
    unclassified_tokens: int
    distribution: dict[str, int]
    distribution_percentage: dict[str, int]
    classified_tokens_list: list[TokenIntentResult] = field(default_factory=list)
    unclassified_tokens_list: list[str] = field(default_factory=list)
    patterns_used: int = 0
    fallback_mode: bool = False


@dataclass
class CombinedSearchIntentCoverage:
    title: SearchIntentCoverageResult
    subtitle: SearchIntentCoverageResult
    overall_score: int
    combined_distribution: dict[str, int]
    combined_distribution_percentage: dict[str, int]
    fallback_mode: bool = False


def _percentages(distribution: dict[str, int], total: int) -> dict[str, int]:
    return {
        key: round_half_up(distribution[key] / total * 100) if total > 0 else 0
        for key in DISTRIBUTION_KEYS
    }


def classify_token(token: str, patterns: Sequence[PatternLike]) -> TokenIntentResult:
    """Best single pattern for a token; the first of equal scores wins."""
    normalized = token.lower()
    best: Optional[TokenIntentResult] = None
    for p in ensure_compiled(patterns):
        if p.matches(normalized) and (best is None or p.score > best.score):
            best = TokenIntentResult(
                token=token, intent_type=p.intent_type,
                matched_pattern=p.pattern, score=p.score,
            )
    return best or TokenIntentResult(token=token, intent_type=None,
                                     matched_pattern=None, score=0.0)


def compute_search_intent_coverage(
    tokens: Sequence[str],
    patterns: Sequence[PatternLike],
    fallback_mode: Optional[bool] = None,
) -> SearchIntentCoverageResult:
    """Classify every token and report coverage and distribution.

    An empty token list gives score 0 and zero counts.
    """
    compiled = ensure_compiled(patterns)
    distribution = {key: 0 for key in DISTRIBUTION_KEYS}
    classified: list[TokenIntentResult] = []
    unclassified: list[str] = []

    for token in tokens:
        result = classify_token(token, compiled)
        if result.intent_type is None:
            distribution["unclassified"] += 1
            unclassified.append(token)
        else:
            distribution[result.intent_type] += 1
            classified.append(result)

    total = len(tokens)
    return SearchIntentCoverageResult(
        score=round_half_up(len(classified) / total * 100) if total > 0 else 0,
        total_tokens=total,
        classified_tokens=len(classified),
        unclassified_tokens=len(unclassified),
        distribution=distribution,
        distribution_percentage=_percentages(distribution, total),
        classified_tokens_list=classified,
        unclassified_tokens_list=unclassified,
        patterns_used=len(compiled),
        fallback_mode=resolve_fallback_mode(patterns, fallback_mode),
    )


def compute_combined_search_intent_coverage(
    title_tokens: Sequence[str],
    subtitle_tokens: Sequence[str],
    patterns: Sequence[PatternLike],
    fallback_mode: Optional[bool] = None,
) -> CombinedSearchIntentCoverage:
    """Coverage for title and subtitle, combined with a 60/40 weighting."""
    fallback = resolve_fallback_mode(patterns, fallback_mode)
    title = compute_search_intent_coverage(title_tokens, patterns, fallback)
    subtitle = compute_search_intent_coverage(subtitle_tokens, patterns, fallback)

    combined = {
        key: title.distribution[key] + subtitle.distribution[key]
        for key in DISTRIBUTION_KEYS
    }
    total = len(title_tokens) + len(subtitle_tokens)

    return CombinedSearchIntentCoverage(
        title=title,
        subtitle=subtitle,
        overall_score=round_half_up(title.score * TITLE_WEIGHT + subtitle.score * SUBTITLE_WEIGHT),
        combined_distribution=combined,
        combined_distribution_percentage=_percentages(combined, total),
        fallback_mode=fallback,
    )


def get_dominant_intent(distribution: dict[str, int]) -> Optional[str]:
    """Most frequent intent type in a distribution, or None if all zero."""
    top = max(INTENT_TYPES, key=lambda t: distribution.get(t, 0))
    return top if distribution.get(top, 0) > 0 else None


def get_coverage_assessment(score: float) -> dict[str, str]:
    """Label, message and display color for a coverage score."""
    if score >= 80:
        return {
            "label": "EXCELLENT",
            "message": "Strong search intent coverage across all metadata elements.",
            "color": "emerald",
        }
    if score >= 60:
        return {
            "label": "GOOD",
            "message": "Solid search intent coverage with room for improvement.",
            "color": "blue",
        }
    if score >= 40:
        return {
            "label": "MODERATE",
            "message": "Limited search intent coverage. Consider adding more intent-driven keywords.",
            "color": "yellow",
        }
    if score >= 20:
        return {
            "label": "LOW",
            "message": "Weak search intent coverage. Metadata lacks clear intent signals.",
            "color": "orange",
        }
    return {
        "label": "VERY LOW",
        "message": "Minimal search intent coverage. Metadata needs significant intent optimization.",
        "color": "red",
    }
