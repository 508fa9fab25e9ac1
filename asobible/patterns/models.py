"""
Pattern Data Structures

Intent pattern configuration, compiled matchers and the classification
results derived from them. Patterns are leaf facts: classification never
mutates them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional


INTENT_TYPES = ("informational", "commercial", "transactional", "navigational")

HOOK_CATEGORIES = (
    "learning_educational",
    "outcome_benefit",
    "status_authority",
    "ease_of_use",
    "time_to_result",
    "trust_safety",
)

# Evaluation order for the hook classifier: first match wins.
HOOK_PRIORITY_ORDER = (
    "time_to_result",
    "trust_safety",
    "status_authority",
    "outcome_benefit",
    "ease_of_use",
    "learning_educational",
)


@dataclass(frozen=True)
class IntentPatternConfig:
    """A single weighted, prioritized intent pattern."""
    pattern: str
    intent_type: str            # one of INTENT_TYPES
    weight: float = 1.0         # 0.1 to 3.0
    priority: int = 100         # 0 to 200
    is_regex: bool = False
    case_sensitive: bool = False
    word_boundary: bool = True
    example: Optional[str] = None
    scope: str = "base"

    @property
    def score(self) -> float:
        """Contribution of one match: weight * (1 + priority/200)."""
        return self.weight * (1 + self.priority / 200)


@dataclass(frozen=True)
class CompiledPattern:
    """An IntentPatternConfig with its matcher built once at load time."""
    config: IntentPatternConfig
    matcher: Callable[[str], bool] = field(compare=False, repr=False)

    @property
    def pattern(self) -> str:
        return self.config.pattern

    @property
    def intent_type(self) -> str:
        return self.config.intent_type

    @property
    def score(self) -> float:
        return self.config.score

    def matches(self, text: str) -> bool:
        return self.matcher(text)


def build_matcher(config: IntentPatternConfig) -> Callable[[str], bool]:
    """Build the matcher for a pattern.

    Raises:
        re.error: if the pattern is a regex that does not compile.
    """
    flags = 0 if config.case_sensitive else re.IGNORECASE

    if config.is_regex:
        regex = re.compile(config.pattern, flags)
        return lambda text: regex.search(text) is not None

    if config.word_boundary:
        regex = re.compile(rf"\b{re.escape(config.pattern)}\b", flags)
        return lambda text: regex.search(text) is not None

    if config.case_sensitive:
        needle = config.pattern
        return lambda text: needle in text

    needle = config.pattern.lower()
    return lambda text: needle in text.lower()


class PatternSet(list):
    """Compiled patterns in load order, tagged with their provenance.

    Behaves as a plain list so classification functions can take it
    directly; ``fallback_mode`` is True when the built-in defaults were
    substituted for remote patterns.
    """

    def __init__(self, patterns: Iterable[CompiledPattern] = (), fallback_mode: bool = False):
        super().__init__(patterns)
        self.fallback_mode = fallback_mode

    @property
    def configs(self) -> list[IntentPatternConfig]:
        return [p.config for p in self]


def resolve_fallback_mode(patterns: Iterable, fallback_mode: Optional[bool] = None) -> bool:
    """An explicit flag wins; otherwise read it off a PatternSet. Plain lists are remote."""
    if fallback_mode is not None:
        return fallback_mode
    return bool(getattr(patterns, "fallback_mode", False))


# ============================================================
# CLASSIFICATION RESULTS
# ============================================================

@dataclass
class IntentMatch:
    """One pattern that matched a token."""
    intent_type: str
    score: float
    matched_pattern: str


@dataclass
class TokenIntentClassification:
    token: str
    intents: list[IntentMatch]
    dominant_intent: Optional[str]


@dataclass
class ComboIntentClassification:
    combo: str
    dominant_intent: str        # an intent type, "mixed" or "unknown"
    intent_scores: dict[str, float]
    matched_patterns: list[str]


@dataclass
class IntentCoverageMetrics:
    informational_count: int
    commercial_count: int
    transactional_count: int
    navigational_count: int
    total_classified: int
    coverage_score: int
    dominant_intent: Optional[str]
    fallback_mode: bool = False
