"""
ASO Bible - Rule Engine for App Store Metadata Optimization

Composes layered rule sets (base -> vertical -> market -> client) into
one effective configuration and scores metadata against it.

Public API:
  - merge_rule_sets:        Layered deep merge with inheritance chain
  - detect_vertical:        Category / keyword vertical inference
  - detect_market:          Locale to market resolution
  - load_intent_patterns:   Remote-first pattern loading with fallback
  - classify_token_intent:  Per-token search intent
  - classify_combo_intent:  Per-phrase search intent (dominant/mixed/unknown)
  - compute_search_intent_coverage: Token coverage and distribution
  - classify_hook:          Psychological hook category
  - detect_vertical_leak:   Cross-vertical contamination warnings
  - generate_all_possible_combos / analyze_all_combos: Keyword combinations
  - get_active_rule_set:    Detection + merge + leak detection in one call

Usage:
    from asobible import get_active_rule_set, load_intent_patterns
    from asobible import compute_combined_search_intent_coverage
"""

__version__ = "1.0.0"

from asobible.rulesets.models import (
    RuleSet,
    MergedRuleSet,
    InheritanceChain,
    LeakWarning,
)
from asobible.rulesets.merger import (
    merge_rule_sets,
    validate_merged_rule_set,
    get_merged_rule_set_summary,
    has_active_overrides,
)
from asobible.rulesets.loader import (
    get_active_rule_set,
    get_rule_set_for_vertical_market,
    invalidate_cached_rule_set,
)
from asobible.signatures import detect_vertical, detect_market, map_category_to_vertical
from asobible.patterns.models import IntentPatternConfig, PatternSet
from asobible.patterns.loader import load_intent_patterns, clear_intent_pattern_cache
from asobible.patterns.intent import (
    classify_token_intent,
    classify_combo_intent,
    compute_intent_coverage,
)
from asobible.patterns.coverage import (
    compute_search_intent_coverage,
    compute_combined_search_intent_coverage,
)
from asobible.patterns.hooks import (
    classify_hook,
    classify_hook_distribution,
    calculate_hook_diversity_score,
    get_hook_classification_summary,
)
from asobible.leak_detection import (
    detect_vertical_leak,
    detect_vertical_mismatch,
    apply_leak_detection,
    get_leak_detection_summary,
)
from asobible.combos import (
    generate_all_possible_combos,
    analyze_all_combos,
    filter_combos_by_keyword,
    group_combos_by_length,
)

__all__ = [
    "RuleSet",
    "MergedRuleSet",
    "InheritanceChain",
    "LeakWarning",
    "merge_rule_sets",
    "validate_merged_rule_set",
    "get_merged_rule_set_summary",
    "has_active_overrides",
    "get_active_rule_set",
    "get_rule_set_for_vertical_market",
    "invalidate_cached_rule_set",
    "detect_vertical",
    "detect_market",
    "map_category_to_vertical",
    "IntentPatternConfig",
    "PatternSet",
    "load_intent_patterns",
    "clear_intent_pattern_cache",
    "classify_token_intent",
    "classify_combo_intent",
    "compute_intent_coverage",
    "compute_search_intent_coverage",
    "compute_combined_search_intent_coverage",
    "classify_hook",
    "classify_hook_distribution",
    "calculate_hook_diversity_score",
    "get_hook_classification_summary",
    "detect_vertical_leak",
    "detect_vertical_mismatch",
    "apply_leak_detection",
    "get_leak_detection_summary",
    "generate_all_possible_combos",
    "analyze_all_combos",
    "filter_combos_by_keyword",
    "group_combos_by_length",
]
