"""
Tests for leak detection: named-vertical signatures, cross-vertical
overlap, vertical mismatch and KPI anomalies.
"""

from asobible.leak_detection import (
    LeakThresholds,
    apply_leak_detection,
    detect_kpi_anomalies,
    detect_signature_overlap,
    detect_vertical_leak,
    detect_vertical_mismatch,
    get_leak_detection_summary,
)
from asobible.rulesets.merger import merge_rule_sets
from asobible.rulesets.models import LeakWarning, RuleSet
from asobible.rulesets.store import load_base_rule_set, load_market_rule_set, load_vertical_rule_set


FINANCE_TOKENS = ["invest", "investing", "stocks", "trading", "budget", "bank", "banking", "savings"]


def _rule_set(**overrides):
    return RuleSet(id="test", source="client", **overrides)


class TestNamedVerticalLeaks:
    """Substring signatures of language learning, rewards and finance."""

    def test_finance_intent_in_education_app(self):
        rule_set = _rule_set(intent_overrides={"investing": {}})
        warnings = detect_vertical_leak(rule_set, {"category": "Education"})
        assert len(warnings) == 1
        assert warnings[0].type == "pattern_leak"
        assert warnings[0].severity == "medium"
        assert warnings[0].message == "Finance intent patterns detected in non-Finance/Business app"
        assert warnings[0].details["intent_keys"] == ["investing"]

    def test_allowed_category_passes(self):
        rule_set = _rule_set(intent_overrides={"investing": {}, "trading": {}})
        assert detect_vertical_leak(rule_set, {"category": "Finance"}) == []

    def test_language_learning_intent_outside_education(self):
        rule_set = _rule_set(intent_overrides={"language_practice": {}, "learning": {}})
        warnings = detect_vertical_leak(rule_set, {"category": "Entertainment"})
        messages = [w.message for w in warnings]
        assert "Language-learning intent patterns detected in non-Education app" in messages

    def test_learning_key_also_matches_earning_marker(self):
        # "learning" contains "earning", so rewards flags it outside Entertainment/Lifestyle.
        rule_set = _rule_set(intent_overrides={"learning": {}})
        warnings = detect_vertical_leak(rule_set, {"category": "Education"})
        assert [w.details["vertical"] for w in warnings] == ["rewards"]

    def test_high_relevance_learning_tokens(self):
        rule_set = _rule_set(token_relevance_overrides={"learn": 3, "study": 2, "lesson": 3})
        warnings = detect_vertical_leak(rule_set, {"category": "Finance"})
        assert len(warnings) == 1
        assert warnings[0].severity == "low"
        assert warnings[0].details["tokens"] == ["learn", "lesson"]

    def test_recommendation_leak(self):
        rule_set = _rule_set(recommendation_overrides={
            "title_tip": {"message": "Try adding 'Learn Spanish' to your title"},
        })
        warnings = detect_vertical_leak(rule_set, {"category": "Finance"})
        assert len(warnings) == 1
        assert warnings[0].type == "recommendation_leak"
        assert warnings[0].severity == "high"
        assert warnings[0].details["recommendation_id"] == "title_tip"
        assert warnings[0].details["category"] == "Finance"

    def test_string_template(self):
        rule_set = _rule_set(recommendation_overrides={"tip": "Build fluency daily"})
        warnings = detect_vertical_leak(rule_set, {"category": "Productivity"})
        assert warnings[0].type == "recommendation_leak"


class TestSignatureOverlap:
    """Shared token / intent keys with another vertical's rule set."""

    def test_below_threshold(self):
        rule_set = _rule_set(
            vertical_id="productivity",
            token_relevance_overrides={t: 1 for t in FINANCE_TOKENS[:4]},
        )
        assert detect_signature_overlap(rule_set) == []

    def test_medium_token_overlap(self):
        rule_set = _rule_set(
            vertical_id="productivity",
            token_relevance_overrides={t: 1 for t in FINANCE_TOKENS[:5]},
        )
        warnings = detect_signature_overlap(rule_set)
        assert len(warnings) == 1
        assert warnings[0].severity == "medium"
        assert warnings[0].details["foreign_vertical"] == "finance"
        assert len(warnings[0].details["token_overlap"]) == 5

    def test_high_token_overlap(self):
        rule_set = _rule_set(
            vertical_id="productivity",
            token_relevance_overrides={t: 1 for t in FINANCE_TOKENS},
        )
        warnings = detect_signature_overlap(rule_set)
        assert warnings[0].severity == "high"

    def test_intent_overlap(self):
        rule_set = _rule_set(
            vertical_id="productivity",
            intent_overrides={"investing": {}, "trading": {}, "budgeting": {}},
        )
        warnings = detect_signature_overlap(rule_set)
        assert warnings[0].severity == "medium"
        assert warnings[0].details["intent_overlap"] == ["budgeting", "investing", "trading"]

    def test_custom_thresholds(self):
        rule_set = _rule_set(
            vertical_id="productivity",
            intent_overrides={"investing": {}, "trading": {}, "budgeting": {}},
        )
        warnings = detect_signature_overlap(rule_set, LeakThresholds(intent_high=3))
        assert warnings[0].severity == "high"

    def test_own_vertical_skipped(self):
        assert detect_signature_overlap(load_vertical_rule_set("finance")) == []


class TestVerticalMismatch:

    def test_expected_vertical(self):
        merged = merge_rule_sets(load_base_rule_set(), load_vertical_rule_set("finance"))
        assert detect_vertical_mismatch(merged, "Business") == []

    def test_mismatch(self):
        merged = merge_rule_sets(load_base_rule_set(), load_vertical_rule_set("finance"))
        warnings = detect_vertical_mismatch(merged, "Education")
        assert len(warnings) == 1
        assert warnings[0].type == "vertical_mismatch"
        assert warnings[0].severity == "medium"
        assert warnings[0].message == (
            "Rule set vertical 'finance' may not match app category 'Education'"
        )

    def test_unknown_category_expects_base(self):
        merged = merge_rule_sets(load_base_rule_set(), load_vertical_rule_set("dating"))
        warnings = detect_vertical_mismatch(merged, "Games")
        assert warnings[0].details["expected"] == ["base"]

    def test_missing_category_passes(self):
        merged = merge_rule_sets(load_base_rule_set(), load_vertical_rule_set("finance"))
        assert detect_vertical_mismatch(merged, None) == []
        assert detect_vertical_mismatch(merged, "") == []

    def test_base_always_passes(self):
        merged = merge_rule_sets(load_base_rule_set())
        assert detect_vertical_mismatch(merged, "Games") == []
        assert detect_vertical_mismatch(merged, None) == []


class TestKpiAnomalies:

    def test_weight_out_of_range(self):
        warnings = detect_kpi_anomalies(_rule_set(kpi_overrides={
            "trust_signals": {"weight": 2.5},
            "intent_alignment": {"weight": 1.2},
        }))
        assert len(warnings) == 1
        assert warnings[0].type == "kpi_anomaly"
        assert warnings[0].details["kpi_id"] == "trust_signals"


class TestApplyLeakDetection:

    def test_clean_vertical_in_its_category(self):
        merged = merge_rule_sets(
            load_base_rule_set(),
            load_vertical_rule_set("finance"),
            load_market_rule_set("us"),
        )
        apply_leak_detection(merged, {"category": "Finance"})
        assert merged.leak_warnings == []

    def test_warnings_appended(self):
        merged = merge_rule_sets(
            load_base_rule_set(),
            load_vertical_rule_set("finance"),
            load_market_rule_set("us"),
        )
        result = apply_leak_detection(merged, {"category": "Education"})
        assert result is merged
        types = {w.type for w in merged.leak_warnings}
        assert types == {"pattern_leak", "vertical_mismatch"}

    def test_summary(self):
        warnings = [
            LeakWarning("pattern_leak", "medium", "a"),
            LeakWarning("pattern_leak", "high", "b"),
            LeakWarning("vertical_mismatch", "medium", "c"),
        ]
        summary = get_leak_detection_summary(warnings)
        assert summary["total_warnings"] == 3
        assert summary["by_severity"] == {"low": 0, "medium": 2, "high": 1}
        assert summary["by_type"]["pattern_leak"] == 2
        assert summary["by_type"]["recommendation_leak"] == 0
