"""
Tests for the rule set merge engine.

Precedence is the caller's order: base < vertical < market < client.
"""

from asobible.rulesets.merger import (
    get_merged_rule_set_summary,
    has_active_overrides,
    merge_rule_sets,
    validate_merged_rule_set,
)
from asobible.rulesets.models import InheritanceChain, MergedRuleSet, RuleSet
from asobible.rulesets.store import load_base_rule_set, load_market_rule_set, load_vertical_rule_set


def _layer(source, **overrides):
    return RuleSet(id=f"{source}-test", label=source.title(), source=source, **overrides)


class TestPrecedence:
    """Later layers win key by key."""

    def test_four_layer_precedence(self):
        merged = merge_rule_sets(
            _layer("base", kpi_overrides={"a": 1}),
            _layer("vertical", kpi_overrides={"a": 2, "b": 1}),
            _layer("market", kpi_overrides={"b": 2}),
            _layer("client", kpi_overrides={}),
        )
        assert merged.kpi_overrides == {"a": 2, "b": 2}

    def test_single_layer_is_copied(self):
        base = _layer("base", token_relevance_overrides={"learn": 3})
        merged = merge_rule_sets(base)
        assert merged.token_relevance_overrides == {"learn": 3}
        merged.token_relevance_overrides["learn"] = 0
        assert base.token_relevance_overrides == {"learn": 3}

    def test_none_layers_are_skipped(self):
        merged = merge_rule_sets(None, _layer("base", kpi_overrides={"a": 1}), None)
        assert merged.kpi_overrides == {"a": 1}

    def test_undefined_field_does_not_clear(self):
        merged = merge_rule_sets(
            _layer("base", hook_overrides={"trust_safety": {"weight": 1.2}}),
            _layer("vertical"),
        )
        assert merged.hook_overrides == {"trust_safety": {"weight": 1.2}}

    def test_nested_dicts_merge(self):
        merged = merge_rule_sets(
            _layer("base", hook_overrides={"trust_safety": {"weight": 1.2, "patterns": ["safe"]}}),
            _layer("market", hook_overrides={"trust_safety": {"weight": 1.5}}),
        )
        assert merged.hook_overrides["trust_safety"] == {"weight": 1.5, "patterns": ["safe"]}

    def test_lists_inside_maps_replace(self):
        merged = merge_rule_sets(
            _layer("base", hook_overrides={"ease_of_use": {"patterns": ["easy", "simple"]}}),
            _layer("client", hook_overrides={"ease_of_use": {"patterns": ["one tap"]}}),
        )
        assert merged.hook_overrides["ease_of_use"]["patterns"] == ["one tap"]

    def test_none_values_inside_maps_are_ignored(self):
        merged = merge_rule_sets(
            _layer("base", kpi_overrides={"a": 1}),
            _layer("vertical", kpi_overrides={"a": None}),
        )
        assert merged.kpi_overrides == {"a": 1}

    def test_stopwords_concatenate_without_dedup(self):
        merged = merge_rule_sets(
            _layer("base", stopword_overrides=["app", "free"]),
            _layer("market", stopword_overrides=["free", "whilst"]),
        )
        assert merged.stopword_overrides == ["app", "free", "free", "whilst"]

    def test_character_limits_override(self):
        merged = merge_rule_sets(
            load_base_rule_set(),
            _layer("client", character_limits={"title": 25}),
        )
        assert merged.character_limits == {"title": 25, "subtitle": 30}


class TestTraceability:
    """Inheritance chain, id and timestamp."""

    def test_chain_slots(self):
        vertical = load_vertical_rule_set("finance")
        market = load_market_rule_set("uk")
        merged = merge_rule_sets(load_base_rule_set(), vertical, market)
        assert merged.inheritance_chain.base.id == "base"
        assert merged.inheritance_chain.vertical is vertical
        assert merged.inheritance_chain.market is market
        assert merged.inheritance_chain.client is None

    def test_merged_id_from_scope(self):
        merged = merge_rule_sets(
            load_base_rule_set(),
            load_vertical_rule_set("finance"),
            load_market_rule_set("uk"),
        )
        assert merged.id == "finance:uk"
        assert merged.vertical_id == "finance"
        assert merged.market_id == "uk"

    def test_merged_id_with_client(self):
        merged = merge_rule_sets(
            load_base_rule_set(),
            RuleSet(id="client:acme", source="client", organization_id="acme"),
        )
        assert merged.id == "base:global:acme"

    def test_label_joins_layers(self):
        merged = merge_rule_sets(load_base_rule_set(), load_vertical_rule_set("finance"))
        assert merged.label == "Base RuleSet > Finance & Investing"

    def test_merged_at_is_set(self):
        merged = merge_rule_sets(load_base_rule_set())
        assert merged.merged_at
        assert "T" in merged.merged_at

    def test_leak_warnings_start_empty(self):
        merged = merge_rule_sets(load_base_rule_set(), load_vertical_rule_set("rewards"))
        assert merged.leak_warnings == []


class TestValidation:

    def test_valid_merge_has_no_errors(self):
        merged = merge_rule_sets(
            load_base_rule_set(),
            load_vertical_rule_set("language_learning"),
            load_market_rule_set("us"),
        )
        assert validate_merged_rule_set(merged) == []

    def test_relevance_out_of_range(self):
        merged = merge_rule_sets(_layer("base", token_relevance_overrides={"learn": 5}))
        errors = validate_merged_rule_set(merged)
        assert any("learn" in e for e in errors)

    def test_multiplier_out_of_range(self):
        merged = merge_rule_sets(
            _layer("base", formula_overrides={"metadata_score": {"multiplier": 3.0}}),
        )
        errors = validate_merged_rule_set(merged)
        assert any("metadata_score" in e for e in errors)

    def test_unknown_hook_category(self):
        merged = merge_rule_sets(_layer("base", hook_overrides={"fomo": {"patterns": ["now"]}}))
        errors = validate_merged_rule_set(merged)
        assert errors == ["Unknown hook category 'fomo'"]

    def test_missing_fields(self):
        merged = MergedRuleSet(id="", inheritance_chain=None, merged_at=None)
        errors = validate_merged_rule_set(merged)
        assert len(errors) == 3


class TestSummary:

    def test_summary_counts(self):
        merged = merge_rule_sets(
            load_base_rule_set(),
            load_vertical_rule_set("finance"),
            load_market_rule_set("de"),
        )
        summary = get_merged_rule_set_summary(merged)
        assert summary["id"] == "finance:de"
        assert summary["inheritance_chain"] == {
            "base": "base",
            "vertical": "vertical:finance",
            "market": "market:de",
            "client": None,
        }
        assert summary["override_counts"]["token_relevance"] == 15
        assert summary["override_counts"]["kpi"] == 3
        assert summary["has_active_overrides"] is True

    def test_summary_unique_stopwords(self):
        merged = merge_rule_sets(
            _layer("base", stopword_overrides=["app"]),
            _layer("market", stopword_overrides=["app", "free"]),
        )
        summary = get_merged_rule_set_summary(merged)
        assert summary["stopword_count"] == 3
        assert summary["unique_stopword_count"] == 2

    def test_base_only_has_no_active_overrides(self):
        merged = merge_rule_sets(load_base_rule_set())
        assert has_active_overrides(merged) is False

    def test_empty_chain_layer_ids(self):
        assert InheritanceChain().layer_ids() == {
            "base": None, "vertical": None, "market": None, "client": None,
        }
