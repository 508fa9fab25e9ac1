"""
Tests for the active rule set loader, the remote override repository
and the row normalizer.
"""

import httpx
import pytest

from asobible.cache import RuleSetCache
from asobible.remote import RemoteStoreClient
from asobible.rulesets import loader
from asobible.rulesets.loader import (
    get_active_rule_set,
    get_rule_set_for_vertical_market,
    invalidate_cached_rule_set,
    set_repository,
)
from asobible.rulesets.merger import merge_rule_sets
from asobible.rulesets.models import RuleSet
from asobible.rulesets.normalizer import (
    OverridesBundle,
    build_rule_set_from_bundle,
    normalize_formula_overrides,
    normalize_hook_overrides,
    normalize_kpi_overrides,
    normalize_recommendation_overrides,
    normalize_stopwords,
    normalize_token_overrides,
)
from asobible.rulesets.repository import (
    VERSIONS_TABLE,
    RuleSetRepository,
    build_version_snapshot,
)
from asobible.rulesets.store import (
    load_base_rule_set,
    load_vertical_rule_set,
    register_client_rule_set,
    unregister_client_rule_set,
)


# --- Fixtures ---

@pytest.fixture(autouse=True)
def isolated_loader(monkeypatch):
    """No remote repository and an empty cache for every test."""
    monkeypatch.setattr(loader, "_repository", None)
    monkeypatch.setattr(loader, "rule_set_cache", RuleSetCache())


def _repository(handler):
    client = RemoteStoreClient(
        "https://store.example.com", "test-key", transport=httpx.MockTransport(handler),
    )
    return RuleSetRepository(client)


def _vertical_token_rows(request: httpx.Request) -> httpx.Response:
    """Serve token overrides for vertical scope, nothing for other tables/scopes."""
    params = request.url.params
    if (request.url.path.endswith("/aso_token_relevance_overrides")
            and params.get("scope") == "eq.vertical"):
        return httpx.Response(200, json=[
            {"token": "Roboadvisor", "relevance": 3, "version": 2},
            {"token": "stocks", "relevance": 7},
            {"token": "inactive", "relevance": 3, "is_active": False},
        ])
    return httpx.Response(200, json=[])


# ============================================================
# ACTIVE RULE SET
# ============================================================

class TestActiveRuleSet:

    @pytest.mark.asyncio
    async def test_detects_and_merges(self):
        merged = await get_active_rule_set(
            {"title": "Lingo - Learn Spanish", "category": "Education"}, "en-US",
        )
        assert merged.id == "language_learning:us"
        assert merged.vertical_id == "language_learning"
        assert merged.market_id == "us"
        assert merged.vertical_name == "Language Learning"
        assert merged.market_name == "United States"
        assert merged.token_relevance_overrides["spanish"] == 3
        assert merged.inheritance_chain.layer_ids() == {
            "base": "base",
            "vertical": "vertical:language_learning",
            "market": "market:us",
            "client": None,
        }

    @pytest.mark.asyncio
    async def test_no_mismatch_for_expected_category(self):
        merged = await get_active_rule_set({"category": "Education"}, "en-US")
        assert not any(w.type == "vertical_mismatch" for w in merged.leak_warnings)

    @pytest.mark.asyncio
    async def test_market_from_locale(self):
        merged = await get_active_rule_set({"category": "Finance"}, "de_DE")
        assert merged.id == "finance:de"
        assert "der" in merged.stopword_overrides

    @pytest.mark.asyncio
    async def test_keyword_detection_without_category(self):
        merged = await get_active_rule_set(
            {"title": "Invest in stocks", "subtitle": "budget bank"}, "en-US",
        )
        assert merged.vertical_id == "finance"
        assert not any(w.type == "vertical_mismatch" for w in merged.leak_warnings)

    @pytest.mark.asyncio
    async def test_unknown_everything_is_base_us(self):
        merged = await get_active_rule_set({}, "")
        assert merged.id == "base:us"
        assert merged.leak_warnings == []

    @pytest.mark.asyncio
    async def test_client_layer_by_app_id(self):
        register_client_rule_set("app-1", RuleSet(
            id="client:app-1", label="Acme", source="client",
            token_relevance_overrides={"lingo": 3, "spanish": 1},
        ))
        try:
            merged = await get_active_rule_set(
                {"category": "Education", "app_id": "app-1"}, "en-US",
            )
        finally:
            unregister_client_rule_set("app-1")
        assert merged.token_relevance_overrides["lingo"] == 3
        assert merged.token_relevance_overrides["spanish"] == 1
        assert merged.inheritance_chain.client.id == "client:app-1"


class TestRuleSetCaching:
    """Merges are cached per scope; leak warnings are recomputed per request."""

    @pytest.mark.asyncio
    async def test_second_call_hits_cache(self):
        before = loader.rule_set_cache.stats["hits"]
        first = await get_rule_set_for_vertical_market("finance", "us")
        second = await get_rule_set_for_vertical_market("finance", "us")
        assert loader.rule_set_cache.stats["hits"] == before + 1
        assert first.merged_at == second.merged_at
        assert first.leak_warnings is not second.leak_warnings

    @pytest.mark.asyncio
    async def test_results_do_not_share_cached_state(self):
        first = await get_rule_set_for_vertical_market("finance", "us")
        first.token_relevance_overrides["stocks"] = 0
        first.stopword_overrides.append("zzz")
        second = await get_rule_set_for_vertical_market("finance", "us")
        assert second.token_relevance_overrides["stocks"] == 3
        assert "zzz" not in second.stopword_overrides

    @pytest.mark.asyncio
    async def test_warnings_follow_request_metadata(self):
        mismatched = await get_rule_set_for_vertical_market(
            "finance", "us", metadata={"category": "Education"},
        )
        matched = await get_rule_set_for_vertical_market(
            "finance", "us", metadata={"category": "Finance"},
        )
        assert any(w.type == "vertical_mismatch" for w in mismatched.leak_warnings)
        assert matched.leak_warnings == []

    @pytest.mark.asyncio
    async def test_invalidate(self):
        await get_rule_set_for_vertical_market("finance", "us")
        assert loader.rule_set_cache.stats["entries"] == 1
        await invalidate_cached_rule_set("finance", "us")
        assert loader.rule_set_cache.stats["entries"] == 0
        await get_rule_set_for_vertical_market("finance", "us")
        assert loader.rule_set_cache.stats["misses"] == 2

    @pytest.mark.asyncio
    async def test_cache_eviction(self):
        cache = RuleSetCache(ttl_seconds=60, max_entries=2)
        await cache.put("a", "us", 1)
        await cache.put("b", "us", 2)
        await cache.put("c", "us", 3)
        assert await cache.get("a", "us") is None
        assert await cache.get("c", "us") == 3
        assert cache.stats["entries"] == 2

    def test_cache_key(self):
        assert RuleSetCache.make_key(None, None) == "base:global:-:-"
        assert RuleSetCache.make_key("finance", "us", "org", "app") == "finance:us:org:app"


# ============================================================
# REMOTE REPOSITORY
# ============================================================

class TestRepository:

    @pytest.mark.asyncio
    async def test_load_overrides_filters(self):
        seen = []

        def handler(request):
            seen.append(dict(request.url.params))
            return httpx.Response(200, json=[])

        result = await _repository(handler).load_overrides(market="uk")
        assert result is None
        assert len(seen) == 6
        assert seen[0]["scope"] == "eq.market"
        assert seen[0]["market"] == "eq.uk"
        assert seen[0]["vertical"] == "is.null"
        assert seen[0]["is_active"] == "eq.true"

    @pytest.mark.asyncio
    async def test_load_overrides_normalizes(self):
        layer = await _repository(_vertical_token_rows).load_overrides(vertical="finance")
        assert layer.id == "remote:vertical:finance"
        assert layer.source == "vertical"
        assert layer.version == "2"
        assert layer.token_relevance_overrides == {"roboadvisor": 3, "stocks": 3}
        assert layer.hook_overrides is None

    @pytest.mark.asyncio
    async def test_http_error_returns_none(self):
        def handler(request):
            return httpx.Response(503, json={"message": "unavailable"})

        assert await _repository(handler).load_overrides(vertical="finance") is None

    @pytest.mark.asyncio
    async def test_non_list_payload_returns_none(self):
        def handler(request):
            return httpx.Response(200, json={"error": "nope"})

        assert await _repository(handler).load_overrides(vertical="finance") is None

    @pytest.mark.asyncio
    async def test_remote_layer_merged_after_code_layer(self):
        set_repository(_repository(_vertical_token_rows))
        merged = await get_rule_set_for_vertical_market("finance", "us")
        assert merged.token_relevance_overrides["roboadvisor"] == 3
        assert merged.token_relevance_overrides["invest"] == 3
        assert merged.inheritance_chain.vertical.id == "remote:vertical:finance"

    @pytest.mark.asyncio
    async def test_remote_failure_keeps_code_layers(self):
        def handler(request):
            raise httpx.ConnectError("refused")

        set_repository(_repository(handler))
        merged = await get_rule_set_for_vertical_market("finance", "us")
        assert merged.inheritance_chain.vertical.id == "vertical:finance"

    @pytest.mark.asyncio
    async def test_record_version(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["prefer"] = request.headers.get("prefer")
            return httpx.Response(201)

        merged = merge_rule_sets(load_base_rule_set(), load_vertical_rule_set("finance"))
        ok = await _repository(handler).record_version(build_version_snapshot(merged))
        assert ok is True
        assert seen["path"] == f"/rest/v1/{VERSIONS_TABLE}"
        assert seen["prefer"] == "return=minimal"

    @pytest.mark.asyncio
    async def test_record_version_failure(self):
        def handler(request):
            return httpx.Response(500)

        merged = merge_rule_sets(load_base_rule_set())
        assert await _repository(handler).record_version(build_version_snapshot(merged)) is False


class TestVersionSnapshot:

    def test_snapshot_fields(self):
        merged = merge_rule_sets(load_base_rule_set(), load_vertical_rule_set("finance"))
        snapshot = build_version_snapshot(merged, notes="initial")
        assert snapshot["scope"] == "vertical"
        assert snapshot["vertical_version"] == "1.0.0"
        assert snapshot["market_version"] is None
        assert len(snapshot["snapshot_hash"]) == 64
        assert snapshot["notes"] == "initial"

    def test_hash_is_stable(self):
        merged = merge_rule_sets(load_base_rule_set(), load_vertical_rule_set("finance"))
        assert (build_version_snapshot(merged)["snapshot_hash"]
                == build_version_snapshot(merged)["snapshot_hash"])


# ============================================================
# NORMALIZER
# ============================================================

class TestNormalizer:

    def test_tokens_clamped_and_lowercased(self):
        assert normalize_token_overrides([
            {"token": " Budget ", "relevance": 5},
            {"token": "cash", "relevance": -1},
            {"token": "", "relevance": 2},
        ]) == {"budget": 3, "cash": 0}

    def test_hooks_accept_both_column_names(self):
        hooks = normalize_hook_overrides([
            {"hook_category": "trust_safety", "keywords": ["Secure", "secure", "safe"],
             "weight_multiplier": 4.0},
            {"category": "ease_of_use", "keywords": ["easy"], "weight": 1.2},
            {"category": "fomo", "keywords": ["now"]},
        ])
        assert hooks["trust_safety"] == {"weight": 2.0, "patterns": ["secure", "safe"]}
        assert hooks["ease_of_use"]["weight"] == 1.2
        assert "fomo" not in hooks

    def test_stopwords_lists_and_words(self):
        assert normalize_stopwords([
            {"stopwords": ["App", "free"]},
            {"word": "app"},
            {"word": "best", "is_active": False},
        ]) == ["app", "free"]

    def test_kpi_and_formula(self):
        assert normalize_kpi_overrides([{"kpi_name": "trust", "weight": 0.1}]) == {
            "trust": {"weight": 0.5},
        }
        formulas = normalize_formula_overrides([
            {"component": "metadata_score",
             "override_payload": {"multiplier": 1.2, "component_weights": {"title": 0.6}}},
        ])
        assert formulas["metadata_score"] == {
            "multiplier": 1.2, "component_weights": {"title": 0.6},
        }

    def test_zero_multiplier_clamped_not_defaulted(self):
        formulas = normalize_formula_overrides([
            {"component": "metadata_score", "override_payload": {"multiplier": 0}},
            {"component": "title_score", "override_payload": {}},
        ])
        assert formulas["metadata_score"]["multiplier"] == 0.5
        assert formulas["title_score"]["multiplier"] == 1.0

    def test_recommendations(self):
        assert normalize_recommendation_overrides([
            {"recommendation_type": "tip", "message_template": " Add a hook "},
            {"recommendation_id": "empty"},
        ]) == {"tip": {"message": "Add a hook"}}

    def test_bundle_scope(self):
        bundle = OverridesBundle(
            kpi_overrides=[{"kpi_id": "trust", "weight": 1.1}],
            organization_id="acme",
        )
        layer = build_rule_set_from_bundle(bundle)
        assert layer.source == "client"
        assert layer.id == "remote:client:acme"
        assert layer.token_relevance_overrides is None
