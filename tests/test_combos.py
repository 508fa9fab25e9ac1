"""
Tests for the keyword combination generator and combo analysis.
"""

from asobible.combos import (
    analyze_all_combos,
    calculate_strategic_value,
    combo_exists_in_text,
    count_combos_with_keyword,
    determine_combo_source,
    filter_combos_by_keyword,
    filter_generic_combos,
    filter_low_value_keywords,
    generate_all_possible_combos,
    group_combos_by_length,
)


def _words(prefix, n):
    return [f"{prefix}{i}" for i in range(n)]


class TestGeneration:

    def test_two_word_combos(self):
        combos = generate_all_possible_combos(
            ["learn", "spanish", "fast"], ["app", "language"],
            min_length=2, max_length=2, include_cross=True,
        )
        assert "learn spanish" in combos
        assert "spanish fast" in combos
        assert "learn app" in combos
        assert all(len(c.split(" ")) == 2 for c in combos)

    def test_no_single_words(self):
        combos = generate_all_possible_combos(["learn", "spanish"], ["app"])
        assert all(" " in c for c in combos)

    def test_length_bounds(self):
        combos = generate_all_possible_combos(
            ["a1", "b1", "c1", "d1", "e1"], [], min_length=3, max_length=4,
        )
        lengths = {len(c.split(" ")) for c in combos}
        assert lengths == {3, 4}

    def test_stopwords_removed(self):
        combos = generate_all_possible_combos(["the", "learn", "a", "spanish"], [])
        assert combos == ["learn spanish"]

    def test_cross_pool_mixes_both_sides(self):
        combos = generate_all_possible_combos(
            ["learn", "spanish"], ["app", "fast"],
            include_title=False, include_subtitle=False,
        )
        assert "learn spanish" not in combos
        assert "app fast" not in combos
        assert "learn app" in combos
        assert "learn spanish app" in combos

    def test_unique(self):
        combos = generate_all_possible_combos(["learn", "spanish"], ["spanish", "learn"])
        assert len(combos) == len(set(combos))

    def test_order_is_deterministic(self):
        args = (["learn", "spanish", "fast"], ["language", "app"])
        assert generate_all_possible_combos(*args) == generate_all_possible_combos(*args)


class TestCap:
    """The shared budget is three times the per-source cap."""

    def test_default_cap(self):
        combos = generate_all_possible_combos(_words("t", 30), _words("s", 30))
        assert len(combos) == 1500

    def test_cap_without_title_pool(self):
        combos = generate_all_possible_combos(
            _words("t", 30), _words("s", 30), include_title=False,
        )
        assert len(combos) == 1500

    def test_custom_cap(self):
        combos = generate_all_possible_combos(
            _words("t", 10), _words("s", 10), max_combos_per_source=10,
        )
        assert len(combos) == 30

    def test_small_input_under_cap(self):
        combos = generate_all_possible_combos(["a1", "b1", "c1"], [])
        assert len(combos) == 4


class TestExistence:

    def test_exact_phrase(self):
        assert combo_exists_in_text("learn spanish", "Learn Spanish Fast")

    def test_in_order_with_gap(self):
        assert combo_exists_in_text("learn fast", "Learn Spanish Fast")

    def test_out_of_order(self):
        assert not combo_exists_in_text("fast learn", "Learn Spanish Fast")

    def test_missing_word(self):
        assert not combo_exists_in_text("learn french", "Learn Spanish Fast")

    def test_source(self):
        assert determine_combo_source("learn spanish", "Learn Spanish", "Spanish lessons") == "title"
        assert determine_combo_source("spanish lessons", "Learn Spanish", "Spanish lessons") == "subtitle"
        assert determine_combo_source("spanish", "Learn Spanish", "Spanish lessons") == "both"
        assert determine_combo_source("french", "Learn Spanish", "Spanish lessons") == "missing"


class TestStrategicValue:

    def test_values_by_length(self):
        assert calculate_strategic_value(["a", "b"]) == 60
        assert calculate_strategic_value(["a", "b", "c"]) == 70
        assert calculate_strategic_value(["a", "b", "c", "d"]) == 65
        assert calculate_strategic_value(["a", "b", "c", "d", "e"]) == 50


class TestAnalysis:

    TITLE = ["lingo", "learn", "spanish", "fast"]
    SUBTITLE = ["language", "lessons"]
    TITLE_TEXT = "Lingo: Learn Spanish Fast"
    SUBTITLE_TEXT = "Language lessons for beginners"

    def _analyze(self, brand=None):
        return analyze_all_combos(
            self.TITLE, self.SUBTITLE, self.TITLE_TEXT, self.SUBTITLE_TEXT, brand_name=brand,
        )

    def test_existing_and_missing(self):
        analysis = self._analyze()
        existing = {c.text for c in analysis.existing_combos}
        assert {"learn spanish", "spanish fast", "learn spanish fast", "language lessons"} <= existing
        missing = {c.text for c in analysis.missing_combos}
        assert "learn lessons" in missing
        assert all(not c.exists for c in analysis.missing_combos)

    def test_stats(self):
        analysis = self._analyze()
        stats = analysis.stats
        assert stats["total_possible"] == stats["existing"] + stats["missing"]
        expected = int(stats["existing"] / stats["total_possible"] * 100 + 0.5)
        assert stats["coverage"] == expected

    def test_recommendations(self):
        analysis = self._analyze()
        assert 0 < len(analysis.recommended_to_add) <= 10
        values = [c.strategic_value for c in analysis.recommended_to_add]
        assert values == sorted(values, reverse=True)
        top = analysis.recommended_to_add[0]
        assert top.recommendation == (
            f'Consider adding "{top.text}" - Strategic value: {top.strategic_value}/100'
        )

    def test_brand_filter_only_on_missing(self):
        analysis = self._analyze(brand="Lingo")
        assert not any("lingo" in c.text for c in analysis.missing_combos)
        assert any("lingo" in c.text for c in analysis.existing_combos)

    def test_empty_input(self):
        analysis = analyze_all_combos([], [], "", "")
        assert analysis.all_possible_combos == []
        assert analysis.stats["coverage"] == 0


class TestHelpers:

    def test_filter_low_value(self):
        assert filter_low_value_keywords(["The", "x", "learn", "with"]) == ["learn"]

    def test_group_and_filter(self):
        analysis = analyze_all_combos(["learn", "spanish", "fast"], [], "Learn Spanish Fast", "")
        groups = group_combos_by_length(analysis.all_possible_combos)
        assert set(groups) == {2, 3}
        assert len(groups[2]) == 3
        assert len(filter_combos_by_keyword(analysis.all_possible_combos, "fast")) == 3
        assert count_combos_with_keyword(analysis.all_possible_combos, "Spanish") == 3

    def test_filter_generic_combos(self):
        analysis = analyze_all_combos(["lingo", "spanish", "lessons"], [], "", "")
        generic = filter_generic_combos(analysis.all_possible_combos, "Lingo App")
        assert [c.text for c in generic] == ["spanish lessons"]
        assert len(filter_generic_combos(analysis.all_possible_combos, None)) == 4
