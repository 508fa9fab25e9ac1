"""
Keyword Combination Generator

Enumerates k-word combinations (default k = 2..4) from title and
subtitle keywords, checks which already occur in the metadata text and
gives each a heuristic strategic value.

Three pools share one budget of MAX_COMBOS_PER_SOURCE * 3 unique combos:
title-only, subtitle-only, and a cross pool (title + subtitle) that only
keeps combos mixing both sides. Generation stops the moment the budget
is reached, so the result never exceeds it.

The strategic value is a placeholder heuristic (base 50, +10/+20/+15
for 2/3/4 words), not a search-volume model.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, Optional, Sequence

from asobible.config import settings
from asobible.defaults import LOW_VALUE_STOPWORDS
from asobible.scoring import round_half_up

logger = logging.getLogger(__name__)

BASE_STRATEGIC_VALUE = 50
LENGTH_BONUS = {2: 10, 3: 20, 4: 15}
RECOMMENDATION_LIMIT = 10


@dataclass
class GeneratedCombo:
    text: str
    keywords: list[str]
    length: int
    exists: bool
    source: str                     # "title", "subtitle", "both" or "missing"
    strategic_value: int
    recommendation: Optional[str] = None


@dataclass
class ComboAnalysis:
    all_possible_combos: list[GeneratedCombo] = field(default_factory=list)
    existing_combos: list[GeneratedCombo] = field(default_factory=list)
    missing_combos: list[GeneratedCombo] = field(default_factory=list)
    recommended_to_add: list[GeneratedCombo] = field(default_factory=list)
    stats: dict = field(default_factory=dict)


def filter_low_value_keywords(keywords: Sequence[str]) -> list[str]:
    """Drop stopwords and single-character tokens."""
    result = []
    for keyword in keywords:
        normalized = keyword.strip().lower()
        if len(normalized) > 1 and normalized not in LOW_VALUE_STOPWORDS:
            result.append(keyword)
    return result


def _combinations(
    keywords: Sequence[str],
    size: int,
    left: Optional[set[str]] = None,
    right: Optional[set[str]] = None,
) -> Iterator[tuple[str, ...]]:
    """Backtracking k-combinations in index order, generated lazily.

    With ``left``/``right`` given, only combos holding at least one
    keyword from each side are yielded; the last slot is pruned to
    keywords that complete such a mix.
    """
    current: list[str] = []

    def backtrack(start: int) -> Iterator[tuple[str, ...]]:
        if len(current) == size:
            yield tuple(current)
            return
        remaining = size - len(current)
        for i in range(start, len(keywords) - remaining + 1):
            keyword = keywords[i]
            if left is not None and remaining == 1:
                has_left = keyword in left or any(k in left for k in current)
                has_right = keyword in right or any(k in right for k in current)
                if not (has_left and has_right):
                    continue
            current.append(keyword)
            yield from backtrack(i + 1)
            current.pop()

    yield from backtrack(0)


def generate_all_possible_combos(
    title_keywords: Sequence[str],
    subtitle_keywords: Sequence[str],
    min_length: int = 2,
    max_length: int = 4,
    include_title: bool = True,
    include_subtitle: bool = True,
    include_cross: bool = True,
    max_combos_per_source: Optional[int] = None,
) -> list[str]:
    """All unique combos (space-joined), capped at 3 * max_combos_per_source."""
    per_source = max_combos_per_source or settings.MAX_COMBOS_PER_SOURCE
    budget = per_source * 3

    title = filter_low_value_keywords(title_keywords)
    subtitle = filter_low_value_keywords(subtitle_keywords)

    pools: list[tuple[list[str], Optional[set[str]], Optional[set[str]]]] = []
    if include_title:
        pools.append((title, None, None))
    if include_subtitle:
        pools.append((subtitle, None, None))
    if include_cross and title and subtitle:
        pools.append((title + subtitle, set(title), set(subtitle)))

    combos: dict[str, None] = {}
    for keywords, left, right in pools:
        for size in range(min_length, min(max_length, len(keywords)) + 1):
            for combo in _combinations(keywords, size, left, right):
                combos.setdefault(" ".join(combo), None)
                if len(combos) >= budget:
                    break
            if len(combos) >= budget:
                break
        if len(combos) >= budget:
            logger.debug("Combination budget reached", extra={"pattern_count": budget})
            break

    return list(combos)


# ============================================================
# EXISTENCE / SCORING
# ============================================================

def combo_exists_in_text(combo: str, text: str) -> bool:
    """Exact phrase match, or every word appearing in order (gaps allowed)."""
    normalized_text = text.lower()
    normalized_combo = combo.lower()

    if normalized_combo in normalized_text:
        return True

    last_index = -1
    for word in normalized_combo.split(" "):
        index = normalized_text.find(word, last_index + 1)
        if index == -1:
            return False
        last_index = index
    return True


def determine_combo_source(combo: str, title_text: str, subtitle_text: str) -> str:
    in_title = combo_exists_in_text(combo, title_text)
    in_subtitle = combo_exists_in_text(combo, subtitle_text)
    if in_title and in_subtitle:
        return "both"
    if in_title:
        return "title"
    if in_subtitle:
        return "subtitle"
    return "missing"


def calculate_strategic_value(keywords: Sequence[str]) -> int:
    score = BASE_STRATEGIC_VALUE + LENGTH_BONUS.get(len(keywords), 0)
    return min(100, max(0, score))


def is_branded_combo(combo: GeneratedCombo, brand_name: str) -> bool:
    """True if the combo contains the brand name or any word of it."""
    brand = brand_name.strip().lower()
    if not brand:
        return False
    if brand in combo.text.lower():
        return True
    brand_words = {w for w in brand.split() if len(w) > 1}
    return any(k.lower() in brand_words for k in combo.keywords)


def filter_generic_combos(
    combos: Sequence[GeneratedCombo], brand_name: Optional[str],
) -> list[GeneratedCombo]:
    if not brand_name:
        return list(combos)
    return [c for c in combos if not is_branded_combo(c, brand_name)]


def analyze_all_combos(
    title_keywords: Sequence[str],
    subtitle_keywords: Sequence[str],
    title_text: str,
    subtitle_text: str,
    brand_name: Optional[str] = None,
    max_combos_per_source: Optional[int] = None,
) -> ComboAnalysis:
    """Generate, locate and score every combo.

    The brand filter only removes combos from the missing (candidate)
    set; combos already present in the metadata are kept as they are.
    """
    texts = generate_all_possible_combos(
        title_keywords, subtitle_keywords,
        max_combos_per_source=max_combos_per_source,
    )

    analyzed = []
    for text in texts:
        keywords = text.split(" ")
        source = determine_combo_source(text, title_text, subtitle_text)
        analyzed.append(GeneratedCombo(
            text=text,
            keywords=keywords,
            length=len(keywords),
            exists=source != "missing",
            source=source,
            strategic_value=calculate_strategic_value(keywords),
        ))

    existing = [c for c in analyzed if c.exists]
    missing = filter_generic_combos([c for c in analyzed if not c.exists], brand_name)

    recommended = []
    for combo in sorted(missing, key=lambda c: c.strategic_value, reverse=True)[:RECOMMENDATION_LIMIT]:
        recommended.append(GeneratedCombo(
            text=combo.text,
            keywords=combo.keywords,
            length=combo.length,
            exists=combo.exists,
            source=combo.source,
            strategic_value=combo.strategic_value,
            recommendation=(
                f'Consider adding "{combo.text}" - Strategic value: '
                f"{combo.strategic_value}/100"
            ),
        ))

    all_combos = existing + missing
    return ComboAnalysis(
        all_possible_combos=all_combos,
        existing_combos=existing,
        missing_combos=missing,
        recommended_to_add=recommended,
        stats={
            "total_possible": len(all_combos),
            "existing": len(existing),
            "missing": len(missing),
            "coverage": round_half_up(len(existing) / len(all_combos) * 100) if all_combos else 0,
        },
    )


# ============================================================
# HELPERS
# ============================================================

def filter_combos_by_keyword(combos: Sequence[GeneratedCombo], keyword: str) -> list[GeneratedCombo]:
    needle = keyword.lower()
    return [c for c in combos if any(needle in k.lower() for k in c.keywords)]


def group_combos_by_length(combos: Sequence[GeneratedCombo]) -> dict[int, list[GeneratedCombo]]:
    groups: dict[int, list[GeneratedCombo]] = {}
    for combo in combos:
        groups.setdefault(combo.length, []).append(combo)
    return groups


def count_combos_with_keyword(combos: Sequence[GeneratedCombo], keyword: str) -> int:
    return len(filter_combos_by_keyword(combos, keyword))
