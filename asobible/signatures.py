"""
Signature Detection

Infers which vertical and market apply to a piece of app metadata.
Pure and deterministic: identical inputs always give identical results.

Vertical detection, in priority order:
  1. Category maps to exactly one vertical -> confidence 0.9
  2. Category maps to several -> keyword tie-break over title + subtitle,
     confidence min(0.85, 0.6 + 0.05 * hits)
  3. No category match, or confidence still below 0.7 -> keyword scan
     over all verticals, confidence min(0.8, 0.4 + 0.1 * hits)
  4. Nothing matched -> base profile, confidence 0.5
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional

from asobible.profiles import (
    BASE_VERTICAL,
    DEFAULT_MARKET_ID,
    MARKET_PROFILES,
    VERTICAL_PROFILES,
    MarketProfile,
    VerticalProfile,
    canonical_category,
    get_market_by_id,
)


SINGLE_CATEGORY_CONFIDENCE = 0.9
TIE_BREAK_BASE, TIE_BREAK_STEP, TIE_BREAK_CAP = 0.6, 0.05, 0.85
KEYWORD_SCAN_BASE, KEYWORD_SCAN_STEP, KEYWORD_SCAN_CAP = 0.4, 0.1, 0.8
MIN_CATEGORY_CONFIDENCE = 0.7
BASE_CONFIDENCE = 0.5

# Country code -> default language, and language -> default country.
_COUNTRY_LANGUAGE = {
    "US": "en", "GB": "en", "CA": "en", "AU": "en", "NZ": "en", "IE": "en",
    "DE": "de", "AT": "de", "CH": "de", "FR": "fr", "ES": "es", "MX": "es",
}
_LANGUAGE_COUNTRY = {"en": "US", "de": "DE", "fr": "FR", "es": "ES"}
_COUNTRY_ALIASES = {"UK": "GB"}


@dataclass
class VerticalDetectionResult:
    vertical_id: str
    confidence: float
    matched_signals: list[str] = field(default_factory=list)
    vertical: Optional[VerticalProfile] = None


@dataclass
class MarketDetectionResult:
    market_id: str
    locale: str
    market: Optional[MarketProfile] = None


# ============================================================
# VERTICALS
# ============================================================

def map_category_to_vertical(category: Optional[str]) -> list[str]:
    """Return candidate vertical ids for an App Store category, in registry order."""
    canonical = canonical_category(category)
    if not canonical:
        return []
    return [v.id for v in VERTICAL_PROFILES if canonical in v.categories]


@lru_cache(maxsize=None)
def _keyword_regex(keyword: str) -> re.Pattern:
    return re.compile(rf"\b{re.escape(keyword.lower())}\b")


def _keyword_hits(profile: VerticalProfile, text: str) -> list[str]:
    return [kw for kw in profile.keywords if _keyword_regex(kw).search(text)]


def _best_by_hits(profiles: list[VerticalProfile], text: str):
    """Profile with the most keyword hits; first wins on ties. None if no hits."""
    best, best_hits = None, []
    for profile in profiles:
        hits = _keyword_hits(profile, text)
        if len(hits) > len(best_hits):
            best, best_hits = profile, hits
    return best, best_hits


def detect_vertical(metadata: dict) -> VerticalDetectionResult:
    """Infer the vertical for app metadata.

    Args:
        metadata: Mapping with ``category``, ``title`` and ``subtitle``
                  (all optional).

    Returns:
        VerticalDetectionResult with vertical_id, confidence (0-1) and
        the signals that led to it.
    """
    category = metadata.get("category") or ""
    text = " ".join(
        str(metadata.get(key) or "") for key in ("title", "subtitle")
    ).lower()

    candidates = map_category_to_vertical(category)
    result: Optional[VerticalDetectionResult] = None

    if len(candidates) == 1:
        profile = next(v for v in VERTICAL_PROFILES if v.id == candidates[0])
        return VerticalDetectionResult(
            vertical_id=profile.id,
            confidence=SINGLE_CATEGORY_CONFIDENCE,
            matched_signals=[f"category:{canonical_category(category)}"],
            vertical=profile,
        )

    if candidates:
        pool = [v for v in VERTICAL_PROFILES if v.id in candidates]
        best, hits = _best_by_hits(pool, text)
        if best is not None:
            result = VerticalDetectionResult(
                vertical_id=best.id,
                confidence=round(
                    min(TIE_BREAK_CAP, TIE_BREAK_BASE + TIE_BREAK_STEP * len(hits)), 4
                ),
                matched_signals=[f"category:{canonical_category(category)}"]
                + [f"keyword:{kw}" for kw in hits],
                vertical=best,
            )

    if result is None or result.confidence < MIN_CATEGORY_CONFIDENCE:
        best, hits = _best_by_hits(list(VERTICAL_PROFILES), text)
        if best is not None:
            scanned = VerticalDetectionResult(
                vertical_id=best.id,
                confidence=round(
                    min(KEYWORD_SCAN_CAP, KEYWORD_SCAN_BASE + KEYWORD_SCAN_STEP * len(hits)), 4
                ),
                matched_signals=[f"keyword:{kw}" for kw in hits],
                vertical=best,
            )
            if result is None or scanned.confidence > result.confidence:
                result = scanned

    if result is None:
        return VerticalDetectionResult(
            vertical_id=BASE_VERTICAL.id,
            confidence=BASE_CONFIDENCE,
            matched_signals=[],
            vertical=BASE_VERTICAL,
        )
    return result


# ============================================================
# MARKETS
# ============================================================

def normalize_locale(locale: Optional[str]) -> str:
    """Canonicalize a locale string to ``ll-CC``.

    Underscores become hyphens, a bare country code ("US") gains its
    default language, a bare language code ("de") gains its default
    country. Unresolvable single codes are returned lowercased.
    """
    if not locale or not locale.strip():
        return f"en-{_LANGUAGE_COUNTRY['en']}"

    value = locale.strip().replace("_", "-")
    parts = [p for p in value.split("-") if p]

    if len(parts) == 1:
        code = parts[0]
        upper = _COUNTRY_ALIASES.get(code.upper(), code.upper())
        if code.isupper() and upper in _COUNTRY_LANGUAGE:
            return f"{_COUNTRY_LANGUAGE[upper]}-{upper}"
        lower = code.lower()
        if lower in _LANGUAGE_COUNTRY:
            return f"{lower}-{_LANGUAGE_COUNTRY[lower]}"
        if upper in _COUNTRY_LANGUAGE:
            return f"{_COUNTRY_LANGUAGE[upper]}-{upper}"
        return lower

    language = parts[0].lower()
    country = parts[-1].upper()
    country = _COUNTRY_ALIASES.get(country, country)
    return f"{language}-{country}"


def detect_market(locale: Optional[str]) -> MarketDetectionResult:
    """Resolve a locale to a market profile, falling back to the US market."""
    normalized = normalize_locale(locale)
    for market in MARKET_PROFILES:
        if normalized in market.locales:
            return MarketDetectionResult(
                market_id=market.id, locale=normalized, market=market,
            )
    return MarketDetectionResult(
        market_id=DEFAULT_MARKET_ID,
        locale=normalized,
        market=get_market_by_id(DEFAULT_MARKET_ID),
    )
