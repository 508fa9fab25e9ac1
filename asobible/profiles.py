"""
Profile Registry

Static catalog of vertical and market profiles. Read-only reference
data: detection keywords, App Store categories and locales, plus the
id of the rule set each profile contributes to the merge chain.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


BASE_VERTICAL_ID = "base"
DEFAULT_MARKET_ID = "us"


@dataclass(frozen=True)
class VerticalProfile:
    id: str
    label: str
    keywords: tuple[str, ...]
    categories: tuple[str, ...] = ()
    rule_set_id: Optional[str] = None


@dataclass(frozen=True)
class MarketProfile:
    id: str
    label: str
    locales: tuple[str, ...]
    language: str = "en"
    rule_set_id: Optional[str] = None


# ============================================================
# VERTICALS
# ============================================================

BASE_VERTICAL = VerticalProfile(
    id=BASE_VERTICAL_ID,
    label="Base (vertical-agnostic)",
    keywords=(),
)

VERTICAL_PROFILES: tuple[VerticalProfile, ...] = (
    VerticalProfile(
        id="language_learning",
        label="Language Learning",
        keywords=(
            "learn", "learning", "language", "languages", "spanish", "french",
            "german", "english", "italian", "japanese", "chinese", "korean",
            "vocabulary", "grammar", "fluent", "lessons", "speak",
            "pronunciation", "translate",
        ),
        categories=("Education",),
        rule_set_id="vertical:language_learning",
    ),
    VerticalProfile(
        id="rewards",
        label="Rewards & Cashback",
        keywords=(
            "rewards", "reward", "earn", "cash", "cashback", "gift cards",
            "points", "paypal", "surveys", "redeem", "payout", "get paid",
        ),
        categories=("Entertainment", "Lifestyle"),
        rule_set_id="vertical:rewards",
    ),
    VerticalProfile(
        id="finance",
        label="Finance & Investing",
        keywords=(
            "invest", "investing", "stocks", "trading", "bank", "banking",
            "budget", "savings", "crypto", "credit", "wallet", "portfolio",
            "money",
        ),
        categories=("Finance", "Business"),
        rule_set_id="vertical:finance",
    ),
    VerticalProfile(
        id="dating",
        label="Dating & Relationships",
        keywords=(
            "dating", "date", "singles", "match", "matches", "love",
            "relationship", "romance", "flirt", "meet",
        ),
        categories=("Lifestyle", "Social Networking"),
        rule_set_id="vertical:dating",
    ),
    VerticalProfile(
        id="productivity",
        label="Productivity",
        keywords=(
            "tasks", "task", "to-do", "todo", "notes", "calendar", "planner",
            "organize", "focus", "reminders", "projects", "schedule",
        ),
        categories=("Productivity", "Business"),
        rule_set_id="vertical:productivity",
    ),
    VerticalProfile(
        id="health",
        label="Health & Fitness",
        keywords=(
            "fitness", "workout", "workouts", "health", "weight", "diet",
            "nutrition", "calories", "yoga", "meditation", "sleep", "steps",
            "exercise",
        ),
        categories=("Health & Fitness", "Lifestyle"),
        rule_set_id="vertical:health",
    ),
    VerticalProfile(
        id="entertainment",
        label="Entertainment & Streaming",
        keywords=(
            "stream", "streaming", "movies", "shows", "tv", "watch", "music",
            "videos", "series", "anime", "podcasts",
        ),
        categories=("Entertainment",),
        rule_set_id="vertical:entertainment",
    ),
)

_VERTICALS_BY_ID = {v.id: v for v in VERTICAL_PROFILES}


# ============================================================
# MARKETS
# ============================================================

MARKET_PROFILES: tuple[MarketProfile, ...] = (
    MarketProfile("us", "United States", ("en-US", "es-US"), "en", "market:us"),
    MarketProfile("uk", "United Kingdom", ("en-GB",), "en", "market:uk"),
    MarketProfile("ca", "Canada", ("en-CA", "fr-CA"), "en", "market:ca"),
    MarketProfile("au", "Australia", ("en-AU",), "en", "market:au"),
    MarketProfile("de", "Germany", ("de-DE", "de-AT", "de-CH"), "de", "market:de"),
)

_MARKETS_BY_ID = {m.id: m for m in MARKET_PROFILES}


# ============================================================
# LOOKUPS
# ============================================================

def get_vertical_by_id(vertical_id: Optional[str]) -> Optional[VerticalProfile]:
    if vertical_id == BASE_VERTICAL_ID:
        return BASE_VERTICAL
    return _VERTICALS_BY_ID.get(vertical_id or "")


def get_market_by_id(market_id: Optional[str]) -> Optional[MarketProfile]:
    return _MARKETS_BY_ID.get((market_id or "").lower())


def list_vertical_ids() -> list[str]:
    return [v.id for v in VERTICAL_PROFILES]


def list_market_ids() -> list[str]:
    return [m.id for m in MARKET_PROFILES]


def canonical_category(category: Optional[str]) -> str:
    """Return the registry spelling of an App Store category (case-insensitive)."""
    if not category:
        return ""
    wanted = category.strip().lower()
    for profile in VERTICAL_PROFILES:
        for known in profile.categories:
            if known.lower() == wanted:
                return known
    return category.strip()
