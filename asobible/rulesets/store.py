"""
Rule Set Store

Code-defined rule sets for every layer of the merge chain:

  base     - vertical-agnostic defaults, empty overrides
  vertical - language_learning, rewards, finance, dating,
             productivity, health, entertainment
  market   - us, uk, ca, au, de
  client   - registered at runtime (per app / organization)

Override conventions shared with the remote store normalizer:
  kpi_overrides            {kpi_id: {"weight": float}}
  formula_overrides        {formula_id: {"multiplier": float, ...}}
  intent_overrides         {intent_key: {"intent_type": str, "weight": float, "keywords": [...]}}
  hook_overrides           {category: {"weight": float, "patterns": [...]}}
  token_relevance_overrides{token: 0..3}
  recommendation_overrides {recommendation_id: {"message": str, ...}}
"""

from __future__ import annotations

import logging
from typing import Optional

from asobible.defaults import DEFAULT_CHARACTER_LIMITS, VERTICAL_HOOK_PATTERNS
from asobible.rulesets.models import RuleSet

logger = logging.getLogger(__name__)


# ============================================================
# BASE
# ============================================================

def load_base_rule_set() -> RuleSet:
    """The root of every merge chain: no overrides, default limits."""
    return RuleSet(
        id="base",
        label="Base RuleSet",
        source="base",
        version="1.0.0",
        kpi_overrides={},
        formula_overrides={},
        intent_overrides={},
        hook_overrides={},
        token_relevance_overrides={},
        stopword_overrides=[],
        recommendation_overrides={},
        character_limits=dict(DEFAULT_CHARACTER_LIMITS),
    )


# ============================================================
# VERTICALS
# ============================================================

def _hooks(vertical_id: str, weights: dict[str, float]) -> dict:
    return {
        category: {"weight": weights.get(category, 1.0), "patterns": list(patterns)}
        for category, patterns in VERTICAL_HOOK_PATTERNS[vertical_id].items()
    }


def _intent(intent_type: str, weight: float, *keywords: str) -> dict:
    return {"intent_type": intent_type, "weight": weight, "keywords": list(keywords)}


def _rec(message: str, severity: str = "info", category: str = "generic") -> dict:
    return {"message": message, "severity": severity, "category": category}


_VERTICAL_RULE_SETS: dict[str, RuleSet] = {
    "language_learning": RuleSet(
        id="vertical:language_learning",
        label="Language Learning",
        source="vertical",
        version="1.0.0",
        vertical_id="language_learning",
        token_relevance_overrides={
            "learn": 3, "lesson": 3, "lessons": 3, "language": 3,
            "spanish": 3, "french": 3, "german": 3, "english": 3,
            "italian": 2, "japanese": 2, "vocabulary": 3, "grammar": 3,
            "fluent": 3, "pronunciation": 2, "translate": 2, "speak": 2,
        },
        intent_overrides={
            "learning": _intent("informational", 1.3, "learn", "study", "practice"),
            "language_practice": _intent("informational", 1.2, "speak", "conversation"),
            "skill_acquisition": _intent("commercial", 1.1, "fluent", "master"),
        },
        hook_overrides=_hooks("language_learning", {
            "learning_educational": 1.3, "outcome_benefit": 1.2,
        }),
        stopword_overrides=["online", "mobile"],
        kpi_overrides={
            "intent_alignment": {"weight": 1.2},
            "hook_strength": {"weight": 1.1},
        },
        formula_overrides={"metadata_score": {"multiplier": 1.1}},
        recommendation_overrides={
            "missing_learning_hook": _rec(
                "Your title lacks educational hooks such as 'learn', 'practice', or "
                "'speak fluently'. Adding 1-2 learning-focused terms improves "
                "educational intent visibility and category relevance.",
                "warning", "hook",
            ),
            "missing_language_term": _rec(
                "Consider adding language names (e.g., 'Spanish', 'French', "
                "'English') to improve search relevance for users looking for "
                "specific language courses.",
                "info", "token",
            ),
            "generic_value_prop": _rec(
                "Language learning apps benefit from specific outcomes like "
                "'speak fluently in 30 days' or 'master grammar' rather than "
                "generic terms like 'best app'.",
                "info", "intent",
            ),
        },
    ),
    "rewards": RuleSet(
        id="vertical:rewards",
        label="Rewards & Cashback",
        source="vertical",
        version="1.0.0",
        vertical_id="rewards",
        token_relevance_overrides={
            "earn": 3, "rewards": 3, "cashback": 3, "cash": 3, "gift": 2,
            "redeem": 3, "points": 2, "payout": 3, "surveys": 2,
            "paypal": 2, "bonus": 2, "coins": 1,
        },
        intent_overrides={
            "earning": _intent("transactional", 1.3, "earn", "get paid"),
            "redemption": _intent("transactional", 1.2, "redeem", "cash out"),
            "cashback_offers": _intent("commercial", 1.1, "cashback", "deals"),
        },
        hook_overrides=_hooks("rewards", {
            "outcome_benefit": 1.3, "trust_safety": 1.2,
        }),
        stopword_overrides=["app", "free"],
        kpi_overrides={
            "intent_alignment": {"weight": 1.1},
            "trust_signals": {"weight": 1.3},
        },
        formula_overrides={"metadata_score": {"multiplier": 1.05}},
        recommendation_overrides={
            "missing_earning_term": _rec(
                "Add at least one earning-related term (e.g., 'earn', 'cash out', "
                "'rewards', 'get paid'). This is core to rewards vertical "
                "visibility and user intent matching.",
                "critical", "token",
            ),
            "missing_trust_signal": _rec(
                "Rewards apps benefit from trust signals like 'real money', "
                "'guaranteed payout', or 'millions paid out'. Add 1-2 trust terms "
                "to overcome skepticism.",
                "warning", "hook",
            ),
        },
    ),
    "finance": RuleSet(
        id="vertical:finance",
        label="Finance & Investing",
        source="vertical",
        version="1.0.0",
        vertical_id="finance",
        token_relevance_overrides={
            "invest": 3, "investing": 3, "stocks": 3, "trading": 3,
            "budget": 3, "bank": 3, "banking": 3, "savings": 3, "crypto": 2,
            "credit": 2, "portfolio": 2, "wallet": 2, "dividends": 2,
        },
        intent_overrides={
            "investing": _intent("commercial", 1.3, "invest", "stocks"),
            "trading": _intent("transactional", 1.2, "trade", "buy"),
            "budgeting": _intent("informational", 1.1, "budget", "track spending"),
        },
        hook_overrides=_hooks("finance", {
            "trust_safety": 1.4, "status_authority": 1.2,
        }),
        stopword_overrides=["app"],
        kpi_overrides={
            "trust_signals": {"weight": 1.4},
            "intent_alignment": {"weight": 1.1},
        },
        formula_overrides={"metadata_score": {"multiplier": 1.1}},
        recommendation_overrides={
            "missing_trust_term": _rec(
                "Finance apps require trust signals ('secure', 'safe', 'FDIC "
                "insured', 'bank-grade security'). Add at least one to improve "
                "user confidence and conversion.",
                "critical", "token",
            ),
            "missing_action_verb": _rec(
                "Include action verbs like 'invest', 'save', 'budget', or 'track' "
                "to clarify your app's primary function and improve intent "
                "matching.",
                "warning", "intent",
            ),
        },
    ),
    "dating": RuleSet(
        id="vertical:dating",
        label="Dating & Relationships",
        source="vertical",
        version="1.0.0",
        vertical_id="dating",
        token_relevance_overrides={
            "dating": 3, "singles": 3, "match": 3, "matches": 3, "love": 2,
            "relationship": 3, "romance": 2, "flirt": 2, "chat": 2, "meet": 2,
        },
        intent_overrides={
            "matchmaking": _intent("transactional", 1.2, "match", "swipe"),
            "relationship_seeking": _intent("commercial", 1.2, "relationship", "love"),
            "social_connection": _intent("navigational", 1.0, "meet", "chat"),
        },
        hook_overrides=_hooks("dating", {
            "trust_safety": 1.3, "outcome_benefit": 1.2,
        }),
        stopword_overrides=["app"],
        kpi_overrides={"trust_signals": {"weight": 1.2}},
        recommendation_overrides={
            "missing_social_term": _rec(
                "Dating apps score better with connection terms ('meet', 'match', "
                "'chat', 'connect'). Add at least one to improve category "
                "relevance.",
                "warning", "token",
            ),
            "missing_safety_signal": _rec(
                "Dating apps benefit from safety signals like 'verified profiles', "
                "'safe', or 'authentic users'. Add 1-2 trust terms to reduce "
                "safety concerns.",
                "warning", "hook",
            ),
        },
    ),
    "productivity": RuleSet(
        id="vertical:productivity",
        label="Productivity",
        source="vertical",
        version="1.0.0",
        vertical_id="productivity",
        token_relevance_overrides={
            "tasks": 3, "todo": 3, "notes": 3, "calendar": 3, "planner": 3,
            "organize": 3, "reminders": 2, "focus": 2, "projects": 2,
            "schedule": 2, "habits": 1,
        },
        intent_overrides={
            "task_management": _intent("transactional", 1.2, "tasks", "todo"),
            "organizing": _intent("informational", 1.1, "organize", "plan"),
            "planning": _intent("commercial", 1.0, "planner", "calendar"),
        },
        hook_overrides=_hooks("productivity", {
            "ease_of_use": 1.3, "outcome_benefit": 1.2,
        }),
        stopword_overrides=["app"],
        kpi_overrides={"hook_strength": {"weight": 1.1}},
        recommendation_overrides={
            "missing_use_case": _rec(
                "Specify what users can organize/manage (e.g., 'tasks', "
                "'projects', 'notes', 'calendar') to improve search relevance.",
                "info", "token",
            ),
            "missing_ease_hook": _rec(
                "Add ease-of-use hooks like 'simple', 'intuitive', or 'easy to "
                "use' to reduce perceived complexity and increase adoption.",
                "info", "hook",
            ),
        },
    ),
    "health": RuleSet(
        id="vertical:health",
        label="Health & Fitness",
        source="vertical",
        version="1.0.0",
        vertical_id="health",
        token_relevance_overrides={
            "fitness": 3, "workout": 3, "health": 3, "exercise": 3,
            "weight": 2, "diet": 2, "nutrition": 2, "calories": 2, "yoga": 2,
            "meditation": 2, "sleep": 2, "steps": 1,
        },
        intent_overrides={
            "fitness_goals": _intent("commercial", 1.2, "lose weight", "get fit"),
            "nutrition_tracking": _intent("informational", 1.1, "calories", "diet"),
            "wellness": _intent("informational", 1.0, "sleep", "meditation"),
        },
        hook_overrides=_hooks("health", {
            "outcome_benefit": 1.3, "status_authority": 1.1,
        }),
        stopword_overrides=["app"],
        kpi_overrides={"intent_alignment": {"weight": 1.1}},
        recommendation_overrides={
            "missing_fitness_keyword": _rec(
                "Add one health anchor keyword ('fitness', 'workout', 'health', "
                "'wellness', 'tracking') for category relevance and search "
                "visibility.",
                "warning", "token",
            ),
            "missing_outcome": _rec(
                "Health apps benefit from outcome hooks like 'lose weight', "
                "'get fit', or 'feel better'. Add 1-2 health outcome statements.",
                "info", "hook",
            ),
        },
    ),
    "entertainment": RuleSet(
        id="vertical:entertainment",
        label="Entertainment & Streaming",
        source="vertical",
        version="1.0.0",
        vertical_id="entertainment",
        token_relevance_overrides={
            "stream": 3, "streaming": 3, "movies": 3, "shows": 3, "watch": 3,
            "tv": 2, "music": 2, "videos": 2, "series": 2, "anime": 2,
            "podcasts": 1,
        },
        intent_overrides={
            "streaming": _intent("transactional", 1.2, "stream", "watch now"),
            "content_discovery": _intent("informational", 1.0, "discover", "browse"),
            "watching": _intent("navigational", 1.0, "watch", "shows"),
        },
        hook_overrides=_hooks("entertainment", {
            "outcome_benefit": 1.2, "time_to_result": 1.1,
        }),
        stopword_overrides=["app"],
        kpi_overrides={"hook_strength": {"weight": 1.2}},
        recommendation_overrides={
            "missing_consumption_intent": _rec(
                "Include a consumption verb like 'watch', 'play', 'stream', or "
                "'listen' to clarify the primary user action and improve intent "
                "matching.",
                "warning", "intent",
            ),
            "missing_content_type": _rec(
                "Specify content types (e.g., 'movies', 'shows', 'music', "
                "'videos') to improve search relevance and user expectations.",
                "info", "token",
            ),
        },
    ),
}


# ============================================================
# MARKETS
# ============================================================

_MARKET_RULE_SETS: dict[str, RuleSet] = {
    "us": RuleSet(
        id="market:us",
        label="United States",
        source="market",
        version="1.0.0",
        market_id="us",
        kpi_overrides={"intent_alignment": {"weight": 1.0}},
    ),
    "uk": RuleSet(
        id="market:uk",
        label="United Kingdom",
        source="market",
        version="1.0.0",
        market_id="uk",
        token_relevance_overrides={"organise": 2, "favourite": 1, "colour": 1},
        stopword_overrides=["whilst"],
    ),
    "ca": RuleSet(
        id="market:ca",
        label="Canada",
        source="market",
        version="1.0.0",
        market_id="ca",
        stopword_overrides=["le", "la", "les", "et"],
    ),
    "au": RuleSet(
        id="market:au",
        label="Australia",
        source="market",
        version="1.0.0",
        market_id="au",
        token_relevance_overrides={"organise": 2, "favourite": 1},
    ),
    "de": RuleSet(
        id="market:de",
        label="Germany",
        source="market",
        version="1.0.0",
        market_id="de",
        token_relevance_overrides={"kostenlos": 2, "lernen": 2},
        stopword_overrides=[
            "der", "die", "das", "und", "mit", "für", "von", "ein", "eine",
        ],
        kpi_overrides={"character_usage": {"weight": 1.15}},
    ),
}


# ============================================================
# CLIENTS
# ============================================================

_CLIENT_RULE_SETS: dict[str, RuleSet] = {}


def register_client_rule_set(app_id: str, rule_set: RuleSet) -> None:
    """Register a client-layer rule set for an app."""
    _CLIENT_RULE_SETS[app_id] = rule_set


def unregister_client_rule_set(app_id: str) -> None:
    _CLIENT_RULE_SETS.pop(app_id, None)


# ============================================================
# LOADERS
# ============================================================

def load_vertical_rule_set(vertical_id: Optional[str]) -> Optional[RuleSet]:
    """Return the code-defined rule set for a vertical, or None for base/unknown."""
    if not vertical_id or vertical_id == "base":
        return None
    rule_set = _VERTICAL_RULE_SETS.get(vertical_id)
    if rule_set is None:
        logger.warning("No rule set for vertical", extra={"vertical": vertical_id})
    return rule_set


def load_market_rule_set(market_id: Optional[str]) -> Optional[RuleSet]:
    if not market_id:
        return None
    rule_set = _MARKET_RULE_SETS.get(market_id.lower())
    if rule_set is None:
        logger.warning("No rule set for market", extra={"market": market_id})
    return rule_set


def load_client_rule_set(app_id: Optional[str]) -> Optional[RuleSet]:
    if not app_id:
        return None
    return _CLIENT_RULE_SETS.get(app_id)


def vertical_rule_sets() -> dict[str, RuleSet]:
    """All canonical vertical rule sets keyed by vertical id."""
    return dict(_VERTICAL_RULE_SETS)
