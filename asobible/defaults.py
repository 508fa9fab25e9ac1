"""
Default Configuration

The single home for built-in data that the engine falls back on when
the remote configuration store is unavailable or returns nothing:

  1. Fallback intent patterns (pattern loader)
  2. Generic and per-vertical hook patterns (hook classifier, rule sets)
  3. Low-value stopwords (combination generator)
  4. Category to vertical maps (detection, leak detection)

Every subsystem imports these tables from here. Do not copy them.
"""

from __future__ import annotations

from asobible.patterns.models import IntentPatternConfig


# ============================================================
# FALLBACK INTENT PATTERNS
# ============================================================

FALLBACK_INTENT_PATTERNS: tuple[IntentPatternConfig, ...] = (
    # Informational
    IntentPatternConfig("learn", "informational", weight=1.2, priority=100),
    IntentPatternConfig("how to", "informational", weight=1.3, priority=110,
                        word_boundary=False),
    IntentPatternConfig("guide", "informational", weight=1.1, priority=90),
    IntentPatternConfig("tutorial", "informational", weight=1.1, priority=90),
    # Commercial
    IntentPatternConfig("best", "commercial", weight=1.5, priority=120),
    IntentPatternConfig("top", "commercial", weight=1.4, priority=115),
    IntentPatternConfig("compare", "commercial", weight=1.3, priority=110),
    # Transactional
    IntentPatternConfig("download", "transactional", weight=2.0, priority=150),
    IntentPatternConfig("free", "transactional", weight=1.8, priority=140),
    IntentPatternConfig("get", "transactional", weight=1.5, priority=130),
    # Navigational
    IntentPatternConfig("app", "navigational", weight=1.0, priority=50),
    IntentPatternConfig("official", "navigational", weight=1.2, priority=60),
)


# ============================================================
# HOOK PATTERNS
# ============================================================

# Used when no valid merged rule set supplies hook overrides.
GENERIC_HOOK_PATTERNS: dict[str, list[str]] = {
    "learning_educational": [
        "learn", "master", "study", "practice", "discover", "explore",
        "understand", "lessons", "course", "tutorial", "guide",
    ],
    "outcome_benefit": [
        "save money", "earn", "get fit", "achieve", "improve", "boost",
        "grow", "results", "transform", "better",
    ],
    "status_authority": [
        "#1", "award winning", "top rated", "used by millions", "expert",
        "best selling", "industry leader", "official", "recommended",
    ],
    "ease_of_use": [
        "easy", "simple", "effortless", "intuitive", "one tap", "no hassle",
        "beginner friendly", "user friendly", "step by step",
    ],
    "time_to_result": [
        "instant", "fast", "quick", "in minutes", "today", "in 30 days",
        "same day", "right away", "immediately",
    ],
    "trust_safety": [
        "secure", "safe", "private", "verified", "trusted", "protected",
        "encrypted", "guaranteed", "no scam",
    ],
}

VERTICAL_HOOK_PATTERNS: dict[str, dict[str, list[str]]] = {
    "language_learning": {
        "learning_educational": [
            "learn", "master", "study", "practice", "improve", "develop",
            "build skills", "understand", "discover", "explore", "lessons",
            "course", "tutorial", "education",
        ],
        "outcome_benefit": [
            "speak fluently", "become fluent", "talk like native",
            "travel confidently", "ace exams", "get certified", "career boost",
            "expand vocabulary", "perfect pronunciation", "sound natural",
        ],
        "status_authority": [
            "#1 language app", "expert approved", "certified course",
            "award winning", "trusted by schools", "used by millions",
            "recommended by teachers", "proven method",
        ],
        "ease_of_use": [
            "easy to learn", "simple", "beginner friendly",
            "no experience needed", "step by step", "guided", "intuitive",
            "just 5 minutes", "bite-sized lessons",
        ],
        "time_to_result": [
            "in 30 days", "fast results", "quick progress", "rapid learning",
            "immediate improvement", "within weeks", "daily practice",
            "see results fast",
        ],
        "trust_safety": [
            "trusted", "safe learning", "privacy protected", "secure",
            "verified", "authentic content", "quality guaranteed",
        ],
    },
    "rewards": {
        "learning_educational": [
            "how to earn", "maximize rewards", "learn earning strategies",
            "discover offers", "find deals",
        ],
        "outcome_benefit": [
            "earn cash", "get paid", "free money", "extra income",
            "passive income", "rewards", "cashback", "gift cards",
            "save money", "get discounts",
        ],
        "status_authority": [
            "#1 rewards app", "top earning app", "most trusted",
            "highest rated", "millions earned", "verified payouts",
            "proven legitimate",
        ],
        "ease_of_use": [
            "easy to earn", "simple rewards", "no hassle", "automatic",
            "instant", "tap to earn", "play and earn", "effortless",
        ],
        "time_to_result": [
            "instant payout", "fast cash out", "same day", "quick rewards",
            "earn today", "immediate", "within 24 hours", "start earning now",
        ],
        "trust_safety": [
            "legitimate", "real money", "guaranteed payout", "secure",
            "trusted", "verified", "safe", "no scam", "proven",
        ],
    },
    "finance": {
        "learning_educational": [
            "learn investing", "financial education", "understand markets",
            "budget better", "track spending", "analyze finances",
        ],
        "outcome_benefit": [
            "save money", "grow wealth", "build portfolio", "earn interest",
            "maximize returns", "reduce fees", "increase savings",
            "achieve goals", "financial freedom",
        ],
        "status_authority": [
            "bank grade", "fdic insured", "regulated", "licensed",
            "trusted by millions", "award winning", "industry leader",
            "certified",
        ],
        "ease_of_use": [
            "easy banking", "simple investing", "intuitive", "user friendly",
            "seamless", "hassle free", "quick setup", "automated",
        ],
        "time_to_result": [
            "instant transfer", "same day", "immediate access",
            "quick deposit", "fast approval", "real time", "within minutes",
        ],
        "trust_safety": [
            "secure", "encrypted", "protected", "safe", "trusted", "insured",
            "verified", "compliant", "bank level security", "fraud protection",
        ],
    },
    "dating": {
        "learning_educational": [
            "discover matches", "explore profiles", "find compatible",
            "learn about",
        ],
        "outcome_benefit": [
            "find love", "meet singles", "make connections",
            "real relationships", "meaningful matches", "find your match",
            "soulmate", "perfect partner", "lasting relationship",
        ],
        "status_authority": [
            "#1 dating app", "most popular", "trusted", "millions of users",
            "success stories", "proven results", "award winning",
        ],
        "ease_of_use": [
            "easy matching", "simple swipe", "quick setup", "effortless",
            "intuitive", "user friendly", "straightforward",
        ],
        "time_to_result": [
            "match today", "instant matches", "quick connections",
            "start chatting now", "meet tonight", "fast matching",
        ],
        "trust_safety": [
            "verified profiles", "safe dating", "secure", "authentic",
            "real people", "screened", "protected", "privacy first",
            "moderated",
        ],
    },
    "productivity": {
        "learning_educational": [
            "learn to organize", "master productivity", "understand workflow",
            "discover techniques",
        ],
        "outcome_benefit": [
            "get organized", "boost productivity", "save time", "stay focused",
            "achieve goals", "complete tasks", "manage better", "work smarter",
            "increase efficiency",
        ],
        "status_authority": [
            "#1 productivity app", "trusted by professionals",
            "used by fortune 500", "award winning", "industry standard",
            "recommended",
        ],
        "ease_of_use": [
            "easy to use", "simple", "intuitive", "streamlined", "effortless",
            "quick setup", "user friendly", "no learning curve",
        ],
        "time_to_result": [
            "instant organization", "immediate results", "get started now",
            "quick sync", "fast setup", "right away",
        ],
        "trust_safety": [
            "secure", "encrypted", "private", "trusted", "reliable",
            "backed up", "protected", "safe",
        ],
    },
    "health": {
        "learning_educational": [
            "learn fitness", "understand nutrition", "track progress",
            "monitor health", "analyze data",
        ],
        "outcome_benefit": [
            "lose weight", "get fit", "build muscle", "improve health",
            "feel better", "live healthier", "reach goals", "transform body",
            "boost energy", "sleep better",
        ],
        "status_authority": [
            "doctor recommended", "scientifically proven", "certified trainers",
            "expert designed", "award winning", "trusted by athletes",
            "medical grade",
        ],
        "ease_of_use": [
            "easy tracking", "simple workouts", "user friendly", "intuitive",
            "guided", "step by step", "beginner friendly",
        ],
        "time_to_result": [
            "see results fast", "quick progress", "in 30 days",
            "immediate feedback", "rapid improvement", "within weeks",
            "start today",
        ],
        "trust_safety": [
            "secure", "private", "confidential", "hipaa compliant", "trusted",
            "verified", "safe", "protected data",
        ],
    },
    "entertainment": {
        "learning_educational": [
            "discover content", "explore shows", "find favorites",
            "browse library",
        ],
        "outcome_benefit": [
            "unlimited entertainment", "endless content", "binge watch",
            "enjoy shows", "relax", "have fun", "ad-free", "premium quality",
            "exclusive content",
        ],
        "status_authority": [
            "#1 streaming app", "award winning shows", "original content",
            "exclusive", "most popular", "trusted", "industry leader",
        ],
        "ease_of_use": [
            "easy streaming", "simple interface", "user friendly", "intuitive",
            "seamless", "one click", "quick access",
        ],
        "time_to_result": [
            "watch now", "instant streaming", "immediate access",
            "start watching", "play instantly", "no wait",
        ],
        "trust_safety": [
            "secure", "safe", "family friendly", "parental controls",
            "trusted", "verified", "protected",
        ],
    },
}


# ============================================================
# COMBINATION STOPWORDS
# ============================================================

LOW_VALUE_STOPWORDS: frozenset[str] = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "as", "is", "was", "are", "be", "been",
    "have", "has", "had", "do", "does", "did", "will", "would", "should",
    "could", "may", "might", "can", "must", "shall",
})


# ============================================================
# CATEGORY MAPS
# ============================================================

# App Store category -> verticals that legitimately serve it.
# "base" is always an acceptable fallback.
CATEGORY_EXPECTED_VERTICALS: dict[str, list[str]] = {
    "Education": ["language_learning", "base"],
    "Finance": ["finance", "base"],
    "Business": ["finance", "productivity", "base"],
    "Entertainment": ["entertainment", "rewards", "base"],
    "Lifestyle": ["rewards", "health", "dating", "base"],
    "Health & Fitness": ["health", "base"],
    "Productivity": ["productivity", "base"],
    "Social Networking": ["dating", "base"],
}

DEFAULT_EXPECTED_VERTICALS: list[str] = ["base"]

DEFAULT_CHARACTER_LIMITS: dict[str, int] = {
    "title": 30,
    "subtitle": 30,
}
