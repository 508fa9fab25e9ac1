"""
ASO Bible Configuration

Central settings loaded from environment variables.
"""

import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Immutable application settings."""

    # --- Versioning ---
    ENGINE_VERSION: str = "1.0.0"
    SCHEMA_VERSION: str = "1"
    KPI_SCHEMA_VERSION: str = "1"

    # --- Remote configuration store (PostgREST) ---
    SUPABASE_URL: str = os.getenv("ASOBIBLE_SUPABASE_URL", "")
    SUPABASE_KEY: str = os.getenv("ASOBIBLE_SUPABASE_KEY", "")
    REMOTE_TIMEOUT_SECONDS: float = float(
        os.getenv("ASOBIBLE_REMOTE_TIMEOUT", "5.0")
    )
    DB_RULESETS_ENABLED: bool = _env_bool("ASOBIBLE_DB_RULESETS", "true")

    # --- Caches ---
    PATTERN_CACHE_TTL_SECONDS: int = int(
        os.getenv("ASOBIBLE_PATTERN_CACHE_TTL", "300")
    )
    RULESET_CACHE_TTL_SECONDS: int = int(
        os.getenv("ASOBIBLE_RULESET_CACHE_TTL", "300")
    )
    RULESET_CACHE_MAX_ENTRIES: int = int(
        os.getenv("ASOBIBLE_RULESET_CACHE_MAX", "256")
    )

    # --- Leak detection thresholds (pending product-owner confirmation) ---
    LEAK_TOKEN_OVERLAP_MEDIUM: int = int(os.getenv("ASOBIBLE_LEAK_TOKEN_MEDIUM", "5"))
    LEAK_TOKEN_OVERLAP_HIGH: int = int(os.getenv("ASOBIBLE_LEAK_TOKEN_HIGH", "8"))
    LEAK_INTENT_OVERLAP_MEDIUM: int = int(os.getenv("ASOBIBLE_LEAK_INTENT_MEDIUM", "3"))
    LEAK_INTENT_OVERLAP_HIGH: int = int(os.getenv("ASOBIBLE_LEAK_INTENT_HIGH", "5"))

    # --- Intent classification ---
    DOMINANT_INTENT_MAJORITY: float = float(
        os.getenv("ASOBIBLE_DOMINANT_MAJORITY", "0.5")
    )

    # --- Combination generator ---
    MAX_COMBOS_PER_SOURCE: int = int(
        os.getenv("ASOBIBLE_MAX_COMBOS_PER_SOURCE", "500")
    )

    # --- Server ---
    HOST: str = os.getenv("ASOBIBLE_HOST", "0.0.0.0")
    PORT: int = int(os.getenv("ASOBIBLE_PORT", "8000"))

    # --- CORS ---
    CORS_ORIGINS: str = os.getenv("ASOBIBLE_CORS_ORIGINS", "*")

    @property
    def remote_enabled(self) -> bool:
        return bool(self.SUPABASE_URL and self.SUPABASE_KEY)


settings = Settings()
