"""
Intent Pattern Loader

Loads effective intent patterns remote-first, compiles them once into
matchers and caches the compiled set for a fixed window.

Degradation:
  - remote error (network, status, bad payload) -> fallback patterns
  - remote returned no usable patterns          -> fallback patterns
  - a pattern whose regex does not compile       -> dropped and logged

The fallback set is tagged ``fallback_mode=True`` and that tag travels
with the PatternSet into every coverage result built from it.

Usage:
    from asobible.patterns.loader import load_intent_patterns
    patterns = await load_intent_patterns("finance", "us")
    patterns.fallback_mode  # True if defaults were substituted
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Iterable, Optional, Sequence, Union

from asobible.cache import PatternCache
from asobible.config import settings
from asobible.defaults import FALLBACK_INTENT_PATTERNS
from asobible.logging import scope_context
from asobible.patterns.models import (
    INTENT_TYPES,
    CompiledPattern,
    IntentPatternConfig,
    PatternSet,
    build_matcher,
)
from asobible.patterns.source import PatternSource, RemotePatternSource
from asobible.remote import default_remote_client

logger = logging.getLogger(__name__)

PatternLike = Union[IntentPatternConfig, CompiledPattern]


# ============================================================
# COMPILATION
# ============================================================

@lru_cache(maxsize=4096)
def _compile_one(config: IntentPatternConfig) -> Optional[CompiledPattern]:
    try:
        return CompiledPattern(config=config, matcher=build_matcher(config))
    except re.error as exc:
        logger.warning(
            "Dropping intent pattern with invalid regex",
            extra={"pattern": config.pattern, "error": str(exc)},
        )
        return None


def compile_patterns(configs: Iterable[IntentPatternConfig]) -> list[CompiledPattern]:
    """Compile patterns in order, filtering out those that fail to compile."""
    compiled = (_compile_one(config) for config in configs)
    return [pattern for pattern in compiled if pattern is not None]


def ensure_compiled(patterns: Sequence[PatternLike]) -> Sequence[CompiledPattern]:
    """Accept a PatternSet, compiled patterns or raw configs; return matchers."""
    if isinstance(patterns, PatternSet):
        return patterns
    result: list[CompiledPattern] = []
    for pattern in patterns:
        if isinstance(pattern, CompiledPattern):
            result.append(pattern)
        else:
            compiled = _compile_one(pattern)
            if compiled is not None:
                result.append(compiled)
    return result


def _first_set(row: dict, *keys: str, default):
    for key in keys:
        if row.get(key) is not None:
            return row[key]
    return default


def pattern_from_row(row: dict) -> IntentPatternConfig:
    """Convert a remote registry row into a pattern config.

    Effective weight/priority (after scope overrides) take precedence
    over the base values.

    Raises:
        ValueError: on a missing pattern or unknown intent type.
    """
    pattern = row.get("pattern")
    intent_type = row.get("intent_type")
    if not pattern or intent_type not in INTENT_TYPES:
        raise ValueError(f"Invalid intent pattern row: {pattern!r} / {intent_type!r}")
    weight = _first_set(row, "effective_weight", "weight", default=1.0)
    priority = _first_set(row, "effective_priority", "priority", default=100)
    word_boundary = row.get("word_boundary")
    return IntentPatternConfig(
        pattern=pattern,
        intent_type=intent_type,
        weight=float(weight),
        priority=int(priority),
        is_regex=bool(row.get("is_regex", False)),
        case_sensitive=bool(row.get("case_sensitive", False)),
        word_boundary=True if word_boundary is None else bool(word_boundary),
        example=row.get("example"),
        scope=row.get("scope") or "base",
    )


FALLBACK_PATTERN_SET = PatternSet(
    compile_patterns(FALLBACK_INTENT_PATTERNS), fallback_mode=True,
)


def fallback_patterns() -> PatternSet:
    """A fresh copy of the built-in patterns, safe for the caller to mutate."""
    return PatternSet(FALLBACK_PATTERN_SET, fallback_mode=True)


# ============================================================
# SERVICE
# ============================================================

class IntentPatternService:
    """Owns the pattern cache and the remote-first loading policy."""

    def __init__(
        self,
        source: Optional[PatternSource] = None,
        cache: Optional[PatternCache] = None,
    ):
        self.source = source
        self.cache = cache or PatternCache(settings.PATTERN_CACHE_TTL_SECONDS)

    async def load(
        self,
        vertical: Optional[str] = None,
        market: Optional[str] = None,
        organization_id: Optional[str] = None,
        app_id: Optional[str] = None,
    ) -> PatternSet:
        """Return effective patterns, from cache when fresh."""
        cached = self.cache.get()
        if cached is not None:
            logger.debug("Using cached intent patterns",
                         extra={"cache": "hit", "pattern_count": len(cached)})
            return cached

        patterns = await self._fetch(vertical, market, organization_id, app_id)
        self.cache.set(patterns)
        return patterns

    async def _fetch(self, vertical, market, organization_id, app_id) -> PatternSet:
        context = scope_context(vertical, market, organization_id, app_id)

        if self.source is None:
            logger.info("No pattern source configured, using fallback patterns",
                        extra={**context, "fallback_mode": True})
            return fallback_patterns()

        try:
            rows = await self.source.fetch_patterns(vertical, market, organization_id, app_id)
        except Exception as exc:
            logger.warning(
                "Failed to load intent patterns, using fallback patterns",
                extra={**context, "error": str(exc), "error_type": type(exc).__name__,
                       "fallback_mode": True},
            )
            return fallback_patterns()

        configs = []
        for row in rows:
            try:
                configs.append(pattern_from_row(row))
            except (ValueError, TypeError, AttributeError) as exc:
                logger.warning("Skipping malformed intent pattern row",
                               extra={"error": str(exc)})

        compiled = compile_patterns(configs)
        if not compiled:
            logger.warning(
                "Remote store returned no usable intent patterns, using fallback patterns",
                extra={**context, "fallback_mode": True},
            )
            return fallback_patterns()

        logger.info("Loaded intent patterns",
                    extra={**context, "pattern_count": len(compiled), "fallback_mode": False})
        return PatternSet(compiled, fallback_mode=False)

    def invalidate(self) -> None:
        self.cache.invalidate()
        logger.info("Intent pattern cache cleared")


def _default_source() -> Optional[PatternSource]:
    client = default_remote_client()
    return RemotePatternSource(client) if client is not None else None


# Singleton - constructed once at process start
pattern_service = IntentPatternService(source=_default_source())


async def load_intent_patterns(
    vertical: Optional[str] = None,
    market: Optional[str] = None,
    organization_id: Optional[str] = None,
    app_id: Optional[str] = None,
) -> PatternSet:
    return await pattern_service.load(vertical, market, organization_id, app_id)


def clear_intent_pattern_cache() -> None:
    pattern_service.invalidate()
