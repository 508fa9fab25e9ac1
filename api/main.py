"""
ASO Bible API - Main Application

POST   /rulesets/active  - Detect vertical/market and return the effective rule set
POST   /rulesets/merge   - Merge explicit rule set layers
POST   /detect/vertical  - Infer the vertical for app metadata
GET    /detect/market    - Resolve a locale to a market
POST   /intent/classify  - Classify tokens or phrases by search intent
POST   /intent/coverage  - Title/subtitle search intent coverage
POST   /hooks/classify   - Psychological hook categories for marketing copy
POST   /combos/analyze   - Keyword combinations, existing vs missing
DELETE /patterns/cache   - Drop the cached intent patterns
GET    /health           - Health check
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.requests import Request

from asobible import __version__
from asobible.combos import analyze_all_combos
from asobible.config import settings
from asobible.leak_detection import apply_leak_detection, get_leak_detection_summary
from asobible.logging import setup_logging, get_logger
from asobible.patterns.coverage import (
    compute_combined_search_intent_coverage,
    get_coverage_assessment,
    get_dominant_intent,
)
from asobible.patterns.hooks import classify_hook, get_hook_classification_summary
from asobible.patterns.intent import (
    classify_combo_intent,
    classify_token_intent,
    group_by_discovery_footprint,
)
from asobible.patterns.loader import (
    clear_intent_pattern_cache,
    load_intent_patterns,
    pattern_service,
)
from asobible.profiles import DEFAULT_MARKET_ID, list_market_ids, list_vertical_ids
from asobible.rulesets import loader as ruleset_loader
from asobible.rulesets.loader import get_active_rule_set, get_rule_set_for_vertical_market
from asobible.rulesets.merger import (
    get_merged_rule_set_summary,
    merge_rule_sets,
    validate_merged_rule_set,
)
from asobible.rulesets.models import MergedRuleSet, RuleSet
from asobible.schemas.api import (
    ActiveRuleSetRequest,
    AppMetadata,
    ComboAnalyzeRequest,
    ComboAnalyzeResponse,
    CoverageRequest,
    CoverageResponse,
    HealthResponse,
    HookClassifyRequest,
    HookClassifyResponse,
    IntentClassifyRequest,
    IntentClassifyResponse,
    MarketDetectionResponse,
    MergeRequest,
    RuleSetModel,
    RuleSetResponse,
    VerticalDetectionResponse,
)
from asobible.signatures import detect_market, detect_vertical

logger = get_logger("api")


# ============================================================
# STARTUP / SHUTDOWN
# ============================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging on startup."""
    setup_logging()
    if not settings.remote_enabled:
        logger.warning(
            "Remote configuration store not configured. "
            "Intent patterns will use built-in fallbacks and rule sets "
            "will use code-defined layers only."
        )
    logger.info("ASO Bible API starting", extra={"source": "remote" if settings.remote_enabled else "local"})
    yield
    logger.info("ASO Bible API shutting down")


app = FastAPI(
    title="ASO Bible API",
    description="Rule engine for App Store metadata optimization",
    version=f"{__version__} (engine {settings.ENGINE_VERSION})",
    lifespan=lifespan,
)

# CORS - set ASOBIBLE_CORS_ORIGINS in production
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",")],
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    allow_credentials=False,
)


# ============================================================
# GLOBAL ERROR HANDLER
# ============================================================

@app.exception_handler(Exception)
async def global_error_handler(request: Request, exc: Exception):
    """Catch unhandled exceptions and return a structured error without internals."""
    logger.error(
        f"Unhandled exception: {type(exc).__name__}",
        extra={"error": str(exc), "path": request.url.path, "method": request.method},
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error. The request could not be completed."},
    )


# ============================================================
# HELPERS
# ============================================================

def _rule_set_response(merged: MergedRuleSet) -> dict:
    effective = {name: getattr(merged, name) for name in RuleSetModel.model_fields}
    return {
        "summary": get_merged_rule_set_summary(merged),
        "effective": effective,
        "leak_warnings": [asdict(w) for w in merged.leak_warnings],
        "leak_summary": get_leak_detection_summary(merged.leak_warnings),
        "validation_errors": validate_merged_rule_set(merged),
    }


def _check_scope(vertical_id: Optional[str], market_id: Optional[str]) -> None:
    if vertical_id is not None and vertical_id not in ["base"] + list_vertical_ids():
        raise HTTPException(400, f"Unknown vertical: {vertical_id}")
    if market_id is not None and market_id not in list_market_ids():
        raise HTTPException(400, f"Unknown market: {market_id}")


# ============================================================
# ROUTES - RULE SETS
# ============================================================

@app.post("/rulesets/active", response_model=RuleSetResponse)
async def active_rule_set(request: ActiveRuleSetRequest):
    """Detect vertical and market, merge every layer and run leak detection."""
    merged = await get_active_rule_set(
        request.metadata.model_dump(),
        locale=request.locale,
        organization_id=request.organization_id,
    )
    return _rule_set_response(merged)


@app.post("/rulesets/merge", response_model=RuleSetResponse)
async def merge_layers(request: MergeRequest):
    """Merge caller-supplied layers in the order given."""
    merged = merge_rule_sets(*(RuleSet(**layer.model_dump()) for layer in request.layers))
    if request.metadata is not None:
        apply_leak_detection(merged, request.metadata.model_dump())
    return _rule_set_response(merged)


# ============================================================
# ROUTES - DETECTION
# ============================================================

@app.post("/detect/vertical", response_model=VerticalDetectionResponse)
async def detect_vertical_route(metadata: AppMetadata):
    result = detect_vertical(metadata.model_dump())
    return {
        "vertical_id": result.vertical_id,
        "confidence": result.confidence,
        "matched_signals": result.matched_signals,
        "label": result.vertical.label if result.vertical else None,
    }


@app.get("/detect/market", response_model=MarketDetectionResponse)
async def detect_market_route(locale: str = Query("en-US", max_length=20)):
    result = detect_market(locale)
    return {
        "market_id": result.market_id,
        "locale": result.locale,
        "label": result.market.label if result.market else None,
    }


# ============================================================
# ROUTES - INTENT
# ============================================================

@app.post("/intent/classify", response_model=IntentClassifyResponse)
async def classify_intent(request: IntentClassifyRequest):
    """Classify tokens (mode=token) or phrases (mode=combo) by search intent."""
    start = time.time()
    patterns = await load_intent_patterns(
        request.vertical, request.market, request.organization_id, request.app_id,
    )

    footprint = None
    if request.mode == "token":
        results = [asdict(classify_token_intent(text, patterns)) for text in request.texts]
    else:
        classifications = [classify_combo_intent(text, patterns) for text in request.texts]
        results = [asdict(c) for c in classifications]
        footprint = group_by_discovery_footprint(classifications)

    logger.info(
        f"Intent classification complete: {len(request.texts)} texts",
        extra={
            "vertical": request.vertical,
            "market": request.market,
            "pattern_count": len(patterns),
            "fallback_mode": patterns.fallback_mode,
            "duration_ms": round((time.time() - start) * 1000, 1),
        },
    )
    return {
        "mode": request.mode,
        "results": results,
        "footprint": footprint,
        "patterns_used": len(patterns),
        "fallback_mode": patterns.fallback_mode,
    }


@app.post("/intent/coverage", response_model=CoverageResponse)
async def intent_coverage(request: CoverageRequest):
    """Search intent coverage for title and subtitle tokens."""
    patterns = await load_intent_patterns(
        request.vertical, request.market, request.organization_id, request.app_id,
    )
    coverage = compute_combined_search_intent_coverage(
        request.title_tokens, request.subtitle_tokens, patterns,
    )
    return {
        "title": asdict(coverage.title),
        "subtitle": asdict(coverage.subtitle),
        "overall_score": coverage.overall_score,
        "combined_distribution": coverage.combined_distribution,
        "combined_distribution_percentage": coverage.combined_distribution_percentage,
        "dominant_intent": get_dominant_intent(coverage.combined_distribution),
        "assessment": get_coverage_assessment(coverage.overall_score),
        "fallback_mode": coverage.fallback_mode,
    }


@app.delete("/patterns/cache")
async def clear_pattern_cache():
    """Drop the cached intent patterns. The next load hits the source again."""
    clear_intent_pattern_cache()
    return {"cleared": True}


# ============================================================
# ROUTES - HOOKS
# ============================================================

@app.post("/hooks/classify", response_model=HookClassifyResponse)
async def classify_hooks(request: HookClassifyRequest):
    """
    Classify marketing copy into hook categories.

    With vertical_id or market_id, trigger phrases come from that
    scope's merged rule set; otherwise the generic defaults apply.
    """
    _check_scope(request.vertical_id, request.market_id)

    merged = None
    if request.vertical_id or request.market_id:
        merged = await get_rule_set_for_vertical_market(
            request.vertical_id or "base", request.market_id or DEFAULT_MARKET_ID,
        )

    summary = get_hook_classification_summary(request.texts, merged)
    return {
        "results": [
            {"text": text, "category": classify_hook(text, merged)}
            for text in request.texts
        ],
        **summary,
    }


# ============================================================
# ROUTES - COMBOS
# ============================================================

@app.post("/combos/analyze", response_model=ComboAnalyzeResponse)
async def analyze_combos(request: ComboAnalyzeRequest):
    """Generate keyword combinations and split them into existing vs missing."""
    analysis = analyze_all_combos(
        request.title_keywords,
        request.subtitle_keywords,
        request.title_text,
        request.subtitle_text,
        brand_name=request.brand_name,
    )
    return asdict(analysis)


# ============================================================
# HEALTH
# ============================================================

@app.get("/health", response_model=HealthResponse)
async def health():
    """Health check."""
    return {
        "status": "operational",
        "version": __version__,
        "engine_version": settings.ENGINE_VERSION,
        "remote_enabled": settings.remote_enabled,
        "pattern_cache_warm": pattern_service.cache.get() is not None,
        "ruleset_cache": ruleset_loader.rule_set_cache.stats,
    }


# --- Security + Version Headers Middleware ---
@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    """Add security and version headers to all responses."""
    response = await call_next(request)
    response.headers["X-ASOBible-Version"] = __version__
    response.headers["X-Engine-Version"] = settings.ENGINE_VERSION
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


# --- Body Size Limit Middleware ---
_MAX_BODY_BYTES = 1_048_576  # 1 MB


@app.middleware("http")
async def enforce_body_size_limit(request: Request, call_next):
    """Reject requests whose declared Content-Length exceeds 1MB."""
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > _MAX_BODY_BYTES:
        return JSONResponse(status_code=413, content={"detail": "Request body too large."})
    return await call_next(request)


# --- Request Logging Middleware ---
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every API request with method, path, status, duration."""
    path = request.url.path
    if path == "/health":
        return await call_next(request)

    start = time.time()
    response = await call_next(request)
    duration_ms = round((time.time() - start) * 1000, 1)

    logger.info(
        f"{request.method} {path} -> {response.status_code} ({duration_ms}ms)",
        extra={
            "method": request.method,
            "path": path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        },
    )
    return response
