"""
API Schemas - Request and Response Models

Pydantic models for the ASO Bible API.
"""

from __future__ import annotations

from typing import Any, Optional
from pydantic import BaseModel, Field


# ============================================================
# SHARED
# ============================================================

class AppMetadata(BaseModel):
    """App Store metadata used for detection and leak checks."""
    title: str = Field("", max_length=200)
    subtitle: str = Field("", max_length=200)
    category: str = Field("", max_length=100)
    app_id: Optional[str] = None

    model_config = {"json_schema_extra": {"examples": [
        {"title": "Lingo - Learn Spanish", "subtitle": "Speak fluently in 30 days",
         "category": "Education"},
    ]}}


class LeakWarningModel(BaseModel):
    type: str
    severity: str
    message: str
    details: dict[str, Any] = {}


class RuleSetModel(BaseModel):
    """One rule set layer. Omitted override maps are left undefined."""
    id: str = Field(..., min_length=1)
    label: str = ""
    source: str = Field("base", pattern="^(base|vertical|market|client)$")
    version: str = "1.0.0"
    kpi_overrides: Optional[dict[str, Any]] = None
    formula_overrides: Optional[dict[str, Any]] = None
    intent_overrides: Optional[dict[str, Any]] = None
    hook_overrides: Optional[dict[str, Any]] = None
    token_relevance_overrides: Optional[dict[str, int]] = None
    stopword_overrides: Optional[list[str]] = None
    recommendation_overrides: Optional[dict[str, Any]] = None
    character_limits: Optional[dict[str, int]] = None
    vertical_id: Optional[str] = None
    market_id: Optional[str] = None
    organization_id: Optional[str] = None


# ============================================================
# RULE SETS
# ============================================================

class ActiveRuleSetRequest(BaseModel):
    """POST /rulesets/active request body."""
    metadata: AppMetadata
    locale: str = Field("en-US", max_length=20)
    organization_id: Optional[str] = None


class MergeRequest(BaseModel):
    """POST /rulesets/merge request body. Layers in increasing precedence."""
    layers: list[RuleSetModel] = Field(..., min_length=1, max_length=8)
    metadata: Optional[AppMetadata] = None


class RuleSetResponse(BaseModel):
    summary: dict[str, Any]
    effective: RuleSetModel
    leak_warnings: list[LeakWarningModel]
    leak_summary: dict[str, Any]
    validation_errors: list[str]


# ============================================================
# DETECTION
# ============================================================

class VerticalDetectionResponse(BaseModel):
    vertical_id: str
    confidence: float
    matched_signals: list[str]
    label: Optional[str] = None


class MarketDetectionResponse(BaseModel):
    market_id: str
    locale: str
    label: Optional[str] = None


# ============================================================
# INTENT
# ============================================================

class PatternScope(BaseModel):
    vertical: Optional[str] = None
    market: Optional[str] = None
    organization_id: Optional[str] = None
    app_id: Optional[str] = None


class IntentClassifyRequest(PatternScope):
    """POST /intent/classify request body."""
    texts: list[str] = Field(..., min_length=1, max_length=500)
    mode: str = Field("combo", pattern="^(token|combo)$")


class IntentClassifyResponse(BaseModel):
    mode: str
    results: list[dict[str, Any]]
    footprint: Optional[dict[str, int]] = None
    patterns_used: int
    fallback_mode: bool


class CoverageRequest(PatternScope):
    """POST /intent/coverage request body."""
    title_tokens: list[str] = Field(default_factory=list, max_length=200)
    subtitle_tokens: list[str] = Field(default_factory=list, max_length=200)


class CoverageResponse(BaseModel):
    title: dict[str, Any]
    subtitle: dict[str, Any]
    overall_score: int
    combined_distribution: dict[str, int]
    combined_distribution_percentage: dict[str, int]
    dominant_intent: Optional[str] = None
    assessment: dict[str, str]
    fallback_mode: bool


# ============================================================
# HOOKS
# ============================================================

class HookClassifyRequest(BaseModel):
    """POST /hooks/classify request body."""
    texts: list[str] = Field(..., min_length=1, max_length=500)
    vertical_id: Optional[str] = None
    market_id: Optional[str] = None


class HookClassifyResponse(BaseModel):
    results: list[dict[str, Optional[str]]]
    distribution: dict[str, int]
    diversity_score: int
    dominant_category: Optional[str] = None
    total_texts: int
    classified: int
    unclassified: int


# ============================================================
# COMBOS
# ============================================================

class ComboAnalyzeRequest(BaseModel):
    """POST /combos/analyze request body."""
    title_keywords: list[str] = Field(default_factory=list, max_length=100)
    subtitle_keywords: list[str] = Field(default_factory=list, max_length=100)
    title_text: str = ""
    subtitle_text: str = ""
    brand_name: Optional[str] = None


class ComboModel(BaseModel):
    text: str
    keywords: list[str]
    length: int
    exists: bool
    source: str
    strategic_value: int
    recommendation: Optional[str] = None


class ComboAnalyzeResponse(BaseModel):
    all_possible_combos: list[ComboModel]
    existing_combos: list[ComboModel]
    missing_combos: list[ComboModel]
    recommended_to_add: list[ComboModel]
    stats: dict[str, int]


# ============================================================
# HEALTH
# ============================================================

class HealthResponse(BaseModel):
    status: str
    version: str
    engine_version: str
    remote_enabled: bool
    pattern_cache_warm: bool
    ruleset_cache: dict[str, Any]
