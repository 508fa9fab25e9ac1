"""
Rule Set Data Structures

A RuleSet is one layer of overrides (base, vertical, market or client).
A MergedRuleSet is the effective configuration produced by merging a
chain of layers, plus traceability and diagnostics.

Override fields left as None are "not defined" by the layer and leave
the accumulated value untouched during a merge.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


RULESET_SOURCES = ("base", "vertical", "market", "client")

LEAK_TYPES = ("vertical_mismatch", "pattern_leak", "recommendation_leak", "kpi_anomaly")
LEAK_SEVERITIES = ("low", "medium", "high")


@dataclass
class RuleSet:
    """One layer of overrides. Treated as immutable once constructed."""
    id: str
    label: str = ""
    source: str = "base"                  # one of RULESET_SOURCES
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


@dataclass
class InheritanceChain:
    """Back-references to the layers that produced a merge. Audit only."""
    base: Optional[RuleSet] = None
    vertical: Optional[RuleSet] = None
    market: Optional[RuleSet] = None
    client: Optional[RuleSet] = None

    def layer_ids(self) -> dict[str, Optional[str]]:
        return {
            slot: (layer.id if layer is not None else None)
            for slot, layer in (
                ("base", self.base),
                ("vertical", self.vertical),
                ("market", self.market),
                ("client", self.client),
            )
        }


@dataclass
class LeakWarning:
    """A non-fatal diagnostic attached to a merged rule set."""
    type: str               # one of LEAK_TYPES
    severity: str           # one of LEAK_SEVERITIES
    message: str
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class MergedRuleSet(RuleSet):
    """The effective configuration for one audit request."""
    inheritance_chain: Optional[InheritanceChain] = field(default_factory=InheritanceChain)
    merged_at: Optional[str] = None
    leak_warnings: list[LeakWarning] = field(default_factory=list)
    vertical_name: Optional[str] = None
    market_name: Optional[str] = None
