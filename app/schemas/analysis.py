# app/schemas/analysis.py
"""
Pydantic schemas for the analysis API.

Request bodies carry raw market text plus optional strategy overrides.
Uses snake_case to match existing API conventions; history records keep
their camelCase snapshot format.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# Request Schemas
# =============================================================================


class StrategyConfigSchema(BaseModel):
    """
    Per-request strategy overrides.

    Omitted fields keep the service defaults. Values are not range-checked:
    the engine uses thresholds and budgets as given.
    """
    crowd_threshold: Optional[float] = None
    heat_threshold: Optional[float] = None
    total_budget: Optional[float] = None
    parlay_budget: Optional[float] = None
    single_budget: Optional[float] = None
    cold_budget: Optional[float] = None

    handicap_enabled: Optional[bool] = None
    handicap_crowd_threshold: Optional[float] = None
    handicap_heat_threshold: Optional[float] = None
    handicap_extra_budget: Optional[float] = None

    policy_v38_enabled: Optional[bool] = None
    v38_is_mobile: Optional[bool] = None
    v38_tag_overrides: Optional[Dict[str, str]] = None

    @field_validator("v38_tag_overrides")
    @classmethod
    def _normalize_rule_ids(cls, value: Optional[Dict[str, str]]) -> Optional[Dict[str, str]]:
        """Rule ids are matched upper-case (e.g. "c10" -> "C10")."""
        if value is None:
            return None
        return {key.strip().upper(): text for key, text in value.items()}

    def overrides(self) -> Dict[str, Any]:
        """Fields the client actually set."""
        return self.model_dump(exclude_none=True)


class AnalyzeRequestSchema(BaseModel):
    """
    Request schema for POST /analyze.

    {
      "text": "马德里竞技 vs 巴塞罗那 占比 ...",
      "lang": "zh",
      "explanation_style": "auto",
      "config": { ... optional overrides ... },
      "save": true
    }
    """
    text: str
    lang: Optional[str] = None
    explanation_style: Optional[str] = None
    config: Optional[StrategyConfigSchema] = None
    save: bool = True


class ParseRequestSchema(BaseModel):
    """Request schema for POST /parse."""
    text: str


# =============================================================================
# Response Schemas
# =============================================================================


class AnalyzeResponseSchema(BaseModel):
    """Response schema for POST /analyze."""
    request_id: str
    mode: str  # heuristic | hard_rule
    parsed_count: int
    analyses: List[Dict[str, Any]]
    budget_plan: Dict[str, Any]
    output_text: str
    config: Dict[str, Any]
    hard_rule_issues: Dict[str, List[str]] = Field(default_factory=dict)
    history_id: Optional[str] = None


class ParseResponseSchema(BaseModel):
    """Response schema for POST /parse."""
    request_id: str
    parsed_count: int
    matches: List[Dict[str, Any]]

