# footy/models.py
"""
Footy Analyzer Core Types

Canonical value objects shared by the market-text parser, the rule engine
and the history/compare/export helpers.

Invariants:
- Every record is immutable once created
- An absent optional field means "not supplied", never zero
- The engine never mutates inputs; every analysis produces fresh records
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple


# =============================================================================
# Enums
# =============================================================================


class Lang(str, Enum):
    """Output language for rendered reports."""
    ZH = "zh"
    EN = "en"


class ExplanationStyle(str, Enum):
    """Explanation style for the hard-rule audit."""
    AUTO = "auto"
    SHORT = "short"
    LONG = "long"


class Outcome(str, Enum):
    """1X2 outcome direction. Values double as Triple keys."""
    HOME = "home"
    DRAW = "draw"
    AWAY = "away"


class HandicapOutcome(str, Enum):
    """Handicap outcome direction."""
    HANDICAP_HOME = "handicap_home"
    HANDICAP_DRAW = "handicap_draw"
    HANDICAP_AWAY = "handicap_away"

    def to_outcome(self) -> Outcome:
        """Map a handicap pick to the main outcome it corresponds to."""
        return _HANDICAP_TO_OUTCOME[self]


_HANDICAP_TO_OUTCOME = {
    HandicapOutcome.HANDICAP_HOME: Outcome.HOME,
    HandicapOutcome.HANDICAP_DRAW: Outcome.DRAW,
    HandicapOutcome.HANDICAP_AWAY: Outcome.AWAY,
}


class RiskLevel(str, Enum):
    """Ordered risk tiers: LOW < MEDIUM < HIGH."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def score(self) -> int:
        """Severity score used for ordering (1..3)."""
        return _RISK_SCORES[self]


_RISK_SCORES = {
    RiskLevel.LOW: 1,
    RiskLevel.MEDIUM: 2,
    RiskLevel.HIGH: 3,
}


def max_risk(a: RiskLevel, b: RiskLevel) -> RiskLevel:
    """Return the more severe of two risk levels."""
    return a if a.score >= b.score else b


def cap_risk(risk: RiskLevel, cap: RiskLevel) -> RiskLevel:
    """Lower ``risk`` to at most ``cap``. Never raises a level."""
    return risk if risk.score <= cap.score else cap


# =============================================================================
# Value Types
# =============================================================================


@dataclass(frozen=True, slots=True)
class Triple:
    """
    Three optional numbers keyed by outcome direction.

    Used for odds, volume, share, profit/loss, heat and handicap odds.
    """
    home: Optional[float] = None
    draw: Optional[float] = None
    away: Optional[float] = None

    def get(self, outcome: Outcome) -> Optional[float]:
        return getattr(self, outcome.value)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Triple":
        return cls(
            home=data.get("home"),
            draw=data.get("draw"),
            away=data.get("away"),
        )

    def to_dict(self) -> Dict[str, Optional[float]]:
        return {"home": self.home, "draw": self.draw, "away": self.away}


def triple_value(triple: Optional[Triple], outcome: Outcome) -> Optional[float]:
    """Value of ``triple`` at ``outcome``, or None when the triple is absent."""
    if triple is None:
        return None
    return triple.get(outcome)


def _triple_or_none(data: Optional[Mapping[str, Any]]) -> Optional[Triple]:
    return Triple.from_dict(data) if data is not None else None


@dataclass(frozen=True, slots=True)
class MatchInput:
    """
    One fixture parsed from one non-empty line of market text.

    Required fields identify the fixture; every other field is optional
    and its absence gates which rules or modes can fire.
    """
    id: str
    raw_line: str
    home_team: str
    away_team: str
    market_odds: Optional[Triple] = None
    volume: Optional[Triple] = None
    share: Optional[Triple] = None
    total_volume: Optional[float] = None
    pnl: Optional[Triple] = None
    heat: Optional[Triple] = None
    # Handicap market
    handicap_line: Optional[float] = None
    handicap_odds: Optional[Triple] = None
    # Hard-rule audit fields
    time_point: Optional[str] = None
    snapshot_count: Optional[int] = None
    league: Optional[str] = None
    h_early: Optional[float] = None
    h_last: Optional[float] = None
    loss_pressure: Optional[float] = None

    @property
    def title(self) -> str:
        return f"{self.home_team} vs {self.away_team}"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MatchInput":
        return cls(
            id=data["id"],
            raw_line=data.get("raw_line", ""),
            home_team=data["home_team"],
            away_team=data["away_team"],
            market_odds=_triple_or_none(data.get("market_odds")),
            volume=_triple_or_none(data.get("volume")),
            share=_triple_or_none(data.get("share")),
            total_volume=data.get("total_volume"),
            pnl=_triple_or_none(data.get("pnl")),
            heat=_triple_or_none(data.get("heat")),
            handicap_line=data.get("handicap_line"),
            handicap_odds=_triple_or_none(data.get("handicap_odds")),
            time_point=data.get("time_point"),
            snapshot_count=data.get("snapshot_count"),
            league=data.get("league"),
            h_early=data.get("h_early"),
            h_last=data.get("h_last"),
            loss_pressure=data.get("loss_pressure"),
        )


# =============================================================================
# Strategy Configuration
# =============================================================================

# Snapshot keys (camelCase) used when a config is stored alongside history.
_CONFIG_KEYS = {
    "crowd_threshold": "crowdThreshold",
    "heat_threshold": "heatThreshold",
    "total_budget": "totalBudget",
    "parlay_budget": "parlayBudget",
    "single_budget": "singleBudget",
    "cold_budget": "coldBudget",
    "handicap_enabled": "handicapEnabled",
    "handicap_crowd_threshold": "handicapCrowdThreshold",
    "handicap_heat_threshold": "handicapHeatThreshold",
    "handicap_extra_budget": "handicapExtraBudget",
    "policy_v38_enabled": "policyV38Enabled",
    "v38_explanation_style": "v38ExplanationStyle",
    "v38_is_mobile": "v38IsMobile",
    "v38_tag_overrides": "v38TagOverrides",
    "lang": "lang",
}


@dataclass(frozen=True)
class StrategyConfig:
    """
    Per-call configuration for the rule engine.

    Values are used as given: the engine does not range-check thresholds
    or budgets.
    """
    crowd_threshold: float = 80
    heat_threshold: float = 50
    total_budget: float = 100
    parlay_budget: float = 70
    single_budget: float = 20
    cold_budget: float = 10

    handicap_enabled: bool = True
    handicap_crowd_threshold: float = 80
    handicap_heat_threshold: float = 50
    handicap_extra_budget: float = 50

    # Hard-rule audit mode
    policy_v38_enabled: bool = False
    v38_explanation_style: ExplanationStyle = ExplanationStyle.AUTO
    v38_is_mobile: bool = False
    v38_tag_overrides: Mapping[str, str] = field(default_factory=dict)
    lang: Lang = Lang.ZH

    def __post_init__(self) -> None:
        # Normalize enum fields given as plain strings
        if not isinstance(self.lang, Lang):
            object.__setattr__(self, "lang", Lang(self.lang))
        if not isinstance(self.v38_explanation_style, ExplanationStyle):
            object.__setattr__(
                self, "v38_explanation_style", ExplanationStyle(self.v38_explanation_style)
            )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with camelCase keys (history snapshot format)."""
        result: Dict[str, Any] = {}
        for attr, key in _CONFIG_KEYS.items():
            value = getattr(self, attr)
            if isinstance(value, Enum):
                value = value.value
            elif attr == "v38_tag_overrides":
                value = dict(value)
            result[key] = value
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StrategyConfig":
        """
        Build a config from a snapshot dict.

        Accepts camelCase or snake_case keys; missing keys keep defaults.
        """
        kwargs: Dict[str, Any] = {}
        for attr, key in _CONFIG_KEYS.items():
            if key in data:
                kwargs[attr] = data[key]
            elif attr in data:
                kwargs[attr] = data[attr]
        if "v38_tag_overrides" in kwargs:
            kwargs["v38_tag_overrides"] = dict(kwargs["v38_tag_overrides"] or {})
        return cls(**kwargs)


DEFAULT_STRATEGY_CONFIG = StrategyConfig()


# =============================================================================
# Analysis Output
# =============================================================================


@dataclass(frozen=True, slots=True)
class MatchAnalysis:
    """Verdict for one fixture."""
    match: MatchInput
    recommendation: Outcome
    risk: RiskLevel
    stake_u: float
    reasons: Tuple[str, ...]
    trigger_cold_draw: bool
    handicap_recommendation: Optional[HandicapOutcome] = None
    handicap_risk: Optional[RiskLevel] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "match": self.match.to_dict(),
            "recommendation": self.recommendation.value,
            "handicap_recommendation": (
                self.handicap_recommendation.value if self.handicap_recommendation else None
            ),
            "handicap_risk": self.handicap_risk.value if self.handicap_risk else None,
            "risk": self.risk.value,
            "stake_u": self.stake_u,
            "reasons": list(self.reasons),
            "trigger_cold_draw": self.trigger_cold_draw,
        }


@dataclass(frozen=True, slots=True)
class BudgetPlan:
    """Budget allocation for one analysis call."""
    total: float
    parlay: float
    single: float
    cold_hedge: float
    note: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "parlay": self.parlay,
            "single": self.single,
            "cold_hedge": self.cold_hedge,
            "note": self.note,
        }


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """The engine's sole externally visible output."""
    parsed_count: int
    analyses: Tuple[MatchAnalysis, ...]
    budget_plan: BudgetPlan
    output_text: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parsed_count": self.parsed_count,
            "analyses": [a.to_dict() for a in self.analyses],
            "budget_plan": self.budget_plan.to_dict(),
            "output_text": self.output_text,
        }


# =============================================================================
# History Record
# =============================================================================


@dataclass(frozen=True)
class HistoryItem:
    """
    A stored analysis run.

    Persisting these is a collaborator concern; the core only reads them
    to re-derive output (compare/export).
    """
    id: str
    created_at: str  # ISO8601 string
    input_text: str
    output_text: str
    parsed_count: int
    config_snapshot: StrategyConfig

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "id": self.id,
            "createdAt": self.created_at,
            "inputText": self.input_text,
            "outputText": self.output_text,
            "parsedCount": self.parsed_count,
            "configSnapshot": self.config_snapshot.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HistoryItem":
        return cls(
            id=data["id"],
            created_at=data["createdAt"],
            input_text=data["inputText"],
            output_text=data.get("outputText", ""),
            parsed_count=data.get("parsedCount", 0),
            config_snapshot=StrategyConfig.from_dict(data.get("configSnapshot") or {}),
        )
