# footy/hard_rules.py
"""
Hard-Rule Audit Pipeline (v3.8)

Per fixture, independently:
1. Completeness gate: missing V_total / H_fav / PL_fav / T, or fewer
   than two snapshots, hard-stops the fixture (risk High, stake 0)
2. Ordered rule pass over a {risk, tag} accumulator
3. Ranking of fired rules (decisive rule, top-3) for explanation only
4. Report section; budgets are always zero (research-only)

Invariants:
- Evaluation order is fixed; ranks never change risk
- B1 skips the volume-tier meltdown logic entirely
- Cap rules can only lower risk, escalations can only raise it
"""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from footy.explain import explain_decisive_rule, resolve_style
from footy.models import (
    AnalysisResult,
    BudgetPlan,
    ExplanationStyle,
    Lang,
    MatchAnalysis,
    MatchInput,
    RiskLevel,
    StrategyConfig,
    cap_risk,
    max_risk,
    triple_value,
)
from footy.rules import CALIBRATED_LEAGUES, FiredRule, RuleId, rank_rules, rule_name
from footy.strategy import pick_max
from footy.templates import format_number, render, risk_label

_logger = logging.getLogger(__name__)


# =============================================================================
# Thresholds
# =============================================================================

MIN_SNAPSHOTS = 2
AUTO_VOID_VOLUME = 500_000
IMMINENT_HOURS = 1
RED_ZONE_LOW = 55
RED_ZONE_HIGH = 60
DEFAULT_MELTDOWN_LINE = 50
MEGA_VOLUME = 8_000_000
MEGA_MELTDOWN_LINE = 70
STANDARD_VOLUME = 3_000_000
STANDARD_MELTDOWN_LINE = 60
SYSTEMIC_RATIO = 100
MID_HIGH_RATIO = 25
CONSENSUS_VOLUME = 5_000_000
CORRIDOR_VOLUME = 2_000_000
HEALTHY_MIN_VOLUME = 1_000_000
DERATE_MAX_VOLUME = 1_500_000
HOLLOW_PNL = 500_000
MAX_EVIDENCE_LINES = 6

_HOURS_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)h$")
_MINUTES_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)m$")


# =============================================================================
# Helpers
# =============================================================================


def parse_time_to_hours(time_point: Optional[str]) -> Optional[float]:
    """
    Convert a raw time point to hours before kickoff.

    ``0.8h`` -> 0.8, ``45m`` -> 0.75, a bare number is taken as hours.
    Anything else is None.
    """
    if not time_point:
        return None
    value = time_point.strip().lower()
    m = _HOURS_PATTERN.match(value)
    if m:
        return float(m.group(1))
    m = _MINUTES_PATTERN.match(value)
    if m:
        return float(m.group(1)) / 60
    try:
        hours = float(value)
    except ValueError:
        return None
    return hours if math.isfinite(hours) else None


def detect_hard_rule_issues(match: MatchInput) -> List[str]:
    """
    Names of the critical fields that block the audit for ``match``.

    An empty list means the fixture passes the completeness gate.
    """
    rec = pick_max(match.share)
    issues: List[str] = []
    if match.total_volume is None:
        issues.append("V_total")
    if triple_value(match.share, rec) is None:
        issues.append("H_fav")
    if triple_value(match.pnl, rec) is None:
        issues.append("PL_fav")
    if not match.time_point:
        issues.append("T")
    if (match.snapshot_count or 0) < MIN_SNAPSHOTS:
        issues.append("T1/T2")
    return issues


def stress_ratio(pl_fav: float, v_total: float) -> float:
    """|pl_fav| / v_total as a percentage. Zero volume yields inf (nan for zero P/L)."""
    if v_total == 0:
        return math.inf if pl_fav else math.nan
    return abs(pl_fav) / v_total * 100


# =============================================================================
# Rule Evaluation
# =============================================================================


@dataclass
class RuleEvaluation:
    """Accumulator for the ordered rule pass on one fixture."""
    ratio: float
    risk: RiskLevel = RiskLevel.LOW
    tag_key: str = "tag.low_pressure"
    meltdown_line: float = DEFAULT_MELTDOWN_LINE
    fired: List[FiredRule] = field(default_factory=list)
    evidence: List[str] = field(default_factory=list)

    def fire(self, rule_id: RuleId, lang: Lang, league: Optional[str] = None) -> None:
        self.fired.append(FiredRule(rule_id, rule_name(rule_id, lang, league)))


def evaluate_rules(
    match: MatchInput,
    h_fav: float,
    pl_fav: float,
    v_total: float,
    lang: Lang,
) -> RuleEvaluation:
    """
    Run the fixed-order rule pass for a fixture that passed the gate.

    Order matters: later steps escalate or cap what earlier steps set.
    """
    snapshots = match.snapshot_count or 0
    hours = parse_time_to_hours(match.time_point)
    ev = RuleEvaluation(ratio=stress_ratio(pl_fav, v_total))

    # C0: auto-void on thin liquidity
    if v_total < AUTO_VOID_VOLUME:
        ev.fire(RuleId.C0, lang)
        ev.tag_key = "tag.sample_void"
        ev.risk = max_risk(ev.risk, RiskLevel.MEDIUM)
        ev.evidence.append(render(lang, "evidence.void", value=format_number(v_total)))

    # C1: imminent kickoff, evidence only
    if hours is not None and hours <= IMMINENT_HOURS:
        ev.fire(RuleId.C1, lang)
        ev.evidence.append(render(lang, "evidence.imminent", hours=f"{hours:.2f}"))

    # B1 takes precedence over the volume tiers
    if RED_ZONE_LOW <= ev.ratio < RED_ZONE_HIGH:
        ev.fire(RuleId.B1, lang)
        ev.tag_key = "tag.red_zone"
        ev.risk = RiskLevel.HIGH
    else:
        if v_total >= MEGA_VOLUME:
            ev.meltdown_line = MEGA_MELTDOWN_LINE
            ev.fire(RuleId.C2, lang)
        elif STANDARD_VOLUME <= v_total < MEGA_VOLUME:
            ev.meltdown_line = STANDARD_MELTDOWN_LINE
            ev.fire(RuleId.C3, lang)

        if ev.ratio > SYSTEMIC_RATIO:
            ev.tag_key = "tag.systemic"
            ev.risk = RiskLevel.HIGH
        elif ev.ratio > ev.meltdown_line:
            ev.tag_key = "tag.stress_meltdown"
            ev.risk = RiskLevel.HIGH
        elif ev.ratio >= MID_HIGH_RATIO:
            ev.tag_key = "tag.mid_high"
            ev.risk = max_risk(ev.risk, RiskLevel.MEDIUM)

    # C4: explanatory only
    if v_total > CONSENSUS_VOLUME:
        ev.fire(RuleId.C4, lang)

    # C5: weak evidence
    if snapshots >= 3 and h_fav >= 80:
        ev.fire(RuleId.C5, lang)
        ev.evidence.append(render(lang, "evidence.parabola"))

    # C7: regression reversal
    if (
        match.h_early is not None
        and match.h_last is not None
        and abs(match.h_last - match.h_early) > 10
        and match.h_last < 88
    ):
        ev.fire(RuleId.C7, lang)
        ev.risk = cap_risk(ev.risk, RiskLevel.MEDIUM)
        ev.evidence.append(
            render(
                lang,
                "evidence.regression",
                last=format_number(match.h_last),
                early=format_number(match.h_early),
            )
        )

    # C8: high-risk corridor
    if v_total > CORRIDOR_VOLUME and h_fav > 80 and pl_fav < 0:
        ev.fire(RuleId.C8, lang)
        ev.risk = RiskLevel.HIGH

    # C9: hollow heat
    if h_fav > 70 and (abs(pl_fav) < HOLLOW_PNL or abs(pl_fav) < 0.05 * v_total):
        ev.fire(RuleId.C9, lang)
        ev.risk = max_risk(ev.risk, RiskLevel.MEDIUM)

    # C10: extreme hollow heat
    pressure = match.loss_pressure if match.loss_pressure is not None else ev.ratio
    if h_fav > 90 and pressure < 10:
        ev.fire(RuleId.C10, lang)
        ev.risk = RiskLevel.HIGH

    # C11: structurally healthy
    if 60 <= h_fav <= 80 and abs(pl_fav) < 0.05 * v_total and v_total >= HEALTHY_MIN_VOLUME:
        ev.fire(RuleId.C11, lang)
        ev.risk = cap_risk(ev.risk, RiskLevel.MEDIUM)

    # C6: mid-low volume derate
    if AUTO_VOID_VOLUME <= v_total < DERATE_MAX_VOLUME:
        ev.fire(RuleId.C6, lang)
        ev.risk = cap_risk(ev.risk, RiskLevel.MEDIUM)

    # D: league calibration, explanatory only
    if match.league:
        league = match.league.upper()
        if league in CALIBRATED_LEAGUES:
            ev.fire(RuleId.D, lang, league)

    ev.evidence.insert(
        0,
        render(
            lang,
            "evidence.ratio",
            ratio=f"{ev.ratio:.2f}",
            line=format_number(ev.meltdown_line),
        ),
    )
    ev.evidence.append(render(lang, "evidence.dual"))
    return ev


# =============================================================================
# Report Sections
# =============================================================================


def _snapshot_section(
    match: MatchInput,
    h_fav: Optional[float],
    pl_fav: Optional[float],
    lang: Lang,
) -> List[str]:
    missing = render(lang, "v38.missing")
    return [
        render(lang, "v38.section_snapshot"),
        render(lang, "v38.source"),
        render(lang, "v38.league", league=match.league or render(lang, "v38.league_missing")),
        render(lang, "v38.v_total", value=format_number(match.total_volume, missing)),
        render(lang, "v38.h_fav", value=format_number(h_fav, missing)),
        render(lang, "v38.pl_fav", value=format_number(pl_fav, missing)),
        render(lang, "v38.time", value=match.time_point or missing),
        render(lang, "v38.snapshots", count=match.snapshot_count or 0),
    ]


def _hard_stop_section(issues: Sequence[str], lang: Lang) -> List[str]:
    lines = [
        render(lang, "v38.section_audit"),
        render(lang, "v38.stop_table_header"),
        render(lang, "v38.table_rule"),
        render(lang, "v38.stop_status"),
        render(lang, "v38.section_evidence"),
        render(lang, "v38.stop_evidence"),
        render(lang, "v38.section_notes"),
        render(lang, "v38.stop_note"),
        render(lang, "v38.section_checklist"),
        render(lang, "v38.checklist_snapshots"),
        render(lang, "v38.checklist_time"),
    ]
    if issues:
        lines.append(
            render(lang, "v38.checklist_issues", issues=render(lang, "sep.comma").join(issues))
        )
    lines.append("")
    return lines


def _audit_section(
    ev: RuleEvaluation,
    explanation: str,
    evidence: Sequence[str],
    lang: Lang,
) -> List[str]:
    ranked = rank_rules(ev.fired)
    sep = render(lang, "sep")
    none = render(lang, "none")
    decisive = (
        render(lang, "v38.decisive", name=ranked[0].name, rank=ranked[0].rank)
        if ranked
        else none
    )
    top3 = sep.join(f"{r.name}(#{r.rank})" for r in ranked[:3]) or none
    triggered = sep.join(r.name for r in ranked) or none

    lines = [
        render(lang, "v38.section_audit"),
        render(lang, "v38.table_header"),
        render(lang, "v38.table_rule"),
        render(lang, "v38.row_ratio", ratio=f"{ev.ratio:.2f}"),
        render(lang, "v38.row_tag", tag=render(lang, ev.tag_key)),
        render(lang, "v38.row_decisive", rule=decisive),
        render(lang, "v38.row_explanation", text=explanation),
        render(lang, "v38.row_top3", rules=top3),
        render(lang, "v38.row_triggered", rules=triggered),
        render(lang, "v38.section_evidence"),
    ]
    lines.extend(f"- {e}" for e in evidence[:MAX_EVIDENCE_LINES])
    lines.extend(
        [
            render(lang, "v38.section_notes"),
            render(lang, "v38.risk_note", risk=risk_label(ev.risk, lang)),
            render(lang, "v38.section_review"),
            render(lang, "v38.review_hint"),
            "",
        ]
    )
    return lines


# =============================================================================
# Pipeline
# =============================================================================


def audit_fixture(
    match: MatchInput, config: StrategyConfig
) -> Tuple[MatchAnalysis, List[str]]:
    """
    Audit one fixture.

    Returns:
        (analysis, report lines without the numbered title)
    """
    lang = config.lang
    rec = pick_max(match.share)
    h_fav = triple_value(match.share, rec)
    pl_fav = triple_value(match.pnl, rec)
    lines = _snapshot_section(match, h_fav, pl_fav, lang)

    issues = detect_hard_rule_issues(match)
    if issues:
        _logger.debug(f"[AUDIT] hard stop for {match.id}: missing {', '.join(issues)}")
        lines.extend(_hard_stop_section(issues, lang))
        analysis = MatchAnalysis(
            match=match,
            recommendation=rec,
            risk=RiskLevel.HIGH,
            stake_u=0,
            reasons=(render(lang, "v38.stop_reason"),),
            trigger_cold_draw=False,
        )
        return analysis, lines

    ev = evaluate_rules(match, h_fav, pl_fav, match.total_volume, lang)
    ranked = rank_rules(ev.fired)
    style = resolve_style(config)
    explanation = explain_decisive_rule(
        ranked[0] if ranked else None,
        ev.ratio,
        ranked[:3],
        style,
        ev.risk,
        config.v38_tag_overrides,
        lang,
    )
    evidence = list(ev.evidence)
    if style == ExplanationStyle.SHORT and evidence:
        evidence[0] = f"{evidence[0]} | {explanation}"
    lines.extend(_audit_section(ev, explanation, evidence, lang))

    analysis = MatchAnalysis(
        match=match,
        recommendation=rec,
        risk=ev.risk,
        stake_u=0,
        reasons=(
            f"ratio={ev.ratio:.2f}%",
            render(lang, ev.tag_key),
            *(r.name for r in ev.fired[:2]),
        ),
        trigger_cold_draw=False,
    )
    return analysis, lines


def analyze_hard_rules(
    matches: Sequence[MatchInput], config: StrategyConfig
) -> AnalysisResult:
    """Run the hard-rule audit over every fixture. Budgets are all zero."""
    lang = config.lang
    lines: List[str] = [render(lang, "v38.header"), ""]
    analyses: List[MatchAnalysis] = []

    for idx, match in enumerate(matches, start=1):
        analysis, section = audit_fixture(match, config)
        lines.append(f"{idx}. {match.title}")
        lines.extend(section)
        analyses.append(analysis)

    return AnalysisResult(
        parsed_count=len(matches),
        analyses=tuple(analyses),
        budget_plan=BudgetPlan(
            total=0,
            parlay=0,
            single=0,
            cold_hedge=0,
            note=render(lang, "v38.budget_note"),
        ),
        output_text="\n".join(lines),
    )
