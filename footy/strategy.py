# footy/strategy.py
"""
Heuristic Strategy Pipeline

Per fixture: pick the top-share outcome, classify risk from three
boolean signals (crowded, very hot, negative book P/L), size the stake,
optionally run the handicap sub-analysis, and flag the cold hedge.
Then allocate budgets across fixtures and render the V1 report.

Constraints:
- Ties resolve left to right (home, draw, away)
- Sorting by risk is stable on input order
- Handicap budget is 30 to the best, 20 to the second, 0 to the rest
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from footy.models import (
    AnalysisResult,
    BudgetPlan,
    HandicapOutcome,
    MatchAnalysis,
    MatchInput,
    Outcome,
    RiskLevel,
    StrategyConfig,
    Triple,
    triple_value,
)
from footy.templates import (
    PLACEHOLDER,
    format_number,
    handicap_label,
    outcome_label,
    render,
    risk_label,
)


HANDICAP_BUDGET_SLOTS = (30, 20)


# =============================================================================
# Signals
# =============================================================================


@dataclass(frozen=True, slots=True)
class RiskSignals:
    risk: RiskLevel
    crowded: bool
    very_hot: bool


def pick_max(triple: Optional[Triple]) -> Outcome:
    """Outcome with the largest value; missing values count as 0."""
    h = triple_value(triple, Outcome.HOME) or 0
    d = triple_value(triple, Outcome.DRAW) or 0
    a = triple_value(triple, Outcome.AWAY) or 0
    if h >= d and h >= a:
        return Outcome.HOME
    if d >= h and d >= a:
        return Outcome.DRAW
    return Outcome.AWAY


def pick_handicap_max(triple: Optional[Triple]) -> Optional[HandicapOutcome]:
    """Handicap outcome with the largest odds; None without odds."""
    if triple is None:
        return None
    h = triple.home if triple.home is not None else float("-inf")
    d = triple.draw if triple.draw is not None else float("-inf")
    a = triple.away if triple.away is not None else float("-inf")
    if h >= d and h >= a:
        return HandicapOutcome.HANDICAP_HOME
    if d >= h and d >= a:
        return HandicapOutcome.HANDICAP_DRAW
    return HandicapOutcome.HANDICAP_AWAY


def compute_risk(
    share: float,
    heat: float,
    negative_pnl: bool,
    crowd_threshold: float,
    heat_threshold: float,
) -> RiskSignals:
    """
    Classify risk from the three signals at one outcome.

    ``heat`` must already be an absolute value.
    """
    crowded = share >= crowd_threshold
    very_hot = heat >= heat_threshold

    if (crowded and (very_hot or negative_pnl)) or (very_hot and negative_pnl):
        risk = RiskLevel.HIGH
    elif crowded or very_hot or negative_pnl:
        risk = RiskLevel.MEDIUM
    else:
        risk = RiskLevel.LOW
    return RiskSignals(risk=risk, crowded=crowded, very_hot=very_hot)


def stake_by_risk(risk: RiskLevel, crowded: bool) -> float:
    if risk == RiskLevel.LOW:
        return 1
    if risk == RiskLevel.MEDIUM:
        return 0.75 if crowded else 0.5
    return 0.25


# =============================================================================
# Per-Fixture Analysis
# =============================================================================


def analyze_fixture(match: MatchInput, config: StrategyConfig) -> MatchAnalysis:
    """Run the heuristic classifier (and handicap sub-analysis) on one fixture."""
    rec = pick_max(match.share)
    rec_share = triple_value(match.share, rec) or 0
    rec_heat = abs(triple_value(match.heat, rec) or 0)
    rec_pnl = triple_value(match.pnl, rec)
    negative_pnl = rec_pnl is not None and rec_pnl < 0

    main = compute_risk(
        rec_share, rec_heat, negative_pnl, config.crowd_threshold, config.heat_threshold
    )

    handicap_rec: Optional[HandicapOutcome] = None
    handicap_risk: Optional[RiskLevel] = None
    has_handicap_data = match.handicap_line is not None or match.handicap_odds is not None
    if config.handicap_enabled and has_handicap_data:
        pick = pick_handicap_max(match.handicap_odds)
        if pick is not None:
            mapped = pick.to_outcome()
            h_share = triple_value(match.share, mapped)
            h_heat = triple_value(match.heat, mapped)
            h_pnl = triple_value(match.pnl, mapped)
            signals = compute_risk(
                h_share if h_share is not None else rec_share,
                abs(h_heat if h_heat is not None else rec_heat),
                h_pnl is not None and h_pnl < 0,
                config.handicap_crowd_threshold,
                config.handicap_heat_threshold,
            )
            # High handicap risk is still reported, with a warning marker
            handicap_rec = pick
            handicap_risk = signals.risk

    lang = config.lang
    reasons = (
        render(
            lang,
            "v1.reason_share",
            pick=outcome_label(rec, lang),
            share=format_number(rec_share) if rec_share else PLACEHOLDER,
        ),
        render(lang, "v1.reason_heat", heat=format_number(rec_heat) if rec_heat else "0"),
        render(lang, "v1.reason_pnl", pnl=format_number(rec_pnl)),
    )

    return MatchAnalysis(
        match=match,
        recommendation=rec,
        risk=main.risk,
        stake_u=stake_by_risk(main.risk, main.crowded),
        reasons=reasons,
        trigger_cold_draw=(main.crowded or main.very_hot) and negative_pnl,
        handicap_recommendation=handicap_rec,
        handicap_risk=handicap_risk,
    )


# =============================================================================
# Budget Allocation
# =============================================================================


def sort_by_risk(analyses: Sequence[MatchAnalysis]) -> List[MatchAnalysis]:
    """Ascending by risk; stable on input order."""
    return sorted(analyses, key=lambda a: a.risk.score)


def plan_budget(analyses: Sequence[MatchAnalysis], config: StrategyConfig) -> BudgetPlan:
    cold_triggered = any(a.trigger_cold_draw for a in analyses)
    cold_amount = format_number(config.cold_budget)
    if cold_triggered:
        note = render(config.lang, "v1.note_cold", amount=cold_amount)
    else:
        note = render(config.lang, "v1.note_reserved", amount=cold_amount)

    return BudgetPlan(
        total=config.total_budget,
        parlay=config.parlay_budget if len(analyses) >= 2 else 0,
        single=config.single_budget if analyses else 0,
        cold_hedge=config.cold_budget if cold_triggered else 0,
        note=note,
    )


def allocate_handicap_budget(
    analyses: Sequence[MatchAnalysis], enabled: bool = True
) -> List[float]:
    """
    Handicap budget per fixture, aligned with ``analyses``.

    Fixtures with a handicap pick are ranked by handicap risk (absent
    risk ranks as High, ties keep input order); the first two get the
    fixed slots, everything else gets 0.
    """
    budgets: List[float] = [0] * len(analyses)
    if not enabled:
        return budgets

    candidates = [i for i, a in enumerate(analyses) if a.handicap_recommendation is not None]
    candidates.sort(key=lambda i: (analyses[i].handicap_risk or RiskLevel.HIGH).score)
    for slot, idx in zip(HANDICAP_BUDGET_SLOTS, candidates):
        budgets[idx] = slot
    return budgets


# =============================================================================
# Report Rendering
# =============================================================================


def render_heuristic_report(
    analyses: Sequence[MatchAnalysis],
    budget: BudgetPlan,
    config: StrategyConfig,
) -> str:
    lang = config.lang
    sep = render(lang, "sep")
    cold_amount = format_number(config.cold_budget)

    lines: List[str] = [
        render(lang, "v1.header"),
        render(lang, "v1.parsed", count=len(analyses)),
        "",
        render(lang, "v1.section_1x2"),
    ]
    for idx, a in enumerate(analyses, start=1):
        lines.append(f"{idx}. {a.match.title}")
        lines.append(render(lang, "v1.pick", pick=outcome_label(a.recommendation, lang)))
        lines.append(
            render(
                lang,
                "v1.risk",
                risk=risk_label(a.risk, lang),
                stake=format_number(a.stake_u),
            )
        )
        lines.append(render(lang, "v1.reasons", reasons=sep.join(a.reasons)))
        if a.trigger_cold_draw:
            lines.append(render(lang, "v1.cold", amount=cold_amount))
        lines.append("")

    lines.append(render(lang, "v1.section_handicap"))
    rows = [
        (a, amount)
        for a, amount in zip(analyses, allocate_handicap_budget(analyses, config.handicap_enabled))
        if a.handicap_recommendation is not None
    ]
    if not config.handicap_enabled:
        lines.append(render(lang, "v1.handicap_disabled"))
    elif not rows:
        lines.append(render(lang, "v1.handicap_none"))
    else:
        for idx, (a, amount) in enumerate(rows, start=1):
            risk = a.handicap_risk or RiskLevel.HIGH
            warn = render(lang, "v1.handicap_warn") if risk == RiskLevel.HIGH else ""
            lines.append(f"{idx}. {a.match.title}")
            lines.append(render(lang, "v1.handicap_line", line=format_number(a.match.handicap_line)))
            lines.append(
                render(lang, "v1.handicap_pick", pick=handicap_label(a.handicap_recommendation, lang))
            )
            lines.append(render(lang, "v1.handicap_risk", risk=risk_label(risk, lang), warn=warn))
            lines.append(render(lang, "v1.handicap_budget", amount=format_number(amount)))
            lines.append("")

    ranked = sort_by_risk(analyses)
    lines.append(
        render(
            lang,
            "v1.budget_header",
            total=format_number(config.total_budget),
            extra=format_number(config.handicap_extra_budget),
        )
    )
    if len(ranked) >= 2:
        lines.append(
            render(
                lang,
                "v1.parlay",
                amount=format_number(config.parlay_budget),
                first=ranked[0].match.title,
                second=ranked[1].match.title,
            )
        )
    else:
        lines.append(render(lang, "v1.parlay_none"))
    if ranked:
        lines.append(
            render(
                lang,
                "v1.single",
                amount=format_number(config.single_budget),
                title=ranked[0].match.title,
            )
        )
    else:
        lines.append(render(lang, "v1.single_none"))
    lines.append(render(lang, "v1.cold_budget", amount=format_number(budget.cold_hedge)))
    lines.append(
        render(lang, "v1.handicap_extra", amount=format_number(config.handicap_extra_budget))
    )
    lines.append(render(lang, "v1.notes", note=budget.note))
    return "\n".join(lines)


def analyze_heuristic(
    matches: Sequence[MatchInput], config: StrategyConfig
) -> AnalysisResult:
    """Run the heuristic pipeline over every fixture."""
    analyses = tuple(analyze_fixture(m, config) for m in matches)
    budget = plan_budget(analyses, config)
    return AnalysisResult(
        parsed_count=len(matches),
        analyses=analyses,
        budget_plan=budget,
        output_text=render_heuristic_report(analyses, budget, config),
    )
