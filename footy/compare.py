# footy/compare.py
"""
Review comparison between two stored analysis runs.

Each item is re-parsed and re-analyzed under its own config snapshot
with the output language overridden, then rendered side by side.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import datetime
from typing import List, Optional, Sequence

from footy.engine import analyze_matches
from footy.models import AnalysisResult, HistoryItem, Lang, MatchAnalysis
from footy.parser import parse_input
from footy.templates import PLACEHOLDER, format_number, handicap_label, outcome_label, render, risk_label

_KEY_PATTERN = re.compile(r"^(.*?)\s*(?:vs|对)\s*(.*?)(?:\s|$)", re.IGNORECASE)


@dataclass(frozen=True)
class CompareResult:
    text: str
    a: AnalysisResult
    b: AnalysisResult


def pick_comparable_key(input_text: str) -> str:
    """
    Key identifying the first fixture of a stored input.

    ``home__away`` for the first non-empty line, or the line itself when
    it has no team separator.
    """
    first = next((line.strip() for line in input_text.split("\n") if line.strip()), "")
    m = _KEY_PATTERN.match(first)
    if not m:
        return first
    return f"{m.group(1).strip()}__{m.group(2).strip()}"


def find_latest_two_same_match(
    history: Sequence[HistoryItem], base: HistoryItem
) -> List[HistoryItem]:
    """First two items (newest first) whose first fixture matches ``base``."""
    key = pick_comparable_key(base.input_text)
    return [h for h in history if pick_comparable_key(h.input_text) == key][:2]


def format_timestamp(created_at: str) -> str:
    """Render an ISO8601 timestamp for report text; unparseable values pass through."""
    try:
        moment = datetime.fromisoformat(created_at.replace("Z", "+00:00"))
    except ValueError:
        return created_at
    return moment.strftime("%Y-%m-%d %H:%M:%S")


def _recompute(item: HistoryItem, lang: Lang) -> AnalysisResult:
    config = replace(item.config_snapshot, lang=Lang(lang))
    return analyze_matches(parse_input(item.input_text), config)


def _side(analysis: Optional[MatchAnalysis], attr: str, lang: Lang) -> str:
    if analysis is None:
        return PLACEHOLDER
    if attr == "recommendation":
        return outcome_label(analysis.recommendation, lang)
    if attr == "risk":
        return risk_label(analysis.risk, lang)
    return handicap_label(analysis.handicap_recommendation, lang)


def compare_history_items(
    a: HistoryItem, b: HistoryItem, lang: Lang = Lang.ZH
) -> CompareResult:
    """Re-run both items and render per-fixture and budget deltas."""
    lang = Lang(lang)
    ra = _recompute(a, lang)
    rb = _recompute(b, lang)

    lines: List[str] = [
        render(lang, "compare.header"),
        f"A: {format_timestamp(a.created_at)}",
        f"B: {format_timestamp(b.created_at)}",
        "",
    ]

    for i in range(max(len(ra.analyses), len(rb.analyses))):
        ma = ra.analyses[i] if i < len(ra.analyses) else None
        mb = rb.analyses[i] if i < len(rb.analyses) else None
        match = (ma or mb).match
        home = match.home_team or PLACEHOLDER
        away = match.away_team or PLACEHOLDER
        lines.append(f"{i + 1}. {home} vs {away}")
        for key, attr in (
            ("compare.recommendation", "recommendation"),
            ("compare.risk", "risk"),
            ("compare.handicap", "handicap"),
        ):
            lines.append(render(lang, key, a=_side(ma, attr, lang), b=_side(mb, attr, lang)))
        lines.append("")

    pa, pb = ra.budget_plan, rb.budget_plan
    lines.append(render(lang, "compare.budget_header"))
    lines.append(render(lang, "compare.budget_total", a=format_number(pa.total), b=format_number(pb.total)))
    lines.append(render(lang, "compare.budget_parlay", a=format_number(pa.parlay), b=format_number(pb.parlay)))
    lines.append(render(lang, "compare.budget_single", a=format_number(pa.single), b=format_number(pb.single)))
    lines.append(
        render(lang, "compare.budget_cold", a=format_number(pa.cold_hedge), b=format_number(pb.cold_hedge))
    )

    return CompareResult(text="\n".join(lines), a=ra, b=rb)
