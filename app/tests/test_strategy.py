# app/tests/test_strategy.py
"""
Tests for the heuristic strategy pipeline.

These tests verify:
1. Outcome picks and tie-breaking
2. Risk classification and stake sizing
3. Cold-hedge triggering
4. Handicap sub-analysis and budget allocation
5. Budget plan and report rendering
"""
from dataclasses import replace

import pytest

from footy.models import (
    HandicapOutcome,
    Lang,
    MatchAnalysis,
    MatchInput,
    Outcome,
    RiskLevel,
    StrategyConfig,
    Triple,
)
from footy.strategy import (
    allocate_handicap_budget,
    analyze_fixture,
    analyze_heuristic,
    compute_risk,
    pick_handicap_max,
    pick_max,
    plan_budget,
    sort_by_risk,
    stake_by_risk,
)


CONFIG = StrategyConfig()


def _match(idx=0, **fields):
    fields.setdefault("home_team", f"H{idx}")
    fields.setdefault("away_team", f"A{idx}")
    return MatchInput(id=f"m_1_{idx}", raw_line="", **fields)


def _analysis(idx, risk=RiskLevel.LOW, handicap=None, handicap_risk=None):
    return MatchAnalysis(
        match=_match(idx),
        recommendation=Outcome.HOME,
        risk=risk,
        stake_u=1,
        reasons=(),
        trigger_cold_draw=False,
        handicap_recommendation=handicap,
        handicap_risk=handicap_risk,
    )


class TestPicks:
    """Tests for outcome selection."""

    def test_largest_share_wins(self):
        assert pick_max(Triple(10, 30, 60)) == Outcome.AWAY
        assert pick_max(Triple(10, 60, 30)) == Outcome.DRAW

    def test_ties_resolve_home_first(self):
        """Ties resolve left to right: home, then draw."""
        assert pick_max(Triple(40, 40, 20)) == Outcome.HOME
        assert pick_max(Triple(10, 45, 45)) == Outcome.DRAW

    def test_absent_share_picks_home(self):
        """Missing values count as 0, so all-absent resolves to home."""
        assert pick_max(None) == Outcome.HOME
        assert pick_max(Triple(None, None, None)) == Outcome.HOME

    def test_handicap_pick(self):
        assert pick_handicap_max(None) is None
        assert pick_handicap_max(Triple(1.95, 3.30, 1.90)) == HandicapOutcome.HANDICAP_DRAW
        assert pick_handicap_max(Triple(None, None, 2.0)) == HandicapOutcome.HANDICAP_AWAY
        assert pick_handicap_max(Triple(1.9, 1.9, 1.9)) == HandicapOutcome.HANDICAP_HOME


class TestRisk:
    """Tests for risk classification and stakes."""

    @pytest.mark.parametrize(
        "share,heat,negative,expected",
        [
            (90, 0, True, RiskLevel.HIGH),
            (90, 60, False, RiskLevel.HIGH),
            (10, 60, True, RiskLevel.HIGH),
            (90, 0, False, RiskLevel.MEDIUM),
            (10, 60, False, RiskLevel.MEDIUM),
            (10, 0, True, RiskLevel.MEDIUM),
            (10, 0, False, RiskLevel.LOW),
        ],
    )
    def test_signal_combinations(self, share, heat, negative, expected):
        assert compute_risk(share, heat, negative, 80, 50).risk == expected

    def test_thresholds_are_inclusive(self):
        signals = compute_risk(80, 50, False, 80, 50)
        assert signals.crowded is True
        assert signals.very_hot is True

    def test_stakes(self):
        assert stake_by_risk(RiskLevel.LOW, False) == 1
        assert stake_by_risk(RiskLevel.MEDIUM, True) == 0.75
        assert stake_by_risk(RiskLevel.MEDIUM, False) == 0.5
        assert stake_by_risk(RiskLevel.HIGH, True) == 0.25


class TestAnalyzeFixture:
    """Tests for per-fixture analysis."""

    def test_crowded_negative_pnl_is_high_with_cold_hedge(self):
        """Share 90 and negative P/L at the pick: High, 0.25u, cold hedge."""
        analysis = analyze_fixture(
            _match(share=Triple(90, 5, 5), pnl=Triple(-100, 0, 0)), CONFIG
        )
        assert analysis.recommendation == Outcome.HOME
        assert analysis.risk == RiskLevel.HIGH
        assert analysis.stake_u == 0.25
        assert analysis.trigger_cold_draw is True

    def test_crowded_only_is_medium_075(self):
        analysis = analyze_fixture(_match(share=Triple(85, 10, 5)), CONFIG)
        assert analysis.risk == RiskLevel.MEDIUM
        assert analysis.stake_u == 0.75
        assert analysis.trigger_cold_draw is False

    def test_hot_only_is_medium_05(self):
        """Heat is compared by absolute value."""
        analysis = analyze_fixture(
            _match(share=Triple(50, 30, 20), heat=Triple(-70, 0, 0)), CONFIG
        )
        assert analysis.risk == RiskLevel.MEDIUM
        assert analysis.stake_u == 0.5

    def test_no_signals_is_low(self):
        analysis = analyze_fixture(_match(share=Triple(50, 30, 20)), CONFIG)
        assert analysis.risk == RiskLevel.LOW
        assert analysis.stake_u == 1

    def test_reasons_use_placeholders(self):
        """Missing share renders —, missing heat renders 0, missing P/L renders —."""
        analysis = analyze_fixture(_match(), CONFIG)
        assert analysis.reasons == (
            "交易占比最大方向：主胜（—%）",
            "冷热信号：0",
            "庄家盈亏（推荐方向）：—",
        )

    def test_reasons_in_english(self):
        analysis = analyze_fixture(
            _match(share=Triple(20, 30, 50), heat=Triple(0, 0, 12), pnl=Triple(0, 0, 500)),
            replace(CONFIG, lang=Lang.EN),
        )
        assert analysis.reasons == (
            "Top share direction: Away win (50%)",
            "Heat signal: 12",
            "Book P/L (pick side): 500",
        )

    def test_handicap_pick_uses_mapped_outcome(self):
        """Handicap risk reads share/heat/P&L at the mapped outcome."""
        analysis = analyze_fixture(
            _match(
                share=Triple(35, 20, 45),
                pnl=Triple(12000, -3000, -45000),
                heat=Triple(10, -5, 30),
                handicap_line=-0.25,
                handicap_odds=Triple(1.95, 3.30, 1.90),
            ),
            CONFIG,
        )
        assert analysis.handicap_recommendation == HandicapOutcome.HANDICAP_DRAW
        assert analysis.handicap_risk == RiskLevel.MEDIUM

    def test_handicap_line_without_odds_gives_no_pick(self):
        analysis = analyze_fixture(_match(handicap_line=-0.5), CONFIG)
        assert analysis.handicap_recommendation is None
        assert analysis.handicap_risk is None

    def test_handicap_disabled(self):
        analysis = analyze_fixture(
            _match(handicap_line=-0.5, handicap_odds=Triple(1.9, 3.2, 2.0)),
            replace(CONFIG, handicap_enabled=False),
        )
        assert analysis.handicap_recommendation is None

    def test_high_handicap_risk_still_reported(self):
        analysis = analyze_fixture(
            _match(
                share=Triple(85, 10, 5),
                pnl=Triple(-500, 0, 0),
                handicap_odds=Triple(2.1, 1.8, 1.7),
            ),
            CONFIG,
        )
        assert analysis.handicap_recommendation == HandicapOutcome.HANDICAP_HOME
        assert analysis.handicap_risk == RiskLevel.HIGH


class TestBudgets:
    """Tests for budget planning and handicap allocation."""

    def test_parlay_needs_two_fixtures(self):
        one = [_analysis(0)]
        two = [_analysis(0), _analysis(1)]
        assert plan_budget(one, CONFIG).parlay == 0
        assert plan_budget(one, CONFIG).single == 20
        assert plan_budget(two, CONFIG).parlay == 70
        assert plan_budget([], CONFIG).single == 0

    def test_cold_hedge_note(self):
        cold = replace(_analysis(0), trigger_cold_draw=True)
        assert plan_budget([cold], CONFIG).cold_hedge == 10
        assert plan_budget([cold], CONFIG).note == "触发条件博冷（防平）10 RMB"
        assert plan_budget([_analysis(0)], CONFIG).cold_hedge == 0
        assert plan_budget([_analysis(0)], CONFIG).note == "10 RMB 留空"

    def test_sort_is_stable(self):
        analyses = [
            _analysis(0, RiskLevel.HIGH),
            _analysis(1, RiskLevel.LOW),
            _analysis(2, RiskLevel.MEDIUM),
            _analysis(3, RiskLevel.LOW),
        ]
        assert [a.match.id for a in sort_by_risk(analyses)] == [
            "m_1_1",
            "m_1_3",
            "m_1_2",
            "m_1_0",
        ]

    def test_handicap_allocation_is_position_aligned(self):
        """Amounts follow input positions; the order of fixtures does not matter."""
        analyses = [
            _analysis(0, handicap=HandicapOutcome.HANDICAP_HOME, handicap_risk=RiskLevel.HIGH),
            _analysis(1, handicap=HandicapOutcome.HANDICAP_HOME, handicap_risk=RiskLevel.LOW),
            _analysis(2, handicap=HandicapOutcome.HANDICAP_DRAW, handicap_risk=RiskLevel.MEDIUM),
            _analysis(3),
        ]
        assert allocate_handicap_budget(analyses) == [0, 30, 20, 0]
        assert allocate_handicap_budget(list(reversed(analyses))) == [0, 20, 30, 0]

    def test_handicap_allocation_ties_keep_order(self):
        analyses = [
            _analysis(0, handicap=HandicapOutcome.HANDICAP_HOME, handicap_risk=RiskLevel.LOW),
            _analysis(1, handicap=HandicapOutcome.HANDICAP_AWAY, handicap_risk=RiskLevel.LOW),
            _analysis(2, handicap=HandicapOutcome.HANDICAP_AWAY, handicap_risk=RiskLevel.LOW),
        ]
        assert allocate_handicap_budget(analyses) == [30, 20, 0]

    def test_handicap_allocation_disabled(self):
        analyses = [_analysis(0, handicap=HandicapOutcome.HANDICAP_HOME, handicap_risk=RiskLevel.LOW)]
        assert allocate_handicap_budget(analyses, enabled=False) == [0]


class TestReport:
    """Tests for the heuristic report text."""

    def test_single_fixture_report(self):
        result = analyze_heuristic([_match(share=Triple(50, 30, 20))], CONFIG)
        lines = result.output_text.split("\n")
        assert lines[0] == "【Footy Analyzer V1 建议】"
        assert "- 主串(2串1)：0 RMB（场次不足）" in lines
        assert "- 机动单场：20 RMB（H0 vs A0）" in lines
        assert "- 无满足条件的让球推荐" in lines
        assert lines[-1] == "- 说明：10 RMB 留空"

    def test_empty_report(self):
        result = analyze_heuristic([], CONFIG)
        assert result.parsed_count == 0
        assert "已解析场次：0" in result.output_text
        assert "- 机动单场：0 RMB" in result.output_text.split("\n")

    def test_handicap_disabled_line(self):
        result = analyze_heuristic(
            [_match(handicap_odds=Triple(1.9, 3.0, 2.0))],
            replace(CONFIG, handicap_enabled=False),
        )
        assert "- 已关闭让球推荐" in result.output_text.split("\n")

    def test_high_handicap_risk_has_warning(self):
        result = analyze_heuristic(
            [
                _match(
                    share=Triple(85, 10, 5),
                    pnl=Triple(-500, 0, 0),
                    handicap_odds=Triple(2.1, 1.8, 1.7),
                )
            ],
            CONFIG,
        )
        assert "- 风险标签：高（警示）" in result.output_text.split("\n")

    def test_english_report(self):
        result = analyze_heuristic(
            [_match(share=Triple(35, 20, 45), pnl=Triple(0, 0, -1))],
            replace(CONFIG, lang=Lang.EN),
        )
        lines = result.output_text.split("\n")
        assert lines[0] == "[Footy Analyzer V1 Suggestions]"
        assert "- Pick: Away win" in lines
        assert "- Risk: Medium (stake 0.5u)" in lines
        assert "[Budget (100 RMB + handicap extra 50 RMB)]" in lines
