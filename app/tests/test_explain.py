# app/tests/test_explain.py
"""
Tests for decisive-rule explanations and rule ranking.
"""
from footy.explain import build_short_tags, explain_decisive_rule, resolve_style, short_label
from footy.models import ExplanationStyle, Lang, RiskLevel, StrategyConfig
from footy.rules import FiredRule, RuleId, rank_rules, rule_name


def _fired(rule_id, lang=Lang.ZH):
    return FiredRule(rule_id, rule_name(rule_id, lang))


class TestRanking:
    """Tests for rule ranking."""

    def test_sorted_by_rank(self):
        fired = [_fired(RuleId.C9), _fired(RuleId.C3), _fired(RuleId.D), _fired(RuleId.C8)]
        assert [r.rule_id for r in rank_rules(fired)] == [
            RuleId.C3,
            RuleId.C8,
            RuleId.C9,
            RuleId.D,
        ]

    def test_deduplicated(self):
        fired = [_fired(RuleId.C9), _fired(RuleId.C9)]
        assert len(rank_rules(fired)) == 1

    def test_empty(self):
        assert rank_rules([]) == []


class TestStyle:
    """Tests for style resolution."""

    def test_auto_resolves_by_device(self):
        assert resolve_style(StrategyConfig()) == ExplanationStyle.LONG
        assert resolve_style(StrategyConfig(v38_is_mobile=True)) == ExplanationStyle.SHORT

    def test_explicit_style_wins(self):
        config = StrategyConfig(v38_explanation_style="long", v38_is_mobile=True)
        assert resolve_style(config) == ExplanationStyle.LONG


class TestShortLabels:
    """Tests for short-style tags and overrides."""

    def test_base_label_without_rule(self):
        assert build_short_tags(None, RiskLevel.LOW, 12.34, {}, Lang.ZH) == "#基础分段 #低风险 #ratio12.3"

    def test_override_replaces_default(self):
        assert short_label(RuleId.B1, {"B1": "#红区"}, Lang.ZH) == "#红区"

    def test_blank_override_ignored(self):
        assert short_label(RuleId.B1, {"B1": "   "}, Lang.ZH) == "#B1红区熔断"

    def test_extreme_hollow_label_is_its_own(self):
        """C10 and C11 never fall into the C1 label."""
        assert short_label(RuleId.C10, {}, Lang.ZH) == "#极端空心"
        assert short_label(RuleId.C11, {}, Lang.ZH) == "#结构健康"
        assert short_label(RuleId.C10, {"C1": "#wrong"}, Lang.ZH) == "#极端空心"

    def test_explanatory_rules_use_other(self):
        assert short_label(RuleId.C4, {}, Lang.ZH) == "#主规则"
        assert short_label(RuleId.C5, {"OTHER": "#其他"}, Lang.ZH) == "#其他"
        assert short_label(RuleId.C5, {"C5": "#抛物线", "OTHER": "#其他"}, Lang.ZH) == "#抛物线"

    def test_english_tags(self):
        assert build_short_tags(RuleId.C8, RiskLevel.HIGH, 10, {}, Lang.EN) == (
            "#HighRiskCorridor #HighRisk #ratio10.0"
        )


class TestLongExplanations:
    """Tests for long-style sentences."""

    def _explain(self, decisive, top3=(), ratio=10.0, lang=Lang.ZH):
        return explain_decisive_rule(
            decisive, ratio, list(top3), ExplanationStyle.LONG, RiskLevel.MEDIUM, {}, lang
        )

    def test_no_rule(self):
        assert self._explain(None) == "未命中规则，按基础压力分段。"

    def test_b1_includes_ratio(self):
        text = self._explain(_fired(RuleId.B1), ratio=57.5)
        assert text.startswith("命中B1红区（ratio=57.50%落在55%~60%）")

    def test_c10_uses_its_own_sentence(self):
        text = self._explain(_fired(RuleId.C10))
        assert text == "极端热度且损失压力偏低，触发极端空心警示。优先解释为异常结构而非常规热度。"

    def test_generic_with_other_hits(self):
        c4 = _fired(RuleId.C4)
        c8 = _fired(RuleId.C8)
        assert self._explain(c4, [c4, c8]) == (
            "命中优先级最高规则：C4 FΩ-EX-R 超大体量共识场（解释标签）。 同时命中：C8 F1-C 高风险走廊。"
        )

    def test_generic_alone(self):
        c5 = _fired(RuleId.C5)
        assert self._explain(c5, [c5]) == "命中优先级最高规则：C5 F-S 抛物线增量（弱证据）。"

    def test_league_sentence_names_rule(self):
        d = FiredRule(RuleId.D, rule_name(RuleId.D, Lang.EN, "UCL"))
        assert self._explain(d, [d], lang=Lang.EN) == (
            "League calibration tag hit (D league calibration: UCL). "
            "This layer only enriches explanations and never overrides B/C rules."
        )
