# footy/templates.py
"""
Report text templates keyed by output language.

Every user-visible string the engine renders lives here, keyed first by
:class:`Lang` and then by a dotted template key. ``render`` is the single
entry point; adding a language means adding one table.
"""
from __future__ import annotations

import math
from typing import Any, Dict, Optional

from footy.models import HandicapOutcome, Lang, Outcome, RiskLevel


PLACEHOLDER = "—"


# =============================================================================
# Template Tables
# =============================================================================

_ZH: Dict[str, str] = {
    # Shared
    "sep": "；",
    "sep.comma": "，",
    "none": "无",
    "risk.low": "低",
    "risk.medium": "中",
    "risk.high": "高",
    "outcome.home": "主胜",
    "outcome.draw": "平",
    "outcome.away": "客胜",
    "handicap.handicap_home": "让胜",
    "handicap.handicap_draw": "让平",
    "handicap.handicap_away": "让负",
    # Heuristic report
    "v1.header": "【Footy Analyzer V1 建议】",
    "v1.parsed": "已解析场次：{count}",
    "v1.section_1x2": "【胜平负建议】",
    "v1.pick": "- 推荐：{pick}",
    "v1.risk": "- 风险：{risk}（仓位 {stake}u）",
    "v1.reasons": "- 理由：{reasons}",
    "v1.cold": "- 条件博冷：防平（{amount} RMB）",
    "v1.reason_share": "交易占比最大方向：{pick}（{share}%）",
    "v1.reason_heat": "冷热信号：{heat}",
    "v1.reason_pnl": "庄家盈亏（推荐方向）：{pnl}",
    "v1.section_handicap": "【让球建议】",
    "v1.handicap_disabled": "- 已关闭让球推荐",
    "v1.handicap_none": "- 无满足条件的让球推荐",
    "v1.handicap_line": "- 让球线：{line}",
    "v1.handicap_pick": "- 推荐：{pick}",
    "v1.handicap_risk": "- 风险标签：{risk}{warn}",
    "v1.handicap_warn": "（警示）",
    "v1.handicap_budget": "- 让球预算分配：{amount} RMB",
    "v1.budget_header": "【预算（{total} RMB + 让球额外{extra} RMB）】",
    "v1.parlay": "- 主串(2串1)：{amount} RMB（{first} + {second}）",
    "v1.parlay_none": "- 主串(2串1)：0 RMB（场次不足）",
    "v1.single": "- 机动单场：{amount} RMB（{title}）",
    "v1.single_none": "- 机动单场：0 RMB",
    "v1.cold_budget": "- 条件博冷：{amount} RMB",
    "v1.handicap_extra": "- 让球独立预算：{amount} RMB（分配规则：30+20）",
    "v1.notes": "- 说明：{note}",
    "v1.note_cold": "触发条件博冷（防平）{amount} RMB",
    "v1.note_reserved": "{amount} RMB 留空",
    # Hard-rule audit report
    "v38.header": "【Footy Analyzer v3.8.x 硬规则审计】",
    "v38.section_snapshot": "1) 数据快照与来源",
    "v38.source": "- 来源：用户粘贴文本（本地）",
    "v38.league": "- 联赛：{league}",
    "v38.league_missing": "未提供",
    "v38.missing": "数据缺失/未验证",
    "v38.v_total": "- V_total：{value}",
    "v38.h_fav": "- H_fav：{value}",
    "v38.pl_fav": "- PL_fav：{value}",
    "v38.time": "- 时间点T：{value}",
    "v38.snapshots": "- 快照数(T1/T2...)：{count}",
    "v38.section_audit": "2) 风险审计表",
    "v38.stop_table_header": "| 项目 | 结果 |",
    "v38.table_header": "| 项目 | 数值 |",
    "v38.table_rule": "|---|---|",
    "v38.stop_status": "| 状态 | 停机协议触发 |",
    "v38.section_evidence": "3) 关键证据",
    "v38.stop_evidence": "- A1失败：关键字段缺失或快照不足（需至少T1/T2）",
    "v38.section_notes": "4) 研究性建议（非执行）",
    "v38.stop_note": "- 当前禁止风险判定，请补齐数据后重算",
    "v38.section_checklist": "5) 数据索取清单",
    "v38.checklist_snapshots": "- 至少两档快照：T1/T2（H_fav, PL_fav, V_total）",
    "v38.checklist_time": "- 明确时间点T（示例：T=0.8h / T=45m）",
    "v38.checklist_issues": "- 缺失/可疑字段：{issues}",
    "v38.stop_reason": "停机协议触发：关键字段缺失/冲突",
    "v38.row_ratio": "| ratio | {ratio}% |",
    "v38.row_tag": "| 标签 | {tag} |",
    "v38.row_decisive": "| 决定性规则 | {rule} |",
    "v38.decisive": "{name}（优先级#{rank}）",
    "v38.row_explanation": "| 决定性规则解释 | {text} |",
    "v38.row_top3": "| Top3规则 | {rules} |",
    "v38.row_triggered": "| 触发规则 | {rules} |",
    "v38.risk_note": "- 风险等级：{risk}（仅研究用途，不构成执行建议）",
    "v38.section_review": "5) 复盘映射（可选）",
    "v38.review_hint": "- 可用 /lock /settle /review /tune 归档迭代",
    "v38.budget_note": "v3.8硬规则模式：仅输出研究性风险信息，不输出执行建议",
    # Evidence
    "evidence.void": "V_total={value} < 500000",
    "evidence.imminent": "距开赛≈{hours}h，使用T_last口径",
    "evidence.parabola": "快照数≥3且集中度较高，需防噪声高",
    "evidence.regression": "H_last({last}) 较 H_early({early}) 回落明显",
    "evidence.ratio": "当前 ratio={ratio}%，熔断线={line}%",
    "evidence.dual": "双证据核验：至少两档快照已提供",
    # Tags
    "tag.low_pressure": "✅ 低压力通道",
    "tag.sample_void": "🗑️ 样本作废：流动性不足",
    "tag.red_zone": "⚠️ Red-Zone Meltdown",
    "tag.systemic": "⚠️ 系统性异常区",
    "tag.stress_meltdown": "⚠️ 压力熔断区",
    "tag.mid_high": "⚠️ 中高压力区",
    "risk_tag.low": "#低风险",
    "risk_tag.medium": "#中风险",
    "risk_tag.high": "#高风险",
    # Rule names
    "rule.B1": "B1 Red-Zone Meltdown",
    "rule.C0": "C0 D0 Auto-Void",
    "rule.C1": "C1 F-T 临场强制覆盖",
    "rule.C2": "C2 FΩ-Mega",
    "rule.C3": "C3 FΩ-Standard",
    "rule.C4": "C4 FΩ-EX-R 超大体量共识场（解释标签）",
    "rule.C5": "C5 F-S 抛物线增量（弱证据）",
    "rule.C6": "C6 Fσ-L 中低体量降级阀",
    "rule.C7": "C7 F3-R 回归撤销",
    "rule.C8": "C8 F1-C 高风险走廊",
    "rule.C9": "C9 F0-W 空心热度",
    "rule.C10": "C10 F0-W-X 极端空心热度",
    "rule.C11": "C11 F2 结构相对健康",
    "rule.D": "D层联赛校准：{league}",
    # Short tag labels
    "label.BASE": "#基础分段",
    "label.OTHER": "#主规则",
    "label.B1": "#B1红区熔断",
    "label.C0": "#样本作废",
    "label.C1": "#临场覆盖",
    "label.C2": "#巨量豁免",
    "label.C3": "#标准豁免",
    "label.C6": "#降级阀",
    "label.C7": "#回归撤销",
    "label.C8": "#高风险走廊",
    "label.C9": "#空心热度",
    "label.C10": "#极端空心",
    "label.C11": "#结构健康",
    "label.D": "#联赛校准",
    # Long explanations
    "explain.none": "未命中规则，按基础压力分段。",
    "explain.generic": "命中优先级最高规则：{rule}。{hint}",
    "explain.generic_hint": " 同时命中：{others}。",
    "explain.B1": "命中B1红区（ratio={ratio}%落在55%~60%）。该规则优先级最高，直接触发熔断解释。",
    "explain.C0": "样本体量不足（V_total<50万），先判定样本作废。该判定优先于常规风险细分。",
    "explain.C1": "已进入临场窗口（≤1小时），临场规则优先覆盖常规判定。结论以最终时点口径解释。",
    "explain.C2": "巨量体量场（≥800万），触发更高熔断线口径。该规则改变压力阈值解释边界。",
    "explain.C3": "标准体量豁免（300万~800万），熔断线按60%口径执行。用于避免中体量误熔断。",
    "explain.C6": "中低体量区间触发降级阀，风险上限被限制。避免小样本放大解释。",
    "explain.C7": "末段集中度显著回落，触发回归撤销。用于抑制过度趋势化解读。",
    "explain.C8": "高集中且庄家对热门方向承压，命中高风险走廊。该结构优先解释为高风险形态。",
    "explain.C9": "热度高但盈亏压力不足，结构偏空心。故风险解释上调为谨慎级别。",
    "explain.C10": "极端热度且损失压力偏低，触发极端空心警示。优先解释为异常结构而非常规热度。",
    "explain.C11": "结构指标满足健康条件，结论偏中性/健康解释。用于对冲单一风险信号。",
    "explain.D": "命中联赛校准标签（{rule}）。该层仅做解释增强，不覆盖B/C层主判定。",
    # Compare
    "compare.header": "【复盘对比】",
    "compare.recommendation": "- 推荐: {a} → {b}",
    "compare.risk": "- 风险: {a} → {b}",
    "compare.handicap": "- 让球: {a} → {b}",
    "compare.budget_header": "【预算对比】",
    "compare.budget_total": "- 主预算: {a} → {b}",
    "compare.budget_parlay": "- 主串: {a} → {b}",
    "compare.budget_single": "- 单场: {a} → {b}",
    "compare.budget_cold": "- 博冷: {a} → {b}",
    # Export
    "export.time": "时间: {time}",
    "export.parsed": "解析场次: {count}",
    "export.input": "--- 输入 ---",
    "export.config": "--- 参数 ---",
    "export.output": "--- 输出 ---",
    "export.fallback": "[fallback] 重算失败，已回退历史存档输出。原因：{reason}",
}

_EN: Dict[str, str] = {
    "sep": "; ",
    "sep.comma": ", ",
    "none": "none",
    "risk.low": "Low",
    "risk.medium": "Medium",
    "risk.high": "High",
    "outcome.home": "Home win",
    "outcome.draw": "Draw",
    "outcome.away": "Away win",
    "handicap.handicap_home": "Handicap home",
    "handicap.handicap_draw": "Handicap draw",
    "handicap.handicap_away": "Handicap away",
    "v1.header": "[Footy Analyzer V1 Suggestions]",
    "v1.parsed": "Parsed matches: {count}",
    "v1.section_1x2": "[1X2 Suggestions]",
    "v1.pick": "- Pick: {pick}",
    "v1.risk": "- Risk: {risk} (stake {stake}u)",
    "v1.reasons": "- Reasons: {reasons}",
    "v1.cold": "- Conditional hedge: draw ({amount} RMB)",
    "v1.reason_share": "Top share direction: {pick} ({share}%)",
    "v1.reason_heat": "Heat signal: {heat}",
    "v1.reason_pnl": "Book P/L (pick side): {pnl}",
    "v1.section_handicap": "[Handicap Suggestions]",
    "v1.handicap_disabled": "- Handicap suggestion is disabled",
    "v1.handicap_none": "- No qualifying handicap suggestion",
    "v1.handicap_line": "- Line: {line}",
    "v1.handicap_pick": "- Pick: {pick}",
    "v1.handicap_risk": "- Risk tag: {risk}{warn}",
    "v1.handicap_warn": " (warning)",
    "v1.handicap_budget": "- Handicap budget: {amount} RMB",
    "v1.budget_header": "[Budget ({total} RMB + handicap extra {extra} RMB)]",
    "v1.parlay": "- Parlay (2-leg): {amount} RMB ({first} + {second})",
    "v1.parlay_none": "- Parlay (2-leg): 0 RMB (insufficient matches)",
    "v1.single": "- Single flex: {amount} RMB ({title})",
    "v1.single_none": "- Single flex: 0 RMB",
    "v1.cold_budget": "- Conditional hedge: {amount} RMB",
    "v1.handicap_extra": "- Handicap extra budget: {amount} RMB (allocation: 30+20)",
    "v1.notes": "- Notes: {note}",
    "v1.note_cold": "Conditional hedge triggered (draw) {amount} RMB",
    "v1.note_reserved": "{amount} RMB reserved",
    "v38.header": "[Footy Analyzer v3.8.x Hard-rule Audit]",
    "v38.section_snapshot": "1) Snapshots & Source",
    "v38.source": "- Source: user-pasted text (local)",
    "v38.league": "- League: {league}",
    "v38.league_missing": "N/A",
    "v38.missing": "missing/unverified",
    "v38.v_total": "- V_total: {value}",
    "v38.h_fav": "- H_fav: {value}",
    "v38.pl_fav": "- PL_fav: {value}",
    "v38.time": "- Time T: {value}",
    "v38.snapshots": "- Snapshot count (T1/T2...): {count}",
    "v38.section_audit": "2) Risk Audit Table",
    "v38.stop_table_header": "| Item | Result |",
    "v38.table_header": "| Item | Value |",
    "v38.table_rule": "|---|---|",
    "v38.stop_status": "| Status | Hard-stop triggered |",
    "v38.section_evidence": "3) Key Evidence",
    "v38.stop_evidence": "- A1 failed: critical fields missing or snapshots < 2 (need T1/T2)",
    "v38.section_notes": "4) Research Notes (non-execution)",
    "v38.stop_note": "- Risk audit is blocked. Please complete fields and rerun.",
    "v38.section_checklist": "5) Data request checklist",
    "v38.checklist_snapshots": "- At least two snapshots: T1/T2 (H_fav, PL_fav, V_total)",
    "v38.checklist_time": "- Explicit time point T (e.g. T=0.8h / T=45m)",
    "v38.checklist_issues": "- Missing/suspicious fields: {issues}",
    "v38.stop_reason": "Hard-stop triggered: critical fields missing/conflicting",
    "v38.row_ratio": "| ratio | {ratio}% |",
    "v38.row_tag": "| Tag | {tag} |",
    "v38.row_decisive": "| Decisive Rule | {rule} |",
    "v38.decisive": "{name} (priority #{rank})",
    "v38.row_explanation": "| Decisive Rule Explanation | {text} |",
    "v38.row_top3": "| Top 3 Rules | {rules} |",
    "v38.row_triggered": "| Triggered Rules | {rules} |",
    "v38.risk_note": "- Risk level: {risk} (research-only, not execution advice)",
    "v38.section_review": "5) Review Mapping (optional)",
    "v38.review_hint": "- Use /lock /settle /review /tune for review workflow",
    "v38.budget_note": "v3.8 hard-rule mode: research-only risk output (no execution suggestion)",
    "evidence.void": "V_total={value} < 500000",
    "evidence.imminent": "About {hours}h to kickoff, latest snapshot (T_last) is authoritative",
    "evidence.parabola": "Snapshots >= 3 with high concentration, watch for noise",
    "evidence.regression": "H_last({last}) moved sharply from H_early({early})",
    "evidence.ratio": "Current ratio={ratio}%, meltdown line={line}%",
    "evidence.dual": "Dual-evidence check: at least two snapshots provided",
    "tag.low_pressure": "✅ Low-pressure channel",
    "tag.sample_void": "🗑️ Sample void: insufficient liquidity",
    "tag.red_zone": "⚠️ Red-Zone Meltdown",
    "tag.systemic": "⚠️ Systemic anomaly zone",
    "tag.stress_meltdown": "⚠️ Stress meltdown zone",
    "tag.mid_high": "⚠️ Mid-high stress zone",
    "risk_tag.low": "#LowRisk",
    "risk_tag.medium": "#MediumRisk",
    "risk_tag.high": "#HighRisk",
    "rule.B1": "B1 Red-Zone Meltdown",
    "rule.C0": "C0 D0 Auto-Void",
    "rule.C1": "C1 F-T Imminent-kickoff override",
    "rule.C2": "C2 FΩ-Mega",
    "rule.C3": "C3 FΩ-Standard",
    "rule.C4": "C4 FΩ-EX-R Mega-volume consensus (explanatory)",
    "rule.C5": "C5 F-S Parabolic build-up (weak evidence)",
    "rule.C6": "C6 Fσ-L Mid-low volume derate",
    "rule.C7": "C7 F3-R Regression reversal",
    "rule.C8": "C8 F1-C High-risk corridor",
    "rule.C9": "C9 F0-W Hollow heat",
    "rule.C10": "C10 F0-W-X Extreme hollow heat",
    "rule.C11": "C11 F2 Structurally healthy",
    "rule.D": "D league calibration: {league}",
    "label.BASE": "#BaseTier",
    "label.OTHER": "#MainRule",
    "label.B1": "#B1RedZone",
    "label.C0": "#SampleVoid",
    "label.C1": "#Imminent",
    "label.C2": "#MegaExempt",
    "label.C3": "#StandardExempt",
    "label.C6": "#Derate",
    "label.C7": "#Regression",
    "label.C8": "#HighRiskCorridor",
    "label.C9": "#HollowHeat",
    "label.C10": "#ExtremeHollow",
    "label.C11": "#Healthy",
    "label.D": "#LeagueCalibration",
    "explain.none": "No rule matched; base stress tiers apply.",
    "explain.generic": "Highest-priority rule hit: {rule}.{hint}",
    "explain.generic_hint": " Also hit: {others}.",
    "explain.B1": "B1 red zone hit (ratio={ratio}% within 55%~60%). It has the highest priority and triggers the meltdown reading directly.",
    "explain.C0": "Sample volume too small (V_total < 500k); the sample is voided first. This precedes regular risk tiers.",
    "explain.C1": "Inside the imminent window (<= 1h); kickoff rules override regular checks. Conclusions follow the final snapshot.",
    "explain.C2": "Mega-volume fixture (>= 8M) uses a higher meltdown line. This moves the stress threshold boundary.",
    "explain.C3": "Standard volume exemption (3M~8M): the meltdown line is 60%. Keeps mid-volume fixtures from false meltdowns.",
    "explain.C6": "Mid-low volume derate applies and caps the risk ceiling. Small samples are not amplified.",
    "explain.C7": "Late concentration moved sharply; regression reversal applies. Trend readings are damped.",
    "explain.C8": "High concentration with the book under pressure on the favorite: high-risk corridor. Read this structure as high risk.",
    "explain.C9": "Heat is high but P/L pressure is thin, so the structure looks hollow. Risk is raised to a cautious level.",
    "explain.C10": "Extreme heat with low loss pressure triggers the extreme hollow warning. Read it as an abnormal structure, not ordinary heat.",
    "explain.C11": "Structural metrics meet the healthy conditions; the reading leans neutral/healthy. Offsets single risk signals.",
    "explain.D": "League calibration tag hit ({rule}). This layer only enriches explanations and never overrides B/C rules.",
    "compare.header": "[Review Compare]",
    "compare.recommendation": "- Recommendation: {a} → {b}",
    "compare.risk": "- Risk: {a} → {b}",
    "compare.handicap": "- Handicap: {a} → {b}",
    "compare.budget_header": "[Budget Compare]",
    "compare.budget_total": "- Main budget: {a} → {b}",
    "compare.budget_parlay": "- Parlay: {a} → {b}",
    "compare.budget_single": "- Single: {a} → {b}",
    "compare.budget_cold": "- Cold hedge: {a} → {b}",
    "export.time": "Time: {time}",
    "export.parsed": "Parsed matches: {count}",
    "export.input": "--- INPUT ---",
    "export.config": "--- CONFIG ---",
    "export.output": "--- OUTPUT ---",
    "export.fallback": "[fallback] Recompute failed, fell back to stored historical output. Reason: {reason}",
}

TEMPLATES: Dict[Lang, Dict[str, str]] = {
    Lang.ZH: _ZH,
    Lang.EN: _EN,
}


# =============================================================================
# Rendering
# =============================================================================


def render(lang: Lang, key: str, **fields: Any) -> str:
    """
    Render one template for ``lang``.

    Raises:
        KeyError: If ``key`` is not defined for the language
    """
    return TEMPLATES[Lang(lang)][key].format(**fields)


def has_template(lang: Lang, key: str) -> bool:
    return key in TEMPLATES[Lang(lang)]


def risk_label(risk: RiskLevel, lang: Lang) -> str:
    return render(lang, f"risk.{risk.value}")


def outcome_label(outcome: Outcome, lang: Lang) -> str:
    return render(lang, f"outcome.{outcome.value}")


def handicap_label(outcome: Optional[HandicapOutcome], lang: Lang) -> str:
    if outcome is None:
        return PLACEHOLDER
    return render(lang, f"handicap.{outcome.value}")


def format_number(value: Optional[float], missing: str = PLACEHOLDER) -> str:
    """
    Format a number for report text.

    Integral values print without a decimal part (``1144341`` not
    ``1144341.0``); other values use the shortest round-trip form.
    """
    if value is None:
        return missing
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)
