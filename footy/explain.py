# footy/explain.py
"""
Decisive-rule explanations for the hard-rule audit.

Two styles:
- short: ``<label> <#risk tag> #ratio<x.x>``, label overridable per rule id
- long: one fixed sentence per rule id

``auto`` resolves to short on mobile, long otherwise.
"""
from __future__ import annotations

from typing import Mapping, Optional, Sequence

from footy.models import ExplanationStyle, Lang, RiskLevel, StrategyConfig
from footy.rules import FiredRule, RuleId
from footy.templates import has_template, render

BASE_LABEL_KEY = "BASE"
OTHER_LABEL_KEY = "OTHER"


def resolve_style(config: StrategyConfig) -> ExplanationStyle:
    """Resolve ``auto`` against the device hint; never returns AUTO."""
    style = config.v38_explanation_style
    if style == ExplanationStyle.AUTO:
        return ExplanationStyle.SHORT if config.v38_is_mobile else ExplanationStyle.LONG
    return style


def _override(overrides: Mapping[str, str], key: str) -> Optional[str]:
    value = overrides.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def short_label(
    rule_id: Optional[RuleId], overrides: Mapping[str, str], lang: Lang
) -> str:
    """
    Label for the decisive rule in short style.

    Lookup order: override for the rule id, then (for rules without a
    dedicated label) the OTHER override, then the default label.
    Blank overrides are ignored.
    """
    if rule_id is None:
        keys = [BASE_LABEL_KEY]
        default_key = BASE_LABEL_KEY
    elif has_template(lang, f"label.{rule_id.value}"):
        keys = [rule_id.value]
        default_key = rule_id.value
    else:
        keys = [rule_id.value, OTHER_LABEL_KEY]
        default_key = OTHER_LABEL_KEY

    for key in keys:
        label = _override(overrides, key)
        if label is not None:
            return label
    return render(lang, f"label.{default_key}")


def build_short_tags(
    rule_id: Optional[RuleId],
    risk: RiskLevel,
    ratio: float,
    overrides: Mapping[str, str],
    lang: Lang,
) -> str:
    label = short_label(rule_id, overrides, lang)
    risk_tag = render(lang, f"risk_tag.{risk.value}")
    return f"{label} {risk_tag} #ratio{ratio:.1f}"


def explain_decisive_rule(
    decisive: Optional[FiredRule],
    ratio: float,
    top3: Sequence[FiredRule],
    style: ExplanationStyle,
    risk: RiskLevel,
    overrides: Mapping[str, str],
    lang: Lang,
) -> str:
    """Render the decisive-rule explanation in the resolved style."""
    if style == ExplanationStyle.SHORT:
        return build_short_tags(
            decisive.rule_id if decisive else None, risk, ratio, overrides, lang
        )
    if decisive is None:
        return render(lang, "explain.none")

    key = f"explain.{decisive.rule_id.value}"
    if has_template(lang, key):
        return render(lang, key, ratio=f"{ratio:.2f}", rule=decisive.name)

    # Explanatory-only rules fall back to the generic sentence
    hint = ""
    if len(top3) > 1:
        others = render(lang, "sep").join(r.name for r in top3[1:])
        hint = render(lang, "explain.generic_hint", others=others)
    return render(lang, "explain.generic", rule=decisive.name, hint=hint)
