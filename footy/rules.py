# footy/rules.py
"""
Hard-rule catalogue: rule identities and their explanatory ranks.

Ranks only choose the decisive rule and the top-3 list for the report.
They never feed back into risk evaluation, which runs in a fixed order
in ``footy.hard_rules``.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional

from footy.models import Lang
from footy.templates import render


class RuleId(str, Enum):
    B1 = "B1"
    C0 = "C0"
    C1 = "C1"
    C2 = "C2"
    C3 = "C3"
    C4 = "C4"
    C5 = "C5"
    C6 = "C6"
    C7 = "C7"
    C8 = "C8"
    C9 = "C9"
    C10 = "C10"
    C11 = "C11"
    D = "D"


# Lower rank = more decisive
RULE_RANKS: Dict[RuleId, int] = {
    RuleId.B1: 10,
    RuleId.C0: 20,
    RuleId.C1: 30,
    RuleId.C2: 40,
    RuleId.C3: 50,
    RuleId.C4: 60,
    RuleId.C5: 70,
    RuleId.C6: 80,
    RuleId.C7: 90,
    RuleId.C8: 100,
    RuleId.C9: 110,
    RuleId.C10: 120,
    RuleId.C11: 130,
    RuleId.D: 200,
}

# League codes recognized by the calibration layer (upper-case)
CALIBRATED_LEAGUES = frozenset({"EPL", "UCL", "LALIGA", "LA_LIGA"})


@dataclass(frozen=True, slots=True)
class FiredRule:
    """A rule that fired for one fixture, with its display name."""
    rule_id: RuleId
    name: str

    @property
    def rank(self) -> int:
        return RULE_RANKS[self.rule_id]


def rule_name(rule_id: RuleId, lang: Lang, league: Optional[str] = None) -> str:
    return render(lang, f"rule.{rule_id.value}", league=league or "")


def rank_rules(fired: Iterable[FiredRule]) -> List[FiredRule]:
    """
    Fired rules ordered by rank, each rule id once.
    Equal ranks keep firing order.
    """
    seen = set()
    unique: List[FiredRule] = []
    for rule in fired:
        if rule.rule_id in seen:
            continue
        seen.add(rule.rule_id)
        unique.append(rule)
    return sorted(unique, key=lambda r: r.rank)
