# footy/__init__.py
"""
Footy Analyzer - Market-Text Parser and Rule Engine

Parses pasted betting-market text into fixture records and runs a
rule-based engine that assigns a pick, a risk tier and a budget per
fixture, with a rendered report.

Usage:
    from footy import parse_input, analyze_matches, StrategyConfig

    matches = parse_input("阿森纳 vs 切尔西 占比 70 | 平 20 | 客 10")
    result = analyze_matches(matches, StrategyConfig(lang="en"))
    print(result.output_text)

Constraints:
- Pure functions: no state between calls, no I/O
- Research-only output, never an execution system
- Messy input never raises; unparseable lines are dropped
"""

from footy.models import (
    # Enums
    Lang,
    ExplanationStyle,
    Outcome,
    HandicapOutcome,
    RiskLevel,
    # Records
    Triple,
    MatchInput,
    StrategyConfig,
    DEFAULT_STRATEGY_CONFIG,
    MatchAnalysis,
    BudgetPlan,
    AnalysisResult,
    HistoryItem,
)

from footy.parser import parse_input, to_number
from footy.engine import analyze_matches, analyze_text
from footy.hard_rules import detect_hard_rule_issues, parse_time_to_hours
from footy.compare import CompareResult, compare_history_items, find_latest_two_same_match, pick_comparable_key
from footy.export import ExportPayload, build_export_payload, build_export_text

__version__ = "1.0.0"

__all__ = [
    # Pipeline
    "parse_input",
    "to_number",
    "analyze_matches",
    "analyze_text",
    "detect_hard_rule_issues",
    "parse_time_to_hours",
    # Models
    "Lang",
    "ExplanationStyle",
    "Outcome",
    "HandicapOutcome",
    "RiskLevel",
    "Triple",
    "MatchInput",
    "StrategyConfig",
    "DEFAULT_STRATEGY_CONFIG",
    "MatchAnalysis",
    "BudgetPlan",
    "AnalysisResult",
    "HistoryItem",
    # Collaborators
    "CompareResult",
    "compare_history_items",
    "find_latest_two_same_match",
    "pick_comparable_key",
    "ExportPayload",
    "build_export_payload",
    "build_export_text",
]
