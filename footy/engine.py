# footy/engine.py
"""
Rule Engine entry point.

Selects the analysis mode per call: the hard-rule audit when
``config.policy_v38_enabled`` is set, the heuristic strategy otherwise.
Every fixture in one call goes through the same pipeline. The engine
keeps no state between calls.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from footy.hard_rules import analyze_hard_rules
from footy.models import DEFAULT_STRATEGY_CONFIG, AnalysisResult, MatchInput, StrategyConfig
from footy.parser import parse_input
from footy.strategy import analyze_heuristic

_logger = logging.getLogger(__name__)


def analyze_matches(
    matches: Sequence[MatchInput],
    config: StrategyConfig = DEFAULT_STRATEGY_CONFIG,
) -> AnalysisResult:
    """
    Analyze parsed fixtures.

    Args:
        matches: Fixtures in input order
        config: Strategy configuration for this call

    Returns:
        AnalysisResult with per-fixture verdicts, budget and report text
    """
    if config.policy_v38_enabled:
        _logger.debug(f"[ENGINE] hard-rule audit for {len(matches)} fixtures")
        return analyze_hard_rules(matches, config)
    _logger.debug(f"[ENGINE] heuristic strategy for {len(matches)} fixtures")
    return analyze_heuristic(matches, config)


def analyze_text(raw: str, config: Optional[StrategyConfig] = None) -> AnalysisResult:
    """Parse raw market text and analyze it in one step."""
    return analyze_matches(parse_input(raw), config or DEFAULT_STRATEGY_CONFIG)
