# app/pipeline.py
"""
Pipeline Facade - Single entry point for all analysis requests.

This is the ONLY place in app/ where the footy engine is called.
All routes MUST go through this facade:

    Airlock (validation) → Pipeline (analysis) → Route (HTTP response)

The pipeline:
1. Builds the per-request StrategyConfig (service defaults + overrides)
2. Parses the market text into fixtures
3. Runs the engine in the mode the config selects
4. Collects hard-rule gaps per fixture (hard-rule mode only)
5. Optionally saves the run to the history store

Routes should NOT:
- Import footy.engine directly
- Build StrategyConfig themselves
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional

from app.airlock import NormalizedInput
from app.config import AppConfig, load_config
from app.history_store import create_history_item, get_history_store

from footy.engine import analyze_matches
from footy.hard_rules import detect_hard_rule_issues
from footy.models import AnalysisResult, MatchInput, StrategyConfig
from footy.parser import parse_input

_logger = logging.getLogger(__name__)

MODE_HEURISTIC = "heuristic"
MODE_HARD_RULE = "hard_rule"


# =============================================================================
# Pipeline Response
# =============================================================================


@dataclass(frozen=True)
class PipelineResponse:
    """
    Unified response from the analysis pipeline.

    Contains:
    - Engine result (verdicts, budget plan, report text)
    - The exact StrategyConfig used
    - Hard-rule gaps per fixture id (empty in heuristic mode)
    - History id when the run was saved
    """
    result: AnalysisResult
    config: StrategyConfig
    mode: str
    hard_rule_issues: Dict[str, List[str]] = field(default_factory=dict)
    history_id: Optional[str] = None


# =============================================================================
# Config Assembly
# =============================================================================


def build_strategy_config(
    normalized: NormalizedInput,
    overrides: Optional[Mapping[str, Any]] = None,
    app_config: Optional[AppConfig] = None,
) -> StrategyConfig:
    """
    Build the StrategyConfig for one request.

    Precedence (lowest to highest): engine defaults, service defaults
    (hard-rule mode), client overrides, normalized lang/style.
    """
    app_config = app_config or load_config()
    config = StrategyConfig(policy_v38_enabled=app_config.hard_rule_default)
    if overrides:
        config = replace(config, **dict(overrides))
    config = replace(config, lang=normalized.lang)
    if normalized.explanation_style is not None:
        config = replace(config, v38_explanation_style=normalized.explanation_style)
    return config


# =============================================================================
# Entry Points
# =============================================================================


def run_parse(normalized: NormalizedInput) -> List[MatchInput]:
    """Parse normalized text into fixtures (no analysis)."""
    matches = parse_input(normalized.input_text)
    _logger.info(
        f"parse: input_length={normalized.input_length}, parsed_count={len(matches)}"
    )
    return matches


def run_analysis(
    normalized: NormalizedInput,
    overrides: Optional[Mapping[str, Any]] = None,
    save: bool = False,
    app_config: Optional[AppConfig] = None,
) -> PipelineResponse:
    """
    Run the canonical analysis pipeline.

    This is the ONLY entry point for analysis. All routes call this.

    Args:
        normalized: Validated input from Airlock
        overrides: Strategy fields the client set (snake_case)
        save: Store the run in the history store
        app_config: Service configuration (loaded from env if omitted)

    Returns:
        PipelineResponse with the engine result and the config used
    """
    config = build_strategy_config(normalized, overrides, app_config)
    matches = parse_input(normalized.input_text)
    result = analyze_matches(matches, config)

    mode = MODE_HARD_RULE if config.policy_v38_enabled else MODE_HEURISTIC
    issues: Dict[str, List[str]] = {}
    if config.policy_v38_enabled:
        for match in matches:
            gaps = detect_hard_rule_issues(match)
            if gaps:
                issues[match.id] = gaps

    history_id = None
    if save:
        item = get_history_store().add(
            create_history_item(normalized.input_text, result, config)
        )
        history_id = item.id

    # Never log raw text, only sizes
    _logger.info(
        f"analyze: mode={mode}, lang={config.lang.value}, "
        f"input_length={normalized.input_length}, parsed_count={result.parsed_count}, "
        f"hard_stops={len(issues)}, saved={history_id is not None}"
    )

    return PipelineResponse(
        result=result,
        config=config,
        mode=mode,
        hard_rule_issues=issues,
        history_id=history_id,
    )
