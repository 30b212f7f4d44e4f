# app/routers/analyze.py
"""
Analysis endpoints.

POST /analyze runs the full pipeline (parse + engine, optional save).
POST /parse returns the structured fixtures only.

Both pass through Airlock first; validation errors become 400 with
{"error", "detail", "code"}.
"""
import logging

from fastapi import APIRouter, HTTPException, Request, status

from app.airlock import AirlockError, airlock_ingest
from app.config import load_config
from app.correlation import get_request_id
from app.pipeline import run_analysis, run_parse
from app.schemas.analysis import (
    AnalyzeRequestSchema,
    AnalyzeResponseSchema,
    ParseRequestSchema,
    ParseResponseSchema,
)

_logger = logging.getLogger(__name__)

router = APIRouter(tags=["analysis"])


def _validation_error(e: AirlockError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={
            "error": "Invalid input",
            "detail": e.message,
            "code": e.code,
        },
    )


@router.post("/analyze", response_model=AnalyzeResponseSchema)
async def analyze(request: AnalyzeRequestSchema, raw_request: Request):
    """
    Analyze pasted market text.

    The mode follows config.policy_v38_enabled (service default from
    FOOTY_HARD_RULE_DEFAULT). The run is saved to history unless
    save=false.
    """
    app_config = load_config()
    try:
        normalized = airlock_ingest(
            input_text=request.text,
            lang=request.lang,
            explanation_style=request.explanation_style,
            default_lang=app_config.default_lang,
        )
    except AirlockError as e:
        _logger.info(f"analyze rejected: code={e.code}")
        raise _validation_error(e)

    overrides = request.config.overrides() if request.config else None
    response = run_analysis(
        normalized,
        overrides=overrides,
        save=request.save,
        app_config=app_config,
    )
    result = response.result

    return AnalyzeResponseSchema(
        request_id=get_request_id(raw_request),
        mode=response.mode,
        parsed_count=result.parsed_count,
        analyses=[a.to_dict() for a in result.analyses],
        budget_plan=result.budget_plan.to_dict(),
        output_text=result.output_text,
        config=response.config.to_dict(),
        hard_rule_issues=response.hard_rule_issues,
        history_id=response.history_id,
    )


@router.post("/parse", response_model=ParseResponseSchema)
async def parse(request: ParseRequestSchema, raw_request: Request):
    """Parse pasted market text into structured fixtures."""
    try:
        normalized = airlock_ingest(input_text=request.text)
    except AirlockError as e:
        raise _validation_error(e)

    matches = run_parse(normalized)
    return ParseResponseSchema(
        request_id=get_request_id(raw_request),
        parsed_count=len(matches),
        matches=[m.to_dict() for m in matches],
    )
