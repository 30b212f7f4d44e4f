# app/routers/history.py
"""
History endpoints.

List and fetch stored analysis runs, export one run (re-derived, with
fallback to the stored output) and compare two runs.
"""
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from app.airlock import AirlockError, normalize_lang
from app.config import load_config
from app.correlation import get_request_id
from app.history_store import get_history_store

from footy.compare import compare_history_items, find_latest_two_same_match
from footy.export import build_export_payload

router = APIRouter(tags=["history"])


def _not_found(request_id: str, item_id: str) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={
            "request_id": request_id,
            "error": "not_found",
            "detail": f"History item {item_id} not found",
        },
    )


def _resolve_lang(lang: Optional[str]):
    try:
        return normalize_lang(lang, load_config().default_lang)
    except AirlockError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Invalid input", "detail": e.message, "code": e.code},
        )


@router.get("/history")
async def get_history(raw_request: Request, limit: int = Query(50, ge=1)):
    """
    Get analysis history.

    Returns items in reverse chronological order (newest first).

    Response:
        {
            "items": [...],
            "count": N
        }
    """
    store = get_history_store()
    items = store.list(limit=limit)
    return {
        "request_id": get_request_id(raw_request),
        "items": [item.to_dict() for item in items],
        "count": len(items),
    }


@router.get("/history/{item_id}")
async def get_history_item(item_id: str, raw_request: Request):
    """Get a specific history item by ID."""
    request_id = get_request_id(raw_request)
    item = get_history_store().get(item_id)
    if not item:
        return _not_found(request_id, item_id)

    return {
        "request_id": request_id,
        "item": item.to_dict(),
    }


@router.get("/history/{item_id}/export")
async def export_history_item(item_id: str, raw_request: Request, lang: Optional[str] = None):
    """
    Export a stored run.

    The report is re-derived from the stored input and config; on
    failure the stored output is used and used_fallback is true.
    """
    request_id = get_request_id(raw_request)
    item = get_history_store().get(item_id)
    if not item:
        return _not_found(request_id, item_id)

    payload = build_export_payload(item, _resolve_lang(lang))
    return {
        "request_id": request_id,
        "text": payload.text,
        "used_fallback": payload.used_fallback,
        "reason": payload.reason,
    }


@router.get("/history/{item_id}/same-match")
async def get_same_match_items(item_id: str, raw_request: Request):
    """Latest two stored runs whose first fixture matches this one."""
    request_id = get_request_id(raw_request)
    store = get_history_store()
    base = store.get(item_id)
    if not base:
        return _not_found(request_id, item_id)

    same = find_latest_two_same_match(store.list(limit=store.max_items), base)
    return {
        "request_id": request_id,
        "items": [item.to_dict() for item in same],
        "count": len(same),
    }


@router.get("/history/{item_a}/compare/{item_b}")
async def compare_history(
    item_a: str, item_b: str, raw_request: Request, lang: Optional[str] = None
):
    """Re-run two stored runs and render their differences."""
    request_id = get_request_id(raw_request)
    store = get_history_store()
    a = store.get(item_a)
    if not a:
        return _not_found(request_id, item_a)
    b = store.get(item_b)
    if not b:
        return _not_found(request_id, item_b)

    compared = compare_history_items(a, b, _resolve_lang(lang))
    return {
        "request_id": request_id,
        "text": compared.text,
        "a": compared.a.to_dict(),
        "b": compared.b.to_dict(),
    }
