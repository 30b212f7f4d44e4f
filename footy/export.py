# footy/export.py
"""
Export of a stored analysis run.

The report is re-derived from the stored input and config snapshot. If
re-derivation fails for any reason, the stored output is kept and a
``[fallback]`` notice with the failure reason is appended.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from typing import Optional

from footy.compare import format_timestamp
from footy.engine import analyze_matches
from footy.models import HistoryItem, Lang
from footy.parser import parse_input
from footy.templates import render

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportPayload:
    text: str
    used_fallback: bool
    reason: str = ""


def build_export_text(
    item: HistoryItem, lang: Lang = Lang.ZH, output_text: Optional[str] = None
) -> str:
    """
    Assemble the export document for ``item``.

    Args:
        item: Stored run
        lang: Language for section labels
        output_text: Report body to use instead of ``item.output_text``
    """
    lang = Lang(lang)
    body = item.output_text if output_text is None else output_text
    return "\n".join(
        [
            render(lang, "export.time", time=format_timestamp(item.created_at)),
            render(lang, "export.parsed", count=item.parsed_count),
            "",
            render(lang, "export.input"),
            item.input_text,
            "",
            render(lang, "export.config"),
            json.dumps(item.config_snapshot.to_dict(), ensure_ascii=False, indent=2),
            "",
            render(lang, "export.output"),
            body,
            "",
        ]
    )


def build_export_payload(item: HistoryItem, lang: Lang = Lang.ZH) -> ExportPayload:
    """Re-derive the report for export, falling back to the stored output."""
    lang = Lang(lang)
    try:
        config = replace(item.config_snapshot, lang=lang)
        recomputed = analyze_matches(parse_input(item.input_text), config)
    except Exception as e:
        reason = str(e) or type(e).__name__
        _logger.warning(f"[EXPORT] recompute failed for {item.id}, using stored output: {reason}")
        note = render(lang, "export.fallback", reason=reason)
        text = build_export_text(item, lang, output_text=f"{item.output_text}\n\n{note}")
        return ExportPayload(text=text, used_fallback=True, reason=reason)

    text = build_export_text(item, lang, output_text=recomputed.output_text)
    return ExportPayload(text=text, used_fallback=False)
