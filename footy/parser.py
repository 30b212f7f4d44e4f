# footy/parser.py
"""
Market-Text Parser

Turns pasted market text into ordered MatchInput records, one per
non-blank line that names a fixture as ``<home> vs <away>`` (or ``对``).

Each field is extracted independently; several label synonyms are tried
in a fixed order and the first match wins. Lines without a team
separator are dropped silently. Nothing here raises for messy input.
"""
from __future__ import annotations

import logging
import math
import re
import time
from typing import List, Optional, Sequence, Tuple

from footy.models import MatchInput, Triple

_logger = logging.getLogger(__name__)


# =============================================================================
# Label Synonyms (first match wins)
# =============================================================================

ODDS_LABELS: Tuple[Tuple[str, str, str], ...] = (
    ("成交价主", "平", "客"),
    ("成交价", "平", "客"),
    ("主", "平", "客"),
    ("主胜", "平", "客胜"),
)

VOLUME_LABELS: Tuple[Tuple[str, str, str], ...] = (
    ("交易量主", "平", "客"),
    ("量主", "平", "客"),
    ("主量", "平量", "客量"),
    ("Volume Home", "Draw", "Away"),
)

SHARE_LABELS: Tuple[Tuple[str, str, str], ...] = (
    ("占比主", "平", "客"),
    ("占比", "平", "客"),
    ("主占比", "平占比", "客占比"),
    ("Share Home", "Draw", "Away"),
)

PNL_LABELS: Tuple[Tuple[str, str, str], ...] = (
    ("盈亏主", "平", "客"),
    ("庄家盈亏主", "平", "客"),
    ("庄盈主", "平", "客"),
    ("主盈亏", "平盈亏", "客盈亏"),
    ("PnL Home", "Draw", "Away"),
)

HEAT_LABELS: Tuple[Tuple[str, str, str], ...] = (
    ("冷热主", "平", "客"),
    ("热度主", "平", "客"),
    ("主冷热", "平冷热", "客冷热"),
    ("Heat Home", "Draw", "Away"),
)

HANDICAP_ODDS_LABELS: Tuple[Tuple[str, str, str], ...] = (
    ("让胜", "让平", "让负"),
    ("让主", "让平", "让客"),
)


# =============================================================================
# Patterns
# =============================================================================

_NUM = r"([-+]?\d[\d,.]*%?)"
_SEP = r"\s*[|｜/\s]+"
_DECIMAL = r"([-+]?\d+(?:\.\d+)?)"

# Field labels that end the away-team name when preceded by whitespace
_FIELD_LOOKAHEAD = (
    r"成交价|交易量|占比|总交易量|盈亏|庄家盈亏|庄盈|冷热|热度|让球"
    r"|时间点?|T[:=]|快照|联赛|H_early|H_last|loss_pressure|snapshots?[:=]|league[:=]"
    r"|TotalVolume|(?:Volume|Share|PnL|Heat)\s+Home"
    r"|主胜?\s*[:：]?\s*[-+]?\d"
)

TEAMS_PATTERN = re.compile(
    rf"^(.*?)\s*(?:vs|对)\s*(.*?)(?=\s+(?:{_FIELD_LOOKAHEAD})|$)",
    re.IGNORECASE,
)
TOTAL_VOLUME_PATTERN = re.compile(r"(?:总交易量|TotalVolume)[:：]?\s*([\d,，.]+)")
HANDICAP_LINE_PATTERN = re.compile(rf"让球\s*{_DECIMAL}")
# The T of "H_last=" is not a time point; CJK labels and digits may precede T
TIME_POINT_PATTERN = re.compile(r"(?<![A-Za-z_])T[:=]\s*(\S+)", re.IGNORECASE)
SNAPSHOT_PATTERN = re.compile(r"(?:快照|snapshots?)[:=]\s*(\d+)", re.IGNORECASE)
LEAGUE_PATTERN = re.compile(r"(?:联赛|league)[:=]\s*([^\s|]+)", re.IGNORECASE)
H_EARLY_PATTERN = re.compile(rf"H_early[:=]\s*{_DECIMAL}", re.IGNORECASE)
H_LAST_PATTERN = re.compile(rf"H_last[:=]\s*{_DECIMAL}", re.IGNORECASE)
LOSS_PRESSURE_PATTERN = re.compile(rf"loss_pressure[:=]\s*{_DECIMAL}", re.IGNORECASE)


def _triple_pattern(labels: Tuple[str, str, str]) -> "re.Pattern[str]":
    l0, l1, l2 = (re.escape(label) for label in labels)
    return re.compile(
        rf"{l0}[:：]?\s*{_NUM}{_SEP}{l1}[:：]?\s*{_NUM}{_SEP}{l2}[:：]?\s*{_NUM}",
        re.IGNORECASE,
    )


_TRIPLE_PATTERNS = {
    labels: _triple_pattern(labels)
    for group in (
        ODDS_LABELS,
        VOLUME_LABELS,
        SHARE_LABELS,
        PNL_LABELS,
        HEAT_LABELS,
        HANDICAP_ODDS_LABELS,
    )
    for labels in group
}


# =============================================================================
# Field Extraction
# =============================================================================


def to_number(text: Optional[str]) -> Optional[float]:
    """
    Normalize a numeric token.

    Strips thousands separators (``,`` ``，``) and ``%``. Empty text and
    the placeholder ``—`` mean absent. Anything unparseable or
    non-finite is absent as well; this never raises.
    """
    if not text:
        return None
    cleaned = re.sub(r"[,，%]", "", text).strip()
    if not cleaned or cleaned == "—":
        return None
    try:
        value = float(cleaned)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def parse_triple(line: str, labels: Tuple[str, str, str]) -> Optional[Triple]:
    """Extract a Triple following three ordered labels, or None."""
    pattern = _TRIPLE_PATTERNS.get(labels) or _triple_pattern(labels)
    m = pattern.search(line)
    if not m:
        return None
    return Triple(
        home=to_number(m.group(1)),
        draw=to_number(m.group(2)),
        away=to_number(m.group(3)),
    )


def parse_first_triple(
    line: str, synonyms: Sequence[Tuple[str, str, str]]
) -> Optional[Triple]:
    """Try each label set in order; the first that matches wins."""
    for labels in synonyms:
        triple = parse_triple(line, labels)
        if triple is not None:
            return triple
    return None


def parse_teams(line: str) -> Optional[Tuple[str, str]]:
    """Return (home, away) team names, or None without a separator."""
    m = TEAMS_PATTERN.match(line)
    if not m:
        return None
    return m.group(1).strip(), m.group(2).strip()


def _search(pattern: "re.Pattern[str]", line: str) -> Optional[str]:
    m = pattern.search(line)
    return m.group(1) if m else None


def _to_int(text: Optional[str]) -> Optional[int]:
    value = to_number(text)
    return int(value) if value is not None else None


def parse_line(line: str, index: int, stamp_ms: Optional[int] = None) -> Optional[MatchInput]:
    """
    Parse one stripped, non-empty line.

    Args:
        line: The raw line (already stripped)
        index: Position among non-empty lines, used in the record id
        stamp_ms: Epoch milliseconds for the id (defaults to now)

    Returns:
        MatchInput, or None when the line has no team separator
    """
    teams = parse_teams(line)
    if teams is None:
        return None
    home_team, away_team = teams
    if stamp_ms is None:
        stamp_ms = int(time.time() * 1000)

    return MatchInput(
        id=f"m_{stamp_ms}_{index}",
        raw_line=line,
        home_team=home_team,
        away_team=away_team,
        market_odds=parse_first_triple(line, ODDS_LABELS),
        volume=parse_first_triple(line, VOLUME_LABELS),
        share=parse_first_triple(line, SHARE_LABELS),
        total_volume=to_number(_search(TOTAL_VOLUME_PATTERN, line)),
        pnl=parse_first_triple(line, PNL_LABELS),
        heat=parse_first_triple(line, HEAT_LABELS),
        handicap_line=to_number(_search(HANDICAP_LINE_PATTERN, line)),
        handicap_odds=parse_first_triple(line, HANDICAP_ODDS_LABELS),
        time_point=_search(TIME_POINT_PATTERN, line),
        snapshot_count=_to_int(_search(SNAPSHOT_PATTERN, line)),
        league=_search(LEAGUE_PATTERN, line),
        h_early=to_number(_search(H_EARLY_PATTERN, line)),
        h_last=to_number(_search(H_LAST_PATTERN, line)),
        loss_pressure=to_number(_search(LOSS_PRESSURE_PATTERN, line)),
    )


def parse_input(raw: str) -> List[MatchInput]:
    """
    Parse pasted market text into fixtures, preserving line order.

    Blank lines are skipped before indexing, so ids count non-empty
    lines only. Lines without a team separator are dropped.
    """
    lines = [line.strip() for line in raw.split("\n")]
    lines = [line for line in lines if line]
    stamp_ms = int(time.time() * 1000)

    matches: List[MatchInput] = []
    for idx, line in enumerate(lines):
        match = parse_line(line, idx, stamp_ms)
        if match is not None:
            matches.append(match)

    dropped = len(lines) - len(matches)
    if dropped:
        _logger.debug(f"[PARSE] dropped {dropped} of {len(lines)} lines without a team separator")
    return matches
