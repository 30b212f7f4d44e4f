# app/airlock.py
"""
Airlock - Single source of truth for analysis input validation and normalization.

Every analysis endpoint MUST pass through Airlock before calling the pipeline.
This ensures:
- One set of validation rules for /analyze and /parse
- Language and explanation-style aliases resolve to canonical enums
- Routes never see raw, unchecked values

Airlock does NOT:
- Log raw input (only input_length)
- Parse market text or run the engine
- Handle HTTP concerns (that's the route's job)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from footy.models import ExplanationStyle, Lang


# =============================================================================
# Constants
# =============================================================================

# Maximum input length (characters)
MAX_INPUT_LENGTH = 20000

# Language aliases accepted from clients
LANG_ALIASES = {
    "cn": Lang.ZH,
    "zh-cn": Lang.ZH,
    "zh_cn": Lang.ZH,
    "en-us": Lang.EN,
    "en_us": Lang.EN,
}


# =============================================================================
# Validation Errors
# =============================================================================


class AirlockError(Exception):
    """Base exception for Airlock validation errors."""

    def __init__(self, message: str, code: str):
        self.message = message
        self.code = code
        super().__init__(message)


class EmptyInputError(AirlockError):
    """Raised when input is empty or whitespace-only."""

    def __init__(self):
        super().__init__(
            message="Input cannot be empty or whitespace-only",
            code="EMPTY_INPUT",
        )


class InputTooLongError(AirlockError):
    """Raised when input exceeds maximum length."""

    def __init__(self, length: int, max_length: int):
        super().__init__(
            message=f"Input length {length} exceeds maximum of {max_length} characters",
            code="INPUT_TOO_LONG",
        )
        self.length = length
        self.max_length = max_length


class InvalidLangError(AirlockError):
    """Raised when the output language is not supported."""

    def __init__(self, lang: str):
        valid = ", ".join(item.value for item in Lang)
        super().__init__(
            message=f"Invalid lang '{lang}'. Must be one of: {valid}",
            code="INVALID_LANG",
        )
        self.lang = lang


class InvalidStyleError(AirlockError):
    """Raised when the explanation style is not supported."""

    def __init__(self, style: str):
        valid = ", ".join(s.value for s in ExplanationStyle)
        super().__init__(
            message=f"Invalid explanation style '{style}'. Must be one of: {valid}",
            code="INVALID_STYLE",
        )
        self.style = style


# =============================================================================
# Normalized Input
# =============================================================================


@dataclass(frozen=True)
class NormalizedInput:
    """
    Validated and normalized analysis input.

    All fields are guaranteed to be valid when this object exists.
    """
    input_text: str  # Trimmed, validated market text
    lang: Lang
    explanation_style: Optional[ExplanationStyle] = None  # None = keep config value

    @property
    def input_length(self) -> int:
        """Length of input text (safe to log)."""
        return len(self.input_text)


# =============================================================================
# Core Validation Functions
# =============================================================================


def _validate_input_text(text: Optional[str]) -> str:
    """
    Validate and normalize input text.

    Raises:
        EmptyInputError: If text is empty or whitespace-only
        InputTooLongError: If text exceeds max length
    """
    if text is None:
        raise EmptyInputError()

    trimmed = text.strip()

    if not trimmed:
        raise EmptyInputError()

    if len(trimmed) > MAX_INPUT_LENGTH:
        raise InputTooLongError(len(trimmed), MAX_INPUT_LENGTH)

    return trimmed


def normalize_lang(lang: Optional[str], default: Lang = Lang.ZH) -> Lang:
    """
    Normalize a language string to the canonical Lang enum.

    - Case-insensitive
    - Handles aliases (e.g., "zh-CN" -> ZH)
    - Defaults to ``default`` if None or blank

    Raises:
        InvalidLangError: If lang is not supported
    """
    if lang is None or not lang.strip():
        return default

    lang_lower = lang.lower().strip()
    if lang_lower in LANG_ALIASES:
        return LANG_ALIASES[lang_lower]

    try:
        return Lang(lang_lower)
    except ValueError:
        raise InvalidLangError(lang)


def normalize_style(style: Optional[str]) -> Optional[ExplanationStyle]:
    """Normalize an explanation style; None passes through."""
    if style is None or not style.strip():
        return None
    try:
        return ExplanationStyle(style.lower().strip())
    except ValueError:
        raise InvalidStyleError(style)


# =============================================================================
# Main Entry Point
# =============================================================================


def airlock_ingest(
    input_text: Optional[str],
    lang: Optional[str] = None,
    explanation_style: Optional[str] = None,
    default_lang: Lang = Lang.ZH,
) -> NormalizedInput:
    """
    Validate and normalize analysis input.

    Args:
        input_text: Raw pasted market text
        lang: Output language (zh/en, case-insensitive, optional)
        explanation_style: auto/short/long (optional)
        default_lang: Language used when ``lang`` is omitted

    Returns:
        NormalizedInput with validated, normalized values

    Raises:
        EmptyInputError: If input is empty or whitespace-only
        InputTooLongError: If input exceeds max length
        InvalidLangError: If lang is not supported
        InvalidStyleError: If explanation_style is not supported

    Example:
        try:
            normalized = airlock_ingest(request.text, lang=request.lang)
        except AirlockError as e:
            return error_response(e.code, e.message)
    """
    return NormalizedInput(
        input_text=_validate_input_text(input_text),
        lang=normalize_lang(lang, default_lang),
        explanation_style=normalize_style(explanation_style),
    )

