# app/tests/test_airlock.py
"""
Tests for Airlock - input validation and normalization.

These tests verify:
1. Empty and oversized text is rejected with stable codes
2. Language aliases normalize to canonical values
3. Explanation styles validate and pass through when omitted
"""
import pytest

from app.airlock import (
    MAX_INPUT_LENGTH,
    AirlockError,
    EmptyInputError,
    InputTooLongError,
    InvalidLangError,
    InvalidStyleError,
    NormalizedInput,
    airlock_ingest,
    normalize_lang,
    normalize_style,
)
from footy.models import ExplanationStyle, Lang


class TestInputText:
    """Tests for text validation."""

    def test_valid_text_trimmed(self):
        result = airlock_ingest("  A vs B  \n")
        assert isinstance(result, NormalizedInput)
        assert result.input_text == "A vs B"
        assert result.input_length == 6

    @pytest.mark.parametrize("text", [None, "", "   ", "\n\t\n"])
    def test_empty_rejected(self, text):
        with pytest.raises(EmptyInputError) as exc_info:
            airlock_ingest(text)
        assert exc_info.value.code == "EMPTY_INPUT"

    def test_max_length_accepted(self):
        result = airlock_ingest("x" * MAX_INPUT_LENGTH)
        assert result.input_length == MAX_INPUT_LENGTH

    def test_too_long_rejected(self):
        with pytest.raises(InputTooLongError) as exc_info:
            airlock_ingest("x" * (MAX_INPUT_LENGTH + 1))
        assert exc_info.value.code == "INPUT_TOO_LONG"
        assert exc_info.value.length == MAX_INPUT_LENGTH + 1

    def test_errors_share_base_class(self):
        with pytest.raises(AirlockError):
            airlock_ingest("")


class TestLang:
    """Tests for language normalization."""

    def test_default_when_omitted(self):
        assert airlock_ingest("A vs B").lang == Lang.ZH
        assert airlock_ingest("A vs B", default_lang=Lang.EN).lang == Lang.EN
        assert normalize_lang("  ") == Lang.ZH

    @pytest.mark.parametrize(
        "raw,expected",
        [("zh", Lang.ZH), ("EN", Lang.EN), ("zh-CN", Lang.ZH), ("cn", Lang.ZH), ("en_US", Lang.EN)],
    )
    def test_aliases(self, raw, expected):
        assert normalize_lang(raw) == expected

    def test_invalid_lang(self):
        with pytest.raises(InvalidLangError) as exc_info:
            airlock_ingest("A vs B", lang="fr")
        assert exc_info.value.code == "INVALID_LANG"
        assert "Must be one of: zh, en" in exc_info.value.message


class TestStyle:
    """Tests for explanation style normalization."""

    def test_omitted_is_none(self):
        assert airlock_ingest("A vs B").explanation_style is None
        assert normalize_style("") is None

    def test_case_insensitive(self):
        assert normalize_style("SHORT") == ExplanationStyle.SHORT

    def test_invalid_style(self):
        with pytest.raises(InvalidStyleError) as exc_info:
            airlock_ingest("A vs B", explanation_style="tiny")
        assert exc_info.value.code == "INVALID_STYLE"

