# app/tests/test_config.py
"""
Tests for configuration loading and validation.

These tests verify:
1. Defaults when no environment variables are set
2. Invalid values fall back to defaults with warnings
3. fail_fast raises ConfigurationError
4. The startup snapshot line
"""
import logging
import os
from unittest.mock import patch

import pytest

from app.config import (
    DEFAULT_HISTORY_MAX_ITEMS,
    DEFAULT_MAX_REQUEST_SIZE_BYTES,
    SERVICE_NAME,
    ConfigurationError,
    load_config,
    log_config_snapshot,
)
from footy import __version__
from footy.models import Lang


class TestDefaults:
    """Tests for default configuration."""

    def test_defaults_without_env(self):
        """Empty environment yields documented defaults."""
        with patch.dict(os.environ, {}, clear=True):
            config = load_config()

        assert config.service_name == SERVICE_NAME
        assert config.service_version == __version__
        assert config.environment == "development"
        assert config.max_request_size_bytes == DEFAULT_MAX_REQUEST_SIZE_BYTES
        assert config.history_max_items == DEFAULT_HISTORY_MAX_ITEMS
        assert config.default_lang == Lang.ZH
        assert config.hard_rule_default is False
        assert config.warnings == []

    def test_environment_read(self):
        with patch.dict(os.environ, {"FOOTY_ENVIRONMENT": "production"}, clear=True):
            config = load_config()
        assert config.environment == "production"


class TestValidation:
    """Tests for per-variable validation."""

    def test_valid_overrides(self):
        env = {
            "MAX_REQUEST_SIZE_BYTES": "4096",
            "HISTORY_MAX_ITEMS": "5",
            "FOOTY_DEFAULT_LANG": "EN",
            "FOOTY_HARD_RULE_DEFAULT": "yes",
        }
        with patch.dict(os.environ, env, clear=True):
            config = load_config()

        assert config.max_request_size_bytes == 4096
        assert config.history_max_items == 5
        assert config.default_lang == Lang.EN
        assert config.hard_rule_default is True
        assert config.warnings == []

    def test_non_integer_falls_back(self):
        with patch.dict(os.environ, {"MAX_REQUEST_SIZE_BYTES": "lots"}, clear=True):
            config = load_config()

        assert config.max_request_size_bytes == DEFAULT_MAX_REQUEST_SIZE_BYTES
        assert len(config.warnings) == 1
        assert "not a valid integer" in config.warnings[0]

    def test_below_minimum_falls_back(self):
        with patch.dict(os.environ, {"HISTORY_MAX_ITEMS": "0"}, clear=True):
            config = load_config()

        assert config.history_max_items == DEFAULT_HISTORY_MAX_ITEMS
        assert "below minimum" in config.warnings[0]

    def test_invalid_lang_falls_back(self):
        with patch.dict(os.environ, {"FOOTY_DEFAULT_LANG": "fr"}, clear=True):
            config = load_config()

        assert config.default_lang == Lang.ZH
        assert "must be one of: zh, en" in config.warnings[0]

    def test_invalid_bool_falls_back(self):
        with patch.dict(os.environ, {"FOOTY_HARD_RULE_DEFAULT": "maybe"}, clear=True):
            config = load_config()

        assert config.hard_rule_default is False
        assert "not a valid boolean" in config.warnings[0]

    def test_warnings_logged(self, caplog):
        with patch.dict(os.environ, {"HISTORY_MAX_ITEMS": "abc"}, clear=True):
            with caplog.at_level(logging.WARNING, logger="app.config"):
                load_config()

        assert "[CONFIG] HISTORY_MAX_ITEMS='abc'" in caplog.text

    def test_fail_fast_raises(self):
        with patch.dict(os.environ, {"MAX_REQUEST_SIZE_BYTES": "10"}, clear=True):
            with pytest.raises(ConfigurationError) as exc_info:
                load_config(fail_fast=True)

        assert "MAX_REQUEST_SIZE_BYTES=10" in str(exc_info.value)


class TestSnapshot:
    """Tests for the startup config snapshot."""

    def test_snapshot_line(self):
        with patch.dict(os.environ, {"FOOTY_ENVIRONMENT": "test"}, clear=True):
            snapshot = log_config_snapshot(load_config())

        assert snapshot == (
            f"[STARTUP] service=footy-analyzer version={__version__} environment=test "
            f"max_request_size_bytes={DEFAULT_MAX_REQUEST_SIZE_BYTES} "
            f"history_max_items={DEFAULT_HISTORY_MAX_ITEMS} "
            "default_lang=zh hard_rule_default=False"
        )
