# app/config.py
"""
Service configuration loaded from the environment at startup.

Every variable is OPTIONAL. Invalid values fall back to defaults and
are collected as warnings (logged as [CONFIG] ...); with fail_fast the
first invalid value raises ConfigurationError instead.
"""
import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from footy import __version__ as footy_version
from footy.models import Lang

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

SERVICE_NAME = "footy-analyzer"
SERVICE_VERSION = footy_version

DEFAULT_MAX_REQUEST_SIZE_BYTES = 262_144  # 256KB
MIN_REQUEST_SIZE_BYTES = 1024  # 1KB minimum

DEFAULT_HISTORY_MAX_ITEMS = 100
MIN_HISTORY_MAX_ITEMS = 1

DEFAULT_LANG = Lang.ZH


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(Exception):
    """Raised when configuration is invalid and fail_fast is set."""

    pass


# =============================================================================
# Configuration Dataclass
# =============================================================================


@dataclass
class AppConfig:
    """Application configuration loaded from environment."""

    # Service info
    service_name: str = SERVICE_NAME
    service_version: str = SERVICE_VERSION
    environment: str = "development"

    # Request limits
    max_request_size_bytes: int = DEFAULT_MAX_REQUEST_SIZE_BYTES

    # History store capacity (oldest evicted beyond this)
    history_max_items: int = DEFAULT_HISTORY_MAX_ITEMS

    # Analysis defaults applied when a request omits them
    default_lang: Lang = DEFAULT_LANG
    hard_rule_default: bool = False

    # Warnings collected during config load
    warnings: list = field(default_factory=list)


# =============================================================================
# Configuration Loading
# =============================================================================


def _parse_int_env(
    name: str, default: int, min_value: Optional[int] = None
) -> tuple[int, Optional[str]]:
    """
    Parse an integer environment variable with validation.

    Returns (value, warning_message).
    On invalid input, returns default with a warning.
    """
    raw = os.environ.get(name)
    if raw is None:
        return default, None

    try:
        value = int(raw)
    except ValueError:
        warning = f"{name}='{raw}' is not a valid integer; using default {default}"
        return default, warning

    if min_value is not None and value < min_value:
        warning = f"{name}={value} is below minimum {min_value}; using default {default}"
        return default, warning

    return value, None


def _parse_bool_env(name: str, default: bool = False) -> tuple[bool, Optional[str]]:
    """Parse a boolean environment variable. Returns (value, warning_message)."""
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default, None
    lowered = raw.strip().lower()
    if lowered in ("true", "1", "yes", "on"):
        return True, None
    if lowered in ("false", "0", "no", "off"):
        return False, None
    return default, f"{name}='{raw}' is not a valid boolean; using default {default}"


def _parse_lang_env(name: str, default: Lang) -> tuple[Lang, Optional[str]]:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default, None
    try:
        return Lang(raw.strip().lower()), None
    except ValueError:
        valid = ", ".join(lang.value for lang in Lang)
        return default, f"{name}='{raw}' must be one of: {valid}; using default {default.value}"


def load_config(fail_fast: bool = False) -> AppConfig:
    """
    Load and validate application configuration from environment.

    Args:
        fail_fast: If True, raise ConfigurationError on the first invalid value.
                   If False, collect warnings and continue with defaults.

    Returns:
        AppConfig instance with validated configuration.

    Raises:
        ConfigurationError: If a value is invalid and fail_fast is True.
    """
    warnings = []

    environment = os.environ.get("FOOTY_ENVIRONMENT", "development")

    max_request_size, size_warning = _parse_int_env(
        "MAX_REQUEST_SIZE_BYTES",
        DEFAULT_MAX_REQUEST_SIZE_BYTES,
        min_value=MIN_REQUEST_SIZE_BYTES,
    )
    history_max_items, history_warning = _parse_int_env(
        "HISTORY_MAX_ITEMS",
        DEFAULT_HISTORY_MAX_ITEMS,
        min_value=MIN_HISTORY_MAX_ITEMS,
    )
    default_lang, lang_warning = _parse_lang_env("FOOTY_DEFAULT_LANG", DEFAULT_LANG)
    hard_rule_default, hard_rule_warning = _parse_bool_env("FOOTY_HARD_RULE_DEFAULT", False)

    for warning in (size_warning, history_warning, lang_warning, hard_rule_warning):
        if warning:
            warnings.append(warning)

    if warnings and fail_fast:
        raise ConfigurationError(warnings[0])

    # Log warnings
    for warning in warnings:
        logger.warning(f"[CONFIG] {warning}")

    return AppConfig(
        environment=environment,
        max_request_size_bytes=max_request_size,
        history_max_items=history_max_items,
        default_lang=default_lang,
        hard_rule_default=hard_rule_default,
        warnings=warnings,
    )


def log_config_snapshot(config: AppConfig) -> str:
    """
    Generate and log a configuration snapshot.

    Returns the snapshot string for testing purposes.
    """
    snapshot = (
        f"[STARTUP] service={config.service_name} "
        f"version={config.service_version} "
        f"environment={config.environment} "
        f"max_request_size_bytes={config.max_request_size_bytes} "
        f"history_max_items={config.history_max_items} "
        f"default_lang={config.default_lang.value} "
        f"hard_rule_default={config.hard_rule_default}"
    )
    logger.info(snapshot)
    return snapshot
