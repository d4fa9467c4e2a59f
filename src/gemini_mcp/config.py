"""gemini-mcp environment configuration.

Environment variables:
    GEMINI_BIN: gemini executable path or name
        - default "gemini"

    GEMINI_DEFAULT_TIMEOUT: default timeout in seconds for a gemini run
        - 1-3600, default 600
        - unparsable or out-of-range values are ignored (default is used)

    GEMINI_FORCE_MODEL: model used when a request does not name one
        - empty/unset = gemini CLI default

    GEMINI_MCP_DEBUG: debug logging
        - true/1/yes/on = DEBUG level for the gemini_mcp logger
        - false/0/no/off = INFO level (default)

    GEMINI_MCP_LOG_FILE: log destination
        - empty/unset = stderr (default)
        - path = append logs to this file
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from .invokers.types import (
    DEFAULT_TIMEOUT_SECS,
    MAX_TIMEOUT_SECS,
    MIN_TIMEOUT_SECS,
)

__all__ = ["Config", "load_config", "get_config", "reload_config"]

logger = logging.getLogger(__name__)

DEFAULT_GEMINI_BIN = "gemini"


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """Parse a boolean environment variable."""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _parse_str(value: str | None) -> str | None:
    """Blank means unset."""
    if value is None or not value.strip():
        return None
    return value.strip()


def _parse_default_timeout(value: str | None) -> int:
    """Parse GEMINI_DEFAULT_TIMEOUT, falling back to the built-in default.

    Uses the same bounds as a request's timeout_secs, but an invalid value
    here never fails: it is logged and ignored.
    """
    if value is None or not value.strip():
        return DEFAULT_TIMEOUT_SECS
    try:
        timeout = int(value.strip())
    except ValueError:
        logger.warning(
            f"Ignoring GEMINI_DEFAULT_TIMEOUT={value!r}: not an integer, "
            f"using {DEFAULT_TIMEOUT_SECS}s"
        )
        return DEFAULT_TIMEOUT_SECS
    if not MIN_TIMEOUT_SECS <= timeout <= MAX_TIMEOUT_SECS:
        logger.warning(
            f"Ignoring GEMINI_DEFAULT_TIMEOUT={timeout}: must be between "
            f"{MIN_TIMEOUT_SECS} and {MAX_TIMEOUT_SECS}, using {DEFAULT_TIMEOUT_SECS}s"
        )
        return DEFAULT_TIMEOUT_SECS
    return timeout


@dataclass(frozen=True)
class Config:
    """gemini-mcp configuration.

    Attributes:
        gemini_bin: gemini executable
        default_timeout_secs: deadline when a request has no timeout_secs
        force_model: model when a request has no model
        debug: DEBUG logging
        log_file: log file path (None = stderr)
    """

    gemini_bin: str = DEFAULT_GEMINI_BIN
    default_timeout_secs: int = DEFAULT_TIMEOUT_SECS
    force_model: str | None = None
    debug: bool = False
    log_file: str | None = None


def load_config(environ: Mapping[str, str] | None = None) -> Config:
    """Load configuration from environment variables."""
    env = os.environ if environ is None else environ

    return Config(
        gemini_bin=_parse_str(env.get("GEMINI_BIN")) or DEFAULT_GEMINI_BIN,
        default_timeout_secs=_parse_default_timeout(env.get("GEMINI_DEFAULT_TIMEOUT")),
        force_model=_parse_str(env.get("GEMINI_FORCE_MODEL")),
        debug=_parse_bool(env.get("GEMINI_MCP_DEBUG"), default=False),
        log_file=_parse_str(env.get("GEMINI_MCP_LOG_FILE")),
    )


# Global configuration instance (loaded lazily)
_config: Config | None = None


def get_config() -> Config:
    """Return the process-wide configuration."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config() -> Config:
    """Re-read the environment (used by tests)."""
    global _config
    _config = load_config()
    return _config
