"""GEMINI.md prompt prefix.

A ``GEMINI.md`` file in the working directory is prepended to every prompt
as project-level instructions.
"""

from __future__ import annotations

import logging
from pathlib import Path

__all__ = [
    "GEMINI_CONFIG_FILE",
    "MAX_CONFIG_SIZE",
    "read_prefix_file",
    "prepare_prompt",
]

logger = logging.getLogger(__name__)

GEMINI_CONFIG_FILE = "GEMINI.md"
MAX_CONFIG_SIZE = 100_000  # bytes


def read_prefix_file(path: Path) -> str | None:
    """Read a prefix file, or return None if it should be ignored.

    A missing or whitespace-only file is ignored quietly; unreadable and
    oversized files log a warning. The content is returned untrimmed.
    """
    try:
        size = path.stat().st_size
    except FileNotFoundError:
        return None
    except OSError as e:
        logger.warning(f"Cannot access {path.name} configuration file: {e}")
        return None

    if size > MAX_CONFIG_SIZE:
        logger.warning(
            f"{path.name} file is too large ({size} bytes, max {MAX_CONFIG_SIZE} bytes). "
            "Configuration will be ignored."
        )
        return None

    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Failed to read {path.name} configuration file: {e}")
        return None

    if not content.strip():
        logger.debug(f"{path.name} file is empty and will be ignored.")
        return None

    return content


def prepare_prompt(prompt: str, cwd: Path | None = None) -> str:
    """Prepend ``GEMINI.md`` from ``cwd`` (default: current directory)."""
    base = cwd if cwd is not None else Path.cwd()
    prefix = read_prefix_file(base / GEMINI_CONFIG_FILE)
    if prefix is None:
        return prompt
    return f"{prefix}\n\n{prompt}"
