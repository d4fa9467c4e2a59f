"""Utility modules.

Prompt preparation helpers.
"""

from .prompt_prefix import GEMINI_CONFIG_FILE, MAX_CONFIG_SIZE, prepare_prompt, read_prefix_file

__all__ = [
    "GEMINI_CONFIG_FILE",
    "MAX_CONFIG_SIZE",
    "prepare_prompt",
    "read_prefix_file",
]
