"""Runtime module for subprocess management and event streaming.

This module provides isolated process execution with concurrent stream
draining, bounded diagnostics, a hard deadline and reliable termination.
"""

from __future__ import annotations

from .buffers import BoundedTextBuffer, CappedList
from .deadline import run_with_deadline
from .line_reader import LineReader
from .process_runner import ProcessRunner, ProcessSpec

__all__ = [
    "BoundedTextBuffer",
    "CappedList",
    "LineReader",
    "ProcessRunner",
    "ProcessSpec",
    "run_with_deadline",
]
