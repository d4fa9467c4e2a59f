"""Pytest configuration and fixtures."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

# Project root
PROJECT_ROOT = Path(__file__).parent.parent

# Add src to the Python path
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

FIXTURES_DIR = Path(__file__).parent / "fixtures"
FAKE_GEMINI = FIXTURES_DIR / "fake_gemini.py"

IS_WINDOWS = sys.platform == "win32"


@pytest.fixture
def project_root() -> Path:
    """Project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Empty working directory for a gemini run."""
    path = tmp_path / "workspace"
    path.mkdir()
    return path


@pytest.fixture
def fake_gemini_bin(tmp_path: Path) -> str:
    """Executable that behaves like the gemini CLI.

    A shell wrapper around tests/fixtures/fake_gemini.py, so it can be used
    as a single argv[0] the same way the real binary is.
    """
    if IS_WINDOWS:
        pytest.skip("fake gemini wrapper requires a POSIX shell")

    wrapper = tmp_path / "gemini"
    wrapper.write_text(
        f'#!/bin/sh\nexec "{sys.executable}" "{FAKE_GEMINI}" "$@"\n',
        encoding="utf-8",
    )
    os.chmod(wrapper, 0o755)
    return str(wrapper)
