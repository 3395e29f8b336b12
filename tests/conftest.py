"""Test setup for latex_outline."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from latex_outline.schemas import OutlineSettings  # noqa: E402


@pytest.fixture
def settings() -> OutlineSettings:
    """Default settings with a fast, short cache poll."""
    return OutlineSettings(cache_poll_interval_s=0, cache_poll_attempts=2)


@pytest.fixture
def write_tex(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write a file under tmp_path and return its resolved path."""

    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path.resolve()

    return _write
