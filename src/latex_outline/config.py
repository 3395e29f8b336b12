"""Local configuration for latex_outline."""

from __future__ import annotations

import os

from latex_outline.schemas import OutlineSettings
from latex_outline.schemas.settings import DEFAULT_SECTIONS

DEFAULT_CACHE_POLL_INTERVAL_S = 0.1
DEFAULT_CACHE_POLL_ATTEMPTS = 20

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name)
    if raw is None:
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUE_VALUES


LATEX_OUTLINE_SECTIONS = _env_list("LATEX_OUTLINE_SECTIONS", DEFAULT_SECTIONS)
LATEX_OUTLINE_COMMANDS = _env_list("LATEX_OUTLINE_COMMANDS", [])
LATEX_OUTLINE_ENVIRONMENTS = _env_list("LATEX_OUTLINE_ENVIRONMENTS", [])
LATEX_OUTLINE_TEX_DIRS = _env_list("LATEX_OUTLINE_TEX_DIRS", [])
LATEX_OUTLINE_FLOATS_ENABLED = _env_bool("LATEX_OUTLINE_FLOATS_ENABLED", True)
LATEX_OUTLINE_FLOAT_CAPTIONS_ENABLED = _env_bool("LATEX_OUTLINE_FLOAT_CAPTIONS_ENABLED", True)
LATEX_OUTLINE_FLOAT_NUMBERS_ENABLED = _env_bool("LATEX_OUTLINE_FLOAT_NUMBERS_ENABLED", True)
LATEX_OUTLINE_SECTION_NUMBERS_ENABLED = _env_bool("LATEX_OUTLINE_SECTION_NUMBERS_ENABLED", True)
LATEX_OUTLINE_CACHE_POLL_INTERVAL_S = float(
    os.getenv("LATEX_OUTLINE_CACHE_POLL_INTERVAL_S", str(DEFAULT_CACHE_POLL_INTERVAL_S))
)
LATEX_OUTLINE_CACHE_POLL_ATTEMPTS = int(
    os.getenv("LATEX_OUTLINE_CACHE_POLL_ATTEMPTS", str(DEFAULT_CACHE_POLL_ATTEMPTS))
)


def load_settings() -> OutlineSettings:
    """Build a settings snapshot from the module-level configuration values."""
    return OutlineSettings(
        sections=LATEX_OUTLINE_SECTIONS,
        commands=LATEX_OUTLINE_COMMANDS,
        environments=LATEX_OUTLINE_ENVIRONMENTS,
        floats_enabled=LATEX_OUTLINE_FLOATS_ENABLED,
        float_captions_enabled=LATEX_OUTLINE_FLOAT_CAPTIONS_ENABLED,
        float_numbers_enabled=LATEX_OUTLINE_FLOAT_NUMBERS_ENABLED,
        section_numbers_enabled=LATEX_OUTLINE_SECTION_NUMBERS_ENABLED,
        tex_dirs=LATEX_OUTLINE_TEX_DIRS,
        cache_poll_interval_s=LATEX_OUTLINE_CACHE_POLL_INTERVAL_S,
        cache_poll_attempts=LATEX_OUTLINE_CACHE_POLL_ATTEMPTS,
    )
