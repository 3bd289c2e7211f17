"""Static configuration read from the environment."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

_TRUE_VALUES = {"1", "true", "yes", "on", "y", "t"}
_FALSE_VALUES = {"0", "false", "no", "off", "n", "f"}

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _get_env_flag(name: str, default: bool = False) -> bool:
    """Return a boolean read from an environment variable."""

    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    return default


def _get_env_choice(name: str, choices: set[str], default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    return normalized if normalized in choices else default


def _get_env_path(name: str, default: Path) -> Path:
    value = os.getenv(name)
    if not value or not value.strip():
        return default
    return Path(value.strip()).expanduser()


@dataclass(frozen=True)
class Settings:
    """Global parameters read from the environment."""

    REPORTS_DEBUG: bool = False
    REPORTS_ASSETS_DIR: Path = PROJECT_ROOT / "assets"
    REPORTS_LOG_DIR: Path = PROJECT_ROOT / "logs"
    REPORTS_DEFAULT_FORMAT: str = "pdf"


settings = Settings(
    REPORTS_DEBUG=_get_env_flag("REPORTS_DEBUG", default=False),
    REPORTS_ASSETS_DIR=_get_env_path("REPORTS_ASSETS_DIR", PROJECT_ROOT / "assets"),
    REPORTS_LOG_DIR=_get_env_path("REPORTS_LOG_DIR", PROJECT_ROOT / "logs"),
    REPORTS_DEFAULT_FORMAT=_get_env_choice("REPORTS_DEFAULT_FORMAT", {"pdf", "csv", "json"}, "pdf"),
)
