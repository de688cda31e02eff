"""Configuration management via .env file."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from mobidoc.mobi.segmenter import DUPLICATE_WINDOW, MAX_TITLE_LENGTH

log = logging.getLogger(__name__)


def _xdg_data_home() -> Path:
    return Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))


def _xdg_config_home() -> Path:
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


@dataclass
class AppConfig:
    # Paths
    data_dir: Path = field(default_factory=lambda: _xdg_data_home() / "mobidoc")
    config_dir: Path = field(default_factory=lambda: _xdg_config_home() / "mobidoc")

    # Chapter segmentation
    duplicate_window: int = DUPLICATE_WINDOW  # chars between distinct headings
    max_title_length: int = MAX_TITLE_LENGTH

    log_level: str = "INFO"
    log_path: Path = field(init=False)

    def __post_init__(self) -> None:
        self.log_level = _valid_log_level(self.log_level)
        self.log_path = self.data_dir / "mobidoc.log"
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.config_dir.mkdir(parents=True, exist_ok=True)


def _valid_log_level(level: str) -> str:
    level = level.upper()
    if not isinstance(logging.getLevelName(level), int):
        log.warning("Ignoring log level %r: unknown name", level)
        return "INFO"
    return level


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        log.warning("Ignoring %s=%r: not an integer", name, raw)
        return default


def load_config(env_path: Optional[Path] = None) -> AppConfig:
    """Load config from .env file. Searches CWD then config dir."""
    search_paths = [
        env_path,
        Path.cwd() / ".env",
        _xdg_config_home() / "mobidoc" / ".env",
        Path.home() / ".env",
    ]
    for p in search_paths:
        if p and p.exists():
            load_dotenv(p)
            break

    return AppConfig(
        duplicate_window=_env_int("MOBIDOC_DUPLICATE_WINDOW", DUPLICATE_WINDOW),
        max_title_length=_env_int("MOBIDOC_MAX_TITLE_LENGTH", MAX_TITLE_LENGTH),
        log_level=os.getenv("MOBIDOC_LOG_LEVEL", "INFO"),
    )
