"""Configuration schema — dataclasses for every config section."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Literal


class ConfigError(Exception):
    """Raised when config is malformed, unreadable, or holds invalid values."""


TriggerMode = Literal["manual", "all", "edit-command-only"]
NotifyLevel = Literal["debug", "info", "warning", "error"]

TRIGGER_MODES: tuple[str, ...] = ("manual", "all", "edit-command-only")

NOTIFY_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

DEFAULT_EXCLUDE_PATTERNS: List[str] = [
    r"\.tmp$",
    r"\.log$",
    r"\.swp$",
    r"\.swo$",
    r"\.DS_Store$",
    r"(^|/)\.git/",
    r"node_modules/",
    r"\.min\.js$",
    r"\.min\.css$",
]


@dataclass
class StageConfig:
    enabled: bool = True
    delay_ms: int = 500  # quiet period before a path is staged; 0 = immediate
    max_file_size: int = 10 * 1024 * 1024  # bytes, 0 = no limit
    trigger_mode: TriggerMode = "manual"


@dataclass
class FilterConfig:
    exclude_patterns: List[str] = field(
        default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS)
    )
    include_patterns: List[str] = field(default_factory=list)  # empty = all
    restrict_to_dirs: List[str] = field(default_factory=list)  # relative to repo root


@dataclass
class NotifyConfig:
    show_notifications: bool = True
    level: NotifyLevel = "info"


@dataclass
class GitConfig:
    executable: str = "git"
    timeout: float = 30.0  # seconds per subprocess


@dataclass
class AutoStageConfig:
    version: str = "1.0"
    stage: StageConfig = field(default_factory=StageConfig)
    filter: FilterConfig = field(default_factory=FilterConfig)
    notify: NotifyConfig = field(default_factory=NotifyConfig)
    git: GitConfig = field(default_factory=GitConfig)

    @property
    def notify_level(self) -> int:
        return NOTIFY_LEVELS.get(self.notify.level, logging.INFO)
