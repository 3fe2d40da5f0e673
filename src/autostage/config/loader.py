"""Load and merge configuration from .autostage.toml / .autostage.yaml and env vars."""

from __future__ import annotations

import dataclasses
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import yaml

from autostage.config.schema import (
    NOTIFY_LEVELS,
    TRIGGER_MODES,
    AutoStageConfig,
    ConfigError,
    FilterConfig,
    GitConfig,
    NotifyConfig,
    StageConfig,
)
from autostage.policy.patterns import compile_patterns

CONFIG_FILENAMES = (".autostage.toml", ".autostage.yaml", ".autostage.yml")


def find_config_file(repo_root: Path, override: Optional[str] = None) -> Optional[Path]:
    """Locate the config file. *override* takes precedence."""
    if override:
        p = Path(override)
        if not p.is_file():
            raise ConfigError(f"Config file not found: {override}")
        return p
    for name in CONFIG_FILENAMES:
        candidate = repo_root / name
        if candidate.is_file():
            return candidate
    return None


def _parse_file(path: Path) -> Dict[str, Any]:
    try:
        if path.suffix in (".yaml", ".yml"):
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        else:
            with open(path, "rb") as f:
                data = tomllib.load(f)
    except (OSError, yaml.YAMLError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Failed to parse {path}: top level must be a table")
    return data


def _build_section(data: Dict[str, Any], cls: type, section: str):
    """Build a dataclass from a config section dict, ignoring unknown keys."""
    raw = data.get(section) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Section [{section}] must be a table")
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in raw.items() if k in valid_fields}
    return cls(**filtered)


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _merge_env_overrides(cfg: AutoStageConfig) -> None:
    """Apply AUTOSTAGE_* environment variable overrides. Bad values are ignored."""
    if val := os.environ.get("AUTOSTAGE_ENABLED"):
        if val.lower() in ("1", "true", "yes", "on"):
            cfg.stage.enabled = True
        elif val.lower() in ("0", "false", "no", "off"):
            cfg.stage.enabled = False
    if val := os.environ.get("AUTOSTAGE_DELAY_MS"):
        try:
            delay = int(val)
        except ValueError:
            delay = -1
        if delay >= 0:
            cfg.stage.delay_ms = delay
    if val := os.environ.get("AUTOSTAGE_MAX_FILE_SIZE"):
        try:
            size = int(val)
        except ValueError:
            size = -1
        if size >= 0:
            cfg.stage.max_file_size = size
    if val := os.environ.get("AUTOSTAGE_TRIGGER_MODE"):
        if val in TRIGGER_MODES:
            cfg.stage.trigger_mode = val  # type: ignore[assignment]
    if val := os.environ.get("AUTOSTAGE_EXCLUDE"):
        cfg.filter.exclude_patterns.extend(_split_list(val))


def validate(cfg: AutoStageConfig) -> AutoStageConfig:
    """Check value ranges and compile patterns. Raises ConfigError on the first bad value."""
    stage = cfg.stage
    if not isinstance(stage.enabled, bool):
        raise ConfigError("stage.enabled must be true or false")
    if isinstance(stage.delay_ms, bool) or not isinstance(stage.delay_ms, int) or stage.delay_ms < 0:
        raise ConfigError(f"stage.delay_ms must be a non-negative integer, got {stage.delay_ms!r}")
    if (
        isinstance(stage.max_file_size, bool)
        or not isinstance(stage.max_file_size, int)
        or stage.max_file_size < 0
    ):
        raise ConfigError(
            f"stage.max_file_size must be a non-negative integer, got {stage.max_file_size!r}"
        )
    if stage.trigger_mode not in TRIGGER_MODES:
        raise ConfigError(
            f"stage.trigger_mode must be one of {', '.join(TRIGGER_MODES)}, got {stage.trigger_mode!r}"
        )
    for name in ("exclude_patterns", "include_patterns", "restrict_to_dirs"):
        value = getattr(cfg.filter, name)
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ConfigError(f"filter.{name} must be a list of strings")
    for name in ("exclude_patterns", "include_patterns"):
        try:
            compile_patterns(getattr(cfg.filter, name))
        except ConfigError as exc:
            raise ConfigError(f"filter.{name}: {exc}") from exc
    if cfg.notify.level not in NOTIFY_LEVELS:
        raise ConfigError(
            f"notify.level must be one of {', '.join(NOTIFY_LEVELS)}, got {cfg.notify.level!r}"
        )
    if not isinstance(cfg.git.timeout, (int, float)) or cfg.git.timeout <= 0:
        raise ConfigError(f"git.timeout must be a positive number, got {cfg.git.timeout!r}")
    return cfg


def load_config(
    repo_root: Path,
    config_override: Optional[str] = None,
) -> AutoStageConfig:
    """Load, validate, and return an AutoStageConfig."""
    config_path = find_config_file(repo_root, config_override)

    if config_path is None:
        cfg = AutoStageConfig()
    else:
        raw = _parse_file(config_path)
        try:
            cfg = AutoStageConfig(
                version=str(raw.get("version", "1.0")),
                stage=_build_section(raw, StageConfig, "stage"),
                filter=_build_section(raw, FilterConfig, "filter"),
                notify=_build_section(raw, NotifyConfig, "notify"),
                git=_build_section(raw, GitConfig, "git"),
            )
        except TypeError as exc:
            raise ConfigError(f"Invalid configuration in {config_path}: {exc}") from exc

    _merge_env_overrides(cfg)
    return validate(cfg)
