"""Configuration loading, schema, and defaults."""

from autostage.config.loader import load_config, validate
from autostage.config.schema import AutoStageConfig, ConfigError, TriggerMode

__all__ = [
    "AutoStageConfig",
    "ConfigError",
    "TriggerMode",
    "load_config",
    "validate",
]
