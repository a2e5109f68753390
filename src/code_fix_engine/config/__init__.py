"""Configuration management and presets.

This module provides configuration management through:
- RuntimeConfig: Runtime configuration from env vars, files, presets and CLI flags
- OverlapPolicy: Enum for how overlapping replacement batches are handled
- ConfigError: Exception for configuration errors
"""

from code_fix_engine.config.exceptions import ConfigError
from code_fix_engine.config.runtime_config import OverlapPolicy, RuntimeConfig

__all__ = ["ConfigError", "OverlapPolicy", "RuntimeConfig"]
