"""Runtime configuration loading for CLI commands.

Configuration precedence: CLI flags > environment variables > config file or
preset > defaults.
"""

import logging
from pathlib import Path
from typing import Any

from code_fix_engine.config.exceptions import ConfigError
from code_fix_engine.config.runtime_config import PRESET_NAMES, RuntimeConfig

logger = logging.getLogger(__name__)


def load_runtime_config(
    config: str | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> tuple[RuntimeConfig, str | None]:
    """Build the runtime configuration for a CLI invocation.

    Args:
        config: Preset name (``balanced``, ``strict``, ``lenient``) or path to a
            YAML/TOML configuration file. None starts from defaults.
        cli_overrides: Values given as CLI flags; None entries are ignored.

    Returns:
        Tuple of the resolved configuration and the preset name, when a preset
        was selected.

    Raises:
        ConfigError: If the preset is unknown, the file is missing or invalid, or
            an override has an invalid value.
    """
    preset_name: str | None = None

    if config is None:
        base = RuntimeConfig.from_defaults()
    elif config.strip().lower() in PRESET_NAMES:
        preset_name = config.strip().lower()
        base = RuntimeConfig.from_preset(preset_name)
        logger.debug(f"Using configuration preset: {preset_name}")
    else:
        config_path = Path(config)
        if not config_path.is_file():
            raise ConfigError(
                f"'{config}' is neither a preset ({', '.join(sorted(PRESET_NAMES))}) "
                "nor an existing configuration file"
            )
        base = RuntimeConfig.from_file(config_path)
        logger.debug(f"Loaded configuration from {config_path}")

    runtime_config = RuntimeConfig.from_env(base)
    return runtime_config.merge_with_cli(**(cli_overrides or {})), preset_name
