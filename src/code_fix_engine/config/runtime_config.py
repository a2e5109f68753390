"""Runtime configuration management with environment variable and file support.

This module provides the RuntimeConfig system for managing the engine's thresholds
and logging settings from multiple sources: defaults, presets, config files
(YAML/TOML), environment variables, and CLI flags. Configuration precedence:
CLI flags > env vars > config file > defaults.
"""

import logging
import os
import sys
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any

from code_fix_engine.config.exceptions import ConfigError
from code_fix_engine.constants import (
    DUPLICATE_SIMILARITY_THRESHOLD,
    ERRORS_MIN_CONTENT_LENGTH,
    MATCH_SIMILARITY_THRESHOLD,
    MAX_LINE_NUMBER,
    RUNAWAY_RATIO,
    VALID_LOG_LEVELS,
    WHOLE_FILE_RATIO,
)

logger = logging.getLogger(__name__)

# Available configuration presets
PRESET_NAMES = {"balanced", "strict", "lenient"}

ENV_PREFIX = "CFE_"


class OverlapPolicy(str, Enum):
    """How a batch of overlapping replacements is handled before applying.

    Attributes:
        MERGE: Merge overlapping replacements (union of bounds, latest code wins).
        REJECT: Refuse the whole batch and leave the file unchanged.
    """

    MERGE = "merge"
    REJECT = "reject"

    def __str__(self) -> str:
        """Return string representation of policy."""
        return self.value


@dataclass(frozen=True, slots=True)
class RuntimeConfig:
    """Runtime configuration for the code fix engine.

    This immutable configuration dataclass manages engine settings from multiple
    sources with proper precedence. All fields are validated during initialization.

    Attributes:
        overlap_policy: What to do with overlapping replacements (merge or reject).
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to log file. If None, logs to stderr only.
        duplicate_similarity_threshold: Word-overlap ratio above which two feedback
            sections of different types are collapsed into one.
        errors_min_length: Minimum length of an errors section without code or error
            vocabulary for it to be kept.
        match_similarity_threshold: Minimum similarity for similarity-based range
            discovery to accept a line.
        max_line_number: Largest number read as a space-padded line-number prefix.
        runaway_ratio: Replacement/selection line ratio above which output is suspect.
        whole_file_ratio: Share of the file a suspect replacement must cover to be
            treated as an echoed whole file.

    Example:
        >>> config = RuntimeConfig.from_env()
        >>> config = config.merge_with_cli(overlap_policy=OverlapPolicy.REJECT)
        >>> print(f"Overlaps: {config.overlap_policy}")
        Overlaps: reject
    """

    overlap_policy: OverlapPolicy
    log_level: str
    log_file: str | None
    duplicate_similarity_threshold: float = DUPLICATE_SIMILARITY_THRESHOLD
    errors_min_length: int = ERRORS_MIN_CONTENT_LENGTH
    match_similarity_threshold: float = MATCH_SIMILARITY_THRESHOLD
    max_line_number: int = MAX_LINE_NUMBER
    runaway_ratio: float = RUNAWAY_RATIO
    whole_file_ratio: float = WHOLE_FILE_RATIO

    def __post_init__(self) -> None:
        """Validate configuration after initialization.

        Raises:
            ConfigError: If any configuration value is invalid.
        """
        if self.log_level not in VALID_LOG_LEVELS:
            raise ConfigError(
                f"Invalid log level: {self.log_level}. Must be one of {sorted(VALID_LOG_LEVELS)}"
            )

        if not isinstance(self.overlap_policy, OverlapPolicy):
            raise ConfigError(
                f"overlap_policy must be OverlapPolicy enum, got "
                f"{type(self.overlap_policy).__name__}"
            )

        for name in (
            "duplicate_similarity_threshold",
            "match_similarity_threshold",
            "whole_file_ratio",
        ):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigError(f"{name} must be in [0.0, 1.0], got {value}")

        if self.errors_min_length < 0:
            raise ConfigError(f"errors_min_length must be >= 0, got {self.errors_min_length}")

        if self.max_line_number < 1:
            raise ConfigError(f"max_line_number must be >= 1, got {self.max_line_number}")

        if self.runaway_ratio < 1.0:
            raise ConfigError(f"runaway_ratio must be >= 1.0, got {self.runaway_ratio}")
        if self.runaway_ratio > 20.0:
            logger.warning(
                f"runaway_ratio={self.runaway_ratio} is very high. "
                f"Echoed files will rarely be detected."
            )

    @classmethod
    def from_defaults(cls) -> "RuntimeConfig":
        """Create configuration with default values.

        Returns:
            RuntimeConfig with safe default values.

        Example:
            >>> config = RuntimeConfig.from_defaults()
            >>> assert config.overlap_policy == OverlapPolicy.MERGE
            >>> assert config.runaway_ratio == 3.0
        """
        return cls(
            overlap_policy=OverlapPolicy.MERGE,
            log_level="INFO",
            log_file=None,
        )

    @classmethod
    def from_balanced(cls) -> "RuntimeConfig":
        """Create balanced configuration (same as defaults)."""
        return cls.from_defaults()

    @classmethod
    def from_strict(cls) -> "RuntimeConfig":
        """Create strict configuration that prefers dropping doubtful fixes.

        Overlapping batches are rejected instead of merged, and oversized model output
        is flagged sooner.

        Returns:
            RuntimeConfig with strict settings.

        Example:
            >>> config = RuntimeConfig.from_strict()
            >>> assert config.overlap_policy == OverlapPolicy.REJECT
        """
        return cls(
            overlap_policy=OverlapPolicy.REJECT,
            log_level="INFO",
            log_file=None,
            duplicate_similarity_threshold=0.7,
            match_similarity_threshold=0.6,
            runaway_ratio=2.0,
            whole_file_ratio=0.5,
        )

    @classmethod
    def from_lenient(cls) -> "RuntimeConfig":
        """Create lenient configuration that keeps as much model output as possible.

        Returns:
            RuntimeConfig with lenient settings.
        """
        return cls(
            overlap_policy=OverlapPolicy.MERGE,
            log_level="WARNING",
            log_file=None,
            duplicate_similarity_threshold=0.9,
            errors_min_length=10,
            match_similarity_threshold=0.4,
            runaway_ratio=5.0,
            whole_file_ratio=0.9,
        )

    @classmethod
    def from_preset(cls, name: str) -> "RuntimeConfig":
        """Create configuration from a preset name.

        Args:
            name: One of ``balanced``, ``strict`` or ``lenient`` (case-insensitive).

        Raises:
            ConfigError: If the preset is unknown.
        """
        preset = name.strip().lower()
        if preset not in PRESET_NAMES:
            raise ConfigError(f"Unknown preset '{name}'. Must be one of {sorted(PRESET_NAMES)}")
        factory = getattr(cls, f"from_{preset}")
        config: RuntimeConfig = factory()
        return config

    @classmethod
    def from_env(cls, base: "RuntimeConfig | None" = None) -> "RuntimeConfig":
        """Create configuration from environment variables.

        Loads configuration from environment variables with CFE_ prefix:
        - CFE_OVERLAP_POLICY: Overlap policy (default: "merge")
        - CFE_LOG_LEVEL: Logging level (default: "INFO")
        - CFE_LOG_FILE: Log file path (default: None)
        - CFE_DUPLICATE_SIMILARITY: Section duplicate threshold (default: "0.8")
        - CFE_ERRORS_MIN_LENGTH: Minimum errors section length (default: "30")
        - CFE_MATCH_SIMILARITY: Range discovery threshold (default: "0.5")
        - CFE_MAX_LINE_NUMBER: Largest padded line-number prefix (default: "10000")
        - CFE_RUNAWAY_RATIO: Suspect output ratio (default: "3.0")
        - CFE_WHOLE_FILE_RATIO: Echoed file ratio (default: "0.7")

        Args:
            base: Configuration supplying values for unset variables. Defaults to
                ``from_defaults()``.

        Returns:
            RuntimeConfig loaded from environment variables.

        Raises:
            ConfigError: If environment variable has invalid value.

        Example:
            >>> os.environ["CFE_OVERLAP_POLICY"] = "reject"
            >>> config = RuntimeConfig.from_env()
            >>> assert config.overlap_policy == OverlapPolicy.REJECT
        """
        defaults = base or cls.from_defaults()

        policy_str = os.getenv(f"{ENV_PREFIX}OVERLAP_POLICY", defaults.overlap_policy.value).lower()
        try:
            overlap_policy = OverlapPolicy(policy_str)
        except ValueError as e:
            valid_policies = [p.value for p in OverlapPolicy]
            raise ConfigError(
                f"Invalid {ENV_PREFIX}OVERLAP_POLICY='{policy_str}'. "
                f"Must be one of {valid_policies}"
            ) from e

        def parse_int(env_var: str, default: int, min_value: int = 0) -> int:
            """Parse integer environment variable."""
            value_str = os.getenv(env_var, str(default))
            try:
                value = int(value_str)
            except ValueError as e:
                raise ConfigError(f"Invalid {env_var}='{value_str}'. Must be an integer") from e
            if value < min_value:
                raise ConfigError(f"{env_var}={value} must be >= {min_value}")
            return value

        def parse_float(env_var: str, default: float) -> float:
            """Parse float environment variable."""
            value_str = os.getenv(env_var, str(default))
            try:
                return float(value_str)
            except ValueError as e:
                raise ConfigError(f"Invalid {env_var}='{value_str}'. Must be a number") from e

        return cls(
            overlap_policy=overlap_policy,
            log_level=os.getenv(f"{ENV_PREFIX}LOG_LEVEL", defaults.log_level).upper(),
            log_file=os.getenv(f"{ENV_PREFIX}LOG_FILE") or defaults.log_file,
            duplicate_similarity_threshold=parse_float(
                f"{ENV_PREFIX}DUPLICATE_SIMILARITY", defaults.duplicate_similarity_threshold
            ),
            errors_min_length=parse_int(
                f"{ENV_PREFIX}ERRORS_MIN_LENGTH", defaults.errors_min_length
            ),
            match_similarity_threshold=parse_float(
                f"{ENV_PREFIX}MATCH_SIMILARITY", defaults.match_similarity_threshold
            ),
            max_line_number=parse_int(
                f"{ENV_PREFIX}MAX_LINE_NUMBER", defaults.max_line_number, min_value=1
            ),
            runaway_ratio=parse_float(f"{ENV_PREFIX}RUNAWAY_RATIO", defaults.runaway_ratio),
            whole_file_ratio=parse_float(
                f"{ENV_PREFIX}WHOLE_FILE_RATIO", defaults.whole_file_ratio
            ),
        )

    @classmethod
    def from_file(cls, config_path: Path) -> "RuntimeConfig":
        """Load configuration from YAML or TOML file.

        Args:
            config_path: Path to configuration file (YAML or TOML).

        Returns:
            RuntimeConfig loaded from file.

        Raises:
            ConfigError: If file doesn't exist, has invalid format, or contains invalid values.

        Example:
            >>> config = RuntimeConfig.from_file(Path("code-fix.yaml"))
        """
        try:
            config_path = Path(config_path).resolve()
        except (OSError, ValueError) as e:
            raise ConfigError(f"Invalid config file path: {e}") from e

        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")

        if not config_path.is_file():
            raise ConfigError(f"Config path is not a file: {config_path}")

        suffix = config_path.suffix.lower()

        if suffix in (".yaml", ".yml"):
            return cls._load_from_yaml(config_path)
        elif suffix == ".toml":
            return cls._load_from_toml(config_path)
        else:
            raise ConfigError(
                f"Unsupported config file format: {suffix}. Must be .yaml, .yml, or .toml"
            )

    @classmethod
    def _load_from_yaml(cls, config_path: Path) -> "RuntimeConfig":
        """Load configuration from YAML file.

        Raises:
            ConfigError: If YAML is malformed or contains invalid values.
        """
        import yaml

        try:
            with config_path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read {config_path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config file must contain a mapping/dict, got {type(data).__name__}")

        return cls._from_dict(data, config_path)

    @classmethod
    def _load_from_toml(cls, config_path: Path) -> "RuntimeConfig":
        """Load configuration from TOML file.

        Raises:
            ConfigError: If TOML is malformed or contains invalid values.
        """
        # Python 3.11+ has tomllib built-in, otherwise use tomli
        if sys.version_info >= (3, 11):  # noqa: UP036
            import tomllib
        else:
            import tomli as tomllib

        try:
            with config_path.open("rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read {config_path}: {e}") from e

        return cls._from_dict(data, config_path)

    @classmethod
    def _from_dict(cls, data: dict[str, Any], source: Path) -> "RuntimeConfig":
        """Create RuntimeConfig from dictionary (internal helper).

        The file layout groups settings by component::

            preset: balanced
            overlap_policy: merge
            logging: {level: INFO, file: engine.log}
            feedback: {duplicate_similarity_threshold: 0.8, errors_min_length: 30}
            extraction: {match_similarity_threshold: 0.5, max_line_number: 10000}
            replacement: {runaway_ratio: 3.0, whole_file_ratio: 0.7}

        Raises:
            ConfigError: If dictionary contains invalid values.
        """
        preset = data.get("preset")
        defaults = cls.from_preset(str(preset)) if preset else cls.from_defaults()

        policy_value = data.get("overlap_policy", defaults.overlap_policy.value)
        try:
            overlap_policy = OverlapPolicy(str(policy_value).lower())
        except ValueError as e:
            valid_policies = [p.value for p in OverlapPolicy]
            raise ConfigError(
                f"Invalid overlap_policy '{policy_value}' in {source}. "
                f"Must be one of {valid_policies}"
            ) from e

        def section(name: str) -> dict[str, Any]:
            value = data.get(name, {})
            if not isinstance(value, dict):
                raise ConfigError(f"Invalid {name} type in {source}: {type(value).__name__}")
            return value

        logging_config = section("logging")
        feedback = section("feedback")
        extraction = section("extraction")
        replacement = section("replacement")

        log_file = logging_config.get("file", defaults.log_file)

        try:
            return cls(
                overlap_policy=overlap_policy,
                log_level=str(logging_config.get("level", defaults.log_level)).upper(),
                log_file=str(log_file) if log_file else None,
                duplicate_similarity_threshold=float(
                    feedback.get(
                        "duplicate_similarity_threshold", defaults.duplicate_similarity_threshold
                    )
                ),
                errors_min_length=int(
                    feedback.get("errors_min_length", defaults.errors_min_length)
                ),
                match_similarity_threshold=float(
                    extraction.get(
                        "match_similarity_threshold", defaults.match_similarity_threshold
                    )
                ),
                max_line_number=int(extraction.get("max_line_number", defaults.max_line_number)),
                runaway_ratio=float(replacement.get("runaway_ratio", defaults.runaway_ratio)),
                whole_file_ratio=float(
                    replacement.get("whole_file_ratio", defaults.whole_file_ratio)
                ),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid value in {source}: {e}") from e

    def merge_with_cli(self, **overrides: Any) -> "RuntimeConfig":  # noqa: ANN401
        """Create new config with CLI flag overrides.

        CLI flags take precedence over environment variables and config files.
        Only non-None values are applied.

        Args:
            **overrides: Keyword arguments matching RuntimeConfig fields.
                        None values are ignored (no override).

        Returns:
            New RuntimeConfig with overrides applied.

        Raises:
            ConfigError: If override value is invalid.
        """
        filtered_overrides = {k: v for k, v in overrides.items() if v is not None}

        if "overlap_policy" in filtered_overrides and isinstance(
            filtered_overrides["overlap_policy"], str
        ):
            try:
                filtered_overrides["overlap_policy"] = OverlapPolicy(
                    filtered_overrides["overlap_policy"].lower()
                )
            except ValueError as e:
                valid_policies = [p.value for p in OverlapPolicy]
                raise ConfigError(
                    f"Invalid overlap_policy '{filtered_overrides['overlap_policy']}'. "
                    f"Must be one of {valid_policies}"
                ) from e

        if "log_level" in filtered_overrides:
            filtered_overrides["log_level"] = str(filtered_overrides["log_level"]).upper()

        try:
            return replace(self, **filtered_overrides)
        except ConfigError:
            raise
        except Exception as e:
            raise ConfigError(f"Failed to apply CLI overrides: {e}") from e

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary.

        Example:
            >>> data = RuntimeConfig.from_defaults().to_dict()
            >>> assert data["overlap_policy"] == "merge"
        """
        return {
            "overlap_policy": self.overlap_policy.value,
            "log_level": self.log_level,
            "log_file": self.log_file,
            "duplicate_similarity_threshold": self.duplicate_similarity_threshold,
            "errors_min_length": self.errors_min_length,
            "match_similarity_threshold": self.match_similarity_threshold,
            "max_line_number": self.max_line_number,
            "runaway_ratio": self.runaway_ratio,
            "whole_file_ratio": self.whole_file_ratio,
        }
