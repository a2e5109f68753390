"""Unit tests for RuntimeConfig in code_fix_engine.config.runtime_config."""

import logging
import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from code_fix_engine.config.runtime_config import (
    ConfigError,
    OverlapPolicy,
    RuntimeConfig,
)

pytestmark = pytest.mark.usefixtures("clean_env")


class TestOverlapPolicy:
    """Test OverlapPolicy enum."""

    def test_values(self) -> None:
        assert OverlapPolicy.MERGE.value == "merge"
        assert str(OverlapPolicy.REJECT) == "reject"

    def test_policy_from_string(self) -> None:
        assert OverlapPolicy("merge") == OverlapPolicy.MERGE

    def test_invalid_policy_raises_error(self) -> None:
        with pytest.raises(ValueError):
            OverlapPolicy("ask")


class TestRuntimeConfigDefaults:
    """Test RuntimeConfig default values."""

    def test_from_defaults(self) -> None:
        config = RuntimeConfig.from_defaults()

        assert config.overlap_policy == OverlapPolicy.MERGE
        assert config.log_level == "INFO"
        assert config.log_file is None
        assert config.duplicate_similarity_threshold == 0.8
        assert config.errors_min_length == 30
        assert config.match_similarity_threshold == 0.5
        assert config.max_line_number == 10000
        assert config.runaway_ratio == 3.0
        assert config.whole_file_ratio == 0.7

    def test_balanced_is_default(self) -> None:
        assert RuntimeConfig.from_balanced() == RuntimeConfig.from_defaults()


class TestRuntimeConfigPresets:
    """Test preset factories."""

    def test_strict(self) -> None:
        config = RuntimeConfig.from_strict()

        assert config.overlap_policy == OverlapPolicy.REJECT
        assert config.runaway_ratio == 2.0
        assert config.whole_file_ratio == 0.5

    def test_lenient(self) -> None:
        config = RuntimeConfig.from_lenient()

        assert config.overlap_policy == OverlapPolicy.MERGE
        assert config.errors_min_length == 10
        assert config.log_level == "WARNING"

    @pytest.mark.parametrize("name", ["strict", " STRICT ", "Strict"])
    def test_from_preset_name(self, name: str) -> None:
        assert RuntimeConfig.from_preset(name) == RuntimeConfig.from_strict()

    def test_unknown_preset_raises(self) -> None:
        with pytest.raises(ConfigError, match="Unknown preset 'paranoid'"):
            RuntimeConfig.from_preset("paranoid")


class TestRuntimeConfigValidation:
    """Test __post_init__ validation."""

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ConfigError, match="Invalid log level"):
            RuntimeConfig(overlap_policy=OverlapPolicy.MERGE, log_level="VERBOSE", log_file=None)

    def test_policy_must_be_enum(self) -> None:
        with pytest.raises(ConfigError, match="overlap_policy must be OverlapPolicy"):
            RuntimeConfig(overlap_policy="merge", log_level="INFO", log_file=None)  # type: ignore[arg-type]

    @pytest.mark.parametrize(
        "field_name",
        ["duplicate_similarity_threshold", "match_similarity_threshold", "whole_file_ratio"],
    )
    @pytest.mark.parametrize("value", [-0.1, 1.5])
    def test_ratios_bounded(self, field_name: str, value: float) -> None:
        with pytest.raises(ConfigError, match=field_name):
            RuntimeConfig(
                overlap_policy=OverlapPolicy.MERGE,
                log_level="INFO",
                log_file=None,
                **{field_name: value},
            )

    def test_negative_errors_min_length(self) -> None:
        with pytest.raises(ConfigError, match="errors_min_length"):
            RuntimeConfig.from_defaults().merge_with_cli(errors_min_length=-1)

    def test_max_line_number_positive(self) -> None:
        with pytest.raises(ConfigError, match="max_line_number"):
            RuntimeConfig.from_defaults().merge_with_cli(max_line_number=0)

    def test_runaway_ratio_minimum(self) -> None:
        with pytest.raises(ConfigError, match="runaway_ratio must be >= 1.0"):
            RuntimeConfig.from_defaults().merge_with_cli(runaway_ratio=0.5)

    def test_high_runaway_ratio_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            config = RuntimeConfig.from_defaults().merge_with_cli(runaway_ratio=25.0)

        assert config.runaway_ratio == 25.0
        assert "very high" in caplog.text


class TestRuntimeConfigFromEnv:
    """Test RuntimeConfig.from_env() with environment variables."""

    def test_from_env_default_when_no_vars(self) -> None:
        assert RuntimeConfig.from_env() == RuntimeConfig.from_defaults()

    def test_from_env_keeps_base(self) -> None:
        assert RuntimeConfig.from_env(RuntimeConfig.from_strict()) == RuntimeConfig.from_strict()

    def test_from_env_values(self) -> None:
        env = {
            "CFE_OVERLAP_POLICY": "REJECT",
            "CFE_LOG_LEVEL": "debug",
            "CFE_LOG_FILE": "/tmp/engine.log",
            "CFE_DUPLICATE_SIMILARITY": "0.75",
            "CFE_ERRORS_MIN_LENGTH": "12",
            "CFE_MATCH_SIMILARITY": "0.6",
            "CFE_MAX_LINE_NUMBER": "999",
            "CFE_RUNAWAY_RATIO": "4",
            "CFE_WHOLE_FILE_RATIO": "0.9",
        }
        with patch.dict(os.environ, env):
            config = RuntimeConfig.from_env()

        assert config.overlap_policy == OverlapPolicy.REJECT
        assert config.log_level == "DEBUG"
        assert config.log_file == "/tmp/engine.log"
        assert config.duplicate_similarity_threshold == 0.75
        assert config.errors_min_length == 12
        assert config.match_similarity_threshold == 0.6
        assert config.max_line_number == 999
        assert config.runaway_ratio == 4.0
        assert config.whole_file_ratio == 0.9

    def test_from_env_invalid_policy_raises(self) -> None:
        with (
            patch.dict(os.environ, {"CFE_OVERLAP_POLICY": "ask"}),
            pytest.raises(ConfigError, match="Invalid CFE_OVERLAP_POLICY='ask'"),
        ):
            RuntimeConfig.from_env()

    def test_from_env_invalid_integer_raises(self) -> None:
        with (
            patch.dict(os.environ, {"CFE_ERRORS_MIN_LENGTH": "many"}),
            pytest.raises(ConfigError, match="Must be an integer"),
        ):
            RuntimeConfig.from_env()

    def test_from_env_max_line_number_zero_raises(self) -> None:
        with (
            patch.dict(os.environ, {"CFE_MAX_LINE_NUMBER": "0"}),
            pytest.raises(ConfigError, match="must be >= 1"),
        ):
            RuntimeConfig.from_env()

    def test_from_env_invalid_float_raises(self) -> None:
        with (
            patch.dict(os.environ, {"CFE_RUNAWAY_RATIO": "lots"}),
            pytest.raises(ConfigError, match="Must be a number"),
        ):
            RuntimeConfig.from_env()

    def test_from_env_out_of_range_raises(self) -> None:
        with (
            patch.dict(os.environ, {"CFE_MATCH_SIMILARITY": "1.5"}),
            pytest.raises(ConfigError, match="match_similarity_threshold"),
        ):
            RuntimeConfig.from_env()


class TestRuntimeConfigFromFile:
    """Test RuntimeConfig.from_file() with YAML/TOML files."""

    def test_from_file_yaml(self, tmp_path: Path) -> None:
        """Test loading YAML config on top of a preset."""
        config_file = tmp_path / "engine.yaml"
        config_file.write_text(
            """
preset: strict
overlap_policy: merge
logging:
  level: debug
  file: engine.log
feedback:
  errors_min_length: 12
extraction:
  max_line_number: 500
replacement:
  runaway_ratio: 4
"""
        )

        config = RuntimeConfig.from_file(config_file)

        assert config.overlap_policy == OverlapPolicy.MERGE
        assert config.log_level == "DEBUG"
        assert config.log_file == "engine.log"
        assert config.duplicate_similarity_threshold == 0.7
        assert config.errors_min_length == 12
        assert config.match_similarity_threshold == 0.6
        assert config.max_line_number == 500
        assert config.runaway_ratio == 4.0
        assert config.whole_file_ratio == 0.5

    def test_from_file_toml(self) -> None:
        """Test loading basic TOML config."""
        toml_content = """
overlap_policy = "reject"

[logging]
level = "WARNING"

[extraction]
match_similarity_threshold = 0.65
"""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".toml", delete=False) as f:
            f.write(toml_content)
            f.flush()
            try:
                config = RuntimeConfig.from_file(Path(f.name))
                assert config.overlap_policy == OverlapPolicy.REJECT
                assert config.log_level == "WARNING"
                assert config.match_similarity_threshold == 0.65
                assert config.runaway_ratio == 3.0
            finally:
                os.unlink(f.name)

    def test_from_file_empty_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yml"
        config_file.write_text("")

        assert RuntimeConfig.from_file(config_file) == RuntimeConfig.from_defaults()

    def test_from_file_nonexistent_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Config file not found"):
            RuntimeConfig.from_file(tmp_path / "missing.yaml")

    def test_from_file_directory_raises(self, tmp_path: Path) -> None:
        directory = tmp_path / "conf.yaml"
        directory.mkdir()

        with pytest.raises(ConfigError, match="not a file"):
            RuntimeConfig.from_file(directory)

    def test_from_file_invalid_extension_raises(self, tmp_path: Path) -> None:
        config_file = tmp_path / "engine.json"
        config_file.write_text("{}")

        with pytest.raises(ConfigError, match="Unsupported config file format"):
            RuntimeConfig.from_file(config_file)

    @pytest.mark.parametrize(
        ("name", "content", "message"),
        [
            ("bad.yaml", "logging: [unclosed", "Invalid YAML"),
            ("bad.toml", "= broken", "Invalid TOML"),
            ("list.yaml", "- a\n- b\n", "must contain a mapping"),
            ("section.yaml", "logging: verbose\n", "Invalid logging type"),
            ("value.yaml", "feedback:\n  errors_min_length: many\n", "Invalid value"),
            ("preset.yaml", "preset: paranoid\n", "Unknown preset"),
            ("policy.yaml", "overlap_policy: ask\n", "Invalid overlap_policy 'ask'"),
            ("range.yaml", "replacement:\n  whole_file_ratio: 2\n", "whole_file_ratio"),
        ],
    )
    def test_from_file_invalid_content_raises(
        self, tmp_path: Path, name: str, content: str, message: str
    ) -> None:
        config_file = tmp_path / name
        config_file.write_text(content)

        with pytest.raises(ConfigError, match=message):
            RuntimeConfig.from_file(config_file)


class TestRuntimeConfigMergeWithCli:
    """Test CLI flag overrides."""

    def test_overrides_applied(self) -> None:
        base = RuntimeConfig.from_defaults()

        config = base.merge_with_cli(overlap_policy="REJECT", log_level="debug", log_file=None)

        assert config.overlap_policy == OverlapPolicy.REJECT
        assert config.log_level == "DEBUG"
        assert config.log_file is None
        assert base.overlap_policy == OverlapPolicy.MERGE

    def test_no_overrides(self) -> None:
        base = RuntimeConfig.from_strict()

        assert base.merge_with_cli() == base

    def test_invalid_policy_raises(self) -> None:
        with pytest.raises(ConfigError, match="Invalid overlap_policy 'ask'"):
            RuntimeConfig.from_defaults().merge_with_cli(overlap_policy="ask")

    def test_unknown_field_raises(self) -> None:
        with pytest.raises(ConfigError, match="Failed to apply CLI overrides"):
            RuntimeConfig.from_defaults().merge_with_cli(colour="blue")


def test_to_dict() -> None:
    """Test dictionary form uses plain values."""
    data = RuntimeConfig.from_strict().to_dict()

    assert data == {
        "overlap_policy": "reject",
        "log_level": "INFO",
        "log_file": None,
        "duplicate_similarity_threshold": 0.7,
        "errors_min_length": 30,
        "match_similarity_threshold": 0.6,
        "max_line_number": 10000,
        "runaway_ratio": 2.0,
        "whole_file_ratio": 0.5,
    }
