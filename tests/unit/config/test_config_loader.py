"""Tests for configuration loading."""

import json
import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from promptcheck.config import (
    AgentConfig,
    ConfigLoader,
    LoggingConfig,
    configure_logging,
    get_agent_config,
    load_agent_config,
    merge_settings,
)
from promptcheck.errors import ConfigurationError, ValidationError


class TestMergeSettings:
    """Tests for merge_settings."""

    def test_nested_merge(self) -> None:
        base = {"runner": {"runs": 4, "threshold": 75}, "agent": "claude"}
        override = {"runner": {"runs": 8}}
        assert merge_settings(base, override) == {
            "runner": {"runs": 8, "threshold": 75},
            "agent": "claude",
        }

    def test_later_layers_win(self) -> None:
        merged = merge_settings(
            {"runner": {"runs": 4, "concurrency": 2}},
            {"runner": {"runs": 6}},
            {"runner": {"runs": 8}, "agent": "cursor"},
        )
        assert merged == {"runner": {"runs": 8, "concurrency": 2}, "agent": "cursor"}

    def test_lists_replaced(self) -> None:
        assert merge_settings({"args": ["a", "b"]}, {"args": ["c"]}) == {"args": ["c"]}

    def test_none_values_skipped(self) -> None:
        assert merge_settings({"agent": "claude"}, {"agent": None}) == {"agent": "claude"}

    def test_nested_none_values_skipped(self) -> None:
        merged = merge_settings(
            {"runner": {"runs": 4}},
            {"runner": {"runs": None, "threshold": 50}},
        )
        assert merged == {"runner": {"runs": 4, "threshold": 50}}

    def test_none_layers_skipped(self) -> None:
        assert merge_settings(None, {"agent": "claude"}, None) == {"agent": "claude"}
        assert merge_settings() == {}

    def test_mapping_replaces_scalar(self) -> None:
        assert merge_settings({"agent": "claude"}, {"agent": {"command": "x"}}) == {
            "agent": {"command": "x"}
        }

    def test_layers_not_mutated_or_aliased(self) -> None:
        base = {"runner": {"runs": 4}}
        override = {"logging": {"level": "DEBUG"}}

        merged = merge_settings(base, override)
        merged["logging"]["level"] = "ERROR"
        merged["runner"]["runs"] = 1

        assert base == {"runner": {"runs": 4}}
        assert override == {"logging": {"level": "DEBUG"}}


class TestGetAgentConfig:
    """Tests for built-in agent presets."""

    def test_claude(self) -> None:
        config = get_agent_config("claude")
        assert config.command == "claude"
        assert config.args == ["-p", "--output-format", "json", "--no-session-persistence"]
        assert config.output_format == "json"

    def test_opencode_uses_event_stream(self) -> None:
        config = get_agent_config("opencode")
        assert config.command == "opencode"
        assert config.args == ["run", "--format", "json"]
        assert config.output_format == "ndjson"

    def test_cursor(self) -> None:
        config = get_agent_config("cursor")
        assert config.command == "agent"
        assert config.args == ["--print", "--output-format", "json"]

    def test_case_insensitive(self) -> None:
        assert get_agent_config(" Claude ").command == "claude"

    def test_unknown_agent(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            get_agent_config("gpt-pilot")
        assert exc_info.value.code == "UNKNOWN_AGENT"
        assert "claude" in exc_info.value.message
        assert isinstance(exc_info.value, ValidationError)


class TestLoadAgentConfig:
    """Tests for loading custom agent definitions."""

    def test_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "agent.json"
        path.write_text(json.dumps({"command": "my-agent", "args": ["--json"]}))

        config = load_agent_config(path)

        assert config == AgentConfig(command="my-agent", args=["--json"])

    def test_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "agent.yaml"
        path.write_text("command: my-agent\nargs:\n  - run\noutput_format: ndjson\n")

        config = load_agent_config(path)

        assert config.args == ["run"]
        assert config.output_format == "ndjson"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            load_agent_config(tmp_path / "missing.json")
        assert exc_info.value.code == "AGENT_CONFIG_READ_ERROR"
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_unparseable_file(self, tmp_path: Path) -> None:
        path = tmp_path / "agent.json"
        path.write_text('{"command": "x", "args": [')

        with pytest.raises(ConfigurationError) as exc_info:
            load_agent_config(path)
        assert exc_info.value.code == "AGENT_CONFIG_PARSE_ERROR"

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "agent.json"
        path.write_text('["claude"]')

        with pytest.raises(ConfigurationError) as exc_info:
            load_agent_config(path)
        assert exc_info.value.code == "AGENT_CONFIG_VALIDATION_ERROR"

    def test_missing_command(self, tmp_path: Path) -> None:
        path = tmp_path / "agent.json"
        path.write_text(json.dumps({"args": ["-p"]}))

        with pytest.raises(ConfigurationError) as exc_info:
            load_agent_config(path)
        assert exc_info.value.code == "AGENT_CONFIG_VALIDATION_ERROR"
        assert "command" in exc_info.value.message


class TestConfigLoader:
    """Tests for ConfigLoader."""

    def test_defaults_without_file(self, tmp_path: Path) -> None:
        config = ConfigLoader(tmp_path).load()
        assert config.agent == "claude"
        assert config.runner.runs == 4
        assert config.runner.threshold == 75.0
        assert config.runner.concurrency == 4
        assert config.runner.timeout_seconds == 300.0
        assert config.logging.level == "INFO"

    def test_file_overrides_defaults(self, tmp_path: Path) -> None:
        (tmp_path / ".promptcheck.yaml").write_text(
            "agent: opencode\nrunner:\n  runs: 8\n  threshold: 50\nlogging:\n  level: debug\n"
        )

        config = ConfigLoader(tmp_path).load()

        assert config.agent == "opencode"
        assert config.runner.runs == 8
        assert config.runner.threshold == 50.0
        assert config.runner.concurrency == 4
        assert config.logging.level == "DEBUG"

    def test_overrides_win_over_file(self, tmp_path: Path) -> None:
        (tmp_path / ".promptcheck.yaml").write_text("runner:\n  runs: 8\n  concurrency: 2\n")

        config = ConfigLoader(tmp_path).load(overrides={"runner": {"runs": 2}})

        assert config.runner.runs == 2
        assert config.runner.concurrency == 2

    def test_empty_file(self, tmp_path: Path) -> None:
        (tmp_path / ".promptcheck.yaml").write_text("")
        assert ConfigLoader(tmp_path).load().runner.runs == 4

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        (tmp_path / ".promptcheck.yaml").write_text("runner: [unclosed")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            ConfigLoader(tmp_path).load()

    def test_top_level_not_mapping(self, tmp_path: Path) -> None:
        (tmp_path / ".promptcheck.yaml").write_text("- runs\n")

        with pytest.raises(ConfigurationError, match="must be a mapping"):
            ConfigLoader(tmp_path).load()

    def test_invalid_values(self, tmp_path: Path) -> None:
        (tmp_path / ".promptcheck.yaml").write_text("runner:\n  threshold: 150\n")

        with pytest.raises(ConfigurationError) as exc_info:
            ConfigLoader(tmp_path).load()
        assert exc_info.value.code == "CONFIG_INVALID"
        assert "runner.threshold" in exc_info.value.message

    def test_resolve_agent_preset(self, tmp_path: Path) -> None:
        loader = ConfigLoader(tmp_path)
        config = loader.load(overrides={"agent": "cursor"})
        assert loader.resolve_agent(config).command == "agent"

    def test_resolve_agent_inline_wins(self, tmp_path: Path) -> None:
        (tmp_path / ".promptcheck.yaml").write_text(
            "agent: opencode\nrunner:\n  agent:\n    command: local-agent\n    output_format: text\n"
        )
        loader = ConfigLoader(tmp_path)

        agent = loader.resolve_agent(loader.load())

        assert agent.command == "local-agent"
        assert agent.output_format == "text"

    def test_defaults_to_cwd(self) -> None:
        assert ConfigLoader().base_path == Path.cwd()


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_applies_level_and_format(self) -> None:
        config = LoggingConfig(level="debug", format="%(message)s")

        with patch("promptcheck.config.loader.logging.basicConfig") as mock_basic:
            configure_logging(config)

        mock_basic.assert_called_once_with(level="DEBUG", format="%(message)s")

    def test_level_name_is_valid_logging_level(self) -> None:
        config = LoggingConfig(level="warning")
        assert logging.getLevelName(config.level) == logging.WARNING
