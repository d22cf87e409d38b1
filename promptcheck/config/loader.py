"""Configuration loader for promptcheck.

This module loads the optional project file (.promptcheck.yaml), merges it
over the compiled-in defaults and resolves which agent to invoke. Custom
agent definitions are read from JSON or YAML files; YAML is a superset of
JSON so one parser covers both.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pydantic
import yaml

from promptcheck.errors import ConfigurationError, format_pydantic_error

from .constants import AGENT_PRESETS, CONFIG_FILENAME
from .models import AgentConfig, LoggingConfig, ProjectConfig

logger = logging.getLogger(__name__)


def merge_settings(*layers: Mapping[str, Any] | None) -> dict[str, Any]:
    """Layer settings mappings in order, later layers winning.

    Nested mappings merge key by key and are copied, so no layer is mutated
    or aliased by the result. Any other value, lists included, replaces what
    an earlier layer set. ``None`` means unset: a ``None`` value leaves the
    earlier value in place and a ``None`` layer is skipped.

    Args:
        layers: Settings from lowest to highest precedence, e.g. project file
            then caller overrides.

    Returns:
        A new merged dict.

    """
    merged: dict[str, Any] = {}
    for layer in layers:
        for key, value in (layer or {}).items():
            if value is None:
                continue
            if isinstance(value, Mapping):
                current = merged.get(key)
                value = merge_settings(current if isinstance(current, Mapping) else None, value)
            merged[key] = value
    return merged


def get_agent_config(agent_name: str = "claude") -> AgentConfig:
    """Return the built-in configuration for a named agent.

    Args:
        agent_name: Preset name (claude, opencode, cursor). Case-insensitive.

    Returns:
        AgentConfig for the preset.

    Raises:
        ConfigurationError: If the name is not a known preset.

    """
    preset = AGENT_PRESETS.get(agent_name.strip().lower())
    if preset is None:
        supported = ", ".join(AGENT_PRESETS)
        raise ConfigurationError(
            f"Unknown agent: {agent_name}. Supported agents: {supported}",
            code="UNKNOWN_AGENT",
            agent=agent_name,
        )
    return AgentConfig(**preset)


def load_agent_config(config_path: str | Path) -> AgentConfig:
    """Load and validate a custom agent definition from a JSON or YAML file.

    Args:
        config_path: Path to the definition file.

    Returns:
        Validated AgentConfig.

    Raises:
        ConfigurationError: If the file cannot be read, parsed or validated.

    """
    path = Path(config_path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read agent config file: {path}",
            code="AGENT_CONFIG_READ_ERROR",
            path=path,
        ) from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Agent config file is not valid JSON or YAML: {path}",
            code="AGENT_CONFIG_PARSE_ERROR",
            path=path,
        ) from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Agent config must be a mapping: {path}",
            code="AGENT_CONFIG_VALIDATION_ERROR",
            path=path,
        )

    try:
        return AgentConfig.model_validate(data)
    except pydantic.ValidationError as e:
        raise ConfigurationError(
            f"Invalid agent config: {format_pydantic_error(e)}",
            code="AGENT_CONFIG_VALIDATION_ERROR",
            path=path,
        ) from e


def configure_logging(config: LoggingConfig) -> None:
    """Apply a logging configuration to the root logger."""
    logging.basicConfig(level=config.level, format=config.format)


class ConfigLoader:
    """Load project configuration for promptcheck.

    Priority order: explicit overrides > .promptcheck.yaml > compiled-in defaults.

    Example:
        loader = ConfigLoader(project_root)
        config = loader.load(overrides={"runner": {"runs": 8}})
        agent = loader.resolve_agent(config)

    """

    def __init__(self, base_path: str | Path | None = None) -> None:
        """Initialize the ConfigLoader.

        Args:
            base_path: Directory holding .promptcheck.yaml. Defaults to the current
                working directory.

        """
        self.base_path = Path.cwd() if base_path is None else Path(base_path)

    @property
    def config_path(self) -> Path:
        """Path of the project configuration file."""
        return self.base_path / CONFIG_FILENAME

    def _load_yaml_optional(self, path: Path) -> dict[str, Any] | None:
        """Load a YAML file if it exists.

        Args:
            path: Path to YAML file

        Returns:
            Parsed YAML content as dict, or None if file doesn't exist

        Raises:
            ConfigurationError: If file exists but cannot be parsed

        """
        if not path.exists():
            return None

        try:
            with open(path, encoding="utf-8") as f:
                content = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}", path=path) from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read {path}: {e}", path=path) from e

        if content is None:
            return {}
        if not isinstance(content, dict):
            raise ConfigurationError(f"Top level of {path} must be a mapping", path=path)
        return content

    def load(self, overrides: dict[str, Any] | None = None) -> ProjectConfig:
        """Load the merged project configuration.

        Args:
            overrides: Values that take precedence over the file.

        Returns:
            Validated ProjectConfig.

        Raises:
            ConfigurationError: If the merged configuration is invalid.

        """
        file_data = self._load_yaml_optional(self.config_path)
        if file_data is not None:
            logger.debug(f"Loaded project config from {self.config_path}")
        data = merge_settings(file_data, overrides)

        try:
            return ProjectConfig.model_validate(data)
        except pydantic.ValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration: {format_pydantic_error(e)}",
                path=self.config_path,
            ) from e

    def resolve_agent(self, config: ProjectConfig) -> AgentConfig:
        """Return the agent to invoke for a project configuration.

        An agent defined inline under ``runner.agent`` wins over the preset name.
        """
        if config.runner.agent is not None:
            return config.runner.agent
        return get_agent_config(config.agent)
