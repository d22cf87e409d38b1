"""Configuration for promptcheck.

This module provides Pydantic models, compiled-in defaults and a ConfigLoader
that merges .promptcheck.yaml over those defaults.

Example:
    from promptcheck.config import ConfigLoader

    loader = ConfigLoader(project_root)
    config = loader.load()
    agent = loader.resolve_agent(config)

"""

from .constants import (
    AGENT_PRESETS,
    DEFAULT_AGENT,
    DEFAULT_CONCURRENCY,
    DEFAULT_RUNS,
    DEFAULT_THRESHOLD,
    DEFAULT_TIMEOUT_SECONDS,
)
from .loader import (
    ConfigLoader,
    configure_logging,
    get_agent_config,
    load_agent_config,
    merge_settings,
)
from .models import AgentConfig, LoggingConfig, ProjectConfig, RunnerConfig

__all__ = [
    "AGENT_PRESETS",
    "DEFAULT_AGENT",
    "DEFAULT_CONCURRENCY",
    "DEFAULT_RUNS",
    "DEFAULT_THRESHOLD",
    "DEFAULT_TIMEOUT_SECONDS",
    "AgentConfig",
    "ConfigLoader",
    "LoggingConfig",
    "ProjectConfig",
    "RunnerConfig",
    "configure_logging",
    "get_agent_config",
    "load_agent_config",
    "merge_settings",
]
