"""Pydantic models for promptcheck configuration.

This module defines the agent, runner and logging settings threaded
explicitly through the pipeline. Nothing here is mutated at module level, so
tests can build alternate configurations freely.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import (
    DEFAULT_AGENT,
    DEFAULT_CONCURRENCY,
    DEFAULT_RUNS,
    DEFAULT_THRESHOLD,
    DEFAULT_TIMEOUT_SECONDS,
)


class AgentConfig(BaseModel):
    """How to launch an agent CLI.

    ``output_format`` selects how stdout is preprocessed before unwrapping:
    ``json`` and ``text`` are passed through, ``ndjson`` is read as an event
    stream and its text fragments concatenated.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    command: str = Field(..., min_length=1, description="Executable to spawn")
    args: list[str] = Field(default_factory=list, description="Arguments before the prompt")
    output_format: Literal["json", "ndjson", "text"] = Field(default="json")
    prompt_transport: Literal["argument", "stdin"] = Field(
        default="argument",
        description="Append the prompt as the last argument or write it to stdin",
    )

    @field_validator("command")
    @classmethod
    def validate_command(cls, v: str) -> str:
        """Reject blank commands."""
        if not v.strip():
            raise ValueError("command is required")
        return v.strip()


class RunnerConfig(BaseModel):
    """Settings for one pipeline invocation."""

    model_config = ConfigDict(frozen=True)

    runs: int = Field(default=DEFAULT_RUNS, gt=0)
    threshold: float = Field(default=DEFAULT_THRESHOLD, ge=0.0, le=100.0, allow_inf_nan=False)
    concurrency: int = Field(default=DEFAULT_CONCURRENCY, gt=0)
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0.0)
    agent: AgentConfig | None = Field(
        default=None,
        description="Agent to invoke; the default preset is used when unset",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO")
    format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Normalize and check the level name."""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class ProjectConfig(BaseModel):
    """Project-level configuration.

    Maps to .promptcheck.yaml at the project root.
    """

    agent: str = Field(default=DEFAULT_AGENT, description="Agent preset name")
    runner: RunnerConfig = Field(default_factory=RunnerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
