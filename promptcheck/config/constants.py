"""Compiled-in defaults for promptcheck.

This module is the single source of truth for default run settings and the
built-in agent presets. Import from here rather than repeating values.
"""

from __future__ import annotations

from typing import Any, Final

DEFAULT_RUNS: Final[int] = 4
DEFAULT_THRESHOLD: Final[float] = 75.0
DEFAULT_CONCURRENCY: Final[int] = 4
DEFAULT_TIMEOUT_SECONDS: Final[float] = 300.0
DEFAULT_AGENT: Final[str] = "claude"

CONFIG_FILENAME: Final[str] = ".promptcheck.yaml"

AGENT_PRESETS: Final[dict[str, dict[str, Any]]] = {
    "claude": {
        "command": "claude",
        "args": ["-p", "--output-format", "json", "--no-session-persistence"],
        "output_format": "json",
    },
    "opencode": {
        "command": "opencode",
        "args": ["run", "--format", "json"],
        "output_format": "ndjson",
    },
    "cursor": {
        "command": "agent",
        "args": ["--print", "--output-format", "json"],
        "output_format": "json",
    },
}
