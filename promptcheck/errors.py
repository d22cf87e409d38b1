"""Error taxonomy for promptcheck.

Every error raised by the pipeline carries a machine-readable ``kind``, a
stable ``code``, a human message and a ``context`` dict with whatever is
needed to debug the failure without re-running the agent (command, truncated
output, file path). The underlying error, when there is one, is chained with
``raise ... from`` and available as ``__cause__``.

Kinds and their treatment by the pipeline:

    validation  bad or missing input, fails fast, never retried
    security    path escapes its expected boundary, fails fast
    parse       agent reply does not match the expected shape
    timeout     agent exceeded its deadline
    process     agent exited non-zero or could not be spawned

Parse, timeout and process errors raised while executing or judging a run are
absorbed into the aggregate as non-passing evidence. During extraction they
are fatal.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import pydantic

# Longest slice of agent output kept on an error.
OUTPUT_PREVIEW_CHARS = 500


def truncate(text: str, limit: int = OUTPUT_PREVIEW_CHARS) -> str:
    """Shorten text for error context, marking the cut with an ellipsis."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def format_pydantic_error(exc: pydantic.ValidationError) -> str:
    """Format pydantic validation issues as ``field.path: message`` pairs.

    Args:
        exc: The pydantic validation error.

    Returns:
        Issues joined with ``; ``.

    """
    issues = []
    for issue in exc.errors():
        location = ".".join(str(part) for part in issue["loc"]) or "<root>"
        issues.append(f"{location}: {issue['msg']}")
    return "; ".join(issues) or str(exc)


class PromptCheckError(Exception):
    """Base exception for all promptcheck errors."""

    kind: str = "error"
    default_code: str = "PROMPTCHECK_ERROR"

    def __init__(self, message: str, *, code: str | None = None, **context: Any) -> None:
        """Initialize the error.

        Args:
            message: Human readable description.
            code: Stable error code. Defaults to the class default.
            **context: Extra fields describing the failure.

        """
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        result: dict[str, Any] = {
            "kind": self.kind,
            "code": self.code,
            "message": self.message,
            "context": {key: str(value) for key, value in self.context.items()},
        }
        if self.__cause__ is not None:
            result["cause"] = f"{type(self.__cause__).__name__}: {self.__cause__}"
        return result


class ValidationError(PromptCheckError):
    """Raised when input parameters or extracted data are invalid."""

    kind = "validation"
    default_code = "VALIDATION_FAILURE"


class ConfigurationError(ValidationError):
    """Raised when configuration loading or validation fails."""

    default_code = "CONFIG_INVALID"


class SecurityError(PromptCheckError):
    """Raised when a path escapes its allowed base directory."""

    kind = "security"
    default_code = "SECURITY_VIOLATION"


class ParseError(PromptCheckError):
    """Raised when an agent reply does not match the expected shape."""

    kind = "parse"
    default_code = "PARSE_FAILURE"


class AgentTimeoutError(PromptCheckError):
    """Raised when an agent process exceeds its deadline."""

    kind = "timeout"
    default_code = "AGENT_TIMEOUT"


class AgentProcessError(PromptCheckError):
    """Raised when an agent process exits non-zero or cannot be spawned."""

    kind = "process"
    default_code = "AGENT_PROCESS_FAILURE"


# Failures that count as non-passing evidence once extraction has succeeded.
ABSORBABLE_ERRORS: tuple[type[PromptCheckError], ...] = (
    ParseError,
    AgentTimeoutError,
    AgentProcessError,
)
