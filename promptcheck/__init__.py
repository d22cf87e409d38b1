"""promptcheck: run natural-language prompt tests against AI agents.

A test file names a prompt under test, a subject prompt and requirements.
Each run executes the subject prompt, a judge agent scores the output against
every requirement, and the verdicts are aggregated against a pass threshold.

Example:
    import asyncio
    from promptcheck import RunnerConfig, run_prompt_tests

    result = asyncio.run(
        run_prompt_tests("tests/greeting.sudo", project_root=".", config=RunnerConfig(runs=4))
    )

"""

from promptcheck.config import RunnerConfig
from promptcheck.core import PipelineResult, RequirementResult, TestSpecification, Verdict
from promptcheck.errors import (
    AgentProcessError,
    AgentTimeoutError,
    ConfigurationError,
    ParseError,
    PromptCheckError,
    SecurityError,
    ValidationError,
)
from promptcheck.pipeline import run_prompt_tests

__version__ = "0.1.0"

__all__ = [
    "AgentProcessError",
    "AgentTimeoutError",
    "ConfigurationError",
    "ParseError",
    "PipelineResult",
    "PromptCheckError",
    "RequirementResult",
    "RunnerConfig",
    "SecurityError",
    "TestSpecification",
    "ValidationError",
    "Verdict",
    "__version__",
    "run_prompt_tests",
]
