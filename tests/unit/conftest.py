"""Shared test fixtures for promptcheck unit tests."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from promptcheck.core.models import Requirement, TestSpecification
from promptcheck.judge.unwrap import OutputMode

PROMPT_UNDER_TEST = "Always greet the user politely and keep replies short."

TEST_FILE_CONTENT = """import 'ai/rules/greeting.mdc'

userPrompt = \"\"\"
Say hello to a new user.
\"\"\"

- Given a greeting, should reply politely
- Given a greeting, should be brief
"""


class ScriptedInvoker:
    """Agent invoker test double routing prompts by their instruction header.

    Each reply may be a value, an exception instance to raise, or a callable
    taking the prompt and returning either of those.
    """

    def __init__(self, *, extraction: Any = None, subject: Any = "Hello!", judge: Any = None):
        self.extraction = extraction
        self.subject = subject
        self.judge = judge
        self.calls: list[tuple[str, OutputMode, float]] = []

    @staticmethod
    def kind_of(prompt: str) -> str:
        if prompt.startswith("You are a test extraction agent"):
            return "extraction"
        if prompt.startswith("You are an AI judge"):
            return "judge"
        return "subject"

    def calls_of(self, kind: str) -> list[tuple[str, OutputMode, float]]:
        return [call for call in self.calls if self.kind_of(call[0]) == kind]

    async def __call__(self, prompt: str, *, mode: OutputMode, timeout: float) -> Any:
        self.calls.append((prompt, mode, timeout))
        reply = getattr(self, self.kind_of(prompt))
        if callable(reply) and not isinstance(reply, BaseException):
            reply = reply(prompt)
        if isinstance(reply, BaseException):
            raise reply
        return reply


class MemoryFiles:
    """In-memory file store exposing the reader and resolver the pipeline takes."""

    def __init__(self, files: dict[str, str]):
        self.files = {self.resolve(Path(path)): text for path, text in files.items()}
        self.reads: list[Path] = []

    @staticmethod
    def resolve(path: Path) -> Path:
        return Path(os.path.normpath(path))

    async def read_text(self, path: Path) -> str:
        self.reads.append(path)
        try:
            return self.files[path]
        except KeyError:
            raise FileNotFoundError(str(path)) from None


def judge_block(
    passed: bool = True,
    score: float = 85,
    actual: str = "greeted",
    expected: str = "a greeting",
) -> str:
    """Build judge output holding one diagnostic block."""
    return (
        "---\n"
        f"passed: {'true' if passed else 'false'}\n"
        f'actual: "{actual}"\n'
        f'expected: "{expected}"\n'
        f"score: {score}\n"
        "---"
    )


@pytest.fixture
def make_invoker() -> Callable[..., ScriptedInvoker]:
    """Factory for scripted agent invokers."""
    return ScriptedInvoker


@pytest.fixture
def make_memory_files() -> Callable[..., MemoryFiles]:
    """Factory for in-memory file stores."""
    return MemoryFiles


@pytest.fixture
def make_judge_block() -> Callable[..., str]:
    """Factory for judge diagnostic blocks."""
    return judge_block


@pytest.fixture
def extraction_reply() -> dict[str, Any]:
    """Structured reply of a well-behaved extraction agent."""
    return {
        "subjectPrompt": "Say hello to a new user.",
        "importPaths": ["ai/rules/greeting.mdc"],
        "requirements": [
            {"id": 1, "requirement": "Given a greeting, should reply politely"},
            {"id": 2, "requirement": "Given a greeting, should be brief"},
        ],
    }


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Create a project with a prompt under test and a test file."""
    rules = tmp_path / "ai" / "rules"
    rules.mkdir(parents=True)
    (rules / "greeting.mdc").write_text(PROMPT_UNDER_TEST)

    tests_dir = tmp_path / "tests"
    tests_dir.mkdir()
    (tests_dir / "greeting.sudo").write_text(TEST_FILE_CONTENT)
    return tmp_path


@pytest.fixture
def spec() -> TestSpecification:
    """Create a two-requirement test specification."""
    return TestSpecification(
        subject_prompt="Say hello to a new user.",
        context=PROMPT_UNDER_TEST,
        requirements=(
            Requirement(id=1, requirement="Given a greeting, should reply politely"),
            Requirement(id=2, requirement="Given a greeting, should be brief"),
        ),
    )
