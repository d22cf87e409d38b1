"""Data model shared across the pipeline.

Models built from agent output are validated when they are created and frozen
afterwards, so nothing loosely typed travels past the parsing edge.

Lifecycle:
    TestSpecification  created once by the extractor, read by every run
    Verdict            one per (run, requirement), produced by the judge
    RequirementResult  derived by the aggregator from all verdicts of a requirement
    PipelineResult     terminal output handed to the report writer
"""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field


class Requirement(BaseModel):
    """A single behavioral expectation extracted from a test file."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Sequential requirement identifier")
    requirement: str = Field(..., description="Natural-language expectation")


class TestSpecification(BaseModel):
    """Structured form of a prompt test file."""

    __test__: ClassVar[bool] = False

    model_config = ConfigDict(frozen=True)

    subject_prompt: str = Field(..., description="Prompt executed on every run")
    context: str = Field(..., description="Concatenated contents of the imported files")
    requirements: tuple[Requirement, ...] = Field(..., description="Requirements to judge")


class Verdict(BaseModel):
    """A judge's opinion of one run against one requirement."""

    model_config = ConfigDict(frozen=True)

    passed: bool = Field(default=False)
    actual: str = Field(default="No actual provided")
    expected: str = Field(default="No expected provided")
    score: float = Field(default=0.0, ge=0.0, le=100.0)
    extras: dict[str, str] = Field(
        default_factory=dict, description="Unrecognized diagnostic block keys"
    )
    error: str | None = Field(
        default=None, description="Why the run or judge call failed, if it did"
    )


class MediaAttachment(BaseModel):
    """An image or other media reference shown next to a requirement."""

    model_config = ConfigDict(frozen=True)

    path: str
    caption: str = ""


class RequirementResult(BaseModel):
    """Aggregated outcome of one requirement across all runs."""

    model_config = ConfigDict(frozen=True)

    requirement: str
    passed: bool
    pass_count: int = Field(..., ge=0)
    total_runs: int = Field(..., gt=0)
    average_score: float = Field(default=0.0)
    run_results: tuple[Verdict, ...] = Field(default_factory=tuple)
    media: tuple[MediaAttachment, ...] = Field(default_factory=tuple)


class PipelineResult(BaseModel):
    """Overall outcome of a prompt test."""

    model_config = ConfigDict(frozen=True)

    passed: bool
    requirements: tuple[RequirementResult, ...]

    @property
    def passed_count(self) -> int:
        """Number of requirements that met the threshold."""
        return sum(1 for r in self.requirements if r.passed)

    @property
    def failed_count(self) -> int:
        """Number of requirements that missed the threshold."""
        return len(self.requirements) - self.passed_count
