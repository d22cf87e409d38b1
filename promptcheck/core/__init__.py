"""Core data model for promptcheck."""

from promptcheck.core.models import (
    MediaAttachment,
    PipelineResult,
    Requirement,
    RequirementResult,
    TestSpecification,
    Verdict,
)

__all__ = [
    "MediaAttachment",
    "PipelineResult",
    "Requirement",
    "RequirementResult",
    "TestSpecification",
    "Verdict",
]
