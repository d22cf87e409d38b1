"""Turn a prompt test file into a TestSpecification.

One extraction agent call returns structured data: the subject prompt, the
files to import and the requirements. The imports are then read relative to
the project root, through the caller's reader, to build the context every
run shares.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from promptcheck.config.constants import DEFAULT_TIMEOUT_SECONDS
from promptcheck.core.models import Requirement, TestSpecification
from promptcheck.errors import ParseError, ValidationError, format_pydantic_error, truncate
from promptcheck.fileio import PathResolver, TextReader, read_text_file, resolve_path
from promptcheck.judge.prompts import build_extraction_prompt
from promptcheck.judge.unwrap import OutputMode

if TYPE_CHECKING:
    from promptcheck.adapters.agent import AgentInvoker

logger = logging.getLogger(__name__)


class ExtractedRequirement(BaseModel):
    """Requirement entry as returned by the extraction agent."""

    model_config = ConfigDict(extra="ignore")

    id: int
    requirement: str


class ExtractionResult(BaseModel):
    """Schema the extraction agent's reply must satisfy."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    subject_prompt: str = Field(..., alias="subjectPrompt")
    import_paths: list[str] = Field(..., alias="importPaths")
    requirements: list[ExtractedRequirement]


def _serialize_reply(reply: Any) -> str:
    try:
        return json.dumps(reply)
    except (TypeError, ValueError):
        return repr(reply)


def validate_extraction_result(reply: Any) -> ExtractionResult:
    """Validate an unwrapped extraction reply against the fixed schema.

    Args:
        reply: Unwrapped agent reply.

    Returns:
        Validated extraction result.

    Raises:
        ParseError: If the reply is still a string after unwrapping.
        ValidationError: If the reply is not an object or violates the schema.

    """
    if isinstance(reply, str):
        raise ParseError(
            "Extraction agent did not return valid JSON",
            code="EXTRACTION_PARSE_FAILURE",
            raw_output=truncate(reply),
        )

    if not isinstance(reply, dict):
        raise ValidationError(
            f"Extraction result must be an object, got {type(reply).__name__}",
            code="EXTRACTION_VALIDATION_FAILURE",
            field="<root>",
            raw_output=truncate(_serialize_reply(reply)),
        )

    try:
        return ExtractionResult.model_validate(reply)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "<root>"
        raise ValidationError(
            f"Invalid extraction result: {format_pydantic_error(e)}",
            code="EXTRACTION_VALIDATION_FAILURE",
            field=field,
            raw_output=truncate(_serialize_reply(reply)),
        ) from e


async def _read_import(
    import_path: str,
    project_root: Path,
    read_text: TextReader,
    resolve: PathResolver,
) -> str:
    resolved = resolve(project_root / import_path)
    try:
        return await read_text(resolved)
    except OSError as e:
        raise ValidationError(
            f"Failed to read imported prompt file: {import_path}",
            code="PROMPT_READ_FAILED",
            path=import_path,
            resolved_path=str(resolved),
        ) from e


async def resolve_imports(
    import_paths: list[str],
    project_root: Path,
    *,
    read_text: TextReader = read_text_file,
    resolve: PathResolver = resolve_path,
) -> str:
    """Read imported files concurrently and join them in declaration order.

    Paths are resolved against the project root and may point outside it.
    Reading and resolving go through the supplied capabilities, which default
    to the local filesystem.

    Raises:
        ValidationError: If any file cannot be read (PROMPT_READ_FAILED).

    """
    if not import_paths:
        return ""
    logger.debug(f"Reading {len(import_paths)} imported file(s) from {project_root}")
    contents = await asyncio.gather(
        *(_read_import(p, project_root, read_text, resolve) for p in import_paths)
    )
    return "\n\n".join(contents)


async def extract_specification(
    test_content: str,
    *,
    project_root: Path,
    invoker: AgentInvoker,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    read_text: TextReader = read_text_file,
    resolve: PathResolver = resolve_path,
) -> TestSpecification:
    """Extract a TestSpecification from raw test-file text.

    Args:
        test_content: Raw contents of the test file.
        project_root: Directory import paths are resolved against.
        invoker: Agent invoker.
        timeout: Deadline for the extraction call in seconds.
        read_text: Reader for imported files.
        resolve: Resolver for import paths.

    Returns:
        Immutable specification shared by every run.

    Raises:
        ParseError: If the agent reply is not structured data.
        ValidationError: If the reply violates the schema, an import cannot be
            read, or the prompt, context or requirements are empty.
        AgentTimeoutError: If the extraction call times out.
        AgentProcessError: If the extraction process fails.

    """
    logger.info("Extracting test specification")
    reply = await invoker(
        build_extraction_prompt(test_content),
        mode=OutputMode.STRUCTURED,
        timeout=timeout,
    )
    extracted = validate_extraction_result(reply)

    if not extracted.subject_prompt.strip():
        raise ValidationError(
            "Test file does not define a subject prompt",
            code="MISSING_SUBJECT_PROMPT",
        )

    context = await resolve_imports(
        extracted.import_paths, Path(project_root), read_text=read_text, resolve=resolve
    )
    if not context.strip():
        raise ValidationError(
            "Test file does not import a prompt under test",
            code="MISSING_CONTEXT",
            import_paths=extracted.import_paths,
        )

    if not extracted.requirements:
        raise ValidationError(
            "Test file does not contain any requirements",
            code="NO_REQUIREMENTS_FOUND",
        )

    requirements = tuple(
        Requirement(id=item.id, requirement=item.requirement) for item in extracted.requirements
    )
    logger.info(
        f"Extracted {len(requirements)} requirement(s) from "
        f"{len(extracted.import_paths)} import(s)"
    )
    return TestSpecification(
        subject_prompt=extracted.subject_prompt,
        context=context,
        requirements=requirements,
    )
