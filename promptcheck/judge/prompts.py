"""Instruction templates for the extraction, subject and judge agents.

Extraction returns structured data only, never an executable prompt. The
subject and judge instructions are built from that data by the templates
below, so their wording and response format stay under our control.
"""

from __future__ import annotations

from promptcheck.core.models import TestSpecification, Verdict
from promptcheck.judge.diagnostic import format_diagnostic_block

_JUDGE_EXAMPLE = format_diagnostic_block(
    Verdict(
        passed=True,
        actual="summary of what was produced",
        expected="what was expected",
        score=85,
    )
)


def build_extraction_prompt(test_content: str) -> str:
    """Build the instruction that turns a test file into structured data.

    Args:
        test_content: Raw contents of the test file.

    Returns:
        Extraction instruction embedding the file between boundary markers.

    """
    return f"""You are a test extraction agent. Analyze the following test file and extract structured information.

Requirements may be written as "Given X, should Y", bullet points, YAML entries,
natural language sentences or any other format. For the test file:

1. Identify the subject prompt (the prompt to be tested)
2. Identify every import file path (e.g., import 'path/to/file.mdc')
3. Extract each requirement the output of the subject prompt must satisfy

Return a JSON object with:
- "subjectPrompt": the prompt to execute (string)
- "importPaths": array of import file paths found in the test file (e.g., ["ai/rules/ui.mdc"])
- "requirements": array of objects, each with:
  - "id": sequential integer starting at 1
  - "requirement": the full requirement text

Return ONLY valid JSON. No markdown fences, no explanation.

<test-file-contents>
{test_content}
</test-file-contents>"""


def build_subject_prompt(spec: TestSpecification) -> str:
    """Build the instruction that executes the subject prompt once."""
    return f"""You are an AI assistant. Execute the following prompt and return your response.

CONTEXT (Prompt Under Test):
{spec.context}

USER PROMPT:
{spec.subject_prompt}

INSTRUCTIONS:
1. Execute the user prompt above, following the guidance in the prompt under test
2. Return your complete response as plain text

Respond naturally. Do NOT wrap your response in JSON, markdown fences, or any other structure.
Your entire output IS the result."""


def build_judge_prompt(spec: TestSpecification, run_output: str, requirement: str) -> str:
    """Build the instruction that judges one run against one requirement.

    Args:
        spec: Test specification the run was produced from.
        run_output: Raw text produced by the subject run.
        requirement: The single requirement to evaluate.

    Returns:
        Judge instruction asking for exactly one diagnostic block.

    """
    return f"""You are an AI judge. Evaluate whether a given result satisfies a specific requirement.

CONTEXT (Prompt Under Test):
{spec.context}

ORIGINAL USER PROMPT:
{spec.subject_prompt}

ACTUAL RESULT TO EVALUATE:
{run_output}

REQUIREMENT:
{requirement}

INSTRUCTIONS:
1. Read the actual result above
2. Determine whether it satisfies the requirement
3. Summarize what was actually produced (actual) vs what was expected (expected)
4. Assign a quality score from 0 (completely fails) to 100 (perfectly satisfies)

Return your judgment as a diagnostic block:
{_JUDGE_EXAMPLE}

CRITICAL: Return ONLY the diagnostic block. Start with --- on its own line,
end with --- on its own line. No markdown fences, no explanation outside the block."""
