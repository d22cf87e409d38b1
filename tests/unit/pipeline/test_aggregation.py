"""Tests for verdict aggregation."""

import math

import pytest

from promptcheck.core.models import MediaAttachment, TestSpecification, Verdict
from promptcheck.errors import ValidationError
from promptcheck.pipeline.aggregation import (
    aggregate_requirement,
    aggregate_results,
    average_score,
    calculate_required_passes,
)


class TestCalculateRequiredPasses:
    """Tests for calculate_required_passes."""

    @pytest.mark.parametrize(
        ("runs", "threshold", "expected"),
        [
            (4, 75, 3),
            (5, 75, 4),
            (10, 80, 8),
            (4, 0, 0),
            (4, 100, 4),
            (3, 50, 2),
            (1, 0.1, 1),
            (7, 33.3, 3),
        ],
    )
    def test_values(self, runs: int, threshold: float, expected: int) -> None:
        assert calculate_required_passes(runs, threshold) == expected

    def test_always_within_bounds(self) -> None:
        for runs in range(1, 21):
            for threshold in range(0, 101, 5):
                required = calculate_required_passes(runs, threshold)
                assert 0 <= required <= runs
                assert required == math.ceil(runs * threshold / 100)

    @pytest.mark.parametrize("runs", [0, -1, 2.5, True, "4", None])
    def test_invalid_runs(self, runs: object) -> None:
        with pytest.raises(ValidationError) as exc_info:
            calculate_required_passes(runs, 75)  # type: ignore[arg-type]
        assert exc_info.value.code == "INVALID_RUNS"

    @pytest.mark.parametrize("threshold", [-1, 100.5, math.nan, math.inf, "75", None, False])
    def test_invalid_threshold(self, threshold: object) -> None:
        with pytest.raises(ValidationError) as exc_info:
            calculate_required_passes(4, threshold)  # type: ignore[arg-type]
        assert exc_info.value.code == "INVALID_THRESHOLD"


class TestAverageScore:
    """Tests for average_score."""

    def test_rounded_to_two_decimals(self) -> None:
        verdicts = [Verdict(score=100), Verdict(score=50), Verdict(score=0)]
        assert average_score(verdicts) == 50.0
        assert average_score([Verdict(score=10), Verdict(score=20), Verdict(score=20)]) == 16.67

    def test_empty(self) -> None:
        assert average_score([]) == 0.0


class TestAggregateRequirement:
    """Tests for aggregate_requirement."""

    def test_passes_at_threshold(self) -> None:
        verdicts = [Verdict(passed=True, score=80)] * 3 + [Verdict(passed=False, score=20)]

        result = aggregate_requirement("be polite", verdicts, runs=4, threshold=75)

        assert result.passed is True
        assert result.pass_count == 3
        assert result.total_runs == 4
        assert result.average_score == 65.0
        assert result.run_results == tuple(verdicts)

    def test_fails_below_threshold(self) -> None:
        verdicts = [Verdict(passed=True, score=80)] * 2 + [Verdict(passed=False)] * 2
        result = aggregate_requirement("be polite", verdicts, runs=4, threshold=75)
        assert result.passed is False

    def test_media_attached(self) -> None:
        media = [MediaAttachment(path="a.png", caption="A")]
        result = aggregate_requirement(
            "r", [Verdict(passed=True)], runs=1, threshold=50, media=media
        )
        assert result.media == tuple(media)


class TestAggregateResults:
    """Tests for aggregate_results."""

    def test_groups_verdicts_by_requirement(self, spec: TestSpecification) -> None:
        run_verdicts = [
            [Verdict(passed=True, score=90), Verdict(passed=False, score=10)],
            [Verdict(passed=True, score=70), Verdict(passed=True, score=60)],
        ]

        result = aggregate_results(spec, run_verdicts, runs=2, threshold=50)

        first, second = result.requirements
        assert first.requirement == spec.requirements[0].requirement
        assert first.pass_count == 2
        assert first.average_score == 80.0
        assert second.pass_count == 1
        assert second.average_score == 35.0
        assert result.passed is True

    def test_any_failing_requirement_fails_pipeline(self, spec: TestSpecification) -> None:
        run_verdicts = [[Verdict(passed=True), Verdict(passed=False)]] * 4

        result = aggregate_results(spec, run_verdicts, runs=4, threshold=75)

        assert result.passed is False
        assert [r.passed for r in result.requirements] == [True, False]

    def test_idempotent(self, spec: TestSpecification) -> None:
        run_verdicts = [
            [Verdict(passed=True, score=85), Verdict(passed=False, score=40)],
            [Verdict(passed=False, score=30), Verdict(passed=True, score=95)],
            [Verdict(passed=True, score=77), Verdict(passed=True, score=66)],
        ]

        first = aggregate_results(spec, run_verdicts, runs=3, threshold=60)
        second = aggregate_results(spec, run_verdicts, runs=3, threshold=60)

        assert first == second

    def test_media_keyed_by_requirement_id(self, spec: TestSpecification) -> None:
        media = {2: [MediaAttachment(path="brief.png")]}
        result = aggregate_results(
            spec, [[Verdict(), Verdict()]], runs=1, threshold=0, media=media
        )
        assert result.requirements[0].media == ()
        assert result.requirements[1].media[0].path == "brief.png"

    def test_verdict_count_mismatch(self, spec: TestSpecification) -> None:
        with pytest.raises(ValidationError) as exc_info:
            aggregate_results(spec, [[Verdict()]], runs=1, threshold=50)
        assert exc_info.value.code == "VERDICT_COUNT_MISMATCH"

    def test_invalid_threshold(self, spec: TestSpecification) -> None:
        with pytest.raises(ValidationError):
            aggregate_results(spec, [[Verdict(), Verdict()]], runs=1, threshold=120)
