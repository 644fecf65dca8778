"""
Tests for models module.

Tests data structures including:
- Score rounding and status classification
- Incremental statistics
- Bank dictionary parsing and wire-format rendering
- Configuration validation
"""

import pytest
from pathlib import Path

# Add parent directory to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from codejudge.models import (
    JudgeConfig,
    Question,
    QuestionStats,
    SubmissionResult,
    Summary,
    TestCase,
    TestCaseOutcome,
    round_half_up,
)


def _outcomes(*passed, time_ms=10):
    return [
        TestCaseOutcome(test_case=i, input="1", expected_output="1",
                        actual_output="1" if p else "0", passed=p, execution_time_ms=time_ms)
        for i, p in enumerate(passed, start=1)
    ]


class TestRounding:
    """Test half-up rounding of percentages."""

    @pytest.mark.parametrize("numerator,denominator,expected", [
        (100, 8, 13),     # 12.5 rounds up
        (200, 3, 67),
        (100, 3, 33),
        (0, 5, 0),
        (500, 5, 100),
        (5, 2, 3),
    ])
    def test_round_half_up(self, numerator, denominator, expected):
        assert round_half_up(numerator, denominator) == expected


class TestSummary:
    """Test score and status aggregation."""

    def test_all_passed(self):
        summary = Summary.from_outcomes(_outcomes(True, True))

        assert summary.score == 100
        assert summary.status == "correct"
        assert summary.failed_tests == 0

    def test_none_passed(self):
        summary = Summary.from_outcomes(_outcomes(False, False, False))

        assert summary.score == 0
        assert summary.status == "incorrect"
        assert summary.failed_tests == 3

    def test_partial(self):
        summary = Summary.from_outcomes(_outcomes(True, False, False))

        assert summary.score == 33
        assert summary.status == "partial"

    def test_one_of_eight_rounds_half_up(self):
        summary = Summary.from_outcomes(_outcomes(True, *([False] * 7)))

        assert summary.score == 13
        assert summary.status == "partial"

    def test_timing(self):
        outcomes = _outcomes(True, True, True)
        outcomes[0].execution_time_ms = 5
        outcomes[1].execution_time_ms = 6
        outcomes[2].execution_time_ms = 6

        summary = Summary.from_outcomes(outcomes)

        assert summary.total_execution_time_ms == 17
        assert summary.average_execution_time_ms == 6

    def test_wire_keys(self):
        data = Summary.from_outcomes(_outcomes(True)).to_dict()

        assert set(data) == {
            "totalTests", "passedTests", "failedTests", "score", "status",
            "totalExecutionTimeMs", "averageExecutionTimeMs",
        }


class TestQuestionStats:
    """Test the incremental running statistics."""

    def test_first_attempt(self):
        stats = QuestionStats()
        stats.record(True, 120)

        assert stats.total_attempts == 1
        assert stats.correct_attempts == 1
        assert stats.average_time == 120
        assert stats.success_rate == 100

    def test_incremental_mean(self):
        stats = QuestionStats()
        for correct, time_ms in [(True, 100), (False, 200), (False, 600)]:
            stats.record(correct, time_ms)

        assert stats.total_attempts == 3
        assert stats.correct_attempts == 1
        assert stats.average_time == pytest.approx(300.0)
        assert stats.success_rate == pytest.approx(100 / 3)

    def test_round_trip_dict(self):
        stats = QuestionStats(total_attempts=4, correct_attempts=1, average_time=12.5, success_rate=25.0)

        assert QuestionStats.from_dict(stats.to_dict()) == stats


class TestQuestionFromDict:
    """Test parsing of bank entries."""

    def test_full_entry(self):
        question = Question.from_dict({
            "id": "two-sum",
            "title": "Two Sum",
            "questionText": "Find two numbers",
            "category": "Arrays",
            "difficulty": "Easy",
            "testCases": [{"input": "[2,7,11,15], 9", "expectedOutput": "[0,1]", "description": "basic"}],
            "time_limit_ms": 2000,
            "memory_limit_mb": 64,
            "tags": ["array"],
        })

        assert question.id == "two-sum"
        assert question.test_cases == [TestCase("[2,7,11,15], 9", "[0,1]", "basic")]
        assert question.time_limit_ms == 2000
        assert question.memory_limit_mb == 64
        assert question.tags == ["array"]
        assert question.stats.total_attempts == 0

    def test_defaults(self):
        question = Question.from_dict({"id": 7, "title": "T", "testCases": []})

        assert question.id == "7"
        assert question.time_limit_ms is None
        assert question.memory_limit_mb is None
        assert question.points == 10
        assert question.test_cases == []

    def test_legacy_output_key(self):
        test_case = TestCase.from_dict({"input": "\"()\"", "output": "true"})

        assert test_case.expected_output == "true"
        assert test_case.description is None

    def test_non_string_expected_output(self):
        test_case = TestCase.from_dict({"input": "1, 2", "expectedOutput": 3})

        assert test_case.expected_output == "3"


class TestSubmissionResult:
    """Test rendering of the grading response."""

    def test_to_dict(self):
        outcomes = _outcomes(True, False)
        outcomes[1].actual_output = None
        outcomes[1].error = "boom"
        result = SubmissionResult(results=outcomes, summary=Summary.from_outcomes(outcomes), message="m")

        data = result.to_dict()

        assert data["message"] == "m"
        assert data["results"][0] == {
            "testCase": 1, "input": "1", "expectedOutput": "1", "actualOutput": "1",
            "passed": True, "executionTimeMs": 10,
        }
        assert data["results"][1]["error"] == "boom"
        assert data["results"][1]["actualOutput"] is None
        assert data["summary"]["status"] == "partial"
        assert result.all_passed is False


class TestJudgeConfig:
    """Test configuration defaults and validation."""

    def test_default_is_valid(self):
        assert JudgeConfig.default().validate() == (True, "")

    def test_from_dict_overrides(self):
        config = JudgeConfig.from_dict({"port": 9000, "log_level": "debug", "node_path": "/usr/bin/node"})

        assert config.port == 9000
        assert config.log_level == "DEBUG"
        assert config.node_path == "/usr/bin/node"
        assert config.default_time_limit_ms == 5000

    @pytest.mark.parametrize("overrides,fragment", [
        ({"default_time_limit_ms": 0}, "default_time_limit_ms"),
        ({"default_memory_limit_mb": 8}, "default_memory_limit_mb"),
        ({"port": 70000}, "port"),
        ({"log_level": "LOUD"}, "log level"),
    ])
    def test_invalid_values(self, overrides, fragment):
        is_valid, message = JudgeConfig.from_dict(overrides).validate()

        assert not is_valid
        assert fragment in message
