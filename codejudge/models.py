"""
Data models for questions, grading results and service configuration.

Provides type-safe structures for Question, TestCase and the per-request
SubmissionResult, plus the JudgeConfig read from config.json.
"""

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any


CATEGORIES = [
    "Arrays", "Strings", "Linked Lists", "Trees", "Graphs", "Dynamic Programming",
    "Greedy", "Backtracking", "Math", "System Design", "Behavioral", "Other",
]
DIFFICULTIES = ["Easy", "Medium", "Hard"]

DEFAULT_TIME_LIMIT_MS = 5000
DEFAULT_MEMORY_LIMIT_MB = 128

STATUS_CORRECT = "correct"
STATUS_PARTIAL = "partial"
STATUS_INCORRECT = "incorrect"


def round_half_up(numerator: int, denominator: int) -> int:
    """Round numerator/denominator to the nearest integer, halves away from zero."""
    return (2 * numerator + denominator) // (2 * denominator)


@dataclass
class TestCase:
    """An (input, expected output) pair used to grade a submission."""
    __test__ = False

    input: str
    expected_output: str
    description: Optional[str] = None

    @staticmethod
    def from_dict(data: dict) -> 'TestCase':
        """Create a TestCase from a bank entry, accepting the legacy 'output' key."""
        expected = data.get('expectedOutput')
        if expected is None:
            expected = data.get('expected_output')
        if expected is None:
            expected = data.get('output')
        return TestCase(
            input=str(data['input']),
            expected_output="" if expected is None else str(expected),
            description=data.get('description'),
        )

    def to_dict(self) -> dict:
        data = {"input": self.input, "expectedOutput": self.expected_output}
        if self.description is not None:
            data["description"] = self.description
        return data


@dataclass
class QuestionStats:
    """Running aggregate statistics for a question."""
    total_attempts: int = 0
    correct_attempts: int = 0
    average_time: float = 0.0
    success_rate: float = 0.0

    def record(self, correct: bool, time_ms: int) -> None:
        """Fold one graded attempt into the aggregates using the incremental mean."""
        self.total_attempts += 1
        if correct:
            self.correct_attempts += 1
        n = self.total_attempts
        self.average_time = (self.average_time * (n - 1) + time_ms) / n
        self.success_rate = self.correct_attempts / n * 100

    @staticmethod
    def from_dict(data: dict) -> 'QuestionStats':
        return QuestionStats(
            total_attempts=int(data.get('totalAttempts', 0)),
            correct_attempts=int(data.get('correctAttempts', 0)),
            average_time=float(data.get('averageTime', 0.0)),
            success_rate=float(data.get('successRate', 0.0)),
        )

    def to_dict(self) -> dict:
        return {
            "totalAttempts": self.total_attempts,
            "correctAttempts": self.correct_attempts,
            "averageTime": self.average_time,
            "successRate": self.success_rate,
        }


@dataclass
class Question:
    """Represents an interview question with its test cases and limits."""
    id: str
    title: str
    question_text: str
    category: str
    difficulty: str
    test_cases: List[TestCase]
    time_limit_ms: Optional[int] = None  # None: use the service default
    memory_limit_mb: Optional[int] = None
    constraints: str = ""
    hints: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    points: int = 10
    stats: QuestionStats = field(default_factory=QuestionStats)

    @staticmethod
    def from_dict(data: dict) -> 'Question':
        """Create a Question object from a bank dictionary."""
        stats = QuestionStats()
        if data.get('stats'):
            stats = QuestionStats.from_dict(data['stats'])

        return Question(
            id=str(data['id']),
            title=data['title'],
            question_text=data.get('questionText') or data.get('question_text', ''),
            category=data.get('category', 'Other'),
            difficulty=data.get('difficulty', 'Easy'),
            test_cases=[TestCase.from_dict(tc) for tc in data.get('testCases') or data.get('test_cases') or []],
            time_limit_ms=int(data['time_limit_ms']) if data.get('time_limit_ms') else None,
            memory_limit_mb=int(data['memory_limit_mb']) if data.get('memory_limit_mb') else None,
            constraints=data.get('constraints', ''),
            hints=list(data.get('hints') or []),
            tags=list(data.get('tags') or []),
            points=int(data.get('points', 10)),
            stats=stats,
        )


@dataclass
class TestCaseOutcome:
    """Verdict for one test case of a grading request."""
    __test__ = False

    test_case: int  # 1-based position in the question's test case list
    input: str
    expected_output: str
    actual_output: Optional[str]
    passed: bool
    execution_time_ms: int
    error: Optional[str] = None
    description: Optional[str] = None

    def to_dict(self) -> dict:
        data: Dict[str, Any] = {
            "testCase": self.test_case,
            "input": self.input,
            "expectedOutput": self.expected_output,
            "actualOutput": self.actual_output,
            "passed": self.passed,
            "executionTimeMs": self.execution_time_ms,
        }
        if self.error is not None:
            data["error"] = self.error
        if self.description is not None:
            data["description"] = self.description
        return data


@dataclass
class Summary:
    """Aggregate pass/fail counts, score and status for a grading request."""
    total_tests: int
    passed_tests: int
    failed_tests: int
    score: int
    status: str
    total_execution_time_ms: int
    average_execution_time_ms: int

    @staticmethod
    def from_outcomes(outcomes: List[TestCaseOutcome]) -> 'Summary':
        """
        Compute the summary for a non-empty list of outcomes.

        score is the passed percentage rounded half-up; status is "correct"
        at 100, "incorrect" when nothing passed and "partial" otherwise.
        """
        total = len(outcomes)
        passed = sum(1 for o in outcomes if o.passed)
        total_time = sum(o.execution_time_ms for o in outcomes)
        score = round_half_up(passed * 100, total)

        if score == 100:
            status = STATUS_CORRECT
        elif passed == 0:
            status = STATUS_INCORRECT
        else:
            status = STATUS_PARTIAL

        return Summary(
            total_tests=total,
            passed_tests=passed,
            failed_tests=total - passed,
            score=score,
            status=status,
            total_execution_time_ms=total_time,
            average_execution_time_ms=round_half_up(total_time, total),
        )

    def to_dict(self) -> dict:
        return {
            "totalTests": self.total_tests,
            "passedTests": self.passed_tests,
            "failedTests": self.failed_tests,
            "score": self.score,
            "status": self.status,
            "totalExecutionTimeMs": self.total_execution_time_ms,
            "averageExecutionTimeMs": self.average_execution_time_ms,
        }


@dataclass
class SubmissionResult:
    """Ephemeral result of one grading request."""
    results: List[TestCaseOutcome]
    summary: Summary
    message: str

    @property
    def all_passed(self) -> bool:
        return self.summary.passed_tests == self.summary.total_tests

    def to_dict(self) -> dict:
        return {
            "results": [r.to_dict() for r in self.results],
            "summary": self.summary.to_dict(),
            "message": self.message,
        }


@dataclass
class ValidationReport:
    """Outcome of static validation of submitted source text."""
    is_valid: bool
    errors: List[str]
    message: str

    def to_dict(self) -> dict:
        return {"isValid": self.is_valid, "errors": list(self.errors), "message": self.message}


@dataclass
class JudgeConfig:
    """
    Service configuration.

    Attributes:
        default_time_limit_ms: Timeout for questions that do not set one
        default_memory_limit_mb: Memory ceiling for questions that do not set one
        node_path: Explicit path to the node executable (None = search PATH)
        bank_path: Question bank file (.json or encrypted)
        stats_path: JSON file where running statistics are persisted
        host: Address the HTTP API binds to
        port: Port the HTTP API listens on
        log_path: Optional log file, in addition to stderr
        log_level: Root logging level name
    """
    default_time_limit_ms: int
    default_memory_limit_mb: int
    node_path: Optional[str]
    bank_path: Optional[str]
    stats_path: Optional[str]
    host: str
    port: int
    log_path: Optional[str]
    log_level: str

    @staticmethod
    def from_dict(data: dict) -> 'JudgeConfig':
        """Create JudgeConfig from dictionary."""
        return JudgeConfig(
            default_time_limit_ms=int(data.get('default_time_limit_ms', DEFAULT_TIME_LIMIT_MS)),
            default_memory_limit_mb=int(data.get('default_memory_limit_mb', DEFAULT_MEMORY_LIMIT_MB)),
            node_path=data.get('node_path'),
            bank_path=data.get('bank_path'),
            stats_path=data.get('stats_path'),
            host=data.get('host', '127.0.0.1'),
            port=int(data.get('port', 8000)),
            log_path=data.get('log_path'),
            log_level=str(data.get('log_level', 'INFO')).upper(),
        )

    def validate(self) -> tuple[bool, str]:
        """
        Validate configuration consistency.

        Returns:
            Tuple of (is_valid, error_message)
        """
        if self.default_time_limit_ms <= 0:
            return False, "default_time_limit_ms must be positive"

        if self.default_memory_limit_mb < 16:
            return False, "default_memory_limit_mb must be at least 16"

        if not (0 < self.port < 65536):
            return False, f"Invalid port: {self.port}"

        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            return False, f"Unknown log level: {self.log_level}"

        return True, ""

    @staticmethod
    def default() -> 'JudgeConfig':
        """Return the default configuration."""
        return JudgeConfig(
            default_time_limit_ms=DEFAULT_TIME_LIMIT_MS,
            default_memory_limit_mb=DEFAULT_MEMORY_LIMIT_MB,
            node_path=None,
            bank_path=None,
            stats_path=None,
            host='127.0.0.1',
            port=8000,
            log_path=None,
            log_level='INFO',
        )
